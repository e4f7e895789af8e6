"""Best-effort variable skeleton extraction.

Scans module files for `var.<name>` references and appends a declaration
stub per match to variables.tf. This is a text scan, not an HCL parser:
duplicates are kept and anything that looks like a reference is emitted.
"""

import logging
import re
from pathlib import Path

from terrafirm.common import InsufficientArgumentsError

logger = logging.getLogger(__name__)

VAR_PATTERN = re.compile(r'var\.([A-Za-z_][A-Za-z0-9_-]*)')
OUTPUT_FILE = 'variables.tf'
EXCLUDED_FILES = {OUTPUT_FILE, 'LICENSE', 'README.md'}


def _source_files(module_dir: Path) -> list[Path]:
    return sorted(
        p for p in module_dir.iterdir()
        if p.is_file() and p.name not in EXCLUDED_FILES and not p.name.startswith('.')
    )


def find_variable_names(module_dir: Path) -> list[str]:
    """Variable names referenced in module_dir, in file then match order."""
    names = []
    for path in _source_files(module_dir):
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.debug(f"Skipping non-text file {path}")
            continue
        names.extend(VAR_PATTERN.findall(text))
    return names


def render_stub(name: str) -> str:
    return f'variable "{name}" {{}}\n'


def generate_variables(module_dir: Path) -> list[str]:
    """Append variable stubs for module_dir to its variables.tf."""
    if not module_dir.is_dir():
        raise InsufficientArgumentsError(f"Not a directory: {module_dir}")

    names = find_variable_names(module_dir)
    with open(module_dir / OUTPUT_FILE, 'a', encoding="utf-8") as f:
        for name in names:
            f.write(render_stub(name))
    logger.info(f"Appended {len(names)} variable stub(s) to {module_dir / OUTPUT_FILE}")
    return names
