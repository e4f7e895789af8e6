"""Variable file resolution.

For a configuration at <root>/configs/<name>, the files passed to terraform are:
1. <config_dir>/../../variables/common.tfvars (if present)
2. <config_dir>/../../variables/environments/<env>/*.tfvars

Later files override earlier ones, so common values are listed first.
Environment files are sorted by name so precedence is reproducible.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

VAR_FILE_SUFFIX = '.tfvars'
COMMON_VAR_FILE = 'common.tfvars'


def _variables_dir(config_dir: Path) -> Path:
    return config_dir / '..' / '..' / 'variables'


def resolve_var_files(env: str, config_dir: Path) -> list[Path]:
    """Return ordered variable files for env, relative to config_dir.

    No de-duplication: a path matched twice is returned twice.
    """
    variables_dir = _variables_dir(config_dir)
    files = []

    common = variables_dir / COMMON_VAR_FILE
    if common.is_file():
        files.append(common)

    env_dir = variables_dir / 'environments' / env
    if env_dir.is_dir():
        matches = [p for p in env_dir.glob(f'*{VAR_FILE_SUFFIX}') if not p.name.startswith('.')]
        files.extend(sorted(matches, key=lambda p: p.name))

    logger.debug(f"Resolved {len(files)} var file(s) for {env}: {[str(f) for f in files]}")
    return files


def var_file_args(files: list[Path]) -> list[str]:
    """Render -var-file flags for terraform."""
    return [f'-var-file={f}' for f in files]
