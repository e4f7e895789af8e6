"""Project and module scaffolding.

Both generators only create what is missing; existing files are never
overwritten, so they can be re-run safely.
"""

import logging
from pathlib import Path

import requests

from terrafirm.config import CONFIG_FILENAME, DEFAULT_LICENSE_URL
from terrafirm.varfiles import COMMON_VAR_FILE

logger = logging.getLogger(__name__)

STRUCTURE_DIRS = ['configs', 'modules', 'variables/environments']
MODULE_FILES = ['main.tf', 'variables.tf', 'outputs.tf', 'README.md']
LICENSE_FILE = 'LICENSE'

CONFIG_TEMPLATE = """\
# terrafirm project configuration
project_name: {project_name}
# Extra options appended to every `terraform init`, e.g. -backend-config=bucket=my-state
init_opts: []
"""


def _touch(path: Path, content: str = '') -> bool:
    """Create path with content unless it exists. Returns True if created."""
    if path.exists():
        logger.debug(f"Exists, leaving alone: {path}")
        return False
    path.write_text(content, encoding="utf-8")
    logger.info(f"Created {path}")
    return True


def generate_structure(root: Path) -> None:
    """Create the standard project directories and starter files."""
    for rel in STRUCTURE_DIRS:
        (root / rel).mkdir(parents=True, exist_ok=True)
    _touch(root / 'variables' / COMMON_VAR_FILE)
    _touch(root / CONFIG_FILENAME, CONFIG_TEMPLATE.format(project_name=root.resolve().name))


def fetch_license(url: str, dest: Path, timeout: int = 30) -> bool:
    """Download license text to dest. Returns False (and logs) on failure."""
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.warning(f"Could not fetch license from {url}: {e}")
        return False
    dest.write_text(resp.text, encoding="utf-8")
    logger.info(f"Fetched {dest.name} from {url}")
    return True


def generate_module(path: Path, license_url: str = DEFAULT_LICENSE_URL) -> None:
    """Create a module directory with empty skeleton files and a license."""
    path.mkdir(parents=True, exist_ok=True)
    for name in MODULE_FILES:
        _touch(path / name)
    license_path = path / LICENSE_FILE
    if not license_path.exists():
        fetch_license(license_url, license_path)
