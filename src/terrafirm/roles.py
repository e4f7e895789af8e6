"""Role files: run several configurations under one environment.

A configuration directory may hold <env>.tfrole or default.tfrole. Each
non-empty line names a sibling configuration; they run in file order and
the first failure ends the role run.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from terrafirm.actions.terraform import TerraformCycleAction
from terrafirm.common import InvocationResult
from terrafirm.layout import UnknownConfigurationError

logger = logging.getLogger(__name__)

ROLE_SUFFIX = '.tfrole'
DEFAULT_ROLE = 'default'


def find_role_file(config_dir: Path, env: str) -> Optional[Path]:
    """Return the environment role file, else the default one, else None."""
    for stem in (env, DEFAULT_ROLE):
        candidate = config_dir / f'{stem}{ROLE_SUFFIX}'
        if candidate.is_file():
            return candidate
    return None


def read_role_file(path: Path) -> list[str]:
    """Configuration names listed in a role file, in declaration order."""
    with open(path, encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


@dataclass
class RoleRunner:
    """Apply one action to every configuration listed in a role file."""
    action: TerraformCycleAction
    env_name: str

    def run(self, role_file: Path, config_dir: Path) -> list[InvocationResult]:
        """Run each listed sibling of config_dir in order. Errors propagate."""
        names = read_role_file(role_file)
        logger.info(f"Role {role_file.name}: {', '.join(names) if names else '(empty)'}")

        results = []
        for name in names:
            target = config_dir.parent / name
            if not target.is_dir():
                raise UnknownConfigurationError(
                    f"Role {role_file} lists unknown configuration '{name}'"
                )
            logger.info(f"Running role entry: {name}")
            results.append(self.action.run(target, self.env_name))
        return results
