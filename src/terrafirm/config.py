"""Project configuration management.

Configuration is loaded once at startup from one of:
- terrafirm.yaml: YAML mapping (preferred)
- terrafirm_vars: legacy shell-style KEY=value file

Resolution order:
1. $TERRAFIRM_CONFIG environment variable
2. ./terrafirm.yaml in the working directory
3. ./terrafirm_vars in the working directory (legacy)
4. ~/.config/terrafirm/terrafirm.yaml

Recognised keys: project_name (required), init_opts, terraform_bin,
strict_exit_codes, license_url, log_level.
"""

import logging
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from terrafirm.common import TerrafirmError

DEFAULT_LICENSE_URL = 'https://www.apache.org/licenses/LICENSE-2.0.txt'

CONFIG_FILENAME = 'terrafirm.yaml'
LEGACY_CONFIG_FILENAME = 'terrafirm_vars'


class ConfigLoadError(TerrafirmError):
    """Project configuration missing or malformed."""


@dataclass
class TerrafirmConfig:
    """Typed project configuration passed into the engine."""
    project_name: str
    init_opts: list[str] = field(default_factory=list)
    terraform_bin: str = 'terraform'
    strict_exit_codes: bool = False  # any non-zero validate/execute status fails
    license_url: str = DEFAULT_LICENSE_URL
    log_level: str = 'INFO'
    config_file: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: dict, config_file: Optional[Path] = None) -> 'TerrafirmConfig':
        """Build config from a parsed mapping, validating types."""
        project_name = data.get('project_name')
        if not project_name or not isinstance(project_name, str):
            raise ConfigLoadError(f"project_name not set in {config_file}")

        init_opts = data.get('init_opts') or []
        if isinstance(init_opts, str):
            init_opts = shlex.split(init_opts)
        elif isinstance(init_opts, list):
            init_opts = [str(opt) for opt in init_opts]
        else:
            raise ConfigLoadError(f"init_opts must be a string or list in {config_file}")

        strict = data.get('strict_exit_codes', False)
        if isinstance(strict, str):
            strict = strict.strip().lower() in ('1', 'true', 'yes', 'on')

        log_level = os.environ.get('TERRAFIRM_LOG_LEVEL') or data.get('log_level') or 'INFO'
        log_level = str(log_level).upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigLoadError(f"Unknown log_level '{log_level}' in {config_file}")

        return cls(
            project_name=project_name,
            init_opts=init_opts,
            terraform_bin=str(data.get('terraform_bin') or 'terraform'),
            strict_exit_codes=bool(strict),
            license_url=str(data.get('license_url') or DEFAULT_LICENSE_URL),
            log_level=log_level,
            config_file=config_file,
        )


def _parse_yaml(path: Path) -> dict:
    """Parse a YAML file and return contents."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Expected a mapping at top level of {path}")
    return data


def _parse_shell_vars(path: Path) -> dict:
    """Parse a shell-style KEY=value file.

    Comments, blank lines and a leading 'export' are tolerated. Values are
    unquoted the way a shell would; no expansion is performed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(f"Cannot read {path}: {e}") from e

    result = {}
    for lineno, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        if line.startswith('export '):
            line = line[len('export '):].lstrip()
        if '=' not in line:
            raise ConfigLoadError(f"{path}:{lineno}: expected KEY=value, got '{line}'")
        key, value = line.split('=', 1)
        try:
            parts = shlex.split(value, comments=True)
        except ValueError as e:
            raise ConfigLoadError(f"{path}:{lineno}: {e}") from e
        result[key.strip()] = ' '.join(parts)
    return result


def find_config_file(cwd: Optional[Path] = None) -> Path:
    """Discover the project configuration file."""
    # 1. Environment variable (highest priority)
    if env_path := os.environ.get('TERRAFIRM_CONFIG'):
        path = Path(env_path)
        if path.is_file():
            return path
        raise ConfigLoadError(f"TERRAFIRM_CONFIG={env_path} does not exist")

    cwd = cwd or Path.cwd()

    # 2./3. Project root
    for name in (CONFIG_FILENAME, LEGACY_CONFIG_FILENAME):
        candidate = cwd / name
        if candidate.is_file():
            return candidate

    # 4. User config
    user_config = Path.home() / '.config' / 'terrafirm' / CONFIG_FILENAME
    if user_config.is_file():
        return user_config

    raise ConfigLoadError(
        f"No configuration found. Create {CONFIG_FILENAME} "
        "(run 'generate_structure') or set TERRAFIRM_CONFIG."
    )


def load_config(path: Optional[Path] = None, cwd: Optional[Path] = None) -> TerrafirmConfig:
    """Load project configuration from an explicit path or by discovery."""
    path = path or find_config_file(cwd)
    if not path.is_file():
        raise ConfigLoadError(f"Config file not found: {path}")

    if path.suffix in ('.yaml', '.yml'):
        data = _parse_yaml(path)
    else:
        data = _parse_shell_vars(path)
    return TerrafirmConfig.from_dict(data, config_file=path)
