"""Project directory conventions and the checks that gate every run.

Expected layout under the project root:

    configs/<configuration>/          one deployable unit each
    modules/                          shared modules
    variables/common.tfvars           optional, applied first
    variables/environments/<env>/     per-environment *.tfvars
"""

from dataclasses import dataclass
from pathlib import Path

from terrafirm.common import TerrafirmError


class WrongProjectRootError(TerrafirmError):
    """Working directory is not the configured project root."""


class UnknownEnvironmentError(TerrafirmError):
    """No variables/environments/<env> directory."""


class MissingConfigurationError(TerrafirmError):
    """Configuration argument is empty."""


class UnknownConfigurationError(TerrafirmError):
    """No configs/<configuration> directory."""


@dataclass(frozen=True)
class ProjectLayout:
    """Paths derived from a project root."""
    root: Path

    @property
    def configs_dir(self) -> Path:
        return self.root / 'configs'

    @property
    def modules_dir(self) -> Path:
        return self.root / 'modules'

    @property
    def variables_dir(self) -> Path:
        return self.root / 'variables'

    @property
    def environments_dir(self) -> Path:
        return self.variables_dir / 'environments'

    def config_dir(self, name: str) -> Path:
        return self.configs_dir / name

    def env_dir(self, name: str) -> Path:
        return self.environments_dir / name


def _list_dirs(path: Path) -> list[str]:
    if not path.is_dir():
        return []
    return sorted(p.name for p in path.iterdir() if p.is_dir())


def list_environments(layout: ProjectLayout) -> list[str]:
    """List environment names under variables/environments/."""
    return _list_dirs(layout.environments_dir)


def list_configurations(layout: ProjectLayout) -> list[str]:
    """List configuration names under configs/."""
    return _list_dirs(layout.configs_dir)


def validate_project_root(layout: ProjectLayout, project_name: str) -> None:
    """Fail unless the root directory is named after the project."""
    if layout.root.name != project_name:
        raise WrongProjectRootError(
            f"Must be run from the '{project_name}' project root "
            f"(current directory: {layout.root})"
        )


def validate_environment(layout: ProjectLayout, env: str) -> None:
    """Fail unless variables/environments/<env> is a directory."""
    if not env or not layout.env_dir(env).is_dir():
        available = list_environments(layout)
        raise UnknownEnvironmentError(
            f"Unknown environment '{env}'\n"
            f"  Available: {', '.join(available) if available else 'none configured'}"
        )


def validate_configuration(layout: ProjectLayout, name: str) -> None:
    """Fail unless a configuration was given and configs/<name> is a directory."""
    if not name:
        raise MissingConfigurationError("No configuration specified")
    if not layout.config_dir(name).is_dir():
        available = list_configurations(layout)
        raise UnknownConfigurationError(
            f"Unknown configuration '{name}'\n"
            f"  Available: {', '.join(available) if available else 'none configured'}"
        )
