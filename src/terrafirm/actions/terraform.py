"""Terraform validate+execute cycle for a single configuration."""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from terrafirm.common import InvocationResult, TerrafirmError, run_command
from terrafirm.varfiles import resolve_var_files, var_file_args

logger = logging.getLogger(__name__)

INIT_FLAGS = ['-input=false', '-get=true', '-backend=true']
LOCAL_STATE_SNAPSHOT = Path('.terraform') / 'terraform.tfstate'
FAILURE_STATUS = 1


class ValidationFailedError(TerrafirmError):
    """terraform validate reported failure."""


class ExecutionFailedError(TerrafirmError):
    """The requested terraform command reported failure."""


def backend_key(env_name: str, config_name: str) -> str:
    """Remote state key, namespaced by environment and configuration."""
    return f'{env_name}/{config_name}/terrafirm.tfstate'


@dataclass
class TerraformCycleAction:
    """Run init, validate and <command> for one configuration.

    Only an exit status of exactly 1 from validate or the command counts as
    failure unless strict_exit_codes is set, in which case any non-zero
    status does. The init exit status is logged but never gates the cycle.
    """
    name: str
    command: str  # e.g. "plan", "apply", "destroy"
    extra_args: list[str] = field(default_factory=list)  # CLI tail, passed through as given
    terraform_bin: str = 'terraform'
    init_opts: list[str] = field(default_factory=list)
    strict_exit_codes: bool = False

    def _failed(self, rc: int) -> bool:
        if self.strict_exit_codes:
            return rc != 0
        return rc == FAILURE_STATUS

    def run(self, config_dir: Path, env_name: str) -> InvocationResult:
        """Execute the full cycle in config_dir."""
        start = time.time()
        config_name = config_dir.name

        # Drop the local state snapshot so init picks up the resolved backend
        snapshot = config_dir / LOCAL_STATE_SNAPSHOT
        if snapshot.exists():
            snapshot.unlink()
            logger.debug(f"[{self.name}] Removed {snapshot}")

        var_args = var_file_args(resolve_var_files(env_name, config_dir))

        logger.info(f"[{self.name}] Running {self.terraform_bin} init for {config_name} ({env_name})...")
        cmd = [self.terraform_bin, 'init', *INIT_FLAGS,
               f'-backend-config=key={backend_key(env_name, config_name)}', *self.init_opts]
        rc, _, _ = run_command(cmd, cwd=config_dir)
        if rc != 0:
            logger.warning(f"[{self.name}] init exited with status {rc}, continuing")

        logger.info(f"[{self.name}] Running {self.terraform_bin} validate...")
        rc, _, err = run_command([self.terraform_bin, 'validate', *var_args], cwd=config_dir)
        if self._failed(rc):
            raise ValidationFailedError(
                f"Validation failed for configuration '{config_name}' in environment '{env_name}'"
                + (f": {err.strip()}" if err.strip() else '')
            )

        logger.info(f"[{self.name}] Running {self.terraform_bin} {self.command}...")
        cmd = [self.terraform_bin, self.command, *var_args, *self.extra_args]
        rc, _, err = run_command(cmd, cwd=config_dir)
        if self._failed(rc):
            raise ExecutionFailedError(
                f"{self.command} failed for configuration '{config_name}' in environment '{env_name}'"
                + (f": {err.strip()}" if err.strip() else '')
            )

        message = f"Terrafirm {self.command} completed for {config_name} in {env_name}"
        print(message)
        return InvocationResult(
            config_name=config_name,
            env_name=env_name,
            success=True,
            message=message,
            duration=time.time() - start
        )
