"""Top-level run controller.

Gate checks run in order (project root, environment, configuration) before
anything touches terraform. A role file in the configuration directory fans
the run out to the listed configurations; otherwise the configuration itself
is invoked.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from terrafirm.actions.terraform import TerraformCycleAction
from terrafirm.common import InvocationResult
from terrafirm.config import TerrafirmConfig
from terrafirm.layout import (
    ProjectLayout,
    validate_configuration,
    validate_environment,
    validate_project_root,
)
from terrafirm.roles import RoleRunner, find_role_file

logger = logging.getLogger(__name__)


@dataclass
class Engine:
    """Validates a run request and drives the terraform cycles."""
    config: TerrafirmConfig
    layout: ProjectLayout

    def run(
        self,
        env: str,
        config_name: str,
        command: str,
        extra_args: Optional[list[str]] = None
    ) -> list[InvocationResult]:
        """Run command for config_name (or its role) in env.

        Raises a TerrafirmError subclass on the first failure.
        """
        validate_project_root(self.layout, self.config.project_name)
        validate_environment(self.layout, env)
        validate_configuration(self.layout, config_name)

        config_dir = self.layout.config_dir(config_name)
        action = TerraformCycleAction(
            name=config_name,
            command=command,
            extra_args=list(extra_args or []),
            terraform_bin=self.config.terraform_bin,
            init_opts=self.config.init_opts,
            strict_exit_codes=self.config.strict_exit_codes,
        )

        start = time.time()
        role_file = find_role_file(config_dir, env)
        if role_file:
            logger.info(f"Using role file {role_file}")
            results = RoleRunner(action=action, env_name=env).run(role_file, config_dir)
        else:
            results = [action.run(config_dir, env)]

        logger.info(f"Completed {len(results)} configuration(s) in {time.time() - start:.1f}s")
        return results
