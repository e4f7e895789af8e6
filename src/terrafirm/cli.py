#!/usr/bin/env python3
"""CLI entry point for terrafirm.

Wrapper usage:
    terrafirm <environment> <configuration> <command> [extra-args...]

Helper actions (no environment/configuration checks):
    terrafirm generate_structure
    terrafirm generate_module <path>
    terrafirm generate_variables <path>
    terrafirm help
"""

import logging
import subprocess
import sys
from pathlib import Path
from typing import Optional

from terrafirm.common import InsufficientArgumentsError, TerrafirmError
from terrafirm.config import ConfigLoadError, DEFAULT_LICENSE_URL, load_config
from terrafirm.engine import Engine
from terrafirm.extract import OUTPUT_FILE, generate_variables
from terrafirm.layout import ProjectLayout
from terrafirm.scaffold import generate_module, generate_structure

# Helper actions recognised as the first argument
HELPER_ACTIONS = {
    "generate_structure": "Create configs/, modules/, variables/environments/ and starter files",
    "generate_module": "Create a module skeleton at <path> (with LICENSE)",
    "generate_variables": "Append variable stubs for var.* references under <path>",
    "help": "Show this help",
}

EXIT_USAGE = 2

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


def get_version():
    """Get version from git tags, falling back to 'dev'."""
    try:
        result = subprocess.run(
            ['git', 'describe', '--tags', '--abbrev=0'],
            capture_output=True, text=True,
            cwd=Path(__file__).parent,
            check=False,
        )
        return result.stdout.strip() if result.returncode == 0 else 'dev'
    except OSError:
        return 'dev'


def print_usage():
    """Print usage for wrapper and helper actions."""
    print(f"terrafirm {get_version()}")
    print()
    print("Usage: terrafirm <environment> <configuration> <command> [extra-args...]")
    print()
    print("Runs terraform init, validate and <command> (plan, apply, destroy, ...)")
    print("for configs/<configuration> with variables from variables/common.tfvars")
    print("and variables/environments/<environment>/*.tfvars. If the configuration")
    print("holds <environment>.tfrole or default.tfrole, each listed configuration")
    print("is run in order instead.")
    print()
    print("Helper actions:")
    for action, desc in HELPER_ACTIONS.items():
        print(f"  {action:<20} {desc}")
    print()
    print("Examples:")
    print("  terrafirm dev vpc plan")
    print("  terrafirm prod vpc apply -auto-approve")
    print("  terrafirm generate_module modules/network")


def _license_url() -> str:
    """License URL from project config when one is available."""
    try:
        return load_config().license_url
    except ConfigLoadError as e:
        logger.debug(f"Using default license URL: {e}")
        return DEFAULT_LICENSE_URL


def dispatch_helper(action: str, argv: list) -> int:
    """Run a helper action. Returns exit code."""
    if action == "help":
        print_usage()
        return EXIT_USAGE

    if action == "generate_structure":
        generate_structure(Path.cwd())
        return 0

    if not argv:
        raise InsufficientArgumentsError(f"'{action}' requires a <path> argument")
    path = Path(argv[0])

    if action == "generate_module":
        generate_module(path, license_url=_license_url())
        return 0

    # generate_variables
    names = generate_variables(path)
    print(f"Added {len(names)} variable stub(s) to {path / OUTPUT_FILE}")
    return 0


def run_wrapper(argv: list) -> int:
    """Validate arguments and run the engine. Returns exit code."""
    if len(argv) < 3:
        raise InsufficientArgumentsError("Expected <environment> <configuration> <command>")

    env, config_name, command = argv[:3]
    extra_args = argv[3:]

    config = load_config()
    logging.getLogger().setLevel(config.log_level)
    logger.debug(f"Loaded config from {config.config_file}")

    engine = Engine(config=config, layout=ProjectLayout(Path.cwd()))
    engine.run(env, config_name, command, extra_args)
    return 0


def main(argv: Optional[list] = None) -> int:
    """CLI entry point: helper actions first, otherwise the wrapper."""
    argv = sys.argv[1:] if argv is None else argv

    try:
        if argv and argv[0] in HELPER_ACTIONS:
            return dispatch_helper(argv[0], argv[1:])
        return run_wrapper(argv)
    except InsufficientArgumentsError as e:
        if argv:
            print(f"Error: {e}")
            print()
        print_usage()
        return e.exit_code
    except TerrafirmError as e:
        print(f"Error: {e}")
        return e.exit_code


if __name__ == '__main__':
    sys.exit(main())
