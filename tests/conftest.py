"""Shared pytest fixtures for terrafirm tests."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


@pytest.fixture
def project_dir(tmp_path, monkeypatch):
    """Create a temporary project tree and chdir into it.

    Creates:
    - terrafirm.yaml (project_name: infra)
    - configs/{vpc,app,a,b,c}/
    - variables/common.tfvars
    - variables/environments/dev/ (no tfvars)
    - variables/environments/staging/{10-network,20-sizing}.tfvars
    """
    root = tmp_path / 'infra'
    for name in ['vpc', 'app', 'a', 'b', 'c']:
        (root / 'configs' / name).mkdir(parents=True)
    (root / 'modules').mkdir()

    (root / 'variables' / 'environments' / 'dev').mkdir(parents=True)
    staging = root / 'variables' / 'environments' / 'staging'
    staging.mkdir()
    (staging / '20-sizing.tfvars').write_text('instance_type = "t3.small"\n')
    (staging / '10-network.tfvars').write_text('cidr = "10.1.0.0/16"\n')
    (staging / 'notes.txt').write_text('not a var file\n')
    (root / 'variables' / 'common.tfvars').write_text('region = "eu-west-1"\n')

    (root / 'terrafirm.yaml').write_text("""
project_name: infra
init_opts:
  - -backend-config=bucket=infra-state
""")

    monkeypatch.chdir(root)
    monkeypatch.delenv('TERRAFIRM_CONFIG', raising=False)
    monkeypatch.delenv('TERRAFIRM_LOG_LEVEL', raising=False)
    return root


@pytest.fixture
def project_config():
    """TerrafirmConfig matching the project_dir fixture."""
    from terrafirm.config import TerrafirmConfig
    return TerrafirmConfig(project_name='infra', init_opts=['-backend-config=bucket=infra-state'])


@pytest.fixture
def tool_calls():
    """Recorder for run_command calls; returns rc 0 unless told otherwise.

    Set `tool_calls.codes` to a dict mapping (config_name, subcommand) to an
    exit status to simulate failures.
    """
    class Recorder:
        def __init__(self):
            self.calls = []
            self.codes = {}

        def __call__(self, cmd, cwd=None, **kwargs):
            self.calls.append((Path(cwd).name if cwd else None, cmd))
            rc = self.codes.get((Path(cwd).name if cwd else None, cmd[1]), 0)
            return rc, '', ''

        def subcommands(self, config_name=None):
            return [cmd[1] for name, cmd in self.calls
                    if config_name is None or name == config_name]

        def configs(self):
            seen = []
            for name, _ in self.calls:
                if name not in seen:
                    seen.append(name)
            return seen

    return Recorder()
