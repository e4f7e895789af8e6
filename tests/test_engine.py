"""Tests for engine.py - gate ordering, direct and role invocation."""

import sys
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

import pytest
from terrafirm.actions.terraform import ExecutionFailedError
from terrafirm.engine import Engine
from terrafirm.layout import (
    MissingConfigurationError,
    ProjectLayout,
    UnknownConfigurationError,
    UnknownEnvironmentError,
    WrongProjectRootError,
)


@pytest.fixture
def engine(project_dir, project_config):
    return Engine(config=project_config, layout=ProjectLayout(project_dir))


class TestEngineGates:
    """Every gate fails before any terraform invocation."""

    def test_wrong_project_root(self, project_dir, project_config, tool_calls):
        project_config.project_name = 'elsewhere'
        engine = Engine(config=project_config, layout=ProjectLayout(project_dir))
        with patch('terrafirm.actions.terraform.run_command', side_effect=tool_calls):
            with pytest.raises(WrongProjectRootError):
                engine.run('dev', 'vpc', 'plan')
        assert tool_calls.calls == []

    @pytest.mark.parametrize('env', ['prod', 'qa', 'environments'])
    def test_unknown_environment(self, engine, tool_calls, env):
        with patch('terrafirm.actions.terraform.run_command', side_effect=tool_calls):
            with pytest.raises(UnknownEnvironmentError):
                engine.run(env, 'vpc', 'plan')
        assert tool_calls.calls == []

    def test_environment_checked_before_configuration(self, engine, tool_calls):
        with patch('terrafirm.actions.terraform.run_command', side_effect=tool_calls):
            with pytest.raises(UnknownEnvironmentError):
                engine.run('prod', 'nope', 'plan')

    def test_missing_configuration(self, engine, tool_calls):
        with patch('terrafirm.actions.terraform.run_command', side_effect=tool_calls):
            with pytest.raises(MissingConfigurationError):
                engine.run('dev', '', 'plan')
        assert tool_calls.calls == []

    def test_unknown_configuration_before_var_resolution(self, engine, tool_calls):
        with patch('terrafirm.actions.terraform.run_command', side_effect=tool_calls), \
             patch('terrafirm.actions.terraform.resolve_var_files') as mock_resolve:
            with pytest.raises(UnknownConfigurationError):
                engine.run('dev', 'dns', 'plan')
        mock_resolve.assert_not_called()
        assert tool_calls.calls == []


class TestEngineRun:

    def test_direct_invocation(self, engine, tool_calls):
        """dev has no tfvars: only common.tfvars is passed."""
        with patch('terrafirm.actions.terraform.run_command', side_effect=tool_calls):
            results = engine.run('dev', 'vpc', 'plan')

        assert len(results) == 1
        assert results[0].config_name == 'vpc'
        assert tool_calls.subcommands() == ['init', 'validate', 'plan']
        _, validate_cmd = tool_calls.calls[1]
        assert [a for a in validate_cmd if a.startswith('-var-file=')] == [
            f"-var-file={engine.layout.config_dir('vpc') / '..' / '..' / 'variables' / 'common.tfvars'}"
        ]

    def test_dev_without_any_var_files(self, engine, project_dir, tool_calls):
        (project_dir / 'variables' / 'common.tfvars').unlink()
        with patch('terrafirm.actions.terraform.run_command', side_effect=tool_calls):
            results = engine.run('dev', 'vpc', 'plan')

        assert results[0].success is True
        for _, cmd in tool_calls.calls:
            assert not any(a.startswith('-var-file') for a in cmd)

    def test_extra_args_forwarded(self, engine, tool_calls):
        with patch('terrafirm.actions.terraform.run_command', side_effect=tool_calls):
            engine.run('dev', 'vpc', 'apply', ['-auto-approve', '-lock=false'])
        _, apply_cmd = tool_calls.calls[2]
        assert apply_cmd[-2:] == ['-auto-approve', '-lock=false']

    def test_init_opts_from_config(self, engine, tool_calls):
        with patch('terrafirm.actions.terraform.run_command', side_effect=tool_calls):
            engine.run('dev', 'vpc', 'plan')
        _, init_cmd = tool_calls.calls[0]
        assert init_cmd[-1] == '-backend-config=bucket=infra-state'

    def test_role_invocation(self, engine, project_dir, tool_calls):
        (project_dir / 'configs' / 'app' / 'default.tfrole').write_text('vpc\na\n')
        with patch('terrafirm.actions.terraform.run_command', side_effect=tool_calls):
            results = engine.run('dev', 'app', 'plan')

        assert [r.config_name for r in results] == ['vpc', 'a']
        assert 'app' not in tool_calls.configs()

    def test_env_role_preferred(self, engine, project_dir, tool_calls):
        app = project_dir / 'configs' / 'app'
        (app / 'default.tfrole').write_text('a\n')
        (app / 'staging.tfrole').write_text('b\nc\n')
        with patch('terrafirm.actions.terraform.run_command', side_effect=tool_calls):
            engine.run('staging', 'app', 'plan')
        assert tool_calls.configs() == ['b', 'c']

    def test_role_failure_propagates(self, engine, project_dir, tool_calls):
        (project_dir / 'configs' / 'app' / 'default.tfrole').write_text('a\nb\nc')
        tool_calls.codes[('b', 'plan')] = 1
        with patch('terrafirm.actions.terraform.run_command', side_effect=tool_calls):
            with pytest.raises(ExecutionFailedError):
                engine.run('dev', 'app', 'plan')
        assert tool_calls.configs() == ['a', 'b']

    def test_strict_exit_codes_from_config(self, engine, tool_calls):
        engine.config.strict_exit_codes = True
        tool_calls.codes[('vpc', 'plan')] = 2
        with patch('terrafirm.actions.terraform.run_command', side_effect=tool_calls):
            with pytest.raises(ExecutionFailedError):
                engine.run('dev', 'vpc', 'plan')
