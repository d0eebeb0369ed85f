"""Tests for the helm-builder command line."""

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from helm_builder.cli import app
from helm_builder.errors import CommandError
from tests.helpers import failed

ENV = {"PLUGIN_ACTIONS": "lint,create", "PLUGIN_CHART_PATH": "charts/my-app"}


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def _no_log_sinks():
    """Keep loguru from binding to the runner's temporary streams."""
    with patch("helm_builder.cli.configure_logging") as configure:
        yield configure


class TestRunCommand:
    def test_runs_with_environment_configuration(self, runner: CliRunner) -> None:
        with patch("helm_builder.cli.execute") as execute:
            result = runner.invoke(app, ["run"], env=ENV)

        assert result.exit_code == 0
        config = execute.call_args[0][0]
        assert config.actions == ("lint", "create")
        assert config.package == "my-app"

    def test_debug_flag_enables_debug_mode(self, runner: CliRunner) -> None:
        with patch("helm_builder.cli.execute") as execute:
            result = runner.invoke(app, ["run", "--debug"], env=ENV)

        assert result.exit_code == 0
        assert execute.call_args[0][0].debug is True

    def test_invalid_configuration_exits_non_zero(self, runner: CliRunner) -> None:
        with patch("helm_builder.cli.execute") as execute:
            result = runner.invoke(
                app, ["run"], env={**ENV, "PLUGIN_WAIT_TIMEOUT": "never"}
            )

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        execute.assert_not_called()

    def test_failed_action_exits_non_zero(self, runner: CliRunner) -> None:
        error = CommandError("packaging", failed("Error: no Chart.yaml"))
        with patch("helm_builder.cli.execute", side_effect=error):
            result = runner.invoke(app, ["run"], env=ENV)

        assert result.exit_code == 1
        assert "packaging failed" in result.output

    def test_env_file_is_loaded(self, runner: CliRunner, tmp_path: Path) -> None:
        env_file = tmp_path / "build.env"
        env_file.write_text("PLUGIN_BUCKET=charts-from-file\n")

        with patch("helm_builder.cli.execute") as execute:
            result = runner.invoke(
                app,
                ["run", "--env-file", str(env_file)],
                env={**ENV, "PLUGIN_BUCKET": None, "BUCKET": None},
            )

        assert result.exit_code == 0
        assert execute.call_args[0][0].bucket == "charts-from-file"


class TestConfigCommand:
    def test_prints_resolved_settings_with_masked_key(self, runner: CliRunner) -> None:
        result = runner.invoke(
            app, ["config"], env={**ENV, "AUTH_KEY": "super-secret-key"}
        )

        assert result.exit_code == 0
        assert "CHART_PATH" in result.output
        assert "<set>" in result.output
        assert "super-secret-key" not in result.output
