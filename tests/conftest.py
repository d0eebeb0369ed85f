"""Shared fixtures for the unit tests."""

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from helm_builder.config import PluginConfig
from helm_builder.console import CLIConsole
from tests.helpers import ok


@pytest.fixture
def make_config() -> Callable[..., PluginConfig]:
    """Build a PluginConfig with sensible defaults for tests."""

    def _make(**overrides: Any) -> PluginConfig:
        data: dict[str, Any] = {
            "actions": "lint",
            "chart_path": "charts/my-app",
            "chart_version": "1.2.0",
        }
        data.update(overrides)
        return PluginConfig(**data)

    return _make


@pytest.fixture
def console() -> CLIConsole:
    """CLIConsole writing to an in-memory buffer."""
    return CLIConsole(Console(record=True, width=120, force_terminal=False))


@pytest.fixture
def mock_runner() -> MagicMock:
    """Create a mock command runner that succeeds by default."""
    runner = MagicMock()
    runner.run.return_value = ok()
    return runner


@pytest.fixture
def mock_commands(tmp_path) -> MagicMock:
    """Create a mock ShellCommands whose tools all succeed by default."""
    commands = MagicMock()
    commands.runner.workdir = tmp_path
    commands.helm.lint.return_value = ok()
    commands.helm.package.return_value = ok()
    commands.helm.repo_add.return_value = ok()
    commands.helm.dependency_update.return_value = ok()
    commands.helm.upgrade_install.return_value = ok()
    commands.helm.test.return_value = ok()
    commands.storage.copy.return_value = ok()
    commands.kubectl.namespace_exists.return_value = True
    commands.kubectl.create_namespace.return_value = ok()
    commands.sops.decrypt.return_value = ok("password: hunter2\n")
    return commands
