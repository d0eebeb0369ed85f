"""Error types raised by the builder.

Every error carries a short ``message`` and optional ``details`` so the CLI
can render a consistent error panel before exiting.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .shell_commands.types import CommandResult


class HelmBuilderError(Exception):
    """Base class for all builder failures."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ConfigurationError(HelmBuilderError):
    """Raised when required configuration is missing or invalid."""


class UnknownActionError(HelmBuilderError):
    """Raised when the action list names an action that does not exist."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(
            f"unknown action: {action!r}",
            details="Supported actions: lint, create, push, pull, deploy, "
            "test, dependency-update",
        )


class CommandError(HelmBuilderError):
    """Raised when an external tool exits with a non-zero status.

    Attributes:
        stage: Human readable name of the failed stage (e.g. "cluster binding")
        result: The failed command's result
    """

    def __init__(self, stage: str, result: CommandResult):
        self.stage = stage
        self.result = result
        super().__init__(
            f"{stage} failed (exit code {result.returncode})",
            details=result.stderr.strip() or None,
        )


class ClientOutOfDateError(HelmBuilderError):
    """Raised when the Helm client is older than the server component."""


class PollExhaustedError(HelmBuilderError):
    """Raised when a readiness poll runs out of attempts."""


class VersionQueryError(HelmBuilderError):
    """Raised when the version query command itself fails."""


class VersionParseError(HelmBuilderError):
    """Raised when version output cannot be decoded."""


def check_result(result: CommandResult, stage: str) -> CommandResult:
    """Return ``result`` unchanged, or raise CommandError if it failed.

    Args:
        result: Result of a finished command
        stage: Stage name used in the error message

    Returns:
        The same result, for chaining

    Raises:
        CommandError: If the command did not succeed
    """
    if not result.success:
        raise CommandError(stage, result)
    return result
