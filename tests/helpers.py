"""Helpers for building command results in tests."""

from helm_builder.shell_commands.types import CommandResult


def ok(stdout: str = "") -> CommandResult:
    """A successful command result."""
    return CommandResult(success=True, stdout=stdout, stderr="", returncode=0)


def failed(stderr: str = "boom", returncode: int = 1) -> CommandResult:
    """A failed command result."""
    return CommandResult(success=False, stdout="", stderr=stderr, returncode=returncode)
