"""Kubectl command abstractions.

Only namespace management is needed by the deploy action; everything else
about the release is handled by helm.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class KubectlCommands:
    """Kubectl-related shell commands."""

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize kubectl commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    # =========================================================================
    # Namespace Management
    # =========================================================================

    def namespace_exists(self, namespace: str) -> bool:
        """Check if a namespace exists."""
        result = self._runner.run(
            ["kubectl", "get", "namespace", namespace], capture_output=True
        )
        return result.success

    def create_namespace(self, namespace: str) -> CommandResult:
        """Create a namespace."""
        return self._runner.run(["kubectl", "create", "namespace", namespace])
