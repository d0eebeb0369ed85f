"""sops command abstractions for encrypted values files."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class SopsCommands:
    """sops-related shell commands."""

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize sops commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    def decrypt(self, secret_file: Path) -> CommandResult:
        """Decrypt a sops-encrypted file.

        The plaintext is returned in ``stdout`` and never written to disk or
        echoed to the console, even in debug mode.
        """
        return self._runner.run(
            ["sops", "--decrypt", str(secret_file)], capture_output=True
        )
