"""Data types shared by the shell command modules."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "CREDENTIALS_ENV_VAR",
    "CommandResult",
    "CredentialContext",
]

# Read by gcloud/gsutil/kubectl for application default credentials
CREDENTIALS_ENV_VAR = "GOOGLE_APPLICATION_CREDENTIALS"


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


@dataclass(frozen=True)
class CredentialContext:
    """Service-account credentials handed to every cloud CLI invocation.

    Replaces a process-wide ``GOOGLE_APPLICATION_CREDENTIALS`` mutation: the
    runner applies :meth:`env` to each child process it spawns.

    Attributes:
        key_file: Path to the service-account JSON key, or None for ambient
            credentials
    """

    key_file: Path | None = None

    def env(self) -> dict[str, str]:
        """Environment overrides for child processes."""
        if self.key_file is None:
            return {}
        return {CREDENTIALS_ENV_VAR: str(self.key_file)}
