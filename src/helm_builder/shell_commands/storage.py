"""Cloud Storage command abstractions (gsutil)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


def bucket_url(bucket: str, object_name: str = "") -> str:
    """Build a ``gs://`` URL for a bucket or an object inside it."""
    if object_name:
        return f"gs://{bucket}/{object_name}"
    return f"gs://{bucket}"


class StorageCommands:
    """gsutil-related shell commands."""

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize storage commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    def copy(self, source: str, dest: str) -> CommandResult:
        """Copy a file between local disk and Cloud Storage.

        Either side may be a local path or a ``gs://`` URL.
        """
        return self._runner.run(["gsutil", "cp", source, dest])
