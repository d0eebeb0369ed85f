"""Command runner for executing external tools.

This module provides the base command execution functionality used by
all specialized command modules.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Collection, Sequence
from pathlib import Path

from loguru import logger

from .types import CommandResult, CredentialContext

# Exit status reported when the executable cannot be started at all
EXIT_NOT_EXECUTABLE = 127

REDACTED = "***"


class CommandRunner:
    """Low-level command executor with consistent result handling.

    In debug mode every invocation is logged and the child's stdout/stderr
    are attached to ours so progress is visible live in the CI log. Otherwise
    output is captured, which keeps stderr available for error reporting.

    All specialized command modules (gcloud, gsutil, kubectl, helm, sops) use
    this runner for actual command execution.
    """

    def __init__(
        self,
        workdir: Path,
        *,
        debug: bool = False,
        credentials: CredentialContext | None = None,
    ) -> None:
        """Initialize the command runner.

        Args:
            workdir: Directory commands are executed from. Packaged charts
                are written to and read from here.
            debug: Log invocations and stream child output
            credentials: Credentials exposed to every child process
        """
        self.workdir = workdir
        self.debug = debug
        self.credentials = credentials or CredentialContext()

    def run(
        self,
        cmd: Sequence[str],
        *,
        capture_output: bool = False,
        redact: Collection[str] = (),
    ) -> CommandResult:
        """Execute a command and return a structured result.

        Args:
            cmd: Command and arguments as a sequence
            capture_output: Always capture stdout/stderr, even in debug mode
            redact: Argument values to mask when the command is logged

        Returns:
            CommandResult with success status, output, and return code
        """
        args = list(cmd)
        logger.debug("running: {}", self.describe(args, redact))

        capture = capture_output or not self.debug
        env = os.environ.copy()
        env.update(self.credentials.env())

        try:
            result = subprocess.run(
                args,
                cwd=self.workdir,
                capture_output=capture,
                text=True,
                check=False,
                env=env,
            )
        except OSError as e:
            logger.debug("could not start {}: {}", args[0], e)
            return CommandResult(
                success=False,
                stderr=f"{args[0]}: {e.strerror or e}",
                returncode=EXIT_NOT_EXECUTABLE,
            )

        return CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )

    @staticmethod
    def describe(args: Sequence[str], redact: Collection[str] = ()) -> str:
        """Render a command for logs with sensitive arguments masked."""
        return shlex.join(REDACTED if arg in redact else arg for arg in args)
