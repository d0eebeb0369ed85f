"""Shell command abstractions for the external build tools.

This package provides a thin, typed interface over every tool the builder
drives. It is organized into specialized modules for each tool:

- gcloud: Service-account activation and GKE cluster binding
- storage: gsutil copies to and from Cloud Storage
- kubectl: Namespace management
- helm: Chart, release and Tiller operations
- sops: Decryption of encrypted values files

Design Principles:
- Single Responsibility: Each module focuses on one tool
- Consistent Return Types: Commands return CommandResult; callers decide
  whether a failure is fatal
- Separation of Concerns: Commands are decoupled from pipeline logic

Usage:
    from helm_builder.shell_commands import ShellCommands

    commands = ShellCommands(Path("."), debug=True)
    result = commands.helm.lint("charts/my-app")
"""

from pathlib import Path

from .gcloud import GcloudCommands
from .helm import HelmCommands
from .kubectl import KubectlCommands
from .runner import CommandRunner
from .sops import SopsCommands
from .storage import StorageCommands, bucket_url
from .types import CommandResult, CredentialContext


class ShellCommands:
    """Unified interface for all shell command operations.

    Attributes:
        gcloud: gcloud commands
        storage: gsutil commands
        kubectl: Kubernetes kubectl commands
        helm: Helm commands
        sops: sops commands

    Example:
        >>> commands = ShellCommands(Path("."), credentials=credentials)
        >>> commands.storage.copy("app-1.0.0.tgz", "gs://charts")
    """

    def __init__(
        self,
        workdir: Path,
        *,
        debug: bool = False,
        credentials: CredentialContext | None = None,
    ) -> None:
        """Initialize the shell commands executor.

        Args:
            workdir: Directory commands are executed from
            debug: Log invocations and stream child output
            credentials: Credentials exposed to every child process
        """
        self._runner = CommandRunner(
            Path(workdir), debug=debug, credentials=credentials
        )

        self.gcloud = GcloudCommands(self._runner)
        self.storage = StorageCommands(self._runner)
        self.kubectl = KubectlCommands(self._runner)
        self.helm = HelmCommands(self._runner)
        self.sops = SopsCommands(self._runner)

    @property
    def runner(self) -> CommandRunner:
        """Get the underlying command runner."""
        return self._runner


__all__ = [
    "ShellCommands",
    "CommandResult",
    "CredentialContext",
    "bucket_url",
    "CommandRunner",
    "GcloudCommands",
    "HelmCommands",
    "KubectlCommands",
    "SopsCommands",
    "StorageCommands",
]
