"""gcloud command abstractions.

This module provides the gcloud calls needed to bind kubectl and helm to a
GKE cluster: service-account activation, project selection and cluster
credential retrieval.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class GcloudCommands:
    """gcloud-related shell commands."""

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize gcloud commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    def activate_service_account(self, key_file: Path) -> CommandResult:
        """Activate a service-account identity from a JSON key file."""
        return self._runner.run(
            [
                "gcloud",
                "auth",
                "activate-service-account",
                f"--key-file={key_file}",
            ]
        )

    def set_project(self, project: str) -> CommandResult:
        """Set the active gcloud project."""
        return self._runner.run(["gcloud", "config", "set", "project", project])

    def get_cluster_credentials(
        self,
        cluster: str,
        *,
        zone: str = "",
        region: str = "",
    ) -> CommandResult:
        """Fetch kubeconfig credentials for a GKE cluster.

        Args:
            cluster: Cluster name
            zone: Compute zone of a zonal cluster
            region: Compute region of a regional cluster. Takes precedence
                over ``zone`` when non-empty.

        Returns:
            CommandResult of the get-credentials call
        """
        cmd = ["gcloud", "container", "clusters", "get-credentials", cluster]
        if region:
            cmd.extend(["--region", region])
        else:
            cmd.extend(["--zone", zone])
        return self._runner.run(cmd)
