"""Helm command abstractions.

This module provides commands for chart packaging, repository and
dependency management, release deployment and testing, and the Tiller
bootstrap calls (``helm init`` / ``helm version``).
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner

# Go template rendering client and server versions as a JSON object
VERSION_TEMPLATE = '{"client":"{{.Client.SemVer}}","server":"{{.Server.SemVer}}"}'


class HelmCommands:
    """Helm-related shell commands.

    Provides operations for:
    - Chart management (lint, package, dependency update)
    - Release management (upgrade --install, test)
    - Server component bootstrap (init, version)
    """

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize Helm commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    # =========================================================================
    # Chart Management
    # =========================================================================

    def lint(
        self,
        chart_path: str,
        *,
        value_files: Sequence[str] = (),
        set_values: Sequence[str] = (),
    ) -> CommandResult:
        """Lint a chart directory.

        Args:
            chart_path: Path to the chart directory
            value_files: Values files to lint against
            set_values: key=value overrides to lint against

        Returns:
            CommandResult with lint status
        """
        cmd = ["helm", "lint", chart_path]
        for vf in value_files:
            cmd.extend(["-f", vf])
        joined = ",".join(set_values)
        if joined:
            cmd.extend(["--set", joined])
        return self._runner.run(cmd, redact={joined} if joined else ())

    def package(self, chart_path: str, version: str) -> CommandResult:
        """Package a chart into ``<name>-<version>.tgz`` in the working directory."""
        return self._runner.run(["helm", "package", "--version", version, chart_path])

    def repo_add(self, name: str, url: str) -> CommandResult:
        """Register a chart repository, replacing any existing entry of that name."""
        return self._runner.run(["helm", "repo", "add", name, url])

    def dependency_update(self, chart_path: str) -> CommandResult:
        """Resolve a chart's declared dependencies into its charts/ directory."""
        return self._runner.run(["helm", "dependency", "update", chart_path])

    # =========================================================================
    # Release Management
    # =========================================================================

    def upgrade_install(
        self,
        release_name: str,
        chart: str,
        namespace: str,
        *,
        value_files: Sequence[Path | str] = (),
        set_values: Sequence[str] = (),
        recreate_pods: bool = False,
        wait: bool = False,
        timeout: int | None = None,
    ) -> CommandResult:
        """Deploy or upgrade a Helm release.

        Uses `helm upgrade --install` to idempotently deploy a chart.
        If the release doesn't exist, it will be installed. If it exists,
        it will be upgraded.

        Args:
            release_name: Name for the Helm release
            chart: Chart reference, usually a packaged ``.tgz`` file
            namespace: Kubernetes namespace for deployment
            value_files: Values files, applied in order
            set_values: key=value overrides, passed as one ``--set`` argument
            recreate_pods: Force pods to be recreated on upgrade
            wait: Whether to wait for resources to be ready
            timeout: Wait timeout in seconds, only used when ``wait`` is set

        Returns:
            CommandResult with deployment status

        Example:
            >>> helm.upgrade_install(
            ...     "my-app",
            ...     "my-app-1.2.0.tgz",
            ...     "production",
            ...     set_values=["image.tag=1.2.0"],
            ...     wait=True,
            ...     timeout=300,
            ... )
        """
        cmd = [
            "helm",
            "upgrade",
            release_name,
            chart,
            "--install",
            "--namespace",
            namespace,
        ]

        for vf in value_files:
            cmd.extend(["-f", str(vf)])

        joined = ",".join(set_values)
        if joined:
            cmd.extend(["--set", joined])
        if recreate_pods:
            cmd.append("--recreate-pods")
        if wait:
            cmd.append("--wait")
            if timeout is not None:
                cmd.extend(["--timeout", str(timeout)])

        return self._runner.run(cmd, redact={joined} if joined else ())

    def test(self, release_name: str, timeout: int) -> CommandResult:
        """Run the release's test hooks.

        Release names are unique per Tiller, so no namespace is passed.
        """
        return self._runner.run(
            ["helm", "test", release_name, "--timeout", str(timeout)]
        )

    # =========================================================================
    # Server Component
    # =========================================================================

    def version(self, *, template: str | None = None) -> CommandResult:
        """Query client and server versions, capturing the output.

        Args:
            template: Optional Go template to render the versions with

        Returns:
            CommandResult; fails when the server component is unreachable
        """
        cmd = ["helm", "version"]
        if template is not None:
            cmd.extend(["--template", template])
        return self._runner.run(cmd, capture_output=True)

    def ping(self) -> CommandResult:
        """Check the server component responds, without capturing output."""
        return self._runner.run(["helm", "version"])

    def supports_version_template(self) -> bool:
        """Check whether ``helm version`` accepts ``--template``."""
        result = self._runner.run(["helm", "version", "--help"], capture_output=True)
        return result.success and "--template" in result.stdout

    def init(
        self,
        *,
        client_only: bool = False,
        upgrade: bool = False,
        stable_repo_url: str | None = None,
    ) -> CommandResult:
        """Initialize Helm and, unless ``client_only``, install or upgrade Tiller.

        Args:
            client_only: Only set up the local Helm home
            upgrade: Upgrade an existing Tiller
            stable_repo_url: URL registered as the ``stable`` repository

        Returns:
            CommandResult of the init call
        """
        cmd = ["helm", "init"]
        if client_only:
            cmd.append("--client-only")
        if upgrade:
            cmd.append("--upgrade")
        if stable_repo_url:
            cmd.extend(["--stable-repo-url", stable_repo_url])
        return self._runner.run(cmd)
