"""Action pipeline.

Runs the configured actions in order. Each action turns the configuration
into one or more tool invocations; the first failure stops the run and
nothing that already happened is rolled back.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import yaml  # type: ignore[import-untyped]
from loguru import logger

from .errors import ConfigurationError, UnknownActionError, check_result
from .secret_files import decrypted_secrets
from .shell_commands import bucket_url

if TYPE_CHECKING:
    from .config import PluginConfig
    from .console import CLIConsole
    from .shell_commands import ShellCommands

STABLE_REPO_NAME = "stable"


class Action(str, Enum):
    """Actions that can appear in ``ACTIONS``."""

    LINT = "lint"
    CREATE = "create"
    PUSH = "push"
    PULL = "pull"
    DEPLOY = "deploy"
    TEST = "test"
    DEPENDENCY_UPDATE = "dependency-update"

    @classmethod
    def parse(cls, name: str) -> Action:
        """Look up an action by name.

        Raises:
            UnknownActionError: If no action has that name
        """
        try:
            return cls(name)
        except ValueError:
            raise UnknownActionError(name) from None


class ActionPipeline:
    """Executes actions against the configured chart, bucket and cluster.

    Attributes:
        config: Plugin configuration
        commands: Shell command executor
        console: Console for progress output
    """

    def __init__(
        self,
        config: PluginConfig,
        commands: ShellCommands,
        console: CLIConsole,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Plugin configuration
            commands: Shell command executor
            console: Console for progress output
        """
        self.config = config
        self.commands = commands
        self.console = console

        self._handlers: dict[Action, Callable[[], None]] = {
            Action.LINT: self.lint,
            Action.CREATE: self.create,
            Action.PUSH: self.push,
            Action.PULL: self.pull,
            Action.DEPLOY: self.deploy,
            Action.TEST: self.test,
            Action.DEPENDENCY_UPDATE: self.dependency_update,
        }
        missing = set(Action) - self._handlers.keys()
        if missing:
            names = sorted(a.value for a in missing)
            raise TypeError(f"no handler for actions: {names}")

    @property
    def workdir(self) -> Path:
        return self.commands.runner.workdir

    def run(self, actions: Iterable[str]) -> None:
        """Run actions in order, stopping at the first failure.

        Args:
            actions: Action names, in execution order

        Raises:
            UnknownActionError: When an unknown name is reached
            HelmBuilderError: The first failing action's error, unchanged
        """
        for name in actions:
            action = Action.parse(name)
            self.console.info(f"Running action [bold]{action.value}[/bold]")
            self._handlers[action]()
            self.console.ok(f"Action {action.value} finished")

    # =========================================================================
    # Chart
    # =========================================================================

    def lint(self) -> None:
        """Lint the chart with the configured values."""
        result = self.commands.helm.lint(
            self.config.chart_path,
            value_files=self.config.value_files,
            set_values=self.config.values,
        )
        check_result(result, "lint")

    def create(self) -> None:
        """Package the chart as ``<package>-<version>.tgz``."""
        self._require_chart_version()
        self._warn_on_chart_name_mismatch()
        result = self.commands.helm.package(
            self.config.chart_path, self.config.chart_version
        )
        check_result(result, "packaging")
        self.console.print(f"[dim]Created {self.config.artifact_name}[/dim]")

    def dependency_update(self) -> None:
        """Register the stable repository and resolve chart dependencies."""
        check_result(
            self.commands.helm.repo_add(
                STABLE_REPO_NAME, self.config.stable_repo_url
            ),
            "repository registration",
        )
        check_result(
            self.commands.helm.dependency_update(self.config.chart_path),
            "dependency update",
        )

    # =========================================================================
    # Storage
    # =========================================================================

    def push(self) -> None:
        """Upload the packaged chart to the bucket."""
        bucket = self._require_bucket()
        self._require_chart_version()
        artifact = self.config.artifact_name
        result = self.commands.storage.copy(artifact, bucket_url(bucket))
        check_result(result, "transfer")
        self.console.print(f"[dim]Pushed {artifact} to {bucket_url(bucket)}[/dim]")

    def pull(self) -> None:
        """Download the packaged chart from the bucket."""
        bucket = self._require_bucket()
        self._require_chart_version()
        artifact = self.config.artifact_name
        result = self.commands.storage.copy(bucket_url(bucket, artifact), artifact)
        check_result(result, "transfer")
        self.console.print(f"[dim]Pulled {artifact} from {bucket_url(bucket)}[/dim]")

    # =========================================================================
    # Cluster
    # =========================================================================

    def deploy(self) -> None:
        """Upgrade or install the release from the packaged chart.

        Creates the namespace first if it does not exist. Encrypted secret
        files are decrypted for the duration of the helm call only.
        """
        self._require_chart_version()
        namespace = self.config.namespace
        self.ensure_namespace(namespace)

        secrets = decrypted_secrets(self.commands.sops, self.config.secrets)
        with secrets as secret_values:
            result = self.commands.helm.upgrade_install(
                self.config.release,
                self.config.artifact_name,
                namespace,
                value_files=[*self.config.value_files, *secret_values],
                set_values=[*self.config.values, f"namespace={namespace}"],
                recreate_pods=self.config.recreate_pods,
                wait=self.config.wait,
                timeout=self.config.wait_timeout,
            )
        check_result(result, "deployment")
        self.console.print(
            f"[dim]Release {self.config.release} deployed to {namespace}[/dim]"
        )

    def ensure_namespace(self, namespace: str) -> None:
        """Create the namespace unless it already exists."""
        if self.commands.kubectl.namespace_exists(namespace):
            logger.debug("namespace {} already exists", namespace)
            return
        self.console.print(f"[dim]Creating namespace {namespace}[/dim]")
        check_result(
            self.commands.kubectl.create_namespace(namespace), "namespace creation"
        )

    def test(self) -> None:
        """Run the release's Helm tests."""
        result = self.commands.helm.test(self.config.release, self.config.wait_timeout)
        check_result(result, "testing")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_bucket(self) -> str:
        if not self.config.bucket:
            raise ConfigurationError(
                "BUCKET is required for push and pull actions",
                details="Set BUCKET (or PLUGIN_BUCKET) to the target GCS bucket.",
            )
        return self.config.bucket

    def _require_chart_version(self) -> None:
        if not self.config.chart_version:
            raise ConfigurationError(
                "CHART_VERSION is required to name the packaged chart",
                details=f"Charts are packaged as {self.config.package}-<version>.tgz.",
            )

    def _warn_on_chart_name_mismatch(self) -> None:
        """Warn when helm would name the package differently from PACKAGE.

        ``helm package`` names its output after Chart.yaml's ``name``; if that
        differs from the configured package, later actions will not find it.
        """
        chart_file = self.workdir / self.config.chart_path / "Chart.yaml"
        if not chart_file.is_file():
            return
        try:
            chart = yaml.safe_load(chart_file.read_text()) or {}
        except yaml.YAMLError as e:
            logger.debug("could not read {}: {}", chart_file, e)
            return
        name = chart.get("name") if isinstance(chart, dict) else None
        if name and name != self.config.package:
            self.console.warn(
                f"Chart name '{name}' differs from package '{self.config.package}'; "
                f"helm will write {name}-{self.config.chart_version}.tgz"
            )
