"""Top-level build step orchestration.

A run materializes credentials and activates the service account when one
is configured, optionally binds to a cluster and initializes Helm, then
executes the configured actions in order.
"""

from __future__ import annotations

import os
import time
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from .cluster import (
    activate_credentials,
    materialize_credentials,
    setup_cluster_session,
)
from .helm_init import HelmInitializer
from .pipeline import ActionPipeline
from .shell_commands import ShellCommands

if TYPE_CHECKING:
    from .config import PluginConfig
    from .console import CLIConsole


def print_environment(
    console: CLIConsole, environ: Mapping[str, str] | None = None
) -> None:
    """Print the names of the environment variables visible to the step.

    Values are never printed; they routinely carry secrets.
    """
    names = sorted(os.environ if environ is None else environ)
    console.print_header("Environment")
    for name in names:
        console.print(f"[dim]{name}[/dim]")


def execute(
    config: PluginConfig,
    console: CLIConsole,
    *,
    workdir: Path | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Run the build step.

    Args:
        config: Validated plugin configuration
        console: Console for progress output
        workdir: Directory tools run in (default: current directory)
        sleep: Sleep function used while polling (injectable for tests)

    Raises:
        HelmBuilderError: The first failure; later steps are not attempted
    """
    if config.show_env:
        print_environment(console)

    workdir = workdir or Path.cwd()

    with materialize_credentials(config) as credentials:
        commands = ShellCommands(workdir, debug=config.debug, credentials=credentials)

        if config.has_credentials:
            activate_credentials(commands.gcloud, credentials)

        if config.wants_cluster_session:
            setup_cluster_session(commands.gcloud, config, console)
            if config.skip_init:
                logger.debug("skipping helm init")
            else:
                HelmInitializer(
                    commands.helm,
                    console,
                    stable_repo_url=config.stable_repo_url,
                    sleep=sleep,
                ).initialize()
        elif config.project and config.cluster:
            console.warn(
                "PROJECT and CLUSTER are set but ZONE/REGION or credentials "
                "are missing; skipping cluster setup"
            )

        ActionPipeline(config, commands, console).run(config.actions)
