"""Cluster session setup.

Authenticates gcloud with a service account and points kubectl (and thereby
helm) at the configured GKE cluster.
"""

from __future__ import annotations

import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from .errors import ConfigurationError, check_result
from .shell_commands import CredentialContext

if TYPE_CHECKING:
    from .config import PluginConfig
    from .console import CLIConsole
    from .shell_commands import GcloudCommands


@contextmanager
def materialize_credentials(config: PluginConfig) -> Iterator[CredentialContext]:
    """Provide the run's credential context.

    An explicit ``key_path`` is used as is. Otherwise inline ``auth_key``
    material is written to a private temporary file which is removed when
    the context exits, whether or not the run succeeded. Without either,
    ambient credentials are used.

    Yields:
        CredentialContext for the run
    """
    if config.key_path:
        yield CredentialContext(Path(config.key_path))
        return
    if not config.auth_key:
        yield CredentialContext()
        return

    # NamedTemporaryFile creates the file with 0600 permissions
    with tempfile.NamedTemporaryFile(
        mode="w", prefix="auth-key-", suffix=".json", delete=False
    ) as f:
        f.write(config.auth_key)
        key_file = Path(f.name)
    logger.debug("wrote service account key to {}", key_file)

    try:
        yield CredentialContext(key_file)
    finally:
        key_file.unlink(missing_ok=True)
        logger.debug("removed service account key {}", key_file)


def activate_credentials(
    gcloud: GcloudCommands, credentials: CredentialContext
) -> None:
    """Make the service account gcloud's active account.

    gsutil authenticates through gcloud's active account, so this runs for
    every run that has a key, with or without a cluster.

    Args:
        gcloud: gcloud commands, bound to ``credentials``
        credentials: Credential context of the run

    Raises:
        ConfigurationError: If no credential file is available
        CommandError: If activation fails (stage "authorization")
    """
    if credentials.key_file is None:
        raise ConfigurationError(
            "No service account key available",
            details="Set AUTH_KEY (key JSON) or KEY_PATH (path to a key file).",
        )
    logger.debug("using service account key file {}", credentials.key_file)
    check_result(
        gcloud.activate_service_account(credentials.key_file), "authorization"
    )


def setup_cluster_session(
    gcloud: GcloudCommands,
    config: PluginConfig,
    console: CLIConsole,
) -> None:
    """Select the project and bind kubectl to the cluster.

    Expects the service account to be active already
    (see :func:`activate_credentials`).

    Args:
        gcloud: gcloud commands
        config: Plugin configuration with project, cluster and zone/region
        console: Console for progress output

    Raises:
        CommandError: If a gcloud step fails; the stage is named in the error
    """
    location = (
        f"region {config.region}" if config.region else f"zone {config.zone}"
    )
    console.info(f"Connecting to cluster {config.cluster} ({location})")

    check_result(gcloud.set_project(config.project), "project configuration")
    check_result(
        gcloud.get_cluster_credentials(
            config.cluster, zone=config.zone, region=config.region
        ),
        "cluster binding",
    )

    console.ok(f"Bound to cluster {config.cluster} in project {config.project}")
