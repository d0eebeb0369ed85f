"""Version-aware initialization of Helm's server component (Tiller).

The initializer compares the client and server versions and picks how to run
``helm init``:

===============================  ===============================  ==========
Situation                        Command                          Poll after
===============================  ===============================  ==========
version query fails              ``helm init``                    yes
client == server                 ``helm init --client-only``      no
client newer than server         ``helm init --upgrade``          yes
client older than server         none, ClientOutOfDateError       n/a
===============================  ===============================  ==========

Polling calls ``helm version`` until Tiller answers, pausing between
attempts, and fails once the attempts are used up.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from .errors import ClientOutOfDateError, VersionQueryError, check_result
from .retry import poll
from .versions import HelmVersions, fetch_versions

if TYPE_CHECKING:
    from .console import CLIConsole
    from .shell_commands import HelmCommands

POLL_ATTEMPTS = 10
POLL_INTERVAL_SECONDS = 10


class InitMode(str, Enum):
    """How ``helm init`` is invoked."""

    INSTALL = "install"
    CLIENT_ONLY = "client-only"
    UPGRADE = "upgrade"


def choose_init_mode(versions: HelmVersions | None) -> InitMode:
    """Decide the init mode from the current versions.

    Args:
        versions: Current versions, or None when the query failed

    Returns:
        The init mode to use

    Raises:
        ClientOutOfDateError: If the client is older than the server
    """
    if versions is None:
        return InitMode.INSTALL

    client, server = versions.client.semver, versions.server.semver
    if client < server:
        raise ClientOutOfDateError(
            "helm client is out of date",
            details=f"Client {client} is older than server {server}. "
            "Upgrade the helm binary in the build image.",
        )
    if client > server:
        return InitMode.UPGRADE
    return InitMode.CLIENT_ONLY


class HelmInitializer:
    """Initializes Helm against the current cluster context."""

    def __init__(
        self,
        helm: HelmCommands,
        console: CLIConsole,
        *,
        stable_repo_url: str | None = None,
        attempts: int = POLL_ATTEMPTS,
        interval: float = POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the Helm initializer.

        Args:
            helm: Helm commands
            console: Console for progress output
            stable_repo_url: Repository registered as ``stable`` by ``helm init``
            attempts: Readiness poll attempts after install/upgrade
            interval: Seconds between readiness poll attempts
            sleep: Sleep function (injectable for tests)
        """
        self.helm = helm
        self.console = console
        self.stable_repo_url = stable_repo_url
        self.attempts = attempts
        self.interval = interval
        self._sleep = sleep

    def current_versions(self) -> HelmVersions | None:
        """Fetch versions, or None if the server component does not answer.

        A failing query means Tiller is not installed (or not reachable yet);
        the subsequent ``helm init`` reports any real problem itself.
        """
        try:
            versions = fetch_versions(self.helm)
        except VersionQueryError as e:
            logger.debug(
                "version query failed, assuming no server component: {}", e.details
            )
            return None
        logger.debug(
            "helm client {} / server {}", versions.client.semver, versions.server.semver
        )
        return versions

    def initialize(self) -> InitMode:
        """Run ``helm init`` in the appropriate mode and wait for readiness.

        Returns:
            The mode that was used

        Raises:
            ClientOutOfDateError: If the client is older than the server
            CommandError: If ``helm init`` fails
            PollExhaustedError: If the server never became ready
            VersionParseError: If the version output could not be understood
        """
        mode = choose_init_mode(self.current_versions())
        self.console.info(f"Initializing helm ({mode.value})")

        result = self.helm.init(
            client_only=mode is InitMode.CLIENT_ONLY,
            upgrade=mode is InitMode.UPGRADE,
            stable_repo_url=self.stable_repo_url,
        )
        check_result(result, "helm init")

        if mode is not InitMode.CLIENT_ONLY:
            self.wait_until_ready()

        self.console.ok("Helm initialized")
        return mode

    def wait_until_ready(self) -> None:
        """Poll ``helm version`` until the server component answers."""
        attempts = poll(
            lambda: self.helm.ping().success,
            attempts=self.attempts,
            interval=self.interval,
            what="tiller",
            sleep=self._sleep,
        )
        logger.debug("tiller ready after {} attempt(s)", attempts)
