"""Tests for version-aware Helm initialization."""

from unittest.mock import MagicMock

import pytest

from helm_builder.errors import (
    ClientOutOfDateError,
    CommandError,
    PollExhaustedError,
)
from helm_builder.helm_init import HelmInitializer, InitMode, choose_init_mode
from helm_builder.versions import HelmVersions, SemVer, VersionInfo
from tests.helpers import failed, ok


def _versions(client: str, server: str) -> HelmVersions:
    return HelmVersions(
        client=VersionInfo(SemVer.parse(client)),
        server=VersionInfo(SemVer.parse(server)),
    )


def _template_output(client: str, server: str) -> str:
    return f'{{"client":"{client}","server":"{server}"}}'


class TestChooseInitMode:
    def test_no_versions_means_install(self) -> None:
        assert choose_init_mode(None) is InitMode.INSTALL

    def test_equal_versions_mean_client_only(self) -> None:
        versions = _versions("v2.16.1", "v2.16.1")

        assert choose_init_mode(versions) is InitMode.CLIENT_ONLY

    def test_newer_client_means_upgrade(self) -> None:
        assert choose_init_mode(_versions("v2.16.1", "v2.14.3")) is InitMode.UPGRADE

    def test_older_client_is_rejected(self) -> None:
        with pytest.raises(ClientOutOfDateError) as excinfo:
            choose_init_mode(_versions("v2.14.3", "v2.16.1"))

        assert excinfo.value.message == "helm client is out of date"


class TestHelmInitializer:
    """Tests for the init command selection and readiness polling."""

    @pytest.fixture
    def helm(self) -> MagicMock:
        helm = MagicMock()
        helm.supports_version_template.return_value = True
        helm.init.return_value = ok()
        helm.ping.return_value = ok()
        return helm

    @pytest.fixture
    def sleep(self) -> MagicMock:
        return MagicMock()

    @pytest.fixture
    def initializer(self, helm: MagicMock, console, sleep: MagicMock) -> HelmInitializer:
        return HelmInitializer(helm, console, attempts=3, interval=10, sleep=sleep)

    def test_install_when_no_server_answers(
        self, initializer: HelmInitializer, helm: MagicMock
    ) -> None:
        helm.version.return_value = failed("Error: could not find tiller")

        mode = initializer.initialize()

        assert mode is InitMode.INSTALL
        helm.init.assert_called_once_with(
            client_only=False, upgrade=False, stable_repo_url=None
        )
        helm.ping.assert_called_once()

    def test_client_only_when_versions_match(
        self, initializer: HelmInitializer, helm: MagicMock
    ) -> None:
        """Matching versions should not poll for the server."""
        helm.version.return_value = ok(_template_output("v2.16.1", "v2.16.1"))

        mode = initializer.initialize()

        assert mode is InitMode.CLIENT_ONLY
        helm.init.assert_called_once_with(
            client_only=True, upgrade=False, stable_repo_url=None
        )
        helm.ping.assert_not_called()

    def test_upgrade_when_client_is_newer(
        self, initializer: HelmInitializer, helm: MagicMock
    ) -> None:
        helm.version.return_value = ok(_template_output("v2.16.1", "v2.14.3"))

        mode = initializer.initialize()

        assert mode is InitMode.UPGRADE
        helm.init.assert_called_once_with(
            client_only=False, upgrade=True, stable_repo_url=None
        )
        helm.ping.assert_called_once()

    def test_out_of_date_client_does_not_init(
        self, initializer: HelmInitializer, helm: MagicMock
    ) -> None:
        helm.version.return_value = ok(_template_output("v2.14.3", "v2.16.1"))

        with pytest.raises(ClientOutOfDateError):
            initializer.initialize()

        helm.init.assert_not_called()

    def test_failed_init_raises_command_error(
        self, initializer: HelmInitializer, helm: MagicMock
    ) -> None:
        helm.version.return_value = failed()
        helm.init.return_value = failed("tiller install refused")

        with pytest.raises(CommandError) as excinfo:
            initializer.initialize()

        assert excinfo.value.stage == "helm init"
        helm.ping.assert_not_called()

    def test_polls_until_tiller_answers(
        self, initializer: HelmInitializer, helm: MagicMock, sleep: MagicMock
    ) -> None:
        helm.version.return_value = failed()
        helm.ping.side_effect = [failed(), ok()]

        initializer.initialize()

        assert helm.ping.call_count == 2
        sleep.assert_called_once_with(10)

    def test_poll_exhaustion_fails_the_run(
        self, initializer: HelmInitializer, helm: MagicMock, sleep: MagicMock
    ) -> None:
        helm.version.return_value = failed()
        helm.ping.return_value = failed()

        with pytest.raises(PollExhaustedError):
            initializer.initialize()

        assert helm.ping.call_count == 3
        assert sleep.call_count == 2

    def test_stable_repo_url_passed_to_init(
        self, helm: MagicMock, console, sleep: MagicMock
    ) -> None:
        helm.version.return_value = ok(_template_output("v2.16.1", "v2.16.1"))
        initializer = HelmInitializer(
            helm, console, stable_repo_url="https://charts.helm.sh/stable", sleep=sleep
        )

        initializer.initialize()

        helm.init.assert_called_once_with(
            client_only=True,
            upgrade=False,
            stable_repo_url="https://charts.helm.sh/stable",
        )

    def test_default_poll_budget(
        self, helm: MagicMock, console, sleep: MagicMock
    ) -> None:
        """Tiller gets 10 attempts, 10 seconds apart."""
        helm.version.return_value = failed()
        helm.ping.return_value = failed()
        initializer = HelmInitializer(helm, console, sleep=sleep)

        with pytest.raises(PollExhaustedError):
            initializer.initialize()

        assert helm.ping.call_count == 10
        assert sleep.call_count == 9
        assert all(c.args == (10,) for c in sleep.call_args_list)
