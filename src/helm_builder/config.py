"""Plugin configuration loaded from the environment.

Every setting is read from an environment variable. Following the Drone
plugin convention, ``PLUGIN_<KEY>`` takes precedence over the bare ``<KEY>``
(e.g. ``PLUGIN_CHART_PATH`` over ``CHART_PATH``). List settings are
comma-separated.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from loguru import logger
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .errors import ConfigurationError

ENV_PREFIX = "PLUGIN_"
DEFAULT_NAMESPACE = "default"
DEFAULT_WAIT_TIMEOUT = 300
DEFAULT_STABLE_REPO_URL = "https://charts.helm.sh/stable"

# Field name -> environment key (without prefix)
ENV_KEYS: dict[str, str] = {
    "debug": "DEBUG",
    "show_env": "SHOW_ENV",
    "wait": "WAIT",
    "wait_timeout": "WAIT_TIMEOUT",
    "recreate_pods": "RECREATE_PODS",
    "actions": "ACTIONS",
    "auth_key": "AUTH_KEY",
    "key_path": "KEY_PATH",
    "zone": "ZONE",
    "region": "REGION",
    "cluster": "CLUSTER",
    "project": "PROJECT",
    "namespace": "NAMESPACE",
    "chart_repo": "CHART_REPO",
    "bucket": "BUCKET",
    "chart_path": "CHART_PATH",
    "chart_version": "CHART_VERSION",
    "release": "RELEASE",
    "package": "PACKAGE",
    "values": "VALUES",
    "value_files": "VALUE_FILES",
    "secrets": "SECRETS",
    "skip_init": "SKIP_INIT",
    "stable_repo_url": "STABLE_REPO_URL",
}

_LIST_FIELDS = ("actions", "values", "value_files", "secrets")

# Never shown by ``helm-builder config``
_MASKED_FIELDS = frozenset({"auth_key"})


def split_list(raw: str) -> tuple[str, ...]:
    """Split a comma-separated setting, dropping blank items."""
    return tuple(item.strip() for item in raw.split(",") if item.strip())


class PluginConfig(BaseModel):
    """Resolved builder configuration.

    Derived defaults are filled in during validation and never change
    afterwards:

    - ``package`` defaults to the last path segment of ``chart_path``
    - ``release`` defaults to ``package``
    - ``chart_repo`` defaults to the public URL of ``bucket``
    """

    model_config = ConfigDict(frozen=True)

    debug: bool = False
    show_env: bool = False
    wait: bool = False
    wait_timeout: int = Field(default=DEFAULT_WAIT_TIMEOUT, ge=0)
    recreate_pods: bool = False
    actions: tuple[str, ...] = Field(min_length=1)

    auth_key: str = ""
    key_path: str = ""

    project: str = ""
    cluster: str = ""
    zone: str = ""
    region: str = ""
    namespace: str = DEFAULT_NAMESPACE

    chart_repo: str = ""
    bucket: str = ""
    chart_path: str = Field(min_length=1)
    chart_version: str = ""
    release: str = ""
    package: str = ""

    values: tuple[str, ...] = ()
    value_files: tuple[str, ...] = ()
    secrets: tuple[str, ...] = ()

    skip_init: bool = False
    stable_repo_url: str = DEFAULT_STABLE_REPO_URL

    @field_validator(*_LIST_FIELDS, mode="before")
    @classmethod
    def _split_lists(cls, value: Any) -> Any:
        if isinstance(value, str):
            return split_list(value)
        return value

    @model_validator(mode="before")
    @classmethod
    def _derive_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        chart_path = str(data.get("chart_path") or "")
        if not data.get("package") and chart_path:
            data["package"] = chart_path.rstrip("/").split("/")[-1]
        if not data.get("release"):
            data["release"] = data.get("package", "")
        if not data.get("chart_repo") and data.get("bucket"):
            data["chart_repo"] = f"https://{data['bucket']}.storage.googleapis.com/"
        if not data.get("namespace"):
            data["namespace"] = DEFAULT_NAMESPACE
        return data

    # =========================================================================
    # Derived values
    # =========================================================================

    @property
    def artifact_name(self) -> str:
        """File name of the packaged chart, locally and in the bucket."""
        return f"{self.package}-{self.chart_version}.tgz"

    @property
    def has_credentials(self) -> bool:
        return bool(self.auth_key or self.key_path)

    @property
    def has_cluster_locator(self) -> bool:
        return bool(self.project and self.cluster and (self.zone or self.region))

    @property
    def wants_cluster_session(self) -> bool:
        """Whether enough is configured to bind to a cluster."""
        return self.has_cluster_locator and self.has_credentials

    def display_items(self) -> list[tuple[str, str]]:
        """Return (env key, value) pairs suitable for printing."""
        items = []
        for field, key in ENV_KEYS.items():
            value = getattr(self, field)
            if field in _MASKED_FIELDS and value:
                shown = "<set>"
            elif isinstance(value, tuple):
                shown = ",".join(value)
            else:
                shown = str(value)
            items.append((key, shown))
        return items


def read_env(environ: Mapping[str, str]) -> dict[str, str]:
    """Collect raw settings from an environment mapping.

    Blank values are treated as unset so field defaults apply.
    """
    raw: dict[str, str] = {}
    for field, key in ENV_KEYS.items():
        value = environ.get(f"{ENV_PREFIX}{key}")
        if value is None:
            value = environ.get(key)
        if value is not None and value.strip():
            raw[field] = value.strip()
    return raw


def load_config(
    environ: Mapping[str, str] | None = None,
    env_file: Path | None = None,
) -> PluginConfig:
    """Load and validate the plugin configuration.

    Args:
        environ: Environment to read from (default: ``os.environ``)
        env_file: Optional dotenv file loaded into ``os.environ`` first;
            variables already set are not overridden

    Returns:
        Validated PluginConfig

    Raises:
        ConfigurationError: If a required setting is missing or a value is invalid
    """
    if env_file is not None:
        if not env_file.exists():
            raise ConfigurationError(f"Environment file not found: {env_file}")
        load_dotenv(env_file, override=False)
        logger.debug("Loaded environment file {}", env_file)

    raw = read_env(os.environ if environ is None else environ)
    logger.debug("Configuration keys set: {}", sorted(raw))  # Log keys only

    try:
        return PluginConfig(**raw)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else ""
            key = ENV_KEYS.get(field, field)
            problems.append(f"{key}: {error['msg']}")
        raise ConfigurationError(
            "Invalid configuration", details="\n".join(problems)
        ) from e
