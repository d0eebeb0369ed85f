"""Helm client/server version extraction and comparison.

Two strategies read the versions reported by ``helm version``:

- ``StructuredVersionSource`` renders them through ``--template`` as a small
  JSON object and decodes it.
- ``PatternVersionSource`` parses the free-text output, e.g.::

      Client: &version.Version{SemVer:"v2.16.1", GitCommit:"bbdfe5e", GitTreeState:"clean"}
      Server: &version.Version{SemVer:"v2.16.1", GitCommit:"bbdfe5e", GitTreeState:"clean"}

:func:`fetch_versions` picks the structured strategy when the installed
client supports ``--template`` and falls back to pattern matching otherwise.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from functools import total_ordering
from typing import TYPE_CHECKING, Protocol

from loguru import logger

from .errors import VersionParseError, VersionQueryError
from .shell_commands.helm import VERSION_TEMPLATE

if TYPE_CHECKING:
    from .shell_commands import HelmCommands

SEMVER_PATTERN = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

VERSION_LINE_PATTERN = re.compile(
    r'(?P<realm>Client|Server): &version\.Version\{SemVer:"(?P<semver>.*?)"'
    r'.*?GitCommit:"(?P<commit>.*?)".*?GitTreeState:"(?P<treestate>.*?)"'
)

# Only the client and server lines are meaningful
_MEANINGFUL_LINES = 2


@total_ordering
@dataclass(frozen=True, eq=False)
class SemVer:
    """A semantic version ordered by SemVer 2.0 precedence.

    Build metadata is kept for display but ignored when comparing.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str = ""

    @classmethod
    def parse(cls, text: str) -> SemVer:
        """Parse ``1.2.3``, ``v1.2.3-rc.1+abc`` and similar strings.

        Raises:
            VersionParseError: If ``text`` is not a semantic version
        """
        match = SEMVER_PATTERN.match(text.strip())
        if match is None:
            raise VersionParseError(f"not a semantic version: {text!r}")
        prerelease = match.group("prerelease")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=tuple(prerelease.split(".")) if prerelease else (),
            build=match.group("build") or "",
        )

    def _precedence(self) -> tuple[object, ...]:
        # A release outranks any of its pre-releases; numeric identifiers
        # sort numerically and below alphanumeric ones.
        identifiers = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part)
            for part in self.prerelease
        )
        return (self.major, self.minor, self.patch, not self.prerelease, identifiers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._precedence() == other._precedence()

    def __lt__(self, other: SemVer) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._precedence() < other._precedence()

    def __hash__(self) -> int:
        return hash(self._precedence())

    def __str__(self) -> str:
        text = f"v{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + self.build
        return text


@dataclass(frozen=True)
class VersionInfo:
    """Version of one side (client or server), with optional git metadata."""

    semver: SemVer
    git_commit: str = ""
    git_tree_state: str = ""


@dataclass(frozen=True)
class HelmVersions:
    """Client and server versions as reported by ``helm version``."""

    client: VersionInfo
    server: VersionInfo


# =============================================================================
# Parsing
# =============================================================================


def parse_structured(text: str) -> HelmVersions:
    """Decode the JSON rendered by :data:`VERSION_TEMPLATE`.

    Raises:
        VersionParseError: If the output is not the expected JSON object
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise VersionParseError(
            "could not decode helm version output", details=text.strip() or None
        ) from e
    if not isinstance(data, dict) or not data.get("client") or not data.get("server"):
        raise VersionParseError(
            "helm version output lacks client or server version",
            details=text.strip() or None,
        )
    return HelmVersions(
        client=VersionInfo(SemVer.parse(str(data["client"]))),
        server=VersionInfo(SemVer.parse(str(data["server"]))),
    )


def parse_text(text: str) -> HelmVersions:
    """Extract versions from free-text ``helm version`` output.

    Only the first two lines are considered; anything after is ignored.

    Raises:
        VersionParseError: If a line does not match or a realm is missing
    """
    realms: dict[str, VersionInfo] = {}
    for line in text.splitlines()[:_MEANINGFUL_LINES]:
        match = VERSION_LINE_PATTERN.search(line)
        if match is None:
            raise VersionParseError("empty result set", details=line.strip() or None)
        realms[match.group("realm").lower()] = VersionInfo(
            semver=SemVer.parse(match.group("semver")),
            git_commit=match.group("commit"),
            git_tree_state=match.group("treestate"),
        )

    missing = {"client", "server"} - realms.keys()
    if missing:
        raise VersionParseError(
            f"helm version output lacks {', '.join(sorted(missing))} version"
        )
    return HelmVersions(client=realms["client"], server=realms["server"])


# =============================================================================
# Sources
# =============================================================================


class VersionSource(Protocol):
    def fetch(self, helm: HelmCommands) -> HelmVersions: ...


def _query_failed(stderr: str) -> VersionQueryError:
    return VersionQueryError(
        "helm version query failed", details=stderr.strip() or None
    )


class StructuredVersionSource:
    """Read versions through ``helm version --template``."""

    def fetch(self, helm: HelmCommands) -> HelmVersions:
        result = helm.version(template=VERSION_TEMPLATE)
        if not result.success:
            raise _query_failed(result.stderr)
        return parse_structured(result.stdout)


class PatternVersionSource:
    """Read versions by pattern matching plain ``helm version`` output."""

    def fetch(self, helm: HelmCommands) -> HelmVersions:
        result = helm.version()
        if not result.success:
            raise _query_failed(result.stderr)
        return parse_text(result.stdout)


def select_source(helm: HelmCommands) -> VersionSource:
    """Choose the most precise strategy the installed client supports."""
    if helm.supports_version_template():
        return StructuredVersionSource()
    logger.debug("helm version has no --template flag, parsing text output")
    return PatternVersionSource()


def fetch_versions(helm: HelmCommands) -> HelmVersions:
    """Query the current client and server versions.

    Raises:
        VersionQueryError: If the query command fails (e.g. no server component)
        VersionParseError: If the output cannot be understood
    """
    return select_source(helm).fetch(helm)
