"""Pinned third-party library versions per Spring Boot release line.

The table is keyed by ``major.minor``.  Requests for an unmapped, blank, or
malformed platform version fall back to the newest entry with a warning;
that is never an error.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping, NamedTuple

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class LibraryVersions(BaseModel):
    """Versions of every externally referenced library and build plugin."""

    model_config = ConfigDict(frozen=True)

    jjwt: str
    springdoc: str
    mapstruct: str
    lombok: str
    lombok_mapstruct_binding: str
    maven_compiler_plugin: str
    surefire_plugin: str
    failsafe_plugin: str
    jacoco_plugin: str
    enforcer_plugin: str
    versions_plugin: str
    dependency_check_plugin: str
    checkstyle: str
    junit: str
    dependency_management_plugin: str


def _row(
    jjwt: str, springdoc: str, mapstruct: str, lombok: str, compiler: str,
    surefire: str, jacoco: str, enforcer: str, versions: str,
    checkstyle: str, junit: str, dependency_management: str,
) -> LibraryVersions:
    return LibraryVersions(
        jjwt=jjwt,
        springdoc=springdoc,
        mapstruct=mapstruct,
        lombok=lombok,
        lombok_mapstruct_binding="0.2.0",
        maven_compiler_plugin=compiler,
        surefire_plugin=surefire,
        failsafe_plugin=surefire,
        jacoco_plugin=jacoco,
        enforcer_plugin=enforcer,
        versions_plugin=versions,
        dependency_check_plugin=checkstyle,
        checkstyle=checkstyle,
        junit=junit,
        dependency_management_plugin=dependency_management,
    )


VERSION_TABLE: Mapping[str, LibraryVersions] = MappingProxyType({
    "3.0": _row("0.11.5", "2.0.4", "1.5.3.Final", "1.18.26", "3.10.1",
                "3.0.0", "0.8.9", "3.2.2", "2.15.0", "10.12.0", "5.9.2", "1.1.0"),
    "3.1": _row("0.11.5", "2.2.0", "1.5.5.Final", "1.18.28", "3.11.0",
                "3.1.2", "0.8.10", "3.3.0", "2.16.0", "10.12.7", "5.9.3", "1.1.3"),
    "3.2": _row("0.12.3", "2.3.0", "1.5.5.Final", "1.18.30", "3.12.1",
                "3.2.5", "0.8.11", "3.4.1", "2.17.1", "10.18.2", "5.10.2", "1.1.4"),
    "3.3": _row("0.12.6", "2.6.0", "1.6.0", "1.18.34", "3.13.0",
                "3.3.1", "0.8.12", "3.5.0", "2.18.1", "10.20.2", "5.10.3", "1.1.6"),
    "3.4": _row("0.12.6", "2.7.0", "1.6.3", "1.18.36", "3.13.0",
                "3.5.2", "0.8.12", "3.5.0", "2.18.2", "10.21.0", "5.11.4", "1.1.7"),
})

LATEST_KEY = "3.4"


class ResolvedVersions(NamedTuple):
    """Result of a lookup: the table key used and whether it was a fallback."""
    key: str
    versions: LibraryVersions
    fallback: bool


class VersionResolver:
    """Pure lookup over a version table; performs no I/O."""

    def __init__(
        self,
        table: Mapping[str, LibraryVersions] = VERSION_TABLE,
        latest_key: str = LATEST_KEY,
    ) -> None:
        if latest_key not in table:
            raise ValueError(f"Latest key {latest_key!r} is not in the version table")
        self._table = table
        self._latest_key = latest_key

    @property
    def latest(self) -> LibraryVersions:
        return self._table[self._latest_key]

    def resolve(self, platform_version: str | None) -> ResolvedVersions:
        """Look up the table entry for *platform_version*.

        Only the leading two dot-separated components are significant, so
        ``3.3.5`` and ``3.3.0-SNAPSHOT`` both resolve to ``3.3``.
        """
        key = self.major_minor(platform_version)
        if key is not None and key in self._table:
            logger.debug("Resolved library versions for Spring Boot %s -> %s", platform_version, key)
            return ResolvedVersions(key, self._table[key], False)

        if not platform_version or not str(platform_version).strip():
            logger.warning("Spring Boot version not provided, using latest versions (%s)", self._latest_key)
        else:
            logger.warning(
                "No version mapping found for Spring Boot %s, using latest versions (%s)",
                platform_version, self._latest_key,
            )
        return ResolvedVersions(self._latest_key, self.latest, True)

    @staticmethod
    def major_minor(platform_version: str | None) -> str | None:
        """``3.3.5`` -> ``3.3``; ``None`` for blank or malformed input."""
        if platform_version is None:
            return None
        parts = str(platform_version).strip().split(".")
        if len(parts) < 2:
            return None
        major, minor = parts[0], parts[1]
        if not major.isdigit():
            return None
        digits = ""
        for ch in minor:
            if not ch.isdigit():
                break
            digits += ch
        if not digits:
            return None
        return f"{int(major)}.{int(digits)}"


_default_resolver = VersionResolver()


def resolve_versions(platform_version: str | None) -> LibraryVersions:
    """Shortcut returning only the pinned versions for *platform_version*."""
    return _default_resolver.resolve(platform_version).versions
