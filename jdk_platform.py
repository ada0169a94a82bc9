"""
jdk_platform.py
===============
Translation between manifest vocabulary and the Adoptium API vocabulary.

  - ``map_platform("os", "macos")``   → ``"mac"``
  - ``map_platform("arch", "amd64")`` → ``"x64"``
  - ``extract_major_version("jdk-21.0.3+9")`` → ``21``

Lookups are exact: no case folding, no aliases.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping

from errors import UnknownPlatformError, VersionParseError


# ──────────────────────────────────────────────
#  Constants
# ──────────────────────────────────────────────

# Manifest "os" → Adoptium OS identifier
OS_MAPPING: Mapping[str, str] = MappingProxyType({
    "windows": "windows",
    "linux": "linux",
    "macos": "mac",
})

# Manifest "arch" → Adoptium arch identifier
ARCH_MAPPING: Mapping[str, str] = MappingProxyType({
    "amd64": "x64",
    "aarch64": "aarch64",
})

_TABLES: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "os": OS_MAPPING,
    "arch": ARCH_MAPPING,
})

# Temurin 8 releases are named jdk8u<update>-b<build>
LEGACY_PREFIX = "jdk8u"

_MAJOR_RE = re.compile(r"jdk-(\d+)")


# ──────────────────────────────────────────────
#  Platform Mapper
# ──────────────────────────────────────────────

def map_platform(kind: str, value: str) -> str:
    """
    Map a manifest os/arch token to the Adoptium API token.

    Args:
        kind:  ``"os"`` or ``"arch"``
        value: Token as written in the manifest

    Raises:
        UnknownPlatformError: ``value`` is not a key of the table
        ValueError:           ``kind`` is neither ``"os"`` nor ``"arch"``
    """
    try:
        table = _TABLES[kind]
    except KeyError:
        raise ValueError(f"Unknown mapping kind: {kind!r}") from None

    mapped = table.get(value)
    if mapped is None:
        raise UnknownPlatformError(kind, value, table.keys())
    return mapped


def map_os(value: str) -> str:
    return map_platform("os", value)


def map_arch(value: str) -> str:
    return map_platform("arch", value)


# ──────────────────────────────────────────────
#  Version Extractor
# ──────────────────────────────────────────────

def extract_major_version(version: str) -> int:
    """
    Extract the major Java version from a Temurin release name.

        jdk8u432-b06       → 8
        jdk-23+30-ea-beta  → 23
        jdk-21.0.3+9       → 21

    Raises:
        VersionParseError: neither naming scheme matches
    """
    if version.startswith(LEGACY_PREFIX):
        return 8

    match = _MAJOR_RE.search(version)
    if not match:
        raise VersionParseError(version)
    return int(match.group(1))
