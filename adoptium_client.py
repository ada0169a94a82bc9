"""
adoptium_client.py
==================
Release Resolver: looks up the newest Eclipse Temurin build for a manifest
entry through the Adoptium API v3.

Endpoint::

    GET {ADOPTIUM_API}/assets/latest/{major}/hotspot
        ?os={os}&architecture={arch}&image_type=jdk

Response (trimmed)::

    [
      {
        "binary": {
          "architecture": "x64",
          "image_type": "jdk",
          "os": "linux",
          "package": {
            "checksum": "b4dad70ce4206cbd...",
            "link": "https://github.com/adoptium/temurin8-binaries/...tar.gz",
            ...
          },
          "updated_at": "2024-10-18T12:59:11Z"
        },
        "release_name": "jdk8u432-b06",
        "version": {"semver": "8.0.432+6", ...}
      },
      ...
    ]

The API returns the newest release first; that order is trusted as-is.
One GET per call, no retries and no caching.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import aiohttp

from errors import FetchError, MalformedResponseError, UpdaterError
from jdk_manifest import JdkEntry
from jdk_platform import extract_major_version, map_arch, map_os

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
#  Constants
# ──────────────────────────────────────────────

ADOPTIUM_API = "https://api.adoptium.net/v3"

SUPPORTED_VENDOR = "temurin"

JVM_IMPL = "hotspot"
IMAGE_TYPE = "jdk"


# ──────────────────────────────────────────────
#  Release Dataclass
# ──────────────────────────────────────────────

@dataclass
class Release:
    """The fields of one release descriptor that the updater uses."""

    release_name: str              # e.g. "jdk-21.0.5+11"
    sha256: str                    # binary.package.checksum
    semver: str = ""               # version.semver, for log output

    @classmethod
    def from_payload(cls, payload: Any) -> "Release":
        """
        Validate the shape of a release descriptor and extract its fields.

        Raises:
            MalformedResponseError: ``release_name`` or
                                    ``binary.package.checksum`` is missing
        """
        if not isinstance(payload, dict):
            raise MalformedResponseError("release descriptor is not an object", payload)

        release_name = payload.get("release_name")
        if not isinstance(release_name, str) or not release_name:
            raise MalformedResponseError("expected release_name", payload)

        binary = payload.get("binary")
        package = binary.get("package") if isinstance(binary, dict) else None
        checksum = package.get("checksum") if isinstance(package, dict) else None
        if not isinstance(checksum, str) or not checksum:
            raise MalformedResponseError("expected binary.package.checksum", payload)

        version_data = payload.get("version")
        semver = version_data.get("semver", "") if isinstance(version_data, dict) else ""

        return cls(
            release_name=release_name,
            sha256=checksum,
            semver=semver or "",
        )


# ──────────────────────────────────────────────
#  AdoptiumClient
# ──────────────────────────────────────────────

class AdoptiumClient:
    """
    Minimal client for the Adoptium "latest assets" endpoint.

    Args:
        base_url: API root, e.g. ``https://api.adoptium.net/v3``
    """

    def __init__(self, base_url: str = ADOPTIUM_API) -> None:
        self.base_url = base_url.rstrip("/")

    def latest_url(self, major: int, os_id: str, arch_id: str) -> str:
        """Build the latest-release URL for a major version and platform."""
        return (
            f"{self.base_url}/assets/latest/{major}/{JVM_IMPL}"
            f"?os={os_id}&architecture={arch_id}&image_type={IMAGE_TYPE}"
        )

    async def fetch_latest(
        self,
        major: int,
        os_id: str,
        arch_id: str,
        session: aiohttp.ClientSession,
    ) -> Release:
        """
        Fetch the newest JDK release for ``major`` on ``os_id``/``arch_id``.

        Args:
            major:   Major Java version (8, 11, 17, 21, ...)
            os_id:   Adoptium OS identifier (linux, windows, mac)
            arch_id: Adoptium arch identifier (x64, aarch64)
            session: aiohttp session for the request

        Raises:
            FetchError:             non-200 response
            MalformedResponseError: body is not a non-empty JSON list of
                                    well-formed release descriptors
        """
        api_url = self.latest_url(major, os_id, arch_id)
        logger.debug("Querying Adoptium API: %s", api_url)

        async with session.get(api_url) as resp:
            raw = await resp.read()
            if resp.status != 200:
                logger.error(
                    "Adoptium API returned %d for Java %d", resp.status, major
                )
                body = raw.decode("utf-8", errors="replace")
                raise FetchError(resp.status, body, reason=resp.reason or "", url=api_url)

        try:
            body = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedResponseError(
                f"response is not UTF-8 ({exc})", raw.decode("utf-8", errors="replace")
            ) from exc

        try:
            releases = json.loads(body)
        except ValueError as exc:
            raise MalformedResponseError(f"response is not JSON ({exc})", body) from exc

        if not isinstance(releases, list) or not releases:
            raise MalformedResponseError(
                f"expected a non-empty list of releases for JDK {major}", releases
            )

        release = Release.from_payload(releases[0])
        logger.debug(
            "Latest Java %d for %s/%s: %s (%s)",
            major, os_id, arch_id, release.release_name, release.semver,
        )
        return release

    async def resolve(
        self,
        entry: JdkEntry,
        session: aiohttp.ClientSession,
    ) -> Release:
        """
        Resolve the newest release matching a manifest entry's major
        version, OS and architecture.

        Any ``UpdaterError`` raised on the way gets ``entry`` set to the
        entry's label before propagating.
        """
        try:
            major = extract_major_version(entry.version)
            os_id = map_os(entry.platform)
            arch_id = map_arch(entry.architecture)
            return await self.fetch_latest(major, os_id, arch_id, session)
        except UpdaterError as exc:
            exc.entry = entry.label
            raise
