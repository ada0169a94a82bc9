"""
errors.py
=========
Exception hierarchy for the JDK manifest updater.

Every failure the updater can hit is an ``UpdaterError``. Errors are raised
where they are detected and travel up unchanged to ``JdkUpdater.run``,
which turns the first one into a failed ``Result``.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Optional


class UpdaterError(Exception):
    """Base class for all updater failures."""

    #: Label of the manifest entry being processed when the error was raised.
    entry: Optional[str] = None


# ──────────────────────────────────────────────
#  Manifest I/O
# ──────────────────────────────────────────────

class ManifestLoadError(UpdaterError):
    """The manifest file is unreadable or not well-formed."""

    def __init__(self, path: Any, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Could not load manifest {self.path}: {reason}")


class ManifestWriteError(UpdaterError):
    """The updated manifest could not be written back."""

    def __init__(self, path: Any, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Could not write manifest {self.path}: {reason}")


# ──────────────────────────────────────────────
#  Platform / version parsing
# ──────────────────────────────────────────────

class UnknownPlatformError(UpdaterError, LookupError):
    """A manifest os/arch token has no Adoptium equivalent."""

    def __init__(self, kind: str, value: str, valid: Iterable[str]) -> None:
        self.kind = kind
        self.value = value
        self.valid = sorted(valid)
        super().__init__(
            f"Key '{value}' not found. Available keys: [{', '.join(self.valid)}]"
        )


class VersionParseError(UpdaterError, ValueError):
    """No major version could be extracted from a version string."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"Major version not found in string: {version}")


# ──────────────────────────────────────────────
#  Adoptium API
# ──────────────────────────────────────────────

class FetchError(UpdaterError):
    """The release API answered with a non-success HTTP status."""

    def __init__(
        self,
        status: int,
        body: str = "",
        *,
        reason: str = "",
        url: str = "",
    ) -> None:
        self.status = status
        self.reason = reason
        self.body = body
        self.url = url
        super().__init__(
            f"Failed to fetch {url or 'latest release'}: "
            f"HTTP {status} {reason} {body}".rstrip()
        )


class MalformedResponseError(UpdaterError):
    """A successful API response lacks the fields the resolver needs."""

    def __init__(self, detail: str, payload: Any) -> None:
        self.detail = detail
        self.payload = payload
        super().__init__(f"Invalid data structure: {detail}: {_render(payload)}")


def _render(payload: Any) -> str:
    """Render a payload for an error message, falling back to repr()."""
    try:
        return json.dumps(payload)
    except (TypeError, ValueError):
        return repr(payload)
