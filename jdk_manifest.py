"""
jdk_manifest.py
===============
In-memory model of the pinned-JDK manifest (``.teamcity/jdks.yaml``).

File layout::

    jdks:
      - os: "linux"
        arch: "amd64"
        vendor: "temurin"
        version: "jdk-21.0.5+11"
        sha256: "3c654d98404c073b8a7e66bffb27f4ae3e7ede47d13284c132d40a83144bfd8c"
    <any other top-level keys, kept as-is>

The file is read once in ``Manifest.load`` and written at most once in
``Manifest.save``. Each entry wraps the mapping loaded from the file, so
keys keep their original order and only ``version``/``sha256`` of updated
entries ever change. Only entries of the vendor being updated are checked
for the five known fields; everything else is passed through untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List

import yaml

from errors import ManifestLoadError, ManifestWriteError

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
#  Constants
# ──────────────────────────────────────────────

DEFAULT_MANIFEST_PATH = Path(".teamcity") / "jdks.yaml"

JDKS_KEY = "jdks"

REQUIRED_KEYS = ("os", "arch", "vendor", "version", "sha256")


# ──────────────────────────────────────────────
#  YAML output
# ──────────────────────────────────────────────

class _QuotedStr(str):
    """String value to be written double-quoted."""


class _QuotedDumper(yaml.SafeDumper):
    """SafeDumper that double-quotes string values; keys stay plain."""


def _represent_quoted_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    return dumper.represent_scalar("tag:yaml.org,2002:str", str(data), style='"')


_QuotedDumper.add_representer(_QuotedStr, _represent_quoted_str)


def _quote_values(node: Any) -> Any:
    """Mark every string value (not mapping keys) for double-quoting."""
    if isinstance(node, dict):
        return {key: _quote_values(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_quote_values(item) for item in node]
    if isinstance(node, str):
        return _QuotedStr(node)
    return node


# ──────────────────────────────────────────────
#  JdkEntry
# ──────────────────────────────────────────────

@dataclass
class JdkEntry:
    """One pinned JDK record, backed by its mapping from the manifest."""

    data: Dict[str, Any]

    @property
    def platform(self) -> Any:
        return self.data.get("os")

    @property
    def architecture(self) -> Any:
        return self.data.get("arch")

    @property
    def vendor(self) -> Any:
        return self.data.get("vendor")

    @property
    def version(self) -> Any:
        return self.data.get("version")

    @property
    def sha256(self) -> Any:
        return self.data.get("sha256")

    @property
    def label(self) -> str:
        """Short identifier for log and error messages."""
        return f"{self.vendor} {self.version} {self.platform}/{self.architecture}"

    def validate(self) -> None:
        """
        Check the five fields the updater reads and writes.

        Raises:
            ValueError: a field is missing or is not a string
        """
        for key in REQUIRED_KEYS:
            if key not in self.data:
                raise ValueError(f"missing field '{key}'")
            if not isinstance(self.data[key], str):
                raise ValueError(f"field '{key}' must be a string, got {self.data[key]!r}")

    def apply_release(self, version: str, sha256: str) -> None:
        """Pin a new release. ``version`` and ``sha256`` always move together."""
        self.data["version"] = version
        self.data["sha256"] = sha256

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JdkEntry":
        return cls(data)


# ──────────────────────────────────────────────
#  Manifest
# ──────────────────────────────────────────────

class Manifest:
    """
    The whole manifest document.

    Args:
        path:     File the manifest was read from and is written back to
        document: Parsed top-level mapping (all keys, original order)
        entries:  Parsed ``jdks`` list
    """

    def __init__(
        self,
        path: str | Path,
        document: Dict[str, Any],
        entries: List[JdkEntry],
    ) -> None:
        self.path = Path(path)
        self.document = document
        self.entries = entries

    # ================================================================
    #  LOAD
    # ================================================================

    @classmethod
    def load(cls, path: str | Path = DEFAULT_MANIFEST_PATH) -> "Manifest":
        """
        Read and parse the manifest file.

        Raises:
            ManifestLoadError: unreadable file, invalid YAML, or a ``jdks``
                               value that is not a list of mappings
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ManifestLoadError(path, str(exc)) from exc

        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ManifestLoadError(path, f"invalid YAML: {exc}") from exc

        if not isinstance(document, dict):
            raise ManifestLoadError(path, "top level is not a mapping")

        raw_entries = document.get(JDKS_KEY)
        if not isinstance(raw_entries, list):
            raise ManifestLoadError(path, f"'{JDKS_KEY}' must be a list")

        entries: List[JdkEntry] = []
        for index, raw in enumerate(raw_entries):
            if not isinstance(raw, dict):
                raise ManifestLoadError(path, f"{JDKS_KEY}[{index}] is not a mapping")
            entries.append(JdkEntry.from_dict(raw))

        logger.debug("Loaded %d JDK entries from %s", len(entries), path)
        return cls(path, document, entries)

    # ================================================================
    #  SERIALIZE
    # ================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Top-level document with ``jdks`` replaced by the current entries."""
        data = dict(self.document)
        data[JDKS_KEY] = [entry.to_dict() for entry in self.entries]
        return data

    def dumps(self) -> str:
        return yaml.dump(
            _quote_values(self.to_dict()),
            Dumper=_QuotedDumper,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )

    def save(self) -> None:
        """
        Overwrite the manifest file with the current entries.

        Raises:
            ManifestWriteError: the file could not be written
        """
        text = self.dumps()
        try:
            with open(self.path, "w", encoding="utf-8") as fh:
                fh.write(text)
        except OSError as exc:
            raise ManifestWriteError(self.path, str(exc)) from exc
        logger.debug("Wrote %d bytes to %s", len(text), self.path)

    # ================================================================
    #  QUERIES
    # ================================================================

    def eligible_entries(self, vendor: str) -> List[JdkEntry]:
        """
        Entries managed by ``vendor``, in manifest order, each validated.

        Raises:
            ManifestLoadError: a ``vendor`` entry lacks a known field or
                               holds a non-string value in one
        """
        eligible: List[JdkEntry] = []
        for index, entry in enumerate(self.entries):
            if entry.vendor != vendor:
                continue
            try:
                entry.validate()
            except ValueError as exc:
                raise ManifestLoadError(self.path, f"{JDKS_KEY}[{index}]: {exc}") from exc
            eligible.append(entry)
        return eligible

    def __iter__(self) -> Iterator[JdkEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
