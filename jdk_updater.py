"""
jdk_updater.py
==============
Update orchestration for the pinned-JDK manifest.

Run lifecycle::

    IDLE → LOADED → SCANNING ─┬─ UNCHANGED ─────────────→ DONE
                              ├─ CHANGED → WRITTEN ─────→ DONE
                              └─ (any error) ───────────→ FAILED

Entries are resolved one at a time, in manifest order. The manifest is
written only after every eligible entry resolved successfully and at least
one of them changed; on failure the file on disk is left untouched.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiohttp

from adoptium_client import SUPPORTED_VENDOR, AdoptiumClient
from errors import UpdaterError
from jdk_manifest import DEFAULT_MANIFEST_PATH, JdkEntry, Manifest

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
#  Result Object
# ──────────────────────────────────────────────

@dataclass
class Result:
    """Unified result for JdkUpdater runs."""

    success: bool
    message: str
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, **details: Any) -> "Result":
        return cls(success=True, message=message, details=details)

    @classmethod
    def fail(cls, message: str, error: Optional[str] = None, **details: Any) -> "Result":
        return cls(success=False, message=message, error=error, details=details)


# ──────────────────────────────────────────────
#  Run State
# ──────────────────────────────────────────────

class RunState(Enum):
    IDLE = "idle"
    LOADED = "loaded"
    SCANNING = "scanning"
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    WRITTEN = "written"
    DONE = "done"
    FAILED = "failed"


@dataclass
class EntryUpdate:
    """One entry whose pinned release moved during a run."""

    label: str
    old_version: str
    new_version: str
    new_sha256: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "label": self.label,
            "old_version": self.old_version,
            "new_version": self.new_version,
            "new_sha256": self.new_sha256,
        }


# ──────────────────────────────────────────────
#  JdkUpdater
# ──────────────────────────────────────────────

class JdkUpdater:
    """
    Bring every vendor-managed manifest entry up to the latest release.

    Args:
        manifest_path: Path to the manifest YAML file
        client:        Release resolver (a default ``AdoptiumClient`` if None)
        vendor:        Vendor whose entries are updated; others are left alone
        dry_run:       Resolve and report, but never write the manifest
    """

    def __init__(
        self,
        manifest_path: str | Path = DEFAULT_MANIFEST_PATH,
        client: Optional[AdoptiumClient] = None,
        vendor: str = SUPPORTED_VENDOR,
        dry_run: bool = False,
    ) -> None:
        self.manifest_path = Path(manifest_path)
        self.client = client or AdoptiumClient()
        self.vendor = vendor
        self.dry_run = dry_run
        self.state = RunState.IDLE
        self.manifest: Optional[Manifest] = None
        self._updates: List[EntryUpdate] = []
        self._current: Optional[str] = None

    @property
    def updates(self) -> List[EntryUpdate]:
        """Entries changed by the last run (empty if it failed)."""
        return list(self._updates)

    # ================================================================
    #  RUN
    # ================================================================

    async def run(self, session: Optional[aiohttp.ClientSession] = None) -> Result:
        """
        Execute one update pass.

        Args:
            session: aiohttp session to reuse; one is opened and closed
                     around the run when omitted

        Returns:
            ``Result.ok`` when the manifest is current or was rewritten,
            ``Result.fail`` naming the failing entry and reason otherwise
        """
        self.state = RunState.IDLE
        self.manifest = None
        self._updates = []
        self._current = None

        try:
            if session is None:
                async with aiohttp.ClientSession() as own_session:
                    return await self._run(own_session)
            return await self._run(session)
        except (UpdaterError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
            self.state = RunState.FAILED
            self.manifest = None
            self._updates = []
            entry = getattr(exc, "entry", None) or self._current
            reason = str(exc) or type(exc).__name__
            message = f"{entry}: {reason}" if entry else reason
            logger.error("Update failed: %s", message)
            return Result.fail(
                f"Action failed with error: {message}",
                error=type(exc).__name__,
                entry=entry,
            )

    async def _run(self, session: aiohttp.ClientSession) -> Result:
        manifest = Manifest.load(self.manifest_path)
        eligible = manifest.eligible_entries(self.vendor)
        self.manifest = manifest
        self.state = RunState.LOADED
        logger.debug(
            "%d of %d entries managed by %s", len(eligible), len(manifest), self.vendor
        )

        self.state = RunState.SCANNING
        updates: List[EntryUpdate] = []
        for entry in eligible:
            logger.debug("jdk: %s", entry.to_dict())
            self._current = entry.label
            update = await self._update_entry(entry, session)
            if update:
                updates.append(update)

        self._current = None
        self._updates = updates

        if not updates:
            self.state = RunState.UNCHANGED
            logger.info("No updates found. Exiting.")
            self.state = RunState.DONE
            return Result.ok("No updates found", changed=False, updates=[])

        self.state = RunState.CHANGED
        if self.dry_run:
            logger.info("Dry run: %d update(s) not written", len(updates))
            self.state = RunState.DONE
            return Result.ok(
                f"{len(updates)} update(s) found (dry run, manifest not written)",
                changed=True,
                written=False,
                updates=[u.to_dict() for u in updates],
            )

        manifest.save()
        self.state = RunState.WRITTEN
        logger.info("YAML file updated successfully")
        self.state = RunState.DONE
        return Result.ok(
            f"Updated {len(updates)} JDK entr{'y' if len(updates) == 1 else 'ies'}",
            changed=True,
            written=True,
            path=str(manifest.path),
            updates=[u.to_dict() for u in updates],
        )

    async def _update_entry(
        self,
        entry: JdkEntry,
        session: aiohttp.ClientSession,
    ) -> Optional[EntryUpdate]:
        """Resolve one entry and pin the new release if it differs."""
        label = entry.label
        release = await self.client.resolve(entry, session)
        if release.release_name == entry.version:
            logger.debug("%s is up to date", label)
            return None

        logger.info("Updating %s to version %s", entry.version, release.release_name)
        update = EntryUpdate(
            label=label,
            old_version=entry.version,
            new_version=release.release_name,
            new_sha256=release.sha256,
        )
        entry.apply_release(release.release_name, release.sha256)
        return update
