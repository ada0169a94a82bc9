#!/usr/bin/env python3
"""
main.py – Temurin JDK manifest updater
======================================
Entry point: refresh the Temurin entries of ``.teamcity/jdks.yaml`` from the
Adoptium API and rewrite the file if any pinned release is stale.

Exit codes: 0 when the manifest is current or was rewritten, 1 on failure.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from adoptium_client import ADOPTIUM_API, SUPPORTED_VENDOR, AdoptiumClient
from jdk_manifest import DEFAULT_MANIFEST_PATH
from jdk_updater import JdkUpdater, Result

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("temurin_jdk_updater")


# ──────────────────────────────────────────────
#  CLI
# ──────────────────────────────────────────────

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Update pinned Temurin JDKs in the manifest to the latest releases",
    )
    p.add_argument(
        "--manifest",
        default=os.environ.get("JDK_MANIFEST", str(DEFAULT_MANIFEST_PATH)),
        help="Path to the JDK manifest (env: JDK_MANIFEST)",
    )
    p.add_argument(
        "--api-url",
        default=os.environ.get("ADOPTIUM_API_URL", ADOPTIUM_API),
        help="Adoptium API root (env: ADOPTIUM_API_URL)",
    )
    p.add_argument("--vendor", default=SUPPORTED_VENDOR, help="Vendor to update")
    p.add_argument("--dry-run", action="store_true", help="Report updates without writing")
    p.add_argument("--log-file", default=None, help="Also write logs to this file")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return p.parse_args(argv)


# ──────────────────────────────────────────────
#  Logging
# ──────────────────────────────────────────────

def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


# ──────────────────────────────────────────────
#  Output
# ──────────────────────────────────────────────

def print_summary(result: Result, console: Console) -> None:
    """Render the run outcome."""
    if not result.success:
        console.print(f"[bold red]✗[/] {escape(result.message)}")
        return

    updates = result.details.get("updates", [])
    if updates:
        t = Table(title="JDK Updates")
        t.add_column("Entry", style="cyan")
        t.add_column("From", style="white")
        t.add_column("To", style="green")
        t.add_column("SHA-256", style="dim")
        for u in updates:
            t.add_row(u["label"], u["old_version"], u["new_version"], u["new_sha256"])
        console.print(t)

    console.print(f"[bold green]✓[/] {escape(result.message)}")


# ──────────────────────────────────────────────
#  Entry Point
# ──────────────────────────────────────────────

def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    updater = JdkUpdater(
        args.manifest,
        client=AdoptiumClient(args.api_url),
        vendor=args.vendor,
        dry_run=args.dry_run,
    )
    logger.info("Checking %s for %s updates", updater.manifest_path, updater.vendor)
    result = asyncio.run(updater.run())

    print_summary(result, Console())
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
