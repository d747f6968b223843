#!/usr/bin/env python3
"""
Look up scanned part numbers read from stdin, one per line.

Point a keyboard-wedge barcode scanner at the terminal, or type numbers by
hand. End with Ctrl-D.

Usage:
    python scan_parts.py
    python scan_parts.py --db data/partlookup.db --cooldown 0
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from app.config import settings
from app.db import PartStore
from app.schemas.parts import Found, ResolutionResult
from app.services.lookup_state import LookupSession
from app.services.part_importer import PartImporter
from app.services.part_resolver import PartResolver
from app.services.scan_source import LineScanSource, run_scan_loop


def print_result(raw: str, result: ResolutionResult) -> None:
    if isinstance(result, Found):
        print(result.display_text)
    else:
        print(f"Error: {result.message}")
    print()


async def run(db_path: str | None, cooldown: float) -> int:
    async with PartStore(db_path or settings.db_path, timeout=settings.db_timeout_seconds) as store:
        session = LookupSession(PartResolver(store), PartImporter(store, csv_encoding=settings.csv_encoding))
        return await run_scan_loop(LineScanSource(sys.stdin), session, print_result, cooldown)


def main():
    parser = argparse.ArgumentParser(description="Resolve scanned part numbers to EMP locations")
    parser.add_argument("--db", help="Database file (default: settings.db_path)")
    parser.add_argument(
        "--cooldown",
        type=float,
        default=settings.scan_repeat_cooldown_seconds,
        help="Ignore the same code scanned again within this many seconds",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.WARNING)
    n = asyncio.run(run(args.db, args.cooldown))
    print(f"Handled {n} scans.")


if __name__ == "__main__":
    main()
