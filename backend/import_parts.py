#!/usr/bin/env python3
"""
Replace the part lookup table with the contents of a CSV or XLSX file.

Usage:
    python import_parts.py --file data/templates/parts.csv
    python import_parts.py --file locations.xlsx
    CSV: PartNumber,EMP_Location
    XLSX: part number | new reference | EMP location (first row is a header)
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from app.config import settings
from app.db import PartStore
from app.schemas.parts import ImportSucceeded
from app.services.part_importer import PartImporter, detect_file_kind


async def run(filepath: str, kind: str | None = None, db_path: str | None = None) -> int | None:
    """Import the file. Returns the number of parts stored, or None on failure."""
    path = Path(filepath)
    if not path.exists():
        print(f"Error: file not found: {path}")
        return None
    kind = kind or detect_file_kind(path.name)
    async with PartStore(db_path or settings.db_path, timeout=settings.db_timeout_seconds) as store:
        importer = PartImporter(store, csv_encoding=settings.csv_encoding)
        result = await importer.import_file(path.read_bytes(), kind)
    if isinstance(result, ImportSucceeded):
        return result.count
    print(f"Error: {result.message}")
    return None


def main():
    parser = argparse.ArgumentParser(description="Import the part lookup table from CSV or XLSX")
    parser.add_argument("--file", required=True, help="Path to CSV or XLSX")
    parser.add_argument("--kind", choices=("csv", "xlsx"), help="File kind (default: from extension)")
    parser.add_argument("--db", help="Database file (default: settings.db_path)")
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
    n = asyncio.run(run(args.file, args.kind, args.db))
    if n is None:
        sys.exit(1)
    print(f"Imported {n} parts.")


if __name__ == "__main__":
    main()
