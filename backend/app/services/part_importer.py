"""
Import the part lookup table from CSV or XLSX files.

CSV layout (header checked, case-insensitive):
    PartNumber,EMP_Location

XLSX layout (first row is a header and is not checked):
    A: part number | B: new reference (optional) | C: EMP location

Rows without a location are skipped. Rows whose part number is blank after
trimming are skipped as well: the part number is the lookup key, so such a
row could never be found. A successful import replaces the whole table in one
transaction; a failed one leaves it as it was.
"""

import logging
import zipfile
import zlib
from collections.abc import Iterable, Sequence
from decimal import Decimal
from io import BytesIO, StringIO
from pathlib import PurePath
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from app.db import PartStore, StorageFault
from app.schemas.parts import ImportFailed, ImportRejected, ImportResult, ImportSucceeded, PartRecord
from app.services.part_resolver import UNSUPPORTED_INPUT

logger = logging.getLogger(__name__)

CSV_HEADER = "PartNumber,EMP_Location"

CSV_MIME_TYPES = ("text/csv", "text/comma-separated-values")
XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class InvalidFormatError(ValueError):
    """The file does not have the expected header/shape."""


def detect_file_kind(filename: str | None, content_type: str | None = None) -> str | None:
    """Infer "csv" or "xlsx" from the file extension or MIME type."""
    extension = PurePath(filename).suffix.lower().lstrip(".") if filename else ""
    if extension == "csv" or content_type in CSV_MIME_TYPES:
        return "csv"
    if extension == "xlsx" or content_type == XLSX_MIME_TYPE:
        return "xlsx"
    return None


def cell_text(value: Any) -> str | None:
    """
    Render a spreadsheet cell as trimmed text.

    Numbers come out as plain digits: 1000000.0 -> "1000000", never "1E6".
    Anything that is not a string or a number yields None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (float, Decimal)):
        number = Decimal(str(value))
        if not number.is_finite():
            return None
        if number == number.to_integral_value():
            return str(int(number))
        return format(number.normalize(), "f")
    return None


def parse_delimited(lines: Iterable[str]) -> list[PartRecord]:
    """Parse CSV lines (header first) into records."""
    it = iter(lines)
    header = next(it, None)
    if header is None or header.rstrip("\r\n").lower() != CSV_HEADER.lower():
        raise InvalidFormatError(f"Invalid CSV format. Expected header: {CSV_HEADER}")

    records = []
    for line in it:
        values = line.rstrip("\r\n").split(",")
        if len(values) < 2:
            continue
        part_number = values[0].strip()
        location = values[1].strip()
        if not part_number or not location:
            continue
        records.append(PartRecord(part_number=part_number, location=location))
    return records


def parse_tabular(rows: Iterable[Sequence[Any]]) -> list[PartRecord]:
    """Parse spreadsheet rows (header row first) into records."""
    records = []
    for index, row in enumerate(rows):
        if index == 0:
            continue
        part_number = _cell(row, 0)
        new_reference = _cell(row, 1)
        location = _cell(row, 2)
        if not part_number or not location:
            continue
        records.append(PartRecord(part_number=part_number, location=location, new_reference=new_reference))
    return records


def _cell(row: Sequence[Any], index: int) -> str | None:
    if row is None or index >= len(row):
        return None
    return cell_text(row[index])


class PartImporter:
    def __init__(self, store: PartStore, csv_encoding: str = "utf-8-sig"):
        self.store = store
        self.csv_encoding = csv_encoding

    async def import_delimited(self, lines: Iterable[str]) -> ImportResult:
        """Import CSV lines. The first line must be the PartNumber,EMP_Location header."""
        try:
            records = parse_delimited(lines)
        except InvalidFormatError as e:
            logger.warning(f"CSV import rejected: {e}")
            return ImportFailed(kind="invalid_format", message=str(e))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to import CSV: {e}")
            return ImportFailed(kind="io_error", message=f"Failed to import CSV: {e}")
        return await self._replace(records, "CSV")

    async def import_tabular(self, rows: Iterable[Sequence[Any]]) -> ImportResult:
        """Import spreadsheet rows; row 0 is a header and is skipped."""
        try:
            records = parse_tabular(rows)
        except (OSError, ValueError, KeyError, SyntaxError, zipfile.BadZipFile, zlib.error) as e:
            # read-only workbooks parse sheet XML lazily, while rows are iterated
            logger.error(f"Failed to import XLSX: {e}")
            return ImportFailed(kind="io_error", message=f"Failed to import XLSX: {e}")
        return await self._replace(records, "XLSX")

    async def import_file(self, content: bytes, kind: str | None) -> ImportResult:
        """Import raw file bytes of the given kind ("csv" or "xlsx")."""
        kind = (kind or "").lower()
        if kind == "csv":
            try:
                text = content.decode(self.csv_encoding)
            except UnicodeDecodeError as e:
                logger.error(f"Failed to import CSV: {e}")
                return ImportFailed(kind="io_error", message=f"Failed to import CSV: {e}")
            # only \r, \n and \r\n end a line; form feeds etc. stay in the field
            return await self.import_delimited(StringIO(text, newline=None))

        if kind == "xlsx":
            try:
                workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
            except (InvalidFileException, zipfile.BadZipFile, zlib.error, KeyError, OSError, ValueError, SyntaxError) as e:
                logger.error(f"Failed to import XLSX: {e}")
                return ImportFailed(kind="io_error", message=f"Failed to import XLSX: {e}")
            try:
                return await self.import_tabular(workbook.active.iter_rows(values_only=True))
            finally:
                workbook.close()

        logger.info(f"Unsupported file type: {kind or 'unknown'}")
        return ImportRejected(message=UNSUPPORTED_INPUT)

    async def _replace(self, records: list[PartRecord], label: str) -> ImportResult:
        try:
            count = await self.store.replace_all(records)
        except StorageFault as e:
            return ImportFailed(kind="storage_fault", message=f"Failed to import {label}: {e}")
        logger.info(f"Imported {count} parts from {label}")
        return ImportSucceeded(count=count)
