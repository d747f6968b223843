"""
Shared fixtures for PartLookup backend tests.
"""
import pytest
import pytest_asyncio
import sys
import os
import zipfile
from io import BytesIO

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from openpyxl import Workbook

from app.db import PartStore
from app.schemas.parts import PartRecord


@pytest_asyncio.fixture
async def store(tmp_path):
    """An open part store on a temp database."""
    part_store = PartStore(tmp_path / "test.db")
    await part_store.open()
    yield part_store
    await part_store.close()


@pytest.fixture
def sample_parts():
    """A small lookup table mixing both numbering schemes."""
    return [
        PartRecord(part_number="4123", location="A-01-02", new_reference="NR-4123"),
        PartRecord(part_number="P0123", location="B-03-01"),
        PartRecord(part_number="P123", location="C-07-04"),
        PartRecord(part_number="A1", location="Shelf2"),
    ]


@pytest.fixture
def make_xlsx():
    """Build XLSX bytes from a list of rows (first row is the header)."""

    def _make(rows):
        workbook = Workbook()
        sheet = workbook.active
        for row in rows:
            sheet.append(list(row))
        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return _make


@pytest.fixture
def truncate_sheet_xml():
    """Rewrite XLSX bytes with the first worksheet's XML cut off halfway."""

    def _truncate(content):
        source = zipfile.ZipFile(BytesIO(content))
        buffer = BytesIO()
        with zipfile.ZipFile(buffer, "w") as target:
            for item in source.infolist():
                data = source.read(item.filename)
                if item.filename == "xl/worksheets/sheet1.xml":
                    data = data[: len(data) // 2]
                target.writestr(item, data)
        return buffer.getvalue()

    return _truncate
