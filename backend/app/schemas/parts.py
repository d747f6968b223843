"""
Pydantic schemas for part records, lookup results and import results.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class PartRecord(BaseModel):
    """One row of the part lookup table."""

    part_number: str
    description: str = ""  # multi-line "label: value" payload, title line first
    location: str
    quantity: int = 0
    new_reference: str | None = None  # harmonized part number (spreadsheet import only)


# ─── Lookup results ──────────────────────────────────────────────────


class Found(BaseModel):
    status: Literal["found"] = "found"
    record: PartRecord
    display_text: str


class NotFound(BaseModel):
    status: Literal["not_found"] = "not_found"
    message: str


class Rejected(BaseModel):
    """Unusable input: empty string or unsupported file kind."""

    status: Literal["rejected"] = "rejected"
    message: str


class Failed(BaseModel):
    """Storage layer raised while looking up a part."""

    status: Literal["error"] = "error"
    message: str


ResolutionResult = Annotated[Found | NotFound | Rejected | Failed, Field(discriminator="status")]


# ─── Import results ──────────────────────────────────────────────────


class ImportSucceeded(BaseModel):
    status: Literal["imported"] = "imported"
    count: int


class ImportRejected(BaseModel):
    status: Literal["rejected"] = "rejected"
    message: str


class ImportFailed(BaseModel):
    status: Literal["error"] = "error"
    kind: Literal["invalid_format", "io_error", "storage_fault"]
    message: str


ImportResult = Annotated[ImportSucceeded | ImportRejected | ImportFailed, Field(discriminator="status")]


class PartList(BaseModel):
    parts: list[PartRecord] = Field(default_factory=list)
    count: int = 0
    total: int = 0
