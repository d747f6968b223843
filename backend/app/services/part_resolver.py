"""
Resolve a scanned or typed part number to its storage location.

1. Normalize the raw value to a lookup key.
2. Look the key up in the part store.
3. If nothing matched and the key starts with "4", retry with the raw value:
   the "P4" rewrite is only right for labels of the new numbering scheme.
4. Format the hit for display, or report what was scanned.
"""

import logging

from app.db import PartStore, StorageFault
from app.schemas.parts import Failed, Found, NotFound, PartRecord, Rejected, ResolutionResult
from app.utils.part_numbers import normalize_part_number

logger = logging.getLogger(__name__)

DISPLAY_TITLE = "Part details"
UNSUPPORTED_INPUT = "unsupported input"


def format_part_details(record: PartRecord, key: str) -> str:
    """Build the multi-line "label: value" text shown for a found part."""
    lines = [DISPLAY_TITLE, f"scanned part number: {key}"]
    if key.startswith("4"):
        lines.append(f"New reference: {record.new_reference or 'N/A'}")
    lines.append(f"EMP location: {record.location}")
    return "\n".join(lines)


class PartResolver:
    def __init__(self, store: PartStore):
        self.store = store

    async def resolve(self, raw: str) -> ResolutionResult:
        if not raw:
            return Rejected(message=UNSUPPORTED_INPUT)

        key = normalize_part_number(raw)
        logger.debug(f"Original part number: {raw}, Processed: {key}")

        try:
            record = await self.store.get_part(key)
            if record is None and key.startswith("4") and key != raw:
                logger.debug(f"No match for {key}, retrying with scanned value {raw}")
                record = await self.store.get_part(raw)
        except StorageFault as e:
            logger.error(f"Error looking up part {raw}: {e}")
            return Failed(message=str(e) or "Unknown error occurred")

        if record is None:
            logger.warning(f"Part not found. Processed number: {key}")
            return NotFound(message=f"Part not found.\nNumber scanned: {key}")

        return Found(record=record, display_text=format_part_details(record, key))
