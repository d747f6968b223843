"""
Part lookup and table import API endpoints.
"""

import logging

from fastapi import APIRouter, File, Query, Request, Response, UploadFile

from app.db import PartStore
from app.schemas.parts import (
    Failed,
    ImportFailed,
    ImportRejected,
    ImportResult,
    NotFound,
    PartList,
    Rejected,
    ResolutionResult,
)
from app.services.lookup_state import LookupSession
from app.services.part_importer import detect_file_kind

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/parts", tags=["parts"])

_IMPORT_ERROR_STATUS = {
    "invalid_format": 422,
    "io_error": 400,
    "storage_fault": 503,
}


def _session(request: Request) -> LookupSession:
    return request.app.state.session


def _store(request: Request) -> PartStore:
    return request.app.state.store


@router.get("/lookup", response_model=ResolutionResult)
async def lookup_part(
    request: Request,
    response: Response,
    part_number: str = Query("", description="Scanned or typed part number"),
):
    """Resolve a scanned/typed part number to its storage location."""
    result = await _session(request).search(part_number)
    if isinstance(result, NotFound):
        response.status_code = 404
    elif isinstance(result, Rejected):
        response.status_code = 400
    elif isinstance(result, Failed):
        response.status_code = 503
    return result


@router.post("/import", response_model=ImportResult)
async def import_parts(request: Request, response: Response, file: UploadFile = File(...)):
    """Replace the part table with the contents of an uploaded CSV or XLSX file."""
    kind = detect_file_kind(file.filename, file.content_type)
    logger.debug(f"Upload {file.filename} ({file.content_type}) detected as {kind}")
    content = await file.read()
    result = await _session(request).import_file(content, kind)
    if isinstance(result, ImportRejected):
        response.status_code = 415
    elif isinstance(result, ImportFailed):
        response.status_code = _IMPORT_ERROR_STATUS[result.kind]
    return result


@router.get("", response_model=PartList)
async def list_parts(
    request: Request,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    """List stored parts ordered by part number."""
    store = _store(request)
    parts = await store.list_parts(limit, offset)
    total = await store.count_parts()
    return PartList(parts=parts, count=len(parts), total=total)


@router.get("/count")
async def count_parts(request: Request):
    """Number of parts in the lookup table."""
    return {"count": await _store(request).count_parts()}


@router.get("/state")
async def lookup_state(request: Request):
    """Current state of the last lookup/import call."""
    return _session(request).state.to_dict()
