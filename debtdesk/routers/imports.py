"""
DebtDesk - Account Import Router

Endpoints:
    POST /api/v1/imports/accounts          - Validate an uploaded spreadsheet
    GET  /api/v1/imports/accounts/template - Download the example template

The upload endpoint answers 200 whenever the file could be decoded, even if
every row failed: the full errors list is returned so the operator can fix
the source file and re-upload. Whether a partial result is acceptable for
bulk insert is the caller's decision.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from ..core.config import get_settings
from ..core.errors import ErrorResponse, PayloadTooLargeError
from ..ingest.pipeline import ingest_file
from ..ingest.template import generate_template, template_download

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/imports", tags=["Imports"])


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------


class RowErrorOut(BaseModel):
    """One row diagnostic."""

    row: int = Field(..., description="1-based row number in the uploaded file")
    message: str
    code: str = Field(..., description="Stable machine-readable error code")
    field: Optional[str] = None


class ImportSummary(BaseModel):
    rows: int
    records: int
    errors: int
    structural: bool


class ImportResponse(BaseModel):
    """Validated accounts plus every row error found."""

    records: list[dict[str, Any]]
    errors: list[RowErrorOut]
    summary: ImportSummary


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/accounts",
    response_model=ImportResponse,
    responses={
        400: {"model": ErrorResponse, "description": "File could not be decoded"},
        413: {"model": ErrorResponse, "description": "Upload too large"},
    },
    summary="Validate an account spreadsheet",
)
async def import_accounts(
    file: Annotated[UploadFile, File(description="Spreadsheet (.xlsx or .csv)")],
    accumulate: Optional[bool] = Query(
        None, description="Report every failing check per row, not only the first"
    ),
) -> ImportResponse:
    settings = get_settings()

    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    # One byte past the limit is enough to reject without buffering the rest
    limit = settings.IMPORT_MAX_UPLOAD_BYTES
    content = await file.read(limit + 1)
    if len(content) > limit:
        raise PayloadTooLargeError(limit)

    logger.info(f"Account import started: {file.filename} ({len(content)} bytes)")

    if accumulate is None:
        accumulate = settings.IMPORT_ACCUMULATE_ROW_ERRORS

    # Decoding and row validation block, so they run in a worker thread
    result = await run_in_threadpool(
        ingest_file, content, filename=file.filename, accumulate=accumulate
    )
    return ImportResponse(**result.to_dict())


@router.get(
    "/accounts/template",
    response_class=Response,
    summary="Download the account import template",
)
async def download_template(
    fmt: str = Query("xlsx", alias="format", pattern="^(xlsx|csv)$"),
) -> Response:
    download = template_download(fmt)
    return Response(
        content=generate_template(fmt),
        media_type=download["media_type"],
        headers={"Content-Disposition": f'attachment; filename="{download["filename"]}"'},
    )
