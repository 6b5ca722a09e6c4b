"""
MarkPort v1 - Import Routes

Upload a bookmark export and poll the resulting import job.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from config import get_config
from importer import BookmarkImportError
from importer.parsers import get_registry

from ..models import (
    FormatsResponse,
    ImportErrorResponse,
    ImportResponse,
    ImportResult,
    ImportStatusResponse,
    NotFoundResponse,
)
from ..orchestrator import ImportOrchestrator
from ..store import BookmarkStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/import", tags=["Import"])

JOB_NOT_FOUND = "Job not found or expired"


def get_user_id() -> str:
    """Get the acting user from configuration"""
    return get_config().app.default_user_id


def get_orchestrator(request: Request) -> ImportOrchestrator:
    return request.app.state.orchestrator


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ImportErrorResponse(error=message).model_dump(),
    )


@router.post(
    "",
    response_model=ImportResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ImportErrorResponse, "description": "Missing, empty or unrecognized file"},
        413: {"model": ImportErrorResponse, "description": "File too large"},
        500: {"model": ImportErrorResponse, "description": "Bookmark store error"},
    },
)
async def import_bookmarks(
    request: Request,
    orchestrator: ImportOrchestrator = Depends(get_orchestrator),
    user_id: str = Depends(get_user_id),
):
    """
    Import bookmarks from an uploaded export file.

    The multipart field "file" may hold a Netscape HTML, Pinboard JSON,
    Pocket CSV or Instapaper CSV export; the format is detected from the
    content. Bookmarks already in the store are skipped. When anything is
    left to create, the response carries a jobId to poll.
    """
    try:
        form = await request.form()
    except Exception as e:
        logger.warning(f"Invalid form data: {e}")
        return error_response(400, "Invalid form data")

    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        return error_response(400, "No file provided")

    max_bytes = orchestrator.settings.max_upload_bytes
    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        return error_response(413, "File is too large")

    try:
        content = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return error_response(400, "File is not valid UTF-8 text")

    logger.info(f"Import upload: filename={upload.filename!r}, bytes={len(data)}")

    try:
        outcome = await orchestrator.start_import(user_id, content)
    except BookmarkImportError as e:
        return error_response(400, str(e))
    except BookmarkStoreError as e:
        logger.error(f"Could not list existing bookmarks: {e}")
        return error_response(500, "Could not read existing bookmarks")

    return ImportResponse(
        result=ImportResult(
            format=outcome.format.value,
            total=outcome.total,
            skipped=outcome.skipped,
            imported=outcome.imported,
            failed=outcome.failed,
        ),
        job_id=outcome.job_id,
    )


@router.get(
    "/status/{job_id}",
    response_model=ImportStatusResponse,
    responses={404: {"model": NotFoundResponse, "description": "Unknown or expired job"}},
)
async def import_status(
    job_id: str,
    orchestrator: ImportOrchestrator = Depends(get_orchestrator),
    user_id: str = Depends(get_user_id),
):
    """Get the progress of an import job."""
    job = await orchestrator.get_status(job_id)
    if job is None or job.user_id != user_id:
        return JSONResponse(status_code=404, content={"error": JOB_NOT_FOUND})
    return ImportStatusResponse.from_job(job)


@router.get("/formats", response_model=FormatsResponse)
async def list_formats():
    """List the supported export formats."""
    return FormatsResponse(formats=get_registry().list_formats())
