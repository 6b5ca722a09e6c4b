"""
MarkPort v1 - Import Service Pydantic Models

API request/response models for the import service.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from .jobs import ImportJob, JobStatus


class ImportResult(BaseModel):
    """Counts reported when an import is accepted"""
    format: str = Field(..., description="Detected format (netscape, pinboard, pocket, instapaper)")
    total: int = Field(..., description="Bookmarks parsed from the file")
    skipped: int = Field(..., description="Bookmarks already in the store")
    imported: Optional[int] = Field(None, description="Bookmarks created (synchronous imports only)")
    failed: Optional[int] = Field(None, description="Bookmarks that failed (synchronous imports only)")


class ImportResponse(BaseModel):
    """Response model for POST /api/import"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    result: ImportResult
    job_id: Optional[str] = Field(
        None,
        alias="jobId",
        description="Job to poll; absent when the import finished synchronously",
    )


class ImportErrorResponse(BaseModel):
    """Error response for a rejected upload"""
    success: bool = False
    error: str = Field(..., description="Error message")


class ImportStatusResponse(BaseModel):
    """Response model for GET /api/import/status/{job_id}"""
    status: JobStatus
    imported: int
    skipped: int
    failed: int
    total: int
    format: str
    progress: int = Field(..., ge=0, le=100, description="Percent of new bookmarks processed")

    @classmethod
    def from_job(cls, job: ImportJob) -> "ImportStatusResponse":
        return cls(
            status=job.status,
            imported=job.imported,
            skipped=job.skipped,
            failed=job.failed,
            total=job.total,
            format=job.format.value,
            progress=job.progress,
        )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "processing",
                "imported": 120,
                "skipped": 14,
                "failed": 2,
                "total": 400,
                "format": "netscape",
                "progress": 32,
            }
        }
    )


class NotFoundResponse(BaseModel):
    """Unknown or expired job"""
    error: str = Field(..., description="Error message")


class FormatsResponse(BaseModel):
    """Supported import formats"""
    formats: list[str]


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    job_store: str
    bookmark_store: str
    active_jobs: int
