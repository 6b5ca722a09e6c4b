"""
MarkPort v1 - Import Job State

The ImportJob model and the job store interface, with an in-memory
implementation. Job state is not durable: a restart forgets every job and
later status requests for those ids get a 404.
"""

import logging
import math
import threading
import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, Optional, Protocol

from pydantic import BaseModel, Field

from importer.models import ImportFormat

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    """Lifecycle states of an import job"""

    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"


def progress_percent(imported: int, failed: int, total: int, skipped: int) -> int:
    """
    Percentage of the job's new entries already processed.

    Rounds half up and reports 100 when there was nothing to process.
    """
    pending = total - skipped
    if pending <= 0:
        return 100
    return min(100, math.floor(100 * (imported + failed) / pending + 0.5))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ImportJob(BaseModel):
    """Progress of one asynchronous import"""

    id: str
    user_id: str
    status: JobStatus = JobStatus.PROCESSING
    format: ImportFormat
    total: int = Field(ge=0)
    skipped: int = Field(ge=0)
    imported: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    finished_at: Optional[datetime] = None

    @property
    def pending(self) -> int:
        """Entries the worker has to create"""
        return self.total - self.skipped

    @property
    def remaining(self) -> int:
        return self.pending - self.imported - self.failed

    @property
    def progress(self) -> int:
        return progress_percent(self.imported, self.failed, self.total, self.skipped)

    @property
    def is_terminal(self) -> bool:
        return self.status != JobStatus.PROCESSING


class JobStore(Protocol):
    """
    Storage for import job state.

    One worker writes a job while any number of status requests read it;
    every method applies or returns a complete snapshot.
    """

    async def create(
        self, user_id: str, format: ImportFormat, total: int, skipped: int
    ) -> ImportJob:
        ...

    async def get(self, job_id: str) -> Optional[ImportJob]:
        ...

    async def update_progress(
        self, job_id: str, imported: int = 0, failed: int = 0
    ) -> Optional[ImportJob]:
        ...

    async def mark_complete(self, job_id: str) -> Optional[ImportJob]:
        ...

    async def mark_failed(self, job_id: str, error: str) -> Optional[ImportJob]:
        ...

    async def purge_expired(self) -> int:
        ...

    async def ping(self) -> bool:
        ...


class InMemoryJobStore:
    """
    Process-local job store.

    Jobs live in a dict guarded by a lock; readers get copies so they never
    observe a partially applied update. Terminal jobs expire ttl_seconds
    after they finish.
    """

    def __init__(
        self,
        ttl_seconds: int = 3600,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._jobs: Dict[str, ImportJob] = {}
        self._lock = threading.Lock()

    def _is_expired(self, job: ImportJob, now: datetime) -> bool:
        return job.finished_at is not None and now - job.finished_at >= self.ttl

    def _purge_locked(self, now: datetime) -> int:
        expired = [job_id for job_id, job in self._jobs.items() if self._is_expired(job, now)]
        for job_id in expired:
            del self._jobs[job_id]
        return len(expired)

    async def create(
        self, user_id: str, format: ImportFormat, total: int, skipped: int
    ) -> ImportJob:
        now = self._clock()
        job = ImportJob(
            id=uuid.uuid4().hex,
            user_id=user_id,
            format=format,
            total=total,
            skipped=skipped,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._purge_locked(now)
            self._jobs[job.id] = job
            return job.model_copy()

    async def get(self, job_id: str) -> Optional[ImportJob]:
        now = self._clock()
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            if self._is_expired(job, now):
                del self._jobs[job_id]
                return None
            return job.model_copy()

    async def update_progress(
        self, job_id: str, imported: int = 0, failed: int = 0
    ) -> Optional[ImportJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job.is_terminal:
                return None

            # Never count more entries than the job was created with
            imported = max(0, min(imported, job.remaining))
            failed = max(0, min(failed, job.remaining - imported))
            job.imported += imported
            job.failed += failed
            job.updated_at = self._clock()
            return job.model_copy()

    async def mark_complete(self, job_id: str) -> Optional[ImportJob]:
        return self._finish(job_id, JobStatus.COMPLETE)

    async def mark_failed(self, job_id: str, error: str) -> Optional[ImportJob]:
        return self._finish(job_id, JobStatus.FAILED, error)

    def _finish(
        self, job_id: str, status: JobStatus, error: Optional[str] = None
    ) -> Optional[ImportJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job.is_terminal:
                return None
            now = self._clock()
            job.status = status
            job.error = error
            job.updated_at = now
            job.finished_at = now
            return job.model_copy()

    async def purge_expired(self) -> int:
        with self._lock:
            return self._purge_locked(self._clock())

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
