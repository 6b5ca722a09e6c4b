"""
MarkPort v1 - Import Orchestrator

Runs an import from raw file content to created bookmark records:
parse, deduplicate against the user's store, then either answer right away
(nothing new) or start a background job and return its id.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Set

from config import ImportSettings
from importer import ImportFormat, ParsedBookmark, collect_base_urls, parse_bookmark_file, partition

from .jobs import ImportJob, JobStore
from .store import BookmarkStore, BookmarkStoreUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class ImportOutcome:
    """
    What the initiating request reports back.

    job_id is set when creation continues in the background; imported and
    failed are set only when the import finished synchronously.
    """
    format: ImportFormat
    total: int
    skipped: int
    job_id: Optional[str] = None
    imported: Optional[int] = None
    failed: Optional[int] = None

    @property
    def is_async(self) -> bool:
        return self.job_id is not None


class ImportOrchestrator:
    """
    Owns import jobs from creation to their terminal state.

    Workers run as asyncio tasks on the current event loop. Each job has a
    single worker writing its progress through the job store.
    """

    def __init__(
        self,
        job_store: JobStore,
        bookmark_store: BookmarkStore,
        settings: Optional[ImportSettings] = None,
    ):
        self.job_store = job_store
        self.bookmark_store = bookmark_store
        self.settings = settings or ImportSettings()
        self._tasks: Set[asyncio.Task] = set()

    async def start_import(self, user_id: str, content: str) -> ImportOutcome:
        """
        Parse, deduplicate and start creating bookmarks for an uploaded file.

        Args:
            user_id: Owner of the bookmarks
            content: Raw file content

        Returns:
            ImportOutcome; has a job_id when a background job was started

        Raises:
            EmptyFileError: If the content is blank
            UnrecognizedFormatError: If the format cannot be detected
            BookmarkStoreError: If existing bookmarks cannot be listed
        """
        parsed = await asyncio.to_thread(parse_bookmark_file, content)
        total = len(parsed.bookmarks)

        existing = collect_base_urls(await self.bookmark_store.list_urls(user_id))
        dedup = partition(parsed.bookmarks, existing)

        logger.info(
            f"Import for {user_id}: format={parsed.format.value}, total={total}, "
            f"new={len(dedup.new)}, skipped={dedup.skipped_count}"
        )

        if not dedup.new:
            return ImportOutcome(
                format=parsed.format,
                total=total,
                skipped=dedup.skipped_count,
                imported=0,
                failed=0,
            )

        job = await self.job_store.create(
            user_id=user_id,
            format=parsed.format,
            total=total,
            skipped=dedup.skipped_count,
        )
        self._spawn(job, dedup.new)
        logger.info(f"Started import job {job.id} with {len(dedup.new)} bookmarks")

        return ImportOutcome(
            format=parsed.format,
            total=total,
            skipped=dedup.skipped_count,
            job_id=job.id,
        )

    async def get_status(self, job_id: str) -> Optional[ImportJob]:
        """Current snapshot of a job, or None if unknown or expired"""
        return await self.job_store.get(job_id)

    def _spawn(self, job: ImportJob, bookmarks: List[ParsedBookmark]) -> None:
        task = asyncio.create_task(
            self.run_job(job, bookmarks), name=f"import-job-{job.id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                f"Import task {task.get_name()} crashed",
                exc_info=task.exception(),
            )

    async def run_job(self, job: ImportJob, bookmarks: List[ParsedBookmark]) -> Optional[ImportJob]:
        """
        Create every bookmark of a job and drive it to a terminal state.

        Bookmarks are created in batches with a bounded number of creates in
        flight; progress is recorded once per batch. A failed create counts
        against the job and processing continues. If the store becomes
        unreachable the job is marked failed with its counts as they stand.

        Returns:
            The job's final snapshot
        """
        batch_size = self.settings.batch_size
        semaphore = asyncio.Semaphore(self.settings.max_concurrent)
        created_tags: dict[str, None] = {}

        try:
            for start in range(0, len(bookmarks), batch_size):
                batch = bookmarks[start:start + batch_size]
                results = await asyncio.gather(
                    *(self._create_one(semaphore, job.user_id, bookmark) for bookmark in batch),
                    return_exceptions=True,
                )

                imported = failed = 0
                fatal: Optional[BaseException] = None
                for bookmark, result in zip(batch, results):
                    if isinstance(result, BookmarkStoreUnavailableError):
                        fatal = fatal or result
                    elif isinstance(result, Exception):
                        failed += 1
                        logger.warning(f"Job {job.id}: failed to create {bookmark.url}: {result}")
                    elif isinstance(result, BaseException):
                        raise result
                    else:
                        imported += 1
                        created_tags.update(dict.fromkeys(bookmark.tags))

                await self.job_store.update_progress(job.id, imported=imported, failed=failed)
                if fatal is not None:
                    raise fatal

            await self._ensure_tags(job, list(created_tags))
            final = await self.job_store.mark_complete(job.id)
            if final is not None:
                logger.info(
                    f"Import job {job.id} complete: imported={final.imported}, "
                    f"failed={final.failed}, skipped={final.skipped}"
                )
            return final

        except asyncio.CancelledError:
            logger.warning(f"Import job {job.id} cancelled")
            raise

        except Exception as e:
            logger.exception(f"Import job {job.id} failed")
            return await self.job_store.mark_failed(job.id, str(e) or e.__class__.__name__)

    async def _create_one(
        self, semaphore: asyncio.Semaphore, user_id: str, bookmark: ParsedBookmark
    ) -> None:
        async with semaphore:
            await self.bookmark_store.create(user_id, bookmark)

    async def _ensure_tags(self, job: ImportJob, tags: List[str]) -> None:
        if not tags:
            return
        try:
            await self.bookmark_store.ensure_tags(job.user_id, tags)
        except Exception as e:
            # Bookmarks already carry their tags; missing tag records are not fatal
            logger.warning(f"Job {job.id}: failed to create tag records: {e}")

    @property
    def active_jobs(self) -> int:
        return len(self._tasks)

    async def wait_for_jobs(self) -> None:
        """Wait until every running worker has finished"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel running workers; their jobs are lost with the process"""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} running import jobs")
