"""
MarkPort v1 - Postgres Stores

asyncpg-backed implementations of the bookmark store and the import job
store, for deployments where several service processes share state.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional

import asyncpg

from importer.models import ImportFormat, ParsedBookmark

from .jobs import ImportJob, JobStatus
from .store import BookmarkStoreError, BookmarkStoreUnavailableError

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS bookmark (
    id BIGSERIAL PRIMARY KEY,
    user_id TEXT NOT NULL,
    url TEXT NOT NULL,
    title TEXT,
    description TEXT,
    tags TEXT[] NOT NULL DEFAULT '{}',
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    deleted_at TIMESTAMPTZ
);

CREATE INDEX IF NOT EXISTS bookmark_user_idx ON bookmark (user_id) WHERE deleted_at IS NULL;

CREATE TABLE IF NOT EXISTS bookmark_tag (
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    PRIMARY KEY (user_id, name)
);

CREATE TABLE IF NOT EXISTS import_job (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'processing',
    format TEXT NOT NULL,
    total INTEGER NOT NULL,
    skipped INTEGER NOT NULL,
    imported INTEGER NOT NULL DEFAULT 0,
    failed INTEGER NOT NULL DEFAULT 0,
    error TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    finished_at TIMESTAMPTZ
);
"""

# Errors meaning the database itself is gone rather than one statement failing
CONNECTION_ERRORS = (
    OSError,
    asyncpg.InterfaceError,
    asyncpg.PostgresConnectionError,
    asyncpg.CannotConnectNowError,
)


class Database:
    """Async database connection pool manager"""

    def __init__(self, database_url: str, min_size: int = 2, max_size: int = 10):
        self.database_url = database_url
        self.min_size = min_size
        self.max_size = max_size
        self._pool: Optional[asyncpg.Pool] = None

    async def connect(self):
        """Create connection pool and make sure the tables exist"""
        self._pool = await asyncpg.create_pool(
            self.database_url,
            min_size=self.min_size,
            max_size=self.max_size,
        )
        async with self.connection() as conn:
            await conn.execute(SCHEMA)
        logger.info("Database pool created")

    async def disconnect(self):
        """Close connection pool"""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database pool closed")

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """Get a connection from the pool"""
        if self._pool is None:
            raise RuntimeError("Database is not connected")
        async with self._pool.acquire() as conn:
            yield conn

    async def ping(self) -> bool:
        try:
            async with self.connection() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except Exception:
            return False


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 bookmark timestamp, falling back to now"""
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


class PostgresBookmarkStore:
    """Bookmark store backed by the bookmark and bookmark_tag tables"""

    def __init__(self, db: Database):
        self.db = db

    async def list_urls(self, user_id: str) -> List[str]:
        try:
            async with self.db.connection() as conn:
                rows = await conn.fetch(
                    """
                    SELECT url FROM bookmark
                    WHERE user_id = $1 AND deleted_at IS NULL
                    """,
                    user_id,
                )
        except CONNECTION_ERRORS as e:
            raise BookmarkStoreUnavailableError(str(e)) from e
        except asyncpg.PostgresError as e:
            raise BookmarkStoreError(str(e)) from e
        return [row["url"] for row in rows]

    async def create(self, user_id: str, bookmark: ParsedBookmark) -> None:
        try:
            async with self.db.connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO bookmark (user_id, url, title, description, tags, created_at)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    """,
                    user_id,
                    bookmark.url,
                    bookmark.title,
                    bookmark.description,
                    bookmark.tags,
                    parse_timestamp(bookmark.created_at),
                )
        except CONNECTION_ERRORS as e:
            raise BookmarkStoreUnavailableError(str(e)) from e
        except asyncpg.PostgresError as e:
            raise BookmarkStoreError(str(e)) from e

    async def ensure_tags(self, user_id: str, tags: List[str]) -> None:
        try:
            async with self.db.connection() as conn:
                await conn.executemany(
                    """
                    INSERT INTO bookmark_tag (user_id, name)
                    VALUES ($1, $2)
                    ON CONFLICT (user_id, name) DO NOTHING
                    """,
                    [(user_id, tag) for tag in tags],
                )
        except CONNECTION_ERRORS as e:
            raise BookmarkStoreUnavailableError(str(e)) from e
        except asyncpg.PostgresError as e:
            raise BookmarkStoreError(str(e)) from e

    async def ping(self) -> bool:
        return await self.db.ping()


class PostgresJobStore:
    """
    Job store backed by the import_job table.

    Counter updates are single UPDATE statements, so concurrent readers see
    either the old or the new counts. Terminal jobs older than ttl_seconds
    are invisible to get() and removed by purge_expired().
    """

    COLUMNS = """
        id, user_id, status, format, total, skipped, imported, failed,
        error, created_at, updated_at, finished_at
    """

    def __init__(self, db: Database, ttl_seconds: int = 3600):
        self.db = db
        self.ttl_seconds = ttl_seconds

    def _to_job(self, row: Optional[asyncpg.Record]) -> Optional[ImportJob]:
        return ImportJob(**dict(row)) if row else None

    async def create(
        self, user_id: str, format: ImportFormat, total: int, skipped: int
    ) -> ImportJob:
        await self.purge_expired()
        async with self.db.connection() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO import_job (id, user_id, format, total, skipped)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {self.COLUMNS}
                """,
                uuid.uuid4().hex,
                user_id,
                ImportFormat(format).value,
                total,
                skipped,
            )
        return self._to_job(row)

    async def get(self, job_id: str) -> Optional[ImportJob]:
        async with self.db.connection() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {self.COLUMNS}
                FROM import_job
                WHERE id = $1
                  AND (finished_at IS NULL
                       OR finished_at > now() - make_interval(secs => $2))
                """,
                job_id,
                float(self.ttl_seconds),
            )
        return self._to_job(row)

    async def update_progress(
        self, job_id: str, imported: int = 0, failed: int = 0
    ) -> Optional[ImportJob]:
        # Right-hand sides see the pre-update row, so both clamps use the same remainder
        async with self.db.connection() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE import_job SET
                    imported = imported + LEAST($2, total - skipped - imported - failed),
                    failed = failed + LEAST(
                        $3,
                        total - skipped - imported - failed
                            - LEAST($2, total - skipped - imported - failed)
                    ),
                    updated_at = now()
                WHERE id = $1 AND status = 'processing'
                RETURNING {self.COLUMNS}
                """,
                job_id,
                max(0, imported),
                max(0, failed),
            )
        return self._to_job(row)

    async def mark_complete(self, job_id: str) -> Optional[ImportJob]:
        return await self._finish(job_id, JobStatus.COMPLETE)

    async def mark_failed(self, job_id: str, error: str) -> Optional[ImportJob]:
        return await self._finish(job_id, JobStatus.FAILED, error)

    async def _finish(
        self, job_id: str, status: JobStatus, error: Optional[str] = None
    ) -> Optional[ImportJob]:
        async with self.db.connection() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE import_job
                SET status = $2, error = $3, updated_at = now(), finished_at = now()
                WHERE id = $1 AND status = 'processing'
                RETURNING {self.COLUMNS}
                """,
                job_id,
                status.value,
                error,
            )
        return self._to_job(row)

    async def purge_expired(self) -> int:
        async with self.db.connection() as conn:
            result = await conn.execute(
                """
                DELETE FROM import_job
                WHERE finished_at IS NOT NULL
                  AND finished_at <= now() - make_interval(secs => $1)
                """,
                float(self.ttl_seconds),
            )
        # asyncpg returns the command tag, e.g. "DELETE 3"
        return int(result.split()[-1])

    async def ping(self) -> bool:
        return await self.db.ping()
