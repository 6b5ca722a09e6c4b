"""
MarkPort v1 - Import Service Main Application

FastAPI application for bookmark imports. Uses Postgres-backed stores when
DATABASE_URL is set and in-memory stores otherwise.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import ImportSettings, get_config

from . import __version__
from .db import Database, PostgresBookmarkStore, PostgresJobStore
from .jobs import InMemoryJobStore, JobStore
from .models import HealthResponse
from .orchestrator import ImportOrchestrator
from .routes import import_router
from .store import BookmarkStore, InMemoryBookmarkStore

# Configure logging
logging.basicConfig(
    level=get_config().app.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    job_store: Optional[JobStore] = None,
    bookmark_store: Optional[BookmarkStore] = None,
    settings: Optional[ImportSettings] = None,
) -> FastAPI:
    """
    Build the import service.

    Stores passed in are used as-is; otherwise they are created at startup
    from configuration.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        logger.info("Import service starting...")
        config = get_config()
        import_settings = settings or config.imports
        db: Optional[Database] = None

        jobs = job_store
        bookmarks = bookmark_store
        if (jobs is None or bookmarks is None) and config.database.url:
            db = Database(
                config.database.url,
                min_size=config.database.pool_min_size,
                max_size=config.database.pool_max_size,
            )
            await db.connect()
            logger.info("Database connected")
            if jobs is None:
                jobs = PostgresJobStore(db, ttl_seconds=import_settings.job_ttl_seconds)
            if bookmarks is None:
                bookmarks = PostgresBookmarkStore(db)
        else:
            if jobs is None:
                jobs = InMemoryJobStore(ttl_seconds=import_settings.job_ttl_seconds)
            if bookmarks is None:
                bookmarks = InMemoryBookmarkStore()

        app.state.orchestrator = ImportOrchestrator(jobs, bookmarks, import_settings)
        logger.info(
            f"Using {type(jobs).__name__} and {type(bookmarks).__name__}"
        )

        yield

        # Cleanup
        await app.state.orchestrator.shutdown()
        if db is not None:
            await db.disconnect()
        logger.info("Import service shutting down")

    app = FastAPI(
        title="MarkPort Import Service",
        description="Imports bookmarks from browser, Pinboard, Pocket and Instapaper exports",
        version=__version__,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(import_router)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Check service health and store connectivity."""
        orchestrator: ImportOrchestrator = app.state.orchestrator
        job_store_ok = await orchestrator.job_store.ping()
        bookmark_store_ok = await orchestrator.bookmark_store.ping()

        return HealthResponse(
            status="healthy" if job_store_ok and bookmark_store_ok else "degraded",
            version=__version__,
            job_store="connected" if job_store_ok else "disconnected",
            bookmark_store="connected" if bookmark_store_ok else "disconnected",
            active_jobs=orchestrator.active_jobs,
        )

    return app


app = create_app()


# Run with: uvicorn import_service.main:app --host 0.0.0.0 --port 8000
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
