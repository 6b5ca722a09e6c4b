"""
MarkPort v1 - Test Configuration and Fixtures

Shared fixtures for unit tests. Playwright fixtures for the e2e suite live
in tests/e2e/conftest.py.
"""

import time
from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from config import ImportSettings
from import_service.jobs import InMemoryJobStore
from import_service.main import create_app
from import_service.routes.imports import get_user_id
from import_service.store import InMemoryBookmarkStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"
TEST_USER_ID = "did:plc:test123"


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    """Directory holding the sample export files."""
    return FIXTURES_DIR


@pytest.fixture(scope="session")
def load_fixture() -> Callable[[str], str]:
    """Read a sample export file by name."""
    def _load(name: str) -> str:
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")
    return _load


@pytest.fixture
def import_settings() -> ImportSettings:
    """Small batches so multi-batch behavior shows up with few bookmarks."""
    return ImportSettings(batch_size=2, max_concurrent=2, job_ttl_seconds=60)


@pytest.fixture
def job_store() -> InMemoryJobStore:
    return InMemoryJobStore(ttl_seconds=60)


@pytest.fixture
def bookmark_store() -> InMemoryBookmarkStore:
    return InMemoryBookmarkStore()


@pytest.fixture
def client(
    job_store: InMemoryJobStore,
    bookmark_store: InMemoryBookmarkStore,
    import_settings: ImportSettings,
) -> Generator[TestClient, None, None]:
    """Test client for an app wired to in-memory stores."""
    app = create_app(
        job_store=job_store,
        bookmark_store=bookmark_store,
        settings=import_settings,
    )
    app.dependency_overrides[get_user_id] = lambda: TEST_USER_ID
    with TestClient(app) as test_client:
        yield test_client


class ImportAPIHelper:
    """Helper class for common import API operations."""

    def __init__(self, client: TestClient):
        self.client = client

    def upload(self, content: str | bytes, filename: str = "bookmarks.txt"):
        """POST a file to /api/import."""
        if isinstance(content, str):
            content = content.encode("utf-8")
        return self.client.post("/api/import", files={"file": (filename, content)})

    def status(self, job_id: str):
        """GET the status of an import job."""
        return self.client.get(f"/api/import/status/{job_id}")

    def wait_for_job(self, job_id: str, timeout: float = 5.0, interval: float = 0.02) -> dict:
        """Poll until the job reaches a terminal status."""
        deadline = time.monotonic() + timeout
        while True:
            response = self.status(job_id)
            assert response.status_code == 200, response.text
            body = response.json()
            if body["status"] in ("complete", "failed"):
                return body
            if time.monotonic() > deadline:
                raise AssertionError(f"Job {job_id} still {body['status']} after {timeout}s")
            time.sleep(interval)


@pytest.fixture
def api(client: TestClient) -> ImportAPIHelper:
    """Fixture providing the import API test helper."""
    return ImportAPIHelper(client)


@pytest.fixture
def user_id() -> str:
    """The acting user for API tests"""
    return TEST_USER_ID


@pytest.fixture
def make_api() -> Generator[Callable[..., ImportAPIHelper], None, None]:
    """
    Factory for API helpers on apps with custom stores or settings.

    Clients are entered on creation and closed at teardown.
    """
    clients = []

    def _make(bookmark_store=None, settings=None) -> ImportAPIHelper:
        app = create_app(
            job_store=InMemoryJobStore(),
            bookmark_store=bookmark_store if bookmark_store is not None else InMemoryBookmarkStore(),
            settings=settings or ImportSettings(batch_size=2),
        )
        app.dependency_overrides[get_user_id] = lambda: TEST_USER_ID
        test_client = TestClient(app)
        test_client.__enter__()
        clients.append(test_client)
        return ImportAPIHelper(test_client)

    yield _make

    for test_client in clients:
        test_client.__exit__(None, None, None)
