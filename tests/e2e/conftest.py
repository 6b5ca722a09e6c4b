"""
MarkPort v1 - E2E Test Configuration

Playwright fixtures for tests against a running import service. If nothing
answers at TEST_BASE_URL, a local server with in-memory stores is started
for the session.

Run with:
    pytest tests/e2e -m e2e
"""

import os
import subprocess
import sys
import time
from typing import Generator
from urllib.parse import urlsplit

import httpx
import pytest
from playwright.sync_api import APIRequestContext, Playwright

TEST_BASE_URL = os.environ.get("TEST_BASE_URL", "http://127.0.0.1:8765")


class ServerManager:
    """Manages the import service process for testing."""

    def __init__(self, base_url: str):
        self.base_url = base_url
        self.process = None

    def is_up(self) -> bool:
        try:
            return httpx.get(f"{self.base_url}/health", timeout=1.0).status_code == 200
        except httpx.HTTPError:
            return False

    def start(self) -> None:
        """Start the import service with in-memory stores."""
        parts = urlsplit(self.base_url)
        env = os.environ.copy()
        env.pop("DATABASE_URL", None)
        env["IMPORT_BATCH_SIZE"] = "2"

        self.process = subprocess.Popen(
            [sys.executable, "-m", "uvicorn", "import_service.main:app",
             "--host", parts.hostname, "--port", str(parts.port)],
            env=env,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )

        # Wait for server to be ready
        for _ in range(30):
            if self.is_up():
                return
            time.sleep(0.5)

        self.stop()
        raise RuntimeError("Server failed to start")

    def stop(self) -> None:
        """Stop the import service."""
        if self.process:
            self.process.terminate()
            self.process.wait(timeout=5)
            self.process = None


@pytest.fixture(scope="session")
def base_url() -> str:
    """Base URL for the import service."""
    return TEST_BASE_URL


@pytest.fixture(scope="session")
def live_server(base_url: str) -> Generator[str, None, None]:
    """Use the running service, or start one for the session."""
    manager = ServerManager(base_url)
    if manager.is_up():
        yield base_url
        return
    manager.start()
    yield base_url
    manager.stop()


@pytest.fixture
def api_context(playwright: Playwright, live_server: str) -> Generator[APIRequestContext, None, None]:
    """Create an API request context for testing."""
    context = playwright.request.new_context(base_url=live_server)
    yield context
    context.dispose()


class ImportE2EHelper:
    """Helper class for common import operations over HTTP."""

    def __init__(self, context: APIRequestContext):
        self.context = context

    def upload(self, content: str, name: str = "bookmarks.txt"):
        """Upload a bookmark file as multipart form data."""
        return self.context.post(
            "/api/import",
            multipart={
                "file": {
                    "name": name,
                    "mimeType": "text/plain",
                    "buffer": content.encode("utf-8"),
                }
            },
        )

    def wait_for_job(self, job_id: str, timeout: float = 10.0) -> dict:
        """Poll the status endpoint until the job is complete or failed."""
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            response = self.context.get(f"/api/import/status/{job_id}")
            assert response.status == 200, response.text()
            body = response.json()
            if body["status"] in ("complete", "failed"):
                return body
            time.sleep(0.1)
        raise AssertionError(f"Job {job_id} did not finish within {timeout}s")


@pytest.fixture
def importer(api_context: APIRequestContext) -> ImportE2EHelper:
    """Fixture providing the import helper."""
    return ImportE2EHelper(api_context)
