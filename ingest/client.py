"""
MarkPort v1 - Import Service Client

Uploads a bookmark file to a running import service and polls the job
until it reaches a terminal state.
"""

import time
from pathlib import Path
from typing import Callable, Optional

import httpx

TERMINAL_STATUSES = {"complete", "failed"}


class ImportClientError(Exception):
    """The service rejected a request or could not be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class JobLostError(ImportClientError):
    """The job is unknown to the service or has expired"""


class PollTimeoutError(ImportClientError):
    """The job did not finish within the client's timeout"""


class ImportClient:
    """
    Minimal HTTP client for the import API.

    Use as a context manager to close the underlying connection pool.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def __enter__(self) -> "ImportClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def upload(self, file_path: Path) -> dict:
        """
        Upload a bookmark file.

        Returns:
            The JSON body: {"success", "result", "jobId"?}

        Raises:
            ImportClientError: On a non-200 response or a transport error
        """
        file_path = Path(file_path)
        try:
            with file_path.open("rb") as fh:
                response = self._client.post(
                    "/api/import",
                    files={"file": (file_path.name, fh)},
                )
        except httpx.RequestError as e:
            raise ImportClientError(f"Request failed: {e}") from e

        body = self._json(response)
        if response.status_code != 200:
            raise ImportClientError(
                body.get("error") or f"Upload failed with status {response.status_code}",
                response.status_code,
            )
        return body

    def status(self, job_id: str) -> dict:
        """
        Fetch a job's status.

        Raises:
            JobLostError: If the service answers 404
            ImportClientError: On any other error
        """
        try:
            response = self._client.get(f"/api/import/status/{job_id}")
        except httpx.RequestError as e:
            raise ImportClientError(f"Request failed: {e}") from e

        body = self._json(response)
        if response.status_code == 404:
            raise JobLostError(body.get("error") or "Job not found or expired", 404)
        if response.status_code != 200:
            raise ImportClientError(
                body.get("error") or f"Status request failed with status {response.status_code}",
                response.status_code,
            )
        return body

    def wait(
        self,
        job_id: str,
        interval: float = 2.0,
        timeout: float = 600.0,
        on_update: Optional[Callable[[dict], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> dict:
        """
        Poll a job on a fixed interval until it is complete or failed.

        Args:
            job_id: Job returned by upload()
            interval: Seconds between status requests
            timeout: Seconds to keep polling before giving up
            on_update: Called with every status body received

        Returns:
            The terminal status body

        Raises:
            JobLostError: If the job disappears (unknown or expired)
            PollTimeoutError: If the job is still running after timeout
        """
        deadline = clock() + timeout
        while True:
            body = self.status(job_id)
            if on_update is not None:
                on_update(body)
            if body.get("status") in TERMINAL_STATUSES:
                return body
            if clock() + interval > deadline:
                raise PollTimeoutError(f"Import still running after {timeout:.0f}s")
            sleep(interval)

    @staticmethod
    def _json(response: httpx.Response) -> dict:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
