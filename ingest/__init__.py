"""
MarkPort v1 - Ingest Module

Command-line tooling to preview bookmark export files and import them
through the import service.
"""

from .client import ImportClient, ImportClientError, JobLostError, PollTimeoutError

__all__ = ["ImportClient", "ImportClientError", "JobLostError", "PollTimeoutError"]
