"""
MarkPort v1 - Bookmark Store Interface

The system of record that imported bookmarks are written to, seen only
through list/create operations. The in-memory implementation backs tests
and local runs; see db.py for the Postgres implementation.
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Protocol

from importer.models import ParsedBookmark

logger = logging.getLogger(__name__)


class BookmarkStoreError(Exception):
    """A single bookmark could not be created."""


class BookmarkStoreUnavailableError(BookmarkStoreError):
    """The store cannot be reached; no further writes will succeed."""


class BookmarkStore(Protocol):
    """Operations the import pipeline needs from the bookmark store"""

    async def list_urls(self, user_id: str) -> List[str]:
        """URLs of the user's existing bookmarks"""
        ...

    async def create(self, user_id: str, bookmark: ParsedBookmark) -> None:
        """
        Create one bookmark record.

        Raises:
            BookmarkStoreError: If this record could not be created
            BookmarkStoreUnavailableError: If the store is unreachable
        """
        ...

    async def ensure_tags(self, user_id: str, tags: List[str]) -> None:
        """Make sure tag records exist for the given tag names"""
        ...

    async def ping(self) -> bool:
        ...


class InMemoryBookmarkStore:
    """
    Dict-backed bookmark store.

    Failure injection for tests:
    - fail_urls: creating any of these URLs raises BookmarkStoreError
    - unavailable_after: after this many successful creates every further
      create raises BookmarkStoreUnavailableError
    - delay: seconds to sleep in each create, to keep jobs observable
    """

    def __init__(
        self,
        fail_urls: Optional[Iterable[str]] = None,
        unavailable_after: Optional[int] = None,
        delay: float = 0.0,
    ):
        self.fail_urls = set(fail_urls or [])
        self.unavailable_after = unavailable_after
        self.delay = delay
        self._bookmarks: Dict[str, List[ParsedBookmark]] = {}
        self._tags: Dict[str, List[str]] = {}
        self._created = 0

    def add(self, user_id: str, *urls: str) -> None:
        """Seed existing bookmarks for a user"""
        for url in urls:
            self._bookmarks.setdefault(user_id, []).append(ParsedBookmark(url=url))

    def bookmarks(self, user_id: str) -> List[ParsedBookmark]:
        return list(self._bookmarks.get(user_id, []))

    def tags(self, user_id: str) -> List[str]:
        return list(self._tags.get(user_id, []))

    async def list_urls(self, user_id: str) -> List[str]:
        return [bookmark.url for bookmark in self._bookmarks.get(user_id, [])]

    async def create(self, user_id: str, bookmark: ParsedBookmark) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.unavailable_after is not None and self._created >= self.unavailable_after:
            raise BookmarkStoreUnavailableError("Bookmark store is unavailable")
        if bookmark.url in self.fail_urls:
            raise BookmarkStoreError(f"Rejected bookmark: {bookmark.url}")

        self._bookmarks.setdefault(user_id, []).append(bookmark)
        self._created += 1

    async def ensure_tags(self, user_id: str, tags: List[str]) -> None:
        existing = self._tags.setdefault(user_id, [])
        for tag in tags:
            if tag not in existing:
                existing.append(tag)

    async def ping(self) -> bool:
        return True
