"""
MarkPort v1 - Pinboard JSON Parser

Parses the JSON export from pinboard.in (Settings > Backup > JSON).

Example entry:
    {"href": "https://example.com", "description": "Title",
     "extended": "Notes", "tags": "tech reading", "time": "2024-01-15T10:30:00Z"}
"""

import json
import logging
from typing import List

from ..models import ImportFormat, ParsedBookmark, split_tags, utc_now_iso
from .base import BaseImportParser

logger = logging.getLogger(__name__)


class PinboardJsonParser(BaseImportParser):
    """
    Parser for Pinboard JSON backups.

    Pinboard's "description" is the bookmark title and "extended" holds the
    notes. Entries sharing a URL are all kept.
    """

    format = ImportFormat.PINBOARD

    def parse(self, content: str) -> List[ParsedBookmark]:
        try:
            entries = json.loads(content)
        except (ValueError, RecursionError):
            logger.debug("Pinboard content is not valid JSON")
            return []

        if not isinstance(entries, list):
            return []

        imported_at = utc_now_iso()
        bookmarks = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            bookmark = self.build(
                url=entry.get("href"),
                title=entry.get("description"),
                description=entry.get("extended"),
                tags=self._tags(entry.get("tags")),
                created_at=self._time(entry.get("time")),
                imported_at=imported_at,
            )
            if bookmark is not None:
                bookmarks.append(bookmark)
        return bookmarks

    def _tags(self, raw) -> List[str]:
        if isinstance(raw, list):
            return [tag.strip() for tag in raw if isinstance(tag, str) and tag.strip()]
        if isinstance(raw, str):
            return split_tags(raw, separator=None)
        return []

    def _time(self, raw) -> str | None:
        # Already ISO-8601, kept verbatim
        if isinstance(raw, str) and raw.strip():
            return raw
        return None
