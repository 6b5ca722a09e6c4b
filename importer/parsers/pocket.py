"""
MarkPort v1 - Pocket CSV Parser

Parses the CSV export from Pocket (getpocket.com/export).

Example:
    url,title,tags,time_added
    https://example.com,"An ""Example"" Page","tech,news",1700000000
"""

from typing import List

from ..models import ImportFormat, ParsedBookmark, split_tags, unix_to_iso, utc_now_iso
from .base import BaseImportParser
from .csv_rows import iter_csv_rows


class PocketCsvParser(BaseImportParser):
    """
    Parser for Pocket CSV exports.

    Older exports name the columns given_url / given_title; both spellings
    are accepted. Tags are comma-separated (Pocket's own "|" separator is
    accepted too).
    """

    format = ImportFormat.POCKET

    def parse(self, content: str) -> List[ParsedBookmark]:
        imported_at = utc_now_iso()
        bookmarks = []

        for row in iter_csv_rows(content):
            bookmark = self.build(
                url=row.get("given_url") or row.get("url"),
                title=row.get("given_title") or row.get("title"),
                tags=split_tags(row.get("tags", "").replace("|", ",")),
                created_at=unix_to_iso(row.get("time_added")),
                imported_at=imported_at,
            )
            if bookmark is not None:
                bookmarks.append(bookmark)

        return bookmarks
