"""
MarkPort v1 - Instapaper CSV Parser

Parses the CSV export from Instapaper (Settings > Export > CSV).

Example:
    URL,Title,Selection,Folder,Timestamp
    https://example.com,Title,Highlighted text,Tech,1700000000
"""

from typing import List

from ..models import ImportFormat, ParsedBookmark, clean_text, unix_to_iso, utc_now_iso
from .base import BaseImportParser
from .csv_rows import iter_csv_rows


class InstapaperCsvParser(BaseImportParser):
    """
    Parser for Instapaper CSV exports.

    The folder becomes the bookmark's only tag, except Instapaper's
    built-in "Unread" and "Archive" buckets which produce no tag.
    """

    format = ImportFormat.INSTAPAPER

    BUILTIN_FOLDERS = {"Unread", "Archive"}

    def parse(self, content: str) -> List[ParsedBookmark]:
        imported_at = utc_now_iso()
        bookmarks = []

        for row in iter_csv_rows(content):
            bookmark = self.build(
                url=row.get("url"),
                title=row.get("title"),
                description=row.get("selection"),
                tags=self._folder_tags(row.get("folder")),
                created_at=unix_to_iso(row.get("timestamp")),
                imported_at=imported_at,
            )
            if bookmark is not None:
                bookmarks.append(bookmark)

        return bookmarks

    def _folder_tags(self, folder: str | None) -> List[str]:
        folder = clean_text(folder)
        if folder is None or folder in self.BUILTIN_FOLDERS:
            return []
        return [folder]
