"""
MarkPort v1 - Format Detector

Sniffs the format of an uploaded bookmark export from its content.
Detection never looks at the filename or content type.
"""

import csv
import json
import re
from typing import Optional

from .models import ImportFormat

NETSCAPE_DOCTYPE = re.compile(r"<!DOCTYPE\s+NETSCAPE-Bookmark-file", re.IGNORECASE)
# An anchor directly inside a definition term, as browsers export it
NETSCAPE_ENTRY = re.compile(r"<DT>\s*<A\s", re.IGNORECASE)


def detect(content: str) -> Optional[ImportFormat]:
    """
    Determine the export format of a bookmark file.

    Rules are evaluated in order and the first match wins:
    Netscape HTML, Pinboard JSON, Pocket CSV, Instapaper CSV.

    Args:
        content: Raw file content

    Returns:
        The detected ImportFormat, or None for empty or unrecognized content
    """
    trimmed = content.lstrip("\ufeff").strip() if content else ""
    if not trimmed:
        return None

    if NETSCAPE_DOCTYPE.search(trimmed) or NETSCAPE_ENTRY.search(trimmed):
        return ImportFormat.NETSCAPE

    if trimmed.startswith("["):
        try:
            data = json.loads(trimmed)
        except (ValueError, RecursionError):
            data = None
        if isinstance(data, list):
            # An empty or href-less array is rejected rather than read as zero bookmarks
            if data and isinstance(data[0], dict) and "href" in data[0]:
                return ImportFormat.PINBOARD
            return None

    columns = _header_columns(trimmed)
    if ("url" in columns or "given_url" in columns) and "time_added" in columns:
        return ImportFormat.POCKET
    if "url" in columns and "folder" in columns:
        return ImportFormat.INSTAPAPER

    return None


def _header_columns(content: str) -> set[str]:
    """Lower-cased column names of the first line, read as a CSV header"""
    first_line = content.splitlines()[0]
    try:
        row = next(csv.reader([first_line]), [])
    except csv.Error:
        return set()
    return {column.strip().lower() for column in row}
