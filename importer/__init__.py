"""
MarkPort v1 - Import Pipeline

Format detection, parsing and deduplication for bookmark export files.
Everything in this package is synchronous and free of I/O.
"""

from .dedup import DedupResult, collect_base_urls, partition
from .detector import detect
from .errors import BookmarkImportError, EmptyFileError, UnrecognizedFormatError
from .models import ImportFormat, ParsedBookmark
from .parsers import ParseResult, parse_bookmark_file
from .urls import base_url, is_valid_http_url

__version__ = "1.0.0"

__all__ = [
    "DedupResult",
    "collect_base_urls",
    "partition",
    "detect",
    "BookmarkImportError",
    "EmptyFileError",
    "UnrecognizedFormatError",
    "ImportFormat",
    "ParsedBookmark",
    "ParseResult",
    "parse_bookmark_file",
    "base_url",
    "is_valid_http_url",
]
