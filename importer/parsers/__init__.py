"""
MarkPort v1 - Import Parsers

One parser per supported bookmark export format.
"""

from .base import BaseImportParser, ImportParserRegistry
from .netscape import NetscapeHtmlParser
from .pinboard import PinboardJsonParser
from .pocket import PocketCsvParser
from .instapaper import InstapaperCsvParser
from .registry import ParseResult, get_default_registry, get_registry, parse_bookmark_file

__all__ = [
    "BaseImportParser",
    "ImportParserRegistry",
    "NetscapeHtmlParser",
    "PinboardJsonParser",
    "PocketCsvParser",
    "InstapaperCsvParser",
    "ParseResult",
    "get_default_registry",
    "get_registry",
    "parse_bookmark_file",
]
