"""
MarkPort v1 - Parser Registry

Pre-configured parser registry with all supported export formats, plus the
detect-then-parse entry point used by the import service and the CLI.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..detector import detect
from ..errors import EmptyFileError, UnrecognizedFormatError
from ..models import ImportFormat, ParsedBookmark
from .base import ImportParserRegistry
from .instapaper import InstapaperCsvParser
from .netscape import NetscapeHtmlParser
from .pinboard import PinboardJsonParser
from .pocket import PocketCsvParser

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """Detected format and the bookmarks parsed from a file"""
    format: ImportFormat
    bookmarks: List[ParsedBookmark]


def get_default_registry() -> ImportParserRegistry:
    """Create and return a registry with a parser for every supported format."""
    registry = ImportParserRegistry()
    registry.register(NetscapeHtmlParser())
    registry.register(PinboardJsonParser())
    registry.register(PocketCsvParser())
    registry.register(InstapaperCsvParser())
    return registry


# Global default registry
_default_registry: Optional[ImportParserRegistry] = None


def get_registry() -> ImportParserRegistry:
    """Get the global default registry, creating it if necessary."""
    global _default_registry
    if _default_registry is None:
        _default_registry = get_default_registry()
    return _default_registry


def parse_bookmark_file(content: str) -> ParseResult:
    """
    Detect the format of a bookmark file and parse it.

    Args:
        content: Raw file content

    Returns:
        ParseResult with the detected format and parsed bookmarks

    Raises:
        EmptyFileError: If the content is empty or whitespace
        UnrecognizedFormatError: If no supported format matches
    """
    if not content or not content.strip():
        raise EmptyFileError()

    format = detect(content)
    if format is None:
        raise UnrecognizedFormatError()

    bookmarks = get_registry().parse(format, content)
    logger.info(f"Parsed {len(bookmarks)} bookmarks from {format.value} file")
    return ParseResult(format=format, bookmarks=bookmarks)
