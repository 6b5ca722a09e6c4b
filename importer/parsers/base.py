"""
MarkPort v1 - Import Parser Base Class and Registry

This module defines the base parser interface and the registry that maps
each export format to its parser.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..models import ImportFormat, ParsedBookmark, utc_now_iso
from ..urls import is_valid_http_url

logger = logging.getLogger(__name__)


class BaseImportParser(ABC):
    """
    Abstract base class for export-format parsers.

    Each parser must implement:
    - format: the ImportFormat it handles
    - parse(content): return the bookmarks found in the content

    Parsers skip malformed entries instead of raising, and drop entries
    whose URL is not an absolute http(s) URL.
    """

    format: ImportFormat

    @abstractmethod
    def parse(self, content: str) -> List[ParsedBookmark]:
        """
        Parse raw file content into normalized bookmarks.

        Args:
            content: The raw export file content

        Returns:
            Bookmarks in file order, possibly empty
        """
        pass

    def build(
        self,
        url,
        title=None,
        description=None,
        tags: Optional[List[str]] = None,
        created_at: Optional[str] = None,
        imported_at: Optional[str] = None,
    ) -> Optional[ParsedBookmark]:
        """
        Helper to build a ParsedBookmark, or None if the URL is unusable.

        When the entry has no timestamp, imported_at (or the current time)
        is used instead.
        """
        if not is_valid_http_url(url):
            logger.debug("Dropping %s entry with invalid URL: %r", self.format.value, url)
            return None
        return ParsedBookmark(
            url=url,
            title=title,
            description=description,
            tags=tags or [],
            created_at=created_at or imported_at or utc_now_iso(),
        )


class ImportParserRegistry:
    """
    Registry for managing parser instances, keyed by format.
    """

    def __init__(self):
        self._parsers: Dict[ImportFormat, BaseImportParser] = {}

    def register(self, parser: BaseImportParser) -> None:
        """
        Register a parser instance, replacing any parser for the same format.

        Args:
            parser: Instance of a BaseImportParser subclass
        """
        self._parsers[parser.format] = parser

    def get_parser(self, format: ImportFormat | str) -> Optional[BaseImportParser]:
        """
        Find the parser for a format.

        Args:
            format: An ImportFormat or its string value

        Returns:
            A parser instance if registered, None otherwise
        """
        try:
            return self._parsers.get(ImportFormat(format))
        except ValueError:
            return None

    def parse(self, format: ImportFormat | str, content: str) -> List[ParsedBookmark]:
        """
        Parse content with the parser registered for a format.

        Raises:
            ValueError: If no parser is registered for the format
        """
        parser = self.get_parser(format)
        if parser is None:
            raise ValueError(f"No parser registered for format: {format}")
        return parser.parse(content)

    def list_formats(self) -> List[str]:
        """Get list of registered format names"""
        return [fmt.value for fmt in self._parsers]
