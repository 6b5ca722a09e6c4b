"""
MarkPort v1 - Netscape Bookmark HTML Parser

Parses the bookmark HTML format exported by Firefox, Chrome, Safari and
most bookmarking services (including Pinboard's and Raindrop's HTML export).

Example entry:
    <DT><A HREF="https://example.com" ADD_DATE="1700000000" TAGS="a,b">Title</A>
    <DD>Optional description
"""

import re
from typing import Iterator, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from ..models import ImportFormat, ParsedBookmark, split_tags, unix_to_iso, utc_now_iso
from .base import BaseImportParser

ENTRY_START = re.compile(r"(?=<DT[\s>])", re.IGNORECASE)


class NetscapeHtmlParser(BaseImportParser):
    """
    Parser for Netscape bookmark files.

    Every anchor with an HREF that sits inside a <DT> is a bookmark;
    folder headings (<H3>) are ignored.
    """

    format = ImportFormat.NETSCAPE

    def parse(self, content: str) -> List[ParsedBookmark]:
        """Parse bookmark HTML into bookmarks, in document order."""
        return list(self._iter_bookmarks(content))

    def _iter_bookmarks(self, content: str) -> Iterator[ParsedBookmark]:
        imported_at = utc_now_iso()

        for fragment in self._iter_entries(content):
            soup = BeautifulSoup(fragment, "html.parser")

            for a_tag in soup.find_all("a", href=True):
                if a_tag.find_parent("dt") is None:
                    continue

                # html.parser lower-cases attribute names
                bookmark = self.build(
                    url=a_tag.get("href", ""),
                    title=a_tag.get_text(),
                    description=self._description_for(a_tag),
                    tags=split_tags(a_tag.get("tags")),
                    created_at=unix_to_iso(a_tag.get("add_date")),
                    imported_at=imported_at,
                )
                if bookmark is not None:
                    yield bookmark

    def _iter_entries(self, content: str) -> Iterator[str]:
        """
        Split the document into one fragment per <DT>.

        Unclosed <DT>/<DD> tags nest every entry inside the previous one, so a
        single soup over a large export grows quadratically. Each fragment
        holds one entry plus any folder markup before the next <DT>.
        """
        for fragment in ENTRY_START.split(content):
            if fragment[:3].lower() == "<dt":
                yield fragment

    def _description_for(self, a_tag: Tag) -> Optional[str]:
        """
        Text of the <DD> that directly follows the anchor, if any.

        The <DD> is never closed, so folder markup after it ends up nested
        inside; only its leading text is the description.
        """
        sibling = a_tag.find_next_sibling()
        if sibling is None or sibling.name != "dd":
            return None

        parts = []
        for child in sibling.children:
            if not isinstance(child, NavigableString):
                break
            parts.append(str(child))
        return "".join(parts).strip() or None
