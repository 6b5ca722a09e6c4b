"""
MarkPort v1 - Deduplicator

Splits parsed bookmarks into entries to create and entries the user
already has, comparing by base URL.
"""

from dataclasses import dataclass, field
from typing import Iterable

from .models import ParsedBookmark
from .urls import base_url


@dataclass
class DedupResult:
    """Outcome of partitioning parsed bookmarks against existing ones"""
    new: list[ParsedBookmark] = field(default_factory=list)
    skipped_count: int = 0


def collect_base_urls(urls: Iterable[str]) -> set[str]:
    """Normalize stored bookmark URLs to base URLs, ignoring invalid ones"""
    result = set()
    for url in urls:
        key = base_url(url)
        if key:
            result.add(key)
    return result


def partition(
    parsed: Iterable[ParsedBookmark],
    existing_base_urls: set[str],
) -> DedupResult:
    """
    Partition parsed bookmarks into new entries and a skipped count.

    An entry is skipped when its base URL is already in existing_base_urls.
    Entries whose base URL cannot be computed never match. The new list is
    not deduplicated against itself, so a URL listed twice in one file is
    returned twice.

    Args:
        parsed: Bookmarks in file order
        existing_base_urls: Base URLs of the user's current bookmarks

    Returns:
        DedupResult with the new entries in their original order
    """
    result = DedupResult()
    for bookmark in parsed:
        key = base_url(bookmark.url)
        if key is not None and key in existing_base_urls:
            result.skipped_count += 1
        else:
            result.new.append(bookmark)
    return result
