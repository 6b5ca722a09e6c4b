"""
MarkPort v1 - Import Models

Normalized data shapes shared by the detector, the parsers and the
deduplicator.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ImportFormat(str, Enum):
    """Supported bookmark export formats"""

    NETSCAPE = "netscape"
    PINBOARD = "pinboard"
    POCKET = "pocket"
    INSTAPAPER = "instapaper"


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as UTC ISO-8601 with milliseconds, e.g. 2023-11-14T22:13:20.000Z"""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def utc_now_iso() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def unix_to_iso(value: str | int | float | None) -> str | None:
    """
    Convert Unix epoch seconds to an ISO-8601 timestamp.

    Returns None for missing, non-numeric, non-positive or out-of-range values.
    """
    if value is None:
        return None
    try:
        seconds = int(str(value).strip())
    except ValueError:
        return None
    if seconds <= 0:
        return None
    try:
        return format_timestamp(datetime.fromtimestamp(seconds, tz=timezone.utc))
    except (OverflowError, OSError, ValueError):
        return None


def clean_text(value) -> str | None:
    """Strip a text value, mapping empty strings and non-strings to None"""
    if not isinstance(value, str):
        return None
    return value.strip() or None


def split_tags(raw: str | None, separator: str | None = ",") -> list[str]:
    """Split a delimited tag string, trimming entries and dropping blanks"""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(separator) if tag.strip()]


@dataclass
class ParsedBookmark:
    """A single bookmark extracted from an export file"""

    url: str
    title: str | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now_iso)

    def __post_init__(self):
        self.url = self.url.strip()
        self.title = clean_text(self.title)
        self.description = clean_text(self.description)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags),
            "createdAt": self.created_at,
        }
