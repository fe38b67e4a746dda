"""Presentation-time text derivations for feed records.

Each function here is total: whenever the raw value cannot be interpreted the
raw value itself is returned, so the render surface always has something to
show. Nothing in this module mutates an ``ImageRecord``.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from html.parser import HTMLParser
from typing import NamedTuple, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flickr_search.app.config import DISPLAY_TIMEZONE
from flickr_search.app.image_models import ImageRecord

logger = logging.getLogger(__name__)

_MARKUP_RE = re.compile(
    r"<[A-Za-z!/?]|&(?:#\d+|#[xX][0-9A-Fa-f]+|[A-Za-z][A-Za-z0-9]*);"
)
_BLOCK_TAGS = {
    "address",
    "blockquote",
    "br",
    "dd",
    "div",
    "dt",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "hr",
    "li",
    "p",
    "pre",
    "tr",
}
_SKIPPED_TAGS = {"script", "style"}


def extract_author_name(raw: str) -> str:
    """Return the parenthesized display name from ``email (Name)`` strings."""
    start = raw.find("(")
    if start == -1:
        return raw
    end = raw.find(")", start + 1)
    if end == -1:
        return raw
    return raw[start + 1 : end]


class _TextExtractor(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self._chunks: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in _SKIPPED_TAGS:
            self._skip_depth += 1
        elif tag in _BLOCK_TAGS:
            self._chunks.append("\n")

    def handle_startendtag(self, tag, attrs):
        if tag in _BLOCK_TAGS:
            self._chunks.append("\n")

    def handle_endtag(self, tag):
        if tag in _SKIPPED_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
        elif tag in _BLOCK_TAGS:
            self._chunks.append("\n")

    def handle_data(self, data):
        if not self._skip_depth:
            self._chunks.append(data)

    def text(self) -> str:
        lines = []
        for line in "".join(self._chunks).splitlines():
            line = " ".join(line.split())
            if line:
                lines.append(line)
        return "\n".join(lines)


def sanitize_description(html: str) -> str:
    """Strip markup from a feed description and return readable text.

    Text without tags or character references is returned untouched. If the
    parser fails, the original markup is returned rather than an empty string.
    """
    if not _MARKUP_RE.search(html):
        return html

    parser = _TextExtractor()
    try:
        parser.feed(html)
        parser.close()
    except Exception as e:
        logger.warning(f"[normalizers] Could not parse description markup: {e}")
        return html
    return parser.text()


def _parse_iso8601(value: str) -> datetime:
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def format_published_date(
    iso_string: str, tz: Optional[str] = DISPLAY_TIMEZONE
) -> str:
    """Format an ISO-8601 timestamp as e.g. ``Sep 16, 2024 at 3:04 PM``.

    ``tz`` converts timezone-aware values to the named zone before
    formatting. Unparseable input is returned as-is.
    """
    try:
        dt = _parse_iso8601(iso_string)
    except ValueError:
        return iso_string

    if tz and dt.tzinfo is not None:
        try:
            dt = dt.astimezone(ZoneInfo(tz))
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"[normalizers] Unknown display timezone {tz!r}")

    hour = dt.hour % 12 or 12
    return f"{dt:%b} {dt.day}, {dt.year} at {hour}:{dt:%M} {dt:%p}"


class ShareItems(NamedTuple):
    title: str
    author: str
    description: str
    media_url: str


def share_items(record: ImageRecord) -> ShareItems:
    """Items handed to the platform share action for ``record``."""
    return ShareItems(
        title=record.title,
        author=extract_author_name(record.author),
        description=sanitize_description(record.description),
        media_url=record.media_url,
    )


@dataclass
class ImageDetail:
    id: str
    title: str
    author: str
    byline: str
    description: str
    published: str
    published_line: str
    media_url: str
    accessibility_label: str
    share: ShareItems


def image_detail(
    record: ImageRecord, tz: Optional[str] = DISPLAY_TIMEZONE
) -> ImageDetail:
    """Everything the detail screen draws for ``record``, already normalized."""
    author = extract_author_name(record.author)
    description = sanitize_description(record.description)
    published = format_published_date(record.published, tz)
    return ImageDetail(
        id=record.id,
        title=record.title,
        author=author,
        byline=f"By {author}",
        description=description,
        published=published,
        published_line=f"Published: {published}",
        media_url=record.media_url,
        accessibility_label=f"{record.title} by {author}",
        share=ShareItems(record.title, author, description, record.media_url),
    )
