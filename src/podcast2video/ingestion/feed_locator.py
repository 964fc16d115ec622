"""Locate a single podcast episode in an RSS feed by its number.

The feed is fetched once, parsed with feedparser and scanned in document
order for the first item whose ordinal matches the requested number.
"""

from pathlib import Path
from typing import Any

import feedparser
import httpx
import structlog
from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError as XMLParseError
from defusedxml.ElementTree import fromstring as safe_fromstring
from pydantic import BaseModel, ConfigDict, Field, computed_field

from podcast2video.errors import FetchError, NotFoundError, ParseError

logger = structlog.get_logger(__name__)

# feedparser files iTunes keywords and categories under this scheme
ITUNES_SCHEME = "http://www.itunes.com/"
ATOM_NAMESPACE = "http://www.w3.org/2005/Atom"


class Episode(BaseModel):
    """A single podcast episode selected for publishing."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Episode title")
    number: int = Field(description="Episode number, unique within the feed")
    link: str = Field(default="", description="Canonical URL of the episode page")
    description: str = Field(default="", description="Raw episode summary, may contain markup")
    audio_url: str = Field(description="URL of the episode audio")
    tags: list[str] = Field(default_factory=list, description="Category labels from the feed")

    @computed_field
    @property
    def card_text(self) -> str:
        """Text shown on the episode's title card."""
        return f"{self.number}: {self.title}"


class FeedLocator:
    """Fetches a podcast feed and finds episodes by number."""

    def __init__(self, ordinal_field: str = "order", timeout_seconds: int = 30) -> None:
        """Initialize the locator.

        Args:
            ordinal_field: Item element holding the episode number. Items
                without it fall back to ``itunes:episode``.
            timeout_seconds: HTTP request timeout.
        """
        self.ordinal_field = ordinal_field
        self.timeout = timeout_seconds
        self.logger = logger.bind(component="feed_locator")

    def locate_episode(self, feed_source: str, number: int) -> Episode:
        """Find the episode with the given number.

        Args:
            feed_source: Feed URL or path to a local feed document.
            number: Episode number to look for.

        Returns:
            Episode: The first item in document order carrying ``number``.

        Raises:
            FetchError: If the feed cannot be retrieved.
            ParseError: If the feed document is malformed.
            NotFoundError: If no item carries ``number``.
        """
        self.logger.info("Looking up episode", source=feed_source, number=number)

        document = self._fetch(feed_source)
        feed = self._parse(document, feed_source)

        for index, entry in enumerate(feed.entries):
            entry_number = self._entry_number(entry)
            if entry_number == number:
                tags = item_categories(document, index, len(feed.entries))
                episode = self._to_episode(entry, entry_number, tags)
                self.logger.info("Found episode", number=number, title=episode.title)
                return episode

        raise NotFoundError(number)

    def _fetch(self, feed_source: str) -> bytes:
        """Retrieve the raw feed document."""
        if not feed_source.startswith(("http://", "https://")):
            try:
                return Path(feed_source).read_bytes()
            except OSError as e:
                raise FetchError(feed_source, e) from e

        try:
            with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                response = client.get(feed_source)
                response.raise_for_status()
                return response.content
        except httpx.HTTPError as e:
            raise FetchError(feed_source, e) from e

    def _parse(self, document: bytes, feed_source: str) -> Any:
        """Parse the feed document, rejecting anything that is not a feed."""
        feed = feedparser.parse(document)

        if feed.bozo and not feed.entries:
            raise ParseError(f"could not decode feed {feed_source}: {feed.bozo_exception}")

        if not feed.version and not feed.entries:
            raise ParseError(f"{feed_source} is not an RSS or Atom feed")

        return feed

    def _entry_number(self, entry: dict[str, Any]) -> int | None:
        """Read the episode number of a feed item, None if it has none."""
        value = entry.get(self.ordinal_field)
        if value is None:
            value = entry.get("itunes_episode")
        if value is None or not str(value).strip():
            return None

        try:
            return int(str(value).strip())
        except ValueError as e:
            raise ParseError(
                f"item {entry.get('title', '?')!r} has a non-numeric episode number {value!r}"
            ) from e

    def _to_episode(
        self, entry: dict[str, Any], number: int, tags: list[str] | None = None
    ) -> Episode:
        """Build an Episode from a matching feed item.

        ``tags`` replaces the categories feedparser reports, which it
        deduplicates.
        """
        audio_url = None
        for enclosure in entry.get("enclosures", []):
            audio_url = enclosure.get("href") or enclosure.get("url")
            if audio_url:
                break

        if not audio_url:
            raise ParseError(f"episode {number} has no audio enclosure")

        if tags is None:
            tags = [
                tag["term"]
                for tag in entry.get("tags", [])
                if tag.get("term") and tag.get("scheme") != ITUNES_SCHEME
            ]

        return Episode(
            title=entry.get("title", ""),
            number=number,
            link=entry.get("id") or entry.get("link", ""),
            description=entry.get("summary", ""),
            audio_url=audio_url,
            tags=tags,
        )


def item_categories(document: bytes, index: int, entry_count: int) -> list[str] | None:
    """Category labels of the ``index``-th feed item, in order and with duplicates.

    Only plain RSS ``<category>`` and Atom ``<category term>`` elements
    count. Returns None when the document is not well-formed XML, declares
    entities, or its items do not line up with ``entry_count`` parsed
    entries.
    """
    try:
        root = safe_fromstring(document)
    except (XMLParseError, DefusedXmlException):
        return None

    items = [
        element
        for element in root.iter()
        if element.tag == "item" or element.tag == f"{{{ATOM_NAMESPACE}}}entry"
    ]
    if len(items) != entry_count:
        return None

    categories = []
    for child in items[index]:
        if child.tag == "category":
            term = (child.text or "").strip()
        elif child.tag == f"{{{ATOM_NAMESPACE}}}category":
            term = (child.get("term") or "").strip()
        else:
            continue
        if term:
            categories.append(term)
    return categories
