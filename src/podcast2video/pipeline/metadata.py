"""Publish metadata derived from an episode."""

from collections.abc import Iterable

from pydantic import BaseModel, Field

from podcast2video.errors import InvalidInputError
from podcast2video.ingestion.feed_locator import Episode


class PublishMetadata(BaseModel):
    """Title, description and tags handed to the publisher."""

    title: str
    description: str
    tags: list[str] = Field(default_factory=list)


def strip_markup(text: str) -> str:
    """Drop everything between ``<`` and ``>`` and turn newlines into spaces.

    This is a plain scan with a single in-tag flag, not an HTML parser.
    An unmatched ``<`` drops the rest of the text.
    """
    kept = []
    in_tag = False
    for char in text:
        if not in_tag and char == "<":
            in_tag = True
        elif in_tag and char == ">":
            in_tag = False
            continue
        if not in_tag:
            kept.append(char)
    return "".join(kept).replace("\n", " ")


def derive_title(template: str, title: str, number: int) -> str:
    """Fill a ``%``-style template with the episode title and number."""
    try:
        return template % (title, number)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"invalid title template {template!r}: {e}") from e


def derive_description(link: str, description: str) -> str:
    return f"Original post: {link}\n\n" + strip_markup(description)


def derive_tags(tags: Iterable[str], extra_tags: Iterable[str]) -> list[str]:
    return [*tags, *extra_tags]


def derive_metadata(
    episode: Episode,
    title_template: str,
    extra_tags: Iterable[str],
) -> PublishMetadata:
    """Build the publish metadata for an episode."""
    return PublishMetadata(
        title=derive_title(title_template, episode.title, episode.number),
        description=derive_description(episode.link, episode.description),
        tags=derive_tags(episode.tags, extra_tags),
    )
