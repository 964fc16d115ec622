"""Command-line interface for podcast2video.

Provides commands to inspect an episode, preview its title card and run
the full publish pipeline.
"""

import argparse
import sys
from pathlib import Path

from pydantic import BaseModel, ValidationError

from podcast2video.config import Settings, get_settings
from podcast2video.errors import InvalidInputError, Podcast2VideoError
from podcast2video.ingestion import Episode, FeedLocator
from podcast2video.logging import setup_logging
from podcast2video.pipeline import Pipeline
from podcast2video.rendering import load_logo, render_title_card, save_png


def _load_settings(args: argparse.Namespace) -> Settings:
    """Settings from the environment with command-line overrides applied."""
    settings = get_settings()

    feed = {"url": args.rss} if args.rss else {}
    card = {
        key: value
        for key, value in (
            ("logo_path", Path(args.logo) if args.logo else None),
            ("fg_color", args.fg),
            ("bg_color", args.bg),
            ("width", args.width),
            ("height", args.height),
        )
        if value is not None
    }
    publish = {"title_template": args.title} if args.title else {}
    if getattr(args, "destination", None):
        publish["destination"] = args.destination

    settings = settings.model_copy(
        update={
            "feed": _override(settings.feed, feed),
            "card": _override(settings.card, card),
            "publish": _override(settings.publish, publish),
            "log_level": args.log_level or settings.log_level,
        }
    )
    setup_logging(log_level=settings.log_level, json_format=settings.json_logs)
    return settings


def _override(group: BaseModel, update: dict) -> BaseModel:
    """Copy of a settings group with command-line values applied and validated."""
    if not update:
        return group
    try:
        return type(group).model_validate({**group.model_dump(), **update})
    except ValidationError as e:
        raise InvalidInputError(f"invalid option: {e}") from e


def _make_locator(settings: Settings) -> FeedLocator:
    return FeedLocator(
        ordinal_field=settings.feed.ordinal_field,
        timeout_seconds=settings.feed.timeout_seconds,
    )


def _prompt_number() -> int:
    try:
        raw = input("episode number to publish: ").strip()
    except EOFError:
        raise InvalidInputError("no episode number given") from None
    try:
        return int(raw)
    except ValueError:
        raise InvalidInputError(f"invalid episode number {raw!r}") from None


def _confirm(episode: Episode) -> bool:
    print(f"episode {episode.number}: {episode.title}")
    try:
        answer = input("publish? (Y/n): ").strip()
    except EOFError:
        return False
    return answer in ("Y", "y", "")


def cmd_show(args: argparse.Namespace) -> int:
    """Show the episode with the given number."""
    settings = _load_settings(args)

    episode = _make_locator(settings).locate_episode(settings.feed.url, args.number)

    print(f"\nEpisode {episode.number}: {episode.title}")
    print(f"Link:  {episode.link}")
    print(f"Audio: {episode.audio_url}")
    print(f"Tags:  {', '.join(episode.tags) if episode.tags else 'N/A'}")

    return 0


def cmd_render(args: argparse.Namespace) -> int:
    """Render the title card of an episode to a PNG file."""
    settings = _load_settings(args)
    card = settings.card

    episode = _make_locator(settings).locate_episode(settings.feed.url, args.number)
    image = render_title_card(
        load_logo(card.logo_path),
        episode.card_text,
        card.fg_color,
        card.bg_color,
        card.width,
        card.height,
        font_path=card.font_path,
    )

    output_path = Path(args.output) if args.output else Path(f"episode-{episode.number}.png")
    save_png(image, output_path)
    print(f"Saved title card to: {output_path}")

    return 0


def cmd_publish(args: argparse.Namespace) -> int:
    """Build the video for an episode and publish it."""
    settings = _load_settings(args)

    number = args.number if args.number is not None else _prompt_number()
    pipeline = Pipeline(settings, confirm=None if args.yes else _confirm)
    result = pipeline.run(number)

    if result is None:
        print("Not published.")
        return 0

    print(f"\nPublished to {result.destination}: {result.url or result.video_id}")
    return 0


def main() -> int:
    """Main CLI entry point."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--rss", help="URL for the RSS feed")
    common.add_argument("--logo", help="Path to the PNG logo image")
    common.add_argument("--title", help="Template used for the title, e.g. '%%s: Ep %%d'")
    common.add_argument("--fg", help="Hex encoded color for the video text")
    common.add_argument("--bg", help="Hex encoded color for the video background")
    common.add_argument("-W", "--width", type=int, help="Width of the video in pixels")
    common.add_argument("-H", "--height", type=int, help="Height of the video in pixels")
    common.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level"
    )

    parser = argparse.ArgumentParser(
        prog="podcast2video",
        description="Turn a podcast episode into a still-image video and publish it",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # show command
    show_parser = subparsers.add_parser("show", parents=[common], help="Show an episode")
    show_parser.add_argument("number", type=int, help="Episode number")
    show_parser.set_defaults(func=cmd_show)

    # render command
    render_parser = subparsers.add_parser(
        "render", parents=[common], help="Render an episode's title card"
    )
    render_parser.add_argument("number", type=int, help="Episode number")
    render_parser.add_argument(
        "--output", "-o", help="Output PNG path (default: episode-<number>.png)"
    )
    render_parser.set_defaults(func=cmd_render)

    # publish command
    publish_parser = subparsers.add_parser(
        "publish", parents=[common], help="Build and publish an episode video"
    )
    publish_parser.add_argument(
        "number", type=int, nargs="?", help="Episode number (prompted for if omitted)"
    )
    publish_parser.add_argument(
        "--yes", "-y", action="store_true", help="Publish without asking for confirmation"
    )
    publish_parser.add_argument(
        "--destination", choices=["youtube", "gcs"], help="Where to publish the video"
    )
    publish_parser.set_defaults(func=cmd_publish)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except Podcast2VideoError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
