"""Title card rendering."""

from podcast2video.rendering.title_card import (
    load_logo,
    parse_hex_color,
    render_title_card,
    save_png,
)

__all__ = ["render_title_card", "load_logo", "save_png", "parse_hex_color"]
