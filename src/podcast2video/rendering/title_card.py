"""Title card rendering with Pillow.

A title card is a solid background with the podcast logo in the left
third and the episode text centered in the remaining space. Layout only
depends on the inputs, so the same inputs always give the same pixels.
"""

import re
from pathlib import Path

import structlog
from PIL import Image, ImageDraw, ImageFont

from podcast2video.errors import InvalidInputError, WorkspaceError

logger = structlog.get_logger(__name__)

HEX_COLOR = re.compile(r"[0-9a-fA-F]{6}")
ELLIPSIS = "..."

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


def parse_hex_color(value: str) -> tuple[int, int, int]:
    """Parse a six digit hex color such as ``009688`` into an RGB tuple."""
    if not isinstance(value, str) or not HEX_COLOR.fullmatch(value):
        raise InvalidInputError(f"invalid hex color {value!r}, expected six hex digits")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def load_logo(path: str | Path) -> Image.Image:
    """Load and fully decode a single-frame logo image.

    Args:
        path: Path to the logo file (PNG or another lossless format).

    Returns:
        The decoded logo in RGBA mode.

    Raises:
        InvalidInputError: If the file is missing, undecodable, animated or
            too large to decode safely.
    """
    path = Path(path)
    try:
        with Image.open(path) as image:
            if getattr(image, "n_frames", 1) > 1:
                raise InvalidInputError(f"logo {path} has {image.n_frames} frames, expected one")
            image.load()
            return image.convert("RGBA")
    except (OSError, Image.DecompressionBombError) as e:
        raise InvalidInputError(f"could not load logo {path}: {e}") from e


def save_png(image: Image.Image, path: str | Path) -> Path:
    """Write an image as PNG, returning the path written."""
    path = Path(path)
    try:
        with open(path, "wb") as f:
            image.save(f, format="PNG")
    except OSError as e:
        raise WorkspaceError(f"could not write {path}: {e}") from e
    return path


def render_title_card(
    logo: Image.Image,
    text: str,
    fg_color: str,
    bg_color: str,
    width: int,
    height: int,
    font_path: str | None = None,
) -> Image.Image:
    """Compose a title card.

    Args:
        logo: Decoded logo image.
        text: Text to draw, wrapped or truncated to fit.
        fg_color: Hex color of the text.
        bg_color: Hex color of the background.
        width: Card width in pixels.
        height: Card height in pixels.
        font_path: Optional TrueType font, Pillow's bundled font otherwise.

    Returns:
        An RGB image of exactly ``width`` x ``height`` pixels.

    Raises:
        InvalidInputError: On bad colors, dimensions, logo or font.
    """
    fg = parse_hex_color(fg_color)
    bg = parse_hex_color(bg_color)
    _check_dimension("width", width)
    _check_dimension("height", height)
    if not isinstance(logo, Image.Image):
        raise InvalidInputError(f"logo must be a decoded image, got {type(logo).__name__}")

    canvas = Image.new("RGB", (width, height), bg)
    margin = max(1, min(width, height) // 20)
    column = width // 3

    _paste_logo(canvas, logo, margin, column)
    _draw_text(canvas, text, fg, margin, column, font_path)

    logger.debug("Rendered title card", width=width, height=height, text=text)
    return canvas


def wrap_text(draw: ImageDraw.ImageDraw, text: str, font: Font, max_width: int) -> list[str]:
    """Wrap text on word boundaries, splitting words wider than ``max_width``."""
    lines: list[str] = []
    current = ""

    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if draw.textlength(candidate, font=font) <= max_width:
            current = candidate
            continue

        if current:
            lines.append(current)
        while len(word) > 1 and draw.textlength(word, font=font) > max_width:
            cut = _longest_prefix(draw, word, font, max_width)
            lines.append(word[:cut])
            word = word[cut:]
        current = word

    if current:
        lines.append(current)
    return lines


def _check_dimension(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInputError(f"{name} must be a positive integer, got {value!r}")


def _paste_logo(canvas: Image.Image, logo: Image.Image, margin: int, column: int) -> None:
    """Scale the logo into the left column, left aligned and vertically centered."""
    if logo.width == 0 or logo.height == 0:
        return

    box_w = max(1, column - margin)
    box_h = max(1, canvas.height - 2 * margin)
    scale = min(box_w / logo.width, box_h / logo.height)
    size = (max(1, round(logo.width * scale)), max(1, round(logo.height * scale)))

    resized = logo.convert("RGBA").resize(size, Image.Resampling.LANCZOS)
    top = (canvas.height - size[1]) // 2
    canvas.paste(resized, (margin, top), resized)


def _draw_text(
    canvas: Image.Image,
    text: str,
    fill: tuple[int, int, int],
    margin: int,
    column: int,
    font_path: str | None,
) -> None:
    """Draw wrapped text centered in the space right of the logo column."""
    left = column + margin
    box_w = max(1, canvas.width - margin - left)
    box_h = max(1, canvas.height - 2 * margin)

    font = _load_font(font_path, max(10, canvas.height // 12))
    draw = ImageDraw.Draw(canvas)

    glyph_height = draw.textbbox((0, 0), "Ag", font=font)[3]
    line_height = glyph_height + max(1, glyph_height // 4)
    max_lines = max(1, box_h // line_height)

    lines = wrap_text(draw, text, font, box_w)
    if len(lines) > max_lines:
        lines = lines[:max_lines]
        lines[-1] = _fit_with_ellipsis(draw, lines[-1], font, box_w)

    top = margin + (box_h - line_height * len(lines)) // 2
    for i, line in enumerate(lines):
        line_w = draw.textlength(line, font=font)
        x = left + int((box_w - line_w) // 2)
        draw.text((x, top + i * line_height), line, font=font, fill=fill)


def _load_font(font_path: str | None, size: int) -> Font:
    if font_path:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError as e:
            raise InvalidInputError(f"could not load font {font_path}: {e}") from e
    return ImageFont.load_default(size=size)


def _longest_prefix(draw: ImageDraw.ImageDraw, word: str, font: Font, max_width: int) -> int:
    """Length of the longest prefix of ``word`` that fits, at least one character."""
    cut = 1
    while cut < len(word) and draw.textlength(word[: cut + 1], font=font) <= max_width:
        cut += 1
    return cut


def _fit_with_ellipsis(draw: ImageDraw.ImageDraw, line: str, font: Font, max_width: int) -> str:
    while line and draw.textlength(line + ELLIPSIS, font=font) > max_width:
        line = line[:-1]
    return line.rstrip() + ELLIPSIS
