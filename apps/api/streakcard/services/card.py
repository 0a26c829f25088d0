from __future__ import annotations

import math
import re
from collections.abc import Sequence

import svgwrite

from streakcard.schemas.streaks import StreakResult
from streakcard.services.platforms import platform_label

DEFAULT_COLOR = "#FF8C42"

MAX_TILES_PER_ROW = 4
TILE_WIDTH = 130
TILE_HEIGHT = 45
TILE_PITCH = 140
ROW_PITCH = 55
HEADER_HEIGHT = 100
MIN_CARD_WIDTH = 300

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")

_CARD_CSS = """
.tab { transition: opacity 0.3s; cursor: pointer; }
.tab:hover rect { opacity: 1 !important; }
a { cursor: pointer; }
"""

RGB = tuple[int, int, int]

_DEFAULT_RGB: RGB = (0xFF, 0x8C, 0x42)


def _parse_hex(value: str | None) -> RGB | None:
    match = _HEX_RE.match((value or "").strip())
    if not match:
        return None
    r, g, b = (int(part, 16) for part in match.groups())
    return r, g, b


def _to_hex(rgb: RGB) -> str:
    return "#" + "".join(f"{max(0, min(255, c)):02x}" for c in rgb)


def _shift(rgb: RGB, delta: int) -> str:
    return _to_hex((rgb[0] + delta, rgb[1] + delta, rgb[2] + delta))


def resolve_color(value: str | None) -> RGB:
    return _parse_hex(value) or _DEFAULT_RGB


def card_size(tile_count: int, *, show_header: bool) -> tuple[int, int]:
    tiles_per_row = max(1, min(MAX_TILES_PER_ROW, tile_count))
    rows = math.ceil(tile_count / tiles_per_row)
    width = max(MIN_CARD_WIDTH, 20 + tiles_per_row * TILE_PITCH)
    height = (HEADER_HEIGHT if show_header else 0) + rows * ROW_PITCH + 20
    return width, height


def _add_header(
    dwg: svgwrite.Drawing, *, width: int, name: str, greeting: str
) -> None:
    dwg.add(dwg.rect(insert=(0, 0), size=(width, HEADER_HEIGHT), rx=12, fill="url(#bgGrad)"))
    # Square off the bottom corners of the header band.
    dwg.add(dwg.rect(insert=(0, 12), size=(width, HEADER_HEIGHT - 12), fill="url(#bgGrad)"))
    if name:
        dwg.add(dwg.text(name, insert=(30, 38), fill="white", font_size=32, font_weight="bold"))
    if greeting:
        y = 65 if name else 50
        dwg.add(dwg.text(greeting, insert=(30, y), fill="white", font_size=15, opacity=0.95))


def _add_tile(
    dwg: svgwrite.Drawing, result: StreakResult, *, x: int, y: int, color: str
) -> None:
    link = dwg.a(href=result.url, target="_blank", rel="noopener noreferrer")
    tile = dwg.g(class_="tab")
    tile.add(dwg.rect(insert=(x, y), size=(TILE_WIDTH, TILE_HEIGHT), rx=8, fill=color, opacity=0.95))
    tile.add(
        dwg.text(
            platform_label(result.platform),
            insert=(x + 10, y + 20),
            fill="white",
            font_size=13,
            font_weight="600",
        )
    )
    tile.add(
        dwg.text(
            f"{result.streak} days 🔥",
            insert=(x + 10, y + 36),
            fill="white",
            font_size=18,
            font_weight="700",
        )
    )
    link.add(tile)
    dwg.add(link)


def render_card(
    results: Sequence[StreakResult],
    *,
    name: str = "",
    greeting: str = "",
    color: str | None = DEFAULT_COLOR,
) -> str:
    """
    Render the streak card as an SVG document.

    Tiles flow left to right, at most four per row, each linking to the
    user's profile on that platform. The header band is drawn only when a
    name or greeting is given.
    """
    rgb = resolve_color(color)
    base = _to_hex(rgb)
    lighter = _shift(rgb, 40)
    darker = _shift(rgb, -30)

    name = name.strip()
    greeting = greeting.strip()
    show_header = bool(name or greeting)
    width, height = card_size(len(results), show_header=show_header)
    header_height = HEADER_HEIGHT if show_header else 0
    tiles_per_row = max(1, min(MAX_TILES_PER_ROW, len(results)))

    dwg = svgwrite.Drawing(size=(width, height), profile="full", debug=False)

    gradient = dwg.linearGradient(start=(0, 0), end=("100%", "100%"), id="bgGrad")
    gradient.add_stop_color(offset=0, color=lighter)
    gradient.add_stop_color(offset=0.5, color=base)
    gradient.add_stop_color(offset=1, color=darker)
    dwg.defs.add(gradient)
    dwg.embed_stylesheet(_CARD_CSS)

    dwg.add(dwg.rect(insert=(0, 0), size=(width, height), rx=12, fill="#FFF5EB"))
    dwg.add(
        dwg.rect(
            insert=(0, 0),
            size=(width, height),
            rx=12,
            fill="none",
            stroke=lighter,
            stroke_width=3,
        )
    )

    if show_header:
        _add_header(dwg, width=width, name=name, greeting=greeting)

    for index, result in enumerate(results):
        row, col = divmod(index, tiles_per_row)
        _add_tile(
            dwg,
            result,
            x=20 + col * TILE_PITCH,
            y=header_height + 10 + row * ROW_PITCH,
            color=base,
        )

    return dwg.tostring()
