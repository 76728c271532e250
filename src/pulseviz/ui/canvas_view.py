"""Terminal widget showing a raster surface as half-block cells."""

from __future__ import annotations

from PIL import Image
from rich.style import Style
from rich.text import Text
from textual.events import Resize
from textual.message import Message
from textual.widget import Widget

from pulseviz.visualizers.raster import RasterSurface

# Logical units per terminal column; each row holds two vertical pixels.
LOGICAL_UNITS_PER_CELL = 8.0
HALF_BLOCK = "▀"

RGB = tuple[int, int, int]


class CanvasResized(Message):
    """Posted when the widget's logical drawing size changes."""

    def __init__(self, width: float, height: float) -> None:
        super().__init__()
        self.width = width
        self.height = height


class CanvasView(Widget):
    """Displays a `RasterSurface`, one terminal cell per two pixels."""

    DEFAULT_CSS = """
    CanvasView {
        width: 1fr;
        height: 1fr;
        background: black;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.surface = RasterSurface(
            LOGICAL_UNITS_PER_CELL,
            LOGICAL_UNITS_PER_CELL * 2,
            scale=1.0 / LOGICAL_UNITS_PER_CELL,
        )

    def on_resize(self, event: Resize) -> None:
        width, height = logical_size(event.size.width, event.size.height)
        self.post_message(CanvasResized(width, height))

    def render(self) -> Text:
        return half_block_text(self.surface.flatten())


def logical_size(columns: int, rows: int) -> tuple[float, float]:
    """Logical surface size for a widget of ``columns`` x ``rows`` cells."""
    return (
        max(1, columns) * LOGICAL_UNITS_PER_CELL,
        max(1, rows) * 2 * LOGICAL_UNITS_PER_CELL,
    )


def half_block_rows(image: Image.Image) -> list[list[tuple[RGB, RGB]]]:
    """Pair vertically adjacent pixels into (top, bottom) colors per cell."""
    rgb = image.convert("RGB")
    width, height = rgb.size
    pixels = rgb.load()
    rows: list[list[tuple[RGB, RGB]]] = []
    for y in range(0, height, 2):
        row: list[tuple[RGB, RGB]] = []
        for x in range(width):
            top = pixels[x, y]
            bottom = pixels[x, y + 1] if y + 1 < height else (0, 0, 0)
            row.append((top, bottom))
        rows.append(row)
    return rows


def half_block_text(image: Image.Image) -> Text:
    text = Text(no_wrap=True, overflow="crop")
    styles: dict[tuple[RGB, RGB], Style] = {}
    for line_idx, row in enumerate(half_block_rows(image)):
        if line_idx:
            text.append("\n")
        for pair in row:
            style = styles.get(pair)
            if style is None:
                top, bottom = pair
                style = Style(color=_hex(top), bgcolor=_hex(bottom))
                styles[pair] = style
            text.append(HALF_BLOCK, style=style)
    return text


def _hex(color: RGB) -> str:
    return f"#{color[0]:02x}{color[1]:02x}{color[2]:02x}"
