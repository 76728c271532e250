"""Pillow-backed raster surface.

Each primitive is painted on a transparent layer clipped to its bounding box
and alpha-composited onto the canvas, which reproduces canvas-style
source-over blending for the translucent fills the render modes rely on.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from pathlib import Path

from PIL import Image, ImageDraw

from ..errors import SurfaceUnavailable
from .color import RGBA8, Color, LinearGradient, Paint, RadialGradient
from .surface import Point

logger = logging.getLogger(__name__)

_Box = tuple[int, int, int, int]


class RasterSurface:
    """RGBA pixel surface addressed in logical coordinates.

    ``scale`` is the pixel density: logical (x, y) maps to pixel
    (x * scale, y * scale).
    """

    def __init__(self, width: float, height: float, *, scale: float = 1.0) -> None:
        if scale <= 0:
            raise ValueError("Raster surface scale must be positive.")
        self._scale = float(scale)
        self._width = float(width)
        self._height = float(height)
        self._attached = True
        self._image = self._blank()

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def pixel_size(self) -> tuple[int, int]:
        return self._image.size

    @property
    def is_attached(self) -> bool:
        return self._attached

    def detach(self) -> None:
        self._attached = False

    def attach(self) -> None:
        self._attached = True

    def to_image(self) -> Image.Image:
        """Return a copy of the RGBA canvas."""
        return self._image.copy()

    def flatten(self, background: tuple[int, int, int] = (0, 0, 0)) -> Image.Image:
        """Return the canvas composited over an opaque background as RGB."""
        base = Image.new("RGBA", self._image.size, (*background, 255))
        base.alpha_composite(self._image)
        return base.convert("RGB")

    def save_png(self, path: Path | str) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        self.flatten().save(target, format="PNG")
        logger.info(
            "Saved raster snapshot",
            extra={"event": "raster_snapshot_saved", "path": str(target)},
        )
        return target

    def clear(self) -> None:
        self._require_attached()
        self._image = self._blank()

    def resize(self, width: float, height: float) -> None:
        self._width = float(width)
        self._height = float(height)
        self._image = self._blank()

    def fill_rect(
        self, x: float, y: float, width: float, height: float, paint: Paint
    ) -> None:
        self._require_attached()
        s = self._scale
        left, top = x * s, y * s
        right, bottom = (x + width) * s, (y + height) * s
        box = self._clip((left, top, right, bottom))
        if box is None:
            return
        layer = Image.new("RGBA", _box_size(box), (0, 0, 0, 0))
        if isinstance(paint, LinearGradient):
            self._paint_linear(layer, box, paint)
        elif isinstance(paint, RadialGradient):
            self._paint_radial_rect(layer, box, paint)
        else:
            layer.paste(paint.to_rgba8(), (0, 0, *layer.size))
        self._image.alpha_composite(layer, dest=(box[0], box[1]))

    def stroke_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        color: Color,
        line_width: float = 1.0,
    ) -> None:
        self.stroke_polyline(((x1, y1), (x2, y2)), color, line_width)

    def stroke_polyline(
        self, points: Sequence[Point], color: Color, line_width: float = 1.0
    ) -> None:
        self._require_attached()
        if len(points) < 2:
            return
        s = self._scale
        scaled = [(px * s, py * s) for px, py in points]
        pad = line_width * s
        box = self._clip(
            (
                min(px for px, _ in scaled) - pad,
                min(py for _, py in scaled) - pad,
                max(px for px, _ in scaled) + pad,
                max(py for _, py in scaled) + pad,
            )
        )
        if box is None:
            return
        layer = Image.new("RGBA", _box_size(box), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        local = [(px - box[0], py - box[1]) for px, py in scaled]
        draw.line(
            local,
            fill=color.to_rgba8(),
            width=_pixel_width(line_width, s),
            joint="curve",
        )
        self._image.alpha_composite(layer, dest=(box[0], box[1]))

    def stroke_circle(
        self,
        cx: float,
        cy: float,
        radius: float,
        color: Color,
        line_width: float = 1.0,
    ) -> None:
        self._require_attached()
        s = self._scale
        half = line_width * s / 2.0
        r = radius * s
        box = self._clip(
            (cx * s - r - half, cy * s - r - half, cx * s + r + half, cy * s + r + half)
        )
        if box is None:
            return
        layer = Image.new("RGBA", _box_size(box), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        ox, oy = cx * s - box[0], cy * s - box[1]
        outer = r + half
        draw.ellipse(
            (ox - outer, oy - outer, ox + outer, oy + outer),
            outline=color.to_rgba8(),
            width=_pixel_width(line_width, s),
        )
        self._image.alpha_composite(layer, dest=(box[0], box[1]))

    def fill_circle(self, cx: float, cy: float, radius: float, paint: Paint) -> None:
        self._require_attached()
        s = self._scale
        r = radius * s
        box = self._clip((cx * s - r, cy * s - r, cx * s + r, cy * s + r))
        if box is None or r <= 0:
            return
        layer = Image.new("RGBA", _box_size(box), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        ox, oy = cx * s - box[0], cy * s - box[1]
        if isinstance(paint, RadialGradient):
            # Outer rings first; each smaller disc overwrites the center.
            steps = max(1, int(math.ceil(r)))
            for step in range(steps, 0, -1):
                ring_r = r * step / steps
                draw.ellipse(
                    (ox - ring_r, oy - ring_r, ox + ring_r, oy + ring_r),
                    fill=_radial_color(paint, ring_r / s),
                )
        elif isinstance(paint, LinearGradient):
            draw.ellipse((ox - r, oy - r, ox + r, oy + r), fill=paint.color_at(0.5))
        else:
            draw.ellipse((ox - r, oy - r, ox + r, oy + r), fill=paint.to_rgba8())
        self._image.alpha_composite(layer, dest=(box[0], box[1]))

    def _paint_linear(
        self, layer: Image.Image, box: _Box, gradient: LinearGradient
    ) -> None:
        s = self._scale
        x0, y0 = gradient.x0 * s, gradient.y0 * s
        dx, dy = (gradient.x1 - gradient.x0) * s, (gradient.y1 - gradient.y0) * s
        length_sq = (dx * dx) + (dy * dy)
        width, height = layer.size
        if length_sq <= 0.0:
            layer.paste(gradient.color_at(0.0), (0, 0, width, height))
            return
        if dx == 0.0:
            draw = ImageDraw.Draw(layer)
            for row in range(height):
                py = box[1] + row + 0.5
                t = ((py - y0) * dy) / length_sq
                draw.line(((0, row), (width - 1, row)), fill=gradient.color_at(t))
            return
        pixels: list[RGBA8] = []
        for row in range(height):
            py = box[1] + row + 0.5
            for col in range(width):
                px = box[0] + col + 0.5
                t = (((px - x0) * dx) + ((py - y0) * dy)) / length_sq
                pixels.append(gradient.color_at(t))
        layer.putdata(pixels)

    def _paint_radial_rect(
        self, layer: Image.Image, box: _Box, gradient: RadialGradient
    ) -> None:
        s = self._scale
        width, height = layer.size
        pixels: list[RGBA8] = []
        for row in range(height):
            py = (box[1] + row + 0.5) / s
            for col in range(width):
                px = (box[0] + col + 0.5) / s
                distance = math.hypot(px - gradient.cx, py - gradient.cy)
                pixels.append(_radial_color(gradient, distance))
        layer.putdata(pixels)

    def _clip(self, bounds: tuple[float, float, float, float]) -> _Box | None:
        img_w, img_h = self._image.size
        left = max(0, int(math.floor(bounds[0])))
        top = max(0, int(math.floor(bounds[1])))
        right = min(img_w, int(math.ceil(bounds[2])))
        bottom = min(img_h, int(math.ceil(bounds[3])))
        if right <= left or bottom <= top:
            return None
        return (left, top, right, bottom)

    def _blank(self) -> Image.Image:
        size = (
            max(1, int(round(self._width * self._scale))),
            max(1, int(round(self._height * self._scale))),
        )
        return Image.new("RGBA", size, (0, 0, 0, 0))

    def _require_attached(self) -> None:
        if not self._attached:
            raise SurfaceUnavailable("Raster surface is detached.")


def _radial_color(gradient: RadialGradient, distance: float) -> RGBA8:
    span = gradient.outer_radius - gradient.inner_radius
    if span <= 0.0:
        return gradient.color_at(1.0 if distance >= gradient.outer_radius else 0.0)
    return gradient.color_at((distance - gradient.inner_radius) / span)


def _box_size(box: _Box) -> tuple[int, int]:
    return (box[2] - box[0], box[3] - box[1])


def _pixel_width(line_width: float, scale: float) -> int:
    return max(1, int(round(line_width * scale)))
