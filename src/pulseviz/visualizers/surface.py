"""Drawing surface contract and an in-memory recording implementation.

Render modes only talk to the `Surface` protocol. Coordinates are logical
(density independent); hosts deal with pixel scaling.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, TypeVar, Union

from ..errors import SurfaceUnavailable
from .color import Color, Paint

Point = tuple[float, float]


class Surface(Protocol):
    """Minimal set of primitives the render modes need."""

    @property
    def width(self) -> float: ...

    @property
    def height(self) -> float: ...

    @property
    def is_attached(self) -> bool: ...

    def clear(self) -> None: ...

    def resize(self, width: float, height: float) -> None: ...

    def fill_rect(
        self, x: float, y: float, width: float, height: float, paint: Paint
    ) -> None: ...

    def stroke_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        color: Color,
        line_width: float = 1.0,
    ) -> None: ...

    def stroke_polyline(
        self, points: Sequence[Point], color: Color, line_width: float = 1.0
    ) -> None: ...

    def stroke_circle(
        self,
        cx: float,
        cy: float,
        radius: float,
        color: Color,
        line_width: float = 1.0,
    ) -> None: ...

    def fill_circle(
        self, cx: float, cy: float, radius: float, paint: Paint
    ) -> None: ...


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class FillRect:
    x: float
    y: float
    width: float
    height: float
    paint: Paint


@dataclass(frozen=True)
class StrokeLine:
    x1: float
    y1: float
    x2: float
    y2: float
    color: Color
    line_width: float


@dataclass(frozen=True)
class StrokePolyline:
    points: tuple[Point, ...]
    color: Color
    line_width: float


@dataclass(frozen=True)
class StrokeCircle:
    cx: float
    cy: float
    radius: float
    color: Color
    line_width: float


@dataclass(frozen=True)
class FillCircle:
    cx: float
    cy: float
    radius: float
    paint: Paint


DrawOp = Union[Clear, FillRect, StrokeLine, StrokePolyline, StrokeCircle, FillCircle]
OpT = TypeVar(
    "OpT", Clear, FillRect, StrokeLine, StrokePolyline, StrokeCircle, FillCircle
)


class RecordingSurface:
    """Surface that keeps an ordered log of draw operations instead of pixels."""

    def __init__(self, width: float, height: float) -> None:
        self._width = float(width)
        self._height = float(height)
        self._attached = True
        self.ops: list[DrawOp] = []

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def is_attached(self) -> bool:
        return self._attached

    @property
    def is_cleared(self) -> bool:
        """True when nothing has been drawn since the last clear."""
        return bool(self.ops) and isinstance(self.ops[-1], Clear)

    def detach(self) -> None:
        self._attached = False

    def attach(self) -> None:
        self._attached = True

    def reset_ops(self) -> None:
        self.ops.clear()

    def ops_of(self, kind: type[OpT]) -> list[OpT]:
        return [op for op in self.ops if isinstance(op, kind)]

    def clear(self) -> None:
        self._record(Clear())

    def resize(self, width: float, height: float) -> None:
        self._width = float(width)
        self._height = float(height)
        self.ops.clear()

    def fill_rect(
        self, x: float, y: float, width: float, height: float, paint: Paint
    ) -> None:
        self._record(FillRect(x, y, width, height, paint))

    def stroke_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        color: Color,
        line_width: float = 1.0,
    ) -> None:
        self._record(StrokeLine(x1, y1, x2, y2, color, line_width))

    def stroke_polyline(
        self, points: Sequence[Point], color: Color, line_width: float = 1.0
    ) -> None:
        self._record(StrokePolyline(tuple(points), color, line_width))

    def stroke_circle(
        self,
        cx: float,
        cy: float,
        radius: float,
        color: Color,
        line_width: float = 1.0,
    ) -> None:
        self._record(StrokeCircle(cx, cy, radius, color, line_width))

    def fill_circle(self, cx: float, cy: float, radius: float, paint: Paint) -> None:
        self._record(FillCircle(cx, cy, radius, paint))

    def _record(self, op: DrawOp) -> None:
        if not self._attached:
            raise SurfaceUnavailable("Recording surface is detached.")
        self.ops.append(op)
