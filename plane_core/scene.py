from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from typing import Iterable, Tuple

from .math2d import Vec2


@dataclass(frozen=True)
class Point:
    """A labeled dot placed at a world position."""

    id: str
    x: float
    y: float
    color: str = "#ffffff"
    size: float = 6.0
    label: str = ""
    visible: bool = True

    def position(self) -> Vec2:
        return Vec2(self.x, self.y)

    def is_drawable(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.size))

    def with_updates(self, **changes) -> "Point":
        return replace(self, **changes)


@dataclass(frozen=True)
class Vector:
    """An arrow anchored at a world start position.

    The end point is always derived from ``length`` and ``angle`` (degrees,
    counter-clockwise from +X in world space) and is never stored.
    ``label_position`` is the fraction along the shaft where the label sits;
    values outside ``[0, 1]`` are kept as-is and place the label off the shaft.
    """

    id: str
    start_x: float
    start_y: float
    length: float = 2.0
    angle: float = 0.0
    color: str = "#f59e0b"
    thickness: float = 2.0
    arrow_size: float = 10.0
    label: str = ""
    label_position: float = 0.5
    visible: bool = True

    def start(self) -> Vec2:
        return Vec2(self.start_x, self.start_y)

    def end(self) -> Vec2:
        return self.start() + Vec2.from_polar(self.length, self.angle)

    def is_drawable(self) -> bool:
        values = (
            self.start_x,
            self.start_y,
            self.length,
            self.angle,
            self.thickness,
            self.arrow_size,
            self.label_position,
        )
        return all(math.isfinite(v) for v in values)

    def with_updates(self, **changes) -> "Vector":
        return replace(self, **changes)


@dataclass
class StyleConfig:
    """Presentation options for the plane; colors are any string QColor accepts."""

    bg_color: str = "#0f172a"
    axis_color: str = "#ffffff"
    grid_color_major: str = "#334155"
    grid_color_minor: str = "#1e293b"
    text_color: str = "#94a3b8"
    show_grid: bool = True
    show_labels: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "StyleConfig":
        style = cls()
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            if f.name.startswith("show_"):
                setattr(style, f.name, bool(value))
            elif isinstance(value, str):
                setattr(style, f.name, value)
        return style

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class SceneSnapshot:
    """Points and vectors as seen by a single frame."""

    points: Tuple[Point, ...] = field(default_factory=tuple)
    vectors: Tuple[Vector, ...] = field(default_factory=tuple)

    @classmethod
    def capture(cls, points: Iterable[Point] | None, vectors: Iterable[Vector] | None) -> "SceneSnapshot":
        return cls(tuple(points or ()), tuple(vectors or ()))


def demo_scene() -> SceneSnapshot:
    """Starter objects shown when the editor has not supplied any."""
    return SceneSnapshot(
        points=(
            Point("1", 2.0, 3.0, color="#3b82f6", size=6.0, label="A"),
            Point("2", -4.0, 1.0, color="#ef4444", size=6.0, label="B"),
        ),
        vectors=(
            Vector(
                "v1",
                0.0,
                0.0,
                length=5.0,
                angle=45.0,
                color="#10b981",
                thickness=2.0,
                arrow_size=12.0,
                label="v",
                label_position=0.5,
            ),
        ),
    )
