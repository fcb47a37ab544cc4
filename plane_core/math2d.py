from __future__ import annotations

import math
from dataclasses import dataclass

from PyQt6 import QtCore


@dataclass(frozen=True)
class Vec2:
    """Immutable 2D vector used for world and screen geometry."""

    x: float
    y: float

    @classmethod
    def from_polar(cls, length: float, angle_deg: float) -> "Vec2":
        rad = math.radians(angle_deg)
        return cls(length * math.cos(rad), length * math.sin(rad))

    @classmethod
    def from_point(cls, point: QtCore.QPointF) -> "Vec2":
        return cls(point.x(), point.y())

    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def heading(self) -> float:
        """Direction in radians; 0.0 for the zero vector."""
        return math.atan2(self.y, self.x)

    def lerp(self, other: "Vec2", t: float) -> "Vec2":
        return Vec2(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def to_point(self) -> QtCore.QPointF:
        return QtCore.QPointF(self.x, self.y)
