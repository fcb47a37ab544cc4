from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from PyQt6 import QtCore

logger = logging.getLogger(__name__)

UNIT_SIZE_MIN = 2.0
UNIT_SIZE_MAX = 5000.0
DEFAULT_UNIT_SIZE = 60.0


def clamp_unit_size(value: float) -> float:
    value = float(value)
    if math.isnan(value):
        return DEFAULT_UNIT_SIZE
    return max(UNIT_SIZE_MIN, min(UNIT_SIZE_MAX, value))


@dataclass(frozen=True)
class ViewSnapshot:
    """Read-only copy of a ViewState taken at the start of a frame."""

    origin_offset_x: float = 0.0
    origin_offset_y: float = 0.0
    unit_size_x: float = DEFAULT_UNIT_SIZE
    unit_size_y: float = DEFAULT_UNIT_SIZE
    lock_aspect_ratio: bool = True


class ViewState:
    """Pan offset and per-axis scale of the plane.

    Invariants hold after every method returns and after every attribute
    assignment: both unit sizes stay inside ``[UNIT_SIZE_MIN, UNIT_SIZE_MAX]``
    and, while ``lock_aspect_ratio`` is set, ``unit_size_x == unit_size_y``.
    Each update is complete on return, so a render tick never observes a
    half-applied pan or zoom.
    """

    def __init__(
        self,
        origin_offset_x: float = 0.0,
        origin_offset_y: float = 0.0,
        unit_size_x: float = DEFAULT_UNIT_SIZE,
        unit_size_y: float = DEFAULT_UNIT_SIZE,
        lock_aspect_ratio: bool = True,
    ) -> None:
        self.origin_offset_x = 0.0
        self.origin_offset_y = 0.0
        self.pan_by(float(origin_offset_x), float(origin_offset_y))
        self._lock_aspect_ratio = bool(lock_aspect_ratio)
        self._unit_size_x = clamp_unit_size(unit_size_x)
        self._unit_size_y = self._unit_size_x if self._lock_aspect_ratio else clamp_unit_size(unit_size_y)

    def __repr__(self) -> str:
        return (
            f"ViewState(offset=({self.origin_offset_x:.1f}, {self.origin_offset_y:.1f}), "
            f"unit=({self.unit_size_x:.2f}, {self.unit_size_y:.2f}), lock={self.lock_aspect_ratio})"
        )

    @property
    def unit_size_x(self) -> float:
        return self._unit_size_x

    @unit_size_x.setter
    def unit_size_x(self, value: float) -> None:
        self.set_unit_size_x(value)

    @property
    def unit_size_y(self) -> float:
        return self._unit_size_y

    @unit_size_y.setter
    def unit_size_y(self, value: float) -> None:
        self.set_unit_size_y(value)

    @property
    def lock_aspect_ratio(self) -> bool:
        return self._lock_aspect_ratio

    @lock_aspect_ratio.setter
    def lock_aspect_ratio(self, locked: bool) -> None:
        self.set_lock_aspect_ratio(locked)

    def pan_by(self, dx: float, dy: float) -> None:
        if not (math.isfinite(dx) and math.isfinite(dy)):
            logger.warning("ignoring non-finite pan delta dx=%r dy=%r", dx, dy)
            return
        self.origin_offset_x += dx
        self.origin_offset_y += dy

    def zoom_by(self, factor: float) -> None:
        if not math.isfinite(factor) or factor <= 0:
            logger.warning("ignoring invalid zoom factor %r", factor)
            return
        new_x = clamp_unit_size(self._unit_size_x * factor)
        if self._lock_aspect_ratio:
            new_y = new_x
        else:
            new_y = clamp_unit_size(self._unit_size_y * factor)
        self._unit_size_x = new_x
        self._unit_size_y = new_y

    def set_unit_size_x(self, value: float) -> None:
        value = float(value)
        if not math.isfinite(value):
            logger.warning("ignoring non-finite unit size %r", value)
            return
        self._unit_size_x = clamp_unit_size(value)
        if self._lock_aspect_ratio:
            self._unit_size_y = self._unit_size_x

    def set_unit_size_y(self, value: float) -> None:
        value = float(value)
        if not math.isfinite(value):
            logger.warning("ignoring non-finite unit size %r", value)
            return
        self._unit_size_y = clamp_unit_size(value)
        if self._lock_aspect_ratio:
            self._unit_size_x = self._unit_size_y

    def set_lock_aspect_ratio(self, locked: bool) -> None:
        # Toggling either way re-squares the grid from the X scale.
        self._lock_aspect_ratio = bool(locked)
        self._unit_size_y = self._unit_size_x

    def reset(self) -> None:
        self.origin_offset_x = 0.0
        self.origin_offset_y = 0.0
        self._unit_size_x = DEFAULT_UNIT_SIZE
        self._unit_size_y = DEFAULT_UNIT_SIZE
        self._lock_aspect_ratio = True

    def snapshot(self) -> ViewSnapshot:
        return ViewSnapshot(
            origin_offset_x=self.origin_offset_x,
            origin_offset_y=self.origin_offset_y,
            unit_size_x=self._unit_size_x,
            unit_size_y=self._unit_size_y,
            lock_aspect_ratio=self._lock_aspect_ratio,
        )


@dataclass(frozen=True)
class WorldRect:
    xmin: float
    xmax: float
    ymin: float
    ymax: float


@dataclass(frozen=True)
class CoordinateTransform:
    """World<->screen mapping for one surface size and one view snapshot."""

    width_px: float
    height_px: float
    origin_offset_x: float
    origin_offset_y: float
    unit_size_x: float
    unit_size_y: float

    @classmethod
    def from_view(cls, width_px: float, height_px: float, view: ViewState | ViewSnapshot) -> "CoordinateTransform":
        return cls(
            width_px=float(width_px),
            height_px=float(height_px),
            origin_offset_x=view.origin_offset_x,
            origin_offset_y=view.origin_offset_y,
            unit_size_x=view.unit_size_x,
            unit_size_y=view.unit_size_y,
        )

    @property
    def center_x(self) -> float:
        return self.width_px / 2.0 + self.origin_offset_x

    @property
    def center_y(self) -> float:
        return self.height_px / 2.0 + self.origin_offset_y

    def origin(self) -> QtCore.QPointF:
        return QtCore.QPointF(self.center_x, self.center_y)

    def world_to_screen(self, x: float, y: float) -> QtCore.QPointF:
        # Screen Y grows downward.
        return QtCore.QPointF(
            self.center_x + x * self.unit_size_x,
            self.center_y - y * self.unit_size_y,
        )

    def screen_to_world(self, sx: float, sy: float) -> QtCore.QPointF:
        return QtCore.QPointF(
            (sx - self.center_x) / self.unit_size_x,
            (self.center_y - sy) / self.unit_size_y,
        )

    def visible_world_rect(self) -> WorldRect:
        top_left = self.screen_to_world(0.0, 0.0)
        bottom_right = self.screen_to_world(self.width_px, self.height_px)
        return WorldRect(
            xmin=top_left.x(),
            xmax=bottom_right.x(),
            ymin=bottom_right.y(),
            ymax=top_left.y(),
        )
