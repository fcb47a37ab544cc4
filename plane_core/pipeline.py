from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable, Sequence, Set

from PyQt6 import QtCore, QtGui

from . import primitives
from .grid import calculate_step, format_tick, grid_values, is_origin, minor_step
from .math2d import Vec2
from .scene import Point, StyleConfig, Vector
from .viewport import CoordinateTransform, ViewSnapshot, ViewState, clamp_unit_size

logger = logging.getLogger(__name__)

MINOR_GRID_WIDTH = 0.5
MAJOR_GRID_WIDTH = 1.0
AXIS_WIDTH = 2.0
TICK_WIDTH = 1.5
TICK_HALF_LEN = 4.0
EDGE_ARROW_LEN = 10.0
EDGE_ARROW_HALF_WIDTH = 5.0
VECTOR_HEAD_ASPECT = 2.5
VECTOR_LABEL_LIFT = 10.0
POINT_LABEL_GAP = 4.0


@dataclass
class RenderStats:
    """What one frame actually drew; skipped counts are objects with non-finite data."""

    minor_lines: int = 0
    major_lines: int = 0
    ticks: int = 0
    vectors_drawn: int = 0
    vectors_skipped: int = 0
    points_drawn: int = 0
    points_skipped: int = 0
    step_x: float = 0.0
    step_y: float = 0.0


class RenderPipeline:
    """Redraws the whole plane from scratch on every call.

    Nothing about the scene is cached between frames: the transform and grid
    steps are recomputed from the surface size and view passed in, so a resize
    or a view change is picked up on the very next frame. The only state kept
    is the set of bad color strings already warned about.
    """

    def __init__(self) -> None:
        self._warned_colors: Set[str] = set()

    def _color(self, value: object) -> QtGui.QColor:
        return primitives.resolve_color(value, warned=self._warned_colors)

    def render(
        self,
        painter: QtGui.QPainter,
        width: float,
        height: float,
        view: ViewState | ViewSnapshot,
        style: StyleConfig,
        points: Sequence[Point] = (),
        vectors: Sequence[Vector] = (),
    ) -> RenderStats:
        if isinstance(view, ViewState):
            view = view.snapshot()
        # Snapshots can be built by hand, so scales are clamped here too.
        view = replace(
            view,
            unit_size_x=clamp_unit_size(view.unit_size_x),
            unit_size_y=clamp_unit_size(view.unit_size_y),
        )
        stats = RenderStats()
        tf = CoordinateTransform.from_view(width, height, view)
        stats.step_x = calculate_step(tf.unit_size_x)
        stats.step_y = calculate_step(tf.unit_size_y)

        painter.save()
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing)
        try:
            self._draw_background(painter, tf, style)
            if style.show_grid:
                self._draw_grid(painter, tf, style, stats)
            axis_color = self._color(style.axis_color)
            self._draw_axes(painter, tf, axis_color)
            if style.show_labels:
                self._draw_ticks(painter, tf, axis_color, stats)
                self._draw_tick_labels(painter, tf, style, stats)
            self._draw_edge_arrows(painter, tf, axis_color)
            self._draw_vectors(painter, tf, vectors or (), stats)
            self._draw_points(painter, tf, style, points or (), stats)
        finally:
            painter.restore()
        return stats

    # -- decorations -------------------------------------------------------
    def _draw_background(self, painter: QtGui.QPainter, tf: CoordinateTransform, style: StyleConfig) -> None:
        painter.fillRect(QtCore.QRectF(0.0, 0.0, tf.width_px, tf.height_px), self._color(style.bg_color))

    def _grid_xs(self, tf: CoordinateTransform, step: float) -> list[float]:
        world = tf.visible_world_rect()
        return [tf.center_x + x * tf.unit_size_x for x in grid_values(world.xmin, world.xmax, step)]

    def _grid_ys(self, tf: CoordinateTransform, step: float) -> list[float]:
        world = tf.visible_world_rect()
        return [tf.center_y - y * tf.unit_size_y for y in grid_values(world.ymin, world.ymax, step)]

    def _draw_grid(self, painter: QtGui.QPainter, tf: CoordinateTransform, style: StyleConfig, stats: RenderStats) -> None:
        minor = self._color(style.grid_color_minor)
        major = self._color(style.grid_color_major)
        stats.minor_lines += primitives.draw_vertical_lines(
            painter, self._grid_xs(tf, minor_step(stats.step_x)), tf.height_px, minor, MINOR_GRID_WIDTH
        )
        stats.minor_lines += primitives.draw_horizontal_lines(
            painter, self._grid_ys(tf, minor_step(stats.step_y)), tf.width_px, minor, MINOR_GRID_WIDTH
        )
        stats.major_lines += primitives.draw_vertical_lines(
            painter, self._grid_xs(tf, stats.step_x), tf.height_px, major, MAJOR_GRID_WIDTH
        )
        stats.major_lines += primitives.draw_horizontal_lines(
            painter, self._grid_ys(tf, stats.step_y), tf.width_px, major, MAJOR_GRID_WIDTH
        )

    def _draw_axes(self, painter: QtGui.QPainter, tf: CoordinateTransform, color: QtGui.QColor) -> None:
        origin = tf.origin()
        primitives.draw_horizontal_lines(painter, [origin.y()], tf.width_px, color, AXIS_WIDTH)
        primitives.draw_vertical_lines(painter, [origin.x()], tf.height_px, color, AXIS_WIDTH)

    def _tick_positions(self, tf: CoordinateTransform, stats: RenderStats):
        world = tf.visible_world_rect()
        xs = [x for x in grid_values(world.xmin, world.xmax, stats.step_x) if not is_origin(x, stats.step_x)]
        ys = [y for y in grid_values(world.ymin, world.ymax, stats.step_y) if not is_origin(y, stats.step_y)]
        return xs, ys

    def _draw_ticks(self, painter: QtGui.QPainter, tf: CoordinateTransform, color: QtGui.QColor, stats: RenderStats) -> None:
        xs, ys = self._tick_positions(tf, stats)
        lines = []
        for x in xs:
            px = tf.center_x + x * tf.unit_size_x
            lines.append(QtCore.QLineF(px, tf.center_y - TICK_HALF_LEN, px, tf.center_y + TICK_HALF_LEN))
        for y in ys:
            py = tf.center_y - y * tf.unit_size_y
            lines.append(QtCore.QLineF(tf.center_x - TICK_HALF_LEN, py, tf.center_x + TICK_HALF_LEN, py))
        stats.ticks += primitives.stroke_lines(painter, lines, color, TICK_WIDTH)

    def _draw_tick_labels(self, painter: QtGui.QPainter, tf: CoordinateTransform, style: StyleConfig, stats: RenderStats) -> None:
        color = self._color(style.text_color)
        font = primitives.mono_font(10)
        xs, ys = self._tick_positions(tf, stats)
        for x in xs:
            anchor = QtCore.QPointF(tf.center_x + x * tf.unit_size_x, tf.center_y + 18.0)
            primitives.draw_text(painter, format_tick(x), anchor, color, font, align="center")
        for y in ys:
            anchor = QtCore.QPointF(tf.center_x - 12.0, tf.center_y - y * tf.unit_size_y + 4.0)
            primitives.draw_text(painter, format_tick(y), anchor, color, font, align="right")
        primitives.draw_text(
            painter, "0", QtCore.QPointF(tf.center_x - 12.0, tf.center_y + 18.0), color, font, align="right"
        )

    def _draw_edge_arrows(self, painter: QtGui.QPainter, tf: CoordinateTransform, color: QtGui.QColor) -> None:
        # Marks the axes as running off past every edge of the surface.
        origin = tf.origin()
        edges = (
            (QtCore.QPointF(tf.width_px, origin.y()), 0.0),
            (QtCore.QPointF(0.0, origin.y()), math.pi),
            (QtCore.QPointF(origin.x(), 0.0), -math.pi / 2.0),
            (QtCore.QPointF(origin.x(), tf.height_px), math.pi / 2.0),
        )
        for tip, angle in edges:
            primitives.draw_arrowhead(painter, tip, angle, EDGE_ARROW_LEN, EDGE_ARROW_HALF_WIDTH, color)

    # -- objects -----------------------------------------------------------
    def _draw_vectors(self, painter: QtGui.QPainter, tf: CoordinateTransform, vectors: Iterable[Vector], stats: RenderStats) -> None:
        label_font = None
        for vec in vectors:
            if not vec.visible:
                continue
            if not vec.is_drawable():
                stats.vectors_skipped += 1
                continue
            world_start = vec.start()
            world_end = vec.end()
            start = Vec2.from_point(tf.world_to_screen(world_start.x, world_start.y))
            end = Vec2.from_point(tf.world_to_screen(world_end.x, world_end.y))
            if not (start.is_finite() and end.is_finite()):
                # Finite in world space but overflows once scaled to pixels.
                logger.debug("vector %s is outside the screen range", vec.id)
                stats.vectors_skipped += 1
                continue
            try:
                if vec.label and label_font is None:
                    label_font = primitives.sans_font(12, bold=True)
                self._draw_vector(painter, vec, start, end, label_font)
            except Exception:
                logger.exception("failed to draw vector %s", vec.id)
                stats.vectors_skipped += 1
                continue
            stats.vectors_drawn += 1

    def _draw_vector(self, painter: QtGui.QPainter, vec: Vector, start: Vec2, end: Vec2, label_font) -> None:
        color = self._color(vec.color)

        painter.save()
        painter.setPen(primitives.make_pen(color, vec.thickness))
        painter.drawLine(start.to_point(), end.to_point())
        painter.restore()

        # Screen-space heading: differs from vec.angle when unit sizes differ.
        visual_angle = (end - start).heading()
        primitives.draw_arrowhead(
            painter,
            end.to_point(),
            visual_angle,
            vec.arrow_size,
            vec.arrow_size / VECTOR_HEAD_ASPECT,
            color,
        )

        if vec.label:
            at = start.lerp(end, vec.label_position)
            anchor = QtCore.QPointF(at.x, at.y - VECTOR_LABEL_LIFT)
            primitives.draw_text(painter, vec.label, anchor, color, label_font, align="center")

    def _draw_points(
        self,
        painter: QtGui.QPainter,
        tf: CoordinateTransform,
        style: StyleConfig,
        points: Iterable[Point],
        stats: RenderStats,
    ) -> None:
        text_color = self._color(style.text_color)
        label_font = None
        for point in points:
            if not point.visible:
                continue
            if not point.is_drawable():
                stats.points_skipped += 1
                continue
            pos = point.position()
            center = tf.world_to_screen(pos.x, pos.y)
            if not Vec2.from_point(center).is_finite():
                logger.debug("point %s is outside the screen range", point.id)
                stats.points_skipped += 1
                continue
            try:
                primitives.draw_dot(painter, center, point.size, self._color(point.color))
                if point.label:
                    if label_font is None:
                        label_font = primitives.sans_font(12)
                    gap = point.size + POINT_LABEL_GAP
                    anchor = QtCore.QPointF(center.x() + gap, center.y() - gap)
                    primitives.draw_text(painter, point.label, anchor, text_color, label_font)
            except Exception:
                logger.exception("failed to draw point %s", point.id)
                stats.points_skipped += 1
                continue
            stats.points_drawn += 1
