from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Set

from PyQt6 import QtCore, QtGui

logger = logging.getLogger(__name__)

FALLBACK_COLOR = "#808080"
MAX_WARNED_COLORS = 256


def resolve_color(
    value: object,
    fallback: str = FALLBACK_COLOR,
    warned: Optional[Set[str]] = None,
) -> QtGui.QColor:
    """Parse a color string, falling back instead of raising on bad input.

    With ``warned`` the warning is logged once per bad value; the set stops
    growing at MAX_WARNED_COLORS entries and later bad values stay quiet.
    """
    color = QtGui.QColor(value) if isinstance(value, str) else QtGui.QColor()
    if color.isValid():
        return color
    key = repr(value)
    if warned is None:
        logger.warning("invalid color %s, using %s", key, fallback)
    elif key not in warned and len(warned) < MAX_WARNED_COLORS:
        warned.add(key)
        logger.warning("invalid color %s, using %s", key, fallback)
    return QtGui.QColor(fallback)


def make_pen(color: QtGui.QColor, width: float) -> QtGui.QPen:
    pen = QtGui.QPen(color)
    pen.setWidthF(max(0.0, width))
    pen.setCapStyle(QtCore.Qt.PenCapStyle.FlatCap)
    return pen


def stroke_lines(painter: QtGui.QPainter, lines: List[QtCore.QLineF], color: QtGui.QColor, width: float) -> int:
    """Stroke every line with one pen; returns how many were drawn."""
    if not lines:
        return 0
    painter.save()
    painter.setPen(make_pen(color, width))
    for line in lines:
        painter.drawLine(line)
    painter.restore()
    return len(lines)


def draw_vertical_lines(
    painter: QtGui.QPainter,
    xs_px: Iterable[float],
    height_px: float,
    color: QtGui.QColor,
    width: float,
) -> int:
    return stroke_lines(painter, [QtCore.QLineF(x, 0.0, x, height_px) for x in xs_px], color, width)


def draw_horizontal_lines(
    painter: QtGui.QPainter,
    ys_px: Iterable[float],
    width_px: float,
    color: QtGui.QColor,
    width: float,
) -> int:
    return stroke_lines(painter, [QtCore.QLineF(0.0, y, width_px, y) for y in ys_px], color, width)


def draw_arrowhead(
    painter: QtGui.QPainter,
    tip: QtCore.QPointF,
    angle_rad: float,
    length_px: float,
    half_width_px: float,
    color: QtGui.QColor,
) -> QtGui.QPolygonF:
    """Fill a triangle with its tip at ``tip`` pointing along ``angle_rad``.

    A zero-length direction still yields a valid (rightward) triangle, so
    degenerate vectors keep a visible head.
    """
    cos_a = math.cos(angle_rad)
    sin_a = math.sin(angle_rad)

    def _rotated(dx: float, dy: float) -> QtCore.QPointF:
        return QtCore.QPointF(tip.x() + dx * cos_a - dy * sin_a, tip.y() + dx * sin_a + dy * cos_a)

    head = QtGui.QPolygonF(
        [
            QtCore.QPointF(tip),
            _rotated(-length_px, -half_width_px),
            _rotated(-length_px, half_width_px),
        ]
    )
    painter.save()
    painter.setPen(QtCore.Qt.PenStyle.NoPen)
    painter.setBrush(color)
    painter.drawPolygon(head)
    painter.restore()
    return head


def draw_dot(painter: QtGui.QPainter, center: QtCore.QPointF, radius_px: float, color: QtGui.QColor) -> None:
    painter.save()
    painter.setPen(QtCore.Qt.PenStyle.NoPen)
    painter.setBrush(color)
    radius = max(0.0, radius_px)
    painter.drawEllipse(center, radius, radius)
    painter.restore()


def draw_text(
    painter: QtGui.QPainter,
    text: str,
    anchor: QtCore.QPointF,
    color: QtGui.QColor,
    font: QtGui.QFont,
    align: str = "left",
) -> None:
    """Draw text with its baseline at anchor.y; align is left/center/right of anchor.x."""
    if not text:
        return
    painter.save()
    painter.setFont(font)
    painter.setPen(color)
    advance = QtGui.QFontMetricsF(font).horizontalAdvance(text)
    x = anchor.x()
    if align == "center":
        x -= advance / 2.0
    elif align == "right":
        x -= advance
    painter.drawText(QtCore.QPointF(x, anchor.y()), text)
    painter.restore()


def mono_font(pixel_size: int) -> QtGui.QFont:
    font = QtGui.QFont("JetBrains Mono")
    font.setStyleHint(QtGui.QFont.StyleHint.Monospace)
    font.setPixelSize(pixel_size)
    return font


def sans_font(pixel_size: int, bold: bool = False) -> QtGui.QFont:
    font = QtGui.QFont()
    font.setStyleHint(QtGui.QFont.StyleHint.SansSerif)
    font.setPixelSize(pixel_size)
    font.setBold(bold)
    return font
