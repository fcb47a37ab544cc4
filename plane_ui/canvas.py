from __future__ import annotations

import functools
import logging
from typing import Callable, Optional, Sequence, Tuple

from PyQt6 import QtCore, QtGui, QtWidgets

from plane_core.interaction import InteractionController
from plane_core.pipeline import RenderPipeline, RenderStats
from plane_core.primitives import resolve_color
from plane_core.scene import Point, SceneSnapshot, StyleConfig, Vector, demo_scene
from plane_core.scheduler import DEFAULT_INTERVAL_MS, FrameScheduler
from plane_core.viewport import ViewState

logger = logging.getLogger(__name__)

SceneProvider = Callable[[], Tuple[Sequence[Point], Sequence[Vector]]]


def safe_event(fn):
    """Log exceptions raised in a Qt event handler instead of letting them escape."""

    @functools.wraps(fn)
    def wrapper(self, event):
        try:
            return fn(self, event)
        except Exception:
            logger.exception("%s failed", fn.__name__)
            event.ignore()
            return None

    return wrapper


class PlaneCanvas(QtWidgets.QWidget):
    """Coordinate plane widget: renders into a HiDPI backing image once per tick."""

    frame_rendered = QtCore.pyqtSignal(object)

    def __init__(
        self,
        view: Optional[ViewState] = None,
        style: Optional[StyleConfig] = None,
        scene_provider: Optional[SceneProvider] = None,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        parent: Optional[QtWidgets.QWidget] = None,
    ):
        super().__init__(parent)
        self.controller = InteractionController(view)
        self.plane_style = style or StyleConfig()
        self.pipeline = RenderPipeline()
        self._scene_provider = scene_provider or _static_provider(demo_scene())
        self._buffer: Optional[QtGui.QImage] = None
        self.last_stats: Optional[RenderStats] = None
        self.scheduler = FrameScheduler(self.render_frame, interval_ms, self)
        self.setMinimumSize(320, 240)
        self.setMouseTracking(True)
        self.setCursor(QtCore.Qt.CursorShape.CrossCursor)
        self.setSizePolicy(QtWidgets.QSizePolicy.Policy.Expanding, QtWidgets.QSizePolicy.Policy.Expanding)

    @property
    def view(self) -> ViewState:
        return self.controller.view

    def set_scene_provider(self, provider: SceneProvider) -> None:
        self._scene_provider = provider

    def set_style(self, style: StyleConfig) -> None:
        self.plane_style = style

    def reset_view(self) -> None:
        self.controller.reset_view()

    # -- frame loop ---------------------------------------------------------
    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()

    def _ensure_buffer(self) -> QtGui.QImage:
        dpr = max(1.0, self.devicePixelRatioF())
        w_px = max(1, round(self.width() * dpr))
        h_px = max(1, round(self.height() * dpr))
        buf = self._buffer
        if buf is None or buf.width() != w_px or buf.height() != h_px or buf.devicePixelRatio() != dpr:
            buf = QtGui.QImage(w_px, h_px, QtGui.QImage.Format.Format_ARGB32_Premultiplied)
            buf.setDevicePixelRatio(dpr)
            self._buffer = buf
            logger.debug("backing buffer resized to %sx%s (dpr=%s)", w_px, h_px, dpr)
        return buf

    def render_frame(self) -> RenderStats:
        buf = self._ensure_buffer()
        points, vectors = self._scene_provider()
        scene = SceneSnapshot.capture(points, vectors)
        view = self.view.snapshot()
        painter = QtGui.QPainter(buf)
        try:
            # Logical (device-independent) size; the image's DPR scales the painter.
            stats = self.pipeline.render(
                painter,
                self.width(),
                self.height(),
                view,
                self.plane_style,
                scene.points,
                scene.vectors,
            )
        finally:
            painter.end()
        self.last_stats = stats
        self.update()
        self.frame_rendered.emit(stats)
        return stats

    def surface(self) -> QtGui.QImage:
        """Copy of the last rendered frame, for export."""
        if self._buffer is None:
            self.render_frame()
        return self._buffer.copy()

    # -- QWidget ------------------------------------------------------------
    def paintEvent(self, _: QtGui.QPaintEvent) -> None:  # type: ignore[override]
        painter = QtGui.QPainter(self)
        if self._buffer is not None:
            painter.drawImage(QtCore.QPointF(0.0, 0.0), self._buffer)
        else:
            painter.fillRect(self.rect(), resolve_color(self.plane_style.bg_color))
        painter.end()

    def showEvent(self, event: QtGui.QShowEvent) -> None:  # type: ignore[override]
        super().showEvent(event)
        self.start()

    def hideEvent(self, event: QtGui.QHideEvent) -> None:  # type: ignore[override]
        self.stop()
        super().hideEvent(event)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.stop()
        super().closeEvent(event)

    @safe_event
    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        pos = event.position()
        self.controller.pointer_down(pos.x(), pos.y())
        self.setCursor(QtCore.Qt.CursorShape.ClosedHandCursor)
        event.accept()

    @safe_event
    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        pos = event.position()
        self.controller.pointer_move(pos.x(), pos.y())
        event.accept()

    @safe_event
    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self.controller.pointer_up()
        self.setCursor(QtCore.Qt.CursorShape.CrossCursor)
        event.accept()

    @safe_event
    def leaveEvent(self, event: QtCore.QEvent) -> None:  # type: ignore[override]
        self.controller.pointer_leave()
        self.setCursor(QtCore.Qt.CursorShape.CrossCursor)
        super().leaveEvent(event)

    @safe_event
    def wheelEvent(self, event: QtGui.QWheelEvent) -> None:  # type: ignore[override]
        self.controller.wheel(event.angleDelta().y())
        event.accept()


def _static_provider(scene: SceneSnapshot) -> SceneProvider:
    def provider() -> Tuple[Sequence[Point], Sequence[Vector]]:
        return scene.points, scene.vectors

    return provider
