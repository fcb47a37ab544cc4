from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

from PyQt6 import QtCore, QtWidgets

from diagnostics.logging_setup import configure_logging
from plane_core.pipeline import RenderStats
from plane_core.scene import Point, Vector, demo_scene

from .canvas import PlaneCanvas
from .config import (
    frame_interval_from_config,
    load_plane_config,
    style_from_config,
    view_from_config,
)

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "coordinate-system.png"
SLIDER_MIN = 5
SLIDER_MAX = 1000


class PlaneWindow(QtWidgets.QMainWindow):
    """Canvas plus the view actions: reset, export, scale sliders and the aspect-ratio lock."""

    def __init__(self, config: Optional[dict] = None):
        super().__init__()
        self.setWindowTitle("Studio X-Y")
        config = config or load_plane_config()
        scene = demo_scene()
        self.points: List[Point] = list(scene.points)
        self.vectors: List[Vector] = list(scene.vectors)

        self.canvas = PlaneCanvas(
            view=view_from_config(config),
            style=style_from_config(config),
            scene_provider=lambda: (self.points, self.vectors),
            interval_ms=frame_interval_from_config(config),
        )

        central = QtWidgets.QWidget()
        layout = QtWidgets.QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        toolbar = QtWidgets.QHBoxLayout()
        toolbar.setContentsMargins(8, 6, 8, 6)
        self.lock_box = QtWidgets.QCheckBox("Square grid")
        self.lock_box.setChecked(self.canvas.view.lock_aspect_ratio)
        self.lock_box.toggled.connect(self._on_lock_toggled)
        toolbar.addWidget(self.lock_box)

        self.x_scale_label = QtWidgets.QLabel()
        self.x_slider = self._make_scale_slider()
        self.x_slider.valueChanged.connect(self._on_x_scale)
        toolbar.addWidget(self.x_scale_label)
        toolbar.addWidget(self.x_slider)

        # Y has its own control only while the axes are unlocked.
        self.y_scale_label = QtWidgets.QLabel()
        self.y_slider = self._make_scale_slider()
        self.y_slider.valueChanged.connect(self._on_y_scale)
        toolbar.addWidget(self.y_scale_label)
        toolbar.addWidget(self.y_slider)

        toolbar.addStretch()
        reset_btn = QtWidgets.QPushButton("Reset View")
        reset_btn.clicked.connect(self._on_reset)
        toolbar.addWidget(reset_btn)
        export_btn = QtWidgets.QPushButton("Export PNG")
        export_btn.clicked.connect(self._on_export)
        toolbar.addWidget(export_btn)
        layout.addLayout(toolbar)

        layout.addWidget(self.canvas, stretch=1)

        self.status_label = QtWidgets.QLabel()
        self.status_label.setContentsMargins(12, 4, 12, 4)
        self.status_label.setStyleSheet("font-family: monospace; font-size: 11px;")
        layout.addWidget(self.status_label)
        self.setCentralWidget(central)

        self.canvas.frame_rendered.connect(self._on_frame)
        self._sync_scale_controls()
        self._update_status(None)

    def _make_scale_slider(self) -> QtWidgets.QSlider:
        slider = QtWidgets.QSlider(QtCore.Qt.Orientation.Horizontal)
        slider.setRange(SLIDER_MIN, SLIDER_MAX)
        slider.setFixedWidth(140)
        return slider

    def _sync_scale_controls(self) -> None:
        view = self.canvas.view
        for slider, value in ((self.x_slider, view.unit_size_x), (self.y_slider, view.unit_size_y)):
            slider.blockSignals(True)
            slider.setValue(int(round(value)))
            slider.blockSignals(False)
        self.x_scale_label.setText(f"X {view.unit_size_x:.0f} px/u")
        self.y_scale_label.setText(f"Y {view.unit_size_y:.0f} px/u")
        unlocked = not view.lock_aspect_ratio
        self.y_scale_label.setVisible(unlocked)
        self.y_slider.setVisible(unlocked)

    def _on_x_scale(self, value: int) -> None:
        self.canvas.view.set_unit_size_x(value)
        self._sync_scale_controls()

    def _on_y_scale(self, value: int) -> None:
        self.canvas.view.set_unit_size_y(value)
        self._sync_scale_controls()

    def _on_lock_toggled(self, checked: bool) -> None:
        self.canvas.view.set_lock_aspect_ratio(checked)
        self._sync_scale_controls()

    def _on_reset(self) -> None:
        self.canvas.reset_view()
        self.lock_box.setChecked(self.canvas.view.lock_aspect_ratio)
        self._sync_scale_controls()

    def _on_export(self) -> None:
        path, _ = QtWidgets.QFileDialog.getSaveFileName(
            self, "Export PNG", EXPORT_FILENAME, "PNG image (*.png)"
        )
        if not path:
            return
        if not self.canvas.surface().save(path, "PNG"):
            logger.error("export to %s failed", path)
            QtWidgets.QMessageBox.warning(self, "Export PNG", f"Could not write {Path(path).name}.")
            return
        logger.info("exported frame to %s", path)

    def _on_frame(self, stats: RenderStats) -> None:
        # Wheel zoom changes the scales behind the sliders' backs.
        self._sync_scale_controls()
        self._update_status(stats)

    def _update_status(self, stats: Optional[RenderStats]) -> None:
        view = self.canvas.view
        mode = "(Square)" if view.lock_aspect_ratio else "(Free)"
        text = (
            f"Points: {len(self.points)}   Vectors: {len(self.vectors)}   "
            f"Ratio {view.unit_size_x:.0f} : {view.unit_size_y:.0f} {mode}"
        )
        if stats is not None and (stats.points_skipped or stats.vectors_skipped):
            text += f"   Skipped: {stats.points_skipped + stats.vectors_skipped}"
        self.status_label.setText(text)


def main() -> None:
    info = configure_logging()
    logger.info("starting coordinate plane, log at %s", info["log_path"])
    app = QtWidgets.QApplication(sys.argv)
    window = PlaneWindow()
    window.resize(1100, 720)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
