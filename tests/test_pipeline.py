import logging
import math

import pytest
from PyQt6 import QtCore, QtGui

from plane_core import primitives
from plane_core.grid import calculate_step
from plane_core.pipeline import RenderPipeline
from plane_core.scene import Point, StyleConfig, Vector, demo_scene
from plane_core.viewport import UNIT_SIZE_MAX, UNIT_SIZE_MIN, ViewSnapshot, ViewState

W, H = 800, 600


def _render(points=(), vectors=(), style=None, view=None, size=(W, H), pipeline=None):
    image = QtGui.QImage(size[0], size[1], QtGui.QImage.Format.Format_ARGB32)
    image.fill(QtGui.QColor("#000000"))
    painter = QtGui.QPainter(image)
    try:
        stats = (pipeline or RenderPipeline()).render(
            painter, size[0], size[1], view or ViewState(), style or StyleConfig(), points, vectors
        )
    finally:
        painter.end()
    return image, stats


def _rgb(image: QtGui.QImage, x: int, y: int) -> str:
    return image.pixelColor(x, y).name()


def test_background_fills_surface(qapp) -> None:
    image, _ = _render()
    assert _rgb(image, 415, 15) == "#0f172a"
    assert _rgb(image, 785, 585) == "#0f172a"


def test_grid_and_tick_counts_default_view(qapp) -> None:
    _, stats = _render()
    assert stats.step_x == stats.step_y == 1
    assert stats.major_lines == 14 + 11
    assert stats.minor_lines == 28 + 21
    assert stats.ticks == 13 + 10


def test_grid_and_labels_can_be_switched_off(qapp) -> None:
    style = StyleConfig(show_grid=False, show_labels=False)
    image, stats = _render(style=style)
    assert stats.major_lines == stats.minor_lines == stats.ticks == 0
    # Axes are always drawn.
    assert _rgb(image, 600, 300) == "#ffffff"
    assert _rgb(image, 400, 450) == "#ffffff"


def test_axes_follow_pan_offset(qapp) -> None:
    view = ViewState(origin_offset_x=-100.0, origin_offset_y=50.0)
    image, _ = _render(style=StyleConfig(show_grid=False, show_labels=False), view=view)
    assert _rgb(image, 600, 350) == "#ffffff"
    assert _rgb(image, 300, 500) == "#ffffff"


def test_grid_sweep_covers_panned_view(qapp) -> None:
    view = ViewState(origin_offset_x=5000.0, origin_offset_y=-5000.0)
    _, stats = _render(view=view)
    assert stats.major_lines == 14 + 11
    assert stats.ticks == 14 + 11


def test_point_is_drawn_at_transformed_position(qapp) -> None:
    point = Point("p", 2.0, 3.0, color="#ff00ff", size=6.0, label="A")
    image, stats = _render(points=[point])
    assert stats.points_drawn == 1
    assert _rgb(image, 520, 120) == "#ff00ff"


def test_hidden_objects_are_not_drawn(qapp) -> None:
    point = Point("p", 2.0, 3.0, color="#ff00ff", visible=False)
    vec = Vector("v", 0.0, 0.0, length=3.0, visible=False)
    image, stats = _render(points=[point], vectors=[vec])
    assert stats.points_drawn == stats.vectors_drawn == 0
    assert stats.points_skipped == stats.vectors_skipped == 0
    assert _rgb(image, 520, 120) != "#ff00ff"


def test_non_finite_objects_are_skipped_and_counted(qapp) -> None:
    points = [
        Point("ok", 1.0, 1.0),
        Point("nan", float("nan"), 1.0),
        Point("inf", 1.0, float("inf")),
    ]
    vectors = [
        Vector("ok", 0.0, 0.0, length=2.0),
        Vector("bad", 0.0, 0.0, length=float("nan")),
    ]
    _, stats = _render(points=points, vectors=vectors)
    assert stats.points_drawn == 1
    assert stats.points_skipped == 2
    assert stats.vectors_drawn == 1
    assert stats.vectors_skipped == 1


def test_malformed_color_falls_back(qapp) -> None:
    point = Point("p", 2.0, 3.0, color="definitely-not-a-color", size=6.0)
    style = StyleConfig(axis_color="", text_color="???", show_grid=False)
    image, stats = _render(points=[point], style=style)
    assert stats.points_drawn == 1
    assert _rgb(image, 520, 120) == primitives.FALLBACK_COLOR
    assert _rgb(image, 415, 15) == "#0f172a"
    assert _rgb(image, 600, 300) == primitives.FALLBACK_COLOR


def test_zero_length_vector_still_renders_head(qapp) -> None:
    vec = Vector("z", 0.0, 0.0, length=0.0, color="#ff00ff", arrow_size=12.0, label="zero")
    image, stats = _render(vectors=[vec], style=StyleConfig(show_grid=False, show_labels=False))
    assert stats.vectors_drawn == 1
    assert stats.vectors_skipped == 0
    assert _rgb(image, 394, 300) == "#ff00ff"


def test_vector_shaft_and_head_use_vector_color(qapp) -> None:
    vec = Vector("v", 0.0, 0.0, length=4.0, angle=0.0, color="#00ff00", thickness=4.0, arrow_size=12.0)
    image, stats = _render(vectors=[vec], style=StyleConfig(show_grid=False, show_labels=False))
    assert stats.vectors_drawn == 1
    # Shaft midway along +X, head just behind the tip at x = 400 + 240.
    assert _rgb(image, 520, 300) == "#00ff00"
    assert _rgb(image, 634, 300) == "#00ff00"


def test_empty_scene_and_tiny_surface(qapp) -> None:
    _, stats = _render(size=(1, 1))
    assert stats.points_drawn == stats.vectors_drawn == 0


def test_demo_scene_renders(qapp) -> None:
    scene = demo_scene()
    _, stats = _render(points=scene.points, vectors=scene.vectors)
    assert stats.points_drawn == 2
    assert stats.vectors_drawn == 1


def test_arrowhead_geometry_follows_angle(qapp) -> None:
    image = QtGui.QImage(50, 50, QtGui.QImage.Format.Format_ARGB32)
    painter = QtGui.QPainter(image)
    try:
        head = primitives.draw_arrowhead(
            painter, QtCore.QPointF(20.0, 20.0), 0.0, 10.0, 4.0, QtGui.QColor("#ffffff")
        )
    finally:
        painter.end()
    corners = [(round(head.at(i).x(), 6), round(head.at(i).y(), 6)) for i in range(head.count())]
    assert corners == [(20.0, 20.0), (10.0, 16.0), (10.0, 24.0)]


BARE = StyleConfig(show_grid=False, show_labels=False)


def _record_arrowheads(monkeypatch):
    calls = []
    real = primitives.draw_arrowhead

    def recording(painter, tip, angle_rad, length_px, half_width_px, color):
        calls.append((tip.x(), tip.y(), angle_rad, length_px, half_width_px, color.name()))
        return real(painter, tip, angle_rad, length_px, half_width_px, color)

    monkeypatch.setattr(primitives, "draw_arrowhead", recording)
    return calls


def _record_text(monkeypatch):
    calls = []
    real = primitives.draw_text

    def recording(painter, text, anchor, color, font, align="left"):
        calls.append((text, anchor.x(), anchor.y(), align))
        return real(painter, text, anchor, color, font, align)

    monkeypatch.setattr(primitives, "draw_text", recording)
    return calls


def test_out_of_range_scale_assignment_still_renders(qapp) -> None:
    view = ViewState()
    view.unit_size_x = 0.0
    _, stats = _render(view=view)
    assert stats.step_x == stats.step_y == calculate_step(UNIT_SIZE_MIN)


def test_hand_built_snapshot_scales_are_clamped(qapp) -> None:
    snap = ViewSnapshot(unit_size_x=0.0, unit_size_y=float("inf"), lock_aspect_ratio=False)
    _, stats = _render(view=snap, points=[Point("p", 1.0, 0.0)])
    assert stats.step_x == calculate_step(UNIT_SIZE_MIN)
    assert stats.step_y == calculate_step(UNIT_SIZE_MAX)
    assert stats.points_drawn == 1


def test_screen_overflow_is_skipped_without_traceback(qapp, caplog) -> None:
    caplog.set_level(logging.DEBUG)
    pipeline = RenderPipeline()
    for _ in range(5):
        _, stats = _render(
            points=[Point("far", 1e308, 0.0), Point("near", 1.0, 1.0)],
            vectors=[Vector("far", 1e308, 0.0, length=1.0)],
            pipeline=pipeline,
        )
        assert stats.points_skipped == 1
        assert stats.points_drawn == 1
        assert stats.vectors_skipped == 1
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR or r.exc_info]


def test_vector_head_follows_screen_angle_on_free_axes(qapp, monkeypatch) -> None:
    calls = _record_arrowheads(monkeypatch)
    view = ViewState(unit_size_x=60.0, unit_size_y=120.0, lock_aspect_ratio=False)
    vec = Vector("v", 0.0, 0.0, length=1.0, angle=45.0, color="#00ff00", thickness=4.0, arrow_size=20.0)
    image, stats = _render(vectors=[vec], style=BARE, view=view)
    assert stats.vectors_drawn == 1

    # The four edge arrows come first, the vector head last.
    tip_x, tip_y, angle, length, half_width, color = calls[-1]
    dx = 60.0 * math.cos(math.radians(45.0))
    dy = -120.0 * math.sin(math.radians(45.0))
    assert (tip_x, tip_y) == (pytest.approx(400.0 + dx), pytest.approx(300.0 + dy))
    assert angle == pytest.approx(math.atan2(dy, dx))
    assert angle != pytest.approx(-math.pi / 4.0)
    assert (length, half_width, color) == (20.0, 8.0, "#00ff00")
    # Shaft midpoint sits on the screen-space segment.
    assert _rgb(image, 421, 257) == "#00ff00"


def test_vector_labels_sit_along_shaft_and_lifted(qapp, monkeypatch) -> None:
    calls = _record_text(monkeypatch)
    vectors = [
        Vector("mid", 0.0, 0.0, length=4.0, angle=0.0, label="m", label_position=0.5),
        Vector("past", 0.0, 0.0, length=4.0, angle=0.0, label="p", label_position=1.5),
        Vector("up", 0.0, 0.0, length=4.0, angle=90.0, label="u", label_position=0.25),
        Vector("quiet", 0.0, 0.0, length=4.0, angle=0.0),
    ]
    _, stats = _render(vectors=vectors, style=BARE)
    assert stats.vectors_drawn == 4
    assert calls == [
        ("m", 520.0, 290.0, "center"),
        ("p", 760.0, 290.0, "center"),
        ("u", pytest.approx(400.0), pytest.approx(230.0), "center"),
    ]


def test_edge_arrows_point_outward_in_axis_color(qapp, monkeypatch) -> None:
    calls = _record_arrowheads(monkeypatch)
    style = StyleConfig(axis_color="#ff00ff", show_grid=False, show_labels=False)
    image, _ = _render(style=style)
    tips = [(round(c[0], 6), round(c[1], 6), c[5]) for c in calls]
    assert tips == [
        (800.0, 300.0, "#ff00ff"),
        (0.0, 300.0, "#ff00ff"),
        (400.0, 0.0, "#ff00ff"),
        (400.0, 600.0, "#ff00ff"),
    ]
    assert [c[3:5] for c in calls] == [(10.0, 5.0)] * 4
    # Inside each triangle, clear of the 2px axis lines.
    for x, y in ((791, 297), (8, 297), (397, 8), (397, 591)):
        assert _rgb(image, x, y) == "#ff00ff", (x, y)


def test_bad_color_warns_once_per_pipeline(qapp, caplog) -> None:
    caplog.set_level(logging.WARNING)
    point = Point("p", 1.0, 1.0, color="not-a-color")
    pipeline = RenderPipeline()
    _render(points=[point], pipeline=pipeline)
    _render(points=[point], pipeline=pipeline)
    warnings = [r for r in caplog.records if "invalid color" in r.getMessage()]
    assert len(warnings) == 1

    _render(points=[point], pipeline=RenderPipeline())
    warnings = [r for r in caplog.records if "invalid color" in r.getMessage()]
    assert len(warnings) == 2


def test_warned_color_set_is_bounded(qapp, monkeypatch) -> None:
    monkeypatch.setattr(primitives, "MAX_WARNED_COLORS", 2)
    pipeline = RenderPipeline()
    points = [Point(str(i), 1.0, 1.0, color=f"bogus-{i}") for i in range(5)]
    _, stats = _render(points=points, pipeline=pipeline)
    assert stats.points_drawn == 5
    assert len(pipeline._warned_colors) == 2
