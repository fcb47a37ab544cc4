from .grid import calculate_step
from .interaction import DragState, InteractionController
from .math2d import Vec2
from .pipeline import RenderPipeline, RenderStats
from .scene import Point, SceneSnapshot, StyleConfig, Vector
from .scheduler import FrameScheduler
from .viewport import CoordinateTransform, ViewSnapshot, ViewState

__all__ = [
    "calculate_step",
    "CoordinateTransform",
    "DragState",
    "FrameScheduler",
    "InteractionController",
    "Point",
    "RenderPipeline",
    "RenderStats",
    "SceneSnapshot",
    "StyleConfig",
    "Vec2",
    "Vector",
    "ViewSnapshot",
    "ViewState",
]
