from __future__ import annotations

import enum
import logging
from typing import Optional

from .viewport import ViewState

logger = logging.getLogger(__name__)

ZOOM_IN_FACTOR = 1.06
ZOOM_OUT_FACTOR = 0.94


class DragState(enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class InteractionController:
    """Pan/zoom state machine and the single writer of its ViewState.

    Pointer positions are screen pixels. Dragging pans 1:1 with no inertia;
    wheel zoom is anchored at the pan origin, not at the cursor.
    """

    def __init__(self, view: Optional[ViewState] = None) -> None:
        self.view = view if view is not None else ViewState()
        self.state = DragState.IDLE
        self.last_x = 0.0
        self.last_y = 0.0

    @property
    def is_dragging(self) -> bool:
        return self.state is DragState.DRAGGING

    def pointer_down(self, x: float, y: float) -> None:
        self.state = DragState.DRAGGING
        self.last_x = float(x)
        self.last_y = float(y)

    def pointer_move(self, x: float, y: float) -> bool:
        """Pan by the pointer delta while dragging; returns True if the view moved."""
        if self.state is not DragState.DRAGGING:
            return False
        dx = float(x) - self.last_x
        dy = float(y) - self.last_y
        self.view.pan_by(dx, dy)
        self.last_x = float(x)
        self.last_y = float(y)
        return dx != 0.0 or dy != 0.0

    def pointer_up(self) -> None:
        self.state = DragState.IDLE

    def pointer_leave(self) -> None:
        self.state = DragState.IDLE

    def wheel(self, delta: float) -> bool:
        """Zoom one notch; positive delta (wheel away from the user) zooms in."""
        if delta == 0:
            return False
        factor = ZOOM_IN_FACTOR if delta > 0 else ZOOM_OUT_FACTOR
        self.view.zoom_by(factor)
        logger.debug("wheel zoom factor=%s -> %r", factor, self.view)
        return True

    def reset_view(self) -> None:
        self.state = DragState.IDLE
        self.view.reset()
