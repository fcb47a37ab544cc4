from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt6 import QtCore

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 16


class FrameScheduler(QtCore.QObject):
    """Calls ``on_frame`` once per timer tick between start() and stop().

    Exactly one QTimer backs the loop, so repeated start() calls never stack
    extra callbacks. After stop() returns no further frame runs, even if a
    timeout was already queued.
    """

    def __init__(
        self,
        on_frame: Callable[[], None],
        interval_ms: int = DEFAULT_INTERVAL_MS,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._on_frame = on_frame
        self._running = False
        self.frame_count = 0
        self.error_count = 0
        self._timer = QtCore.QTimer(self)
        self._timer.setInterval(max(1, int(interval_ms)))
        self._timer.timeout.connect(self._on_timeout)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    def set_interval(self, interval_ms: int) -> None:
        self._timer.setInterval(max(1, int(interval_ms)))

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._timer.start()
        logger.debug("frame scheduler started interval_ms=%s", self._timer.interval())

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._timer.stop()
        logger.debug("frame scheduler stopped after %s frames", self.frame_count)

    def _on_timeout(self) -> None:
        if not self._running:
            return
        self.frame_count += 1
        try:
            self._on_frame()
        except Exception:
            # A broken frame is logged; the loop keeps running.
            self.error_count += 1
            logger.exception("frame callback failed")
