from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

LOGGER_NAMES: Tuple[str, ...] = ("plane_core", "plane_ui")
LOG_FORMAT = "ts=%(asctime)s level=%(levelname)s name=%(name)s msg=%(message)s"

_HANDLER: Optional[logging.Handler] = None
_HANDLER_PATH: Optional[Path] = None


def configure_logging(base_dir: Optional[Path] = None, level: int = logging.INFO) -> Dict[str, str]:
    """Send the plane_core/plane_ui loggers to a key=value file log.

    Calling again with the same directory is a no-op; a different directory
    replaces the previous handler.
    """
    global _HANDLER, _HANDLER_PATH
    root = base_dir or Path("data/roaming")
    log_dir = root / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "coordplane.log"

    if _HANDLER is not None and _HANDLER_PATH != log_path:
        for name in LOGGER_NAMES:
            logging.getLogger(name).removeHandler(_HANDLER)
        _HANDLER.close()
        _HANDLER = None

    if _HANDLER is None:
        handler = logging.FileHandler(log_path, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _HANDLER = handler
        _HANDLER_PATH = log_path

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = False
        if _HANDLER not in logger.handlers:
            logger.addHandler(_HANDLER)

    return {
        "log_path": str(log_path),
        "format": "kv",
        "handlers": "file",
        "logger_names": ",".join(LOGGER_NAMES),
    }
