# =============================================================================
# NAV INDEX (search these tags)
# [NAV-00] Imports / constants
# [NAV-10] Config loading (defaults/roaming)
# [NAV-20] Builders for core objects
# [NAV-99] End
# =============================================================================

# === [NAV-00] Imports / constants ============================================
from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Dict

from plane_core.scene import StyleConfig
from plane_core.scheduler import DEFAULT_INTERVAL_MS
from plane_core.viewport import DEFAULT_UNIT_SIZE, ViewState

logger = logging.getLogger(__name__)

CONFIG_PATH = Path("data/roaming/plane_config.json")
_DEFAULT_CONFIG: Dict = {
    "style": StyleConfig().to_dict(),
    "view": {
        "unit_size_x": DEFAULT_UNIT_SIZE,
        "unit_size_y": DEFAULT_UNIT_SIZE,
        "lock_aspect_ratio": True,
    },
    "frame_interval_ms": DEFAULT_INTERVAL_MS,
}


# === [NAV-10] Config loading (defaults/roaming) ===============================
def default_config() -> Dict:
    return copy.deepcopy(_DEFAULT_CONFIG)


def load_plane_config(path: Path | None = None) -> Dict:
    path = path or CONFIG_PATH
    if not path.exists():
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(_DEFAULT_CONFIG, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.warning("could not write default config %s: %s", path, exc)
        return default_config()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("unreadable config %s, using defaults: %s", path, exc)
        return default_config()
    if not isinstance(data, dict):
        return default_config()
    merged = default_config()
    for key in ("style", "view"):
        section = data.get(key)
        if isinstance(section, dict):
            merged[key].update(section)
    if "frame_interval_ms" in data:
        merged["frame_interval_ms"] = data["frame_interval_ms"]
    return merged


def save_plane_config(data: Dict, path: Path | None = None) -> None:
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# === [NAV-20] Builders for core objects =======================================
def style_from_config(config: Dict) -> StyleConfig:
    section = config.get("style")
    return StyleConfig.from_dict(section if isinstance(section, dict) else {})


def view_from_config(config: Dict) -> ViewState:
    section = config.get("view")
    if not isinstance(section, dict):
        section = {}
    try:
        unit_x = float(section.get("unit_size_x", DEFAULT_UNIT_SIZE))
        unit_y = float(section.get("unit_size_y", DEFAULT_UNIT_SIZE))
    except (TypeError, ValueError):
        unit_x = unit_y = DEFAULT_UNIT_SIZE
    # ViewState clamps and applies the aspect lock.
    return ViewState(
        unit_size_x=unit_x,
        unit_size_y=unit_y,
        lock_aspect_ratio=bool(section.get("lock_aspect_ratio", True)),
    )


def frame_interval_from_config(config: Dict) -> int:
    try:
        return max(1, int(config.get("frame_interval_ms", DEFAULT_INTERVAL_MS)))
    except (TypeError, ValueError):
        return DEFAULT_INTERVAL_MS


# === [NAV-99] End =============================================================
__all__ = [
    "CONFIG_PATH",
    "default_config",
    "load_plane_config",
    "save_plane_config",
    "style_from_config",
    "view_from_config",
    "frame_interval_from_config",
]
