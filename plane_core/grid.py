from __future__ import annotations

import math
from typing import List

MIN_PIXEL_GAP = 60.0
NICE_THRESHOLDS = ((1.5, 1.0), (3.5, 2.0), (7.5, 5.0))


def calculate_step(pixels_per_unit: float) -> float:
    """Return a 1/2/5 x 10^n world step whose on-screen gap is close to 60px.

    Raises ValueError for non-positive or non-finite scales.
    """
    if not math.isfinite(pixels_per_unit) or pixels_per_unit <= 0:
        raise ValueError(f"pixels_per_unit must be a positive finite number, got {pixels_per_unit!r}")
    raw_step = MIN_PIXEL_GAP / pixels_per_unit
    magnitude = 10 ** math.floor(math.log10(raw_step))
    return nice_residual(raw_step / magnitude) * magnitude


def nice_residual(residual: float) -> float:
    for limit, nice in NICE_THRESHOLDS:
        if residual < limit:
            return nice
    return 10.0


def minor_step(step: float) -> float:
    return step / 2.0


def grid_values(lo: float, hi: float, step: float) -> List[float]:
    """Multiples of step from the last one <= lo through the last one <= hi."""
    if step <= 0 or not all(math.isfinite(v) for v in (lo, hi, step)):
        return []
    if hi < lo:
        lo, hi = hi, lo
    first = math.floor(lo / step)
    last = math.floor(hi / step)
    return [k * step for k in range(first, last + 1)]


def is_origin(value: float, step: float) -> bool:
    return abs(value) < step * 1e-6


def format_tick(value: float) -> str:
    text = f"{value:.5f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text
