import math

import numpy as np

# Dose arithmetic is single precision throughout
f32 = np.float32
ZERO = f32(0.0)
HUNDRED = f32(100.0)


def round_dose(value: float) -> float:
    """Nearest 0.5 U; halves round up (2.25 -> 2.5), never banker's rounding."""
    doubled = float(f32(value) * f32(2.0))
    return math.floor(doubled + 0.5) / 2.0


def percent_of(base: np.float32, percent: int) -> np.float32:
    return f32(base * (f32(percent) / HUNDRED))


def is_finite(value: np.float32) -> bool:
    return bool(np.isfinite(value))


__all__ = ["f32", "ZERO", "HUNDRED", "round_dose", "percent_of", "is_finite"]
