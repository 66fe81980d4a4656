"""
Conversion between the "U:G" ratio notation users type and see (1 unit covers
G grams) and the units-per-gram float the calculator multiplies by.

format_ratio rounds 1/ratio to a whole number of grams, so parse -> format ->
parse is not bit-identical (0.083 becomes "1:12" and then 0.08333...), while
format -> parse -> format is stable.
"""
from __future__ import annotations

import math
from typing import Optional


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _to_float(raw: str) -> Optional[float]:
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_ratio(text: Optional[str]) -> Optional[float]:
    if text is None:
        return None
    text = str(text).strip()
    if not text:
        return None

    if ":" not in text:
        # Already in units-per-gram form
        value = _to_float(text)
    else:
        parts = text.split(":")
        if len(parts) != 2:
            return None
        numerator = _to_float(parts[0])
        denominator = _to_float(parts[1])
        if numerator is None or denominator is None or denominator <= 0:
            return None
        value = numerator / denominator

    if value is None or value <= 0:
        return None
    return value


def format_ratio(ratio: Optional[float]) -> Optional[str]:
    if ratio is None or not math.isfinite(ratio) or ratio <= 0:
        return None
    inverse = 1.0 / ratio
    if not math.isfinite(inverse):
        return None
    # Ratios above 2 U/g would round to "1:0", which does not parse back
    carbs_per_unit = max(1, _round_half_up(inverse))
    return f"1:{carbs_per_unit}"


def describe_ratio(ratio: Optional[float], from_profile: bool) -> Optional[str]:
    formatted = format_ratio(ratio)
    if formatted is None:
        return None
    source = "user profile" if from_profile else "default"
    return f"{formatted} ({source})"


__all__ = ["parse_ratio", "format_ratio", "describe_ratio"]
