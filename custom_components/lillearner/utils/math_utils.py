# File: utils/math_utils.py
"""Math and calculation utilities for LilLearner.

Pure Python math functions with ZERO Home Assistant dependencies.

Functions:
    - round_value: Consistent rounding to configured precision
    - calculate_percentage: Progress percentage calculations
    - clamp: Bound a value to a range
    - parse_numeric_value: Leading-number parsing for counter entries
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

_LOGGER = logging.getLogger(__name__)

DATA_FLOAT_PRECISION = 2

NUMERIC_PREFIX_PATTERN = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def round_value(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round a value to the configured precision.

    Examples:
        round_value(10.456) → 10.46
        round_value(10.0) → 10.0
    """
    return round(value, precision)


def calculate_percentage(
    current: float,
    target: float,
    precision: int = DATA_FLOAT_PRECISION,
) -> float:
    """Calculate progress percentage with proper rounding.

    Returns:
        Percentage with proper rounding, or 0.0 if target is 0

    Examples:
        calculate_percentage(50, 100) → 50.0
        calculate_percentage(1, 3) → 33.33
        calculate_percentage(5, 0) → 0.0
    """
    if target <= 0:
        return 0.0
    return round_value((current / target) * 100, precision)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
    """
    return max(min_val, min(value, max_val))


def parse_numeric_value(raw: Any) -> float:
    """Parse a counter entry value, treating anything non-numeric as zero.

    Strings are read up to the end of their leading number, so units and
    trailing text are ignored. NaN and infinities count as zero.

    Examples:
        parse_numeric_value("12") → 12.0
        parse_numeric_value("12 hours") → 12.0
        parse_numeric_value("2,5") → 2.0
        parse_numeric_value("lots") → 0.0
        parse_numeric_value(None) → 0.0
    """
    if raw is None or isinstance(raw, bool):
        return 0.0

    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        match = NUMERIC_PREFIX_PATTERN.match(raw)
        if match is None:
            _LOGGER.debug("Non-numeric counter value '%s' counted as 0", raw)
            return 0.0
        value = float(match.group(0))
    else:
        return 0.0

    if not math.isfinite(value):
        return 0.0
    return value
