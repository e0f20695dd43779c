# File: utils/__init__.py
"""Pure Python utilities for LilLearner.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Submodules:
    - dt_utils: Date/time parsing, local day keys, report period ranges
    - math_utils: Clamping, percentages, permissive numeric parsing

Usage:
    from . import dt_utils
    from .math_utils import clamp
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
