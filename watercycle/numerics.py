"""Floating-point helpers shared by the rate and precipitation formulas.

The empirical formulas are evaluated in numpy float64 with warnings
silenced, so division by zero, overflow and invalid powers yield inf or
NaN instead of raising.  NaN results are then replaced by zero.
"""

from __future__ import annotations

import numpy as np


def quiet() -> np.errstate:
    """Silence floating-point warnings for a block of formula evaluations."""
    return np.errstate(all="ignore")


def nan_to_zero(value: float | np.floating) -> float:
    """Return ``value`` as a Python float, or 0.0 if it is NaN."""
    value = float(value)
    if value != value:
        return 0.0
    return value


def finite_or_zero(value: float | np.floating) -> float:
    """Return ``value`` as a Python float, or 0.0 if it is NaN or infinite."""
    value = float(value)
    if not np.isfinite(value):
        return 0.0
    return value
