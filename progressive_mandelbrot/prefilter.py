"""Closed-form membership tests for the two largest interior regions.

Both tests under-approximate the set: a point they reject may still be a
member and is simply iterated, but a point they accept is always a member.
They accept Python floats as well as numpy arrays of coordinates.
"""

from __future__ import annotations

import numpy as np


def in_main_cardioid(x, y):
    q = x * x - 0.5 * x + 0.0625 + y * y
    return q * (q + (x - 0.25)) < 0.25 * y * y


def in_period2_bulb(x, y):
    return x * x + 2 * x + 1 + y * y < 0.0625


def certified_interior(x, y):
    """Return whether ``x + iy`` lies in the main cardioid or the period-2 bulb."""

    return np.logical_or(in_main_cardioid(x, y), in_period2_bulb(x, y))
