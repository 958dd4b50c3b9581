"""
Utility functions for stage geometry and timing
"""

from __future__ import annotations
import math
import random
from typing import Optional
import numpy as np


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp value between low and high bounds"""
    return lo if x < lo else hi if x > hi else x


def clamp_dt(elapsed: float, max_dt: float = 0.033) -> float:
    """Clamp an elapsed wall-clock interval (seconds) to a simulation step"""
    return clamp(elapsed, 0.0, max_dt)


def vec_len(x: float, y: float) -> float:
    """Calculate vector length (magnitude)"""
    return math.hypot(x, y)


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x1 - x2, y1 - y2)


def circle_collide(x1, y1, r1, x2, y2, r2) -> bool:
    """Check if two circles collide (touching counts)"""
    dx = x1 - x2
    dy = y1 - y2
    rr = r1 + r2
    return (dx * dx + dy * dy) <= (rr * rr)


def out_of_bounds(x: float, y: float, w: float, h: float, margin: float) -> bool:
    """True once a point is further than `margin` outside the w x h field"""
    return x < -margin or x > w + margin or y < -margin or y > h + margin


def seed_everything(py_seed: Optional[int]):
    """Seed all random number generators"""
    if py_seed is None:
        return
    random.seed(py_seed)
    np.random.seed(py_seed)
