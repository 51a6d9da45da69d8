"""Decay-time efficiency models."""

from .moments import K, M, raw_moment
from .spline import CubicSpline

__all__ = ["CubicSpline", "K", "M", "raw_moment"]
