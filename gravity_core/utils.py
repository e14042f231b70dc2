#!/usr/bin/env python3
"""
General utilities for the Gravity Simulator.
"""
from typing import Optional


def try_float(val) -> Optional[float]:
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


def rgba_to_rgb255(color) -> tuple:
    """0..1 RGBA to a 0..255 RGB tuple for pygame."""
    return tuple(max(0, min(255, int(round(c * 255)))) for c in color[:3])
