# geometry.py

import math
from typing import Tuple

from badgeprint.constants import CARD_WIDTH, CARD_HEIGHT, PERCENT_RANGE, SNAP_STEP


def clamp(value: float, low: float, high: float) -> float:
    """Clamps value into [low, high]. NaN collapses to low."""
    value = float(value)
    if math.isnan(value):
        return low
    return max(low, min(high, value))


def clamp_percent(value: float) -> float:
    return clamp(value, *PERCENT_RANGE)


def calculate_snap(value: float, step: float = SNAP_STEP) -> float:
    """Rounds a percentage to the nearest multiple of step."""
    return round(value / step) * step


def pointer_to_percent(pointer: float, offset: float, zoom: float, dimension: float) -> float:
    """
    Converts a screen coordinate into a card percentage.

    The offset is the distance between the pointer and the element's anchor
    recorded on press, already in screen units (zoomed).
    """
    if zoom <= 0 or dimension <= 0:
        raise ValueError(f"zoom and dimension must be positive, got zoom={zoom} dimension={dimension}")
    return (pointer - offset) / zoom / dimension * 100.0


def percent_to_screen(percent: float, zoom: float, dimension: float) -> float:
    return percent / 100.0 * dimension * zoom


def anchor_percent_x(x: float, align: str) -> float:
    """Field x is stored from the right edge for right alignment; returns it from the left."""
    return 100.0 - x if align == 'right' else x


def layer_box(x: float, y: float, w: float, h: float,
              width: int = CARD_WIDTH, height: int = CARD_HEIGHT) -> Tuple[int, int, int, int]:
    """
    Returns the pixel box (x0, y0, x1, y1) of a layer whose x,y is the center
    and w,h the size, all in percent of the card.
    """
    box_w = w / 100.0 * width
    box_h = h / 100.0 * height
    cx = x / 100.0 * width
    cy = y / 100.0 * height
    x0 = int(round(cx - box_w / 2))
    y0 = int(round(cy - box_h / 2))
    return x0, y0, x0 + int(round(box_w)), y0 + int(round(box_h))


def box_contains(box: Tuple[float, float, float, float], x: float, y: float) -> bool:
    x0, y0, x1, y1 = box
    return min(x0, x1) <= x <= max(x0, x1) and min(y0, y1) <= y <= max(y0, y1)
