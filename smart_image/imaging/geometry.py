"""Small pixel-arithmetic helpers shared by the encoder, tiler and cropper."""

import math
from typing import Tuple


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values.

    Python's round() uses banker's rounding, which would shift crop edges by
    one pixel on exact .5 values.
    """
    return int(math.floor(value + 0.5))


def fit_scale(width: int, height: int, max_long_edge: int) -> float:
    """Scale factor (<= 1) that brings the long edge down to max_long_edge."""
    long_edge = max(width, height)
    if long_edge <= max_long_edge:
        return 1.0
    return max_long_edge / long_edge


def scaled_size(width: int, height: int, scale: float) -> Tuple[int, int]:
    """Target pixel size for a scale factor, never below 1x1."""
    if scale >= 1.0:
        return width, height
    return (
        max(1, round_half_up(width * scale)),
        max(1, round_half_up(height * scale)),
    )
