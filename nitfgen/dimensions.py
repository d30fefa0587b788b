"""
Output size calculation for derived images.
"""

import math
from typing import Tuple


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_image_dimension(
    image_width: int,
    image_height: int,
    max_side_length: int
) -> Tuple[int, int]:
    """
    Scale (width, height) so the longer side is at most max_side_length.

    The aspect ratio is preserved up to rounding and the image is never
    upscaled: when max_side_length exceeds the longer side the native size
    is returned.

    Args:
        image_width: Native width in pixels (> 0)
        image_height: Native height in pixels (> 0)
        max_side_length: Upper bound for the longer side (> 0)

    Returns:
        Tuple of (width, height)
    """
    if image_width >= image_height:
        width = min(image_width, max_side_length)
        height = _round_half_up(image_height * (width / image_width))
    else:
        height = min(image_height, max_side_length)
        width = _round_half_up(image_width * (height / image_height))

    # a 10000x1 strip scaled to 200 would otherwise round to zero
    return max(width, 1), max(height, 1)
