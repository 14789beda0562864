# Dartboard geometry: maps points on the board to segments and back.
#
# Board units match the drawn board: the double ring's outer edge is at radius 100, 20 sits at
# the top and sectors run clockwise. Screen coordinates, so y grows downwards.

import math
from typing import Optional

from segments import (
    BULL,
    DOUBLE,
    INNER_BULL,
    OUTER_BULL,
    SINGLE,
    TRIPLE,
    Segment,
    create_segment,
)

INNER_BULL_RADIUS = 3.5
OUTER_BULL_RADIUS = 8.5
TRIPLE_INNER_RADIUS = 38
TRIPLE_OUTER_RADIUS = 48
DOUBLE_INNER_RADIUS = 80
DOUBLE_OUTER_RADIUS = 100

BOARD_NUMBERS = [20, 1, 18, 4, 13, 6, 10, 15, 2, 17, 3, 19, 7, 16, 8, 11, 14, 9, 12, 5]
SECTOR_DEGREES = 360 / len(BOARD_NUMBERS)


def segment_at(x: float, y: float) -> Optional[Segment]:
    """Segment under the point (x, y), or None when it lands off the board."""
    distance = math.hypot(x, y)
    if distance > DOUBLE_OUTER_RADIUS:
        return None
    if distance <= INNER_BULL_RADIUS:
        return create_segment(BULL, INNER_BULL)
    if distance <= OUTER_BULL_RADIUS:
        return create_segment(BULL, OUTER_BULL)

    # 0 degrees at the top, clockwise; each sector is centred on its number
    angle = (math.degrees(math.atan2(y, x)) + 90 + 360) % 360
    index = int(((angle + SECTOR_DEGREES / 2) % 360) // SECTOR_DEGREES)
    number = BOARD_NUMBERS[index]

    if distance <= TRIPLE_INNER_RADIUS:
        ring = SINGLE
    elif distance <= TRIPLE_OUTER_RADIUS:
        ring = TRIPLE
    elif distance <= DOUBLE_INNER_RADIUS:
        ring = SINGLE
    else:
        ring = DOUBLE
    return create_segment(number, ring)


def segment_center(number: int, ring: str) -> tuple[float, float]:
    """Aiming point for a segment. Singles aim at the inner single bed."""
    if ring in (OUTER_BULL, INNER_BULL) or number == BULL:
        return 0.0, 0.0
    try:
        index = BOARD_NUMBERS.index(number)
    except ValueError:
        raise ValueError(f"{number} is not a number on the board") from None

    angle = math.radians(-90 + index * SECTOR_DEGREES)
    if ring == DOUBLE:
        radius = (DOUBLE_INNER_RADIUS + DOUBLE_OUTER_RADIUS) / 2
    elif ring == TRIPLE:
        radius = (TRIPLE_INNER_RADIUS + TRIPLE_OUTER_RADIUS) / 2
    else:
        radius = (OUTER_BULL_RADIUS + TRIPLE_INNER_RADIUS) / 2
    return radius * math.cos(angle), radius * math.sin(angle)
