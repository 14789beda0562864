# How far an AI dart lands from where it was aimed.
#
# Difficulty 1 throws into a disc of radius 120 (most of the board), difficulty 10 into a disc
# of radius 8. The radius shrinks exponentially, so the low levels are far apart and the top
# levels are close together.

import math
import random
from typing import Optional

MIN_RADIUS = 8
MAX_RADIUS = 120

MIN_MULTIPLIER = 0.5
MAX_MULTIPLIER = 2.0

EXPECTED_AVERAGES = {1: 12, 2: 18, 3: 24, 4: 28, 5: 32, 6: 38, 7: 44, 8: 50, 9: 54, 10: 58}
EXPECTED_MPR = {1: 0.5, 2: 0.8, 3: 1.0, 4: 1.3, 5: 1.6, 6: 2.0, 7: 2.5, 8: 3.0, 9: 3.5, 10: 4.2}


def _check_difficulty(difficulty: int) -> int:
    if not 1 <= difficulty <= 10:
        raise ValueError(f"difficulty must be between 1 and 10, got {difficulty}")
    return difficulty


def clamp_multiplier(value: float) -> float:
    return max(MIN_MULTIPLIER, min(MAX_MULTIPLIER, float(value)))


def accuracy_radius(difficulty: int, global_multiplier: float = 1.0) -> float:
    _check_difficulty(difficulty)
    if global_multiplier <= 0:
        raise ValueError("global_multiplier must be positive")
    t = (10 - difficulty) / 9
    radius = MIN_RADIUS * (MAX_RADIUS / MIN_RADIUS) ** t
    return radius * global_multiplier


def sample_point_in_disc(
    center: tuple[float, float], radius: float, rng: Optional[random.Random] = None
) -> tuple[float, float]:
    """Uniform random point inside the disc (uniform by area, hence the square root)."""
    rng = rng or random.Random()
    r = radius * math.sqrt(rng.random())
    theta = rng.uniform(0, 2 * math.pi)
    return center[0] + r * math.cos(theta), center[1] + r * math.sin(theta)


def expected_average(difficulty: int) -> int:
    return EXPECTED_AVERAGES[_check_difficulty(difficulty)]


def expected_mpr(difficulty: int) -> float:
    return EXPECTED_MPR[_check_difficulty(difficulty)]


def difficulty_description(difficulty: int) -> str:
    if difficulty <= 2:
        return "Beginner"
    if difficulty <= 4:
        return "Casual"
    if difficulty <= 6:
        return "Club Player"
    if difficulty <= 8:
        return "Advanced"
    if difficulty <= 9:
        return "Expert"
    return "Professional"
