# Simulated darts for AI players: pick a target, aim at its centre, land somewhere inside the
# accuracy disc and report whatever segment is under that point.

from __future__ import annotations

import logging
import random
from typing import Callable, Optional

import board
from opponent.accuracy import (
    accuracy_radius,
    difficulty_description,
    expected_average,
    expected_mpr,
    sample_point_in_disc,
)
from opponent.cricket_strategy import choose_cricket_target
from opponent.x01_strategy import choose_x01_target
from segments import Segment
from state import GameState, Player, Throw

logger = logging.getLogger(__name__)

DEFAULT_DIFFICULTY = 5

SegmentAt = Callable[[float, float], Optional[Segment]]
SegmentCenter = Callable[[int, str], tuple]


def choose_target(
    state: GameState, player_id: str, difficulty: int, rng: Optional[random.Random] = None
) -> Segment:
    if state.rules.is_cricket:
        return choose_cricket_target(state, player_id, difficulty, rng=rng)
    return choose_x01_target(state, player_id, difficulty)


def _effective_difficulty(state: GameState, player_id: str, difficulty: int) -> int:
    player = state.player(player_id)
    if player is not None and player.difficulty:
        return player.difficulty
    return difficulty


def simulate_throw(
    state: GameState,
    player_id: str,
    difficulty: int,
    global_multiplier: float = 1.0,
    rng: Optional[random.Random] = None,
    segment_at: SegmentAt = board.segment_at,
    segment_center: SegmentCenter = board.segment_center,
) -> Throw:
    """Throw one dart for `player_id`. The result is not recorded; pass it to record_throw."""
    rng = rng or random.Random()
    level = _effective_difficulty(state, player_id, difficulty)

    target = choose_target(state, player_id, level, rng=rng)
    center = segment_center(target.number, target.ring)
    radius = accuracy_radius(level, global_multiplier)
    x, y = sample_point_in_disc(center, radius, rng=rng)
    hit = segment_at(x, y)

    logger.debug("AI %s (level %d) aimed %s, hit %s", player_id, level, target.label, hit.label if hit else "miss")
    return Throw(segment=hit, player_id=player_id, coordinates=(x, y))


def visualization_data(
    state: GameState,
    player_id: str,
    difficulty: int,
    global_multiplier: float = 1.0,
    rng: Optional[random.Random] = None,
    segment_center: SegmentCenter = board.segment_center,
) -> Optional[dict]:
    """Where the AI is about to aim and how wide it spreads, without throwing."""
    if state.player(player_id) is None:
        return None
    level = _effective_difficulty(state, player_id, difficulty)
    target = choose_target(state, player_id, level, rng=rng)
    x, y = segment_center(target.number, target.ring)
    return {
        "target_x": x,
        "target_y": y,
        "accuracy_radius": accuracy_radius(level, global_multiplier),
    }


def ai_player_info(player: Player) -> dict:
    difficulty = player.difficulty or DEFAULT_DIFFICULTY
    return {
        "description": difficulty_description(difficulty),
        "expected_average": expected_average(difficulty),
        "expected_mpr": expected_mpr(difficulty),
    }
