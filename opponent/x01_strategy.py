# Target selection for X01 games.
#
# The same heuristic is used at every difficulty; skill only changes how accurately the
# chosen target is hit.

import logging

from checkout import MAX_CHECKOUT, MIN_CHECKOUT, compute_checkout, is_checkable
from segments import DOUBLE, SINGLE, TRIPLE, Segment, create_segment
from state import GameState

logger = logging.getLogger(__name__)

# Setup trebles tried in order when no checkout is on
SETUP_TREBLES = (20, 19, 18)
SETUP_SINGLES = range(20, 9, -1)


def choose_x01_target(state: GameState, player_id: str, difficulty: int) -> Segment:
    score = state.current_leg.scores[player_id]
    remaining = score.remaining
    rules = state.rules
    darts_left = max(1, 3 - state.current_throw_in_turn)

    if rules.double_in and not score.has_doubled_in:
        return create_segment(20, DOUBLE)

    if MIN_CHECKOUT <= remaining <= MAX_CHECKOUT:
        path = compute_checkout(remaining, None, darts_left)
        if path.possible and path.darts:
            logger.debug("Going for %d with %s", remaining, path.darts[0].label)
            return path.darts[0]

    if remaining > MAX_CHECKOUT:
        return create_segment(20, TRIPLE)

    # Low odd score: take a single that leaves an even number
    if remaining < 40 and remaining % 2 == 1:
        single = min(remaining - 2, 20)
        if single > 0:
            return create_segment(single, SINGLE)

    for number in SETUP_TREBLES:
        after = remaining - number * 3
        if after > 1 and is_checkable(after):
            return create_segment(number, TRIPLE)

    if remaining <= 60:
        for number in SETUP_SINGLES:
            after = remaining - number
            if 2 <= after <= 40 and after % 2 == 0:
                return create_segment(number, SINGLE)

    return create_segment(20, TRIPLE)
