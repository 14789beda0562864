# X01 (301 / 501) scoring for a single dart.

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from segments import Segment, all_segments

STARTING_SCORES = {"301": 301, "501": 501}


@dataclass(frozen=True)
class X01Score:
    remaining: int
    darts_thrown: int = 0
    has_doubled_in: bool = True

    def to_dict(self) -> dict:
        return {
            "remaining": self.remaining,
            "darts_thrown": self.darts_thrown,
            "has_doubled_in": self.has_doubled_in,
        }


@dataclass(frozen=True)
class X01Result:
    new_score: X01Score
    bust: bool = False
    won: bool = False


def starting_score(game_type: str) -> int:
    try:
        return STARTING_SCORES[game_type]
    except KeyError:
        raise ValueError(f"not an X01 game type: {game_type!r}") from None


def fresh_x01_score(rules) -> X01Score:
    # Without a double-in rule every player starts "in"
    return X01Score(remaining=starting_score(rules.game_type), darts_thrown=0, has_doubled_in=not rules.double_in)


def apply_x01_throw(score: X01Score, segment: Optional[Segment], rules) -> X01Result:
    """
    Apply one dart to a player's X01 score.

    A bust returns the score unchanged with bust=True; rolling the rest of the turn back is the
    caller's job. `rules` needs `double_in` and `double_out`.
    """
    thrown = score.darts_thrown + 1

    if segment is None:
        return X01Result(replace(score, darts_thrown=thrown))

    if rules.double_in and not score.has_doubled_in:
        if segment.is_finishing:
            return X01Result(X01Score(remaining=score.remaining - segment.points, darts_thrown=thrown, has_doubled_in=True))
        # Wasted dart until the player doubles in
        return X01Result(replace(score, darts_thrown=thrown))

    if would_bust(score.remaining, segment, rules.double_out):
        return X01Result(score, bust=True)

    new_remaining = score.remaining - segment.points

    if new_remaining == 0:
        return X01Result(X01Score(remaining=0, darts_thrown=thrown, has_doubled_in=True), won=True)

    return X01Result(X01Score(remaining=new_remaining, darts_thrown=thrown, has_doubled_in=True))


def would_bust(remaining: int, target: Segment, double_out: bool) -> bool:
    """Whether landing exactly on `target` would bust from `remaining`."""
    new_remaining = remaining - target.points
    if new_remaining < 0:
        return True
    if double_out and new_remaining == 1:
        return True
    if double_out and new_remaining == 0 and not target.is_finishing:
        return True
    return False


def is_one_dart_finish(remaining: int, double_out: bool) -> bool:
    if double_out:
        return remaining == 50 or (2 <= remaining <= 40 and remaining % 2 == 0)
    return any(s.points == remaining for s in all_segments())


def bust_rollback(score: X01Score, turn_start_remaining: int) -> X01Score:
    # A bust voids the whole turn; the busting dart still counts as thrown
    return X01Score(remaining=turn_start_remaining, darts_thrown=score.darts_thrown + 1, has_doubled_in=score.has_doubled_in)
