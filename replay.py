# Rebuilds a leg's scores from its throw log.
#
# The throw log is the source of truth; scores are a projection of it. Undo, bust rollback and
# the statistics all read the log through this module so they agree on where turns begin.

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from cricket import apply_cricket_throw
from state import GameRules, Player, Throw, fresh_scores
from x01 import apply_x01_throw, bust_rollback

DARTS_PER_TURN = 3


@dataclass(frozen=True)
class ReplayStep:
    throw: Throw
    slot: int  # dart index within its turn, 0-2
    before: object  # thrower's score before the dart
    bust: bool = False
    won: bool = False


@dataclass(frozen=True)
class LegReplay:
    scores: dict
    steps: tuple[ReplayStep, ...]


def replay_leg(rules: GameRules, players: Sequence[Player], throws: Sequence[Throw]) -> LegReplay:
    """
    Replay a throw log from fresh scores.

    Turns begin at darts stamped with slot 0. For darts without a slot a turn starts when the
    thrower changes, after three darts, or after a bust. A bust puts the thrower back on the
    score they had when the turn started.
    """
    scores = fresh_scores(rules, players)
    player_ids = [p.id for p in players]
    steps = []

    turn_player = None
    turn_darts = 0
    turn_over = True
    turn_start = None

    for t in throws:
        pid = t.player_id
        if t.slot is not None:
            new_turn = t.slot == 0 or pid != turn_player
        else:
            new_turn = turn_over or pid != turn_player or turn_darts >= DARTS_PER_TURN
        if new_turn:
            turn_player, turn_darts, turn_over = pid, 0, False
            turn_start = scores[pid]
        if t.slot is not None:
            turn_darts = t.slot

        before = scores[pid]
        bust = won = False
        if rules.is_cricket:
            result = apply_cricket_throw(scores, pid, t.segment, rules.cricket_variant, player_ids)
            scores = result.new_scores
            won = result.won
        else:
            result = apply_x01_throw(before, t.segment, rules)
            if result.bust:
                bust = True
                scores[pid] = bust_rollback(before, turn_start.remaining)
                turn_over = True
            else:
                scores[pid] = result.new_score
                won = result.won

        steps.append(ReplayStep(throw=t, slot=turn_darts, before=before, bust=bust, won=won))
        turn_darts += 1

    return LegReplay(scores=scores, steps=tuple(steps))


def player_turns(steps: Sequence[ReplayStep], player_id: str) -> list[list[ReplayStep]]:
    """Group one player's darts into turns, in throw order."""
    turns: list[list[ReplayStep]] = []
    for step in steps:
        if step.throw.player_id != player_id:
            continue
        if step.slot == 0 or not turns:
            turns.append([])
        turns[-1].append(step)
    return turns
