# Leg and match state machine.
#
# Transitions are pure functions from one GameState to the next. GameSession is the
# caller-owned handle that keeps the current state plus the transient UI notifications
# (bust, leg won) the way a screen needs them.

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional, Sequence

from cricket import apply_cricket_throw
from replay import replay_leg
from state import GameRules, GameState, LegState, Player, Throw, fresh_scores
from stats import GameStatistics, LegStatistics, game_statistics, leg_statistics
from x01 import apply_x01_throw, bust_rollback

logger = logging.getLogger(__name__)

DARTS_PER_TURN = 3


@dataclass(frozen=True)
class BustInfo:
    player_id: str
    score_before_bust: int

    def to_dict(self) -> dict:
        return {"player_id": self.player_id, "score_before_bust": self.score_before_bust}


@dataclass(frozen=True)
class ThrowOutcome:
    state: GameState
    bust: Optional[BustInfo] = None
    leg_stats: Optional[LegStatistics] = None  # set when a leg is won and the match goes on


@dataclass(frozen=True)
class GameHistory:
    id: str
    game_type: str
    rules: GameRules
    players: tuple
    winner_id: Optional[str]
    legs: tuple[LegState, ...]
    legs_won: dict
    started_at: str
    completed_at: str
    statistics: GameStatistics = field(default_factory=GameStatistics)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "game_type": self.game_type,
            "rules": self.rules.to_dict(),
            "players": [dict(p) for p in self.players],
            "winner_id": self.winner_id,
            "legs": [leg.to_dict() for leg in self.legs],
            "legs_won": dict(self.legs_won),
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "statistics": self.statistics.to_dict(),
        }


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_leg(leg_number: int, rules: GameRules, players: Sequence[Player]) -> LegState:
    return LegState(leg_number=leg_number, winner_id=None, throws=(), scores=fresh_scores(rules, players))


def _with_leg(state: GameState, leg: LegState) -> tuple[LegState, ...]:
    legs = list(state.legs)
    legs[state.current_leg_index] = leg
    return tuple(legs)


def start_game(rules: GameRules, players: Sequence[Player], game_id: Optional[str] = None) -> GameState:
    if not players:
        raise ValueError("a game needs at least one player")
    ids = [p.id for p in players]
    if len(set(ids)) != len(ids):
        raise ValueError("player ids must be unique")

    state = GameState(
        id=game_id or f"game_{uuid.uuid4().hex[:12]}",
        rules=rules,
        players=tuple(players),
        current_player_index=0,
        current_throw_in_turn=0,
        legs=(create_leg(1, rules, players),),
        current_leg_index=0,
        legs_won={p.id: 0 for p in players},
        match_winner_id=None,
        started_at=_now_iso(),
    )
    logger.info("Started %s game %s with %d players (best of %d)", rules.game_type, state.id, len(players), rules.best_of)
    return state


def record_throw(state: GameState, throw: Throw) -> ThrowOutcome:
    """
    Append a dart to the current leg and score it.

    The third dart of a turn does not pass the turn on; callers show it and then call
    next_turn(). A bust restores the thrower's score from the start of the turn and moves to
    the next player straight away. Calls made while the leg or match is already decided, with
    a full turn, or for a player whose turn it isn't are ignored.
    """
    if state.match_winner_id:
        logger.debug("Ignoring throw: match %s already won", state.id)
        return ThrowOutcome(state)
    leg = state.current_leg
    if leg.winner_id:
        logger.debug("Ignoring throw: leg %d already won, waiting for continue_leg", leg.leg_number)
        return ThrowOutcome(state)
    if state.current_throw_in_turn >= DARTS_PER_TURN:
        logger.debug("Ignoring throw: turn complete, waiting for next_turn")
        return ThrowOutcome(state)
    player = state.current_player
    if throw.player_id != player.id:
        logger.debug("Ignoring throw from %s: it is %s's turn", throw.player_id, player.id)
        return ThrowOutcome(state)

    rules = state.rules
    throw = replace(throw, slot=state.current_throw_in_turn)
    throws = leg.throws + (throw,)

    if rules.is_cricket:
        result = apply_cricket_throw(leg.scores, player.id, throw.segment, rules.cricket_variant, state.player_ids)
        scores = result.new_scores
        won = result.won
    else:
        current = leg.scores[player.id]
        result = apply_x01_throw(current, throw.segment, rules)
        if result.bust:
            # The darts already thrown this turn are the last entries of the log
            earlier = leg.throws[: len(leg.throws) - state.current_throw_in_turn]
            turn_start = replay_leg(rules, state.players, earlier).scores[player.id].remaining
            scores = dict(leg.scores)
            scores[player.id] = bust_rollback(current, turn_start)
            new_state = replace(
                state,
                legs=_with_leg(state, replace(leg, throws=throws, scores=scores)),
                current_player_index=(state.current_player_index + 1) % len(state.players),
                current_throw_in_turn=0,
            )
            logger.info("Bust: %s back on %d", player.name, turn_start)
            return ThrowOutcome(new_state, bust=BustInfo(player.id, turn_start))
        scores = dict(leg.scores)
        scores[player.id] = result.new_score
        won = result.won

    if not won:
        new_leg = replace(leg, throws=throws, scores=scores)
        return ThrowOutcome(
            replace(state, legs=_with_leg(state, new_leg), current_throw_in_turn=state.current_throw_in_turn + 1)
        )

    new_leg = replace(leg, throws=throws, scores=scores, winner_id=player.id)
    legs = _with_leg(state, new_leg)
    legs_won = dict(state.legs_won)
    legs_won[player.id] = legs_won.get(player.id, 0) + 1

    if legs_won[player.id] >= rules.legs_to_win:
        logger.info("%s wins match %s (%d legs)", player.name, state.id, legs_won[player.id])
        return ThrowOutcome(
            replace(state, legs=legs, legs_won=legs_won, match_winner_id=player.id, completed_at=_now_iso())
        )

    logger.info("%s wins leg %d", player.name, leg.leg_number)
    return ThrowOutcome(
        replace(state, legs=legs, legs_won=legs_won),
        leg_stats=leg_statistics(new_leg, state.players, rules),
    )


def next_turn(state: GameState) -> GameState:
    if state.match_winner_id or state.current_leg.winner_id:
        return state
    return replace(
        state,
        current_player_index=(state.current_player_index + 1) % len(state.players),
        current_throw_in_turn=0,
    )


def undo_last_throw(state: GameState) -> GameState:
    """
    Remove the last dart of the current leg and rebuild every score from the remaining log.

    The turn pointer moves back to the player and slot of the removed dart. Decided legs and
    empty logs are left alone.
    """
    leg = state.current_leg
    if state.match_winner_id or leg.winner_id or not leg.throws:
        return state

    removed = replay_leg(state.rules, state.players, leg.throws).steps[-1]
    remaining = leg.throws[:-1]
    rebuilt = replay_leg(state.rules, state.players, remaining)
    logger.debug("Undo dart %d of leg %d", len(leg.throws), leg.leg_number)

    return replace(
        state,
        legs=_with_leg(state, replace(leg, throws=remaining, scores=rebuilt.scores)),
        current_player_index=state.player_index(removed.throw.player_id),
        current_throw_in_turn=removed.slot,
    )


def continue_leg(state: GameState) -> GameState:
    if state.match_winner_id or not state.current_leg.winner_id:
        return state
    leg = create_leg(len(state.legs) + 1, state.rules, state.players)
    logger.info("Starting leg %d of game %s", leg.leg_number, state.id)
    return replace(
        state,
        legs=state.legs + (leg,),
        current_leg_index=len(state.legs),
        current_player_index=0,
        current_throw_in_turn=0,
    )


def build_history(state: GameState) -> GameHistory:
    return GameHistory(
        id=state.id,
        game_type=state.rules.game_type,
        rules=state.rules,
        players=tuple({"id": p.id, "name": p.name, "user_id": p.user_id} for p in state.players),
        winner_id=state.match_winner_id,
        legs=state.legs,
        legs_won=dict(state.legs_won),
        started_at=state.started_at,
        completed_at=state.completed_at or _now_iso(),
        statistics=game_statistics(state),
    )


class GameSession:
    """
    Owns one game in progress plus the notifications a scoring screen shows.

    Every method is a no-op when there is no active game.
    """

    def __init__(self):
        self.game_state: Optional[GameState] = None
        self.leg_winner_info: Optional[LegStatistics] = None
        self.bust_info: Optional[BustInfo] = None
        self.saved_game_state: Optional[GameState] = None

    @property
    def current_player(self) -> Optional[Player]:
        if self.game_state is None:
            return None
        return self.game_state.current_player

    def start_game(self, rules: GameRules, players: Sequence[Player], game_id: Optional[str] = None) -> GameState:
        self.game_state = start_game(rules, players, game_id=game_id)
        self.leg_winner_info = None
        self.bust_info = None
        return self.game_state

    def record_throw(self, throw: Throw) -> Optional[ThrowOutcome]:
        if self.game_state is None:
            return None
        outcome = record_throw(self.game_state, throw)
        self.game_state = outcome.state
        if outcome.bust:
            self.bust_info = outcome.bust
        if outcome.leg_stats:
            self.leg_winner_info = outcome.leg_stats
            self.bust_info = None
        if outcome.state.match_winner_id:
            self.leg_winner_info = None
        return outcome

    def undo_last_throw(self) -> None:
        if self.game_state is None:
            return
        self.game_state = undo_last_throw(self.game_state)
        self.bust_info = None

    def next_turn(self) -> None:
        if self.game_state is None:
            return
        self.game_state = next_turn(self.game_state)
        self.bust_info = None

    def continue_leg(self) -> None:
        if self.game_state is None:
            return
        self.game_state = continue_leg(self.game_state)
        self.leg_winner_info = None

    def clear_bust(self) -> None:
        self.bust_info = None

    def game_statistics(self) -> GameStatistics:
        if self.game_state is None:
            return GameStatistics()
        return game_statistics(self.game_state)

    def end_game(self) -> Optional[GameHistory]:
        if self.game_state is None:
            return None
        history = build_history(self.game_state)
        logger.info("Game %s ended (winner: %s)", history.id, history.winner_id)
        self.reset_game()
        return history

    def reset_game(self) -> None:
        self.game_state = None
        self.leg_winner_info = None
        self.bust_info = None

    def save_game_for_later(self) -> None:
        if self.game_state is None:
            return
        self.saved_game_state = self.game_state
        self.reset_game()

    def load_saved_game(self) -> None:
        if self.saved_game_state is None:
            return
        self.game_state = self.saved_game_state
        self.saved_game_state = None
        self.leg_winner_info = None
        self.bust_info = None

    def clear_saved_game(self) -> None:
        self.saved_game_state = None

    def has_saved_game(self) -> bool:
        return self.saved_game_state is not None
