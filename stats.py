# Per-leg statistics for the win screens and whole-match statistics for the history record.
# Everything here is a fold over the recorded throws; turns come from the replay projection.

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional, Sequence

from cricket import CRICKET_NUMBERS
from replay import ReplayStep, player_turns, replay_leg
from segments import BULL, TRIPLE
from state import GameRules, GameState, LegState, Player
from x01 import is_one_dart_finish


@dataclass(frozen=True)
class X01LegPlayerStats:
    darts_thrown: int = 0
    total_score: int = 0
    average_per_dart: float = 0.0
    average_per_turn: float = 0.0
    highest_turn: int = 0
    doubles_hit: int = 0
    triples_hit: int = 0
    missed_darts: int = 0
    checkout_score: Optional[int] = None  # winner only


@dataclass(frozen=True)
class CricketLegPlayerStats:
    darts_thrown: int = 0
    marks_per_round: float = 0.0
    total_marks: int = 0
    total_points: int = 0
    hit_accuracy: float = 0.0
    triple_rate: float = 0.0
    single_rate: float = 0.0
    double_rate: float = 0.0
    numbers_closed: int = 0
    best_round: int = 0
    missed_darts: int = 0
    wasted_darts: int = 0


@dataclass(frozen=True)
class LegStatistics:
    leg_number: int
    winner_id: str
    game_type: str  # "x01" or "cricket"
    player_stats: dict = field(default_factory=dict)
    cricket_stats: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PlayerStatistics:
    darts_thrown: int = 0
    total_score: int = 0
    average_per_dart: float = 0.0
    average_per_turn: float = 0.0
    highest_turn: int = 0
    checkout_attempts: int = 0
    checkout_successes: int = 0
    checkout_percentage: float = 0.0
    highest_checkout: int = 0
    doubles_hit: int = 0
    triples_hit: int = 0
    missed_darts: int = 0


@dataclass(frozen=True)
class CricketPlayerStatistics:
    darts_thrown: int = 0
    marks_per_round: float = 0.0
    total_marks: int = 0
    total_points: int = 0
    hit_accuracy: float = 0.0
    triple_rate: float = 0.0
    single_rate: float = 0.0
    double_rate: float = 0.0
    numbers_closed: int = 0
    first_to_close: int = 0  # not tracked yet, always 0
    best_round: int = 0
    white_horses: int = 0
    hat_tricks: int = 0
    missed_darts: int = 0
    wasted_darts: int = 0


@dataclass(frozen=True)
class GameStatistics:
    player_stats: dict = field(default_factory=dict)
    cricket_stats: Optional[dict] = None

    def to_dict(self) -> dict:
        return asdict(self)


def _pct(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def _turn_points(turn: Sequence[ReplayStep]) -> int:
    # A busted turn scores nothing
    if any(step.bust for step in turn):
        return 0
    return sum(step.throw.segment.points for step in turn if step.throw.segment)


class _X01Tally:
    def __init__(self):
        self.darts = 0
        self.score = 0
        self.highest_turn = 0
        self.doubles = 0
        self.triples = 0
        self.missed = 0

    def add_turns(self, turns: list[list[ReplayStep]]) -> None:
        for turn in turns:
            points = _turn_points(turn)
            self.score += points
            self.highest_turn = max(self.highest_turn, points)
            for step in turn:
                self.darts += 1
                seg = step.throw.segment
                if seg is None:
                    self.missed += 1
                elif seg.is_finishing:
                    self.doubles += 1
                elif seg.ring == TRIPLE:
                    self.triples += 1

    @property
    def per_dart(self) -> float:
        return self.score / self.darts if self.darts else 0.0


class _CricketTally:
    def __init__(self):
        self.darts = 0
        self.marks = 0
        self.missed = 0
        self.wasted = 0
        self.hits = 0
        self.triples = 0
        self.doubles = 0
        self.singles = 0
        self.rounds = 0
        self.best_round = 0
        self.white_horses = 0
        self.hat_tricks = 0

    def add_turns(self, turns: list[list[ReplayStep]]) -> None:
        for turn in turns:
            self.rounds += 1
            round_marks = 0
            round_triples = set()
            round_bulls = 0
            for step in turn:
                self.darts += 1
                seg = step.throw.segment
                if seg is None:
                    self.missed += 1
                    continue
                if seg.number not in CRICKET_NUMBERS:
                    self.wasted += 1
                    continue
                self.hits += 1
                self.marks += seg.multiplier
                round_marks += seg.multiplier
                if seg.ring == TRIPLE:
                    self.triples += 1
                    round_triples.add(seg.number)
                elif seg.multiplier == 2:
                    self.doubles += 1
                else:
                    self.singles += 1
                if seg.number == BULL:
                    round_bulls += 1
            self.best_round = max(self.best_round, round_marks)
            if len(round_triples) >= 3:
                self.white_horses += 1
            if round_bulls >= 3:
                self.hat_tricks += 1

    @property
    def mpr(self) -> float:
        return self.marks / self.rounds if self.rounds else 0.0


def _x01_leg_statistics(leg: LegState, players: Sequence[Player], rules: GameRules) -> LegStatistics:
    steps = replay_leg(rules, players, leg.throws).steps
    player_stats = {}
    for player in players:
        turns = player_turns(steps, player.id)
        tally = _X01Tally()
        tally.add_turns(turns)
        checkout_score = None
        if leg.winner_id == player.id and turns:
            checkout_score = _turn_points(turns[-1])
        player_stats[player.id] = X01LegPlayerStats(
            darts_thrown=tally.darts,
            total_score=tally.score,
            average_per_dart=tally.per_dart,
            average_per_turn=tally.per_dart * 3,
            highest_turn=tally.highest_turn,
            doubles_hit=tally.doubles,
            triples_hit=tally.triples,
            missed_darts=tally.missed,
            checkout_score=checkout_score,
        )
    return LegStatistics(leg_number=leg.leg_number, winner_id=leg.winner_id, game_type="x01", player_stats=player_stats)


def _cricket_leg_statistics(leg: LegState, players: Sequence[Player], rules: GameRules) -> LegStatistics:
    steps = replay_leg(rules, players, leg.throws).steps
    cricket_stats = {}
    for player in players:
        tally = _CricketTally()
        tally.add_turns(player_turns(steps, player.id))
        score = leg.scores.get(player.id)
        cricket_stats[player.id] = CricketLegPlayerStats(
            darts_thrown=tally.darts,
            marks_per_round=tally.mpr,
            total_marks=tally.marks,
            total_points=score.points if score else 0,
            hit_accuracy=_pct(tally.hits, tally.darts),
            triple_rate=_pct(tally.triples, tally.hits),
            single_rate=_pct(tally.singles, tally.hits),
            double_rate=_pct(tally.doubles, tally.hits),
            numbers_closed=sum(1 for m in score.marks if m.closed) if score else 0,
            best_round=tally.best_round,
            missed_darts=tally.missed,
            wasted_darts=tally.wasted,
        )
    return LegStatistics(leg_number=leg.leg_number, winner_id=leg.winner_id, game_type="cricket", cricket_stats=cricket_stats)


def leg_statistics(leg: LegState, players: Sequence[Player], rules: GameRules) -> Optional[LegStatistics]:
    """Statistics for a finished leg; None while the leg is still being played."""
    if not leg.winner_id:
        return None
    if rules.is_cricket:
        return _cricket_leg_statistics(leg, players, rules)
    return _x01_leg_statistics(leg, players, rules)


def _x01_player_statistics(state: GameState, player: Player, leg_steps: list) -> PlayerStatistics:
    tally = _X01Tally()
    attempts = 0
    successes = 0
    highest_checkout = 0
    for leg, steps in zip(state.legs, leg_steps):
        turns = player_turns(steps, player.id)
        tally.add_turns(turns)
        for step in steps:
            if step.throw.player_id != player.id:
                continue
            before = step.before
            if before.has_doubled_in and is_one_dart_finish(before.remaining, state.rules.double_out):
                attempts += 1
        if leg.winner_id == player.id and turns:
            successes += 1
            highest_checkout = max(highest_checkout, _turn_points(turns[-1]))

    return PlayerStatistics(
        darts_thrown=tally.darts,
        total_score=tally.score,
        average_per_dart=tally.per_dart,
        average_per_turn=tally.per_dart * 3,
        highest_turn=tally.highest_turn,
        checkout_attempts=attempts,
        checkout_successes=successes,
        checkout_percentage=_pct(successes, attempts),
        highest_checkout=highest_checkout,
        doubles_hit=tally.doubles,
        triples_hit=tally.triples,
        missed_darts=tally.missed,
    )


def game_statistics(state: GameState) -> GameStatistics:
    """Statistics across every leg of a game, as stored with its history record."""
    player_stats = {}
    leg_steps = [replay_leg(state.rules, state.players, leg.throws).steps for leg in state.legs]
    if not state.rules.is_cricket:
        for player in state.players:
            player_stats[player.id] = _x01_player_statistics(state, player, leg_steps)
        return GameStatistics(player_stats=player_stats)

    cricket_stats = {}
    last_leg = state.legs[-1] if state.legs else None
    for player in state.players:
        tally = _CricketTally()
        total_points = 0
        for leg, steps in zip(state.legs, leg_steps):
            tally.add_turns(player_turns(steps, player.id))
            total_points += leg.scores[player.id].points if player.id in leg.scores else 0
        final = last_leg.scores.get(player.id) if last_leg else None
        cricket_stats[player.id] = CricketPlayerStatistics(
            darts_thrown=tally.darts,
            marks_per_round=tally.mpr,
            total_marks=tally.marks,
            total_points=total_points,
            hit_accuracy=_pct(tally.hits, tally.darts),
            triple_rate=_pct(tally.triples, tally.hits),
            single_rate=_pct(tally.singles, tally.hits),
            double_rate=_pct(tally.doubles, tally.hits),
            numbers_closed=sum(1 for m in final.marks if m.closed) if final else 0,
            best_round=tally.best_round,
            white_horses=tally.white_horses,
            hat_tricks=tally.hat_tricks,
            missed_darts=tally.missed,
            wasted_darts=tally.wasted,
        )
        # Basic figures for screens that only know the X01 layout
        player_stats[player.id] = PlayerStatistics(
            darts_thrown=tally.darts,
            total_score=tally.marks,
            average_per_dart=tally.marks / tally.darts if tally.darts else 0.0,
            average_per_turn=tally.mpr,
            highest_turn=tally.best_round,
            doubles_hit=tally.doubles,
            triples_hit=tally.triples,
            missed_darts=tally.missed,
        )
    return GameStatistics(player_stats=player_stats, cricket_stats=cricket_stats)
