# Target selection for Cricket.
#
# Every level knows the win condition: close all seven numbers while leading on points
# (standard) or trailing on points (cutthroat). Higher levels balance scoring against closing
# more carefully.

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Optional

from cricket import CricketScore
from segments import BULL, INNER_BULL, TRIPLE, Segment, create_segment
from state import GameState

logger = logging.getLogger(__name__)

SIGNIFICANT_DEFICIT = -20
PRESSURE_LEAD_LIMIT = 40
PRESSURE_MIN_VALUE = 18


@dataclass(frozen=True)
class ScoringOpportunity:
    number: int
    point_value: int
    opponents_open: int


@dataclass(frozen=True)
class ClosingPriority:
    number: int
    my_marks: int
    marks_needed: int
    opponent_marks: int  # highest opponent mark count on this number
    priority: int


@dataclass
class CricketAnalysis:
    my_score: CricketScore
    opponent_scores: list[CricketScore]
    my_points: int
    max_opponent_points: float
    min_opponent_points: float
    point_differential: float  # positive is good for me in either variant
    my_closed_numbers: list[int] = field(default_factory=list)
    my_open_numbers: list[int] = field(default_factory=list)
    scoring_opportunities: list[ScoringOpportunity] = field(default_factory=list)
    closing_priorities: list[ClosingPriority] = field(default_factory=list)
    is_cutthroat: bool = False
    can_win_now: bool = False


def analyze_cricket_state(state: GameState, player_id: str) -> CricketAnalysis:
    scores = state.current_leg.scores
    my_score = scores[player_id]
    opponents = [s for pid, s in scores.items() if pid != player_id]
    is_cutthroat = state.rules.is_cutthroat

    my_points = my_score.points
    max_opp = max([s.points for s in opponents] + [0])
    min_opp = min([s.points for s in opponents] + [math.inf])
    # Cutthroat points are bad, so fewer points than the opponents counts as ahead
    differential = min_opp - my_points if is_cutthroat else my_points - max_opp

    closed = [m.number for m in my_score.marks if m.closed]
    open_numbers = [m.number for m in my_score.marks if not m.closed]

    opportunities = []
    for number in closed:
        open_count = sum(1 for opp in opponents if not opp.is_closed(number))
        if open_count:
            opportunities.append(ScoringOpportunity(number, number, open_count))
    opportunities.sort(key=lambda o: -o.point_value)

    priorities = []
    for number in open_numbers:
        my_marks = my_score.mark_for(number).marks
        opp_marks = max([opp.mark_for(number).marks for opp in opponents] + [0])
        priorities.append(
            ClosingPriority(
                number=number,
                my_marks=my_marks,
                marks_needed=3 - my_marks,
                opponent_marks=opp_marks,
                priority=number + my_marks * 10 + opp_marks * 5,
            )
        )
    priorities.sort(key=lambda p: -p.priority)

    leading = my_points <= min_opp if is_cutthroat else my_points >= max_opp

    return CricketAnalysis(
        my_score=my_score,
        opponent_scores=opponents,
        my_points=my_points,
        max_opponent_points=max_opp,
        min_opponent_points=min_opp,
        point_differential=differential,
        my_closed_numbers=closed,
        my_open_numbers=open_numbers,
        scoring_opportunities=opportunities,
        closing_priorities=priorities,
        is_cutthroat=is_cutthroat,
        can_win_now=not open_numbers and leading,
    )


def _aim_at(number: int) -> Segment:
    if number == BULL:
        return create_segment(BULL, INNER_BULL)
    return create_segment(number, TRIPLE)


def _scoring_target(analysis: CricketAnalysis) -> Segment:
    if not analysis.scoring_opportunities:
        return create_segment(20, TRIPLE)
    return _aim_at(analysis.scoring_opportunities[0].number)


def _closing_target(analysis: CricketAnalysis, difficulty: int) -> Segment:
    priorities = analysis.closing_priorities
    if not priorities:
        return create_segment(20, TRIPLE)

    if difficulty >= 8:
        # Deny numbers the opponent is about to close
        for p in priorities:
            if p.opponent_marks >= 2:
                return _aim_at(p.number)
    if difficulty >= 5:
        for p in priorities:
            if p.my_marks >= 2:
                return _aim_at(p.number)
    return _aim_at(priorities[0].number)


def choose_cricket_target(
    state: GameState, player_id: str, difficulty: int, rng: Optional[random.Random] = None
) -> Segment:
    rng = rng or random.Random()
    analysis = analyze_cricket_state(state, player_id)
    has_opportunity = bool(analysis.scoring_opportunities)

    if not analysis.my_open_numbers:
        if analysis.can_win_now:
            safe = sorted((n for n in analysis.my_closed_numbers if n != BULL), reverse=True)
            return create_segment(safe[0] if safe else 20, TRIPLE)
        if has_opportunity:
            return _scoring_target(analysis)
        return create_segment(20, TRIPLE)

    if analysis.point_differential < SIGNIFICANT_DEFICIT and has_opportunity:
        return _scoring_target(analysis)

    if analysis.point_differential < 0 and has_opportunity:
        if difficulty >= 6 or rng.random() < 0.5:
            return _scoring_target(analysis)

    if has_opportunity and difficulty >= 7:
        best = analysis.scoring_opportunities[0]
        if best.point_value >= PRESSURE_MIN_VALUE and analysis.point_differential < PRESSURE_LEAD_LIMIT:
            return _scoring_target(analysis)

    return _closing_target(analysis, difficulty)
