# Cricket scoring for a single dart: marks on 20-15 and the bull, points per variant.

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Sequence

from segments import Segment

logger = logging.getLogger(__name__)

CRICKET_NUMBERS = (20, 19, 18, 17, 16, 15, 25)
MAX_MARKS = 3

STANDARD = "standard"
CUTTHROAT = "cutthroat"
NO_SCORE = "no-score"
VARIANTS = (STANDARD, CUTTHROAT, NO_SCORE)


@dataclass(frozen=True)
class CricketMark:
    number: int
    marks: int = 0

    @property
    def closed(self) -> bool:
        return self.marks >= MAX_MARKS

    def to_dict(self) -> dict:
        return {"number": self.number, "marks": self.marks, "closed": self.closed}


@dataclass(frozen=True)
class CricketScore:
    marks: tuple[CricketMark, ...] = tuple(CricketMark(n) for n in CRICKET_NUMBERS)
    points: int = 0

    def mark_for(self, number: int) -> Optional[CricketMark]:
        for mark in self.marks:
            if mark.number == number:
                return mark
        return None

    def is_closed(self, number: int) -> bool:
        mark = self.mark_for(number)
        return mark is not None and mark.closed

    @property
    def all_closed(self) -> bool:
        return all(m.closed for m in self.marks)

    def to_dict(self) -> dict:
        return {"marks": [m.to_dict() for m in self.marks], "points": self.points}


@dataclass(frozen=True)
class CricketResult:
    new_scores: dict
    won: bool = False


def fresh_cricket_score() -> CricketScore:
    return CricketScore()


def apply_cricket_throw(
    scores: Mapping[str, CricketScore],
    thrower_id: str,
    segment: Optional[Segment],
    variant: str,
    player_ids: Sequence[str],
) -> CricketResult:
    """
    Apply one dart to every player's Cricket score.

    Hits beyond three marks score: for the thrower in standard Cricket (while an opponent is
    still open), against every open opponent in cut-throat, and never in no-score.
    """
    if segment is None or segment.number not in CRICKET_NUMBERS:
        return CricketResult(dict(scores))

    number = segment.number
    new_scores = dict(scores)
    own = new_scores[thrower_id]
    mark = own.mark_for(number)

    hits = segment.multiplier
    was_closed = mark.marks >= MAX_MARKS
    new_marks = min(mark.marks + hits, MAX_MARKS)

    if was_closed:
        scoring_hits = hits
    elif mark.marks + hits > MAX_MARKS:
        scoring_hits = mark.marks + hits - MAX_MARKS
    else:
        scoring_hits = 0

    own_marks = tuple(replace(m, marks=new_marks) if m.number == number else m for m in own.marks)
    own = replace(own, marks=own_marks)
    opponents = [pid for pid in player_ids if pid != thrower_id]

    if scoring_hits > 0:
        value = scoring_hits * number
        if variant == CUTTHROAT:
            for pid in opponents:
                opp = new_scores[pid]
                if not opp.is_closed(number):
                    new_scores[pid] = replace(opp, points=opp.points + value)
        elif variant == STANDARD:
            if new_marks >= MAX_MARKS and any(not new_scores[pid].is_closed(number) for pid in opponents):
                own = replace(own, points=own.points + value)
        # no-score: marks only

    new_scores[thrower_id] = own

    won = False
    if own.all_closed:
        others = [new_scores[pid].points for pid in opponents]
        if variant == CUTTHROAT:
            won = all(own.points <= p for p in others)
        else:
            won = variant == NO_SCORE or all(own.points >= p for p in others)
    if won:
        logger.debug("Cricket leg closed out by %s with %d points", thrower_id, own.points)

    return CricketResult(new_scores, won=won)
