# Checkout solver.
# Provides the standard chart of checkouts from 2 to 170 and a fallback search for 1-3 dart
# finishes that end on a double (or the inner bull).

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from segments import (
    BULL,
    DOUBLE,
    INNER_BULL,
    OUTER_BULL,
    SINGLE,
    TRIPLE,
    Segment,
    all_segments,
    create_segment,
    parse_segment,
)

logger = logging.getLogger(__name__)

MIN_CHECKOUT = 2
MAX_CHECKOUT = 170

# One preferred path per score. 169, 168, 166, 165, 163, 162 and 159 have no three-dart finish.
COMMON_CHECKOUTS = {
    170: ['T20', 'T20', 'BULL'],
    167: ['T20', 'T19', 'BULL'],
    164: ['T20', 'T18', 'BULL'],
    161: ['T20', 'T17', 'BULL'],
    160: ['T20', 'T20', 'D20'],
    158: ['T20', 'T20', 'D19'],
    157: ['T20', 'T19', 'D20'],
    156: ['T20', 'T20', 'D18'],
    155: ['T20', 'T19', 'D19'],
    154: ['T20', 'T18', 'D20'],
    153: ['T20', 'T19', 'D18'],
    152: ['T20', 'T20', 'D16'],
    151: ['T20', 'T17', 'D20'],
    150: ['T20', 'T18', 'D18'],
    149: ['T20', 'T19', 'D16'],
    148: ['T20', 'T20', 'D14'],
    147: ['T20', 'T17', 'D18'],
    146: ['T20', 'T18', 'D16'],
    145: ['T20', 'T19', 'D14'],
    144: ['T20', 'T20', 'D12'],
    143: ['T20', 'T17', 'D16'],
    142: ['T20', 'T14', 'D20'],
    141: ['T20', 'T19', 'D12'],
    140: ['T20', 'T20', 'D10'],
    139: ['T20', 'T13', 'D20'],
    138: ['T20', 'T18', 'D12'],
    137: ['T20', 'T19', 'D10'],
    136: ['T20', 'T20', 'D8'],
    135: ['T20', 'T17', 'D12'],
    134: ['T20', 'T14', 'D16'],
    133: ['T20', 'T19', 'D8'],
    132: ['T20', 'T16', 'D12'],
    131: ['T20', 'T13', 'D16'],
    130: ['T20', 'T18', 'D8'],
    129: ['T19', 'T16', 'D12'],
    128: ['T18', 'T14', 'D16'],
    127: ['T20', 'T17', 'D8'],
    126: ['T19', 'T19', 'D6'],
    125: ['T18', 'T13', 'D16'],
    124: ['T20', 'T16', 'D8'],
    123: ['T19', 'T16', 'D9'],
    122: ['T18', 'T18', 'D7'],
    121: ['T20', 'T11', 'D14'],
    120: ['T20', 'S20', 'D20'],
    119: ['T19', 'T12', 'D13'],
    118: ['T20', 'S18', 'D20'],
    117: ['T20', 'S17', 'D20'],
    116: ['T20', 'S16', 'D20'],
    115: ['T20', 'S15', 'D20'],
    114: ['T20', 'S14', 'D20'],
    113: ['T20', 'S13', 'D20'],
    112: ['T20', 'S12', 'D20'],
    111: ['T20', 'S19', 'D16'],
    110: ['T20', 'S10', 'D20'],
    109: ['T20', 'S9', 'D20'],
    108: ['T20', 'S16', 'D16'],
    107: ['T20', 'S15', 'D16'],
    106: ['T20', 'S14', 'D16'],
    105: ['T20', 'S13', 'D16'],
    104: ['T20', 'S12', 'D16'],
    103: ['T20', 'S11', 'D16'],
    102: ['T20', 'S10', 'D16'],
    101: ['T20', 'S9', 'D16'],
    100: ['T20', 'D20'],
    99: ['T19', 'S10', 'D16'],
    98: ['T20', 'D19'],
    97: ['T19', 'D20'],
    96: ['T20', 'D18'],
    95: ['T19', 'D19'],
    94: ['T18', 'D20'],
    93: ['T19', 'D18'],
    92: ['T20', 'D16'],
    91: ['T17', 'D20'],
    90: ['T18', 'D18'],
    89: ['T19', 'D16'],
    88: ['T20', 'D14'],
    87: ['T17', 'D18'],
    86: ['T18', 'D16'],
    85: ['T19', 'D14'],
    84: ['T20', 'D12'],
    83: ['T17', 'D16'],
    82: ['T14', 'D20'],
    81: ['T19', 'D12'],
    80: ['T20', 'D10'],
    79: ['T13', 'D20'],
    78: ['T18', 'D12'],
    77: ['T19', 'D10'],
    76: ['T20', 'D8'],
    75: ['T17', 'D12'],
    74: ['T14', 'D16'],
    73: ['T19', 'D8'],
    72: ['T16', 'D12'],
    71: ['T13', 'D16'],
    70: ['T18', 'D8'],
    69: ['T19', 'D6'],
    68: ['T20', 'D4'],
    67: ['T17', 'D8'],
    66: ['T10', 'D18'],
    65: ['T19', 'D4'],
    64: ['T16', 'D8'],
    63: ['T13', 'D12'],
    62: ['T10', 'D16'],
    61: ['T15', 'D8'],
    60: ['S20', 'D20'],
    59: ['S19', 'D20'],
    58: ['S18', 'D20'],
    57: ['S17', 'D20'],
    56: ['S16', 'D20'],
    55: ['S15', 'D20'],
    54: ['S14', 'D20'],
    53: ['S13', 'D20'],
    52: ['S12', 'D20'],
    51: ['S11', 'D20'],
    50: ['BULL'],
    49: ['S9', 'D20'],
    48: ['S16', 'D16'],
    47: ['S15', 'D16'],
    46: ['S14', 'D16'],
    45: ['S13', 'D16'],
    44: ['S12', 'D16'],
    43: ['S11', 'D16'],
    42: ['S10', 'D16'],
    41: ['S9', 'D16'],
    40: ['D20'],
    39: ['S7', 'D16'],
    38: ['D19'],
    37: ['S5', 'D16'],
    36: ['D18'],
    35: ['S3', 'D16'],
    34: ['D17'],
    33: ['S1', 'D16'],
    32: ['D16'],
    31: ['S7', 'D12'],
    30: ['D15'],
    29: ['S13', 'D8'],
    28: ['D14'],
    27: ['S11', 'D8'],
    26: ['D13'],
    25: ['S9', 'D8'],
    24: ['D12'],
    23: ['S7', 'D8'],
    22: ['D11'],
    21: ['S5', 'D8'],
    20: ['D10'],
    19: ['S3', 'D8'],
    18: ['D9'],
    17: ['S1', 'D8'],
    16: ['D8'],
    15: ['S7', 'D4'],
    14: ['D7'],
    13: ['S5', 'D4'],
    12: ['D6'],
    11: ['S3', 'D4'],
    10: ['D5'],
    9: ['S1', 'D4'],
    8: ['D4'],
    7: ['S3', 'D2'],
    6: ['D3'],
    5: ['S1', 'D2'],
    4: ['D2'],
    3: ['S1', 'D1'],
    2: ['D1'],
}

# Doubles players usually prefer to finish on, best first
PREFERRED_FINISHES = [20, 16, 8, 10, 12, 18, 14, 6, 4, 2]

# Setup darts: a plain single is easier to hit than the same value via a multiplier ring
_SETUP_PRIORITY = {SINGLE: 1, OUTER_BULL: 2, DOUBLE: 3, TRIPLE: 4, INNER_BULL: 5}


@dataclass(frozen=True)
class CheckoutPath:
    score: int
    darts: tuple[Segment, ...] = ()
    possible: bool = False

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "darts": [d.to_dict() for d in self.darts],
            "possible": self.possible,
            "text": format_checkout_path(self),
        }


def _build_setup_table() -> dict[int, Segment]:
    table: dict[int, Segment] = {}
    for seg in sorted(all_segments(), key=lambda s: _SETUP_PRIORITY[s.ring]):
        table.setdefault(seg.points, seg)
    return table


_SETUP_BY_POINTS = _build_setup_table()
# Highest value first; singles ahead of multiplier rings worth the same
_FIRST_SETUP_ORDER = sorted(all_segments(), key=lambda s: (-s.points, _SETUP_PRIORITY[s.ring]))
_FINISHING_SEGMENTS = sorted((s for s in all_segments() if s.is_finishing), key=lambda s: -s.points)


def best_setup_segment(points: int) -> Optional[Segment]:
    return _SETUP_BY_POINTS.get(points)


def _finishing_segment(number: int) -> Segment:
    if number == BULL:
        return create_segment(BULL, INNER_BULL)
    return create_segment(number, DOUBLE)


def _validate(score: int, darts_left: int) -> None:
    if not MIN_CHECKOUT <= score <= MAX_CHECKOUT:
        raise ValueError(f"checkout score must be between {MIN_CHECKOUT} and {MAX_CHECKOUT}, got {score}")
    if not 1 <= darts_left <= 3:
        raise ValueError(f"darts_left must be 1, 2 or 3, got {darts_left}")


def _two_dart_setup(remaining: int) -> Optional[tuple[Segment, Segment]]:
    for first in _FIRST_SETUP_ORDER:
        if first.points >= remaining:
            continue
        second = best_setup_segment(remaining - first.points)
        if second:
            return first, second
    return None


def _path_with_double(score: int, number: int, darts_left: int) -> Optional[list[Segment]]:
    finish = _finishing_segment(number)
    if score == finish.points:
        return [finish]

    remaining = score - finish.points
    if remaining <= 0:
        return None

    if darts_left >= 2:
        setup = best_setup_segment(remaining)
        if setup:
            return [setup, finish]

    if darts_left >= 3:
        pair = _two_dart_setup(remaining)
        if pair:
            return [pair[0], pair[1], finish]

    return None


def _search_checkout(score: int, darts_left: int) -> Optional[list[Segment]]:
    # 1 dart finish - must be a double or the bull
    for finish in _FINISHING_SEGMENTS:
        if finish.points == score:
            return [finish]

    # 2 dart finish: a setup dart then the double
    if darts_left >= 2:
        for finish in _FINISHING_SEGMENTS:
            if finish.points > score:
                continue
            setup = best_setup_segment(score - finish.points)
            if setup:
                return [setup, finish]

    # 3 dart finish
    if darts_left >= 3:
        for finish in _FINISHING_SEGMENTS:
            if finish.points > score:
                continue
            pair = _two_dart_setup(score - finish.points)
            if pair:
                return [pair[0], pair[1], finish]

    return None


def compute_checkout(score: int, preferred_double: Optional[int] = None, darts_left: int = 3) -> CheckoutPath:
    """
    Find a dart sequence that takes `score` to exactly zero, ending on a double or the inner bull.

    A preferred double (1-20, or 25 for the bull) wins over the chart whenever a path ending on
    it exists within the darts left. Otherwise the chart entry is used if it fits, then a direct
    search. Raises ValueError for scores outside 2-170 or darts_left outside 1-3.
    """
    _validate(score, darts_left)
    if preferred_double is not None and preferred_double not in (*range(1, 21), BULL):
        raise ValueError(f"preferred double must be 1-20 or 25, got {preferred_double}")

    if preferred_double is not None and score >= preferred_double * 2:
        darts = _path_with_double(score, preferred_double, darts_left)
        if darts:
            return CheckoutPath(score=score, darts=tuple(darts), possible=True)
        logger.debug("No %d-dart path to %d ending on double %s", darts_left, score, preferred_double)

    labels = COMMON_CHECKOUTS.get(score)
    if labels and len(labels) <= darts_left:
        return CheckoutPath(score=score, darts=tuple(parse_segment(lb) for lb in labels), possible=True)

    darts = _search_checkout(score, darts_left)
    if darts:
        return CheckoutPath(score=score, darts=tuple(darts), possible=True)
    return CheckoutPath(score=score, darts=(), possible=False)


def is_checkable(score: int, darts_left: int = 3) -> bool:
    if not MIN_CHECKOUT <= score <= MAX_CHECKOUT:
        return False
    return compute_checkout(score, None, darts_left).possible


def possible_doubles() -> list[int]:
    return [20, 16, 12, 10, 8, 18, 14, 6, 4, 2, 19, 17, 15, 13, 11, 9, 7, 5, 3, 1]


def _double_sort_key(number: int) -> tuple[int, int]:
    if number in PREFERRED_FINISHES:
        return (0, PREFERRED_FINISHES.index(number))
    return (1, -number)


def valid_checkout_doubles(score: int, darts_left: int = 3) -> list[int]:
    """
    Doubles (1-20) that some path from `score` can finish on within `darts_left` darts,
    common finishing doubles first and the rest from highest down.
    """
    if not 1 <= darts_left <= 3:
        raise ValueError(f"darts_left must be 1, 2 or 3, got {darts_left}")
    if not MIN_CHECKOUT <= score <= MAX_CHECKOUT:
        return []

    valid = []
    for number in possible_doubles():
        if number * 2 > score:
            continue
        if _path_with_double(score, number, darts_left):
            valid.append(number)
    return sorted(valid, key=_double_sort_key)


def format_checkout_path(path: CheckoutPath) -> str:
    if not path.possible or not path.darts:
        return "No checkout available"
    return " → ".join(d.label for d in path.darts)
