# Dartboard segment value type.
# A segment is fully described by its number and ring; points and multiplier are derived.

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

SINGLE = "single"
DOUBLE = "double"
TRIPLE = "triple"
OUTER_BULL = "outer-bull"
INNER_BULL = "inner-bull"

RINGS = (SINGLE, DOUBLE, TRIPLE, OUTER_BULL, INNER_BULL)
BULL_RINGS = (OUTER_BULL, INNER_BULL)
BULL = 25

_MULTIPLIERS = {SINGLE: 1, DOUBLE: 2, TRIPLE: 3, OUTER_BULL: 1, INNER_BULL: 2}


@dataclass(frozen=True)
class Segment:
    number: int  # 1-20, 25 for either bull
    ring: str

    def __post_init__(self) -> None:
        if self.ring not in RINGS:
            raise ValueError(f"unknown ring: {self.ring!r}")
        if self.ring in BULL_RINGS:
            if self.number != BULL:
                raise ValueError("bull rings must use number 25")
        elif not 1 <= self.number <= 20:
            raise ValueError(f"{self.ring} segment number must be 1-20, got {self.number}")

    @property
    def multiplier(self) -> int:
        return _MULTIPLIERS[self.ring]

    @property
    def points(self) -> int:
        return self.number * self.multiplier

    @property
    def is_finishing(self) -> bool:
        """True for the segments a double-out (or double-in) accepts."""
        return self.ring in (DOUBLE, INNER_BULL)

    @property
    def label(self) -> str:
        # Short chart notation, as used in checkout suggestions
        if self.ring == INNER_BULL:
            return "Bull"
        if self.ring == OUTER_BULL:
            return "25"
        prefix = {DOUBLE: "D", TRIPLE: "T"}.get(self.ring, "")
        return f"{prefix}{self.number}"

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "ring": self.ring,
            "points": self.points,
            "multiplier": self.multiplier,
            "label": format_segment(self),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["Segment"]:
        if data is None:
            return None
        return create_segment(int(data["number"]), str(data["ring"]))


def create_segment(number: int, ring: str) -> Segment:
    # Bull rings always carry 25 regardless of what the caller passed
    if ring in BULL_RINGS:
        number = BULL
    return Segment(number=number, ring=ring)


def format_segment(segment: Optional[Segment]) -> str:
    if segment is None:
        return "Miss"
    if segment.ring == INNER_BULL:
        return "Bull (50)"
    if segment.ring == OUTER_BULL:
        return "Bull (25)"
    return segment.label


def parse_segment(label: str) -> Segment:
    """
    Parse a chart label into a segment.

    Accepted forms: T20, D16, S5 or 5, BULL / Bull (inner bull, 50), SBULL or 25 (outer bull).
    """
    text = (label or "").strip().upper()
    if not text:
        raise ValueError("empty segment label")
    if text == "BULL":
        return create_segment(BULL, INNER_BULL)
    if text in ("SBULL", "25"):
        return create_segment(BULL, OUTER_BULL)

    ring = SINGLE
    if text[0] in "TDS":
        ring = {"T": TRIPLE, "D": DOUBLE, "S": SINGLE}[text[0]]
        text = text[1:]
    try:
        number = int(text)
    except ValueError:
        raise ValueError(f"invalid segment label: {label!r}") from None
    return create_segment(number, ring)


@lru_cache(maxsize=1)
def all_segments() -> tuple[Segment, ...]:
    """Every distinct scoring segment: both bulls, then singles/doubles/triples for 1-20."""
    segments = [create_segment(BULL, INNER_BULL), create_segment(BULL, OUTER_BULL)]
    for number in range(1, 21):
        segments.append(create_segment(number, SINGLE))
        segments.append(create_segment(number, DOUBLE))
        segments.append(create_segment(number, TRIPLE))
    return tuple(segments)
