# Game value types shared by the state machine, replay, statistics and the AI.

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

from cricket import CUTTHROAT, STANDARD, VARIANTS, fresh_cricket_score
from segments import Segment
from x01 import STARTING_SCORES, fresh_x01_score

CRICKET = "cricket"
GAME_TYPES = (*STARTING_SCORES, CRICKET)

HUMAN = "human"
AI = "ai"
PLAYER_KINDS = (HUMAN, AI)


@dataclass(frozen=True)
class GameRules:
    game_type: str = "501"
    double_in: bool = False
    double_out: bool = True
    cricket_variant: str = STANDARD
    best_of: int = 1

    def __post_init__(self) -> None:
        if self.game_type not in GAME_TYPES:
            raise ValueError(f"game_type must be one of {GAME_TYPES}, got {self.game_type!r}")
        if self.cricket_variant not in VARIANTS:
            raise ValueError(f"cricket_variant must be one of {VARIANTS}, got {self.cricket_variant!r}")
        if self.best_of < 1 or self.best_of % 2 == 0:
            raise ValueError("best_of must be an odd number of legs >= 1")

    @property
    def is_cricket(self) -> bool:
        return self.game_type == CRICKET

    @property
    def is_cutthroat(self) -> bool:
        return self.is_cricket and self.cricket_variant == CUTTHROAT

    @property
    def legs_to_win(self) -> int:
        return self.best_of // 2 + 1

    def to_dict(self) -> dict:
        return {
            "game_type": self.game_type,
            "double_in": self.double_in,
            "double_out": self.double_out,
            "cricket_variant": self.cricket_variant,
            "best_of": self.best_of,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameRules":
        return cls(
            game_type=str(data.get("game_type", "501")),
            double_in=bool(data.get("double_in", False)),
            double_out=bool(data.get("double_out", True)),
            cricket_variant=data.get("cricket_variant") or STANDARD,
            best_of=int(data.get("best_of", 1)),
        )


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    kind: str = HUMAN
    difficulty: Optional[int] = None  # 1-10, AI players only
    color: str = "#1B5E20"
    user_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in PLAYER_KINDS:
            raise ValueError(f"player kind must be 'human' or 'ai', got {self.kind!r}")
        if self.difficulty is not None and not 1 <= self.difficulty <= 10:
            raise ValueError("AI difficulty must be between 1 and 10")

    @property
    def is_ai(self) -> bool:
        return self.kind == AI

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "difficulty": self.difficulty,
            "color": self.color,
            "user_id": self.user_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Player":
        difficulty = data.get("difficulty")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or "Player"),
            kind=data.get("kind", HUMAN),
            difficulty=int(difficulty) if difficulty is not None else None,
            color=data.get("color") or "#1B5E20",
            user_id=data.get("user_id"),
        )


@dataclass(frozen=True)
class Throw:
    segment: Optional[Segment]  # None for a miss
    player_id: str
    timestamp: float = field(default_factory=time.time)
    coordinates: Optional[tuple[float, float]] = None
    # Dart index within its turn, stamped by record_throw
    slot: Optional[int] = None

    def to_dict(self) -> dict:
        coords = None
        if self.coordinates is not None:
            coords = {"x": self.coordinates[0], "y": self.coordinates[1]}
        return {
            "segment": self.segment.to_dict() if self.segment else None,
            "player_id": self.player_id,
            "timestamp": self.timestamp,
            "coordinates": coords,
            "slot": self.slot,
        }


@dataclass(frozen=True)
class LegState:
    leg_number: int
    winner_id: Optional[str] = None
    throws: tuple[Throw, ...] = ()
    scores: dict = field(default_factory=dict)  # player id -> X01Score | CricketScore

    def to_dict(self) -> dict:
        return {
            "leg_number": self.leg_number,
            "winner_id": self.winner_id,
            "throws": [t.to_dict() for t in self.throws],
            "scores": {pid: s.to_dict() for pid, s in self.scores.items()},
        }


@dataclass(frozen=True)
class GameState:
    id: str
    rules: GameRules
    players: tuple[Player, ...]
    current_player_index: int = 0
    current_throw_in_turn: int = 0
    legs: tuple[LegState, ...] = ()
    current_leg_index: int = 0
    legs_won: dict = field(default_factory=dict)
    match_winner_id: Optional[str] = None
    started_at: str = ""
    completed_at: Optional[str] = None

    @property
    def current_leg(self) -> LegState:
        return self.legs[self.current_leg_index]

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    @property
    def player_ids(self) -> list[str]:
        return [p.id for p in self.players]

    def player(self, player_id: str) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def player_index(self, player_id: str) -> int:
        return self.player_ids.index(player_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "rules": self.rules.to_dict(),
            "players": [p.to_dict() for p in self.players],
            "current_player_index": self.current_player_index,
            "current_throw_in_turn": self.current_throw_in_turn,
            "legs": [leg.to_dict() for leg in self.legs],
            "current_leg_index": self.current_leg_index,
            "legs_won": dict(self.legs_won),
            "match_winner_id": self.match_winner_id,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
        }


def fresh_scores(rules: GameRules, players: Sequence[Player]) -> dict:
    if rules.is_cricket:
        return {p.id: fresh_cricket_score() for p in players}
    return {p.id: fresh_x01_score(rules) for p in players}
