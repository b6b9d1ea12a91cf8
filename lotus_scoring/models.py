from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from lotus_scoring.stableford import StablefordPointsConfig

DEFAULT_SLOPE_RATING = 113
MIN_SLOPE_RATING = 55
MAX_SLOPE_RATING = 155


class ScoringFormat(str, Enum):
    STABLEFORD = "Stableford"
    STROKE_PLAY = "Stroke Play"
    SCRAMBLE = "Scramble"

    @classmethod
    def parse(cls, raw: "str | ScoringFormat") -> "ScoringFormat":
        if isinstance(raw, cls):
            return raw
        normalized = re.sub(r"[\s_-]+", "", str(raw or "")).lower()
        for member in cls:
            if member.value.replace(" ", "").lower() == normalized:
                return member
        raise ValueError(f"Unknown tournament format: {raw!r}")

    @property
    def is_team_format(self) -> bool:
        return self is ScoringFormat.SCRAMBLE


@dataclass(frozen=True)
class Hole:
    number: int
    par: int
    stroke_index: int | None = None


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    handicap_index: float | None = None
    handicap: int = 0

    @property
    def has_handicap(self) -> bool:
        return self.handicap_index is not None or self.handicap > 0


@dataclass(frozen=True)
class Team:
    id: str
    name: str


@dataclass(frozen=True)
class PairingPreference:
    player_id: str
    preferred_player_id: str


@dataclass(frozen=True)
class Group:
    number: int
    player_ids: tuple[str, ...]
    pin: str | None = None

    @property
    def size(self) -> int:
        return len(self.player_ids)


@dataclass(frozen=True)
class TournamentConfig:
    """Tournament-scoped inputs to the scoring pipeline, defaults already applied."""

    slope_rating: float = DEFAULT_SLOPE_RATING
    course_rating: float | None = None
    stableford: StablefordPointsConfig = field(default_factory=StablefordPointsConfig)
    format: ScoringFormat = ScoringFormat.STABLEFORD
    hole_count: int | None = None

    def course_rating_for(self, total_par: int) -> float:
        return self.course_rating if self.course_rating is not None else total_par

    def hole_count_for(self, holes: "list[Hole] | tuple[Hole, ...]") -> int:
        return self.hole_count if self.hole_count is not None else len(holes)
