from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from lotus_scoring.models import ScoringFormat
from lotus_scoring.scorecard import Scorecard


@dataclass(frozen=True)
class LeaderboardEntry:
    entrant_id: str
    name: str
    total_gross: int
    total_net: int
    total_points: int
    holes_completed: int
    has_handicap: bool = False
    to_par: int = 0

    @classmethod
    def from_scorecard(cls, scorecard: Scorecard) -> "LeaderboardEntry":
        return cls(
            entrant_id=scorecard.entrant_id,
            name=scorecard.name,
            total_gross=scorecard.total.gross,
            total_net=scorecard.total.net,
            total_points=scorecard.total.points,
            holes_completed=scorecard.holes_completed,
            has_handicap=scorecard.has_handicap,
            to_par=scorecard.to_par,
        )


@dataclass(frozen=True)
class RankedEntry:
    position: int
    entry: LeaderboardEntry
    score: int


@dataclass(frozen=True)
class Leaderboard:
    format: ScoringFormat
    ranked: tuple[RankedEntry, ...]
    not_started: tuple[LeaderboardEntry, ...]
    uses_net: bool = False


def _score_for(entry: LeaderboardEntry, scoring_format: ScoringFormat, uses_net: bool) -> int:
    if scoring_format is ScoringFormat.STABLEFORD:
        return entry.total_points
    if scoring_format is ScoringFormat.STROKE_PLAY and uses_net:
        return entry.total_net
    return entry.total_gross


def rank_leaderboard(
    entries: Iterable[LeaderboardEntry],
    scoring_format: ScoringFormat | str,
) -> Leaderboard:
    """
    Order entries for display.

    Stableford ranks highest points first; stroke play and scramble rank the
    lowest strokes first. Ties go to the entry with more holes completed, and
    full ties keep their input order. Positions are never shared: equal scores
    get consecutive positions.
    """
    fmt = ScoringFormat.parse(scoring_format)
    entry_list = list(entries)
    started = [entry for entry in entry_list if entry.holes_completed > 0]
    not_started = tuple(entry for entry in entry_list if entry.holes_completed <= 0)
    uses_net = fmt is ScoringFormat.STROKE_PLAY and any(entry.has_handicap for entry in entry_list)

    direction = -1 if fmt is ScoringFormat.STABLEFORD else 1
    ordered = sorted(
        started,
        key=lambda entry: (
            direction * _score_for(entry, fmt, uses_net),
            -entry.holes_completed,
        ),
    )
    ranked = tuple(
        RankedEntry(position=index, entry=entry, score=_score_for(entry, fmt, uses_net))
        for index, entry in enumerate(ordered, start=1)
    )
    return Leaderboard(format=fmt, ranked=ranked, not_started=not_started, uses_net=uses_net)
