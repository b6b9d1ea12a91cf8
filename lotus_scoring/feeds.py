"""Turn loosely-typed rows from the tournament store into engine models."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from lotus_scoring.models import (
    DEFAULT_SLOPE_RATING,
    MAX_SLOPE_RATING,
    MIN_SLOPE_RATING,
    Hole,
    PairingPreference,
    Player,
    ScoringFormat,
    Team,
    TournamentConfig,
)
from lotus_scoring.stableford import parse_stableford_config

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


def _whole_number(value: Any) -> int:
    # fractional values are rejected, never truncated
    if isinstance(value, bool):
        raise TypeError(f"Expected a whole number, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"Expected a whole number, got {value!r}")
    return int(value)


def _optional_int(value: Any) -> int | None:
    if value in (None, ""):
        return None
    return _whole_number(value)


def _optional_float(value: Any) -> float | None:
    if value in (None, ""):
        return None
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Expected a finite number, got {value!r}")
    return number


def _entrant_id(value: Any) -> str | None:
    if value in (None, ""):
        return None
    return str(value)


def tournament_config_from_row(row: Row) -> TournamentConfig:
    try:
        slope = _optional_float(row.get("slope_rating"))
    except (TypeError, ValueError):
        logger.warning("Ignoring slope_rating=%r (not a number)", row.get("slope_rating"))
        slope = None
    if slope is not None and not MIN_SLOPE_RATING <= slope <= MAX_SLOPE_RATING:
        logger.warning(
            "Ignoring slope_rating=%s (must be between %s and %s)",
            slope,
            MIN_SLOPE_RATING,
            MAX_SLOPE_RATING,
        )
        slope = None
    try:
        course_rating = _optional_float(row.get("course_rating"))
    except (TypeError, ValueError):
        logger.warning("Ignoring course_rating=%r (not a number)", row.get("course_rating"))
        course_rating = None
    try:
        hole_count = _optional_int(row.get("holes"))
    except (TypeError, ValueError):
        logger.warning("Ignoring holes=%r (not an integer)", row.get("holes"))
        hole_count = None
    if hole_count is not None and hole_count <= 0:
        hole_count = None
    return TournamentConfig(
        slope_rating=slope if slope is not None else DEFAULT_SLOPE_RATING,
        course_rating=course_rating,
        stableford=parse_stableford_config(row.get("stableford_points_config")),
        format=ScoringFormat.parse(row.get("format") or ScoringFormat.STABLEFORD),
        hole_count=hole_count,
    )


def holes_from_rows(rows: Iterable[Row]) -> list[Hole]:
    """
    Build the course layout sorted by hole number.

    A repeated hole number keeps the later row. Repeated stroke indexes are
    kept but logged, since the allocation no longer spreads strokes evenly.
    """
    holes: dict[int, Hole] = {}
    for row in rows:
        try:
            number = _whole_number(row["hole_number"])
            par = _whole_number(row["par"])
            stroke_index = _optional_int(row.get("handicap"))
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed hole row: %r", row)
            continue
        if number <= 0 or par <= 0:
            logger.warning("Skipping hole row with non-positive number or par: %r", row)
            continue
        if number in holes:
            logger.warning("Hole %s listed more than once; using the last row", number)
        holes[number] = Hole(number=number, par=par, stroke_index=stroke_index)

    seen_indexes: dict[int, int] = {}
    for number in sorted(holes):
        stroke_index = holes[number].stroke_index
        if stroke_index is None:
            continue
        if stroke_index in seen_indexes:
            logger.warning(
                "Stroke index %s used by holes %s and %s",
                stroke_index,
                seen_indexes[stroke_index],
                number,
            )
        else:
            seen_indexes[stroke_index] = number
    return [holes[number] for number in sorted(holes)]


def players_from_rows(rows: Iterable[Row]) -> list[Player]:
    players: list[Player] = []
    for row in rows:
        player_id = _entrant_id(row.get("id"))
        if not player_id:
            logger.warning("Skipping player row without id: %r", row)
            continue
        try:
            handicap_index = _optional_float(row.get("handicap_index"))
        except (TypeError, ValueError):
            logger.warning("Ignoring handicap_index=%r for player %s", row.get("handicap_index"), player_id)
            handicap_index = None
        try:
            handicap = _optional_int(row.get("handicap")) or 0
        except (TypeError, ValueError):
            logger.warning("Ignoring handicap=%r for player %s", row.get("handicap"), player_id)
            handicap = 0
        players.append(
            Player(
                id=player_id,
                name=str(row.get("name") or ""),
                handicap_index=handicap_index,
                handicap=handicap,
            )
        )
    return players


def teams_from_rows(rows: Iterable[Row]) -> list[Team]:
    teams: list[Team] = []
    for row in rows:
        team_id = _entrant_id(row.get("id"))
        if not team_id:
            logger.warning("Skipping group row without id: %r", row)
            continue
        teams.append(Team(id=team_id, name=str(row.get("name") or "")))
    return teams


def preferences_from_rows(rows: Iterable[Row]) -> list[PairingPreference]:
    preferences: list[PairingPreference] = []
    for row in rows:
        player_id = _entrant_id(row.get("player_id"))
        preferred_id = _entrant_id(row.get("preferred_player_id"))
        if not player_id or not preferred_id:
            logger.warning("Skipping incomplete pairing preference: %r", row)
            continue
        preferences.append(PairingPreference(player_id=player_id, preferred_player_id=preferred_id))
    return preferences


def scores_by_entrant(
    rows: Iterable[Row],
    key: str,
    holes: Iterable[Hole],
) -> dict[str, dict[int, int]]:
    """
    Group score rows by ``key`` (``player_id`` or ``group_id``).

    Rows keyed by the other column are ignored. A later row for the same
    entrant and hole replaces the earlier one.
    """
    hole_numbers = {hole.number for hole in holes}
    scores: dict[str, dict[int, int]] = {}
    for row in rows:
        entrant = _entrant_id(row.get(key))
        if not entrant:
            continue
        try:
            hole_number = _whole_number(row["hole_number"])
            strokes = _whole_number(row["strokes"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed score row: %r", row)
            continue
        if hole_number not in hole_numbers:
            logger.warning("Skipping score for unknown hole %s (%s=%s)", hole_number, key, entrant)
            continue
        if strokes < 1:
            logger.warning("Skipping score of %s strokes on hole %s (%s=%s)", strokes, hole_number, key, entrant)
            continue
        scores.setdefault(entrant, {})[hole_number] = strokes
    return scores
