"""
USGA course handicap and per-hole stroke allocation.

Course Handicap = round(Handicap Index x (Slope Rating / 113) + (Course Rating - Par))

Strokes are spread over the round by stroke index (1 = hardest hole): every
hole gets ``course_handicap // hole_count`` strokes and the remaining
``course_handicap % hole_count`` strokes go to the hardest holes. The same rule
covers 9, 10 or 18 hole rounds.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Iterable

from lotus_scoring.models import DEFAULT_SLOPE_RATING, Hole, Player, TournamentConfig

HALF = Fraction(1, 2)


def round_half_up(value: float) -> int:
    """Round halves toward positive infinity, on the exact binary value of ``value``."""
    if not math.isfinite(value):
        raise ValueError(f"Cannot round non-finite value {value!r}")
    return math.floor(Fraction(value) + HALF)


def compute_course_handicap(
    handicap_index: float,
    slope_rating: float,
    course_rating: float,
    total_par: float,
) -> int:
    for name, value in (
        ("handicap_index", handicap_index),
        ("slope_rating", slope_rating),
        ("course_rating", course_rating),
        ("total_par", total_par),
    ):
        if not math.isfinite(value):
            raise ValueError(f"{name} must be a finite number, got {value!r}")
    raw = handicap_index * (slope_rating / DEFAULT_SLOPE_RATING) + (course_rating - total_par)
    if not math.isfinite(raw):
        raise ValueError("Course handicap is out of range for the given ratings")
    return round_half_up(raw)


def clamp_course_handicap(course_handicap: int) -> int:
    """Plus handicaps (negative values) receive no strokes."""
    return max(0, course_handicap)


def get_strokes_on_hole(course_handicap: int, stroke_index: int | None, hole_count: int) -> int:
    """
    Strokes received on a single hole.

    ``course_handicap`` must already be a non-negative integer; pass it through
    ``clamp_course_handicap`` first when it may be a plus handicap. A hole
    without a stroke index receives nothing.
    """
    if stroke_index is None or hole_count == 0 or course_handicap <= 0:
        return 0
    base = course_handicap // hole_count
    remainder = course_handicap % hole_count
    extra = 1 if stroke_index <= remainder else 0
    return base + extra


def allocate_strokes(
    course_handicap: int,
    holes: Iterable[Hole],
    hole_count: int | None = None,
) -> dict[int, int]:
    hole_list = list(holes)
    count = len(hole_list) if hole_count is None else hole_count
    return {
        hole.number: get_strokes_on_hole(course_handicap, hole.stroke_index, count)
        for hole in hole_list
    }


def player_course_handicap(
    player: Player,
    config: TournamentConfig,
    holes: Iterable[Hole],
) -> int:
    """Resolve the strokes a player plays off, applying the tournament defaults."""
    if player.handicap_index is None:
        return clamp_course_handicap(player.handicap)
    total_par = sum(hole.par for hole in holes)
    course_handicap = compute_course_handicap(
        player.handicap_index,
        config.slope_rating,
        config.course_rating_for(total_par),
        total_par,
    )
    return clamp_course_handicap(course_handicap)
