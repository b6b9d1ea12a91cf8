from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from lotus_scoring.handicap import get_strokes_on_hole, player_course_handicap
from lotus_scoring.models import Hole, Player, Team, TournamentConfig
from lotus_scoring.stableford import compute_stableford_points


@dataclass(frozen=True)
class HoleRow:
    hole_number: int
    par: int
    raw: int | None
    strokes_received: int
    net: int | None
    points: int | None


@dataclass(frozen=True)
class Subtotal:
    gross: int = 0
    net: int = 0
    points: int = 0


@dataclass(frozen=True)
class Scorecard:
    entrant_id: str
    name: str
    course_handicap: int
    has_handicap: bool
    rows: tuple[HoleRow, ...]
    out_total: Subtotal
    in_total: Subtotal
    total: Subtotal
    split: bool
    holes_completed: int
    par_completed: int

    @property
    def score_label(self) -> str:
        return "NET" if self.has_handicap else "GRS"

    @property
    def to_par(self) -> int:
        return self.total.gross - self.par_completed

    @property
    def net_to_par(self) -> int:
        return self.total.net - self.par_completed


def _subtotal(rows: Sequence[HoleRow]) -> Subtotal:
    return Subtotal(
        gross=sum(row.raw or 0 for row in rows),
        net=sum(row.net or 0 for row in rows),
        points=sum(row.points or 0 for row in rows),
    )


def _hole_row(
    hole: Hole,
    raw: int | None,
    course_handicap: int,
    hole_count: int,
    config: TournamentConfig,
) -> HoleRow:
    if raw is not None and raw < 1:
        raise ValueError(f"Hole {hole.number}: strokes must be at least 1, got {raw}")
    received = get_strokes_on_hole(course_handicap, hole.stroke_index, hole_count)
    if raw is None:
        return HoleRow(hole.number, hole.par, None, received, None, None)
    return HoleRow(
        hole_number=hole.number,
        par=hole.par,
        raw=raw,
        strokes_received=received,
        net=raw - received,
        points=compute_stableford_points(raw, hole.par, received, config.stableford),
    )


def aggregate_scorecard(
    entrant_id: str,
    name: str,
    holes: Sequence[Hole],
    scores: Mapping[int, int],
    config: TournamentConfig,
    course_handicap: int = 0,
    has_handicap: bool = True,
) -> Scorecard:
    """
    Build hole rows and out/in/total subtotals for one player or team.

    ``scores`` maps hole number to gross strokes; holes without an entry count
    as 0 in every subtotal. Entrants without a handicap are scored gross only.
    When ``split`` is false the round has no back nine to show and callers
    should render ``total`` alone; out + in still equals total.
    """
    hole_count = config.hole_count_for(holes)
    strokes_off = course_handicap if has_handicap else 0
    rows = tuple(
        _hole_row(hole, scores.get(hole.number), strokes_off, hole_count, config)
        for hole in holes
    )

    midpoint = hole_count // 2
    out_rows = [row for row in rows if row.hole_number <= midpoint]
    in_rows = [row for row in rows if row.hole_number > midpoint]
    split = midpoint > 0 and bool(in_rows)

    completed = [row for row in rows if row.raw is not None]
    return Scorecard(
        entrant_id=entrant_id,
        name=name,
        course_handicap=strokes_off,
        has_handicap=has_handicap,
        rows=rows,
        out_total=_subtotal(out_rows),
        in_total=_subtotal(in_rows),
        total=_subtotal(rows),
        split=split,
        holes_completed=len(completed),
        par_completed=sum(row.par for row in completed),
    )


def player_scorecard(
    player: Player,
    holes: Sequence[Hole],
    scores: Mapping[int, int],
    config: TournamentConfig,
) -> Scorecard:
    return aggregate_scorecard(
        player.id,
        player.name,
        holes,
        scores,
        config,
        course_handicap=player_course_handicap(player, config, holes),
        has_handicap=player.has_handicap,
    )


def team_scorecard(
    team: Team,
    holes: Sequence[Hole],
    scores: Mapping[int, int],
    config: TournamentConfig,
) -> Scorecard:
    # scramble teams carry no handicap
    return aggregate_scorecard(team.id, team.name, holes, scores, config, has_handicap=False)


def format_to_par(value: int) -> str:
    if value == 0:
        return "E"
    if value > 0:
        return f"+{value}"
    return str(value)
