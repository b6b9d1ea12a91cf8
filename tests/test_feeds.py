import logging

import pytest

from lotus_scoring.feeds import (
    holes_from_rows,
    players_from_rows,
    preferences_from_rows,
    scores_by_entrant,
    teams_from_rows,
    tournament_config_from_row,
)
from lotus_scoring.models import Hole, PairingPreference, Player, ScoringFormat, Team
from lotus_scoring.stableford import DEFAULT_STABLEFORD_CONFIG


def test_tournament_defaults_when_columns_missing():
    config = tournament_config_from_row({})
    assert config.slope_rating == 113
    assert config.course_rating is None
    assert config.course_rating_for(72) == 72
    assert config.stableford == DEFAULT_STABLEFORD_CONFIG
    assert config.format is ScoringFormat.STABLEFORD
    assert config.hole_count is None


def test_tournament_row_values_are_used():
    config = tournament_config_from_row(
        {
            "slope_rating": 128,
            "course_rating": "70.4",
            "stableford_points_config": {"par": 2, "birdie": "lots"},
            "format": "Stroke Play",
            "holes": 9,
        }
    )
    assert config.slope_rating == 128
    assert config.course_rating == pytest.approx(70.4)
    assert config.stableford.par == 2
    assert config.stableford.birdie == DEFAULT_STABLEFORD_CONFIG.birdie
    assert config.format is ScoringFormat.STROKE_PLAY
    assert config.hole_count == 9


def test_out_of_range_slope_falls_back(caplog):
    with caplog.at_level(logging.WARNING):
        config = tournament_config_from_row({"slope_rating": 200})
    assert config.slope_rating == 113
    assert "slope_rating" in caplog.text


def test_garbage_ratings_fall_back():
    config = tournament_config_from_row({"slope_rating": "steep", "course_rating": "n/a", "holes": 0})
    assert config.slope_rating == 113
    assert config.course_rating is None
    assert config.hole_count is None


def test_unknown_format_is_an_error():
    with pytest.raises(ValueError):
        tournament_config_from_row({"format": "Skins"})


def test_holes_sorted_and_malformed_rows_skipped(caplog):
    rows = [
        {"hole_number": 2, "par": 5, "handicap": 1},
        {"hole_number": 1, "par": "4", "handicap": None},
        {"hole_number": "x", "par": 4},
        {"par": 3},
        {"hole_number": 3, "par": 0},
    ]
    with caplog.at_level(logging.WARNING):
        holes = holes_from_rows(rows)
    assert holes == [Hole(number=1, par=4, stroke_index=None), Hole(number=2, par=5, stroke_index=1)]
    assert "Skipping" in caplog.text


def test_players_from_rows():
    rows = [
        {"id": "p1", "name": "Ana", "handicap_index": 12.4, "handicap": 0},
        {"id": 7, "name": "Bo", "handicap": 9},
        {"id": "p3", "name": "Cy", "handicap_index": "bad", "handicap": None},
        {"name": "No id"},
    ]
    players = players_from_rows(rows)
    assert players == [
        Player(id="p1", name="Ana", handicap_index=12.4, handicap=0),
        Player(id="7", name="Bo", handicap_index=None, handicap=9),
        Player(id="p3", name="Cy", handicap_index=None, handicap=0),
    ]


def test_teams_and_preferences_from_rows():
    assert teams_from_rows([{"id": "g1", "name": "Group 1"}, {"name": "x"}]) == [Team(id="g1", name="Group 1")]
    prefs = preferences_from_rows(
        [{"player_id": "a", "preferred_player_id": "b"}, {"player_id": "a"}]
    )
    assert prefs == [PairingPreference(player_id="a", preferred_player_id="b")]


def test_scores_grouped_by_entrant_with_upsert():
    holes = [Hole(number=1, par=4), Hole(number=2, par=4)]
    rows = [
        {"player_id": "p1", "hole_number": 1, "strokes": 5},
        {"player_id": "p1", "hole_number": 1, "strokes": 4},
        {"player_id": "p1", "hole_number": 2, "strokes": "6"},
        {"player_id": "p2", "hole_number": 2, "strokes": 3},
        {"group_id": "g1", "hole_number": 1, "strokes": 4},
    ]
    assert scores_by_entrant(rows, "player_id", holes) == {"p1": {1: 4, 2: 6}, "p2": {2: 3}}
    assert scores_by_entrant(rows, "group_id", holes) == {"g1": {1: 4}}


def test_invalid_scores_skipped(caplog):
    holes = [Hole(number=1, par=4)]
    rows = [
        {"player_id": "p1", "hole_number": 9, "strokes": 4},
        {"player_id": "p1", "hole_number": 1, "strokes": 0},
        {"player_id": "p1", "hole_number": 1, "strokes": None},
    ]
    with caplog.at_level(logging.WARNING):
        assert scores_by_entrant(rows, "player_id", holes) == {}
    assert "unknown hole" in caplog.text


def test_fractional_strokes_are_skipped_not_truncated(caplog):
    holes = [Hole(number=1, par=4)]
    rows = [
        {"player_id": "p", "hole_number": 1, "strokes": 4.9},
        {"player_id": "q", "hole_number": 1, "strokes": 1.5},
        {"player_id": "r", "hole_number": 1.0, "strokes": 5.0},
        {"player_id": "s", "hole_number": 1, "strokes": True},
    ]
    with caplog.at_level(logging.WARNING):
        assert scores_by_entrant(rows, "player_id", holes) == {"r": {1: 5}}
    assert "malformed score row" in caplog.text


def test_fractional_hole_values_are_rejected():
    rows = [
        {"hole_number": 1, "par": 4.5, "handicap": 1},
        {"hole_number": 2, "par": 4, "handicap": 2.5},
        {"hole_number": 3, "par": 3.0, "handicap": 3},
    ]
    assert holes_from_rows(rows) == [Hole(number=3, par=3, stroke_index=3)]


def test_non_finite_ratings_and_indexes_fall_back(caplog):
    with caplog.at_level(logging.WARNING):
        config = tournament_config_from_row({"slope_rating": float("inf"), "course_rating": "nan"})
        players = players_from_rows([{"id": "p1", "name": "Ana", "handicap_index": float("inf"), "handicap": 7.5}])
    assert config.slope_rating == 113
    assert config.course_rating is None
    assert players == [Player(id="p1", name="Ana", handicap_index=None, handicap=0)]
    assert "course_rating" in caplog.text


def test_duplicate_holes_and_stroke_indexes_are_logged(caplog):
    rows = [
        {"hole_number": 1, "par": 4, "handicap": 1},
        {"hole_number": 2, "par": 5, "handicap": 1},
        {"hole_number": 1, "par": 3, "handicap": 2},
    ]
    with caplog.at_level(logging.WARNING):
        holes = holes_from_rows(rows)
    assert holes == [Hole(number=1, par=3, stroke_index=2), Hole(number=2, par=5, stroke_index=1)]
    assert "Hole 1 listed more than once" in caplog.text
    assert "Stroke index" not in caplog.text

    caplog.clear()
    with caplog.at_level(logging.WARNING):
        holes_from_rows(rows[:2])
    assert "Stroke index 1 used by holes 1 and 2" in caplog.text
