"""Scoring pipeline shared by the scorecard, leaderboard, monitor and email surfaces."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from lotus_scoring.leaderboard import Leaderboard, LeaderboardEntry, rank_leaderboard
from lotus_scoring.models import Hole, Player, Team, TournamentConfig
from lotus_scoring.scorecard import Scorecard, player_scorecard, team_scorecard

EntrantScores = Mapping[str, Mapping[int, int]]


def build_scorecards(
    config: TournamentConfig,
    holes: Sequence[Hole],
    players: Sequence[Player],
    scores: EntrantScores,
    teams: Sequence[Team] = (),
) -> list[Scorecard]:
    """
    Scorecards for every entrant, in roster order.

    Scramble events are scored per team from group-keyed scores; every other
    format is scored per player from player-keyed scores.
    """
    if config.format.is_team_format:
        return [team_scorecard(team, holes, scores.get(team.id, {}), config) for team in teams]
    return [player_scorecard(player, holes, scores.get(player.id, {}), config) for player in players]


def build_leaderboard(
    config: TournamentConfig,
    holes: Sequence[Hole],
    players: Sequence[Player],
    scores: EntrantScores,
    teams: Sequence[Team] = (),
) -> Leaderboard:
    scorecards = build_scorecards(config, holes, players, scores, teams)
    entries = [LeaderboardEntry.from_scorecard(card) for card in scorecards]
    return rank_leaderboard(entries, config.format)
