import logging
from dataclasses import asdict
from typing import Any, TypeVar

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lotus_scoring.feeds import (
    holes_from_rows,
    players_from_rows,
    preferences_from_rows,
    scores_by_entrant,
    teams_from_rows,
    tournament_config_from_row,
)
from lotus_scoring.handicap import compute_course_handicap
from lotus_scoring.leaderboard import Leaderboard, LeaderboardEntry
from lotus_scoring.models import DEFAULT_SLOPE_RATING, Group
from lotus_scoring.pairing import assign_pins, assign_round_robin, auto_generate_groups
from lotus_scoring.scorecard import Scorecard, format_to_par
from lotus_scoring.settings import MAX_GROUP_SIZE, load_settings
from lotus_scoring.stableford import DEFAULT_STABLEFORD_CONFIG
from lotus_scoring.tournament import build_leaderboard, build_scorecards

logger = logging.getLogger(__name__)

app = FastAPI(title="Lotus Links scoring engine")
settings = load_settings()

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class CourseHandicapPayload(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    handicap_index: float
    total_par: int
    slope_rating: float | None = None
    course_rating: float | None = None


class TournamentPayload(BaseModel):
    tournament: dict[str, Any] = Field(default_factory=dict)
    holes: list[dict[str, Any]]
    players: list[dict[str, Any]] = Field(default_factory=list)
    groups: list[dict[str, Any]] = Field(default_factory=list)
    scores: list[dict[str, Any]] = Field(default_factory=list)


class GroupingPayload(BaseModel):
    player_ids: list[str]
    preferences: list[dict[str, Any]] = Field(default_factory=list)
    group_size: int | None = Field(default=None, ge=1, le=MAX_GROUP_SIZE)
    existing_pins: list[str] = Field(default_factory=list)


class GroupSeatPayload(BaseModel):
    number: int = Field(ge=1)
    player_ids: list[str] = Field(default_factory=list)
    pin: str | None = None


class RoundRobinPayload(BaseModel):
    groups: list[GroupSeatPayload] = Field(default_factory=list)
    player_ids: list[str] = Field(default_factory=list)


class PayloadError(Exception):
    def __init__(self, details: list[Any]):
        super().__init__("Invalid payload")
        self.details = details


@app.exception_handler(PayloadError)
async def payload_error_handler(request: Request, exc: PayloadError):
    return JSONResponse({"error": "Invalid payload", "details": exc.details}, status_code=422)


async def _parse(request: Request, model: type[PayloadT]) -> PayloadT:
    try:
        body = await request.json()
    except ValueError:
        raise PayloadError([{"msg": "Request body is not valid JSON"}])
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise PayloadError(exc.errors(include_url=False, include_context=False, include_input=False))


def _scorecard_json(card: Scorecard) -> dict:
    data = asdict(card)
    data.update(
        {
            "score_label": card.score_label,
            "to_par": card.to_par,
            "to_par_display": format_to_par(card.to_par),
        }
    )
    return data


def _entry_json(entry: LeaderboardEntry) -> dict:
    data = asdict(entry)
    data["to_par_display"] = format_to_par(entry.to_par)
    return data


def _leaderboard_json(leaderboard: Leaderboard) -> dict:
    return {
        "format": leaderboard.format.value,
        "uses_net": leaderboard.uses_net,
        "ranked": [
            {"position": ranked.position, "score": ranked.score, **_entry_json(ranked.entry)}
            for ranked in leaderboard.ranked
        ],
        "not_started": [_entry_json(entry) for entry in leaderboard.not_started],
    }


def _group_json(group: Group) -> dict:
    return {"number": group.number, "player_ids": list(group.player_ids), "pin": group.pin}


def _tournament_inputs(payload: TournamentPayload):
    config = tournament_config_from_row(payload.tournament)
    holes = holes_from_rows(payload.holes)
    players = players_from_rows(payload.players)
    teams = teams_from_rows(payload.groups)
    key = "group_id" if config.format.is_team_format else "player_id"
    scores = scores_by_entrant(payload.scores, key, holes)
    return config, holes, players, scores, teams


@app.get("/api/health")
async def api_health():
    return {"status": "ok"}


@app.get("/api/stableford/default")
async def api_stableford_default():
    return DEFAULT_STABLEFORD_CONFIG.as_dict()


@app.post("/api/course-handicap")
async def api_course_handicap(request: Request):
    payload = await _parse(request, CourseHandicapPayload)
    slope = payload.slope_rating if payload.slope_rating is not None else DEFAULT_SLOPE_RATING
    rating = payload.course_rating if payload.course_rating is not None else payload.total_par
    try:
        course_handicap = compute_course_handicap(payload.handicap_index, slope, rating, payload.total_par)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {
        "course_handicap": course_handicap,
        "slope_rating": slope,
        "course_rating": rating,
    }


@app.post("/api/scorecards")
async def api_scorecards(request: Request):
    payload = await _parse(request, TournamentPayload)
    try:
        config, holes, players, scores, teams = _tournament_inputs(payload)
        scorecards = build_scorecards(config, holes, players, scores, teams)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {
        "format": config.format.value,
        "hole_count": config.hole_count_for(holes),
        "stableford_points": config.stableford.as_dict(),
        "scorecards": [_scorecard_json(card) for card in scorecards],
    }


@app.post("/api/leaderboard")
async def api_leaderboard(request: Request):
    payload = await _parse(request, TournamentPayload)
    try:
        config, holes, players, scores, teams = _tournament_inputs(payload)
        leaderboard = build_leaderboard(config, holes, players, scores, teams)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _leaderboard_json(leaderboard)


@app.post("/api/groups/auto-generate")
async def api_auto_generate_groups(request: Request):
    payload = await _parse(request, GroupingPayload)
    size = payload.group_size or settings.default_group_size
    try:
        groups = auto_generate_groups(
            payload.player_ids,
            preferences_from_rows(payload.preferences),
            size,
        )
        groups = assign_pins(groups, payload.existing_pins)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    logger.info("Generated %s groups of up to %s for %s players", len(groups), size, len(payload.player_ids))
    return {
        "group_size": size,
        "group_count": len(groups),
        "groups": [_group_json(group) for group in groups],
    }


@app.post("/api/groups/auto-assign")
async def api_auto_assign_groups(request: Request):
    payload = await _parse(request, RoundRobinPayload)
    existing = [
        Group(number=seat.number, player_ids=tuple(seat.player_ids), pin=seat.pin)
        for seat in payload.groups
    ]
    try:
        groups = assign_round_robin(existing, payload.player_ids)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    seated = sum(group.size for group in groups) - sum(group.size for group in existing)
    logger.info("Dealt %s players across %s groups", seated, len(groups))
    return {"assigned_count": seated, "groups": [_group_json(group) for group in groups]}
