"""Stableford points: tier lookup and tolerant parsing of tournament point tables."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

TIER_KEYS = (
    "albatross",
    "eagle",
    "birdie",
    "par",
    "bogey",
    "double_bogey_or_worse",
)


@dataclass(frozen=True)
class StablefordPointsConfig:
    albatross: int = 20
    eagle: int = 10
    birdie: int = 5
    par: int = 3
    bogey: int = 1
    double_bogey_or_worse: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


DEFAULT_STABLEFORD_CONFIG = StablefordPointsConfig()


def tier_for(relative: int) -> str:
    """Return the point-table key for a net score relative to par."""
    if relative <= -3:
        return "albatross"
    if relative == -2:
        return "eagle"
    if relative == -1:
        return "birdie"
    if relative == 0:
        return "par"
    if relative == 1:
        return "bogey"
    return "double_bogey_or_worse"


def compute_stableford_points(
    gross_score: int,
    par: int,
    strokes_received: int,
    points_config: StablefordPointsConfig,
) -> int:
    net_score = gross_score - strokes_received
    return getattr(points_config, tier_for(net_score - par))


def _point_value(value: Any) -> int | None:
    # bool is an int subclass but never a valid point value
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value) if value >= 0 else None
    return None


def parse_stableford_config(raw: Any) -> StablefordPointsConfig:
    """
    Build a point table from an untyped stored value.

    Anything that is not a mapping yields the defaults. Each key is validated
    on its own: a missing, negative, fractional or non-numeric value falls back
    to that key's default while valid siblings are kept.
    """
    if not isinstance(raw, Mapping):
        return StablefordPointsConfig()
    values: dict[str, int] = {}
    for key in TIER_KEYS:
        parsed = _point_value(raw.get(key))
        values[key] = parsed if parsed is not None else getattr(DEFAULT_STABLEFORD_CONFIG, key)
    return StablefordPointsConfig(**values)
