import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_GROUP_SIZE = 4
MAX_GROUP_SIZE = 8
LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


@dataclass(frozen=True)
class Settings:
    default_group_size: int
    log_level: str


def _group_size_from_env(value: Optional[str]) -> int:
    if not value:
        return DEFAULT_GROUP_SIZE
    try:
        size = int(value.strip())
    except ValueError:
        logger.warning("Ignoring DEFAULT_GROUP_SIZE=%s (not an integer)", value)
        return DEFAULT_GROUP_SIZE
    if not 1 <= size <= MAX_GROUP_SIZE:
        logger.warning("Ignoring DEFAULT_GROUP_SIZE=%s (must be between 1 and %s)", value, MAX_GROUP_SIZE)
        return DEFAULT_GROUP_SIZE
    return size


def _normalize_log_level(value: Optional[str]) -> str:
    normalized = (value or "").strip().lower()
    if normalized in LOG_LEVELS:
        return normalized
    if normalized:
        logger.warning("Ignoring LOG_LEVEL=%s (expected one of %s)", value, ", ".join(LOG_LEVELS))
    return "info"


def load_settings() -> Settings:
    return Settings(
        default_group_size=_group_size_from_env(os.getenv("DEFAULT_GROUP_SIZE")),
        log_level=_normalize_log_level(os.getenv("LOG_LEVEL")),
    )
