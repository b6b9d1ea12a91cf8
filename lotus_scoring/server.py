import logging
import os

import uvicorn

from lotus_scoring.settings import load_settings

logger = logging.getLogger(__name__)
APP_MODULE = "lotus_scoring.main:app"
DEFAULT_PORT = 8000


def _port_from_env() -> int:
    for key in ("APP_PORT", "PORT"):
        value = os.getenv(key)
        if not value:
            continue
        try:
            port = int(value)
        except ValueError:
            logger.warning("Ignoring %s=%s (not an integer)", key, value)
            continue
        if 0 < port < 65536:
            return port
        logger.warning("Ignoring %s=%s (out of range)", key, value)
    return DEFAULT_PORT


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    settings = load_settings()
    _configure_logging(settings.log_level)
    host = os.getenv("APP_HOST", "0.0.0.0")
    port = _port_from_env()
    logger.info("Serving scoring engine on %s:%s (group size %s)", host, port, settings.default_group_size)
    uvicorn.run(
        APP_MODULE,
        host=host,
        port=port,
        log_level=os.getenv("UVICORN_LOG_LEVEL", settings.log_level),
    )


if __name__ == "__main__":
    main()
