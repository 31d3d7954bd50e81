from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def normalize_log_level(level: str) -> str:
    normalized = str(level).strip().upper()
    if normalized not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}; expected one of {', '.join(LOG_LEVELS)}")
    return normalized


def setup_logging(level: str) -> None:
    numeric_level = logging.getLevelName(normalize_log_level(level))

    logging.basicConfig(level=numeric_level, format=_LOG_FORMAT)
    logging.getLogger().setLevel(numeric_level)
    # requests/urllib3 connection chatter is only useful when debugging
    logging.getLogger("urllib3").setLevel(max(numeric_level, logging.WARNING))
