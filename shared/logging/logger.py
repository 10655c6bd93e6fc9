import logging
import os
from datetime import datetime
from pathlib import Path

LOG_DIR = Path(os.getenv("MATCHDAY_LOG_DIR", "logs"))

_LOGGERS = {}
_RUN_STAMP = datetime.now().strftime("%Y%m%d-%H%M%S")


def _resolve_level() -> int:
    raw = os.getenv("MATCHDAY_LOG_LEVEL", "DEBUG").strip().upper()
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.DEBUG


def get_logger(
    name: str,
    *,
    runtime: str = "matchday",
) -> logging.Logger:
    """
    Create or retrieve a named logger.

    Parameters:
    - name: logger namespace (e.g. core.dispatcher, discord.client)
    - runtime: log file prefix (matchday | discord)

    All loggers of one runtime share a single log file per process run.
    """
    cache_key = f"{runtime}:{name}"
    if cache_key in _LOGGERS:
        return _LOGGERS[cache_key]

    logger = logging.getLogger(cache_key)
    logger.setLevel(_resolve_level())

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    # ------------------------------
    # Console handler
    # ------------------------------
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    # ------------------------------
    # File handler (one per run)
    # ------------------------------
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    logfile = LOG_DIR / f"{runtime}-{_RUN_STAMP}.log"

    file_handler = logging.FileHandler(logfile, encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logger.propagate = False
    _LOGGERS[cache_key] = logger

    return logger
