"""
Logging configuration — one setup call at CLI start.

Every module that does ``logger = logging.getLogger(__name__)`` inherits
this config. Levels are given as accord run levels and resolved in
precedence order:

    CLI flag  >  ACCORD_LOG_LEVEL env var  >  config file  >  verbose

Optional file output via ACCORD_LOG_FILE / ACCORD_LOG_FILE_LEVEL env vars
or the ``log_file`` / ``log_file_level`` settings.
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "ACCORD_LOG_LEVEL"
LOG_FILE_ENV = "ACCORD_LOG_FILE"
LOG_FILE_LEVEL_ENV = "ACCORD_LOG_FILE_LEVEL"

DEFAULT_RUN_LEVEL = "verbose"

# run level → logging level
RUN_LEVEL_MAP: dict[str, int] = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.INFO,
    "debug": logging.DEBUG,
}

# ── Format strings ──────────────────────────────────────────────

# WARNING and above: message only
_FMT_MINIMAL = "%(message)s"

# INFO: timestamped with module context
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# DEBUG: full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def resolve_run_level(cli_level: str | None = None, config_level: str | None = None) -> str:
    """Pick the effective run level: CLI > env > config > default."""
    for candidate in (cli_level, os.environ.get(LOG_LEVEL_ENV), config_level):
        if candidate and candidate.lower() in RUN_LEVEL_MAP:
            return candidate.lower()
    return DEFAULT_RUN_LEVEL


def setup_logging(
    level: str = DEFAULT_RUN_LEVEL,
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure Python logging for the whole process.

    Args:
        level: Run level (quiet, normal, verbose, debug) or a logging level
            name (DEBUG, INFO, ...).
        log_file: Optional path to a log file; ACCORD_LOG_FILE wins.
        log_file_level: Optional separate level for the log file;
            ACCORD_LOG_FILE_LEVEL wins. Defaults to ``level``.
    """
    numeric_level = parse_level(level)

    # ── Console handler (stderr) ────────────────────────────────
    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level

    # ── File handler (optional) ─────────────────────────────────
    log_file = os.environ.get(LOG_FILE_ENV) or log_file
    log_file_level = os.environ.get(LOG_FILE_LEVEL_ENV) or log_file_level
    if log_file:
        file_level = parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False


def parse_level(level: str | None) -> int:
    """Convert a run level or level name to its numeric constant."""
    if not level:
        return logging.WARNING
    if level.lower() in RUN_LEVEL_MAP:
        return RUN_LEVEL_MAP[level.lower()]
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
