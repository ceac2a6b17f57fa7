"""
Logging configuration — build-log output for the staging entrypoints.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

The platform streams stdout into the application's build log, so the
console speaks the usual buildpack dialect:

    -----> Installed openjdk 17.0.9          INFO: one step per line
           **WARNING** Could not install ...  WARNING
           **ERROR** No container detected    ERROR and above

Multi-line messages are indented under their first line.  At DEBUG the
console switches to a diagnostic format with logger name and line.

Levels are resolved in precedence order:
    CLI flag  >  JAVASTAGE_LOG_LEVEL env var  >  INFO (default)

Optional file output via JAVASTAGE_LOG_FILE / JAVASTAGE_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import sys

STEP_PREFIX = "-----> "
INDENT = " " * len(STEP_PREFIX)

_LEVEL_MARKERS = {
    logging.WARNING: "**WARNING** ",
    logging.ERROR: "**ERROR** ",
    logging.CRITICAL: "**ERROR** ",
}

_FMT_DIAGNOSTIC = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_CONSOLE = "%H:%M:%S"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# Loggers that chatter about every HTTP request
_NOISY_LOGGERS = ("httpx", "httpcore")


class BuildLogFormatter(logging.Formatter):
    """Format records the way buildpack output reads in a build log."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        if record.levelno >= logging.WARNING:
            first = INDENT + _LEVEL_MARKERS.get(record.levelno, _LEVEL_MARKERS[logging.ERROR])
        else:
            first = STEP_PREFIX

        lines = message.splitlines() or [""]
        return "\n".join([first + lines[0], *(INDENT + line for line in lines[1:])])


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure Python logging for the staging process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file (always diagnostic format).
        log_file_level: Level for the file; defaults to ``level``.
        quiet_third_party: Hold HTTP client loggers at WARNING unless the
            console is at DEBUG.
    """
    console_level = _parse_level(level)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    if console_level <= logging.DEBUG:
        console.setFormatter(logging.Formatter(_FMT_DIAGNOSTIC, datefmt=_DATEFMT_CONSOLE))
    else:
        console.setFormatter(BuildLogFormatter())

    handlers: list[logging.Handler] = [console]
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(_FMT_DIAGNOSTIC, datefmt=_DATEFMT_FILE))
        handlers.append(file_handler)
        root_level = min(root_level, file_level)

    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(root_level)

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    # a closed build-log pipe must not turn into a staging failure
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean INFO."""
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.INFO
