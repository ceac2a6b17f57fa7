"""Coercion helpers for loosely-typed override values."""

from __future__ import annotations

import logging
from typing import Any


def as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "on", "1")
    return False


def as_port(value: Any, default: int, log: logging.Logger) -> int:
    """Coerce a port number, falling back to ``default`` with a warning."""
    try:
        port = int(value)
    except (TypeError, ValueError):
        log.warning("Invalid port %r, using %d", value, default)
        return default
    if not 0 < port < 65536:
        log.warning("Port %d out of range, using %d", port, default)
        return default
    return port
