"""
Archetype registry — ordered, first-match-wins selection.

Used twice per build: once for the application's packaging style
(containers) and once for the Java runtime provider.  Candidates are
mutually exclusive in intent but their detection conditions often
overlap (a directory can carry markers for two archetypes), so the
registration order IS the tie-break rule.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, TypeVar

from javastage.core.errors import StagingError
from javastage.core.models.outcome import Detection
from javastage.plugins.base import Plugin

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=Plugin)


@dataclass(frozen=True)
class Selection(Generic[P]):
    """The winning candidate and the label its detector reported."""

    candidate: P
    label: str


class ArchetypeRegistry(Generic[P]):
    """Registry of candidates for one concern.

    Args:
        concern: Human-readable concern name used in logs ("container", "JRE").
        error_cls: Fatal error raised by :meth:`require` when nothing matches.
    """

    def __init__(self, concern: str, error_cls: type[StagingError] = StagingError):
        self._concern = concern
        self._error_cls = error_cls
        self._candidates: list[P] = []
        self._has_fallback = False

    @property
    def concern(self) -> str:
        return self._concern

    @property
    def candidates(self) -> list[P]:
        """Registered candidates in selection order."""
        return list(self._candidates)

    @property
    def is_total(self) -> bool:
        """Whether a universal fallback guarantees :meth:`select` finds something."""
        return self._has_fallback

    def register(self, candidate: P) -> None:
        """Append a candidate; it is tried after every earlier registration."""
        if self._has_fallback:
            raise ValueError(
                f"Cannot register {candidate.name!r} after the {self._concern} fallback"
            )
        self._candidates.append(candidate)
        logger.debug("Registered %s candidate: %s", self._concern, candidate.name)

    def register_fallback(self, candidate: P) -> None:
        """Register the candidate that always matches; it must come last."""
        self.register(candidate)
        self._has_fallback = True

    def select(self) -> Selection[P] | None:
        """Return the first candidate whose detector reports a match.

        A detector that raises is logged and treated as a non-match so one
        buggy candidate cannot abort the search.
        """
        for candidate in self._candidates:
            try:
                detection = candidate.detect()
            except Exception as e:
                logger.warning(
                    "Error detecting %s %s: %s", self._concern, candidate.name, e
                )
                continue
            if not isinstance(detection, Detection):
                logger.warning(
                    "Error detecting %s %s: detect() returned %s",
                    self._concern,
                    candidate.name,
                    type(detection).__name__,
                )
                continue
            if detection.active:
                label = detection.label or candidate.name
                logger.debug("Selected %s: %s", self._concern, label)
                return Selection(candidate=candidate, label=label)

        if self._has_fallback:
            logger.error(
                "The %s fallback did not detect; the registry is not total", self._concern
            )
        return None

    def require(self) -> Selection[P]:
        """Like :meth:`select`, but a miss raises the registry's fatal error."""
        selection = self.select()
        if selection is None:
            names = ", ".join(c.name for c in self._candidates) or "none registered"
            raise self._error_cls(f"No {self._concern} detected (tried: {names})")
        return selection
