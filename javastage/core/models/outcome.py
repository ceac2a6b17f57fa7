"""
Detection and Outcome models — the plugin lifecycle contract.

Plugins answer ``detect()`` with a Detection and ``install()`` /
``configure()`` with an Outcome.  The coordinator only ever looks at
these values; a plugin that raises instead is converted into a failed
Outcome at the coordinator boundary.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Phase = Literal["detect", "install", "configure"]


def now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Detection(BaseModel):
    """Answer to "does this plugin apply to the application?"."""

    model_config = ConfigDict(frozen=True)

    active: bool = False
    label: str = ""

    @classmethod
    def found(cls, label: str) -> Detection:
        return cls(active=True, label=label)

    @classmethod
    def absent(cls) -> Detection:
        return cls(active=False)


class Outcome(BaseModel):
    """Result of one plugin lifecycle phase."""

    plugin: str
    phase: Phase
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=now_iso)
    ended_at: str = Field(default_factory=now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the phase succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the phase failed."""
        return self.status == "failed"

    @classmethod
    def success(cls, plugin: str, phase: Phase, output: str = "", **kwargs: Any) -> Outcome:
        """Create a success outcome."""
        return cls(plugin=plugin, phase=phase, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, plugin: str, phase: Phase, error: str, **kwargs: Any) -> Outcome:
        """Create a failure outcome."""
        return cls(plugin=plugin, phase=phase, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, plugin: str, phase: Phase, reason: str = "", **kwargs: Any) -> Outcome:
        """Create a skip outcome."""
        return cls(plugin=plugin, phase=phase, status="skipped", output=reason, **kwargs)
