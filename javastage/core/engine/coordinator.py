"""
Lifecycle coordinator — the central staging loop.

Takes the two archetype registries and the ordered framework list, and
drives every participating plugin through three global phases:

    select container + runtime → detect frameworks → install all → configure all
        → write JAVA_OPTS assembly script → write release description

Phase ordering is global: every plugin finishes Detect before any plugin
Installs, and every plugin finishes Install before any Configures.
Within a phase plugins run in registration order (runtime, container,
then frameworks as registered).

Failure isolation:
    - A framework that fails or raises in any phase is logged and
      abandoned; the others carry on and the build still succeeds.
    - The selected runtime and container are mandatory: their failure is
      fatal, as is a missing archetype or an unwritable staging tree.
    - Fatal errors stop the run and are returned once, on the report.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Literal

from javastage.core.context import StagingContext
from javastage.core.errors import (
    EXIT_OK,
    ContainerError,
    RuntimeInstallError,
    StagingError,
    StagingWriteError,
)
from javastage.core.models.outcome import Detection, Outcome, Phase, now_iso
from javastage.core.persistence.release_file import default_release_path, save_release
from javastage.core.services.archetypes import ArchetypeRegistry
from javastage.core.services.java_opts import (
    ASSEMBLY_SCRIPT_NAME,
    FragmentStore,
    render_assembly_script,
)
from javastage.core.services.staging_fs import StagingFilesystem
from javastage.plugins.base import Container, Plugin, Runtime

logger = logging.getLogger(__name__)

Role = Literal["runtime", "container", "framework"]


class PluginState(str, Enum):
    """Where a plugin is in its lifecycle."""

    UNSTARTED = "unstarted"
    DETECTED = "detected"
    SKIPPED = "skipped"
    INSTALLED = "installed"
    INSTALL_FAILED = "install_failed"
    CONFIGURED = "configured"
    CONFIGURE_FAILED = "configure_failed"


_FAILED_STATES = (PluginState.INSTALL_FAILED, PluginState.CONFIGURE_FAILED)


@dataclass
class PluginRecord:
    """One plugin's journey through the build."""

    plugin: Plugin
    role: Role = "framework"
    mandatory: bool = False
    state: PluginState = PluginState.UNSTARTED
    label: str = ""
    outcomes: list[Outcome] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.plugin.name

    @property
    def failed(self) -> bool:
        return self.state in _FAILED_STATES

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "role": self.role,
            "mandatory": self.mandatory,
            "state": self.state.value,
            "label": self.label,
            "outcomes": [o.model_dump(mode="json") for o in self.outcomes],
        }


@dataclass
class LifecycleReport:
    """Result of one staging run."""

    records: list[PluginRecord] = field(default_factory=list)
    runtime: str = ""
    container: str = ""
    start_command: str = ""
    fatal: StagingError | None = None

    @property
    def ok(self) -> bool:
        return self.fatal is None

    @property
    def exit_code(self) -> int:
        return self.fatal.exit_code if self.fatal else EXIT_OK

    @property
    def active(self) -> list[PluginRecord]:
        """Plugins that detected positively."""
        return [r for r in self.records if r.state not in (PluginState.UNSTARTED, PluginState.SKIPPED)]

    @property
    def failed(self) -> list[PluginRecord]:
        return [r for r in self.records if r.failed]

    @property
    def status(self) -> str:
        if self.fatal:
            return "failed"
        if self.failed:
            return "degraded"
        return "ok"

    def get(self, name: str) -> PluginRecord | None:
        for record in self.records:
            if record.name == name:
                return record
        return None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "status": self.status,
            "exit_code": self.exit_code,
            "runtime": self.runtime,
            "container": self.container,
            "start_command": self.start_command,
            "plugins": [r.to_dict() for r in self.records],
        }
        if self.fatal:
            result["error"] = str(self.fatal)
        return result


class LifecycleCoordinator:
    """Runs one build's plugins through Detect → Install → Configure.

    Args:
        ctx: The staging context.
        containers: Packaging archetype registry (selection is mandatory).
        runtimes: Runtime provider registry (selection is mandatory).
        frameworks: Optional plugins, in registration order.
        store: Fragment store (default: the context's fragment directory).
        fs: Staging filesystem (default: the context's deps slot).
        release_path: Where to write the release description.
    """

    def __init__(
        self,
        ctx: StagingContext,
        containers: ArchetypeRegistry[Container],
        runtimes: ArchetypeRegistry[Runtime],
        frameworks: Sequence[Plugin] = (),
        store: FragmentStore | None = None,
        fs: StagingFilesystem | None = None,
        release_path: Path | None = None,
    ):
        self._ctx = ctx
        self._containers = containers
        self._runtimes = runtimes
        self._frameworks = list(frameworks)
        self._store = store or FragmentStore(ctx.fragment_dir)
        self._fs = fs or StagingFilesystem.for_context(ctx)
        self._release_path = release_path or default_release_path(ctx.build_dir)

    def run(self) -> LifecycleReport:
        """Stage the application.  Never raises for staging failures."""
        report = LifecycleReport()

        try:
            # Each build starts from an empty fragment store
            self._store.reset()

            container = self._containers.require()
            runtime = self._runtimes.require()
            report.runtime = runtime.label
            report.container = container.label
            logger.info("Runtime: %s, container: %s", runtime.label, container.label)

            container_record = PluginRecord(
                plugin=container.candidate,
                role="container",
                mandatory=True,
                state=PluginState.DETECTED,
                label=container.label,
            )
            report.records = [
                PluginRecord(
                    plugin=runtime.candidate,
                    role="runtime",
                    mandatory=True,
                    state=PluginState.DETECTED,
                    label=runtime.label,
                ),
                container_record,
                *(PluginRecord(plugin=p) for p in self._frameworks),
            ]

            self._detect_phase(report.records)
            self._install_phase(report.records)
            self._configure_phase(report.records)
            report.start_command = self._finish(container_record)

        except StagingError as e:
            logger.error("Staging failed: %s", e)
            report.fatal = e

        if report.ok and report.failed:
            logger.warning(
                "Staged without: %s", ", ".join(r.name for r in report.failed)
            )
        return report

    # ── Phases ──────────────────────────────────────────────────

    def _detect_phase(self, records: list[PluginRecord]) -> None:
        for record in records:
            if record.state is not PluginState.UNSTARTED:
                continue  # archetypes were detected during selection

            plugin = record.plugin
            try:
                detection = plugin.detect()
            except StagingWriteError:
                raise
            except Exception as e:
                logger.warning("Framework %s: detect failed, skipping: %s", plugin.name, e)
                record.outcomes.append(Outcome.failure(plugin.name, "detect", str(e)))
                record.state = PluginState.SKIPPED
                continue

            if not isinstance(detection, Detection):
                error = f"detect() returned {type(detection).__name__}, not Detection"
                logger.warning("Framework %s: %s, skipping", plugin.name, error)
                record.outcomes.append(Outcome.failure(plugin.name, "detect", error))
                record.state = PluginState.SKIPPED
                continue

            if detection.active:
                record.state = PluginState.DETECTED
                record.label = detection.label or plugin.name
                logger.info("Detected %s", record.label)
            else:
                record.state = PluginState.SKIPPED
                logger.debug("Framework %s not applicable", plugin.name)

    def _install_phase(self, records: list[PluginRecord]) -> None:
        for record in records:
            if record.state is not PluginState.DETECTED:
                continue
            outcome = self._invoke(record, "install")
            if outcome.failed:
                record.state = PluginState.INSTALL_FAILED
                self._handle_failure(record, outcome)
            else:
                record.state = PluginState.INSTALLED

    def _configure_phase(self, records: list[PluginRecord]) -> None:
        for record in records:
            if record.state is not PluginState.INSTALLED:
                continue
            outcome = self._invoke(record, "configure")
            if outcome.failed:
                record.state = PluginState.CONFIGURE_FAILED
                self._handle_failure(record, outcome)
            else:
                record.state = PluginState.CONFIGURED

    def _finish(self, container: PluginRecord) -> str:
        """Write the runtime assembly script and the release description."""
        self._fs.write_profile_d(
            ASSEMBLY_SCRIPT_NAME, render_assembly_script(self._ctx.deps_index)
        )

        plugin = container.plugin
        assert isinstance(plugin, Container)
        try:
            command = plugin.start_command()
        except StagingError:
            raise
        except Exception as e:
            raise ContainerError(f"Container {plugin.name} has no start command: {e}") from e
        if not command:
            raise ContainerError(f"Container {plugin.name} returned an empty start command")

        save_release(command, self._release_path)
        logger.info("Start command: %s", command)
        return command

    # ── Helpers ─────────────────────────────────────────────────

    def _invoke(self, record: PluginRecord, phase: Phase) -> Outcome:
        """Run one phase, converting exceptions into a failed Outcome.

        StagingWriteError is the exception: a broken staging tree is
        fatal no matter which plugin noticed it.
        """
        plugin = record.plugin
        started_at = now_iso()
        start_time = time.monotonic()

        try:
            outcome = getattr(plugin, phase)()
        except StagingWriteError:
            raise
        except Exception as e:
            logger.debug("%s raised during %s", plugin.name, phase, exc_info=True)
            outcome = Outcome.failure(plugin.name, phase, f"Unexpected error: {e}")

        if not isinstance(outcome, Outcome):
            outcome = Outcome.failure(
                plugin.name, phase, f"{phase}() returned {type(outcome).__name__}, not Outcome"
            )

        outcome.started_at = started_at
        outcome.ended_at = now_iso()
        outcome.duration_ms = int((time.monotonic() - start_time) * 1000)
        record.outcomes.append(outcome)

        status_marker = "✓" if outcome.ok else "✗" if outcome.failed else "⊘"
        logger.debug("%s %s:%s → %s", status_marker, plugin.name, phase, outcome.status)
        return outcome

    def _handle_failure(self, record: PluginRecord, outcome: Outcome) -> None:
        message = f"{record.role} {record.name} failed during {outcome.phase}: {outcome.error}"
        if record.mandatory:
            error_cls = RuntimeInstallError if record.role == "runtime" else ContainerError
            raise error_cls(message)
        logger.warning("%s; continuing without it", message[0].upper() + message[1:])
