"""
Mock plugin — universal test double for lifecycle behaviour.

Configurable to detect or not, to fail or raise in any phase, and to
write a JAVA_OPTS fragment during configure.  Records every phase call
so tests can assert on ordering across plugins.
"""

from __future__ import annotations

from javastage.core.models.outcome import Detection, Outcome, Phase
from javastage.core.services.java_opts import FragmentStore
from javastage.plugins.base import Container, Runtime


class MockPlugin(Container, Runtime):
    """Plugin double usable as a container, runtime or framework.

    Args:
        plugin_name: Name reported by the plugin.
        active: Whether detect() reports a match.
        label: Detection label (defaults to the name).
        fail: Phases that return a failed Outcome.
        raise_in: Phases that raise RuntimeError.
        fragment: Optional ``(store, priority, content)`` written in configure.
        command: Start command returned when used as a container.
        journal: Shared list; every call appends ``"<name>:<phase>"``.
    """

    def __init__(
        self,
        plugin_name: str = "mock",
        active: bool = True,
        label: str = "",
        fail: tuple[Phase, ...] = (),
        raise_in: tuple[str, ...] = (),
        fragment: tuple[FragmentStore, int, str] | None = None,
        command: str = "java -jar app.jar",
        journal: list[str] | None = None,
    ):
        self._name = plugin_name
        self._active = active
        self._label = label or plugin_name
        self._fail = fail
        self._raise_in = raise_in
        self._fragment = fragment
        self._command = command
        self.journal = journal if journal is not None else []

    @property
    def name(self) -> str:
        return self._name

    @property
    def java_home(self) -> str:
        return "$DEPS_DIR/0/jre"

    @property
    def calls(self) -> list[str]:
        """Phases this plugin has run, in order."""
        prefix = f"{self._name}:"
        return [c[len(prefix):] for c in self.journal if c.startswith(prefix)]

    def _record(self, phase: str) -> None:
        self.journal.append(f"{self._name}:{phase}")
        if phase in self._raise_in:
            raise RuntimeError(f"{self._name} blew up in {phase}")

    def detect(self) -> Detection:
        self._record("detect")
        return Detection.found(self._label) if self._active else Detection.absent()

    def install(self) -> Outcome:
        self._record("install")
        if "install" in self._fail:
            return Outcome.failure(self._name, "install", "Mock install failure")
        return Outcome.success(self._name, "install", "[mock] installed")

    def configure(self) -> Outcome:
        self._record("configure")
        if "configure" in self._fail:
            return Outcome.failure(self._name, "configure", "Mock configure failure")
        if self._fragment is not None:
            store, priority, content = self._fragment
            store.write(priority, self._name, content)
        return Outcome.success(self._name, "configure", "[mock] configured")

    def start_command(self) -> str:
        self._record("start_command")
        return self._command
