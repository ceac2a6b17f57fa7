"""
Plugin base — the lifecycle contract between the coordinator and plugins.

Every unit of staging behaviour (a container, a JRE provider, a
framework) implements exactly three operations:

    detect()     → Detection   does this plugin apply?
    install()    → Outcome     put artifacts in place
    configure()  → Outcome     write fragments, env files, profile.d

The coordinator runs each phase for ALL plugins before starting the next
phase, so a plugin may read files another plugin wrote in an earlier
phase, but never anything written in the same phase.  Plugins never call
each other and never read ``os.environ``; everything they may know
arrives through the StagingContext they are built with.

To create a new plugin:
    1. Subclass BasePlugin (or Container / Runtime)
    2. Implement name, detect, install, configure
    3. Add it to the ordered lists in plugins/registration.py
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from javastage.core.config.loader import load_plugin_config, override_key
from javastage.core.context import StagingContext
from javastage.core.models.outcome import Detection, Outcome, Phase
from javastage.core.services.dependencies import DependencyInstaller
from javastage.core.services.java_opts import FragmentStore
from javastage.core.services.staging_fs import StagingFilesystem


class Plugin(ABC):
    """Abstract lifecycle participant."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable identifier; also the fragment owner and override name."""

    @abstractmethod
    def detect(self) -> Detection:
        """Decide whether this plugin applies.  Should be fast."""

    @abstractmethod
    def install(self) -> Outcome:
        """Install artifacts.  Only called after a positive detection."""

    @abstractmethod
    def configure(self) -> Outcome:
        """Contribute runtime configuration.  Only called after install."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class Container(Plugin):
    """A packaging archetype: knows how to start the application."""

    @abstractmethod
    def start_command(self) -> str:
        """The web process command for the staged application."""


class Runtime(Plugin):
    """A Java runtime provider."""

    @property
    @abstractmethod
    def java_home(self) -> str:
        """JAVA_HOME as the running application sees it."""


class BasePlugin(Plugin):
    """Shared plumbing for concrete plugins.

    Subclasses set ``plugin_name`` and optionally ``config_defaults``.
    """

    plugin_name: str = ""
    config_defaults: dict[str, Any] = {}

    def __init__(self, ctx: StagingContext, installer: DependencyInstaller):
        self.ctx = ctx
        self.installer = installer
        self.fs = StagingFilesystem.for_context(ctx)
        self.java_opts = FragmentStore(ctx.fragment_dir)
        self.log = logging.getLogger(f"{self.__class__.__module__}")
        self._config: dict[str, Any] | None = None

    @property
    def name(self) -> str:
        return self.plugin_name

    @property
    def config(self) -> dict[str, Any]:
        """Effective settings: defaults < buildpack config file < JBP_CONFIG_* override."""
        if self._config is None:
            self._config = load_plugin_config(self.ctx, self.name, self.config_defaults)
        return self._config

    @property
    def override_key(self) -> str:
        return override_key(self.name)

    def write_java_opts(self, priority: int, opts: str | list[str]) -> None:
        value = " ".join(opts) if isinstance(opts, list) else opts
        self.java_opts.write(priority, self.name, value)

    # ── Outcome helpers ─────────────────────────────────────────

    def ok(self, phase: Phase, output: str = "", **kwargs: Any) -> Outcome:
        return Outcome.success(self.name, phase, output, **kwargs)

    def failed(self, phase: Phase, error: str, **kwargs: Any) -> Outcome:
        return Outcome.failure(self.name, phase, error, **kwargs)

    def skipped(self, phase: Phase, reason: str = "", **kwargs: Any) -> Outcome:
        return Outcome.skip(self.name, phase, reason, **kwargs)

    # Most plugins have nothing to install or nothing to configure.

    def install(self) -> Outcome:
        return self.skipped("install", "nothing to install")

    def configure(self) -> Outcome:
        return self.skipped("configure", "nothing to configure")
