"""
Java Opts framework — the user's own JAVA_OPTS.

Always written at priority 99 so user intent overrides every
automatically derived option.  With ``from_environment`` (the default)
the fragment starts with ``$JAVA_OPTS``, which the runtime assembly
replaces with the JAVA_OPTS the application was started with.

    JBP_CONFIG_JAVA_OPTS='{from_environment: false, java_opts: [-Xss512k]}'
"""

from __future__ import annotations

from typing import Any

from javastage.core.models.outcome import Detection, Outcome
from javastage.core.services.java_opts import PRIORITY_USER
from javastage.plugins.base import BasePlugin
from javastage.plugins.frameworks.settings import as_bool


class JavaOptsFramework(BasePlugin):
    plugin_name = "java_opts"
    config_defaults = {"from_environment": True, "java_opts": []}

    def detect(self) -> Detection:
        if self._configured_opts() or self._from_environment():
            return Detection.found("Java Opts")
        return Detection.absent()

    def configure(self) -> Outcome:
        opts = self._configured_opts()
        if self._from_environment():
            opts = ["$JAVA_OPTS", *opts]
        if not opts:
            return self.skipped("configure", "no JAVA_OPTS configured")

        value = " ".join(opts)
        self.write_java_opts(PRIORITY_USER, value)
        return self.ok("configure", value)

    def _from_environment(self) -> bool:
        return as_bool(self.config.get("from_environment"))

    def _configured_opts(self) -> list[str]:
        raw: Any = self.config.get("java_opts")
        if isinstance(raw, str):
            # legacy form: a single space-separated string
            return raw.split()
        if isinstance(raw, list):
            return [str(opt) for opt in raw if opt is not None and str(opt)]
        return []
