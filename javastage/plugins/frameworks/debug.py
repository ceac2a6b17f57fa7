"""Debug framework — opens a JDWP socket when enabled."""

from __future__ import annotations

from javastage.core.models.outcome import Detection, Outcome
from javastage.core.services.java_opts import PRIORITY_DEBUG
from javastage.plugins.base import BasePlugin
from javastage.plugins.frameworks.settings import as_bool, as_port


class DebugFramework(BasePlugin):
    plugin_name = "debug"
    config_defaults = {"enabled": False, "port": 8000, "suspend": False}

    def detect(self) -> Detection:
        if not as_bool(self.config.get("enabled")):
            return Detection.absent()
        return Detection.found(f"debug={self._port()}")

    def configure(self) -> Outcome:
        suspend = "y" if as_bool(self.config.get("suspend")) else "n"
        opts = f"-agentlib:jdwp=transport=dt_socket,server=y,address={self._port()},suspend={suspend}"
        self.write_java_opts(PRIORITY_DEBUG, opts)
        return self.ok("configure", opts)

    def _port(self) -> int:
        return as_port(self.config.get("port"), default=8000, log=self.log)
