"""JMX framework — remote JMX on a fixed port, tunnelled by the user."""

from __future__ import annotations

from javastage.core.models.outcome import Detection, Outcome
from javastage.core.services.java_opts import PRIORITY_JMX
from javastage.plugins.base import BasePlugin
from javastage.plugins.frameworks.settings import as_bool, as_port


class JmxFramework(BasePlugin):
    plugin_name = "jmx"
    config_defaults = {"enabled": False, "port": 5000}

    def detect(self) -> Detection:
        if not as_bool(self.config.get("enabled")):
            return Detection.absent()
        return Detection.found(f"jmx={self._port()}")

    def configure(self) -> Outcome:
        port = self._port()
        opts = [
            "-Djava.rmi.server.hostname=127.0.0.1",
            "-Dcom.sun.management.jmxremote.authenticate=false",
            "-Dcom.sun.management.jmxremote.ssl=false",
            f"-Dcom.sun.management.jmxremote.port={port}",
            f"-Dcom.sun.management.jmxremote.rmi.port={port}",
        ]
        self.write_java_opts(PRIORITY_JMX, opts)
        return self.ok("configure", f"JMX on port {port}")

    def _port(self) -> int:
        return as_port(self.config.get("port"), default=5000, log=self.log)
