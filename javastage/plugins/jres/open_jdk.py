"""OpenJDK — the default runtime, registered last so it always matches."""

from __future__ import annotations

from javastage.core.models.outcome import Detection
from javastage.plugins.jres.jre import JREProvider


class OpenJDKJRE(JREProvider):
    plugin_name = "open_jdk_jre"
    dependency = "openjdk"

    def detect(self) -> Detection:
        return Detection.found("OpenJDK")
