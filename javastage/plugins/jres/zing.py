"""
Azul Platform Prime (Zing) — opt-in runtime.

Selected only when the user asks for it, either through
``JBP_CONFIG_COMPONENTS`` naming it or by setting ``JBP_CONFIG_ZING_JRE``.
Zing handles out-of-memory itself, so jvmkill is not installed.
"""

from __future__ import annotations

from javastage.core.config.loader import override_key
from javastage.core.models.outcome import Detection
from javastage.plugins.jres.jre import JREProvider

COMPONENTS_KEY = override_key("components")


class ZingJRE(JREProvider):
    plugin_name = "zing_jre"
    dependency = "zing"
    home_prefixes = ("zing",)
    use_jvmkill = False

    def detect(self) -> Detection:
        components = self.ctx.override(COMPONENTS_KEY) or ""
        if "zing" in components.lower():
            return Detection.found("Zing JRE")
        if self.ctx.override(self.override_key):
            return Detection.found("Zing JRE")
        return Detection.absent()
