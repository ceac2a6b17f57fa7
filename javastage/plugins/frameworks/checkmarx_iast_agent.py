"""Checkmarx IAST agent — downloaded from the URL in its service binding."""

from __future__ import annotations

from javastage.core.models.binding import ServiceBinding
from javastage.core.models.outcome import Detection, Outcome
from javastage.core.services.dependencies import InstallError
from javastage.core.services.java_opts import PRIORITY_AGENT
from javastage.plugins.base import BasePlugin

SERVICE_TYPES = ("checkmarx-iast", "checkmarx")
SERVICE_TAGS = ("checkmarx",)

URL_KEYS = ("url", "agent_url")
MANAGER_URL_KEYS = ("manager_url", "managerUrl")
API_KEY_KEYS = ("api_key", "apiKey")

AGENT_DIR = "checkmarx_iast_agent"
AGENT_JAR = "cx-agent.jar"


class CheckmarxIastAgentFramework(BasePlugin):
    plugin_name = "checkmarx_iast_agent"

    def detect(self) -> Detection:
        binding = self._binding()
        if binding is None:
            return Detection.absent()
        if not binding.credential_str(*URL_KEYS):
            self.log.warning("Checkmarx binding %r has no agent URL", binding.name)
            return Detection.absent()
        return Detection.found("checkmarx-iast-agent")

    def install(self) -> Outcome:
        binding = self._binding()
        url = binding.credential_str(*URL_KEYS) if binding else ""
        if not url:
            return self.failed("install", "agent URL not found in service binding")
        try:
            self.installer.download(url, self.fs.dep_path(AGENT_DIR, AGENT_JAR))
        except InstallError as e:
            return self.failed("install", str(e))
        return self.ok("install", f"downloaded from {url}")

    def configure(self) -> Outcome:
        if not self.fs.dep_path(AGENT_DIR, AGENT_JAR).is_file():
            return self.failed("configure", f"{AGENT_JAR} missing")

        binding = self._binding()
        opts = [f"-javaagent:{self.ctx.runtime_dep_dir}/{AGENT_DIR}/{AGENT_JAR}"]
        if binding is not None:
            manager_url = binding.credential_str(*MANAGER_URL_KEYS)
            if manager_url:
                opts.append(f"-Dcheckmarx.manager.url={manager_url}")
            api_key = binding.credential_str(*API_KEY_KEYS)
            if api_key:
                opts.append(f"-Dcheckmarx.api.key={api_key}")

        self.write_java_opts(PRIORITY_AGENT, opts)
        return self.ok("configure", "Checkmarx IAST agent attached")

    def _binding(self) -> ServiceBinding | None:
        return self.ctx.services.find_service(types=SERVICE_TYPES, tags=SERVICE_TAGS)
