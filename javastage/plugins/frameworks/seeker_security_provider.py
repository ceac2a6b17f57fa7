"""Synopsys Seeker — agent served by the Seeker server named in the binding."""

from __future__ import annotations

from javastage.core.models.binding import ServiceBinding
from javastage.core.models.outcome import Detection, Outcome
from javastage.core.services.dependencies import InstallError
from javastage.core.services.java_opts import PRIORITY_AGENT
from javastage.plugins.base import BasePlugin

SERVER_URL_KEYS = ("seeker_server_url", "server_url")
AGENT_PATH = "rest/api/latest/installers/agents/binaries/JAVA"

AGENT_DIR = "seeker_security_provider"
AGENT_JAR = "seeker-agent.jar"
PROFILE_SCRIPT = "seeker_security_provider.sh"


class SeekerSecurityProviderFramework(BasePlugin):
    plugin_name = "seeker_security_provider"

    def detect(self) -> Detection:
        binding = self._binding()
        if binding is None or not binding.credential_str(*SERVER_URL_KEYS):
            return Detection.absent()
        return Detection.found("seeker-security-provider")

    def install(self) -> Outcome:
        url = f"{self._server_url().rstrip('/')}/{AGENT_PATH}"
        try:
            self.installer.download(url, self.fs.dep_path(AGENT_DIR, AGENT_JAR))
        except InstallError as e:
            return self.failed("install", str(e))
        return self.ok("install", f"downloaded from {url}")

    def configure(self) -> Outcome:
        if not self.fs.dep_path(AGENT_DIR, AGENT_JAR).is_file():
            return self.failed("configure", f"{AGENT_JAR} missing")

        self.fs.write_profile_d(
            PROFILE_SCRIPT, f'export SEEKER_SERVER_URL="{self._server_url()}"\n'
        )
        self.write_java_opts(
            PRIORITY_AGENT, f"-javaagent:{self.ctx.runtime_dep_dir}/{AGENT_DIR}/{AGENT_JAR}"
        )
        return self.ok("configure", "Seeker agent attached")

    def _server_url(self) -> str:
        binding = self._binding()
        return binding.credential_str(*SERVER_URL_KEYS) if binding else ""

    def _binding(self) -> ServiceBinding | None:
        # Seeker bindings are usually user-provided services named "*seeker*"
        return self.ctx.services.find_service(types=("seeker",), tags=("seeker",), names=("seeker",))
