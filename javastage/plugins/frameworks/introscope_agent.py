"""CA APM Introscope agent — reports to the Enterprise Manager in its binding."""

from __future__ import annotations

from javastage.core.models.binding import ServiceBinding
from javastage.core.models.outcome import Detection, Outcome
from javastage.core.services.dependencies import InstallError
from javastage.core.services.java_opts import PRIORITY_AGENT
from javastage.plugins.base import BasePlugin

SERVICE_TYPES = ("introscope", "ca-apm", "ca-wily")
SERVICE_TAGS = ("introscope", "ca-apm", "wily")

AGENT_NAME_KEYS = ("agent_name", "agentName")
EM_HOST_KEYS = ("em_host", "emHost")
EM_PORT_KEYS = ("em_port", "emPort")

AGENT_DIR = "introscope_agent"
AGENT_JAR = "Agent.jar"
AGENT_PROFILE = "core/config/IntroscopeAgent.profile"


class IntroscopeAgentFramework(BasePlugin):
    plugin_name = "introscope_agent"
    dependency = "introscope-agent"

    def detect(self) -> Detection:
        if self._binding() is None:
            return Detection.absent()
        return Detection.found("introscope-agent")

    def install(self) -> Outcome:
        try:
            dep = self.installer.install(self.dependency, self.fs.dep_path(AGENT_DIR))
        except InstallError as e:
            return self.failed("install", str(e))
        if not self.fs.dep_path(AGENT_DIR, AGENT_JAR).is_file():
            return self.failed("install", f"{AGENT_JAR} not found after installation")
        return self.ok("install", f"Introscope agent {dep.version}")

    def configure(self) -> Outcome:
        binding = self._binding()
        if binding is None:
            return self.failed("configure", "service binding disappeared")

        home = f"{self.ctx.runtime_dep_dir}/{AGENT_DIR}"
        app_name = self.ctx.application.name
        agent_name = binding.credential_str(*AGENT_NAME_KEYS) or app_name

        opts = [
            f"-javaagent:{home}/{AGENT_JAR}",
            f"-Dcom.wily.introscope.agentProfile={home}/{AGENT_PROFILE}",
        ]
        if app_name:
            opts.append(f"-Dintroscope.agent.hostName={app_name}")
        if agent_name:
            opts.append(f"-Dcom.wily.introscope.agent.agentName={agent_name}")

        em_host = binding.credential_str(*EM_HOST_KEYS)
        if em_host:
            opts.append(f"-Dintroscope.agent.enterprisemanager.transport.tcp.host.DEFAULT={em_host}")
        em_port = binding.credential_str(*EM_PORT_KEYS)
        if em_port:
            opts.append(f"-Dintroscope.agent.enterprisemanager.transport.tcp.port.DEFAULT={em_port}")

        self.write_java_opts(PRIORITY_AGENT, opts)
        return self.ok("configure", f"Introscope agent reporting to {em_host or 'default EM'}")

    def _binding(self) -> ServiceBinding | None:
        return self.ctx.services.find_service(types=SERVICE_TYPES, tags=SERVICE_TAGS)
