"""Tomcat container — exploded WAR applications (``WEB-INF/``)."""

from __future__ import annotations

from javastage.core.models.outcome import Detection, Outcome
from javastage.core.services.dependencies import InstallError
from javastage.plugins.base import BasePlugin, Container

PROFILE_SCRIPT = "tomcat.sh"


class TomcatContainer(BasePlugin, Container):
    plugin_name = "tomcat"
    dependency = "tomcat"

    def detect(self) -> Detection:
        if (self.ctx.build_dir / "WEB-INF").is_dir():
            return Detection.found("Tomcat")
        return Detection.absent()

    def install(self) -> Outcome:
        try:
            dep = self.installer.install(self.dependency, self.fs.dep_path("tomcat"))
        except InstallError as e:
            return self.failed("install", str(e))
        return self.ok("install", f"Tomcat {dep.version}")

    def configure(self) -> Outcome:
        home = f"{self.ctx.runtime_dep_dir}/tomcat"
        self.fs.write_profile_d(
            PROFILE_SCRIPT,
            f'export CATALINA_HOME="{home}"\n'
            'export CATALINA_BASE="$CATALINA_HOME"\n'
            'ln -sfn "$HOME" "$CATALINA_BASE/webapps/ROOT"\n',
        )
        return self.ok("configure", "CATALINA_HOME exported")

    def start_command(self) -> str:
        return f"{self.ctx.runtime_dep_dir}/tomcat/bin/catalina.sh run"
