"""Groovy container — applications made of ``.groovy`` scripts."""

from __future__ import annotations

from javastage.core.models.outcome import Detection, Outcome
from javastage.core.services.dependencies import InstallError
from javastage.plugins.base import BasePlugin, Container

PROFILE_SCRIPT = "groovy.sh"


class GroovyContainer(BasePlugin, Container):
    plugin_name = "groovy"
    dependency = "groovy"
    config_defaults = {"script": ""}

    def detect(self) -> Detection:
        scripts = self._scripts()
        if scripts:
            self.log.debug("Detected Groovy application with %d script(s)", len(scripts))
            return Detection.found("Groovy")
        return Detection.absent()

    def install(self) -> Outcome:
        try:
            dep = self.installer.install(self.dependency, self.fs.dep_path("groovy"))
        except InstallError as e:
            return self.failed("install", str(e))
        return self.ok("install", f"Groovy {dep.version}")

    def configure(self) -> Outcome:
        self.fs.write_profile_d(
            PROFILE_SCRIPT, f'export GROOVY_HOME="{self.ctx.runtime_dep_dir}/groovy"\n'
        )
        return self.ok("configure", "GROOVY_HOME exported")

    def start_command(self) -> str:
        script = str(self.config.get("script") or "") or self.ctx.env("GROOVY_SCRIPT")
        if not script:
            scripts = self._scripts()
            if not scripts:
                raise FileNotFoundError("no Groovy script found (set GROOVY_SCRIPT)")
            script = scripts[0]
        return f"$GROOVY_HOME/bin/groovy {script}"

    def _scripts(self) -> list[str]:
        return sorted(p.name for p in self.ctx.build_dir.glob("*.groovy") if p.is_file())
