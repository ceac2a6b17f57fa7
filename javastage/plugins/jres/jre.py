"""
Shared JRE provider behaviour.

Every provider installs its runtime into ``<deps>/<idx>/jre``, exports
JAVA_HOME through ``profile.d/java.sh`` and writes the priority-05
JAVA_OPTS fragment with its out-of-memory handling.
"""

from __future__ import annotations

from pathlib import Path

from javastage.core.models.outcome import Outcome
from javastage.core.services.dependencies import InstallError
from javastage.core.services.java_opts import PRIORITY_JRE
from javastage.plugins.base import BasePlugin, Runtime

JRE_DIR = "jre"
JVMKILL_DIR = "jvmkill"
JVMKILL_LIB = "jvmkill.so"
PROFILE_SCRIPT = "java.sh"
OOM_EXIT_FLAG = "-XX:+ExitOnOutOfMemoryError"


class JREProvider(BasePlugin, Runtime):
    """Base class for runtime providers.

    Subclasses set ``dependency`` (manifest name), ``home_prefixes``
    (names of the directory the archive unpacks to) and ``use_jvmkill``.
    """

    dependency: str = ""
    home_prefixes: tuple[str, ...] = ("jdk", "jre")
    use_jvmkill: bool = True

    @property
    def java_home(self) -> str:
        home = self._find_home()
        relative = "" if home is None or home == self._jre_dir else f"/{home.name}"
        return f"{self.ctx.runtime_dep_dir}/{JRE_DIR}{relative}"

    def install(self) -> Outcome:
        try:
            dep = self.installer.install(self.dependency, self._jre_dir)
        except InstallError as e:
            return self.failed("install", str(e))

        if self._find_home() is None:
            return self.failed("install", f"No bin/java found under {self._jre_dir}")

        if self.use_jvmkill:
            try:
                self.installer.install("jvmkill", self.fs.dep_path(JVMKILL_DIR))
            except InstallError as e:
                # the OOM flag is used instead
                self.log.warning("Could not install jvmkill: %s", e)

        self.fs.write_profile_d(
            PROFILE_SCRIPT,
            f'export JAVA_HOME="{self.java_home}"\n'
            'export JRE_HOME="$JAVA_HOME"\n'
            'export PATH="$JAVA_HOME/bin:$PATH"\n',
        )
        return self.ok("install", f"{self.dependency} {dep.version}", metadata={"version": dep.version})

    def configure(self) -> Outcome:
        jvmkill = self.fs.dep_path(JVMKILL_DIR, JVMKILL_LIB)
        if self.use_jvmkill and jvmkill.is_file():
            opts = f"-agentpath:{self.ctx.runtime_dep_dir}/{JVMKILL_DIR}/{JVMKILL_LIB}=printHeapHistogram=1"
        else:
            opts = OOM_EXIT_FLAG
        self.write_java_opts(PRIORITY_JRE, opts)
        return self.ok("configure", opts)

    @property
    def _jre_dir(self) -> Path:
        return self.fs.dep_path(JRE_DIR)

    def _find_home(self) -> Path | None:
        """Locate the unpacked JAVA_HOME: a prefixed subdirectory, or the JRE dir itself."""
        root = self._jre_dir
        if not root.is_dir():
            return None
        for entry in sorted(root.iterdir()):
            if entry.is_dir() and entry.name.startswith(self.home_prefixes):
                if (entry / "bin" / "java").exists():
                    return entry
        if (root / "bin" / "java").exists():
            return root
        return None
