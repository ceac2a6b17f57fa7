"""
Java Main container — plain JARs and class directories with a main class.

Registered last among containers: almost any Java application has a JAR
or a class file, so every more specific archetype must get its chance
first.
"""

from __future__ import annotations

from javastage.core.models.outcome import Detection, Outcome
from javastage.plugins.base import BasePlugin, Container
from javastage.plugins.containers.manifest import find_jars, read_manifest


class JavaMainContainer(BasePlugin, Container):
    plugin_name = "java_main"
    config_defaults = {"java_main_class": ""}

    def detect(self) -> Detection:
        if self._configured_main_class() or read_manifest(self.ctx.build_dir).get("Main-Class"):
            return Detection.found("Java Main")
        if find_jars(self.ctx.build_dir):
            return Detection.found("Java Main")
        if any(self.ctx.build_dir.glob("*.class")):
            return Detection.found("Java Main")
        return Detection.absent()

    def configure(self) -> Outcome:
        classpath = self._classpath()
        self.fs.write_env_file("CLASSPATH", classpath)
        return self.ok("configure", f"CLASSPATH={classpath}")

    def start_command(self) -> str:
        main_class = self._configured_main_class()
        if main_class:
            return f"$JAVA_HOME/bin/java $JAVA_OPTS -cp {self._classpath()} {main_class}"

        jars = find_jars(self.ctx.build_dir)
        if jars:
            return f"$JAVA_HOME/bin/java $JAVA_OPTS -jar {jars[0]}"

        main_class = read_manifest(self.ctx.build_dir).get("Main-Class", "")
        if main_class:
            return f"$JAVA_HOME/bin/java $JAVA_OPTS -cp {self._classpath()} {main_class}"

        raise LookupError("no main class specified (set JAVA_MAIN_CLASS)")

    def _configured_main_class(self) -> str:
        return str(self.config.get("java_main_class") or "") or self.ctx.env("JAVA_MAIN_CLASS")

    def _classpath(self) -> str:
        build = self.ctx.build_dir
        entries = ["."]
        entries.extend(find_jars(build))
        lib = build / "lib"
        if lib.is_dir():
            entries.extend(f"lib/{jar}" for jar in find_jars(lib))
        return ":".join(entries)
