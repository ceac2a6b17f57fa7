"""Spring Boot container — executable fat JARs and their exploded form."""

from __future__ import annotations

from javastage.core.models.outcome import Detection
from javastage.plugins.base import BasePlugin, Container
from javastage.plugins.containers.manifest import find_jars, read_manifest

JAR_LAUNCHER = "org.springframework.boot.loader.JarLauncher"


class SpringBootContainer(BasePlugin, Container):
    plugin_name = "spring_boot"

    def detect(self) -> Detection:
        if self._exploded():
            return Detection.found("Spring Boot")
        if self._boot_jar():
            return Detection.found("Spring Boot")
        return Detection.absent()

    def start_command(self) -> str:
        if self._exploded():
            return f"$JAVA_HOME/bin/java $JAVA_OPTS -cp $HOME {JAR_LAUNCHER}"

        jar = self._boot_jar()
        if jar is None:
            raise FileNotFoundError("no Spring Boot JAR found")
        return f"$JAVA_HOME/bin/java $JAVA_OPTS -jar {jar}"

    def _exploded(self) -> bool:
        build = self.ctx.build_dir
        if (build / "BOOT-INF").is_dir():
            return True
        return "Spring-Boot-Version" in read_manifest(build)

    def _boot_jar(self) -> str | None:
        # Naming heuristic; JAR contents are not inspected
        for jar in find_jars(self.ctx.build_dir):
            lowered = jar.lower()
            if "spring" in lowered or "boot" in lowered:
                return jar
        return None
