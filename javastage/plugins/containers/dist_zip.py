"""Dist ZIP container — ``bin/`` + ``lib/`` layouts from Gradle's distZip."""

from __future__ import annotations

from javastage.core.models.outcome import Detection, Outcome
from javastage.plugins.base import BasePlugin, Container


class DistZipContainer(BasePlugin, Container):
    plugin_name = "dist_zip"

    def detect(self) -> Detection:
        if self._start_script():
            return Detection.found("Dist ZIP")
        return Detection.absent()

    def install(self) -> Outcome:
        """Make the start scripts executable."""
        bin_dir = self.ctx.build_dir / "bin"
        fixed = []
        for script in self._scripts():
            path = bin_dir / script
            try:
                path.chmod(path.stat().st_mode | 0o755)
            except OSError as e:
                return self.failed("install", f"Cannot make {script} executable: {e}")
            fixed.append(script)
        return self.ok("install", f"{len(fixed)} start script(s) executable")

    def start_command(self) -> str:
        script = self._start_script()
        if script is None:
            raise FileNotFoundError("no start script in bin/")
        return f"$HOME/bin/{script}"

    def _scripts(self) -> list[str]:
        build = self.ctx.build_dir
        bin_dir, lib_dir = build / "bin", build / "lib"
        if not (bin_dir.is_dir() and lib_dir.is_dir()):
            return []
        return sorted(
            p.name for p in bin_dir.iterdir() if p.is_file() and p.suffix != ".bat"
        )

    def _start_script(self) -> str | None:
        scripts = self._scripts()
        return scripts[0] if scripts else None
