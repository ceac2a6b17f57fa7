"""
Staging filesystem — the files plugins share with the running application.

Besides JAVA_OPTS fragments (see java_opts.py), plugins communicate with
the application start-up through two conventions inside their deps slot:

    env/<NAME>          value of an environment variable, one per file
    profile.d/<name>    shell snippets sourced before the start command

Each plugin writes only names it owns.  Any OSError here means the
staging tree itself is broken, which aborts the build.
"""

from __future__ import annotations

import logging
from pathlib import Path

from javastage.core.context import StagingContext
from javastage.core.errors import StagingWriteError

logger = logging.getLogger(__name__)


class StagingFilesystem:
    """Writer for ``env/`` and ``profile.d/`` under one deps slot."""

    def __init__(self, dep_dir: Path):
        self._dep_dir = dep_dir

    @classmethod
    def for_context(cls, ctx: StagingContext) -> StagingFilesystem:
        return cls(ctx.dep_dir)

    @property
    def dep_dir(self) -> Path:
        return self._dep_dir

    def dep_path(self, *parts: str) -> Path:
        return self._dep_dir.joinpath(*parts)

    def write_env_file(self, name: str, value: str) -> Path:
        """Set an environment variable for the running application."""
        return self._write(("env", name), value, mode=0o644)

    def read_env_file(self, name: str) -> str | None:
        path = self.dep_path("env", name)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def write_profile_d(self, name: str, script: str) -> Path:
        """Install a shell snippet sourced before the application starts."""
        return self._write(("profile.d", name), script, mode=0o755)

    def _write(self, parts: tuple[str, ...], content: str, mode: int) -> Path:
        path = self.dep_path(*parts)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            path.chmod(mode)
        except OSError as e:
            raise StagingWriteError(f"Cannot write {path}: {e}") from e
        logger.debug("Wrote %s", path)
        return path
