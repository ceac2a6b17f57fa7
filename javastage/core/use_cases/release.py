"""Release use case — re-emit the description written by staging."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from javastage.core.errors import EXIT_OK, ReleaseMissingError
from javastage.core.persistence.release_file import default_release_path, load_release


@dataclass
class ReleaseResult:
    content: str = ""
    error: str | None = None
    exit_code: int = EXIT_OK

    def to_dict(self) -> dict:
        if self.error:
            return {"exit_code": self.exit_code, "error": self.error}
        return {"exit_code": self.exit_code, "content": self.content}


def run_release(build_dir: Path) -> ReleaseResult:
    result = ReleaseResult()
    try:
        result.content = load_release(default_release_path(build_dir))
    except ReleaseMissingError as e:
        result.error = str(e)
        result.exit_code = e.exit_code
    return result
