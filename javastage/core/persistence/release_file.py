"""
Release description — how the platform starts the staged application.

Written once at the end of staging as YAML in the build directory and
re-emitted verbatim by the ``release`` step:

    ---
    default_process_types:
      web: <start command>

Writes are atomic (write to temp file, then rename) so a crash never
leaves a half-written description behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import yaml

from javastage.core.errors import ReleaseMissingError, StagingWriteError

logger = logging.getLogger(__name__)

# Relative to the build directory
DEFAULT_RELEASE_DIR = "tmp"
DEFAULT_RELEASE_FILE = "javastage-release.yml"


def default_release_path(build_dir: Path) -> Path:
    """Get the release description path for a build directory."""
    return build_dir / DEFAULT_RELEASE_DIR / DEFAULT_RELEASE_FILE


def render_release(start_command: str) -> str:
    """Render the release YAML for a web start command."""
    data = {"default_process_types": {"web": start_command}}
    return "---\n" + yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def save_release(start_command: str, path: Path) -> None:
    """Write the release description (atomic write).

    Raises:
        StagingWriteError: If the file cannot be written.
    """
    content = render_release(start_command)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".release_", suffix=".tmp")
        os.close(fd)
        tmp = Path(tmp_path)
        try:
            tmp.write_text(content, encoding="utf-8")
            tmp.rename(path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except OSError as e:
        raise StagingWriteError(f"Failed to write release description {path}: {e}") from e

    logger.debug("Release description saved to %s", path)


def load_release(path: Path) -> str:
    """Read the release description verbatim.

    Raises:
        ReleaseMissingError: If staging never wrote it.
    """
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ReleaseMissingError(f"Cannot read release description {path}: {e}") from e
