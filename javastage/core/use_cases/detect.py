"""
Detect use case — would this buildpack stage the application?

Runs only the packaging archetype selection.  Nothing is written.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from javastage.core.config.loader import ConfigError, load_context
from javastage.core.errors import EXIT_OK, EXIT_USAGE, StagingError
from javastage.core.services.dependencies import ManifestInstaller
from javastage.plugins.registration import container_registry

logger = logging.getLogger(__name__)


@dataclass
class DetectResult:
    """Result of the detect use case."""

    container: str = ""
    label: str = ""
    error: str | None = None
    exit_code: int = EXIT_OK

    @property
    def detected(self) -> bool:
        return self.error is None and bool(self.container)

    def to_dict(self) -> dict:
        result: dict = {"exit_code": self.exit_code}
        if self.error:
            result["error"] = self.error
            return result
        result["container"] = self.container
        result["label"] = self.label
        return result


def run_detect(
    build_dir: Path,
    environ: Mapping[str, str] | None = None,
    buildpack_dir: Path | None = None,
) -> DetectResult:
    """Select the packaging archetype for ``build_dir``.

    Returns:
        DetectResult; ``exit_code`` is non-zero when nothing matched.
    """
    result = DetectResult()

    try:
        # detection never touches the deps slot; point it at the build dir
        ctx = load_context(
            build_dir, build_dir, build_dir, environ=environ, buildpack_dir=buildpack_dir
        )
    except ConfigError as e:
        result.error = str(e)
        result.exit_code = EXIT_USAGE
        return result

    # an empty manifest is enough: nothing gets installed here
    registry = container_registry(ctx, ManifestInstaller(None))
    try:
        selection = registry.require()
    except StagingError as e:
        result.error = str(e)
        result.exit_code = e.exit_code
        return result

    result.container = selection.candidate.name
    result.label = selection.label
    logger.debug("Detected container %s", selection.label)
    return result
