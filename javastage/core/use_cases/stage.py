"""
Stage use case — the full build: context → coordinator → report.

This is the vertical slice behind the ``stage`` command.  All failures
come back on the result; nothing here raises.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from javastage.core.config.loader import ConfigError, load_context
from javastage.core.engine.coordinator import LifecycleReport
from javastage.core.errors import EXIT_INTERNAL_ERROR, EXIT_OK, EXIT_USAGE
from javastage.core.services.dependencies import DependencyInstaller, InstallError
from javastage.plugins.registration import build_coordinator

logger = logging.getLogger(__name__)


@dataclass
class StageResult:
    """Result of staging one application."""

    report: LifecycleReport | None = None
    error: str | None = None
    exit_code: int = EXIT_OK

    def to_dict(self) -> dict:
        result: dict = {"exit_code": self.exit_code}
        if self.error:
            result["error"] = self.error
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def run_stage(
    build_dir: Path,
    cache_dir: Path,
    deps_dir: Path,
    deps_index: str = "0",
    environ: Mapping[str, str] | None = None,
    buildpack_dir: Path | None = None,
    installer: DependencyInstaller | None = None,
) -> StageResult:
    """Stage the application in ``build_dir``.

    Args:
        build_dir: Application directory.
        cache_dir: Build cache directory.
        deps_dir: Root of the deps directory.
        deps_index: This buildpack's slot under ``deps_dir``.
        environ: Environment snapshot (default: ``os.environ``).
        buildpack_dir: Buildpack directory with ``manifest.yml``.
        installer: Optional pre-built dependency installer.

    Returns:
        StageResult carrying the lifecycle report.
    """
    result = StageResult()

    # ── Build the context ───────────────────────────────────────
    try:
        ctx = load_context(
            build_dir,
            cache_dir,
            deps_dir,
            deps_index=deps_index,
            environ=environ,
            buildpack_dir=buildpack_dir,
        )
    except ConfigError as e:
        result.error = str(e)
        result.exit_code = EXIT_USAGE
        return result

    # ── Wire the plugins ────────────────────────────────────────
    try:
        coordinator = build_coordinator(ctx, installer)
    except InstallError as e:
        result.error = str(e)
        result.exit_code = EXIT_INTERNAL_ERROR
        return result

    # ── Run ─────────────────────────────────────────────────────
    try:
        report = coordinator.run()
    except Exception as e:
        logger.exception("Unexpected error during staging")
        result.error = f"Unexpected error: {e}"
        result.exit_code = EXIT_INTERNAL_ERROR
        return result

    result.report = report
    result.exit_code = report.exit_code
    if report.fatal:
        result.error = str(report.fatal)
    return result
