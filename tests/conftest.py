"""
Shared test fixtures and configuration.
"""

import json
from pathlib import Path

import pytest

from javastage.core.context import StagingContext
from javastage.core.models.binding import ApplicationInfo
from javastage.core.services.credentials import ServiceCatalog
from javastage.core.services.dependencies import Dependency, DependencyInstaller, InstallError


class FakeInstaller(DependencyInstaller):
    """Installer double: lays down the files a dependency is expected to contain.

    Args:
        layouts: ``{name: [relative file paths]}`` created under ``dest``.
        fail: Names whose install (or download URLs) raise InstallError.
    """

    def __init__(self, layouts: dict[str, list[str]] | None = None, fail: tuple[str, ...] = ()):
        self.layouts = layouts or {}
        self.fail = fail
        self.installed: list[str] = []
        self.downloaded: list[str] = []

    def install(self, name: str, dest: Path) -> Dependency:
        if name in self.fail:
            raise InstallError(f"{name} unavailable")
        for rel in self.layouts.get(name, []):
            path = dest / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("")
        dest.mkdir(parents=True, exist_ok=True)
        self.installed.append(name)
        return Dependency(name=name, version="1.0.0")

    def download(self, url: str, dest: Path) -> Path:
        if any(f in url for f in self.fail):
            raise InstallError(f"Failed to download {url}")
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(b"jar")
        self.downloaded.append(url)
        return dest


JDK_LAYOUT = {"openjdk": ["jdk-17/bin/java"], "zing": ["zing-21/bin/java"]}


@pytest.fixture
def build_dir(tmp_path: Path) -> Path:
    path = tmp_path / "build"
    path.mkdir()
    return path


@pytest.fixture
def deps_dir(tmp_path: Path) -> Path:
    path = tmp_path / "deps"
    path.mkdir()
    return path


@pytest.fixture
def make_ctx(tmp_path: Path, build_dir: Path, deps_dir: Path):
    """Factory for staging contexts rooted in ``tmp_path``."""

    def _make(
        services: dict | None = None,
        overrides: dict[str, str] | None = None,
        environ: dict[str, str] | None = None,
        application: dict | None = None,
        buildpack_dir: Path | None = None,
    ) -> StagingContext:
        return StagingContext(
            build_dir=build_dir,
            cache_dir=tmp_path / "cache",
            deps_dir=deps_dir,
            deps_index="0",
            buildpack_dir=buildpack_dir,
            services=ServiceCatalog.from_json(json.dumps(services)) if services else ServiceCatalog(),
            application=ApplicationInfo.model_validate(application or {}),
            overrides=overrides or {},
            environ=environ or {},
        )

    return _make


@pytest.fixture
def installer() -> FakeInstaller:
    return FakeInstaller(layouts=dict(JDK_LAYOUT))


@pytest.fixture
def installer_factory():
    """Build installers with custom layouts or failures."""
    return FakeInstaller
