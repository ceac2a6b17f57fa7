"""
Dependencies — the interface plugins use to obtain runtime artifacts.

Fetching and unpacking archives is not this project's concern; plugins
ask a :class:`DependencyInstaller` for "the default version of X in
directory D" and get either an installed directory or an InstallError.

:class:`ManifestInstaller` is the offline implementation: versions come
from the buildpack's ``manifest.yml`` and artifacts are pre-extracted
under ``<buildpack>/dependencies/<name>/<version>/``.
"""

from __future__ import annotations

import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

import httpx
import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

MANIFEST_FILE = "manifest.yml"
DEPENDENCIES_SUBDIR = "dependencies"
DOWNLOAD_TIMEOUT = 60.0


class InstallError(Exception):
    """A dependency could not be resolved or installed."""


class Dependency(BaseModel):
    """A dependency entry from the manifest."""

    name: str
    version: str
    uri: str = ""


class DependencyManifest(BaseModel):
    """The buildpack manifest: known dependencies and default versions."""

    dependencies: list[Dependency] = Field(default_factory=list)
    default_versions: list[Dependency] = Field(default_factory=list)

    @classmethod
    def load(cls, buildpack_dir: Path | None) -> DependencyManifest:
        """Load ``manifest.yml``; a missing file yields an empty manifest.

        Raises:
            InstallError: If the file exists but is not a valid manifest.
        """
        if buildpack_dir is None:
            return cls()
        path = buildpack_dir / MANIFEST_FILE
        if not path.is_file():
            logger.debug("No %s in %s", MANIFEST_FILE, buildpack_dir)
            return cls()
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            return cls.model_validate(data)
        except Exception as e:
            raise InstallError(f"Invalid {path}: {e}") from e

    def default_version(self, name: str) -> Dependency:
        """Resolve the default version of ``name``.

        Falls back to the only listed version when no default is declared.
        """
        for entry in self.default_versions:
            if entry.name == name:
                for dep in self.dependencies:
                    if dep.name == name and dep.version == entry.version:
                        return dep
                return Dependency(name=name, version=entry.version)

        candidates = [d for d in self.dependencies if d.name == name]
        if len(candidates) == 1:
            return candidates[0]
        if not candidates:
            raise InstallError(f"No dependency named {name!r} in manifest")
        raise InstallError(f"No default version for {name!r} among {len(candidates)} versions")


class DependencyInstaller(ABC):
    """External collaborator that puts artifacts on disk."""

    @abstractmethod
    def install(self, name: str, dest: Path) -> Dependency:
        """Install the default version of ``name`` into ``dest``."""

    @abstractmethod
    def download(self, url: str, dest: Path) -> Path:
        """Download a single file from ``url`` to ``dest``."""


class ManifestInstaller(DependencyInstaller):
    """Offline installer backed by a buildpack directory."""

    def __init__(self, buildpack_dir: Path | None, manifest: DependencyManifest | None = None):
        self._buildpack_dir = buildpack_dir
        self._manifest = manifest if manifest is not None else DependencyManifest.load(buildpack_dir)

    @property
    def manifest(self) -> DependencyManifest:
        return self._manifest

    def install(self, name: str, dest: Path) -> Dependency:
        dep = self._manifest.default_version(name)
        if self._buildpack_dir is None:
            raise InstallError(f"No buildpack directory to install {name} from")

        source = self._buildpack_dir / DEPENDENCIES_SUBDIR / name / dep.version
        if not source.is_dir():
            raise InstallError(f"{name} {dep.version} not available at {source}")

        try:
            if dest.exists():
                shutil.rmtree(dest)
            shutil.copytree(source, dest)
        except OSError as e:
            raise InstallError(f"Cannot install {name} into {dest}: {e}") from e

        logger.info("Installed %s %s", name, dep.version)
        return dep

    def download(self, url: str, dest: Path) -> Path:
        logger.debug("Downloading %s", url)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            with httpx.stream("GET", url, follow_redirects=True, timeout=DOWNLOAD_TIMEOUT) as resp:
                resp.raise_for_status()
                with dest.open("wb") as fh:
                    for chunk in resp.iter_bytes():
                        fh.write(chunk)
        except (httpx.HTTPError, OSError) as e:
            dest.unlink(missing_ok=True)
            raise InstallError(f"Failed to download {url}: {e}") from e
        return dest
