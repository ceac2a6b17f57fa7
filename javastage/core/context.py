"""
Staging context — the single immutable value every plugin is built with.

The context is assembled ONCE per build by ``config.loader.load_context``
from an explicit environment mapping.  Plugins read the service catalog,
application metadata and their ``JBP_CONFIG_*`` override strings from
here and never from ``os.environ``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from javastage.core.models.binding import ApplicationInfo
from javastage.core.services.credentials import ServiceCatalog

FRAGMENT_DIR_NAME = "java_opts"


@dataclass(frozen=True)
class StagingContext:
    """Everything a plugin may know about the build it runs in."""

    build_dir: Path
    cache_dir: Path
    deps_dir: Path
    deps_index: str = "0"
    buildpack_dir: Path | None = None
    services: ServiceCatalog = field(default_factory=ServiceCatalog)
    application: ApplicationInfo = field(default_factory=ApplicationInfo)
    overrides: Mapping[str, str] = field(default_factory=dict)
    environ: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "overrides", MappingProxyType(dict(self.overrides)))
        object.__setattr__(self, "environ", MappingProxyType(dict(self.environ)))

    @property
    def dep_dir(self) -> Path:
        """This buildpack's own slot in the deps directory (build-time path)."""
        return self.deps_dir / self.deps_index

    @property
    def runtime_dep_dir(self) -> str:
        """The same slot as the running application sees it."""
        return f"$DEPS_DIR/{self.deps_index}"

    @property
    def fragment_dir(self) -> Path:
        return self.dep_dir / FRAGMENT_DIR_NAME

    def override(self, key: str) -> str | None:
        """Raw override string for an already-formatted ``JBP_CONFIG_*`` key."""
        return self.overrides.get(key)

    def env(self, key: str, default: str = "") -> str:
        """Value from the environment snapshot taken when the build started."""
        return self.environ.get(key, default)
