"""
Plugin registration — the ordered candidate lists for one build.

Order matters:
    - Containers: the first archetype whose detector matches wins, so the
      more specific packaging styles come before Java Main.
    - Runtimes: opt-in providers first, OpenJDK as the universal fallback.
    - Frameworks: all applicable ones participate; order decides the
      order their phases run in and nothing else (fragment priorities
      decide JAVA_OPTS order).
"""

from __future__ import annotations

from javastage.core.context import StagingContext
from javastage.core.engine.coordinator import LifecycleCoordinator
from javastage.core.errors import NoArchetypeError, NoRuntimeError
from javastage.core.services.archetypes import ArchetypeRegistry
from javastage.core.services.dependencies import DependencyInstaller, ManifestInstaller
from javastage.plugins.base import BasePlugin, Container, Runtime
from javastage.plugins.containers.dist_zip import DistZipContainer
from javastage.plugins.containers.groovy import GroovyContainer
from javastage.plugins.containers.java_main import JavaMainContainer
from javastage.plugins.containers.spring_boot import SpringBootContainer
from javastage.plugins.containers.tomcat import TomcatContainer
from javastage.plugins.frameworks.checkmarx_iast_agent import CheckmarxIastAgentFramework
from javastage.plugins.frameworks.debug import DebugFramework
from javastage.plugins.frameworks.introscope_agent import IntroscopeAgentFramework
from javastage.plugins.frameworks.java_opts import JavaOptsFramework
from javastage.plugins.frameworks.jmx import JmxFramework
from javastage.plugins.frameworks.seeker_security_provider import SeekerSecurityProviderFramework
from javastage.plugins.jres.open_jdk import OpenJDKJRE
from javastage.plugins.jres.zing import ZingJRE

CONTAINERS: tuple[type[BasePlugin], ...] = (
    SpringBootContainer,
    TomcatContainer,
    GroovyContainer,
    DistZipContainer,
    JavaMainContainer,
)

OPT_IN_RUNTIMES: tuple[type[BasePlugin], ...] = (ZingJRE,)
DEFAULT_RUNTIME = OpenJDKJRE

FRAMEWORKS: tuple[type[BasePlugin], ...] = (
    DebugFramework,
    JmxFramework,
    CheckmarxIastAgentFramework,
    IntroscopeAgentFramework,
    SeekerSecurityProviderFramework,
    JavaOptsFramework,
)


def container_registry(
    ctx: StagingContext, installer: DependencyInstaller
) -> ArchetypeRegistry[Container]:
    registry: ArchetypeRegistry[Container] = ArchetypeRegistry("container", NoArchetypeError)
    for cls in CONTAINERS:
        registry.register(cls(ctx, installer))  # type: ignore[arg-type]
    return registry


def runtime_registry(
    ctx: StagingContext, installer: DependencyInstaller
) -> ArchetypeRegistry[Runtime]:
    registry: ArchetypeRegistry[Runtime] = ArchetypeRegistry("JRE", NoRuntimeError)
    for cls in OPT_IN_RUNTIMES:
        registry.register(cls(ctx, installer))  # type: ignore[arg-type]
    registry.register_fallback(DEFAULT_RUNTIME(ctx, installer))
    return registry


def framework_plugins(ctx: StagingContext, installer: DependencyInstaller) -> list[BasePlugin]:
    return [cls(ctx, installer) for cls in FRAMEWORKS]


def build_coordinator(
    ctx: StagingContext, installer: DependencyInstaller | None = None
) -> LifecycleCoordinator:
    """Wire the standard plugin set for a build.

    Raises:
        InstallError: If the buildpack manifest exists but is invalid.
    """
    if installer is None:
        installer = ManifestInstaller(ctx.buildpack_dir)
    return LifecycleCoordinator(
        ctx,
        containers=container_registry(ctx, installer),
        runtimes=runtime_registry(ctx, installer),
        frameworks=framework_plugins(ctx, installer),
    )
