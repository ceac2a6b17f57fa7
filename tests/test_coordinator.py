"""
Tests for the lifecycle coordinator — phase ordering, failure isolation,
fatal errors and the files written at the end of a build.
"""

import time
from datetime import UTC, datetime
from pathlib import Path

import pytest
import yaml

from javastage.core.engine.coordinator import LifecycleCoordinator, PluginState
from javastage.core.errors import (
    EXIT_CONTAINER_FAILED,
    EXIT_NO_ARCHETYPE,
    EXIT_NO_RUNTIME,
    EXIT_OK,
    EXIT_RUNTIME_FAILED,
    EXIT_STAGING_WRITE_FAILED,
    NoArchetypeError,
    NoRuntimeError,
    StagingWriteError,
)
from javastage.core.models.outcome import Detection
from javastage.core.persistence.release_file import default_release_path
from javastage.core.services.archetypes import ArchetypeRegistry
from javastage.core.services.java_opts import FragmentStore
from javastage.plugins.mock import MockPlugin


class BrokenStorePlugin(MockPlugin):
    def configure(self):
        self._record("configure")
        raise StagingWriteError("disk full")


class NotAnOutcomePlugin(MockPlugin):
    def install(self):
        self._record("install")
        return "done"


class TupleDetectPlugin(MockPlugin):
    def detect(self):
        self._record("detect")
        return (True, "Tuple")


class SlowInstallPlugin(MockPlugin):
    entered_at: datetime

    def install(self):
        self.entered_at = datetime.now(UTC)
        time.sleep(0.01)
        return super().install()


class CommandlessContainer(MockPlugin):
    def start_command(self):
        raise LookupError("no main class")


def _registries(container=None, runtime=None):
    containers = ArchetypeRegistry("container", NoArchetypeError)
    runtimes = ArchetypeRegistry("JRE", NoRuntimeError)
    if container is not None:
        containers.register(container)
    if runtime is not None:
        runtimes.register(runtime)
    return containers, runtimes


@pytest.fixture
def ctx(make_ctx):
    return make_ctx()


@pytest.fixture
def store(ctx) -> FragmentStore:
    return FragmentStore(ctx.fragment_dir)


class TestPhaseOrdering:
    def test_every_plugin_finishes_a_phase_before_the_next(self, ctx):
        journal: list[str] = []
        containers, runtimes = _registries(
            MockPlugin("app", journal=journal), MockPlugin("jre", journal=journal)
        )
        frameworks = [MockPlugin("fw1", journal=journal), MockPlugin("fw2", journal=journal)]

        report = LifecycleCoordinator(ctx, containers, runtimes, frameworks).run()

        assert report.ok
        assert journal == [
            "app:detect",
            "jre:detect",
            "fw1:detect",
            "fw2:detect",
            "jre:install",
            "app:install",
            "fw1:install",
            "fw2:install",
            "jre:configure",
            "app:configure",
            "fw1:configure",
            "fw2:configure",
            "app:start_command",
        ]

    def test_inactive_frameworks_are_skipped(self, ctx):
        containers, runtimes = _registries(MockPlugin("app"), MockPlugin("jre"))
        idle = MockPlugin("idle", active=False)

        report = LifecycleCoordinator(ctx, containers, runtimes, [idle]).run()

        assert idle.calls == ["detect"]
        assert report.get("idle").state is PluginState.SKIPPED
        assert [r.name for r in report.active] == ["jre", "app"]

    def test_records_carry_roles_and_labels(self, ctx):
        containers, runtimes = _registries(
            MockPlugin("app", label="Spring Boot"), MockPlugin("jre", label="OpenJDK")
        )
        report = LifecycleCoordinator(ctx, containers, runtimes).run()

        assert report.container == "Spring Boot"
        assert report.runtime == "OpenJDK"
        assert report.get("jre").role == "runtime"
        assert report.get("app").mandatory is True
        assert report.get("app").state is PluginState.CONFIGURED


class TestFailureIsolation:
    def test_failed_install_does_not_skip_others(self, ctx):
        containers, runtimes = _registries(MockPlugin("app"), MockPlugin("jre"))
        broken = MockPlugin("broken", fail=("install",))
        healthy = MockPlugin("healthy")

        report = LifecycleCoordinator(ctx, containers, runtimes, [broken, healthy]).run()

        assert report.ok
        assert report.exit_code == EXIT_OK
        assert report.status == "degraded"
        assert broken.calls == ["detect", "install"]
        assert healthy.calls == ["detect", "install", "configure"]
        assert report.get("broken").state is PluginState.INSTALL_FAILED

    def test_raising_plugin_is_isolated(self, ctx):
        containers, runtimes = _registries(MockPlugin("app"), MockPlugin("jre"))
        raiser = MockPlugin("raiser", raise_in=("configure",))

        report = LifecycleCoordinator(ctx, containers, runtimes, [raiser]).run()

        assert report.ok
        record = report.get("raiser")
        assert record.state is PluginState.CONFIGURE_FAILED
        assert "blew up" in record.outcomes[-1].error

    def test_detect_error_skips_framework(self, ctx):
        containers, runtimes = _registries(MockPlugin("app"), MockPlugin("jre"))
        raiser = MockPlugin("raiser", raise_in=("detect",))

        report = LifecycleCoordinator(ctx, containers, runtimes, [raiser]).run()

        assert report.ok
        assert raiser.calls == ["detect"]
        assert report.get("raiser").state is PluginState.SKIPPED
        assert report.get("raiser").outcomes[0].failed

    def test_non_detection_return_skips_framework(self, ctx):
        containers, runtimes = _registries(MockPlugin("app"), MockPlugin("jre"))
        odd = TupleDetectPlugin("odd")
        healthy = MockPlugin("healthy")

        report = LifecycleCoordinator(ctx, containers, runtimes, [odd, healthy]).run()

        assert report.ok
        assert odd.calls == ["detect"]
        assert healthy.calls == ["detect", "install", "configure"]
        record = report.get("odd")
        assert record.state is PluginState.SKIPPED
        assert "returned tuple" in record.outcomes[0].error

    def test_non_outcome_return_is_a_failure(self, ctx):
        containers, runtimes = _registries(MockPlugin("app"), MockPlugin("jre"))
        odd = NotAnOutcomePlugin("odd")

        report = LifecycleCoordinator(ctx, containers, runtimes, [odd]).run()

        assert report.ok
        assert report.get("odd").state is PluginState.INSTALL_FAILED

    def test_outcome_times_span_the_phase_call(self, ctx):
        containers, runtimes = _registries(MockPlugin("app"), MockPlugin("jre"))
        slow = SlowInstallPlugin("slow")

        report = LifecycleCoordinator(ctx, containers, runtimes, [slow]).run()

        install = report.get("slow").outcomes[0]
        assert install.phase == "install"
        started = datetime.fromisoformat(install.started_at)
        ended = datetime.fromisoformat(install.ended_at)
        assert started <= slow.entered_at < ended

    def test_failed_framework_does_not_change_start_command(self, ctx, store):
        def run(frameworks):
            containers, runtimes = _registries(
                MockPlugin("app", command="java -jar app.jar"), MockPlugin("jre")
            )
            return LifecycleCoordinator(ctx, containers, runtimes, frameworks).run()

        clean = run([])
        degraded = run([MockPlugin("agent", fail=("install",), fragment=(store, 40, "-javaagent:x"))])

        assert clean.start_command == degraded.start_command == "java -jar app.jar"
        assert all(f.owner != "agent" for f in store.fragments())


class TestFatalErrors:
    def test_no_archetype(self, ctx):
        containers, runtimes = _registries(MockPlugin("app", active=False), MockPlugin("jre"))
        report = LifecycleCoordinator(ctx, containers, runtimes).run()
        assert report.exit_code == EXIT_NO_ARCHETYPE
        assert isinstance(report.fatal, NoArchetypeError)
        assert report.status == "failed"

    def test_no_runtime(self, ctx):
        containers, runtimes = _registries(MockPlugin("app"), MockPlugin("jre", active=False))
        report = LifecycleCoordinator(ctx, containers, runtimes).run()
        assert report.exit_code == EXIT_NO_RUNTIME

    def test_runtime_install_failure_stops_everything(self, ctx):
        journal: list[str] = []
        containers, runtimes = _registries(
            MockPlugin("app", journal=journal),
            MockPlugin("jre", fail=("install",), journal=journal),
        )
        fw = MockPlugin("fw", journal=journal)

        report = LifecycleCoordinator(ctx, containers, runtimes, [fw]).run()

        assert report.exit_code == EXIT_RUNTIME_FAILED
        assert "jre" in str(report.fatal)
        assert "fw:install" not in journal
        assert not any(c.endswith(":configure") for c in journal)
        assert not default_release_path(ctx.build_dir).exists()

    def test_container_configure_failure(self, ctx):
        containers, runtimes = _registries(MockPlugin("app", fail=("configure",)), MockPlugin("jre"))
        report = LifecycleCoordinator(ctx, containers, runtimes).run()
        assert report.exit_code == EXIT_CONTAINER_FAILED

    def test_container_without_start_command(self, ctx):
        containers, runtimes = _registries(CommandlessContainer("app"), MockPlugin("jre"))
        report = LifecycleCoordinator(ctx, containers, runtimes).run()
        assert report.exit_code == EXIT_CONTAINER_FAILED
        assert "no main class" in str(report.fatal)

    def test_empty_start_command(self, ctx):
        containers, runtimes = _registries(MockPlugin("app", command=""), MockPlugin("jre"))
        report = LifecycleCoordinator(ctx, containers, runtimes).run()
        assert report.exit_code == EXIT_CONTAINER_FAILED

    def test_staging_write_error_from_framework_is_fatal(self, ctx):
        containers, runtimes = _registries(MockPlugin("app"), MockPlugin("jre"))
        report = LifecycleCoordinator(ctx, containers, runtimes, [BrokenStorePlugin("fw")]).run()
        assert report.exit_code == EXIT_STAGING_WRITE_FAILED
        assert report.to_dict()["error"] == "disk full"


class TestBuildOutputs:
    def test_release_and_assembly_script_written(self, ctx):
        containers, runtimes = _registries(MockPlugin("app", command="$HOME/bin/app"), MockPlugin("jre"))

        report = LifecycleCoordinator(ctx, containers, runtimes).run()

        release = yaml.safe_load(default_release_path(ctx.build_dir).read_text())
        assert release == {"default_process_types": {"web": "$HOME/bin/app"}}
        assert report.start_command == "$HOME/bin/app"
        assert (ctx.dep_dir / "profile.d" / "00_java_opts.sh").is_file()

    def test_custom_release_path(self, ctx, tmp_path: Path):
        containers, runtimes = _registries(MockPlugin("app"), MockPlugin("jre"))
        target = tmp_path / "out" / "release.yml"
        LifecycleCoordinator(ctx, containers, runtimes, release_path=target).run()
        assert target.is_file()

    def test_fragments_from_all_plugins_compose_in_priority_order(self, ctx, store):
        containers, runtimes = _registries(
            MockPlugin("app"), MockPlugin("jre", fragment=(store, 5, "-Xmx512m"))
        )
        user = MockPlugin("user", fragment=(store, 99, "-Dcustom=1"))
        agent = MockPlugin("agent", fragment=(store, 40, "-javaagent:a.jar"))

        LifecycleCoordinator(ctx, containers, runtimes, [user, agent], store=store).run()

        assert [f.content for f in store.fragments()] == ["-Xmx512m", "-javaagent:a.jar", "-Dcustom=1"]

    def test_rerun_is_idempotent(self, ctx, store):
        def run():
            containers, runtimes = _registries(
                MockPlugin("app"), MockPlugin("jre", fragment=(store, 5, "-Xmx512m"))
            )
            fw = MockPlugin("fw", fragment=(store, 20, "-Ddebug"))
            LifecycleCoordinator(ctx, containers, runtimes, [fw], store=store).run()
            return {p.name: p.read_bytes() for p in store.directory.iterdir()}

        first = run()
        second = run()
        assert first == second
        assert sorted(second) == ["05_jre.opts", "20_fw.opts"]

    def test_stale_fragments_removed_on_rerun(self, ctx, store):
        store.write(40, "removed_agent", "-javaagent:old.jar")
        containers, runtimes = _registries(MockPlugin("app"), MockPlugin("jre"))
        LifecycleCoordinator(ctx, containers, runtimes, store=store).run()
        assert store.fragments() == []

    def test_report_to_dict(self, ctx):
        containers, runtimes = _registries(MockPlugin("app"), MockPlugin("jre"))
        data = LifecycleCoordinator(ctx, containers, runtimes, [MockPlugin("fw")]).run().to_dict()
        assert data["status"] == "ok"
        assert data["exit_code"] == 0
        assert [p["name"] for p in data["plugins"]] == ["jre", "app", "fw"]
        assert data["plugins"][2]["outcomes"][0]["phase"] == "install"


def test_detection_label_defaults_to_plugin_name(ctx):
    class Unlabelled(MockPlugin):
        def detect(self):
            return Detection(active=True)

    containers, runtimes = _registries(MockPlugin("app"), MockPlugin("jre"))
    report = LifecycleCoordinator(ctx, containers, runtimes, [Unlabelled("plain")]).run()
    assert report.get("plain").label == "plain"
