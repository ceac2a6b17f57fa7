"""
javastage — CLI entrypoint.

Usage:
    javastage detect BUILD_DIR
    javastage stage BUILD_DIR CACHE_DIR DEPS_DIR DEPS_INDEX
    javastage release BUILD_DIR
    javastage compose DEPS_DIR DEPS_INDEX --home /home/vcap/app
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from javastage import __version__
from javastage.core.observability.logging_config import setup_logging

_DIR = click.Path(file_okay=False, path_type=Path)


@click.group()
@click.version_option(version=__version__, prog_name="javastage")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only report errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool) -> None:
    """javastage — stage Java applications for the platform."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("JAVASTAGE_LOG_LEVEL", "INFO")

    setup_logging(
        level=level,
        log_file=os.environ.get("JAVASTAGE_LOG_FILE"),
        log_file_level=os.environ.get("JAVASTAGE_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )


@cli.command()
@click.argument("build_dir", type=_DIR)
@click.option("--buildpack-dir", type=_DIR, default=None, help="Buildpack directory.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def detect(build_dir: Path, buildpack_dir: Path | None, as_json: bool) -> None:
    """Report the packaging archetype of BUILD_DIR."""
    from javastage.core.use_cases.detect import run_detect

    result = run_detect(build_dir, buildpack_dir=buildpack_dir)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif result.error:
        click.secho(f"❌ {result.error}", fg="red", err=True)
    else:
        click.echo(result.label)

    sys.exit(result.exit_code)


@cli.command()
@click.argument("build_dir", type=_DIR)
@click.argument("cache_dir", type=_DIR)
@click.argument("deps_dir", type=_DIR)
@click.argument("deps_index")
@click.option("--buildpack-dir", type=_DIR, default=None, help="Buildpack directory.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def stage(
    ctx: click.Context,
    build_dir: Path,
    cache_dir: Path,
    deps_dir: Path,
    deps_index: str,
    buildpack_dir: Path | None,
    as_json: bool,
) -> None:
    """Stage the application in BUILD_DIR into DEPS_DIR/DEPS_INDEX."""
    from javastage.core.use_cases.stage import run_stage

    result = run_stage(
        build_dir,
        cache_dir,
        deps_dir,
        deps_index=deps_index,
        buildpack_dir=buildpack_dir,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if ctx.obj.get("quiet"):
        if result.error:
            click.secho(f"❌ {result.error}", fg="red", err=True)
        sys.exit(result.exit_code)

    report = result.report
    if report is not None:
        click.echo()
        for record in report.records:
            if record.failed:
                click.secho(f"   ✗ {record.name}", fg="red", nl=False)
                error = record.outcomes[-1].error if record.outcomes else ""
                click.echo(f"  {error}")
            elif record.state.value == "configured":
                click.secho(f"   ✓ {record.name}", fg="green", nl=False)
                click.echo(f"  ({record.label})" if record.label else "")
            elif ctx.obj.get("verbose"):
                click.secho(f"   ⊘ {record.name} ", fg="yellow", nl=False)
                click.echo(f"({record.state.value})")

        if report.start_command:
            click.echo()
            click.echo(f"   Start command: {report.start_command}")

    if result.error:
        click.echo()
        click.secho(f"❌ {result.error}", fg="red", err=True)
    sys.exit(result.exit_code)


@cli.command()
@click.argument("build_dir", type=_DIR)
def release(build_dir: Path) -> None:
    """Print the release description written by ``stage``."""
    from javastage.core.use_cases.release import run_release

    result = run_release(build_dir)
    if result.error:
        click.secho(f"❌ {result.error}", fg="red", err=True)
    else:
        click.echo(result.content, nl=False)
    sys.exit(result.exit_code)


@cli.command()
@click.argument("deps_dir", type=_DIR)
@click.argument("deps_index")
@click.option(
    "--home",
    default=None,
    help="Application home directory (default: $HOME).",
)
@click.option(
    "--java-opts",
    "original",
    default=None,
    help="JAVA_OPTS the application is started with (default: $JAVA_OPTS).",
)
def compose(deps_dir: Path, deps_index: str, home: str | None, original: str | None) -> None:
    """Preview the JAVA_OPTS a staged application would start with."""
    from javastage.core.services.java_opts import FragmentStore
    from javastage.core.services.java_opts import compose as compose_opts

    if home is None:
        home = os.environ.get("HOME", "")
    if original is None:
        original = os.environ.get("JAVA_OPTS", "")

    store = FragmentStore(deps_dir / deps_index / "java_opts")
    click.echo(compose_opts(store.fragments(), str(deps_dir), home, original))


if __name__ == "__main__":
    cli()
