"""
Conformance Runner — CLI entrypoint.

Usage:
    conformance-runner --help
    conformance-runner run [HARNESS ARGS...]
    conformance-runner resolve --json
    conformance-runner cache status
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from conformance_runner import __version__
from conformance_runner.core.observability.logging_config import resolve_level, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="conformance-runner")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to conformance-runner.yml (default: auto-detect).",
)
@click.option(
    "--cache-root",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding downloaded harness versions (default: .work).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    cache_root: str | None,
) -> None:
    """Conformance Runner — fetch connectconformance and test the local client."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["cache_root"] = Path(cache_root).expanduser() if cache_root else None

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get("CCR_LOG_FILE"),
        log_file_level=os.environ.get("CCR_LOG_FILE_LEVEL"),
    )


def load_context(ctx: click.Context) -> tuple:
    """Load config and resolve (config, project_root, cache_root) for a command.

    Exits 1 with a message on configuration errors.
    """
    from conformance_runner.core.config.loader import (
        ConfigError,
        find_config_file,
        load_config,
        project_root,
        resolve_path,
    )

    config_path: Path | None = ctx.obj.get("config_path")
    if config_path is None:
        config_path = find_config_file()

    try:
        config = load_config(config_path, search=False)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(e.exit_code)

    root = project_root(config_path)
    override: Path | None = ctx.obj.get("cache_root")
    cache_root = override.resolve() if override else resolve_path(root, config.cache_root)
    return config, root, cache_root


class PassThroughCommand(click.Command):
    """A command whose raw argument list bypasses click's parser.

    The parser strips ``--`` separators, so the tokens are kept as given
    in ``ctx.meta["passthrough_args"]``.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.meta["passthrough_args"] = list(args)
        return super().parse_args(ctx, [])


@cli.command("run", cls=PassThroughCommand, add_help_option=False)
@click.pass_context
def run(ctx: click.Context) -> None:
    """Build the subject and run the conformance harness against it.

    Every argument is forwarded to connectconformance, ahead of the
    fixed ``--conf``/``--mode``/``--`` flags.  The exit code is the
    harness's exit code.

    Examples:

        conformance-runner run

        conformance-runner run -v --parallel 4
    """
    from conformance_runner.core.use_cases.run import run_conformance

    config, root, cache_root = load_context(ctx)
    quiet = ctx.obj.get("quiet", False)

    def _notify(message: str) -> None:
        if not quiet:
            click.secho(f"⬇️  {message}", fg="cyan")

    result = run_conformance(
        config,
        root,
        ctx.meta.get("passthrough_args", []),
        cache_root=cache_root,
        notify=_notify,
    )

    if result.error:
        click.secho(f"❌ {result.step} failed: {result.error}", fg="red")
        sys.exit(result.exit_code)

    sys.exit(result.exit_code)


@cli.command()
@click.option("--os", "os_report", default=None, help="OS to resolve for (default: host).")
@click.option("--arch", "arch_report", default=None, help="Architecture (default: host).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def resolve(
    ctx: click.Context,
    os_report: str | None,
    arch_report: str | None,
    as_json: bool,
) -> None:
    """Show the harness archive, URL and cache path for a platform."""
    from conformance_runner.core.use_cases.resolve import resolve_artifact

    config, root, cache_root = load_context(ctx)
    result = resolve_artifact(
        config,
        root,
        cache_root=cache_root,
        os_report=os_report,
        arch_report=arch_report,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    d = result.descriptor
    if result.error or d is None:
        click.secho(f"❌ {result.error or 'No artifact resolved'}", fg="red")
        sys.exit(1)

    click.secho(f"\n📦 {d.tool} v{d.version} ({d.platform})", fg="cyan", bold=True)
    click.echo(f"   Archive: {d.archive_filename}")
    click.echo(f"   URL:     {d.url}")
    click.echo(f"   Cache:   {d.cache_path}", nl=False)
    if result.cached:
        click.secho("  ✓ cached", fg="green")
    else:
        click.secho("  (not downloaded)", fg="yellow")
    click.echo(f"   Subject: {result.subject}")
    click.echo()


# ── Register sub-command groups from conformance_runner/ui/cli/ ──

from conformance_runner.ui.cli.cache import cache

cli.add_command(cache)


if __name__ == "__main__":
    cli()
