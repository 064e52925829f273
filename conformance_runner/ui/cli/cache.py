"""
CLI commands for the harness cache.

Thin wrappers over ``conformance_runner.core.services.tool_cache``.
"""

from __future__ import annotations

import json

import click


@click.group("cache")
def cache() -> None:
    """Harness cache — inspect or remove downloaded versions."""


@cache.command("status")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """List cached harness versions and their sizes."""
    from conformance_runner.core.services.tool_cache import cache_status
    from conformance_runner.main import load_context

    _, _, cache_root = load_context(ctx)
    result = cache_status(cache_root)

    if as_json:
        click.echo(json.dumps(result, indent=2))
        return

    entries = result["entries"]
    if not entries:
        click.secho(f"📭 No cached harness versions in {result['cache_root']}", fg="yellow")
        return

    click.secho(f"🗄️  Cache: {result['cache_root']}", fg="cyan", bold=True)
    for name, info in entries.items():
        click.echo(f"   • {name}  {info['files']} files, {info['size_mb']} MB")
    click.echo(f"   Total: {result['total_size_mb']} MB")


@cache.command("clear")
@click.option("--version", "version", default=None, help="Only remove this version.")
@click.pass_context
def clear(ctx: click.Context, version: str | None) -> None:
    """Remove cached harness versions (all, or one with --version)."""
    from conformance_runner.core.services.tool_cache import clear_cache
    from conformance_runner.main import load_context

    _, _, cache_root = load_context(ctx)
    result = clear_cache(cache_root, version=version)

    if not result["cleared"]:
        click.echo("Nothing to remove.")
        return

    for name in result["cleared"]:
        click.secho(f"🗑️  Removed {name}", fg="green")
