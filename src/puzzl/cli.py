"""CLI entry point using Click."""

from __future__ import annotations

import asyncio
from typing import Any

import click
import httpx

from puzzl import __version__
from puzzl.config import PuzzlConfig, load_config
from puzzl.errors import ConfigurationError, HttpRequestError
from puzzl.logger import setup_logging


@click.group(invoke_without_command=True)
@click.option("--config", "config_path", default=None, help="Path to a puzzl.yaml config file")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON")
@click.option("--delay-ms", type=int, default=None, help="Simulated latency used by the demos")
@click.option("--http-timeout", type=float, default=None, help="Default HTTP timeout in seconds")
@click.option("--version", is_flag=True, help="Show version and exit")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: str | None,
    debug: bool,
    json_logs: bool,
    delay_ms: int | None,
    http_timeout: float | None,
    version: bool,
) -> None:
    """Puzzl - cooperative cancellation, tasks and events for asyncio."""
    if version:
        click.echo(f"puzzl {__version__}")
        ctx.exit()

    cli_args: dict[str, Any] = {
        "debug": debug or None,
        "json_logs": json_logs or None,
        "demo_delay_ms": delay_ms,
        "http_timeout": http_timeout,
    }
    try:
        config = load_config(cli_args=cli_args, config_path=config_path)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    setup_logging(debug=config.debug, json_output=config.json_logs)
    ctx.obj = config

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.group()
def demo() -> None:
    """Run one of the bundled demo programs."""


@demo.command("events")
@click.option("--ticks", type=int, default=3, show_default=True, help="Number of ticks to emit")
@click.pass_obj
def demo_events(config: PuzzlConfig, ticks: int) -> None:
    """Subscribe to an emitter that publishes the current timestamp."""
    from puzzl.demos import run_events_demo

    asyncio.run(run_events_demo(click.echo, ticks=ticks, interval_ms=config.demo_delay_ms))


@demo.command("cancellation")
@click.option("--cancel-after", type=float, default=None, help="Cancel after this many ms (default: half the delay)")
@click.pass_obj
def demo_cancellation(config: PuzzlConfig, cancel_after: float | None) -> None:
    """Cancel an in-flight fetch through a CancellationTokenSource."""
    from puzzl.demos import run_cancellation_demo

    delay = config.demo_delay_ms
    asyncio.run(run_cancellation_demo(
        click.echo,
        delay_ms=delay,
        cancel_after_ms=cancel_after if cancel_after is not None else delay / 2,
    ))


@demo.command("task")
@click.option("--cancel-after", type=float, default=None, help="Cancel after this many ms (default: half the delay)")
@click.pass_obj
def demo_task(config: PuzzlConfig, cancel_after: float | None) -> None:
    """Start, cancel, wait for, reset and restart a Task."""
    from puzzl.demos import run_task_demo

    delay = config.demo_delay_ms
    asyncio.run(run_task_demo(
        click.echo,
        delay_ms=delay,
        cancel_after_ms=cancel_after if cancel_after is not None else delay / 2,
    ))


@main.command("fetch")
@click.argument("url")
@click.option("--cancel-after", type=float, default=None, help="Cancel the request after this many ms")
@click.pass_obj
def fetch(config: PuzzlConfig, url: str, cancel_after: float | None) -> None:
    """Fetch URL and print the response body."""
    from puzzl.demos import run_fetch

    try:
        asyncio.run(run_fetch(click.echo, url, config=config, cancel_after_ms=cancel_after))
    except (HttpRequestError, httpx.HTTPError) as exc:
        raise click.ClickException(str(exc)) from exc
