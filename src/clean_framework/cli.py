"""CLI entry point for the clean framework."""

from __future__ import annotations

import click


@click.group()
def main() -> None:
    """Clean Framework: use cases, gateways and external interfaces."""


@main.command()
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--name", default="world", help="Name to greet")
@click.option("--ticks", default=None, type=int, help="Ticker emissions to wait for")
@click.option("--log-level", default=None, help="Log level override")
@click.option(
    "--log-format",
    default=None,
    type=click.Choice(["console", "json"]),
    help="Log renderer override",
)
def demo(
    config: str | None,
    name: str,
    ticks: int | None,
    log_level: str | None,
    log_format: str | None,
) -> None:
    """Run the greeting demo against a simulated external interface."""
    import asyncio

    from .main import run

    overrides: dict = {}
    if ticks is not None:
        overrides.setdefault("demo", {})["ticks"] = ticks
    if log_level:
        overrides.setdefault("observability", {})["log_level"] = log_level
    if log_format:
        overrides.setdefault("observability", {})["log_format"] = log_format

    output = asyncio.run(run(config_path=config, overrides=overrides, name=name))

    if output.error:
        click.echo(f"Error: {output.error}", err=True)
        raise SystemExit(1)
    click.echo(f"Greeting: {output.greeting}")
    click.echo(f"Ticks:    {output.tick_count}")


if __name__ == "__main__":
    main()
