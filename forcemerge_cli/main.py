#!/usr/bin/env python3
"""
Force Merge CLI

Rich-based CLI for inspecting the auto force-merge orchestrator on a node.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from .commands.config import show_config
from .commands.health import health_check

# Initialize Rich console
console = Console()

# Main app
app = typer.Typer(
    name="forcemerge",
    help="Auto force-merge orchestrator CLI - node health and configuration",
    rich_markup_mode="rich",
    no_args_is_help=True,
    add_completion=False,
)


def version_callback(value: bool):
    if value:
        from forcemerge_cli import __version__
        console.print(f"Auto Force-Merge Orchestrator v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version information"
    ),
):
    """
    [bold blue]Auto Force-Merge Orchestrator CLI[/bold blue]

    [dim]Examples:[/dim]
        forcemerge health                       # Would a merge run right now?
        forcemerge config -c config/force_merge_config.yaml
    """
    pass


@app.command("health")
def health(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to force merge config YAML"),
    sample_seconds: float = typer.Option(0.5, "--sample-seconds", help="Sampling window for CPU and GC activity"),
):
    """🏥 Check whether this node has capacity for a force merge."""
    health_check(config=config, sample_seconds=sample_seconds)


@app.command("config")
def config_cmd(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to force merge config YAML"),
):
    """⚙️ Show the effective configuration."""
    show_config(config=config)


if __name__ == "__main__":
    app()
