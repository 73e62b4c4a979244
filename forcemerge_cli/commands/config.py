"""
Config command for the force-merge CLI

Prints the effective configuration after YAML loading and AFM_ overrides.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from forcemerge_orchestrator.exceptions import ConfigurationError

from ..utils.config_helpers import load_cli_config

console = Console()


def show_config(config: Optional[str] = None) -> None:
    """Validate and display the effective configuration."""
    try:
        cfg, config_path = load_cli_config(config)
    except (ConfigurationError, FileNotFoundError) as e:
        console.print(f"❌ [red]Configuration error: {e}[/red]")
        raise typer.Exit(2)

    source = str(config_path) if config_path else "built-in defaults"
    table = Table(title=f"Effective Configuration ({source})", show_header=True, header_style="bold blue")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for key, value in cfg.to_flat_dict().items():
        table.add_row(key, str(value))

    console.print(table)
    console.print("✅ [green]Configuration is valid[/green]")
