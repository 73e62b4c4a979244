"""
Health command for the force-merge CLI

Takes one node resource snapshot and shows whether a force merge would be
allowed on this node right now.
"""

from __future__ import annotations

import time
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from forcemerge_orchestrator.cluster import (ClusterEligibilityGate,
                                             SettingsClusterConfigProvider)
from forcemerge_orchestrator.config import ForceMergeConfig
from forcemerge_orchestrator.exceptions import ConfigurationError
from forcemerge_orchestrator.resources import (ResourceHealthMonitor,
                                               ResourceSnapshot,
                                               create_node_stats_provider)
from forcemerge_orchestrator.scheduling import MonitoredThreadPool

from ..utils.config_helpers import load_cli_config

console = Console()


def health_check(config: Optional[str] = None, sample_seconds: float = 0.5) -> None:
    """Evaluate node health once and exit non-zero when merges would be denied."""
    console.print("🏥 [bold blue]Force Merge Health Check[/bold blue]")

    try:
        cfg, config_path = load_cli_config(config)
    except (ConfigurationError, FileNotFoundError) as e:
        console.print(f"❌ [red]Configuration error: {e}[/red]")
        raise typer.Exit(2)

    if config_path:
        console.print(f"⚙️  [dim]Config: {config_path}[/dim]")

    scheduling = cfg.scheduling
    pool = MonitoredThreadPool(scheduling.merge_pool_name, scheduling.merge_pool_size)
    try:
        provider = create_node_stats_provider([pool])
        monitor = ResourceHealthMonitor.from_settings(
            provider, cfg.thresholds, pool_name=scheduling.merge_pool_name
        )
        # CPU percent and GC activity are measured over this window
        time.sleep(max(0.0, sample_seconds))
        health = monitor.check()
    finally:
        pool.shutdown(wait=False)

    cluster = ClusterEligibilityGate(
        SettingsClusterConfigProvider.from_settings(cfg.cluster)
    ).check()

    _display_snapshot(health.snapshot, cfg)

    if cluster:
        console.print("✅ [green]Cluster is tiered (remote storage and warm nodes)[/green]")
    else:
        console.print(f"⚠️ [yellow]Cluster not eligible: {cluster.detail}[/yellow]")

    if health.outcome:
        console.print("✅ [bold green]Node has capacity for a force merge[/bold green]")
        return

    console.print(
        f"❌ [bold red]Force merge denied: {health.outcome.reason.value}[/bold red] "
        f"[dim]({health.outcome.detail})[/dim]"
    )
    raise typer.Exit(1)


def _display_snapshot(snapshot: ResourceSnapshot, cfg: ForceMergeConfig) -> None:
    thresholds = cfg.thresholds
    table = Table(title="Node Resources", show_header=True, header_style="bold blue")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Threshold", justify="right", style="dim")

    table.add_row("CPU", f"{snapshot.cpu_percent:.1f}%", f"{thresholds.cpu_threshold_percent:.1f}%")
    table.add_row("Memory", f"{snapshot.mem_used_percent:.1f}%", f"{thresholds.mem_threshold_percent:.1f}%")
    table.add_row("Heap", f"{snapshot.heap_used_percent:.1f}%", f"{thresholds.jvm_heap_threshold_percent:.1f}%")
    table.add_row("Free memory", f"{snapshot.mem_free_bytes / (1024 ** 3):.2f} GB", "")
    table.add_row("Load average", ", ".join(f"{v:.2f}" for v in snapshot.load_average), "")
    table.add_row("GC in window", "yes" if snapshot.gc_active else "no", "")
    table.add_row("Merge worker free", "yes" if snapshot.merge_worker_headroom else "no", "")

    console.print(table)
    console.print()
