"""
Rendering functions for gits output.

This module handles all pretty-printing and table formatting.
Core functions return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import Dict, List, Any

from .domain.inventory import InventorySnapshot
from .domain.sync import SyncReport

console = Console()


def render_sync_table(reports: List[SyncReport]) -> None:
    """
    Render per-host sync results as a table.

    Args:
        reports: One SyncReport per host
    """
    if not reports:
        console.print("[yellow]No remotes configured.[/yellow]")
        return

    table = Table(
        title="Sync",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Host", style="cyan")
    table.add_column("Status")
    table.add_column("Discovered", justify="right")
    table.add_column("Merged", justify="right")
    table.add_column("Watched", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Error", style="red")

    for report in reports:
        status = "[green]✓ success[/green]" if report.success else "[red]✗ failed[/red]"
        table.add_row(
            report.host,
            status,
            str(report.discovered),
            str(report.merged),
            str(report.watched),
            str(report.skipped),
            report.error or "",
        )

    console.print(table)


def render_inventory_table(inventories: Dict[str, InventorySnapshot]) -> None:
    """Render every host's inventory as host / group / project rows."""
    if not any(inventories.values()):
        console.print("[yellow]No projects in the inventory. Run 'gits sync' first.[/yellow]")
        return

    table = Table(
        title="Inventory",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Host", style="cyan")
    table.add_column("Group", style="dim")
    table.add_column("Project", style="green")

    for host, snapshot in sorted(inventories.items()):
        for identity in snapshot.identities():
            table.add_row(host, identity.group_path, identity.name)

    console.print(table)


def render_watch_table(results: List[Dict[str, Any]]) -> None:
    """Render sync-watched results."""
    if not results:
        console.print("[yellow]No watched projects.[/yellow]")
        return

    table = Table(
        title="Watched repositories",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Repository", style="cyan")
    table.add_column("Path", style="dim")
    table.add_column("Action")

    styles = {'cloned': 'green', 'present': 'dim', 'failed': 'red'}
    for result in results:
        action = result.get('action', '')
        style = styles.get(action, '')
        table.add_row(result['repo'], result['path'], f"[{style}]{action}[/{style}]" if style else action)

    console.print(table)
