import json
import logging

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def setup_logging(level: str) -> None:
    """Route log records to stderr through Rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def print_start_panel(num_slides: int, text_len: int, has_locks: bool) -> None:
    """Print the start panel of the edit run."""
    console.print()
    console.print(
        Panel(
            f"[bold]Slides:[/bold] {num_slides}\n"
            f"[bold]Model output:[/bold] {text_len} characters\n"
            f"[bold]Locks:[/bold] {'Provided' if has_locks else 'None'}",
            title="[bold cyan]Applying Edit Patch[/bold cyan]",
            border_style="cyan",
        )
    )
    console.print()


def create_counters_table(result: dict) -> Table:
    """Build the per-bucket operation counters table."""
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Outcome")
    table.add_column("Ops", justify="right")
    table.add_row("[green]Applied[/green]", str(result["applied"]))
    table.add_row("[yellow]Skipped (locked)[/yellow]", str(result["skippedLocked"]))
    table.add_row("[yellow]Skipped (missing)[/yellow]", str(result["skippedMissing"]))
    table.add_row("[dim]Skipped (policy)[/dim]", str(result["skippedPolicy"]))
    return table


def print_result_panel(result: dict) -> None:
    """Print the outcome panel at the end of the edit run."""
    grid = Table.grid(padding=(0, 1))
    grid.add_row(create_counters_table(result))
    if result.get("summary"):
        grid.add_row("[bold]Summary:[/bold] " + "; ".join(result["summary"]))
    if result.get("patchSummary"):
        grid.add_row(f"[bold]Model note:[/bold] {result['patchSummary']}")
    if result.get("blockedTargets"):
        grid.add_row("[bold]Locked targets:[/bold] " + ", ".join(result["blockedTargets"]))

    console.print(
        Panel(
            grid,
            title="[bold green]Result[/bold green]",
            border_style="green",
        )
    )
    console.print()


def print_error_panel(message: str) -> None:
    """Print the error panel."""
    console.print(
        Panel(
            f"[red]{message}[/red]",
            title="[bold red]Error[/bold red]",
            border_style="red",
        )
    )
    console.print()


def print_json_panel(json_document: dict) -> None:
    """Print the resulting document in a panel with syntax highlighting."""
    syntax = Syntax(
        json.dumps(json_document, indent=2, ensure_ascii=False),
        "json",
        theme="monokai",
        line_numbers=True,
    )
    console.print(
        Panel(syntax, title="[bold]Next State[/bold]", border_style="blue")
    )
