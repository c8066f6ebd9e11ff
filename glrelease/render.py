"""
Rendering functions for glrelease diagnostics.

stdout belongs to the JSON response, so everything here goes to stderr.
"""

from rich.table import Table
from rich.console import Console
from rich.text import Text
from rich import box
from typing import List, Optional
from pathlib import Path

from .domain.release import AssetLink, MetadataPair


def get_console() -> Console:
    """Console bound to the current stderr stream."""
    return Console(stderr=True, highlight=False)


def render_error(message: str, error_type: Optional[str] = None) -> None:
    """
    Print a fatal error.

    Args:
        message: Human readable diagnostic
        error_type: Exception class name, shown in dim text when given
    """
    text = Text.assemble(("error: ", "bold red"), message)
    if error_type:
        text.append(f" ({error_type})", style="dim")
    get_console().print(text)


def render_links_table(links: List[AssetLink], title: Optional[str] = None) -> None:
    """
    Render published asset links as a table.

    Args:
        links: Links attached to the release
        title: Optional table title
    """
    console = get_console()
    if not links:
        console.print("[yellow]No assets published.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Asset", style="cyan")
    table.add_column("URL")

    for link in links:
        table.add_row(link.name, link.url)

    console.print(table)


def render_fetched_files(files: List[Path], metadata: List[MetadataPair]) -> None:
    """Summarize what the in command wrote to its destination directory."""
    console = get_console()
    for pair in metadata:
        if pair.name == 'body':
            continue
        console.print(Text.assemble((pair.name, "bold"), ": ", pair.value))
    if not files:
        console.print("[yellow]No files downloaded.[/yellow]")
        return
    for path in files:
        console.print(f"  [green]✓[/green] {path.name}")
