"""Rich terminal reporter — per-category stats and what was left out."""

from __future__ import annotations

from typing import List, Optional

from rich.console import Console
from rich.table import Table

from scrydiff.lsp.registry import Language
from scrydiff.prioritizer.models import PrioritizedDiff

_CATEGORY_STYLE = {
    "source": "bold green",
    "test": "cyan",
    "config": "yellow",
    "doc": "magenta",
    "generated": "dim",
}


def render(result: PrioritizedDiff, *, console: Optional[Console] = None) -> None:
    """Print diff statistics and the left-out summary."""
    console = console or Console(stderr=True)
    stats = result.stats

    table = Table(title="Diff Statistics", title_style="bold", border_style="dim")
    table.add_column("Category", min_width=10)
    table.add_column("Files", justify="right")
    table.add_column("Lines", justify="right")

    for name, style in _CATEGORY_STYLE.items():
        files = getattr(stats, f"{name}_files")
        lines = getattr(stats, f"{name}_lines")
        if files:
            table.add_row(f"[{style}]{name}[/{style}]", str(files), str(lines))
    table.add_row("[bold]total[/bold]", str(stats.total_files), str(stats.total_lines))

    console.print()
    console.print(table)

    if result.summary:
        console.print()
        console.print("[bold yellow]Left out of the prompt:[/bold yellow]")
        for line in result.summary.strip().splitlines()[1:]:
            console.print(f"  {line}", markup=False)
    else:
        console.print()
        console.print("[bold green]✅ Every hunk fits the budget.[/bold green]")


def render_languages(languages: List[Language], *, console: Optional[Console] = None) -> None:
    """Print the language-server table with PATH availability."""
    console = console or Console(stderr=True)
    table = Table(title="Language Servers", title_style="bold", border_style="dim")
    table.add_column("Language", style="cyan")
    table.add_column("Extensions")
    table.add_column("Command", style="magenta")
    table.add_column("Available", justify="center")

    for lang in languages:
        table.add_row(
            lang.name,
            " ".join(lang.extensions),
            " ".join([lang.command, *lang.args]),
            "[green]yes[/green]" if lang.available() else "[red]no[/red]",
        )
    console.print(table)
