"""scrydiff CLI — Typer application with prioritize, languages, and init commands."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from scrydiff import __version__

app = typer.Typer(
    name="scrydiff",
    help="Fit large diffs into a small prompt, most important hunks first.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _resolve_repo_root(required: bool = True) -> Path:
    """Find the git repo root; fall back to cwd unless *required*."""
    from scrydiff.git.adapter import GitError, get_repo_root

    try:
        return get_repo_root()
    except GitError as exc:
        if not required:
            return Path.cwd()
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc


def _read_diff(source: Optional[str], repo_root: Path, all_changes: bool) -> str:
    from scrydiff.git.adapter import GitError, get_diff

    if source == "-":
        return sys.stdin.read()
    if source:
        path = Path(source)
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            console.print(f"[bold red]Cannot read diff:[/bold red] {exc}")
            raise typer.Exit(code=2) from exc
    try:
        return get_diff(repo_root, all_changes=all_changes)
    except GitError as exc:
        console.print(f"[bold red]Git error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc


# ── prioritize ────────────────────────────────────────────────────────────────


@app.command()
def prioritize(
    source: Optional[str] = typer.Argument(None, help="Diff file, or '-' for stdin. Defaults to the staged diff."),
    all_changes: bool = typer.Option(False, "--all", "-a", help="Use every change against HEAD, not just staged ones"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .scrydiff.toml"),
    max_lines: Optional[int] = typer.Option(None, "--max-lines", "-n", help="Changed-line budget for the full-text part"),
    no_summary: bool = typer.Option(False, "--no-summary", help="Do not list left-out changes"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds for all language-server lookups"),
    no_lsp: bool = typer.Option(False, "--no-lsp", help="Score by file path only"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: text | json | stats"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the result to a file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Prioritize a diff and print the prompt-ready text."""
    from scrydiff.config.loader import ConfigError, load_config
    from scrydiff.config.schema import OUTPUT_FORMATS
    from scrydiff.git.adapter import truncate_diff
    from scrydiff.lsp.registry import build_registry
    from scrydiff.output import json_report, terminal
    from scrydiff.prioritizer.engine import format_for_prompt, prioritize as run_prioritize

    _setup_logging(verbose)
    repo_root = _resolve_repo_root(required=source is None)

    # --- Load config ---
    try:
        cfg = load_config(repo_root, config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    # --- CLI overrides ---
    if format:
        if format not in OUTPUT_FORMATS:
            console.print(f"[bold red]Invalid format:[/bold red] {format}")
            raise typer.Exit(code=2)
        cfg.output.format = format  # type: ignore[assignment]
    if max_lines is not None:
        cfg.prioritize.max_high_priority_lines = max_lines
    if no_summary:
        cfg.prioritize.include_summary = False
    if timeout is not None:
        cfg.lsp.timeout = timeout
    if no_lsp:
        cfg.lsp.enabled = False

    registry = build_registry(cfg, repo_root)

    if verbose:
        console.print(f"[dim]Repo root: {repo_root}[/dim]")
        console.print(f"[dim]Budget: {cfg.prioritize.max_high_priority_lines} lines[/dim]")
        console.print(f"[dim]LSP: {'on' if cfg.lsp.enabled else 'off'} ({cfg.lsp.timeout}s)[/dim]")

    # --- Get diff ---
    diff_text = _read_diff(source, repo_root, all_changes)
    if not diff_text.strip():
        console.print("[dim]No changes to prioritize.[/dim]")
        raise typer.Exit(code=0)

    # --- Run ---
    try:
        result = run_prioritize(diff_text, cfg.to_options(work_dir=repo_root, registry=registry))
    except Exception as exc:
        logging.getLogger(__name__).debug("prioritize failed", exc_info=True)
        console.print(f"[yellow]⚠[/yellow]  Prioritization failed ({exc}); truncating instead.")
        prompt = truncate_diff(diff_text, cfg.prioritize.max_high_priority_lines)
        _emit(prompt, output)
        raise typer.Exit(code=0)

    # --- Output ---
    if cfg.output.format == "json":
        _emit(json_report.render(result), output)
    elif cfg.output.format == "stats":
        terminal.render(result, console=console)
        if output:
            _emit(format_for_prompt(result), output)
    else:
        _emit(format_for_prompt(result), output)


def _emit(text: str, output: Optional[str]) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[dim]Written to {output}[/dim]")
    else:
        typer.echo(text)


# ── languages ─────────────────────────────────────────────────────────────────


@app.command()
def languages(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .scrydiff.toml"),
) -> None:
    """List the language servers scrydiff knows about."""
    from scrydiff.config.loader import ConfigError, load_config
    from scrydiff.lsp.registry import build_registry
    from scrydiff.output.terminal import render_languages

    repo_root = _resolve_repo_root(required=False)
    try:
        cfg = load_config(repo_root, config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    render_languages(build_registry(cfg, repo_root).all_languages, console=console)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config"),
) -> None:
    """Generate a starter .scrydiff.toml in the repo root."""
    from scrydiff.config.defaults import DEFAULT_TOML
    from scrydiff.config.loader import CONFIG_FILENAME

    repo_root = _resolve_repo_root()
    config_path = repo_root / CONFIG_FILENAME

    if config_path.exists() and not force:
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"scrydiff {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """scrydiff — prompt-sized diffs, most important hunks first."""
