"""i18n-scan CLI - report translation keys used by Ruby sources."""
import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from i18n_scanner.analyzer.errors import ConfigError, ScanError
from i18n_scanner.analyzer.parser import RubyParser
from i18n_scanner.analyzer.scanner import scan_file
from i18n_scanner.config import __version__, get_config
from i18n_scanner.utils.logger import configure_logging

app = typer.Typer(
    name="i18n-scan",
    help="Find i18n key usages in Ruby and Rails sources",
    add_completion=False
)
console = Console()
err_console = Console(stderr=True)

EXCLUDED_DIRS = {'.git', 'vendor', 'node_modules', 'tmp', 'log', 'coverage', '.bundle'}


def collect_files(paths: List[Path]) -> List[Path]:
    """Expand directories into Ruby files, skipping vendored trees.

    Args:
        paths: Files and/or directories given on the command line

    Returns:
        Sorted, de-duplicated list of files to scan
    """
    files = set()
    for path in paths:
        if path.is_dir():
            for candidate in path.rglob('*'):
                relative_parts = candidate.relative_to(path).parts
                if (candidate.is_file() and RubyParser.handles(candidate)
                        and not any(part in EXCLUDED_DIRS for part in relative_parts)):
                    files.add(candidate)
        elif path.is_file():
            files.add(path)
    return sorted(files)


@app.command()
def scan(
    paths: List[Path] = typer.Argument(..., help="Files or directories to scan"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Scan mode: 'convention-aware' (rails) or 'plain' (ruby)"),
    relative_roots: Optional[List[str]] = typer.Option(None, "--relative-root", "-r", help="Directory where controller conventions apply (repeatable)"),
    as_json: bool = typer.Option(False, "--json", help="Print occurrences as JSON"),
    unique: bool = typer.Option(False, "--unique", "-u", help="Print each resolved key once"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging to stderr"),
):
    """Scan files and print every resolved key occurrence."""
    env = get_config()
    configure_logging("DEBUG" if verbose else env.log_level)

    try:
        config = env.to_scan_config(relative_roots=tuple(relative_roots) if relative_roots else None)
        if mode is not None:
            config = config.with_mode(mode)
    except ConfigError as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}", soft_wrap=True)
        raise typer.Exit(2)

    files = collect_files(paths)
    if not files:
        err_console.print("[bold yellow]No Ruby files found.[/bold yellow]")
        raise typer.Exit(1)

    occurrences = []
    failures = 0
    for file_path in files:
        try:
            occurrences.extend(scan_file(file_path, config))
        except ScanError as e:
            failures += 1
            err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}", soft_wrap=True)

    if unique:
        seen = dict.fromkeys(occurrence.resolved_key for occurrence in occurrences)
        if as_json:
            console.print_json(json.dumps(list(seen)))
        else:
            for key in seen:
                console.print(escape(key), highlight=False)
    elif as_json:
        console.print_json(json.dumps([
            {
                "key": o.resolved_key,
                "raw_key": o.raw_key,
                "path": o.path,
                "line_num": o.line_num,
                "line_pos": o.line_pos,
                "line": o.line_text,
                "default": o.default_arg,
            }
            for o in occurrences
        ]))
    else:
        table = Table(title=f"i18n keys ({len(occurrences)} occurrences in {len(files)} files)")
        table.add_column("Key", style="cyan")
        table.add_column("Location", style="dim")
        table.add_column("Line")
        for o in occurrences:
            table.add_row(escape(o.resolved_key), f"{escape(o.path)}:{o.line_num}", escape(o.line_text))
        console.print(table)

    if failures:
        raise typer.Exit(1)


@app.command()
def version():
    """Print the scanner version."""
    console.print(f"i18n-scan {__version__}")


def main():
    app()


if __name__ == "__main__":
    main()
