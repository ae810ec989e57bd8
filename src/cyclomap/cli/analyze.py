"""``cyclomap analyze`` - score a tree of sources and export the treemap."""

from pathlib import Path
from typing import List, Optional

import click
import typer
from rich.console import Console
from rich.table import Table

from ..exceptions import CyclomapError
from ..export import EXPORT_FORMATS, build_document, debug_lines, dumps
from ..logging_config import setup_logging
from ..pipeline import AnalysisResult, analyze_path
from ..stats import hotspots, summarize
from . import app
from ._common import console, resolve_config

err_console = Console(stderr=True)


@app.command()
def analyze(
    path: Path = typer.Argument(
        ...,
        help="File or directory to analyze",
        exists=True,
        readable=True,
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the JSON document to FILE ('-' or omitted: stdout)",
    ),
    fmt: str = typer.Option(
        "tree",
        "--format",
        "-f",
        help="Export format",
        click_type=click.Choice(list(EXPORT_FORMATS), case_sensitive=False),
    ),
    colorscale: Optional[str] = typer.Option(
        None,
        "--colorscale",
        help="Treemap palette (Blues, Greens, Reds, YlOrRd, RdBu, Viridis, Cividis, Hot)",
    ),
    policy: Optional[List[str]] = typer.Option(
        None,
        "--policy",
        "-p",
        help="Counting policy per extension, e.g. .c=return (repeatable)",
    ),
    size_metric: Optional[str] = typer.Option(
        None,
        "--size-metric",
        help="Rectangle size: physical lines or code lines",
        click_type=click.Choice(["lines", "code"]),
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Parallel workers (default: auto-detect)",
        min=1,
        max=32,
    ),
    debug_file: Optional[Path] = typer.Option(
        None,
        "--debug-file",
        help="Also write one 'file/nloc/cc' line per file to this path",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print errors"),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also append log records to this file", dir_okay=False
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """
    Estimate cyclomatic complexity and export a treemap document.

    Functions are found with lexical heuristics; every file is sized by its
    line count and coloured by its mean complexity, directories by the
    size-weighted mean of their children.

    [bold cyan]Examples:[/bold cyan]

      cyclomap analyze src/

      cyclomap analyze src/ -o treemap.json --format plotly

      cyclomap analyze legacy/ --policy .c=return --colorscale Reds
    """
    to_stdout = output is None or output == "-"
    out = err_console if to_stdout else console

    try:
        settings = resolve_config(
            config=config,
            policies=policy,
            colorscale=colorscale,
            workers=workers,
            size_metric=size_metric,
            verbose=verbose,
            quiet=quiet,
        )
    except CyclomapError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    setup_logging(settings.verbosity, log_file=log_file)
    try:
        result = analyze_path(path, settings)
    except CyclomapError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)

    text = dumps(build_document(result, settings.colorscale, fmt.lower()))
    if to_stdout:
        typer.echo(text)
    else:
        Path(output).write_text(text + "\n", encoding="utf-8")

    if debug_file is not None:
        debug_file.write_text("\n".join(debug_lines(result)) + "\n", encoding="utf-8")

    if settings.verbosity != "quiet":
        _print_summary(out, result, settings.verbosity == "verbose")
        if not to_stdout:
            out.print(f"[dim]Wrote {fmt.lower()} document to {output}[/dim]")

    if not result.ok:
        err_console.print("[red]No file could be analyzed.[/red]")
        raise typer.Exit(1)


def _print_summary(out: Console, result: AnalysisResult, verbose: bool) -> None:
    summary = summarize(result.reports)

    table = Table(title="Cyclomatic complexity", show_header=True, header_style="bold cyan")
    for column in ("Files", "Functions", "Lines", "Mean", "Median", "P90", "Max"):
        table.add_column(column, justify="right")
    table.add_row(
        str(summary.files),
        str(summary.functions),
        str(summary.lines),
        f"{summary.mean:.2f}",
        f"{summary.median:.2f}",
        f"{summary.p90:.2f}",
        str(summary.max),
    )
    out.print(table)

    top = hotspots(result.reports, limit=20 if verbose else 5)
    if top:
        hot = Table(title="Most complex files", header_style="bold magenta")
        hot.add_column("File")
        hot.add_column("Lines", justify="right")
        hot.add_column("Functions", justify="right")
        hot.add_column("Weight", justify="right")
        for report in top:
            name = f"{report.path} [dim](degraded)[/dim]" if report.degraded else report.path
            hot.add_row(name, str(report.lines), str(len(report.functions)), f"{report.weight:.2f}")
        out.print(hot)

    if result.diagnostics:
        out.print(f"[yellow]{len(result.diagnostics)} diagnostic(s):[/yellow]")
        for diagnostic in result.diagnostics:
            out.print(f"  [yellow]{diagnostic.code.value}[/yellow] {diagnostic.path}: {diagnostic.message}")
