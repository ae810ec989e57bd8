"""``cyclomap serve`` - treemap dashboard with file watching."""

import threading
import webbrowser
from pathlib import Path
from typing import List, Optional

import typer

from ..exceptions import CyclomapError
from ..logging_config import setup_logging
from ..server import missing_dependencies
from . import app
from ._common import console, resolve_config


DEFAULT_PORT = 3030


@app.command()
def serve(
    path: Path = typer.Argument(
        Path("."),
        help="Directory to analyze",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    port: Optional[int] = typer.Option(None, help=f"Port to listen on (default: {DEFAULT_PORT})"),
    host: str = typer.Option("127.0.0.1", help="Host to bind to"),
    no_browser: bool = typer.Option(False, "--no-browser", help="Don't open browser"),
    watch: bool = typer.Option(True, "--watch/--no-watch", help="Re-analyze when sources change"),
    colorscale: Optional[str] = typer.Option(None, "--colorscale", help="Treemap palette"),
    policy: Optional[List[str]] = typer.Option(
        None, "--policy", "-p", help="Counting policy per extension, e.g. .c=return"
    ),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    workers: Optional[int] = typer.Option(None, "-w", "--workers", help="Parallel workers"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also append log records to this file", dir_okay=False
    ),
) -> None:
    """Start a dashboard that renders the complexity treemap in the browser."""
    missing = missing_dependencies()
    if missing:
        console.print(
            f"[red]Missing serve dependencies: {', '.join(missing)}.[/red] "
            'Install with: pip install "cyclomap[serve]"'
        )
        raise typer.Exit(1)

    import uvicorn

    from ..server.app import create_app
    from ..server.state import ServerState
    from ..server.watcher import FileWatcher

    try:
        settings = resolve_config(
            config=config, policies=policy, colorscale=colorscale, workers=workers, verbose=verbose
        )
    except CyclomapError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    setup_logging(settings.verbosity, log_file=log_file)
    verbose = settings.verbosity == "verbose"

    root_dir = str(path.resolve())
    state = ServerState()
    watcher = FileWatcher(root_dir=root_dir, config=settings, state=state)

    console.print(f"[bold]Analyzing[/bold] {root_dir}")
    with console.status("[cyan]Running initial analysis..."):
        watcher.run_analysis()

    if state.has_data():
        summary = state.get_document("tree")["summary"]
        console.print(
            f"[green]Ready[/green] - {summary['files']} files, "
            f"mean complexity {summary['mean']:.2f}"
        )
    else:
        console.print("[yellow]Analysis produced no results[/yellow]")

    if watch:
        watcher.start()

    port = port or DEFAULT_PORT
    url = f"http://{host}:{port}"
    if not no_browser:
        threading.Timer(1.0, lambda: webbrowser.open(url)).start()

    console.print(f"[bold]Dashboard[/bold] → [link={url}]{url}[/link]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    # Start ASGI server (blocks until Ctrl+C)
    asgi_app = create_app(state, watcher)
    try:
        uvicorn.run(
            asgi_app,
            host=host,
            port=port,
            log_level="info" if verbose else "warning",
        )
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()
        console.print("\n[dim]Stopped.[/dim]")
