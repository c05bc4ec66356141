"""Command-line interface for Rulekeeper.

This module provides a thin Typer wrapper around the commands layer.
Each command:
1. Parses args (via Typer)
2. Creates progress callbacks (for Rich display)
3. Calls commands module functions
4. Renders results with Rich
"""

from __future__ import annotations

import logging

try:
    import typer
    from rich.console import Console
    from rich.logging import RichHandler
    from rich.markdown import Markdown
    from rich.panel import Panel
    from rich.table import Table
except ImportError as e:
    raise SystemExit(
        "CLI requires additional dependencies.\nInstall with: pip install rulekeeper-rag[cli]"
    ) from e

from rulekeeper import __version__
from rulekeeper.commands import ConfirmRequest, ProgressUpdate, config_cmd, delete, ingest, query
from rulekeeper.commands.base import QueryResult
from rulekeeper.config import load_env_file
from rulekeeper.models import SourceType

app = typer.Typer(
    name="rulekeeper",
    help="Rulekeeper - search and answer questions over tabletop game rulebooks.",
    no_args_is_help=True,
)
console = Console()

PREVIEW_LENGTH = 100


def version_callback(value: bool) -> None:
    if value:
        console.print(f"rulekeeper {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log pipeline details to stderr.",
    ),
) -> None:
    """Rulekeeper - rules retrieval for tabletop games."""
    load_env_file()
    _configure_logging(verbose)


def _fail(error: str | None, plain: bool) -> None:
    if plain:
        console.print(f"Error: {error}")
    else:
        console.print(f"[red]Error: {error}[/red]")
    raise typer.Exit(1)


@app.command(name="ingest")
def ingest_cmd(
    game_id: int = typer.Argument(..., help="Game the rulebook belongs to"),
    path: str = typer.Argument(..., help="Rules PDF to ingest"),
    data_dir: str = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Data directory (default: from settings)",
    ),
    config_file: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
    plain: bool = typer.Option(
        False,
        "--plain",
        help="Plain output (no colors/formatting)",
    ),
) -> None:
    """Ingest a rules PDF, replacing the game's previous rulebook."""
    show_status = not plain and console.is_terminal

    if show_status:
        with console.status("Reading rulebook...") as status:

            def on_progress(update: ProgressUpdate) -> None:
                stage = update.stage.replace("_", " ").capitalize()
                status.update(f"{stage}: {update.message or ''}")

            result = ingest.ingest(
                game_id=game_id,
                path=path,
                data_dir=data_dir,
                config_path=config_file,
                on_progress=on_progress,
            )
    else:
        result = ingest.ingest(
            game_id=game_id, path=path, data_dir=data_dir, config_path=config_file
        )

    if not result.success:
        _fail(result.error, plain)

    summary = (
        f"Ingested {result.filename} for game {result.game_id}: "
        f"{result.chunks_processed} chunks ({result.total_text_length} characters)"
    )
    if plain:
        console.print(summary)
    else:
        console.print(f"[green]{summary}[/green]")
        if result.file_path:
            console.print(f"[dim]Saved to {result.file_path}[/dim]")


def _render_sources(result: QueryResult, plain: bool) -> None:
    if plain:
        console.print("Sources:")
    else:
        console.print("[bold]Sources:[/bold]")
    for i, r in enumerate(result.results, 1):
        label = "House rule" if r.source_type == SourceType.HOUSE_RULE.value else "Rulebook"
        preview = r.content[:PREVIEW_LENGTH].replace("\n", " ")
        if len(r.content) > PREVIEW_LENGTH:
            preview += "..."
        if plain:
            console.print(f"  [{i}] {label} (score: {r.score:.3f})")
            console.print(f"      {preview}")
        else:
            console.print(f"  [{i}] [cyan]{label}[/cyan] [dim](score: {r.score:.3f})[/dim]")
            console.print(f"      [dim]{preview}[/dim]")


@app.command(name="search")
def search_cmd(
    game_id: int = typer.Argument(..., help="Game to search"),
    text: str = typer.Argument(..., help="Search text"),
    data_dir: str = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Data directory (default: from settings)",
    ),
    config_file: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
    limit: int = typer.Option(
        None,
        "--limit",
        "-k",
        help="Number of results to return",
    ),
    plain: bool = typer.Option(
        False,
        "--plain",
        help="Plain output (no colors/formatting)",
    ),
) -> None:
    """Find the rule passages most similar to a query."""
    result = query.search(
        game_id=game_id,
        query=text,
        data_dir=data_dir,
        config_path=config_file,
        limit=limit,
    )

    if not result.success:
        _fail(result.error, plain)

    if not result.results:
        console.print("No results found." if plain else "[yellow]No results found.[/yellow]")
        raise typer.Exit(0)

    _render_sources(result, plain)


@app.command(name="ask")
def ask_cmd(
    game_id: int = typer.Argument(..., help="Game the question is about"),
    question: str = typer.Argument(..., help="Question to ask"),
    data_dir: str = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Data directory (default: from settings)",
    ),
    config_file: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
    plain: bool = typer.Option(
        False,
        "--plain",
        help="Plain output (no colors/formatting)",
    ),
) -> None:
    """Answer a rules question from the stored rulebook and house rules."""
    result = query.ask(
        game_id=game_id,
        question=question,
        data_dir=data_dir,
        config_path=config_file,
    )

    if not result.success:
        _fail(result.error, plain)

    if not result.results:
        console.print(
            "No matching rules found." if plain else "[yellow]No matching rules found.[/yellow]"
        )
        raise typer.Exit(0)

    if result.answer:
        if plain:
            console.print(f"Answer: {result.answer}")
        else:
            console.print(Panel(Markdown(result.answer), title="Answer", border_style="green"))
        console.print()

    _render_sources(result, plain)


@app.command(name="delete")
def delete_cmd(
    game_id: int = typer.Argument(..., help="Game whose rules are deleted"),
    source_type: SourceType = typer.Option(
        None,
        "--source-type",
        "-s",
        help="Only delete chunks of this source type",
    ),
    data_dir: str = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Data directory (default: from settings)",
    ),
    config_file: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Skip confirmation prompt",
    ),
    plain: bool = typer.Option(
        False,
        "--plain",
        help="Plain output (no colors/formatting)",
    ),
) -> None:
    """Delete a game's stored rule chunks."""

    def cli_confirm(request: ConfirmRequest) -> bool:
        """CLI confirmation callback using typer.confirm."""
        if request.details:
            if plain:
                console.print(request.details)
            else:
                console.print(f"[yellow]{request.details}[/yellow]")
        return typer.confirm(request.message)

    result = delete.delete(
        game_id=game_id,
        data_dir=data_dir,
        config_path=config_file,
        source_type=source_type,
        on_confirm=None if force else cli_confirm,
    )

    if not result.success:
        # Cancellation is not an error
        if result.error == "Cancelled.":
            console.print("Cancelled.")
            raise typer.Exit(0)
        _fail(result.error, plain)

    message = f"Deleted {result.embeddings_deleted} chunks for game {game_id}"
    console.print(message if plain else f"[green]{message}[/green]")


@app.command(name="config")
def config_cmd_handler(
    config_file: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """Show current configuration settings."""
    result = config_cmd.config(config_path=config_file)

    if not result.success:
        console.print(f"[red]Error: {result.error}[/red]")
        raise typer.Exit(1)

    table = Table(title="Rulekeeper Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Source", style="dim")

    table.add_row("provider", result.provider, "yaml" if result.config_path else "default")
    table.add_row("llm_model", result.llm_model or "(not set)", "")
    table.add_row("embedding_model", result.embedding_model or "(not set)", "")
    table.add_row("api_base", result.api_base or "(provider default)", "")
    table.add_row("data_dir", result.data_dir, "")
    table.add_row("use_vector_index", str(result.use_vector_index), "")

    table.add_row("", "", "")

    for setting in result.settings:
        table.add_row(setting.name, setting.value, setting.source)

    console.print(table)

    for warning in result.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")

    if result.config_path:
        console.print(f"\n[dim]Config file: {result.config_path}[/dim]")
    else:
        console.print("\n[dim]No config file found. Using env vars / defaults.[/dim]")

    console.print("\n[dim]Precedence: env var > yaml settings > default[/dim]")
