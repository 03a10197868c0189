import logging

import typer
from rich.console import Console
from rich.table import Table

from catalog_search.config import settings
from catalog_search.errors import CatalogSearchError
from catalog_search.startup import Components, build_components

app = typer.Typer(help="Semantic search over the menu catalog")
console = Console()


def _setup_logging(verbose: bool) -> None:
    """Configure basic logging."""
    level = logging.DEBUG if verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _initialize(reseed: bool = False) -> Components:
    try:
        components = build_components(settings)
        report = components.sequencer(reseed=reseed).run()
    except (CatalogSearchError, ValueError) as e:
        console.print(f"[bold red]Initialization failed:[/bold red] {e}")
        raise typer.Exit(code=1)
    count = "unknown" if report.document_count is None else report.document_count
    console.print(
        f"[dim]Index '{components.index_name}' ready "
        f"({count} entries, seeded: {report.seeded}).[/dim]"
    )
    return components


@app.command()
def init(
    reseed: bool = typer.Option(
        False, "--reseed", help="Drop the index and its entries, then seed again."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """
    Connect to the vector store, load the model and seed the index if it is empty.
    """
    _setup_logging(verbose)
    _initialize(reseed=reseed)
    console.print("[green]Catalog index initialized successfully.[/green]")


@app.command()
def search(
    query: str = typer.Argument(..., help="What are you looking for?"),
    k: int = typer.Option(5, "--k", "-k", min=1, help="Number of results."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """
    Rank catalog entries by semantic similarity to the query.
    """
    _setup_logging(verbose)
    retriever = _initialize().retriever()
    hits = retriever.search(query, k=k)
    if not hits:
        console.print("[yellow]No matches.[/yellow]")
        return

    table = Table("Rank", "Name", "Price", "Description", "Distance")
    for rank, hit in enumerate(hits, start=1):
        table.add_row(str(rank), hit.name, f"{hit.price:.2f}", hit.description, f"{hit.score:.4f}")
    console.print(table)


@app.command()
def chat(
    message: str = typer.Argument(..., help="Chat message to answer from the menu."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """Answer a chat message with the closest menu items."""
    _setup_logging(verbose)
    retriever = _initialize().retriever()
    response = retriever.chat(message)
    console.print(response.reply)


if __name__ == "__main__":
    app()
