"""Command-line interface for scoring listing titles against resolved market values."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core.types import DealScoreResult, IdentityHints, Listing
from .pipeline import build_pipeline
from .reference.catalog import ReferenceCatalog, load_catalog_file
from .store.price_catalog import LocalPriceCatalog, load_rows_file
from .utils.config import settings
from .utils.error_handler import CardSnipeError, CatalogLoadError
from .utils.log import configure_logging, get_logger
from .utils.validation import validate_file_path

# Configure logging
configure_logging()
logger = get_logger(__name__)

# Rich console
console = Console()

app = typer.Typer(
    name="cardsnipe",
    help="Graded card deal scanner - exact identity resolution and deal scoring",
    add_completion=False
)


def _load_catalog(path: Optional[Path]) -> ReferenceCatalog:
    try:
        return load_catalog_file(path or settings.CATALOG_PATH)
    except CatalogLoadError as e:
        console.print(f"[red]❌ Reference catalog failed to load: {e}[/red]")
        raise typer.Exit(1)


def _render(result: DealScoreResult) -> None:
    resolution = result.resolution
    identity = resolution.identity

    table = Table(title="Reconciled Identity")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Sport", identity.sport or "-")
    table.add_row("Year", str(identity.year) if identity.year else "-")
    table.add_row("Set", identity.set_name or "-")
    table.add_row("Insert", identity.insert_line or "-")
    table.add_row("Player", identity.player or "-")
    table.add_row("Card #", identity.card_number or "-")
    table.add_row("Parallel", identity.parallel or "base")
    table.add_row("Autograph", "yes" if identity.is_autograph else "no")
    table.add_row("Grade", resolution.grade.label)
    table.add_row("Confidence", resolution.confidence.value)
    console.print(table)

    if resolution.quote is None:
        reason = resolution.reason.value if resolution.reason else "unknown"
        console.print(Panel.fit(
            f"[yellow]No verified market value[/yellow]\nReason: [bold]{reason}[/bold]\n{resolution.detail}",
            border_style="yellow"
        ))
    else:
        quote = resolution.quote
        console.print(Panel.fit(
            f"[bold green]${quote.value:,.2f}[/bold green] from {quote.source.value} ({quote.price_tier.value})\n"
            f"Matched: {quote.matched_identity_description}"
            + (f"\n{quote.source_url}" if quote.source_url else ""),
            border_style="green"
        ))

    adjustments = ", ".join(f"{name} {delta:+d}" for name, delta in result.adjustments) or "none"
    style = "green" if result.is_actionable else "dim"
    console.print(f"[bold]Deal score:[/bold] [{style}]{result.score}[/{style}]  (adjustments: {adjustments})")


async def _score(listing: Listing, hints: IdentityHints, catalog: ReferenceCatalog,
                 prices: Optional[Path]) -> DealScoreResult:
    store = None
    if prices is not None:
        store = LocalPriceCatalog(":memory:")
        store.insert_rows(load_rows_file(validate_file_path(prices, must_exist=True), catalog))
    pipeline = build_pipeline(settings, catalog, price_store=store)
    try:
        return await pipeline.resolve_and_score(listing, hints)
    finally:
        await pipeline.close()


@app.command()
def score(
    title: str = typer.Argument(..., help="Listing title"),
    price: float = typer.Option(..., "--price", "-p", help="Listing price"),
    catalog_path: Optional[Path] = typer.Option(None, "--catalog", help="Reference catalog JSON"),
    prices: Optional[Path] = typer.Option(None, "--prices", help="JSON array of local price rows"),
    shipping: Optional[float] = typer.Option(None, "--shipping", help="Shipping cost"),
    cert: Optional[str] = typer.Option(None, "--cert", help="Grading certificate number"),
    image: Optional[str] = typer.Option(None, "--image", help="Slab photo URL for certificate OCR"),
    sport: Optional[str] = typer.Option(None, "--sport", help="Sport hint"),
    player: Optional[str] = typer.Option(None, "--player", help="Player hint"),
):
    """Resolve one listing title and print its identity, market value and deal score."""
    catalog = _load_catalog(catalog_path)
    listing = Listing(
        title=title, current_price=price, shipping_cost=shipping, certificate_number=cert, image_url=image
    )
    hints = IdentityHints(sport=sport, player=player)

    try:
        result = asyncio.run(_score(listing, hints, catalog, prices))
    except CardSnipeError as e:
        console.print(f"[red]❌ {e}[/red]")
        logger.error("Scoring failed", error=str(e))
        raise typer.Exit(1)

    _render(result)


@app.command()
def catalog(
    catalog_path: Optional[Path] = typer.Option(None, "--catalog", help="Reference catalog JSON"),
):
    """Print reference catalog statistics."""
    loaded = _load_catalog(catalog_path)

    table = Table(title="Reference Catalog")
    table.add_column("Entry", style="cyan")
    table.add_column("Count", style="green", justify="right")
    for name, count in loaded.stats().items():
        table.add_row(name.replace("_", " "), str(count))
    console.print(table)


if __name__ == "__main__":
    app()
