"""Dealboard CLI - inspect and move deals from the terminal."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from .config import configure_logging, settings
from .schemas.deal import DealStage
from .services.pipeline_svc import PipelineController
from .store import RecordStore, SQLRecordStore

app = typer.Typer(
    name="dealboard",
    help="Deal pipeline board - view and move deals by stage",
    no_args_is_help=True,
)
console = Console()

STAGE_STYLES = {
    DealStage.OPEN: "blue",
    DealStage.PENDING: "yellow",
    DealStage.WON: "green",
    DealStage.LOST: "red",
}


def make_store() -> RecordStore:
    from .database import async_session_factory

    return SQLRecordStore(async_session_factory)


def _resolve_user(user: str | None) -> str:
    user_id = (user or settings.default_user_id).strip()
    if not user_id:
        console.print("[red]Error: pass --user or set DEALBOARD_DEFAULT_USER_ID[/red]")
        raise typer.Exit(1)
    return user_id


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    configure_logging("DEBUG" if verbose else None)


@app.command()
def board(user: str = typer.Option(None, "--user", "-u", help="Owning user id")):
    """Show the user's deals grouped by stage."""
    user_id = _resolve_user(user)

    async def _load() -> PipelineController:
        controller = PipelineController(make_store())
        await controller.load(user_id)
        return controller

    controller = asyncio.run(_load())
    if controller.load_error:
        console.print(f"[red]Failed to load deals: {controller.load_error.message}[/red]")
        raise typer.Exit(1)

    totals = controller.stage_totals()
    table = Table(title=f"Deals for {user_id}")
    table.add_column("Stage")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Customer")
    table.add_column("Value", justify="right")

    for stage, deals in controller.buckets_by_stage().items():
        style = STAGE_STYLES[stage]
        summary = totals[stage]
        table.add_row(
            f"[bold {style}]{stage.value}[/bold {style}]",
            "",
            f"{summary.count} deal(s)",
            "",
            f"{summary.value:,.2f}",
        )
        for deal in deals:
            table.add_row("", deal.id, deal.title, deal.customer_label, f"{deal.value:,.2f}")

    console.print(table)
    if controller.rejected:
        console.print(f"[yellow]Skipped {len(controller.rejected)} unreadable deal(s)[/yellow]")


@app.command()
def move(
    deal_id: str = typer.Argument(..., help="Deal id"),
    stage: str = typer.Argument(..., help="OPEN, PENDING, WON or LOST"),
    user: str = typer.Option(None, "--user", "-u", help="Owning user id"),
):
    """Move a deal to another stage."""
    user_id = _resolve_user(user)

    async def _move():
        controller = PipelineController(make_store())
        await controller.load(user_id)
        if controller.load_error:
            return controller.load_error, None
        result = await controller.transition(deal_id, stage)
        return result.error, result.value

    error, deal = asyncio.run(_move())
    if error:
        console.print(f"[red]Error: {error.message}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]{deal.title}[/green] is now [bold]{deal.status.value}[/bold]")


@app.command("init-db")
def init_db():
    """Create the record table."""
    from .database import create_tables

    asyncio.run(create_tables())
    console.print(f"[green]Tables ready at[/green] {settings.database_url}")


if __name__ == "__main__":
    app()
