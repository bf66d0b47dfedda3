"""CLI interface for the SBWC assistant."""

import asyncio
import json
import os

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ....config.logging import setup_logging
from ....config.settings import settings
from ....core.domain import ChatMessage, ChatResponse, Citation, StreamEventKind
from ....core.domain.utils import normalize_text
from ...common.exception_handler import format_exception_json, get_error_code

app = typer.Typer(
    name="sbwc",
    help="SBWC Assistant - answers about workers' compensation with cited sources",
    add_completion=False,
)

console = Console(force_terminal=True, legacy_windows=False)

# Determine if we're in debug mode (shows full stack traces)
DEBUG_MODE = os.getenv("DEBUG", "false").lower() == "true"


def handle_cli_error(exc: Exception) -> None:
    """Handle and display errors in CLI with structured format.

    In debug mode, shows full JSON error details.
    In normal mode, shows a user-friendly message with error code.
    """
    error_data = format_exception_json(exc, include_trace=DEBUG_MODE)

    if DEBUG_MODE:
        console.print(
            Panel(
                json.dumps(error_data, indent=2),
                title="[bold red]Error Details[/]",
                border_style="red",
            )
        )
        return

    error_msg = error_data["error"]["message"]
    console.print(f"\n[red]Error [{get_error_code(exc)}]:[/] {error_msg}")
    console.print(f"[dim]Type: {error_data['error']['type']}[/]")
    console.print("[dim]Set DEBUG=true for full details[/]")


def citations_table(citations: list[Citation]) -> Table:
    """Build a rich table listing cited documents by relevance."""
    table = Table(title="Sources", show_lines=False)
    table.add_column("Document", style="cyan")
    table.add_column("Relevance", justify="right")
    table.add_column("Link", overflow="fold")

    for citation in citations:
        link = citation.url or f"[yellow]{citation.error or 'unavailable'}[/]"
        table.add_row(citation.name, citation.relevance, link)
    return table


async def _run(question: str) -> ChatResponse:
    from ....composition.container import get_chat_service

    service = get_chat_service()
    response = await service.chat([ChatMessage(role="user", content=question)])

    async for event in response.stream.events():
        if event.kind is StreamEventKind.TOKEN:
            console.print(event.text, end="", soft_wrap=True, markup=False, highlight=False)
    console.print()
    return response


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question about workers' compensation"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """Ask a single question and stream the answer."""
    setup_logging("DEBUG" if verbose else settings.log_level, log_file=settings.log_file)

    try:
        response = asyncio.run(_run(normalize_text(question)))
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    if response.citations:
        console.print(citations_table(response.citations))

    if response.stream.error is not None:
        handle_cli_error(response.stream.error)
        raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("sbwc_assistant.adapters.inbound.api.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
