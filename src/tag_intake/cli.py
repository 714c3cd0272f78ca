"""CLI for Tag Intake.

Commands:
    platforms            - List catalog platforms
    resolve <text>       - Resolve free text to a platform (or suggestions)
    chat                 - Interactive intake conversation
    serve                - Run the HTTP API
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tag_intake.config import settings
from tag_intake.errors import IncompleteSlotsError, UpstreamUnavailableError
from tag_intake.inference.responder import LLMResponder
from tag_intake.resolution.catalog import load_catalog
from tag_intake.resolution.resolver import PlatformResolver
from tag_intake.services.conversation import ConversationManager, TurnResult
from tag_intake.utils.log import configure_logging

app = typer.Typer(
    name="tag-intake",
    help="Tag Intake: conversational collection of ad-tag requests",
    no_args_is_help=True,
)
console = Console()

EXIT_WORDS = {"quit", "exit", ":q"}


def run_async(coro):
    """Run an async coroutine in sync context."""
    return asyncio.run(coro)


def build_resolver(config: Path | None = None) -> PlatformResolver:
    return PlatformResolver(load_catalog(config or settings.platforms_config_path))


@app.callback()
def main_callback(
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="Logging level (default from config)")
    ] = None,
):
    """Configure logging for every command."""
    configure_logging(level=(log_level or settings.log_level).upper())


@app.command()
def platforms(
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Platform catalog JSON file")
    ] = None,
    show_all: Annotated[
        bool, typer.Option("--all", "-a", help="Include inactive platforms")
    ] = False,
):
    """List platforms in the catalog, in priority order."""
    catalog = build_resolver(config).catalog

    table = Table(title=f"Platforms ({len(catalog)} loaded, {catalog.alias_count} aliases)")
    table.add_column("Rank", justify="right", style="dim")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Aliases")
    table.add_column("Active")

    for p in catalog.all(active_only=not show_all):
        table.add_row(
            str(p.priority_rank),
            p.id,
            p.name,
            ", ".join(p.aliases),
            "[green]yes[/green]" if p.active else "[red]no[/red]",
        )

    console.print(table)


@app.command()
def resolve(
    text: Annotated[str, typer.Argument(help="Platform text to resolve (e.g. 'trad desk')")],
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Platform catalog JSON file")
    ] = None,
    limit: Annotated[int, typer.Option(help="Maximum number of suggestions")] = 5,
):
    """Resolve free text to a canonical platform."""
    result = build_resolver(config).resolve_or_suggest(text, limit=limit)

    if result.platform is not None:
        console.print(
            f"[green]✓[/green] {text!r} → [bold]{result.platform.name}[/bold] "
            f"[dim]({result.platform.id})[/dim]"
        )
        return

    if not result.suggestions:
        console.print(f"[red]Error:[/red] No platform matches {text!r}")
        raise typer.Exit(1)

    console.print(f"[yellow]No confident match for {text!r}.[/yellow] Did you mean:")
    for s in result.suggestions:
        console.print(f"  {s.platform.name} [dim]({s.platform.id}, score {s.score:.2f})[/dim]")


def _print_turn(result: TurnResult) -> None:
    console.print(f"[bold magenta]Assistant:[/bold magenta] {result.assistant_text}")

    if result.platform_suggestions:
        names = ", ".join(s.platform.name for s in result.platform_suggestions)
        console.print(f"[yellow]Did you mean:[/yellow] {names}")

    slots = result.slots
    console.print(
        f"[dim]client={slots.client or '-'} platform={slots.platform_name or '-'} "
        f"tag_type={slots.tag_type.value if slots.tag_type else '-'} "
        f"priority={slots.priority.value if slots.priority else '-'} "
        f"({result.state.value})[/dim]"
    )


@app.command()
def chat(
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Platform catalog JSON file")
    ] = None,
):
    """Start an interactive intake conversation.

    Type 'create' to draft the ticket once complete, 'reset' to clear the
    collected fields, 'quit' to leave.
    """
    responder = LLMResponder()
    if not responder.configured:
        console.print("[red]Error:[/red] LLM_API_KEY is not set")
        raise typer.Exit(1)

    manager = ConversationManager(responder, build_resolver(config))

    async def _chat():
        session_id: str | None = None
        console.print(Panel("Describe the tag request. Type 'quit' to leave.", title="Tag Intake"))

        while True:
            message = await asyncio.to_thread(console.input, "[bold cyan]You:[/bold cyan] ")
            command = message.strip().lower()
            if command in EXIT_WORDS:
                break
            if not command:
                continue

            if command == "reset" and session_id:
                await manager.reset(session_id)
                console.print("[yellow]Fields cleared.[/yellow]")
                continue

            if command == "create" and session_id:
                try:
                    draft = await manager.materialize_ticket(session_id)
                except IncompleteSlotsError as e:
                    console.print(f"[red]Not ready:[/red] missing {', '.join(e.missing)}")
                    continue
                lines = [
                    f"[bold]Client:[/bold] {draft.client}",
                    f"[bold]Platform:[/bold] {draft.platform_name} ({draft.platform_id})",
                    f"[bold]Tag Type:[/bold] {draft.tag_type.value}",
                    f"[bold]Priority:[/bold] {draft.priority.value}",
                ]
                console.print(Panel("\n".join(lines), title="Ticket Draft", border_style="green"))
                break

            try:
                result = await manager.process_turn(session_id, message)
            except UpstreamUnavailableError as e:
                console.print(f"[red]Assistant unavailable:[/red] {e}. Try again.")
                continue

            session_id = result.session_id
            _print_turn(result)
            if result.complete:
                console.print("[green]All fields collected.[/green] Type 'create' to draft the ticket.")

    run_async(_chat())


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port")] = 8000,
    reload: Annotated[bool, typer.Option("--reload", help="Reload on code changes")] = False,
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("tag_intake.app:app", host=host, port=port, reload=reload)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
