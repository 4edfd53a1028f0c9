"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from ..errors import StoreError
from ..mood import classify_mood
from .gateway import ConsoleReplyChannel
from .providers import (
    build_turn_handler,
    configure_logging,
    get_settings,
    get_stores,
    require_llm,
)

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="toodles",
    help="Toodles the clown: a chat agent whose mood follows how you treat it",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


@app.callback()
def main():
    """Configure logging before any command runs."""
    configure_logging(get_settings(console), console)


@app.command(name="init-db")
def init_db(
    reset: bool = typer.Option(
        False,
        "--reset",
        help="Drop existing tables first (WARNING: destroys all stored conversations)"
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt"
    )
):
    """Create the chat history and interaction tables if missing."""
    async def _init():
        if reset and not yes:
            console.print("[yellow]WARNING: --reset deletes every user's history and counters![/yellow]")
            if not typer.confirm("Are you sure you want to continue?"):
                console.print("[dim]Aborted.[/dim]")
                return

        settings = get_settings(console)
        store, _ = get_stores(settings)
        try:
            await store.connect()
            if reset:
                console.print(f"[dim]Dropping {store.backend_type} tables...[/dim]")
                await store.drop_schema()
            console.print(f"[dim]Initializing {store.backend_type} backend...[/dim]")
            await store.initialize_schema()
            console.print("[green]Database initialized successfully![/green]")
        except StoreError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

    asyncio.run(_init())


@app.command()
def chat(
    user_id: str = typer.Option(
        "console",
        "--user",
        "-u",
        help="User id the conversation is stored under"
    ),
    username: str = typer.Option(
        "friend",
        "--name",
        "-n",
        help="Name Toodles calls you"
    )
):
    """Talk to Toodles in the terminal."""
    async def _chat():
        settings = get_settings(console)
        llm = require_llm(settings, console)
        history_store, interaction_store = get_stores(settings)
        channel = ConsoleReplyChannel(console)

        try:
            await history_store.connect()
            handler = build_turn_handler(settings, history_store, interaction_store, llm)

            console.print("[bold cyan]Toodles Interactive Chat[/bold cyan]")
            console.print("[dim]Type 'exit', 'quit', or 'q' to leave[/dim]\n")

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")

                    if not user_input.strip():
                        continue

                    if user_input.strip().lower() in ('exit', 'quit', 'q'):
                        console.print("[dim]Goodbye![/dim]")
                        break

                    await handler.on_incoming_message(
                        user_id, username, user_input, reply=channel
                    )

                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

        except StoreError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await history_store.disconnect()
            await llm.close()

    asyncio.run(_chat())


@app.command()
def history(
    user_id: str = typer.Argument(..., help="User id to show")
):
    """Show a user's stored conversation."""
    async def _history():
        settings = get_settings(console)
        history_store, _ = get_stores(settings)
        try:
            await history_store.connect()
            chat_history = await history_store.get_chat_history(user_id)

            if not chat_history.messages:
                console.print(f"[yellow]No messages for {user_id}[/yellow]")
                return

            table = Table(show_header=True, header_style="bold cyan")
            table.add_column("#", style="dim", width=4)
            table.add_column("Role", style="yellow", width=10)
            table.add_column("Content")

            for i, message in enumerate(chat_history.messages):
                table.add_row(str(i), message.role.value, message.content)

            console.print(table)

        except StoreError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await history_store.disconnect()

    asyncio.run(_history())


@app.command()
def stats(
    user_id: str = typer.Argument(..., help="User id to show")
):
    """Show a user's sentiment counters and current mood."""
    async def _stats():
        settings = get_settings(console)
        _, interaction_store = get_stores(settings)
        try:
            await interaction_store.connect()
            interaction = await interaction_store.get_user_interaction(user_id)

            table = Table(show_header=False, box=None)
            table.add_column("Metric", style="bold cyan", width=15)
            table.add_column("Value")

            table.add_row("Positive", str(interaction.num_positive))
            table.add_row("Negative", str(interaction.num_negative))
            table.add_row("Neutral", str(interaction.num_neutral))
            table.add_row("Mood", classify_mood(interaction).value)

            console.print(table)

        except StoreError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await interaction_store.disconnect()

    asyncio.run(_stats())


@app.command()
def reset(
    user_id: str = typer.Argument(..., help="User id to reset"),
    clear_history: bool = typer.Option(
        False,
        "--history",
        help="Also delete the stored conversation"
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt"
    )
):
    """Zero a user's sentiment counters."""
    async def _reset():
        if not yes:
            confirm = typer.confirm(f"Reset Toodles' feelings about {user_id}?")
            if not confirm:
                console.print("[dim]Aborted.[/dim]")
                return

        settings = get_settings(console)
        history_store, interaction_store = get_stores(settings)
        try:
            await interaction_store.connect()
            await interaction_store.reset_user_interaction(user_id)
            if clear_history:
                await history_store.clear_chat_history(user_id)
            console.print(f"[green]Reset {user_id}.[/green]")

        except StoreError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await interaction_store.disconnect()

    asyncio.run(_reset())


if __name__ == "__main__":
    app()
