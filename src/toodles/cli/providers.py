"""Provider factory functions for CLI.

Centralizes creation of settings, stores, LLM and the turn handler.
Hides configuration details from command implementations.
"""

import logging

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from ..agent import ReplyGenerator, SentimentClassifier, TurnHandler
from ..config import Settings
from ..llm import LLMProvider, create_llm_provider
from ..store import ChatHistoryStore, UserInteractionStore, create_stores

# Default console for output
_console = Console()


def get_settings(console: Console | None = None) -> Settings:
    """Load settings from the environment.

    Raises:
        SystemExit: If a variable holds an invalid value
    """
    con = console or _console
    try:
        return Settings.from_env()
    except ValidationError as e:
        con.print(f"[red]Error: invalid configuration[/red]\n{e}")
        raise typer.Exit(code=1)


def configure_logging(settings: Settings, console: Console | None = None) -> None:
    """Route log records through Rich at the configured level."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console or _console, rich_tracebacks=True)],
        force=True,
    )


def get_stores(settings: Settings) -> tuple[ChatHistoryStore, UserInteractionStore]:
    """Create the configured store pair (one object; connect it once)."""
    return create_stores(settings.store_backend, **settings.store_config())


def require_llm(settings: Settings, console: Console | None = None) -> LLMProvider:
    """Create the LLM provider, exiting if no API key is configured.

    Raises:
        SystemExit: If OPENAI_API_KEY is not set
    """
    con = console or _console
    if not settings.openai_api_key:
        con.print("[red]Error: OPENAI_API_KEY not set in environment[/red]")
        raise typer.Exit(code=1)

    return create_llm_provider(
        "openai",
        api_key=settings.openai_api_key,
        model=settings.openai_chat_model,
        base_url=settings.openai_base_url,
        timeout=settings.llm_timeout,
    )


def build_turn_handler(
    settings: Settings,
    history_store: ChatHistoryStore,
    interaction_store: UserInteractionStore,
    llm: LLMProvider,
) -> TurnHandler:
    """Wire a TurnHandler from settings and already-created collaborators."""
    return TurnHandler(
        history_store=history_store,
        interaction_store=interaction_store,
        classifier=SentimentClassifier(llm),
        generator=ReplyGenerator(llm, max_tokens=settings.max_tokens),
        prefix=settings.prefix,
        reward_rule=settings.reward_rule,
        store_timeout=settings.store_timeout,
    )
