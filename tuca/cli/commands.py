"""CLI commands for Tuca."""

import asyncio
import json
from dataclasses import asdict
from datetime import datetime, timezone

import typer
from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.table import Table

from tuca import __logo__, __version__

app = typer.Typer(
    name="tuca",
    help=f"{__logo__} Tuca - intent resolution for the creator assistant",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} Tuca v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show Tuca runtime logs"),
):
    """Tuca - intent resolution for the creator assistant."""
    load_dotenv(override=False)
    if logs:
        logger.enable("tuca")
    else:
        logger.disable("tuca")


def _print_result(result) -> None:
    table = Table(title="Intent")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for key, value in asdict(result).items():
        if value is None:
            continue
        if not isinstance(value, str):
            value = json.dumps(value, ensure_ascii=False, default=str)
        table.add_row(key, value)
    console.print(table)


# ============================================================================
# Classify
# ============================================================================


@app.command()
def classify(
    text: str = typer.Argument(..., help="Message to classify"),
    name: str = typer.Option("", "--name", "-n", help="User display name"),
    question_type: str = typer.Option(None, "--question-type", help="Pending question type"),
    pending_context: str = typer.Option(None, "--pending-context", help="Pending action context (JSON)"),
    contextual: bool = typer.Option(None, "--contextual/--no-contextual", help="Override contextual logic flag"),
    topic: str = typer.Option(None, "--topic", help="Topic of the previous assistant turn"),
    was_question: bool = typer.Option(False, "--was-question", help="Previous turn ended with a question"),
    summary: str = typer.Option(None, "--summary", help="Conversation summary"),
):
    """Classify a message against an ad-hoc dialogue state."""
    from tuca.nl import IntentEngine, IntentEngineConfig, UserIdentity, normalize_text
    from tuca.nl.trivial import random_greeting
    from tuca.settings import get_settings
    from tuca.state.models import DialogueState, LastResponseContext

    config = IntentEngineConfig.from_settings(get_settings())
    if contextual is not None:
        config = IntentEngineConfig(
            contextual_logic_enabled=contextual,
            context_validity_minutes=config.context_validity_minutes,
            assistant_name=config.assistant_name,
        )

    try:
        pending = json.loads(pending_context) if pending_context else None
    except ValueError as exc:
        console.print(f"[red]--pending-context is not valid JSON: {exc}[/red]")
        raise typer.Exit(1)

    now = datetime.now(timezone.utc)
    state = DialogueState(
        last_ai_question_type=question_type,
        pending_action_context=pending,
        conversation_summary=summary,
        last_interaction=now,
        last_response_context=(
            LastResponseContext(topic=topic, was_question=was_question, timestamp=now)
            if topic or was_question else None
        ),
    )
    user = UserIdentity(name=name or None)
    engine = IntentEngine(config)
    result = engine.determine_intent(
        normalize_text(text), user, text, state, random_greeting(user.first_name), "cli",
    )
    _print_result(result)


# ============================================================================
# Dialogue state
# ============================================================================


state_app = typer.Typer(help="Inspect and reset stored dialogue state")
app.add_typer(state_app, name="state")


@state_app.command("show")
def state_show(user_id: str = typer.Argument(..., help="User id")):
    """Print the stored dialogue state of a user."""
    from tuca.settings import get_settings
    from tuca.state.store import DialogueStateStore

    async def run():
        store = DialogueStateStore.from_url(get_settings())
        try:
            return await store.get(user_id)
        finally:
            await store.close()

    state = asyncio.run(run())
    console.print_json(state.to_json())


@state_app.command("reset")
def state_reset(user_id: str = typer.Argument(..., help="User id")):
    """Overwrite the stored dialogue state with defaults."""
    from tuca.settings import get_settings
    from tuca.state.store import DialogueStateStore

    async def run():
        store = DialogueStateStore.from_url(get_settings())
        try:
            return await store.reset(user_id)
        finally:
            await store.close()

    asyncio.run(run())
    console.print(f"[green]✓[/green] Dialogue state reset for {user_id}")


# ============================================================================
# Status
# ============================================================================


@app.command()
def status():
    """Show Tuca configuration and Redis reachability."""
    from redis.exceptions import RedisError

    from tuca.settings import get_settings
    from tuca.state.store import DialogueStateStore

    settings = get_settings()
    console.print(f"{__logo__} Tuca Status\n")
    console.print(f"Environment: {settings.env}")
    console.print(f"Assistant name: {settings.assistant_name}")
    console.print(
        f"Contextual logic: {'[green]on[/green]' if settings.contextual_logic_enabled else '[dim]off[/dim]'}"
        f" (validity {settings.context_validity_minutes} min)"
    )

    async def ping() -> bool:
        store = DialogueStateStore.from_url(settings)
        try:
            return bool(await store.redis.ping())
        except RedisError:
            return False
        finally:
            await store.close()

    reachable = asyncio.run(ping())
    console.print(f"Redis: {settings.redis_url} {'[green]✓[/green]' if reachable else '[red]✗[/red]'}")


if __name__ == "__main__":
    app()
