"""CLI entry point for erebos-chat."""

import logging
from pathlib import Path

import click
import uvicorn

from .backends import get_storage
from .characters import CharacterRegistry
from .export import session_to_json, session_to_markdown
from .sessions import SessionStore


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Chat with characters over a streaming generation backend."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


@main.command()
@click.option("--port", default=8080, help="Port to serve on.")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
def serve(port: int, host: str):
    """Start the HTTP API."""
    click.echo(f"Starting erebos-chat on http://{host}:{port}")
    uvicorn.run("erebos_chat.server:app", host=host, port=port, reload=False)


@main.command()
@click.option("--data", type=click.Path(path_type=Path), default=None, help="Data directory.")
def sessions(data: Path | None):
    """List stored chat sessions."""
    store = SessionStore.load(get_storage(data))
    for session in sorted(store.list_sessions(), key=lambda s: s.last_updated, reverse=True):
        click.echo(f"{session.id}  {session.last_updated:%Y-%m-%d %H:%M}  {len(session.messages):>4}  {session.name}")


@main.command()
@click.argument("session_id")
@click.option("--format", "fmt", type=click.Choice(["md", "json"]), default="md", help="Export format.")
@click.option("--data", type=click.Path(path_type=Path), default=None, help="Data directory.")
def export(session_id: str, fmt: str, data: Path | None):
    """Print a session as Markdown or JSON."""
    storage = get_storage(data)
    session = SessionStore.load(storage).get(session_id)
    if session is None:
        raise click.ClickException(f"Session not found: {session_id}")
    character = CharacterRegistry.load(storage).get(session.character_id)
    if fmt == "json":
        click.echo(session_to_json(session, character))
    else:
        click.echo(session_to_markdown(session, character))
