"""FastAPI web server for erebos-chat."""

import importlib
import logging

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel, Field

from .backends import get_storage
from .client import ChatClient
from .config import get_generator_path, get_summarizer_path
from .core import Character, ChatSession, generate_id
from .export import session_to_json, session_to_markdown

logger = logging.getLogger(__name__)

app = FastAPI(title="erebos-chat", version="0.1.0")

# Client instance (created on first request)
_client: ChatClient | None = None


class CharacterIn(BaseModel):
    name: str = Field(..., min_length=1)
    tagline: str = ""
    description: str = ""
    first_message: str = ""
    avatar_url: str = ""


class ChatIn(BaseModel):
    text: str


class SettingsIn(BaseModel):
    user_name: str | None = None
    user_avatar_url: str | None = None
    model: str | None = None
    temperature: float | None = None
    max_output_tokens: int | None = None
    system_prompt: str | None = None
    thought_color: str | None = None
    dialogue_color: str | None = None


def _import_object(path: str):
    """Resolve a ``module:attribute`` path, or fail with a 503."""
    module_name, _, attr = path.partition(":")
    if not attr:
        raise HTTPException(status_code=503, detail=f"Expected 'module:attribute', got {path!r}")
    try:
        return getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        logger.error("Cannot load %s: %s", path, e)
        raise HTTPException(status_code=503, detail=f"Cannot load {path}: {e}") from e


def _get_client() -> ChatClient:
    """Lazily build and cache the process-wide chat client."""
    global _client
    if _client is None:
        generator_path = get_generator_path()
        if not generator_path:
            raise HTTPException(status_code=503, detail="No generator configured (set EREBOS_GENERATOR)")
        generator = _import_object(generator_path)()
        summarizer_path = get_summarizer_path()
        summarizer = _import_object(summarizer_path)() if summarizer_path else None
        _client = ChatClient.load(get_storage(), generator, summarizer)
        logger.info("Chat client ready with %d characters", len(_client.characters))
    return _client


def _session_to_dict(session: ChatSession) -> dict:
    data = session.to_dict()
    data["message_count"] = len(session.messages)
    return data


def _require_character(client: ChatClient, character_id: str) -> Character:
    character = client.characters.get(character_id)
    if character is None:
        raise HTTPException(status_code=404, detail="Character not found")
    return character


# ── Routes ───────────────────────────────────────────────────────


@app.get("/")
async def index():
    """Describe the API."""
    return {
        "name": "erebos-chat",
        "endpoints": [
            "/api/characters",
            "/api/session",
            "/api/chat",
            "/api/chat/stop",
            "/api/status",
            "/api/notifications",
            "/api/settings",
            "/api/export/{session_id}",
        ],
    }


@app.get("/api/characters")
async def list_characters(search: str | None = Query(None, description="Search name, tagline, description")):
    client = _get_client()
    characters = client.characters.search(search) if search else client.characters.list_characters()
    return [c.to_dict() for c in characters]


@app.post("/api/characters", status_code=201)
async def create_character(body: CharacterIn):
    client = _get_client()
    character = Character(id=generate_id(), **body.model_dump())
    client.save_character(character)
    return character.to_dict()


@app.put("/api/characters/{character_id}")
async def update_character(character_id: str, body: CharacterIn):
    client = _get_client()
    _require_character(client, character_id)
    character = Character(id=character_id, **body.model_dump())
    client.save_character(character)
    return character.to_dict()


@app.delete("/api/characters/{character_id}")
async def delete_character(character_id: str):
    client = _get_client()
    if not client.delete_character(character_id):
        raise HTTPException(status_code=404, detail="Character not found")
    return {"deleted": character_id}


@app.post("/api/characters/{character_id}/select")
async def select_character(character_id: str):
    client = _get_client()
    session = client.select_character(character_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Character not found")
    return _session_to_dict(session)


@app.get("/api/session")
async def current_session():
    session = _get_client().current_session
    if session is None:
        raise HTTPException(status_code=404, detail="No active session")
    return _session_to_dict(session)


@app.post("/api/chat")
async def send_message(body: ChatIn):
    """Send a message and wait for the streamed reply to finish."""
    client = _get_client()
    outcome = await client.send_message(body.text)
    session = client.current_session
    return {
        "outcome": outcome.value,
        "session": _session_to_dict(session) if session else None,
    }


@app.post("/api/chat/stop")
async def stop_generation():
    return {"stopped": _get_client().stop_generation()}


@app.get("/api/status")
async def status():
    client = _get_client()
    return {
        "generating": client.is_generating,
        "session_id": client.sessions.active_session_id,
        "character_id": client.active_character_id,
    }


@app.get("/api/notifications")
async def notifications():
    return [t.to_dict() for t in _get_client().toasts]


@app.get("/api/settings")
async def get_settings():
    return _get_client().settings.to_dict()


@app.put("/api/settings")
async def put_settings(body: SettingsIn):
    settings = _get_client().update_settings(**body.model_dump(exclude_none=True))
    return settings.to_dict()


@app.get("/api/export/{session_id}")
async def export_session(
    session_id: str,
    format: str = Query("md", description="Export format: md or json"),
):
    """Export a session as Markdown or JSON."""
    client = _get_client()
    session = client.sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    character = client.characters.get(session.character_id)

    safe_title = "".join(c if c.isalnum() or c in "-_ " else "" for c in session.name)[:50]

    if format == "json":
        content = session_to_json(session, character)
        return Response(
            content=content,
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{safe_title}.json"'},
        )
    else:
        content = session_to_markdown(session, character)
        return Response(
            content=content,
            media_type="text/markdown",
            headers={"Content-Disposition": f'attachment; filename="{safe_title}.md"'},
        )
