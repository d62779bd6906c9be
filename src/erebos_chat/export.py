"""Export chat sessions to Markdown and JSON formats."""

import json

from .core import Character, ChatSession


def session_to_markdown(session: ChatSession, character: Character | None = None) -> str:
    """Export a session and its messages as clean Markdown."""
    lines = [f"# {session.name}", ""]

    if character:
        lines.append(f"**Character:** {character.name}")
        if character.tagline:
            lines.append(f"**Tagline:** {character.tagline}")
    lines.append(f"**Updated:** {session.last_updated.isoformat()}")
    lines.append(f"**Messages:** {len(session.messages)}")
    if session.summary:
        lines.extend(["", "## Summary", "", session.summary])
    lines.extend(["", "---", ""])

    model_label = character.name if character else "Model"
    for msg in session.messages:
        role_label = model_label if msg.role == "model" else msg.role.capitalize()
        ts = f" ({msg.timestamp.strftime('%Y-%m-%d %H:%M')})"
        partial = " [interrupted]" if msg.partial else ""
        lines.append(f"## {role_label}{ts}{partial}")
        lines.append("")
        lines.append(msg.content)
        lines.extend(["", "---", ""])

    return "\n".join(lines)


def session_to_json(session: ChatSession, character: Character | None = None) -> str:
    """Export a session and its messages as structured JSON."""
    data = {
        "session": {
            "id": session.id,
            "name": session.name,
            "character_id": session.character_id,
            "summary": session.summary,
            "message_count": len(session.messages),
            "last_updated": session.last_updated.isoformat(),
        },
        "character": character.to_dict() if character else None,
        "messages": [msg.to_dict() for msg in session.messages],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)
