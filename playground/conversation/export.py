"""Transcript export to JSON or Markdown."""

import json
from collections.abc import Sequence

from playground.models.chat import ChatMessage

EXPORT_FORMATS = ("json", "markdown")


def to_json(messages: Sequence[ChatMessage]) -> str:
    return json.dumps(
        [m.model_dump(mode="json", by_alias=True, exclude_none=True) for m in messages],
        indent=2,
        ensure_ascii=False,
    )


def to_markdown(messages: Sequence[ChatMessage]) -> str:
    sections = []
    for message in messages:
        heading = f"## {message.role.capitalize()} ({message.timestamp})"
        body = message.content
        if message.files:
            names = ", ".join(f.name for f in message.files)
            body += f"\n\n_Attachments: {names}_"
        sections.append(f"{heading}\n\n{body}")
    return "\n\n".join(sections) + ("\n" if sections else "")


def export_transcript(messages: Sequence[ChatMessage], fmt: str = "json") -> str:
    """Render the transcript in the requested format.

    Raises:
        ValueError: If the format is not one of EXPORT_FORMATS.
    """
    if fmt == "json":
        return to_json(messages)
    if fmt == "markdown":
        return to_markdown(messages)
    raise ValueError(f"Unsupported export format: {fmt}")
