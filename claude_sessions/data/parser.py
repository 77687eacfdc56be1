"""Per-session JSONL parsing.

A session log holds one JSON record per line. Only genuine user prompts
count towards the message total: meta records, slash-command echoes,
caveat banners and tool results are ignored.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator, Optional, Tuple

from claude_sessions.data.errors import ParseError
from claude_sessions.data.models import Metadata

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
SKIPPED_PREFIXES = ("Caveat:", "<command", "<local-command")


def iter_records(path: Path) -> Iterator[dict]:
    """Yield each decodable JSON object in the file, skipping bad lines.

    Raises:
        OSError: If the file cannot be opened.
    """
    with open(path, encoding="utf-8", errors="replace") as file:
        for lineno, line in enumerate(file, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = _decode_line(path, lineno, line)
            except ParseError as exc:
                logger.debug("Skipping line: %s", exc)
                continue
            yield record


def _decode_line(path: Path, lineno: int, line: str) -> dict:
    try:
        record = json.loads(line)
    except json.JSONDecodeError as exc:
        raise ParseError(path, lineno, exc.msg) from exc
    if not isinstance(record, dict):
        raise ParseError(path, lineno, "record is not an object")
    return record


def extract_text(content: Any) -> str:
    """Flatten message content: a plain string, or the `text` blocks of a list."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            block["text"]
            for block in content
            if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str)
        )
    return ""


def record_role(record: dict) -> Optional[str]:
    """Return 'user' or 'assistant' for conversational records, None for the rest."""
    message = record.get("message")
    candidates = [record.get("type"), record.get("role")]
    if isinstance(message, dict):
        candidates.append(message.get("role"))
    for role in candidates:
        if role in (ROLE_USER, ROLE_ASSISTANT):
            return role
    return None


def record_text(record: dict) -> str:
    message = record.get("message")
    if isinstance(message, dict):
        return extract_text(message.get("content"))
    # Flat records carry content at the top level
    return extract_text(record.get("content"))


def _is_noise(text: str) -> bool:
    stripped = text.strip()
    return not stripped or stripped.startswith(SKIPPED_PREFIXES)


def user_message_text(record: dict) -> Optional[str]:
    """Return the prompt text if `record` is a genuine user message, else None."""
    if record_role(record) != ROLE_USER:
        return None
    if record.get("isMeta") is True:
        return None
    text = record_text(record)
    if _is_noise(text):
        return None
    return text


def parse_session_file(path: Path) -> Metadata:
    """Derive message count, first user message and embedded title from a log.

    Raises:
        OSError: If the file cannot be read.
    """
    count = 0
    first: Optional[str] = None
    title: Optional[str] = None

    for record in iter_records(path):
        text = user_message_text(record)
        if text is not None:
            count += 1
            if first is None:
                first = text.replace("\n", " ")

        custom_title = record.get("customTitle")
        if isinstance(custom_title, str) and custom_title:
            title = custom_title

    return Metadata(message_count=count, first_message=first, custom_name=title)


def iter_turns(path: Path) -> Iterator[Tuple[str, str]]:
    """Yield (role, text) for every user and assistant turn in file order.

    Assistant turns with no text (pure tool calls) and filtered user
    records are skipped.
    """
    for record in iter_records(path):
        role = record_role(record)
        if role == ROLE_USER:
            text = user_message_text(record)
        elif role == ROLE_ASSISTANT:
            text = record_text(record)
            if _is_noise(text):
                text = None
        else:
            continue
        if text is not None:
            yield role, text.strip()
