"""Reply extraction from the response shapes upstream providers return.

Each extractor takes the parsed upstream JSON and returns a string, or
None when its shape does not match. `extract_reply` tries them in order
and the first non-empty string wins.
"""

from collections.abc import Callable
from typing import Any

Extractor = Callable[[Any], str | None]


def _first(items: Any) -> Any:
    if isinstance(items, list) and items:
        return items[0]
    return None


def _string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def chat_message_content(data: Any) -> str | None:
    """`{"choices": [{"message": {"content": ...}}]}`"""
    if not isinstance(data, dict):
        return None
    choice = _first(data.get("choices"))
    if not isinstance(choice, dict) or not isinstance(choice.get("message"), dict):
        return None
    return _string(choice["message"].get("content"))


def completion_text(data: Any) -> str | None:
    """`{"choices": [{"text": ...}]}`"""
    if not isinstance(data, dict):
        return None
    choice = _first(data.get("choices"))
    if not isinstance(choice, dict):
        return None
    return _string(choice.get("text"))


def structured_output_text(data: Any) -> str | None:
    """`{"output": [{"content": {"text": ...}}]}`"""
    if not isinstance(data, dict):
        return None
    item = _first(data.get("output"))
    if not isinstance(item, dict) or not isinstance(item.get("content"), dict):
        return None
    return _string(item["content"].get("text"))


def plain_string(data: Any) -> str | None:
    return _string(data)


def raw_text(data: Any) -> str | None:
    """Body that was not JSON, wrapped as `{"rawText": ...}`."""
    if not isinstance(data, dict):
        return None
    return _string(data.get("rawText"))


EXTRACTORS: list[Extractor] = [
    chat_message_content,
    completion_text,
    structured_output_text,
    plain_string,
    raw_text,
]


def extract_reply(data: Any, extractors: list[Extractor] = EXTRACTORS) -> str:
    for extractor in extractors:
        reply = extractor(data)
        if reply:
            return reply
    return ""
