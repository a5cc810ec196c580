"""Helpers shared by the VoIPmonitor tools."""

from typing import Any

from cdr_assistant.errors import CdrAssistantError


def resolve_limit(value: Any, default: int) -> int:
    """Requested result count, falling back to ``default`` when unset or not positive."""
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default
    return limit if limit > 0 else default


def error_text(error: BaseException) -> str:
    if isinstance(error, CdrAssistantError):
        return error.message
    return str(error) or "Unknown error"
