"""
Static helper functions for the step engine.
"""

import inspect
import re
from typing import Any


def truncate_str_for_log(value: Any, *, max_chars: int = 800) -> str:
    """Truncate a string value for logging."""
    text = str(value if value is not None else "")
    if len(text) > max_chars:
        return text[:max_chars] + "…[truncated]"
    return text


def preview_query_for_log(query: str, *, max_chars: int = 2000) -> str:
    """Preview a query for logging, collapsing whitespace."""
    q = re.sub(r"\s+", " ", str(query or "")).strip()
    if len(q) > max_chars:
        return q[:max_chars] + "…[truncated]"
    return q


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if a callback handed back an awaitable, else return it."""
    if inspect.isawaitable(value):
        return await value
    return value
