"""
Helper functions for music_bar package.
Pure utility functions with minimal dependencies.

Dependencies: state (for task tracking)
"""
from __future__ import annotations
import asyncio
from typing import Any, Iterable, Optional
from urllib.parse import urljoin

from . import state
from logging_config import get_logger

logger = get_logger(__name__)


def create_tracked_task(coro):
    """
    Create a background task with automatic cleanup and error logging.
    Prevents silent failures and ensures tasks complete even if references are lost.
    """
    task = asyncio.create_task(coro)
    state._background_tasks.add(task)

    def cleanup(t):
        state._background_tasks.discard(t)
        try:
            t.result()
        except asyncio.CancelledError:
            pass  # Expected during shutdown
        except Exception as e:
            logger.error(f"Background task failed: {e}", exc_info=True)

    task.add_done_callback(cleanup)
    return task


def resolve_url(url: Any, base_url: Optional[str] = None) -> Optional[str]:
    """
    Resolve a possibly-relative URL against the document that produced it.

    Non-string and blank input yields None. If joining fails the raw string is
    returned so one bad base never sinks the whole lookup.
    """
    if not url or not isinstance(url, str):
        return None
    url = url.strip()
    if not url:
        return None
    if not base_url:
        return url
    try:
        return urljoin(base_url, url)
    except ValueError:
        return url


def field_value(obj: Any, key: str) -> Any:
    """
    Read `key` from a mapping or an attribute object.
    Dotted keys walk nested values ("artwork.src").
    """
    current = obj
    for part in key.split("."):
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def find_first(obj: Any, keys: Iterable[str]) -> Any:
    """Return the first truthy value among `keys` on `obj`, else None."""
    if obj is None:
        return None
    for key in keys:
        value = field_value(obj, key)
        if value:
            return value
    return None

