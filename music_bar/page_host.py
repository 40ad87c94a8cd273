"""
A host that serves a web page as the now-playing source.

PageHost exposes the setup_media_controller(controller, surface) hook the
engine looks for. PageController reads track metadata from an optional JSON
file and fires "metadatachange" when the file changes. PageSurface keeps the
last fetched copy of a page; reload() refetches it off the event loop so
content_document itself never blocks.

Dependencies: dom
"""
from __future__ import annotations
import asyncio
import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import requests

import config
from .dom import HtmlDocument
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ControllerEvent:
    type: str
    target: Any = None


class PageController:
    """Controller whose metadata comes from a JSON file (or nowhere)."""

    def __init__(self, metadata_file: Optional[str] = None):
        self.metadata_file = Path(metadata_file) if metadata_file else None
        self._listeners: Dict[str, List[Callable]] = {}
        self._last_mtime: Optional[float] = self._mtime()

    def _mtime(self) -> Optional[float]:
        if self.metadata_file is None:
            return None
        try:
            return self.metadata_file.stat().st_mtime
        except OSError:
            return None

    def get_metadata(self) -> Optional[Dict]:
        if self.metadata_file is None:
            return None
        try:
            with open(self.metadata_file, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.debug(f"Metadata file unreadable: {e}")
            return None

    def add_event_listener(self, event_type: str, handler: Callable) -> None:
        handlers = self._listeners.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def remove_event_listener(self, event_type: str, handler: Callable) -> None:
        handlers = self._listeners.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, []))

    def dispatch_event(self, event_type: str) -> None:
        event = ControllerEvent(event_type, self)
        for handler in list(self._listeners.get(event_type, [])):
            handler(event)

    def check_for_changes(self) -> bool:
        """Fire metadatachange if the metadata file changed since last check."""
        mtime = self._mtime()
        if mtime == self._last_mtime:
            return False
        self._last_mtime = mtime
        self.dispatch_event("metadatachange")
        return True


class PageSurface:
    """Surface over a remote page, refetched at most once per cache_ttl."""

    def __init__(self, url: str, session: Optional[requests.Session] = None, cache_ttl: Optional[float] = None):
        self.url = url
        self.cache_ttl = config.PAGE_HOST["cache_ttl"] if cache_ttl is None else cache_ttl
        self._session = session or requests.Session()
        self._document: Optional[HtmlDocument] = None
        self._fetched_at = 0.0

    @property
    def content_document(self) -> Optional[HtmlDocument]:
        return self._document

    def _fetch_sync(self) -> HtmlDocument:
        headers = {'User-Agent': config.PAGE_HOST["user_agent"]}
        response = self._session.get(self.url, timeout=10, headers=headers)
        response.raise_for_status()
        return HtmlDocument(response.text, response.url or self.url)

    async def reload(self, force: bool = False) -> bool:
        """Refetch the page if the cached copy expired. True if it was replaced."""
        if not force and self._document is not None and time.monotonic() - self._fetched_at < self.cache_ttl:
            return False
        loop = asyncio.get_running_loop()
        try:
            document = await loop.run_in_executor(None, self._fetch_sync)
        except requests.RequestException as e:
            logger.warning(f"Page fetch failed for {self.url}: {e}")
            return False
        self._document = document
        self._fetched_at = time.monotonic()
        return True

    def close(self) -> None:
        self._session.close()


class PageHost:
    """Host object carrying the setup hook and the currently active source."""

    def __init__(self):
        self._current_media_controller: Any = None
        self._current_browser: Any = None

    def setup_media_controller(self, controller: Any, surface: Any = None) -> None:
        self._current_media_controller = controller
        self._current_browser = surface
