"""Pytest configuration and shared fixtures"""
import asyncio
import base64
import io
import os
import sys
from typing import Any, Dict, List, Optional

import pytest
from PIL import Image

# Add parent directory to path to import the project modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from music_bar import registry, state
from music_bar.dom import HtmlDocument, HtmlSurface
from music_bar.sink import PublicationSink


def png_bytes(color=(255, 0, 0, 255), size=(64, 64)) -> bytes:
    img = Image.new("RGBA", size, color)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def png_data_uri(color=(255, 0, 0, 255), size=(64, 64)) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes(color, size)).decode("ascii")


class FakeController:
    """Controller exposing metadata and recording listener (un)subscriptions."""

    def __init__(self, metadata: Any = None):
        self.metadata = metadata
        self.listeners: Dict[str, List] = {}
        self.added: List[str] = []
        self.removed: List[str] = []

    def get_metadata(self):
        return self.metadata

    def add_event_listener(self, event_type, handler):
        self.added.append(event_type)
        self.listeners.setdefault(event_type, []).append(handler)

    def remove_event_listener(self, event_type, handler):
        self.removed.append(event_type)
        handlers = self.listeners.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def fire(self, event_type, target="self"):
        event = type("Event", (), {"target": self if target == "self" else target})()
        for handler in list(self.listeners.get(event_type, [])):
            handler(event)


class RecordingSink(PublicationSink):
    """Sink recording every publication as (kind, value)."""

    def __init__(self):
        self.events = []

    def publish_cover(self, url):
        self.events.append(("cover", url))

    def publish_accent(self, color):
        self.events.append(("accent", color))

    @property
    def covers(self):
        return [v for k, v in self.events if k == "cover"]

    @property
    def accents(self):
        return [v for k, v in self.events if k == "accent"]


class FakeSampler:
    """
    Sampler whose results are released by the test.

    `gates[url]` is an asyncio.Event the sample waits on when `gated` is set;
    `colors[url]` is what it returns.
    """

    def __init__(self, colors: Optional[Dict[str, Any]] = None, gated: bool = False):
        self.colors = colors or {}
        self.gated = gated
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[str] = []

    def gate(self, url) -> asyncio.Event:
        return self.gates.setdefault(url, asyncio.Event())

    async def sample(self, url):
        self.calls.append(url)
        if self.gated:
            await self.gate(url).wait()
        return self.colors.get(url)

    def close(self):
        pass


def make_surface(html: str, url: str = "https://example.com/") -> HtmlSurface:
    return HtmlSurface(HtmlDocument(html, url))


async def settle(rounds: int = 5):
    """Let scheduled tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture(autouse=True)
def clean_registry():
    yield
    registry._handles.clear()
    registry._hosts.clear()
    state._background_tasks.clear()
