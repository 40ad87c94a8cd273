"""
Publication sinks for music_bar package.

A sink receives the two outputs of a refresh - the cover URL and the accent
color - and reflects them in some presentation layer. StyleSink writes them
as CSS custom properties and marker attributes on a root element.

Dependencies: colors
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, Optional

import config
from .colors import Color
from logging_config import get_logger

logger = get_logger(__name__)


class PublicationSink(ABC):
    """Receives cover URLs and accent colors."""

    @abstractmethod
    def publish_cover(self, url: Optional[str]) -> None:
        """Show `url` as the current cover, or hide the cover for None."""

    @abstractmethod
    def publish_accent(self, color: Optional[Color]) -> None:
        """Show `color` as the current accent, or drop the accent for None."""

    def clear(self) -> None:
        """Remove everything this sink has published."""
        self.publish_cover(None)
        self.publish_accent(None)


class StyleRoot:
    """
    In-memory stand-in for a document root: a style property map and an
    attribute map, mirroring element.style.setProperty / setAttribute.
    """

    def __init__(self):
        self.style: Dict[str, str] = {}
        self.attributes: Dict[str, str] = {}

    def set_property(self, name: str, value: str) -> None:
        self.style[name] = value

    def remove_property(self, name: str) -> None:
        self.style.pop(name, None)

    def get_property(self, name: str) -> Optional[str]:
        return self.style.get(name)

    def set_attribute(self, name: str, value: str) -> None:
        self.attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)


class StyleSink(PublicationSink):
    """Publishes cover/accent as CSS variables on a root element."""

    def __init__(self, root: Optional[StyleRoot] = None, names: Optional[Dict] = None):
        self.root = root if root is not None else StyleRoot()
        self.names = dict(config.STYLE, **(names or {}))

    def publish_cover(self, url: Optional[str]) -> None:
        n = self.names
        if not url:
            self.root.remove_property(n["var_cover"])
            self.root.set_property(n["var_cover_opacity"], "0")
            self.root.remove_attribute(n["cover_active_attr"])
            return
        escaped = url.replace('"', '\\"')
        self.root.set_property(n["var_cover"], f'url("{escaped}")')
        self.root.set_property(n["var_cover_opacity"], "1")
        self.root.set_attribute(n["cover_active_attr"], "true")

    def publish_accent(self, color: Optional[Color]) -> None:
        n = self.names
        if color is None:
            for var in (n["var_accent"], n["var_accent_dim"], n["var_accent_glow"]):
                self.root.remove_property(var)
            self.root.remove_attribute(n["accent_active_attr"])
            return
        self.root.set_property(n["var_accent"], color.to_css())
        self.root.set_property(n["var_accent_dim"], color.to_css(n["dim_alpha"]))
        self.root.set_property(n["var_accent_glow"], color.to_css(n["glow_alpha"]))
        self.root.set_attribute(n["accent_active_attr"], "true")

    def mark_running(self, version: str) -> None:
        self.root.set_attribute(self.names["run_attr"], version)

    def clear(self) -> None:
        super().clear()
        self.root.remove_property(self.names["var_cover_opacity"])
        self.root.remove_attribute(self.names["run_attr"])


class LoggingSink(PublicationSink):
    """Logs publications; used by the CLI `watch` command."""

    def __init__(self, inner: Optional[PublicationSink] = None):
        self.inner = inner

    def publish_cover(self, url: Optional[str]) -> None:
        logger.info(f"Cover: {url or '(none)'}")
        if self.inner is not None:
            self.inner.publish_cover(url)

    def publish_accent(self, color: Optional[Color]) -> None:
        logger.info(f"Accent: {color.to_hex() if color else '(none)'}")
        if self.inner is not None:
            self.inner.publish_accent(color)

    def clear(self) -> None:
        if self.inner is not None:
            self.inner.clear()
