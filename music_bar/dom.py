"""
Document adapters over BeautifulSoup.

The resolver talks to documents through a small browser-like surface
(location, query_selector, element src/attributes/styles). These adapters
provide that surface for parsed HTML so fetched pages and test fixtures can
stand in for a live browser document.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Union
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from .helpers import resolve_url


@dataclass(frozen=True)
class Location:
    href: str
    host: str

    @classmethod
    def from_url(cls, url: Optional[str]) -> "Location":
        url = url or ""
        return cls(href=url, host=urlparse(url).netloc)


def parse_inline_style(style: Optional[str]) -> Dict[str, str]:
    """Split a style attribute into {property: value}. Later declarations win."""
    declarations = {}
    if not style:
        return declarations
    # Split on ';' outside of parentheses so data: URLs inside url() survive
    depth = 0
    current = []
    chunks = []
    for ch in style:
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth = max(0, depth - 1)
        if ch == ';' and depth == 0:
            chunks.append(''.join(current))
            current = []
        else:
            current.append(ch)
    chunks.append(''.join(current))

    for chunk in chunks:
        name, sep, value = chunk.partition(':')
        if sep and name.strip():
            declarations[name.strip().lower()] = value.strip()
    return declarations


class HtmlElement:
    """Element view with the subset of DOM properties the resolver reads."""

    def __init__(self, tag: Tag, document: "HtmlDocument"):
        self._tag = tag
        self._document = document

    @property
    def tag_name(self) -> str:
        return self._tag.name.upper()

    @property
    def current_src(self) -> Optional[str]:
        # Static markup is never rendered, so there is no current source
        return None

    @property
    def src(self) -> Optional[str]:
        return resolve_url(self.get_attribute("src"), self._document.location.href)

    def get_attribute(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def inline_style(self, prop: str) -> Optional[str]:
        return parse_inline_style(self.get_attribute("style")).get(prop.lower())

    def computed_style(self, prop: str) -> Optional[str]:
        # Without a layout engine the only cascade available is inline declarations
        return self.inline_style(prop)

    def __repr__(self):
        return f"<HtmlElement {self._tag.name}>"


class HtmlDocument:
    """A parsed page plus the URL it was loaded from."""

    def __init__(self, markup: Union[str, bytes, BeautifulSoup], url: Optional[str] = None):
        if isinstance(markup, BeautifulSoup):
            self.soup = markup
        else:
            self.soup = BeautifulSoup(markup, "lxml")
        self.location = Location.from_url(url)

    def query_selector(self, selector: str) -> Optional[HtmlElement]:
        tag = self.soup.select_one(selector)
        return HtmlElement(tag, self) if tag is not None else None


class HtmlSurface:
    """Minimal surface exposing one document as `content_document`."""

    def __init__(self, document: Optional[HtmlDocument] = None):
        self.content_document = document
