"""
Artwork resolution for music_bar package.

Finds the best artwork URL for whatever the bound controller is playing, in
three tiers, first non-empty wins:

    1. Structured metadata from the controller (scalar fields, then the
       largest candidate from list fields)
    2. Site-specific DOM lookup on the surface's document
    3. Generic document meta tags (og:image, twitter:image, image_src)

Every tier swallows its own failures (missing fields, detached or
cross-origin documents) and falls through to the next one.

Dependencies: helpers, selectors
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from .helpers import field_value, resolve_url
from .selectors import SelectorConfig, load_selector_config
from logging_config import get_logger

logger = get_logger(__name__)

# Scalar URL fields, highest priority first. Snake-case aliases serve Python hosts.
DIRECT_FIELDS = (
    "artworkUrl",
    "artwork_url",
    "coverUrl",
    "cover_url",
    "image",
    "thumbnail",
    "albumArt",
    "album_art",
    "artwork.src",
)

# Candidate-list fields, highest priority first
LIST_FIELDS = ("artwork", "images", "pictures")

_BACKGROUND_URL_RE = re.compile(r"""url\(["']?(.*?)["']?\)""")


# =============================================================================
# Metadata candidates
# =============================================================================

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_dimension(text: str) -> float:
    try:
        return float(text)
    except (TypeError, ValueError):
        return 0.0


@dataclass
class ArtworkCandidate:
    """One entry of a metadata artwork list."""
    source: Optional[str]
    width: Any = None
    height: Any = None
    sizes: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: Any) -> Optional["ArtworkCandidate"]:
        if entry is None or isinstance(entry, (str, bytes, int, float)):
            return None
        source = field_value(entry, "src") or field_value(entry, "url")
        return cls(
            source=source if isinstance(source, str) else None,
            width=field_value(entry, "width"),
            height=field_value(entry, "height"),
            sizes=field_value(entry, "sizes"),
        )

    @property
    def area(self) -> float:
        """
        width*height when both are numbers, else the largest "WxH" token in
        `sizes` ("64x64 128x128" -> 16384). Unparseable sizes score 0.
        """
        if _is_number(self.width) and _is_number(self.height):
            return self.width * self.height
        raw = str(self.sizes or "").strip()
        best = 0.0
        for chunk in raw.split():
            parts = chunk.lower().split("x")
            w = _parse_dimension(parts[0])
            h = _parse_dimension(parts[1]) if len(parts) > 1 else 0.0
            best = max(best, w * h)
        return best


def pick_artwork_url(entries: Any, base_url: Optional[str] = None) -> Optional[str]:
    """
    Pick the largest-area candidate with a usable source.

    sorted() is stable, so equal areas keep their list order.
    """
    if not isinstance(entries, (list, tuple)) or not entries:
        return None
    candidates = [c for c in (ArtworkCandidate.from_entry(e) for e in entries) if c]
    for candidate in sorted(candidates, key=lambda c: c.area, reverse=True):
        if candidate.source and candidate.source.strip():
            return resolve_url(candidate.source, base_url)
    return None


def metadata_artwork_url(metadata: Any, base_url: Optional[str] = None) -> Optional[str]:
    if not metadata:
        return None

    for key in DIRECT_FIELDS:
        candidate = field_value(metadata, key)
        if isinstance(candidate, str) and candidate.strip():
            return resolve_url(candidate, base_url)

    for key in LIST_FIELDS:
        url = pick_artwork_url(field_value(metadata, key), base_url)
        if url:
            return url
    return None


# =============================================================================
# DOM helpers
# =============================================================================

def get_document(surface: Any) -> Any:
    """surface.content_document, else surface.content_window.document."""
    if surface is None:
        return None
    doc = getattr(surface, "content_document", None)
    if doc is None:
        window = getattr(surface, "content_window", None)
        doc = getattr(window, "document", None)
    return doc


def document_href(doc: Any) -> Optional[str]:
    return getattr(getattr(doc, "location", None), "href", None) or None


def document_host(doc: Any) -> str:
    return getattr(getattr(doc, "location", None), "host", None) or ""


def parse_srcset(value: Optional[str]) -> Optional[str]:
    """Last (highest-priority) URL of a srcset attribute."""
    if not value:
        return None
    parts = [entry.strip().split(" ")[0] for entry in value.split(",")]
    parts = [p for p in parts if p]
    return parts[-1] if parts else None


def extract_background_url(value: Optional[str]) -> Optional[str]:
    """URL inside a CSS background-image value, or None for 'none'/empty."""
    if not value or value == "none":
        return None
    match = _BACKGROUND_URL_RE.search(value)
    return match.group(1) if match and match.group(1) else None


def element_image_url(el: Any) -> Optional[str]:
    """
    <img>: rendered source, then src, then the srcset's last entry.
    Anything else: background-image from computed style, then inline style.
    """
    if el is None:
        return None
    if str(getattr(el, "tag_name", "")).upper() == "IMG":
        return (
            getattr(el, "current_src", None)
            or getattr(el, "src", None)
            or parse_srcset(el.get_attribute("srcset"))
        )
    return (
        extract_background_url(el.computed_style("background-image"))
        or extract_background_url(el.inline_style("background-image"))
    )


def image_from_selectors(doc: Any, selectors: Iterable[str]) -> Optional[str]:
    for selector in selectors:
        url = element_image_url(doc.query_selector(selector))
        if url:
            return url
    return None


def meta_image_url(doc: Any, selectors: Iterable[str]) -> Optional[str]:
    for selector in selectors:
        node = doc.query_selector(selector)
        if node is None:
            continue
        url = node.get_attribute("content") or node.get_attribute("href")
        if url:
            return url
    return None


# =============================================================================
# Resolver
# =============================================================================

class ArtworkResolver:
    """Layered artwork lookup. Synchronous and never raises."""

    def __init__(self, selector_config: Optional[SelectorConfig] = None):
        self._selector_config = selector_config

    @property
    def selector_config(self) -> SelectorConfig:
        if self._selector_config is None:
            self._selector_config = load_selector_config()
        return self._selector_config

    def resolve(self, controller: Any, surface: Any) -> Optional[str]:
        doc = self._document(surface)
        return (
            self.from_metadata(controller, doc)
            or self.from_site(doc)
            or self.from_meta_tags(doc)
        )

    def _document(self, surface: Any) -> Any:
        try:
            return get_document(surface)
        except Exception as e:
            logger.debug(f"Surface document unavailable: {e}")
            return None

    def from_metadata(self, controller: Any, doc: Any = None) -> Optional[str]:
        getter = getattr(controller, "get_metadata", None)
        if not callable(getter):
            return None
        try:
            return metadata_artwork_url(getter(), document_href(doc))
        except Exception as e:
            logger.debug(f"Metadata artwork lookup failed: {e}")
            return None

    def from_site(self, doc: Any) -> Optional[str]:
        if doc is None:
            return None
        try:
            site, selectors = self.selector_config.for_host(document_host(doc))
            url = image_from_selectors(doc, selectors)
            if url and site is not None:
                logger.debug(f"Artwork found via {site.name} selectors")
            return resolve_url(url, document_href(doc))
        except Exception as e:
            logger.warning(f"DOM artwork lookup failed: {e}")
            return None

    def from_meta_tags(self, doc: Any) -> Optional[str]:
        if doc is None:
            return None
        try:
            url = meta_image_url(doc, self.selector_config.meta)
            return resolve_url(url, document_href(doc))
        except Exception as e:
            logger.warning(f"Meta artwork lookup failed: {e}")
            return None


def resolve_artwork(controller: Any, surface: Any) -> Optional[str]:
    """Module-level convenience using the configured selectors."""
    return ArtworkResolver().resolve(controller, surface)
