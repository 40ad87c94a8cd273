"""
MusicBar Accent - artwork cover and accent color sync for a now-playing source.

The internal structure is:
    state.py      - Constants from config, background task tracker
    helpers.py    - Tracked tasks, URL resolution, field lookup
    colors.py     - RGB/HSL model and accent normalization
    image.py      - Artwork loading and pixel sampler
    selectors.py  - Versioned per-site selector configuration
    dom.py        - BeautifulSoup document adapters
    artwork.py    - Layered artwork resolver
    sink.py       - Publication sinks
    pipeline.py   - Refresh pipeline (token-guarded)
    binding.py    - Attach/detach reconciliation loop
    hook.py       - Host hook wrapper and discovery loop
    registry.py   - Process-wide handles and hosts
    engine.py     - Engine lifecycle
    page_host.py  - Web page backed host
"""

# --- Level 0: State ---
from .state import VERSION, HANDLE_NAME

# --- Level 1: Pure pieces ---
from .helpers import create_tracked_task, resolve_url
from .colors import (
    Color,
    DEFAULT_ACCENT,
    clamp,
    rgb_to_hsl,
    hsl_to_rgb,
    normalize_accent,
)
from .image import PixelSampler, sample_dominant_color, fetch_image_bytes
from .selectors import SelectorConfig, SiteSelectors, load_selector_config
from .dom import HtmlDocument, HtmlElement, HtmlSurface

# --- Level 2: Resolution and publication ---
from .artwork import ArtworkCandidate, ArtworkResolver, pick_artwork_url, resolve_artwork
from .sink import PublicationSink, StyleRoot, StyleSink, LoggingSink
from .pipeline import RefreshPipeline

# --- Level 3: Lifecycle ---
from .binding import SourceBinding
from .hook import HostHook, ControllerDiscovery
from .registry import register_host, unregister_host
from .engine import MusicBarAccent, boot_engine, get_engine

__all__ = [
    'VERSION', 'HANDLE_NAME',
    'create_tracked_task', 'resolve_url',
    'Color', 'DEFAULT_ACCENT', 'clamp', 'rgb_to_hsl', 'hsl_to_rgb', 'normalize_accent',
    'PixelSampler', 'sample_dominant_color', 'fetch_image_bytes',
    'SelectorConfig', 'SiteSelectors', 'load_selector_config',
    'HtmlDocument', 'HtmlElement', 'HtmlSurface',
    'ArtworkCandidate', 'ArtworkResolver', 'pick_artwork_url', 'resolve_artwork',
    'PublicationSink', 'StyleRoot', 'StyleSink', 'LoggingSink',
    'RefreshPipeline',
    'SourceBinding',
    'HostHook', 'ControllerDiscovery',
    'register_host', 'unregister_host',
    'MusicBarAccent', 'boot_engine', 'get_engine',
]
