"""
Image utilities for music_bar package.
Handles artwork loading and the saturation-weighted pixel sampler.

Dependencies: state (constants), colors, helpers
"""
from __future__ import annotations
import asyncio
import base64
import io
import os
from typing import Callable, Optional
from urllib.parse import unquote_to_bytes, urlparse
from urllib.request import url2pathname

import requests
from PIL import Image

from . import state
from .colors import Color
import config
from logging_config import get_logger

logger = get_logger(__name__)


def _convert_spotify_image_uri(url: str) -> str:
    """
    Convert spotify:image:xxx URI to HTTPS URL.

    Format: spotify:image:ab67616d00001e02xxx -> https://i.scdn.co/image/ab67616d00001e02xxx
    """
    if url and url.startswith('spotify:image:'):
        image_id = url.replace('spotify:image:', '')
        return f'https://i.scdn.co/image/{image_id}'
    return url


def _decode_data_uri(url: str) -> bytes:
    """Decode a data: URI payload (base64 or percent-encoded)."""
    header, sep, payload = url[5:].partition(',')
    if not sep:
        raise ValueError("Malformed data URI")
    if header.endswith(';base64'):
        return base64.b64decode(payload)
    return unquote_to_bytes(payload)


def fetch_image_bytes(url: str, timeout: float = None, session: Optional[requests.Session] = None) -> bytes:
    """
    Load raw image bytes for `url`. Blocking - run it in an executor.

    Supports http(s), data: URIs, file:// URLs and plain filesystem paths.
    Raises on any failure; the sampler turns failures into "no sample".
    """
    url = _convert_spotify_image_uri(url)
    if url.startswith('data:'):
        return _decode_data_uri(url)

    parsed = urlparse(url)
    if parsed.scheme in ('http', 'https'):
        http = session or requests
        headers = {'User-Agent': config.PAGE_HOST["user_agent"]}
        response = http.get(url, timeout=timeout or state.DOWNLOAD_TIMEOUT, headers=headers)
        response.raise_for_status()
        return response.content

    if parsed.scheme == 'file':
        path = url2pathname(parsed.path)
    elif os.path.exists(url):
        path = url
    else:
        raise ValueError(f"Unsupported artwork URL scheme: {parsed.scheme or url!r}")

    with open(path, 'rb') as f:
        return f.read()


def sample_dominant_color(
    data: bytes,
    stride: int = None,
    alpha_threshold: int = None,
    base_weight: float = None,
) -> Optional[Color]:
    """
    Saturation-weighted average over an RGBA pixel buffer.

    Every `stride`-th pixel is visited; pixels with alpha below the threshold are
    skipped. Each pixel weighs `base_weight + saturation` so vivid colors pull the
    average away from grey backgrounds. Returns None when nothing was counted.
    """
    stride = stride or state.PIXEL_STRIDE
    alpha_threshold = state.ALPHA_THRESHOLD if alpha_threshold is None else alpha_threshold
    base_weight = state.BASE_WEIGHT if base_weight is None else base_weight

    r_sum = g_sum = b_sum = total = 0.0
    for i in range(0, len(data) - 3, stride * 4):
        if data[i + 3] < alpha_threshold:
            continue
        pr, pg, pb = data[i], data[i + 1], data[i + 2]
        high = max(pr, pg, pb)
        low = min(pr, pg, pb)
        saturation = (high - low) / high if high else 0.0
        weight = base_weight + saturation
        r_sum += pr * weight
        g_sum += pg * weight
        b_sum += pb * weight
        total += weight

    if not total:
        return None
    return Color(r_sum / total, g_sum / total, b_sum / total)


class PixelSampler:
    """
    Derives one representative color per artwork URL.

    Download and decode run in a worker thread. Drawing onto the shared canvas
    and reading it back happens on the event loop thread, so the canvas only
    ever has one writer even when several samples are in flight.
    """

    def __init__(
        self,
        canvas_size: int = None,
        loader: Callable[[str], bytes] = None,
    ):
        self.canvas_size = canvas_size or state.CANVAS_SIZE
        self._loader = loader
        # Exists before any executor thread calls _load
        self._session: Optional[requests.Session] = requests.Session() if loader is None else None
        self._canvas: Optional[Image.Image] = None

    def _load(self, url: str) -> bytes:
        if self._loader is not None:
            return self._loader(url)
        return fetch_image_bytes(url, session=self._session)

    def _decode_sync(self, url: str) -> Optional[Image.Image]:
        """Fetch + decode + scale to canvas size. Runs in a thread executor."""
        data = self._load(url)
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if not img.width or not img.height:
                return None
            size = (self.canvas_size, self.canvas_size)
            return img.convert("RGBA").resize(size, Image.Resampling.BILINEAR)

    def _ensure_canvas(self) -> Image.Image:
        if self._canvas is None:
            self._canvas = Image.new("RGBA", (self.canvas_size, self.canvas_size))
        return self._canvas

    def _draw(self, scaled: Image.Image) -> bytes:
        canvas = self._ensure_canvas()
        canvas.paste((0, 0, 0, 0), (0, 0, self.canvas_size, self.canvas_size))
        canvas.alpha_composite(scaled)
        return canvas.tobytes()

    async def sample(self, url: Optional[str]) -> Optional[Color]:
        """Return the weighted-average color of `url`, or None if it cannot be read."""
        if not url:
            return None
        try:
            loop = asyncio.get_running_loop()
            scaled = await loop.run_in_executor(None, self._decode_sync, url)
            if scaled is None:
                logger.debug(f"Artwork has no pixels: {url}")
                return None
            return sample_dominant_color(self._draw(scaled))
        except Exception as e:
            logger.debug(f"Color sampling failed for {url}: {e}")
            return None

    def close(self) -> None:
        # Session pools reopen on the next request after close()
        if self._session is not None:
            self._session.close()
        self._canvas = None
