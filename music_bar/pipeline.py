"""
Refresh pipeline for music_bar package.

resolve artwork -> publish cover -> sample color (async) -> publish accent

Refreshes are never queued: a new refresh may start while an older one is
still waiting on its color sample. Each refresh takes a number from a
monotonically increasing token; an accent is published only if no later
refresh has changed the publication since its sample started.

Dependencies: artwork, image, colors, sink
"""
from __future__ import annotations
from typing import Any, Callable, Optional, Tuple

from .artwork import ArtworkResolver
from .colors import DEFAULT_ACCENT, Color, normalize_accent
from .image import PixelSampler
from .sink import PublicationSink
from logging_config import get_logger

logger = get_logger(__name__)

SourceGetter = Callable[[], Tuple[Any, Any]]


class RefreshPipeline:
    """
    Turns the current now-playing source into a published cover and accent.

    `source` returns the (controller, surface) pair to resolve against; the
    pipeline never holds on to either.
    """

    def __init__(
        self,
        source: SourceGetter,
        sink: PublicationSink,
        resolver: Optional[ArtworkResolver] = None,
        sampler: Optional[PixelSampler] = None,
        default_accent: Optional[Color] = None,
    ):
        self._source = source
        self.sink = sink
        self.resolver = resolver or ArtworkResolver()
        self.sampler = sampler or PixelSampler()
        self.default_accent = default_accent or DEFAULT_ACCENT

        self.token = 0              # bumped by every refresh attempt
        self._publish_token = 0     # token of the last refresh that changed the publication
        self.last_url: Optional[str] = None

    def is_current(self, token: int) -> bool:
        """True while no later refresh has republished since `token` started."""
        return token == self._publish_token

    async def refresh(self) -> None:
        """
        Resolve, publish the cover, then sample and publish the accent.

        The accent check uses _publish_token, not the live token: a refresh
        that finds the same URL bumps the token but must not drop the accent
        still being sampled for that URL.
        """
        self.token += 1
        token = self.token

        controller, surface = self._source()
        url = self.resolver.resolve(controller, surface)

        if not url:
            if self.last_url:
                logger.info("No artwork available, clearing cover")
            self._publish_token = token
            self.last_url = None
            self.sink.publish_cover(None)
            self.sink.publish_accent(self.default_accent)
            return

        # Same artwork as last time: publication is already current (or will
        # be once the in-flight sample for it lands)
        if url == self.last_url:
            return

        self._publish_token = token
        self.last_url = url
        self.sink.publish_cover(url)
        logger.info(f"Applied cover artwork {url}")

        sampled = await self.sampler.sample(url)
        if not self.is_current(token):
            logger.debug(f"Discarding superseded accent for {url} (token {token})")
            return

        accent = normalize_accent(sampled) if sampled else self.default_accent
        self.sink.publish_accent(accent)
        logger.debug(f"Applied accent {accent.to_hex()} for {url}")

    def reset(self) -> None:
        """Forget the last applied URL so the next refresh republishes."""
        self.last_url = None

    def invalidate(self) -> None:
        """Drop any in-flight accent and forget the last URL (used on teardown)."""
        self.token += 1
        self._publish_token = self.token
        self.last_url = None
