import sys
import asyncio
import argparse
from typing import Optional

import requests

from config import DEBUG, PAGE_HOST, VERSION
from logging_config import setup_logging, get_logger
from music_bar import registry
from music_bar.artwork import ArtworkResolver
from music_bar.colors import DEFAULT_ACCENT, normalize_accent
from music_bar.dom import HtmlDocument, HtmlSurface
from music_bar.engine import boot_engine
from music_bar.image import PixelSampler
from music_bar.page_host import PageController, PageHost, PageSurface
from music_bar.sink import LoggingSink, StyleSink

logger = get_logger(__name__)


def _fetch_document(url: str) -> HtmlDocument:
    response = requests.get(url, timeout=10, headers={'User-Agent': PAGE_HOST["user_agent"]})
    response.raise_for_status()
    return HtmlDocument(response.text, response.url or url)


def cmd_resolve(args) -> int:
    """Print the artwork URL a page resolves to."""
    try:
        document = _fetch_document(args.url)
    except requests.RequestException as e:
        logger.error(f"Could not fetch {args.url}: {e}")
        return 1
    url = ArtworkResolver().resolve(None, HtmlSurface(document))
    if not url:
        print("(no artwork)")
        return 1
    print(url)
    return 0


async def _sample(url: str):
    sampler = PixelSampler()
    try:
        return await sampler.sample(url)
    finally:
        sampler.close()


def cmd_accent(args) -> int:
    """Print sampled and normalized colors for an image."""
    sampled = asyncio.run(_sample(args.url))
    if sampled is None:
        print(f"sampled: (none)\naccent:  {DEFAULT_ACCENT.to_hex()} (default)")
        return 1
    print(f"sampled: {sampled.to_hex()}\naccent:  {normalize_accent(sampled).to_hex()}")
    return 0


async def _watch(url: str, metadata_file: Optional[str]) -> None:
    host = PageHost()
    registry.register_host(host)
    engine = boot_engine(sink=LoggingSink(StyleSink()))
    surface = PageSurface(url)
    controller = PageController(metadata_file)
    try:
        await surface.reload(force=True)
        host.setup_media_controller(controller, surface)
        while True:
            await asyncio.sleep(max(surface.cache_ttl, 0.5))
            await surface.reload()
            controller.check_for_changes()
    finally:
        engine.destroy()
        registry.unregister_host()
        surface.close()


def cmd_watch(args) -> int:
    """Boot the engine against a page and log publications until interrupted."""
    try:
        asyncio.run(_watch(args.url, args.metadata))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt caught, stopping...")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="music-bar-accent",
        description="Artwork cover and accent color sync for a now-playing source",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--log-level", default=None, help="Console log level (default from settings)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_resolve = sub.add_parser("resolve", help="Resolve the artwork URL of a page")
    p_resolve.add_argument("url")
    p_resolve.set_defaults(func=cmd_resolve)

    p_accent = sub.add_parser("accent", help="Sample the accent color of an image")
    p_accent.add_argument("url")
    p_accent.set_defaults(func=cmd_accent)

    p_watch = sub.add_parser("watch", help="Track a page as the now-playing source")
    p_watch.add_argument("url")
    p_watch.add_argument("--metadata", help="JSON file with track metadata (artwork, images, ...)")
    p_watch.set_defaults(func=cmd_watch)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(
        console_level=args.log_level or DEBUG.get("log_level", "INFO"),
        file_level="DEBUG" if DEBUG.get("log_detailed", False) else "INFO",
        console=DEBUG.get("log_to_console", True),
        log_file=DEBUG.get("log_file", "music_bar.log"),
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
