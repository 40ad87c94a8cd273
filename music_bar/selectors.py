"""
Per-site artwork selectors.

Page structures of third-party players drift, so the selector lists live in a
versioned JSON file (music_bar/selectors.json by default, overridable through
the artwork.selectors_file setting) instead of in code.
"""
from __future__ import annotations
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import config
from logging_config import get_logger

logger = get_logger(__name__)

BUNDLED_SELECTORS_FILE = Path(__file__).parent / "selectors.json"


@dataclass
class SiteSelectors:
    name: str
    host: str
    selectors: List[str] = field(default_factory=list)
    meta_only: bool = False

    def matches(self, host: str) -> bool:
        return bool(host) and self.host in host


@dataclass
class SelectorConfig:
    version: int
    sites: List[SiteSelectors]
    generic: List[str]
    meta: List[str]

    def for_host(self, host: str) -> Tuple[Optional[SiteSelectors], List[str]]:
        """
        Pick the element selectors for a document host.

        Sites are checked in file order, so more specific hosts
        (music.youtube.com) must come before broader ones (youtube.com).
        Returns (site or None, selectors); meta-only sites return [].
        """
        for site in self.sites:
            if site.matches(host):
                return site, ([] if site.meta_only else list(site.selectors))
        return None, list(self.generic)

    @classmethod
    def from_dict(cls, data: Dict) -> "SelectorConfig":
        sites = [
            SiteSelectors(
                name=entry.get("name") or entry["host"],
                host=entry["host"],
                selectors=list(entry.get("selectors") or []),
                meta_only=bool(entry.get("meta_only", False)),
            )
            for entry in data.get("sites") or []
        ]
        return cls(
            version=int(data.get("version", 1)),
            sites=sites,
            generic=list(data.get("generic") or []),
            meta=list(data.get("meta") or []),
        )


_cache: Dict[str, SelectorConfig] = {}


def load_selector_config(path: Optional[str] = None) -> SelectorConfig:
    """
    Load (and memoize) a selector file.

    A missing or malformed override falls back to the bundled file with a warning.
    """
    path = str(path or config.ARTWORK["selectors_file"])
    if path in _cache:
        return _cache[path]

    try:
        with open(path, 'r', encoding='utf-8') as f:
            selector_config = SelectorConfig.from_dict(json.load(f))
    except (OSError, ValueError, KeyError, TypeError) as e:
        if Path(path).resolve() == BUNDLED_SELECTORS_FILE.resolve():
            raise
        logger.warning(f"Could not load selectors from {path}: {e} - using bundled selectors")
        return load_selector_config(str(BUNDLED_SELECTORS_FILE))

    logger.debug(f"Loaded selector config v{selector_config.version} from {path}")
    _cache[path] = selector_config
    return selector_config
