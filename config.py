"""
MusicBar Accent Configuration Loader
Loads values from settings.json via the settings manager.
"""
import os
import sys
from pathlib import Path
from dotenv import load_dotenv

from settings import settings

# ==========================================
# Path Configuration
# ==========================================
if "__compiled__" in globals() or getattr(sys, 'frozen', False):
    ROOT_DIR = Path(sys.executable).parent
else:
    ROOT_DIR = Path(__file__).parent

# ==========================================
# Version
# ==========================================
VERSION = "0.5.0"

env_file = ROOT_DIR / '.env'
if env_file.exists():
    load_dotenv(env_file)

# Helper to prefer Env Var > Settings JSON > Default
def conf(key, default=None):
    # 1. Check Env Var (Highest Priority - good for docker/dev)
    env_val = os.getenv(key.upper().replace('.', '_'))
    if env_val is not None:
        return env_val

    # 2. Check Settings JSON
    json_val = settings.get(key)
    if json_val is not None:
        return json_val

    # 3. Default
    return default

# ==========================================
# EXPORTED CONFIG DICTS
# ==========================================

PACKAGE_DIR = ROOT_DIR / "music_bar"

DEBUG = {
    "log_file": conf("debug.log_file", "music_bar.log"),
    "log_level": conf("debug.log_level", "INFO"),
    "log_to_console": conf("debug.log_to_console", True),
    "log_detailed": conf("debug.log_detailed", False),
}

ACCENT = {
    "default_color": conf("accent.default_color", "#7c5cff"),
    "saturation": (
        float(conf("accent.saturation_min", 0.4)),
        float(conf("accent.saturation_max", 0.95)),
    ),
    "lightness": (
        float(conf("accent.lightness_min", 0.35)),
        float(conf("accent.lightness_max", 0.72)),
    ),
}

SAMPLER = {
    "canvas_size": int(conf("sampler.canvas_size", 32)),
    "stride": int(conf("sampler.stride", 4)),
    "alpha_threshold": int(conf("sampler.alpha_threshold", 64)),
    "base_weight": float(conf("sampler.base_weight", 0.5)),
    "timeout": float(conf("sampler.timeout", 10.0)),
}

BINDING = {
    "poll_interval": float(conf("binding.poll_interval", 1.8)),
    "discovery_interval": float(conf("binding.discovery_interval", 0.25)),
    "discovery_warn_every": int(conf("binding.discovery_warn_every", 20)),
    "events": ["metadatachange", "playbackstatechange"],
}

ARTWORK = {
    # Empty string = bundled music_bar/selectors.json
    "selectors_file": conf("artwork.selectors_file", "") or str(PACKAGE_DIR / "selectors.json"),
}

STYLE = {
    "var_cover": "--music-bar-cover-url",
    "var_cover_opacity": "--music-bar-cover-opacity",
    "var_accent": "--music-bar-accent",
    "var_accent_dim": "--music-bar-accent-dim",
    "var_accent_glow": "--music-bar-accent-glow",
    "cover_active_attr": "music-bar-cover-active",
    "accent_active_attr": "music-bar-accent-active",
    "run_attr": "music-bar-script-running",
    "dim_alpha": 0.35,
    "glow_alpha": 0.6,
}

PAGE_HOST = {
    "cache_ttl": float(conf("page_host.cache_ttl", 5.0)),
    "user_agent": conf("page_host.user_agent", f"MusicBarAccent/{VERSION}"),
}

# Name of the process-wide handle used for hot-reload displacement
HANDLE_NAME = "MusicBarAccent"
