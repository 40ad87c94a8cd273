"""
Shared State Module for music_bar package.
Contains constants derived from config and the background task tracker.

CRITICAL: This module imports NOTHING from the music_bar package to prevent
circular imports.
"""
from __future__ import annotations

import config
from logging_config import get_logger

logger = get_logger(__name__)

# ==========================================
# CONSTANTS
# ==========================================

VERSION = config.VERSION
HANDLE_NAME = config.HANDLE_NAME

# Sampling (from config)
CANVAS_SIZE = config.SAMPLER["canvas_size"]
PIXEL_STRIDE = config.SAMPLER["stride"]
ALPHA_THRESHOLD = config.SAMPLER["alpha_threshold"]
BASE_WEIGHT = config.SAMPLER["base_weight"]
DOWNLOAD_TIMEOUT = config.SAMPLER["timeout"]

# Accent bands
SATURATION_BAND = config.ACCENT["saturation"]
LIGHTNESS_BAND = config.ACCENT["lightness"]
DEFAULT_ACCENT_HEX = config.ACCENT["default_color"]

# Reconciliation
POLL_INTERVAL = config.BINDING["poll_interval"]
DISCOVERY_INTERVAL = config.BINDING["discovery_interval"]
DISCOVERY_WARN_EVERY = config.BINDING["discovery_warn_every"]
CONTROLLER_EVENTS = tuple(config.BINDING["events"])

# Host attribute names probed for an already-active source
CURRENT_CONTROLLER_KEYS = (
    "_current_media_controller",
    "current_media_controller",
    "_media_controller",
    "media_controller",
)
CURRENT_SURFACE_KEYS = (
    "_current_browser",
    "current_browser",
    "browser",
)
SETUP_HOOK_NAME = "setup_media_controller"

# ==========================================
# TASK TRACKING
# ==========================================

# Global set to track background tasks and prevent garbage collection
_background_tasks: set = set()
