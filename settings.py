"""
MusicBar Accent Settings Manager
Handles dynamic configuration management using settings.json
"""

import json
import shutil
import os
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass
from logging_config import get_logger

logger = get_logger(__name__)

# Allow overriding the settings file location via environment variable
if "__compiled__" in globals() or getattr(sys, 'frozen', False):
    ROOT_DIR = Path(sys.executable).parent
else:
    ROOT_DIR = Path(__file__).parent

SETTINGS_FILE = Path(os.getenv("MUSIC_BAR_SETTINGS_FILE", str(ROOT_DIR / "settings.json")))

@dataclass
class Setting:
    """Represents a single configurable setting"""
    name: str
    type: type
    default: Any
    requires_restart: bool = False
    category: Optional[str] = None
    description: Optional[str] = None
    min_val: Optional[float] = None
    max_val: Optional[float] = None

    def validate_and_convert(self, value: Any) -> Any:
        try:
            if self.type == bool and isinstance(value, str):
                return value.lower() in ('true', '1', 'yes', 'on')

            converted = self.type(value)
            # Out-of-range numbers fall back to the default rather than being clamped
            if self.min_val is not None and converted < self.min_val:
                return self.default
            if self.max_val is not None and converted > self.max_val:
                return self.default
            return converted
        except (ValueError, TypeError):
            return self.default

class SettingsManager:
    def __init__(self, settings_file: Optional[Path] = None):
        self._settings: Dict[str, Any] = {}
        self.settings_file = Path(settings_file) if settings_file else SETTINGS_FILE

        # Define all available settings
        self._definitions = {
            # Debug
            "debug.log_file": Setting("Log File", str, "music_bar.log", True, "Debug", "Log file name"),
            "debug.log_level": Setting("Log Level", str, "INFO", True, "Debug", "Console logging verbosity"),
            "debug.log_to_console": Setting("Log to Console", bool, True, False, "Debug", "Print logs to terminal"),
            "debug.log_detailed": Setting("Detailed Logging", bool, False, False, "Debug", "Write DEBUG records to the log file"),

            # Accent
            "accent.default_color": Setting("Default Accent", str, "#7c5cff", False, "Accent", "Accent used when no artwork color is available"),
            "accent.saturation_min": Setting("Saturation Min", float, 0.4, False, "Accent", "Lower saturation bound", min_val=0.0, max_val=1.0),
            "accent.saturation_max": Setting("Saturation Max", float, 0.95, False, "Accent", "Upper saturation bound", min_val=0.0, max_val=1.0),
            "accent.lightness_min": Setting("Lightness Min", float, 0.35, False, "Accent", "Lower lightness bound", min_val=0.0, max_val=1.0),
            "accent.lightness_max": Setting("Lightness Max", float, 0.72, False, "Accent", "Upper lightness bound", min_val=0.0, max_val=1.0),

            # Sampler
            "sampler.canvas_size": Setting("Canvas Size", int, 32, True, "Sampler", "Side of the square sampling canvas (px)", min_val=1, max_val=512),
            "sampler.stride": Setting("Pixel Stride", int, 4, False, "Sampler", "Sample every Nth pixel", min_val=1, max_val=64),
            "sampler.alpha_threshold": Setting("Alpha Threshold", int, 64, False, "Sampler", "Skip pixels with alpha below this", min_val=0, max_val=255),
            "sampler.base_weight": Setting("Base Weight", float, 0.5, False, "Sampler", "Weight every sampled pixel starts with", min_val=0.0),
            "sampler.timeout": Setting("Download Timeout", float, 10.0, False, "Sampler", "Image download timeout (seconds)", min_val=0.1),

            # Binding
            "binding.poll_interval": Setting("Poll Interval", float, 1.8, False, "Binding", "Fallback refresh interval (seconds)", min_val=0.05),
            "binding.discovery_interval": Setting("Discovery Interval", float, 0.25, False, "Binding", "Host discovery retry interval (seconds)", min_val=0.01),
            "binding.discovery_warn_every": Setting("Discovery Warn Every", int, 20, False, "Binding", "Warn after this many discovery attempts", min_val=1),

            # Artwork
            "artwork.selectors_file": Setting("Selectors File", str, "", True, "Artwork", "Override path for the site selector JSON"),

            # Page host
            "page_host.cache_ttl": Setting("Page Cache TTL", float, 5.0, False, "Page Host", "Seconds a fetched page is reused", min_val=0.0),
            "page_host.user_agent": Setting("User Agent", str, "MusicBarAccent/0.5", False, "Page Host", "User-Agent for page and image requests"),
        }

        self.load_settings()

    def load_settings(self) -> None:
        """Load settings from JSON, fall back to defaults"""
        self._settings = {}

        for key, definition in self._definitions.items():
            self._settings[key] = definition.default

        if not self.settings_file.exists():
            return

        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                saved = json.load(f)
            for key, val in saved.items():
                if key in self._definitions:
                    self._settings[key] = self._definitions[key].validate_and_convert(val)
                else:
                    # Store as-is if unknown
                    self._settings[key] = val
        except (OSError, ValueError, AttributeError) as e:
            logger.error(f"Failed to load {self.settings_file.name}: {e} - using defaults")
            backup_path = self.settings_file.with_suffix('.json.corrupted')
            try:
                shutil.copy2(self.settings_file, backup_path)
                logger.info(f"Backed up corrupted settings to {backup_path}")
            except OSError:
                pass

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value.
        Priority:
        1. Loaded value (from JSON or Schema Default)
        2. Schema Default (if key in definitions but not in settings dict yet)
        3. Provided 'default' argument (if key unknown)
        """
        if key in self._settings:
            return self._settings[key]

        if key in self._definitions:
            return self._definitions[key].default

        return default

    def set(self, key: str, value: Any) -> bool:
        """Set a known setting. Returns True if the change requires a restart."""
        if key not in self._definitions:
            return False

        setting = self._definitions[key]
        self._settings[key] = setting.validate_and_convert(value)
        return setting.requires_restart

    def save_to_config(self) -> None:
        """Save current memory settings to JSON file"""
        temp_path = self.settings_file.parent / f"settings_{uuid.uuid4().hex}.json.tmp"
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(self._settings, f, indent=4, sort_keys=True)
            os.replace(temp_path, self.settings_file)
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")
            if temp_path.exists():
                try:
                    os.remove(temp_path)
                except OSError:
                    pass

    def get_all(self) -> Dict:
        """Return settings grouped by category"""
        result = {}
        for key, val in self._settings.items():
            defin = self._definitions.get(key)
            if not defin:
                continue

            cat = defin.category or "Misc"
            if cat not in result: result[cat] = {}

            result[cat][key] = {
                "value": val,
                "name": defin.name,
                "description": defin.description,
                "type": defin.type.__name__,
                "requires_restart": defin.requires_restart,
                "min": defin.min_val,
                "max": defin.max_val,
            }
        return result

    def reset_to_defaults(self):
        if self.settings_file.exists():
            os.remove(self.settings_file)
        self.load_settings()

settings = SettingsManager()
