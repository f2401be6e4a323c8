"""
Settings Manager.

Handles application settings with JSON file storage.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from typing import Optional
from pathlib import Path

from models.draw_mode import DrawMode

logger = logging.getLogger(__name__)


@dataclass
class EditorSettings:
    """Interaction settings for the editing core."""
    default_mode: str = DrawMode.SIMPLE_SELECT.value
    user_properties: bool = False   # expose properties as user_* when rendering
    click_buffer: int = 2           # pixels around a click for hit testing
    touch_buffer: int = 25          # pixels around a tap for hit testing


@dataclass
class ValidationSettings:
    """GeoJSON validation settings."""
    precision_warning: bool = False
    max_precision: int = 6


@dataclass
class AppSettings:
    """Complete application settings."""
    editor: EditorSettings = field(default_factory=EditorSettings)
    validation: ValidationSettings = field(default_factory=ValidationSettings)
    recent_files: list = field(default_factory=list)
    recent_files_max: int = 10

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "editor": asdict(self.editor),
            "validation": asdict(self.validation),
            "recent_files": self.recent_files,
            "recent_files_max": self.recent_files_max,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Create from dictionary."""
        settings = cls()

        if "editor" in data:
            settings.editor = EditorSettings(**data["editor"])
        if "validation" in data:
            settings.validation = ValidationSettings(**data["validation"])
        if "recent_files" in data:
            settings.recent_files = data["recent_files"]
        if "recent_files_max" in data:
            settings.recent_files_max = data["recent_files_max"]

        return settings


class SettingsManager:
    """
    Manages application settings with JSON file storage.

    Settings file location:
    - Windows: %APPDATA%/GeoDraw/settings.json
    - Linux: ~/.config/GeoDraw/settings.json
    - macOS: ~/Library/Application Support/GeoDraw/settings.json
    """

    APP_NAME = "GeoDraw"
    SETTINGS_FILE = "settings.json"

    def __init__(self, config_override: Optional[str] = None):
        """
        Initialize settings manager.

        Args:
            config_override: Optional path to override config file location.
                            Useful for testing.
        """
        self._settings = AppSettings()
        self._config_override = config_override
        self._settings_path = self._get_settings_path()
        self._ensure_settings_dir()
        self.load()

    @property
    def settings(self) -> AppSettings:
        """Get current settings."""
        return self._settings

    @property
    def settings_path(self) -> str:
        """Get the settings file path."""
        return str(self._settings_path)

    @property
    def editor(self) -> EditorSettings:
        return self._settings.editor

    @property
    def validation(self) -> ValidationSettings:
        return self._settings.validation

    @property
    def default_mode(self) -> str:
        return self._settings.editor.default_mode

    @default_mode.setter
    def default_mode(self, value: str):
        self._settings.editor.default_mode = DrawMode.coerce(value).value
        self.save()

    def _get_settings_path(self) -> Path:
        """Get platform-specific settings directory."""
        if self._config_override:
            return Path(self._config_override)

        import platform
        system = platform.system()

        if system == "Windows":
            base = os.environ.get("APPDATA", os.path.expanduser("~"))
            config_dir = Path(base) / self.APP_NAME
        elif system == "Darwin":  # macOS
            config_dir = Path.home() / "Library" / "Application Support" / self.APP_NAME
        else:  # Linux and others
            xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
            config_dir = Path(xdg_config) / self.APP_NAME

        return config_dir / self.SETTINGS_FILE

    def _ensure_settings_dir(self):
        """Create settings directory if it doesn't exist."""
        self._settings_path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> bool:
        """Load settings from file."""
        if not self._settings_path.exists():
            return False

        try:
            with open(self._settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._settings = AppSettings.from_dict(data)
            return True
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Error loading settings: {e}")
            return False

    def save(self) -> bool:
        """Save settings to file."""
        try:
            self._ensure_settings_dir()
            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            return True
        except OSError as e:
            logger.warning(f"Error saving settings: {e}")
            return False

    def reset(self):
        """Reset settings to defaults."""
        self._settings = AppSettings()
        self.save()

    def add_recent_file(self, file_path: str):
        """Add a file to recent files list."""
        # Remove if already exists
        if file_path in self._settings.recent_files:
            self._settings.recent_files.remove(file_path)

        # Add to front
        self._settings.recent_files.insert(0, file_path)

        # Trim to max
        max_files = self._settings.recent_files_max
        self._settings.recent_files = self._settings.recent_files[:max_files]

        self.save()

    def get_recent_files(self) -> list:
        """Get recent files list, filtered to existing files."""
        existing = [f for f in self._settings.recent_files if os.path.exists(f)]
        if len(existing) != len(self._settings.recent_files):
            self._settings.recent_files = existing
            self.save()
        return existing


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings(config_override: Optional[str] = None) -> SettingsManager:
    """
    Get the global settings manager instance.

    Args:
        config_override: Optional path to override config location.
                        Only used on first call to initialize.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager(config_override)
    return _settings_manager


def reset_settings_manager():
    """Reset the global settings manager (useful for testing)."""
    global _settings_manager
    _settings_manager = None
