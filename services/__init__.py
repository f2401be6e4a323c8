"""Services package."""

from .geojson_validator import (
    GeoJSONIssue,
    LEVEL_ERROR,
    LEVEL_MESSAGE,
    hint,
    errors_only,
    normalize,
)
from .draw_events import DrawEvents
from .feature_store import FeatureStore
from .draw_modes import (
    BaseMode,
    SimpleSelectMode,
    DirectSelectMode,
    DrawPointMode,
    DrawLineStringMode,
    DrawPolygonMode,
    MODES,
)
from .mode_controller import ModeController
from .merge_split import MergeSplitEngine
from .settings_manager import (
    SettingsManager,
    AppSettings,
    EditorSettings,
    ValidationSettings,
    get_settings,
    reset_settings_manager,
)
from .draw_api import DrawAPI

__all__ = [
    # Validation
    "GeoJSONIssue",
    "LEVEL_ERROR",
    "LEVEL_MESSAGE",
    "hint",
    "errors_only",
    "normalize",
    # Editing core
    "DrawEvents",
    "FeatureStore",
    "BaseMode",
    "SimpleSelectMode",
    "DirectSelectMode",
    "DrawPointMode",
    "DrawLineStringMode",
    "DrawPolygonMode",
    "MODES",
    "ModeController",
    "MergeSplitEngine",
    "DrawAPI",
    # Settings
    "SettingsManager",
    "AppSettings",
    "EditorSettings",
    "ValidationSettings",
    "get_settings",
    "reset_settings_manager",
]
