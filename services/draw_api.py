"""
Draw API.

Public facade over the editing core. Host applications talk GeoJSON to
this object; it validates input, keeps the feature store in sync, and
routes mode requests through the mode controller.

Usage:
    api = DrawAPI()
    api.events.created.connect(on_created)
    ids = api.add({"type": "Point", "coordinates": [0, 0]})
    api.change_mode("direct_select", {"feature_id": ids[0]})
"""

import json
import logging
from typing import Any, Callable, Iterable, Optional, Union

from models.draw_mode import DrawMode, ModeOptions
from models.errors import (
    GeoJSONValidationError,
    InvalidFeatureCollectionError,
    InvalidGeometryError,
)
from models.feature import FEATURE_COLLECTION, create_feature, generate_feature_id, model_for
from .draw_events import DrawEvents
from .feature_store import FeatureStore
from .geojson_validator import errors_only, hint, normalize
from .merge_split import MergeSplitEngine
from .mode_controller import ModeController
from .settings_manager import AppSettings

logger = logging.getLogger(__name__)

# (point, buffer) -> rendered feature dicts under the point
HitTester = Callable[[Any, int], list]


def _feature_collection(features: list[dict]) -> dict:
    return {"type": FEATURE_COLLECTION, "features": features}


class DrawAPI:
    """
    GeoJSON-level editing API.

    Args:
        store: Feature store (a new one when omitted)
        events: Events hub (a new one when omitted)
        controller: Mode controller (built on store/events when omitted)
        hit_tester: Callable returning rendered features under a point
        settings: Application settings (defaults when omitted)
    """

    modes = DrawMode

    def __init__(
        self,
        store: Optional[FeatureStore] = None,
        events: Optional[DrawEvents] = None,
        controller: Optional[ModeController] = None,
        hit_tester: Optional[HitTester] = None,
        settings: Optional[AppSettings] = None,
    ):
        self.settings = settings if settings is not None else AppSettings()
        self.store = store if store is not None else FeatureStore()
        self.events = events if events is not None else DrawEvents()
        self.controller = controller if controller is not None else ModeController(
            self.store, self.events, default_mode=self.settings.editor.default_mode
        )
        self.engine = MergeSplitEngine(self.store, self.events)
        self._hit_tester = hit_tester

        self.store.selectionChanged.connect(self.events.selectionChanged)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_feature_ids_at(self, point, touch: bool = False) -> list[str]:
        """
        Ids of the stored features rendered under a surface point.

        Args:
            point: Surface point, passed through to the hit tester
            touch: Use the touch buffer instead of the click buffer
        """
        if self._hit_tester is None:
            return []
        editor = self.settings.editor
        buffer = editor.touch_buffer if touch else editor.click_buffer
        hits = self._hit_tester(point, buffer)
        feature_ids = {}
        for hit in hits:
            properties = hit.get("properties") or {}
            if properties.get("meta") == "feature":
                feature_ids[properties["id"]] = None
        return list(feature_ids)

    def get_selected_ids(self) -> list[str]:
        return self.store.get_selected_ids()

    def get_selected(self) -> dict:
        """Selected features as a FeatureCollection."""
        return _feature_collection([f.to_geojson() for f in self.store.get_selected()])

    def get(self, feature_id: str) -> Optional[dict]:
        feature = self.store.get(feature_id)
        return feature.to_geojson() if feature is not None else None

    def get_all(self) -> dict:
        """Every stored feature as a FeatureCollection."""
        return _feature_collection([f.to_geojson() for f in self.store.get_all()])

    def get_mode(self) -> DrawMode:
        return self.controller.get_mode()

    def get_render_features(self) -> list[dict]:
        """Render representation of every feature for the drawing surface."""
        mode = self.controller.get_mode()
        user_properties = self.settings.editor.user_properties
        rendered = []
        for feature in self.store.get_all():
            internal = feature.internal(mode, user_properties)
            if self.store.is_selected(feature.id):
                internal["properties"]["active"] = "true"
            rendered.append(internal)
        return rendered

    # =========================================================================
    # Ingestion
    # =========================================================================

    def set(self, feature_collection: dict) -> list[str]:
        """
        Replace the store contents with a FeatureCollection.

        Features whose id is not in the collection are deleted; unchanged
        features are left alone. Invalid input raises before anything is
        stored or rendered.

        Raises:
            InvalidFeatureCollectionError: Input is not a FeatureCollection
        """
        if (
            not isinstance(feature_collection, dict)
            or feature_collection.get("type") != FEATURE_COLLECTION
            or not isinstance(feature_collection.get("features"), list)
        ):
            raise InvalidFeatureCollectionError("Invalid FeatureCollection")

        features = self._prepare(feature_collection)
        feature_ids = [feature["id"] for feature in features]

        with self.store.render_batch():
            self._commit(features)
            kept = set(feature_ids)
            stale = [fid for fid in self.store.get_all_ids() if fid not in kept]
            if stale:
                self.delete(stale)

        logger.debug(f"Set {len(feature_ids)} features ({len(stale)} removed)")
        return feature_ids

    def add(self, geojson: dict) -> list[str]:
        """
        Add or update features from a Feature, FeatureCollection or Geometry.

        Features with a known id are updated in place; an id whose
        geometry type changed gets a new model.

        Returns:
            Feature ids in input order

        Raises:
            GeoJSONValidationError: Structural GeoJSON errors
            InvalidGeometryError: A feature has a null geometry
            InvalidGeometryTypeError: A geometry type has no model
        """
        features = self._prepare(geojson)
        with self.store.render_batch():
            self._commit(features)
        return [feature["id"] for feature in features]

    def _prepare(self, geojson: dict) -> list[dict]:
        """Validate input and return normalized feature copies with ids."""
        validation = self.settings.validation
        issues = errors_only(hint(geojson, validation.precision_warning, validation.max_precision))
        if issues:
            raise GeoJSONValidationError(issues[0].message, issues)

        features = json.loads(json.dumps(normalize(geojson)))["features"]

        # Check everything before touching the store
        for feature in features:
            if feature.get("id") is None or feature.get("id") == "":
                feature["id"] = generate_feature_id()
            else:
                feature["id"] = str(feature["id"])
            if feature.get("geometry") is None:
                raise InvalidGeometryError("Invalid geometry: null")
            model_for(feature["geometry"]["type"])
        return features

    def _commit(self, features: list[dict]):
        for feature in features:
            self._resolve(feature)

    def _resolve(self, geojson: dict):
        existing = self.store.get(geojson["id"])
        if existing is None or existing.type != geojson["geometry"]["type"]:
            self.store.add(create_feature(geojson))
            return

        properties = geojson.get("properties") or {}
        if properties != existing.properties:
            existing.properties = properties
            self.store.feature_changed(existing.id)
        coordinates = geojson["geometry"]["coordinates"]
        if coordinates != existing.get_coordinates():
            existing.incoming_coords(coordinates)

    # =========================================================================
    # Deletion
    # =========================================================================

    def delete(self, feature_ids: Union[str, Iterable[str]]) -> "DrawAPI":
        """
        Delete features.

        Leaves direct_select when its feature is among them.
        """
        with self.store.render_batch(silent=True):
            self.store.delete(feature_ids)

        if (
            self.controller.get_mode() is DrawMode.DIRECT_SELECT
            and not self.store.get_selected_ids()
        ):
            self.controller.change_mode(DrawMode.SIMPLE_SELECT, notify=False)
        else:
            self.store.render()
        return self

    def delete_all(self) -> "DrawAPI":
        with self.store.render_batch(silent=True):
            self.store.delete(self.store.get_all_ids())

        if self.controller.get_mode() is DrawMode.DIRECT_SELECT:
            self.controller.change_mode(DrawMode.SIMPLE_SELECT, notify=False)
        else:
            self.store.render()
        return self

    # =========================================================================
    # Modes
    # =========================================================================

    def change_mode(
        self,
        mode: Union[DrawMode, str],
        mode_options: Union[ModeOptions, dict, None] = None,
    ) -> "DrawAPI":
        """
        Switch interaction mode.

        Re-entering simple_select only updates the selection, and
        re-entering direct_select on the same feature does nothing.

        Raises:
            InvalidModeError: Unknown mode
        """
        mode = DrawMode.coerce(mode)
        options = ModeOptions.from_value(mode_options)
        current = self.controller.get_mode()
        selected_ids = self.store.get_selected_ids()

        if mode is DrawMode.SIMPLE_SELECT and current is DrawMode.SIMPLE_SELECT:
            if set(options.feature_ids) != set(selected_ids):
                self.store.set_selected(options.feature_ids)
            return self

        if (
            mode is DrawMode.DIRECT_SELECT
            and current is DrawMode.DIRECT_SELECT
            and selected_ids
            and options.feature_id == selected_ids[0]
        ):
            return self

        self.controller.change_mode(mode, options, notify=False)
        return self

    def trash(self) -> "DrawAPI":
        """Delete whatever the active mode targets."""
        self.controller.trash()
        return self

    # =========================================================================
    # Editing
    # =========================================================================

    def merge_selected_features(self, feature_ids: Optional[Iterable[str]] = None) -> "DrawAPI":
        """Merge features (the selection when no ids are given)."""
        if feature_ids is None:
            feature_ids = self.store.get_selected_ids()
        self.engine.merge(feature_ids)
        return self

    def split_selected_features(self, feature_ids: Optional[Iterable[str]] = None) -> "DrawAPI":
        """Split Multi* features (the selection when no ids are given)."""
        if feature_ids is None:
            feature_ids = self.store.get_selected_ids()
        self.engine.split(feature_ids)
        return self

    def set_feature_property(self, feature_id: str, name: str, value) -> "DrawAPI":
        self.store.set_feature_property(feature_id, name, value)
        self.store.render()
        return self
