"""
Feature Store Service.

Authoritative in-memory collection of feature models plus the current
selection. The store is the only owner of feature lifetimes; everything
else mutates features through its methods.

Rendering is requested, never performed: render() emits renderRequested
and the drawing surface redraws from the store. Render batches coalesce
the requests made by a multi-step operation into one.

Usage:
    store = FeatureStore()
    store.renderRequested.connect(surface.redraw)

    with store.render_batch():
        store.add(feature)
        store.set_selected([feature.id])
    # exactly one renderRequested here
"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterable, Optional, Union

from PyQt6.QtCore import QObject, pyqtSignal

from models.feature import Feature

logger = logging.getLogger(__name__)


class _RenderBatch:
    """Bookkeeping for one open render batch."""

    def __init__(self, silent: bool):
        self.silent = silent
        self.pending = 0
        self.closed = False


def _as_id_list(ids: Union[str, Iterable[str], None]) -> list[str]:
    """Accept a single id or any iterable of ids."""
    if ids is None:
        return []
    if isinstance(ids, str):
        return [ids]
    return [str(i) for i in ids]


class FeatureStore(QObject):
    """
    Mapping of feature id to feature model, with selection state.

    Invariants:
    - Every selected id is a stored feature id
    - Selected coordinates only reference selected features

    Signals:
        renderRequested(): The surface should redraw from the store
        selectionChanged(list): Selection differs from the last render
    """

    renderRequested = pyqtSignal()
    selectionChanged = pyqtSignal(object)

    def __init__(self):
        super().__init__()
        self._features: dict[str, Feature] = {}
        # dicts used as ordered sets
        self._selected_ids: dict[str, None] = {}
        self._changed_ids: dict[str, None] = {}
        self._selected_coordinates: list[dict] = []
        self._selection_dirty = False
        self._batches: list[_RenderBatch] = []

    # =========================================================================
    # Features
    # =========================================================================

    def add(self, feature: Feature):
        """Insert a feature, replacing any feature with the same id."""
        feature.bind(self.feature_changed)
        self._features[feature.id] = feature
        self.feature_changed(feature.id)
        logger.debug(f"Stored {feature.type} {feature.id}")

    def get(self, feature_id: str) -> Optional[Feature]:
        """Get a feature by ID, or None."""
        return self._features.get(feature_id)

    def get_all(self) -> list[Feature]:
        """All features in insertion order."""
        return list(self._features.values())

    def get_all_ids(self) -> list[str]:
        """All feature ids in insertion order."""
        return list(self._features.keys())

    def delete(self, feature_ids: Union[str, Iterable[str]]):
        """
        Remove features and prune them from the selection.

        Unknown ids are ignored. Requests one render.
        """
        deleted = []
        for feature_id in _as_id_list(feature_ids):
            feature = self._features.pop(feature_id, None)
            if feature is None:
                continue
            feature.bind(None)
            self._changed_ids.pop(feature_id, None)
            if feature_id in self._selected_ids:
                del self._selected_ids[feature_id]
                self._selection_dirty = True
            deleted.append(feature_id)
        if deleted:
            self._refresh_selected_coordinates()
            logger.debug(f"Deleted features: {deleted}")
        self.render()

    def set_feature_property(self, feature_id: str, name: str, value):
        """Set one property on a stored feature and mark it changed."""
        feature = self._features.get(feature_id)
        if feature is None:
            return
        feature.set_property(name, value)
        self.feature_changed(feature_id)

    # =========================================================================
    # Change tracking
    # =========================================================================

    def feature_changed(self, feature_id: str):
        """Record that a feature needs redrawing."""
        self._changed_ids[feature_id] = None

    def get_changed_ids(self) -> list[str]:
        return list(self._changed_ids)

    def clear_changed_ids(self):
        self._changed_ids.clear()

    # =========================================================================
    # Selection
    # =========================================================================

    def get_selected_ids(self) -> list[str]:
        return list(self._selected_ids)

    def get_selected(self) -> list[Feature]:
        return [self._features[feature_id] for feature_id in self._selected_ids]

    def is_selected(self, feature_id: str) -> bool:
        return feature_id in self._selected_ids

    def set_selected(self, feature_ids: Union[str, Iterable[str], None]):
        """
        Replace the selection.

        Ids that are not stored are dropped silently.
        """
        selected = {
            feature_id: None
            for feature_id in _as_id_list(feature_ids)
            if feature_id in self._features
        }
        self._replace_selection(selected)

    def select(self, feature_ids: Union[str, Iterable[str]]):
        """Add features to the selection."""
        selected = dict(self._selected_ids)
        for feature_id in _as_id_list(feature_ids):
            if feature_id in self._features:
                selected[feature_id] = None
        self._replace_selection(selected)

    def deselect(self, feature_ids: Union[str, Iterable[str]]):
        """Remove features from the selection."""
        selected = dict(self._selected_ids)
        for feature_id in _as_id_list(feature_ids):
            selected.pop(feature_id, None)
        self._replace_selection(selected)

    def clear_selected(self):
        self._replace_selection({})

    def _replace_selection(self, selected: dict[str, None]):
        if list(selected) != list(self._selected_ids):
            self._selected_ids = selected
            self._selection_dirty = True
            self._refresh_selected_coordinates()
        self.render()

    # =========================================================================
    # Selected coordinates (vertices)
    # =========================================================================

    def set_selected_coordinates(self, coordinates: list[dict]):
        """
        Set the selected vertices.

        Args:
            coordinates: Dicts with "feature_id" and "coord_path" keys
        """
        self._selected_coordinates = [
            {"feature_id": c["feature_id"], "coord_path": c["coord_path"]}
            for c in coordinates
        ]
        self._refresh_selected_coordinates()

    def get_selected_coordinates(self) -> list[dict]:
        """Selected vertices with their current positions."""
        result = []
        for entry in self._selected_coordinates:
            feature = self._features[entry["feature_id"]]
            result.append({
                "feature_id": entry["feature_id"],
                "coord_path": entry["coord_path"],
                "coordinates": feature.get_coordinate(entry["coord_path"]),
            })
        return result

    def clear_selected_coordinates(self):
        self._selected_coordinates = []

    def _refresh_selected_coordinates(self):
        self._selected_coordinates = [
            entry for entry in self._selected_coordinates
            if entry["feature_id"] in self._selected_ids
        ]

    # =========================================================================
    # Rendering
    # =========================================================================

    def create_render_batch(self, silent: bool = False) -> Callable[[], None]:
        """
        Open a render batch and return the function that closes it.

        While open, render() calls are only counted. Closing emits one
        render (none when silent). Batches nest and must be closed in
        reverse order of opening; an inner non-silent batch forwards its
        render to the enclosing batch.
        """
        batch = _RenderBatch(silent)
        self._batches.append(batch)

        def close():
            if batch.closed:
                return
            if not self._batches or self._batches[-1] is not batch:
                raise RuntimeError("Render batches must be closed in reverse order of opening")
            self._batches.pop()
            batch.closed = True
            logger.debug(
                f"Render batch closed ({batch.pending} render(s) coalesced, silent={batch.silent})"
            )
            if not batch.silent:
                self.render()

        return close

    @contextmanager
    def render_batch(self, silent: bool = False):
        """Context-manager form of create_render_batch()."""
        close = self.create_render_batch(silent)
        try:
            yield
        finally:
            close()

    def render(self):
        """Request a redraw (deferred while a batch is open)."""
        if self._batches:
            self._batches[-1].pending += 1
            return
        if self._selection_dirty:
            self._selection_dirty = False
            self.selectionChanged.emit(self.get_selected_ids())
        self.renderRequested.emit()
