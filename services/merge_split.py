"""
Merge/Split Engine.

Converts between single-part features and their Multi* composites:
- merge: same-type single-part features -> one Multi<Type> feature
- split: Multi* features -> one feature per part

Both operations skip inputs they cannot use instead of raising; callers
that need feedback must filter ids beforehand.
"""

import logging
from typing import Iterable, Optional

from models.feature import FEATURE, Feature, create_feature

logger = logging.getLogger(__name__)


class MergeSplitEngine:
    """
    Args:
        store: Feature store holding the features
        events: Events hub; receives created/deleted notifications
    """

    def __init__(self, store, events):
        self._store = store
        self._events = events

    def merge(self, feature_ids: Optional[Iterable[str]]) -> Optional[Feature]:
        """
        Merge features into one composite.

        The base type is the type of the first live single-part feature;
        features of any other type do not contribute but are still
        deleted. Coordinates keep input order and the composite starts
        with empty properties.

        Returns:
            The new composite, or None when fewer than two ids resolve
            to live single-part features
        """
        feature_ids = list(feature_ids or [])
        if len(feature_ids) < 2:
            return None

        features = [
            feature for feature in (self._store.get(fid) for fid in feature_ids)
            if feature is not None and not feature.is_multi
        ]
        if len(features) < 2:
            return None

        base_type = features[0].geometry_type
        parts = [feature for feature in features if feature.geometry_type is base_type]

        composite = create_feature({
            "type": FEATURE,
            "properties": {},
            "geometry": {
                "type": base_type.multi_type.value,
                "coordinates": [part.get_coordinates() for part in parts],
            },
        })

        removed = [
            self._store.get(fid).to_geojson()
            for fid in dict.fromkeys(feature_ids)
            if self._store.get(fid) is not None
        ]
        with self._store.render_batch():
            self._store.add(composite)
            self._store.delete(feature_ids)

        logger.debug(f"Merged {len(parts)} features into {composite.type} {composite.id}")
        self._events.created.emit([composite.to_geojson()])
        self._events.deleted.emit(removed)
        return composite

    def split(self, feature_ids: Optional[Iterable[str]]) -> list[Feature]:
        """
        Split Multi* features into their parts.

        Non-composite and unknown ids are ignored.

        Returns:
            The new single-part features, in input order
        """
        created: list[Feature] = []
        removed: list[dict] = []

        with self._store.render_batch():
            for feature_id in dict.fromkeys(feature_ids or []):
                feature = self._store.get(feature_id)
                if feature is None or not feature.is_multi:
                    continue
                parts = feature.get_features()
                for part in parts:
                    self._store.add(part)
                created.extend(parts)
                removed.append(feature.to_geojson())
                self._store.delete([feature.id])
                logger.debug(f"Split {feature.type} {feature.id} into {len(parts)} features")

        if created:
            self._events.created.emit([part.to_geojson() for part in created])
        if removed:
            self._events.deleted.emit(removed)
        return created
