"""
Feature geometry models.

Every editable GeoJSON geometry type has a model class sharing one
contract: id, properties, coordinate access and GeoJSON export. The
Multi* models hold one part model per constituent geometry, which is what
makes splitting a composite feature possible.

Coordinate paths are dotted index strings ("2", "0.3", "1.0.4") walking
from the outermost coordinate list inwards.
"""

import copy
import logging
import uuid
from enum import Enum
from typing import Any, Callable, ClassVar, Optional

from .errors import InvalidGeometryTypeError

logger = logging.getLogger(__name__)


FEATURE = "Feature"
FEATURE_COLLECTION = "FeatureCollection"


class GeometryType(Enum):
    """
    GeoJSON geometry types the editor can hold.

    Values are the GeoJSON type names, so ``GeometryType("Polygon")``
    parses a wire tag directly.
    """
    POINT = "Point"
    LINE_STRING = "LineString"
    POLYGON = "Polygon"
    MULTI_POINT = "MultiPoint"
    MULTI_LINE_STRING = "MultiLineString"
    MULTI_POLYGON = "MultiPolygon"

    @property
    def is_multi(self) -> bool:
        """Check if this is a composite (Multi*) type."""
        return self.value.startswith("Multi")

    @property
    def base_type(self) -> "GeometryType":
        """Single-part type, e.g. MULTI_POLYGON -> POLYGON."""
        if self.is_multi:
            return GeometryType(self.value[len("Multi"):])
        return self

    @property
    def multi_type(self) -> "GeometryType":
        """Composite type, e.g. POLYGON -> MULTI_POLYGON."""
        if self.is_multi:
            return self
        return GeometryType("Multi" + self.value)


def generate_feature_id() -> str:
    """Create a new random feature id."""
    return uuid.uuid4().hex


def is_number(value: Any) -> bool:
    """True for int/float values (bool excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_coord_path(path) -> list[int]:
    """Split a dotted coordinate path into indices."""
    if path is None or path == "":
        return []
    return [int(part) for part in str(path).split(".")]


def _set_position(positions: list, index: int, lng: float, lat: float):
    """Assign a position, appending when index is one past the end."""
    if index == len(positions):
        positions.append([lng, lat])
    else:
        positions[index] = [lng, lat]


class Feature:
    """
    Base feature model.

    Attributes:
        id: Unique identifier within a store
        properties: Arbitrary GeoJSON properties
        geometry_type: Type tag, fixed per subclass

    The owning store binds a change callback with ``bind()`` so that
    coordinate edits are reported back as changed ids.
    """

    geometry_type: ClassVar[GeometryType]

    def __init__(
        self,
        id: Optional[Any] = None,
        properties: Optional[dict] = None,
        coordinates: Optional[list] = None,
    ):
        self.id = str(id) if id is not None and id != "" else generate_feature_id()
        self.properties = properties if properties is not None else {}
        self._on_change: Optional[Callable[[str], None]] = None
        self._load_coordinates(coordinates if coordinates is not None else [])

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"

    @classmethod
    def from_geojson(cls, geojson: dict) -> "Feature":
        """Build a model from a GeoJSON Feature dict."""
        geometry = geojson.get("geometry") or {}
        return cls(
            id=geojson.get("id"),
            properties=geojson.get("properties"),
            coordinates=geometry.get("coordinates"),
        )

    @property
    def type(self) -> str:
        """GeoJSON type name."""
        return self.geometry_type.value

    @property
    def is_multi(self) -> bool:
        return self.geometry_type.is_multi

    def bind(self, on_change: Optional[Callable[[str], None]]):
        """Attach the callback invoked by changed()."""
        self._on_change = on_change

    def changed(self):
        """Report this feature as modified to its owner."""
        if self._on_change is not None:
            self._on_change(self.id)

    def _load_coordinates(self, coordinates: list):
        self.coordinates = copy.deepcopy(coordinates)

    def incoming_coords(self, coordinates: list):
        """Replace coordinates with GeoJSON-shaped input."""
        self._load_coordinates(coordinates)
        self.changed()

    def set_coordinates(self, coordinates: list):
        """Replace coordinates with already-internal data."""
        self.coordinates = coordinates
        self.changed()

    def get_coordinates(self) -> list:
        """Coordinates in GeoJSON shape (a copy)."""
        return copy.deepcopy(self.coordinates)

    def set_property(self, name: str, value: Any):
        self.properties[name] = value

    def is_valid(self) -> bool:
        raise NotImplementedError

    def get_coordinate(self, path) -> list:
        raise NotImplementedError

    def update_coordinate(self, path, lng: float, lat: float):
        raise NotImplementedError

    def add_coordinate(self, path, lng: float, lat: float):
        raise TypeError(f"{self.type} features do not support adding vertices")

    def remove_coordinate(self, path):
        raise TypeError(f"{self.type} features do not support removing vertices")

    def to_geojson(self) -> dict:
        """Serialize to a GeoJSON Feature."""
        return {
            "id": self.id,
            "type": FEATURE,
            "properties": copy.deepcopy(self.properties),
            "geometry": {
                "coordinates": self.get_coordinates(),
                "type": self.type,
            },
        }

    def internal(self, mode, user_properties: bool = False) -> dict:
        """
        Render representation handed to the drawing surface.

        Args:
            mode: Active mode (DrawMode or its string value)
            user_properties: Copy feature properties as ``user_<name>``
        """
        properties = {
            "id": self.id,
            "meta": "feature",
            "meta:type": self.type,
            "active": "false",
            "mode": getattr(mode, "value", mode),
        }
        if user_properties:
            for name, value in self.properties.items():
                properties[f"user_{name}"] = value
        return {
            "type": FEATURE,
            "properties": properties,
            "geometry": {
                "coordinates": self.get_coordinates(),
                "type": self.type,
            },
        }


class Point(Feature):
    """Single position. Empty coordinates mean "not placed yet"."""

    geometry_type = GeometryType.POINT

    def is_valid(self) -> bool:
        return (
            len(self.coordinates) >= 2
            and is_number(self.coordinates[0])
            and is_number(self.coordinates[1])
        )

    def get_coordinate(self, path=None) -> list:
        return list(self.coordinates)

    def update_coordinate(self, path, lng: float, lat: float):
        self.coordinates = [lng, lat]
        self.changed()


class LineString(Feature):
    """Ordered positions; needs two to be valid."""

    geometry_type = GeometryType.LINE_STRING

    def is_valid(self) -> bool:
        return len(self.coordinates) > 1

    def get_coordinate(self, path) -> list:
        index = parse_coord_path(path)[0]
        return list(self.coordinates[index])

    def add_coordinate(self, path, lng: float, lat: float):
        index = parse_coord_path(path)[0]
        self.coordinates.insert(index, [lng, lat])
        self.changed()

    def remove_coordinate(self, path):
        index = parse_coord_path(path)[0]
        del self.coordinates[index]
        self.changed()

    def update_coordinate(self, path, lng: float, lat: float):
        index = parse_coord_path(path)[0]
        _set_position(self.coordinates, index, lng, lat)
        self.changed()


class Polygon(Feature):
    """
    Polygon with rings stored open (no repeated closing position).

    GeoJSON input is closed; the closing position is stripped on load and
    added back by get_coordinates().
    """

    geometry_type = GeometryType.POLYGON

    def _load_coordinates(self, coordinates: list):
        self.coordinates = [copy.deepcopy(ring[:-1]) for ring in coordinates]

    def get_coordinates(self) -> list:
        return [copy.deepcopy(ring + ring[:1]) for ring in self.coordinates]

    def is_valid(self) -> bool:
        if not self.coordinates:
            return False
        return all(len(ring) > 2 for ring in self.coordinates)

    def get_coordinate(self, path) -> list:
        ring_index, index = parse_coord_path(path)[:2]
        return list(self.coordinates[ring_index][index])

    def add_coordinate(self, path, lng: float, lat: float):
        ring_index, index = parse_coord_path(path)[:2]
        self.coordinates[ring_index].insert(index, [lng, lat])
        self.changed()

    def remove_coordinate(self, path):
        ring_index, index = parse_coord_path(path)[:2]
        if ring_index >= len(self.coordinates):
            return
        ring = self.coordinates[ring_index]
        del ring[index]
        # A ring with fewer than three vertices cannot enclose anything
        if len(ring) < 3:
            del self.coordinates[ring_index]
        self.changed()

    def update_coordinate(self, path, lng: float, lat: float):
        ring_index, index = parse_coord_path(path)[:2]
        while len(self.coordinates) <= ring_index:
            self.coordinates.append([])
        _set_position(self.coordinates[ring_index], index, lng, lat)
        self.changed()


class MultiFeature(Feature):
    """
    Composite feature made of single-part models.

    Each part gets its own generated id and empty properties; the parts
    become standalone features when the composite is split.
    """

    part_model: ClassVar[type]

    def _load_coordinates(self, coordinates: list):
        self.parts = [
            self.part_model(properties={}, coordinates=part_coordinates)
            for part_coordinates in coordinates
        ]

    def set_coordinates(self, coordinates: list):
        self.incoming_coords(coordinates)

    def get_coordinates(self) -> list:
        return [part.get_coordinates() for part in self.parts]

    def get_features(self) -> list[Feature]:
        """The single-part models this composite is made of."""
        return list(self.parts)

    def is_valid(self) -> bool:
        return all(part.is_valid() for part in self.parts)

    def _part_and_rest(self, path):
        indices = parse_coord_path(path)
        rest = ".".join(str(i) for i in indices[1:])
        return self.parts[indices[0]], rest

    def get_coordinate(self, path) -> list:
        part, rest = self._part_and_rest(path)
        return part.get_coordinate(rest)

    def update_coordinate(self, path, lng: float, lat: float):
        part, rest = self._part_and_rest(path)
        part.update_coordinate(rest, lng, lat)
        self.changed()

    def add_coordinate(self, path, lng: float, lat: float):
        part, rest = self._part_and_rest(path)
        part.add_coordinate(rest, lng, lat)
        self.changed()

    def remove_coordinate(self, path):
        part, rest = self._part_and_rest(path)
        part.remove_coordinate(rest)
        self.changed()


class MultiPoint(MultiFeature):
    geometry_type = GeometryType.MULTI_POINT
    part_model = Point


class MultiLineString(MultiFeature):
    geometry_type = GeometryType.MULTI_LINE_STRING
    part_model = LineString


class MultiPolygon(MultiFeature):
    geometry_type = GeometryType.MULTI_POLYGON
    part_model = Polygon


FEATURE_MODELS: dict[GeometryType, type[Feature]] = {
    GeometryType.POINT: Point,
    GeometryType.LINE_STRING: LineString,
    GeometryType.POLYGON: Polygon,
    GeometryType.MULTI_POINT: MultiPoint,
    GeometryType.MULTI_LINE_STRING: MultiLineString,
    GeometryType.MULTI_POLYGON: MultiPolygon,
}


def model_for(type_name: str) -> type[Feature]:
    """
    Look up the model class for a GeoJSON geometry type name.

    Raises:
        InvalidGeometryTypeError: If the type has no model
    """
    try:
        return FEATURE_MODELS[GeometryType(type_name)]
    except ValueError:
        raise InvalidGeometryTypeError(type_name) from None


def create_feature(geojson: dict) -> Feature:
    """Build the matching model for a GeoJSON Feature dict."""
    geometry = geojson.get("geometry") or {}
    model = model_for(geometry.get("type"))
    feature = model.from_geojson(geojson)
    logger.debug(f"Created {feature.type} model {feature.id}")
    return feature
