"""
GeoJSON structural validation.

hint() walks a GeoJSON object and reports every structural issue it
finds. Each issue carries a level:
- "error": the object is not well-formed GeoJSON
- "message": informational only (winding order, coordinate precision)

Ingestion rejects input with any "error" issue and ignores messages.

normalize() wraps a single Feature or a bare Geometry into a
FeatureCollection so callers only deal with one shape.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from models.feature import FEATURE, FEATURE_COLLECTION, is_number

logger = logging.getLogger(__name__)


LEVEL_ERROR = "error"
LEVEL_MESSAGE = "message"

GEOMETRY_COLLECTION = "GeometryCollection"

GEOMETRY_TYPES = {
    "Point",
    "LineString",
    "Polygon",
    "MultiPoint",
    "MultiLineString",
    "MultiPolygon",
    GEOMETRY_COLLECTION,
}

GEOJSON_TYPES = GEOMETRY_TYPES | {FEATURE, FEATURE_COLLECTION}

# JSON arrays; tuples are accepted from Python callers
ARRAY_TYPES = (list, tuple)


@dataclass
class GeoJSONIssue:
    """A single validation finding."""
    message: str
    level: str = LEVEL_ERROR
    path: str = ""  # e.g. "features[0].geometry.coordinates[2]"

    @property
    def is_error(self) -> bool:
        return self.level != LEVEL_MESSAGE

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class _Hinter:
    """Collects issues while walking one GeoJSON object."""

    def __init__(self, precision_warning: bool, max_precision: int):
        self.precision_warning = precision_warning
        self.max_precision = max_precision
        self.issues: list[GeoJSONIssue] = []

    def error(self, message: str, path: str):
        self.issues.append(GeoJSONIssue(message, LEVEL_ERROR, path))

    def message(self, message: str, path: str):
        self.issues.append(GeoJSONIssue(message, LEVEL_MESSAGE, path))

    # =========================================================================
    # Objects
    # =========================================================================

    def root(self, obj: Any):
        if not isinstance(obj, dict):
            self.error("The root of a GeoJSON object must be an object.", "")
            return
        self.any_object(obj, "")

    def any_object(self, obj: dict, path: str, allowed: Optional[set] = None):
        geojson_type = self._type_of(obj, path, allowed or GEOJSON_TYPES)
        if geojson_type is None:
            return

        self._bbox(obj, path)

        if geojson_type == FEATURE_COLLECTION:
            self.feature_collection(obj, path)
        elif geojson_type == FEATURE:
            self.feature(obj, path)
        elif geojson_type == GEOMETRY_COLLECTION:
            self.geometry_collection(obj, path)
        else:
            self.geometry(obj, geojson_type, path)

    def _type_of(self, obj: dict, path: str, allowed: set) -> Optional[str]:
        if "type" not in obj:
            self.error('"type" member required', path)
            return None
        geojson_type = obj["type"]
        if not isinstance(geojson_type, str):
            self.error('"type" member must be a string', path)
            return None
        if geojson_type not in allowed:
            self.error(f"The type {geojson_type} is unknown", path)
            return None
        return geojson_type

    def _bbox(self, obj: dict, path: str):
        if "bbox" not in obj:
            return
        bbox = obj["bbox"]
        if not isinstance(bbox, ARRAY_TYPES) or not all(is_number(v) for v in bbox):
            self.error('"bbox" member must be an array of numbers', path)

    def feature_collection(self, obj: dict, path: str):
        if "features" not in obj:
            self.error('"features" member required', path)
            return
        features = obj["features"]
        if not isinstance(features, ARRAY_TYPES):
            self.error('"features" member should be array', path)
            return
        for i, feature in enumerate(features):
            feature_path = _join(path, f"features[{i}]")
            if not isinstance(feature, dict):
                self.error("Every feature must be an object", feature_path)
                continue
            self.any_object(feature, feature_path, allowed={FEATURE})

    def feature(self, obj: dict, path: str):
        if "id" in obj and obj["id"] is not None:
            if not (isinstance(obj["id"], str) or is_number(obj["id"])):
                self.error('Feature "id" member must have a string or number value', path)

        if "properties" not in obj:
            self.error('"properties" member required', path)
        elif obj["properties"] is not None and not isinstance(obj["properties"], dict):
            self.error('"properties" member should be object', path)

        if "geometry" not in obj:
            self.error('"geometry" member required', path)
            return
        geometry = obj["geometry"]
        # Null geometry is valid GeoJSON (an unlocated feature)
        if geometry is None:
            return
        geometry_path = _join(path, "geometry")
        if not isinstance(geometry, dict):
            self.error('"geometry" member should be object', geometry_path)
            return
        self.any_object(geometry, geometry_path, allowed=GEOMETRY_TYPES)

    def geometry_collection(self, obj: dict, path: str):
        if "geometries" not in obj:
            self.error('"geometries" member required', path)
            return
        geometries = obj["geometries"]
        if not isinstance(geometries, ARRAY_TYPES):
            self.error('"geometries" member should be array', path)
            return
        for i, geometry in enumerate(geometries):
            geometry_path = _join(path, f"geometries[{i}]")
            if not isinstance(geometry, dict):
                self.error("Every geometry must be an object", geometry_path)
                continue
            self.any_object(geometry, geometry_path, allowed=GEOMETRY_TYPES)

    # =========================================================================
    # Coordinates
    # =========================================================================

    def geometry(self, obj: dict, geometry_type: str, path: str):
        if "coordinates" not in obj:
            self.error('"coordinates" member required', path)
            return
        coords = obj["coordinates"]
        coords_path = _join(path, "coordinates")
        if not isinstance(coords, ARRAY_TYPES):
            self.error('"coordinates" member should be array', coords_path)
            return

        if geometry_type == "Point":
            self.position(coords, coords_path)
        elif geometry_type == "MultiPoint":
            self.positions(coords, coords_path)
        elif geometry_type == "LineString":
            self.line(coords, coords_path)
        elif geometry_type == "MultiLineString":
            for i, line in enumerate(self.nested(coords, coords_path)):
                self.line(line, f"{coords_path}[{i}]")
        elif geometry_type == "Polygon":
            self.polygon(coords, coords_path)
        elif geometry_type == "MultiPolygon":
            for i, polygon in enumerate(self.nested(coords, coords_path)):
                self.polygon(polygon, f"{coords_path}[{i}]")

    def nested(self, coords: list, path: str) -> list:
        """Children that are arrays; reports the ones that are not."""
        result = []
        for i, child in enumerate(coords):
            if isinstance(child, ARRAY_TYPES):
                result.append(child)
            else:
                self.error(
                    "a number was found where a coordinate array should have been found: "
                    "this needs to be nested more deeply",
                    f"{path}[{i}]",
                )
                return []
        return result

    def position(self, pos: Any, path: str) -> bool:
        if not isinstance(pos, ARRAY_TYPES):
            self.error(f"position should be an array, is a {type(pos).__name__} instead", path)
            return False
        if len(pos) < 2:
            self.error("position must have 2 or more elements", path)
            return False
        if not all(is_number(v) for v in pos):
            self.error("each element in a position must be a number", path)
            return False
        if len(pos) > 3:
            self.message("position should not have more than 3 elements", path)
        if self.precision_warning and any(_decimals(v) > self.max_precision for v in pos):
            self.message(
                f"precision of coordinates should be reduced to {self.max_precision} decimal places",
                path,
            )
        return True

    def positions(self, coords: list, path: str) -> bool:
        valid = True
        for i, pos in enumerate(coords):
            valid = self.position(pos, f"{path}[{i}]") and valid
        return valid

    def line(self, coords: list, path: str):
        if not self.positions(coords, path):
            return
        if len(coords) < 2:
            self.error("a line needs to have two or more coordinates to be valid", path)

    def polygon(self, rings: list, path: str):
        for i, ring in enumerate(self.nested(rings, path)):
            ring_path = f"{path}[{i}]"
            if not self.ring(ring, ring_path):
                continue
            # Exterior counterclockwise, holes clockwise
            clockwise = _is_clockwise(ring)
            if (i == 0 and clockwise) or (i > 0 and not clockwise):
                self.message("Polygons and MultiPolygons should follow the right-hand rule", ring_path)

    def ring(self, ring: list, path: str) -> bool:
        if not self.positions(ring, path):
            return False
        if len(ring) < 4:
            self.error("a LinearRing of coordinates needs to have four or more positions", path)
            return False
        if list(ring[0]) != list(ring[-1]):
            self.error(
                "the first and last positions in a LinearRing of coordinates must be the same",
                path,
            )
            return False
        return True


def _join(path: str, part: str) -> str:
    return f"{path}.{part}" if path else part


def _decimals(value: float) -> int:
    exponent = Decimal(str(value)).as_tuple().exponent
    return -exponent if isinstance(exponent, int) and exponent < 0 else 0


def _is_clockwise(ring: list) -> bool:
    area = 0.0
    for (x1, y1, *_), (x2, y2, *_) in zip(ring, ring[1:]):
        area += (x2 - x1) * (y2 + y1)
    return area > 0


def hint(
    geojson: Any,
    precision_warning: bool = False,
    max_precision: int = 6,
) -> list[GeoJSONIssue]:
    """
    Validate GeoJSON structure.

    Args:
        geojson: Parsed GeoJSON value
        precision_warning: Report positions with excess decimal places
        max_precision: Decimal places allowed before a precision message

    Returns:
        All issues found, in document order. Empty when well-formed.
    """
    hinter = _Hinter(precision_warning, max_precision)
    hinter.root(geojson)
    if hinter.issues:
        logger.debug(f"GeoJSON validation found {len(hinter.issues)} issue(s)")
    return hinter.issues


def errors_only(issues: list[GeoJSONIssue]) -> list[GeoJSONIssue]:
    """Drop informational issues."""
    return [issue for issue in issues if issue.is_error]


def normalize(geojson: dict) -> dict:
    """
    Wrap a Feature or Geometry in a FeatureCollection.

    FeatureCollections are returned as-is; geometries become a Feature
    with empty properties.
    """
    geojson_type = geojson.get("type")
    if geojson_type == FEATURE_COLLECTION:
        return geojson
    if geojson_type == FEATURE:
        return {"type": FEATURE_COLLECTION, "features": [geojson]}
    return {
        "type": FEATURE_COLLECTION,
        "features": [{"type": FEATURE, "properties": {}, "geometry": geojson}],
    }
