"""
Models package.

Data models for the GeoDraw editing core:
- Feature geometry models (Point, LineString, Polygon and Multi* variants)
- Interaction mode identifiers (DrawMode, ModeOptions)
- Error types
"""

from .errors import (
    DrawError,
    GeoJSONValidationError,
    InvalidGeometryError,
    InvalidGeometryTypeError,
    InvalidFeatureCollectionError,
    InvalidModeError,
    ModeTargetNotFoundError,
    UnsupportedModeTargetError,
)
from .feature import (
    FEATURE,
    FEATURE_COLLECTION,
    GeometryType,
    Feature,
    Point,
    LineString,
    Polygon,
    MultiFeature,
    MultiPoint,
    MultiLineString,
    MultiPolygon,
    FEATURE_MODELS,
    create_feature,
    model_for,
    generate_feature_id,
    parse_coord_path,
)
from .draw_mode import DrawMode, ModeOptions

__all__ = [
    # Errors
    "DrawError",
    "GeoJSONValidationError",
    "InvalidGeometryError",
    "InvalidGeometryTypeError",
    "InvalidFeatureCollectionError",
    "InvalidModeError",
    "ModeTargetNotFoundError",
    "UnsupportedModeTargetError",
    # Features
    "FEATURE",
    "FEATURE_COLLECTION",
    "GeometryType",
    "Feature",
    "Point",
    "LineString",
    "Polygon",
    "MultiFeature",
    "MultiPoint",
    "MultiLineString",
    "MultiPolygon",
    "FEATURE_MODELS",
    "create_feature",
    "model_for",
    "generate_feature_id",
    "parse_coord_path",
    # Modes
    "DrawMode",
    "ModeOptions",
]
