"""
Error types raised by the drawing core.

Each error also derives from the matching builtin so callers that only
know about ValueError/TypeError still catch them.
"""

from typing import Optional


class DrawError(Exception):
    """Base class for all drawing core errors."""


class GeoJSONValidationError(DrawError, ValueError):
    """
    Input failed GeoJSON structural validation.

    The message is the first non-informational issue; all of them are
    kept on ``issues``.
    """

    def __init__(self, message: str, issues: Optional[list] = None):
        super().__init__(message)
        self.issues = issues or []


class InvalidGeometryError(DrawError, ValueError):
    """A feature was supplied with a null geometry."""


class InvalidGeometryTypeError(DrawError, TypeError):
    """A geometry type has no feature model."""

    def __init__(self, geometry_type):
        super().__init__(f"Invalid geometry type: {geometry_type}.")
        self.geometry_type = geometry_type


class InvalidFeatureCollectionError(DrawError, ValueError):
    """set() was called with something that is not a FeatureCollection."""


class InvalidModeError(DrawError, ValueError):
    """An unknown interaction mode was requested."""

    def __init__(self, mode):
        super().__init__(f"{mode} is not valid")
        self.mode = mode


class ModeTargetNotFoundError(DrawError, ValueError):
    """direct_select was entered without a live feature to edit."""


class UnsupportedModeTargetError(DrawError, TypeError):
    """direct_select was entered on a feature it cannot edit (a Point)."""
