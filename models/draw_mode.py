"""
Interaction mode identifiers and options.

The enum values are the public mode names; host applications may store
or compare them as plain strings.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from .errors import InvalidModeError


class DrawMode(Enum):
    """Interaction modes of the editor."""
    SIMPLE_SELECT = "simple_select"        # Select/move whole features
    DIRECT_SELECT = "direct_select"        # Edit vertices of one feature
    DRAW_POINT = "draw_point"
    DRAW_LINE_STRING = "draw_line_string"
    DRAW_POLYGON = "draw_polygon"

    @classmethod
    def coerce(cls, mode: Union["DrawMode", str]) -> "DrawMode":
        """
        Accept a DrawMode or its string value.

        Raises:
            InvalidModeError: If the name is not a known mode
        """
        if isinstance(mode, cls):
            return mode
        try:
            return cls(mode)
        except ValueError:
            raise InvalidModeError(mode) from None

    @property
    def is_drawing(self) -> bool:
        return self.value.startswith("draw_")


@dataclass
class ModeOptions:
    """
    Options passed to a mode when it is entered.

    Attributes:
        feature_ids: Features to preselect (simple_select)
        feature_id: Feature being edited (direct_select)
        coord_path: Vertex to preselect (direct_select)
    """
    feature_ids: list[str] = field(default_factory=list)
    feature_id: Optional[str] = None
    coord_path: Optional[str] = None

    @classmethod
    def from_value(cls, value: Union["ModeOptions", dict, None]) -> "ModeOptions":
        """Build options from a ModeOptions, a dict or None."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls(
            feature_ids=list(value.get("feature_ids") or []),
            feature_id=value.get("feature_id"),
            coord_path=value.get("coord_path"),
        )
