"""
Interaction modes.

A mode decides what user interactions mean while it is active. The mode
controller builds a new mode instance on every transition:

    mode = ModeClass(store, events, controller, options)   # validates
    previous.stop()
    mode.setup()

Pointer and keyboard capture live in the host; hosts translate their
input into the mode methods below (add_vertex, finish, move_vertex, ...).
"""

import copy
import logging
from typing import ClassVar

from models.draw_mode import DrawMode, ModeOptions
from models.errors import ModeTargetNotFoundError, UnsupportedModeTargetError
from models.feature import Feature, GeometryType, LineString, Point, Polygon, parse_coord_path

logger = logging.getLogger(__name__)


class BaseMode:
    """
    Common mode plumbing.

    Attributes:
        store: Feature store being edited
        events: Events hub for created/deleted/updated notifications
        controller: Mode controller, for transitions started by the mode
        options: Options the mode was entered with
    """

    mode: ClassVar[DrawMode]

    def __init__(self, store, events, controller, options: ModeOptions):
        self.store = store
        self.events = events
        self.controller = controller
        self.options = options

    def setup(self):
        """Called when the mode becomes active."""

    def stop(self):
        """Called when another mode replaces this one."""

    def trash(self):
        """Delete whatever this mode considers the current target."""


class SimpleSelectMode(BaseMode):
    """Select whole features."""

    mode = DrawMode.SIMPLE_SELECT

    def setup(self):
        self.store.clear_selected_coordinates()
        self.store.set_selected(self.options.feature_ids)

    def trash(self):
        feature_ids = self.store.get_selected_ids()
        if not feature_ids:
            return
        deleted = [self.store.get(feature_id).to_geojson() for feature_id in feature_ids]
        self.store.delete(feature_ids)
        self.events.deleted.emit(deleted)


class DirectSelectMode(BaseMode):
    """
    Edit the vertices of a single feature.

    Raises (on construction):
        ModeTargetNotFoundError: feature_id is missing or not stored
        UnsupportedModeTargetError: the feature is a Point
    """

    mode = DrawMode.DIRECT_SELECT

    def __init__(self, store, events, controller, options: ModeOptions):
        super().__init__(store, events, controller, options)
        feature = store.get(options.feature_id) if options.feature_id else None
        if feature is None:
            raise ModeTargetNotFoundError("You must provide a valid feature_id to enter direct_select mode")
        if feature.geometry_type is GeometryType.POINT:
            raise UnsupportedModeTargetError("direct_select mode doesn't handle point features")
        self.feature: Feature = feature
        self.selected_coord_paths: list[str] = [options.coord_path] if options.coord_path else []

    def setup(self):
        self.store.set_selected([self.feature.id])
        self._sync_selected_coordinates()

    def stop(self):
        self.store.clear_selected_coordinates()

    def select_vertices(self, coord_paths: list[str]):
        """Replace the selected vertices."""
        self.selected_coord_paths = list(coord_paths)
        self._sync_selected_coordinates()
        self.store.render()

    def move_vertex(self, coord_path: str, lng: float, lat: float):
        """Move one vertex of the edited feature."""
        self.feature.update_coordinate(coord_path, lng, lat)
        self.store.render()
        self.events.updated.emit([self.feature.to_geojson()], "change_coordinates")

    def trash(self):
        if not self.selected_coord_paths:
            return
        # Highest paths first so earlier indices stay valid
        for path in sorted(self.selected_coord_paths, key=parse_coord_path, reverse=True):
            self.feature.remove_coordinate(path)
        self.selected_coord_paths = []
        self.store.clear_selected_coordinates()

        if self.feature.is_valid():
            self.store.render()
            self.events.updated.emit([self.feature.to_geojson()], "change_coordinates")
            return

        logger.debug(f"Feature {self.feature.id} became invalid after vertex removal")
        deleted = [self.feature.to_geojson()]
        self.store.delete([self.feature.id])
        self.events.deleted.emit(deleted)
        self.controller.change_mode(DrawMode.SIMPLE_SELECT)

    def _sync_selected_coordinates(self):
        self.store.set_selected_coordinates([
            {"feature_id": self.feature.id, "coord_path": path}
            for path in self.selected_coord_paths
        ])


class _DrawFeatureMode(BaseMode):
    """
    Draw a new feature vertex by vertex.

    The feature is stored from setup on so the surface can show it while
    drawing. finish() commits it; leaving the mode any other way keeps it
    only if it is already valid.
    """

    model: ClassVar[type]
    empty_coordinates: ClassVar[list] = []

    def __init__(self, store, events, controller, options: ModeOptions):
        super().__init__(store, events, controller, options)
        self.feature: Feature = self.model(properties={}, coordinates=copy.deepcopy(self.empty_coordinates))
        self._finished = False

    def setup(self):
        self.store.clear_selected()
        self.store.add(self.feature)
        self.store.render()

    def add_vertex(self, lng: float, lat: float):
        raise NotImplementedError

    def finish(self):
        """Commit the drawing and return to simple_select with it selected."""
        if self._finished:
            return
        if not self.feature.is_valid():
            self.trash()
            return
        self._finished = True
        self.events.created.emit([self.feature.to_geojson()])
        self.controller.change_mode(
            DrawMode.SIMPLE_SELECT, ModeOptions(feature_ids=[self.feature.id])
        )

    def stop(self):
        if self._finished or self.store.get(self.feature.id) is None:
            return
        if self.feature.is_valid():
            self._finished = True
            self.events.created.emit([self.feature.to_geojson()])
        else:
            self.store.delete([self.feature.id])

    def trash(self):
        self.store.delete([self.feature.id])
        self.controller.change_mode(DrawMode.SIMPLE_SELECT)


class DrawPointMode(_DrawFeatureMode):
    """A point is finished by its first vertex."""

    mode = DrawMode.DRAW_POINT
    model = Point

    def add_vertex(self, lng: float, lat: float):
        self.feature.update_coordinate("", lng, lat)
        self.finish()


class DrawLineStringMode(_DrawFeatureMode):
    mode = DrawMode.DRAW_LINE_STRING
    model = LineString

    def add_vertex(self, lng: float, lat: float):
        self.feature.add_coordinate(str(len(self.feature.coordinates)), lng, lat)
        self.store.render()


class DrawPolygonMode(_DrawFeatureMode):
    """Draws the outer ring; the ring is closed on export."""

    mode = DrawMode.DRAW_POLYGON
    model = Polygon
    empty_coordinates = [[]]

    def add_vertex(self, lng: float, lat: float):
        ring = self.feature.coordinates[0] if self.feature.coordinates else []
        self.feature.update_coordinate(f"0.{len(ring)}", lng, lat)
        self.store.render()


MODES: dict[DrawMode, type[BaseMode]] = {
    DrawMode.SIMPLE_SELECT: SimpleSelectMode,
    DrawMode.DIRECT_SELECT: DirectSelectMode,
    DrawMode.DRAW_POINT: DrawPointMode,
    DrawMode.DRAW_LINE_STRING: DrawLineStringMode,
    DrawMode.DRAW_POLYGON: DrawPolygonMode,
}
