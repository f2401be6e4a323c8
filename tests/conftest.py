"""
Pytest configuration and shared fixtures for GeoDraw tests.
"""

import pytest
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from PyQt6.QtCore import QCoreApplication

from services.draw_api import DrawAPI
from services.draw_events import DrawEvents
from services.feature_store import FeatureStore
from services.merge_split import MergeSplitEngine
from services.mode_controller import ModeController
from services.settings_manager import reset_settings_manager


# ============== Qt Fixtures ==============

@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """One core application for the whole session (signals need it)."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def fresh_settings():
    """Never leak the global settings manager between tests."""
    reset_settings_manager()
    yield
    reset_settings_manager()


# ============== Signal Helpers ==============

class SignalRecorder:
    """Records every emission of a signal."""

    def __init__(self, signal):
        self.calls: list[tuple] = []
        signal.connect(self._record)

    def _record(self, *args):
        self.calls.append(args)

    @property
    def count(self) -> int:
        return len(self.calls)

    @property
    def last(self):
        """First argument of the latest emission."""
        return self.calls[-1][0] if self.calls and self.calls[-1] else None

    def clear(self):
        self.calls.clear()


@pytest.fixture
def record():
    """Factory: record(signal) -> SignalRecorder."""
    return SignalRecorder


# ============== Core Fixtures ==============

@pytest.fixture
def store() -> FeatureStore:
    return FeatureStore()


@pytest.fixture
def events() -> DrawEvents:
    return DrawEvents()


@pytest.fixture
def controller(store: FeatureStore, events: DrawEvents) -> ModeController:
    return ModeController(store, events)


@pytest.fixture
def engine(store: FeatureStore, events: DrawEvents) -> MergeSplitEngine:
    return MergeSplitEngine(store, events)


@pytest.fixture
def api() -> DrawAPI:
    """A DrawAPI with default settings and no hit tester."""
    return DrawAPI()


# ============== GeoJSON Fixtures ==============

@pytest.fixture
def point_feature() -> dict:
    return {
        "type": "Feature",
        "id": "point1",
        "properties": {"name": "Origin"},
        "geometry": {"type": "Point", "coordinates": [1, 2]},
    }


@pytest.fixture
def line_a() -> dict:
    return {
        "type": "Feature",
        "id": "lineA",
        "properties": {},
        "geometry": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]},
    }


@pytest.fixture
def line_b() -> dict:
    return {
        "type": "Feature",
        "id": "lineB",
        "properties": {},
        "geometry": {"type": "LineString", "coordinates": [[2, 2], [3, 3]]},
    }


@pytest.fixture
def square_polygon() -> dict:
    """Counterclockwise unit square."""
    return {
        "type": "Feature",
        "id": "square",
        "properties": {"kind": "parcel"},
        "geometry": {
            "type": "Polygon",
            "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]],
        },
    }


@pytest.fixture
def feature_collection(point_feature, line_a, line_b, square_polygon) -> dict:
    return {
        "type": "FeatureCollection",
        "features": [point_feature, line_a, line_b, square_polygon],
    }
