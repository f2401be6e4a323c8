"""
Unit tests for MergeSplitEngine.
"""

import pytest
from models.feature import MultiLineString, MultiPoint, create_feature


@pytest.fixture
def loaded_store(store, line_a, line_b, point_feature, square_polygon):
    for geojson in (line_a, line_b, point_feature, square_polygon):
        store.add(create_feature(geojson))
    return store


@pytest.fixture
def multi_point():
    return {
        "type": "Feature",
        "id": "cluster",
        "properties": {"name": "Cluster"},
        "geometry": {"type": "MultiPoint", "coordinates": [[0, 0], [5, 5], [9, 9]]},
    }


class TestMerge:

    def test_merge_lines(self, loaded_store, engine):
        composite = engine.merge(["lineA", "lineB"])

        assert isinstance(composite, MultiLineString)
        assert composite.get_coordinates() == [[[0, 0], [1, 1]], [[2, 2], [3, 3]]]
        assert composite.properties == {}
        assert loaded_store.get("lineA") is None
        assert loaded_store.get("lineB") is None
        assert loaded_store.get(composite.id) is composite

    def test_merge_keeps_input_order(self, loaded_store, engine):
        composite = engine.merge(["lineB", "lineA"])
        assert composite.get_coordinates() == [[[2, 2], [3, 3]], [[0, 0], [1, 1]]]

    def test_merge_events(self, loaded_store, engine, events, record):
        created = record(events.created)
        deleted = record(events.deleted)
        composite = engine.merge(["lineA", "lineB"])

        assert created.calls == [([composite.to_geojson()],)]
        assert [f["id"] for f in deleted.last] == ["lineA", "lineB"]

    def test_merge_renders_once(self, loaded_store, engine, record):
        renders = record(loaded_store.renderRequested)
        engine.merge(["lineA", "lineB"])
        assert renders.count == 1

    def test_merged_feature_not_selected(self, loaded_store, engine):
        loaded_store.set_selected(["lineA", "lineB"])
        engine.merge(["lineA", "lineB"])
        assert loaded_store.get_selected_ids() == []

    def test_other_types_skipped_but_deleted(self, loaded_store, engine):
        composite = engine.merge(["lineA", "lineB", "point1"])
        assert len(composite.get_features()) == 2
        assert loaded_store.get("point1") is None

    def test_mixed_pair_builds_one_part_composite(self, loaded_store, engine, events, record):
        deleted = record(events.deleted)
        composite = engine.merge(["lineA", "point1"])

        assert isinstance(composite, MultiLineString)
        assert composite.get_coordinates() == [[[0, 0], [1, 1]]]
        assert loaded_store.get("lineA") is None
        assert loaded_store.get("point1") is None
        assert [f["id"] for f in deleted.last] == ["lineA", "point1"]

    def test_base_type_comes_from_first_feature(self, loaded_store, engine):
        composite = engine.merge(["point1", "lineA", "lineB"])

        assert isinstance(composite, MultiPoint)
        assert composite.get_coordinates() == [[1, 2]]
        assert loaded_store.get_all_ids() == ["square", composite.id]

    def test_merge_points(self, store, engine):
        for i in range(3):
            store.add(create_feature({
                "type": "Feature", "id": f"p{i}", "properties": {},
                "geometry": {"type": "Point", "coordinates": [i, i]},
            }))
        composite = engine.merge(["p0", "p1", "p2"])
        assert isinstance(composite, MultiPoint)
        assert composite.get_coordinates() == [[0, 0], [1, 1], [2, 2]]

    @pytest.mark.parametrize("feature_ids", [
        [],
        None,
        ["lineA"],
        ["lineA", "missing"],
    ])
    def test_noop_cases(self, loaded_store, engine, events, record, feature_ids):
        created = record(events.created)
        before = loaded_store.get_all_ids()
        assert engine.merge(feature_ids) is None
        assert loaded_store.get_all_ids() == before
        assert created.count == 0

    def test_multi_inputs_skipped(self, loaded_store, engine, multi_point):
        loaded_store.add(create_feature(multi_point))
        assert engine.merge(["cluster", "point1"]) is None
        assert loaded_store.get("cluster") is not None


class TestSplit:

    def test_split_multi_point(self, store, engine, multi_point):
        store.add(create_feature(multi_point))
        parts = engine.split(["cluster"])

        assert [part.get_coordinates() for part in parts] == [[0, 0], [5, 5], [9, 9]]
        assert all(part.properties == {} for part in parts)
        assert store.get("cluster") is None
        assert store.get_all_ids() == [part.id for part in parts]

    def test_split_events(self, store, engine, events, record, multi_point):
        store.add(create_feature(multi_point))
        created = record(events.created)
        deleted = record(events.deleted)
        parts = engine.split(["cluster"])

        assert created.count == 1
        assert [f["id"] for f in created.last] == [part.id for part in parts]
        assert [f["id"] for f in deleted.last] == ["cluster"]

    def test_split_ignores_single_features(self, loaded_store, engine, events, record):
        created = record(events.created)
        deleted = record(events.deleted)
        assert engine.split(["lineA", "missing"]) == []
        assert created.count == 0
        assert deleted.count == 0
        assert loaded_store.get("lineA") is not None

    def test_split_renders_once(self, store, engine, record, multi_point):
        store.add(create_feature(multi_point))
        renders = record(store.renderRequested)
        engine.split(["cluster"])
        assert renders.count == 1

    def test_merge_then_split_restores_coordinates(self, loaded_store, engine):
        originals = [loaded_store.get(fid).get_coordinates() for fid in ("lineA", "lineB")]
        composite = engine.merge(["lineA", "lineB"])
        parts = engine.split([composite.id])
        assert [part.get_coordinates() for part in parts] == originals

    def test_split_then_merge_restores_coordinates(self, store, engine, multi_point):
        store.add(create_feature(multi_point))
        parts = engine.split(["cluster"])
        composite = engine.merge([part.id for part in parts])
        assert composite.get_coordinates() == multi_point["geometry"]["coordinates"]
