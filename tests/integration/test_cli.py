"""
Integration tests for the command line entry point.
"""

import json
import pytest
from pathlib import Path

from main import build_parser, run


@pytest.fixture
def config_path(tmp_path) -> str:
    return str(tmp_path / "config" / "settings.json")


@pytest.fixture
def input_file(tmp_path, feature_collection) -> Path:
    path = tmp_path / "features.geojson"
    path.write_text(json.dumps(feature_collection))
    return path


def parse(*argv):
    return build_parser().parse_args([str(a) for a in argv])


class TestCli:

    def test_parser_collects_merge_groups(self):
        args = parse("in.geojson", "--merge", "a", "b", "--merge", "c", "d", "--split", "m")
        assert args.merge == [["a", "b"], ["c", "d"]]
        assert args.split == ["m"]

    def test_writes_output_file(self, input_file, tmp_path, config_path):
        output = tmp_path / "out.geojson"
        assert run(parse(input_file, "-o", output, "--config", config_path)) == 0

        result = json.loads(output.read_text())
        assert [f["id"] for f in result["features"]] == ["point1", "lineA", "lineB", "square"]

    def test_merge_lines(self, input_file, tmp_path, config_path):
        output = tmp_path / "out.geojson"
        args = parse(input_file, "-o", output, "--config", config_path, "--merge", "lineA", "lineB")
        assert run(args) == 0

        features = json.loads(output.read_text())["features"]
        types = [f["geometry"]["type"] for f in features]
        assert types == ["Point", "Polygon", "MultiLineString"]

    def test_prints_to_stdout(self, input_file, config_path, capsys):
        assert run(parse(input_file, "--config", config_path)) == 0
        result = json.loads(capsys.readouterr().out)
        assert result["type"] == "FeatureCollection"

    def test_records_recent_file(self, input_file, config_path, capsys):
        run(parse(input_file, "--config", config_path))
        saved = json.loads(Path(config_path).read_text())
        assert saved["recent_files"] == [str(input_file)]

    def test_invalid_geojson_fails(self, tmp_path, config_path):
        bad = tmp_path / "bad.geojson"
        bad.write_text(json.dumps({"type": "Point", "coordinates": [1]}))
        assert run(parse(bad, "--config", config_path)) == 1

    def test_missing_file_fails(self, tmp_path, config_path):
        assert run(parse(tmp_path / "missing.geojson", "--config", config_path)) == 1
