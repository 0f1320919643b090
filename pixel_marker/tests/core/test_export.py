"""
Tests for exporting and re-importing marking data.
"""

import json
from datetime import datetime, timezone

import numpy as np
import pytest

from pixel_marker.core.annotation import MarkerSession
from pixel_marker.core.annotation.export import (
    export_filename,
    iso_timestamp,
    load_export,
    save_export,
)

NOW = datetime(2024, 1, 31, 12, 0, 0, tzinfo=timezone.utc)


def test_iso_timestamp():
    assert iso_timestamp(NOW) == "2024-01-31T12:00:00.000Z"


def test_export_filename():
    assert export_filename(NOW) == "pixel-marker-data-2024-01-31.json"


def test_export_document_layout(sample_session):
    document = sample_session.export_data(now=NOW)

    assert document["image"] == {
        "name": "scan.png",
        "size": {"width": 100, "height": 80},
    }
    assert document["exportDate"] == "2024-01-31T12:00:00.000Z"
    assert [(m["x"], m["y"]) for m in document["markers"]] == [(5, 5), (20, 30)]
    assert [a["type"] for a in document["annotations"]] == [
        "line",
        "circle",
        "freehand",
    ]
    assert document["annotations"][0] == {
        "id": document["annotations"][0]["id"],
        "type": "line",
        "x": 10,
        "y": 10,
        "endX": 50,
        "endY": 60,
        "strokeColor": "#2563EB",
        "strokeWidth": 2,
    }
    # serializable as-is
    json.dumps(document)


def test_export_without_image(cfg):
    with pytest.raises(ValueError, match="No image"):
        MarkerSession(cfg).export_data()


def test_reimport_reproduces_render(sample_session, cfg, test_image, tmp_path):
    path = save_export(sample_session.export_data(), tmp_path / "data.json")
    expected = sample_session.render()

    fresh = MarkerSession(cfg, canvas_size=(100, 80))
    fresh.load_image(test_image, "scan.png")
    fresh.import_data(json.loads(path.read_text()))

    assert fresh.state.markers == sample_session.state.markers
    assert fresh.state.annotations == sample_session.state.annotations
    np.testing.assert_array_equal(fresh.render(), expected)


def test_reimport_at_another_canvas_size(sample_session, cfg, test_image):
    document = sample_session.export_data()

    fresh = MarkerSession(cfg, canvas_size=(300, 300))
    fresh.load_image(test_image, "scan.png")
    fresh.import_data(document)
    sample_session.set_canvas_size(300, 300)

    np.testing.assert_array_equal(fresh.render(), sample_session.render())


def test_import_can_be_undone(sample_session):
    document = sample_session.export_data()
    sample_session.clear_all()
    sample_session.import_data(document)

    assert sample_session.undo()
    assert sample_session.state.markers == []


def test_import_rejects_other_image_size(sample_session, cfg):
    document = sample_session.export_data()
    other = MarkerSession(cfg)
    other.load_image(np.zeros((10, 10, 3), dtype=np.uint8))

    with pytest.raises(ValueError, match="image"):
        other.import_data(document)


def test_import_rejects_out_of_bounds(session):
    document = {
        "markers": [{"x": 100, "y": 5, "id": "marker-1"}],
        "annotations": [],
    }

    with pytest.raises(ValueError, match="outside"):
        session.import_data(document)
    assert session.state.markers == []


def test_import_without_image(cfg):
    with pytest.raises(ValueError, match="No image"):
        MarkerSession(cfg).import_data({"markers": [], "annotations": []})


def test_load_export(sample_session, tmp_path):
    path = save_export(sample_session.export_data(now=NOW), tmp_path / "out" / "d.json")

    document = load_export(path)

    assert document.image_name == "scan.png"
    assert document.image_size == (100, 80)
    assert document.export_date == "2024-01-31T12:00:00.000Z"
    assert len(document.markers) == 2
    assert len(document.annotations) == 3
    # indented like the browser export
    assert path.read_text().startswith('{\n  "image"')


def point_document(**overrides):
    annotation = {
        "id": "annotation-1",
        "type": "point",
        "x": 10,
        "y": 10,
        "strokeColor": "#2563EB",
        "strokeWidth": 2,
    }
    annotation.update(overrides)
    return {"markers": [], "annotations": [annotation]}


class TestImportValidation:
    def test_invalid_stroke_color(self, session):
        with pytest.raises(ValueError, match="color"):
            session.import_data(point_document(strokeColor="not-a-color"))

        assert session.state.annotations == []
        assert not session.undo()
        session.render()

    def test_non_string_stroke_color(self, session):
        with pytest.raises(ValueError, match="color"):
            session.import_data(point_document(strokeColor=[1, 0, 0]))

    @pytest.mark.parametrize("width", [0, -3, 11, 500, 2.5, True])
    def test_stroke_width_out_of_range(self, session, width):
        with pytest.raises(ValueError, match="[Ss]troke width"):
            session.import_data(point_document(strokeWidth=width))
        assert session.state.annotations == []

    def test_stroke_width_bounds_follow_config(self, cfg, test_image):
        cfg.drawing.max_stroke_width = 20
        session = MarkerSession(cfg, canvas_size=(100, 80))
        session.load_image(test_image, "scan.png")

        session.import_data(point_document(strokeWidth=15))

        assert session.state.annotations[0].stroke_width == 15

    @pytest.mark.parametrize(
        "annotations",
        [
            ["point"],
            [None],
            [{"type": "point", "x": None, "y": 5}],
            [{"type": "line", "x": 1, "y": 1, "endX": "far", "endY": 2}],
            [{"type": "freehand", "path": ["a", "b"]}],
            [{"type": "freehand", "path": None}],
            [{"type": "point", "x": 1, "y": 1, "strokeWidth": None}],
        ],
    )
    def test_malformed_annotation(self, session, annotations):
        with pytest.raises(ValueError):
            session.import_data({"markers": [], "annotations": annotations})
        assert session.state.annotations == []

    @pytest.mark.parametrize(
        "document",
        [
            {"markers": "nope"},
            {"annotations": {"type": "point"}},
            {"markers": [{"x": None, "y": 1}]},
            {"image": "scan.png"},
        ],
    )
    def test_malformed_document(self, session, document):
        with pytest.raises(ValueError):
            session.import_data(document)
