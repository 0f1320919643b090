from argparse import Namespace

import cv2
import numpy as np
import pytest

from pixel_marker.cli import build_parser
from pixel_marker.cli.annotate.annotator import handle_key
from pixel_marker.cli.inspect.summary import summarize
from pixel_marker.cli.render.render import handle as render_handle
from pixel_marker.core.annotation import MarkerSession, Tool
from pixel_marker.core.annotation.export import load_export, save_export


@pytest.fixture
def image():
    image = np.full((60, 120, 3), 200, dtype=np.uint8)
    image[:, :60] = (10, 20, 30)
    return image


@pytest.fixture
def session(image):
    session = MarkerSession(canvas_size=(120, 60))
    session.load_image(image, "xray.png")
    session.pointer_down(30, 30)
    session.set_tool(Tool.LINE)
    session.pointer_down(5, 5)
    session.pointer_up(100, 50)
    return session


def test_parser_discovers_subcommands():
    parser = build_parser()

    args = parser.parse_args(["inspect", "data.json"])
    assert callable(args.fn)

    args = parser.parse_args(["render", "a.json", "b.json", "-o", "out"])
    assert [p.name for p in args.exports] == ["a.json", "b.json"]

    args = parser.parse_args(["annotate", "scan.png", "--canvas", "640x480"])
    assert args.canvas == "640x480"


def test_render_command(tmp_path, image, session):
    images_dir = tmp_path / "images"
    images_dir.mkdir()
    cv2.imwrite(str(images_dir / "xray.png"), cv2.cvtColor(image, cv2.COLOR_RGB2BGR))
    export_path = save_export(session.export_data(), tmp_path / "xray-data.json")

    args = Namespace(
        exports=[export_path],
        images_dir=images_dir,
        output=tmp_path / "renders",
        canvas=None,
        overwrite=False,
    )
    written = render_handle(args)

    assert written == [tmp_path / "renders" / "xray-data.png"]
    rendered = cv2.cvtColor(cv2.imread(str(written[0])), cv2.COLOR_BGR2RGB)
    np.testing.assert_array_equal(rendered, session.render((120, 60)))

    # second run skips the existing render
    assert render_handle(args) == []


def test_render_skips_invalid_document(tmp_path, image, session):
    images_dir = tmp_path / "images"
    images_dir.mkdir()
    cv2.imwrite(str(images_dir / "xray.png"), cv2.cvtColor(image, cv2.COLOR_RGB2BGR))
    document = session.export_data()
    good_path = save_export(document, tmp_path / "good.json")
    document["annotations"] = ["not an annotation"]
    bad_path = save_export(document, tmp_path / "bad.json")

    args = Namespace(
        exports=[bad_path, good_path],
        images_dir=images_dir,
        output=tmp_path / "renders",
        canvas=None,
        overwrite=False,
    )

    assert render_handle(args) == [tmp_path / "renders" / "good.png"]


def test_render_skips_missing_image(tmp_path, session):
    export_path = save_export(session.export_data(), tmp_path / "data.json")

    args = Namespace(
        exports=[export_path],
        images_dir=tmp_path,
        output=tmp_path / "renders",
        canvas="240x240",
        overwrite=True,
    )

    assert render_handle(args) == []


def test_inspect_summary(tmp_path, session):
    path = save_export(session.export_data(), tmp_path / "data.json")

    summary = summarize(load_export(path))

    assert "xray.png (120x60)" in summary
    assert "Markers: 1" in summary
    assert "Annotations: 1" in summary
    assert "line: 1" in summary


def test_handle_key(tmp_path, session):
    output = tmp_path / "export.json"

    assert handle_key(session, ord("c"), output)
    assert session.drawing.tool is Tool.CIRCLE

    assert handle_key(session, ord("2"), output)
    assert session.drawing.stroke_color == session.cfg.palette[1]

    for _ in range(20):
        handle_key(session, ord("+"), output)
    assert session.drawing.stroke_width == session.cfg.drawing.max_stroke_width

    handle_key(session, ord("u"), output)
    assert session.state.annotations == []

    handle_key(session, ord("e"), output)
    assert load_export(output).image_name == "xray.png"

    assert not handle_key(session, ord("q"), output)
    assert not handle_key(session, 27, output)
