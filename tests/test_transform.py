import pytest

from flet_pdf_editor.colors import hex_to_rgb, rgb_to_hex
from flet_pdf_editor.transform import CoordinateTransform, flip_y


@pytest.mark.parametrize(
    "y,height,page_height",
    [
        (0.0, 50.0, 600.0),
        (50.0, 30.0, 792.0),
        (741.5, 50.5, 792.0),
        (12.25, 0.0, 842.0),
        (-10.0, 20.0, 300.0),
    ],
)
def test_flip_round_trip_restores_top_left_y(y, height, page_height):
    export_y = flip_y(page_height, y, height)
    assert export_y == pytest.approx(page_height - y - height)
    assert flip_y(page_height, export_y, height) == pytest.approx(y)


def test_flip_uses_each_page_height():
    assert flip_y(792.0, 0.0, 50.0) == 742.0
    assert flip_y(600.0, 0.0, 50.0) == 550.0


def test_canvas_to_document_is_a_pure_scale():
    transform = CoordinateTransform(zoom=2.0)
    assert transform.point_to_document(100.0, 40.0) == (50.0, 20.0)
    assert transform.to_canvas(25.0) == 50.0
    assert transform.to_document(50.0) == 25.0
    assert transform.rect_to_canvas(10, 20, 30, 40) == (20, 40, 60, 80)


def test_hex_to_rgb_normalizes_channels():
    assert hex_to_rgb("#FFFFFF") == (1.0, 1.0, 1.0)
    assert hex_to_rgb("ff0000") == (1.0, 0.0, 0.0)
    assert hex_to_rgb("#ffff00") == (1.0, 1.0, 0.0)


def test_hex_to_rgb_falls_back_to_black():
    assert hex_to_rgb("not a color") == (0.0, 0.0, 0.0)
    assert hex_to_rgb(None) == (0.0, 0.0, 0.0)


def test_rgb_to_hex():
    assert rgb_to_hex((1.0, 1.0, 0.0)) == "#ffff00"
