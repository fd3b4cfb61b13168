import base64

import flet.canvas as cv
import pytest

from flet_pdf_editor.interactions.tools import ToolStateMachine
from flet_pdf_editor.rendering.compositor import CanvasLayer, Compositor, ImageOverlay
from flet_pdf_editor.types import ElementKind, ImageElement, ShapeElement, TextElement, Tool


@pytest.fixture
def compositor():
    return Compositor(selection_color="#08CF65", handle_size=10)


def add_rect(state, element_id, page=0):
    return state.add(
        ShapeElement(id=element_id, page=page, x=10, y=10, width=100, height=50)
    )


def add_text(state, element_id, content="Hello"):
    return state.add(
        TextElement(
            id=element_id, page=0, x=20, y=80, width=200, height=30, content=content
        )
    )


def test_frame_matches_page_size_and_zoom(state, compositor):
    state.set_zoom(1.5)
    frame = compositor.compose(state)
    assert frame.width == pytest.approx(612 * 1.5)
    assert frame.height == pytest.approx(792 * 1.5)
    assert base64.b64decode(frame.backdrop) == state.page.image
    assert frame.layers == []


def test_elements_are_painted_in_sequence_order(state, compositor):
    add_rect(state, "A")
    add_text(state, "B")
    add_rect(state, "C")
    add_rect(state, "D", page=1)

    frame = compositor.compose(state)

    assert frame.element_ids == ["A", "B", "C"]
    shapes = frame.shapes
    # fill + stroke, text, fill + stroke
    assert len(shapes) == 5
    assert isinstance(shapes[2], cv.Text)
    assert shapes[2].text == "Hello"


def test_shapes_scale_with_zoom(state, compositor):
    add_rect(state, "A")
    state.set_zoom(2.0)
    fill = compositor.compose(state).shapes[0]
    assert (fill.x, fill.y, fill.width, fill.height) == (20, 20, 200, 100)


def test_unstroked_shapes_have_fill_only(state, compositor):
    state.add(
        ShapeElement(
            id="H", page=0, x=0, y=0, width=50, height=20,
            kind=ElementKind.HIGHLIGHT, stroke_color=None, stroke_width=0, opacity=0.4,
        )
    )
    assert len(compositor.compose(state).shapes) == 1


def test_selection_draws_outline_and_four_handles(state, compositor):
    add_rect(state, "A")
    state.select("A")
    shapes = compositor.compose(state).shapes
    # element (2) + outline (1) + four handles drawn as fill and stroke (8)
    assert len(shapes) == 11
    handles = shapes[3:]
    assert {(s.x, s.y) for s in handles} == {(5, 5), (105, 5), (5, 55), (105, 55)}


def test_selection_on_other_page_is_not_drawn(state, compositor):
    add_rect(state, "A", page=1)
    state.selected_id = "A"
    assert compositor.compose(state).shapes == []


def test_text_being_edited_is_left_to_the_editor(state, compositor):
    add_text(state, "T")
    state.begin_text_edit("T")
    frame = compositor.compose(state)
    assert frame.element_ids == ["T"]
    assert not any(isinstance(s, cv.Text) for s in frame.shapes)


def test_images_split_canvas_layers(state, compositor, png_bytes):
    add_rect(state, "A")
    state.add(ImageElement(id="I", page=0, x=50, y=50, width=40, height=20, image_data=png_bytes))
    add_rect(state, "C")

    frame = compositor.compose(state)

    assert [type(layer) for layer in frame.layers] == [CanvasLayer, ImageOverlay, CanvasLayer]
    overlay = frame.layers[1]
    assert overlay.element_id == "I"
    assert base64.b64decode(overlay.src_base64) == png_bytes


def test_transient_draw_is_dashed(state, compositor):
    tools = ToolStateMachine(state)
    tools.select_tool(Tool.RECTANGLE)
    tools.pointer_down(10, 10)
    tools.pointer_move(60, 60)

    frame = compositor.compose(state, tools.transient)

    assert frame.element_ids == []
    outline = frame.shapes[-1]
    assert outline.paint.stroke_dash_pattern == [6, 4]


def test_compose_does_not_change_state(state, compositor):
    add_rect(state, "A")
    state.select("A")
    before = (list(state.elements), state.selected_id, state.zoom)
    compositor.compose(state)
    assert (list(state.elements), state.selected_id, state.zoom) == before


def test_cached_backdrop_is_used_as_is(state, compositor):
    frame = compositor.compose(state, backdrop="cached-page-0")
    assert frame.backdrop == "cached-page-0"


def test_image_payload_is_encoded_once(state, compositor, png_bytes):
    state.add(ImageElement(id="I", page=0, x=50, y=50, width=40, height=20, image_data=png_bytes))
    first = compositor.compose(state).layers[0].src_base64
    state.get("I").x = 80
    assert compositor.compose(state).layers[0].src_base64 is first
