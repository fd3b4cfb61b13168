import pytest

from flet_pdf_editor.config import EditorConfig
from flet_pdf_editor.model import EditorState
from flet_pdf_editor.types import ElementKind, ShapeElement, TextElement


def make_shape(state, page=0, x=10.0, y=10.0, width=50.0, height=40.0):
    element = ShapeElement(
        id=state.next_id(ElementKind.RECTANGLE),
        page=page,
        x=x,
        y=y,
        width=width,
        height=height,
    )
    return state.add(element)


def test_ids_are_unique_and_never_reused(state):
    first = make_shape(state)
    state.remove(first.id)
    second = make_shape(state)
    assert first.id != second.id
    assert second.id.startswith("rectangle-")


def test_add_rejects_bad_page_and_duplicate_id(state):
    with pytest.raises(IndexError):
        make_shape(state, page=5)
    element = make_shape(state)
    with pytest.raises(ValueError):
        state.add(ShapeElement(id=element.id, page=0, x=0, y=0, width=10, height=10))


def test_removing_selected_element_clears_selection(state):
    element = make_shape(state)
    state.select(element.id)
    assert state.remove(element.id)
    assert state.selected_id is None
    assert state.selected is None


def test_removing_other_element_keeps_selection(state):
    a = make_shape(state)
    b = make_shape(state, x=200)
    state.select(a.id)
    state.remove(b.id)
    assert state.selected_id == a.id


def test_remove_unknown_id_is_a_no_op(state):
    make_shape(state)
    assert not state.remove("missing-1")
    assert len(state.elements) == 1


def test_select_unknown_id_raises(state):
    with pytest.raises(KeyError):
        state.select("missing-1")


def test_element_at_returns_topmost_on_current_page(state):
    bottom = make_shape(state, x=0, y=0, width=100, height=100)
    top = make_shape(state, x=50, y=50, width=100, height=100)
    make_shape(state, page=1, x=0, y=0, width=300, height=300)

    assert state.element_at(75, 75) is top
    assert state.element_at(10, 10) is bottom
    assert state.element_at(400, 400) is None


def test_elements_on_page_keep_paint_order(state):
    a = make_shape(state)
    make_shape(state, page=1)
    c = make_shape(state)
    assert [e.id for e in state.elements_on_page(0)] == [a.id, c.id]


def test_text_edit_selects_and_ends(state):
    text = state.add(
        TextElement(id=state.next_id(ElementKind.TEXT), page=0, x=0, y=0, width=200, height=30)
    )
    state.begin_text_edit(text.id)
    assert state.editing is text
    assert state.selected_id == text.id

    state.update_text(text.id, "Hello")
    assert text.content == "Hello"

    state.end_text_edit()
    assert state.editing_id is None
    assert state.selected_id == text.id


def test_begin_text_edit_ignores_non_text(state):
    shape = make_shape(state)
    state.begin_text_edit(shape.id)
    assert state.editing_id is None


def test_page_change_clears_selection(state):
    element = make_shape(state)
    state.select(element.id)
    assert state.next_page()
    assert state.current_page == 1
    assert state.selected_id is None
    assert not state.next_page()
    assert state.previous_page()
    assert not state.previous_page()


def test_zoom_defaults_and_clamps(pages):
    state = EditorState(pages)
    assert state.zoom == 0.8

    assert state.zoom_in() == 0.9
    assert state.set_zoom(10) == 2.0
    assert state.set_zoom(0.01) == 0.3
    assert state.zoom_out() == 0.3


def test_zoom_from_config(pages):
    state = EditorState(pages, EditorConfig(zoom=1.5))
    assert state.zoom == 1.5
    assert state.transform.to_canvas(10) == 15
