import pytest
from pydantic import ValidationError

from cardstudio.delivery.schemas.template import ImageElement, Template, TextElement
from cardstudio.domain.editor import TemplateEditor, element_box, move_element, to_surface, to_surface_delta
from cardstudio.domain.errors import NotFoundError
from conftest import measure_by_length


def _template():
    return Template(
        id="t1",
        width=800,
        height=600,
        elements=[
            ImageElement(id="photo", x=100, y=100, width=200, height=200),
            TextElement(id="title", x=400, y=100, font_size=40, label="{{name}}"),
        ],
    )


def test_text_box_is_measured_on_substituted_text():
    el = _template().elements[1]
    short = element_box(el, measure_by_length, name="Al")
    long = element_box(el, measure_by_length, name="Alexandria")

    assert (short.x1 - short.x0) == 2 * 10 + 10
    assert (long.x1 - long.x0) == 10 * 10 + 10
    assert short.y0 == 100 - 40 and short.y1 == 110


def test_hit_test_returns_topmost_element():
    template = _template()
    template.elements.append(ImageElement(id="sticker", x=150, y=150, width=50, height=50))
    editor = TemplateEditor(template, measure_by_length)

    assert editor.hit_test(160, 160) == "sticker"
    assert editor.hit_test(110, 110) == "photo"
    assert editor.hit_test(700, 500) is None


def test_hit_test_follows_element_after_drag():
    editor = TemplateEditor(_template(), measure_by_length, name="Ana")

    assert editor.press(150, 150) == "photo"
    editor.move(450, 350)
    editor.release()

    assert editor.hit_test(150, 150) is None
    assert editor.hit_test(420, 320) == "photo"
    assert [e.x for e in editor.template.elements if e.id == "photo"] == [400]


def test_move_keeps_pointer_offset():
    editor = TemplateEditor(_template(), measure_by_length)
    editor.press(120, 130)
    template = editor.move(220, 230)
    photo = template.elements[0]

    assert (photo.x, photo.y) == (200, 200)


def test_drag_clamps_to_surface():
    moved = move_element(_template(), "photo", dx=5000, dy=-5000)
    photo = moved.elements[0]
    assert (photo.x, photo.y) == (800, 0)


def test_text_baseline_cannot_rise_above_font_size():
    moved = move_element(_template(), "title", dx=-1000, dy=-1000)
    title = moved.elements[1]
    assert (title.x, title.y) == (0, 40)


def test_drag_unknown_element_raises():
    with pytest.raises(NotFoundError):
        move_element(_template(), "missing", 1, 1)


def test_display_coordinates_are_scaled_to_template():
    assert to_surface((200, 150), _template(), (400, 300)) == (400, 300)
    assert to_surface((200, 150), _template()) == (200, 150)


def test_display_delta_is_scaled_to_template():
    assert to_surface_delta((10, 5), _template(), (400, 300)) == (20, 10)
    assert to_surface_delta((10, 5), _template()) == (10, 5)


def test_text_taller_than_surface_clamps_to_bottom_edge():
    template = Template(id="strip", width=300, height=20,
                        elements=[TextElement(id="big", x=10, y=10, font_size=40, label="Hi")])
    moved = move_element(template, "big", dx=0, dy=-100)
    assert moved.elements[0].y == 20


def test_duplicate_element_ids_are_rejected():
    with pytest.raises(ValidationError, match="used more than once"):
        Template(id="t2", elements=[
            ImageElement(id="dup", x=0, y=0, width=10, height=10),
            TextElement(id="dup", x=5, y=40, label="Hi"),
        ])
