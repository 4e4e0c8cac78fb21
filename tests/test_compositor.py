import asyncio

import pytest
from PIL import Image

from cardstudio.delivery.schemas.template import ImageElement, PROFILE_PHOTO_LABEL, Template, TextElement
from cardstudio.domain.compositor import (
    BACKGROUND_FALLBACK_CAPTION, CardCompositor, Clear, DrawBackground, DrawText, FillRect,
    GradientOverlay, build_paint_commands,
)
from cardstudio.domain.errors import ImageLoadError
from cardstudio.infrastructure.canvas.fonts import FontBook
from cardstudio.infrastructure.canvas.image_loader import ImageLoader
from cardstudio.infrastructure.canvas.painter import PillowPainter, gradient_layer, to_rgba
from conftest import oversized_png_data_uri


def _template(**kwargs):
    defaults = dict(id="t1", name="Card", url="https://example.com/bg.png", width=800, height=600)
    defaults.update(kwargs)
    return Template(**defaults)


class StaticLoader:
    def __init__(self, image=None, error=None):
        self.image = image
        self.error = error
        self.calls = []

    async def load(self, src):
        self.calls.append(src)
        if self.error:
            raise self.error
        return self.image


def test_paint_order_follows_element_order():
    template = _template(elements=[
        ImageElement(id="photo", x=50, y=50, label=PROFILE_PHOTO_LABEL),
        TextElement(id="title", x=400, y=100, label="Hi {{name}}"),
        ImageElement(id="slot", x=500, y=300, label=""),
    ])
    cmds = build_paint_commands(template, "Ana", "Cheers!")

    assert isinstance(cmds[0], Clear)
    assert isinstance(cmds[1], DrawBackground)
    assert isinstance(cmds[2], GradientOverlay)
    element_ids = [c.element_id for c in cmds[3:] if getattr(c, "element_id", None)]
    assert element_ids == ["photo", "photo", "title", "slot"]
    assert isinstance(cmds[-1], FillRect)


def test_text_is_substituted_and_scaled():
    template = _template(elements=[TextElement(id="t", x=400, y=100, font_size=40, label="Hi {{name}}")])
    cmds = build_paint_commands(template, "Ana", "", width=400, height=300)

    text = [c for c in cmds if isinstance(c, DrawText)][0]
    assert text.text == "Hi Ana"
    assert (text.x, text.y) == (200, 50)
    assert text.font_size == 20


def test_stroke_and_shadow_variants():
    template = _template(elements=[
        TextElement(id="stroked", x=10, y=40, stroke_color="#000000", stroke_width=2, label="a"),
        TextElement(id="shadowed", x=10, y=80, stroke_color="#000000", label="b"),
        TextElement(id="plain", x=10, y=120, label="c"),
    ])
    by_id = {c.element_id: c for c in build_paint_commands(template) if isinstance(c, DrawText)}

    assert by_id["stroked"].stroke_width == 2 and by_id["stroked"].shadow is None
    assert by_id["shadowed"].stroke_width == 0 and by_id["shadowed"].shadow is not None
    assert by_id["plain"].stroke_width == 0 and by_id["plain"].shadow is None


def test_missing_background_paints_fallback_with_caption():
    cmds = build_paint_commands(_template(), background_loaded=False)

    assert FillRect(box=(0, 0, 800, 600), fill="#f0f0f0") in cmds
    assert any(isinstance(c, DrawText) and c.text == BACKGROUND_FALLBACK_CAPTION for c in cmds)
    assert not any(isinstance(c, GradientOverlay) for c in cmds)


def test_no_elements_draws_default_name_and_message():
    texts = [c for c in build_paint_commands(_template(), "", "") if isinstance(c, DrawText)]

    assert [t.text for t in texts] == ["Recipient Name", "Your message here"]
    assert texts[0].bold and texts[0].y == 300 - 20


def test_overlay_can_be_disabled():
    cmds = build_paint_commands(_template(), overlay=False)
    assert not any(isinstance(c, GradientOverlay) for c in cmds)


def test_later_element_wins_where_boxes_overlap():
    template = _template(url="", elements=[
        ImageElement(id="a", x=0, y=0, width=100, height=100, label=PROFILE_PHOTO_LABEL),
        ImageElement(id="b", x=50, y=50, width=100, height=100, label=""),
    ])
    painter = PillowPainter(FontBook())
    image = painter.paint(build_paint_commands(template, background_loaded=False, overlay=False))

    assert image.size == (800, 600)
    assert image.getpixel((75, 75)) == (224, 224, 224, 255)
    assert image.getpixel((5, 5)) == (68, 68, 68, 255)
    assert image.getpixel((700, 500)) == (240, 240, 240, 255)


def test_gradient_layer_ramps_alpha_from_mid_height():
    layer = gradient_layer((4, 100), start_y=50, start_alpha=0.1, end_alpha=0.6)

    assert abs(layer.getpixel((0, 0))[3] - 0.1 * 255) <= 1
    assert layer.getpixel((0, 99))[3] > layer.getpixel((0, 60))[3]


def test_to_rgba_falls_back_on_bad_color():
    assert to_rgba("#ff0000") == (255, 0, 0, 255)
    assert to_rgba("not-a-color", (1, 2, 3, 4)) == (1, 2, 3, 4)


def test_paint_requires_clear_first():
    with pytest.raises(ValueError):
        PillowPainter(FontBook()).paint([FillRect(box=(0, 0, 1, 1), fill="#000000")])


def test_compositor_records_background_error_and_still_renders():
    loader = StaticLoader(error=ImageLoadError("Could not load image: ClientError"))
    compositor = CardCompositor(loader, PillowPainter(FontBook()))

    result = asyncio.run(compositor.render(_template(), "Ana", "Hi"))

    assert result.error is not None
    assert result.image.size == (800, 600)
    assert any(isinstance(c, DrawText) and c.text == BACKGROUND_FALLBACK_CAPTION for c in result.commands)
    assert result.to_png().startswith(b"\x89PNG")


def test_compositor_draws_loaded_background():
    loader = StaticLoader(image=Image.new("RGBA", (10, 10), (0, 0, 255, 255)))
    compositor = CardCompositor(loader, PillowPainter(FontBook()))

    result = asyncio.run(compositor.render(_template(), width=200, height=100, overlay=False))

    assert result.error is None
    assert loader.calls == ["https://example.com/bg.png"]
    assert result.image.size == (200, 100)
    assert result.image.getpixel((2, 2)) == (0, 0, 255, 255)


def test_oversized_background_falls_back_instead_of_failing():
    compositor = CardCompositor(ImageLoader(), PillowPainter(FontBook()))
    template = _template(url=oversized_png_data_uri())

    result = asyncio.run(compositor.render(template, "Ana", "Hi", width=200, height=150))

    assert "decoding limit" in result.error
    assert result.image.size == (200, 150)
    assert result.image.getpixel((2, 2)) == (240, 240, 240, 255)
