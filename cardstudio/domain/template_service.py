# cardstudio/domain/template_service.py
import logging
import time
import uuid
from typing import List, Optional, Tuple, Union

from cardstudio.delivery.schemas.template import (
    CardType, DEFAULT_HEIGHT, DEFAULT_WIDTH, ImageElement, PROFILE_PHOTO_LABEL, Template, TextElement,
)
from cardstudio.domain.compositor import CardCompositor, RenderResult
from cardstudio.domain.editor import Measure, TemplateEditor, move_element, to_surface, to_surface_delta

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', '%Y-%m-%d %H:%M:%S')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False

_PRESET_BACKGROUNDS = {
    CardType.BIRTHDAY: [
        ("birthday-1", "Colorful Balloons",
         "https://images.unsplash.com/photo-1530103862676-de8c9debad1d?auto=format&fit=crop&w=800&h=600"),
        ("birthday-2", "Birthday Cake",
         "https://images.unsplash.com/photo-1558636508-e0db3814bd1d?auto=format&fit=crop&w=800&h=600"),
    ],
    CardType.ANNIVERSARY: [
        ("anniversary-1", "Elegant Office",
         "https://images.unsplash.com/photo-1511795409834-ef04bbd61622?auto=format&fit=crop&w=800&h=600"),
        ("anniversary-2", "Handshake",
         "https://images.unsplash.com/photo-1521791136064-7986c2920216?auto=format&fit=crop&w=800&h=600"),
    ],
}


def preset_templates(card_type: CardType = CardType.BIRTHDAY) -> List[Template]:
    """Built-in backgrounds; with no elements they render the plain name/message layout."""
    return [
        Template(id=pid, name=name, url=url, card_type=card_type)
        for pid, name, url in _PRESET_BACKGROUNDS.get(card_type, [])
    ]


def new_template_draft(card_type: CardType = CardType.BIRTHDAY,
                       width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> Template:
    stamp = int(time.time() * 1000)
    return Template(
        name="",
        url="",
        card_type=card_type,
        width=width,
        height=height,
        elements=[
            ImageElement(id=f"element-{stamp}-photo", x=50, y=50, width=200, height=200, label=PROFILE_PHOTO_LABEL),
            TextElement(id=f"element-{stamp}-name", x=width / 2, y=100, font_size=48,
                        stroke_color="#000000", stroke_width=2, label="{{name}}"),
            TextElement(id=f"element-{stamp}-message", x=width / 2, y=200, font_size=32,
                        stroke_color="#000000", stroke_width=2, label="{{message}}"),
        ],
    )


def new_element(kind: str) -> Union[TextElement, ImageElement]:
    element_id = f"element-{uuid.uuid4().hex[:12]}"
    if kind == "text":
        return TextElement(id=element_id, x=50, y=50, label="Sample Text",
                           stroke_color="#000000", stroke_width=1)
    return ImageElement(id=element_id, x=50, y=100, label="Photo Placeholder")


class TemplateService:
    """Rendering and editing operations over templates."""

    def __init__(self, compositor: CardCompositor, measure: Measure):
        self.compositor = compositor
        self.measure = measure

    async def render(self, template: Template, name: str = "", message: str = "",
                     width: Optional[int] = None, height: Optional[int] = None,
                     overlay: bool = True) -> RenderResult:
        start = time.perf_counter()
        result = await self.compositor.render(template, name, message, width, height, overlay)
        logger.info(
            f"Rendered template '{template.name or template.id}' at {result.image.size[0]}x{result.image.size[1]} "
            f"({len(result.commands)} commands) in {time.perf_counter() - start:.2f}s"
        )
        return result

    def hit_test(self, template: Template, x: float, y: float,
                 display_size: Optional[Tuple[int, int]] = None,
                 name: str = "", message: str = "") -> Optional[str]:
        sx, sy = to_surface((x, y), template, display_size)
        return TemplateEditor(template, self.measure, name, message).hit_test(sx, sy)

    def drag(self, template: Template, element_id: str, dx: float, dy: float,
             display_size: Optional[Tuple[int, int]] = None) -> Template:
        sdx, sdy = to_surface_delta((dx, dy), template, display_size)
        return move_element(template, element_id, sdx, sdy)

    def add_element(self, template: Template, kind: str) -> Template:
        return template.model_copy(update={"elements": [*template.elements, new_element(kind)]})
