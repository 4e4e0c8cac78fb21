# cardstudio/domain/editor.py
"""Interactive template editing: hit-testing and drag-to-reposition.

All coordinates are in template pixels. Text boxes are measured on the
resolved text (placeholders substituted), never on the raw label.
"""
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from cardstudio.delivery.schemas.template import ImageElement, Template, TextElement
from cardstudio.domain.errors import NotFoundError
from cardstudio.domain.placeholders import resolve_text

# (text, font_family, font_size) -> (width, height)
Measure = Callable[[str, str, int], Tuple[float, float]]

TEXT_PAD_X = 5
TEXT_PAD_BELOW = 10


@dataclass(frozen=True)
class Box:
    x0: float
    y0: float
    x1: float
    y1: float

    def contains(self, x: float, y: float) -> bool:
        return self.x0 <= x <= self.x1 and self.y0 <= y <= self.y1


def element_box(el, measure: Measure, name: str = "", message: str = "") -> Box:
    if isinstance(el, ImageElement):
        return Box(el.x, el.y, el.x + el.width, el.y + el.height)
    text = resolve_text(el.label, name, message)
    width, height = measure(text, el.font_family, el.font_size)
    if el.align == "left":
        left = el.x
    elif el.align == "right":
        left = el.x - width
    else:
        left = el.x - width / 2
    return Box(left - TEXT_PAD_X, el.y - height, left + width + TEXT_PAD_X, el.y + TEXT_PAD_BELOW)


def to_surface(point: Tuple[float, float], template: Template,
               display_size: Optional[Tuple[int, int]] = None) -> Tuple[float, float]:
    """Convert a pointer position on the displayed surface to template pixels."""
    x, y = point
    if not display_size:
        return x, y
    dw, dh = display_size
    return x * template.width / dw, y * template.height / dh


def to_surface_delta(delta: Tuple[float, float], template: Template,
                     display_size: Optional[Tuple[int, int]] = None) -> Tuple[float, float]:
    dx, dy = delta
    if not display_size:
        return dx, dy
    dw, dh = display_size
    return dx * template.width / dw, dy * template.height / dh


class TemplateEditor:
    """Editing session over one template.

    Holds the selection and the drag anchor; the template itself is replaced
    (not mutated) on every move.
    """

    def __init__(self, template: Template, measure: Measure, name: str = "", message: str = ""):
        self.template = template
        self.measure = measure
        self.name = name
        self.message = message
        self.selected_id: Optional[str] = None
        self._offset: Optional[Tuple[float, float]] = None

    def hit_test(self, x: float, y: float) -> Optional[str]:
        """Id of the topmost element under (x, y), or None."""
        for el in reversed(self.template.elements):
            if element_box(el, self.measure, self.name, self.message).contains(x, y):
                return el.id
        return None

    def _element(self, element_id: str):
        return next(el for el in self.template.elements if el.id == element_id)

    def press(self, x: float, y: float) -> Optional[str]:
        self.selected_id = self.hit_test(x, y)
        self._offset = None
        if self.selected_id is not None:
            el = self._element(self.selected_id)
            self._offset = (x - el.x, y - el.y)
        return self.selected_id

    def move(self, x: float, y: float) -> Template:
        """Drag the selected element so it keeps its offset from the pointer."""
        if self.selected_id is None or self._offset is None:
            return self.template
        self.template = place_element(
            self.template, self.selected_id, x - self._offset[0], y - self._offset[1],
        )
        return self.template

    def release(self) -> None:
        self._offset = None


def clamp_position(el, x: float, y: float, width: int, height: int) -> Tuple[float, float]:
    """Keep an element on the surface; a text baseline may not rise above its own font size."""
    min_y = min(el.font_size, height) if isinstance(el, TextElement) else 0
    return (
        max(0.0, min(x, float(width))),
        max(float(min_y), min(y, float(height))),
    )


def place_element(template: Template, element_id: str, x: float, y: float) -> Template:
    elements = []
    found = False
    for el in template.elements:
        if el.id == element_id:
            found = True
            nx, ny = clamp_position(el, x, y, template.width, template.height)
            el = el.model_copy(update={"x": nx, "y": ny})
        elements.append(el)
    if not found:
        raise NotFoundError(f"Element '{element_id}' not found in template")
    return template.model_copy(update={"elements": elements})


def move_element(template: Template, element_id: str, dx: float, dy: float) -> Template:
    for el in template.elements:
        if el.id == element_id:
            return place_element(template, element_id, el.x + dx, el.y + dy)
    raise NotFoundError(f"Element '{element_id}' not found in template")
