from typing import Literal, Optional

from pydantic import PositiveInt

from cardstudio.delivery.schemas.template import CamelModel, Template


class HitTestRequest(CamelModel):
    template: Template
    x: float
    y: float
    # Size the surface is displayed at; defaults to the template's own size
    display_width: Optional[PositiveInt] = None
    display_height: Optional[PositiveInt] = None
    name: str = ""
    message: str = ""


class HitTestResponse(CamelModel):
    element_id: Optional[str] = None


class DragRequest(CamelModel):
    template: Template
    element_id: str
    # Pointer delta in display pixels
    dx: float
    dy: float
    display_width: Optional[PositiveInt] = None
    display_height: Optional[PositiveInt] = None


class AddElementRequest(CamelModel):
    template: Template
    type: Literal["text", "image"]
