# cardstudio/domain/compositor.py
"""Card compositing.

Rendering is split in two. `build_paint_commands` turns a template plus the
runtime name/message into a flat list of drawing commands; it is pure and is
what the tests assert on. A painter then executes that list onto a raster
surface. Each command carries all of its own paint state (font, fill, stroke,
shadow) so nothing set for one element can leak into the next.
"""
import asyncio
import io
import logging
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from PIL import Image

from cardstudio.delivery.schemas.template import ImageElement, Template, TextElement, PROFILE_PHOTO_LABEL
from cardstudio.domain.errors import ImageLoadError
from cardstudio.domain.placeholders import DEFAULT_MESSAGE, DEFAULT_NAME, resolve_text

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', '%Y-%m-%d %H:%M:%S')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False

Color = Union[str, Tuple[int, int, int, int]]

BACKGROUND_FALLBACK_FILL = "#f0f0f0"
BACKGROUND_FALLBACK_CAPTION = "Image not available"
BACKGROUND_FALLBACK_CAPTION_FILL = "#999999"
PROFILE_PLACEHOLDER_FILL = "#444444"
PROFILE_CAPTION_FILL = "#aaaaaa"
SLOT_PLACEHOLDER_FILL = "#e0e0e0"
SLOT_CAPTION_FILL = "#666666"
CAPTION_FONT_SIZE = 14

_ANCHORS = {"left": "ls", "center": "ms", "right": "rs"}


@dataclass(frozen=True)
class Clear:
    size: Tuple[int, int]


@dataclass(frozen=True)
class DrawBackground:
    size: Tuple[int, int]


@dataclass(frozen=True)
class FillRect:
    box: Tuple[float, float, float, float]
    fill: Color
    element_id: Optional[str] = None


@dataclass(frozen=True)
class GradientOverlay:
    """Black overlay whose opacity ramps from `start_alpha` at `start_y` to `end_alpha` at the bottom."""
    start_y: float
    start_alpha: float = 0.1
    end_alpha: float = 0.6


@dataclass(frozen=True)
class Shadow:
    color: Color
    blur: float
    offset: Tuple[float, float]


@dataclass(frozen=True)
class DrawText:
    text: str
    x: float
    y: float
    font_family: str
    font_size: int
    fill: Color
    anchor: str = "ms"
    bold: bool = False
    stroke_width: int = 0
    stroke_fill: Optional[Color] = None
    shadow: Optional[Shadow] = None
    element_id: Optional[str] = None


PaintCommand = Union[Clear, DrawBackground, FillRect, GradientOverlay, DrawText]


def _scaled_font(size: float, scale: float) -> int:
    return max(1, int(round(size * scale)))


def _text_commands(el: TextElement, name: str, message: str, sx: float, sy: float) -> DrawText:
    font_scale = min(sx, sy)
    stroke_width = 0
    stroke_fill = None
    shadow = None
    if el.stroke_color and el.stroke_width:
        stroke_width = max(1, int(round(el.stroke_width * font_scale)))
        stroke_fill = el.stroke_color
    elif el.stroke_color:
        shadow = Shadow(color=el.stroke_color, blur=2 * font_scale, offset=(1 * sx, 1 * sy))
    return DrawText(
        text=resolve_text(el.label, name, message),
        x=el.x * sx,
        y=el.y * sy,
        font_family=el.font_family,
        font_size=_scaled_font(el.font_size, font_scale),
        fill=el.color,
        anchor=_ANCHORS[el.align],
        stroke_width=stroke_width,
        stroke_fill=stroke_fill,
        shadow=shadow,
        element_id=el.id,
    )


def _image_commands(el: ImageElement, sx: float, sy: float) -> List[PaintCommand]:
    x0, y0 = el.x * sx, el.y * sy
    w, h = el.width * sx, el.height * sy
    if el.is_profile_photo:
        fill, caption_fill, caption = PROFILE_PLACEHOLDER_FILL, PROFILE_CAPTION_FILL, PROFILE_PHOTO_LABEL
    else:
        fill, caption_fill, caption = SLOT_PLACEHOLDER_FILL, SLOT_CAPTION_FILL, el.label
    cmds: List[PaintCommand] = [FillRect(box=(x0, y0, x0 + w, y0 + h), fill=fill, element_id=el.id)]
    if caption:
        cmds.append(DrawText(
            text=caption,
            x=x0 + w / 2,
            y=y0 + h / 2,
            font_family="Arial",
            font_size=_scaled_font(CAPTION_FONT_SIZE, min(sx, sy)),
            fill=caption_fill,
            anchor="mm",
            element_id=el.id,
        ))
    return cmds


def _default_text_commands(name: str, message: str, width: int, height: int, sy: float) -> List[PaintCommand]:
    shadow_color = (0, 0, 0, 178)
    return [
        DrawText(
            text=name if name and name.strip() else DEFAULT_NAME,
            x=width / 2,
            y=height / 2 - 20 * sy,
            font_family="Segoe UI",
            font_size=_scaled_font(42, sy),
            fill="white",
            bold=True,
            shadow=Shadow(color=shadow_color, blur=6, offset=(2, 2)),
        ),
        DrawText(
            text=message if message and message.strip() else DEFAULT_MESSAGE,
            x=width / 2,
            y=height / 2 + 40 * sy,
            font_family="Segoe UI",
            font_size=_scaled_font(28, sy),
            fill="white",
            shadow=Shadow(color=shadow_color, blur=4, offset=(2, 2)),
        ),
    ]


def build_paint_commands(
    template: Template,
    name: str = "",
    message: str = "",
    width: Optional[int] = None,
    height: Optional[int] = None,
    background_loaded: bool = True,
    overlay: bool = True,
) -> List[PaintCommand]:
    """Drawing commands for `template` on a `width` x `height` surface, in paint order."""
    width = width or template.width
    height = height or template.height
    sx = width / template.width
    sy = height / template.height

    cmds: List[PaintCommand] = [Clear(size=(width, height))]

    if background_loaded:
        cmds.append(DrawBackground(size=(width, height)))
        if overlay:
            cmds.append(GradientOverlay(start_y=height / 2))
    else:
        cmds.append(FillRect(box=(0, 0, width, height), fill=BACKGROUND_FALLBACK_FILL))
        if template.url:
            cmds.append(DrawText(
                text=BACKGROUND_FALLBACK_CAPTION,
                x=width / 2,
                y=height / 2,
                font_family="Arial",
                font_size=_scaled_font(24, min(sx, sy)),
                fill=BACKGROUND_FALLBACK_CAPTION_FILL,
                anchor="mm",
            ))

    if not template.elements:
        cmds.extend(_default_text_commands(name, message, width, height, sy))
        return cmds

    for el in template.elements:
        if isinstance(el, TextElement):
            cmds.append(_text_commands(el, name, message, sx, sy))
        else:
            cmds.extend(_image_commands(el, sx, sy))
    return cmds


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG", optimize=True)
    return buf.getvalue()


@dataclass
class RenderResult:
    image: Image.Image
    commands: List[PaintCommand] = field(default_factory=list)
    error: Optional[str] = None

    def to_png(self) -> bytes:
        return encode_png(self.image)


class CardCompositor:
    """Loads a template's background and paints the template onto a fresh surface.

    Every call is a full repaint, so it is safe to call again after any edit.
    """

    def __init__(self, loader, painter, executor: Optional[Executor] = None):
        self.loader = loader
        self.painter = painter
        self.executor = executor

    async def render(
        self,
        template: Template,
        name: str = "",
        message: str = "",
        width: Optional[int] = None,
        height: Optional[int] = None,
        overlay: bool = True,
    ) -> RenderResult:
        width = width or template.width
        height = height or template.height

        background = None
        error = None
        if template.url:
            try:
                background = await self.loader.load(template.url)
            except ImageLoadError as e:
                error = f"Failed to load template image: {e}"
                logger.warning(f"Background for template '{template.name or template.id}' unavailable, painting fallback. {e}")

        commands = build_paint_commands(
            template, name, message, width, height,
            background_loaded=background is not None,
            overlay=overlay,
        )
        loop = asyncio.get_running_loop()
        image = await loop.run_in_executor(self.executor, self.painter.paint, commands, background)
        return RenderResult(image=image, commands=commands, error=error)
