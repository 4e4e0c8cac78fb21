# cardstudio/infrastructure/canvas/painter.py
import logging
from typing import List, Optional, Tuple

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFilter

from cardstudio.domain.compositor import (
    Clear, Color, DrawBackground, DrawText, FillRect, GradientOverlay, PaintCommand,
)
from cardstudio.infrastructure.canvas.fonts import FontBook

logger = logging.getLogger(__name__)


def to_rgba(color: Optional[Color], default: Tuple[int, int, int, int] = (255, 255, 255, 255)) -> Tuple[int, int, int, int]:
    if color is None:
        return default
    if isinstance(color, tuple):
        return color
    try:
        rgb = ImageColor.getrgb(color)
    except ValueError:
        logger.warning(f"Unrecognised color '{color}', using default")
        return default
    return rgb if len(rgb) == 4 else (*rgb, 255)


def gradient_layer(size: Tuple[int, int], start_y: float, start_alpha: float, end_alpha: float) -> Image.Image:
    """Black RGBA layer; alpha is flat above `start_y` and ramps linearly to the bottom edge."""
    w, h = size
    ys = np.arange(h, dtype=np.float32)
    span = max(h - start_y, 1.0)
    ramp = np.clip((ys - start_y) / span, 0.0, 1.0)
    alpha = (start_alpha + (end_alpha - start_alpha) * ramp) * 255.0
    arr = np.zeros((h, w, 4), dtype=np.uint8)
    arr[:, :, 3] = np.round(alpha).astype(np.uint8)[:, None]
    return Image.fromarray(arr, "RGBA")


class PillowPainter:
    """Executes paint commands on a Pillow RGBA surface."""

    def __init__(self, fonts: FontBook):
        self.fonts = fonts

    def paint(self, commands: List[PaintCommand], background: Optional[Image.Image] = None) -> Image.Image:
        canvas: Optional[Image.Image] = None
        for cmd in commands:
            if isinstance(cmd, Clear):
                canvas = Image.new("RGBA", cmd.size, (0, 0, 0, 0))
                continue
            if canvas is None:
                raise ValueError("Paint commands must start with Clear")
            if isinstance(cmd, DrawBackground):
                if background is not None:
                    bg = background.convert("RGBA").resize(cmd.size, Image.Resampling.LANCZOS)
                    canvas.alpha_composite(bg)
            elif isinstance(cmd, FillRect):
                self._fill_rect(canvas, cmd)
            elif isinstance(cmd, GradientOverlay):
                canvas.alpha_composite(gradient_layer(canvas.size, cmd.start_y, cmd.start_alpha, cmd.end_alpha))
            elif isinstance(cmd, DrawText):
                self._draw_text(canvas, cmd)
        return canvas

    def _fill_rect(self, canvas: Image.Image, cmd: FillRect) -> None:
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        x0, y0, x1, y1 = cmd.box
        ImageDraw.Draw(layer).rectangle([x0, y0, x1 - 1, y1 - 1], fill=to_rgba(cmd.fill))
        canvas.alpha_composite(layer)

    def _draw_text(self, canvas: Image.Image, cmd: DrawText) -> None:
        font = self.fonts.get(cmd.font_family, cmd.font_size, cmd.bold)
        if cmd.shadow is not None:
            dx, dy = cmd.shadow.offset
            layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
            ImageDraw.Draw(layer).text(
                (cmd.x + dx, cmd.y + dy), cmd.text, font=font,
                fill=to_rgba(cmd.shadow.color, (0, 0, 0, 255)), anchor=cmd.anchor,
            )
            if cmd.shadow.blur > 0:
                layer = layer.filter(ImageFilter.GaussianBlur(cmd.shadow.blur / 2))
            canvas.alpha_composite(layer)

        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        ImageDraw.Draw(layer).text(
            (cmd.x, cmd.y), cmd.text, font=font,
            fill=to_rgba(cmd.fill),
            anchor=cmd.anchor,
            stroke_width=cmd.stroke_width,
            stroke_fill=to_rgba(cmd.stroke_fill, (0, 0, 0, 255)) if cmd.stroke_width else None,
        )
        canvas.alpha_composite(layer)
