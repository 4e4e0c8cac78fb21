# cardstudio/infrastructure/canvas/fonts.py
import logging
import os
from functools import lru_cache
from typing import List, Tuple

from PIL import ImageFont

logger = logging.getLogger(__name__)

FALLBACK_REGULAR = "DejaVuSans.ttf"
FALLBACK_BOLD = "DejaVuSans-Bold.ttf"


class FontBook:
    """Resolves (family, size, bold) to a Pillow font and measures text with it."""

    def __init__(self, fonts_dir: str = "fonts"):
        self.fonts_dir = fonts_dir
        self._get = lru_cache(maxsize=256)(self._load)

    def _candidates(self, family: str, bold: bool) -> List[str]:
        family = (family or "Arial").strip()
        stems = [f"{family} Bold", f"{family}-Bold", f"{family}bd"] if bold else [family]
        stems += [s.lower().replace(" ", "") for s in stems]
        names = [f"{stem}.ttf" for stem in stems]
        paths = [os.path.join(self.fonts_dir, n) for n in names] + names
        paths.append(FALLBACK_BOLD if bold else FALLBACK_REGULAR)
        return paths

    def _load(self, family: str, size: int, bold: bool):
        for path in self._candidates(family, bold):
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                continue
        logger.warning("No TrueType font found for '%s'; using Pillow's default font", family)
        return ImageFont.load_default(size=size)

    def get(self, family: str, size: int, bold: bool = False):
        return self._get(family or "Arial", max(1, int(round(size))), bold)

    def measure(self, text: str, family: str, size: int, bold: bool = False) -> Tuple[float, float]:
        """Advance width of `text` and the nominal line height (the font size)."""
        font = self.get(family, size, bold)
        return font.getlength(text), float(size)
