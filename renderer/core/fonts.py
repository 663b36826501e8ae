"""Font lookup and text measurement shared by drawing and hit-testing."""

from __future__ import annotations

import logging
import os
from typing import Dict, Iterable, Optional, Tuple

from PIL import ImageFont

logger = logging.getLogger(__name__)

FONT_OPTIONS = [
    "Arial",
    "Verdana",
    "Helvetica",
    "Times New Roman",
    "Courier New",
    "Georgia",
    "Palatino",
    "Garamond",
    "Bookman",
    "Comic Sans MS",
    "Trebuchet MS",
    "Impact",
]

# family -> font files tried in order (bundled dir first, then system search)
FONT_FILES: Dict[str, Tuple[str, ...]] = {
    "Arial": ("arial.ttf", "Arial.ttf", "LiberationSans-Regular.ttf"),
    "Verdana": ("verdana.ttf", "Verdana.ttf", "DejaVuSans.ttf"),
    "Helvetica": ("Helvetica.ttc", "helvetica.ttf", "LiberationSans-Regular.ttf"),
    "Times New Roman": ("times.ttf", "Times New Roman.ttf", "LiberationSerif-Regular.ttf"),
    "Courier New": ("cour.ttf", "Courier New.ttf", "LiberationMono-Regular.ttf"),
    "Georgia": ("georgia.ttf", "Georgia.ttf", "DejaVuSerif.ttf"),
    "Palatino": ("pala.ttf", "Palatino.ttc", "P052-Roman.otf"),
    "Garamond": ("GARA.TTF", "Garamond.ttf", "EBGaramond-Regular.ttf"),
    "Bookman": ("BOOKOS.TTF", "Bookman Old Style.ttf", "URWBookman-Light.otf"),
    "Comic Sans MS": ("comic.ttf", "Comic Sans MS.ttf", "ComicNeue-Regular.ttf"),
    "Trebuchet MS": ("trebuc.ttf", "Trebuchet MS.ttf", "DejaVuSans.ttf"),
    "Impact": ("impact.ttf", "Impact.ttf", "Anton-Regular.ttf"),
}


class FontResolver:
    """
    Resolves ``(size, family)`` to a Pillow font and measures text with it.

    Fonts are looked up in ``fonts_dir`` first, then by file name through
    Pillow's system font search. When nothing matches, Pillow's default
    scalable font is used so measurement stays deterministic.
    """

    def __init__(self, fonts_dir: Optional[str] = None):
        self.fonts_dir = fonts_dir
        self._fonts: Dict[Tuple[int, str], ImageFont.ImageFont] = {}

    # -------------------------------------------------
    def get(self, font_size: int, font_family: str):
        key = (max(1, int(font_size)), font_family)
        font = self._fonts.get(key)
        if font is None:
            font = self._load(*key)
            self._fonts[key] = font
        return font

    # -------------------------------------------------
    def measure(self, text: str, font_size: int, font_family: str) -> float:
        if not text:
            return 0.0
        return float(self.get(font_size, font_family).getlength(text))

    # -------------------------------------------------
    def _load(self, size: int, family: str):
        for path in self._candidate_paths(family):
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                continue
        logger.debug("No font file found for %r, using Pillow default font", family)
        return ImageFont.load_default(size=size)

    def _candidate_paths(self, family: str) -> Iterable[str]:
        names = FONT_FILES.get(family, (f"{family}.ttf",))
        if self.fonts_dir and os.path.isdir(self.fonts_dir):
            for name in names:
                path = os.path.join(self.fonts_dir, name)
                if os.path.exists(path):
                    yield path
        yield from names
