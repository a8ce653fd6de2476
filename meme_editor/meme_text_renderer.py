import functools
import logging

from typing import NamedTuple

from PIL import ImageFont

from meme_editor.config import FONT_FAMILY
from meme_editor.surface import Surface

logger = logging.getLogger(__name__)


TEXT_FILL_COLOR = (255, 255, 255)
TEXT_STROKE_COLOR = (0, 0, 0)


class TextExtent(NamedTuple):
    width: float
    height: int


@functools.lru_cache(maxsize=64)
def load_font(
    font_paths: tuple[str, ...],
    size: int,
) -> ImageFont.FreeTypeFont:
    """Return the first loadable font of *font_paths* at *size* pixels."""
    for font_path in font_paths:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError:
            continue

    logger.debug(f"No font of {font_paths} found, using Pillow's default")
    return ImageFont.load_default(size=size)


class MemeTextRenderer:
    """Renders text in the classic meme style onto a :class:`Surface`.

    Every text element is:

    1. Upper-cased. Empty or whitespace-only text draws nothing.
    2. Set in a bold face at the requested pixel size, centred on ``(x, y)``
       both horizontally and vertically.
    3. Outlined in black with a stroke of ``size / 16`` pixels.
    4. Filled in white over the outline.
    """

    OUTLINE_RATIO = 16

    def __init__(
        self,
        surface: Surface,
        font_paths: tuple[str, ...] = FONT_FAMILY,
    ) -> None:
        self._surface = surface
        self._font_paths = tuple(font_paths)

    def font(self, size: int) -> ImageFont.FreeTypeFont:
        return load_font(self._font_paths, size)

    @classmethod
    def outline_width(cls, size: int) -> int:
        return max(1, round(size / cls.OUTLINE_RATIO))

    def measure(self, text: str, size: int) -> TextExtent:
        """Return the width of the rendered glyph run and a height of *size*.

        The height is a fixed approximation used for hit-testing, not real
        font metrics.
        """
        if not text.strip():
            return TextExtent(0.0, size)
        return TextExtent(self.font(size).getlength(text.upper()), size)

    def render(self, text: str, x: float, y: float, size: int) -> None:
        if not text.strip():
            return

        self._surface.draw.text(
            xy=(x, y),
            text=text.upper(),
            font=self.font(size),
            fill=TEXT_FILL_COLOR,
            stroke_fill=TEXT_STROKE_COLOR,
            stroke_width=self.outline_width(size),
            anchor="mm",
        )
