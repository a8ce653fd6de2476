import logging

from pathlib import Path
from typing import Callable, Iterator, Protocol

from PIL import Image, ImageChops, ImageDraw

from meme_editor.config import FONT_FAMILY
from meme_editor.meme_text_renderer import load_font

logger = logging.getLogger(__name__)


PLACEHOLDER_START_COLOR = (74, 85, 104)
PLACEHOLDER_END_COLOR = (45, 55, 72)
PLACEHOLDER_TEXT_COLOR = (203, 213, 224)
PLACEHOLDER_TITLE = "Meme Template"


class AssetMap:
    """Maps template ids to image files below an asset root."""

    def __init__(self, templates: dict[str, str], root: str | Path = "") -> None:
        self._templates = dict(templates)
        self._root = Path(root)

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._templates

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)

    def resolve(self, template_id: str) -> Path | None:
        source = self._templates.get(template_id)
        if source is None:
            return None
        return self._root / source


class ImageLoader(Protocol):
    def load(
        self,
        source: Path,
        on_load: Callable[[Image.Image], None],
        on_error: Callable[[Exception], None],
    ) -> None: ...


class PillowImageLoader:
    """Decodes image files with Pillow and reports through callbacks.

    Decoding happens inline, so one of the callbacks has run by the time
    :meth:`load` returns.
    """

    def load(
        self,
        source: Path,
        on_load: Callable[[Image.Image], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        try:
            with Image.open(source) as img:
                bitmap = img.convert("RGB")
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            on_error(e)
            return

        on_load(bitmap)


def _gradient_mask(width: int, height: int) -> Image.Image:
    # Projection of each pixel onto the top-left to bottom-right diagonal.
    norm = width * width + height * height
    row = bytes(int(255 * x * width / norm) for x in range(width))
    column = bytes(int(255 * y * height / norm) for y in range(height))
    horizontal = Image.frombytes("L", (width, 1), row).resize((width, height))
    vertical = Image.frombytes("L", (1, height), column).resize((width, height))
    return ImageChops.add(horizontal, vertical)


def make_placeholder(
    template_id: str,
    width: int,
    height: int,
    font_paths: tuple[str, ...] = FONT_FAMILY,
) -> Image.Image:
    """Generate a labelled gradient to stand in for an unloadable template."""
    start = Image.new("RGB", (width, height), PLACEHOLDER_START_COLOR)
    end = Image.new("RGB", (width, height), PLACEHOLDER_END_COLOR)
    placeholder = Image.composite(end, start, _gradient_mask(width, height))

    draw = ImageDraw.Draw(placeholder)
    draw.text(
        xy=(width / 2, height / 2 - 20),
        text=PLACEHOLDER_TITLE,
        font=load_font(tuple(font_paths), 32),
        fill=PLACEHOLDER_TEXT_COLOR,
        anchor="ms",
    )
    draw.text(
        xy=(width / 2, height / 2 + 20),
        text=template_id.upper(),
        font=load_font(tuple(font_paths), 20),
        fill=PLACEHOLDER_TEXT_COLOR,
        anchor="ms",
    )
    return placeholder
