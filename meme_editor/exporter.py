import time

from io import BytesIO

from meme_editor.surface import Surface


EXPORT_PREFIX = "meme"
NO_IMAGE_NOTICE = "Please select a template first!"


class NoImageError(Exception):
    """Raised when exporting before any template has been selected."""

    def __init__(self, message: str = NO_IMAGE_NOTICE) -> None:
        super().__init__(message)


def export_filename(now: float | None = None) -> str:
    if now is None:
        now = time.time()
    return f"{EXPORT_PREFIX}-{int(now * 1000)}.png"


def export_png(surface: Surface) -> bytes:
    buffered = BytesIO()
    surface.image.save(buffered, format="png")
    return buffered.getvalue()
