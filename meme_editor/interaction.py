import enum
import logging
import math

from dataclasses import dataclass
from typing import Callable

from meme_editor.composition import CompositionEngine
from meme_editor.meme_text_renderer import MemeTextRenderer
from meme_editor.state import EditorState, FreeText, Mode

logger = logging.getLogger(__name__)


class Cursor(str, enum.Enum):
    CROSSHAIR = "crosshair"
    GRABBING = "grabbing"


@dataclass(frozen=True)
class Drag:
    item: FreeText
    offset_x: float
    offset_y: float


class InteractionController:
    """Turns pointer events into drags of free text items.

    Pointer coordinates are given in display pixels; the surface may be shown
    at a different size than its buffer, so each axis is scaled separately.
    """

    def __init__(
        self,
        state: EditorState,
        engine: CompositionEngine,
        renderer: MemeTextRenderer,
        on_cursor_changed: Callable[[Cursor], None] | None = None,
    ) -> None:
        self._state = state
        self._engine = engine
        self._renderer = renderer
        self._on_cursor_changed = on_cursor_changed
        self._display_size: tuple[float, float] | None = None
        self._drag: Drag | None = None
        self._cursor = Cursor.CROSSHAIR

    @property
    def cursor(self) -> Cursor:
        return self._cursor

    @property
    def dragging(self) -> FreeText | None:
        if self._drag is None or not self._state.contains(self._drag.item):
            return None
        return self._drag.item

    def set_display_size(self, width: float, height: float) -> None:
        if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
            raise ValueError(f"Display size must be positive and finite, got {width}x{height}")
        self._display_size = (width, height)

    def to_buffer(self, x: float, y: float) -> tuple[float, float]:
        if not (math.isfinite(x) and math.isfinite(y)):
            raise ValueError(f"Pointer coordinates must be finite, got ({x}, {y})")
        buffer_width, buffer_height = self._engine.surface.size
        display_width, display_height = self._display_size or (buffer_width, buffer_height)
        x, y = x * buffer_width / display_width, y * buffer_height / display_height
        if not (math.isfinite(x) and math.isfinite(y)):
            raise ValueError("Pointer coordinates overflow the surface scale")
        return x, y

    def hit_test(self, x: float, y: float) -> FreeText | None:
        """Return the topmost free text whose box contains buffer point (x, y)."""
        font_size = self._state.font_size
        for item in reversed(self._state.free_texts):
            half_width = self._renderer.measure(item.text, font_size).width / 2
            half_height = font_size / 2
            if (
                item.x - half_width <= x <= item.x + half_width
                and item.y - half_height <= y <= item.y + half_height
            ):
                return item
        return None

    def down(self, x: float, y: float) -> bool:
        if self._state.mode is not Mode.FREE or self._state.image is None:
            return False

        x, y = self.to_buffer(x, y)
        item = self.hit_test(x, y)
        if item is None:
            return False

        self._drag = Drag(item=item, offset_x=x - item.x, offset_y=y - item.y)
        self._set_cursor(Cursor.GRABBING)
        logger.debug(f"Dragging free text {item.id} from ({item.x}, {item.y})")
        return True

    def move(self, x: float, y: float) -> bool:
        if self._drag is None or self._state.mode is not Mode.FREE:
            return False
        if self.dragging is None:
            self._release()
            return False

        x, y = self.to_buffer(x, y)
        item = self._drag.item
        item.x = x - self._drag.offset_x
        item.y = y - self._drag.offset_y
        self._engine.repaint()
        return True

    def up(self) -> None:
        self._release()

    def leave(self) -> None:
        self._release()

    def forget(self, item: FreeText) -> None:
        """End the drag if it holds *item*, which is leaving the collection."""
        if self._drag is not None and self._drag.item is item:
            self._release()

    def _release(self) -> None:
        if self._drag is None:
            return
        logger.debug(f"Released free text {self._drag.item.id}")
        self._drag = None
        self._set_cursor(Cursor.CROSSHAIR)

    def _set_cursor(self, cursor: Cursor) -> None:
        self._cursor = cursor
        if self._on_cursor_changed:
            self._on_cursor_changed(cursor)
