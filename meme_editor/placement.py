import logging

from dataclasses import dataclass
from typing import Callable

from PIL import Image

from meme_editor.assets import AssetMap, ImageLoader
from meme_editor.composition import CompositionEngine
from meme_editor.config import EditorConfig
from meme_editor.state import BackgroundImage, EditorState, FreeText, Mode

logger = logging.getLogger(__name__)


LOAD_FAILED_NOTICE = "Failed to load image. Using placeholder instead."


@dataclass
class HostCallbacks:
    """Outbound notifications for whatever UI hosts the editor."""

    on_list_changed: Callable[[list[FreeText]], None] | None = None
    on_mode_changed: Callable[[Mode], None] | None = None
    on_notice: Callable[[str], None] | None = None

    def list_changed(self, items: list[FreeText]) -> None:
        if self.on_list_changed:
            self.on_list_changed(list(items))

    def mode_changed(self, mode: Mode) -> None:
        if self.on_mode_changed:
            self.on_mode_changed(mode)

    def notice(self, message: str) -> None:
        if self.on_notice:
            self.on_notice(message)


class PlacementModel:
    """Owns every mutation of the editor state and repaints after each one."""

    def __init__(
        self,
        state: EditorState,
        engine: CompositionEngine,
        assets: AssetMap,
        loader: ImageLoader,
        placeholder: Callable[[str, int, int], Image.Image],
        config: EditorConfig,
        callbacks: HostCallbacks | None = None,
        on_removed: Callable[[FreeText], None] | None = None,
    ) -> None:
        self._state = state
        self._engine = engine
        self._assets = assets
        self._loader = loader
        self._placeholder = placeholder
        self._config = config
        self._callbacks = callbacks or HostCallbacks()
        self._on_removed = on_removed
        self._load_request = 0

    def select_template(self, template_id: str) -> None:
        source = self._assets.resolve(template_id)
        if source is None:
            logger.warning(f"Unknown template '{template_id}' ignored")
            return

        self._load_request += 1
        request = self._load_request

        def on_load(bitmap: Image.Image) -> None:
            if request != self._load_request:
                logger.warning(f"Discarding stale load of template '{template_id}'")
                return
            logger.info(f"Template '{template_id}' loaded from {source}")
            self._set_image(bitmap)

        def on_error(error: Exception) -> None:
            if request != self._load_request:
                logger.warning(f"Discarding stale failure of template '{template_id}'")
                return
            logger.warning(
                f"Failed to load template '{template_id}' from {source}: "
                f"{type(error).__name__}: {error}"
            )
            self._callbacks.notice(LOAD_FAILED_NOTICE)
            self._set_image(
                self._placeholder(
                    template_id,
                    self._config.target_width,
                    self._config.target_height,
                )
            )

        self._loader.load(source, on_load, on_error)

    def _set_image(self, bitmap: Image.Image) -> None:
        self._state.image = BackgroundImage.fit(
            bitmap,
            self._config.target_width,
            self._config.target_height,
        )
        self._engine.repaint()

    def set_mode(self, mode: Mode | str) -> None:
        mode = Mode(mode)
        self._state.mode = mode
        self._callbacks.mode_changed(mode)
        self._engine.repaint()

    def set_top_text(self, text: str) -> None:
        self._state.top_text = text
        self._engine.repaint()

    def set_bottom_text(self, text: str) -> None:
        self._state.bottom_text = text
        self._engine.repaint()

    def set_font_size(self, size: int) -> None:
        self._state.font_size = self._config.clamp_font_size(int(size))
        self._engine.repaint()

    def add_free_text(self, text: str) -> FreeText | None:
        text = text.strip()
        if not text:
            return None

        surface = self._engine.surface
        item = FreeText(
            id=self._state.next_text_id,
            text=text,
            x=surface.width / 2,
            y=surface.height / 2,
        )
        self._state.next_text_id += 1
        self._state.free_texts.append(item)

        self._callbacks.list_changed(self._state.free_texts)
        self._engine.repaint()
        return item

    def remove_free_text(self, text_id: int) -> bool:
        item = self._state.find_free_text(text_id)
        if item is not None:
            self._state.free_texts.remove(item)
            if self._on_removed:
                self._on_removed(item)

        self._callbacks.list_changed(self._state.free_texts)
        self._engine.repaint()
        return item is not None
