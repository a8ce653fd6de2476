import functools
import logging

from typing import Callable

from meme_editor.assets import AssetMap, ImageLoader, PillowImageLoader, make_placeholder
from meme_editor.composition import CompositionEngine
from meme_editor.config import EditorConfig
from meme_editor.exporter import NoImageError, export_filename, export_png
from meme_editor.interaction import Cursor, InteractionController
from meme_editor.meme_text_renderer import MemeTextRenderer
from meme_editor.placement import HostCallbacks, PlacementModel
from meme_editor.state import EditorState, FreeText, Mode
from meme_editor.surface import Surface

logger = logging.getLogger(__name__)


class MemeEditor:
    """One editing session: state, surface and the objects that act on them."""

    def __init__(
        self,
        config: EditorConfig | None = None,
        loader: ImageLoader | None = None,
        on_list_changed: Callable[[list[FreeText]], None] | None = None,
        on_mode_changed: Callable[[Mode], None] | None = None,
        on_notice: Callable[[str], None] | None = None,
        on_cursor_changed: Callable[[Cursor], None] | None = None,
    ) -> None:
        self.config = config or EditorConfig()
        self.assets = AssetMap(self.config.templates, self.config.asset_root)
        self.state = EditorState(font_size=self.config.default_font_size)
        self.surface = Surface(self.config.target_width, self.config.target_height)
        self.renderer = MemeTextRenderer(self.surface, self.config.font_paths)
        self.engine = CompositionEngine(self.state, self.surface, self.renderer)
        self.interaction = InteractionController(
            self.state,
            self.engine,
            self.renderer,
            on_cursor_changed=on_cursor_changed,
        )
        self.placement = PlacementModel(
            state=self.state,
            engine=self.engine,
            assets=self.assets,
            loader=loader or PillowImageLoader(),
            placeholder=functools.partial(
                make_placeholder, font_paths=self.config.font_paths
            ),
            config=self.config,
            callbacks=HostCallbacks(
                on_list_changed=on_list_changed,
                on_mode_changed=on_mode_changed,
                on_notice=on_notice,
            ),
            on_removed=self.interaction.forget,
        )
        self.engine.repaint()

    def export(self, now: float | None = None) -> tuple[str, bytes]:
        """Return ``(file_name, png_bytes)`` for the composed meme."""
        if self.state.image is None:
            raise NoImageError()

        self.engine.repaint()
        file_name = export_filename(now)
        data = export_png(self.surface)
        logger.info(f"Exported {file_name} ({len(data)} bytes)")
        return file_name, data

    def snapshot(self) -> dict:
        state = self.state
        return {
            "mode": state.mode.value,
            "font_size": state.font_size,
            "top_text": state.top_text,
            "bottom_text": state.bottom_text,
            "free_texts": [item.as_dict() for item in state.free_texts],
            "has_image": state.image is not None,
            "width": self.surface.width,
            "height": self.surface.height,
            "cursor": self.interaction.cursor.value,
        }
