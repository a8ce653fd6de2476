from meme_editor.meme_text_renderer import MemeTextRenderer
from meme_editor.state import EditorState, Mode
from meme_editor.surface import Surface


IDLE_PROMPT = "Select a template to get started"


class CompositionEngine:
    """Redraws the surface from the background image and the active text.

    Every repaint starts again from the untouched background, so the output
    only ever depends on the current state.
    """

    def __init__(
        self,
        state: EditorState,
        surface: Surface,
        renderer: MemeTextRenderer,
    ) -> None:
        self._state = state
        self._surface = surface
        self._renderer = renderer

    @property
    def surface(self) -> Surface:
        return self._surface

    def text_layout(self) -> list[tuple[str, float, float]]:
        """Return the ``(text, x, y)`` placements the active mode draws."""
        state = self._state
        if state.mode is Mode.FREE:
            return [(item.text, item.x, item.y) for item in state.free_texts]

        center_x = self._surface.width / 2
        layout = []
        if state.top_text:
            layout.append((state.top_text, center_x, state.font_size))
        if state.bottom_text:
            layout.append(
                (state.bottom_text, center_x, self._surface.height - state.font_size)
            )
        return layout

    def repaint(self) -> None:
        image = self._state.image
        if image is None:
            self._surface.clear(prompt=IDLE_PROMPT)
            return

        self._surface.resize(image.width, image.height)
        self._surface.clear()
        self._surface.blit(image.bitmap)

        for text, x, y in self.text_layout():
            self._renderer.render(text, x, y, self._state.font_size)
