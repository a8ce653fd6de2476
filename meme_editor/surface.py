from PIL import Image, ImageDraw, ImageFont


IDLE_FILL_COLOR = (42, 42, 42)
IDLE_TEXT_COLOR = (153, 153, 153)
IDLE_TEXT_SIZE = 24


class Surface:
    """The RGB pixel buffer that gets composed and exported."""

    def __init__(self, width: int, height: int) -> None:
        self._image = Image.new("RGB", (width, height), IDLE_FILL_COLOR)
        self._draw = ImageDraw.Draw(self._image)

    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def draw(self) -> ImageDraw.ImageDraw:
        return self._draw

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    def resize(self, width: int, height: int) -> None:
        if (width, height) == self.size:
            return
        self._image = Image.new("RGB", (width, height), IDLE_FILL_COLOR)
        self._draw = ImageDraw.Draw(self._image)

    def clear(self, prompt: str | None = None) -> None:
        """Fill with the neutral idle colour, optionally with a centred prompt."""
        self._draw.rectangle((0, 0, self.width, self.height), fill=IDLE_FILL_COLOR)
        if prompt:
            self._draw.text(
                xy=(self.width / 2, self.height / 2),
                text=prompt,
                font=ImageFont.load_default(size=IDLE_TEXT_SIZE),
                fill=IDLE_TEXT_COLOR,
                anchor="mm",
            )

    def blit(self, bitmap: Image.Image) -> None:
        """Draw *bitmap* stretched to exactly cover the surface."""
        if bitmap.mode != "RGB":
            bitmap = bitmap.convert("RGB")
        if bitmap.size != self.size:
            bitmap = bitmap.resize(self.size, Image.Resampling.LANCZOS)
        self._image.paste(bitmap, (0, 0))
