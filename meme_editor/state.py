import enum

from dataclasses import dataclass, field

from PIL import Image


class Mode(str, enum.Enum):
    CLASSIC = "classic"
    FREE = "free"


@dataclass
class FreeText:
    id: int
    text: str
    x: float
    y: float

    def as_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "x": self.x, "y": self.y}


@dataclass(frozen=True)
class BackgroundImage:
    """A template bitmap, already resampled to the size it is displayed at."""

    bitmap: Image.Image
    natural_size: tuple[int, int]

    @property
    def width(self) -> int:
        return self.bitmap.width

    @property
    def height(self) -> int:
        return self.bitmap.height

    @classmethod
    def fit(
        cls,
        bitmap: Image.Image,
        target_width: int,
        target_height: int,
    ) -> "BackgroundImage":
        """Scale *bitmap* to fit the target box, keeping its aspect ratio."""
        natural_width, natural_height = bitmap.size
        scale = min(target_width / natural_width, target_height / natural_height)
        width = max(1, int(natural_width * scale))
        height = max(1, int(natural_height * scale))
        if bitmap.mode != "RGB":
            bitmap = bitmap.convert("RGB")
        if bitmap.size != (width, height):
            bitmap = bitmap.resize((width, height), Image.Resampling.LANCZOS)
        return cls(bitmap=bitmap, natural_size=(natural_width, natural_height))


@dataclass
class EditorState:
    image: BackgroundImage | None = None
    mode: Mode = Mode.CLASSIC
    font_size: int = 48
    top_text: str = ""
    bottom_text: str = ""
    free_texts: list[FreeText] = field(default_factory=list)
    next_text_id: int = 0

    def find_free_text(self, text_id: int) -> FreeText | None:
        for item in self.free_texts:
            if item.id == text_id:
                return item
        return None

    def contains(self, item: FreeText) -> bool:
        return any(existing is item for existing in self.free_texts)
