from dataclasses import dataclass, field, fields


DEFAULT_TEMPLATES = {
    "drake": "templates/drake.jpeg",
    "distracted": "templates/distracted.jpeg",
    "buttons": "templates/buttons.jpeg",
    "simply": "templates/simply.jpeg",
    "success": "templates/success.jpeg",
}

# Tried in order; Pillow's bundled font is the last resort.
FONT_FAMILY = (
    "impact.ttf",
    "Impact.ttf",
    "ariblk.ttf",
    "Arial Black.ttf",
    "DejaVuSans-Bold.ttf",
)


@dataclass(frozen=True)
class EditorConfig:
    templates: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TEMPLATES))
    asset_root: str = ""
    target_width: int = 600
    target_height: int = 600
    default_font_size: int = 48
    min_font_size: int = 12
    max_font_size: int = 120
    font_paths: tuple[str, ...] = FONT_FAMILY

    def clamp_font_size(self, size: int) -> int:
        return max(self.min_font_size, min(self.max_font_size, size))

    @classmethod
    def from_settings(cls, settings) -> "EditorConfig":
        """Build a config from Django settings.

        Options come from the optional ``MEME_EDITOR`` dict, keyed by the
        upper-cased field names. Without an explicit ``ASSET_ROOT`` the first
        entry of ``STATICFILES_DIRS`` is used, like the rest of the app does
        for static files.
        """
        options = dict(getattr(settings, "MEME_EDITOR", {}))
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in options.items():
            name = key.lower()
            if name not in known:
                raise ValueError(f"Unknown MEME_EDITOR option: {key}")
            kwargs[name] = value

        if "asset_root" not in kwargs:
            static_dirs = getattr(settings, "STATICFILES_DIRS", None) or [""]
            kwargs["asset_root"] = str(static_dirs[0])
        if "font_paths" in kwargs:
            kwargs["font_paths"] = tuple(kwargs["font_paths"])

        return cls(**kwargs)
