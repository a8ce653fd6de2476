import tempfile

from pathlib import Path

import django
import pytest

from django.conf import settings
from PIL import Image

from meme_editor.config import EditorConfig
from meme_editor.editor import MemeEditor

ASSET_ROOT = Path(tempfile.mkdtemp(prefix="meme-editor-assets-"))


def write_template(root: Path, name: str, size: tuple[int, int]) -> Path:
    path = root / "templates" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, (30, 120, 200)).save(path)
    return path


def pytest_configure():
    # "drake" exists on disk, every other default template is missing.
    write_template(ASSET_ROOT, "drake.jpeg", (1200, 800))

    settings.configure(
        DEBUG=False,
        SECRET_KEY="meme-editor-tests",
        ALLOWED_HOSTS=["testserver"],
        ROOT_URLCONF="meme_editor.urls",
        INSTALLED_APPS=[],
        MIDDLEWARE=["django.contrib.sessions.middleware.SessionMiddleware"],
        SESSION_ENGINE="django.contrib.sessions.backends.signed_cookies",
        STATICFILES_DIRS=[str(ASSET_ROOT)],
    )
    django.setup()


class DeferredLoader:
    """Holds load requests until the test completes them."""

    def __init__(self):
        self.pending = []

    def load(self, source, on_load, on_error):
        self.pending.append((source, on_load, on_error))


@pytest.fixture
def config(tmp_path):
    write_template(tmp_path, "drake.jpeg", (1200, 800))
    write_template(tmp_path, "square.png", (300, 300))
    return EditorConfig(
        templates={
            "drake": "templates/drake.jpeg",
            "square": "templates/square.png",
            "broken": "templates/missing.jpeg",
        },
        asset_root=str(tmp_path),
    )


@pytest.fixture
def events():
    return []


@pytest.fixture
def editor(config, events):
    return MemeEditor(
        config=config,
        on_list_changed=lambda items: events.append(("list", [i.id for i in items])),
        on_mode_changed=lambda mode: events.append(("mode", mode)),
        on_notice=lambda message: events.append(("notice", message)),
        on_cursor_changed=lambda cursor: events.append(("cursor", cursor)),
    )


@pytest.fixture
def loaded_editor(editor):
    editor.placement.select_template("square")
    return editor


@pytest.fixture
def deferred_loader():
    return DeferredLoader()
