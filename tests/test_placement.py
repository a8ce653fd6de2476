import pytest

from PIL import Image

from meme_editor.config import EditorConfig
from meme_editor.editor import MemeEditor
from meme_editor.placement import LOAD_FAILED_NOTICE
from meme_editor.state import Mode


def test_select_template_fits_image_into_target_bounds(editor):
    editor.placement.select_template("drake")

    image = editor.state.image
    assert image.natural_size == (1200, 800)
    assert (image.width, image.height) == (600, 400)
    assert editor.surface.size == (600, 400)


def test_select_template_scales_small_images_up(editor):
    editor.placement.select_template("square")

    assert editor.surface.size == (600, 600)


def test_unknown_template_is_ignored(loaded_editor, events):
    image = loaded_editor.state.image

    loaded_editor.placement.select_template("no-such-template")

    assert loaded_editor.state.image is image
    assert events == []


def test_failed_decode_falls_back_to_placeholder(editor, events):
    editor.placement.select_template("broken")

    image = editor.state.image
    assert image is not None
    assert image.natural_size == (600, 600)
    assert (image.width, image.height) == (600, 600)
    assert events == [("notice", LOAD_FAILED_NOTICE)]

    editor.placement.set_top_text("still works")
    editor.engine.repaint()


def test_oversized_image_falls_back_to_placeholder(editor, events, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

    editor.placement.select_template("square")

    assert editor.state.image.natural_size == (600, 600)
    assert events == [("notice", LOAD_FAILED_NOTICE)]


def test_value_error_while_decoding_falls_back_to_placeholder(editor, events, monkeypatch):
    def bad_open(*args, **kwargs):
        raise ValueError("unsupported plugin data")

    monkeypatch.setattr(Image, "open", bad_open)

    editor.placement.select_template("square")

    assert editor.state.image.natural_size == (600, 600)
    assert events == [("notice", LOAD_FAILED_NOTICE)]


def test_placeholder_for_failing_drake(tmp_path):
    # The asset root has no files at all, so decoding drake fails.
    editor = MemeEditor(config=EditorConfig(asset_root=str(tmp_path)))

    editor.placement.select_template("drake")

    assert editor.state.image.natural_size == (600, 600)
    assert editor.surface.size == (600, 600)
    editor.engine.repaint()


def test_latest_requested_template_wins(config, deferred_loader):
    editor = MemeEditor(config=config, loader=deferred_loader)
    editor.placement.select_template("drake")
    editor.placement.select_template("square")
    (_, drake_loaded, _), (_, square_loaded, _) = deferred_loader.pending

    square_loaded(Image.new("RGB", (300, 300)))
    drake_loaded(Image.new("RGB", (1200, 800)))

    assert editor.state.image.natural_size == (300, 300)


def test_stale_failure_does_not_replace_newer_image(config, deferred_loader):
    editor = MemeEditor(config=config, loader=deferred_loader)
    editor.placement.select_template("broken")
    editor.placement.select_template("square")
    (_, _, broken_failed), (_, square_loaded, _) = deferred_loader.pending

    square_loaded(Image.new("RGB", (300, 300)))
    broken_failed(OSError("late failure"))

    assert editor.state.image.natural_size == (300, 300)


def test_pending_load_keeps_previous_image(config, deferred_loader):
    editor = MemeEditor(config=config, loader=deferred_loader)
    editor.placement.select_template("square")
    _, square_loaded, _ = deferred_loader.pending[0]
    square_loaded(Image.new("RGB", (300, 300)))
    image = editor.state.image

    editor.placement.select_template("drake")

    assert len(deferred_loader.pending) == 2
    assert editor.state.image is image


def test_set_mode_notifies_host(editor, events):
    editor.placement.set_mode("free")
    editor.placement.set_mode(Mode.CLASSIC)

    assert events == [("mode", Mode.FREE), ("mode", Mode.CLASSIC)]
    assert editor.state.mode is Mode.CLASSIC


def test_set_mode_rejects_unknown_mode(editor):
    with pytest.raises(ValueError):
        editor.placement.set_mode("sideways")


def test_mode_switch_preserves_both_modes_data(loaded_editor):
    placement = loaded_editor.placement

    placement.set_top_text("A")
    placement.set_mode(Mode.FREE)
    placement.add_free_text("B")
    placement.set_mode(Mode.CLASSIC)

    assert loaded_editor.state.top_text == "A"

    placement.set_mode(Mode.FREE)

    assert [item.text for item in loaded_editor.state.free_texts] == ["B"]


@pytest.mark.parametrize(
    "requested, expected",
    [(48, 48), (12, 12), (120, 120), (4, 12), (500, 120), ("64", 64)],
)
def test_font_size_is_clamped(editor, requested, expected):
    editor.placement.set_font_size(requested)

    assert editor.state.font_size == expected


def test_add_free_text_centres_new_items(loaded_editor, events):
    item = loaded_editor.placement.add_free_text("  hello  ")

    assert item.text == "hello"
    assert (item.x, item.y) == (300, 300)
    assert loaded_editor.state.free_texts == [item]
    assert events[-1] == ("list", [item.id])


@pytest.mark.parametrize("text", ["", "   ", "\t\n"])
def test_add_blank_free_text_is_ignored(loaded_editor, events, text):
    assert loaded_editor.placement.add_free_text(text) is None
    assert loaded_editor.state.free_texts == []
    assert events == []


def test_free_text_ids_are_never_reused(loaded_editor):
    placement = loaded_editor.placement
    first = placement.add_free_text("one")
    second = placement.add_free_text("two")
    placement.remove_free_text(second.id)
    third = placement.add_free_text("three")

    assert [first.id, second.id, third.id] == [0, 1, 2]
    assert [item.id for item in loaded_editor.state.free_texts] == [0, 2]


def test_remove_free_text_is_idempotent(loaded_editor):
    placement = loaded_editor.placement
    keep = placement.add_free_text("keep")
    drop = placement.add_free_text("drop")

    assert placement.remove_free_text(drop.id) is True
    after_first = list(loaded_editor.state.free_texts)
    assert placement.remove_free_text(drop.id) is False

    assert loaded_editor.state.free_texts == after_first == [keep]


def test_free_mode_repaint_draws_items(loaded_editor):
    background = loaded_editor.surface.image.tobytes()
    loaded_editor.placement.add_free_text("invisible in classic")
    assert loaded_editor.surface.image.tobytes() == background

    loaded_editor.placement.set_mode(Mode.FREE)

    assert loaded_editor.surface.image.tobytes() != background
