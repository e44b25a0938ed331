import numpy as np
import pytest
from PIL import Image

from coinrungen.assets import AssetError, AssetManager, Texture


def _write_png(path, width, height, color):
    Image.new("RGBA", (width, height), color).save(path)
    return path


def test_load_reads_size_and_pixels(tmp_path):
    path = _write_png(tmp_path / "red.png", 5, 3, (255, 0, 0, 255))
    texture = Texture.load(path)
    assert texture.width == 5
    assert texture.height == 3
    assert texture.pixels.shape == (3, 5, 4)
    assert (texture.pixels == np.array([255, 0, 0, 255], dtype=np.uint8)).all()


def test_load_keeps_transparency(tmp_path):
    path = _write_png(tmp_path / "clear.png", 2, 2, (10, 20, 30, 0))
    texture = Texture.load(path)
    assert (texture.pixels[..., 3] == 0).all()


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(AssetError, match="Could not load surface"):
        Texture.load(tmp_path / "missing.png")


def test_load_non_image_raises(tmp_path):
    path = tmp_path / "text.png"
    path.write_text("not an image")
    with pytest.raises(AssetError):
        Texture.load(path)


def test_rgb_pixels_gain_opaque_alpha():
    texture = Texture(np.zeros((2, 3, 3), dtype=np.uint8))
    assert texture.pixels.shape == (2, 3, 4)
    assert (texture.pixels[..., 3] == 255).all()


def test_bad_pixel_shape_is_rejected():
    with pytest.raises(ValueError):
        Texture(np.zeros((4, 4), dtype=np.uint8))


def test_manager_caches_loaded_asset(tmp_path):
    _write_png(tmp_path / "a.png", 4, 4, (0, 255, 0, 255))
    manager = AssetManager(root=tmp_path)
    first = manager.get("a.png")
    second = manager.get("a.png")
    assert first is second
    assert manager.exists("a.png")
    assert len(manager) == 1


def test_manager_calls_loader_once_per_name():
    calls = []

    def loader(path):
        calls.append(path)
        return {"path": path, "call": len(calls)}

    manager = AssetManager(loader)
    first = manager.get("one")
    again = manager.get("one")
    other = manager.get("two")
    assert first == {"path": "one", "call": 1}
    assert again is first
    assert other == {"path": "two", "call": 2}
    assert calls == ["one", "two"]


def test_manager_remove_then_reload():
    calls = []

    def loader(path):
        calls.append(path)
        return len(calls)

    manager = AssetManager(loader)
    assert manager.get("x") == 1
    manager.remove("x")
    assert not manager.exists("x")
    assert manager.get("x") == 2


def test_manager_remove_unknown_raises():
    manager = AssetManager(lambda path: path)
    with pytest.raises(AssetError):
        manager.remove("nothing")


def test_manager_failed_load_is_not_cached(tmp_path):
    manager = AssetManager(root=tmp_path)
    with pytest.raises(AssetError):
        manager.get("missing.png")
    assert not manager.exists("missing.png")