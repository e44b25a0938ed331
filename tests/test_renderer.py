import math

import numpy as np
import pytest

from coinrungen.assets import Texture
from coinrungen.helpers import Color, Vector2
from coinrungen.renderer import Renderer

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def _solid(color, size=8):
    return Texture(np.tile(np.array(color, dtype=np.uint8), (size, size, 1)))


def _split():
    pixels = np.zeros((8, 8, 4), dtype=np.uint8)
    pixels[:, :4] = RED
    pixels[:, 4:] = BLUE
    return Texture(pixels)


@pytest.fixture
def renderer():
    r = Renderer(window_width=32, window_height=16, obs_width=64, obs_height=64)
    r.rendering_obs = True
    r.clear(Color(0, 0, 0, 255))
    return r


def test_targets_have_requested_shapes(renderer):
    assert renderer.rgb().shape == (64, 64, 3)
    renderer.rendering_obs = False
    assert renderer.rgb().shape == (16, 32, 3)


def test_clear_fills_current_target_only(renderer):
    renderer.clear(Color(10, 20, 30, 255))
    assert (renderer.rgb() == [10, 20, 30]).all()
    assert (renderer.window_target == 0).all()


def test_full_screen_texture_covers_target(renderer):
    drawn = renderer.render_texture(_solid(RED), Vector2(-32.0, -32.0), 8.0)
    assert drawn is True
    assert (renderer.rgb() == [255, 0, 0]).all()


def test_offscreen_texture_is_culled(renderer):
    before = renderer.rgb()
    drawn = renderer.render_texture(_solid(RED), Vector2(500.0, 500.0), 1.0)
    assert drawn is False
    assert np.array_equal(renderer.rgb(), before)


def test_camera_position_moves_drawing(renderer):
    renderer.camera_position = Vector2(1000.0, 0.0)
    drawn = renderer.render_texture(_solid(RED), Vector2(-32.0, -32.0), 8.0)
    assert drawn is False
    assert (renderer.rgb() == 0).all()


def test_small_texture_only_touches_its_area(renderer):
    renderer.render_texture(_solid(RED, 4), Vector2(0.0, 0.0), 1.0)
    image = renderer.rgb()
    assert (image[:32, :, :] == 0).all()
    assert (image[:, :32, :] == 0).all()
    assert (image[32:36, 32:36] == [255, 0, 0]).all()


def test_flip_horizontal_mirrors(renderer):
    renderer.render_texture(_split(), Vector2(-32.0, -32.0), 8.0)
    assert tuple(renderer.rgb()[10, 0]) == RED[:3]
    assert tuple(renderer.rgb()[10, 63]) == BLUE[:3]

    renderer.render_texture(_split(), Vector2(-32.0, -32.0), 8.0, flip_horizontal=True)
    assert tuple(renderer.rgb()[10, 0]) == BLUE[:3]
    assert tuple(renderer.rgb()[10, 63]) == RED[:3]


def test_half_alpha_blends_between_colours(renderer):
    renderer.render_texture(_solid(RED), Vector2(-32.0, -32.0), 8.0, alpha=0.5)
    red = renderer.rgb()[..., 0]
    assert ((red > 0) & (red < 255)).all()
    assert (renderer.rgb()[..., 1:] == 0).all()


def test_transparent_texture_leaves_target(renderer):
    renderer.clear(Color(7, 8, 9, 255))
    renderer.render_texture(_solid((255, 255, 255, 0)), Vector2(-32.0, -32.0), 8.0)
    assert (renderer.rgb() == [7, 8, 9]).all()


def test_rotated_without_rotation_matches_texture(renderer):
    renderer.render_texture_rotated(_split(), Vector2(-32.0, -32.0), 0.0, 8.0)
    assert tuple(renderer.rgb()[20, 1]) == RED[:3]
    assert tuple(renderer.rgb()[20, 62]) == BLUE[:3]


def test_rotated_half_turn_swaps_sides(renderer):
    renderer.render_texture_rotated(_split(), Vector2(-32.0, -32.0), math.pi, 8.0)
    assert tuple(renderer.rgb()[20, 1]) == BLUE[:3]
    assert tuple(renderer.rgb()[20, 62]) == RED[:3]


def test_rotated_offscreen_draws_nothing(renderer):
    renderer.render_texture_rotated(_solid(RED), Vector2(900.0, 900.0), 0.3, 1.0)
    assert (renderer.rgb() == 0).all()