import random

import numpy as np
import pytest

from coinrungen.assets import AssetError, AssetManager, Texture
from coinrungen.components import (
    Animation,
    Collision,
    Dynamics,
    Goal,
    Hazard,
    MobAI,
    Particles,
    Sprite,
    Transform,
)
from coinrungen.ecs import Coordinator, System
from coinrungen.helpers import Rectangle
from coinrungen.renderer import Renderer
from coinrungen.tilemap import (
    CRATE_TYPES,
    CollisionType,
    Tilemap,
    TileID,
    TilemapConfig,
)

COLOR = (200, 100, 50, 255)


class _Goals(System):
    pass


class _Hazards(System):
    pass


def _fake_loader(path):
    return Texture(np.full((8, 8, 4), COLOR, dtype=np.uint8))


def _make(renderer=None):
    c = Coordinator()
    for comp in (Transform, Collision, Dynamics, Sprite, Animation, Hazard, Goal, MobAI, Particles):
        c.register_component(comp)
    goals = c.register_system(_Goals())
    c.set_system_signature(_Goals, 1 << c.get_component_type(Goal))
    hazards = c.register_system(_Hazards())
    c.set_system_signature(_Hazards, 1 << c.get_component_type(Hazard))
    tilemap = Tilemap(c, AssetManager(_fake_loader), renderer)
    c.register_system(tilemap)
    c.set_system_signature(Tilemap, 0)
    return c, tilemap, goals, hazards


def _snapshot(tilemap):
    return [[tilemap.get(x, y) for y in range(tilemap.height)] for x in range(tilemap.width)]


def _solid(tile_id):
    if tile_id in (TileID.WALL_MID, TileID.WALL_TOP):
        return CollisionType.FULL
    if tile_id == TileID.CRATE:
        return CollisionType.DOWN_ONLY
    return CollisionType.NONE


def _cleared_map():
    c, tilemap, _, _ = _make()
    tilemap.regenerate(random.Random(1))
    tilemap.set_area(1, 1, 62, 62, TileID.EMPTY)
    return tilemap


def test_empty_map_is_all_wall():
    _, tilemap, _, _ = _make()
    assert tilemap.width == 0
    assert tilemap.get(0, 0) == TileID.WALL_MID


def test_out_of_bounds_reads_wall_and_writes_are_ignored():
    _, tilemap, _, _ = _make()
    tilemap.regenerate(random.Random(3))
    tilemap.set(-1, 5, TileID.CRATE)
    tilemap.set(64, 5, TileID.CRATE)
    assert tilemap.get(-1, 5) == TileID.WALL_MID
    assert tilemap.get(5, 64) == TileID.WALL_MID
    with pytest.raises(IndexError):
        tilemap.crate_type(-1, 0)


def test_set_area_with_top():
    tilemap = _cleared_map()
    tilemap.set_area_with_top(10, 1, 3, 4, TileID.LAVA_MID, TileID.LAVA_TOP)
    for x in range(10, 13):
        assert [tilemap.get(x, y) for y in range(1, 4)] == [TileID.LAVA_MID] * 3
        assert tilemap.get(x, 4) == TileID.LAVA_TOP
        assert tilemap.get(x, 5) == TileID.EMPTY
    assert tilemap.get(13, 2) == TileID.EMPTY


def test_regenerate_borders_and_start_area():
    _, tilemap, _, _ = _make()
    tilemap.regenerate(random.Random(7))
    assert (tilemap.width, tilemap.height) == (64, 64)
    assert all(tilemap.get(0, y) == TileID.WALL_MID for y in range(64))
    assert all(tilemap.get(x, 63) == TileID.WALL_MID for x in range(64))
    assert all(tilemap.get(x, 0) == TileID.WALL_TOP for x in range(1, 5))
    assert all(tilemap.get(x, y) == TileID.EMPTY for x in range(1, 5) for y in range(1, 63))


def test_regenerate_is_deterministic():
    _, first, goals_a, hazards_a = _make()
    _, second, goals_b, hazards_b = _make()
    first.regenerate(random.Random(42))
    second.regenerate(random.Random(42))
    assert _snapshot(first) == _snapshot(second)
    assert len(hazards_a.entities) == len(hazards_b.entities)


@pytest.mark.parametrize("seed", range(20))
def test_regenerate_invariants(seed):
    c, tilemap, goals, hazards = _make()
    tilemap.regenerate(random.Random(seed))
    assert len(goals.entities) == 1
    for x in range(64):
        for y in range(64):
            if tilemap.get(x, y) == TileID.CRATE:
                assert 0 <= tilemap.crate_type(x, y) < len(CRATE_TYPES)
    for e in hazards.entities:
        pos = c.get_component(e, Transform).position
        assert 0.0 < pos.x < 64.0 and 0.0 < pos.y < 64.0
        assert len(c.get_component(e, Animation).frames) == 2


def test_regenerate_twice_after_clear_keeps_one_goal():
    c, tilemap, goals, _ = _make()
    tilemap.regenerate(random.Random(5))
    c.clear_entities()
    tilemap.regenerate(random.Random(6))
    assert len(goals.entities) == 1


def test_flat_config_has_no_crates_or_lava():
    c, tilemap, goals, _ = _make()
    config = TilemapConfig(allow_pit=False, allow_crate=False, allow_dy=False, allow_mobs=False)
    tilemap.regenerate(random.Random(11), config)
    kinds = {tilemap.get(x, y) for x in range(64) for y in range(64)}
    assert kinds <= {TileID.EMPTY, TileID.WALL_TOP, TileID.WALL_MID}
    (coin,) = goals.entities
    assert c.get_component(coin, Transform).position.y == tilemap.height - 1 - 1 + 0.5
    assert not any(c.has_component(e, MobAI) for e in range(c.entity_manager.num_living_entities))


def test_collision_pushes_up_out_of_floor():
    tilemap = _cleared_map()
    pos, hit = tilemap.get_collision(Rectangle(10.0, 62.5, 1.0, 1.0), _solid)
    assert hit is True
    assert (pos.x, pos.y) == (10.0, 62.0)


def test_no_collision_in_open_space():
    tilemap = _cleared_map()
    pos, hit = tilemap.get_collision(Rectangle(10.0, 30.0, 1.0, 1.0), _solid)
    assert hit is False
    assert (pos.x, pos.y) == (10.0, 30.0)


def test_collision_pushes_sideways_out_of_wall():
    tilemap = _cleared_map()
    tilemap.set(20, 10, TileID.WALL_MID)
    pos, hit = tilemap.get_collision(Rectangle(19.75, 53.0, 0.5, 1.0), _solid)
    assert hit is True
    assert pos.x == 19.5
    assert pos.y == 53.0


def test_down_only_tile_blocks_falling_unless_fallthrough():
    tilemap = _cleared_map()
    tilemap.set(10, 20, TileID.CRATE)
    rect = Rectangle(10.0, 42.8, 1.0, 1.0)
    pos, hit = tilemap.get_collision(rect, _solid, False, 0.9)
    assert hit is True
    assert pos.y == 42.0
    pos, hit = tilemap.get_collision(rect, _solid, True, 0.9)
    assert hit is False
    assert pos.y == 42.8


def test_load_textures_preloads_named_assets():
    _, tilemap, _, _ = _make()
    tilemap.load_textures()
    assert tilemap.textures.exists("assets/kenney/Ground/Grass/grassMid.png")
    assert tilemap.textures.exists("assets/kenney/Items/coinGold.png")
    assert tilemap.textures.exists("assets/kenney/Enemies/sawHalf_move.png")


def test_render_requires_textures():
    renderer = Renderer(window_width=64, window_height=64)
    _, tilemap, _, _ = _make(renderer)
    tilemap.regenerate(random.Random(2))
    renderer.camera_position.x = 1.5 * 16
    renderer.camera_position.y = 61.5 * 16
    with pytest.raises(AssetError):
        tilemap.render(0)


def test_render_draws_tiles():
    renderer = Renderer(window_width=64, window_height=64)
    _, tilemap, _, _ = _make(renderer)
    tilemap.load_textures()
    tilemap.regenerate(random.Random(2))
    renderer.camera_position.x = 1.5 * 16
    renderer.camera_position.y = 61.5 * 16
    tilemap.render(0)
    rgb = renderer.rgb()
    assert rgb.shape == (64, 64, 3)
    tile_pixels = np.all(rgb == COLOR[:3], axis=-1)
    assert int(tile_pixels.sum()) > 0