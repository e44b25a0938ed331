"""Tile map: procedural level generation, tile rendering and tile collision."""

from __future__ import annotations

import math
import random
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum

from coinrungen.assets import AssetError, AssetManager, Texture
from coinrungen.components import (
    Animation,
    Collision,
    Goal,
    Hazard,
    MobAI,
    Particle,
    Particles,
    Sprite,
    Transform,
)
from coinrungen.ecs import Coordinator, System
from coinrungen.helpers import (
    PIXELS_TO_UNIT,
    UNIT_TO_PIXELS,
    Rectangle,
    Vector2,
    get_collision_overlap,
    to_lower,
)
from coinrungen.renderer import Renderer


class TileID(IntEnum):
    EMPTY = 0
    WALL_TOP = 1
    WALL_MID = 2
    LAVA_TOP = 3
    LAVA_MID = 4
    CRATE = 5


class CollisionType(IntEnum):
    NONE = 0
    FULL = 1
    DOWN_ONLY = 2


WALL_THEMES = ("Dirt", "Grass", "Planet", "Sand", "Snow", "Stone")
WALKING_ENEMIES = (
    "slimeBlock",
    "slimePurple",
    "slimeBlue",
    "slimeGreen",
    "mouse",
    "snail",
    "ladybug",
    "wormGreen",
    "wormPink",
)
CRATE_TYPES = ("boxCrate", "boxCrate_double", "boxCrate_single", "boxCrate_warning")

SAW_TEXTURE = "assets/kenney/Enemies/sawHalf.png"
SAW_MOVE_TEXTURE = "assets/kenney/Enemies/sawHalf_move.png"
COIN_TEXTURE = "assets/kenney/Items/coinGold.png"


def _enemy_texture(name: str) -> str:
    return f"assets/kenney/Enemies/{name}.png"


def _enemy_move_texture(name: str) -> str:
    return f"assets/kenney/Enemies/{name}_move.png"


@dataclass(frozen=True)
class TilemapConfig:
    """Switches that shape level generation."""

    easy_mode: bool = False
    allow_pit: bool = True
    allow_crate: bool = True
    allow_dy: bool = True
    allow_mobs: bool = True


CollisionFunc = Callable[[TileID], CollisionType]


class Tilemap(System):
    """A grid of tiles with y pointing up from the bottom row (y = 0)."""

    def __init__(
        self,
        coordinator: Coordinator,
        textures: AssetManager[Texture] | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        super().__init__()
        self.coordinator = coordinator
        self.textures: AssetManager[Texture] = textures if textures is not None else AssetManager()
        self.renderer = renderer if renderer is not None else Renderer()
        self._width = 0
        self._height = 0
        self._tiles: list[list[TileID]] = []
        self._crate_types: list[list[int]] = []
        self._tile_textures: dict[TileID, list[Texture]] = {}

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    # Tile textures

    def load_textures(self) -> None:
        """Load tile textures and preload enemy and coin sprites."""
        get = self.textures.get
        self._tile_textures = {
            TileID.WALL_TOP: [
                get(f"assets/kenney/Ground/{theme}/{to_lower(theme)}Mid.png") for theme in WALL_THEMES
            ],
            TileID.WALL_MID: [
                get(f"assets/kenney/Ground/{theme}/{to_lower(theme)}Center.png")
                for theme in WALL_THEMES
            ],
            TileID.LAVA_TOP: [get("assets/kenney/Tiles/lavaTop_low.png")],
            TileID.LAVA_MID: [get("assets/kenney/Tiles/lava.png")],
            TileID.CRATE: [get(f"assets/kenney/Tiles/{name}.png") for name in CRATE_TYPES],
        }
        for name in WALKING_ENEMIES:
            get(_enemy_texture(name))
            get(_enemy_move_texture(name))
        get(SAW_TEXTURE)
        get(SAW_MOVE_TEXTURE)
        get(COIN_TEXTURE)

    # Tile manipulation

    def set(self, x: int, y: int, tile_id: TileID) -> None:
        """Set a tile; coordinates outside the map are ignored."""
        if self._in_bounds(x, y):
            self._tiles[x][y] = TileID(tile_id)

    def set_area(self, x: int, y: int, width: int, height: int, tile_id: TileID) -> None:
        for tx in range(x, x + width):
            for ty in range(y, y + height):
                self.set(tx, ty, tile_id)

    def set_area_with_top(
        self, x: int, y: int, width: int, height: int, mid_id: TileID, top_id: TileID
    ) -> None:
        """Fill an area with mid_id, its highest row with top_id."""
        self.set_area(x, y, width, height - 1, mid_id)
        self.set_area(x, y + height - 1, width, 1, top_id)

    def get(self, x: int, y: int) -> TileID:
        """Return a tile; everything outside the map is wall."""
        if not self._in_bounds(x, y):
            return TileID.WALL_MID
        return self._tiles[x][y]

    def crate_type(self, x: int, y: int) -> int:
        """Index into CRATE_TYPES of the crate drawn at a tile."""
        if not self._in_bounds(x, y):
            raise IndexError(f"tile ({x}, {y}) is outside the map")
        return self._crate_types[x][y]

    # Spawning

    def _spawn_position(self, x: int, y: int) -> Vector2:
        return Vector2(x + 0.5, (self._height - 1 - y) + 0.5)

    def _spawn_enemy_saw(self, x: int, y: int) -> None:
        c = self.coordinator
        entity = c.create_entity()
        animation = Animation(
            frames=[self.textures.get(SAW_TEXTURE), self.textures.get(SAW_MOVE_TEXTURE)],
            rate=1.0,
        )
        c.add_component(entity, Transform(position=self._spawn_position(x, y)))
        c.add_component(entity, Sprite(position=Vector2(-0.5, -0.5), z=1.0))
        c.add_component(entity, Hazard())
        c.add_component(entity, Collision(bounds=Rectangle(-0.5, -0.5, 1.0, 1.0)))
        c.add_component(entity, animation)

    def _spawn_enemy_mob(self, x: int, y: int, rng: random.Random) -> None:
        c = self.coordinator
        entity = c.create_entity()
        name = WALKING_ENEMIES[rng.randint(0, len(WALKING_ENEMIES) - 1)]
        animation = Animation(
            frames=[
                self.textures.get(_enemy_texture(name)),
                self.textures.get(_enemy_move_texture(name)),
            ],
            rate=0.2,
        )
        c.add_component(entity, Transform(position=self._spawn_position(x, y)))
        c.add_component(entity, Sprite(position=Vector2(-0.5, -0.5), z=1.0))
        c.add_component(entity, Hazard())
        c.add_component(entity, Collision(bounds=Rectangle(-0.5, -0.48, 1.0, 0.98)))
        direction = 1.0 if rng.random() < 0.5 else -1.0
        c.add_component(entity, MobAI(velocity_x=0.15 * direction))
        c.add_component(
            entity,
            Particles(particles=[Particle() for _ in range(10)], offset=Vector2(0.0, 0.34)),
        )
        c.add_component(entity, animation)

    # Generation

    def regenerate(self, rng: random.Random, config: TilemapConfig = TilemapConfig()) -> None:
        """Build a new random level, spawning hazards and the coin into the coordinator."""
        main_width = 64
        main_height = 64
        max_jump = 1.5
        gravity = 0.2
        max_speed = 0.5

        self._width = main_width
        self._height = main_height
        self._tiles = [[TileID.EMPTY] * main_height for _ in range(main_width)]
        self._crate_types = [[0] * main_height for _ in range(main_width)]

        self.set_area(0, 0, main_width, 1, TileID.WALL_TOP)
        self.set_area(0, 0, 1, main_height, TileID.WALL_MID)
        self.set_area(main_width - 1, 0, 1, main_height, TileID.WALL_MID)
        self.set_area(0, main_height - 1, main_width, 1, TileID.WALL_MID)

        difficulty = rng.randint(1, 3)
        num_sections = rng.randint(difficulty, 2 * difficulty - 1)
        curr_x = 5
        curr_y = 1
        pit_thresh = difficulty
        danger_type = rng.randint(0, 2)

        max_dx = int(max_speed * 2.0 * max_jump / gravity - 0.5)
        max_dy = int(max_jump * max_jump / (2.0 * gravity) - 0.5)

        for _ in range(num_sections):
            if curr_x + 15 >= main_width:
                break

            offset = difficulty // 3
            dy = rng.randint(1 + offset, 4 + offset) if config.allow_dy else 0
            dy = min(dy, max_dy)
            if curr_y >= 20 or (curr_y >= 5 and rng.random() < 0.5):
                dy = -dy

            dx = rng.randint(3 + offset, 2 * difficulty + 2 + offset)
            curr_y = max(1, curr_y + dy)

            use_pit = (
                config.allow_pit
                and dx > 7
                and curr_y > 3
                and rng.randint(0, 19) >= pit_thresh
            )

            if use_pit:
                self._build_pit(rng, curr_x, curr_y, dx, max_dx, danger_type)
            else:
                self._build_platform(rng, config, curr_x, curr_y, dx, difficulty, max_dx)

            curr_x += dx

        c = self.coordinator
        coin = c.create_entity()
        c.add_component(coin, Transform(position=self._spawn_position(curr_x, curr_y)))
        c.add_component(
            coin,
            Sprite(position=Vector2(-0.5, -0.5), z=1.0, texture=self.textures.get(COIN_TEXTURE)),
        )
        c.add_component(coin, Goal())
        c.add_component(coin, Collision(bounds=Rectangle(-0.5, -0.5, 1.0, 1.0)))

        self.set_area_with_top(curr_x, 0, 1, curr_y, TileID.WALL_MID, TileID.WALL_TOP)
        self.set_area(curr_x + 1, 0, main_width - curr_x, main_height, TileID.WALL_MID)

    def _build_pit(
        self,
        rng: random.Random,
        curr_x: int,
        curr_y: int,
        dx: int,
        max_dx: int,
        danger_type: int,
    ) -> None:
        x1 = rng.randint(1, 3)
        x2 = rng.randint(1, 3)
        pit_width = dx - x1 - x2
        if pit_width > max_dx:
            pit_width = max_dx
            x2 = dx - x1 - pit_width

        self.set_area_with_top(curr_x, 0, x1, curr_y, TileID.WALL_MID, TileID.WALL_TOP)
        self.set_area_with_top(curr_x + dx - x2, 0, x2, curr_y, TileID.WALL_MID, TileID.WALL_TOP)

        lava_height = rng.randint(1, curr_y - 3)

        if danger_type == 0:
            self.set_area_with_top(
                curr_x + x1, 1, pit_width, lava_height, TileID.LAVA_MID, TileID.LAVA_TOP
            )
        elif danger_type == 1:
            for i in range(pit_width):
                self._spawn_enemy_saw(curr_x + x1 + i, 1)
        else:
            for i in range(pit_width):
                self._spawn_enemy_mob(curr_x + x1 + i, 1, rng)

        if pit_width > 4:
            if pit_width == 5:
                x3 = rng.randint(1, 2)
                w1 = rng.randint(1, 2)
            elif pit_width == 6:
                x3 = rng.randint(1, 2) + 1
                w1 = rng.randint(1, 2)
            else:
                x3 = rng.randint(1, 2) + 1
                x4 = rng.randint(1, 2) + 1
                w1 = pit_width - x3 - x4
            self.set_area_with_top(
                curr_x + x1 + x3, curr_y - 1, w1, 1, TileID.WALL_MID, TileID.WALL_TOP
            )

    def _build_platform(
        self,
        rng: random.Random,
        config: TilemapConfig,
        curr_x: int,
        curr_y: int,
        dx: int,
        difficulty: int,
        max_dx: int,
    ) -> None:
        self.set_area_with_top(curr_x, 0, dx, curr_y, TileID.WALL_MID, TileID.WALL_TOP)

        ob1_x = -1
        ob2_x = -1

        if rng.randint(0, 9) < 2 * difficulty and dx > 3:
            ob1_x = curr_x + rng.randint(1, dx - 2)
            self._spawn_enemy_saw(ob1_x, curr_y)

        if config.allow_mobs and rng.randint(0, 9) < difficulty and dx > 3 and max_dx >= 4:
            ob1_x = curr_x + rng.randint(1, dx - 2)
            self._spawn_enemy_mob(ob1_x, curr_y, rng)

        if config.allow_crate:
            for _ in range(2):
                crate_x = curr_x + rng.randint(1, dx - 2)
                if rng.random() < 0.5 and crate_x not in (ob1_x, ob2_x):
                    pile_height = rng.randint(1, 3)
                    for j in range(pile_height):
                        self.set(crate_x, curr_y + j, TileID.CRATE)
                        crate_index = rng.randint(0, len(CRATE_TYPES) - 1)
                        if self._in_bounds(crate_x, curr_y + j):
                            self._crate_types[crate_x][curr_y + j] = crate_index

    # Rendering

    def _texture_for(self, tile_id: TileID, theme: int, x: int, y: int) -> Texture:
        if not self._tile_textures:
            raise AssetError("tile textures are not loaded")
        if tile_id in (TileID.WALL_MID, TileID.WALL_TOP):
            return self._tile_textures[tile_id][theme]
        if tile_id == TileID.CRATE:
            return self._tile_textures[tile_id][self._crate_types[x][y]]
        return self._tile_textures[tile_id][0]

    def render(self, theme: int) -> None:
        """Draw the tiles visible to the renderer's camera using a wall theme."""
        gr = self.renderer
        half_w = gr.camera_size.x * 0.5 / gr.camera_scale
        half_h = gr.camera_size.y * 0.5 / gr.camera_scale
        left = (gr.camera_position.x - half_w) * PIXELS_TO_UNIT
        top = (gr.camera_position.y - half_h) * PIXELS_TO_UNIT
        view_w = gr.camera_size.x * PIXELS_TO_UNIT / gr.camera_scale
        view_h = gr.camera_size.y * PIXELS_TO_UNIT / gr.camera_scale

        lower_x = math.floor(left)
        lower_y = math.floor(top)
        upper_x = math.ceil(left + view_w)
        upper_y = math.ceil(top + view_h)

        for y in range(lower_y, upper_y + 1):
            tile_y = self._height - 1 - y
            for x in range(lower_x, upper_x + 1):
                tile_id = self.get(x, tile_y)
                if tile_id == TileID.EMPTY:
                    continue
                texture = self._texture_for(tile_id, theme, x, tile_y)
                gr.render_texture(
                    texture,
                    Vector2(x * UNIT_TO_PIXELS, y * UNIT_TO_PIXELS),
                    UNIT_TO_PIXELS / texture.width,
                )

    # Collision

    def _overlapping_tiles(self, lower_x: int, lower_y: int, upper_x: int, upper_y: int):
        for y in range(lower_y, upper_y + 1):
            for x in range(lower_x, upper_x + 1):
                yield x, y, self.get(x, self._height - 1 - y)

    def get_collision(
        self,
        rectangle: Rectangle,
        collision_id_func: CollisionFunc,
        fallthrough: bool = False,
        step_y: float = 0.0,
    ) -> tuple[Vector2, bool]:
        """Push a world-space rectangle out of solid tiles.

        Returns the corrected top-left corner and whether any tile was hit.
        """
        rect = Rectangle(rectangle.x, rectangle.y, rectangle.width, rectangle.height)
        collided = False

        lower_x = math.floor(rect.x)
        lower_y = math.floor(rect.y)
        upper_x = math.ceil(rect.x + rect.width)
        upper_y = math.ceil(rect.y + rect.height)

        center_x = rect.x + rect.width * 0.5
        center_y = rect.y + rect.height * 0.5

        # Vertical pass first, then horizontal
        for x, y, tile_id in self._overlapping_tiles(lower_x, lower_y, upper_x, upper_y):
            kind = collision_id_func(tile_id)
            if kind == CollisionType.NONE:
                continue
            tile = Rectangle(float(x), float(y), 1.0, 1.0)
            overlap = get_collision_overlap(rect, tile)
            if overlap.width == 0.0 and overlap.height == 0.0:
                continue
            if overlap.width <= overlap.height:
                continue
            overlap_center_y = overlap.y + overlap.height * 0.5
            if kind == CollisionType.DOWN_ONLY:
                inside = rect.y + rect.height - step_y > tile.y
                if not (step_y > 0.01 and not fallthrough and not inside):
                    continue
            rect.y = tile.y - rect.height if overlap_center_y > center_y else tile.y + tile.height
            collided = True

        for x, y, tile_id in self._overlapping_tiles(lower_x, lower_y, upper_x, upper_y):
            kind = collision_id_func(tile_id)
            if kind in (CollisionType.NONE, CollisionType.DOWN_ONLY):
                continue
            tile = Rectangle(float(x), float(y), 1.0, 1.0)
            overlap = get_collision_overlap(rect, tile)
            if overlap.width == 0.0 and overlap.height == 0.0:
                continue
            if overlap.width > overlap.height:
                continue
            overlap_center_x = overlap.x + overlap.width * 0.5
            rect.x = tile.x - rect.width if overlap_center_x > center_x else tile.x + tile.width
            collided = True

        return Vector2(rect.x, rect.y), collided