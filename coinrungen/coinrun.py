"""The CoinRun platformer as a reset/step/render environment."""

from __future__ import annotations

import os
import random
import time
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np

from coinrungen.assets import AssetManager, Texture
from coinrungen.components import (
    Agent,
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
from coinrungen.ecs import Coordinator
from coinrungen.helpers import UNIT_TO_PIXELS, Color, Rectangle, Vector2, to_lower
from coinrungen.renderer import Renderer
from coinrungen.systems import (
    AGENT_THEMES,
    PARTICLE_TEXTURE,
    AgentSystem,
    GoalSystem,
    HazardSystem,
    MobAISystem,
    ParticleSystem,
    SpriteRenderMode,
    SpriteRenderSystem,
)
from coinrungen.tilemap import (
    COIN_TEXTURE,
    CRATE_TYPES,
    SAW_MOVE_TEXTURE,
    SAW_TEXTURE,
    WALKING_ENEMIES,
    WALL_THEMES,
    Tilemap,
    TilemapConfig,
)

_PLATFORM_BACKGROUNDS = (
    "alien_bg",
    "another_world_bg",
    "back_cave",
    "caverns",
    "cyberpunk_bg",
    "parallax_forest",
    "scifi_bg",
    "scifi2_bg",
    "living_tissue_bg",
    "airadventurelevel1",
    "airadventurelevel2",
    "airadventurelevel3",
    "airadventurelevel4",
    "cave_background",
    "blue_desert",
    "blue_grass",
    "blue_land",
    "blue_shroom",
    "colored_desert",
    "colored_grass",
    "colored_land",
    "colored_shroom",
    "landscape1",
    "landscape2",
    "landscape3",
    "landscape4",
    "battleback1",
    "battleback2",
    "battleback3",
    "battleback4",
    "battleback5",
    "battleback6",
    "battleback7",
    "battleback8",
    "battleback9",
    "battleback10",
    "sunrise",
)
_PLATFORM_BACKGROUNDS_2 = (
    "beach1",
    "beach2",
    "beach3",
    "beach4",
    "fantasy1",
    "fantasy2",
    "fantasy3",
    "fantasy4",
    "candy1",
    "candy2",
    "candy3",
    "candy4",
)

BACKGROUND_NAMES = tuple(
    [f"assets/platform_backgrounds/{name}.png" for name in _PLATFORM_BACKGROUNDS]
    + [f"assets/platform_backgrounds_2/{name}.png" for name in _PLATFORM_BACKGROUNDS_2]
)

_AGENT_POSES = ("stand", "jump", "walk1", "walk2")


def required_assets() -> list[str]:
    """Every image path the environment loads, in load order, without duplicates."""
    paths: list[str] = []
    for theme in WALL_THEMES:
        paths.append(f"assets/kenney/Ground/{theme}/{to_lower(theme)}Mid.png")
        paths.append(f"assets/kenney/Ground/{theme}/{to_lower(theme)}Center.png")
    paths.append("assets/kenney/Tiles/lavaTop_low.png")
    paths.append("assets/kenney/Tiles/lava.png")
    paths.extend(f"assets/kenney/Tiles/{name}.png" for name in CRATE_TYPES)
    for name in WALKING_ENEMIES:
        paths.append(f"assets/kenney/Enemies/{name}.png")
        paths.append(f"assets/kenney/Enemies/{name}_move.png")
    paths.extend((SAW_TEXTURE, SAW_MOVE_TEXTURE, COIN_TEXTURE))
    for theme in AGENT_THEMES:
        for pose in _AGENT_POSES:
            paths.append(f"assets/kenney/Players/128x256/{theme}/alien{theme}_{pose}.png")
    paths.append(PARTICLE_TEXTURE)
    paths.extend(BACKGROUND_NAMES)
    return list(dict.fromkeys(paths))


def _int_option(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"option {name!r} must be an int, got {type(value).__name__}")
    return value


def _parse_action(value: Any) -> int:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        if len(value) != 1:
            raise ValueError(f"action must hold exactly one value, got {len(value)}")
        value = value[0]
    if isinstance(value, np.integer):
        value = int(value)
    return _int_option("action", value)


class CoinRunEnv:
    """Procedurally generated platformer: reach the coin, avoid hazards and lava."""

    VERSION = 100
    OBS_WIDTH = 64
    OBS_HEIGHT = 64
    NUM_ACTIONS = 15
    SUB_STEPS = 4
    GAME_ZOOM = 0.3

    def __init__(
        self,
        asset_root: str | os.PathLike[str] | None = None,
        config: TilemapConfig = TilemapConfig(),
    ) -> None:
        self.asset_root = asset_root
        self.config = config
        self.render_mode: str | None = None
        self.window_width = 512
        self.window_height = 512
        self._dt = 1.0 / self.SUB_STEPS
        self._made = False

    def get_env_version(self) -> int:
        return self.VERSION

    def _require_made(self) -> None:
        if not self._made:
            raise RuntimeError("environment is not made; call make() first")

    def make(
        self, render_mode: str | None = None, options: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Build the game; return the observation and action spaces."""
        seed = int(time.time())
        for name, value in (options or {}).items():
            if name == "seed":
                seed = _int_option(name, value)
            elif name == "width":
                self.window_width = _int_option(name, value)
            elif name == "height":
                self.window_height = _int_option(name, value)
        if self.window_width <= 0 or self.window_height <= 0:
            raise ValueError("window width and height must be positive")

        self.render_mode = render_mode
        self._rng = random.Random(seed)

        self._renderer = Renderer(
            self.window_width, self.window_height, self.OBS_WIDTH, self.OBS_HEIGHT
        )
        self._textures: AssetManager[Texture] = AssetManager(root=self.asset_root)

        c = Coordinator()
        self._coordinator = c
        for component_class in (
            Transform,
            Collision,
            Dynamics,
            Sprite,
            Animation,
            Hazard,
            Goal,
            MobAI,
            Agent,
            Particles,
        ):
            c.register_component(component_class)

        def bit(component_class: type) -> int:
            return 1 << c.get_component_type(component_class)

        self._sprite_render = c.register_system(SpriteRenderSystem(c, self._renderer))
        c.set_system_signature(SpriteRenderSystem, bit(Sprite))

        self._tilemap = c.register_system(Tilemap(c, self._textures, self._renderer))
        c.set_system_signature(Tilemap, 0)
        self._tilemap.load_textures()

        self._mob_ai = c.register_system(MobAISystem(c))
        c.set_system_signature(MobAISystem, bit(MobAI))

        self._hazard = c.register_system(HazardSystem())
        c.set_system_signature(HazardSystem, bit(Hazard))

        self._goal = c.register_system(GoalSystem())
        c.set_system_signature(GoalSystem, bit(Goal))

        self._agent = c.register_system(AgentSystem(c, self._renderer, self._textures))
        c.set_system_signature(AgentSystem, bit(Agent))
        self._agent.load_textures()

        self._particles = c.register_system(ParticleSystem(c, self._renderer, self._textures))
        c.set_system_signature(ParticleSystem, bit(Particles))
        self._particles.load_textures()

        self._backgrounds = [self._textures.get(name) for name in BACKGROUND_NAMES]
        self._background_index = 0
        self._background_offset_x = 0.0
        self._agent_theme = 0
        self._map_theme = 0

        self._made = True
        self._new_episode()

        return {
            "observation_spaces": {"screen": {"type": "box", "low": 0.0, "high": 255.0}},
            "action_spaces": {
                "action": {"type": "multi_discrete", "nvec": [self.NUM_ACTIONS]}
            },
        }

    def reset(
        self, options: Mapping[str, Any] | None = None
    ) -> tuple[dict[str, np.ndarray], dict[str, Any]]:
        """Start a new episode; return (observations, infos)."""
        self._require_made()
        for name, value in (options or {}).items():
            if name == "seed":
                self._rng.seed(_int_option(name, value))
        self._new_episode()
        return self._observe(), {}

    def step(
        self, actions: Mapping[str, Any] | None = None
    ) -> tuple[dict[str, np.ndarray], float, bool, bool, dict[str, Any]]:
        """Advance one step; return (observations, reward, terminated, truncated, infos)."""
        self._require_made()
        action = 0
        for key, value in (actions or {}).items():
            if key == "action":
                action = _parse_action(value)

        reward = 0.0
        terminated = False
        for _ in range(self.SUB_STEPS):
            self._mob_ai.update(self._dt)
            alive, achieved_goal = self._agent.update(
                self._dt, self._hazard, self._goal, action
            )
            self._particles.update(self._dt)
            self._sprite_render.update(self._dt)

            reward = 10.0 if achieved_goal else 0.0
            terminated = not alive or achieved_goal
            if terminated:
                break

        return self._observe(), reward, terminated, False, {}

    def render(self) -> np.ndarray:
        """Draw the full-size frame; shape (height, width, 3)."""
        self._require_made()
        self._render_game(is_obs=False)
        return self._renderer.rgb()

    def close(self) -> None:
        """Release the game; make() must be called again before further use."""
        if not self._made:
            return
        self._made = False
        del self._coordinator, self._renderer, self._textures, self._backgrounds

    def __enter__(self) -> CoinRunEnv:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _observe(self) -> dict[str, np.ndarray]:
        self._render_game(is_obs=True)
        return {"screen": self._renderer.rgb()}

    def _render_game(self, is_obs: bool) -> None:
        gr = self._renderer
        gr.rendering_obs = is_obs
        gr.clear(Color(0, 0, 0, 255))

        width = self.OBS_WIDTH if is_obs else self.window_width
        height = self.OBS_HEIGHT if is_obs else self.window_height
        gr.camera_scale = self.GAME_ZOOM * width / self.OBS_WIDTH
        gr.camera_size = Vector2(float(width), float(height))

        background = self._backgrounds[self._background_index]
        extra_width = background.width / background.height - 1.0
        gr.render_texture(
            background,
            Vector2(-self._background_offset_x * extra_width, 0.0),
            64.0 * UNIT_TO_PIXELS / background.height,
        )

        self._sprite_render.render(SpriteRenderMode.NEGATIVE_Z)
        self._tilemap.render(self._map_theme)
        self._particles.render()
        self._sprite_render.render(SpriteRenderMode.POSITIVE_Z)
        self._agent.render(self._agent_theme)

    def _new_episode(self) -> None:
        c = self._coordinator
        rng = self._rng
        c.clear_entities()

        self._tilemap.regenerate(rng, self.config)

        self._background_index = rng.randint(0, len(self._backgrounds) - 1)
        self._background_offset_x = rng.random()

        player = c.create_entity()
        c.add_component(
            player, Transform(position=Vector2(1.5, self._tilemap.height - 1 - 1.0))
        )
        c.add_component(player, Collision(bounds=Rectangle(-0.5, -1.0, 1.0, 1.0)))
        c.add_component(player, Dynamics())
        c.add_component(player, Agent())

        self._agent_theme = rng.randint(0, len(AGENT_THEMES) - 1)
        self._map_theme = rng.randint(0, len(WALL_THEMES) - 1)

        self._sprite_render.clear_render()