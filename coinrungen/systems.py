"""Game systems: sprite drawing, mob movement, the player agent and particles."""

from __future__ import annotations

import math
from enum import Enum

from coinrungen.assets import AssetError, AssetManager, Texture
from coinrungen.components import (
    Agent,
    Animation,
    Collision,
    Dynamics,
    MobAI,
    Particles,
    Sprite,
    Transform,
)
from coinrungen.ecs import Coordinator, ECSError, Entity, System
from coinrungen.helpers import UNIT_TO_PIXELS, Rectangle, Vector2, check_collision
from coinrungen.renderer import Renderer
from coinrungen.tilemap import CollisionType, TileID, Tilemap

AGENT_THEMES = ("Beige", "Blue", "Green", "Pink", "Yellow")
PARTICLE_TEXTURE = "assets/misc_assets/iconCircle_white.png"

_WALLS = (TileID.WALL_MID, TileID.WALL_TOP)
_LAVA = (TileID.LAVA_MID, TileID.LAVA_TOP)


def _agent_texture(theme: str, pose: str) -> str:
    return f"assets/kenney/Players/128x256/{theme}/alien{theme}_{pose}.png"


def _wall_only(tile_id: TileID) -> CollisionType:
    return CollisionType.FULL if tile_id in _WALLS else CollisionType.NONE


def _empty_only(tile_id: TileID) -> CollisionType:
    return CollisionType.FULL if tile_id == TileID.EMPTY else CollisionType.NONE


def _agent_solid(tile_id: TileID) -> CollisionType:
    if tile_id in _WALLS:
        return CollisionType.FULL
    if tile_id == TileID.CRATE:
        return CollisionType.DOWN_ONLY
    return CollisionType.NONE


def _lava_only(tile_id: TileID) -> CollisionType:
    return CollisionType.FULL if tile_id in _LAVA else CollisionType.NONE


class SpriteRenderMode(Enum):
    """Which sprites to draw relative to the tile layer."""

    ALL = "all"
    POSITIVE_Z = "positive_z"
    NEGATIVE_Z = "negative_z"


class SpriteRenderSystem(System):
    """Advances sprite animations and draws sprites in z order."""

    def __init__(self, coordinator: Coordinator, renderer: Renderer) -> None:
        super().__init__()
        self.coordinator = coordinator
        self.renderer = renderer
        self._render_entities: list[tuple[float, Entity]] = []

    def _has_animation(self, entity: Entity) -> bool:
        try:
            return self.coordinator.has_component(entity, Animation)
        except ECSError:
            return False

    def update(self, dt: float) -> None:
        c = self.coordinator
        entries: list[tuple[float, Entity]] = []
        for entity in self.entities:
            sprite = c.get_component(entity, Sprite)
            if self._has_animation(entity):
                animation = c.get_component(entity, Animation)
                animation.t += dt
                frames_advance = int(animation.t * animation.rate)
                animation.t -= frames_advance / animation.rate
                animation.frame_index = (animation.frame_index + frames_advance) % len(
                    animation.frames
                )
                sprite.texture = animation.frames[animation.frame_index]
            entries.append((sprite.z, entity))
        self._render_entities = sorted(entries, key=lambda entry: entry[0])

    def render(self, mode: SpriteRenderMode) -> None:
        c = self.coordinator
        for z, entity in self._render_entities:
            sprite = c.get_component(entity, Sprite)
            transform = c.get_component(entity, Transform)
            if sprite.texture is None:
                continue
            if mode is SpriteRenderMode.POSITIVE_Z and sprite.z < 0.0:
                continue
            if mode is SpriteRenderMode.NEGATIVE_Z and sprite.z >= 0.0:
                break
            scale = transform.scale * sprite.scale
            self.renderer.render_texture(
                sprite.texture,
                Vector2(
                    (transform.position.x + sprite.position.x) * UNIT_TO_PIXELS,
                    (transform.position.y + sprite.position.y) * UNIT_TO_PIXELS,
                ),
                scale * UNIT_TO_PIXELS / sprite.texture.width,
                1.0,
                sprite.flip_x,
            )

    def clear_render(self) -> None:
        """Forget the draw list, e.g. after the entities were cleared."""
        self._render_entities.clear()


class MobAISystem(System):
    """Walks mobs back and forth, turning at walls and ledges."""

    def __init__(self, coordinator: Coordinator) -> None:
        super().__init__()
        self.coordinator = coordinator

    def update(self, dt: float) -> None:
        c = self.coordinator
        tilemap = c.get_system(Tilemap)
        for entity in self.entities:
            mob = c.get_component(entity, MobAI)
            transform = c.get_component(entity, Transform)
            transform.position.x += mob.velocity_x * dt

            x = transform.position.x
            y = transform.position.y
            wall_sensor = Rectangle(x - 0.5, y - 0.6, 1.0, 0.5)
            floor_sensor = Rectangle(x - 0.5, y + 0.6, 1.0, 0.5)

            wall_pos, hit_wall = tilemap.get_collision(wall_sensor, _wall_only)
            floor_pos, hit_ledge = tilemap.get_collision(floor_sensor, _empty_only)

            new_x = floor_pos.x + 0.5 if hit_ledge else wall_pos.x + 0.5
            transform.position.x = new_x

            if hit_wall or hit_ledge:
                mob.velocity_x = -mob.velocity_x

            c.get_component(entity, Sprite).flip_x = mob.velocity_x > 0.0


class HazardSystem(System):
    """Collects the entities that kill the agent on contact."""


class GoalSystem(System):
    """Collects the entities that win the episode on contact."""


class AgentSystem(System):
    """Moves the single player entity and checks hazards, lava and goals."""

    MAX_JUMP = 1.55
    GRAVITY = 0.2
    MAX_SPEED = 0.5
    MIX = 0.2
    AIR_CONTROL = 0.15

    def __init__(
        self,
        coordinator: Coordinator,
        renderer: Renderer,
        textures: AssetManager[Texture] | None = None,
    ) -> None:
        super().__init__()
        self.coordinator = coordinator
        self.renderer = renderer
        self.textures: AssetManager[Texture] = textures if textures is not None else AssetManager()
        self._textures: dict[str, list[Texture]] = {}

    def load_textures(self) -> None:
        """Load the stand, jump and walk sprites for every agent theme."""
        self._textures = {
            pose: [self.textures.get(_agent_texture(theme, pose)) for theme in AGENT_THEMES]
            for pose in ("stand", "jump", "walk1", "walk2")
        }

    def _only_entity(self) -> Entity:
        if len(self.entities) != 1:
            raise ECSError(f"expected exactly one agent, found {len(self.entities)}")
        return next(iter(self.entities))

    def update(
        self, dt: float, hazard: HazardSystem, goal: GoalSystem, action: int
    ) -> tuple[bool, bool]:
        """Advance the agent; return (alive, reached_goal)."""
        c = self.coordinator
        tilemap = c.get_system(Tilemap)
        entity = self._only_entity()

        agent = c.get_component(entity, Agent)
        agent.action = action
        transform = c.get_component(entity, Transform)
        dynamics = c.get_component(entity, Dynamics)
        collision = c.get_component(entity, Collision)
        velocity = dynamics.velocity

        movement_x = float((action in (6, 7, 8)) - (action in (0, 1, 2)))
        jump = action in (2, 5, 8)
        fallthrough = action in (0, 3, 6)

        mix_x = self.MIX if agent.on_ground else self.MIX * self.AIR_CONTROL
        velocity.x += mix_x * (self.MAX_SPEED * movement_x - velocity.x) * dt
        if abs(velocity.x) < mix_x * self.MAX_SPEED * dt:
            velocity.x = 0.0

        if jump and agent.on_ground:
            velocity.y = -self.MAX_JUMP
        velocity.y += self.GRAVITY * dt
        if abs(velocity.y) > self.MAX_JUMP:
            velocity.y = math.copysign(self.MAX_JUMP, velocity.y)

        transform.position.x += velocity.x * dt
        transform.position.y += velocity.y * dt

        world = collision.world_bounds(transform)
        corrected, collided = tilemap.get_collision(
            world, _agent_solid, fallthrough, velocity.y * dt
        )
        delta_x = corrected.x - world.x
        delta_y = corrected.y - world.y
        agent.on_ground = delta_y < 0.0 and collided

        transform.position.x = corrected.x - collision.bounds.x
        transform.position.y = corrected.y - collision.bounds.y
        world = collision.world_bounds(transform)

        if delta_x != 0.0:
            velocity.x = 0.0
        if agent.on_ground:
            velocity.y = 0.0

        alive = not any(
            check_collision(
                world,
                c.get_component(h, Collision).world_bounds(c.get_component(h, Transform)),
            )
            for h in hazard.entities
        )
        _, in_lava = tilemap.get_collision(world, _lava_only)
        if in_lava:
            alive = False

        achieved_goal = any(
            check_collision(
                world,
                c.get_component(g, Collision).world_bounds(c.get_component(g, Transform)),
            )
            for g in goal.entities
        )

        self.renderer.camera_position.x = transform.position.x * UNIT_TO_PIXELS
        self.renderer.camera_position.y = (transform.position.y - 0.5) * UNIT_TO_PIXELS

        agent.t = math.fmod(agent.t + agent.rate * dt, 1.0)
        if movement_x > 0.0:
            agent.face_forward = True
        elif movement_x < 0.0:
            agent.face_forward = False

        return alive, achieved_goal

    def render(self, theme: int) -> None:
        if not self._textures:
            raise AssetError("agent textures are not loaded")
        c = self.coordinator
        entity = self._only_entity()
        agent = c.get_component(entity, Agent)
        transform = c.get_component(entity, Transform)
        dynamics = c.get_component(entity, Dynamics)

        if abs(dynamics.velocity.x) < 0.01 and agent.on_ground:
            pose = "stand"
        elif not agent.on_ground:
            pose = "jump"
        elif agent.t > 0.5:
            pose = "walk2"
        else:
            pose = "walk1"
        texture = self._textures[pose][theme]

        self.renderer.render_texture(
            texture,
            Vector2(
                (transform.position.x - 0.5) * UNIT_TO_PIXELS,
                (transform.position.y - 2.0) * UNIT_TO_PIXELS,
            ),
            UNIT_TO_PIXELS / texture.width,
            1.0,
            not agent.face_forward,
        )


class ParticleSystem(System):
    """Emits fading puffs from entities carrying a particle pool."""

    BASE_ALPHA = 0.5
    BASE_SCALE = 0.45

    def __init__(
        self,
        coordinator: Coordinator,
        renderer: Renderer,
        textures: AssetManager[Texture] | None = None,
    ) -> None:
        super().__init__()
        self.coordinator = coordinator
        self.renderer = renderer
        self.textures: AssetManager[Texture] = textures if textures is not None else AssetManager()
        self._texture: Texture | None = None

    def load_textures(self) -> None:
        self._texture = self.textures.get(PARTICLE_TEXTURE)

    def update(self, dt: float) -> None:
        c = self.coordinator
        for entity in self.entities:
            transform = c.get_component(entity, Transform)
            pool = c.get_component(entity, Particles)

            dead_index = -1
            for index, particle in enumerate(pool.particles):
                particle.life -= dt
                if particle.life <= 0.0:
                    dead_index = index

            pool.spawn_timer += dt
            if dead_index != -1 and pool.spawn_timer >= pool.spawn_time:
                pool.spawn_timer = math.fmod(pool.spawn_timer, pool.spawn_time)
                particle = pool.particles[dead_index]
                particle.life = pool.lifespan
                particle.position.x = transform.position.x + pool.offset.x
                particle.position.y = transform.position.y + pool.offset.y

    def render(self) -> None:
        texture = self._texture
        if texture is None:
            raise AssetError("particle texture is not loaded")
        c = self.coordinator
        for entity in self.entities:
            pool = c.get_component(entity, Particles)
            for particle in pool.particles:
                if particle.life <= 0.0:
                    continue
                life_ratio = (pool.lifespan - particle.life) / pool.lifespan
                alpha = self.BASE_ALPHA * (1.0 - life_ratio)
                scale = self.BASE_SCALE * (0.4 * life_ratio + 0.6)
                offset_y = -life_ratio * 0.17
                self.renderer.render_texture(
                    texture,
                    Vector2(
                        particle.position.x * UNIT_TO_PIXELS - 0.5 * texture.width * scale,
                        (particle.position.y + offset_y) * UNIT_TO_PIXELS
                        - 0.5 * texture.height * scale,
                    ),
                    scale * UNIT_TO_PIXELS / texture.width,
                    alpha,
                )