"""Component records attached to game entities."""

from __future__ import annotations

from dataclasses import dataclass, field

from coinrungen.assets import Texture
from coinrungen.helpers import Color, Rectangle, Vector2


@dataclass
class Transform:
    """Where an entity is in world units."""

    position: Vector2 = field(default_factory=Vector2)
    rotation: float = 0.0
    scale: float = 1.0


@dataclass
class Collision:
    """Collision bounds relative to the entity's transform."""

    bounds: Rectangle = field(default_factory=lambda: Rectangle(-0.5, -0.5, 1.0, 1.0))

    def world_bounds(self, transform: Transform) -> Rectangle:
        """The bounds moved to the transform's position."""
        return Rectangle(
            transform.position.x + self.bounds.x,
            transform.position.y + self.bounds.y,
            self.bounds.width,
            self.bounds.height,
        )


@dataclass
class Dynamics:
    velocity: Vector2 = field(default_factory=Vector2)


@dataclass
class Sprite:
    """A texture drawn relative to the transform; z orders drawing."""

    position: Vector2 = field(default_factory=Vector2)
    rotation: float = 0.0
    scale: float = 1.0
    flip_x: bool = False
    tint: Color = field(default_factory=Color)
    z: float = 0.0
    texture: Texture | None = None


@dataclass
class Animation:
    """Frames cycled through a sprite; needs a Sprite on the same entity."""

    frames: list[Texture] = field(default_factory=list)
    frame_index: int = 0
    rate: float = 0.1
    t: float = 0.0


@dataclass
class Hazard:
    """Marks an entity that ends the episode on contact."""


@dataclass
class Goal:
    """Marks an entity that wins the episode on contact."""


@dataclass
class MobAI:
    velocity_x: float = 0.15


@dataclass
class Agent:
    """State of the player-controlled entity."""

    action: int = 0
    on_ground: bool = False
    face_forward: bool = True
    rate: float = 0.1
    t: float = 0.0


@dataclass
class Particle:
    position: Vector2 = field(default_factory=Vector2)
    life: float = 0.0


@dataclass
class Particles:
    """A pool of particles emitted from the entity at an offset."""

    particles: list[Particle] = field(default_factory=list)
    offset: Vector2 = field(default_factory=Vector2)
    lifespan: float = 5.0
    spawn_timer: float = 0.0
    spawn_time: float = 0.5