"""Software renderer that draws textures onto RGBA pixel targets through a camera."""

from __future__ import annotations

import math

import numpy as np

from coinrungen.assets import Texture
from coinrungen.helpers import Color, Rectangle, Vector2, rotated_scaled_aabb


class Renderer:
    """Draws textures onto either the window target or the observation target."""

    def __init__(
        self,
        window_width: int = 512,
        window_height: int = 512,
        obs_width: int = 64,
        obs_height: int = 64,
    ) -> None:
        self.window_target = np.zeros((window_height, window_width, 4), dtype=np.uint8)
        self.obs_target = np.zeros((obs_height, obs_width, 4), dtype=np.uint8)
        self.rendering_obs = False
        self.camera_position = Vector2(0.0, 0.0)
        self.camera_size = Vector2(64.0, 64.0)
        self.camera_scale = 1.0

    def target(self) -> np.ndarray:
        """The pixel array currently drawn to."""
        return self.obs_target if self.rendering_obs else self.window_target

    def clear(self, color: Color) -> None:
        self.target()[...] = (color.r, color.g, color.b, color.a)

    def rgb(self) -> np.ndarray:
        """A copy of the current target's colour channels, shape (height, width, 3)."""
        return self.target()[..., :3].copy()

    def _screen_rect(self, texture: Texture, position: Vector2, scale: float) -> Rectangle:
        cs = self.camera_scale
        return Rectangle(
            (position.x - self.camera_position.x) * cs + self.camera_size.x * 0.5,
            (position.y - self.camera_position.y) * cs + self.camera_size.y * 0.5,
            texture.width * scale * cs,
            texture.height * scale * cs,
        )

    def render_texture(
        self,
        texture: Texture,
        position: Vector2,
        scale: float = 1.0,
        alpha: float = 1.0,
        flip_horizontal: bool = False,
        flip_vertical: bool = False,
    ) -> bool:
        """Draw a texture with its top-left corner at position; return False if culled."""
        size = self.camera_size
        src = Rectangle(0.0, 0.0, float(texture.width), float(texture.height))
        dst = self._screen_rect(texture, position, scale)

        if (
            dst.x > size.x
            or dst.y >= size.y
            or dst.x + dst.width < 0
            or dst.y + dst.height < 0
        ):
            return False

        pixel_scale = scale * self.camera_scale
        if pixel_scale <= 0.0:
            return False

        # Trim the parts that fall outside the camera to avoid overdraw
        if dst.x < 0.0:
            ratio = -dst.x / dst.width
            src.x += src.width * ratio
            src.width -= src.x
            dst.width += dst.x
            dst.x = 0.0
        if dst.x + dst.width > size.x:
            ratio = (dst.x + dst.width - size.x) / dst.width
            src.width = src.width * (1.0 - ratio)
            dst.width = size.x - dst.x
        if dst.y < 0.0:
            ratio = -dst.y / dst.height
            src.y += src.height * ratio
            src.height -= src.y
            dst.height += dst.y
            dst.y = 0.0
        if dst.y + dst.height > size.y:
            ratio = (dst.y + dst.height - size.y) / dst.height
            src.height = src.height * (1.0 - ratio)
            dst.height = size.y - dst.y

        if src.width <= 0.0 or src.height <= 0.0:
            return False

        padding = math.ceil(1.0 / pixel_scale)
        src_x = math.floor(src.x)
        src_y = math.floor(src.y)
        src_w = math.ceil(src.width) + padding
        src_h = math.ceil(src.height) + padding

        # Compensate for whole-pixel source rectangles so sprites do not flicker
        offset_x = src.x - src_x
        offset_y = src.y - src_y
        dst.width *= src_w / src.width
        dst.height *= src_h / src.height
        dst.x -= offset_x * (dst.width / src.width)
        dst.y -= offset_y * (dst.height / src.height)

        if flip_horizontal:
            src_x = texture.width - src_w - src_x

        self._draw(
            texture,
            Rectangle(float(src_x), float(src_y), float(src_w), float(src_h)),
            dst,
            alpha,
            flip_horizontal,
            flip_vertical and not flip_horizontal,
        )
        return True

    def render_texture_rotated(
        self,
        texture: Texture,
        position: Vector2,
        rotation: float,
        scale: float = 1.0,
        alpha: float = 1.0,
    ) -> None:
        """Draw a whole texture rotated by rotation radians about its centre."""
        dst = self._screen_rect(texture, position, scale)
        if dst.width <= 0.0 or dst.height <= 0.0:
            return

        target = self.target()
        height, width = target.shape[:2]
        box = rotated_scaled_aabb(dst, rotation, 1.0)
        x0 = max(0, math.floor(box.x))
        y0 = max(0, math.floor(box.y))
        x1 = min(width, math.ceil(box.x + box.width))
        y1 = min(height, math.ceil(box.y + box.height))
        if x0 >= x1 or y0 >= y1:
            return

        center_x = dst.x + dst.width * 0.5
        center_y = dst.y + dst.height * 0.5
        px, py = np.meshgrid(np.arange(x0, x1) + 0.5, np.arange(y0, y1) + 0.5)
        dx = px - center_x
        dy = py - center_y
        cos_rot = math.cos(rotation)
        sin_rot = math.sin(rotation)
        local_x = dx * cos_rot + dy * sin_rot + dst.width * 0.5
        local_y = -dx * sin_rot + dy * cos_rot + dst.height * 0.5

        inside = (
            (local_x >= 0.0)
            & (local_x < dst.width)
            & (local_y >= 0.0)
            & (local_y < dst.height)
        )
        cols = np.clip(
            np.floor(local_x / dst.width * texture.width).astype(np.int64), 0, texture.width - 1
        )
        rows = np.clip(
            np.floor(local_y / dst.height * texture.height).astype(np.int64), 0, texture.height - 1
        )
        patch = texture.pixels[rows, cols]
        self._blend(target[y0:y1, x0:x1], patch, alpha, inside)

    def _draw(
        self,
        texture: Texture,
        src: Rectangle,
        dst: Rectangle,
        alpha: float,
        flip_horizontal: bool,
        flip_vertical: bool,
    ) -> None:
        target = self.target()
        height, width = target.shape[:2]

        x0 = max(0, math.ceil(dst.x - 0.5))
        x1 = min(width, math.ceil(dst.x + dst.width - 0.5))
        y0 = max(0, math.ceil(dst.y - 0.5))
        y1 = min(height, math.ceil(dst.y + dst.height - 0.5))
        if x0 >= x1 or y0 >= y1:
            return

        fx = (np.arange(x0, x1) + 0.5 - dst.x) / dst.width
        fy = (np.arange(y0, y1) + 0.5 - dst.y) / dst.height
        if flip_horizontal:
            fx = 1.0 - fx
        if flip_vertical:
            fy = 1.0 - fy

        cols = np.clip(np.floor(src.x + fx * src.width).astype(np.int64), 0, texture.width - 1)
        rows = np.clip(np.floor(src.y + fy * src.height).astype(np.int64), 0, texture.height - 1)
        patch = texture.pixels[np.ix_(rows, cols)]
        self._blend(target[y0:y1, x0:x1], patch, alpha, None)

    @staticmethod
    def _blend(
        region: np.ndarray, patch: np.ndarray, alpha: float, mask: np.ndarray | None
    ) -> None:
        alpha_mod = min(255, max(0, int(255 * alpha)))
        src_a = patch[..., 3].astype(np.int32) * alpha_mod // 255
        if mask is not None:
            src_a = np.where(mask, src_a, 0)
        a = src_a[..., None]
        rgb = (
            patch[..., :3].astype(np.int32) * a
            + region[..., :3].astype(np.int32) * (255 - a)
            + 127
        ) // 255
        region[..., :3] = rgb.astype(np.uint8)
        region[..., 3] = (
            src_a + (region[..., 3].astype(np.int32) * (255 - src_a) + 127) // 255
        ).astype(np.uint8)