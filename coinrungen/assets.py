"""Image textures and a cache that loads each named asset once."""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Generic, TypeVar

import numpy as np
from PIL import Image

T = TypeVar("T")


class AssetError(Exception):
    """Raised when an asset cannot be loaded or is not known."""


class Texture:
    """An RGBA image held as a (height, width, 4) array of bytes."""

    def __init__(self, pixels: np.ndarray) -> None:
        pixels = np.asarray(pixels, dtype=np.uint8)
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise ValueError("texture pixels must have shape (height, width, 3 or 4)")
        if pixels.shape[2] == 3:
            alpha = np.full(pixels.shape[:2] + (1,), 255, dtype=np.uint8)
            pixels = np.concatenate([pixels, alpha], axis=2)
        self.pixels = np.ascontiguousarray(pixels)

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> Texture:
        """Read an image file into a texture."""
        try:
            with Image.open(path) as image:
                pixels = np.array(image.convert("RGBA"), dtype=np.uint8)
        except (OSError, ValueError) as exc:
            raise AssetError(f'Could not load surface "{os.fspath(path)}"!') from exc
        return cls(pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def __repr__(self) -> str:
        return f"Texture(width={self.width}, height={self.height})"


class AssetManager(Generic[T]):
    """Loads assets by name on first request and hands out the same object afterwards."""

    def __init__(
        self,
        loader: Callable[[str], T] = Texture.load,  # type: ignore[assignment]
        root: str | os.PathLike[str] | None = None,
    ) -> None:
        self._loader = loader
        self._root = os.fspath(root) if root is not None else None
        self._assets: dict[str, T] = {}

    def _path(self, name: str) -> str:
        return os.path.join(self._root, name) if self._root is not None else name

    def get(self, name: str) -> T:
        """Return the asset called name, loading it if it is not cached yet."""
        try:
            return self._assets[name]
        except KeyError:
            pass
        asset = self._loader(self._path(name))
        self._assets[name] = asset
        return asset

    def exists(self, name: str) -> bool:
        return name in self._assets

    def remove(self, name: str) -> None:
        try:
            del self._assets[name]
        except KeyError:
            raise AssetError(f"asset {name!r} is not loaded") from None

    def __contains__(self, name: object) -> bool:
        return name in self._assets

    def __len__(self) -> int:
        return len(self._assets)