"""The environment interface: value types, spaces and per-call result data."""

from __future__ import annotations

import abc
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

CENV_VERSION = 1

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class ValueType(IntEnum):
    """Kinds of values and spaces an environment exchanges."""

    INT = 0
    FLOAT = 1
    DOUBLE = 2
    BYTE = 3
    BOX = 4
    MULTI_DISCRETE = 5

    @property
    def dtype(self) -> np.dtype:
        """The numpy element type that stores values of this kind."""
        return np.dtype(_DTYPES[self])

    @property
    def is_space(self) -> bool:
        return self in (ValueType.BOX, ValueType.MULTI_DISCRETE)


_DTYPES = {
    ValueType.INT: np.int32,
    ValueType.FLOAT: np.float32,
    ValueType.DOUBLE: np.float64,
    ValueType.BYTE: np.uint8,
    ValueType.BOX: np.float32,
    ValueType.MULTI_DISCRETE: np.int32,
}


@dataclass
class KeyValue:
    """A named buffer of values; for a BOX space the lows followed by the highs."""

    key: str
    value_type: ValueType
    value: np.ndarray

    def __post_init__(self) -> None:
        self.value_type = ValueType(self.value_type)
        self.value = np.asarray(self.value, dtype=self.value_type.dtype)

    @property
    def size(self) -> int:
        return int(self.value.size)

    @property
    def bounds(self) -> tuple[np.ndarray, np.ndarray]:
        """Split a BOX space into its low and high halves."""
        if self.value_type is not ValueType.BOX:
            raise ValueError(f"{self.key!r} is not a box space")
        flat = self.value.reshape(-1)
        if flat.size % 2:
            raise ValueError(f"box space {self.key!r} has an odd number of values")
        half = flat.size // 2
        return flat[:half], flat[half:]


@dataclass(frozen=True)
class Option:
    """A named scalar setting passed to make or reset."""

    name: str
    value_type: ValueType
    value: int | float

    def __post_init__(self) -> None:
        value_type = ValueType(self.value_type)
        if value_type.is_space:
            raise ValueError(f"option {self.name!r} cannot hold a space")
        if value_type in (ValueType.INT, ValueType.BYTE):
            value = int(self.value)
            low, high = (_INT32_MIN, _INT32_MAX) if value_type is ValueType.INT else (0, 255)
            if not low <= value <= high:
                raise ValueError(f"option {self.name!r} value {value} is out of range")
        else:
            value = float(self.value)
        object.__setattr__(self, "value_type", value_type)
        object.__setattr__(self, "value", value)


@dataclass
class MakeData:
    """Spaces an environment declares when it is made."""

    observation_spaces: list[KeyValue] = field(default_factory=list)
    action_spaces: list[KeyValue] = field(default_factory=list)


@dataclass
class ResetData:
    """What an environment returns after a reset."""

    observations: list[KeyValue] = field(default_factory=list)
    infos: list[KeyValue] = field(default_factory=list)


@dataclass
class StepData:
    """What an environment returns after a step."""

    observations: list[KeyValue] = field(default_factory=list)
    reward: float = 0.0
    terminated: bool = False
    truncated: bool = False
    infos: list[KeyValue] = field(default_factory=list)


@dataclass
class RenderData:
    """A rendered frame, stored as rows of pixels: shape (height, width, channels)."""

    value_type: ValueType
    value: np.ndarray

    def __post_init__(self) -> None:
        self.value_type = ValueType(self.value_type)
        if self.value_type.is_space:
            raise ValueError("a frame cannot hold a space")
        self.value = np.asarray(self.value, dtype=self.value_type.dtype)
        if self.value.ndim != 3:
            raise ValueError("a frame must have shape (height, width, channels)")

    @property
    def height(self) -> int:
        return int(self.value.shape[0])

    @property
    def width(self) -> int:
        return int(self.value.shape[1])

    @property
    def channels(self) -> int:
        return int(self.value.shape[2])


class Environment(abc.ABC):
    """An environment that can be made, reset, stepped, rendered and closed."""

    @abc.abstractmethod
    def get_env_version(self) -> int:
        """Return the version of this environment."""

    @abc.abstractmethod
    def make(self, render_mode: str | None, options: Sequence[Option]) -> MakeData:
        """Create the environment and declare its spaces."""

    @abc.abstractmethod
    def reset(self, options: Sequence[Option]) -> ResetData:
        """Start a new episode."""

    @abc.abstractmethod
    def step(self, actions: Sequence[KeyValue]) -> StepData:
        """Advance the environment by one step."""

    @abc.abstractmethod
    def render(self) -> RenderData:
        """Render the current state to a frame."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release everything the environment holds."""

    def __enter__(self) -> Environment:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def find_value(items: Iterable[KeyValue], key: str) -> KeyValue | None:
    """Return the first key-value with the given key, or None."""
    return next((item for item in items if item.key == key), None)


def option_values(options: Iterable[Option]) -> dict[str, int | float]:
    """Map option names to values; a later option overrides an earlier one."""
    return {option.name: option.value for option in options}