"""The height-field grid shared by every generator."""

from __future__ import annotations

import math
from typing import Protocol

import numpy as np

from terr.config import ConfigurationError


class Surface(Protocol):
    """A continuous height function sampled at (x, y) coordinates."""

    def sample(self, x: np.ndarray, y: np.ndarray) -> np.ndarray: ...


class HeightField:
    """Fixed-size grid of float elevations addressed by (x, y).

    Values are stored row-major as `values[y, x]`, matching numpy image
    layout. A generator mutates the field in place and then freezes it;
    a frozen field is read-only and guaranteed finite.
    """

    def __init__(self, width: int, height: int, fill: float = 0.0) -> None:
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer (got {value!r})")
        if not math.isfinite(fill):
            raise ConfigurationError(f"fill must be finite (got {fill!r})")
        self._values = np.full((int(height), int(width)), float(fill), dtype=np.float64)
        self._frozen = False

    @classmethod
    def from_array(cls, values: np.ndarray) -> "HeightField":
        """Wrap a copy of a 2D array indexed `[y, x]`."""

        array = np.asarray(values, dtype=np.float64)
        if array.ndim != 2:
            raise ValueError("values must be a 2D array")
        field = cls(array.shape[1], array.shape[0])
        field._values[...] = array
        return field

    @property
    def width(self) -> int:
        return self._values.shape[1]

    @property
    def height(self) -> int:
        return self._values.shape[0]

    @property
    def shape(self) -> tuple[int, int]:
        return self._values.shape

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, x: int, y: int) -> float:
        self._check_bounds(x, y)
        return float(self._values[y, x])

    def set(self, x: int, y: int, value: float) -> None:
        self._check_bounds(x, y)
        self._check_mutable()
        self._values[y, x] = value

    def fill(self, value: float) -> None:
        self._check_mutable()
        self._values.fill(value)

    def coords(self) -> tuple[np.ndarray, np.ndarray]:
        """Normalized cell coordinates in [0, 1], each shaped like the grid."""

        xs = np.arange(self.width, dtype=np.float64) / max(self.width - 1, 1)
        ys = np.arange(self.height, dtype=np.float64) / max(self.height - 1, 1)
        xx, yy = np.meshgrid(xs, ys)
        return xx, yy

    def add_surface(self, surface: Surface, amplitude: float = 1.0) -> None:
        """Add `amplitude * surface` sampled at integer cell coordinates."""

        self._check_mutable()
        yy, xx = np.indices(self.shape, dtype=np.float64)
        self._values += amplitude * surface.sample(xx, yy)

    def freeze(self) -> "HeightField":
        """Make the field read-only once generation has finished."""

        if not np.isfinite(self._values).all():
            raise ValueError("height field contains non-finite values")
        self._values.setflags(write=False)
        self._frozen = True
        return self

    def copy(self) -> "HeightField":
        """Return a mutable copy."""

        return HeightField.from_array(self._values)

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"({x}, {y}) is outside {self.width}x{self.height}")

    def _check_mutable(self) -> None:
        if self._frozen:
            raise ValueError("height field is frozen")

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "mutable"
        return f"HeightField({self.width}x{self.height}, {state})"
