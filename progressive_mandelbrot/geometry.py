"""Sampling geometry: plane windows, pixel grids and the pixel-to-plane mapping."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from .errors import InvalidConfig, InvalidGrid

DEFAULT_WIDTH = 640
DEFAULT_HEIGHT = 480
DEFAULT_MAX_ITERATIONS = 1000
DEFAULT_X_MIN = -2.5
DEFAULT_X_MAX = 1.0


@dataclass(frozen=True)
class PlaneWindow:
    """Rectangle of the complex plane covered by the pixel grid."""

    x_min: float
    x_max: float
    y_min: float
    y_max: float

    def __post_init__(self) -> None:
        bounds = (self.x_min, self.x_max, self.y_min, self.y_max)
        if not all(math.isfinite(value) for value in bounds):
            raise InvalidConfig(f"plane bounds must be finite, got {bounds}")
        if not self.x_min < self.x_max:
            raise InvalidConfig(f"x_min ({self.x_min}) must be less than x_max ({self.x_max})")
        if not self.y_min < self.y_max:
            raise InvalidConfig(f"y_min ({self.y_min}) must be less than y_max ({self.y_max})")

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @classmethod
    def with_aspect(
        cls,
        x_min: float,
        x_max: float,
        pixel_width: int,
        pixel_height: int,
        *,
        y_center: float = 0.0,
    ) -> PlaneWindow:
        """Build a window whose height keeps square pixels around ``y_center``."""

        if pixel_width <= 0 or pixel_height <= 0:
            raise InvalidGrid(f"grid dimensions must be positive, got {pixel_width}x{pixel_height}")
        half_height = ((x_max - x_min) * (pixel_height / pixel_width)) / 2
        return cls(
            x_min=float(x_min),
            x_max=float(x_max),
            y_min=float(y_center - half_height),
            y_max=float(y_center + half_height),
        )


@dataclass(frozen=True)
class Grid:
    """Pixel dimensions of the rendered canvas."""

    pixel_width: int
    pixel_height: int

    def __post_init__(self) -> None:
        for name in ("pixel_width", "pixel_height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise InvalidGrid(f"{name} must be an integer, got {value!r}")
            if value <= 1:
                raise InvalidGrid(f"{name} must be greater than 1, got {value}")

    @property
    def total(self) -> int:
        return int(self.pixel_width) * int(self.pixel_height)


@dataclass(frozen=True)
class EngineConfig:
    """Immutable description of one progressive render."""

    grid: Grid
    window: PlaneWindow
    max_iterations: int
    prefilter: bool = field(default=True)

    def __post_init__(self) -> None:
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, (int, np.integer)):
            raise InvalidConfig(f"max_iterations must be an integer, got {self.max_iterations!r}")
        if self.max_iterations <= 0:
            raise InvalidConfig(f"max_iterations must be positive, got {self.max_iterations}")

    @classmethod
    def default(cls) -> EngineConfig:
        grid = Grid(DEFAULT_WIDTH, DEFAULT_HEIGHT)
        window = PlaneWindow.with_aspect(DEFAULT_X_MIN, DEFAULT_X_MAX, grid.pixel_width, grid.pixel_height)
        return cls(grid=grid, window=window, max_iterations=DEFAULT_MAX_ITERATIONS)


def map_index(grid: Grid, window: PlaneWindow, index: int) -> tuple[int, int, float, float]:
    """Map a linear pixel index to ``(cx, cy, c_real, c_imag)``."""

    if not 0 <= index < grid.total:
        raise IndexError(f"pixel index {index} outside [0, {grid.total})")
    cx = index % grid.pixel_width
    cy = index // grid.pixel_width
    c_real = window.x_min + (cx / (grid.pixel_width - 1)) * window.width
    c_imag = window.y_min + (cy / (grid.pixel_height - 1)) * window.height
    return cx, cy, c_real, c_imag


def map_indices(grid: Grid, window: PlaneWindow) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Vectorized :func:`map_index` over every pixel, in row-major order."""

    indices = np.arange(grid.total, dtype=np.int64)
    cx = indices % grid.pixel_width
    cy = indices // grid.pixel_width
    c_real = np.float64(window.x_min) + (cx / np.float64(grid.pixel_width - 1)) * np.float64(window.width)
    c_imag = np.float64(window.y_min) + (cy / np.float64(grid.pixel_height - 1)) * np.float64(window.height)
    return cx, cy, c_real.astype(np.float64, copy=False), c_imag.astype(np.float64, copy=False)
