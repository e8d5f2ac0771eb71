"""Incremental escape-time evaluation of the Mandelbrot set.

Every call to :meth:`Engine.step` advances each still-active pixel by exactly
one iteration of ``z <- z**2 + c`` and repaints the pixels that moved, so the
color buffer can be presented between steps as the image sharpens.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

import numpy as np
import tensorflow as tf

from .colors import ColorMapper, GradientColorMapper, build_palette
from .geometry import EngineConfig, map_indices
from .prefilter import certified_interior

ESCAPE_RADIUS_SQUARED = 4.0
ALPHA = 255


class PixelStatus(IntEnum):
    ACTIVE = 0
    ESCAPED = 1
    INTERIOR = 2


@dataclass(frozen=True)
class Pixel:
    """Snapshot of a single pixel's state."""

    cx: int
    cy: int
    c_real: float
    c_imag: float
    z_real: float
    z_imag: float
    iteration: int
    status: PixelStatus


@dataclass
class PixelGrid:
    """Per-pixel state stored as parallel arrays indexed ``cy * pixel_width + cx``."""

    cx: np.ndarray
    cy: np.ndarray
    c_real: np.ndarray
    c_imag: np.ndarray
    z_real: np.ndarray
    z_imag: np.ndarray
    iteration: np.ndarray
    status: np.ndarray

    @classmethod
    def build(cls, config: EngineConfig) -> PixelGrid:
        cx, cy, c_real, c_imag = map_indices(config.grid, config.window)
        total = config.grid.total
        iteration = np.zeros(total, dtype=np.int64)
        status = np.full(total, PixelStatus.ACTIVE, dtype=np.int8)
        if config.prefilter:
            interior = np.asarray(certified_interior(c_real, c_imag), dtype=bool)
            iteration[interior] = config.max_iterations
            status[interior] = PixelStatus.INTERIOR
        return cls(
            cx=cx,
            cy=cy,
            c_real=c_real,
            c_imag=c_imag,
            z_real=np.zeros(total, dtype=np.float64),
            z_imag=np.zeros(total, dtype=np.float64),
            iteration=iteration,
            status=status,
        )

    def __len__(self) -> int:
        return int(self.status.shape[0])

    def pixel(self, index: int) -> Pixel:
        if not 0 <= index < len(self):
            raise IndexError(f"pixel index {index} outside [0, {len(self)})")
        return Pixel(
            cx=int(self.cx[index]),
            cy=int(self.cy[index]),
            c_real=float(self.c_real[index]),
            c_imag=float(self.c_imag[index]),
            z_real=float(self.z_real[index]),
            z_imag=float(self.z_imag[index]),
            iteration=int(self.iteration[index]),
            status=PixelStatus(int(self.status[index])),
        )

    def active_mask(self) -> np.ndarray:
        return self.status == PixelStatus.ACTIVE


_VECTOR_F64 = tf.TensorSpec(shape=[None], dtype=tf.float64)
_VECTOR_I64 = tf.TensorSpec(shape=[None], dtype=tf.int64)
_VECTOR_BOOL = tf.TensorSpec(shape=[None], dtype=tf.bool)
_SCALAR_I64 = tf.TensorSpec(shape=[], dtype=tf.int64)


@tf.function(
    input_signature=[
        _VECTOR_F64,
        _VECTOR_F64,
        _VECTOR_F64,
        _VECTOR_F64,
        _VECTOR_I64,
        _VECTOR_BOOL,
        _SCALAR_I64,
    ]
)
def _escape_step(
    z_real: tf.Tensor,
    z_imag: tf.Tensor,
    c_real: tf.Tensor,
    c_imag: tf.Tensor,
    iteration: tf.Tensor,
    active: tf.Tensor,
    max_iterations: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance every active pixel by one iteration.

    Returns the new iterate and iteration arrays plus three masks: pixels that
    escaped this call, pixels that hit the iteration cap, and pixels that
    advanced. Inactive entries pass through unchanged.
    """

    x2 = z_real * z_real
    y2 = z_imag * z_imag
    radius = tf.constant(ESCAPE_RADIUS_SQUARED, dtype=tf.float64)
    escaped = tf.logical_and(active, x2 + y2 > radius)
    capped = tf.logical_and(active, iteration >= max_iterations)
    interior = tf.logical_and(capped, tf.logical_not(escaped))
    advanced = tf.logical_and(active, tf.logical_not(tf.logical_or(escaped, capped)))

    two = tf.constant(2.0, dtype=tf.float64)
    next_real = tf.where(advanced, x2 - y2 + c_real, z_real)
    next_imag = tf.where(advanced, two * z_real * z_imag + c_imag, z_imag)
    iteration = iteration + tf.cast(advanced, tf.int64)
    return next_real, next_imag, iteration, escaped, interior, advanced


class Engine:
    """Progressive Mandelbrot evaluator over a fixed grid and plane window.

    Use :func:`initialize` to construct one.
    """

    def __init__(self, config: EngineConfig, palette: np.ndarray, *, device: Optional[str] = None):
        self.config = config
        self.device = device if device is not None else "/CPU:0"
        self._palette = palette
        self._grid = PixelGrid.build(config)
        self._rgba = np.empty((config.grid.total, 4), dtype=np.uint8)
        self._rgba[:, :3] = palette[self._grid.iteration]
        self._rgba[:, 3] = ALPHA
        self._current_iteration = 0
        self._max_iterations_tensor = tf.constant(config.max_iterations, dtype=tf.int64)

    @property
    def grid(self) -> PixelGrid:
        return self._grid

    @property
    def max_iterations(self) -> int:
        return self.config.max_iterations

    @property
    def current_iteration(self) -> int:
        return self._current_iteration

    @property
    def settled(self) -> bool:
        return self._current_iteration >= self.config.max_iterations

    def step(self) -> bool:
        """Advance every active pixel by one iteration and report settlement."""

        if self.settled:
            return True

        grid = self._grid
        active = grid.active_mask()
        if np.any(active):
            with tf.device(self.device):
                z_real, z_imag, iteration, escaped, interior, advanced = _escape_step(
                    tf.convert_to_tensor(grid.z_real),
                    tf.convert_to_tensor(grid.z_imag),
                    tf.convert_to_tensor(grid.c_real),
                    tf.convert_to_tensor(grid.c_imag),
                    tf.convert_to_tensor(grid.iteration),
                    tf.convert_to_tensor(active),
                    self._max_iterations_tensor,
                )
            grid.z_real = z_real.numpy()
            grid.z_imag = z_imag.numpy()
            grid.iteration = iteration.numpy()
            grid.status[escaped.numpy()] = PixelStatus.ESCAPED
            grid.status[interior.numpy()] = PixelStatus.INTERIOR
            self._paint(np.flatnonzero(advanced.numpy()))

        self._current_iteration += 1
        if self.settled:
            self._finish()
        return self.settled

    def _paint(self, indices: np.ndarray) -> None:
        if indices.size:
            self._rgba[indices, :3] = self._palette[self._grid.iteration[indices]]

    def _finish(self) -> None:
        # Pixels still active here sit at the iteration cap; apply the
        # terminal test the next step would have made.
        grid = self._grid
        active = grid.active_mask()
        if not np.any(active):
            return
        escaped = active & (grid.z_real * grid.z_real + grid.z_imag * grid.z_imag > ESCAPE_RADIUS_SQUARED)
        grid.status[escaped] = PixelStatus.ESCAPED
        grid.status[active & ~escaped] = PixelStatus.INTERIOR

    def buffer(self) -> np.ndarray:
        """Read-only flat RGBA view of the color buffer."""

        view = self._rgba.reshape(-1)
        view.flags.writeable = False
        return view

    def image(self) -> np.ndarray:
        """Read-only ``(pixel_height, pixel_width, 4)`` view of the color buffer."""

        view = self._rgba.reshape(self.config.grid.pixel_height, self.config.grid.pixel_width, 4)
        view.flags.writeable = False
        return view

    def counts(self) -> dict[PixelStatus, int]:
        """Number of pixels in each status."""

        values = np.bincount(self._grid.status.astype(np.int64), minlength=len(PixelStatus))
        return {status: int(values[status]) for status in PixelStatus}


def initialize(
    config: EngineConfig,
    color_mapper: Optional[ColorMapper] = None,
    *,
    device: Optional[str] = None,
) -> Engine:
    """Build an :class:`Engine` for ``config``.

    ``color_mapper`` defaults to :meth:`GradientColorMapper.default`.
    """

    if color_mapper is None:
        color_mapper = GradientColorMapper.default(config.max_iterations)
    palette = build_palette(color_mapper, config.max_iterations)
    return Engine(config, palette, device=device)
