"""Color mappers and the palette used to paint the RGBA buffer."""

from __future__ import annotations

import operator
from typing import Callable, Sequence

import numpy as np
from matplotlib import colormaps as _mpl_colormaps

from .errors import ColorMapperFault

RGB = tuple[int, int, int]
ColorMapper = Callable[[int], RGB]

BLUE: RGB = (0, 0, 255)
GREEN: RGB = (0, 128, 0)
RED: RGB = (255, 0, 0)
YELLOW: RGB = (255, 255, 0)
BLACK: RGB = (0, 0, 0)


class GradientColorMapper:
    """Piecewise-linear RGB gradient between ``(iteration, color)`` stops."""

    def __init__(self, stops: Sequence[tuple[float, RGB]]):
        if len(stops) < 2:
            raise ValueError("a gradient needs at least two stops")
        positions = np.array([position for position, _ in stops], dtype=np.float64)
        if np.any(np.diff(positions) <= 0):
            raise ValueError("gradient stop positions must be strictly increasing")
        colors = np.array([color for _, color in stops], dtype=np.float64)
        if colors.shape != (len(stops), 3) or np.any(colors < 0) or np.any(colors > 255):
            raise ValueError("gradient colors must be (r, g, b) triples in [0, 255]")
        self._positions = positions
        self._colors = colors

    @classmethod
    def default(cls, max_iterations: int) -> GradientColorMapper:
        """Blue through green, red and yellow, reaching black at ``max_iterations``."""

        return cls(
            [
                (0, BLUE),
                (max_iterations / 100, GREEN),
                (max_iterations / 10, RED),
                (max_iterations / 3, YELLOW),
                (max_iterations, BLACK),
            ]
        )

    def __call__(self, iteration: int) -> RGB:
        channels = (
            np.interp(iteration, self._positions, self._colors[:, k])
            for k in range(3)
        )
        r, g, b = (int(np.floor(value + 0.5)) for value in channels)
        return r, g, b


class ColormapColorMapper:
    """Sample a matplotlib colormap over ``iteration / max_iterations``.

    Pixels that reach ``max_iterations`` are painted with ``inside_color``.
    """

    def __init__(
        self,
        name: str,
        max_iterations: int,
        *,
        inside_color: RGB = BLACK,
        invert: bool = False,
    ):
        if max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        try:
            self._cmap = _mpl_colormaps[name]
        except KeyError as exc:
            raise ValueError(f"unknown matplotlib colormap {name!r}") from exc
        self._max_iterations = max_iterations
        self._inside_color = tuple(int(v) for v in inside_color)
        self._invert = invert

    def __call__(self, iteration: int) -> RGB:
        if iteration >= self._max_iterations:
            return self._inside_color
        v = iteration / self._max_iterations
        if self._invert:
            v = 1.0 - v
        rgba = np.array(self._cmap(v), dtype=np.float64)
        r, g, b = (int(value) for value in np.uint8(np.clip(rgba[:3] * 255, 0, 255)))
        return r, g, b


def parse_hex_color(text: str) -> RGB:
    """Parse ``#RGB`` or ``#RRGGBB`` into a byte triple."""

    digits = text.strip().lstrip('#')
    if len(digits) == 3:
        digits = ''.join(ch * 2 for ch in digits)
    if len(digits) != 6:
        raise ValueError(f"color must be in the form #RGB or #RRGGBB, got {text!r}")
    try:
        r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError as exc:
        raise ValueError(f"color must contain only hexadecimal digits, got {text!r}") from exc
    return r, g, b


def _checked_color(color, iteration: int) -> RGB:
    try:
        channels = tuple(operator.index(value) for value in color)
    except TypeError as exc:
        raise ColorMapperFault(
            f"color mapper returned {color!r} for iteration {iteration}; expected three integers"
        ) from exc
    if len(channels) != 3:
        raise ColorMapperFault(
            f"color mapper returned {len(channels)} channels for iteration {iteration}; expected 3"
        )
    if any(not 0 <= value <= 255 for value in channels):
        raise ColorMapperFault(f"color mapper returned out-of-range color {channels} for iteration {iteration}")
    return channels


def build_palette(mapper: ColorMapper, max_iterations: int) -> np.ndarray:
    """Evaluate ``mapper`` for every iteration count in ``[0, max_iterations]``.

    The result is a ``(max_iterations + 1, 3)`` uint8 table indexed by
    iteration. Mapper failures surface as :class:`ColorMapperFault`.
    """

    palette = np.empty((max_iterations + 1, 3), dtype=np.uint8)
    for iteration in range(max_iterations + 1):
        try:
            color = mapper(iteration)
        except ColorMapperFault:
            raise
        except Exception as exc:
            raise ColorMapperFault(f"color mapper failed for iteration {iteration}: {exc}") from exc
        palette[iteration] = _checked_color(color, iteration)
    return palette
