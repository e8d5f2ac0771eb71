"""Exceptions raised by the progressive Mandelbrot engine."""

from __future__ import annotations


class MandelbrotError(Exception):
    """Base class for every error raised by this package."""


class InvalidConfig(MandelbrotError, ValueError):
    """The engine configuration cannot describe a renderable grid."""


class InvalidGrid(InvalidConfig):
    """The pixel grid is too small to map onto the complex plane."""


class ColorMapperFault(MandelbrotError):
    """The supplied color mapper raised or produced an invalid color."""
