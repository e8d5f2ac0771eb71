"""Public API for progressive Mandelbrot rendering."""

from .colors import ColorMapper, ColormapColorMapper, GradientColorMapper, build_palette, parse_hex_color
from .driver import Presenter, RenderLoop, RunSummary
from .engine import Engine, Pixel, PixelGrid, PixelStatus, initialize
from .errors import ColorMapperFault, InvalidConfig, InvalidGrid, MandelbrotError
from .geometry import EngineConfig, Grid, PlaneWindow, map_index, map_indices
from .output import CompositePresenter, FrameSequencePresenter, GifPresenter, ImagePresenter
from .prefilter import certified_interior, in_main_cardioid, in_period2_bulb

__all__ = [
    "ColorMapper",
    "ColorMapperFault",
    "ColormapColorMapper",
    "CompositePresenter",
    "Engine",
    "EngineConfig",
    "FrameSequencePresenter",
    "GifPresenter",
    "GradientColorMapper",
    "Grid",
    "ImagePresenter",
    "InvalidConfig",
    "InvalidGrid",
    "MandelbrotError",
    "Pixel",
    "PixelGrid",
    "PixelStatus",
    "PlaneWindow",
    "Presenter",
    "RenderLoop",
    "RunSummary",
    "build_palette",
    "certified_interior",
    "in_main_cardioid",
    "in_period2_bulb",
    "initialize",
    "map_index",
    "map_indices",
    "parse_hex_color",
]
