import pytest

from progressive_mandelbrot import EngineConfig, Grid, PlaneWindow


@pytest.fixture
def make_config():
    def _make(width=16, height=12, *, window=None, max_iterations=30, prefilter=True):
        grid = Grid(width, height)
        if window is None:
            window = PlaneWindow.with_aspect(-2.5, 1.0, width, height)
        return EngineConfig(grid=grid, window=window, max_iterations=max_iterations, prefilter=prefilter)

    return _make
