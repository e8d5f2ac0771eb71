import numpy as np
import pytest

from progressive_mandelbrot import (
    ColorMapperFault,
    ColormapColorMapper,
    GradientColorMapper,
    build_palette,
    initialize,
    parse_hex_color,
)


def test_default_gradient_hits_every_stop():
    mapper = GradientColorMapper.default(1000)
    assert mapper(0) == (0, 0, 255)
    assert mapper(10) == (0, 128, 0)
    assert mapper(100) == (255, 0, 0)
    assert mapper(1000) == (0, 0, 0)


def test_default_gradient_interpolates_and_rounds_half_up():
    mapper = GradientColorMapper.default(1000)
    assert mapper(5) == (0, 64, 128)


def test_gradient_returns_python_ints():
    r, g, b = GradientColorMapper.default(50)(17)
    assert all(type(channel) is int for channel in (r, g, b))


@pytest.mark.parametrize(
    "stops",
    [
        [(0, (0, 0, 0))],
        [(0, (0, 0, 0)), (0, (255, 255, 255))],
        [(0, (0, 0, 0)), (10, (256, 0, 0))],
    ],
)
def test_gradient_rejects_bad_stops(stops):
    with pytest.raises(ValueError):
        GradientColorMapper(stops)


def test_build_palette_covers_every_iteration():
    palette = build_palette(GradientColorMapper.default(40), 40)
    assert palette.shape == (41, 3)
    assert palette.dtype == np.uint8
    assert tuple(palette[0]) == (0, 0, 255)
    assert tuple(palette[40]) == (0, 0, 0)


def test_build_palette_accepts_numpy_integers():
    palette = build_palette(lambda i: np.array([i, i, i], dtype=np.uint8), 3)
    assert palette[3].tolist() == [3, 3, 3]


def test_mapper_exception_is_propagated_as_fault():
    def broken(iteration):
        if iteration == 7:
            raise KeyError(iteration)
        return (0, 0, 0)

    with pytest.raises(ColorMapperFault) as info:
        build_palette(broken, 10)
    assert isinstance(info.value.__cause__, KeyError)


@pytest.mark.parametrize(
    "color",
    [(256, 0, 0), (0, -1, 0), (1.5, 0, 0), (0, 0), (0, 0, 0, 0), None, "red"],
)
def test_invalid_colors_are_faults(color):
    with pytest.raises(ColorMapperFault):
        build_palette(lambda _: color, 5)


def test_initialize_surfaces_mapper_faults(make_config):
    with pytest.raises(ColorMapperFault):
        initialize(make_config(4, 4, max_iterations=5), lambda _: (300, 0, 0))


def test_colormap_mapper_uses_inside_color_at_cap():
    mapper = ColormapColorMapper("viridis", 20, inside_color=(10, 20, 30))
    assert mapper(20) == (10, 20, 30)
    r, g, b = mapper(3)
    assert all(0 <= channel <= 255 for channel in (r, g, b))


def test_colormap_mapper_invert_reverses_the_ramp():
    inverted = ColormapColorMapper("viridis", 10, invert=True)
    assert inverted(0) == ColormapColorMapper("viridis_r", 10)(0)


def test_colormap_mapper_rejects_unknown_names():
    with pytest.raises(ValueError):
        ColormapColorMapper("definitely-not-a-colormap", 10)


def test_colormap_palette_is_valid():
    palette = build_palette(ColormapColorMapper("twilight_shifted", 25), 25)
    assert palette.shape == (26, 3)


@pytest.mark.parametrize(
    "text, expected",
    [("#0a3ba0", (10, 59, 160)), ("#fff", (255, 255, 255)), ("000000", (0, 0, 0))],
)
def test_parse_hex_color(text, expected):
    assert parse_hex_color(text) == expected


@pytest.mark.parametrize("text", ["#12345", "#gggggg", ""])
def test_parse_hex_color_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_hex_color(text)
