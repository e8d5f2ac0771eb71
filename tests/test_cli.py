from pathlib import Path

import pytest

import progressive
from progressive_mandelbrot import ColormapColorMapper, GradientColorMapper


def _parse(*args):
    parser = progressive.build_parser()
    return parser, parser.parse_args(list(args))


def test_defaults_render_the_classic_view():
    _, opt = _parse()
    assert (opt.pixel_width, opt.pixel_height, opt.max_iterations) == (640, 480, 1000)
    assert (opt.x_min, opt.x_max) == (-2.5, 1.0)
    assert opt.prefilter


def test_default_output_is_a_single_image(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    parser, opt = _parse()
    config = progressive.resolve_output_config(opt, parser)

    assert config.modes == ("image",)
    assert config.image_path == (tmp_path / "mandelbrot.png").resolve()
    assert config.gif_path is None
    assert config.frame_dir is None


def test_output_suffix_is_added(tmp_path):
    parser, opt = _parse("--mode", "gif", "--output", str(tmp_path / "movie"))
    config = progressive.resolve_output_config(opt, parser)
    assert config.gif_path == (tmp_path / "movie.gif").resolve()


def test_image_and_gif_share_an_output_directory(tmp_path):
    parser, opt = _parse("--mode", "image", "--mode", "gif", "--output", str(tmp_path))
    config = progressive.resolve_output_config(opt, parser)
    assert config.image_path == (tmp_path / "mandelbrot.png").resolve()
    assert config.gif_path == (tmp_path / "mandelbrot.gif").resolve()


@pytest.mark.parametrize(
    "args",
    [
        ("--mode", "video"),
        ("--mode", "gif", "--output", "movie.png"),
        ("--frame-dir", "frames"),
        ("--mode", "frames", "--output", "out.png"),
    ],
)
def test_invalid_output_combinations_exit(args):
    parser, opt = _parse(*args)
    with pytest.raises(SystemExit):
        progressive.resolve_output_config(opt, parser)


def test_engine_config_derives_aspect_window():
    parser, opt = _parse("--width", "200", "--height", "100", "--y-center", "0.5")
    config = progressive.build_engine_config(opt, parser)
    assert config.window.height == pytest.approx(config.window.width / 2)
    assert (config.window.y_min + config.window.y_max) / 2 == pytest.approx(0.5)


def test_engine_config_accepts_explicit_y_bounds():
    parser, opt = _parse("--y-min", "-0.5", "--y-max", "0.75", "--no-prefilter")
    config = progressive.build_engine_config(opt, parser)
    assert (config.window.y_min, config.window.y_max) == (-0.5, 0.75)
    assert not config.prefilter


@pytest.mark.parametrize(
    "args",
    [
        ("--width", "1"),
        ("--max-iterations", "0"),
        ("--x-min", "1", "--x-max", "-1"),
        ("--y-min", "0.5"),
    ],
)
def test_invalid_engine_config_exits(args):
    parser, opt = _parse(*args)
    with pytest.raises(SystemExit):
        progressive.build_engine_config(opt, parser)


def test_color_mapper_selection():
    parser, opt = _parse("--max-iterations", "50")
    assert isinstance(progressive.build_color_mapper(opt, parser), GradientColorMapper)

    parser, opt = _parse("--max-iterations", "50", "--colormap", "inferno", "--inside-color", "#102030")
    mapper = progressive.build_color_mapper(opt, parser)
    assert isinstance(mapper, ColormapColorMapper)
    assert mapper(50) == (16, 32, 48)


def test_unknown_colormap_exits():
    parser, opt = _parse("--colormap", "no-such-map")
    with pytest.raises(SystemExit):
        progressive.build_color_mapper(opt, parser)


def test_main_renders_settled_image(tmp_path, capsys):
    output = tmp_path / "render.png"
    summary = progressive.main(
        ["--width", "24", "--height", "18", "--max-iterations", "12", "--steps-per-frame", "5", "--output", str(output)]
    )

    assert summary.settled
    assert summary.steps == 12
    assert output.is_file()
    assert "iteration 12 out of 12" in capsys.readouterr().out


def test_main_writes_frames_and_respects_max_frames(tmp_path):
    frame_dir = tmp_path / "frames"
    summary = progressive.main(
        ["--width", "16", "--height", "12", "--max-iterations", "40", "--mode", "frames",
         "--frame-dir", str(frame_dir), "--max-frames", "3"]
    )

    assert not summary.settled
    assert summary.presents == 3
    assert len(list(Path(frame_dir).iterdir())) == 3
