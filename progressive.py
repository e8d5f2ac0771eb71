import os
import sys
import warnings
from dataclasses import dataclass
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")

from argparse import ArgumentParser

from progressive_mandelbrot import (
    ColormapColorMapper,
    CompositePresenter,
    EngineConfig,
    FrameSequencePresenter,
    GifPresenter,
    GradientColorMapper,
    Grid,
    ImagePresenter,
    MandelbrotError,
    PixelStatus,
    PlaneWindow,
    RenderLoop,
    initialize,
    parse_hex_color,
)

VALID_MODES = ("image", "gif", "frames")


@dataclass
class OutputConfig:
    modes: tuple[str, ...]
    image_path: Path | None
    gif_path: Path | None
    frame_dir: Path | None
    image_format: str


def build_parser():
    parser = ArgumentParser(description='Progressively render the Mandelbrot set, one iteration per step.')

    parser.add_argument('--width', type=int,
                        dest='pixel_width', help='canvas width in pixels',
                        metavar='WIDTH', default=640)

    parser.add_argument('--height', type=int,
                        dest='pixel_height', help='canvas height in pixels',
                        metavar='HEIGHT', default=480)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='iteration cap; the run settles after this many steps',
                        metavar='MAX_ITERATIONS', default=1000)

    parser.add_argument('--x-min', type=float,
                        dest='x_min', help='left edge of the window in the complex plane',
                        metavar='X_MIN', default=-2.5)

    parser.add_argument('--x-max', type=float,
                        dest='x_max', help='right edge of the window in the complex plane',
                        metavar='X_MAX', default=1.0)

    parser.add_argument('--y-center', type=float,
                        dest='y_center', help='imaginary centre of the window; the height follows the canvas aspect',
                        metavar='Y_CENTER', default=0.0)

    parser.add_argument('--y-min', type=float,
                        dest='y_min', help='explicit bottom edge; requires --y-max and overrides --y-center',
                        metavar='Y_MIN')

    parser.add_argument('--y-max', type=float,
                        dest='y_max', help='explicit top edge; requires --y-min and overrides --y-center',
                        metavar='Y_MAX')

    parser.add_argument('--no-prefilter', dest='prefilter', action='store_false',
                        help='iterate every pixel instead of certifying the main cardioid and period-2 bulb up front')

    parser.add_argument('--colormap', type=str,
                        dest='colormap', help='matplotlib colormap (e.g. "viridis"); defaults to the blue-green-red-yellow gradient',
                        metavar='COLORMAP')

    parser.add_argument('--invert', action='store_true', help='Invert the selected colormap.')
    parser.add_argument('--inside-color', type=str, default='#000000',
                        help='Hex color for points that never escape when --colormap is used.')

    parser.add_argument('--steps-per-frame', type=int,
                        dest='steps_per_frame', help='engine steps between two presented frames',
                        metavar='STEPS', default=1)

    parser.add_argument('--interval', type=float,
                        dest='interval', help='seconds to wait between batches of steps',
                        metavar='SECONDS')

    parser.add_argument('--max-frames', type=int,
                        dest='max_frames', help='stop after presenting this many frames even if the run has not settled',
                        metavar='FRAMES')

    parser.add_argument('--mode', dest='modes', action='append', metavar='MODE',
                        help='Output modes to generate. May be repeated. Choices: image, gif, frames.')

    parser.add_argument('--output', dest='output', type=str,
                        help='Destination for single-file outputs (gif/image) or container directory when both are requested.')

    parser.add_argument('--frame-dir', dest='frame_dir', type=str,
                        help='Directory in which to store the frame sequence.')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format for image-based outputs. Can be any extension supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('--gif-duration', type=float, dest='gif_duration', default=0.1,
                        help='display time of each GIF frame')

    parser.add_argument('--device', type=str, default='/CPU:0',
                        help='TensorFlow device used for the iteration kernel.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow diagnostics.')

    return parser


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    modes: list[str] = []
    for mode in opt.modes or ["image"]:
        if mode not in VALID_MODES:
            parser.error(f"Unknown output mode '{mode}'. Valid choices: {', '.join(sorted(VALID_MODES))}.")
        if mode not in modes:
            modes.append(mode)
    modes_set = set(modes)

    image_format = (getattr(opt, "format", "png") or "png").lower().lstrip(".")
    if not image_format:
        image_format = "png"

    frame_dir_path: Path | None = None
    if "frames" in modes_set:
        frame_dir_path = Path(opt.frame_dir or "./frames").expanduser().resolve()
    elif opt.frame_dir is not None:
        parser.error("--frame-dir is only valid with the frames mode.")

    file_modes = [mode for mode in modes if mode in {"gif", "image"}]
    image_path: Path | None = None
    gif_path: Path | None = None

    if not file_modes:
        if opt.output:
            parser.error("--output is only valid when gif or image modes are requested.")
    elif len(file_modes) == 1:
        mode = file_modes[0]
        if opt.output:
            output_path = Path(opt.output).expanduser()
            if opt.output.endswith(("/", os.sep)) or output_path.is_dir():
                parser.error("--output must be a file path when a single file-based mode is selected.")
            expected_suffix = ".gif" if mode == "gif" else f".{image_format}"
            if output_path.suffix:
                if output_path.suffix.lower() != expected_suffix:
                    parser.error(f"--output extension {output_path.suffix} does not match the {mode} mode ({expected_suffix}).")
            else:
                output_path = output_path.with_suffix(expected_suffix)
            resolved = output_path.resolve()
        else:
            resolved = Path("mandelbrot.gif" if mode == "gif" else f"mandelbrot.{image_format}").resolve()
        if mode == "gif":
            gif_path = resolved
        else:
            image_path = resolved
    else:
        base_dir = Path(opt.output).expanduser() if opt.output else Path.cwd()
        if base_dir.exists() and not base_dir.is_dir():
            parser.error("--output must be a directory when both gif and image modes are active.")
        gif_path = (base_dir / "mandelbrot.gif").resolve()
        image_path = (base_dir / f"mandelbrot.{image_format}").resolve()

    return OutputConfig(
        modes=tuple(modes),
        image_path=image_path,
        gif_path=gif_path,
        frame_dir=frame_dir_path,
        image_format=image_format,
    )


def build_engine_config(opt, parser: ArgumentParser) -> EngineConfig:
    if (opt.y_min is None) != (opt.y_max is None):
        parser.error("--y-min and --y-max must be given together.")
    try:
        grid = Grid(opt.pixel_width, opt.pixel_height)
        if opt.y_min is not None:
            window = PlaneWindow(opt.x_min, opt.x_max, opt.y_min, opt.y_max)
        else:
            window = PlaneWindow.with_aspect(
                opt.x_min, opt.x_max, grid.pixel_width, grid.pixel_height, y_center=opt.y_center
            )
        return EngineConfig(grid=grid, window=window, max_iterations=opt.max_iterations, prefilter=opt.prefilter)
    except MandelbrotError as exc:
        parser.error(str(exc))


def build_color_mapper(opt, parser: ArgumentParser):
    if opt.colormap is None:
        return GradientColorMapper.default(opt.max_iterations)
    try:
        inside_rgb = parse_hex_color(opt.inside_color)
    except ValueError:
        print(f"Invalid inside_color '{opt.inside_color}', defaulting to black.")
        inside_rgb = (0, 0, 0)
    try:
        return ColormapColorMapper(opt.colormap, opt.max_iterations, inside_color=inside_rgb, invert=opt.invert)
    except ValueError as exc:
        parser.error(str(exc))


def build_presenter(output_config: OutputConfig, gif_duration: float) -> CompositePresenter:
    presenters = []
    if output_config.image_path is not None:
        presenters.append(ImagePresenter(output_config.image_path, output_config.image_format))
    if output_config.gif_path is not None:
        presenters.append(GifPresenter(output_config.gif_path, duration=gif_duration))
    if output_config.frame_dir is not None:
        presenters.append(FrameSequencePresenter(output_config.frame_dir, output_config.image_format))
    return CompositePresenter(presenters)


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    if opt.steps_per_frame <= 0:
        parser.error("--steps-per-frame must be positive.")
    if opt.interval is not None and opt.interval < 0:
        parser.error("--interval must not be negative.")

    output_config = resolve_output_config(opt, parser)
    config = build_engine_config(opt, parser)
    color_mapper = build_color_mapper(opt, parser)

    log("TensorFlow version: %s" % tf.__version__)
    log("Devices: %s" % ", ".join(device.name for device in tf.config.list_physical_devices()))
    log("Window: x=[%g, %g] y=[%g, %g]" % (
        config.window.x_min, config.window.x_max, config.window.y_min, config.window.y_max))

    engine = initialize(config, color_mapper, device=opt.device)
    log("Pixels certified interior before iterating: %d" % engine.counts()[PixelStatus.INTERIOR])

    def report(current):
        print("iteration {0} out of {1}".format(current.current_iteration, current.max_iterations), end='\r')

    presenter = build_presenter(output_config, opt.gif_duration)
    try:
        loop = RenderLoop(
            engine,
            presenter,
            steps_per_present=opt.steps_per_frame,
            interval=opt.interval,
            on_present=report,
        )
        summary = loop.run(max_presents=opt.max_frames)
    finally:
        presenter.close()

    print()
    log("Steps: %d, frames: %d, settled: %s" % (summary.steps, summary.presents, summary.settled))
    log("Final pixel counts: %s" % {status.name: count for status, count in engine.counts().items()})
    return summary


if __name__ == '__main__':
    main()
