import numpy as np
import PIL.Image

from progressive_mandelbrot import (
    CompositePresenter,
    FrameSequencePresenter,
    GifPresenter,
    ImagePresenter,
    RenderLoop,
    initialize,
)


def test_image_presenter_writes_latest_frame_on_close(tmp_path, make_config):
    engine = initialize(make_config(12, 9, max_iterations=6))
    path = tmp_path / "nested" / "final.png"
    presenter = ImagePresenter(path, "png")

    RenderLoop(engine, presenter, steps_per_present=2).run()
    assert not path.exists()
    presenter.close()

    with PIL.Image.open(path) as image:
        assert image.size == (12, 9)
        np.testing.assert_array_equal(np.array(image.convert("RGBA")), engine.image())


def test_image_presenter_drops_alpha_for_jpeg(tmp_path, make_config):
    engine = initialize(make_config(12, 9, max_iterations=3))
    path = tmp_path / "final.jpg"
    presenter = ImagePresenter(path, "jpg")
    presenter.present(engine)
    presenter.close()

    with PIL.Image.open(path) as image:
        assert image.format == "JPEG"
        assert image.mode == "RGB"


def test_frame_sequence_presenter_numbers_frames(tmp_path, make_config):
    engine = initialize(make_config(8, 6, max_iterations=4))
    presenter = FrameSequencePresenter(tmp_path / "frames", "png", digits=3)

    RenderLoop(engine, presenter).run()

    names = sorted(path.name for path in (tmp_path / "frames").iterdir())
    assert names == ["frame000.png", "frame001.png", "frame002.png", "frame003.png", "frame004.png"]
    assert presenter.written[-1].name == "frame004.png"


def test_gif_presenter_appends_each_frame(tmp_path, make_config):
    engine = initialize(make_config(8, 6, max_iterations=4))
    path = tmp_path / "run.gif"
    presenter = GifPresenter(path, duration=0.05)
    try:
        RenderLoop(engine, presenter).run()
    finally:
        presenter.close()

    assert presenter.frames == 5
    assert path.is_file()
    assert path.stat().st_size > 0


def test_composite_presenter_fans_out(tmp_path, make_config):
    engine = initialize(make_config(8, 6, max_iterations=2))
    image = ImagePresenter(tmp_path / "out.png")
    frames = FrameSequencePresenter(tmp_path / "frames")
    composite = CompositePresenter([image, frames])

    RenderLoop(engine, composite).run()
    composite.close()

    assert (tmp_path / "out.png").is_file()
    assert len(frames.written) == 3
