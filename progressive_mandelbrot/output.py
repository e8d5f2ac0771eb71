"""Presenters that write the engine's color buffer to disk."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Optional

import imageio
import numpy as np
import PIL.Image

from .engine import Engine


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def buffer_image(engine: Engine) -> PIL.Image.Image:
    """Copy the engine's RGBA buffer into a Pillow image."""

    return PIL.Image.fromarray(np.array(engine.image(), copy=True))


def _savable(image: PIL.Image.Image, image_format: str) -> PIL.Image.Image:
    # JPEG and BMP cannot store an alpha channel; alpha is always opaque here.
    if _pil_format_name(image_format) in {"JPEG", "BMP"}:
        return image.convert("RGB")
    return image


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    _savable(image, image_format).save(str(output_path), format=_pil_format_name(image_format))


class ImagePresenter:
    """Keep the latest presented frame and write it once on :meth:`close`."""

    def __init__(self, path: Path, image_format: str = "png"):
        self.path = Path(path)
        self.image_format = image_format
        self._latest: Optional[PIL.Image.Image] = None

    def present(self, engine: Engine) -> None:
        self._latest = buffer_image(engine)

    def close(self) -> None:
        if self._latest is not None:
            write_single_image(self._latest, self.path, self.image_format)
            self._latest = None


class FrameSequencePresenter:
    """Persist every presented frame as a numbered image inside ``frame_dir``."""

    def __init__(self, frame_dir: Path, image_format: str = "png", *, digits: int = 4, prefix: str = "frame"):
        self.frame_dir = Path(frame_dir)
        self.image_format = image_format
        self.digits = digits
        self.prefix = prefix
        self.written: list[Path] = []

    def present(self, engine: Engine) -> None:
        index = len(self.written)
        frame_path = self.frame_dir / f"{self.prefix}{index:0{self.digits}d}.{self.image_format}"
        self.frame_dir.mkdir(parents=True, exist_ok=True)
        _savable(buffer_image(engine), self.image_format).save(
            str(frame_path), format=_pil_format_name(self.image_format)
        )
        self.written.append(frame_path)

    def close(self) -> None:
        pass


class GifPresenter:
    """Append every presented frame to an animated GIF."""

    def __init__(self, path: Path, *, duration: float = 0.1):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._writer: Any = imageio.get_writer(str(self.path), mode='I', duration=duration, loop=0)
        self.frames = 0

    def present(self, engine: Engine) -> None:
        if self._writer is None:
            raise RuntimeError("GIF writer is already closed")
        self._writer.append_data(np.array(engine.image()[..., :3], copy=True))
        self.frames += 1

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()
            self._writer = None


class CompositePresenter:
    """Fan each presentation out to several presenters."""

    def __init__(self, presenters: Iterable[Any]):
        self.presenters = list(presenters)

    def present(self, engine: Engine) -> None:
        for presenter in self.presenters:
            presenter.present(engine)

    def close(self) -> None:
        for presenter in self.presenters:
            presenter.close()
