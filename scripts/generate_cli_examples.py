from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

EXAMPLES_ROOT = Path("examples/cli-options")
BASE_ARGS = ["--width", "160", "--height", "120", "--max-iterations", "60"]


@dataclass
class Example:
    name: str
    args: list[str]
    expected: list[Path]
    directories: list[Path] = field(default_factory=list)

    def full_args(self) -> list[str]:
        return [sys.executable, "progressive.py", *BASE_ARGS, *self.args]


def _single_image(name: str, filename: str, *extra: str) -> Example:
    path = EXAMPLES_ROOT / name / filename
    return Example(name=name, args=[*extra, "--output", str(path)], expected=[path])


EXAMPLES: list[Example] = [
    _single_image("default", "settled.png"),
    _single_image("max-iterations", "deep.png", "--max-iterations", "400"),
    _single_image("window", "seahorse-valley.png", "--x-min", "-0.8", "--x-max", "-0.7", "--y-center", "0.1"),
    _single_image("explicit-y", "stretched.png", "--y-min", "-0.5", "--y-max", "0.5"),
    _single_image("no-prefilter", "iterated-interior.png", "--no-prefilter"),
    _single_image("colormap", "viridis.png", "--colormap", "viridis"),
    _single_image("invert", "inverted.png", "--colormap", "magma", "--invert"),
    _single_image("inside-color", "custom-interior.png", "--colormap", "twilight", "--inside-color", "#0a3ba0"),
    _single_image("max-frames", "partial.png", "--max-frames", "8"),
    _single_image("format", "custom.webp", "--format", "webp"),
    _single_image("verbose", "diagnostic.png", "--verbose"),
    Example(
        name="gif",
        args=["--mode", "gif", "--steps-per-frame", "4", "--output", str(EXAMPLES_ROOT / "gif" / "progressive.gif")],
        expected=[EXAMPLES_ROOT / "gif" / "progressive.gif"],
    ),
    Example(
        name="frames",
        args=["--mode", "frames", "--steps-per-frame", "10", "--frame-dir", str(EXAMPLES_ROOT / "frames" / "frames")],
        expected=[],
        directories=[EXAMPLES_ROOT / "frames" / "frames"],
    ),
    Example(
        name="image-and-gif",
        args=["--mode", "image", "--mode", "gif", "--steps-per-frame", "6", "--output", str(EXAMPLES_ROOT / "image-and-gif")],
        expected=[EXAMPLES_ROOT / "image-and-gif" / "mandelbrot.png", EXAMPLES_ROOT / "image-and-gif" / "mandelbrot.gif"],
    ),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()


def _verify(example: Example) -> None:
    for path in example.expected:
        if not path.is_file():
            raise RuntimeError(f"Expected file {path} was not created")
    for path in example.directories:
        if not path.is_dir() or not any(path.iterdir()):
            raise RuntimeError(f"Expected non-empty directory {path}")


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _ensure_clean([EXAMPLES_ROOT / example.name])
        subprocess.run(example.full_args(), check=True)
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
