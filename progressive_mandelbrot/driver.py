"""Step/present loop that drives an :class:`~progressive_mandelbrot.engine.Engine`."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .engine import Engine


class Presenter(Protocol):
    def present(self, engine: Engine) -> None:
        ...

    def close(self) -> None:
        ...


@dataclass(frozen=True)
class RunSummary:
    steps: int
    presents: int
    settled: bool


class RenderLoop:
    """Alternate batches of engine steps with presentations.

    The initial buffer is presented before the first step, then after every
    ``steps_per_present`` completed steps, and once more when the run settles
    mid-batch. ``interval`` seconds are slept between batches when set.
    """

    def __init__(
        self,
        engine: Engine,
        presenter: Presenter,
        *,
        steps_per_present: int = 1,
        interval: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_present: Optional[Callable[[Engine], None]] = None,
    ):
        if steps_per_present <= 0:
            raise ValueError("steps_per_present must be positive")
        if interval is not None and interval < 0:
            raise ValueError("interval must not be negative")
        self.engine = engine
        self.presenter = presenter
        self.steps_per_present = steps_per_present
        self.interval = interval
        self._sleep = sleep
        self._on_present = on_present

    def _present(self) -> None:
        self.presenter.present(self.engine)
        if self._on_present is not None:
            self._on_present(self.engine)

    def run(self, max_presents: Optional[int] = None) -> RunSummary:
        """Run until the engine settles or ``max_presents`` frames were shown."""

        steps = 0
        presents = 0
        if max_presents is not None and max_presents <= 0:
            return RunSummary(steps=0, presents=0, settled=self.engine.settled)

        self._present()
        presents += 1

        while not self.engine.settled:
            if max_presents is not None and presents >= max_presents:
                break
            if self.interval:
                self._sleep(self.interval)
            for _ in range(self.steps_per_present):
                steps += 1
                if self.engine.step():
                    break
            self._present()
            presents += 1

        return RunSummary(steps=steps, presents=presents, settled=self.engine.settled)
