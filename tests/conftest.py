from __future__ import annotations

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from typing import Any, List, Optional, Tuple

import numpy as np
import pytest

from canvas import Canvas, parse_css_color
from host import FrameScheduler
from simulation import Simulation


class RecordingCanvas(Canvas):
    """Canvas double that keeps every draw call of the current frame."""

    def __init__(self, size: Tuple[int, int] = (300, 300)):
        self._size = (int(size[0]), int(size[1]))
        self.calls: List[Tuple[Any, ...]] = []
        self.clears = 0

    @property
    def width(self) -> int:
        return self._size[0]

    @property
    def height(self) -> int:
        return self._size[1]

    def resize(self, width: int, height: int) -> None:
        self._size = (int(width), int(height))
        self.calls = []

    def clear(self) -> None:
        self.clears += 1
        self.calls = []

    def fill_text(self, text: str, x: float, y: float, align: str = 'center') -> None:
        self.calls.append(('text', text, x, y, align, self.fill_style))

    def stroke_line(self, start, end) -> None:
        self.calls.append(('line', tuple(start), tuple(end), parse_css_color(self.stroke_style)))

    @property
    def texts(self) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == 'text']

    @property
    def lines(self) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == 'line']


@pytest.fixture
def canvas() -> RecordingCanvas:
    return RecordingCanvas((300, 300))


@pytest.fixture
def scheduler() -> FrameScheduler:
    return FrameScheduler()


@pytest.fixture
def sim() -> Simulation:
    return Simulation(rng=np.random.default_rng(1234))
