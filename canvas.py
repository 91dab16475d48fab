"""
Drawable surface handle used by the skill graph.

``Canvas`` is the small drawing vocabulary the graph needs: clear, fill and
stroke styles given as CSS colour strings, centred text and straight lines,
plus reading and writing the pixel size.  ``PygameCanvas`` implements it on
top of a per-pixel-alpha ``pygame.Surface`` so the page behind it shows
through wherever nothing is drawn.
"""

from __future__ import annotations

import math
import re
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import pygame

from ui_base import get_font

RGBA = Tuple[int, int, int, float]

_RGBA_RE = re.compile(
    r'^rgba?\(\s*([0-9.]+)\s*,\s*([0-9.]+)\s*,\s*([0-9.]+)\s*(?:,\s*([0-9.eE+-]+)\s*)?\)$'
)


def _clamp_channel(value: float) -> int:
    return int(max(0, min(255, round(value))))


def parse_css_color(color: str, fallback: RGBA = (0, 0, 0, 1.0)) -> RGBA:
    """Convert ``#rgb``, ``#rrggbb``, ``rgb(...)`` or ``rgba(...)`` to a tuple.

    The result is ``(r, g, b, alpha)`` with integer channels and alpha in
    ``[0, 1]``.  Strings that do not parse return ``fallback``.
    """
    if not isinstance(color, str):
        return fallback
    value = color.strip()
    if value.startswith('#'):
        digits = value[1:]
        if len(digits) == 3:
            digits = ''.join(ch * 2 for ch in digits)
        if len(digits) != 6:
            return fallback
        try:
            return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16), 1.0
        except ValueError:
            return fallback
    match = _RGBA_RE.match(value)
    if match is None:
        return fallback
    r, g, b, a = match.groups()
    alpha = 1.0 if a is None else float(a)
    if not math.isfinite(alpha):
        return fallback
    return (
        _clamp_channel(float(r)),
        _clamp_channel(float(g)),
        _clamp_channel(float(b)),
        max(0.0, min(1.0, alpha)),
    )


def format_rgba(rgb: Tuple[int, int, int], alpha: float) -> str:
    """Build an ``rgba(r, g, b, a)`` string."""
    return f"rgba({rgb[0]}, {rgb[1]}, {rgb[2]}, {alpha})"


class Canvas(ABC):
    """2D drawing context consumed by the graph."""

    fill_style: str = '#000000'
    stroke_style: str = '#000000'
    font_size: int = 14
    font_family: Optional[str] = None

    @property
    @abstractmethod
    def width(self) -> int:
        ...

    @property
    @abstractmethod
    def height(self) -> int:
        ...

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @abstractmethod
    def resize(self, width: int, height: int) -> None:
        """Change the pixel dimensions.  The content is discarded."""

    @abstractmethod
    def clear(self) -> None:
        """Erase the whole drawable area."""

    def set_fill_style(self, color: str) -> None:
        self.fill_style = color

    def set_stroke_style(self, color: str) -> None:
        self.stroke_style = color

    def set_font(self, size: int, family: Optional[str] = None) -> None:
        self.font_size = int(size)
        self.font_family = family

    @abstractmethod
    def fill_text(self, text: str, x: float, y: float, align: str = 'center') -> None:
        """Draw ``text`` with its baseline at ``y``.

        ``align`` is ``'left'``, ``'center'`` or ``'right'`` relative to ``x``.
        """

    @abstractmethod
    def stroke_line(self, start: Tuple[float, float], end: Tuple[float, float]) -> None:
        """Draw a line segment in the current stroke style."""


class PygameCanvas(Canvas):
    """Canvas backed by a transparent ``pygame.Surface``."""

    def __init__(self, size: Tuple[int, int], line_width: int = 1):
        width, height = (max(0, int(s)) for s in size)
        self.surface: pygame.Surface = pygame.Surface((width, height), pygame.SRCALPHA)
        self.line_width = max(1, int(line_width))

    @property
    def width(self) -> int:
        return self.surface.get_width()

    @property
    def height(self) -> int:
        return self.surface.get_height()

    def resize(self, width: int, height: int) -> None:
        width, height = max(0, int(width)), max(0, int(height))
        if (width, height) == self.size:
            self.clear()
            return
        self.surface = pygame.Surface((width, height), pygame.SRCALPHA)

    def clear(self) -> None:
        self.surface.fill((0, 0, 0, 0))

    @staticmethod
    def _to_pygame_color(color: str) -> pygame.Color:
        r, g, b, a = parse_css_color(color)
        return pygame.Color(r, g, b, _clamp_channel(a * 255))

    def _font(self) -> pygame.font.Font:
        return get_font(self.font_size, family=self.font_family)

    def fill_text(self, text: str, x: float, y: float, align: str = 'center') -> None:
        if not text:
            return
        font = self._font()
        color = self._to_pygame_color(self.fill_style)
        rendered = font.render(text, True, color)
        if color.a < 255:
            rendered.set_alpha(color.a)
        if align == 'center':
            left = x - rendered.get_width() / 2.0
        elif align == 'right':
            left = x - rendered.get_width()
        else:
            left = x
        top = y - font.get_ascent()
        self.surface.blit(rendered, (int(round(left)), int(round(top))))

    def stroke_line(self, start: Tuple[float, float], end: Tuple[float, float]) -> None:
        color = self._to_pygame_color(self.stroke_style)
        if color.a == 0:
            return
        if color.a == 255:
            pygame.draw.line(self.surface, color, start, end, self.line_width)
            return
        # Translucent strokes go through a small layer so they blend with
        # what is already on the surface instead of overwriting it.
        pad = self.line_width + 1
        left = int(math.floor(min(start[0], end[0]))) - pad
        top = int(math.floor(min(start[1], end[1]))) - pad
        right = int(math.ceil(max(start[0], end[0]))) + pad
        bottom = int(math.ceil(max(start[1], end[1]))) + pad
        layer = pygame.Surface((right - left, bottom - top), pygame.SRCALPHA)
        pygame.draw.line(
            layer,
            color,
            (start[0] - left, start[1] - top),
            (end[0] - left, end[1] - top),
            self.line_width,
        )
        self.surface.blit(layer, (left, top))
