"""Shared pygame UI helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional, Tuple

import pygame


@lru_cache(maxsize=64)
def get_font(size: int, bold: bool = False, family: Optional[str] = None) -> pygame.font.Font:
    """Return a cached font, falling back to pygame's default face."""
    if not pygame.font.get_init():
        pygame.font.init()
    size = max(1, int(size))
    if family:
        match = pygame.font.match_font(family, bold=bold)
        if match:
            return pygame.font.Font(match, size)
    font = pygame.font.Font(None, size)
    font.set_bold(bold)
    return font


def calc_scale(size: Tuple[int, int], base: Tuple[int, int] = (1280, 800), min_scale: float = 0.5, max_scale: float = 1.5) -> float:
    """Layout scale of a window relative to the reference size."""
    width, height = size
    scale = min(width / base[0], height / base[1]) if base[0] and base[1] else 1.0
    return max(min_scale, min(max_scale, scale))
