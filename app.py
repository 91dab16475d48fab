from __future__ import annotations

import logging
from typing import Optional, Tuple

import pygame

from config import ConfigLoader
from graph_screen import GraphScreen
from host import FrameScheduler
from ui_base import get_font

logger = logging.getLogger(__name__)


class App:
    """pygame window driving the page and the graph's frame scheduler."""

    def __init__(self, loader: Optional[ConfigLoader] = None, window_size: Optional[Tuple[int, int]] = None):
        pygame.init()
        self.loader = loader or ConfigLoader()
        self.window_size: Tuple[int, int] = tuple(int(v) for v in (window_size or self.loader['window_size']))
        self.screen = pygame.display.set_mode(self.window_size, pygame.RESIZABLE)
        pygame.display.set_caption("Skill graph")
        self.clock = pygame.time.Clock()
        self.fps = max(1, int(self.loader['fps']))
        self.scheduler = FrameScheduler()
        self.running = False
        self.active_screen = GraphScreen(self)

    def handle_resize(self, size: Tuple[int, int]) -> None:
        size = (max(1, int(size[0])), max(1, int(size[1])))
        if size == self.window_size:
            return
        logger.debug("Window resized to %sx%s", *size)
        self.window_size = size
        self.screen = pygame.display.get_surface()
        if self.screen is None or self.screen.get_size() != size:
            self.screen = pygame.display.set_mode(size, pygame.RESIZABLE)
        self.active_screen.on_resize(size)

    def quit(self) -> None:
        self.running = False

    def run(self, max_frames: Optional[int] = None) -> int:
        """Run the frame loop until the window closes.

        Each frame handles input (including resizes) first, so a reseed
        always finishes before the graph ticks.

        Returns
        -------
        int
            Number of frames shown.
        """
        self.running = True
        self.active_screen.start()
        frames = 0
        try:
            while self.running:
                self.active_screen.check_events()
                if not self.running:
                    break
                now = pygame.time.get_ticks() / 1000.0
                self.active_screen.update_screen(now)
                self.scheduler.run_frame(now)
                self.active_screen.present_graph()
                pygame.display.flip()
                self.clock.tick(self.fps)
                frames += 1
                if max_frames is not None and frames >= max_frames:
                    break
        finally:
            self.shutdown()
        logger.info("Stopped after %d frames", frames)
        return frames

    def shutdown(self) -> None:
        """Stop the page and release pygame.  Cached fonts die with it."""
        self.running = False
        self.active_screen.close()
        get_font.cache_clear()
        pygame.quit()
