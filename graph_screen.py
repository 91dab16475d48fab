from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pygame

from canvas import PygameCanvas, parse_css_color
from effects import (
    PointerParallax,
    ScrollObserver,
    TweenEngine,
    build_hero_timeline,
    color_shift_triggers,
    heading_entrance_triggers,
    new_element,
    project_card_triggers,
    roadmap_node_triggers,
)
from graph import GraphStyle, SkillGraph
from host import ResizeNotifier
from ui_base import calc_scale, get_font

logger = logging.getLogger(__name__)

_ROADMAP_DOT = (80, 0, 0)
_CARD_BORDER = (226, 232, 240)


@dataclass
class Section:
    name: str
    title: str
    # Height as a fraction of the window height.
    height: float


class GraphScreen:
    """A scrolling one-page layout whose skills section hosts the graph."""

    def __init__(self, app):
        self.app = app
        self.screen = app.screen
        loader = app.loader
        page_cfg = loader['page']

        self.heading_color = parse_css_color(page_cfg.get('heading_color', '#0f172a'))[:3]
        self.scroll_step = int(page_cfg.get('scroll_step', 60))
        self.sections: List[Section] = [
            Section(str(s['name']), str(s.get('title', s['name'])), float(s.get('height', 1.0)))
            for s in page_cfg['sections']
        ]
        self.title_base_font_size = 44
        self.heading_base_font_size = 30
        self.body_base_font_size = 20
        self.layout_scale = 1.0
        self.title_font = get_font(self.title_base_font_size, bold=True)
        self.heading_font = get_font(self.heading_base_font_size, bold=True)
        self.body_font = get_font(self.body_base_font_size)

        # Animatable page elements
        self.engine = TweenEngine()
        self.body = new_element(background=parse_css_color(page_cfg['background'])[:3])
        self.hero_layer = new_element()
        self.hero_title = new_element()
        self.hero_subtitle = new_element()
        self.hero_button = new_element()
        self.elements: Dict[str, dict] = {
            'body': self.body,
            'hero.title': self.hero_title,
            'hero.subtitle': self.hero_subtitle,
            'hero.button': self.hero_button,
        }
        content_sections = [s.name for s in self.sections if s.name != 'hero']
        for name in content_sections:
            self.elements[f"{name}.heading"] = new_element()

        # Roadmap nodes and project cards, keyed "<section>.<index>".
        self.items: Dict[str, List[str]] = {}
        for name in ('roadmap', 'projects'):
            if name in content_sections:
                self.items[name] = [str(text) for text in page_cfg.get(name, [])]
        for name, texts in self.items.items():
            for idx in range(len(texts)):
                self.elements[f"{name}.{idx}"] = new_element()
        triggers = color_shift_triggers(page_cfg['background']) + heading_entrance_triggers(content_sections)
        triggers += roadmap_node_triggers(self._item_names('roadmap'))
        triggers += project_card_triggers(self._item_names('projects'))

        self.parallax = PointerParallax(self.engine, self.hero_layer, strength=float(page_cfg.get('parallax_range', 20.0)))
        self.observer = ScrollObserver(
            self.engine,
            triggers,
            self.elements.__getitem__,
        )
        self.observer.prime()

        self.scroll_y: float = 0.0
        self.page_height: float = 0.0
        self.layout: Dict[str, Tuple[float, float]] = {}
        self.section_rects: Dict[str, pygame.Rect] = {}
        self.item_rects: Dict[str, pygame.Rect] = {}
        self.graph_rect: Optional[pygame.Rect] = None

        # The graph lives inside the skills section and is reseeded whenever
        # that container changes size.
        self.container_notifier = ResizeNotifier('skills')
        self.canvas: Optional[PygameCanvas] = PygameCanvas((0, 0)) if 'skills' in content_sections else None
        self.graph = SkillGraph(
            self.canvas,
            loader['skills'],
            app.scheduler,
            resize_notifier=self.container_notifier,
            style=GraphStyle.from_config(loader['graph']),
        )

        self._relayout(self.app.window_size)

    # ------------------------------------------------------------------ Lifecycle
    def start(self) -> None:
        self.engine.play(build_hero_timeline(self.hero_title, self.hero_subtitle, self.hero_button))
        self.graph.start()
        self._update_scroll()

    def close(self) -> None:
        self.graph.stop()

    def on_resize(self, size: Tuple[int, int]) -> None:
        self.screen = self.app.screen
        self._relayout(size)
        self._update_scroll()

    # ------------------------------------------------------------------ Layout
    def _item_names(self, section: str) -> List[str]:
        return [f"{section}.{idx}" for idx in range(len(self.items.get(section, [])))]

    def _update_fonts(self, scale: float) -> None:
        s = max(0.55, scale)
        self.title_font = get_font(max(20, int(self.title_base_font_size * s)), bold=True)
        self.heading_font = get_font(max(16, int(self.heading_base_font_size * s)), bold=True)
        self.body_font = get_font(max(12, int(self.body_base_font_size * s)))

    def _relayout(self, size: Tuple[int, int]) -> None:
        width, height = size
        self.layout_scale = calc_scale(size, min_scale=0.6, max_scale=1.2)
        scale = self.layout_scale
        self._update_fonts(scale)
        margin = max(int(24 * scale), width // 40)

        top = 0
        self.layout.clear()
        self.section_rects.clear()
        self.item_rects.clear()
        for section in self.sections:
            section_height = max(1, int(round(section.height * height)))
            rect = pygame.Rect(0, top, width, section_height)
            self.section_rects[section.name] = rect
            self.layout[section.name] = (float(rect.top), float(rect.height))
            if section.name != 'hero':
                self.layout[f"{section.name}.heading"] = (float(rect.top + margin), float(self.heading_font.get_height()))
            top += section_height
        self.page_height = float(top)
        self.scroll_y = self._clamp_scroll(self.scroll_y)

        skills = self.section_rects.get('skills')
        if skills is not None:
            header = margin + self.heading_font.get_height() + margin // 2
            self.graph_rect = pygame.Rect(
                skills.left + margin,
                skills.top + header,
                max(0, skills.width - 2 * margin),
                max(0, skills.height - header - margin),
            )
            self.container_notifier.notify(self.graph_rect.size)
        self._layout_items(margin)
        logger.debug("Page laid out for %sx%s, %d px tall", width, height, top)

    def _layout_items(self, margin: int) -> None:
        header = margin + self.heading_font.get_height() + margin // 2
        roadmap = self.section_rects.get('roadmap')
        if roadmap is not None:
            row = 2 * self.body_font.get_height()
            for idx, name in enumerate(self._item_names('roadmap')):
                rect = pygame.Rect(roadmap.left + margin, roadmap.top + header + idx * row, roadmap.width - 2 * margin, row)
                self.item_rects[name] = rect
        projects = self.section_rects.get('projects')
        names = self._item_names('projects')
        if projects is not None and names:
            gap = margin // 2
            card_w = max(1, (projects.width - 2 * margin - (len(names) - 1) * gap) // len(names))
            card_h = max(1, min(projects.height - header - margin, int(160 * self.layout_scale)))
            for idx, name in enumerate(names):
                left = projects.left + margin + idx * (card_w + gap)
                self.item_rects[name] = pygame.Rect(left, projects.top + header, card_w, card_h)
        for name, rect in self.item_rects.items():
            self.layout[name] = (float(rect.top), float(rect.height))

    def _clamp_scroll(self, value: float) -> float:
        max_scroll = max(0.0, self.page_height - self.app.window_size[1])
        return max(0.0, min(max_scroll, value))

    def scroll_by(self, dy: float) -> None:
        self.scroll_y = self._clamp_scroll(self.scroll_y + dy)
        self._update_scroll()

    def _update_scroll(self) -> None:
        self.observer.update(self.scroll_y, self.app.window_size[1], self.layout)

    # ------------------------------------------------------------------ Events
    def check_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.app.quit()
            elif event.type == pygame.VIDEORESIZE:
                self.app.handle_resize(event.size)
            elif event.type == pygame.MOUSEWHEEL:
                self.scroll_by(-event.y * self.scroll_step)
            elif event.type == pygame.MOUSEMOTION:
                self.parallax.on_pointer(event.pos, self.app.window_size)
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event)

    def _handle_key(self, event: pygame.event.Event) -> None:
        page = self.app.window_size[1]
        if event.key == pygame.K_ESCAPE:
            self.app.quit()
        elif event.key == pygame.K_DOWN:
            self.scroll_by(self.scroll_step)
        elif event.key == pygame.K_UP:
            self.scroll_by(-self.scroll_step)
        elif event.key == pygame.K_PAGEDOWN:
            self.scroll_by(page)
        elif event.key == pygame.K_PAGEUP:
            self.scroll_by(-page)
        elif event.key == pygame.K_HOME:
            self.scroll_by(-self.page_height)
        elif event.key == pygame.K_END:
            self.scroll_by(self.page_height)

    # ------------------------------------------------------------------ Drawing
    def _blit_text(self, font: pygame.font.Font, text: str, center: Tuple[float, float], element: dict) -> pygame.Rect:
        rendered = font.render(text, True, self.heading_color)
        scale = float(element.get('scale', 1.0))
        if abs(scale - 1.0) > 1e-3:
            rendered = pygame.transform.rotozoom(rendered, 0, max(scale, 0.01))
        opacity = max(0.0, min(1.0, float(element.get('opacity', 1.0))))
        rendered.set_alpha(int(round(opacity * 255)))
        rect = rendered.get_rect(center=(int(center[0] + element.get('x', 0.0)), int(center[1] + element.get('y', 0.0))))
        self.screen.blit(rendered, rect)
        return rect

    def _draw_hero(self, rect: pygame.Rect) -> None:
        hero = next((s for s in self.sections if s.name == 'hero'), None)
        if hero is None:
            return
        cx = rect.centerx + self.hero_layer['x']
        cy = rect.centery - self.scroll_y + self.hero_layer['y']
        self._blit_text(self.title_font, hero.title, (cx, cy - self.title_font.get_height()), self.hero_title)
        self._blit_text(self.body_font, "Scroll to explore", (cx, cy + self.body_font.get_height()), self.hero_subtitle)
        self._blit_text(self.body_font, "[ Contact me ]", (cx, cy + 3 * self.body_font.get_height()), self.hero_button)

    def _draw_headings(self) -> None:
        for section in self.sections:
            if section.name == 'hero':
                continue
            element = self.elements[f"{section.name}.heading"]
            top, height = self.layout[f"{section.name}.heading"]
            rect = self.section_rects[section.name]
            self._blit_text(self.heading_font, section.title, (rect.centerx, top - self.scroll_y + height / 2), element)

    def _draw_items(self) -> None:
        roadmap = self._item_names('roadmap')
        if roadmap:
            first, last = self.item_rects[roadmap[0]], self.item_rects[roadmap[-1]]
            x = first.left + self.body_font.get_height() // 2
            pygame.draw.line(self.screen, self.heading_color, (x, first.centery - self.scroll_y), (x, last.centery - self.scroll_y), 2)
        for idx, name in enumerate(roadmap):
            rect = self.item_rects[name]
            element = self.elements[name]
            opacity = max(0.0, min(1.0, float(element['opacity'])))
            if opacity <= 0.0:
                continue
            centery = rect.centery - self.scroll_y + element['y']
            dot = (rect.left + self.body_font.get_height() // 2, int(centery))
            pygame.draw.circle(self.screen, _ROADMAP_DOT, dot, max(3, self.body_font.get_height() // 4))
            text = self.body_font.render(self.items['roadmap'][idx], True, self.heading_color)
            text.set_alpha(int(round(opacity * 255)))
            self.screen.blit(text, text.get_rect(midleft=(rect.left + 2 * self.body_font.get_height(), dot[1])))

        for idx, name in enumerate(self._item_names('projects')):
            rect = self.item_rects[name]
            element = self.elements[name]
            opacity = max(0.0, min(1.0, float(element['opacity'])))
            if opacity <= 0.0:
                continue
            card = pygame.Surface(rect.size, pygame.SRCALPHA)
            pygame.draw.rect(card, (255, 255, 255), card.get_rect(), border_radius=12)
            pygame.draw.rect(card, _CARD_BORDER, card.get_rect(), width=1, border_radius=12)
            title = self.body_font.render(self.items['projects'][idx], True, self.heading_color)
            card.blit(title, title.get_rect(center=card.get_rect().center))
            card.set_alpha(int(round(opacity * 255)))
            self.screen.blit(card, (rect.left, int(rect.top - self.scroll_y + element['y'])))

    def update_screen(self, now: float) -> None:
        """Advance page effects and draw everything below the graph."""
        self.engine.update(now)
        self.screen.fill(self.body['background'])
        if 'hero' in self.section_rects:
            self._draw_hero(self.section_rects['hero'])
        self._draw_headings()
        self._draw_items()

    def present_graph(self) -> None:
        """Put the graph's last frame on screen."""
        if self.canvas is None or self.graph_rect is None:
            return
        self.screen.blit(self.canvas.surface, (self.graph_rect.left, int(self.graph_rect.top - self.scroll_y)))
