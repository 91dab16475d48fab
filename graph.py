"""
Skill graph: the render/update loop of the particle surface.

``SkillGraph`` owns a :class:`simulation.Simulation` and a canvas.  Once
started it runs one tick per display frame: clear the canvas, advance the
particles, draw their labels, draw the proximity edges and ask the frame
scheduler for the next frame.  A resize of the hosting container reseeds
every particle.  The loop holds the handle of its pending frame so
:meth:`SkillGraph.stop` can cancel it when the hosting view goes away.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from canvas import Canvas, format_rgba
from host import FrameHandle, FrameScheduler, ResizeNotifier
from simulation import EDGE_BASE_ALPHA, EDGE_THRESHOLD, MAX_SPEED, Edge, Simulation

logger = logging.getLogger(__name__)


class GraphState(enum.Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    STOPPED = 'stopped'


@dataclass(frozen=True)
class GraphStyle:
    """Visual constants of the graph."""
    edge_threshold: float = EDGE_THRESHOLD
    edge_base_alpha: float = EDGE_BASE_ALPHA
    edge_color: Tuple[int, int, int] = (80, 0, 0)
    max_speed: float = MAX_SPEED
    text_color: str = '#1e293b'
    font_size: int = 14
    font_family: Optional[str] = 'Inter'
    # Label baseline sits this far below the particle.
    label_offset: float = 4.0
    include_self_pairs: bool = False

    @classmethod
    def from_config(cls, graph_cfg: dict) -> 'GraphStyle':
        """Build a style from the ``graph`` section of the config."""
        defaults = cls()
        edge_color = graph_cfg.get('edge_color', defaults.edge_color)
        return cls(
            edge_threshold=float(graph_cfg.get('edge_threshold', defaults.edge_threshold)),
            edge_base_alpha=float(graph_cfg.get('edge_base_alpha', defaults.edge_base_alpha)),
            edge_color=tuple(int(c) for c in edge_color[:3]),
            max_speed=float(graph_cfg.get('max_speed', defaults.max_speed)),
            text_color=str(graph_cfg.get('text_color', defaults.text_color)),
            font_size=int(graph_cfg.get('font_size', defaults.font_size)),
            font_family=graph_cfg.get('font_family', defaults.font_family),
            label_offset=float(graph_cfg.get('label_offset', defaults.label_offset)),
            include_self_pairs=bool(graph_cfg.get('include_self_pairs', defaults.include_self_pairs)),
        )

    def edge_stroke(self, opacity: float) -> str:
        return format_rgba(self.edge_color, opacity)


class SkillGraph:
    def __init__(
        self,
        canvas: Optional[Canvas],
        labels: Sequence[str],
        scheduler: FrameScheduler,
        resize_notifier: Optional[ResizeNotifier] = None,
        style: Optional[GraphStyle] = None,
        simulation: Optional[Simulation] = None,
    ):
        """
        Create a graph bound to a canvas.

        Parameters
        ----------
        canvas : Canvas or None
            Drawing surface.  ``None`` means the surface is not attached yet
            and :meth:`start` does nothing.
        labels : sequence of str
            One particle is created per label.
        scheduler : FrameScheduler
            Supplies the per-frame callbacks.
        resize_notifier : ResizeNotifier, optional
            Size changes of the container; each one reseeds the particles.
        style : GraphStyle, optional
            Visual constants.
        simulation : Simulation, optional
            Pre-built simulation, e.g. with a seeded random generator.
        """
        self.canvas = canvas
        self.labels: Tuple[str, ...] = tuple(labels)
        self.scheduler = scheduler
        self.resize_notifier = resize_notifier
        self.style = style or GraphStyle()
        self.simulation = simulation or Simulation(max_speed=self.style.max_speed)
        self.state: GraphState = GraphState.IDLE
        self.last_edges: list[Edge] = []
        self._frame_handle: Optional[FrameHandle] = None
        self._unsubscribe = None

    @property
    def running(self) -> bool:
        return self.state is GraphState.RUNNING

    # ------------------------------------------------------------------ Lifecycle
    def start(self) -> bool:
        """Seed the particles and begin ticking.

        Returns ``False`` without doing anything when no canvas is attached.
        """
        if self.canvas is None:
            logger.info("Skill graph has no drawing surface; not starting")
            return False
        if self.running:
            return True
        if self.resize_notifier is not None:
            # Delivers the current size straight away when it is known.
            self._unsubscribe = self.resize_notifier.subscribe(self.handle_resize)
        if not self.simulation.seeded or self.state is GraphState.STOPPED:
            if self.resize_notifier is None or self.resize_notifier.last_size is None:
                self.handle_resize(self.canvas.size)
        self.state = GraphState.RUNNING
        self._schedule()
        logger.debug("Skill graph started with %d particles", self.simulation.particle_count)
        return True

    def stop(self) -> None:
        """Cancel the pending frame and stop listening for resizes."""
        self.scheduler.cancel_frame(self._frame_handle)
        self._frame_handle = None
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self.state is GraphState.RUNNING:
            self.state = GraphState.STOPPED
            logger.debug("Skill graph stopped")

    def handle_resize(self, size: Tuple[int, int]) -> None:
        """Resize the canvas to the container and reseed every particle."""
        if self.canvas is None:
            return
        width, height = int(size[0]), int(size[1])
        self.canvas.resize(width, height)
        self.simulation.seed(self.labels, width, height)
        logger.debug("Reseeded %d particles for %dx%d", len(self.labels), width, height)

    def _schedule(self) -> None:
        self._frame_handle = self.scheduler.request_frame(self.tick)

    # ------------------------------------------------------------------ Frame
    def tick(self, timestamp: Optional[float] = None) -> None:
        """Clear, advance, draw and reschedule."""
        self._frame_handle = None
        if self.canvas is None:
            return
        self.canvas.clear()
        next(self.simulation)
        self.render()
        if self.running:
            self._schedule()

    def render(self) -> None:
        """Draw the labels and the edges of the current positions."""
        canvas = self.canvas
        style = self.style
        r = self.simulation.r
        labels = self.simulation.labels

        canvas.set_font(style.font_size, style.font_family)
        canvas.set_fill_style(style.text_color)
        for idx, label in enumerate(labels):
            canvas.fill_text(label, float(r[0, idx]), float(r[1, idx]) + style.label_offset, align='center')

        self.last_edges = self.simulation.edges(
            threshold=style.edge_threshold,
            base_alpha=style.edge_base_alpha,
            include_self=style.include_self_pairs,
        )
        for edge in self.last_edges:
            canvas.set_stroke_style(style.edge_stroke(edge.opacity))
            canvas.stroke_line(
                (float(r[0, edge.i]), float(r[1, edge.i])),
                (float(r[0, edge.j]), float(r[1, edge.j])),
            )
