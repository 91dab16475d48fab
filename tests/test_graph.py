from __future__ import annotations

import numpy as np
import pytest

from graph import GraphState, GraphStyle, SkillGraph
from host import FrameScheduler, ResizeNotifier
from simulation import EDGE_BASE_ALPHA, Simulation


def _graph(canvas, scheduler, labels=("A", "B"), **kwargs) -> SkillGraph:
    return SkillGraph(
        canvas,
        labels,
        scheduler,
        simulation=Simulation(rng=np.random.default_rng(99)),
        **kwargs,
    )


def test_start_without_canvas_is_a_silent_no_op(scheduler) -> None:
    graph = SkillGraph(None, ["A"], scheduler)

    assert graph.start() is False
    assert graph.state is GraphState.IDLE
    assert scheduler.pending == 0


def test_start_seeds_from_canvas_size_and_schedules_a_frame(canvas, scheduler) -> None:
    graph = _graph(canvas, scheduler, labels=["A", "B", "C"])

    assert graph.start() is True
    assert graph.state is GraphState.RUNNING
    assert graph.simulation.particle_count == 3
    assert graph.simulation.size == (300.0, 300.0)
    assert scheduler.pending == 1


def test_tick_reschedules_itself_every_frame(canvas, scheduler) -> None:
    graph = _graph(canvas, scheduler)
    graph.start()

    for frame in range(5):
        assert scheduler.run_frame(frame / 60.0) == 1
    assert graph.simulation.frame_no == 5
    assert canvas.clears == 5
    assert scheduler.pending == 1


def test_stop_cancels_the_pending_frame(canvas, scheduler) -> None:
    graph = _graph(canvas, scheduler)
    graph.start()
    scheduler.run_frame()

    graph.stop()

    assert graph.state is GraphState.STOPPED
    assert scheduler.pending == 0
    assert scheduler.run_frame() == 0
    assert graph.simulation.frame_no == 1


def test_labels_are_drawn_centered_below_each_particle(canvas, scheduler) -> None:
    graph = _graph(canvas, scheduler, labels=["Python", "SQL"])
    graph.start()
    graph.simulation.set_position(0, 50, 60)
    graph.simulation.set_velocity(0, 0, 0)
    graph.simulation.set_position(1, 250, 260)
    graph.simulation.set_velocity(1, 0, 0)

    scheduler.run_frame()

    assert canvas.texts == [
        ('text', 'Python', 50.0, 64.0, 'center', '#1e293b'),
        ('text', 'SQL', 250.0, 264.0, 'center', '#1e293b'),
    ]
    assert canvas.lines == []


def test_close_particles_get_an_edge_with_distance_based_opacity(canvas, scheduler) -> None:
    graph = _graph(canvas, scheduler)
    graph.start()
    sim = graph.simulation
    sim.set_position(0, 0, 0)
    sim.set_position(1, 10, 0)
    sim.set_velocity(0, 0, 0)
    sim.set_velocity(1, 0, 0)

    graph.canvas.clear()
    graph.render()

    assert len(canvas.lines) == 1
    _, start, end, (r, g, b, alpha) = canvas.lines[0]
    assert (start, end) == ((0.0, 0.0), (10.0, 0.0))
    assert (r, g, b) == (80, 0, 0)
    assert alpha == pytest.approx(EDGE_BASE_ALPHA * (1 - 10 / 150))


def test_self_pairs_are_not_drawn_by_default(canvas, scheduler) -> None:
    graph = _graph(canvas, scheduler, labels=["Solo"])
    graph.start()
    scheduler.run_frame()
    assert canvas.lines == []

    with_self = _graph(canvas, scheduler, labels=["Solo"], style=GraphStyle(include_self_pairs=True))
    with_self.start()
    with_self.canvas.clear()
    with_self.render()
    assert len(canvas.lines) == 1


def test_zero_particles_leave_an_empty_surface_every_frame(canvas, scheduler) -> None:
    graph = _graph(canvas, scheduler, labels=[])
    graph.start()

    scheduler.run_frame()
    assert canvas.calls == []
    scheduler.run_frame()
    assert canvas.calls == []
    assert canvas.clears == 2


def test_resize_notification_reseeds_between_ticks(canvas, scheduler) -> None:
    notifier = ResizeNotifier()
    notifier.notify((400, 200))
    graph = _graph(canvas, scheduler, resize_notifier=notifier)

    graph.start()
    assert canvas.size == (400, 200)
    assert graph.simulation.size == (400.0, 200.0)

    scheduler.run_frame()
    notifier.notify((120, 90))
    assert graph.simulation.size == (120.0, 90.0)
    assert graph.simulation.frame_no == 0
    assert np.all(graph.simulation.r[0] < 120)
    assert np.all(graph.simulation.r[1] < 90)

    graph.stop()
    notifier.notify((500, 500))
    assert graph.simulation.size == (120.0, 90.0)


def test_restart_after_stop_runs_again(canvas, scheduler) -> None:
    graph = _graph(canvas, scheduler)
    graph.start()
    graph.stop()

    assert graph.start() is True
    assert graph.running
    assert scheduler.run_frame() == 1


def test_start_twice_keeps_a_single_loop(canvas, scheduler) -> None:
    graph = _graph(canvas, scheduler)
    graph.start()
    graph.start()
    assert scheduler.pending == 1


def test_style_from_config() -> None:
    style = GraphStyle.from_config({
        'edge_threshold': 90,
        'edge_color': [1, 2, 3],
        'font_size': 18,
        'include_self_pairs': True,
    })
    assert style.edge_threshold == 90.0
    assert style.edge_color == (1, 2, 3)
    assert style.font_size == 18
    assert style.include_self_pairs is True
    assert style.text_color == '#1e293b'
    assert style.edge_stroke(0.25) == 'rgba(1, 2, 3, 0.25)'
