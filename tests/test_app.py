from __future__ import annotations

import pytest

from app import App
from graph import GraphState


@pytest.fixture
def app():
    application = App(window_size=(640, 480))
    yield application
    application.shutdown()


def test_skills_container_seeds_the_graph(app) -> None:
    screen = app.active_screen
    rect = screen.graph_rect

    assert rect is not None and rect.width > 0 and rect.height > 0
    screen.start()
    graph = screen.graph
    assert graph.state is GraphState.RUNNING
    assert graph.simulation.size == (float(rect.width), float(rect.height))
    assert graph.simulation.particle_count == len(app.loader["skills"])


def test_window_resize_reseeds_the_graph(app) -> None:
    screen = app.active_screen
    screen.start()
    before = screen.graph.simulation.size

    app.handle_resize((900, 700))

    after = screen.graph.simulation.size
    assert after != before
    assert after == (float(screen.graph_rect.width), float(screen.graph_rect.height))
    assert screen.canvas.size == screen.graph_rect.size


def test_scrolling_shifts_the_background(app) -> None:
    screen = app.active_screen
    screen.start()
    start_color = tuple(screen.body["background"])

    screen.update_screen(0.0)
    screen.scroll_by(screen.layout["skills"][0])
    screen.engine.update(5.0)

    assert tuple(screen.body["background"]) != start_color
    assert tuple(screen.body["background"]) == (255, 255, 255)


def test_run_ticks_the_graph_every_frame() -> None:
    application = App(window_size=(640, 480))
    graph = application.active_screen.graph

    frames = application.run(max_frames=3)

    assert frames == 3
    assert graph.simulation.frame_no == 3
    assert graph.state is GraphState.STOPPED
    assert application.scheduler.pending == 0


def test_intro_starts_on_the_first_frame_shown(app) -> None:
    screen = app.active_screen
    screen.start()

    # Startup took a while: the clock already reads 50 s on the first frame.
    screen.update_screen(50.0)
    assert screen.hero_title["opacity"] == 0.0
    screen.update_screen(50.5)
    assert 0.0 < screen.hero_title["opacity"] < 1.0
    screen.update_screen(55.0)
    assert screen.hero_title["opacity"] == 1.0


def test_roadmap_nodes_and_project_cards_enter_on_scroll(app) -> None:
    screen = app.active_screen
    nodes = [f"roadmap.{i}" for i in range(len(app.loader["page"]["roadmap"]))]
    cards = [f"projects.{i}" for i in range(len(app.loader["page"]["projects"]))]
    assert nodes and cards
    assert all(screen.elements[name]["opacity"] == 0.0 for name in nodes + cards)
    assert all(name in screen.layout for name in nodes + cards)

    screen.start()
    screen.update_screen(0.0)
    screen.scroll_by(screen.layout[cards[-1]][0])
    screen.update_screen(5.0)

    assert all(screen.elements[name]["opacity"] == 1.0 for name in nodes + cards)
    assert all(screen.elements[name]["y"] == 0.0 for name in nodes + cards)
