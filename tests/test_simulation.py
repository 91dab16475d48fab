from __future__ import annotations

import math

import numpy as np
import pytest

from simulation import (
    EDGE_BASE_ALPHA,
    EDGE_THRESHOLD,
    MAX_SPEED,
    Simulation,
    edge_opacity,
    pair_indices,
    reflect_from_walls,
)


def test_seed_creates_one_particle_per_label_inside_bounds(sim) -> None:
    labels = [f"skill-{i}" for i in range(200)]
    sim.seed(labels, 640, 480)

    assert sim.particle_count == len(labels)
    assert sim.labels == tuple(labels)
    assert sim.r.shape == (2, 200)
    assert np.all(sim.r[0] >= 0) and np.all(sim.r[0] < 640)
    assert np.all(sim.r[1] >= 0) and np.all(sim.r[1] < 480)
    assert np.all(np.abs(sim.v) <= MAX_SPEED)


def test_reseed_discards_previous_state(sim) -> None:
    sim.seed(["A", "B", "C"], 300, 300)
    old_r = sim.r.copy()
    old_v = sim.v.copy()
    sim.step()

    sim.seed(["A", "B", "C"], 100, 50)

    assert sim.size == (100.0, 50.0)
    assert sim.frame_no == 0
    assert not np.array_equal(sim.r, old_r)
    assert not np.array_equal(sim.v, old_v)
    assert np.all(sim.r[0] < 100) and np.all(sim.r[1] < 50)


def test_seed_with_no_labels_is_empty(sim) -> None:
    sim.seed([], 300, 300)
    assert sim.particle_count == 0
    assert sim.r.shape == (2, 0)
    sim.step()
    assert sim.edges() == []


def test_seed_coerces_bad_dimensions(sim) -> None:
    sim.seed(["A"], -10, float('nan'))
    assert sim.size == (0.0, 0.0)


def test_seed_is_reproducible_with_the_same_generator() -> None:
    first = Simulation(rng=np.random.default_rng(7))
    second = Simulation(rng=np.random.default_rng(7))
    first.seed(["A", "B"], 300, 300)
    second.seed(["A", "B"], 300, 300)
    assert np.array_equal(first.r, second.r)
    assert np.array_equal(first.v, second.v)


def test_reflection_flips_velocity_one_tick_late(sim) -> None:
    sim.seed(["A"], 300, 300)
    sim.set_position(0, 300 - 0.1, 150)
    sim.set_velocity(0, 1.0, 0.0)

    sim.step()
    x, _ = sim.particles[0].position
    assert x == pytest.approx(300.9)
    assert sim.particles[0].velocity == (-1.0, 0.0)

    sim.step()
    x, _ = sim.particles[0].position
    assert x < 300


def test_reflection_only_touches_the_crossing_axis(sim) -> None:
    sim.seed(["A"], 300, 300)
    sim.set_position(0, 301, 50)
    sim.set_velocity(0, 0.3, 0.2)

    sim.step()

    vx, vy = sim.particles[0].velocity
    assert vx == pytest.approx(-0.3)
    assert vy == pytest.approx(0.2)


def test_reflect_from_walls_reports_hits() -> None:
    r = np.array([[-0.1, 5.0, 11.0], [5.0, 10.5, 5.0]])
    v = np.array([[-1.0, 1.0, 1.0], [0.5, 0.5, -0.5]])

    hit_x, hit_y = reflect_from_walls(r, v, 10.0, 10.0)

    assert hit_x.tolist() == [True, False, True]
    assert hit_y.tolist() == [False, True, False]
    assert v[0].tolist() == [1.0, 1.0, -1.0]
    assert v[1].tolist() == [0.5, -0.5, -0.5]
    # positions are never clamped
    assert r[0, 0] == -0.1


def test_particles_stay_within_one_tick_of_the_surface(sim) -> None:
    sim.seed([str(i) for i in range(50)], 120, 80)
    for _ in range(2000):
        sim.step()
        assert np.all(sim.r[0] >= -MAX_SPEED) and np.all(sim.r[0] <= 120 + MAX_SPEED)
        assert np.all(sim.r[1] >= -MAX_SPEED) and np.all(sim.r[1] <= 80 + MAX_SPEED)


def test_speed_is_constant_between_reflections(sim) -> None:
    sim.seed(["A", "B", "C"], 300, 300)
    speeds = np.hypot(sim.v[0], sim.v[1])
    for _ in range(500):
        next(sim)
    assert np.allclose(np.hypot(sim.v[0], sim.v[1]), speeds)


def test_edge_opacity_endpoints_and_monotonicity() -> None:
    assert edge_opacity(0.0) == pytest.approx(EDGE_BASE_ALPHA)
    assert edge_opacity(EDGE_THRESHOLD) == 0.0
    assert edge_opacity(EDGE_THRESHOLD + 25) == 0.0
    assert edge_opacity(10.0) > edge_opacity(20.0) > edge_opacity(149.0) > 0.0

    values = edge_opacity(np.array([0.0, 75.0, 150.0]), threshold=150.0, base_alpha=1.0)
    assert values.tolist() == pytest.approx([1.0, 0.5, 0.0])


def test_pair_indices() -> None:
    assert pair_indices(0).shape == (0, 2)
    assert pair_indices(3).tolist() == [[0, 1], [0, 2], [1, 2]]
    assert pair_indices(2, include_self=True).tolist() == [[0, 0], [0, 1], [1, 1]]


def test_edges_for_two_close_particles(sim) -> None:
    sim.seed(["A", "B"], 300, 300)
    sim.set_position(0, 0, 0)
    sim.set_position(1, 10, 0)

    edges = sim.edges()

    assert len(edges) == 1
    edge = edges[0]
    assert (edge.i, edge.j) == (0, 1)
    assert edge.distance == pytest.approx(10.0)
    assert edge.opacity == pytest.approx(EDGE_BASE_ALPHA * (1 - 10 / 150))
    assert edge.opacity / EDGE_BASE_ALPHA == pytest.approx(0.9333, abs=1e-4)


def test_edges_skip_far_pairs_and_optionally_include_self(sim) -> None:
    sim.seed(["A", "B", "C"], 1000, 1000)
    sim.set_position(0, 0, 0)
    sim.set_position(1, 100, 0)
    sim.set_position(2, 900, 900)

    assert [(e.i, e.j) for e in sim.edges()] == [(0, 1)]

    with_self = sim.edges(include_self=True)
    self_edges = [e for e in with_self if e.i == e.j]
    assert len(self_edges) == 3
    assert all(e.opacity == pytest.approx(EDGE_BASE_ALPHA) for e in self_edges)


def test_particle_view_reads_and_writes_arrays(sim) -> None:
    sim.seed(["Python"], 300, 300)
    particle = sim.particles[0]
    particle.position = (12.5, 40.0)
    particle.velocity = (0.25, -0.25)

    assert particle.label == "Python"
    assert sim.r[:, 0].tolist() == [12.5, 40.0]
    assert sim.v[:, 0].tolist() == [0.25, -0.25]
    assert "Python" in repr(particle)


def test_set_position_rejects_unknown_index(sim) -> None:
    sim.seed(["A"], 10, 10)
    with pytest.raises(IndexError):
        sim.set_position(3, 0, 0)


def test_distance_pairs_matches_hypot() -> None:
    r = np.array([[0.0, 3.0, 0.0], [0.0, 4.0, 1.0]])
    pairs = pair_indices(3)
    distances = Simulation.get_distance_pairs(r, pairs)
    assert distances.tolist() == pytest.approx([5.0, 1.0, math.hypot(3.0, 3.0)])
