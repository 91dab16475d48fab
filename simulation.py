"""
Ballistic simulation of labelled particles inside a rectangular surface.

This module defines a Simulation class that owns a fixed set of labelled
particles moving at constant velocity inside a ``width`` × ``height``
drawing surface.  There are no forces between particles: each tick adds
the velocity to the position and, when a coordinate has left the surface,
the matching velocity component changes sign.  Positions are never
clamped, so a particle may be one tick outside the surface before the
flipped velocity brings it back.

Edges between particles are not stored.  ``Simulation.edges`` recomputes
them from the current positions whenever they are needed; the opacity of
an edge decays linearly with the distance between its endpoints.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy import ndarray

# Per-axis speed bound (surface units per tick) used when seeding.
MAX_SPEED: float = 0.5

# Particles closer than this distance are joined by an edge.
EDGE_THRESHOLD: float = 150.0

# Opacity of an edge between two coincident particles.
EDGE_BASE_ALPHA: float = 0.3


def _coerce_dimension(value: float) -> float:
    """Return ``value`` as a finite, non-negative float."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0.0:
        return 0.0
    return value


def reflect_from_walls(r: ndarray, v: ndarray, width: float, height: float) -> Tuple[ndarray, ndarray]:
    """Flip velocity components of particles that left the surface.

    Each axis is handled on its own: a coordinate below zero or above the
    matching dimension negates that velocity component.  Positions are
    left untouched.

    Parameters
    ----------
    r, v: ndarray
        Positions and velocities, shape (2, N).  ``v`` is modified in place.
    width, height: float
        Surface dimensions.

    Returns
    -------
    tuple of ndarray
        Boolean masks of the particles reflected on the x and y axis.
    """
    hit_x = (r[0] < 0.0) | (r[0] > width)
    hit_y = (r[1] < 0.0) | (r[1] > height)
    v[0, hit_x] = -v[0, hit_x]
    v[1, hit_y] = -v[1, hit_y]
    return hit_x, hit_y


def edge_opacity(
    distance: Union[float, ndarray],
    threshold: float = EDGE_THRESHOLD,
    base_alpha: float = EDGE_BASE_ALPHA,
) -> Union[float, ndarray]:
    """Opacity of an edge of the given length.

    ``base_alpha`` at zero distance, falling linearly to zero at
    ``threshold``.  Distances at or beyond the threshold give zero.
    """
    d = np.asarray(distance, dtype=float)
    alpha = np.where(d < threshold, base_alpha * (1.0 - d / threshold), 0.0)
    if alpha.ndim == 0:
        return float(alpha)
    return alpha


def pair_indices(count: int, include_self: bool = False) -> ndarray:
    """Index pairs ``(i, j)`` with ``i < j`` (or ``i <= j``), shape (K, 2)."""
    if count <= 0:
        return np.zeros((0, 2), dtype=int)
    ii, jj = np.triu_indices(count, k=0 if include_self else 1)
    return np.stack((ii, jj), axis=1)


@dataclass(frozen=True)
class Edge:
    """A connector between particles ``i`` and ``j`` for one frame."""
    i: int
    j: int
    distance: float
    opacity: float


class Particle:
    """Read/write view onto one particle of a :class:`Simulation`.

    The view reads and writes the simulation's arrays directly, so it is
    only meaningful until the next reseed.
    """

    __slots__ = ('_sim', 'index')

    def __init__(self, simulation: 'Simulation', index: int):
        self._sim = simulation
        self.index = index

    @property
    def label(self) -> str:
        return self._sim.labels[self.index]

    @property
    def position(self) -> Tuple[float, float]:
        r = self._sim.r
        return float(r[0, self.index]), float(r[1, self.index])

    @position.setter
    def position(self, value: Tuple[float, float]) -> None:
        self._sim.set_position(self.index, *value)

    @property
    def velocity(self) -> Tuple[float, float]:
        v = self._sim.v
        return float(v[0, self.index]), float(v[1, self.index])

    @velocity.setter
    def velocity(self, value: Tuple[float, float]) -> None:
        self._sim.set_velocity(self.index, *value)

    def __repr__(self) -> str:
        x, y = self.position
        vx, vy = self.velocity
        return f"Particle({self.label!r}, pos=({x:.2f}, {y:.2f}), vel=({vx:.2f}, {vy:.2f}))"


class Simulation:
    """Labelled particles drifting ballistically inside a rectangle.

    Positions and velocities are stored in continuous 2×N arrays.  The
    arrays, the labels and the surface size are replaced together by
    :meth:`seed`; :meth:`step` mutates the arrays in place.
    """

    def __init__(
        self,
        max_speed: float = MAX_SPEED,
        rng: Optional[np.random.Generator] = None,
    ):
        """Create an empty simulation.

        Parameters
        ----------
        max_speed: float
            Velocity components are drawn from ``[-max_speed, max_speed)``.
        rng: numpy.random.Generator, optional
            Random source for seeding.  A fresh default generator is used
            when omitted.
        """
        self._max_speed: float = abs(float(max_speed))
        self._rng: np.random.Generator = rng if rng is not None else np.random.default_rng()
        self._labels: Tuple[str, ...] = ()
        self._r: ndarray = np.zeros((2, 0), dtype=float)
        self._v: ndarray = np.zeros((2, 0), dtype=float)
        self._width: float = 0.0
        self._height: float = 0.0
        self._seeded: bool = False
        self._frame_no: int = 0

    # -------------------------------------------------------------------------
    # Properties to expose the state by reference
    @property
    def r(self) -> ndarray:
        """Return particle positions as a 2×N array."""
        return self._r

    @property
    def v(self) -> ndarray:
        """Return particle velocities as a 2×N array."""
        return self._v

    @property
    def labels(self) -> Tuple[str, ...]:
        return self._labels

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def size(self) -> Tuple[float, float]:
        return self._width, self._height

    @property
    def max_speed(self) -> float:
        return self._max_speed

    @property
    def particle_count(self) -> int:
        return len(self._labels)

    @property
    def seeded(self) -> bool:
        """``True`` once :meth:`seed` has been called."""
        return self._seeded

    @property
    def frame_no(self) -> int:
        """Ticks advanced since the last seed."""
        return self._frame_no

    @property
    def particles(self) -> List[Particle]:
        return [Particle(self, idx) for idx in range(self.particle_count)]

    def __len__(self) -> int:
        return self.particle_count

    # -------------------------------------------------------------------------
    def seed(self, labels: Sequence[str], width: float, height: float) -> None:
        """Discard all particles and create one per label.

        Positions are uniform in ``[0, width) × [0, height)`` and velocity
        components uniform in ``[-max_speed, max_speed)``, independently per
        axis.  Nothing from the previous particle set survives.
        """
        width = _coerce_dimension(width)
        height = _coerce_dimension(height)
        new_labels = tuple(str(label) for label in labels)
        count = len(new_labels)

        x_new = self._rng.uniform(0.0, 1.0, size=count) * width
        y_new = self._rng.uniform(0.0, 1.0, size=count) * height
        new_r = np.vstack((x_new, y_new)).reshape(2, count)
        new_v = self._rng.uniform(-self._max_speed, self._max_speed, size=(2, count))

        # Swap everything in at once so no reader sees a mix of old and new.
        self._labels, self._r, self._v = new_labels, new_r, new_v
        self._width, self._height = width, height
        self._seeded = True
        self._frame_no = 0

    def set_position(self, index: int, x: float, y: float) -> None:
        self._check_index(index)
        self._r[0, index] = float(x)
        self._r[1, index] = float(y)

    def set_velocity(self, index: int, vx: float, vy: float) -> None:
        self._check_index(index)
        self._v[0, index] = float(vx)
        self._v[1, index] = float(vy)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.particle_count:
            raise IndexError(f"particle index {index} out of range for {self.particle_count} particles")

    # -------------------------------------------------------------------------
    def step(self) -> Tuple[ndarray, ndarray]:
        """Advance every particle by one tick.

        The tick is one animation frame; there is no time-step scaling.

        Returns
        -------
        tuple of ndarray
            Masks of particles reflected on the x and y axis.
        """
        self._r += self._v
        self._frame_no += 1
        return reflect_from_walls(self._r, self._v, self._width, self._height)

    def __iter__(self) -> Iterator[Tuple[ndarray, ndarray]]:
        return self

    def __next__(self) -> Tuple[ndarray, ndarray]:
        """Advance the simulation and return the position and velocity arrays."""
        self.step()
        return self._r, self._v

    # -------------------------------------------------------------------------
    @staticmethod
    def get_distance_pairs(r: ndarray, ids_pairs: ndarray) -> ndarray:
        """Compute distances between all pairs of points given by indices."""
        if ids_pairs.size == 0:
            return np.zeros((0,), dtype=float)
        dx = r[0, ids_pairs[:, 0]] - r[0, ids_pairs[:, 1]]
        dy = r[1, ids_pairs[:, 0]] - r[1, ids_pairs[:, 1]]
        return np.sqrt(dx ** 2 + dy ** 2)

    def edges(
        self,
        threshold: float = EDGE_THRESHOLD,
        base_alpha: float = EDGE_BASE_ALPHA,
        include_self: bool = False,
    ) -> List[Edge]:
        """Return the edges visible in the current frame.

        Every unordered pair closer than ``threshold`` yields one edge.  With
        ``include_self`` each particle is also paired with itself, giving a
        zero-length edge at ``base_alpha``.
        """
        ids_pairs = pair_indices(self.particle_count, include_self)
        distances = self.get_distance_pairs(self._r, ids_pairs)
        visible = distances < threshold
        if not np.any(visible):
            return []
        shown_pairs = ids_pairs[visible]
        shown_dist = distances[visible]
        opacity = edge_opacity(shown_dist, threshold, base_alpha)
        return [
            Edge(int(i), int(j), float(d), float(a))
            for (i, j), d, a in zip(shown_pairs, shown_dist, opacity)
        ]
