"""
Spacetime line-of-sight checks.

Answers one question: can the agent travel in a straight line from A to B,
leaving A at time t0 and moving at its fixed speed, without touching a
blocked cell or coming into contact with any moving obstacle?
"""
import math
from typing import Optional

import numpy as np

from ..world.entities import Obstacle
from ..world.environment import Environment
from .geometry import Point, min_distance_linear, supercover_cells


class VisibilityOracle:
    """
    Pure visibility test bound to one environment and one agent.

    The only state it carries is ``calls``, a counter of how many segments
    were checked, which the search reports as a statistic.
    """

    def __init__(
        self,
        environment: Environment,
        agent_speed: float,
        agent_radius: float = 0.0,
        tolerance: float = 0.05,
    ):
        if agent_speed <= 0:
            raise ValueError(f"agent_speed must be positive, got {agent_speed}")
        if agent_radius < 0:
            raise ValueError(f"agent_radius must be non-negative, got {agent_radius}")
        if tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {tolerance}")

        self.environment = environment
        self.agent_speed = agent_speed
        self.agent_radius = agent_radius
        self.tolerance = tolerance
        self.calls = 0

    def travel_time(self, a: Point, b: Point) -> float:
        return math.hypot(b[0] - a[0], b[1] - a[1]) / self.agent_speed

    def is_clear(
        self, a: Point, b: Point, t0: float, duration: Optional[float] = None
    ) -> bool:
        """
        Check the segment a -> b traversed over [t0, t0 + duration].

        ``duration`` defaults to the time the agent needs to cover the
        distance. A longer duration with a == b is a wait in place.
        """
        self.calls += 1
        if duration is None:
            duration = self.travel_time(a, b)
        return self.is_statically_clear(a, b) and self.is_dynamically_clear(a, b, t0, duration)

    def is_statically_clear(self, a: Point, b: Point) -> bool:
        """Supercover the segment and reject any blocked or off-grid cell."""
        env = self.environment
        cs = env.cell_size
        for cell in supercover_cells(a[0] / cs, a[1] / cs, b[0] / cs, b[1] / cs):
            if not env.is_passable(cell):
                return False
        return True

    def is_dynamically_clear(self, a: Point, b: Point, t0: float, duration: float) -> bool:
        return self._first_blocker(a, b, t0, duration) is None

    def blocking_obstacle(self, a: Point, b: Point, t0: float) -> Optional[str]:
        """Id of the first obstacle that blocks the segment, or None."""
        return self._first_blocker(a, b, t0, self.travel_time(a, b))

    def _first_blocker(self, a: Point, b: Point, t0: float, duration: float) -> Optional[str]:
        t1 = t0 + duration
        if duration > 0:
            velocity = ((b[0] - a[0]) / duration, (b[1] - a[1]) / duration)
        else:
            velocity = (0.0, 0.0)

        for obstacle in self.environment.obstacles:
            if obstacle.trajectory.overlap(t0, t1) is None:
                continue
            if self._collides(obstacle, a, velocity, t0, t1):
                return obstacle.obstacle_id
        return None

    def _collides(
        self,
        obstacle: Obstacle,
        start: Point,
        velocity: Point,
        t0: float,
        t1: float,
    ) -> bool:
        contact = self.agent_radius + obstacle.radius
        pieces = obstacle.trajectory.linear_pieces(t0, t1)

        if pieces is None:
            return self._sampled_min_distance(obstacle, start, velocity, t0, t1) <= contact

        for piece in pieces:
            # Agent and obstacle positions at the start of the piece
            dt = piece.t_begin - t0
            agent = (start[0] + velocity[0] * dt, start[1] + velocity[1] * dt)
            rel_position = (agent[0] - piece.origin[0], agent[1] - piece.origin[1])
            rel_velocity = (velocity[0] - piece.velocity[0], velocity[1] - piece.velocity[1])

            if min_distance_linear(rel_position, rel_velocity, piece.t_end - piece.t_begin) <= contact:
                return True
        return False

    def _sampled_min_distance(
        self,
        obstacle: Obstacle,
        start: Point,
        velocity: Point,
        t0: float,
        t1: float,
    ) -> float:
        """
        Minimum separation by bounded-step sampling.

        The closing speed is at most agent_speed + max_speed, so samples
        spaced ``tolerance / closing_speed`` apart cannot miss an approach
        by more than ``tolerance``.
        """
        beg, end = obstacle.trajectory.overlap(t0, t1)
        closing_speed = self.agent_speed + obstacle.trajectory.max_speed
        span = end - beg
        if span <= 0 or closing_speed <= 0:
            samples = np.array([beg])
        else:
            count = int(math.ceil(span * closing_speed / self.tolerance)) + 1
            samples = np.linspace(beg, end, max(count, 2))

        best = math.inf
        for t in samples:
            t = float(t)
            ox, oy = obstacle.trajectory.position_at(t)
            ax = start[0] + velocity[0] * (t - t0)
            ay = start[1] + velocity[1] * (t - t0)
            best = min(best, math.hypot(ax - ox, ay - oy))
        return best
