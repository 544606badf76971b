"""
Moving obstacles and their trajectories.

A trajectory is a pure function of time, valid over a bounded horizon.
Only a small, closed set of trajectory kinds exists; each one answers
``position_at(t)`` and, where it moves at piecewise-constant velocity,
``linear_pieces(t0, t1)`` so collision checks can be solved in closed form.
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, List, Optional, Tuple

from ..errors import InvalidObstacleTrajectoryError

Point = Tuple[float, float]


class TrajectoryKind(Enum):
    STATIC = auto()
    LINEAR = auto()
    WAYPOINTS = auto()
    SAMPLED = auto()


@dataclass(frozen=True)
class LinearPiece:
    """Constant-velocity stretch of a trajectory over [t_begin, t_end]."""
    t_begin: float
    t_end: float
    origin: Point  # position at t_begin
    velocity: Point

    def position_at(self, t: float) -> Point:
        dt = t - self.t_begin
        return (
            self.origin[0] + self.velocity[0] * dt,
            self.origin[1] + self.velocity[1] * dt,
        )


class Trajectory(ABC):
    """Common interface of all trajectory kinds."""

    kind: TrajectoryKind
    t_begin: float
    t_end: float

    @property
    def horizon(self) -> Tuple[float, float]:
        return (self.t_begin, self.t_end)

    def covers(self, t0: float, t1: float) -> bool:
        """True if the whole interval [t0, t1] lies inside the horizon."""
        return self.t_begin <= t0 and t1 <= self.t_end

    def overlap(self, t0: float, t1: float) -> Optional[Tuple[float, float]]:
        """Intersection of [t0, t1] with the horizon, or None."""
        beg = max(t0, self.t_begin)
        end = min(t1, self.t_end)
        if end < beg:
            return None
        return (beg, end)

    @abstractmethod
    def position_at(self, t: float) -> Point:
        pass

    @abstractmethod
    def linear_pieces(self, t0: float, t1: float) -> Optional[List[LinearPiece]]:
        """
        Constant-velocity pieces covering the overlap of [t0, t1] with the
        horizon. Returns None for kinds that can only be sampled.
        """
        pass


@dataclass(frozen=True)
class StaticTrajectory(Trajectory):
    """An obstacle that sits still for its whole horizon."""
    position: Point
    t_begin: float = -math.inf
    t_end: float = math.inf
    kind: TrajectoryKind = field(default=TrajectoryKind.STATIC, init=False)

    def position_at(self, t: float) -> Point:
        return self.position

    def linear_pieces(self, t0: float, t1: float) -> Optional[List[LinearPiece]]:
        span = self.overlap(t0, t1)
        if span is None:
            return []
        return [LinearPiece(span[0], span[1], self.position, (0.0, 0.0))]


@dataclass(frozen=True)
class LinearTrajectory(Trajectory):
    """Constant velocity motion starting at ``origin`` at ``t_begin``."""
    origin: Point
    velocity: Point
    t_begin: float
    t_end: float
    kind: TrajectoryKind = field(default=TrajectoryKind.LINEAR, init=False)

    def __post_init__(self):
        if self.t_end < self.t_begin:
            raise ValueError("t_end must not precede t_begin")

    @classmethod
    def from_target(
        cls,
        origin: Point,
        target: Point,
        speed: float,
        spawn_time: float = 0.0,
    ) -> "LinearTrajectory":
        """Projectile flying from origin to target, alive until it arrives."""
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        dx = target[0] - origin[0]
        dy = target[1] - origin[1]
        dist = math.hypot(dx, dy)
        if dist == 0.0:
            return cls(origin, (0.0, 0.0), spawn_time, spawn_time)
        time_moving = dist / speed
        velocity = (dx / time_moving, dy / time_moving)
        return cls(origin, velocity, spawn_time, spawn_time + time_moving)

    def position_at(self, t: float) -> Point:
        dt = t - self.t_begin
        return (
            self.origin[0] + self.velocity[0] * dt,
            self.origin[1] + self.velocity[1] * dt,
        )

    def linear_pieces(self, t0: float, t1: float) -> Optional[List[LinearPiece]]:
        span = self.overlap(t0, t1)
        if span is None:
            return []
        return [LinearPiece(span[0], span[1], self.position_at(span[0]), self.velocity)]


@dataclass(frozen=True)
class WaypointTrajectory(Trajectory):
    """
    Piecewise-linear motion through timed waypoints.

    ``waypoints`` holds (t, x, y) triples with strictly increasing t. The
    horizon runs from the first to the last waypoint time.
    """
    waypoints: Tuple[Tuple[float, float, float], ...]
    kind: TrajectoryKind = field(default=TrajectoryKind.WAYPOINTS, init=False)

    def __post_init__(self):
        if not self.waypoints:
            raise ValueError("WaypointTrajectory needs at least one waypoint")
        # Freeze whatever sequence was passed in
        object.__setattr__(
            self, "waypoints", tuple(tuple(float(v) for v in wp) for wp in self.waypoints)
        )
        times = [wp[0] for wp in self.waypoints]
        if any(b <= a for a, b in zip(times, times[1:])):
            raise ValueError("waypoint times must be strictly increasing")

    @property
    def t_begin(self) -> float:
        return self.waypoints[0][0]

    @property
    def t_end(self) -> float:
        return self.waypoints[-1][0]

    def _piece(self, i: int) -> LinearPiece:
        ta, xa, ya = self.waypoints[i]
        tb, xb, yb = self.waypoints[i + 1]
        dt = tb - ta
        return LinearPiece(ta, tb, (xa, ya), ((xb - xa) / dt, (yb - ya) / dt))

    def position_at(self, t: float) -> Point:
        if len(self.waypoints) == 1:
            return (self.waypoints[0][1], self.waypoints[0][2])
        for i in range(len(self.waypoints) - 1):
            if t <= self.waypoints[i + 1][0]:
                return self._piece(i).position_at(t)
        return (self.waypoints[-1][1], self.waypoints[-1][2])

    def linear_pieces(self, t0: float, t1: float) -> Optional[List[LinearPiece]]:
        span = self.overlap(t0, t1)
        if span is None:
            return []
        beg, end = span

        if len(self.waypoints) == 1:
            return [LinearPiece(beg, end, self.position_at(beg), (0.0, 0.0))]

        pieces = []
        for i in range(len(self.waypoints) - 1):
            piece = self._piece(i)
            lo = max(beg, piece.t_begin)
            hi = min(end, piece.t_end)
            if hi < lo:
                continue
            pieces.append(LinearPiece(lo, hi, piece.position_at(lo), piece.velocity))
        return pieces


@dataclass(frozen=True)
class SampledTrajectory(Trajectory):
    """
    Arbitrary motion given as a pure function of time.

    ``max_speed`` bounds how fast the obstacle can move; the visibility
    oracle uses it to pick a sampling step that keeps the worst-case
    missed approach under its tolerance.
    """
    func: Callable[[float], Point]
    t_begin: float
    t_end: float
    max_speed: float
    kind: TrajectoryKind = field(default=TrajectoryKind.SAMPLED, init=False)

    def __post_init__(self):
        if self.t_end < self.t_begin:
            raise ValueError("t_end must not precede t_begin")
        if self.max_speed < 0:
            raise ValueError("max_speed must be non-negative")

    def position_at(self, t: float) -> Point:
        x, y = self.func(t)
        return (float(x), float(y))

    def linear_pieces(self, t0: float, t1: float) -> Optional[List[LinearPiece]]:
        return None


@dataclass(frozen=True)
class Obstacle:
    """A moving (or parked) circular obstacle."""
    obstacle_id: str
    radius: float
    trajectory: Trajectory

    def __post_init__(self):
        if self.radius < 0:
            raise ValueError(f"Obstacle '{self.obstacle_id}' has negative radius")

    @property
    def horizon(self) -> Tuple[float, float]:
        return self.trajectory.horizon

    def is_alive(self, t: float) -> bool:
        return self.trajectory.t_begin <= t <= self.trajectory.t_end

    def position_at(self, t: float) -> Point:
        if not self.is_alive(t):
            raise InvalidObstacleTrajectoryError(self.obstacle_id, t, self.horizon)
        return self.trajectory.position_at(t)

    def to_dict(self) -> dict:
        return {
            "obstacle_id": self.obstacle_id,
            "radius": self.radius,
            "kind": self.trajectory.kind.name.lower(),
            "horizon": list(self.horizon),
        }
