"""
Errors raised by the pathfinding core.

Every failure of a query surfaces as one of these exceptions; the search
never hands back a partial or best-effort path.
"""
from typing import Optional, Tuple


class PathError(Exception):
    """Base class for all pathfinding failures."""


class OutOfBoundsError(PathError, IndexError):
    """A cell lies outside the grid, or start/goal is itself blocked."""

    def __init__(self, message: str, cell: Optional[Tuple[int, int]] = None):
        super().__init__(message)
        self.cell = cell


class NoPathFoundError(PathError):
    """Open set exhausted before the goal was reached."""

    def __init__(self, message: str, expansions: int = 0, attempts: int = 0):
        super().__init__(message)
        self.expansions = expansions
        self.attempts = attempts


class SearchTimeoutError(PathError, TimeoutError):
    """Expansion or wall-clock budget exceeded before termination."""

    def __init__(self, message: str, expansions: int = 0, elapsed: float = 0.0):
        super().__init__(message)
        self.expansions = expansions
        self.elapsed = elapsed


class InvalidObstacleTrajectoryError(PathError, ValueError):
    """A queried time falls outside an obstacle's declared horizon."""

    def __init__(
        self,
        obstacle_id: str,
        time: float,
        horizon: Tuple[float, float],
    ):
        super().__init__(
            f"Time {time} is outside the horizon [{horizon[0]}, {horizon[1]}] "
            f"of obstacle '{obstacle_id}'"
        )
        self.obstacle_id = obstacle_id
        self.time = time
        self.horizon = horizon
