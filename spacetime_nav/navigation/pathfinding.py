"""
Time-aware Lazy Theta* pathfinding.

Expands the grid like A*, but lets every newly generated node inherit its
grandparent as parent whenever the straight segment between them is free.
The straight segment is not checked when the node is generated; it is
checked once the node is taken off the open set. Only nodes that are
actually expanded pay for a visibility check.

Visibility is tested in space and time: a segment is free only if it avoids
every blocked cell and every moving obstacle while the agent traverses it.
"""
import logging
import math
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..errors import (
    InvalidObstacleTrajectoryError,
    NoPathFoundError,
    OutOfBoundsError,
    SearchTimeoutError,
)
from ..world.environment import Environment
from .geometry import Cell, distance
from .path import Path, extract_path, prepend_wait
from .visibility import VisibilityOracle
from .workspace import NodeWorkspace, TieBreak

logger = logging.getLogger(__name__)


@dataclass
class PathfindingConfig:
    """Configuration for Lazy Theta* pathfinding."""
    heuristic_weight: float = 1.0  # 1.0 = admissible, larger = greedier
    tie_break: TieBreak = TieBreak.LARGER_G
    max_expansions: Optional[int] = None  # Budget before SearchTimeoutError
    max_time_seconds: Optional[float] = None  # Wall-clock budget
    merge_colinear: bool = True  # Collapse straight runs of waypoints
    lazy: bool = True  # False = check line of sight when nodes are generated

    # Moving obstacles
    sampling_tolerance: float = 0.05  # Max missed approach for sampled trajectories
    require_obstacle_coverage: bool = False  # Every horizon must span the time window

    # Waiting at the start when no path exists right away
    max_departure_delay: float = 0.0
    departure_step: float = 0.5

    def __post_init__(self):
        if self.heuristic_weight < 0:
            raise ValueError("heuristic_weight must be non-negative")
        if self.max_expansions is not None and self.max_expansions < 0:
            raise ValueError("max_expansions must be non-negative")
        if self.max_time_seconds is not None and self.max_time_seconds < 0:
            raise ValueError("max_time_seconds must be non-negative")
        if self.sampling_tolerance <= 0:
            raise ValueError("sampling_tolerance must be positive")
        if self.max_departure_delay < 0:
            raise ValueError("max_departure_delay must be non-negative")
        if self.departure_step <= 0:
            raise ValueError("departure_step must be positive")


@dataclass
class SearchStats:
    """Counters accumulated over every attempt of one query."""
    expansions: int = 0
    attempts: int = 0
    started_at: float = field(default_factory=time.perf_counter)

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self.started_at


class LazyThetaStarPathfinder:
    """
    Any-angle pathfinder over an Environment with moving obstacles.

    Each call to find_path() builds its own workspace and oracle, so one
    pathfinder may serve concurrent queries on separate threads.
    """

    def __init__(self, config: Optional[PathfindingConfig] = None):
        self.config = config or PathfindingConfig()

    def find_path(
        self,
        environment: Environment,
        start: Cell,
        goal: Cell,
        time_window: Tuple[float, float] = (0.0, math.inf),
        agent_speed: float = 1.0,
        agent_radius: float = 0.0,
    ) -> Path:
        """
        Find a collision-free any-angle path from start to goal.

        Args:
            environment: Grid and moving obstacles
            start: Starting grid cell (x, y)
            goal: Goal grid cell (x, y)
            time_window: (departure time, latest allowed arrival)
            agent_speed: World units per unit of time
            agent_radius: Agent footprint used against moving obstacles

        Returns:
            The Path, with per-waypoint arrival times

        Raises:
            OutOfBoundsError: start/goal outside the grid or blocked
            NoPathFoundError: no feasible path within the time window
            SearchTimeoutError: expansion or time budget exceeded
            InvalidObstacleTrajectoryError: an obstacle's horizon does not
                cover the window (only with require_obstacle_coverage)
        """
        start = (int(start[0]), int(start[1]))
        goal = (int(goal[0]), int(goal[1]))
        self._check_endpoint(environment, start, "Start")
        self._check_endpoint(environment, goal, "Goal")

        t_start, t_end = float(time_window[0]), float(time_window[1])
        if t_end < t_start:
            raise ValueError(f"time_window end {t_end} precedes start {t_start}")

        if self.config.require_obstacle_coverage:
            for obstacle in environment.uncovered_obstacles(t_start, t_end):
                bad_time = t_start if obstacle.horizon[0] > t_start else t_end
                raise InvalidObstacleTrajectoryError(
                    obstacle.obstacle_id, bad_time, obstacle.horizon
                )

        oracle = VisibilityOracle(
            environment,
            agent_speed=agent_speed,
            agent_radius=agent_radius,
            tolerance=self.config.sampling_tolerance,
        )
        stats = SearchStats()
        start_point = environment.cell_center(start)

        last_error: Optional[NoPathFoundError] = None
        for delay in self._departure_delays():
            depart = t_start + delay
            if depart > t_end:
                break
            if delay > 0 and not oracle.is_clear(start_point, start_point, t_start, duration=delay):
                logger.debug(f"Waiting {delay:.3f} at {start} is not safe, giving up on delays")
                break

            try:
                workspace = self._search(environment, oracle, start, goal, depart, t_end, stats)
            except NoPathFoundError as exc:
                last_error = exc
                continue

            path = extract_path(
                workspace,
                environment,
                start,
                goal,
                merge_colinear=self.config.merge_colinear,
                expansions=stats.expansions,
                oracle_calls=oracle.calls,
            )
            if delay > 0:
                path = prepend_wait(path, t_start)

            logger.debug(
                f"Path found {start}->{goal}: cost={path.cost:.3f}, "
                f"waypoints={len(path.waypoints)}, expansions={stats.expansions}, "
                f"oracle_calls={oracle.calls}, departure_delay={delay:.3f}"
            )
            return path

        logger.warning(
            f"No path from {start} to {goal}: expansions={stats.expansions}, "
            f"attempts={stats.attempts}"
        )
        raise last_error or NoPathFoundError(
            f"No path from {start} to {goal}", expansions=stats.expansions,
            attempts=stats.attempts,
        )

    # ------------------------------------------------------------------
    # Search loop
    # ------------------------------------------------------------------

    def _search(
        self,
        env: Environment,
        oracle: VisibilityOracle,
        start: Cell,
        goal: Cell,
        depart: float,
        t_end: float,
        stats: SearchStats,
    ) -> NodeWorkspace:
        """Run one Lazy Theta* search departing at ``depart``."""
        stats.attempts += 1
        workspace = NodeWorkspace(env.width, env.height, self.config.tie_break)
        goal_point = env.cell_center(goal)

        def heuristic(cell: Cell) -> float:
            return self.config.heuristic_weight * distance(env.cell_center(cell), goal_point)

        # The start node is its own parent
        workspace.set_parent(start, start, 0.0, depart)
        workspace.push(start, 0.0, heuristic(start))

        while True:
            current = workspace.pop()
            if current is None:
                raise NoPathFoundError(
                    f"Open set exhausted searching from {start} to {goal}",
                    expansions=stats.expansions,
                    attempts=stats.attempts,
                )

            if self.config.lazy and current != start:
                if not self._validate_parent(env, oracle, workspace, current, t_end):
                    workspace.reset(current)
                    continue

            if current == goal:
                return workspace

            workspace.close(current)
            self._check_budget(stats, start, goal)
            stats.expansions += 1

            for neighbor in env.neighbors(current):
                if workspace.is_closed(neighbor):
                    continue
                candidate = self._candidate(env, oracle, workspace, current, neighbor)
                if candidate is None:
                    continue

                parent, g_new, t_new = candidate
                if t_new > t_end:
                    continue
                if not workspace.is_visited(neighbor) or g_new < workspace.cost(neighbor):
                    workspace.set_parent(neighbor, parent, g_new, t_new)
                    workspace.push(neighbor, g_new, heuristic(neighbor))

    def _candidate(
        self,
        env: Environment,
        oracle: VisibilityOracle,
        workspace: NodeWorkspace,
        current: Cell,
        neighbor: Cell,
    ) -> Optional[Tuple[Cell, float, float]]:
        """
        Parent, cost and arrival time offered to ``neighbor`` by ``current``.

        Path 1 goes straight from current's parent, Path 2 is the plain grid
        step from current. In lazy mode Path 1 is taken on trust and checked
        later; in eager mode both are checked right here.
        """
        neighbor_point = env.cell_center(neighbor)
        grandparent = workspace.parent(current)

        options = []
        if grandparent != current:
            options.append(grandparent)
        options.append(current)

        for parent in options:
            parent_point = env.cell_center(parent)
            parent_time = workspace.time(parent)
            if not self.config.lazy and not oracle.is_clear(parent_point, neighbor_point, parent_time):
                continue
            step = distance(parent_point, neighbor_point)
            return parent, workspace.cost(parent) + step, parent_time + step / oracle.agent_speed
        return None

    def _validate_parent(
        self,
        env: Environment,
        oracle: VisibilityOracle,
        workspace: NodeWorkspace,
        cell: Cell,
        t_end: float,
    ) -> bool:
        """
        Check the segment a node was optimistically given, at expansion time.

        If the straight segment from the assigned parent is blocked, the
        parent falls back to the closed grid neighbour with the lowest
        g + step whose own step into this cell is clear. Returns False when
        no such neighbour exists.
        """
        parent = workspace.parent(cell)
        cell_point = env.cell_center(cell)
        if oracle.is_clear(env.cell_center(parent), cell_point, workspace.time(parent)):
            return True

        candidates: List[Tuple[float, int, Cell, float]] = []
        for order, neighbor in enumerate(env.neighbors(cell)):
            if neighbor == parent or not workspace.is_closed(neighbor):
                continue
            step = distance(env.cell_center(neighbor), cell_point)
            candidates.append((workspace.cost(neighbor) + step, order, neighbor, step))
        candidates.sort()

        for g_new, _, neighbor, step in candidates:
            t_neighbor = workspace.time(neighbor)
            t_new = t_neighbor + step / oracle.agent_speed
            if t_new > t_end:
                continue
            if oracle.is_clear(env.cell_center(neighbor), cell_point, t_neighbor):
                workspace.set_parent(cell, neighbor, g_new, t_new)
                return True
        return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _departure_delays(self) -> List[float]:
        delays = [0.0]
        step = self.config.departure_step
        count = int(math.floor(self.config.max_departure_delay / step + 1e-9))
        delays.extend(step * i for i in range(1, count + 1))
        return delays

    def _check_budget(self, stats: SearchStats, start: Cell, goal: Cell) -> None:
        max_expansions = self.config.max_expansions
        if max_expansions is not None and stats.expansions >= max_expansions:
            logger.warning(f"Search {start}->{goal} hit the expansion budget ({max_expansions})")
            raise SearchTimeoutError(
                f"Exceeded {max_expansions} expansions",
                expansions=stats.expansions,
                elapsed=stats.elapsed,
            )

        max_time = self.config.max_time_seconds
        if max_time is not None:
            elapsed = stats.elapsed
            if elapsed > max_time:
                logger.warning(f"Search {start}->{goal} hit the time budget ({max_time}s)")
                raise SearchTimeoutError(
                    f"Exceeded time budget of {max_time}s",
                    expansions=stats.expansions,
                    elapsed=elapsed,
                )

    @staticmethod
    def _check_endpoint(env: Environment, cell: Cell, label: str) -> None:
        if not env.in_bounds(cell):
            raise OutOfBoundsError(
                f"{label} cell {cell} is outside the {env.width}x{env.height} grid",
                cell=cell,
            )
        if env.is_blocked(cell):
            raise OutOfBoundsError(f"{label} cell {cell} is blocked", cell=cell)


def find_path(
    environment: Environment,
    start: Cell,
    goal: Cell,
    time_window: Tuple[float, float] = (0.0, math.inf),
    agent_speed: float = 1.0,
    agent_radius: float = 0.0,
    config: Optional[PathfindingConfig] = None,
) -> Path:
    """Convenience wrapper: one query with a throwaway pathfinder."""
    return LazyThetaStarPathfinder(config).find_path(
        environment,
        start,
        goal,
        time_window=time_window,
        agent_speed=agent_speed,
        agent_radius=agent_radius,
    )
