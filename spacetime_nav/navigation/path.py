"""
Path extraction and the Path value returned to callers.
"""
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..world.environment import Environment
from .geometry import Cell, Point, distance, is_colinear
from .workspace import NodeWorkspace


@dataclass(frozen=True)
class Waypoint:
    """A continuous-space point reached at time ``t``."""
    x: float
    y: float
    t: float
    cell: Cell

    @property
    def point(self) -> Point:
        return (self.x, self.y)

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "t": self.t, "cell": list(self.cell)}


@dataclass(frozen=True)
class Path:
    """
    Ordered, time-annotated waypoints plus the total travelled cost.

    The agent moves in straight lines at constant speed between
    consecutive waypoints; two waypoints at the same point mean waiting.
    """
    waypoints: Tuple[Waypoint, ...]
    cost: float
    expansions: int = 0
    oracle_calls: int = 0

    @property
    def start_time(self) -> float:
        return self.waypoints[0].t

    @property
    def end_time(self) -> float:
        return self.waypoints[-1].t

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def length(self) -> float:
        """Geometric length, recomputed from the waypoints."""
        return sum(distance(a.point, b.point) for a, b in self.segments())

    @property
    def points(self) -> List[Point]:
        return [wp.point for wp in self.waypoints]

    @property
    def cells(self) -> List[Cell]:
        return [wp.cell for wp in self.waypoints]

    def segments(self) -> Iterator[Tuple[Waypoint, Waypoint]]:
        return zip(self.waypoints, self.waypoints[1:])

    def position_at(self, t: float) -> Point:
        """
        Interpolated agent position at time t.

        Before departure the agent is at the first waypoint, after arrival
        it stays at the last one.
        """
        if t <= self.start_time:
            return self.waypoints[0].point
        for a, b in self.segments():
            if t <= b.t:
                span = b.t - a.t
                if span <= 0:
                    return b.point
                u = (t - a.t) / span
                return (a.x + (b.x - a.x) * u, a.y + (b.y - a.y) * u)
        return self.waypoints[-1].point

    def to_dict(self) -> Dict[str, Any]:
        return {
            "waypoints": [wp.to_dict() for wp in self.waypoints],
            "cost": self.cost,
            "expansions": self.expansions,
            "oracle_calls": self.oracle_calls,
        }


def merge_colinear_waypoints(waypoints: List[Waypoint]) -> List[Waypoint]:
    """Drop waypoints that sit on a straight run between their neighbours."""
    if len(waypoints) <= 2:
        return list(waypoints)

    merged = [waypoints[0]]
    for current, following in zip(waypoints[1:], waypoints[2:]):
        if not is_colinear(merged[-1].point, current.point, following.point):
            merged.append(current)
    merged.append(waypoints[-1])
    return merged


def extract_path(
    workspace: NodeWorkspace,
    environment: Environment,
    start: Cell,
    goal: Cell,
    merge_colinear: bool = True,
    expansions: int = 0,
    oracle_calls: int = 0,
) -> Path:
    """Walk the parent chain from goal back to start and build the Path."""
    chain: List[Cell] = [goal]
    current = goal
    while current != start:
        parent: Optional[Cell] = workspace.parent(current)
        if parent is None or parent == current:
            raise RuntimeError(f"Broken parent chain at {current}")
        chain.append(parent)
        current = parent
        if len(chain) > environment.width * environment.height:
            raise RuntimeError("Parent chain does not terminate")
    chain.reverse()

    waypoints = []
    for cell in chain:
        x, y = environment.cell_center(cell)
        waypoints.append(Waypoint(x=x, y=y, t=workspace.time(cell), cell=cell))

    if merge_colinear:
        waypoints = merge_colinear_waypoints(waypoints)

    return Path(
        waypoints=tuple(waypoints),
        cost=workspace.cost(goal),
        expansions=expansions,
        oracle_calls=oracle_calls,
    )


def prepend_wait(path: Path, wait_from: float) -> Path:
    """Path that first waits at its start point from ``wait_from``."""
    first = path.waypoints[0]
    if wait_from >= first.t:
        return path
    return replace(path, waypoints=(replace(first, t=wait_from),) + path.waypoints)
