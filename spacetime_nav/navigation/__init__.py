"""
Any-angle pathfinding among moving obstacles.

This module provides time-aware Lazy Theta* search:
- LazyThetaStarPathfinder / find_path: the search itself
- VisibilityOracle: spacetime line-of-sight test used by the search
- NodeWorkspace: per-query open/closed bookkeeping
- Path / Waypoint: the time-annotated result

Example usage:
    from spacetime_nav.world import Environment
    from spacetime_nav.navigation import find_path, PathfindingConfig

    env = Environment.empty(10, 10)
    path = find_path(env, start=(0, 0), goal=(9, 9), agent_speed=1.0)

    for waypoint in path.waypoints:
        print(waypoint.x, waypoint.y, waypoint.t)
"""

# Search engine
from .pathfinding import (
    LazyThetaStarPathfinder,
    PathfindingConfig,
    SearchStats,
    find_path,
)

# Result types
from .path import (
    Path,
    Waypoint,
    extract_path,
    merge_colinear_waypoints,
)

# Building blocks
from .visibility import VisibilityOracle
from .workspace import (
    Node,
    NodeStatus,
    NodeWorkspace,
    TieBreak,
)

__all__ = [
    # Search
    "LazyThetaStarPathfinder",
    "PathfindingConfig",
    "SearchStats",
    "find_path",
    # Path
    "Path",
    "Waypoint",
    "extract_path",
    "merge_colinear_waypoints",
    # Visibility
    "VisibilityOracle",
    # Workspace
    "Node",
    "NodeStatus",
    "NodeWorkspace",
    "TieBreak",
]
