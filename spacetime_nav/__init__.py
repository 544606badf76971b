"""
spacetime_nav: any-angle paths through grids with moving obstacles.
"""
from .errors import (
    InvalidObstacleTrajectoryError,
    NoPathFoundError,
    OutOfBoundsError,
    PathError,
    SearchTimeoutError,
)
from .world import (
    Environment,
    LinearTrajectory,
    Obstacle,
    SampledTrajectory,
    StaticTrajectory,
    WaypointTrajectory,
)
from .navigation import LazyThetaStarPathfinder, Path, PathfindingConfig, TieBreak, find_path

__version__ = "0.1.0"
