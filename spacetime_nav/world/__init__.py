from .entities import (
    LinearPiece,
    LinearTrajectory,
    Obstacle,
    SampledTrajectory,
    StaticTrajectory,
    Trajectory,
    TrajectoryKind,
    WaypointTrajectory,
)
from .environment import Environment, NEIGHBOR_OFFSETS
from .spawner import ScenarioSpawner, SpawnerConfig
