"""
Seeded scenario generation for demos and benchmarks.

All randomness comes from the spawner's own random.Random instance; the
pathfinding core never draws random numbers.
"""
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .entities import LinearTrajectory, Obstacle, Point
from .environment import Cell, Environment


@dataclass
class SpawnerConfig:
    """Configuration for random scenario generation."""
    width: int = 40
    height: int = 40
    cell_size: float = 1.0
    block_probability: float = 0.15  # Chance that a cell is a static wall
    num_obstacles: int = 10

    # Moving obstacle ranges (world units / time units)
    radius_range: Tuple[float, float] = (0.3, 1.2)
    speed_range: Tuple[float, float] = (0.5, 3.0)
    spawn_time_range: Tuple[float, float] = (0.0, 20.0)

    # Obstacles may not start on top of these cells
    min_separation: float = 3.0


class ScenarioSpawner:
    def __init__(self, config: Optional[SpawnerConfig] = None, seed: Optional[int] = None):
        self.config = config or SpawnerConfig()
        self.seed = seed
        self.rng = random.Random(seed)

    @property
    def world_size(self) -> Tuple[float, float]:
        return (
            self.config.width * self.config.cell_size,
            self.config.height * self.config.cell_size,
        )

    def _random_point(self) -> Point:
        w, h = self.world_size
        return (self.rng.uniform(0.0, w), self.rng.uniform(0.0, h))

    def _is_valid_origin(self, point: Point, keep_clear: Sequence[Point]) -> bool:
        for other in keep_clear:
            if np.hypot(point[0] - other[0], point[1] - other[1]) < self.config.min_separation:
                return False
        return True

    def _find_valid_origin(self, keep_clear: Sequence[Point], max_attempts: int = 100) -> Point:
        for _ in range(max_attempts):
            point = self._random_point()
            if self._is_valid_origin(point, keep_clear):
                return point
        raise RuntimeError(
            f"Could not find valid obstacle origin after {max_attempts} attempts. "
            f"Try reducing min_separation or the number of obstacles."
        )

    def spawn_grid(self, keep_free: Sequence[Cell] = ()) -> np.ndarray:
        """Random static walls; cells in ``keep_free`` are never blocked."""
        cfg = self.config
        grid = np.zeros((cfg.height, cfg.width), dtype=np.uint8)
        for y in range(cfg.height):
            for x in range(cfg.width):
                if self.rng.random() < cfg.block_probability:
                    grid[y, x] = 1
        for x, y in keep_free:
            grid[y, x] = 0
        return grid

    def spawn_obstacle(self, obstacle_id: str, keep_clear: Sequence[Point] = ()) -> Obstacle:
        """A projectile flying between two random points."""
        cfg = self.config
        origin = self._find_valid_origin(keep_clear)
        target = self._random_point()
        radius = self.rng.uniform(*cfg.radius_range)
        speed = self.rng.uniform(*cfg.speed_range)
        spawn_time = self.rng.uniform(*cfg.spawn_time_range)
        trajectory = LinearTrajectory.from_target(origin, target, speed, spawn_time)
        return Obstacle(obstacle_id=obstacle_id, radius=radius, trajectory=trajectory)

    def spawn_environment(self, start: Cell, goal: Cell) -> Environment:
        """Random walls plus moving obstacles, start and goal left free."""
        cfg = self.config
        grid = self.spawn_grid(keep_free=(start, goal))

        # Built once without obstacles just to map cells to points
        bare = Environment(grid, cell_size=cfg.cell_size)
        keep_clear = [bare.cell_center(start), bare.cell_center(goal)]

        obstacles: List[Obstacle] = [
            self.spawn_obstacle(f"obstacle_{i}", keep_clear)
            for i in range(cfg.num_obstacles)
        ]
        return bare.with_obstacles(obstacles)
