"""
Immutable snapshot of the world a single path query runs against.

Holds the static occupancy grid (0 = free, 1 = blocked) and the ordered
set of moving obstacles. Nothing in here changes once constructed, so one
Environment may be shared by queries running on different threads.
"""
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import OutOfBoundsError
from .entities import Obstacle, Point

Cell = Tuple[int, int]

# 8-connected neighbourhood in a fixed order, so searches are repeatable
NEIGHBOR_OFFSETS: Tuple[Cell, ...] = (
    (1, 0), (0, 1), (-1, 0), (0, -1),
    (1, 1), (-1, 1), (-1, -1), (1, -1),
)


class Environment:
    """
    Static grid plus moving obstacles.

    The grid is indexed ``grid[y, x]``. Cell (x, y) covers the square
    [x*cell_size, (x+1)*cell_size) x [y*cell_size, (y+1)*cell_size) and is
    represented in continuous space by its centre.
    """

    def __init__(
        self,
        grid: np.ndarray,
        obstacles: Iterable[Obstacle] = (),
        cell_size: float = 1.0,
    ):
        grid = np.array(grid, dtype=np.uint8, copy=True)
        if grid.ndim != 2 or grid.size == 0:
            raise ValueError(f"grid must be a non-empty 2D array, got shape {grid.shape}")
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")

        grid[grid != 0] = 1
        grid.flags.writeable = False

        self.grid = grid
        self.cell_size = float(cell_size)
        self.height, self.width = grid.shape

        self.obstacles: Tuple[Obstacle, ...] = tuple(obstacles)
        self._obstacles_by_id: Dict[str, Obstacle] = {}
        for obstacle in self.obstacles:
            if obstacle.obstacle_id in self._obstacles_by_id:
                raise ValueError(f"Duplicate obstacle id '{obstacle.obstacle_id}'")
            self._obstacles_by_id[obstacle.obstacle_id] = obstacle

    @classmethod
    def empty(
        cls,
        width: int,
        height: int,
        obstacles: Iterable[Obstacle] = (),
        cell_size: float = 1.0,
    ) -> "Environment":
        return cls(np.zeros((height, width), dtype=np.uint8), obstacles, cell_size)

    @classmethod
    def from_ascii(
        cls,
        text: str,
        obstacles: Iterable[Obstacle] = (),
        cell_size: float = 1.0,
    ) -> "Environment":
        """
        Build a grid from rows of '#' (blocked) and '.' (free).

        The first row is the top of the map (highest y), matching to_ascii().
        """
        rows = [line.strip() for line in text.strip().splitlines() if line.strip()]
        if not rows or any(len(row) != len(rows[0]) for row in rows):
            raise ValueError("ASCII map rows must be non-empty and equally long")

        grid = np.array(
            [[1 if ch == "#" else 0 for ch in row] for row in reversed(rows)],
            dtype=np.uint8,
        )
        return cls(grid, obstacles, cell_size)

    def with_obstacles(self, obstacles: Iterable[Obstacle]) -> "Environment":
        """Same static grid with a different obstacle set."""
        return Environment(self.grid, obstacles, self.cell_size)

    # ------------------------------------------------------------------
    # Static grid
    # ------------------------------------------------------------------

    def in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.width and 0 <= y < self.height

    def is_blocked(self, cell: Cell) -> bool:
        """Check if a grid cell is blocked."""
        if not self.in_bounds(cell):
            raise OutOfBoundsError(
                f"Cell {cell} is outside the {self.width}x{self.height} grid",
                cell=cell,
            )
        return bool(self.grid[cell[1], cell[0]])

    def is_passable(self, cell: Cell) -> bool:
        """In bounds and free."""
        return self.in_bounds(cell) and not self.grid[cell[1], cell[0]]

    def neighbors(self, cell: Cell) -> List[Cell]:
        """Passable 8-connected neighbours in a fixed order."""
        x, y = cell
        result = []
        for dx, dy in NEIGHBOR_OFFSETS:
            neighbor = (x + dx, y + dy)
            if self.is_passable(neighbor):
                result.append(neighbor)
        return result

    def cell_center(self, cell: Cell) -> Point:
        """Convert grid coordinates to world coordinates (cell centre)."""
        return (
            (cell[0] + 0.5) * self.cell_size,
            (cell[1] + 0.5) * self.cell_size,
        )

    def world_to_cell(self, x: float, y: float) -> Cell:
        """Grid cell containing a world position (not clamped)."""
        return (int(np.floor(x / self.cell_size)), int(np.floor(y / self.cell_size)))

    # ------------------------------------------------------------------
    # Moving obstacles
    # ------------------------------------------------------------------

    def obstacle(self, obstacle_id: str) -> Obstacle:
        return self._obstacles_by_id[obstacle_id]

    def obstacle_position_at(self, obstacle_id: str, time: float) -> Point:
        """
        Position of an obstacle at a given time.

        Raises:
            KeyError: unknown obstacle id
            InvalidObstacleTrajectoryError: time outside the obstacle's horizon
        """
        return self._obstacles_by_id[obstacle_id].position_at(time)

    def obstacles_alive_at(self, time: float) -> List[Obstacle]:
        return [obs for obs in self.obstacles if obs.is_alive(time)]

    def uncovered_obstacles(self, t_begin: float, t_end: float) -> List[Obstacle]:
        """Obstacles whose horizon does not span the whole interval."""
        return [obs for obs in self.obstacles if not obs.trajectory.covers(t_begin, t_end)]

    # ------------------------------------------------------------------
    # Debugging
    # ------------------------------------------------------------------

    def to_ascii(
        self,
        path: Optional[Sequence[Cell]] = None,
        marks: Optional[Dict[Cell, str]] = None,
    ) -> str:
        """
        Generate ASCII visualization of the grid.

        Args:
            path: Optional list of (x, y) cells to draw as '*'
            marks: Optional extra cells with their own characters (drawn last)

        Returns:
            ASCII string representation, top row is the highest y
        """
        path_set = set(path) if path else set()
        marks = marks or {}
        lines = []

        for gy in range(self.height - 1, -1, -1):  # Top to bottom
            row = ""
            for gx in range(self.width):
                if (gx, gy) in marks:
                    row += marks[(gx, gy)]
                elif (gx, gy) in path_set:
                    row += "*"
                elif self.grid[gy, gx] == 1:
                    row += "#"
                else:
                    row += "."
            lines.append(row)

        return "\n".join(lines)

    def __repr__(self) -> str:
        blocked = int(np.sum(self.grid))
        total = self.width * self.height
        return (
            f"Environment(grid_size={self.width}x{self.height}, "
            f"cell_size={self.cell_size}, blocked={blocked}/{total}, "
            f"obstacles={len(self.obstacles)})"
        )
