"""
Per-query search state: node records plus the open set.

Node records live in flat numpy arrays addressed by cell, and a node's
parent is stored as a cell coordinate rather than a reference. The open set
is a binary heap with lazy deletion: every cell carries a generation
counter, and heap entries whose generation no longer matches are skipped.
"""
import heapq
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

import numpy as np

Cell = Tuple[int, int]


class NodeStatus(IntEnum):
    UNVISITED = 0
    OPEN = 1
    CLOSED = 2


class TieBreak(Enum):
    """How to order open nodes with equal f = g + h."""
    LARGER_G = "larger_g"    # closer to the goal first, fewer plateau expansions
    SMALLER_G = "smaller_g"


@dataclass(frozen=True)
class Node:
    """Read-only snapshot of one cell's search state."""
    cell: Cell
    g: float
    h: float
    t: float
    parent: Optional[Cell]
    status: NodeStatus

    @property
    def f(self) -> float:
        return self.g + self.h


class NodeWorkspace:
    """
    Open/closed bookkeeping for a single search over a width x height grid.

    Never shared between queries; create a fresh one per search.
    """

    def __init__(self, width: int, height: int, tie_break: TieBreak = TieBreak.LARGER_G):
        self.width = width
        self.height = height
        self.tie_break = tie_break

        shape = (height, width)
        self.g = np.full(shape, np.inf, dtype=np.float64)
        self.h = np.zeros(shape, dtype=np.float64)
        self.t = np.full(shape, np.inf, dtype=np.float64)
        self.parent_x = np.full(shape, -1, dtype=np.int64)
        self.parent_y = np.full(shape, -1, dtype=np.int64)
        self.status = np.zeros(shape, dtype=np.uint8)
        self.generation = np.zeros(shape, dtype=np.int64)

        # (f, tie key, insertion counter, generation, x, y)
        self._heap: List[Tuple[float, float, int, int, int, int]] = []
        self._counter = 0
        self._open_count = 0

    # ------------------------------------------------------------------
    # Open set
    # ------------------------------------------------------------------

    def push(self, cell: Cell, g: float, h: float) -> None:
        """Insert a cell into the open set, or re-key it if already open."""
        x, y = cell
        if self.status[y, x] == NodeStatus.CLOSED:
            raise ValueError(f"Cell {cell} is closed and cannot be reopened")
        if self.status[y, x] != NodeStatus.OPEN:
            self._open_count += 1

        self.g[y, x] = g
        self.h[y, x] = h
        self.status[y, x] = NodeStatus.OPEN
        self.generation[y, x] += 1

        tie = -g if self.tie_break == TieBreak.LARGER_G else g
        heapq.heappush(
            self._heap,
            (g + h, tie, self._counter, int(self.generation[y, x]), x, y),
        )
        self._counter += 1

    def pop(self) -> Optional[Cell]:
        """Remove and return the open cell with the smallest f, or None."""
        while self._heap:
            _, _, _, gen, x, y = heapq.heappop(self._heap)
            if self.status[y, x] != NodeStatus.OPEN or gen != self.generation[y, x]:
                continue  # stale entry
            self.status[y, x] = NodeStatus.UNVISITED
            self._open_count -= 1
            return (x, y)
        return None

    @property
    def open_count(self) -> int:
        return self._open_count

    # ------------------------------------------------------------------
    # Node records
    # ------------------------------------------------------------------

    def close(self, cell: Cell) -> None:
        x, y = cell
        if self.status[y, x] == NodeStatus.OPEN:
            self._open_count -= 1
            self.generation[y, x] += 1
        self.status[y, x] = NodeStatus.CLOSED

    def reset(self, cell: Cell) -> None:
        """Forget a cell entirely; it may be reached again later."""
        x, y = cell
        if self.status[y, x] == NodeStatus.OPEN:
            self._open_count -= 1
        self.generation[y, x] += 1
        self.status[y, x] = NodeStatus.UNVISITED
        self.g[y, x] = np.inf
        self.t[y, x] = np.inf
        self.parent_x[y, x] = -1
        self.parent_y[y, x] = -1

    def is_open(self, cell: Cell) -> bool:
        return self.status[cell[1], cell[0]] == NodeStatus.OPEN

    def is_closed(self, cell: Cell) -> bool:
        return self.status[cell[1], cell[0]] == NodeStatus.CLOSED

    def is_visited(self, cell: Cell) -> bool:
        """True once the cell has a recorded cost (open, closed or popped)."""
        return bool(np.isfinite(self.g[cell[1], cell[0]]))

    def set_parent(self, cell: Cell, parent: Cell, g: float, t: float) -> None:
        x, y = cell
        self.parent_x[y, x] = parent[0]
        self.parent_y[y, x] = parent[1]
        self.g[y, x] = g
        self.t[y, x] = t

    def parent(self, cell: Cell) -> Optional[Cell]:
        px = int(self.parent_x[cell[1], cell[0]])
        if px < 0:
            return None
        return (px, int(self.parent_y[cell[1], cell[0]]))

    def cost(self, cell: Cell) -> float:
        return float(self.g[cell[1], cell[0]])

    def time(self, cell: Cell) -> float:
        return float(self.t[cell[1], cell[0]])

    def node(self, cell: Cell) -> Node:
        x, y = cell
        return Node(
            cell=cell,
            g=float(self.g[y, x]),
            h=float(self.h[y, x]),
            t=float(self.t[y, x]),
            parent=self.parent(cell),
            status=NodeStatus(int(self.status[y, x])),
        )
