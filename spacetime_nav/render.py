"""
ASCII rendering of a path through an environment at a given moment.

Only consumes the public Path / Environment API; handy for demos and for
eyeballing test failures.
"""
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from .navigation.geometry import Cell, supercover_cells
from .navigation.path import Path
from .world.environment import Environment


def path_cells(environment: Environment, path: Path) -> List[Cell]:
    """Every cell the path's segments pass through, in travel order."""
    cs = environment.cell_size
    cells: List[Cell] = []
    seen = set()
    for a, b in path.segments():
        for cell in supercover_cells(a.x / cs, a.y / cs, b.x / cs, b.y / cs):
            if cell not in seen and environment.in_bounds(cell):
                seen.add(cell)
                cells.append(cell)
    if not cells and path.waypoints:
        cells.append(path.waypoints[0].cell)
    return cells


def render_frame(
    environment: Environment,
    path: Optional[Path] = None,
    t: Optional[float] = None,
) -> str:
    """
    Grid with the path ('*'), obstacles alive at t ('o') and the agent ('A').

    Waypoints are drawn as 'W'. Without ``t`` only the static picture is drawn.
    """
    marks: Dict[Cell, str] = {}
    trail: List[Cell] = []

    if path is not None:
        trail = path_cells(environment, path)
        for waypoint in path.waypoints:
            marks[waypoint.cell] = "W"

    if t is not None:
        for obstacle in environment.obstacles_alive_at(t):
            x, y = obstacle.position_at(t)
            cell = environment.world_to_cell(x, y)
            if environment.in_bounds(cell):
                marks[cell] = "o"
        if path is not None:
            x, y = path.position_at(t)
            marks[environment.world_to_cell(x, y)] = "A"

    header = f"t={t:.2f}" if t is not None else "static"
    return header + "\n" + environment.to_ascii(path=trail, marks=marks)


def render_frames(
    environment: Environment,
    path: Path,
    step: float = 0.5,
) -> Iterator[Tuple[float, str]]:
    """Frames from departure to arrival, ``step`` time units apart."""
    if step <= 0:
        raise ValueError("step must be positive")
    times = np.arange(path.start_time, path.end_time + step, step)
    for t in times:
        t = min(float(t), path.end_time)
        yield t, render_frame(environment, path, t)
        if t >= path.end_time:
            break
