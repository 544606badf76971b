"""
Geometry helpers shared by the visibility oracle and the path extractor.

All functions work on plain (x, y) tuples so they can be called in the
inner loop without allocating arrays.
"""
import math
from typing import List, Tuple

Point = Tuple[float, float]
Cell = Tuple[int, int]

# Tolerance used when deciding that a line passes exactly through a
# lattice corner, or that three points are colinear.
EPSILON = 1e-9


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def segment_point_distance(a: Point, b: Point, p: Point) -> float:
    """Distance from point p to the closed segment a-b (a == b allowed)."""
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        return distance(a, p)

    # Project p onto the line through a and b, clamped to the segment
    t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return distance((a[0] + t * dx, a[1] + t * dy), p)


def min_distance_linear(
    rel_position: Point,
    rel_velocity: Point,
    duration: float,
) -> float:
    """
    Minimum of |p + v*s| for s in [0, duration].

    Closed form for two bodies that both move at constant velocity:
    pass the position and velocity of one relative to the other.
    """
    px, py = rel_position
    vx, vy = rel_velocity
    speed_sq = vx * vx + vy * vy

    if speed_sq == 0.0 or duration <= 0.0:
        return math.hypot(px, py)

    s = -(px * vx + py * vy) / speed_sq
    s = max(0.0, min(duration, s))
    return math.hypot(px + vx * s, py + vy * s)


def _edge_columns(coord: float, delta: float) -> List[int]:
    """Cells touched along one axis by a segment that does not move on it."""
    base = math.floor(coord)
    if delta == 0.0 and coord == base:
        # Lying exactly on a grid line touches the cells on both sides
        return [base - 1, base]
    return [base]


def supercover_cells(x0: float, y0: float, x1: float, y1: float) -> List[Cell]:
    """
    Every grid cell touched by the segment (x0, y0) -> (x1, y1).

    Coordinates are in cell units: cell (i, j) is the square
    [i, i+1) x [j, j+1). When the segment passes exactly through a
    lattice corner, both cells beside the corner are included as well, so
    a diagonal move can never squeeze between two blocked cells.
    """
    dx = x1 - x0
    dy = y1 - y0

    # Axis-aligned segments are the common case for grid moves
    if dx == 0.0 or dy == 0.0:
        xs = _edge_columns(x0, dx) if dx == 0.0 else None
        ys = _edge_columns(y0, dy) if dy == 0.0 else None
        if xs is None:
            lo, hi = sorted((math.floor(x0), math.floor(x1)))
            xs = list(range(lo, hi + 1))
        if ys is None:
            lo, hi = sorted((math.floor(y0), math.floor(y1)))
            ys = list(range(lo, hi + 1))
        return [(cx, cy) for cy in ys for cx in xs]

    cx, cy = math.floor(x0), math.floor(y0)
    end_x, end_y = math.floor(x1), math.floor(y1)

    step_x = 1 if dx > 0 else -1
    step_y = 1 if dy > 0 else -1

    # Parametric distance (0..1 along the segment) to the next vertical
    # and horizontal grid line, and between successive lines.
    next_x = cx + 1 if step_x > 0 else cx
    next_y = cy + 1 if step_y > 0 else cy
    t_max_x = (next_x - x0) / dx
    t_max_y = (next_y - y0) / dy
    t_delta_x = abs(1.0 / dx)
    t_delta_y = abs(1.0 / dy)

    cells = [(cx, cy)]
    remaining = abs(end_x - cx) + abs(end_y - cy)

    while remaining > 0:
        if abs(t_max_x - t_max_y) <= EPSILON:
            if t_max_x > 1.0 + EPSILON:
                break
            cells.append((cx + step_x, cy))
            cells.append((cx, cy + step_y))
            cx += step_x
            cy += step_y
            t_max_x += t_delta_x
            t_max_y += t_delta_y
            remaining -= 2
        elif t_max_x < t_max_y:
            cx += step_x
            t_max_x += t_delta_x
            remaining -= 1
        else:
            cy += step_y
            t_max_y += t_delta_y
            remaining -= 1
        cells.append((cx, cy))

    return cells


def is_colinear(a: Point, b: Point, c: Point, tolerance: float = EPSILON) -> bool:
    """True if b lies on the segment a-c, heading the same way."""
    abx, aby = b[0] - a[0], b[1] - a[1]
    bcx, bcy = c[0] - b[0], c[1] - b[1]
    cross = abx * bcy - aby * bcx
    scale = max(math.hypot(abx, aby) * math.hypot(bcx, bcy), 1.0)
    return abs(cross) <= tolerance * scale and (abx * bcx + aby * bcy) > 0.0
