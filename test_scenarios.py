"""
Test seeded scenario generation and ASCII rendering.

Usage:
    python test_scenarios.py
    pytest test_scenarios.py
"""
import numpy as np
import pytest

from spacetime_nav import find_path
from spacetime_nav.render import path_cells, render_frame, render_frames
from spacetime_nav.world import (
    Environment,
    Obstacle,
    ScenarioSpawner,
    SpawnerConfig,
    StaticTrajectory,
    TrajectoryKind,
)


def _spawner(seed):
    config = SpawnerConfig(width=20, height=20, block_probability=0.3, num_obstacles=5)
    return ScenarioSpawner(config, seed=seed)


def test_same_seed_same_scenario():
    first = _spawner(42).spawn_environment((0, 0), (19, 19))
    second = _spawner(42).spawn_environment((0, 0), (19, 19))

    assert np.array_equal(first.grid, second.grid)
    assert first.obstacles == second.obstacles


def test_different_seed_different_grid():
    first = _spawner(1).spawn_environment((0, 0), (19, 19))
    second = _spawner(2).spawn_environment((0, 0), (19, 19))
    assert not np.array_equal(first.grid, second.grid)


def test_start_and_goal_kept_free():
    for seed in range(5):
        env = _spawner(seed).spawn_environment((0, 0), (19, 19))
        assert not env.is_blocked((0, 0))
        assert not env.is_blocked((19, 19))


def test_spawned_obstacles_are_linear_and_clear_of_endpoints():
    spawner = _spawner(7)
    env = spawner.spawn_environment((0, 0), (19, 19))

    assert [o.obstacle_id for o in env.obstacles] == [f"obstacle_{i}" for i in range(5)]
    for obstacle in env.obstacles:
        cfg = spawner.config
        assert obstacle.trajectory.kind == TrajectoryKind.LINEAR
        assert cfg.radius_range[0] <= obstacle.radius <= cfg.radius_range[1]
        assert cfg.spawn_time_range[0] <= obstacle.horizon[0] <= cfg.spawn_time_range[1]

        ox, oy = obstacle.position_at(obstacle.horizon[0])
        for cx, cy in ((0.5, 0.5), (19.5, 19.5)):
            assert np.hypot(ox - cx, oy - cy) >= cfg.min_separation


def test_impossible_separation_raises():
    config = SpawnerConfig(width=2, height=2, num_obstacles=1, min_separation=100.0)
    with pytest.raises(RuntimeError):
        ScenarioSpawner(config, seed=0).spawn_environment((0, 0), (1, 1))


def test_render_static_frame():
    env = Environment.empty(10, 10)
    path = find_path(env, (0, 0), (9, 9))
    frame = render_frame(env, path)
    lines = frame.splitlines()

    assert lines[0] == "static"
    assert len(lines) == 11
    # Top row is y=9, bottom row is y=0
    assert lines[1].endswith("W")
    assert lines[-1].startswith("W")
    assert "*" in frame


def test_render_frame_with_agent():
    env = Environment.empty(10, 10)
    path = find_path(env, (0, 0), (9, 9))
    frame = render_frame(env, path, t=0.0)
    lines = frame.splitlines()

    assert lines[0] == "t=0.00"
    assert lines[-1].startswith("A")
    assert lines[1].endswith("W")


def test_render_draws_live_obstacles_only():
    parked = Obstacle("parked", 0.5, StaticTrajectory((2.5, 2.5), t_begin=0.0, t_end=1.0))
    env = Environment.empty(5, 5, obstacles=[parked])

    assert "o" in render_frame(env, t=0.5)
    assert "o" not in render_frame(env, t=2.0)


def test_render_frames_end_at_arrival():
    env = Environment.empty(10, 10)
    path = find_path(env, (0, 0), (9, 9))
    frames = list(render_frames(env, path, step=0.5))

    times = [t for t, _ in frames]
    assert times[0] == path.start_time
    assert times[-1] == path.end_time
    assert times == sorted(times)
    assert len(set(times)) == len(times)
    # The agent sits on the goal in the final frame
    assert frames[-1][1].splitlines()[1].endswith("A")

    with pytest.raises(ValueError):
        list(render_frames(env, path, step=0.0))


def test_path_cells_cover_every_segment():
    env = Environment.empty(10, 10)
    path = find_path(env, (0, 0), (9, 9))
    cells = path_cells(env, path)

    assert cells[0] == (0, 0)
    assert cells[-1] == (9, 9)
    assert (5, 5) in cells


if __name__ == "__main__":
    for name, func in list(globals().items()):
        if name.startswith("test_") and callable(func):
            func()
            print(f"{name}: PASSED")
