"""
Demo: any-angle pathfinding through a random grid with moving obstacles.

Generates a seeded scenario, runs Lazy Theta* from the bottom-left to the
top-right corner and prints timing, expansion counts and ASCII frames.

Usage:
    python demo_pathfinding.py
    python demo_pathfinding.py --seed 7 --obstacles 30 --frames
"""
import argparse
import logging
import random
import time

from spacetime_nav import NoPathFoundError, PathfindingConfig, SearchTimeoutError, find_path
from spacetime_nav.render import render_frame, render_frames
from spacetime_nav.world import ScenarioSpawner, SpawnerConfig


def main():
    parser = argparse.ArgumentParser(description="Lazy Theta* pathfinding demo")
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed (random if omitted)"
    )
    parser.add_argument(
        "--size", type=int, default=30,
        help="Grid width and height in cells"
    )
    parser.add_argument(
        "--obstacles", type=int, default=10,
        help="Number of moving obstacles"
    )
    parser.add_argument(
        "--walls", type=float, default=0.15,
        help="Probability that a cell is blocked"
    )
    parser.add_argument(
        "--speed", type=float, default=2.0,
        help="Agent movement speed"
    )
    parser.add_argument(
        "--radius", type=float, default=0.4,
        help="Agent radius"
    )
    parser.add_argument(
        "--max-time", type=float, default=60.0,
        help="Latest allowed arrival time"
    )
    parser.add_argument(
        "--max-steps", type=int, default=10000,
        help="Expansion budget"
    )
    parser.add_argument(
        "--eager", action="store_true",
        help="Check line of sight on generation instead of expansion"
    )
    parser.add_argument(
        "--frames", action="store_true",
        help="Print an ASCII frame per time step"
    )
    parser.add_argument(
        "--frame-step", type=float, default=1.0,
        help="Time between printed frames"
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Enable debug logging"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    seed = args.seed if args.seed is not None else random.SystemRandom().randrange(2**32)
    print(f"seed: {seed}")

    spawner = ScenarioSpawner(
        SpawnerConfig(
            width=args.size,
            height=args.size,
            block_probability=args.walls,
            num_obstacles=args.obstacles,
            spawn_time_range=(0.0, args.max_time),
        ),
        seed=seed,
    )
    start = (0, 0)
    goal = (args.size - 1, args.size - 1)
    env = spawner.spawn_environment(start, goal)
    print(env)

    config = PathfindingConfig(max_expansions=args.max_steps, lazy=not args.eager)

    print("searching")
    began = time.perf_counter()
    try:
        path = find_path(
            env,
            start,
            goal,
            time_window=(0.0, args.max_time),
            agent_speed=args.speed,
            agent_radius=args.radius,
            config=config,
        )
    except (NoPathFoundError, SearchTimeoutError) as exc:
        print(f"No path found! ({exc})")
        print(render_frame(env))
        return
    elapsed = time.perf_counter() - began

    print(
        f"search took {elapsed * 1000:.1f} ms - cost: {path.cost:.2f}, "
        f"expansions: {path.expansions}/{args.max_steps}, "
        f"oracle calls: {path.oracle_calls}, arrival: {path.end_time:.2f}/{args.max_time}"
    )
    for waypoint in path.waypoints:
        print(f"  ({waypoint.x:6.2f}, {waypoint.y:6.2f}) at t={waypoint.t:6.2f}")

    if args.frames:
        for _, frame in render_frames(env, path, step=args.frame_step):
            print()
            print(frame)
    else:
        print(render_frame(env, path))


if __name__ == "__main__":
    main()
