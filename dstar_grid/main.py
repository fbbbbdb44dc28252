"""
Command line entry point.
Builds a grid, runs the agent from start to goal and prints the walked cells.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional, Tuple

from .config import settings
from .loops.navigation_loop import NavigationLoop
from .pathfinding import DStarLite, Grid

logger = logging.getLogger(__name__)


def parse_cell(text: str) -> Tuple[int, int]:
    """Parse 'x,y' into a tuple."""
    try:
        x, y = (int(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected 'x,y', got {text!r}")
    return (x, y)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dstar-grid", description="Run D* Lite on a grid")
    parser.add_argument("--width", type=int, default=settings.grid_width)
    parser.add_argument("--height", type=int, default=settings.grid_height)
    parser.add_argument("--start", type=parse_cell, default=(0, 0))
    parser.add_argument("--goal", type=parse_cell, required=True)
    parser.add_argument("--wall", type=parse_cell, action="append", default=[],
                        help="Blocked cell, may be repeated")
    parser.add_argument("--max-steps", type=int, default=settings.max_steps)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.width <= 0 or args.height <= 0:
        parser.error(f"grid dimensions must be positive, got {args.width}x{args.height}")

    # Configure logging
    logging.basicConfig(
        level=logging.INFO if settings.debug else logging.WARNING,
        format=settings.log_format
    )

    grid = Grid(args.width, args.height)
    for (name, cell) in [("--start", args.start), ("--goal", args.goal)] + [("--wall", w) for w in args.wall]:
        if not grid.in_bounds(*cell):
            parser.error(f"{name} {cell[0]},{cell[1]} is outside the {args.width}x{args.height} grid")

    for (x, y) in args.wall:
        grid.get_vertex(x, y).set_walkable(False)

    planner = DStarLite(grid)
    loop = NavigationLoop(planner, args.start, max_steps=args.max_steps)

    if not loop.set_goal(args.goal):
        print(json.dumps({"path": [], "cost": None, "arrived": False}))
        return 1

    cost = grid.get_vertex(*args.start).g_cost
    path = loop.run()
    print(json.dumps({"path": [list(cell) for cell in path], "cost": cost, "arrived": loop.arrived}))
    return 0 if loop.arrived else 1


if __name__ == "__main__":
    sys.exit(main())
