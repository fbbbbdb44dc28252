import pytest

from dstar_grid.pathfinding import DStarLite, Grid


@pytest.fixture
def grid():
    return Grid(5, 5)


@pytest.fixture
def planner(grid):
    return DStarLite(grid)


def walk(planner, start, goal, limit=100):
    """Follow find_next from start; stops at goal, on None, or after limit steps."""
    path = []
    current = start
    while current is not None and current != goal and len(path) < limit:
        path.append(current)
        current = planner.find_next(current)
    if current == goal:
        path.append(goal)
    return path


def block(grid, *cells):
    for (x, y) in cells:
        grid.get_vertex(x, y).set_walkable(False)
