"""
Utility functions for D* Lite pathfinding.

Costs are integers scaled by 10 (cardinal step 10, diagonal step 14).
An unreachable cost is represented by None; the helpers below are the
only place where costs get added or compared, so the tag is never mixed
into integer arithmetic.
"""

from typing import List, Optional, Tuple

MOVE_STRAIGHT_COST = 10
MOVE_DIAGONAL_COST = 14

# Neighbor offsets, in enumeration order. find_next breaks ties on the first
# neighbor encountered, so changing this order changes extracted paths.
DIRECTIONS_8N: Tuple[Tuple[int, int], ...] = (
    (-1, 1),
    (0, 1),
    (1, 1),
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, -1),
    (-1, 0),
)


def heuristic(p: Tuple[int, int], q: Tuple[int, int]) -> int:
    """
    Compute octile distance between two grid points.

    Admissible and consistent for an 8-connected grid with the step costs
    above, which D* Lite needs for its termination bound.

    Args:
        p: (x, y) grid coordinate
        q: (x, y) grid coordinate

    Returns:
        14 * min(dx, dy) + 10 * |dx - dy|
    """
    dx = abs(p[0] - q[0])
    dy = abs(p[1] - q[1])
    return MOVE_DIAGONAL_COST * min(dx, dy) + MOVE_STRAIGHT_COST * abs(dx - dy)


def step_cost(p: Tuple[int, int], q: Tuple[int, int]) -> Optional[int]:
    """
    Cost of a single move between two grid points.

    Returns:
        10 for a cardinal move, 14 for a diagonal one, None if the points
        are identical or not adjacent.
    """
    dx = abs(p[0] - q[0])
    dy = abs(p[1] - q[1])
    if dx > 1 or dy > 1 or (dx == 0 and dy == 0):
        return None
    return MOVE_STRAIGHT_COST if dx + dy == 1 else MOVE_DIAGONAL_COST


def get_movements_8n(x: int, y: int) -> List[Tuple[int, int]]:
    """
    Get all possible 8-connectivity movements (including diagonals).

    Args:
        x: Current x position
        y: Current y position

    Returns:
        List of (x, y) positions for 8-connected neighbors
    """
    return [(x + dx, y + dy) for (dx, dy) in DIRECTIONS_8N]


def add_costs(cost: Optional[int], *terms: int) -> Optional[int]:
    """Add finite terms to a cost, keeping None (unreachable) absorbing."""
    if cost is None:
        return None
    return cost + sum(terms)


def min_cost(a: Optional[int], b: Optional[int]) -> Optional[int]:
    """Smaller of two costs, treating None as larger than any integer."""
    if a is None:
        return b
    if b is None:
        return a
    return a if a <= b else b


def cost_less(a: Optional[int], b: Optional[int]) -> bool:
    """Strict a < b, where None is larger than any integer."""
    if a is None:
        return False
    if b is None:
        return True
    return a < b


def format_cost(cost: Optional[int]) -> str:
    """Human readable cost for logs."""
    return "inf" if cost is None else str(cost)
