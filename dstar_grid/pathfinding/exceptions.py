"""
Errors raised by the pathfinding core.

All of these signal a caller bug. "No path" is not an error: it shows up as
an unreachable g-cost (None) and a None next step.
"""


class PathfindingError(Exception):
    """Base class for pathfinding contract violations."""


class OutOfBoundsError(PathfindingError, IndexError):
    """Coordinate outside the grid."""

    def __init__(self, x: int, y: int):
        super().__init__(f"Grid position ({x},{y}) is out of bounds!")
        self.x = x
        self.y = y


class InvalidAdjacencyError(PathfindingError, ValueError):
    """Edge cost requested between cells that are not 8-neighbors."""


class DuplicateEntryError(PathfindingError, ValueError):
    """Vertex inserted into the priority queue twice."""


class NotFoundError(PathfindingError, LookupError):
    """Vertex updated or removed while not in the priority queue."""


class EmptyFrontierError(PathfindingError, IndexError):
    """Top or pop on an empty priority queue."""


class InvalidCostError(PathfindingError, ValueError):
    """Negative cost assigned to a vertex."""
