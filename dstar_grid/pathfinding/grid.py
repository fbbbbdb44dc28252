"""
Fixed-size 8-connected grid of vertices for D* Lite.
Owns every vertex, provides neighbor queries, heuristic and edge costs.
"""

import logging
from typing import Callable, List, Tuple

import numpy as np

from .exceptions import InvalidAdjacencyError, OutOfBoundsError
from .utils import get_movements_8n, heuristic, step_cost
from .vertex import Vertex, VertexListener

logger = logging.getLogger(__name__)

OBSTACLE = 255
UNOCCUPIED = 0


class Grid:
    """
    2D grid graph for pathfinding.
    One vertex per cell, created once and mutated in place.
    """

    def __init__(self, width: int, height: int):
        """
        Initialize grid with every cell walkable.

        Args:
            width: Number of cells in x direction
            height: Number of cells in y direction
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")

        self.width = width
        self.height = height

        self._vertex_listeners: List[VertexListener] = []
        self._reset_listeners: List[Callable[[], None]] = []

        self._vertices: List[List[Vertex]] = []
        for x in range(width):
            column = []
            for y in range(height):
                vertex = Vertex(x, y)
                vertex.add_listener(self._on_vertex_changed)
                column.append(vertex)
            self._vertices.append(column)

        logger.info(f"Grid initialized: {width}x{height} cells, 8N connectivity")

    @classmethod
    def from_occupancy(cls, occupancy: np.ndarray) -> "Grid":
        """
        Build a grid from an occupancy map indexed [x, y].

        Args:
            occupancy: Array of shape (width, height); UNOCCUPIED (0) is free,
                anything else is an obstacle

        Returns:
            New grid with matching walkability
        """
        occupancy = np.asarray(occupancy)
        if occupancy.ndim != 2:
            raise ValueError(f"Occupancy map must be 2D, got shape {occupancy.shape}")

        grid = cls(occupancy.shape[0], occupancy.shape[1])
        for (x, y) in zip(*np.nonzero(occupancy != UNOCCUPIED)):
            grid._vertices[int(x)][int(y)].is_walkable = False
        return grid

    def in_bounds(self, x: int, y: int) -> bool:
        """Check if coordinates are within grid bounds."""
        return 0 <= x < self.width and 0 <= y < self.height

    def get_vertex(self, x: int, y: int) -> Vertex:
        """
        Look up the vertex at a coordinate.

        Raises:
            OutOfBoundsError: if (x, y) is outside the grid
        """
        if not self.in_bounds(x, y):
            raise OutOfBoundsError(x, y)
        return self._vertices[x][y]

    def __getitem__(self, pos: Tuple[int, int]) -> Vertex:
        return self.get_vertex(pos[0], pos[1])

    def __iter__(self):
        for column in self._vertices:
            yield from column

    def neighbors(self, vertex: Vertex) -> List[Vertex]:
        """
        Get walkable 8-connected neighbors of a vertex.

        The queried vertex's own walkability is not checked.

        Args:
            vertex: Vertex to expand

        Returns:
            In-bounds walkable neighbors, in a fixed order
        """
        result = []
        for (nx, ny) in get_movements_8n(vertex.x, vertex.y):
            if not self.in_bounds(nx, ny):
                continue
            neighbor = self._vertices[nx][ny]
            if neighbor.is_walkable:
                result.append(neighbor)
        return result

    def heuristic(self, v: Vertex, u: Vertex) -> int:
        """Octile distance between two vertices."""
        return heuristic(v.pos, u.pos)

    def edge_cost(self, v: Vertex, u: Vertex) -> int:
        """
        Cost of moving between two adjacent vertices.

        Returns:
            10 for cardinal moves, 14 for diagonal moves

        Raises:
            InvalidAdjacencyError: if v and u are not 8-neighbors
        """
        cost = step_cost(v.pos, u.pos)
        if cost is None:
            raise InvalidAdjacencyError(f"{v} and {u} are not neighbors!")
        return cost

    def reset(self):
        """Reset costs of every vertex (not walkability) and notify once."""
        for vertex in self:
            vertex.reset_costs()

        for listener in list(self._reset_listeners):
            listener()

    def subscribe_vertex_changed(self, listener: VertexListener) -> Callable[[], None]:
        """
        Register a callback for any vertex mutation.

        Returns:
            Callable that removes the registration
        """
        self._vertex_listeners.append(listener)
        return lambda: self._vertex_listeners.remove(listener)

    def subscribe_reset(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a callback invoked once per grid reset."""
        self._reset_listeners.append(listener)
        return lambda: self._reset_listeners.remove(listener)

    def walkability_map(self) -> np.ndarray:
        """Boolean array of shape (width, height), True where walkable."""
        walkable = np.zeros((self.width, self.height), dtype=bool)
        for vertex in self:
            walkable[vertex.x, vertex.y] = vertex.is_walkable
        return walkable

    def occupancy_map(self) -> np.ndarray:
        """uint8 array of shape (width, height) using OBSTACLE / UNOCCUPIED."""
        return np.where(self.walkability_map(), UNOCCUPIED, OBSTACLE).astype(np.uint8)

    def get_obstacle_count(self) -> int:
        """Get the number of unwalkable cells in the grid."""
        return int(np.count_nonzero(~self.walkability_map()))

    def _on_vertex_changed(self, snapshot):
        for listener in list(self._vertex_listeners):
            listener(snapshot)
