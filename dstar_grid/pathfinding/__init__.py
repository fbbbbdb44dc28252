"""
D* Lite pathfinding over a fixed 8-connected grid.
"""

from .d_star_lite import DStarLite
from .exceptions import (
    DuplicateEntryError,
    EmptyFrontierError,
    InvalidAdjacencyError,
    InvalidCostError,
    NotFoundError,
    OutOfBoundsError,
    PathfindingError,
)
from .grid import OBSTACLE, UNOCCUPIED, Grid
from .priority_queue import IndexedPriorityQueue, Key
from .snapshots import SnapshotRecorder
from .vertex import Vertex, VertexSnapshot

__all__ = [
    'DStarLite', 'Grid', 'IndexedPriorityQueue', 'Key', 'SnapshotRecorder',
    'Vertex', 'VertexSnapshot', 'OBSTACLE', 'UNOCCUPIED',
    'PathfindingError', 'OutOfBoundsError', 'InvalidAdjacencyError',
    'DuplicateEntryError', 'NotFoundError', 'EmptyFrontierError', 'InvalidCostError',
]
