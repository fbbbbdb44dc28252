"""
Grid vertex holding D* Lite search state.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .exceptions import InvalidCostError
from .utils import format_cost

VertexListener = Callable[["VertexSnapshot"], None]


@dataclass(frozen=True)
class VertexSnapshot:
    """Immutable copy of a vertex's state, handed to listeners."""
    x: int
    y: int
    is_walkable: bool
    g_cost: Optional[int]
    rhs_cost: Optional[int]
    h_cost: Optional[int] = None  # None = not computed yet
    k1_cost: Optional[int] = None  # None = not computed yet

    @property
    def pos(self) -> Tuple[int, int]:
        return (self.x, self.y)


class Vertex:
    """
    A grid cell with its D* Lite costs.

    Equality and hashing use only the coordinates, so a vertex is a stable
    dict/set key no matter what costs it currently carries. A cost of None
    means unreachable.
    """

    def __init__(
        self,
        x: int,
        y: int,
        is_walkable: bool = True,
        g_cost: Optional[int] = None,
        rhs_cost: Optional[int] = None,
        h_cost: Optional[int] = None,
        k1_cost: Optional[int] = None
    ):
        """
        Initialize vertex.

        Args:
            x: Grid x coordinate
            y: Grid y coordinate
            is_walkable: False if the cell is an obstacle
            g_cost: Best known cost to goal (None = unreachable)
            rhs_cost: One-step lookahead cost to goal (None = unreachable)
            h_cost: Last heuristic distance to start, display only
            k1_cost: Last primary key, display only
        """
        _check_cost("g_cost", g_cost)
        _check_cost("rhs_cost", rhs_cost)
        self._x = x
        self._y = y
        self.is_walkable = is_walkable
        self.g_cost = g_cost
        self.rhs_cost = rhs_cost
        self.h_cost = h_cost
        self.k1_cost = k1_cost
        self._listeners: List[VertexListener] = []

    @property
    def x(self) -> int:
        return self._x

    @property
    def y(self) -> int:
        return self._y

    @property
    def pos(self) -> Tuple[int, int]:
        return (self._x, self._y)

    def add_listener(self, listener: VertexListener):
        """Register a callback invoked with a snapshot on every change."""
        self._listeners.append(listener)

    def set_walkable(self, is_walkable: bool):
        """Set walkability; notifies only if the value actually changes."""
        if self.is_walkable == is_walkable:
            return
        self.is_walkable = is_walkable
        self._notify()

    def set_g_cost(self, g_cost: Optional[int]):
        _check_cost("g_cost", g_cost)
        self.g_cost = g_cost
        self._notify()

    def set_rhs_cost(self, rhs_cost: Optional[int]):
        _check_cost("rhs_cost", rhs_cost)
        self.rhs_cost = rhs_cost
        self._notify()

    def update_display(self, h_cost: Optional[int], k1_cost: Optional[int]):
        """Record the heuristic and primary key last computed; notifies only on change."""
        if self.h_cost == h_cost and self.k1_cost == k1_cost:
            return
        self.h_cost = h_cost
        self.k1_cost = k1_cost
        self._notify()

    def reset_costs(self):
        """Back to unreachable/unknown. Walkability is kept; no notification."""
        self.g_cost = None
        self.rhs_cost = None
        self.h_cost = None
        self.k1_cost = None

    def snapshot(self) -> VertexSnapshot:
        return VertexSnapshot(
            x=self._x,
            y=self._y,
            is_walkable=self.is_walkable,
            g_cost=self.g_cost,
            rhs_cost=self.rhs_cost,
            h_cost=self.h_cost,
            k1_cost=self.k1_cost
        )

    def _notify(self):
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)

    def __eq__(self, other):
        if not isinstance(other, Vertex):
            return NotImplemented
        return self._x == other._x and self._y == other._y

    def __hash__(self):
        return hash((self._x, self._y))

    def __repr__(self):
        return (
            f"(Vertex (X: {self._x}, Y: {self._y}) | isWalkable: {self.is_walkable} | "
            f"g: {format_cost(self.g_cost)} | rhs: {format_cost(self.rhs_cost)} | "
            f"h: {format_cost(self.h_cost)} | k1: {format_cost(self.k1_cost)})"
        )


def _check_cost(name: str, cost: Optional[int]):
    if cost is not None and cost < 0:
        raise InvalidCostError(f"{name} must be non-negative, got {cost}")
