"""
D* Lite incremental pathfinding over a Grid.

D* Lite searches backwards from the goal and keeps g/rhs costs on every
vertex, so when cells become blocked or free only the affected part of the
cost field is repaired. The agent extracts its path one step at a time by
descending the g gradient with find_next.
"""

import logging
from typing import Callable, Iterable, List, Optional

from .grid import Grid
from .priority_queue import IndexedPriorityQueue, Key
from .utils import add_costs, cost_less, format_cost, min_cost
from .vertex import Vertex, VertexListener, VertexSnapshot

logger = logging.getLogger(__name__)


class DStarLite:
    """
    D* Lite incremental shortest path algorithm.

    Listener payloads are VertexSnapshot copies (or the integer k_m), never
    the live vertices.
    """

    def __init__(self, grid: Grid):
        """
        Initialize D* Lite pathfinder.

        Args:
            grid: Grid whose vertices carry the search costs
        """
        self.grid = grid
        self.U = IndexedPriorityQueue()

        self.s_start: Optional[Vertex] = None  # agent's position
        self.s_goal: Optional[Vertex] = None
        self.s_last: Optional[Vertex] = None  # start as of the last k_m update
        self.k_m = 0  # Accumulated heuristic correction for start moves

        self._vertex_updated: List[VertexListener] = []
        self._g_cost_changed: List[VertexListener] = []
        self._km_changed: List[Callable[[int], None]] = []

    @property
    def has_session(self) -> bool:
        return self.s_start is not None and self.s_last is not None

    def subscribe_vertex_updated(self, listener: VertexListener) -> Callable[[], None]:
        """Called after every update_vertex, whether or not the queue changed."""
        self._vertex_updated.append(listener)
        return lambda: self._vertex_updated.remove(listener)

    def subscribe_g_cost_changed(self, listener: VertexListener) -> Callable[[], None]:
        """Called whenever compute_shortest_path assigns a g-cost."""
        self._g_cost_changed.append(listener)
        return lambda: self._g_cost_changed.remove(listener)

    def subscribe_km_changed(self, listener: Callable[[int], None]) -> Callable[[], None]:
        """Called with k_m each time change_vertex updates it."""
        self._km_changed.append(listener)
        return lambda: self._km_changed.remove(listener)

    def find_path(self, s_start: Vertex, s_goal: Vertex):
        """
        Start a new search session, discarding all previous costs.

        No search runs when start == goal or either is unwalkable; every cost
        then stays unreachable except rhs(goal) = 0.

        Args:
            s_start: Agent's current vertex
            s_goal: Target vertex
        """
        self.U.reset()

        self.s_start = s_start
        self.s_goal = s_goal
        self.s_last = s_start
        self.k_m = 0

        self.grid.reset()
        s_goal.set_rhs_cost(0)
        self.U.insert(s_goal, self.calculate_key(s_goal))

        logger.info(f"D* Lite session started: start={s_start.pos}, goal={s_goal.pos}")

        if s_start.is_walkable and s_goal.is_walkable and s_start != s_goal:
            self.compute_shortest_path()
            if s_start.g_cost is None:
                logger.warning(f"No path from {s_start.pos} to {s_goal.pos}")
            else:
                logger.debug(f"Initial path cost: {s_start.g_cost}")

    def find_next(self, v: Vertex) -> Optional[Vertex]:
        """
        Get the next step from v by descending the g gradient.

        Args:
            v: Current vertex

        Returns:
            Walkable neighbor with the strictly smallest g (first one wins
            ties), or None if v has no known path to the goal
        """
        if v.g_cost is None:
            return None

        best: Optional[Vertex] = None
        min_g: Optional[int] = None
        for neighbor in self.grid.neighbors(v):
            if cost_less(neighbor.g_cost, min_g):
                min_g = neighbor.g_cost
                best = neighbor
        return best

    def update_agent_position(self, s_start: Vertex):
        """Record the agent's current vertex; takes effect on the next key computation."""
        self.s_start = s_start

    def change_vertex(self, v: Vertex):
        """
        Repair the cost field after v's walkability changed.

        Call once per changed vertex. Does nothing before find_path.

        Args:
            v: Vertex whose walkability was toggled
        """
        if not self.has_session:
            return
        self._advance_km()
        self._reset_rhs(v)
        self.compute_shortest_path()
        logger.debug(f"Replanned after change at {v.pos}: g(start)={format_cost(self.s_start.g_cost)}")

    def change_vertices(self, vertices: Iterable[Vertex]):
        """
        Batched change_vertex: one k_m update and one recomputation for all.

        Args:
            vertices: Vertices whose walkability changed
        """
        if not self.has_session:
            return
        vertices = list(vertices)
        if not vertices:
            return
        self._advance_km()
        for v in vertices:
            self._reset_rhs(v)
        self.compute_shortest_path()
        logger.debug(
            f"Replanned after {len(vertices)} changes: g(start)={format_cost(self.s_start.g_cost)}"
        )

    def calculate_key(self, v: Vertex) -> Key:
        """
        Calculate priority key for a vertex.

        Returns:
            (min(g, rhs) + h(start, v) + k_m, min(g, rhs)), or the
            unreachable key when both costs are unreachable
        """
        goal_distance = min_cost(v.g_cost, v.rhs_cost)
        if goal_distance is None:
            return Key.unreachable()
        return Key(add_costs(goal_distance, self.grid.heuristic(self.s_start, v), self.k_m), goal_distance)

    def update_vertex(self, v: Vertex):
        """
        Sync v's queue membership with its local consistency.

        Args:
            v: Vertex whose g or rhs may have changed
        """
        if v.g_cost != v.rhs_cost and v in self.U:
            self.U.update(v, self.calculate_key(v))
        elif v.g_cost != v.rhs_cost and v not in self.U:
            self.U.insert(v, self.calculate_key(v))
        elif v.g_cost == v.rhs_cost and v in self.U:
            self.U.remove(v)

        v.update_display(self.grid.heuristic(self.s_start, v), self.calculate_key(v).k1)
        self._emit(self._vertex_updated, v.snapshot())

    def compute_rhs(self, v: Vertex) -> Optional[int]:
        """One-step lookahead: 0 at the goal, else min over neighbors of g(u) + c(v, u)."""
        if v == self.s_goal:
            return 0

        rhs = None
        for neighbor in self.grid.neighbors(v):
            if neighbor.g_cost is not None:
                rhs = min_cost(rhs, neighbor.g_cost + self.grid.edge_cost(v, neighbor))
        return rhs

    def compute_shortest_path(self):
        """
        Process the queue until the start vertex is consistent and no queued
        key is below its key.
        """
        expansions = 0
        while not self.U.empty and (
            self.U.top_key() < self.calculate_key(self.s_start)
            or self.s_start.g_cost != self.s_start.rhs_cost
        ):
            u = self.U.top()
            k_old = self.U.top_key()
            k_new = self.calculate_key(u)

            if k_old < k_new:
                self.U.update(u, k_new)
            elif cost_less(u.rhs_cost, u.g_cost):
                # locally overconsistent
                u.set_g_cost(u.rhs_cost)
                self._emit(self._g_cost_changed, self._snapshot(u))
                self.U.remove(u)
                for s in self.grid.neighbors(u):
                    s.set_rhs_cost(min_cost(s.rhs_cost, u.g_cost + self.grid.edge_cost(u, s)))
                    self.update_vertex(s)
            else:
                # locally underconsistent
                g_old = u.g_cost
                u.set_g_cost(None)
                self._emit(self._g_cost_changed, self._snapshot(u))
                for s in self.grid.neighbors(u):
                    if s.rhs_cost is not None and s.rhs_cost == add_costs(g_old, self.grid.edge_cost(u, s)):
                        s.set_rhs_cost(self.compute_rhs(s))
                    self.update_vertex(s)
                self.update_vertex(u)
            expansions += 1

        logger.debug(f"compute_shortest_path finished after {expansions} iterations")

    def _advance_km(self):
        self.k_m += self.grid.heuristic(self.s_last, self.s_start)
        self._emit(self._km_changed, self.k_m)
        self.s_last = self.s_start

    def _reset_rhs(self, v: Vertex):
        v.set_rhs_cost(self.compute_rhs(v) if v.is_walkable else None)
        self.update_vertex(v)

    def _snapshot(self, v: Vertex) -> VertexSnapshot:
        return VertexSnapshot(
            x=v.x,
            y=v.y,
            is_walkable=v.is_walkable,
            g_cost=v.g_cost,
            rhs_cost=v.rhs_cost,
            h_cost=self.grid.heuristic(self.s_start, v),
            k1_cost=self.calculate_key(v).k1
        )

    @staticmethod
    def _emit(listeners, payload):
        for listener in list(listeners):
            listener(payload)
