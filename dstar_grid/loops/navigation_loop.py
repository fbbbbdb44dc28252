"""
Navigation loop driving a discrete agent with D* Lite.

Each tick reports the agent's cell to the planner and moves it one cell
down the cost gradient. Obstacle changes are fed in between ticks.
"""

import logging
import time
from typing import List, Optional, Tuple

import numpy as np

from ..pathfinding.d_star_lite import DStarLite
from ..pathfinding.grid import UNOCCUPIED
from ..pathfinding.vertex import Vertex

logger = logging.getLogger(__name__)


class NavigationLoop:
    """
    Synchronous control loop owning one agent on a planner's grid.
    The planner is injected; the loop never creates its own.
    """

    def __init__(self, planner: DStarLite, start: Tuple[int, int], max_steps: int = 0):
        """
        Initialize navigation loop.

        Args:
            planner: DStarLite instance bound to the grid
            start: Agent's starting cell (x, y)
            max_steps: Step bound for run(); 0 means width * height
        """
        self.planner = planner
        self.grid = planner.grid
        self.agent: Vertex = self.grid.get_vertex(*start)
        self.goal: Optional[Vertex] = None
        self.next: Optional[Vertex] = None
        self.max_steps = max_steps or self.grid.width * self.grid.height

        self.path: List[Tuple[int, int]] = [self.agent.pos]

        # Statistics
        self.total_replans = 0
        self.total_cells_changed = 0
        self.total_steps = 0
        self.last_replan_time = 0.0

        logger.info(f"Navigation loop initialized: agent at {start}, max {self.max_steps} steps")

    @property
    def arrived(self) -> bool:
        return self.goal is not None and self.agent == self.goal

    def set_goal(self, cell: Tuple[int, int]) -> bool:
        """
        Start a new search towards cell.

        Returns:
            False (and no search) if the agent's cell or the goal is blocked
        """
        goal = self.grid.get_vertex(*cell)
        if not (self.agent.is_walkable and goal.is_walkable):
            logger.warning(f"Cannot plan from {self.agent.pos} to {goal.pos}: endpoint blocked")
            return False

        self.goal = goal
        self.next = None
        self.path = [self.agent.pos]
        self.planner.find_path(self.agent, goal)
        self.total_replans += 1
        self.last_replan_time = time.time()
        logger.info(f"Finding path from {self.agent.pos} to {goal.pos}")
        return True

    def toggle_cell(self, cell: Tuple[int, int]) -> bool:
        """
        Flip a cell between free and blocked and replan.

        The agent's next step and the goal cannot be toggled.

        Returns:
            True if the cell was toggled
        """
        vertex = self.grid.get_vertex(*cell)
        if vertex == self.next or vertex == self.goal:
            logger.debug(f"Refusing to toggle {vertex.pos}: next step or goal")
            return False

        vertex.set_walkable(not vertex.is_walkable)
        self.planner.change_vertex(vertex)
        self._count_replan(1)
        return True

    def apply_occupancy(self, occupancy: np.ndarray) -> List[Tuple[int, int]]:
        """
        Update the grid from an occupancy map and replan once.

        Args:
            occupancy: Array of shape (width, height), UNOCCUPIED (0) = free

        Returns:
            List of changed grid cells (x, y)
        """
        occupancy = np.asarray(occupancy)
        expected = (self.grid.width, self.grid.height)
        if occupancy.shape != expected:
            raise ValueError(f"Occupancy data shape {occupancy.shape} doesn't match grid shape {expected}")

        walkable = occupancy == UNOCCUPIED
        changed_mask = walkable != self.grid.walkability_map()
        changed = [(int(x), int(y)) for (x, y) in zip(*changed_mask.nonzero())]
        if not changed:
            return []

        vertices = [self.grid.get_vertex(x, y) for (x, y) in changed]
        for vertex in vertices:
            vertex.set_walkable(bool(walkable[vertex.x, vertex.y]))

        self.planner.change_vertices(vertices)
        self._count_replan(len(changed))
        logger.info(f"Replanned after {len(changed)} map changes")
        return changed

    def tick(self) -> Optional[Tuple[int, int]]:
        """
        Advance the agent by one cell.

        Returns:
            New agent cell, or None if there is no goal, the goal is reached,
            or no path exists
        """
        if self.goal is None or self.arrived:
            return None

        self.planner.update_agent_position(self.agent)
        self.next = self.planner.find_next(self.agent)
        if self.next is None:
            logger.warning(f"No path to goal from {self.agent.pos}")
            return None

        self.agent = self.next
        self.planner.update_agent_position(self.agent)
        self.path.append(self.agent.pos)
        self.total_steps += 1
        logger.debug(f"Agent moved to {self.agent.pos}")

        if self.arrived:
            logger.info("Reached goal!")
        return self.agent.pos

    def run(self, max_steps: Optional[int] = None) -> List[Tuple[int, int]]:
        """
        Tick until arrival, no path, or the step bound.

        Returns:
            Cells visited so far, starting with the initial cell
        """
        limit = self.max_steps if max_steps is None else max_steps
        for _ in range(limit):
            if self.tick() is None:
                break
        return list(self.path)

    def get_stats(self) -> dict:
        """Get navigation loop statistics."""
        return {
            "agent": self.agent.pos,
            "goal": self.goal.pos if self.goal is not None else None,
            "arrived": self.arrived,
            "path_cost": self.agent.g_cost,
            "k_m": self.planner.k_m,
            "total_replans": self.total_replans,
            "total_cells_changed": self.total_cells_changed,
            "total_steps": self.total_steps,
            "last_replan_time": self.last_replan_time,
            "grid_size": f"{self.grid.width}x{self.grid.height}",
            "obstacle_count": self.grid.get_obstacle_count()
        }

    def reset(self):
        """Drop the goal and the walked path; the agent stays where it is."""
        self.goal = None
        self.next = None
        self.path = [self.agent.pos]
        logger.info("Navigation loop reset")

    def _count_replan(self, cells: int):
        self.total_cells_changed += cells
        self.total_replans += 1
        self.last_replan_time = time.time()
