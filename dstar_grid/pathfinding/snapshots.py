"""
Queue of vertex snapshots for replaying a search step by step.
"""

import logging
from collections import deque
from typing import Callable, Deque, List, Optional

from .d_star_lite import DStarLite
from .vertex import VertexSnapshot

logger = logging.getLogger(__name__)


class SnapshotRecorder:
    """
    Collects planner snapshots in emission order.

    Cleared whenever the grid resets, i.e. at the start of each find_path.
    """

    def __init__(self, planner: DStarLite):
        self.snapshots: Deque[VertexSnapshot] = deque()
        self.km_history: List[int] = []
        self._unsubscribe: List[Callable[[], None]] = [
            planner.subscribe_vertex_updated(self.snapshots.append),
            planner.subscribe_g_cost_changed(self.snapshots.append),
            planner.subscribe_km_changed(self.km_history.append),
            planner.grid.subscribe_reset(self.clear),
        ]

    def __len__(self) -> int:
        return len(self.snapshots)

    def next_snapshot(self) -> Optional[VertexSnapshot]:
        """Oldest unseen snapshot, or None when caught up."""
        if not self.snapshots:
            return None
        return self.snapshots.popleft()

    def clear(self):
        self.snapshots.clear()
        self.km_history.clear()

    def close(self):
        """Stop recording."""
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        logger.debug("Snapshot recorder detached")
