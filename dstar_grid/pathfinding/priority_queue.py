"""
Priority queue implementation for D* Lite pathfinding.

An array-backed binary min-heap with a vertex -> index map, giving
O(log n) insert/remove/update and O(1) membership tests.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import DuplicateEntryError, EmptyFrontierError, NotFoundError
from .vertex import Vertex


class Key:
    """
    Lexicographic D* Lite key (k1, k2).

    The unreachable key has k1 = k2 = None and sorts after every finite key.
    """

    __slots__ = ("k1", "k2")

    def __init__(self, k1: Optional[int], k2: Optional[int]):
        """
        Initialize key with two values.

        Args:
            k1: min(g, rhs) + h(start, v) + k_m, or None if unreachable
            k2: min(g, rhs), or None if unreachable
        """
        if (k1 is None) != (k2 is None):
            raise ValueError("Key components must be both finite or both unreachable")
        object.__setattr__(self, "k1", k1)
        object.__setattr__(self, "k2", k2)

    @classmethod
    def unreachable(cls) -> "Key":
        return cls(None, None)

    @property
    def is_unreachable(self) -> bool:
        return self.k1 is None

    def _rank(self) -> Tuple[int, int, int]:
        if self.k1 is None:
            return (1, 0, 0)
        return (0, self.k1, self.k2)

    def __setattr__(self, name, value):
        raise AttributeError("Key is immutable")

    def __lt__(self, other):
        """Lexicographic 'lower than' comparison."""
        if not isinstance(other, Key):
            return NotImplemented
        return self._rank() < other._rank()

    def __le__(self, other):
        """Lexicographic 'lower than or equal' comparison."""
        if not isinstance(other, Key):
            return NotImplemented
        return self._rank() <= other._rank()

    def __gt__(self, other):
        if not isinstance(other, Key):
            return NotImplemented
        return self._rank() > other._rank()

    def __ge__(self, other):
        if not isinstance(other, Key):
            return NotImplemented
        return self._rank() >= other._rank()

    def __eq__(self, other):
        if not isinstance(other, Key):
            return NotImplemented
        return self._rank() == other._rank()

    def __hash__(self):
        return hash(self._rank())

    def __repr__(self):
        if self.is_unreachable:
            return "Key(inf, inf)"
        return f"Key({self.k1}, {self.k2})"


class PriorityNode:
    """Heap entry pairing a vertex with its key."""

    __slots__ = ("vertex", "key")

    def __init__(self, vertex: Vertex, key: Key):
        self.vertex = vertex
        self.key = key

    def __lt__(self, other):
        if not isinstance(other, PriorityNode):
            return NotImplemented
        return self.key < other.key

    def __repr__(self):
        return f"PriorityNode({self.vertex.pos}, {self.key!r})"


class IndexedPriorityQueue:
    """Min-heap of vertices ordered by Key, at most one entry per vertex."""

    def __init__(self, nodes: Optional[Iterable[Tuple[Vertex, Key]]] = None):
        """
        Initialize queue, optionally seeding it.

        Args:
            nodes: (vertex, key) pairs to insert in order

        Raises:
            DuplicateEntryError: if a vertex appears twice in nodes
        """
        self.heap: List[PriorityNode] = []
        self.index: Dict[Vertex, int] = {}
        if nodes is not None:
            for vertex, key in nodes:
                self.insert(vertex, key)

    def __len__(self) -> int:
        return len(self.heap)

    def __contains__(self, vertex: Vertex) -> bool:
        return vertex in self.index

    @property
    def empty(self) -> bool:
        return not self.heap

    def contains(self, vertex: Vertex) -> bool:
        """Check if vertex is in the queue."""
        return vertex in self.index

    def top(self) -> Vertex:
        """Get the vertex with minimum key without removing it."""
        if not self.heap:
            raise EmptyFrontierError("Heap is empty!")
        return self.heap[0].vertex

    def top_key(self) -> Key:
        """Get the minimum key without removing it."""
        if not self.heap:
            raise EmptyFrontierError("Heap is empty!")
        return self.heap[0].key

    def key_of(self, vertex: Vertex) -> Key:
        """Current key of a queued vertex."""
        if vertex not in self.index:
            raise NotFoundError(f"Vertex {vertex} not found!")
        return self.heap[self.index[vertex]].key

    def insert(self, vertex: Vertex, key: Key):
        """Insert vertex with key into heap."""
        if vertex in self.index:
            raise DuplicateEntryError(f"Duplicate Vertex {vertex}!")
        self.heap.append(PriorityNode(vertex, key))
        pos = len(self.heap) - 1
        self.index[vertex] = pos
        self._siftdown(0, pos)

    def pop(self) -> Vertex:
        """Remove and return the vertex with minimum key."""
        vertex = self.top()
        self.remove(vertex)
        return vertex

    def remove(self, vertex: Vertex):
        """Remove a vertex from the heap."""
        if vertex not in self.index:
            raise NotFoundError(f"Vertex {vertex} not found!")

        pos = self.index.pop(vertex)
        lastelt = self.heap.pop()
        if pos < len(self.heap):
            # the displaced last element may need to move either way
            self._place(pos, lastelt)
            self._siftdown(0, pos)
            self._siftup(self.index[lastelt.vertex])

    def update(self, vertex: Vertex, key: Key):
        """Change the key of a queued vertex (increase or decrease)."""
        if vertex not in self.index:
            raise NotFoundError(f"Vertex {vertex} not found!")

        pos = self.index[vertex]
        self.heap[pos].key = key
        self._siftdown(0, pos)
        self._siftup(self.index[vertex])

    def reset(self):
        """Drop every entry."""
        self.heap.clear()
        self.index.clear()

    def items(self) -> List[Tuple[Vertex, Key]]:
        """(vertex, key) pairs in heap array order."""
        return [(node.vertex, node.key) for node in self.heap]

    def _place(self, pos: int, node: PriorityNode):
        self.heap[pos] = node
        self.index[node.vertex] = pos

    def _siftdown(self, startpos: int, pos: int):
        """Move the item at pos toward the root until its parent is not larger."""
        newitem = self.heap[pos]
        while pos > startpos:
            parentpos = (pos - 1) >> 1
            parent = self.heap[parentpos]
            if newitem < parent:
                self._place(pos, parent)
                pos = parentpos
                continue
            break
        self._place(pos, newitem)

    def _siftup(self, pos: int):
        """Move the item at pos toward the leaves, then settle it back up."""
        endpos = len(self.heap)
        startpos = pos
        newitem = self.heap[pos]
        childpos = 2 * pos + 1
        while childpos < endpos:
            rightpos = childpos + 1
            if rightpos < endpos and not self.heap[childpos] < self.heap[rightpos]:
                childpos = rightpos
            self._place(pos, self.heap[childpos])
            pos = childpos
            childpos = 2 * pos + 1
        self._place(pos, newitem)
        self._siftdown(startpos, pos)
