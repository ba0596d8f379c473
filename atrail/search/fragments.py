"""Fragment tracker: union-find with rollback over the edges of a graph.

Committed transitions chain edges into fragments. An open fragment is a path
whose two free ends are rotation slots without a transition yet; a closed
fragment is a cycle. The tracker merges fragments by size without path
compression and logs each link, so any number of links can be undone in
reverse order at constant cost.
"""

_MERGE = "merge"
_CLOSE = "close"


class LinkError(Exception):
    """Signal raised by the tracker to make the search backtrack."""


class PrematureCycle(LinkError):
    """Linking two ends of one fragment would close a cycle too early."""


class AlreadyLinked(LinkError):
    """A slot already carries a committed transition."""


class FragmentTracker:
    """Fragments of the edge set under a partial transition assignment.

    Parameters
    ----------
    graph : RotationGraph
        Graph whose edges are tracked. Initially every edge is an open
        fragment on its own, its free ends being its two slots.
    """

    def __init__(self, graph):
        self.graph = graph
        n_edges = graph.n_edges
        self._parent = list(range(n_edges))
        self._size = [1] * n_edges
        self._ends = [graph.edge_slots(e) for e in range(n_edges)]
        self._closed = [False] * n_edges
        self._partner = [-1] * graph.n_slots
        self._log = []
        self.n_fragments = n_edges

    @property
    def n_links(self):
        """Number of committed transitions."""
        return len(self._log)

    def fragment(self, edge):
        """Representative edge of the fragment containing ``edge``."""
        while self._parent[edge] != edge:
            edge = self._parent[edge]
        return edge

    def endpoints(self, edge):
        """Free slots of the fragment containing ``edge``, None once closed."""
        root = self.fragment(edge)
        if self._closed[root]:
            return None
        return self._ends[root]

    def fragment_size(self, edge):
        return self._size[self.fragment(edge)]

    def partner(self, slot):
        """Slot paired with ``slot`` by a committed transition, or -1."""
        return self._partner[slot]

    def partners(self):
        return tuple(self._partner)

    def link(self, a, b):
        """Commit the transition pairing slots ``a`` and ``b``.

        Raises
        ------
        AlreadyLinked
            If either slot is already paired, or ``a == b``.
        PrematureCycle
            If both slots end the same fragment and it does not contain every
            edge yet.
        ValueError
            If the slots belong to different vertices.
        """
        graph = self.graph
        if a == b or self._partner[a] != -1 or self._partner[b] != -1:
            raise AlreadyLinked(f"Slot {a} or {b} is already linked")
        if graph.slot_vertex[a] != graph.slot_vertex[b]:
            raise ValueError(
                f"Slots {a} and {b} lie on different vertices "
                f"({graph.slot_vertex[a]} and {graph.slot_vertex[b]})"
            )

        root_a = self.fragment(graph.slot_edge[a])
        root_b = self.fragment(graph.slot_edge[b])
        if root_a == root_b:
            if self._size[root_a] != graph.n_edges:
                raise PrematureCycle(
                    f"Linking slots {a} and {b} closes a cycle of "
                    f"{self._size[root_a]} out of {graph.n_edges} edges"
                )
            self._closed[root_a] = True
            self._log.append((_CLOSE, a, b, root_a, None))
        else:
            if self._size[root_a] < self._size[root_b]:
                root_a, root_b = root_b, root_a
                a, b = b, a
            kept_ends = self._ends[root_a]
            new_ends = (_other(kept_ends, a), _other(self._ends[root_b], b))
            self._parent[root_b] = root_a
            self._size[root_a] += self._size[root_b]
            self._ends[root_a] = new_ends
            self.n_fragments -= 1
            self._log.append((_MERGE, a, b, root_a, (root_b, kept_ends)))

        self._partner[a] = b
        self._partner[b] = a

    def undo_link(self, a, b):
        """Undo the most recent link, which must pair ``a`` and ``b``."""
        if not self._log:
            raise RuntimeError("No committed transition to undo")
        kind, la, lb, root, merged = self._log[-1]
        if {la, lb} != {a, b}:
            raise RuntimeError(
                f"Undo of ({a}, {b}) out of order; last link was ({la}, {lb})"
            )
        self._log.pop()
        if kind == _CLOSE:
            self._closed[root] = False
        else:
            root_b, kept_ends = merged
            self._parent[root_b] = root_b
            self._size[root] -= self._size[root_b]
            self._ends[root] = kept_ends
            self.n_fragments += 1
        self._partner[a] = -1
        self._partner[b] = -1

    def is_complete(self):
        """True when the edges form a single closed cycle."""
        if self.n_fragments != 1 or self.graph.n_edges == 0:
            return False
        return self._closed[self.fragment(0)]


def _other(ends, slot):
    first, second = ends
    if slot == first:
        return second
    if slot == second:
        return first
    raise AlreadyLinked(f"Slot {slot} is not a free end of its fragment")
