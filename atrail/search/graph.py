"""Rotation graph: an Eulerian multigraph annotated with a rotation system.

The graph is described entirely by its edge code: one rotation per vertex,
listing the incident edge indices in cyclic order. Edge ``i`` joins the two
vertices whose rotations contain ``i`` (twice the same vertex for a loop).
"""

import networkx as nx


class AtrailError(Exception):
    """Base class for errors raised across the search boundary."""


class InvalidInput(AtrailError, ValueError):
    """Raised when an edge code cannot describe an Eulerian rotation graph."""


class RotationGraph:
    """Read-only multigraph with a cyclic edge order at every vertex.

    Each appearance of an edge in a rotation is a *slot*. Slots are numbered
    globally, vertex by vertex, so that the slots of vertex ``v`` are
    ``offset(v) .. offset(v) + degree(v) - 1`` in rotation order.

    Parameters
    ----------
    edge_code : sequence of sequence of int
        Rotation of every vertex as a list of edge indices.

    Raises
    ------
    InvalidInput
        If the code is empty, a vertex is isolated or has odd degree, or the
        edge indices are not ``0..m-1`` each occurring exactly twice.
    """

    def __init__(self, edge_code):
        try:
            rotations = [tuple(int(e) for e in rotation) for rotation in edge_code]
        except (TypeError, ValueError) as e:
            raise InvalidInput(f"Edge code contains a non-integer entry: {e}") from e
        if not rotations:
            raise InvalidInput("Edge code is empty")

        offsets = []
        slot_vertex = []
        slot_edge = []
        slot_position = []
        occurrences = {}
        for v, rotation in enumerate(rotations):
            if len(rotation) == 0:
                raise InvalidInput(f"Vertex {v} has no incident edges")
            if len(rotation) % 2 == 1:
                raise InvalidInput(
                    f"Vertex {v} has odd degree {len(rotation)}; "
                    "the graph must be Eulerian"
                )
            offsets.append(len(slot_vertex))
            for position, e in enumerate(rotation):
                if e < 0:
                    raise InvalidInput(f"Vertex {v} references negative edge {e}")
                occurrences.setdefault(e, []).append(len(slot_vertex))
                slot_vertex.append(v)
                slot_edge.append(e)
                slot_position.append(position)

        n_edges = len(slot_vertex) // 2
        edge_slots = []
        for e in range(n_edges):
            slots = occurrences.get(e, [])
            if len(slots) != 2:
                raise InvalidInput(
                    f"Edge {e} occurs {len(slots)} times in the edge code, expected 2"
                )
            edge_slots.append(tuple(slots))
        if len(occurrences) != n_edges:
            stray = sorted(e for e in occurrences if e >= n_edges)
            raise InvalidInput(
                f"Edge indices {stray} exceed the edge count {n_edges}"
            )

        self.rotations = tuple(rotations)
        self.slot_vertex = tuple(slot_vertex)
        self.slot_edge = tuple(slot_edge)
        self.slot_position = tuple(slot_position)
        self._offsets = tuple(offsets)
        self._edge_slots = tuple(edge_slots)

    @property
    def n_vertices(self):
        return len(self.rotations)

    @property
    def n_edges(self):
        return len(self._edge_slots)

    @property
    def n_slots(self):
        return len(self.slot_vertex)

    def degree(self, v):
        return len(self.rotations[v])

    def offset(self, v):
        """Global id of the first slot of vertex ``v``."""
        return self._offsets[v]

    def slots(self, v):
        """Global slot ids of vertex ``v`` in rotation order."""
        start = self._offsets[v]
        return range(start, start + len(self.rotations[v]))

    def slot(self, v, position):
        """Global slot id of ``position`` in the rotation of ``v``."""
        if not 0 <= position < len(self.rotations[v]):
            raise IndexError(f"Vertex {v} has no rotation position {position}")
        return self._offsets[v] + position

    def edge_slots(self, e):
        """The two slots of edge ``e``, first occurrence first."""
        return self._edge_slots[e]

    def other_slot(self, s):
        """Slot at the opposite end of the edge that owns slot ``s``."""
        first, second = self._edge_slots[self.slot_edge[s]]
        return second if s == first else first

    def endpoints(self, e):
        first, second = self._edge_slots[e]
        return self.slot_vertex[first], self.slot_vertex[second]

    def neighbors(self, v):
        """Vertices adjacent to ``v`` in rotation order (with repeats)."""
        return [self.slot_vertex[self.other_slot(s)] for s in self.slots(v)]

    def to_networkx(self):
        """Return the underlying multigraph keyed by edge index."""
        G = nx.MultiGraph()
        G.add_nodes_from(range(self.n_vertices))
        for e in range(self.n_edges):
            u, v = self.endpoints(e)
            G.add_edge(u, v, key=e, index=e)
        return G

    def is_connected(self):
        return nx.is_connected(self.to_networkx())

    def __repr__(self):
        return (
            f"RotationGraph(n_vertices={self.n_vertices}, n_edges={self.n_edges})"
        )
