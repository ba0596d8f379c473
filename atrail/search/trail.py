"""Trail extraction from a complete transition assignment."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Trail:
    """A closed trail through every edge of a rotation graph.

    Attributes
    ----------
    edges : tuple of int
        Edge indices in traversal order; each edge appears once.
    vertices : tuple of int
        Vertices visited, starting and ending at the same vertex, so that
        ``edges[k]`` joins ``vertices[k]`` and ``vertices[k + 1]``.
    """

    edges: tuple
    vertices: tuple

    def __len__(self):
        return len(self.edges)

    @property
    def start(self):
        return self.vertices[0]

    def replay(self, graph):
        """Walk ``edges`` through ``graph`` and return the vertices visited.

        Raises
        ------
        ValueError
            If consecutive edges do not share a vertex.
        """
        current = self.vertices[0]
        visited = [current]
        for e in self.edges:
            u, v = graph.endpoints(e)
            if current == u:
                current = v
            elif current == v:
                current = u
            else:
                raise ValueError(f"Edge {e} ({u}, {v}) does not touch vertex {current}")
            visited.append(current)
        return tuple(visited)


def extract_trail(graph, partner):
    """Follow the committed transitions once around the graph.

    The walk leaves the first slot of edge 0, crosses each edge to its other
    slot and continues through the transition paired with it, until it comes
    back to the starting slot.

    Parameters
    ----------
    graph : RotationGraph
        Graph the transitions belong to.
    partner : sequence of int
        For every slot, the slot it is paired with.

    Returns
    -------
    Trail
        The closed trail.

    Raises
    ------
    ValueError
        If a slot is unpaired or the transitions do not form a single cycle.
    """
    start = graph.edge_slots(0)[0]
    edges = []
    vertices = [graph.slot_vertex[start]]
    slot = start
    while True:
        edges.append(graph.slot_edge[slot])
        arrival = graph.other_slot(slot)
        vertices.append(graph.slot_vertex[arrival])
        slot = partner[arrival]
        if slot < 0:
            raise ValueError(f"Slot {arrival} has no committed transition")
        if slot == start:
            break
        if len(edges) > graph.n_edges:
            raise ValueError("Transitions do not close into a single cycle")

    if len(edges) != graph.n_edges:
        raise ValueError(
            f"Trail covers {len(edges)} of {graph.n_edges} edges; "
            "the transitions split into several cycles"
        )
    return Trail(edges=tuple(edges), vertices=tuple(vertices))
