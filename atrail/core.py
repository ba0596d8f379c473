"""Core pipeline stages: from a mesh to an Eulerian rotation system."""

from collections import Counter

import networkx as nx
import numpy as np
from scipy.sparse.csgraph import shortest_path
from tqdm import tqdm

from .formats import indexed_edges


def mesh_to_graph(n_vertices, faces):
    """
    Build the graph of a polygon mesh.

    Every boundary segment of every face becomes an edge; segments shared by
    several faces are added once. Edges are indexed by first appearance.

    Parameters
    ----------
    n_vertices : int
        Number of mesh vertices.
    faces : iterable of sequence of int
        Vertex indices of each face.

    Returns
    -------
    networkx.MultiGraph
        Graph on nodes ``0..n_vertices-1`` with an ``index`` on every edge.
    """
    G = nx.MultiGraph()
    G.add_nodes_from(range(n_vertices))
    seen = set()
    for face in faces:
        face = [int(v) for v in face]
        for a, b in zip(face, face[1:] + face[:1]):
            key = (min(a, b), max(a, b))
            if a == b or key in seen:
                continue
            seen.add(key)
            G.add_edge(a, b, index=G.number_of_edges())
    return G


def mesh_to_embedding(n_vertices, faces):
    """
    Read the rotation of every vertex off the faces of an oriented mesh.

    Each face contributes, at each of its corners, the pair of neighbours
    before and after the corner vertex. Chaining these pairs walks around the
    vertex; at a boundary vertex the fan is open and is completed backwards.

    Parameters
    ----------
    n_vertices : int
        Number of mesh vertices.
    faces : iterable of sequence of int
        Consistently oriented faces.

    Returns
    -------
    list of list of int
        For each vertex, its adjacent vertices in cyclic order (a vcode).

    Raises
    ------
    ValueError
        If the faces around a vertex are not a single consistently oriented
        fan (non-manifold vertex or flipped face).
    """
    corners = [[] for _ in range(n_vertices)]
    for face in faces:
        face = [int(v) for v in face]
        k = len(face)
        for j, v in enumerate(face):
            corners[v].append((face[j - 1], face[(j + 1) % k]))

    vcode = []
    for v, pairs in enumerate(corners):
        if not pairs:
            vcode.append([])
            continue
        forward = {}
        backward = {}
        for back, forw in pairs:
            if back in forward or forw in backward:
                raise ValueError(
                    f"Faces around vertex {v} are not consistently oriented "
                    "or the vertex is not manifold"
                )
            forward[back] = forw
            backward[forw] = back
        n_neighbours = len(set(forward) | set(backward))

        rotation = list(pairs[0])
        while rotation[-1] in forward and forward[rotation[-1]] != rotation[0]:
            rotation.append(forward[rotation[-1]])
            if len(rotation) > n_neighbours:
                raise ValueError(f"Vertex {v} is not manifold")
        while len(rotation) < n_neighbours:
            previous = backward.get(rotation[0])
            if previous is None or previous in rotation:
                raise ValueError(f"Vertex {v} is not manifold")
            rotation.insert(0, previous)
        vcode.append(rotation)
    return vcode


def _cyclic_run(rotation, target):
    """First and last index of the cyclic run of entries pointing at ``target``."""
    n = len(rotation)
    hits = [k for k, (w, _) in enumerate(rotation) if w == target]
    if not hits:
        return None
    if len(hits) == n:
        return 0, n - 1
    first = next(k for k in hits if rotation[k - 1][0] != target)
    last = next(k for k in hits if rotation[(k + 1) % n][0] != target)
    return first, last


def make_embedding_eulerian(vcode, G):
    """
    Turn a vertex rotation and a multigraph into an edge rotation.

    The first copy of every edge takes the place of the neighbour in the
    vertex rotation. Further parallel copies are laid next to it: before the
    existing copies at the lower endpoint and after them at the higher one,
    so that the copies nest without crossing.

    Parameters
    ----------
    vcode : list of list of int
        Rotation of adjacent vertices at every vertex (each neighbour once).
    G : networkx.MultiGraph
        Graph on the same vertices; edge ``i`` is the ``i``-th edge in
        ``index`` order.

    Returns
    -------
    list of list of int
        The edge code.

    Raises
    ------
    ValueError
        If the graph has a self-loop, or an edge or a rotation entry has no
        counterpart in the other input.
    """
    if len(vcode) != G.number_of_nodes():
        raise ValueError(
            f"Rotation has {len(vcode)} vertices but the graph has "
            f"{G.number_of_nodes()}"
        )
    rotation = [[[w, None] for w in neighbours] for neighbours in vcode]

    for e, (u, v) in enumerate(indexed_edges(G)):
        if u == v:
            raise ValueError(f"Edge {e} is a self-loop at vertex {u}")
        s, t = min(u, v), max(u, v)
        run_s = _cyclic_run(rotation[s], t)
        run_t = _cyclic_run(rotation[t], s)
        if run_s is None or run_t is None:
            raise ValueError(f"Edge {e} ({s}, {t}) is missing from the rotation")
        first, _ = run_s
        _, last = run_t
        if rotation[s][first][1] is None:
            rotation[s][first][1] = e
            rotation[t][last][1] = e
        else:
            rotation[s].insert(first if first > 0 else len(rotation[s]), [t, e])
            rotation[t].insert(last + 1, [s, e])

    ecode = []
    for v, entries in enumerate(rotation):
        missing = [w for w, e in entries if e is None]
        if missing:
            raise ValueError(
                f"Vertex {v} lists neighbours {missing} that share no edge with it"
            )
        ecode.append([e for _, e in entries])
    return ecode


def planar_vcode(G):
    """Clockwise neighbour order of every vertex in a planar embedding of ``G``.

    Raises
    ------
    ValueError
        If the graph is not planar or has self-loops.
    """
    if nx.number_of_selfloops(G) > 0:
        raise ValueError("Cannot embed a graph with self-loops")
    is_planar, embedding = nx.check_planarity(nx.Graph(G))
    if not is_planar:
        raise ValueError("The graph is not planar")
    return [
        list(embedding.neighbors_cw_order(v)) if embedding.degree(v) else []
        for v in range(G.number_of_nodes())
    ]


def embed_planar(G):
    """
    Compute a planar embedding of a graph as an edge code.

    Parameters
    ----------
    G : networkx.Graph or networkx.MultiGraph
        Graph without self-loops. Parallel edges are embedded side by side.

    Returns
    -------
    list of list of int
        Clockwise edge rotation of every vertex.

    Raises
    ------
    ValueError
        If the graph is not planar or has self-loops.
    """
    return make_embedding_eulerian(planar_vcode(G), G)


def is_even(G):
    """Whether every vertex of ``G`` has even degree."""
    return all(d % 2 == 0 for _, d in G.degree())


def postman_tour(G, verbose=True):
    """
    Make a connected graph Eulerian by duplicating edges.

    Odd-degree vertices are paired by a minimum weight perfect matching on
    their unit-weight shortest path distances, and each matched path gets
    one more copy of its edges. An edge that already has two copies is
    collapsed to a single copy instead, which changes degrees the same way.

    Parameters
    ----------
    G : networkx.Graph or networkx.MultiGraph
        Connected input graph on nodes ``0..n-1``.
    verbose : bool, optional
        Whether to print progress and show a progress bar.

    Returns
    -------
    networkx.MultiGraph
        Eulerian multigraph with edges re-indexed from zero; original edges
        keep their relative order.

    Raises
    ------
    ValueError
        If the graph is not connected.
    """
    n = G.number_of_nodes()
    simple = nx.Graph(G)
    if n == 0 or not nx.is_connected(simple):
        raise ValueError("The graph is not connected")

    edges = list(indexed_edges(G))
    odd = [v for v in range(n) if G.degree(v) % 2 == 1]

    if odd:
        if verbose:
            print(f"Found {len(odd)} odd degree vertices")
            print("Finding the shortest paths between odd degree vertices ...")
        adjacency = nx.to_scipy_sparse_array(
            simple, nodelist=list(range(n)), weight=None
        )
        dist, predecessors = shortest_path(
            adjacency,
            method="J",
            directed=False,
            unweighted=True,
            return_predecessors=True,
            indices=odd,
        )

        complete = nx.Graph()
        for a in range(len(odd)):
            for b in range(a + 1, len(odd)):
                complete.add_edge(a, b, weight=dist[a, odd[b]])
        if verbose:
            print("Running the min weight matching algorithm ...")
        matching = sorted(
            tuple(sorted(pair)) for pair in nx.min_weight_matching(complete)
        )

        counts = Counter((min(u, v), max(u, v)) for u, v in edges)
        for a, b in tqdm(
            matching, desc="Adding edges along shortest paths", disable=not verbose
        ):
            source = odd[a]
            current = odd[b]
            while current != source:
                previous = int(predecessors[a, current])
                key = (min(current, previous), max(current, previous))
                if counts[key] == 2:
                    edges = [edge for edge in edges if (min(edge), max(edge)) != key]
                    counts[key] = 0
                edges.append((current, previous))
                counts[key] += 1
                current = previous
    elif verbose:
        print("There were no odd degree vertices!")

    multigraph = nx.MultiGraph()
    multigraph.add_nodes_from(range(n))
    for index, (u, v) in enumerate(edges):
        multigraph.add_edge(u, v, index=index)

    if not is_even(multigraph):
        raise RuntimeError("Eulerization left odd degree vertices")
    return multigraph


def mesh_bounds(vertices):
    """Axis-aligned bounding box of mesh vertices as ``(min, max)`` arrays."""
    vertices = np.asarray(vertices, dtype=float)
    return vertices.min(axis=0), vertices.max(axis=0)
