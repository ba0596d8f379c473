"""Readers and writers for the file formats of the pipeline.

PLY (ascii) meshes, dimacs graphs, rotation codes (``.vcode`` lists adjacent
vertices, ``.ecode`` lists incident edges, one line per vertex) and trail
files (``.trail`` edge sequence, ``.ntrail`` vertex sequence).
"""

import os

import networkx as nx
import numpy as np

from .search.graph import InvalidInput


def default_output(filename, extension):
    """Replace the extension of ``filename`` with ``extension``."""
    return os.path.splitext(filename)[0] + extension


def read_ply(filename):
    """Read an ascii PLY mesh.

    Only the first three columns of each vertex line (the position) are
    used; face lines are ``k i_0 ... i_{k-1}`` with zero-based indices.

    Parameters
    ----------
    filename : str
        Path to the PLY file.

    Returns
    -------
    vertices : ndarray of shape (n_vertices, 3)
        Vertex coordinates.
    faces : list of list of int
        Vertex indices of each face, in file order.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file is not an ascii PLY or is truncated.
    """
    if not os.path.exists(filename):
        raise FileNotFoundError(f"PLY file not found: {filename}")

    with open(filename, "r") as f:
        lines = f.read().splitlines()

    if not lines or not lines[0].startswith("ply"):
        raise ValueError(f"{filename} is not a PLY file")

    n_vertices = None
    n_faces = None
    idx = 1
    while idx < len(lines):
        line = lines[idx].strip()
        idx += 1
        if line.startswith("format"):
            parts = line.split()
            if len(parts) < 2 or parts[1] != "ascii":
                raise ValueError(f"{filename} is not in ascii PLY format")
        elif line.startswith("element vertex"):
            n_vertices = int(line.split()[2])
        elif line.startswith("element face"):
            n_faces = int(line.split()[2])
        elif line == "end_header":
            break
    else:
        raise ValueError(f"{filename} has no end_header line")

    if n_vertices is None or n_faces is None:
        raise ValueError(f"{filename} does not declare vertex and face elements")

    body = [line for line in lines[idx:] if line.strip()]
    if len(body) < n_vertices + n_faces:
        raise ValueError(
            f"{filename} is truncated: expected {n_vertices} vertex and "
            f"{n_faces} face lines, found {len(body)} lines"
        )

    vertices = np.zeros((n_vertices, 3))
    for i, line in enumerate(body[:n_vertices]):
        values = line.split()
        if len(values) < 3:
            raise ValueError(f"Vertex {i} in {filename} has fewer than 3 coordinates")
        vertices[i] = [float(x) for x in values[:3]]

    faces = []
    for i, line in enumerate(body[n_vertices : n_vertices + n_faces]):
        tokens = [int(t) for t in line.split()]
        count = tokens[0]
        face = tokens[1 : 1 + count]
        if count < 3 or len(face) != count:
            raise ValueError(f"Face {i} in {filename} is malformed: '{line}'")
        if min(face) < 0 or max(face) >= n_vertices:
            raise ValueError(f"Face {i} in {filename} references a missing vertex")
        faces.append(face)

    print(f"Number of vertices: {n_vertices}")
    print(f"Number of faces: {n_faces}")
    return vertices, faces


def indexed_edges(G):
    """Edges of ``G`` as ``(u, v)`` pairs, sorted by their ``index`` attribute.

    Edges without an ``index`` keep the iteration order of ``G``.
    """
    edges = list(G.edges(data="index"))
    if edges and all(index is not None for _, _, index in edges):
        edges.sort(key=lambda edge: edge[2])
    return [(u, v) for u, v, _ in edges]


def read_dimacs(filename):
    """Read a dimacs graph into a multigraph.

    Nodes are renumbered from zero. Each edge gets an ``index`` attribute
    holding its position in the file.

    Parameters
    ----------
    filename : str
        Path to the dimacs file (``p edge n m`` then ``e u v`` lines).

    Returns
    -------
    networkx.MultiGraph
        The graph, parallel edges preserved.
    """
    if not os.path.exists(filename):
        raise FileNotFoundError(f"Dimacs file not found: {filename}")

    G = None
    n_declared = 0
    with open(filename, "r") as f:
        for lineno, line in enumerate(f, 1):
            parts = line.split()
            if not parts or parts[0] == "c":
                continue
            if parts[0] == "p":
                if len(parts) < 4:
                    raise ValueError(f"{filename}:{lineno}: malformed problem line")
                G = nx.MultiGraph()
                G.add_nodes_from(range(int(parts[2])))
                n_declared = int(parts[3])
            elif parts[0] == "e":
                if G is None:
                    raise ValueError(f"{filename}:{lineno}: edge before problem line")
                u, v = int(parts[1]) - 1, int(parts[2]) - 1
                if not (0 <= u < len(G) and 0 <= v < len(G)):
                    raise ValueError(
                        f"{filename}:{lineno}: edge ({u + 1}, {v + 1}) "
                        f"out of range for {len(G)} vertices"
                    )
                G.add_edge(u, v, index=G.number_of_edges())
            else:
                raise ValueError(f"{filename}:{lineno}: unknown line type '{parts[0]}'")

    if G is None:
        raise ValueError(f"{filename} has no problem line")
    if G.number_of_edges() != n_declared:
        print(
            f"Warning: {filename} declares {n_declared} edges "
            f"but lists {G.number_of_edges()}"
        )
    return G


def write_dimacs(filename, G):
    """Write a graph or multigraph in dimacs format with one-based nodes."""
    edges = indexed_edges(G)
    with open(filename, "w") as f:
        f.write(f"p edge {G.number_of_nodes()} {len(edges)}\n")
        for u, v in edges:
            f.write(f"e {u + 1} {v + 1}\n")
    return filename


def read_edge_code(filename):
    """Read a rotation code, one line of integers per vertex.

    An optional ``p <n>`` header line is accepted and checked against the
    number of vertex lines. A blank line stands for an isolated vertex.
    Without a header, leading and trailing blank lines are dropped. With a
    header, every line after it counts and only blank lines past the
    declared count are dropped.

    Raises
    ------
    InvalidInput
        If a token is not an integer or the header count does not match.
    """
    if not os.path.exists(filename):
        raise FileNotFoundError(f"Rotation code file not found: {filename}")

    code = []
    declared = None
    with open(filename, "r") as f:
        for lineno, line in enumerate(f, 1):
            parts = line.split()
            if not parts and not code and declared is None:
                continue
            if parts and parts[0] == "p":
                if code or declared is not None or len(parts) != 2:
                    raise InvalidInput(f"{filename}:{lineno}: unexpected header line")
                try:
                    declared = int(parts[1])
                except ValueError as e:
                    raise InvalidInput(f"{filename}:{lineno}: {e}") from e
                continue
            try:
                code.append([int(token) for token in parts])
            except ValueError as e:
                raise InvalidInput(f"{filename}:{lineno}: {e}") from e

    if declared is None:
        while code and not code[-1]:
            code.pop()
        return code

    while len(code) > declared and not code[-1]:
        code.pop()
    if declared != len(code):
        raise InvalidInput(
            f"{filename} declares {declared} vertices but has {len(code)} lines"
        )
    return code


def write_edge_code(filename, code, header=False):
    """Write a rotation code, optionally preceded by a ``p <n>`` header."""
    with open(filename, "w") as f:
        if header:
            f.write(f"p {len(code)}\n")
        for rotation in code:
            f.write(" ".join(str(int(x)) for x in rotation) + "\n")
    return filename


def write_trail(filename, sequence):
    """Write a trail as whitespace separated indices."""
    with open(filename, "w") as f:
        f.write(" ".join(str(int(x)) for x in sequence) + "\n")
    return filename


def read_trail(filename):
    """Read a ``.trail`` or ``.ntrail`` file into a list of indices."""
    with open(filename, "r") as f:
        return [int(token) for token in f.read().split()]
