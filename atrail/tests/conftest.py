"""Shared pytest fixtures for atrail tests."""

import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")

# Octahedron with outward (counter-clockwise) faces: every vertex has degree 4
OCTAHEDRON_VERTICES = [
    [1.0, 0.0, 0.0],
    [-1.0, 0.0, 0.0],
    [0.0, 1.0, 0.0],
    [0.0, -1.0, 0.0],
    [0.0, 0.0, 1.0],
    [0.0, 0.0, -1.0],
]
OCTAHEDRON_FACES = [
    [4, 0, 2],
    [4, 2, 1],
    [4, 1, 3],
    [4, 3, 0],
    [5, 2, 0],
    [5, 1, 2],
    [5, 3, 1],
    [5, 0, 3],
]

# Tetrahedron with outward faces: every vertex has degree 3
TETRAHEDRON_VERTICES = [
    [0.0, 0.0, 0.0],
    [1.0, 0.0, 0.0],
    [0.0, 1.0, 0.0],
    [0.0, 0.0, 1.0],
]
TETRAHEDRON_FACES = [[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]]


def write_ply(path, vertices, faces):
    """Write an ascii PLY file and return its path as a string."""
    lines = [
        "ply",
        "format ascii 1.0",
        "comment generated for tests",
        f"element vertex {len(vertices)}",
        "property float x",
        "property float y",
        "property float z",
        f"element face {len(faces)}",
        "property list uchar int vertex_indices",
        "end_header",
    ]
    lines += [" ".join(str(x) for x in v) for v in vertices]
    lines += [" ".join(str(i) for i in [len(f)] + list(f)) for f in faces]
    path.write_text("\n".join(lines) + "\n")
    return str(path)


def icosphere_mesh(subdivisions):
    """Unit icosphere: an icosahedron with each face split into four per level."""
    t = (1.0 + 5.0**0.5) / 2.0
    vertices = [
        [-1, t, 0], [1, t, 0], [-1, -t, 0], [1, -t, 0],
        [0, -1, t], [0, 1, t], [0, -1, -t], [0, 1, -t],
        [t, 0, -1], [t, 0, 1], [-t, 0, -1], [-t, 0, 1],
    ]  # fmt: skip
    faces = [
        [0, 11, 5], [0, 5, 1], [0, 1, 7], [0, 7, 10], [0, 10, 11],
        [1, 5, 9], [5, 11, 4], [11, 10, 2], [10, 7, 6], [7, 1, 8],
        [3, 9, 4], [3, 4, 2], [3, 2, 6], [3, 6, 8], [3, 8, 9],
        [4, 9, 5], [2, 4, 11], [6, 2, 10], [8, 6, 7], [9, 8, 1],
    ]  # fmt: skip
    vertices = [np.array(v, dtype=float) for v in vertices]

    for _ in range(subdivisions):
        midpoints = {}

        def midpoint(a, b):
            key = (min(a, b), max(a, b))
            if key not in midpoints:
                midpoints[key] = len(vertices)
                vertices.append((vertices[a] + vertices[b]) / 2.0)
            return midpoints[key]

        refined = []
        for a, b, c in faces:
            ab, bc, ca = midpoint(a, b), midpoint(b, c), midpoint(c, a)
            refined += [[a, ab, ca], [b, bc, ab], [c, ca, bc], [ab, bc, ca]]
        faces = refined

    vertices = np.array(vertices)
    vertices /= np.linalg.norm(vertices, axis=1, keepdims=True)
    return vertices, faces


@pytest.fixture
def octahedron():
    """Vertex coordinates and faces of a regular octahedron."""
    return np.array(OCTAHEDRON_VERTICES), [list(f) for f in OCTAHEDRON_FACES]


@pytest.fixture
def tetrahedron():
    """Vertex coordinates and faces of a tetrahedron."""
    return np.array(TETRAHEDRON_VERTICES), [list(f) for f in TETRAHEDRON_FACES]


@pytest.fixture
def octahedron_ply(tmp_path):
    """Path to an ascii PLY file holding the octahedron."""
    return write_ply(tmp_path / "octahedron.ply", OCTAHEDRON_VERTICES, OCTAHEDRON_FACES)


@pytest.fixture
def tetrahedron_ply(tmp_path):
    """Path to an ascii PLY file holding the tetrahedron."""
    return write_ply(
        tmp_path / "tetrahedron.ply", TETRAHEDRON_VERTICES, TETRAHEDRON_FACES
    )


@pytest.fixture
def four_cycle_code():
    """Edge code of the cycle 0-1-2-3-0, edge i joining i and i+1."""
    return [[0, 3], [0, 1], [1, 2], [2, 3]]


@pytest.fixture
def two_triangles_code():
    """Edge code of two triangles joined by two parallel edges.

    Triangle 0-1-2 uses edges 0, 1, 2 and triangle 3-4-5 uses edges 3, 4, 5;
    edges 6 and 7 both join vertices 0 and 3.
    """
    return [
        [0, 2, 6, 7],
        [0, 1],
        [1, 2],
        [3, 5, 7, 6],
        [3, 4],
        [4, 5],
    ]


@pytest.fixture
def straight_through():
    """Pins vertex 0 of ``two_triangles_code`` so its triangle closes on itself."""
    return {0: [(0, 1), (2, 3)]}


@pytest.fixture
def ply_writer(tmp_path):
    """Factory writing ``(vertices, faces)`` to a PLY file under ``tmp_path``."""

    def _write(name, vertices, faces):
        return write_ply(tmp_path / name, vertices, faces)

    return _write


@pytest.fixture
def icosphere():
    """Icosphere with 162 vertices, twelve of them of degree 5."""
    return icosphere_mesh(2)
