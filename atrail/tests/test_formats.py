"""
Tests for the formats module.
"""

import networkx as nx
import numpy as np
import pytest

from atrail.formats import (
    default_output,
    indexed_edges,
    read_dimacs,
    read_edge_code,
    read_ply,
    read_trail,
    write_dimacs,
    write_edge_code,
    write_trail,
)
from atrail.search.graph import InvalidInput


class TestReadPly:
    """Tests for the ascii PLY reader."""

    def test_octahedron(self, octahedron_ply, octahedron):
        vertices, faces = read_ply(octahedron_ply)
        expected_vertices, expected_faces = octahedron
        assert vertices.shape == (6, 3)
        np.testing.assert_allclose(vertices, expected_vertices)
        assert faces == expected_faces

    def test_prints_counts(self, octahedron_ply, capsys):
        read_ply(octahedron_ply)
        captured = capsys.readouterr()
        assert "Number of vertices: 6" in captured.out
        assert "Number of faces: 8" in captured.out

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_ply(str(tmp_path / "missing.ply"))

    def test_not_a_ply(self, tmp_path):
        path = tmp_path / "mesh.ply"
        path.write_text("OFF\n3 1 0\n")
        with pytest.raises(ValueError, match="not a PLY"):
            read_ply(str(path))

    def test_binary_rejected(self, tmp_path):
        path = tmp_path / "mesh.ply"
        path.write_text(
            "ply\nformat binary_little_endian 1.0\nelement vertex 0\n"
            "element face 0\nend_header\n"
        )
        with pytest.raises(ValueError, match="ascii"):
            read_ply(str(path))

    def test_truncated(self, tmp_path):
        path = tmp_path / "mesh.ply"
        path.write_text(
            "ply\nformat ascii 1.0\nelement vertex 3\nelement face 1\n"
            "end_header\n0 0 0\n1 0 0\n"
        )
        with pytest.raises(ValueError, match="truncated"):
            read_ply(str(path))

    def test_face_out_of_range(self, ply_writer):
        path = ply_writer("bad.ply", [[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1, 5]])
        with pytest.raises(ValueError, match="missing vertex"):
            read_ply(path)

    def test_quads(self, ply_writer):
        path = ply_writer(
            "quad.ply", [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]], [[0, 1, 2, 3]]
        )
        _, faces = read_ply(path)
        assert faces == [[0, 1, 2, 3]]


class TestDimacs:
    """Tests for dimacs reading and writing."""

    def test_read(self, tmp_path):
        path = tmp_path / "graph.dimacs"
        path.write_text("c a triangle with a doubled edge\np edge 3 4\ne 1 2\ne 2 3\ne 3 1\ne 1 2\n")
        G = read_dimacs(str(path))
        assert isinstance(G, nx.MultiGraph)
        assert G.number_of_nodes() == 3
        assert G.number_of_edges() == 4
        assert G.number_of_edges(0, 1) == 2
        assert [tuple(sorted(e)) for e in indexed_edges(G)] == [
            (0, 1),
            (1, 2),
            (0, 2),
            (0, 1),
        ]

    def test_write_read(self, tmp_path):
        G = nx.MultiGraph()
        G.add_nodes_from(range(4))
        for index, (u, v) in enumerate([(0, 1), (1, 2), (2, 3), (3, 0)]):
            G.add_edge(u, v, index=index)
        path = write_dimacs(str(tmp_path / "cycle.dimacs"), G)
        lines = open(path).read().splitlines()
        assert lines[0] == "p edge 4 4"
        assert lines[1] == "e 1 2"
        assert read_dimacs(path).number_of_edges() == 4

    def test_edge_count_mismatch_warns(self, tmp_path, capsys):
        path = tmp_path / "graph.dimacs"
        path.write_text("p edge 2 3\ne 1 2\n")
        G = read_dimacs(str(path))
        assert G.number_of_edges() == 1
        assert "Warning" in capsys.readouterr().out

    def test_edge_out_of_range(self, tmp_path):
        path = tmp_path / "graph.dimacs"
        path.write_text("p edge 2 1\ne 1 3\n")
        with pytest.raises(ValueError, match="out of range"):
            read_dimacs(str(path))

    def test_edge_before_problem_line(self, tmp_path):
        path = tmp_path / "graph.dimacs"
        path.write_text("e 1 2\np edge 2 1\n")
        with pytest.raises(ValueError, match="before problem line"):
            read_dimacs(str(path))

    def test_missing_problem_line(self, tmp_path):
        path = tmp_path / "graph.dimacs"
        path.write_text("c nothing here\n")
        with pytest.raises(ValueError, match="no problem line"):
            read_dimacs(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_dimacs(str(tmp_path / "missing.dimacs"))


class TestEdgeCode:
    """Tests for rotation code files."""

    def test_write_read(self, tmp_path, two_triangles_code):
        path = write_edge_code(str(tmp_path / "g.ecode"), two_triangles_code)
        assert open(path).readline() == "0 2 6 7\n"
        assert read_edge_code(path) == two_triangles_code

    def test_header(self, tmp_path, four_cycle_code):
        path = write_edge_code(str(tmp_path / "g.vcode"), four_cycle_code, header=True)
        assert open(path).readline() == "p 4\n"
        assert read_edge_code(path) == four_cycle_code

    def test_header_mismatch(self, tmp_path):
        path = tmp_path / "g.vcode"
        path.write_text("p 3\n0 1\n0 1\n")
        with pytest.raises(InvalidInput, match="declares 3"):
            read_edge_code(str(path))

    def test_non_integer(self, tmp_path):
        path = tmp_path / "g.ecode"
        path.write_text("0 1\n0 x\n")
        with pytest.raises(InvalidInput, match="g.ecode:2"):
            read_edge_code(str(path))

    def test_blank_lines(self, tmp_path):
        """Leading and trailing blank lines are dropped, inner ones kept."""
        path = tmp_path / "g.vcode"
        path.write_text("\n1\n\n0\n\n\n")
        assert read_edge_code(str(path)) == [[1], [], [0]]

    @pytest.mark.parametrize(
        "code",
        [
            [[], [2, 3], [1, 3], [1, 2]],
            [[1, 2], [0, 2], [0, 1], []],
            [[], [2], [1], []],
        ],
    )
    def test_header_keeps_isolated_ends(self, tmp_path, code):
        """With a header, blank first and last lines are isolated vertices."""
        path = write_edge_code(str(tmp_path / "g.vcode"), code, header=True)
        assert read_edge_code(path) == code

    def test_header_drops_extra_blank_lines(self, tmp_path):
        path = tmp_path / "g.vcode"
        path.write_text("p 3\n\n1 2\n0\n\n\n")
        assert read_edge_code(str(path)) == [[], [1, 2], [0]]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_edge_code(str(tmp_path / "missing.ecode"))


class TestTrailFiles:
    def test_write_read(self, tmp_path):
        path = write_trail(str(tmp_path / "g.trail"), (0, 1, 2, 3))
        assert open(path).read() == "0 1 2 3\n"
        assert read_trail(path) == [0, 1, 2, 3]

    def test_default_output(self):
        assert default_output("data/mesh.ply", ".dimacs") == "data/mesh.dimacs"
        assert default_output("graph.ecode", ".trail") == "graph.trail"
        assert default_output("noext", ".ntrail") == "noext.ntrail"
