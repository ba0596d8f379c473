"""
Tests for the viz module.
"""

import os

import pytest

from atrail.viz import plot_trail


class TestPlotTrail:
    """Tests for plot_trail."""

    def test_creates_png(self, octahedron, tmp_path):
        vertices, faces = octahedron
        output = str(tmp_path / "trail.png")
        result = plot_trail(vertices, [0, 2, 4, 0], output, faces=faces)
        assert result == output
        assert os.path.getsize(output) > 0

    def test_creates_output_dir(self, octahedron, tmp_path):
        vertices, _ = octahedron
        output = str(tmp_path / "plots" / "trail.png")
        plot_trail(vertices, [0, 2, 0], output)
        assert os.path.exists(output)

    def test_no_overwrite(self, octahedron, tmp_path, capsys):
        vertices, _ = octahedron
        output = tmp_path / "trail.png"
        output.write_bytes(b"placeholder")
        plot_trail(vertices, [0, 2, 0], str(output))
        assert output.read_bytes() == b"placeholder"
        assert "already exists" in capsys.readouterr().out

    def test_overwrite(self, octahedron, tmp_path):
        vertices, _ = octahedron
        output = tmp_path / "trail.png"
        output.write_bytes(b"placeholder")
        plot_trail(vertices, [0, 2, 0], str(output), overwrite=True)
        assert output.read_bytes() != b"placeholder"

    def test_short_trail(self, octahedron, tmp_path):
        with pytest.raises(ValueError, match="at least two"):
            plot_trail(octahedron[0], [0], str(tmp_path / "trail.png"))

    def test_missing_vertex(self, octahedron, tmp_path):
        with pytest.raises(ValueError, match="outside the mesh"):
            plot_trail(octahedron[0], [0, 9, 0], str(tmp_path / "trail.png"))
