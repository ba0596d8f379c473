import os

import matplotlib.pyplot as plt
import numpy as np

from atrail.core import mesh_bounds


def plot_trail(
    vertices,
    node_trail,
    output_file,
    faces=None,
    cmap="viridis",
    linewidth=1.5,
    overwrite=False,
):
    """
    Render a trail on a mesh as a PNG image.

    The trail is drawn as a 3D polyline through the vertex positions, coloured
    from start to end, over an optional light wireframe of the mesh faces.

    Parameters
    ----------
    vertices : array-like of shape (n_vertices, 3)
        Vertex coordinates.
    node_trail : sequence of int
        Vertices visited by the trail, first vertex repeated at the end.
    output_file : str
        Path of the PNG image to write.
    faces : list of list of int, optional
        Mesh faces drawn as a wireframe underneath the trail.
    cmap : str, optional
        Matplotlib colormap used for the trail progression.
    linewidth : float, optional
        Width of the trail segments.
    overwrite : bool, optional
        Whether to replace an existing image. Default is False.

    Returns
    -------
    str
        Path to the generated PNG image.

    Raises
    ------
    ValueError
        If the trail has fewer than two vertices or references a missing one.
    """
    vertices = np.asarray(vertices, dtype=float)
    node_trail = np.asarray(node_trail, dtype=int)
    if len(node_trail) < 2:
        raise ValueError("A trail needs at least two vertices to be plotted")
    if node_trail.min() < 0 or node_trail.max() >= len(vertices):
        raise ValueError("Trail references vertices outside the mesh")

    if os.path.exists(output_file) and not overwrite:
        print(
            f"Image already exists: {output_file}. Use overwrite=True to re-render."
        )
        return output_file

    output_dir = os.path.dirname(os.path.abspath(output_file))
    os.makedirs(output_dir, exist_ok=True)

    fig = plt.figure(figsize=(8, 8))
    ax = fig.add_subplot(projection="3d")
    try:
        if faces is not None:
            for face in faces:
                loop = vertices[list(face) + [face[0]]]
                ax.plot(loop[:, 0], loop[:, 1], loop[:, 2], color="0.85", linewidth=0.5)

        points = vertices[node_trail]
        colors = plt.get_cmap(cmap)(np.linspace(0, 1, len(points) - 1))
        for k in range(len(points) - 1):
            segment = points[k : k + 2]
            ax.plot(
                segment[:, 0],
                segment[:, 1],
                segment[:, 2],
                color=colors[k],
                linewidth=linewidth,
            )
        ax.scatter(*points[0], color="red", s=30, label="start")

        lower, upper = mesh_bounds(vertices)
        ax.set_box_aspect(np.maximum(upper - lower, 1e-9))
        ax.set_axis_off()
        fig.savefig(output_file, dpi=150, bbox_inches="tight")
    finally:
        plt.close(fig)

    print(f"Image saved to {output_file}")
    return output_file
