"""A-trail Pipeline: non-crossing Eulerian circuits of planar meshes"""

try:
    from ._version import version as __version__
except ImportError:
    __version__ = "unknown"

# Export key functions for programmatic use
from .core import (
    embed_planar,
    make_embedding_eulerian,
    mesh_to_embedding,
    mesh_to_graph,
    postman_tour,
)
from .search import RotationGraph, SearchConfig, SearchContext, Trail, search

__all__ = [
    "__version__",
    "RotationGraph",
    "SearchConfig",
    "SearchContext",
    "Trail",
    "embed_planar",
    "make_embedding_eulerian",
    "mesh_to_embedding",
    "mesh_to_graph",
    "postman_tour",
    "search",
]
