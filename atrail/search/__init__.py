"""A-trail search on Eulerian rotation graphs."""

from .catalog import TransitionCatalog, catalan, iter_noncrossing_matchings
from .config import SearchConfig
from .driver import (
    SearchAborted,
    SearchContext,
    SearchStatus,
    VertexState,
    search,
    vertex_order,
)
from .fragments import AlreadyLinked, FragmentTracker, PrematureCycle
from .graph import AtrailError, InvalidInput, RotationGraph
from .trail import Trail, extract_trail

__all__ = [
    "AlreadyLinked",
    "AtrailError",
    "FragmentTracker",
    "InvalidInput",
    "PrematureCycle",
    "RotationGraph",
    "SearchAborted",
    "SearchConfig",
    "SearchContext",
    "SearchStatus",
    "Trail",
    "TransitionCatalog",
    "VertexState",
    "catalan",
    "extract_trail",
    "iter_noncrossing_matchings",
    "search",
    "vertex_order",
]
