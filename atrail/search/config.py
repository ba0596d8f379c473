"""Configuration dataclass for the A-trail search.

The fields tune how the search runs; none of them changes whether a trail
exists, only how quickly one is found or when the search gives up.
"""

from dataclasses import dataclass, fields
from typing import Optional
import json

VERTEX_ORDERS = ("degree", "index", "bfs")


@dataclass
class SearchConfig:
    """Search parameters.

    Attributes
    ----------
    order : str
        Vertex processing order. ``"bfs"`` walks the graph breadth-first from
        vertex 0, ``"degree"`` grows the order from the vertex with the fewest
        candidates by always taking the vertex with most neighbours already
        placed, ``"index"`` follows the edge code.
    max_nodes : int or None
        Abort after this many candidate attempts. None means unlimited.
    time_limit : float or None
        Abort after this many seconds. None means unlimited.
    progress_every : int
        Log progress every N candidate attempts (0 disables).
    verbose : bool
        Whether to log progress at INFO level rather than DEBUG.
    """

    order: str = "bfs"
    max_nodes: Optional[int] = None
    time_limit: Optional[float] = None
    progress_every: int = 100000
    verbose: bool = True

    def __post_init__(self):
        if self.order not in VERTEX_ORDERS:
            raise ValueError(
                f"Unknown vertex order '{self.order}', expected one of {VERTEX_ORDERS}"
            )
        if self.max_nodes is not None:
            _check_number("max_nodes", self.max_nodes, int)
        if self.time_limit is not None:
            _check_number("time_limit", self.time_limit, (int, float))
        _check_number("progress_every", self.progress_every, int)
        if not isinstance(self.verbose, bool):
            raise ValueError(f"verbose must be a boolean, got {self.verbose!r}")

    def to_dict(self) -> dict:
        """Convert config to dictionary for serialization."""
        return {
            "order": self.order,
            "max_nodes": self.max_nodes,
            "time_limit": self.time_limit,
            "progress_every": self.progress_every,
            "verbose": self.verbose,
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize config to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def updated(self, **overrides) -> "SearchConfig":
        """Return a copy with the non-None ``overrides`` applied."""
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return SearchConfig.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "SearchConfig":
        """Create config from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_json(cls, json_str: str) -> "SearchConfig":
        """Create config from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def from_json_file(cls, path: str) -> "SearchConfig":
        """Load config from JSON file."""
        with open(path, "r") as f:
            return cls.from_json(f.read())


def _check_number(name, value, types):
    """Raise ValueError unless ``value`` is a non-negative number of ``types``."""
    if isinstance(value, bool) or not isinstance(value, types):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
