"""Backtracking search for an A-trail.

Vertices are processed in a fixed order. Each vertex commits one candidate
transition system from the catalog as a whole; the fragment tracker rejects
candidates that would close a cycle before every edge is used. The search is
depth-first over an explicit stack of frames, so its depth is not bounded by
the interpreter's recursion limit, and it can be cancelled between candidate
attempts.
"""

import enum
import heapq
import logging
import time
from collections import deque

from .catalog import TransitionCatalog
from .config import SearchConfig
from .fragments import FragmentTracker, LinkError
from .graph import AtrailError, RotationGraph
from .trail import extract_trail

logger = logging.getLogger(__name__)


class SearchAborted(AtrailError, RuntimeError):
    """Raised when a node or time budget stops the search early.

    Attributes
    ----------
    nodes : int
        Candidate attempts made before the search stopped.
    """

    def __init__(self, message, nodes=0):
        super().__init__(message)
        self.nodes = nodes


class VertexState(enum.Enum):
    UNVISITED = "unvisited"
    TRYING = "trying"
    COMMITTED = "committed"
    EXHAUSTED = "exhausted"


class SearchStatus(enum.Enum):
    SEARCHING = "searching"
    FOUND = "found"
    FAILED = "failed"
    ABORTED = "aborted"


class _Frame:
    __slots__ = ("vertex", "candidates", "index", "committed")

    def __init__(self, vertex, candidates):
        self.vertex = vertex
        self.candidates = candidates
        self.index = -1
        self.committed = []


def vertex_order(graph, catalog, order="bfs"):
    """Return the vertex processing order.

    Parameters
    ----------
    graph : RotationGraph
        Graph being searched.
    catalog : TransitionCatalog
        Catalog used to rank vertices by number of candidates.
    order : {"bfs", "degree", "index"}
        Ordering heuristic. ``"bfs"`` and ``"degree"`` keep each new vertex
        adjacent to the ones before it, so premature cycles are caught early.

    Returns
    -------
    list of int
        Every vertex exactly once.
    """
    vertices = range(graph.n_vertices)
    if order == "index":
        return list(vertices)
    if order == "degree":
        return _most_constrained_order(graph, catalog)
    if order != "bfs":
        raise ValueError(f"Unknown vertex order '{order}'")

    seen = [False] * graph.n_vertices
    result = []
    for root in vertices:
        if seen[root]:
            continue
        seen[root] = True
        queue = deque([root])
        while queue:
            u = queue.popleft()
            result.append(u)
            for w in graph.neighbors(u):
                if not seen[w]:
                    seen[w] = True
                    queue.append(w)
    return result


def _most_constrained_order(graph, catalog):
    """Greedy order taking next the vertex with most neighbours already placed.

    Ties go to the vertex with fewer candidates, then the lower index. Each
    component starts from its vertex with the fewest candidates.
    """
    placed = [False] * graph.n_vertices
    n_placed_neighbours = [0] * graph.n_vertices
    starts = sorted(range(graph.n_vertices), key=lambda v: (catalog.count(v), v))
    result = []
    heap = []
    for root in starts:
        if placed[root]:
            continue
        heapq.heappush(heap, (0, catalog.count(root), root))
        while heap:
            _, _, u = heapq.heappop(heap)
            if placed[u]:
                continue
            placed[u] = True
            result.append(u)
            for w in graph.neighbors(u):
                if not placed[w]:
                    n_placed_neighbours[w] += 1
                    heapq.heappush(
                        heap, (-n_placed_neighbours[w], catalog.count(w), w)
                    )
    return result


class SearchContext:
    """State of one A-trail search.

    A context owns its fragment tracker, its catalog and the per-vertex
    states, and runs at most once. Separate contexts never share state.

    Parameters
    ----------
    graph : RotationGraph or sequence of sequence of int
        Graph to search, or its edge code.
    config : SearchConfig, optional
        Search parameters. Defaults to ``SearchConfig()``.
    fixed : dict, optional
        Vertex to rotation-position pairs that pin its transition system.

    Raises
    ------
    InvalidInput
        If the edge code or the fixed transitions are invalid.
    """

    def __init__(self, graph, config=None, fixed=None):
        if not isinstance(graph, RotationGraph):
            graph = RotationGraph(graph)
        self.graph = graph
        self.config = config if config is not None else SearchConfig()
        self.catalog = TransitionCatalog(graph, fixed=fixed)
        self.tracker = FragmentTracker(graph)
        self.order = vertex_order(graph, self.catalog, self.config.order)
        self.states = [VertexState.UNVISITED] * graph.n_vertices
        self.status = SearchStatus.SEARCHING
        self.trail = None
        self.nodes = 0
        self.backtracks = 0
        self.elapsed = 0.0
        self._deadline = None

    def run(self):
        """Search for an A-trail.

        Returns
        -------
        Trail or None
            The first trail found, or None when none exists.

        Raises
        ------
        SearchAborted
            If ``max_nodes`` or ``time_limit`` is exceeded. Every committed
            transition has been undone by then.
        """
        if self.status is not SearchStatus.SEARCHING:
            raise RuntimeError("A search context can only be run once")

        level = logging.INFO if self.config.verbose else logging.DEBUG
        logger.log(
            level,
            "Searching for an A-trail on %d vertices and %d edges (order=%s)",
            self.graph.n_vertices,
            self.graph.n_edges,
            self.config.order,
        )
        start = time.perf_counter()
        if self.config.time_limit is not None:
            self._deadline = start + self.config.time_limit
        try:
            if not self.graph.is_connected():
                logger.warning("Graph is not connected, no A-trail can exist")
                found = False
            else:
                found = self._search()
        finally:
            self.elapsed = time.perf_counter() - start

        if found:
            self.status = SearchStatus.FOUND
            self.trail = extract_trail(self.graph, self.tracker.partners())
            logger.log(
                level,
                "Found an A-trail after %d candidates (%d backtracks, %.3fs)",
                self.nodes,
                self.backtracks,
                self.elapsed,
            )
        else:
            self.status = SearchStatus.FAILED
            logger.log(
                level,
                "No A-trail exists; explored %d candidates in %.3fs",
                self.nodes,
                self.elapsed,
            )
        return self.trail

    def _search(self):
        stack = [self._open(0)]
        while stack:
            frame = stack[-1]
            if frame.committed:
                self._release(frame)
            if not self._advance(frame, stack):
                stack.pop()
                self.states[frame.vertex] = VertexState.EXHAUSTED
                self.backtracks += 1
                continue
            self.states[frame.vertex] = VertexState.COMMITTED
            if len(stack) == len(self.order):
                if self.tracker.is_complete():
                    return True
                continue
            stack.append(self._open(len(stack)))
        return False

    def _open(self, depth):
        v = self.order[depth]
        self.states[v] = VertexState.TRYING
        return _Frame(v, self.catalog.candidates(v))

    def _advance(self, frame, stack):
        """Commit the next candidate of ``frame`` that links cleanly."""
        for pairs in frame.candidates:
            self._checkpoint(stack)
            frame.index += 1
            self.nodes += 1
            self.states[frame.vertex] = VertexState.TRYING
            if self.config.progress_every and self.nodes % self.config.progress_every == 0:
                logger.log(
                    logging.INFO if self.config.verbose else logging.DEBUG,
                    "%d candidates tried, depth %d/%d, %d fragments",
                    self.nodes,
                    len(stack),
                    len(self.order),
                    self.tracker.n_fragments,
                )
            if self._commit(frame, pairs):
                return True
        return False

    def _commit(self, frame, pairs):
        done = []
        try:
            for a, b in pairs:
                self.tracker.link(a, b)
                done.append((a, b))
        except LinkError as e:
            logger.debug(
                "Vertex %d candidate %d rejected: %s", frame.vertex, frame.index, e
            )
            for a, b in reversed(done):
                self.tracker.undo_link(a, b)
            return False
        frame.committed = done
        return True

    def _release(self, frame):
        for a, b in reversed(frame.committed):
            self.tracker.undo_link(a, b)
        frame.committed = []

    def _checkpoint(self, stack):
        max_nodes = self.config.max_nodes
        if max_nodes is not None and self.nodes >= max_nodes:
            reason = f"node budget of {max_nodes} candidates exhausted"
        elif self._deadline is not None and time.perf_counter() >= self._deadline:
            reason = f"time limit of {self.config.time_limit}s exceeded"
        else:
            return

        for frame in reversed(stack):
            self._release(frame)
            self.states[frame.vertex] = VertexState.UNVISITED
        self.status = SearchStatus.ABORTED
        logger.warning("Search aborted: %s", reason)
        raise SearchAborted(f"Search aborted: {reason}", nodes=self.nodes)

    def summary(self):
        """Return a JSON-serialisable report of the search."""
        report = {
            "status": self.status.value,
            "n_vertices": self.graph.n_vertices,
            "n_edges": self.graph.n_edges,
            "order": self.config.order,
            "nodes": self.nodes,
            "backtracks": self.backtracks,
            "elapsed": self.elapsed,
        }
        if self.trail is not None:
            report["edge_trail"] = list(self.trail.edges)
            report["node_trail"] = list(self.trail.vertices)
        return report


def search(graph, config=None, fixed=None):
    """Find an A-trail of a rotation graph.

    Parameters
    ----------
    graph : RotationGraph or sequence of sequence of int
        Graph to search, or its edge code.
    config : SearchConfig, optional
        Search parameters.
    fixed : dict, optional
        Vertex to rotation-position pairs that pin its transition system.

    Returns
    -------
    Trail or None
        A trail if one exists, None otherwise.

    Raises
    ------
    InvalidInput
        If the input is not an Eulerian rotation graph; raised before any
        search work.
    SearchAborted
        If the configured node or time budget runs out.
    """
    return SearchContext(graph, config=config, fixed=fixed).run()
