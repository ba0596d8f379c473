"""Transition catalog: the legal local transition systems of every vertex.

A transition system of a vertex of degree 2d pairs its 2d rotation slots. It
is legal when the pairs do not cross once the slots are laid out around the
rotation, i.e. when it is a non-crossing perfect matching; there are C(d) of
them, C being the Catalan numbers.
"""

from math import comb

from .graph import InvalidInput


def catalan(d):
    """Return the ``d``-th Catalan number."""
    if d < 0:
        raise ValueError(f"Catalan number undefined for negative d={d}")
    return comb(2 * d, d) // (d + 1)


def iter_noncrossing_matchings(n_points):
    """Lazily enumerate the non-crossing perfect matchings of ``n_points``.

    The points ``0 .. n_points - 1`` lie on a circle. The first open point is
    paired with a partner at an odd offset, so that an even number of points
    remains on each side, and the arc inside the pair is matched before the
    arc outside it.

    Parameters
    ----------
    n_points : int
        Number of points, even and positive.

    Yields
    ------
    tuple of tuple of int
        ``d`` pairs ``(i, j)`` with ``i < j``, sorted by ``i``.
    """
    if n_points <= 0 or n_points % 2 == 1:
        raise ValueError(f"Need a positive even number of points, got {n_points}")
    for pairs in _match_range(0, n_points):
        yield tuple(sorted(pairs))


def _match_range(start, stop):
    if start == stop:
        yield ()
        return
    for partner in range(start + 1, stop, 2):
        for inside in _match_range(start + 1, partner):
            for outside in _match_range(partner + 1, stop):
                yield ((start, partner),) + inside + outside


def is_noncrossing(pairs):
    """Check that no two position pairs interleave."""
    spans = [tuple(sorted(p)) for p in pairs]
    for k, (a, b) in enumerate(spans):
        for c, d in spans[k + 1 :]:
            if a < c < b < d or c < a < d < b:
                return False
    return True


class TransitionCatalog:
    """Candidate transition systems for the vertices of a rotation graph.

    Candidates are expressed in global slot ids. ``fixed`` pins vertices to a
    single transition system given as pairs of rotation positions; each such
    system is checked to be a perfect non-crossing matching.

    Parameters
    ----------
    graph : RotationGraph
        Graph whose vertices are enumerated.
    fixed : dict, optional
        Mapping from vertex to an iterable of ``(position, position)`` pairs.

    Raises
    ------
    InvalidInput
        If a fixed transition system is not a perfect non-crossing matching
        of its vertex.
    """

    def __init__(self, graph, fixed=None):
        self.graph = graph
        self._fixed = {}
        for v, pairs in (fixed or {}).items():
            self._fixed[int(v)] = self._check_fixed(int(v), pairs)

    def _check_fixed(self, v, pairs):
        if not 0 <= v < self.graph.n_vertices:
            raise InvalidInput(f"Fixed transitions given for unknown vertex {v}")
        degree = self.graph.degree(v)
        pairs = [tuple(sorted((int(i), int(j)))) for i, j in pairs]
        used = sorted(p for pair in pairs for p in pair)
        if used != list(range(degree)):
            raise InvalidInput(
                f"Fixed transitions at vertex {v} must pair each of its "
                f"{degree} rotation positions exactly once, got {pairs}"
            )
        if not is_noncrossing(pairs):
            raise InvalidInput(f"Fixed transitions at vertex {v} cross: {pairs}")
        return tuple(sorted(pairs))

    def is_fixed(self, v):
        return v in self._fixed

    def count(self, v):
        """Number of candidates offered for vertex ``v``."""
        if v in self._fixed:
            return 1
        return catalan(self.graph.degree(v) // 2)

    def candidates(self, v):
        """Return a fresh iterator over the candidates of vertex ``v``.

        Each candidate is a tuple of ``(slot, slot)`` pairs covering every
        slot of ``v`` once.
        """
        offset = self.graph.offset(v)
        if v in self._fixed:
            matchings = iter([self._fixed[v]])
        else:
            matchings = iter_noncrossing_matchings(self.graph.degree(v))
        for pairs in matchings:
            yield tuple((offset + i, offset + j) for i, j in pairs)
