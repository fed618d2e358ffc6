from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .weighted import WeightedGraph


class ScopedSyntheticVertex:
    """Temporary vertex used as a common source for multi-source Dijkstra.

    The vertex is appended on ``__enter__`` and removed, together with every
    incident edge, on ``__exit__``, whether the block finishes normally, returns
    early or raises.

    Example
    -------
    >>> with ScopedSyntheticVertex(graph) as s:
    ...     for c in centers:
    ...         graph.add_edge(s, c, 0.0)
    ...     dist, pred = graph.shortest_paths(s)
    """

    def __init__(self, graph: WeightedGraph) -> None:
        self._graph = graph
        self._vtx: int | None = None

    def get(self) -> int:
        if self._vtx is None:
            raise RuntimeError("Synthetic vertex is not active.")
        return self._vtx

    def __enter__(self) -> int:
        if self._vtx is not None:
            raise RuntimeError("Synthetic vertex is already active.")
        self._vtx = self._graph.add_vertex()
        return self._vtx

    def __exit__(self, exc_type, exc, tb) -> None:
        vtx, self._vtx = self._vtx, None
        self._graph.clear_vertex(vtx)
        self._graph.remove_vertex(vtx)
