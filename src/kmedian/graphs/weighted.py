from __future__ import annotations

from typing import Iterable, Iterator, Tuple

import networkx as nx
import numpy as np

Edge = Tuple[int, int, float]


class WeightedGraph:
    """Undirected weighted graph with dense integer vertex ids ``0..n-1``.

    Thin wrapper over :class:`networkx.Graph` exposing the mutation and
    shortest-path operations the k-median samplers rely on. Vertices can only
    be appended or removed from the top so that ids stay dense and distance
    arrays can be indexed directly by vertex id.
    """

    def __init__(self, n: int = 0) -> None:
        if n < 0:
            raise ValueError("Number of vertices must be non-negative.")
        self._g = nx.Graph()
        self._g.add_nodes_from(range(n))

    @classmethod
    def from_edges(cls, n: int, edges: Iterable[Edge]) -> "WeightedGraph":
        graph = cls(n)
        for u, v, w in edges:
            graph.add_edge(int(u), int(v), float(w))
        return graph

    @classmethod
    def from_networkx(cls, g: nx.Graph, weight: str = "weight") -> "WeightedGraph":
        """Copy a networkx graph, relabelling its nodes to dense ids in iteration order."""
        relabel = {node: i for i, node in enumerate(g.nodes())}
        graph = cls(len(relabel))
        for u, v, data in g.edges(data=True):
            graph.add_edge(relabel[u], relabel[v], float(data.get(weight, 1.0)))
        return graph

    def num_vertices(self) -> int:
        return self._g.number_of_nodes()

    def num_edges(self) -> int:
        return self._g.number_of_edges()

    def snapshot(self) -> Tuple[int, int]:
        """Return ``(num_vertices, num_edges)``."""
        return self.num_vertices(), self.num_edges()

    def vertices(self) -> np.ndarray:
        return np.arange(self.num_vertices(), dtype=np.int64)

    def edges(self) -> Iterator[Edge]:
        for u, v, w in self._g.edges(data="weight"):
            yield int(u), int(v), float(w)

    def has_edge(self, u: int, v: int) -> bool:
        return self._g.has_edge(u, v)

    def edge_weight(self, u: int, v: int) -> float:
        return float(self._g[u][v]["weight"])

    def _check_vertex(self, v: int) -> None:
        if not 0 <= v < self.num_vertices():
            raise ValueError(f"Unknown vertex {v!r}.")

    def add_vertex(self) -> int:
        vtx = self.num_vertices()
        self._g.add_node(vtx)
        return vtx

    def add_edge(self, u: int, v: int, weight: float) -> None:
        self._check_vertex(u)
        self._check_vertex(v)
        if weight < 0:
            raise ValueError("Edge weights must be non-negative.")
        self._g.add_edge(u, v, weight=float(weight))

    def remove_edge(self, u: int, v: int) -> None:
        self._g.remove_edge(u, v)

    def clear_vertex(self, v: int) -> None:
        """Remove every edge incident to ``v``; the vertex itself stays."""
        self._check_vertex(v)
        self._g.remove_edges_from(list(self._g.edges(v)))

    def remove_vertex(self, v: int) -> None:
        """Remove ``v`` and its edges. Only the highest id may be removed."""
        if v != self.num_vertices() - 1:
            raise ValueError("Only the most recently added vertex can be removed.")
        self._g.remove_node(v)

    def is_connected(self) -> bool:
        if self.num_vertices() == 0:
            return False
        return nx.is_connected(self._g)

    def shortest_paths(self, source: int) -> Tuple[np.ndarray, np.ndarray]:
        """Single-source Dijkstra from ``source``.

        Returns
        -------
        dist:
            float64 array of length ``num_vertices()``; ``inf`` where unreachable.
        pred:
            int64 array of shortest-path predecessors. ``pred[source] == source``
            and unreachable vertices are their own predecessor.
        """
        self._check_vertex(source)
        n = self.num_vertices()
        preds, dists = nx.dijkstra_predecessor_and_distance(self._g, source, weight="weight")

        dist = np.full(n, np.inf, dtype=np.float64)
        pred = np.arange(n, dtype=np.int64)
        for v, d in dists.items():
            dist[v] = d
        for v, parents in preds.items():
            if parents:
                pred[v] = parents[0]
        return dist, pred

    def distances_from(self, source: int) -> np.ndarray:
        self._check_vertex(source)
        lengths = nx.single_source_dijkstra_path_length(self._g, source, weight="weight")
        dist = np.full(self.num_vertices(), np.inf, dtype=np.float64)
        for v, d in lengths.items():
            dist[v] = d
        return dist

    def distance_matrix(self, sources: Iterable[int], out=None):
        """Fill one row of shortest-path distances per source.

        ``out`` can be any writable 2-D array-like with one row per source and
        ``num_vertices()`` columns (e.g. a :class:`~kmedian.graphs.diskmat.DiskMat`).
        """
        sources = [int(s) for s in sources]
        n = self.num_vertices()
        if out is None:
            out = np.empty((len(sources), n), dtype=np.float64)
        elif tuple(out.shape) != (len(sources), n):
            raise ValueError(
                f"Output shape {tuple(out.shape)} does not match ({len(sources)}, {n})."
            )
        for row, source in enumerate(sources):
            out[row] = self.distances_from(source)
        return out

    def __repr__(self) -> str:
        return f"WeightedGraph(n={self.num_vertices()}, m={self.num_edges()})"
