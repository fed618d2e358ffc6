from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Tuple

import numpy as np

from kmedian.graphs.synthetic import ScopedSyntheticVertex
from kmedian.graphs.weighted import WeightedGraph

logger = logging.getLogger(__name__)


class CenterIndex:
    """Two-way mapping between center vertex ids and their positions in the center list.

    If a vertex appears more than once, its last position wins.
    """

    def __init__(self, centers: Iterable[int]) -> None:
        self._vertices: List[int] = [int(c) for c in centers]
        self._positions: Dict[int, int] = {v: i for i, v in enumerate(self._vertices)}

    def __len__(self) -> int:
        return len(self._vertices)

    def __contains__(self, vertex: int) -> bool:
        return int(vertex) in self._positions

    def index_of(self, vertex: int) -> int:
        return self._positions[int(vertex)]

    def vertex_at(self, index: int) -> int:
        return self._vertices[index]

    @property
    def vertices(self) -> List[int]:
        return list(self._vertices)


def _resolve_root(
    vertex: int, pred: np.ndarray, index: CenterIndex, assignments: np.ndarray
) -> int:
    """Walk up the shortest-path tree from ``vertex`` to the first center."""
    path = []
    current = vertex
    while True:
        if assignments[current] >= 0:
            found = int(assignments[current])
            break
        if current in index:
            found = index.index_of(current)
            break
        parent = int(pred[current])
        if parent == current:
            raise AssertionError(f"Vertex {vertex} is not connected to any center.")
        path.append(current)
        current = parent
    for v in path:
        assignments[v] = found
    assignments[current] = found
    return found


def get_costs(graph: WeightedGraph, centers: Iterable[int]) -> Tuple[np.ndarray, np.ndarray]:
    """Assign every vertex to its nearest center.

    Builds one shortest-path forest rooted at all centers at once (through a
    synthetic source) and follows each vertex's predecessor chain to its root
    center.

    Returns
    -------
    costs:
        float64 array of length ``n`` with each vertex's distance to its center.
    assignments:
        uint32 array of length ``n`` with positions into ``centers``.
    """
    index = CenterIndex(centers)
    if len(index) == 0:
        raise ValueError("At least one center is required.")
    n = graph.num_vertices()

    with ScopedSyntheticVertex(graph) as synthetic:
        for vtx in index.vertices:
            graph.add_edge(synthetic, vtx, 0.0)
        dist, pred = graph.shortest_paths(synthetic)

    # The synthetic vertex roots the forest; cut it so chains stop at centers.
    pred = pred[:n].copy()
    roots = pred == synthetic
    pred[roots] = np.flatnonzero(roots)

    resolved = np.full(n, -1, dtype=np.int64)
    for v in range(n):
        if resolved[v] < 0:
            _resolve_root(v, pred, index, resolved)

    costs = dist[:n].copy()
    assignments = resolved.astype(np.uint32)
    logger.info(f"Total cost of solution: {costs.sum():g}")
    return costs, assignments
