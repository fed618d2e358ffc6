from __future__ import annotations

import logging
import math
from typing import List, Tuple

import numpy as np

from kmedian.graphs.synthetic import ScopedSyntheticVertex
from kmedian.graphs.weighted import WeightedGraph

from ._shared import assert_connected, make_rng, validate_k
from .assignment import get_costs

logger = logging.getLogger(__name__)

MINCOST_EPS = 0.5


def thorup_d(
    graph: WeightedGraph, rng: np.random.Generator, nperround: int, maxnumrounds: int
) -> Tuple[List[int], float]:
    """Cost-tracking elimination variant of Thorup's Algorithm D.

    Every round moves up to ``nperround`` vertices from R into F, refreshes
    all distances to F with one Dijkstra from the synthetic source, then
    drops from R every vertex no farther from F than a random pivot in R.

    Returns
    -------
    centers:
        The selected set F, in selection order.
    cost:
        Sum over all vertices of the distance to F.
    """
    if nperround < 1:
        raise ValueError("nperround must be positive.")
    if maxnumrounds < 1:
        raise ValueError("maxnumrounds must be positive.")

    assert_connected(graph)
    n = graph.num_vertices()
    R = graph.vertices()
    F: List[int] = []

    with ScopedSyntheticVertex(graph) as synthetic:
        for i in range(maxnumrounds):
            if R.size == 0:
                break
            if R.size > nperround:
                picks = rng.choice(R.size, size=nperround, replace=False)
                added = R[picks]
                R = np.delete(R, picks)
            else:
                added, R = R, R[:0]
            for r in added:
                F.append(int(r))
                graph.add_edge(int(r), synthetic, 0.0)

            distances, _ = graph.shortest_paths(synthetic)
            if R.size == 0:
                break
            minv = distances[R[rng.integers(0, R.size)]]
            R = R[distances[R] > minv]
            logger.debug(f"round {i}: |F|={len(F)}, threshold={minv:g}, |R|={R.size}")

    assert_connected(graph)
    cost = float(np.sum(distances[:n]))
    logger.info(f"Sampled set of size {len(F)} has cost {cost:f}")
    return F, cost


def mincost_parameters(n: int, k: int) -> Tuple[int, int]:
    """Return ``(samples_per_round, max_rounds)`` for the best-of-N runs (eps = 0.5)."""
    validate_k(k, n)
    logn = math.log2(n)
    return math.ceil(21.0 * k * logn / MINCOST_EPS), math.ceil(3 * logn)


def thorup_sample_mincost(
    graph: WeightedGraph, k: int, seed: int | None, num_iter: int
) -> Tuple[List[int], np.ndarray]:
    """Run :func:`thorup_d` ``num_iter`` times and keep the cheapest center set.

    All trials draw from one generator seeded with ``seed``. A later trial
    replaces the incumbent only if its cost is strictly lower. The final
    centers are passed to :func:`~kmedian.algorithms.assignment.get_costs`.

    Returns
    -------
    centers:
        The best center set found.
    assignments:
        Position in ``centers`` of each vertex's nearest center.
    """
    if num_iter < 1:
        raise ValueError("num_iter must be positive.")
    samples_per_round, max_rounds = mincost_parameters(graph.num_vertices(), k)
    rng = make_rng(seed)

    best_centers, best_cost = thorup_d(graph, rng, samples_per_round, max_rounds)
    for _ in range(1, num_iter):
        centers, cost = thorup_d(graph, rng, samples_per_round, max_rounds)
        if cost < best_cost:
            logger.info(f"Replacing old cost of {best_cost:g} with {cost:g}")
            best_centers, best_cost = centers, cost

    _, assignments = get_costs(graph, best_centers)
    return best_centers, assignments
