from __future__ import annotations

import logging
from typing import List

from kmedian.graphs.synthetic import ScopedSyntheticVertex
from kmedian.graphs.weighted import WeightedGraph

from ._shared import assert_connected, child_seed, make_rng, thorup_parameters

logger = logging.getLogger(__name__)


def sample_from_graph(
    graph: WeightedGraph,
    samples_per_round: int,
    iterations: int,
    seed: int | None,
    container: List[int] | None = None,
) -> List[int]:
    """One run of Thorup's Algorithm D.

    Each iteration draws ``samples_per_round`` vertices (with replacement)
    from the unclassified pool R into F, computes every vertex's distance to
    F with a single Dijkstra from a synthetic source, then removes from R all
    vertices at most as far from F as a randomly picked member of R.

    Parameters
    ----------
    graph:
        Connected graph; it is temporarily extended and restored before returning.
    samples_per_round:
        Number of draws from R per iteration.
    iterations:
        Maximum number of iterations; the run stops earlier once R is empty.
    seed:
        Seed of the generator owned by this call.
    container:
        Optional list the samples are appended to (and returned).

    Returns
    -------
    list[int]
        The sampled set F. It can hold duplicates.
    """
    if samples_per_round < 1:
        raise ValueError("samples_per_round must be positive.")
    if iterations < 0:
        raise ValueError("iterations must be non-negative.")

    F = container if container is not None else []
    rng = make_rng(seed)
    R = graph.vertices()

    with ScopedSyntheticVertex(graph) as synthetic:
        for it in range(iterations):
            if R.size == 0:
                break
            draws = R[rng.integers(0, R.size, size=samples_per_round)]
            F.extend(int(v) for v in draws)

            for vertex in dict.fromkeys(F):
                graph.add_edge(synthetic, vertex, 0.0)
            distances, _ = graph.shortest_paths(synthetic)
            graph.clear_vertex(synthetic)

            pivot = R[rng.integers(0, R.size)]
            minv = distances[pivot]
            before = R.size
            R = R[distances[R] > minv]
            logger.debug(
                f"iteration {it}: threshold={minv:g}, |R| {before} -> {R.size}, |F|={len(F)}"
            )

    logger.debug(f"Sampled {len(F)} vertices")
    return F


def thorup_sample(
    graph: WeightedGraph, k: int, seed: int | None, max_sampled: int = 0
) -> List[int]:
    """Thorup's Algorithm E: union of repeated Algorithm D runs.

    Round sizes follow from ``n`` and ``k`` (see
    :func:`~kmedian.algorithms._shared.thorup_parameters`). The union stops
    growing once it holds ``max_sampled`` vertices (``0`` means ``n``) and
    is cut down to that size in first-seen order.
    """
    assert_connected(graph)
    n = graph.num_vertices()
    if max_sampled < 0:
        raise ValueError("max_sampled must be non-negative.")
    if max_sampled == 0:
        max_sampled = n
    params = thorup_parameters(n, k)

    logger.info(f"max sampled: {max_sampled}")
    logger.info(f"samples per round: {params.samples_per_round}")
    logger.info(f"iterations per round: {params.iterations_per_round}")

    rng = make_rng(seed)
    samples: dict[int, None] = {}
    buffer: List[int] = []
    for i in range(params.num_rounds):
        sample_from_graph(
            graph, params.samples_per_round, params.iterations_per_round, child_seed(rng), buffer
        )
        samples.update(dict.fromkeys(buffer))
        buffer.clear()
        logger.debug(f"Samples size after round {i + 1}/{params.num_rounds}: {len(samples)}")
        if len(samples) >= max_sampled:
            break

    result = list(samples)[:max_sampled]
    assert_connected(graph)
    logger.info(f"Coverage sample holds {len(result)} vertices")
    return result
