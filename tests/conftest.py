from __future__ import annotations

import networkx as nx
import numpy as np
import pytest

from kmedian.graphs import WeightedGraph


def grid_graph(rows: int, cols: int, seed: int = 0) -> WeightedGraph:
    """Grid with small integer weights so path sums are exact."""
    rng = np.random.default_rng(seed)
    g = nx.grid_2d_graph(rows, cols)
    for u, v in g.edges():
        g[u][v]["weight"] = float(rng.integers(1, 10))
    return WeightedGraph.from_networkx(g)


def cycle_graph(n: int) -> WeightedGraph:
    return WeightedGraph.from_edges(n, [(i, (i + 1) % n, 1.0) for i in range(n)])


def edge_set(graph: WeightedGraph) -> set:
    return {(min(u, v), max(u, v), w) for u, v, w in graph.edges()}


@pytest.fixture
def small_grid() -> WeightedGraph:
    return grid_graph(6, 6)


@pytest.fixture
def large_grid() -> WeightedGraph:
    return grid_graph(30, 30, seed=3)


@pytest.fixture
def two_components() -> WeightedGraph:
    return WeightedGraph.from_edges(6, [(0, 1, 1.0), (1, 2, 1.0), (3, 4, 1.0), (4, 5, 1.0)])
