from __future__ import annotations

import numpy as np
import pytest

from conftest import cycle_graph, edge_set
from kmedian.graphs import DiskMat, ScopedSyntheticVertex, WeightedGraph


def test_shortest_paths_follow_predecessor_conventions() -> None:
    graph = WeightedGraph.from_edges(4, [(0, 1, 1.0), (1, 2, 2.0)])
    dist, pred = graph.shortest_paths(0)

    assert dist.tolist()[:3] == [0.0, 1.0, 3.0]
    assert np.isinf(dist[3])
    assert pred.tolist() == [0, 0, 1, 3]


def test_add_edge_rejects_negative_weights_and_unknown_vertices() -> None:
    graph = WeightedGraph(3)
    with pytest.raises(ValueError):
        graph.add_edge(0, 1, -1.0)
    with pytest.raises(ValueError):
        graph.add_edge(0, 5, 1.0)


def test_only_last_vertex_can_be_removed() -> None:
    graph = cycle_graph(4)
    with pytest.raises(ValueError):
        graph.remove_vertex(1)

    extra = graph.add_vertex()
    assert extra == 4
    graph.remove_vertex(extra)
    assert graph.snapshot() == (4, 4)


def test_synthetic_vertex_is_removed_with_its_edges() -> None:
    graph = cycle_graph(5)
    before = edge_set(graph)

    with ScopedSyntheticVertex(graph) as synthetic:
        assert synthetic == 5
        graph.add_edge(synthetic, 0, 0.0)
        graph.add_edge(synthetic, 3, 0.0)
        dist, _ = graph.shortest_paths(synthetic)
        assert dist[:5].tolist() == [0.0, 1.0, 1.0, 0.0, 1.0]

    assert graph.snapshot() == (5, 5)
    assert edge_set(graph) == before


def test_synthetic_vertex_is_removed_when_the_block_raises() -> None:
    graph = cycle_graph(4)
    scope = ScopedSyntheticVertex(graph)

    with pytest.raises(KeyError):
        with scope as synthetic:
            graph.add_edge(synthetic, 2, 0.0)
            raise KeyError("boom")

    assert graph.snapshot() == (4, 4)
    with pytest.raises(RuntimeError):
        scope.get()


def test_distance_matrix_fills_disk_backed_rows(tmp_path) -> None:
    graph = cycle_graph(6)
    sources = [0, 2]

    with DiskMat(len(sources), graph.num_vertices(), tmp_path / "dist.bin") as mat:
        graph.distance_matrix(sources, out=mat)
        expected = graph.distance_matrix(sources)
        assert np.array_equal(np.asarray(mat), expected)

    assert expected[0].tolist() == [0.0, 1.0, 2.0, 3.0, 2.0, 1.0]


def test_distance_matrix_rejects_mismatched_output() -> None:
    graph = cycle_graph(4)
    with pytest.raises(ValueError):
        graph.distance_matrix([0], out=np.zeros((2, 4)))


def test_remove_edge_and_connectivity() -> None:
    graph = WeightedGraph.from_edges(3, [(0, 1, 1.0), (1, 2, 1.0)])
    assert graph.is_connected()
    assert graph.has_edge(1, 0)

    graph.remove_edge(1, 2)
    assert not graph.has_edge(1, 2)
    assert not graph.is_connected()
    assert graph.snapshot() == (3, 1)
