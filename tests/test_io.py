from __future__ import annotations

import io
import math

import numpy as np
import pytest

from conftest import edge_set
from kmedian.graphs import (
    DimacsFormatError,
    DiskMat,
    WeightedGraph,
    haversine_distance,
    read_dimacs,
    ways_to_dimacs,
    write_dimacs,
)
from kmedian.graphs.dimacs import EARTH_RADIUS_M


def test_dimacs_round_trip_preserves_counts_and_weights() -> None:
    graph = WeightedGraph.from_edges(
        5, [(0, 1, 0.1), (1, 2, 2.5), (2, 3, 1.0 / 3.0), (3, 4, 1e-7), (4, 0, 12345.678)]
    )
    buf = io.StringIO()
    write_dimacs(graph, buf, comments=["small test graph"])

    text = buf.getvalue()
    assert text.startswith("c small test graph\np sp 5 5\n")

    parsed = read_dimacs(io.StringIO(text))
    assert parsed.snapshot() == graph.snapshot()
    assert edge_set(parsed) == edge_set(graph)


def test_read_dimacs_accepts_one_indexed_files(tmp_path) -> None:
    path = tmp_path / "tiny.gr"
    path.write_text("c classic\np sp 3 2\na 1 2 4\na 2 3 5\n", encoding="utf-8")

    graph = read_dimacs(path, one_indexed=True)
    assert graph.snapshot() == (3, 2)
    assert graph.edge_weight(0, 1) == 4.0
    assert graph.edge_weight(1, 2) == 5.0


@pytest.mark.parametrize(
    "text",
    [
        "a 0 1 1.0\n",
        "p sp 2 1\n",
        "p sp 2 1\na 0 7 1.0\n",
        "p sp 2 1\na 0 1 heavy\n",
        "p sp 2 1\np sp 2 1\na 0 1 1.0\n",
        "p sp 2 1\nx 0 1\n",
        "p sp -1 0\n",
    ],
)
def test_read_dimacs_rejects_malformed_input(text: str) -> None:
    with pytest.raises(DimacsFormatError):
        read_dimacs(io.StringIO(text))


def test_haversine_along_the_equator() -> None:
    assert math.isclose(haversine_distance(0.0, 0.0, 0.0, 1.0), EARTH_RADIUS_M * math.radians(1.0))
    assert haversine_distance(10.0, 20.0, 10.0, 20.0) == 0.0


def test_ways_to_dimacs_keeps_only_roads() -> None:
    ways = [
        ({"highway": "residential"}, [(100, 0.0, 0.0), (200, 0.0, 1.0), (300, 1.0, 1.0)]),
        ({"building": "yes"}, [(400, 5.0, 5.0), (500, 5.0, 6.0)]),
        ({"highway": "service"}, [(300, 1.0, 1.0), (100, 0.0, 0.0)]),
    ]
    buf = io.StringIO()
    length = ways_to_dimacs(ways, buf)

    text = buf.getvalue()
    assert "p sp 3 3\n" in text
    assert "c 100->0\n" in text and "c 300->2\n" in text
    assert "c 400->" not in text

    graph = read_dimacs(io.StringIO(text))
    assert graph.snapshot() == (3, 3)
    expected = (
        haversine_distance(0.0, 0.0, 0.0, 1.0)
        + haversine_distance(0.0, 1.0, 1.0, 1.0)
        + haversine_distance(1.0, 1.0, 0.0, 0.0)
    )
    assert math.isclose(length, expected)
    assert graph.edge_weight(0, 1) == haversine_distance(0.0, 0.0, 0.0, 1.0)


def test_diskmat_grows_file_and_persists_values(tmp_path) -> None:
    path = tmp_path / "mat.bin"
    with DiskMat(3, 4, path, offset=16) as mat:
        assert mat.shape == (3, 4)
        mat[1, 2] = 7.5
        mat[2] = np.arange(4)
    assert path.stat().st_size >= 16 + 3 * 4 * 8

    with DiskMat(3, 4, path, offset=16) as mat:
        assert mat[1, 2] == 7.5
        assert np.asarray(mat)[2].tolist() == [0.0, 1.0, 2.0, 3.0]


def test_diskmat_delete_file_and_alignment(tmp_path) -> None:
    path = tmp_path / "scratch.bin"
    mat = DiskMat(2, 2, path, delete_file=True)
    assert path.exists()
    mat.close()
    assert not path.exists()

    with pytest.raises(ValueError):
        DiskMat(2, 2, tmp_path / "misaligned.bin", offset=3, aligned=True)
