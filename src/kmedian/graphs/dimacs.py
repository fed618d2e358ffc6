"""Reading and writing the 9th DIMACS challenge shortest-path text format.

A file consists of

- comment lines ``c <text>``,
- exactly one problem line ``p sp <num_nodes> <num_edges>``,
- one arc line ``a <u> <v> <weight>`` per edge.

Files written here use 0-based ids; classic 1-based challenge files can be
read with ``one_indexed=True``.
"""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Dict, Iterable, Iterator, List, Mapping, Sequence, Tuple, Union

from .weighted import WeightedGraph

logger = logging.getLogger(__name__)

PathOrStream = Union[str, Path, IO[str]]
WayNode = Tuple[int, float, float]

# Same mean radius as libosmium's haversine helper.
EARTH_RADIUS_M = 6372797.560856


class DimacsFormatError(ValueError):
    """Raised when a DIMACS file cannot be parsed."""


@contextmanager
def _open_text(target: PathOrStream, mode: str) -> Iterator[IO[str]]:
    if isinstance(target, (str, Path)):
        with open(target, mode, encoding="utf-8") as fh:
            yield fh
    else:
        yield target


def write_dimacs(
    graph: WeightedGraph, target: PathOrStream, comments: Iterable[str] = ()
) -> None:
    """Write ``graph`` as a DIMACS shortest-path file (one arc line per edge)."""
    with _open_text(target, "w") as fh:
        for line in comments:
            fh.write(f"c {line}\n")
        fh.write(f"p sp {graph.num_vertices()} {graph.num_edges()}\n")
        for u, v, w in graph.edges():
            fh.write(f"a {u} {v} {w!r}\n")


def read_dimacs(source: PathOrStream, one_indexed: bool = False) -> WeightedGraph:
    """Parse a DIMACS shortest-path file into a :class:`WeightedGraph`."""
    graph: WeightedGraph | None = None
    declared_edges = 0
    seen_edges = 0
    offset = 1 if one_indexed else 0

    with _open_text(source, "r") as fh:
        for lineno, raw in enumerate(fh, start=1):
            line = raw.strip()
            if not line or line.startswith("c"):
                continue
            fields = line.split()
            kind = fields[0]
            if kind == "p":
                if graph is not None:
                    raise DimacsFormatError(f"line {lineno}: duplicate problem line")
                if len(fields) != 4 or fields[1] != "sp":
                    raise DimacsFormatError(f"line {lineno}: expected 'p sp <n> <m>'")
                try:
                    n, declared_edges = int(fields[2]), int(fields[3])
                except ValueError as exc:
                    raise DimacsFormatError(f"line {lineno}: {exc}") from exc
                try:
                    graph = WeightedGraph(n)
                except ValueError as exc:
                    raise DimacsFormatError(f"line {lineno}: {exc}") from exc
            elif kind == "a":
                if graph is None:
                    raise DimacsFormatError(f"line {lineno}: arc before problem line")
                if len(fields) != 4:
                    raise DimacsFormatError(f"line {lineno}: expected 'a <u> <v> <w>'")
                try:
                    u = int(fields[1]) - offset
                    v = int(fields[2]) - offset
                    w = float(fields[3])
                except ValueError as exc:
                    raise DimacsFormatError(f"line {lineno}: {exc}") from exc
                try:
                    graph.add_edge(u, v, w)
                except ValueError as exc:
                    raise DimacsFormatError(f"line {lineno}: {exc}") from exc
                seen_edges += 1
            else:
                raise DimacsFormatError(f"line {lineno}: unknown line type {kind!r}")

    if graph is None:
        raise DimacsFormatError("missing problem line")
    if seen_edges != declared_edges:
        raise DimacsFormatError(
            f"problem line declares {declared_edges} arcs but {seen_edges} were read"
        )
    if graph.num_edges() != seen_edges:
        logger.warning(
            f"{seen_edges - graph.num_edges()} parallel or reversed arcs were merged"
        )
    return graph


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in metres between two (lat, lon) points in degrees."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = lat2_r - lat1_r
    dlon = math.radians(lon2 - lon1)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlon / 2) ** 2
    return 2.0 * EARTH_RADIUS_M * math.asin(math.sqrt(h))


def ways_to_dimacs(
    ways: Iterable[Tuple[Mapping[str, str], Sequence[WayNode]]], target: PathOrStream
) -> float:
    """Convert road ways into a DIMACS file and return the total road length in metres.

    Each way is ``(tags, nodes)`` with ``nodes`` a sequence of
    ``(node_id, lat, lon)``. Ways without a ``highway`` tag are skipped.
    Original node ids are remapped to dense ids in first-seen order and the
    mapping is recorded as ``c <orig>-><dense>`` comments.
    """
    dense: Dict[int, int] = {}
    edges: List[Tuple[int, int, float]] = []
    length = 0.0

    for tags, nodes in ways:
        if tags.get("highway") is None or len(nodes) < 2:
            continue
        for node_id, _, _ in nodes:
            dense.setdefault(int(node_id), len(dense))
        for (a, alat, alon), (b, blat, blon) in zip(nodes, nodes[1:]):
            dist = haversine_distance(alat, alon, blat, blon)
            length += dist
            edges.append((dense[int(a)], dense[int(b)], dist))

    with _open_text(target, "w") as fh:
        fh.write(
            "c Auto-generated 9th DIMACS Implementation Challenge: Shortest Paths-format file\n"
            "c From Open Street Maps [OSM] (https://openstreetmap.org)\n"
            "c Following this line are node reassignments from ids to parsed node ids, "
            "all marked as comments lines.\n"
        )
        fh.write(f"p sp {len(dense)} {len(edges)}\n")
        for orig, new in dense.items():
            fh.write(f"c {orig}->{new}\n")
        for u, v, w in edges:
            fh.write(f"a {u} {v} {w!r}\n")

    logger.info(f"Wrote {len(dense)} nodes and {len(edges)} arcs, road length {length / 1000:.3f} km")
    return length
