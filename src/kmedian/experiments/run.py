from __future__ import annotations

import argparse
import logging
import time
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from kmedian.algorithms import get_costs, random_sample, thorup_sample, thorup_sample_mincost
from kmedian.graphs import WeightedGraph, read_dimacs

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExperimentConfig:
    """Parameters shared by every run of an experiment batch."""

    ks: Tuple[int, ...] = (5, 10, 25)
    repetitions: int = 5
    num_iter: int = 5
    max_vertices: int | None = 100_000

    def __post_init__(self) -> None:
        if not self.ks or any(k <= 0 for k in self.ks):
            raise ValueError("ks must be a non-empty sequence of positive integers.")
        if self.repetitions < 1:
            raise ValueError("repetitions must be positive.")
        if self.num_iter < 1:
            raise ValueError("num_iter must be positive.")


def _iter_graphs(roots: Iterable[Path]) -> Iterable[Tuple[str, Path]]:
    """Yield (graph_id, path) for DIMACS files given directly or found under folders."""
    for root in roots:
        if root.is_file():
            yield root.stem, root
            continue
        for path in sorted(root.rglob("*.gr")):
            rel_id = path.relative_to(root).with_suffix("")
            yield f"{root.name}/{rel_id.as_posix()}", path


def _safe_graph_name(graph_id: str) -> str:
    return graph_id.replace("/", "_").replace("\\", "_")


def _append_results(output_root: Path, graph_id: str, rows: List[Dict], label: str) -> None:
    if not rows:
        return
    written = len(rows)
    df = pd.DataFrame(rows)
    output_path = output_root / f"{_safe_graph_name(graph_id)}.parquet"
    if output_path.exists():
        existing_df = pd.read_parquet(output_path)
        df = pd.concat([existing_df, df], ignore_index=True)
    df.to_parquet(output_path, index=False)
    logger.info(f"  Saved {written} results for {label} to {output_path}")
    rows.clear()


def _result_row(
    graph_id: str, graph: WeightedGraph, algorithm: str, k: int, rep: int, seed: int,
    centers: List[int], costs: np.ndarray, runtime: float,
) -> Dict:
    return {
        "graph_id": graph_id,
        "num_vertices": graph.num_vertices(),
        "num_edges": graph.num_edges(),
        "algorithm": algorithm,
        "k": k,
        "repetition": rep,
        "seed": seed,
        "num_centers": len(set(centers)),
        "cost": float(costs.sum()),
        "max_distance": float(costs.max()),
        "runtime_sec": float(runtime),
    }


def _run_k_suite(
    graph_id: str, graph: WeightedGraph, k: int, config: ExperimentConfig
) -> List[Dict]:
    rows: List[Dict] = []
    vertices = graph.vertices().tolist()

    for rep in tqdm(range(config.repetitions), desc=f"k={k}", leave=False):
        seed = rep
        try:
            t0 = time.perf_counter()
            centers, _ = thorup_sample_mincost(graph, k, seed, config.num_iter)
            t1 = time.perf_counter()
            costs, _ = get_costs(graph, centers)
            rows.append(
                _result_row(graph_id, graph, "thorup_mincost", k, rep, seed, centers, costs, t1 - t0)
            )
        except Exception as exc:
            logger.warning(f"  Error in thorup_mincost (k={k}, rep={rep}): {exc}")

        try:
            t0 = time.perf_counter()
            centers = thorup_sample(graph, k, seed)
            t1 = time.perf_counter()
            costs, _ = get_costs(graph, centers)
            rows.append(
                _result_row(graph_id, graph, "thorup_sample", k, rep, seed, centers, costs, t1 - t0)
            )
        except Exception as exc:
            logger.warning(f"  Error in thorup_sample (k={k}, rep={rep}): {exc}")

        if k < len(vertices):
            t0 = time.perf_counter()
            centers = random_sample(vertices, k, seed)
            costs, _ = get_costs(graph, centers)
            t1 = time.perf_counter()
            rows.append(
                _result_row(graph_id, graph, "random_k", k, rep, seed, centers, costs, t1 - t0)
            )

    return rows


def run_experiments(
    graph_roots: List[Path],
    output_root: Path,
    config: ExperimentConfig | None = None,
    test_mode: bool = False,
    verbose: bool = False,
) -> None:
    """Run every algorithm on every graph.

    Args:
        graph_roots: DIMACS files, or folders searched recursively for ``*.gr`` files
        output_root: Directory to save result Parquet files
        config: Experiment parameters
        test_mode: If True, process only the first 3 graphs
        verbose: If True, enable DEBUG logging
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    if config is None:
        config = ExperimentConfig()

    output_root.mkdir(parents=True, exist_ok=True)

    graph_iter = list(_iter_graphs(graph_roots))
    logger.info(f"Found {len(graph_iter)} graphs to process")
    if test_mode:
        graph_iter = graph_iter[:3]
        logger.info(f"Test mode: Processing only first {len(graph_iter)} graphs")

    skipped_count = 0
    processed_count = 0

    for graph_id, path in tqdm(graph_iter, desc="Graphs", unit="graph"):
        try:
            logger.info(f"Processing graph: {graph_id}")
            graph = read_dimacs(path)
            n = graph.num_vertices()
            logger.info(f"  Graph: {n} vertices, {graph.num_edges()} edges")

            if config.max_vertices is not None and n > config.max_vertices:
                logger.warning(
                    f"  SKIPPING {graph_id}: {n} vertices exceeds max_vertices={config.max_vertices}"
                )
                skipped_count += 1
                continue
            if not graph.is_connected():
                logger.warning(f"  SKIPPING {graph_id}: graph is not connected")
                skipped_count += 1
                continue

            for k in tqdm(config.ks, desc="k", leave=False):
                try:
                    rows = _run_k_suite(graph_id, graph, k, config)
                except Exception as exc:
                    logger.error(f"  Error processing k={k} for {graph_id}: {exc}")
                    logger.error(traceback.format_exc())
                    continue
                _append_results(output_root, graph_id, rows, f"k={k}")

            processed_count += 1
        except Exception as exc:
            logger.error(f"Error processing graph {graph_id}: {exc}")
            logger.error(traceback.format_exc())
            continue

    logger.info("=" * 60)
    logger.info("Experiment summary:")
    logger.info(f"  Processed: {processed_count} graphs")
    logger.info(f"  Skipped: {skipped_count} graphs")
    logger.info(f"  Result files in: {output_root}")
    logger.info("=" * 60)


def main(argv: List[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run Thorup k-median experiments on DIMACS graphs.")
    parser.add_argument(
        "--graphs",
        type=Path,
        nargs="+",
        required=True,
        help="DIMACS files or folders containing *.gr files.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Directory where raw result Parquet files will be stored.",
    )
    parser.add_argument(
        "--k",
        type=int,
        nargs="+",
        default=[5, 10, 25],
        help="Target center counts.",
    )
    parser.add_argument(
        "--repetitions",
        type=int,
        default=5,
        help="Number of repetitions (seeds) per configuration.",
    )
    parser.add_argument(
        "--num-iter",
        type=int,
        default=5,
        help="Number of elimination trials kept by the best-of-N selector.",
    )
    parser.add_argument(
        "--max-vertices",
        type=int,
        default=100_000,
        help="Skip graphs with more vertices. Use 0 for no limit.",
    )
    parser.add_argument(
        "--test",
        action="store_true",
        help="Test mode: process only first 3 graphs.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging.",
    )

    args = parser.parse_args(argv)
    config = ExperimentConfig(
        ks=tuple(args.k),
        repetitions=args.repetitions,
        num_iter=args.num_iter,
        max_vertices=None if args.max_vertices == 0 else args.max_vertices,
    )
    run_experiments(args.graphs, args.output, config=config, test_mode=args.test, verbose=args.verbose)


if __name__ == "__main__":
    main()
