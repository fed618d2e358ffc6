from __future__ import annotations

import pandas as pd
import pytest

from conftest import grid_graph
from kmedian.analysis.summarize import summarize
from kmedian.experiments.run import ExperimentConfig, run_experiments
from kmedian.graphs import write_dimacs


def test_experiment_config_validation() -> None:
    with pytest.raises(ValueError):
        ExperimentConfig(ks=())
    with pytest.raises(ValueError):
        ExperimentConfig(repetitions=0)


def test_run_and_summarize_small_batch(tmp_path) -> None:
    graph_dir = tmp_path / "graphs"
    graph_dir.mkdir()
    write_dimacs(grid_graph(5, 5), graph_dir / "grid.gr")
    raw = tmp_path / "raw"

    config = ExperimentConfig(ks=(1, 2), repetitions=2, num_iter=2)
    run_experiments([graph_dir], raw, config=config)

    results = pd.read_parquet(raw / "graphs_grid.parquet")
    assert set(results["algorithm"]) == {"thorup_mincost", "thorup_sample", "random_k"}
    assert len(results) == 2 * 2 * 3
    assert (results["num_vertices"] == 25).all()
    random_rows = results[results["algorithm"] == "random_k"]
    assert (random_rows["num_centers"] == random_rows["k"]).all()

    summary = summarize(raw, tmp_path / "summary")
    assert set(summary["k"]) == {1, 2}
    assert (tmp_path / "summary" / "table_algorithm_comparison.csv").exists()
    assert (tmp_path / "summary" / "cost_ratio_by_k.png").exists()
