from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, TypeVar

import numpy as np

from kmedian.graphs.weighted import WeightedGraph

T = TypeVar("T")

_SEED_BOUND = 2 ** 63 - 1


@dataclass(frozen=True)
class ThorupParameters:
    """Round sizes derived from the graph size and the target center count."""

    samples_per_round: int
    iterations_per_round: int
    num_rounds: int

    def __post_init__(self) -> None:
        if min(self.samples_per_round, self.iterations_per_round, self.num_rounds) < 1:
            raise ValueError("Round sizes must all be at least 1.")


def make_rng(seed: int | None) -> np.random.Generator:
    """Return a fresh generator; every call site owns its own instance."""
    return np.random.default_rng(seed)


def child_seed(rng: np.random.Generator) -> int:
    """Draw a 63-bit seed for an independent sub-computation."""
    return int(rng.integers(0, _SEED_BOUND))


def assert_connected(graph: WeightedGraph) -> None:
    if not graph.is_connected():
        raise AssertionError(f"{graph!r} must be connected.")


def validate_k(k: int, n: int) -> None:
    if k <= 0:
        raise ValueError("k must be positive.")
    if n < 2:
        raise ValueError("The graph must have at least two vertices.")


def thorup_parameters(n: int, k: int) -> ThorupParameters:
    """Parameters of Thorup's Algorithm E with eps = 1 / sqrt(log2 n)."""
    validate_k(k, n)
    logn = math.log2(n)
    eps = 1.0 / math.sqrt(logn)
    return ThorupParameters(
        samples_per_round=math.ceil(21.0 * k * logn / eps),
        iterations_per_round=math.ceil(3 * logn),
        num_rounds=math.ceil(logn ** 1.5),
    )


def random_sample(values: Sequence[T], n: int, seed: int | None) -> list[T]:
    """Draw ``n`` distinct entries of ``values`` uniformly at random."""
    if n >= len(values):
        raise ValueError(f"Cannot draw {n} distinct samples from {len(values)} values.")
    rng = make_rng(seed)
    picks = rng.choice(len(values), size=n, replace=False)
    return [values[int(i)] for i in picks]
