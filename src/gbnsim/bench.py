from __future__ import annotations

import dataclasses
import logging
import statistics
from dataclasses import dataclass

from .config import SimConfig
from .simulation import Simulation


@dataclass(frozen=True, slots=True)
class BenchmarkResult:
    runs: int
    converged: int
    convergence_rate: float
    mean_rounds: float
    max_rounds: int
    mean_timeouts: float
    mean_retransmits: float
    mean_efficiency: float


def run_benchmark(config: SimConfig, runs: int = 100) -> BenchmarkResult:
    """Repeat a simulation ``runs`` times and aggregate the outcomes.

    Run ``i`` is seeded with ``config.seed + i`` so a seeded benchmark is
    reproducible; with no seed every run draws from entropy.
    """
    if runs < 1:
        raise ValueError(f"runs must be >= 1, got {runs}")

    rounds: list[int] = []
    timeouts: list[int] = []
    retransmits: list[int] = []
    efficiency: list[float] = []
    converged = 0

    # narration for hundreds of runs is noise; keep warnings only
    root = logging.getLogger()
    previous = root.level
    root.setLevel(max(previous, logging.WARNING))
    try:
        for i in range(runs):
            seed = None if config.seed is None else config.seed + i
            result = Simulation(dataclasses.replace(config, seed=seed)).run()
            converged += int(result.converged)
            rounds.append(result.rounds)
            timeouts.append(result.metrics.timeouts)
            retransmits.append(result.metrics.retransmits)
            efficiency.append(result.metrics.efficiency)
    finally:
        root.setLevel(previous)

    return BenchmarkResult(
        runs=runs,
        converged=converged,
        convergence_rate=converged / runs,
        mean_rounds=statistics.mean(rounds),
        max_rounds=max(rounds),
        mean_timeouts=statistics.mean(timeouts),
        mean_retransmits=statistics.mean(retransmits),
        mean_efficiency=statistics.mean(efficiency),
    )
