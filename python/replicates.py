"""Run the replicates in parallel, then sequentially, and cross-check the two passes."""
import logging
import time
import warnings
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from multiprocessing import Pool
from typing import List

from monte_carlo import Replicate, float_bits, monte_carlo_worker
from pi_report import AggregateStatistics, InsufficientReplicatesError, format_report, summarize
from pi_settings import CHUNK_POINTS, POINTS, REPLICATES, STATUS_DIR
from random_stream import load_stream, status_path

logger = logging.getLogger(__name__)

BACKENDS = ("process", "thread")


class ReproducibilityMismatch(RuntimeWarning):
    """Parallel and sequential estimates of a replicate differ in at least one bit."""


@dataclass(frozen=True)
class ReproducibilityCheck:
    index: int
    parallel: float
    sequential: float

    @property
    def matches(self):
        return float_bits(self.parallel) == float_bits(self.sequential)

    def describe(self):
        if self.matches:
            return "reproducibility confirmed"
        return (
            f"reproducibility issue {self.sequential:.8f} (0x{float_bits(self.sequential):016x})"
            f" vs {self.parallel:.8f} (0x{float_bits(self.parallel):016x})"
        )


@dataclass
class ExperimentResult:
    parallel: List[Replicate]
    sequential: List[Replicate]
    statistics: AggregateStatistics
    checks: List[ReproducibilityCheck]
    parallel_elapsed: float
    sequential_elapsed: float

    @property
    def reproducible(self):
        return all(check.matches for check in self.checks)


def load_replicates(directory=STATUS_DIR, replicates=REPLICATES):
    """Restore one stream per replicate; raises StateLoadError on the first bad file."""
    loaded = []
    for i in range(replicates):
        path = status_path(directory, i)
        logger.info("loading '%s'...", path)
        loaded.append(Replicate(i, load_stream(path)))
    return loaded


def run_parallel(replicates, points=POINTS, workers=None, backend="process", chunk=CHUNK_POINTS):
    """Run every replicate as its own task and wait for all of them."""
    if backend not in BACKENDS:
        raise ValueError(f"Unknown backend: {backend} (available: {', '.join(BACKENDS)})")
    if not replicates:
        return replicates

    num_workers = workers or len(replicates)
    tasks = [(replicate, points, chunk) for replicate in replicates]

    if backend == "process":
        with Pool(processes=num_workers) as pool:
            results = pool.map(monte_carlo_worker, tasks)
    else:
        with ThreadPoolExecutor(max_workers=num_workers) as executor:
            results = list(executor.map(monte_carlo_worker, tasks))

    for replicate, (estimate, elapsed) in zip(replicates, results):
        replicate.record(estimate, elapsed)
    return replicates


def run_sequential(replicates, points=POINTS, chunk=CHUNK_POINTS):
    """Run the replicates one after another in index order; returns the summed duration."""
    duration = 0.0
    for replicate in replicates:
        replicate.run(points, chunk)
        duration += replicate.elapsed
    return duration


def check_reproducibility(parallel, sequential):
    checks = []
    for first, second in zip(parallel, sequential):
        check = ReproducibilityCheck(first.index, first.estimate, second.estimate)
        if not check.matches:
            warnings.warn(f"replicate {check.index}: {check.describe()}", ReproducibilityMismatch, stacklevel=2)
        checks.append(check)
    return checks


def run_experiment(directory=STATUS_DIR, replicates=REPLICATES, points=POINTS, workers=None,
                   backend="process", chunk=CHUNK_POINTS):
    if replicates < 2:
        raise InsufficientReplicatesError(
            f"at least 2 replicates are needed for an unbiased variance, got {replicates}"
        )
    if points <= 0:
        raise ValueError(f"points must be positive, got {points}")

    parallel = load_replicates(directory, replicates)

    print("\nrunning (parallel)...")
    start_time = time.time()
    run_parallel(parallel, points, workers, backend, chunk)
    parallel_elapsed = time.time() - start_time
    for replicate in parallel:
        print(replicate.describe())
    print(f"Parallel time: {parallel_elapsed:4.2f} sec")

    statistics = summarize([replicate.estimate for replicate in parallel])
    print()
    print(format_report(statistics))

    print("\nrunning (sequential)...")
    sequential = load_replicates(directory, replicates)
    sequential_elapsed = run_sequential(sequential, points, chunk)

    checks = check_reproducibility(parallel, sequential)
    for replicate, check in zip(sequential, checks):
        print(replicate.describe())
        print(check.describe())
    print(f"Sequential time: {sequential_elapsed:4.2f} sec")

    return ExperimentResult(parallel, sequential, statistics, checks, parallel_elapsed, sequential_elapsed)
