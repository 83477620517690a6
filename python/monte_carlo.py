import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from random_stream import RandomStream
from pi_settings import CHUNK_POINTS, DIMENSION, POINTS


def float_bits(value):
    """IEEE-754 bit pattern of a float64 as an unsigned integer."""
    return int(np.array(value, dtype=np.float64).view(np.uint64))


def compute_sphere_volume(rng, points=POINTS, chunk=CHUNK_POINTS):
    """Estimate the volume of the sphere of radius 1 from ``points`` draws in the positive octant.

    Coordinates are drawn as row-major ``(n, 3)`` blocks, which consumes the
    stream in the same x, y, z order as drawing one value at a time. The
    squared distance is evaluated element-wise as ``(x*x + y*y) + z*z`` and
    points are counted as integers, so the result only depends on the stream
    state and never on how the work is scheduled.

    Returns ``(estimate, elapsed_seconds)``.
    """
    if points <= 0:
        raise ValueError(f"points must be positive, got {points}")

    start_time = time.time()
    inside = 0
    remaining = points

    while remaining:
        n = min(chunk, remaining)
        coords = rng.random((n, DIMENSION))
        x = coords[:, 0]
        y = coords[:, 1]
        z = coords[:, 2]
        squared = x * x + y * y + z * z
        inside += int(np.count_nonzero(squared < 1.0))  # sqrt unnecessary here
        remaining -= n

    estimate = 8.0 * inside / points
    return estimate, time.time() - start_time


@dataclass
class Replicate:
    """Independent state of one replicate: its stream and, once run, its result."""

    index: int
    rng: RandomStream
    estimate: Optional[float] = None
    elapsed: Optional[float] = None

    @property
    def done(self):
        return self.estimate is not None

    def record(self, estimate, elapsed):
        if self.done:
            raise RuntimeError(f"replicate {self.index} has already been run")
        self.estimate = estimate
        self.elapsed = elapsed

    def run(self, points=POINTS, chunk=CHUNK_POINTS):
        estimate, elapsed = compute_sphere_volume(self.rng, points, chunk)
        self.record(estimate, elapsed)
        return estimate, elapsed

    def describe(self):
        return f"estimation: {self.estimate:.8f} (0x{float_bits(self.estimate):016x}) in ({self.elapsed:4.2f} sec)"


def monte_carlo_worker(args):
    # Pool entry point; the caller records the result on its replicate
    replicate, points, chunk = args
    return compute_sphere_volume(replicate.rng, points, chunk)
