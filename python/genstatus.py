#!/usr/bin/env python3
"""Generate independent random stream states for the replicates.

A single seeded stream is advanced by ``size`` draws before each snapshot,
so replicate i starts exactly ``i * size`` draws after replicate 0 and no two
replicates consuming at most ``size`` draws ever share a value.
"""
import logging
import os
import sys
import time

from pi_settings import DIMENSION, GENERATOR, REPLICATES, SEED, SIZE, STATUS_DIR
from random_stream import make_stream, status_path

logger = logging.getLogger(__name__)


def generate_status(directory=STATUS_DIR, replicates=REPLICATES, size=SIZE, seed=SEED,
                    generator=GENERATOR):
    """Write ``replicates`` status files into ``directory`` and return their paths."""
    os.makedirs(directory, exist_ok=True)
    stream = make_stream(generator, seed)

    paths = []
    for i in range(replicates):
        path = status_path(directory, i)
        logger.info("Computing status: '%s'...", path)

        stream.skip(size)
        stream.save_state(path)

        logger.info("saved %s", path)
        paths.append(path)

    return paths


def main():
    if len(sys.argv) not in (4, 5):
        print(f"Usage: {sys.argv[0]} <status_dir> <replicates> <points> [seed]")
        sys.exit(1)

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    directory = sys.argv[1]
    replicates = int(sys.argv[2])
    points = int(sys.argv[3])
    seed = int(sys.argv[4], 0) if len(sys.argv) == 5 else SEED

    start_time = time.time()
    generate_status(directory, replicates, points * DIMENSION, seed)
    print(f"Status generation took {(time.time() - start_time) * 1000:.2f}ms")


if __name__ == "__main__":
    main()
