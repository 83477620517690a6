#!/usr/bin/env python3
import logging
import sys
import time

from genstatus import generate_status
from pi_report import InsufficientReplicatesError
from pi_settings import DIMENSION, GENERATOR
from random_stream import StateLoadError
from replicates import BACKENDS, run_experiment


def usage():
    print(f"Usage: {sys.argv[0]} <command> <status_dir> <replicates> <points> [workers] [backend]")
    print("Commands: genstatus, estimate")
    print(f"Backends: {', '.join(BACKENDS)}")
    sys.exit(1)


def main():
    if len(sys.argv) not in (5, 6, 7):
        usage()

    command = sys.argv[1].lower()
    status_dir = sys.argv[2]
    replicates = int(sys.argv[3])
    points = int(sys.argv[4])
    num_workers = int(sys.argv[5]) if len(sys.argv) >= 6 else None
    backend = sys.argv[6].lower() if len(sys.argv) == 7 else "process"

    if command not in ['genstatus', 'estimate']:
        print(f"Unknown command: {command}")
        print("Available commands: genstatus, estimate")
        sys.exit(1)

    if backend not in BACKENDS:
        print(f"Unknown backend: {backend}")
        print(f"Available backends: {', '.join(BACKENDS)}")
        sys.exit(1)

    if replicates <= 0 or points <= 0 or (num_workers is not None and num_workers <= 0):
        print("replicates, points and workers must be positive")
        usage()

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    start_time = time.time()
    if command == 'genstatus':
        generate_status(status_dir, replicates, points * DIMENSION, generator=GENERATOR)
    else:  # estimate
        try:
            run_experiment(status_dir, replicates, points, num_workers, backend)
        except (StateLoadError, InsufficientReplicatesError) as e:
            print(f"Error: {e}")
            sys.exit(1)
    total_time = time.time() - start_time
    print(f"Total time: {total_time * 1000:.2f}ms")


if __name__ == "__main__":
    main()
