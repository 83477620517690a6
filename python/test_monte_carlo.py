from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from monte_carlo import Replicate, compute_sphere_volume, float_bits, monte_carlo_worker
from pi_settings import TRUE_VALUE
from random_stream import LcgStream, MersenneTwisterStream


def test_float_bits():
    assert float_bits(1.0) == 0x3FF0000000000000
    assert float_bits(-0.0) == 0x8000000000000000
    assert float_bits(0.0) != float_bits(-0.0)


def test_estimate_counts_points_inside_the_octant():
    rng = LcgStream(99)
    state = rng.get_state()
    points = 500
    coords = rng.random((points, 3))
    x, y, z = coords[:, 0], coords[:, 1], coords[:, 2]
    inside = int(np.count_nonzero(x * x + y * y + z * z < 1.0))

    rng.set_state(state)
    estimate, elapsed = compute_sphere_volume(rng, points)
    assert estimate == 8.0 * inside / points
    assert elapsed >= 0.0


def test_chunking_does_not_change_the_estimate():
    a, _ = compute_sphere_volume(MersenneTwisterStream(5), 10_000, chunk=10_000)
    b, _ = compute_sphere_volume(MersenneTwisterStream(5), 10_000, chunk=333)
    assert float_bits(a) == float_bits(b)


def test_same_state_same_estimate_across_threads(tmp_path):
    path = str(tmp_path / "status-00")
    MersenneTwisterStream(2024).save_state(path)

    def run_from_file():
        rng = MersenneTwisterStream()
        rng.restore_state(path)
        return compute_sphere_volume(rng, 20_000)[0]

    local = run_from_file()
    with ThreadPoolExecutor(max_workers=2) as executor:
        remote = [future.result() for future in [executor.submit(run_from_file) for _ in range(2)]]
    assert all(float_bits(value) == float_bits(local) for value in remote)


def test_large_run_is_close_to_sphere_volume():
    estimate, _ = compute_sphere_volume(MersenneTwisterStream(31), 1_000_000)
    assert estimate == pytest.approx(TRUE_VALUE, abs=0.03)


def test_rejects_non_positive_points():
    with pytest.raises(ValueError):
        compute_sphere_volume(LcgStream(1), 0)


def test_replicate_is_written_once():
    replicate = Replicate(0, LcgStream(3))
    assert not replicate.done
    estimate, elapsed = replicate.run(300)
    assert replicate.done
    assert (replicate.estimate, replicate.elapsed) == (estimate, elapsed)
    with pytest.raises(RuntimeError):
        replicate.run(300)


def test_describe_shows_bit_pattern():
    replicate = Replicate(2, LcgStream(3), estimate=4.0, elapsed=0.5)
    assert replicate.describe() == "estimation: 4.00000000 (0x4010000000000000) in (0.50 sec)"


def test_worker_leaves_recording_to_caller():
    replicate = Replicate(0, LcgStream(8))
    estimate, _ = monte_carlo_worker((replicate, 200, 64))
    assert not replicate.done
    assert float_bits(estimate) == float_bits(compute_sphere_volume(LcgStream(8), 200)[0])
