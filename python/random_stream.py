"""Uniform [0, 1) random streams whose state can be saved to and restored from disk."""
import logging
import os
import zipfile

import numpy as np

from pi_settings import CHUNK_POINTS, DIMENSION, SEED

logger = logging.getLogger(__name__)


class StateLoadError(OSError):
    """A persisted stream state is missing, unreadable or of the wrong kind."""


def status_path(directory, index):
    return os.path.join(directory, f"status-{index:02d}")


class RandomStream:
    """Base class for the generators.

    Subclasses provide ``random``, ``get_state`` and ``set_state``; the state
    is a dict of numpy arrays so it can be stored in an ``.npz`` archive.
    """

    kind = None

    def random(self, size=None):
        raise NotImplementedError

    def get_state(self):
        raise NotImplementedError

    def set_state(self, state):
        raise NotImplementedError

    def skip(self, count, chunk=CHUNK_POINTS * DIMENSION):
        """Draw and discard ``count`` values without holding them all in memory."""
        while count > 0:
            n = min(count, chunk)
            self.random(n)
            count -= n

    def save_state(self, path):
        with open(path, "wb") as f:
            np.savez(f, generator=np.array(self.kind), **self.get_state())

    def restore_state(self, path):
        kind, state = _read_status(path)
        if kind != self.kind:
            raise StateLoadError(f"'{path}' holds a {kind} state, expected {self.kind}")
        _apply_state(self, state, path)


class MersenneTwisterStream(RandomStream):
    kind = "mt19937"

    def __init__(self, seed=SEED):
        self._bit_generator = np.random.MT19937(seed)
        self._generator = np.random.Generator(self._bit_generator)

    def random(self, size=None):
        return self._generator.random(size)

    def get_state(self):
        state = self._bit_generator.state["state"]
        return {"key": np.array(state["key"], dtype=np.uint32), "pos": np.array(state["pos"])}

    def set_state(self, state):
        key = np.asarray(state["key"], dtype=np.uint32)
        if key.shape != (624,):
            raise ValueError(f"MT19937 key must hold 624 words, got shape {key.shape}")
        pos = int(state["pos"])
        if not 0 <= pos <= 624:
            raise ValueError(f"MT19937 position must be in [0, 624], got {pos}")
        self._bit_generator.state = {
            "bit_generator": "MT19937",
            "state": {"key": key, "pos": pos},
        }


# Linear Congruential Generator - same formula across all languages
class LcgStream(RandomStream):
    kind = "lcg"

    def __init__(self, seed=SEED):
        self.seed = seed & 0xFFFFFFFF

    def _next(self):
        self.seed = (self.seed * 1664525 + 1013904223) & 0xFFFFFFFF
        return (self.seed & 0x7FFFFFFF) / 0x80000000

    def random(self, size=None):
        if size is None:
            return self._next()
        count = int(np.prod(size))
        values = np.empty(count, dtype=np.float64)
        for i in range(count):
            values[i] = self._next()
        return values.reshape(size)

    def get_state(self):
        return {"seed": np.array(self.seed, dtype=np.uint64)}

    def set_state(self, state):
        self.seed = int(state["seed"]) & 0xFFFFFFFF


STREAMS = {
    MersenneTwisterStream.kind: MersenneTwisterStream,
    LcgStream.kind: LcgStream,
}


def make_stream(kind, seed=SEED):
    try:
        stream_class = STREAMS[kind]
    except KeyError:
        raise ValueError(f"Unknown generator: {kind} (available: {', '.join(STREAMS)})") from None
    return stream_class(seed)


def load_stream(path):
    """Restore a stream of whichever kind the status file was written by."""
    kind, state = _read_status(path)
    if kind not in STREAMS:
        raise StateLoadError(f"'{path}' holds an unknown generator: {kind}")
    stream = STREAMS[kind]()
    _apply_state(stream, state, path)
    return stream


def _read_status(path):
    logger.debug("reading status file %s", path)
    try:
        data = np.load(path, allow_pickle=False)
    except (OSError, ValueError, EOFError, zipfile.BadZipFile) as e:
        raise StateLoadError(f"cannot load '{path}': {e}") from e

    # a plain .npy file loads as a bare array
    if not isinstance(data, np.lib.npyio.NpzFile):
        raise StateLoadError(f"'{path}' is not a stream status file")

    with data:
        if "generator" not in data.files:
            raise StateLoadError(f"'{path}' is not a stream status file")
        try:
            kind = str(data["generator"])
            state = {name: data[name] for name in data.files if name != "generator"}
        except (OSError, ValueError, zipfile.BadZipFile) as e:
            raise StateLoadError(f"cannot read '{path}': {e}") from e
    return kind, state


def _apply_state(stream, state, path):
    try:
        stream.set_state(state)
    except (KeyError, TypeError, ValueError) as e:
        raise StateLoadError(f"corrupt {stream.kind} state in '{path}': {e}") from e
