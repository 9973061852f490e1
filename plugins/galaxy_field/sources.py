"""
Uniform random sources for field generation.

The generator only needs an object with a numpy-style ``random(size)``
method returning floats in [0, 1). numpy's Generator qualifies; so does
SequenceSource, which replays fixed deviates for tests and reproducible
renders.
"""

import numpy as np


def make_source(seed=None):
    """Return a numpy Generator. seed=None draws fresh OS entropy."""
    return np.random.default_rng(seed)


class SequenceSource:
    """Cycles through a fixed list of deviates.

    Values are handed out in order, wrapping around at the end, so
    SequenceSource([0.5, 1.0]) yields 0.5, 1.0, 0.5, 1.0, ...
    """

    def __init__(self, values):
        self._values = np.asarray(values, dtype=np.float64).ravel()
        if self._values.size == 0:
            raise ValueError("SequenceSource needs at least one value")
        self._cursor = 0

    def random(self, size=None):
        n = 1 if size is None else int(np.prod(size))
        idx = (self._cursor + np.arange(n)) % self._values.size
        self._cursor = (self._cursor + n) % self._values.size
        out = self._values[idx]
        if size is None:
            return float(out[0])
        return out.reshape(size)
