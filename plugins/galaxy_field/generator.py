"""
Spiral Galaxy Field Generator

Turns a parameter snapshot into a (positions, colors) buffer pair:

- Each particle gets a uniform radius in [0, radius)
- Its arm is picked by index residue (i mod branches), not at random,
  so arms stay evenly populated for any count
- The arm angle is twisted by radius * spin to form the spiral
- Each axis gets an independent power-curve scatter scaled by radius,
  which keeps the field disk-like (y carries scatter only)
- Color mixes inside -> outside by radius / params.radius

Vectorised with numpy and processed in chunks, so memory for temporaries
stays bounded at a million particles.
"""

import logging
import math

import numpy as np

from .colors import lerp_colors
from .errors import ResourceExhaustion, StateError
from .params import coerce_params
from .sources import make_source


logger = logging.getLogger(__name__)

# Per particle: radius, then (magnitude, sign) for x, y and z
DRAWS_PER_PARTICLE = 7
DEFAULT_CHUNK_SIZE = 1 << 16


class ParticleBuffer:
    """Flat float32 positions/colors for one field, 3 values per particle.

    The arrays are read-only once the generator hands them out. dispose()
    drops them; any later access raises StateError.
    """

    def __init__(self, positions, colors):
        if positions.shape != colors.shape or positions.ndim != 1 or positions.size % 3:
            raise ValueError("positions and colors must be flat arrays of equal length 3*count")
        self._positions = positions
        self._colors = colors
        self._count = positions.size // 3

    @property
    def count(self):
        return self._count

    @property
    def disposed(self):
        return self._positions is None

    @property
    def positions(self):
        if self._positions is None:
            raise StateError("particle buffer has been disposed")
        return self._positions

    @property
    def colors(self):
        if self._colors is None:
            raise StateError("particle buffer has been disposed")
        return self._colors

    def vertices(self):
        """(count, 3) view of positions."""
        return self.positions.reshape(-1, 3)

    def rgb(self):
        """(count, 3) view of colors."""
        return self.colors.reshape(-1, 3)

    @property
    def nbytes(self):
        if self.disposed:
            return 0
        return self._positions.nbytes + self._colors.nbytes

    def dispose(self):
        self._positions = None
        self._colors = None

    def __repr__(self):
        state = "disposed" if self.disposed else f"{self.nbytes:,} bytes"
        return f"ParticleBuffer(count={self._count:,}, {state})"


def _fill_chunk(params, source, start, stop, pos_out, col_out):
    """Write particles [start, stop) into (n, 3) views pos_out / col_out."""
    n = stop - start
    draws = np.asarray(source.random((n, DRAWS_PER_PARTICLE)), dtype=np.float64)
    if draws.shape != (n, DRAWS_PER_PARTICLE):
        raise ValueError(f"random source returned shape {draws.shape}, "
                         f"expected {(n, DRAWS_PER_PARTICLE)}")
    if not np.all((draws >= 0.0) & (draws <= 1.0)):
        raise ValueError("random source produced values outside [0, 1]")

    radius = draws[:, 0] * params.radius
    spin_angle = radius * params.spin
    index = np.arange(start, stop)
    branch_angle = (index % params.branches) / params.branches * 2.0 * math.pi

    # Columns 1/3/5 are magnitudes, 2/4/6 the matching signs
    magnitude = draws[:, 1::2] ** params.randomness_power
    sign = np.where(draws[:, 2::2] < 0.5, 1.0, -1.0)
    offsets = sign * magnitude * params.randomness * radius[:, np.newaxis]

    angle = branch_angle + spin_angle
    pos_out[:, 0] = np.cos(angle) * radius + offsets[:, 0]
    pos_out[:, 1] = offsets[:, 1]
    pos_out[:, 2] = np.sin(angle) * radius + offsets[:, 2]

    col_out[:] = lerp_colors(params.inside_color, params.outside_color,
                             radius / params.radius)


def generate(params, source=None, chunk_size=DEFAULT_CHUNK_SIZE):
    """Generate a spiral particle field.

    Args:
        params: ParticleFieldParameters (or a mapping of its fields)
        source: Uniform random source with a random(size) method.
            Defaults to an unseeded numpy Generator.
        chunk_size: Particles processed per vectorised pass. Does not
            change the result, only peak temporary memory.

    Returns:
        A freshly allocated ParticleBuffer with 3*count positions and colors.

    Raises:
        ValidationError: params out of range (nothing is allocated)
        ResourceExhaustion: buffers could not be allocated
    """
    params = coerce_params(params)
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    if source is None:
        source = make_source()

    count = params.count
    logger.debug("generating %d particles (%d branches, spin %.3f)",
                 count, params.branches, params.spin)
    try:
        positions = np.empty(count * 3, dtype=np.float32)
        colors = np.empty(count * 3, dtype=np.float32)
        pos_view = positions.reshape(count, 3)
        col_view = colors.reshape(count, 3)
        for start in range(0, count, chunk_size):
            stop = min(start + chunk_size, count)
            _fill_chunk(params, source, start, stop,
                        pos_view[start:stop], col_view[start:stop])
    except MemoryError as exc:
        raise ResourceExhaustion(count) from exc

    positions.flags.writeable = False
    colors.flags.writeable = False
    return ParticleBuffer(positions, colors)
