"""Standard-normal noise for outcome scoring."""

import math
from typing import Optional, Union

import numpy as np


class NoiseGenerator:
    """Generate standard-normal samples with the Box-Muller transform.

    The only state is the underlying uniform [0, 1) source, so a generator is
    reproducible exactly when its numpy Generator is seeded.
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ) -> None:
        """Initialize noise generator.

        Args:
            rng: Uniform source to draw from; created from seed if omitted
            seed: Random seed used when rng is not given
        """
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def _nonzero_uniform(self) -> float:
        # log(0) is -inf, so zero draws are rejected
        u = 0.0
        while u == 0.0:
            u = self.rng.random()
        return u

    def sample(self) -> float:
        """Draw one sample with mean 0 and variance 1."""
        u = self._nonzero_uniform()
        v = self._nonzero_uniform()
        return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)

    def sample_block(self, size: Union[int, tuple[int, ...]]) -> np.ndarray:
        """Draw an array of samples using the same transform and zero guard.

        Args:
            size: Output shape

        Returns:
            Array of float64 standard-normal samples
        """
        u = self._nonzero_block(size)
        v = self._nonzero_block(size)
        return np.sqrt(-2.0 * np.log(u)) * np.cos(2.0 * np.pi * v)

    def _nonzero_block(self, size: Union[int, tuple[int, ...]]) -> np.ndarray:
        values = self.rng.random(size)
        zeros = values == 0.0
        while zeros.any():
            values[zeros] = self.rng.random(int(zeros.sum()))
            zeros = values == 0.0
        return values
