"""Output noise models attached to origins."""

import copy

import numpy as np


class Noise:
    """Perturbs the values an origin publishes.

    ``apply(start_time, end_time, values)`` returns the noisy values; the
    input array is never modified.
    """

    def apply(self, start_time, end_time, values):
        raise NotImplementedError

    def reset(self, randomize=False):
        pass

    def clone(self):
        return copy.deepcopy(self)


class GaussianNoise(Noise):
    """Additive zero-mean Gaussian noise with standard deviation ``sigma``."""

    def __init__(self, sigma, seed=None):
        self.sigma = float(sigma)
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def apply(self, start_time, end_time, values):
        values = np.asarray(values, dtype=np.float64)
        return values + self._rng.normal(0.0, self.sigma, size=values.shape)

    def reset(self, randomize=False):
        if not randomize:
            self._rng = np.random.default_rng(self.seed)

    def __repr__(self):
        return f"GaussianNoise(sigma={self.sigma})"
