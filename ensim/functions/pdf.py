"""Probability density functions used to sample model parameters.

Factories draw per-neuron parameters (time constants, gains, biases) from
these distributions, so that an ensemble is heterogeneous.
"""

import numpy as np


class PDF:
    """A distribution that can be sampled.

    Parameters
    ----------
    seed : int, optional
        Seed for this distribution's private random generator.
    """

    def __init__(self, seed=None):
        self._rng = np.random.default_rng(seed)

    def sample(self):
        """Draw one sample, returned as a 1-element array."""
        raise NotImplementedError

    def sample_value(self):
        return float(self.sample()[0])


class IndicatorPDF(PDF):
    """Uniform density on [low, high]; a point mass at ``low`` if high is None."""

    def __init__(self, low, high=None, seed=None):
        super().__init__(seed)
        self.low = float(low)
        self.high = self.low if high is None else float(high)
        if self.high < self.low:
            raise ValueError(f"high ({self.high}) must be >= low ({self.low})")

    def sample(self):
        if self.high == self.low:
            return np.array([self.low])
        return self._rng.uniform(self.low, self.high, size=1)

    def __repr__(self):
        return f"IndicatorPDF(low={self.low}, high={self.high})"


class GaussianPDF(PDF):
    """Normal density with the given mean and standard deviation."""

    def __init__(self, mean=0.0, std=1.0, seed=None):
        super().__init__(seed)
        self.mean = float(mean)
        self.std = float(std)

    def sample(self):
        return self._rng.normal(self.mean, self.std, size=1)

    def __repr__(self):
        return f"GaussianPDF(mean={self.mean}, std={self.std})"
