"""Instantaneous outputs published by origins.

Every output is a vector together with its units and the simulated time
at which it was computed. The three kinds correspond to the simulation
modes: real values (rates, decoded quantities, function values), boolean
spikes, and precise spike-time offsets.
"""

from dataclasses import dataclass

import numpy as np

from ensim.units import Units


@dataclass
class InstantaneousOutput:
    """Base for the values held by an Origin.

    Attributes
    ----------
    values : np.ndarray
        One entry per output dimension.
    units : Units
    time : float
        Simulated time at which the values were produced.
    """
    values: np.ndarray
    units: Units = Units.UNK
    time: float = 0.0

    @property
    def dimension(self):
        return len(self.values)

    def as_real(self):
        """Values as a float array, as seen by a downstream termination."""
        return np.asarray(self.values, dtype=np.float64)

    def copy(self):
        return type(self)(np.array(self.values), self.units, self.time)

    @staticmethod
    def concatenate(outputs):
        """Join outputs of one kind end to end (used by ensemble origins)."""
        if not outputs:
            raise ValueError("Nothing to concatenate")
        kind = type(outputs[0])
        values = np.concatenate([np.asarray(o.values) for o in outputs])
        return kind(values, outputs[0].units, max(o.time for o in outputs))


@dataclass
class RealOutput(InstantaneousOutput):
    def __post_init__(self):
        self.values = np.asarray(self.values, dtype=np.float64).reshape(-1)


@dataclass
class SpikeOutput(InstantaneousOutput):
    """True where a neuron spiked during the step."""

    def __post_init__(self):
        self.values = np.asarray(self.values, dtype=bool).reshape(-1)


@dataclass
class PreciseSpikeOutput(InstantaneousOutput):
    """Spike time offset from the start of the step; negative means no spike."""

    def __post_init__(self):
        self.values = np.asarray(self.values, dtype=np.float64).reshape(-1)

    @property
    def spiked(self):
        return self.values >= 0

    def as_real(self):
        return self.spiked.astype(np.float64)
