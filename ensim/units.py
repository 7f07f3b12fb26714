"""Units in which node outputs and recorded states are interpreted."""

from enum import Enum


class Units(Enum):
    """Unit labels carried by outputs and time series.

    The simulator never converts between units; they are carried along so
    that plots and exports can label their axes.
    """
    UNK = "unknown"
    AVU = "arbitrary voltage units"
    ACU = "arbitrary current units"
    SPIKES = "spikes"
    SPIKES_PER_S = "spikes/s"
    S = "s"

    @staticmethod
    def uniform(units, dimension):
        """A list of ``dimension`` copies of ``units``."""
        return [units] * dimension
