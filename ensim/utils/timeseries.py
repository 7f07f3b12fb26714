"""Time-stamped vector samples.

TimeSeries is what probes record and what integrators return: a vector of
sample times and a (n_samples, dimension) array of values.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pandas as pd

from ensim.units import Units


@dataclass
class TimeSeries:
    """Samples of a vector-valued quantity over time.

    Attributes
    ----------
    times : np.ndarray
        Sample times (s), shape (n_samples,).
    values : np.ndarray
        Sample values, shape (n_samples, dimension).
    units : list of Units
        One Units entry per dimension.
    labels : list of str, optional
        One label per dimension, used as DataFrame column names.
    """
    times: np.ndarray
    values: np.ndarray
    units: List[Units] = field(default_factory=list)
    labels: Optional[List[str]] = None

    def __post_init__(self):
        self.times = np.asarray(self.times, dtype=np.float64).reshape(-1)
        values = np.asarray(self.values, dtype=np.float64)
        if values.ndim == 1:
            values = values.reshape(len(self.times), -1) if len(self.times) else values.reshape(0, 1)
        self.values = values
        if len(self.values) != len(self.times):
            raise ValueError(f"{len(self.times)} times given for "
                             f"{len(self.values)} samples")
        if not self.units:
            self.units = [Units.UNK] * self.dimension

    @classmethod
    def empty(cls, dimension=1, units=None):
        return cls(np.zeros(0), np.zeros((0, dimension)),
                   units=[units or Units.UNK] * dimension)

    @property
    def dimension(self):
        return self.values.shape[1] if self.values.ndim == 2 else 1

    def __len__(self):
        return len(self.times)

    def to_frame(self):
        """Time-indexed DataFrame, one column per dimension."""
        labels = self.labels or [str(i) for i in range(self.dimension)]
        return pd.DataFrame(self.values, index=pd.Index(self.times, name="time"),
                            columns=labels)
