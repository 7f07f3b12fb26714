"""Probes: read-only observers of a named state of a Probeable target."""

import numpy as np

from ensim.utils.timeseries import TimeSeries


class Probe:
    """Records one state variable of one target after every step.

    Parameters
    ----------
    target : Probeable
    state_name : str
    record : bool
        Keep the full history if True, otherwise only the latest sample.
    ensemble_name : str, optional
        Name of the ensemble the target belongs to, None for top-level nodes.
    """

    def __init__(self, target, state_name, record=True, ensemble_name=None):
        self.target = target
        self.state_name = state_name
        self.record = bool(record)
        self.ensemble_name = ensemble_name
        self._units = []
        self.reset()

    def reset(self):
        """Forget everything collected so far."""
        self._times = []
        self._values = []
        self._last_time = -np.inf

    def collect(self):
        """Append the target's state history over the step just run.

        Called by the simulator once per step. A sample at the same time as
        the last one collected is the shared step boundary and is skipped.
        """
        history = self.target.get_history(self.state_name)
        self._units = history.units
        for time, value in zip(history.times, history.values):
            if time == self._last_time:
                continue
            self._times.append(time)
            self._values.append(np.array(value))
            self._last_time = time
        if not self.record and len(self._times) > 1:
            self._times = self._times[-1:]
            self._values = self._values[-1:]

    @property
    def data(self):
        """Collected samples as a TimeSeries."""
        if not self._times:
            return TimeSeries.empty()
        return TimeSeries(np.array(self._times), np.vstack(self._values),
                          units=list(self._units), labels=self._labels())

    def _labels(self):
        dimension = len(self._values[0])
        if dimension == 1:
            return [self.state_name]
        return [f"{self.state_name}[{i}]" for i in range(dimension)]

    def to_frame(self):
        """Collected samples as a time-indexed DataFrame."""
        return self.data.to_frame()

    def __len__(self):
        return len(self._times)

    def __repr__(self):
        owner = f"{self.ensemble_name}/" if self.ensemble_name else ""
        target = getattr(self.target, "name", type(self.target).__name__)
        return f"Probe({owner}{target}.{self.state_name}, record={self.record})"
