"""Numerical integration of dynamical systems.

The Integrator contract: given a DynamicalSystem and an input TimeSeries
defined at least at the start and end of the span, return the system's
output as a TimeSeries over the span. How the input is interpolated
between samples is up to the integrator. Integrators are stateless apart
from their parameters; the state lives in the system.

EulerIntegrator is the scheme shipped here. It holds input constant between
samples (zero-order hold), which is what spiking models with impulse
inputs expect.
"""

import copy

import numpy as np

from ensim.utils.timeseries import TimeSeries


class DynamicalSystem:
    """dx/dt = f(x, u), y = g(x, u).

    Subclasses hold their state vector in ``state`` and implement
    ``derivative`` and ``output``.
    """

    state: np.ndarray
    output_units = None

    def derivative(self, state, u):
        raise NotImplementedError

    def output(self, state, u):
        raise NotImplementedError

    @property
    def input_dimension(self):
        raise NotImplementedError

    def clone(self):
        return copy.deepcopy(self)


class Integrator:
    """Integrates a DynamicalSystem over the span of an input series."""

    def integrate(self, system, inputs):
        """Advance ``system`` across ``inputs`` and return its output series.

        Parameters
        ----------
        system : DynamicalSystem
            Mutated in place: its state ends at the end of the span.
        inputs : TimeSeries
            Input vectors, at least at the start and end times.

        Returns
        -------
        TimeSeries
        """
        raise NotImplementedError

    def clone(self):
        return copy.deepcopy(self)


class EulerIntegrator(Integrator):
    """Forward Euler with a fixed maximum step.

    The span is split into ``ceil(span / step_size)`` equal steps, so the
    step actually used never exceeds ``step_size``. Outputs are reported at
    every step boundary, including both ends of the span.

    Parameters
    ----------
    step_size : float
        Largest integration step (s).
    """

    def __init__(self, step_size=0.0005):
        if step_size <= 0:
            raise ValueError(f"step_size must be positive, got {step_size}")
        self.step_size = float(step_size)

    def integrate(self, system, inputs):
        times = inputs.times
        if len(times) < 2:
            raise ValueError("Input must be defined at the start and end times")
        if np.any(np.diff(times) <= 0):
            raise ValueError("Input times must be strictly increasing")

        span = times[-1] - times[0]
        # slack absorbs float rounding in span / step_size
        steps = max(1, int(np.ceil(span / (self.step_size * 1.01))))
        dt = span / steps
        out_times = times[0] + dt * np.arange(steps + 1)
        out_times[-1] = times[-1]

        # index of the last input sample at or before each output time
        held = np.searchsorted(times, out_times, side="right") - 1
        held = np.clip(held, 0, len(times) - 1)

        outputs = []
        state = system.state
        for i in range(steps + 1):
            u = inputs.values[held[i]]
            outputs.append(np.atleast_1d(system.output(state, u)))
            if i < steps:
                state = state + dt * np.asarray(system.derivative(state, u))
        system.state = state

        units = system.output_units
        values = np.array(outputs, dtype=np.float64)
        return TimeSeries(out_times, values,
                          units=[units] * values.shape[1] if units else [])

    def __repr__(self):
        return f"EulerIntegrator(step_size={self.step_size})"
