"""Leaky integrate-and-fire spike generation.

The subthreshold model (Koch 1999) is C dV/dt + V/R = I(t). When V reaches
threshold a spike occurs; spike currents themselves are not modelled. We
take R = Vth = 1, which does not limit the behaviour of the model, so that

    dV/dt = (I(t) - V) / tau_rc

In the spiking modes the membrane is integrated with forward Euler on a
sub-step grid no coarser than ``max_time_step``. Spike times are linearly
interpolated inside the sub-step where threshold is crossed, and the part
of the sub-step after the spike counts towards the refractory period, so
that spike timing does not snap to the grid.

In the rate modes the output is the closed-form steady-state rate

    rate = 1 / (tau_ref - tau_rc * ln(1 - 1/I))    for I > 1, else 0.

References:
    Koch C (1999). Biophysics of Computation. Oxford University Press.
"""

import math

import numpy as np

from ensim.config import DEFAULT_CONFIG
from ensim.errors import SimulationError
from ensim.functions.pdf import IndicatorPDF
from ensim.model.capabilities import Probeable
from ensim.model.mode import SimulationMode, closest_mode
from ensim.model.output import PreciseSpikeOutput, RealOutput, SpikeOutput
from ensim.units import Units
from ensim.utils.timeseries import TimeSeries

V_THRESHOLD = 1.0

# max_time_step is stretched by this factor so that a span that is an
# integer multiple of it is not split into one extra sub-step by rounding
MAX_TIME_STEP_CORRECTION = 1.01

NO_SPIKE = -1.0


class LIFSpikeGenerator(Probeable):
    """LIF spike generator for a single neuron.

    Parameters
    ----------
    max_time_step : float
        Maximum integration sub-step (s). Shorter sub-steps are used when a
        run's span is not an integer multiple of this value.
    tau_rc : float
        Resistive-capacitive (membrane) time constant (s).
    tau_ref : float
        Refractory period (s).
    initial_voltage : float
        Voltage after reset.

    Parameters left as None take their value from DEFAULT_CONFIG.
    """

    SUPPORTED_MODES = (SimulationMode.DEFAULT, SimulationMode.CONSTANT_RATE,
                       SimulationMode.RATE, SimulationMode.PRECISE)

    def __init__(self, max_time_step=None, tau_rc=None, tau_ref=None,
                 initial_voltage=None):
        config = DEFAULT_CONFIG
        self.max_time_step = config.max_time_step if max_time_step is None else max_time_step
        self.tau_rc = float(config.tau_rc if tau_rc is None else tau_rc)
        self.tau_ref = float(config.tau_ref if tau_ref is None else tau_ref)
        self.initial_voltage = float(config.initial_voltage if initial_voltage is None
                                     else initial_voltage)
        self._mode = SimulationMode.DEFAULT
        self._supported_modes = list(self.SUPPORTED_MODES)
        self.reset(False)

    @classmethod
    def from_config(cls, config):
        """A generator with every parameter taken from ``config``."""
        return cls(config.max_time_step, config.tau_rc, config.tau_ref,
                   config.initial_voltage)

    @property
    def max_time_step(self):
        """Maximum integration sub-step (s), as configured."""
        return self._max_time_step / MAX_TIME_STEP_CORRECTION

    @max_time_step.setter
    def max_time_step(self, max_time_step):
        if max_time_step <= 0:
            raise ValueError(f"max_time_step must be positive, got {max_time_step}")
        self._max_time_step = float(max_time_step) * MAX_TIME_STEP_CORRECTION

    @property
    def voltage(self):
        return self._voltage

    @property
    def supported_modes(self):
        return tuple(self._supported_modes)

    @property
    def mode(self):
        return self._mode

    def set_mode(self, mode):
        self._mode = closest_mode(mode, self._supported_modes)

    def reset(self, randomize=False):
        # the refractory clock starts at its own threshold, so the unit may
        # spike immediately
        self._time_since_last_spike = self.tau_ref
        self._voltage = self.initial_voltage
        self._time = np.zeros(0)
        self._voltage_history = np.zeros(0)

    def run(self, times, currents):
        """Run over ``times`` driven by ``currents`` sampled at those times.

        Parameters
        ----------
        times : array-like
            Strictly increasing simulated times, at least two.
        currents : array-like
            Injected current at each time, held until the next sample.

        Returns
        -------
        InstantaneousOutput
            SpikeOutput (DEFAULT), PreciseSpikeOutput (PRECISE) or a
            RealOutput rate (CONSTANT_RATE, RATE), stamped with times[-1].
        """
        times = np.asarray(times, dtype=np.float64).reshape(-1)
        currents = np.asarray(currents, dtype=np.float64).reshape(-1)
        self._check_arguments(times, currents)
        end_time = float(times[-1])

        if self._mode in (SimulationMode.CONSTANT_RATE, SimulationMode.RATE):
            spike_rate = self._constant_rate_run(currents[-1])
            return RealOutput([spike_rate], Units.SPIKES_PER_S, end_time)

        spike_offset = self._precise_spiking_run(times, currents)
        if self._mode == SimulationMode.PRECISE:
            return PreciseSpikeOutput([spike_offset], Units.SPIKES, end_time)
        return SpikeOutput([spike_offset >= 0], Units.SPIKES, end_time)

    @staticmethod
    def _check_arguments(times, currents):
        if len(times) < 2:
            raise ValueError("Arg times must have length at least 2")
        if len(times) != len(currents):
            raise ValueError(f"Args times and currents must have equal length "
                             f"({len(times)} != {len(currents)})")
        if np.any(np.diff(times) <= 0):
            raise ValueError("Arg times must be strictly increasing")

    def _precise_spiking_run(self, times, currents):
        """Integrate the membrane; return the last spike's offset from times[0]."""
        span = times[-1] - times[0]
        steps = int(math.ceil(span / self._max_time_step))
        dt = span / steps

        self._time = times[0] + dt * np.arange(steps)
        self._voltage_history = np.zeros(steps)

        tau_rc = self.tau_rc
        tau_ref = self.tau_ref
        voltage = self._voltage
        since_spike = self._time_since_last_spike
        spike_offset = NO_SPIKE

        input_index = 0
        for i in range(steps):
            while input_index + 1 < len(times) and times[input_index + 1] <= self._time[i]:
                input_index += 1
            current = currents[input_index]

            dv = (current - voltage) / tau_rc
            since_spike += dt
            if since_spike < tau_ref:
                dv = 0.0
            elif since_spike < tau_ref + dt:
                dv *= (since_spike - tau_ref) / dt

            previous = voltage
            voltage = max(0.0, voltage + dt * dv)
            self._voltage_history[i] = voltage

            if voltage >= V_THRESHOLD:
                rise = voltage - previous
                d_spike = (V_THRESHOLD - previous) * dt / rise if rise > 0 else 0.0
                # the spike belongs to [i*dt, (i+1)*dt), also when V lands exactly on threshold
                d_spike = min(max(d_spike, 0.0), np.nextafter(dt, 0.0))
                since_spike = dt - d_spike
                spike_offset = i * dt + d_spike
                voltage = 0.0

        self._voltage = voltage
        self._time_since_last_spike = since_spike
        return spike_offset

    def _constant_rate_run(self, current):
        # no trajectory is computed in rate modes
        self._time = np.zeros(0)
        self._voltage_history = np.zeros(0)
        return lif_rate(current, self.tau_rc, self.tau_ref)

    def list_states(self):
        return {"V": "membrane potential (arbitrary units)"}

    def get_history(self, state_name):
        if state_name != "V":
            raise SimulationError(f"The state name {state_name} is unknown.")
        return TimeSeries(self._time.copy(), self._voltage_history.copy(),
                          units=[Units.AVU], labels=["V"])

    def clone(self):
        result = LIFSpikeGenerator.__new__(LIFSpikeGenerator)
        result.__dict__.update(self.__dict__)
        result._supported_modes = list(self._supported_modes)
        result._time = self._time.copy()
        result._voltage_history = self._voltage_history.copy()
        return result

    def __repr__(self):
        return (f"LIFSpikeGenerator(tau_rc={self.tau_rc}, tau_ref={self.tau_ref}, "
                f"max_time_step={self.max_time_step})")


def lif_rate(current, tau_rc, tau_ref):
    """Steady-state LIF firing rate (spikes/s) for a constant normalised current."""
    if current <= 1:
        return 0.0
    return 1.0 / (tau_ref - tau_rc * math.log(1.0 - 1.0 / current))


class LIFSpikeGeneratorFactory:
    """Makes LIFSpikeGenerators with time constants drawn from PDFs.

    Parameters
    ----------
    tau_rc : PDF, optional
        Membrane time constants (s). Default: ``config.tau_rc`` for every neuron.
    tau_ref : PDF, optional
        Refractory periods (s). Default: ``config.tau_ref`` for every neuron.
    max_time_step : float, optional
        Integration sub-step for the generators made. Default:
        ``config.max_time_step``.
    config : SimulationConfig, optional
        Source of the defaults. Default: DEFAULT_CONFIG.
    """

    def __init__(self, tau_rc=None, tau_ref=None, max_time_step=None, config=None):
        self.config = config if config is not None else DEFAULT_CONFIG
        self.tau_rc = tau_rc if tau_rc is not None else IndicatorPDF(self.config.tau_rc)
        self.tau_ref = tau_ref if tau_ref is not None else IndicatorPDF(self.config.tau_ref)
        self.max_time_step = (max_time_step if max_time_step is not None
                              else self.config.max_time_step)

    def make(self):
        return LIFSpikeGenerator(self.max_time_step,
                                 self.tau_rc.sample_value(),
                                 self.tau_ref.sample_value(),
                                 self.config.initial_voltage)
