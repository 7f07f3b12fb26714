"""Linear synaptic integration: terminations to somatic current.

Each non-modulatory termination drives its own first-order post-synaptic
current

    tau dI/dt = w . x - I

and the neuron's input current is the sum over terminations. Real-valued
input x is held over the step. Spike input arrives as an impulse: the
current jumps by w . s / tau at the start of the step, so each spike
contributes a total charge of w . s whatever tau is.
"""

import numpy as np

from ensim.config import DEFAULT_CONFIG
from ensim.dynamics.integrator import DynamicalSystem, EulerIntegrator
from ensim.errors import StructuralError
from ensim.model.output import PreciseSpikeOutput, SpikeOutput
from ensim.model.termination import BasicTermination
from ensim.units import Units
from ensim.utils.timeseries import TimeSeries


class PostSynapticCurrent(DynamicalSystem):
    """First-order low-pass filter of the weighted input."""

    output_units = Units.ACU

    def __init__(self, tau):
        self.tau = float(tau)
        self.state = np.zeros(1)

    @property
    def input_dimension(self):
        return 1

    def derivative(self, state, u):
        return (np.asarray(u) - state) / self.tau

    def output(self, state, u):
        return state

    def reset(self):
        self.state = np.zeros(1)


class LinearSynapticIntegrator:
    """Sums post-synaptic currents from single-row terminations.

    Parameters
    ----------
    integrator : Integrator, optional
        Used to solve every post-synaptic current. Default: EulerIntegrator
        stepping at ``DEFAULT_CONFIG.max_time_step``.
    """

    def __init__(self, integrator=None):
        self.integrator = (integrator if integrator is not None
                           else EulerIntegrator(DEFAULT_CONFIG.max_time_step))
        self.node = None
        self._terminations = {}
        self._currents = {}

    def bind(self, node):
        """Make ``node`` the owner of this integrator's terminations."""
        self.node = node
        for termination in self._terminations.values():
            termination.node = node

    @property
    def terminations(self):
        return list(self._terminations.values())

    def get_termination(self, name):
        try:
            return self._terminations[name]
        except KeyError:
            raise StructuralError(f"Termination '{name}' does not exist") from None

    def has_termination(self, name):
        return name in self._terminations

    def add_termination(self, name, weights, tau, modulatory=False):
        """Create a termination with a single-row weight matrix."""
        if name in self._terminations:
            raise StructuralError(f"Termination '{name}' already exists")
        weights = np.array(weights, dtype=np.float64, ndmin=2)
        if weights.ndim != 2 or weights.shape[0] != 1:
            raise StructuralError(f"A neuron termination needs a 1 x n weight matrix, "
                                  f"got shape {weights.shape}")
        termination = BasicTermination(self.node, name, weights, tau, modulatory)
        self._terminations[name] = termination
        self._currents[name] = PostSynapticCurrent(tau)
        return termination

    def remove_termination(self, name):
        if name not in self._terminations:
            raise StructuralError(f"Termination '{name}' does not exist")
        del self._terminations[name]
        del self._currents[name]

    def run(self, start_time, end_time):
        """Integrate all currents over the step and return their sum.

        Returns
        -------
        TimeSeries
            Total current on the integrator's time grid over the step.
        """
        total = None
        for name, termination in self._terminations.items():
            if termination.modulatory:
                continue
            system = self._currents[name]
            system.tau = termination.tau
            weights = termination.weights[0]

            drive = 0.0
            if isinstance(termination.values, (SpikeOutput, PreciseSpikeOutput)):
                system.state = system.state + weights @ termination.input_vector() / system.tau
            else:
                drive = weights @ termination.input_vector()

            inputs = TimeSeries([start_time, end_time], [[drive], [drive]])
            current = self.integrator.integrate(system, inputs)
            if total is None:
                total = current
            else:
                total = TimeSeries(total.times, total.values + current.values,
                                   units=total.units)

        if total is None:
            total = TimeSeries([start_time, end_time], [[0.0], [0.0]],
                               units=[Units.ACU])
        return total

    def reset(self, randomize=False):
        for name, termination in self._terminations.items():
            termination.reset(randomize)
            self._currents[name].reset()

    def clone(self):
        result = LinearSynapticIntegrator(self.integrator.clone())
        for name, termination in self._terminations.items():
            result._terminations[name] = termination.clone(None)
            result._currents[name] = self._currents[name].clone()
        return result
