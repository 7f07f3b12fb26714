"""Spiking neurons: synaptic integration feeding a spike generator.

A SpikingNeuron is the usual constituent of an ensemble. Its terminations
are summed into a current by a LinearSynapticIntegrator; the current is
scaled and biased, then drives an LIF spike generator whose output is
published on the "AXON" origin.

    I_soma(t) = scale * I_syn(t) + bias
"""

import copy

import numpy as np

from ensim.config import DEFAULT_CONFIG
from ensim.dynamics.integrator import EulerIntegrator
from ensim.errors import SimulationError, StructuralError
from ensim.functions.pdf import IndicatorPDF
from ensim.model.capabilities import Expandable, Node, Plastic, Probeable
from ensim.model.lif import LIFSpikeGenerator, LIFSpikeGeneratorFactory
from ensim.model.origin import BasicOrigin
from ensim.model.synapse import LinearSynapticIntegrator
from ensim.units import Units
from ensim.utils.timeseries import TimeSeries


class SpikingNeuron(Node, Probeable, Plastic, Expandable):
    """A point neuron with expandable, plastic terminations.

    Parameters
    ----------
    name : str
    integrator : LinearSynapticIntegrator, optional
    generator : LIFSpikeGenerator, optional
    scale : float
        Gain applied to the synaptic current.
    bias : float
        Constant current added after scaling.
    config : SimulationConfig, optional
        Parameters for the default integrator and generator. Default:
        DEFAULT_CONFIG.
    """

    AXON = "AXON"
    CURRENT = "current"

    def __init__(self, name, integrator=None, generator=None, scale=1.0, bias=0.0,
                 config=None):
        config = config if config is not None else DEFAULT_CONFIG
        self._name = name
        self.integrator = (integrator if integrator is not None
                           else LinearSynapticIntegrator(EulerIntegrator(config.max_time_step)))
        self.integrator.bind(self)
        self.generator = (generator if generator is not None
                          else LIFSpikeGenerator.from_config(config))
        self.scale = float(scale)
        self.bias = float(bias)

        self._axon = BasicOrigin(self, self.AXON, 1, Units.SPIKES)
        self._current_origin = BasicOrigin(self, self.CURRENT, 1, Units.ACU)
        self._rules = {}
        self._plasticity_interval = -1.0
        self._plasticity_time = None
        self._current = TimeSeries.empty(1, Units.ACU)
        self.time = 0.0

    # --- Node ---

    @property
    def mode(self):
        return self.generator.mode

    def set_mode(self, mode):
        self.generator.set_mode(mode)

    @property
    def origins(self):
        return [self._axon, self._current_origin]

    @property
    def terminations(self):
        return self.integrator.terminations

    def get_termination(self, name):
        return self.integrator.get_termination(name)

    def has_termination(self, name):
        return self.integrator.has_termination(name)

    def run(self, start_time, end_time):
        synaptic = self.integrator.run(start_time, end_time)
        soma = self.scale * synaptic.values[:, 0] + self.bias
        self._current = TimeSeries(synaptic.times, soma, units=[Units.ACU],
                                   labels=["I"])

        self._axon.values = self.generator.run(synaptic.times, soma)
        self._current_origin.set_values(start_time, end_time, [soma[-1]])
        self.time = end_time

        if self._plasticity_time is None:
            self._plasticity_time = start_time
        self._learn(end_time)

    def reset(self, randomize=False):
        self.integrator.reset(randomize)
        self.generator.reset(randomize)
        self._axon.reset(randomize)
        self._current_origin.reset(randomize)
        self._plasticity_time = None
        self._current = TimeSeries.empty(1, Units.ACU)
        self.time = 0.0

    def clone(self):
        result = copy.copy(self)
        result._reset_listeners()
        result.integrator = self.integrator.clone()
        result.integrator.bind(result)
        result.generator = self.generator.clone()
        result._axon = self._axon.clone(result)
        result._current_origin = self._current_origin.clone(result)
        result._rules = {name: rule.clone() for name, rule in self._rules.items()}
        result._current = TimeSeries(self._current.times.copy(),
                                     self._current.values.copy(),
                                     units=list(self._current.units),
                                     labels=self._current.labels)
        return result

    # --- Expandable ---

    def add_termination(self, name, weights, tau, modulatory=False):
        termination = self.integrator.add_termination(name, weights, tau, modulatory)
        self.fire_change()
        return termination

    def remove_termination(self, name):
        self.integrator.remove_termination(name)
        self.fire_change()

    # --- Probeable ---

    def list_states(self):
        states = {"I": "net somatic current (arbitrary units)"}
        states.update(self.generator.list_states())
        return states

    def get_history(self, state_name):
        if state_name == "I":
            return self._current
        if state_name in self.generator.list_states():
            return self.generator.get_history(state_name)
        raise SimulationError(f"The state name {state_name} is unknown.")

    # --- Plastic ---

    def set_plasticity_rule(self, termination_name, rule):
        # a rule may be bound before its termination exists
        self._rules[termination_name] = rule

    def get_plasticity_rule(self, termination_name):
        return self._rules.get(termination_name)

    @property
    def plasticity_rule_names(self):
        return list(self._rules)

    @property
    def plasticity_interval(self):
        return self._plasticity_interval

    @plasticity_interval.setter
    def plasticity_interval(self, interval):
        self._plasticity_interval = float(interval)

    def _learn(self, time):
        elapsed = time - self._plasticity_time
        if not self._rules or elapsed <= 0:
            return
        if 0 < self._plasticity_interval and elapsed < self._plasticity_interval:
            return

        for name, rule in self._rules.items():
            if not self.integrator.has_termination(name):
                continue
            termination = self.integrator.get_termination(name)
            if termination.values is not None:
                rule.set_termination_state(name, termination.values, time)
            for origin in self.origins:
                rule.set_origin_state(origin.name, origin.values, time)
            delta = rule.derivative(termination.weights,
                                    termination.input_vector(), time)
            termination.weights = termination.weights + elapsed * np.asarray(delta)
        self._plasticity_time = time


class SpikingNeuronFactory:
    """Makes SpikingNeurons with heterogeneous parameters.

    Parameters
    ----------
    generator_factory : LIFSpikeGeneratorFactory, optional
    scale : PDF, optional
        Distribution of gains. Default: 1 for every neuron.
    bias : PDF, optional
        Distribution of bias currents. Default: 0 for every neuron.
    config : SimulationConfig, optional
        Defaults for the generator factory and the synaptic integrators.
    """

    def __init__(self, generator_factory=None, scale=None, bias=None, config=None):
        self.config = config if config is not None else DEFAULT_CONFIG
        self.generator_factory = (generator_factory if generator_factory is not None
                                  else LIFSpikeGeneratorFactory(config=self.config))
        self.scale = scale if scale is not None else IndicatorPDF(1.0)
        self.bias = bias if bias is not None else IndicatorPDF(0.0)

    def make(self, name):
        if not name:
            raise StructuralError("A neuron needs a name")
        return SpikingNeuron(name,
                             generator=self.generator_factory.make(),
                             scale=self.scale.sample_value(),
                             bias=self.bias.sample_value(),
                             config=self.config)
