"""Runs simulations of a Network.

The simulator is bound to one network at a time by ``initialize``. It
runs the network's own node objects; changes made to the network's
structure after ``initialize`` may or may not be honoured until the
simulator is initialized again. Changes that should happen during a
simulation belong in the model itself.

Each step of ``run``:
  1. every projection delivers its origin's value to its termination,
  2. every node runs over the step, in the order it was added,
  3. every probe collects its target's state.
"""

import math

from ensim.config import DEFAULT_CONFIG
from ensim.errors import SimulationError, StructuralError
from ensim.model.capabilities import Probeable
from ensim.model.ensemble import Ensemble
from ensim.sim.probe import Probe
from ensim.utils import get_logger
from ensim.utils.mutable import VisiblyMutable

LOG = get_logger("sim.simulator")


class Simulator(VisiblyMutable):
    """A local, single-threaded simulator.

    Parameters
    ----------
    config : SimulationConfig, optional
        Supplies the default step size and probe recording flag.
    """

    def __init__(self, config=None):
        self.config = config if config is not None else DEFAULT_CONFIG
        self._network = None
        self._probes = []
        self.time = 0.0

    @property
    def network(self):
        return self._network

    def initialize(self, network):
        """Bind to ``network``. Re-initializing replaces the previous binding."""
        self._network = network
        self._probes = []
        LOG.info("Initialized with %r", network)
        self.fire_change()

    def _require_network(self):
        if self._network is None:
            raise SimulationError("The simulator has not been initialized with a network")
        return self._network

    # --- Running ---

    def run(self, start_time, end_time, step_size=None):
        """Run the network from ``start_time`` to ``end_time``.

        Node states are assumed consistent with ``start_time``. The last
        step is shortened if the span is not a multiple of ``step_size``.

        Parameters
        ----------
        start_time, end_time : float
            Simulated times (s).
        step_size : float, optional
            How often outputs pass between nodes (s). Individual nodes may
            integrate with smaller steps. Default: ``config.step_size``.

        Raises
        ------
        SimulationError
            If the simulator is unbound or any node fails to run. Steps
            completed before the failure are not rolled back.
        """
        network = self._require_network()
        step_size = self.config.step_size if step_size is None else float(step_size)
        if step_size <= 0:
            raise ValueError(f"step_size must be positive, got {step_size}")
        if end_time < start_time:
            raise ValueError(f"end_time ({end_time}) is before start_time ({start_time})")

        n_steps = int(math.ceil((end_time - start_time) / step_size - 1e-9))
        LOG.info("Running %d nodes from %.4f s to %.4f s (%d steps of %.4g s)",
                 len(network.nodes), start_time, end_time, n_steps, step_size)

        for i in range(n_steps):
            t0 = start_time + i * step_size
            t1 = end_time if i == n_steps - 1 else start_time + (i + 1) * step_size
            try:
                self._step(network, t0, t1)
            except SimulationError as e:
                LOG.error("Simulation failed at t=%.4f s: %s", t0, e)
                raise
            except Exception as e:
                LOG.error("Simulation failed at t=%.4f s: %s", t0, e)
                raise SimulationError(f"Problem running step [{t0}, {t1}]: {e}") from e
            self.time = t1

        LOG.info("Run complete at t=%.4f s", self.time)

    def _step(self, network, start_time, end_time):
        for projection in network.projections:
            projection.deliver()
        for node in network.nodes:
            node.run(start_time, end_time)
        for probe in self._probes:
            probe.collect()

    def reset_network(self, randomize=False):
        """Reset every node in the bound network and clear probe histories."""
        network = self._require_network()
        for node in network.nodes:
            node.reset(randomize)
        for probe in self._probes:
            probe.reset()
        self.time = 0.0

    # --- Probes ---

    @property
    def probes(self):
        return list(self._probes)

    def add_probe(self, node_name, state, record=None):
        """Probe ``state`` of the top-level node named ``node_name``."""
        network = self._require_network()
        try:
            target = network.get_node(node_name)
        except StructuralError as e:
            raise SimulationError(str(e)) from e
        return self._attach(None, target, state, record)

    def add_neuron_probe(self, ensemble_name, neuron_index, state, record=None):
        """Probe ``state`` of node ``neuron_index`` (from 0) of an ensemble."""
        ensemble = self._find_ensemble(ensemble_name)
        nodes = ensemble.nodes
        if not 0 <= neuron_index < len(nodes):
            raise SimulationError(f"Ensemble '{ensemble_name}' has no node "
                                  f"{neuron_index} (it has {len(nodes)})")
        return self._attach(ensemble_name, nodes[neuron_index], state, record)

    def add_target_probe(self, ensemble_name, target, state, record=None):
        """Probe ``state`` of ``target`` directly.

        ``ensemble_name`` names the ensemble the target belongs to, or is
        None for a top-level node.
        """
        if ensemble_name is not None:
            self._find_ensemble(ensemble_name)
        return self._attach(ensemble_name, target, state, record)

    def _find_ensemble(self, name):
        network = self._require_network()
        try:
            ensemble = network.get_node(name)
        except StructuralError as e:
            raise SimulationError(str(e)) from e
        if not isinstance(ensemble, Ensemble):
            raise SimulationError(f"Node '{name}' is not an ensemble")
        return ensemble

    def _attach(self, ensemble_name, target, state, record):
        if not isinstance(target, Probeable):
            raise SimulationError(f"Target {target!r} is not probeable")
        if state not in target.list_states():
            raise SimulationError(f"Target {target!r} has no state '{state}'. "
                                  f"Available: {list(target.list_states())}")
        record = self.config.record if record is None else record
        probe = Probe(target, state, record, ensemble_name)
        self._probes.append(probe)
        LOG.info("Added %r", probe)
        self.fire_change()
        return probe

    def remove_probe(self, probe):
        if not any(p is probe for p in self._probes):
            raise SimulationError(f"{probe!r} is not attached to this simulator")
        self._probes = [p for p in self._probes if p is not probe]
        LOG.info("Removed %r", probe)
        self.fire_change()

    def clone(self):
        """A simulator with the same configuration, but no network, probes or listeners."""
        return Simulator(self.config)
