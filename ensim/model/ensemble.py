"""Ensembles: many nodes presented as one.

Origins and terminations can be set up on nodes before they are grouped
into an Ensemble. Any origin or termination name that every node has is
exposed by the ensemble as a composite. After grouping, new terminations
should be added through ``Ensemble.add_termination``, which creates a
single-row termination on every expandable node and registers the
composite. A termination added directly to a node after grouping does not
appear in ``Ensemble.terminations``.

Membership is fixed at construction; only terminations and plasticity
rules change afterwards.
"""

import copy
import threading

import numpy as np

from ensim.errors import CloneError, StructuralError
from ensim.model.capabilities import Expandable, Node, Plastic
from ensim.model.mode import SimulationMode
from ensim.model.origin import EnsembleOrigin
from ensim.model.termination import EnsembleTermination
from ensim.utils import get_logger

LOG = get_logger("model.ensemble")


class Ensemble(Node, Plastic, Expandable):
    """A composite node over an ordered, fixed sequence of nodes.

    Parameters
    ----------
    name : str
        Name of the ensemble.
    nodes : list of Node
        Constituents, in order. Their common termination names must agree
        in dimension.

    Raises
    ------
    StructuralError
        If same-named terminations on the nodes have different dimensions.
    """

    def __init__(self, name, nodes):
        self._name = name
        self._nodes = list(nodes)
        self._expandable = [n for n in self._nodes if isinstance(n, Expandable)]
        self._origins = self._find_origins()
        self._terminations = self._find_terminations()
        self._expanded = {}
        self._rules = {}
        self._mode = SimulationMode.DEFAULT
        self._lock = threading.RLock()
        self.time = 0.0

    @classmethod
    def from_factory(cls, name, factory, n):
        """Build an ensemble of ``n`` nodes named "node 0", "node 1", ..."""
        return cls(name, [factory.make(f"node {i}") for i in range(n)])

    def _common_names(self, ports_of):
        if not self._nodes:
            return []
        names = [p.name for p in ports_of(self._nodes[0])]
        for node in self._nodes[1:]:
            present = {p.name for p in ports_of(node)}
            names = [name for name in names if name in present]
        return names

    def _find_origins(self):
        return {
            name: EnsembleOrigin(self, name, [n.get_origin(name) for n in self._nodes])
            for name in self._common_names(lambda n: n.origins)
        }

    def _find_terminations(self):
        return {
            name: EnsembleTermination(self, name,
                                      [n.get_termination(name) for n in self._nodes])
            for name in self._common_names(lambda n: n.terminations)
        }

    # --- Structure ---

    @property
    def nodes(self):
        return list(self._nodes)

    @property
    def expandable_nodes(self):
        return list(self._expandable)

    @property
    def n_expandable(self):
        """Number of weight rows ``add_termination`` expects."""
        return len(self._expandable)

    def __len__(self):
        return len(self._nodes)

    @property
    def origins(self):
        return list(self._origins.values())

    @property
    def terminations(self):
        return list(self._expanded.values()) + list(self._terminations.values())

    @property
    def expanded_termination_names(self):
        return list(self._expanded)

    def get_termination(self, name):
        if name in self._expanded:
            return self._expanded[name]
        if name in self._terminations:
            return self._terminations[name]
        raise StructuralError(f"Termination '{name}' does not exist")

    def add_termination(self, name, weights, tau, modulatory=False):
        """Add a termination to every expandable node.

        Parameters
        ----------
        name : str
        weights : sequence of sequences
            One row per expandable node; row i becomes the 1 x m weight
            matrix of the new termination on expandable node i. All rows
            must have the same length m, the termination's dimension.
        tau : float
            Post-synaptic time constant (s).
        modulatory : bool

        Returns
        -------
        EnsembleTermination
        """
        with self._lock:
            rows = [np.asarray(row, dtype=np.float64).reshape(-1) for row in weights]
            self._check_new_termination(name, rows, tau)

            components = []
            try:
                for node, row in zip(self._expandable, rows):
                    components.append(node.add_termination(name, [row], tau, modulatory))
            except StructuralError:
                for node in self._expandable[:len(components)]:
                    node.remove_termination(name)
                raise

            result = EnsembleTermination(self, name, components)
            self._expanded[name] = result

        LOG.info("Ensemble '%s': added termination '%s' (dimension %d) on %d nodes",
                 self.name, name, result.dimension, len(components))
        self.fire_change()
        return result

    def _check_new_termination(self, name, rows, tau):
        if len(rows) != len(self._expandable):
            raise StructuralError(f"{len(rows)} sets of weights given for "
                                  f"{len(self._expandable)} expandable nodes")
        if not rows:
            raise StructuralError(f"Ensemble '{self.name}' has no expandable nodes")
        dimension = len(rows[0])
        if any(len(row) != dimension for row in rows):
            raise StructuralError("Equal numbers of weights are needed for "
                                  "termination onto each node")
        if name in self._expanded or name in self._terminations:
            raise StructuralError(f"Termination '{name}' already exists")
        if any(node.has_termination(name) for node in self._expandable):
            raise StructuralError(f"A node of ensemble '{self.name}' already has "
                                  f"a termination named '{name}'")
        if tau <= 0:
            raise StructuralError(f"Termination '{name}' needs tau > 0, got {tau}")

    def remove_termination(self, name):
        """Remove a termination that was created by ``add_termination``.

        Raises
        ------
        StructuralError
            If the termination existed on the nodes before the ensemble was
            created, or does not exist at all.
        """
        with self._lock:
            if name in self._expanded:
                del self._expanded[name]
                for node in self._expandable:
                    node.remove_termination(name)
            elif name in self._terminations:
                raise StructuralError(f"Can't remove termination '{name}'. It consists "
                                      "of terminations on underlying nodes that existed "
                                      "before this ensemble was created.")
            else:
                raise StructuralError(f"Termination '{name}' does not exist")

        LOG.info("Ensemble '%s': removed termination '%s'", self.name, name)
        self.fire_change()

    # --- Running ---

    @property
    def mode(self):
        return self._mode

    def set_mode(self, mode):
        """Request ``mode`` on every node; each resolves it to its closest supported mode."""
        self._mode = SimulationMode(mode)
        for node in self._nodes:
            node.set_mode(self._mode)

    def run(self, start_time, end_time):
        with self._lock:
            for node in self._nodes:
                node.run(start_time, end_time)
            self.time = end_time

    def reset(self, randomize=False):
        with self._lock:
            for node in self._nodes:
                node.reset(randomize)
            self.time = 0.0

    # --- Plasticity ---

    def _plastic_nodes(self):
        return [n for n in self._nodes if isinstance(n, Plastic)]

    def set_plasticity_rule(self, termination_name, rule):
        """Set ``rule`` on every plastic node and record it on the ensemble."""
        for node in self._plastic_nodes():
            node.set_plasticity_rule(termination_name, rule)
        self._rules[termination_name] = rule

    def get_plasticity_rule(self, termination_name):
        return self._rules.get(termination_name)

    @property
    def plasticity_rule_names(self):
        return list(self._rules)

    @property
    def plasticity_interval(self):
        """Minimum interval over plastic nodes, or -1 if none is plastic."""
        intervals = [n.plasticity_interval for n in self._plastic_nodes()]
        return min(intervals) if intervals else -1.0

    @plasticity_interval.setter
    def plasticity_interval(self, interval):
        for node in self._plastic_nodes():
            node.plasticity_interval = interval

    # --- Copying ---

    def clone(self):
        """A deep copy whose composites point only at the copied nodes.

        Raises
        ------
        CloneError
            If the copied nodes cannot support the same terminations.
        """
        with self._lock:
            result = copy.copy(self)
            result._reset_listeners()
            result._lock = threading.RLock()
            result._nodes = [node.clone() for node in self._nodes]
            result._expandable = [n for n in result._nodes if isinstance(n, Expandable)]
            try:
                result._origins = result._find_origins()
                result._terminations = {
                    name: EnsembleTermination(result, name,
                                              [n.get_termination(name) for n in result._nodes])
                    for name in self._terminations
                }
                # the cloned nodes already carry their own copies of these
                result._expanded = {
                    name: EnsembleTermination(result, name,
                                              [n.get_termination(name) for n in result._expandable])
                    for name in self._expanded
                }
                result._rules = {}
                for name, rule in self._rules.items():
                    result.set_plasticity_rule(name, rule.clone())
            except StructuralError as e:
                raise CloneError(f"Problem making clone: {e}") from e
        return result

    def summary(self):
        """Return a summary string."""
        lines = [
            f"Ensemble '{self.name}': {len(self._nodes)} nodes "
            f"({len(self._expandable)} expandable)",
            f"  mode: {self._mode.value}",
            f"  origins: {list(self._origins)}",
            f"  terminations: {[t.name for t in self.terminations]}",
        ]
        if self._rules:
            lines.append(f"  plasticity rules: {list(self._rules)}")
        return "\n".join(lines)
