"""Capability interfaces implemented by simulatable units.

A unit implements only the capabilities it has:

- Node        runs, resets, and exposes named origins and terminations
- Probeable   exposes named state histories to probes
- Plastic     accepts plasticity rules on its terminations
- Expandable  can grow a new termination on request

An Ensemble is a Node that contains other Nodes and forwards capability
calls to them; it does not inherit their behaviour.
"""

from abc import ABC, abstractmethod

from ensim.errors import StructuralError
from ensim.utils.mutable import VisiblyMutable


class Node(VisiblyMutable, ABC):
    """A unit of simulation.

    Concrete nodes store their name in ``_name`` and get a name property
    that notifies listeners when it changes.
    """

    _name = None
    documentation = None

    @property
    def name(self):
        return self._name

    @name.setter
    def name(self, new_name):
        old_name = self._name
        if new_name == old_name:
            return
        self._name = new_name
        self.fire_name_change(old_name, new_name)

    @abstractmethod
    def run(self, start_time, end_time):
        """Advance the node from ``start_time`` to ``end_time``."""

    @abstractmethod
    def reset(self, randomize=False):
        """Return to the initial condition."""

    @property
    @abstractmethod
    def mode(self):
        """The SimulationMode currently in use."""

    @abstractmethod
    def set_mode(self, mode):
        """Request a SimulationMode; unsupported modes resolve to the closest one."""

    @property
    @abstractmethod
    def origins(self):
        """List of Origins."""

    @property
    @abstractmethod
    def terminations(self):
        """List of Terminations."""

    def get_origin(self, name):
        for origin in self.origins:
            if origin.name == name:
                return origin
        raise StructuralError(f"Node '{self.name}' has no origin '{name}'")

    def get_termination(self, name):
        for termination in self.terminations:
            if termination.name == name:
                return termination
        raise StructuralError(f"Node '{self.name}' has no termination '{name}'")

    def has_termination(self, name):
        return any(t.name == name for t in self.terminations)

    @abstractmethod
    def clone(self):
        """An independent copy with no listeners."""

    def __repr__(self):
        return f"{type(self).__name__}('{self.name}')"


class Probeable(ABC):
    """A unit whose internal state can be recorded."""

    @abstractmethod
    def list_states(self):
        """Mapping of state name to a human-readable description."""

    @abstractmethod
    def get_history(self, state_name):
        """TimeSeries of the named state over the most recent run.

        Raises SimulationError for an unknown state name.
        """


class Plastic(ABC):
    """A unit whose termination weights can change under plasticity rules."""

    @abstractmethod
    def set_plasticity_rule(self, termination_name, rule):
        """Bind ``rule`` to the named termination, replacing any previous rule."""

    @abstractmethod
    def get_plasticity_rule(self, termination_name):
        """The rule bound to the named termination, or None."""

    @property
    @abstractmethod
    def plasticity_rule_names(self):
        """Names of terminations that have a rule."""

    @property
    @abstractmethod
    def plasticity_interval(self):
        """Simulated time (s) between weight updates; <= 0 means every run."""

    @plasticity_interval.setter
    @abstractmethod
    def plasticity_interval(self, interval):
        pass


class Expandable(ABC):
    """A unit that can create terminations on demand."""

    @abstractmethod
    def add_termination(self, name, weights, tau, modulatory=False):
        """Create and return a termination with the given weight matrix."""

    @abstractmethod
    def remove_termination(self, name):
        """Remove a termination created by add_termination."""
