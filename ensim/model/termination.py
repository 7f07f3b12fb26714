"""Terminations: named input ports carrying a weight matrix.

A BasicTermination belongs to one node. An EnsembleTermination groups one
termination per constituent node of an ensemble and presents them under a
single name: input delivered to it is fanned out to every constituent.
"""

import numpy as np

from ensim.errors import SimulationError, StructuralError


class Termination:
    """Interface shared by all terminations."""

    name = None
    node = None

    @property
    def dimension(self):
        raise NotImplementedError

    def set_values(self, output):
        raise NotImplementedError

    def reset(self, randomize=False):
        pass


class BasicTermination(Termination):
    """A termination with its own weight matrix.

    Parameters
    ----------
    node : Node
        Owning node.
    name : str
    weights : array-like
        Shape (rows, dimension). Neurons use a single row: the weights
        from each input dimension onto the neuron's current.
    tau : float
        Post-synaptic current time constant (s).
    modulatory : bool
        Modulatory input is recorded but does not drive current directly.
    """

    def __init__(self, node, name, weights, tau, modulatory=False):
        weights = np.array(weights, dtype=np.float64, ndmin=2)
        if weights.ndim != 2:
            raise StructuralError(f"Termination '{name}' needs a 2-D weight matrix, "
                                  f"got shape {weights.shape}")
        if tau <= 0:
            raise StructuralError(f"Termination '{name}' needs tau > 0, got {tau}")
        self.node = node
        self.name = name
        self._weights = weights
        self.tau = float(tau)
        self.modulatory = bool(modulatory)
        self.values = None

    @property
    def dimension(self):
        return self._weights.shape[1]

    @property
    def weights(self):
        return self._weights

    @weights.setter
    def weights(self, weights):
        weights = np.array(weights, dtype=np.float64, ndmin=2)
        if weights.shape != self._weights.shape:
            raise StructuralError(f"Termination '{self.name}' has weights of shape "
                                  f"{self._weights.shape}, got {weights.shape}")
        self._weights = weights

    def set_values(self, output):
        """Deliver an InstantaneousOutput from a connected origin."""
        if output.dimension != self.dimension:
            raise SimulationError(f"Termination '{self.name}' has dimension "
                                  f"{self.dimension}, got input of dimension "
                                  f"{output.dimension}")
        self.values = output

    def input_vector(self):
        """Last delivered input as floats (zeros before any input)."""
        if self.values is None:
            return np.zeros(self.dimension)
        return self.values.as_real()

    def reset(self, randomize=False):
        self.values = None

    def clone(self, node):
        result = BasicTermination(node, self.name, self._weights.copy(),
                                  self.tau, self.modulatory)
        if self.values is not None:
            result.values = self.values.copy()
        return result

    def __repr__(self):
        return (f"BasicTermination('{self.name}', weights={self._weights.shape}, "
                f"tau={self.tau}, modulatory={self.modulatory})")


class EnsembleTermination(Termination):
    """One logical input made of one termination per constituent node.

    Parameters
    ----------
    node : Ensemble
        The ensemble presenting this termination.
    name : str
    terminations : list of Termination
        Constituent terminations, in node order. All must share a dimension.
    """

    def __init__(self, node, name, terminations):
        terminations = list(terminations)
        dimensions = {t.dimension for t in terminations}
        if len(dimensions) > 1:
            raise StructuralError(f"All constituents of termination '{name}' must have "
                                  f"the same dimension, got {sorted(dimensions)}")
        self.node = node
        self.name = name
        self.terminations = terminations
        self._dimension = dimensions.pop() if dimensions else 0

    @property
    def dimension(self):
        return self._dimension

    @property
    def weights(self):
        """Constituent weight matrices stacked row-wise (one row per node for expanded terminations)."""
        if not self.terminations:
            return np.zeros((0, self._dimension))
        return np.vstack([t.weights for t in self.terminations])

    @property
    def tau(self):
        return self.terminations[0].tau if self.terminations else None

    @tau.setter
    def tau(self, tau):
        for t in self.terminations:
            t.tau = float(tau)

    @property
    def modulatory(self):
        return self.terminations[0].modulatory if self.terminations else False

    @modulatory.setter
    def modulatory(self, modulatory):
        for t in self.terminations:
            t.modulatory = bool(modulatory)

    def set_values(self, output):
        if output.dimension != self._dimension:
            raise SimulationError(f"Termination '{self.name}' has dimension "
                                  f"{self._dimension}, got input of dimension "
                                  f"{output.dimension}")
        for t in self.terminations:
            t.set_values(output)

    def reset(self, randomize=False):
        for t in self.terminations:
            t.reset(randomize)

    def __len__(self):
        return len(self.terminations)

    def __repr__(self):
        return (f"EnsembleTermination('{self.name}', {len(self.terminations)} "
                f"constituents, dimension={self._dimension})")
