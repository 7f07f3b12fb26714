"""Origins: named output ports.

BasicOrigin holds whatever its node last published. EnsembleOrigin presents
same-named origins of many nodes as one output by concatenation.
"""

import numpy as np

from ensim.errors import StructuralError
from ensim.model.output import InstantaneousOutput, RealOutput
from ensim.units import Units


class Origin:
    """Interface shared by all origins."""

    name = None
    node = None

    @property
    def dimension(self):
        raise NotImplementedError

    @property
    def values(self):
        """The most recent InstantaneousOutput."""
        raise NotImplementedError


class BasicOrigin(Origin):
    """An origin whose values are set directly by its node.

    Parameters
    ----------
    node : Node
        Owning node.
    name : str
    dimension : int
    units : Units
    """

    def __init__(self, node, name, dimension, units=Units.UNK):
        self.node = node
        self.name = name
        self.units = units
        self.noise = None
        self._dimension = int(dimension)
        self._values = RealOutput(np.zeros(self._dimension), units, 0.0)

    @property
    def dimension(self):
        return self._dimension

    def set_dimensions(self, dimension):
        """Resize the origin; its value is zeroed to the new size."""
        dimension = int(dimension)
        if dimension < 0:
            raise StructuralError(f"Origin dimension must be >= 0, got {dimension}")
        self._dimension = dimension
        self._values = RealOutput(np.zeros(dimension), self.units, self._values.time)

    @property
    def values(self):
        return self._values

    @values.setter
    def values(self, output):
        if not isinstance(output, InstantaneousOutput):
            raise StructuralError(f"Origin '{self.name}' expects an InstantaneousOutput, "
                                  f"got {type(output).__name__}")
        if output.dimension != self._dimension:
            raise StructuralError(f"Origin '{self.name}' has dimension {self._dimension}, "
                                  f"got output of dimension {output.dimension}")
        self._values = output

    def set_values(self, start_time, end_time, values):
        """Publish real ``values`` computed over [start_time, end_time]."""
        values = np.asarray(values, dtype=np.float64)
        if self.noise is not None:
            values = self.noise.apply(start_time, end_time, values)
        self.values = RealOutput(values, self.units, end_time)

    def reset(self, randomize=False):
        self._values = RealOutput(np.zeros(self._dimension), self.units, 0.0)
        if self.noise is not None:
            self.noise.reset(randomize)

    def clone(self, node):
        """Copy onto ``node``, with its own value and noise model."""
        result = BasicOrigin(node, self.name, self._dimension, self.units)
        result._values = self._values.copy()
        if self.noise is not None:
            result.noise = self.noise.clone()
        return result

    def __repr__(self):
        return f"BasicOrigin('{self.name}', dimension={self._dimension})"


class EnsembleOrigin(Origin):
    """Same-named origins of an ensemble's nodes, concatenated in node order."""

    def __init__(self, node, name, origins):
        self.node = node
        self.name = name
        self.origins = list(origins)

    @property
    def dimension(self):
        return sum(o.dimension for o in self.origins)

    @property
    def values(self):
        return InstantaneousOutput.concatenate([o.values for o in self.origins])

    def __repr__(self):
        return f"EnsembleOrigin('{self.name}', {len(self.origins)} nodes)"
