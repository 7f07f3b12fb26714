"""Real-valued functions of a vector argument.

Function objects are used as stimuli (functions of simulated time in a
FunctionInput) and anywhere a model needs a parameterised map. Every
function declares its input dimension so that callers can check it before
a simulation starts.
"""

import copy

import numpy as np


class Function:
    """A map from R^dimension to R.

    Subclasses implement ``map``. ``multi_map`` evaluates many points at
    once, one per row.
    """

    def __init__(self, dimension):
        self._dimension = int(dimension)

    @property
    def dimension(self):
        """Input dimension of the function."""
        return self._dimension

    def map(self, point):
        raise NotImplementedError

    def multi_map(self, points):
        points = np.atleast_2d(np.asarray(points, dtype=np.float64))
        return np.array([self.map(p) for p in points])

    def __call__(self, *args):
        return self.map(np.asarray(args, dtype=np.float64))

    def clone(self):
        return copy.deepcopy(self)


class ConstantFunction(Function):
    """Returns ``value`` everywhere."""

    def __init__(self, dimension, value):
        super().__init__(dimension)
        self.value = float(value)

    def map(self, point):
        return self.value

    def multi_map(self, points):
        points = np.atleast_2d(points)
        return np.full(len(points), self.value)

    def __repr__(self):
        return f"ConstantFunction(dimension={self.dimension}, value={self.value})"


class LambdaFunction(Function):
    """Wraps a Python callable that takes the point as a numpy array.

    Example::

        ramp = LambdaFunction(lambda x: 2.0 * x[0])
    """

    def __init__(self, fn, dimension=1):
        super().__init__(dimension)
        self.fn = fn

    def map(self, point):
        return float(self.fn(np.asarray(point, dtype=np.float64)))

    def clone(self):
        # callables are immutable for our purposes; share them
        return LambdaFunction(self.fn, self.dimension)


class SineFunction(Function):
    """amplitude * sin(omega * t + phase), a one-dimensional function of time."""

    def __init__(self, omega, amplitude=1.0, phase=0.0):
        super().__init__(1)
        self.omega = float(omega)
        self.amplitude = float(amplitude)
        self.phase = float(phase)

    def map(self, point):
        return self.amplitude * np.sin(self.omega * point[0] + self.phase)

    def multi_map(self, points):
        points = np.atleast_2d(np.asarray(points, dtype=np.float64))
        return self.amplitude * np.sin(self.omega * points[:, 0] + self.phase)
