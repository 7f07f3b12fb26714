"""A source node whose output is a vector of functions of simulated time."""

import numpy as np

from ensim.errors import SimulationError, StructuralError
from ensim.model.capabilities import Node, Probeable
from ensim.model.mode import SimulationMode
from ensim.model.origin import BasicOrigin
from ensim.units import Units
from ensim.utils.timeseries import TimeSeries


class FunctionInput(Node, Probeable):
    """Computes functions of time analytically and publishes them as input.

    Each function gives one output dimension. ``run(start, end)`` samples
    every function at ``end`` only, not over the interval.

    Parameters
    ----------
    name : str
    functions : list of Function
        Functions of simulated time; each must have input dimension 1.
    units : Units
        How the output values are to be interpreted.
    """

    ORIGIN_NAME = "origin"
    STATE_NAME = "input"

    def __init__(self, name, functions, units=Units.UNK):
        self._name = name
        self.units = units
        self._origin = BasicOrigin(self, self.ORIGIN_NAME, len(functions), units)
        self.set_functions(functions)
        self.time = 0.0
        # initial state is f(0)
        self.run(0.0, 0.0)

    @staticmethod
    def _check_dimensions(functions):
        for function in functions:
            if function.dimension != 1:
                raise StructuralError("All functions in a FunctionInput must be "
                                      "1-D functions of time, got one of dimension "
                                      f"{function.dimension}")

    @property
    def functions(self):
        return list(self._functions)

    def set_functions(self, functions):
        """Replace the functions; the origin is resized to match."""
        functions = list(functions)
        self._check_dimensions(functions)
        self._origin.set_dimensions(len(functions))
        self._functions = functions

    @property
    def origin(self):
        return self._origin

    @property
    def origins(self):
        return [self._origin]

    def get_origin(self, name):
        if name != self.ORIGIN_NAME:
            raise StructuralError(f"This node only has origin '{self.ORIGIN_NAME}'")
        return self._origin

    @property
    def terminations(self):
        return []

    def get_termination(self, name):
        raise StructuralError("This node has no terminations")

    def remove_termination(self, name):
        raise StructuralError("This node has no terminations")

    def run(self, start_time, end_time):
        self.time = end_time
        point = np.array([end_time])
        values = [function.map(point) for function in self._functions]
        self._origin.set_values(start_time, end_time, values)

    def reset(self, randomize=False):
        # functions of time carry no state
        self._origin.reset(randomize)

    @property
    def mode(self):
        return SimulationMode.DEFAULT

    def set_mode(self, mode):
        """No effect: DEFAULT mode is always used."""

    def list_states(self):
        return {self.STATE_NAME: "Function of time"}

    def get_history(self, state_name):
        if state_name != self.STATE_NAME:
            raise SimulationError(f"State {state_name} is unknown")
        values = self._origin.values.as_real()
        return TimeSeries([self.time], values.reshape(1, -1),
                          units=Units.uniform(self.units, len(values)))

    def clone(self):
        result = FunctionInput.__new__(FunctionInput)
        result._name = self._name
        result.units = self.units
        result.time = self.time
        result.documentation = self.documentation
        result._functions = [f.clone() for f in self._functions]
        result._origin = self._origin.clone(result)
        result._reset_listeners()
        return result
