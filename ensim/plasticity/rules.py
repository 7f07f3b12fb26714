"""Plasticity rules: pluggable weight-update policies bound to a termination.

A plastic node owns one rule per termination name. Before asking for a
weight derivative the node tells the rule what it knows:

    rule.set_termination_state(name, output, time)   # input on a termination
    rule.set_origin_state(name, output, time)        # the node's own output
    dw = rule.derivative(weights, termination_input, time)

and then applies ``weights += dw * elapsed``.

References:
    Hebb DO (1949). The Organization of Behavior. Wiley.
    Oja E (1982). J Math Biol 15(3):267-273.
"""

import copy

import numpy as np


class PlasticityRule:
    """Base class for weight-update rules."""

    def set_termination_state(self, name, output, time):
        """Input arriving on termination ``name``. Ignored by default."""

    def set_origin_state(self, name, output, time):
        """Output of origin ``name`` of the plastic node. Ignored by default."""

    def derivative(self, weights, termination_input, time):
        """Rate of change of ``weights`` (same shape as ``weights``)."""
        raise NotImplementedError

    def clone(self):
        return copy.deepcopy(self)


class HebbianRule(PlasticityRule):
    """Rate-based Hebbian learning with optional Oja decay.

        dW[i, j] = learning_rate * post[i] * (pre[j] - oja * post[i] * W[i, j])

    Parameters
    ----------
    learning_rate : float
        Weight change per unit pre/post coincidence per second.
    origin_name : str
        Origin of the plastic node taken as post-synaptic activity.
    oja : float
        Strength of the Oja normalising decay; 0 for plain Hebbian growth.
    """

    def __init__(self, learning_rate=1e-3, origin_name="AXON", oja=0.0):
        self.learning_rate = float(learning_rate)
        self.origin_name = origin_name
        self.oja = float(oja)
        self._post = None

    def set_origin_state(self, name, output, time):
        if name == self.origin_name:
            self._post = output.as_real()

    def derivative(self, weights, termination_input, time):
        weights = np.asarray(weights, dtype=np.float64)
        if self._post is None:
            return np.zeros_like(weights)
        post = np.resize(self._post, weights.shape[0]).reshape(-1, 1)
        pre = np.asarray(termination_input, dtype=np.float64).reshape(1, -1)
        return self.learning_rate * post * (pre - self.oja * post * weights)

    def __repr__(self):
        return (f"HebbianRule(learning_rate={self.learning_rate}, "
                f"origin_name='{self.origin_name}', oja={self.oja})")
