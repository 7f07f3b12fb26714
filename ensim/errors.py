"""Exception hierarchy for ensim.

EnsimError (base)
├── StructuralError - the model configuration itself is invalid
├── SimulationError - a failure while running, probing or resetting
└── CloneError      - a copy could not be rebuilt consistently

Argument errors in the numerical routines (wrong array lengths and the
like) are plain ValueErrors, as in numpy.
"""


class EnsimError(Exception):
    """Base exception for all ensim-specific errors."""


class StructuralError(EnsimError):
    """Invalid model structure.

    Raised synchronously by the mutating operation that was asked to build
    something inconsistent: mismatched weight dimensions, duplicate or
    missing terminations, functions of the wrong dimension, duplicate node
    names, projections between ports of different size.
    """


class SimulationError(EnsimError):
    """A runtime failure while executing a simulation.

    Raised for unresolvable probe targets, unknown state names, and any
    failure propagated out of a node's own run.
    """


class CloneError(EnsimError):
    """An object could not be copied.

    Cloning is all-or-nothing: a structural problem found while rebuilding
    the copy's derived state is reported with this error and the partial
    copy is discarded.
    """
