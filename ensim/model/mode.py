"""Simulation modes and the fallback used when a mode is unsupported."""

from enum import Enum


class SimulationMode(Enum):
    """How a node computes its output.

    DEFAULT
        Spiking: one boolean per neuron per step.
    CONSTANT_RATE
        Closed-form steady-state firing rate for the current input.
    RATE
        Firing rate; for LIF neurons the same closed form as CONSTANT_RATE.
    PRECISE
        Spiking, with the spike time interpolated inside the step.
    """
    DEFAULT = "default"
    CONSTANT_RATE = "constant_rate"
    RATE = "rate"
    PRECISE = "precise"


# Tried in order when the requested mode is not supported.
FALLBACKS = {
    SimulationMode.DEFAULT: [],
    SimulationMode.PRECISE: [SimulationMode.DEFAULT],
    SimulationMode.RATE: [SimulationMode.CONSTANT_RATE, SimulationMode.DEFAULT],
    SimulationMode.CONSTANT_RATE: [SimulationMode.RATE, SimulationMode.DEFAULT],
}


def closest_mode(mode, supported):
    """Resolve ``mode`` against the modes a unit ``supported``.

    The requested mode if supported; otherwise the first supported mode in
    its fallback list; otherwise the first supported mode of all.

    Parameters
    ----------
    mode : SimulationMode
    supported : sequence of SimulationMode
        Non-empty.

    Returns
    -------
    SimulationMode
    """
    if not supported:
        raise ValueError("A unit must support at least one simulation mode")
    mode = SimulationMode(mode)
    if mode in supported:
        return mode
    for candidate in FALLBACKS[mode]:
        if candidate in supported:
            return candidate
    return supported[0]
