"""Simulation defaults and their YAML representation.

A SimulationConfig bundles the numbers a simulation needs when the caller
does not give them explicitly: the network step size, the LIF integration
step, and the default LIF time constants. Configurations are frozen; build
a new one with ``dataclasses.replace`` or load one from YAML::

    step_size: 0.001
    max_time_step: 0.0005
    tau_rc: 0.02
    tau_ref: 0.002
"""

from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from ensim.utils import get_logger

LOG = get_logger("config")


@dataclass(frozen=True)
class SimulationConfig:
    """Default simulation parameters.

    Parameters
    ----------
    step_size : float
        Network time step (s): how often outputs pass between nodes.
    max_time_step : float
        Largest sub-step (s) used inside LIF spike generators.
    tau_rc : float
        Membrane (resistive-capacitive) time constant (s).
    tau_ref : float
        Refractory period (s).
    initial_voltage : float
        Membrane voltage after reset (threshold = 1).
    record : bool
        Whether probes keep their full history by default.
    """
    step_size: float = 0.001
    max_time_step: float = 0.0005
    tau_rc: float = 0.02
    tau_ref: float = 0.002
    initial_voltage: float = 0.0
    record: bool = True

    def __post_init__(self):
        for name in ("step_size", "max_time_step", "tau_rc"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, "
                                 f"got {getattr(self, name)}")
        if self.tau_ref < 0:
            raise ValueError(f"tau_ref must be non-negative, got {self.tau_ref}")

    def to_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_CONFIG = SimulationConfig()


def config_from_dict(data):
    """Build a SimulationConfig from a mapping, rejecting unknown keys."""
    known = {f.name for f in fields(SimulationConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}. "
                         f"Available: {sorted(known)}")
    return SimulationConfig(**data)


def load_config(path):
    """Load a SimulationConfig from a YAML file.

    Missing keys keep their defaults. An empty file gives DEFAULT_CONFIG.
    """
    path = Path(path)
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    LOG.info("Loaded simulation config from %s", path)
    return config_from_dict(data)


def save_config(config, path):
    """Write ``config`` to ``path`` as YAML."""
    with open(Path(path), "w") as f:
        yaml.safe_dump(config.to_dict(), f)
