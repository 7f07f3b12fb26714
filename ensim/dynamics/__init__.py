"""dynamics — Dynamical systems and the integrators that solve them."""

from .integrator import (
    DynamicalSystem,
    Integrator,
    EulerIntegrator,
)
