"""plasticity — Weight-update rules bound to terminations."""

from .rules import (
    PlasticityRule,
    HebbianRule,
)
