"""sim — Stepped simulation of networks, with probes.

The Simulator binds to a Network, advances it in fixed steps, passes
origin values along projections, and lets probes record named states.
"""

from .probe import Probe
from .simulator import Simulator
