"""ensim — a time-stepped simulator for networks of model neurons.

Neurons are grouped into ensembles and connected by weighted synaptic
terminations. Spike generation uses the leaky integrate-and-fire model
with sub-step spike-time interpolation.

Subpackages:
    model        Nodes, origins, terminations, LIF neurons, ensembles, networks
    sim          Simulator and probes
    dynamics     Dynamical systems and integrators
    functions    Functions of time, PDFs, noise models
    plasticity   Weight-update rules
    utils        Logging, change notification, time series
"""

__version__ = "0.1.0"
