"""model — Simulatable units and the ports that connect them.

Provides the LIF spike generator, spiking neurons, function-driven
sources, ensembles with expandable terminations, and networks.

References:
    Koch C (1999). Biophysics of Computation. Oxford University Press.
    Eliasmith C & Anderson CH (2003). Neural Engineering. MIT Press.
"""

from .mode import (
    SimulationMode,
    closest_mode,
)
from .output import (
    InstantaneousOutput,
    RealOutput,
    SpikeOutput,
    PreciseSpikeOutput,
)
from .capabilities import (
    Node,
    Probeable,
    Plastic,
    Expandable,
)
from .origin import (
    Origin,
    BasicOrigin,
    EnsembleOrigin,
)
from .termination import (
    Termination,
    BasicTermination,
    EnsembleTermination,
)
from .lif import (
    LIFSpikeGenerator,
    LIFSpikeGeneratorFactory,
    lif_rate,
)
from .synapse import LinearSynapticIntegrator
from .neuron import (
    SpikingNeuron,
    SpikingNeuronFactory,
)
from .function_input import FunctionInput
from .ensemble import Ensemble
from .network import (
    Network,
    Projection,
)
