"""Networks: named nodes wired together by projections.

A Projection connects one origin to one termination of equal dimension.
Each simulation step, the simulator delivers every projection's origin
value to its termination, then runs every node. Nodes run in the order
they were added.
"""

from dataclasses import dataclass

from ensim.errors import StructuralError
from ensim.model.capabilities import Node
from ensim.model.mode import SimulationMode
from ensim.model.origin import Origin
from ensim.model.termination import Termination
from ensim.utils import get_logger
from ensim.utils.mutable import NameChangeEvent, VisiblyMutable

LOG = get_logger("model.network")


@dataclass(frozen=True)
class Projection:
    """A connection from an origin to a termination."""
    origin: Origin
    termination: Termination

    def deliver(self):
        self.termination.set_values(self.origin.values)

    def __repr__(self):
        return (f"Projection({self.origin.node.name}.{self.origin.name} -> "
                f"{self.termination.node.name}.{self.termination.name})")


class Network(VisiblyMutable):
    """A collection of uniquely named nodes and the projections between them.

    Parameters
    ----------
    name : str
    """

    def __init__(self, name="network"):
        self.name = name
        self._nodes = {}
        self._projections = []
        self._mode = SimulationMode.DEFAULT

    # --- Nodes ---

    @property
    def nodes(self):
        return list(self._nodes.values())

    def add_node(self, node):
        if not isinstance(node, Node):
            raise StructuralError(f"Only nodes can be added to a network, "
                                  f"got {type(node).__name__}")
        if node.name in self._nodes:
            raise StructuralError(f"This network already contains a node named "
                                  f"'{node.name}'")
        self._nodes[node.name] = node
        node.add_change_listener(self._node_changed)
        LOG.info("Network '%s': added node '%s'", self.name, node.name)
        self.fire_change()

    def get_node(self, name):
        try:
            return self._nodes[name]
        except KeyError:
            raise StructuralError(f"No node named '{name}' in network "
                                  f"'{self.name}'") from None

    def __contains__(self, name):
        return name in self._nodes

    def remove_node(self, name):
        """Remove the named node and every projection touching it."""
        node = self.get_node(name)
        self._projections = [p for p in self._projections
                             if p.origin.node is not node
                             and p.termination.node is not node]
        del self._nodes[name]
        node.remove_change_listener(self._node_changed)
        LOG.info("Network '%s': removed node '%s'", self.name, name)
        self.fire_change()

    def _node_changed(self, event):
        if not isinstance(event, NameChangeEvent):
            return
        if self._nodes.get(event.new_name) is event.obj:
            return
        if event.new_name in self._nodes:
            # the rename already happened and earlier listeners have seen it;
            # undo it and tell them so
            node = event.obj
            node._name = event.old_name
            node.fire_name_change(event.new_name, event.old_name)
            raise StructuralError(f"This network already contains a node named "
                                  f"'{event.new_name}'")
        self._nodes = {event.new_name if key == event.old_name else key: node
                       for key, node in self._nodes.items()}

    # --- Projections ---

    @property
    def projections(self):
        return list(self._projections)

    def add_projection(self, origin, termination):
        """Connect ``origin`` to ``termination``.

        Raises
        ------
        StructuralError
            If the dimensions differ or the termination is already a target.
        """
        if origin.dimension != termination.dimension:
            raise StructuralError(f"Can't connect origin '{origin.name}' of dimension "
                                  f"{origin.dimension} to termination "
                                  f"'{termination.name}' of dimension "
                                  f"{termination.dimension}")
        if any(p.termination is termination for p in self._projections):
            raise StructuralError(f"Termination '{termination.name}' is already "
                                  "the target of a projection")
        projection = Projection(origin, termination)
        self._projections.append(projection)
        self.fire_change()
        return projection

    def remove_projection(self, termination):
        """Remove the projection that ends at ``termination``."""
        for projection in self._projections:
            if projection.termination is termination:
                self._projections.remove(projection)
                self.fire_change()
                return
        raise StructuralError(f"No projection ends at termination '{termination.name}'")

    # --- Running ---

    @property
    def mode(self):
        return self._mode

    def set_mode(self, mode):
        self._mode = SimulationMode(mode)
        for node in self._nodes.values():
            node.set_mode(self._mode)

    def reset(self, randomize=False):
        for node in self._nodes.values():
            node.reset(randomize)

    def __repr__(self):
        return (f"Network('{self.name}', {len(self._nodes)} nodes, "
                f"{len(self._projections)} projections)")

