"""
CircuitModel - Central data store for circuit state.

Holds the node arena, the components bound to pairs of nodes, and the
wires joining nodes. Every reference is validated at insertion time so
the simulation passes never see a dangling node handle.
"""

import copy
import re
from dataclasses import dataclass, field
from typing import Optional, Union

from .component import ID_PREFIXES, ComponentData, normalize_type
from .errors import CircuitNotFoundError, ComponentValidationError
from .node import NodeData
from .wire import Terminal, WireData

_WIRE_ID = re.compile(r"^W(\d+)$")


@dataclass
class CircuitModel:
    """
    Central data store holding all circuit state.

    Components are kept in insertion order, which is also the order batteries
    seed voltages during propagation.
    """

    components: dict[str, ComponentData] = field(default_factory=dict)
    nodes: dict[int, NodeData] = field(default_factory=dict)
    wires: list[WireData] = field(default_factory=list)
    component_counter: dict[str, int] = field(default_factory=dict)
    next_node_handle: int = 0
    wire_counter: int = 0

    # --- Node arena ---

    def create_node(self, position: Optional[tuple[float, float]] = None) -> NodeData:
        """Allocate a new node and return it."""
        node = NodeData(handle=self.next_node_handle, position=position)
        self.nodes[node.handle] = node
        self.next_node_handle += 1
        return node

    def get_node(self, handle: int) -> NodeData:
        node = self.nodes.get(handle)
        if node is None:
            raise CircuitNotFoundError(f"Node {handle!r} does not exist.")
        return node

    def orphaned_nodes(self) -> list[int]:
        """Return handles of nodes no component or wire references."""
        used = set()
        for comp in self.components.values():
            used.update(comp.terminals)
        for wire in self.wires:
            used.update(wire.get_nodes())
        return [handle for handle in self.nodes if handle not in used]

    # --- Component operations ---

    def generate_component_id(self, component_type: str) -> str:
        """Generate the next free id for a type (B1, R1, R2, ...)."""
        prefix = ID_PREFIXES[normalize_type(component_type)]
        count = self.component_counter.get(prefix, 0)
        while True:
            count += 1
            component_id = f"{prefix}{count}"
            if component_id not in self.components:
                break
        self.component_counter[prefix] = count
        return component_id

    def get_component(self, component_id: str) -> ComponentData:
        component = self.components.get(component_id)
        if component is None:
            raise CircuitNotFoundError(f"Component '{component_id}' does not exist.")
        return component

    def add_component(self, component: ComponentData) -> None:
        """
        Add a component, replacing any existing component with the same id.

        Raises:
            ComponentValidationError: If a terminal references a node that is
                not in the arena.
        """
        for handle in component.terminals:
            if handle not in self.nodes:
                raise ComponentValidationError(
                    f"{component.component_id}: terminal node {handle} does not exist."
                )
        self.components[component.component_id] = component

    def insert_component(self, index: int, component: ComponentData) -> None:
        """Add a component at a given position in insertion order."""
        self.add_component(component)
        ordered = [c for c in self.components.values() if c is not component]
        ordered.insert(index, component)
        self.components = {c.component_id: c for c in ordered}

    def remove_component(self, component_id: str) -> list[WireData]:
        """
        Remove a component and the wires that only served it.

        A wire is removed when it was drawn to one of the component's
        terminals, or when it touches a terminal node no remaining component
        uses.

        Returns:
            The removed wires, in their former order.
        """
        component = self.get_component(component_id)
        del self.components[component_id]

        still_used = set()
        for comp in self.components.values():
            still_used.update(comp.terminals)
        abandoned = {handle for handle in component.terminals if handle not in still_used}

        removed = []
        kept = []
        for wire in self.wires:
            if wire.connects_component(component_id) or any(wire.touches_node(h) for h in abandoned):
                removed.append(wire)
            else:
                kept.append(wire)
        self.wires = kept
        return removed

    def components_at_node(self, handle: int) -> list[ComponentData]:
        return [comp for comp in self.components.values() if handle in comp.terminals]

    def components_of_type(self, component_type: str) -> list[ComponentData]:
        component_type = normalize_type(component_type)
        return [comp for comp in self.components.values() if comp.component_type == component_type]

    def terminal_node(self, component_id: str, terminal: Union[int, str]) -> int:
        """Resolve a component terminal to its node handle."""
        return self.get_component(component_id).get_terminal_node(terminal)

    # --- Wire operations ---

    def add_wire(
        self,
        start_node: int,
        end_node: int,
        start_terminal: Optional[Terminal] = None,
        end_terminal: Optional[Terminal] = None,
    ) -> WireData:
        """
        Append a wire between two existing nodes.

        Duplicate wires are allowed; they are traversed like any other edge.
        """
        self.get_node(start_node)
        self.get_node(end_node)
        self.wire_counter += 1
        wire = WireData(
            wire_id=f"W{self.wire_counter}",
            start_node=start_node,
            end_node=end_node,
            start_terminal=start_terminal,
            end_terminal=end_terminal,
        )
        self.wires.append(wire)
        return wire

    def insert_wire(self, index: int, wire: WireData) -> None:
        """Put back a previously removed wire, keeping its id."""
        self.get_node(wire.start_node)
        self.get_node(wire.end_node)
        self.wires.insert(index, wire)
        match = _WIRE_ID.match(wire.wire_id)
        if match:
            self.wire_counter = max(self.wire_counter, int(match.group(1)))

    def get_wire_index(self, wire_id: str) -> int:
        for i, wire in enumerate(self.wires):
            if wire.wire_id == wire_id:
                return i
        raise CircuitNotFoundError(f"Wire '{wire_id}' does not exist.")

    def find_wire_indices(self, first: Terminal, second: Terminal) -> list[int]:
        """Return indices of all wires joining the two terminals."""
        return [i for i, wire in enumerate(self.wires) if wire.connects_terminals(first, second)]

    def remove_wire(self, wire_index: int) -> WireData:
        """Remove a wire by index. Components are never touched."""
        if not (0 <= wire_index < len(self.wires)):
            raise CircuitNotFoundError(f"Wire index {wire_index} is out of range.")
        return self.wires.pop(wire_index)

    def adjacency(self) -> dict[int, list[int]]:
        """Build the wire-only neighbor lists, in wire insertion order."""
        neighbors: dict[int, list[int]] = {handle: [] for handle in self.nodes}
        for wire in self.wires:
            neighbors[wire.start_node].append(wire.end_node)
            neighbors[wire.end_node].append(wire.start_node)
        return neighbors

    # --- Circuit operations ---

    def clear(self) -> None:
        """Clear all circuit data."""
        self.components.clear()
        self.nodes.clear()
        self.wires.clear()
        self.component_counter.clear()
        self.next_node_handle = 0
        self.wire_counter = 0

    def copy(self) -> "CircuitModel":
        """Return a deep copy that shares no mutable state with this model."""
        return copy.deepcopy(self)

    # --- Serialization ---

    def to_dict(self, include_readings: bool = False) -> dict:
        """
        Serialize circuit to dictionary.

        Args:
            include_readings: Include computed voltages, currents and
                component outputs (state snapshots). Saved files omit them.
        """
        return {
            "components": [c.to_dict(include_readings) for c in self.components.values()],
            "nodes": [n.to_dict(include_readings) for n in self.nodes.values()],
            "wires": [w.to_dict(include_readings) for w in self.wires],
            "counters": self.component_counter.copy(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CircuitModel":
        """
        Deserialize circuit from dictionary.

        Nodes are restored with their original handles so component terminals
        and wires keep pointing at the same junctions.
        """
        model = cls()
        for node_data in data.get("nodes", []):
            node = NodeData.from_dict(node_data)
            model.nodes[node.handle] = node
        model.next_node_handle = max(model.nodes, default=-1) + 1

        for comp_data in data.get("components", []):
            model.add_component(ComponentData.from_dict(comp_data))

        for wire_data in data.get("wires", []):
            wire = WireData.from_dict(wire_data)
            model.get_node(wire.start_node)
            model.get_node(wire.end_node)
            model.wires.append(wire)
            match = _WIRE_ID.match(wire.wire_id)
            if match:
                model.wire_counter = max(model.wire_counter, int(match.group(1)))

        model.component_counter = dict(data.get("counters", {}))
        return model
