"""
simulation/propagation.py

Voltage propagation across the wire graph.

Each healthy battery, in insertion order, seeds its terminal 0 with its
configured voltage and its terminal 1 with 0 V. From every seed the
voltage floods across wires (components do not conduct during the
flood). The first value written to a node wins; any later attempt to
write a different value is recorded as a conflict but does not change
the node. Every node is written at most once, so the flood is bounded by
the node and wire counts.
"""

import logging
from dataclasses import dataclass, field

from models.circuit import CircuitModel

logger = logging.getLogger(__name__)


@dataclass
class PropagationResult:
    """Settled node voltages from one propagation pass."""

    voltages: dict[int, float] = field(default_factory=dict)
    # Node handle -> id of the battery whose seed wrote it
    sources: dict[int, str] = field(default_factory=dict)
    # Nodes where two seeds disagreed, in order of first detection
    conflicts: list[int] = field(default_factory=list)

    def voltage(self, handle: int) -> float:
        return self.voltages.get(handle, 0.0)


def propagate_voltages(model: CircuitModel) -> PropagationResult:
    """
    Assign a voltage to every node of the model.

    Nodes no battery reaches are left at 0 V.
    """
    adjacency = model.adjacency()
    result = PropagationResult()

    for battery in model.components_of_type("battery"):
        if not battery.is_healthy():
            continue
        positive, negative = battery.terminals
        for seed, value in ((positive, battery.config.voltage), (negative, 0.0)):
            _flood(seed, value, battery.component_id, adjacency, result)

    for handle in model.nodes:
        result.voltages.setdefault(handle, 0.0)
    return result


def _flood(seed: int, value: float, source_id: str,
           adjacency: dict[int, list[int]], result: PropagationResult) -> None:
    """Depth-first worklist flood of one seed value."""
    stack = [seed]
    visited = set()
    while stack:
        node = stack.pop()
        if node in visited:
            continue
        visited.add(node)

        if node in result.voltages:
            if result.voltages[node] != value and node not in result.conflicts:
                result.conflicts.append(node)
                logger.warning(
                    "Voltage conflict at node %d: %s tried %gV, kept %gV from %s",
                    node, source_id, value, result.voltages[node], result.sources[node],
                )
            continue

        result.voltages[node] = value
        result.sources[node] = source_id
        for neighbor in reversed(adjacency[node]):
            if neighbor not in visited:
                stack.append(neighbor)
