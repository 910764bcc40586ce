"""
simulation/topology.py

Connectivity queries over the circuit graph.

``wire_nets`` groups nodes joined by wires alone, which is the view the
voltage flood uses. ``find_closed_loops`` is the stronger check that also
walks through conducting components; it is reported alongside the
semantic state but does not decide ``open_circuit``.
"""

from collections import deque

from models.circuit import CircuitModel
from models.component import ComponentData

# Types that block a steady current between their terminals
_NON_CONDUCTING = frozenset({"capacitor", "ground"})


def wire_nets(model: CircuitModel) -> dict[int, int]:
    """
    Label every node with the id of its wire-connected net.

    The net id is the smallest node handle in the net, so labels are stable
    for a given topology.

    Returns:
        Dict mapping node handle -> net id.
    """
    adjacency = model.adjacency()
    net_of: dict[int, int] = {}
    for start in sorted(adjacency):
        if start in net_of:
            continue
        net_of[start] = start
        queue = deque([start])
        while queue:
            node = queue.popleft()
            for neighbor in adjacency[node]:
                if neighbor not in net_of:
                    net_of[neighbor] = start
                    queue.append(neighbor)
    return net_of


def conducts(component: ComponentData) -> bool:
    """Return whether a component passes current between its terminals."""
    if not component.is_healthy():
        return False
    if component.component_type in _NON_CONDUCTING:
        return False
    if component.component_type == "switch":
        return component.config.closed
    return True


def find_closed_loops(model: CircuitModel) -> dict[str, bool]:
    """
    Check, for each healthy battery, whether its terminals are joined by a
    path through wires and other conducting components.

    Returns:
        Dict mapping battery id -> True if a closed loop exists.
    """
    results = {}
    for battery in model.components_of_type("battery"):
        if not battery.is_healthy():
            continue
        adjacency = model.adjacency()
        for comp in model.components.values():
            if comp is battery or not conducts(comp):
                continue
            first, second = comp.terminals
            adjacency[first].append(second)
            adjacency[second].append(first)

        positive, negative = battery.terminals
        seen = {positive}
        queue = deque([positive])
        while queue:
            node = queue.popleft()
            for neighbor in adjacency[node]:
                if neighbor not in seen:
                    seen.add(neighbor)
                    queue.append(neighbor)
        results[battery.component_id] = negative in seen
    return results
