"""
simulation/assistant_context.py

Condensed view of a SemanticState for explanation layers.

The explanation and UI-selection layers only need a handful of labels
(topology, energy flow direction, which parts failed) plus a short textual
description; everything here is derived from the semantic state alone.
"""

from dataclasses import dataclass, field

from models.semantics import SemanticState


@dataclass(frozen=True)
class AssistantContext:
    circuit_topology: str
    energy_flow_direction: str
    safety_risk_level: str
    component_health: dict[str, str] = field(default_factory=dict)
    semantic_states: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "circuit_topology": self.circuit_topology,
            "energy_flow_direction": self.energy_flow_direction,
            "safety_risk_level": self.safety_risk_level,
            "component_health": dict(self.component_health),
            "semantic_states": list(self.semantic_states),
        }


def circuit_topology(semantics: SemanticState) -> str:
    """'open' outranks 'short'; anything else is 'closed'."""
    if semantics.open_circuit:
        return "open"
    if semantics.short_circuit:
        return "short"
    return "closed"


def energy_flow_direction(semantics: SemanticState) -> str:
    if not semantics.power_flow_active:
        return "none"
    if semantics.reverse_polarity_detected:
        return "reverse"
    return "forward"


def build_assistant_context(semantics: SemanticState) -> AssistantContext:
    return AssistantContext(
        circuit_topology=circuit_topology(semantics),
        energy_flow_direction=energy_flow_direction(semantics),
        safety_risk_level=semantics.safety_risk_level,
        component_health={cid: "failed" for cid in semantics.component_failure},
        semantic_states=tuple(semantics.active_states()),
    )


def describe_circuit(semantics: SemanticState) -> str:
    """
    Summarize the circuit condition in plain sentences.

    Safety conditions come first so truncated displays still show them.
    """
    if semantics == SemanticState.idle():
        return "Idle: no active circuit."

    lines = []
    if semantics.short_circuit:
        lines.append("Short circuit: a battery is sourcing a dangerously high current.")
    if semantics.overcurrent_detected:
        lines.append("Overcurrent: at least one component carries more than its rated current.")
    if semantics.component_failure:
        lines.append(f"Failed components: {', '.join(semantics.component_failure)}.")
    if semantics.power_flow_active:
        lines.append(f"Power is flowing ({semantics.total_current:.4g} A in total).")
    if semantics.open_circuit:
        lines.append("The circuit is open: there is no complete path for current.")
    if semantics.reverse_polarity_detected:
        lines.append("An LED is connected with reversed polarity.")
    if semantics.capacitor_charging:
        lines.append("A capacitor is charging.")
    if semantics.voltage_conflicts:
        nodes = ", ".join(f"n{handle}" for handle in semantics.voltage_conflicts)
        lines.append(f"Conflicting source voltages meet at {nodes}.")

    if not lines:
        lines.append("The circuit is closed but no battery is powering it.")
    return " ".join(lines)
