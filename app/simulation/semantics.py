"""
simulation/semantics.py

Derive the SemanticState summary from a fully computed circuit.

The flags are evaluated independently of one another. ``open_circuit``
deliberately keeps the simplified closure test (at least one wire and at
least two components) rather than checking reachability.
"""

from models.circuit import CircuitModel
from models.semantics import SemanticState

from .failures import is_overcurrent
from .propagation import PropagationResult
from .settings import SimulationSettings


def derive_semantics(model: CircuitModel, propagation: PropagationResult,
                     settings: SimulationSettings) -> SemanticState:
    components = list(model.components.values())
    healthy_batteries = [c for c in components if c.component_type == "battery" and c.is_healthy()]

    open_circuit = len(model.wires) == 0 or len(components) < 2
    short_circuit = any(b.output.current > settings.short_circuit_current for b in healthy_batteries)
    failures = tuple(c.component_id for c in components if not c.is_healthy())

    if short_circuit:
        risk = "high"
    elif failures:
        risk = "medium"
    else:
        risk = "none"

    voltages = [node.voltage for node in model.nodes.values()]

    return SemanticState(
        power_flow_active=bool(healthy_batteries) and not open_circuit and not short_circuit,
        open_circuit=open_circuit,
        short_circuit=short_circuit,
        reverse_polarity_detected=any(
            c.component_type == "led" and (c.output.voltage or 0.0) < 0 for c in components
        ),
        overcurrent_detected=any(is_overcurrent(c, settings) for c in components),
        capacitor_charging=any(c.component_type == "capacitor" and c.output.charging for c in components),
        component_failure=failures,
        safety_risk_level=risk,
        total_current=sum(c.output.current for c in components),
        voltage_range=(min(voltages), max(voltages)) if voltages else (0.0, 0.0),
        voltage_conflicts=tuple(propagation.conflicts),
    )
