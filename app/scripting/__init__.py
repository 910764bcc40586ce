"""
Circuit playground scripting API: programmatic circuit building.

This package provides a headless Python API for creating, modifying,
and simulating circuits without any UI.

Usage::

    from scripting import Circuit

    circuit = Circuit()
    circuit.add("battery", voltage=9)
    circuit.add("bulb")
    circuit.wire("B1", "left", "LP1", "left")
    circuit.wire("LP1", "right", "B1", "right")

    print(circuit.current("LP1"))        # 0.0375
    print(circuit.semantics().power_flow_active)

    circuit.save("my_circuit.json")
"""

from scripting.circuit import Circuit

__all__ = ["Circuit"]
