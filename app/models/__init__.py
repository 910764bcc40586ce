"""
Pure Python data models for the circuit playground.

This package contains the graph store (nodes, components, wires) and the
derived semantic state. No simulation logic lives here.
"""

from .circuit import CircuitModel
from .component import (
    COMPONENT_TYPES,
    CONFIG_CLASSES,
    ID_PREFIXES,
    TERMINAL_NAMES,
    TYPE_ALIASES,
    ComponentConfig,
    ComponentData,
    ComponentOutput,
    Health,
)
from .errors import (
    CircuitError,
    CircuitNotFoundError,
    ComponentValidationError,
    PropertyValidationError,
    SimulationBusyError,
)
from .node import NodeData
from .semantics import SAFETY_RISK_LEVELS, SemanticState
from .wire import WireData

__all__ = [
    "CircuitModel",
    "ComponentData",
    "ComponentConfig",
    "ComponentOutput",
    "COMPONENT_TYPES",
    "CONFIG_CLASSES",
    "ID_PREFIXES",
    "TERMINAL_NAMES",
    "TYPE_ALIASES",
    "Health",
    "NodeData",
    "WireData",
    "SemanticState",
    "SAFETY_RISK_LEVELS",
    "CircuitError",
    "CircuitNotFoundError",
    "ComponentValidationError",
    "PropertyValidationError",
    "SimulationBusyError",
]
