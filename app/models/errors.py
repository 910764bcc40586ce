"""
Exception types raised by the circuit models and simulator.

All errors derive from ValueError so callers that already guard file
loading with ``except ValueError`` keep working.
"""


class CircuitError(ValueError):
    """Base class for recoverable circuit editing errors."""


class ComponentValidationError(CircuitError):
    """A component is structurally malformed (type, terminals, config keys)."""


class PropertyValidationError(CircuitError):
    """A property value is out of range or not applicable to the component."""


class CircuitNotFoundError(CircuitError):
    """A referenced component, node or wire does not exist."""


class SimulationBusyError(CircuitError):
    """A mutation was submitted while a background recompute is outstanding."""
