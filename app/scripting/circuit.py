"""
Circuit - high-level scripting API for programmatic circuit manipulation.

No UI dependency. Wraps the simulator, its typed commands and the file
layer behind a short, notebook-friendly interface. Every edit goes through
the simulator's undo history, so ``undo()`` works from scripts too.
"""

from pathlib import Path
from typing import Any, Optional, Union

from controllers.circuit_simulator import CircuitSimulator
from controllers.commands import (
    AddComponentCommand,
    ConnectCommand,
    DeleteComponentCommand,
    DisconnectCommand,
    ResetComponent,
    ToggleSwitch,
)
from controllers.file_controller import read_circuit_file, write_circuit_file
from models.circuit import CircuitModel
from models.component import COMPONENT_TYPES, ComponentData, terminal_index
from models.semantics import SemanticState
from simulation.settings import SimulationSettings
from simulation.topology import find_closed_loops


class Circuit:
    """A scriptable circuit that is re-simulated after every edit.

    Args:
        model: An existing CircuitModel to wrap. If None, creates an empty circuit.
        settings: Simulation thresholds; defaults to SimulationSettings().
    """

    def __init__(self, model: Optional[CircuitModel] = None,
                 settings: Optional[SimulationSettings] = None):
        self._sim = CircuitSimulator(model, settings)
        if model is None:
            self._sim.recompute()

    # --- Factory methods ---

    @classmethod
    def load(cls, path: Union[str, Path], settings: Optional[SimulationSettings] = None) -> "Circuit":
        """Load a circuit from a JSON file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is not valid JSON or not a valid circuit.
        """
        return cls(read_circuit_file(Path(path)), settings)

    # --- Editing ---

    def add(self, component_type: str, position: tuple[float, float] = (0.0, 0.0), **config) -> str:
        """Add a component and return its generated ID.

        Keyword arguments are configuration inputs, e.g.
        ``circuit.add("battery", voltage=6)`` or
        ``circuit.add("resistor", resistance=470)``.
        """
        command = AddComponentCommand(self._sim, component_type, config or None, position)
        self._sim.execute(command)
        return command.component_id

    def wire(self, comp_a: str, term_a: Union[int, str], comp_b: str, term_b: Union[int, str]) -> str:
        """Connect two terminals and return the wire ID.

        Terminals are 0/1 or "left"/"right".
        """
        command = ConnectCommand(self._sim, (comp_a, terminal_index(term_a)), (comp_b, terminal_index(term_b)))
        self._sim.execute(command)
        return command.wire.wire_id

    def unwire(self, comp_a: str, term_a: Union[int, str], comp_b: str, term_b: Union[int, str]) -> int:
        """Remove every wire between two terminals. Returns how many were removed."""
        command = DisconnectCommand(self._sim, (comp_a, term_a), (comp_b, term_b))
        self._sim.execute(command)
        return len(command.removed)

    def set(self, component_id: str, key: str, value: Any) -> None:
        """Change one input property (or ``position``) of a component."""
        self._sim.update_component_property(component_id, key, value)

    def toggle(self, component_id: str) -> bool:
        """Flip a switch. Returns the new closed state."""
        self._sim.execute(ToggleSwitch(self._sim, component_id))
        return self._sim.model.get_component(component_id).config.closed

    def repair(self, component_id: str) -> None:
        """Restore a blown component to normal health."""
        self._sim.execute(ResetComponent(self._sim, component_id))

    def remove(self, component_id: str) -> None:
        """Remove a component and the wires that only served it."""
        self._sim.execute(DeleteComponentCommand(self._sim, component_id))

    def undo(self) -> bool:
        return self._sim.undo()

    def redo(self) -> bool:
        return self._sim.redo()

    def clear(self) -> None:
        self._sim.reset()

    # --- Readings ---

    def state(self) -> dict:
        """Fresh plain-data snapshot of components, nodes and wires."""
        return self._sim.get_state()

    def semantics(self) -> SemanticState:
        return self._sim.get_semantics()

    def current(self, component_id: str) -> float:
        """Last computed current through a component, in amperes."""
        return self._sim.model.get_component(component_id).output.current

    def voltage(self, component_id: str, terminal: Union[int, str] = 0) -> float:
        """Voltage at one terminal of a component."""
        handle = self._sim.model.terminal_node(component_id, terminal)
        return self._sim.model.nodes[handle].voltage

    def closed_loops(self) -> dict[str, bool]:
        """Per-battery reachability through conducting components."""
        return find_closed_loops(self._sim.model)

    # --- Persistence ---

    def save(self, path: Union[str, Path]) -> None:
        """Save the circuit inputs to a JSON file."""
        write_circuit_file(self._sim.model, Path(path))

    # --- Properties ---

    @property
    def simulator(self) -> CircuitSimulator:
        return self._sim

    @property
    def model(self) -> CircuitModel:
        """Direct access to the underlying CircuitModel."""
        return self._sim.model

    @property
    def components(self) -> dict[str, ComponentData]:
        return self._sim.model.components

    @property
    def wires(self) -> list:
        return self._sim.model.wires

    @property
    def component_types(self) -> list[str]:
        """List of all supported component types."""
        return list(COMPONENT_TYPES)

    def __repr__(self) -> str:
        semantics = self.semantics()
        return (
            f"Circuit({len(self.components)} components, {len(self.wires)} wires, "
            f"risk={semantics.safety_risk_level})"
        )
