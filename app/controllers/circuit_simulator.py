"""
CircuitSimulator - Owns the circuit graph and keeps it simulated.

This module contains no UI dependencies. Every mutation re-derives the whole
circuit state from scratch and notifies registered observers, so views only
ever read fresh snapshots through get_state() and get_semantics().
"""

import logging
from typing import Any, Callable, Optional, Union

from models.circuit import CircuitModel
from models.component import (
    OUTPUT_KEYS,
    ComponentData,
    Health,
    canonical_property,
    make_config,
    normalize_type,
    terminal_index,
    validate_property,
)
from models.errors import ComponentValidationError, PropertyValidationError
from models.semantics import SemanticState
from models.wire import WireData
from simulation.engine import SimulationSnapshot, recompute
from simulation.settings import SimulationSettings

from .commands import command_for_property
from .undo_manager import UndoManager

logger = logging.getLogger(__name__)

TerminalRef = Union[int, str]


class CircuitSimulator:
    """
    Controller for the circuit graph and its simulation.

    Observer events:
        component_added (ComponentData) - A component was added or restored
        component_removed (str) - A component was removed (by ID)
        component_changed (ComponentData) - Inputs, position or health changed
        wire_added (WireData) - A wire was added or restored
        wire_removed (str) - A wire was removed (by ID)
        circuit_cleared (None) - The entire circuit was reset
        model_loaded (None) - The circuit was replaced, e.g. from a file
        circuit_recomputed (SemanticState) - A simulation pass finished
    """

    def __init__(
        self,
        model: Optional[CircuitModel] = None,
        settings: Optional[SimulationSettings] = None,
        auto_recompute: bool = True,
        undo_depth: int = 100,
    ):
        self.model = model or CircuitModel()
        self.settings = settings or SimulationSettings()
        # When False, mutations leave the readings stale until recompute()
        self.auto_recompute = auto_recompute
        self.undo_manager = UndoManager(max_depth=undo_depth)
        self.last_snapshot: Optional[SimulationSnapshot] = None
        self._semantics = SemanticState.idle()
        self._observers: list[Callable[[str, Any], None]] = []
        if model is not None and auto_recompute:
            self.recompute()

    def add_observer(self, callback: Callable[[str, Any], None]) -> None:
        """Register a callback for model change events."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: Callable[[str, Any], None]) -> None:
        """Unregister a previously registered callback."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify(self, event: str, data: Any) -> None:
        """Notify all observers of a model change."""
        for observer in self._observers:
            try:
                observer(event, data)
            except (TypeError, AttributeError, RuntimeError) as e:
                logger.error("Error notifying observer: %s", e)

    def _changed(self) -> None:
        if self.auto_recompute:
            self.recompute()

    # --- Simulation ---

    def recompute(self) -> SimulationSnapshot:
        """Run a full simulation pass over the current model."""
        snapshot = recompute(self.model, self.settings)
        self.install_snapshot(snapshot)
        return snapshot

    def install_snapshot(self, snapshot: SimulationSnapshot) -> None:
        """
        Adopt the result of a simulation pass.

        The snapshot's model becomes the simulator's model, which is how a
        pass computed on a detached copy is applied.
        """
        self.model = snapshot.model
        self.last_snapshot = snapshot
        previous = self._semantics
        self._semantics = snapshot.semantics

        for component_id in snapshot.newly_failed:
            self._notify("component_changed", self.model.components[component_id])
        if snapshot.semantics.short_circuit and not previous.short_circuit:
            logger.info("Short circuit detected")
        self._notify("circuit_recomputed", snapshot.semantics)

    def get_state(self) -> dict:
        """Return a fresh plain-data snapshot of components, nodes and wires."""
        return self.model.to_dict(include_readings=True)

    def get_semantics(self) -> SemanticState:
        return self._semantics

    def reset(self) -> None:
        """Remove everything and return to the idle state."""
        self.model.clear()
        self.undo_manager.clear()
        self.last_snapshot = None
        self._semantics = SemanticState.idle()
        self._notify("circuit_cleared", None)

    def load_model(self, model: CircuitModel) -> None:
        """Replace the whole circuit (e.g. from a file) and recompute it."""
        self.model = model
        self.undo_manager.clear()
        self._notify("model_loaded", None)
        self._changed()

    # --- Command execution ---

    def execute(self, command) -> None:
        """Execute a command through the undo manager."""
        self.undo_manager.execute(command)

    def undo(self) -> bool:
        return self.undo_manager.undo()

    def redo(self) -> bool:
        return self.undo_manager.redo()

    # --- Component operations ---

    def add_node(self, position: Optional[tuple[float, float]] = None) -> int:
        """Allocate a junction for components built outside the simulator."""
        return self.model.create_node(position).handle

    def add_component(
        self,
        component: Union[ComponentData, str],
        config: Optional[dict] = None,
        position: tuple[float, float] = (0.0, 0.0),
        component_id: Optional[str] = None,
    ) -> ComponentData:
        """
        Insert a component.

        Either pass a complete ComponentData whose terminals already exist in
        the node arena (an existing component with the same id is replaced),
        or a type name, in which case two fresh nodes are allocated for its
        terminals and an id is generated (B1, R1, ...).

        Raises:
            ComponentValidationError: If the component is malformed. Nothing
                is added in that case.
        """
        if isinstance(component, ComponentData):
            if config is not None or component_id is not None:
                raise ComponentValidationError("config and component_id only apply when adding by type.")
            self.model.add_component(component)
        else:
            component_type = normalize_type(component)
            validated = make_config(component_type, config)
            try:
                x, y = float(position[0]), float(position[1])
            except (TypeError, ValueError, IndexError):
                raise ComponentValidationError(f"Invalid position {position!r}.") from None
            if component_id is None:
                component_id = self.model.generate_component_id(component_type)
            # Built against the next two handles so a bad id fails before any node exists
            first = self.model.next_node_handle
            component = ComponentData(
                component_id=component_id,
                component_type=component_type,
                terminals=(first, first + 1),
                config=validated,
                position=(x, y),
            )
            self.model.create_node((x - 40.0, y))
            self.model.create_node((x + 40.0, y))
            self.model.add_component(component)

        self._notify("component_added", component)
        self._changed()
        return component

    def restore_component(self, component: ComponentData, index: Optional[int] = None,
                          wires: Optional[list[tuple[int, WireData]]] = None) -> None:
        """Put back a removed component and its wires at their old positions."""
        if index is None:
            index = len(self.model.components)
        self.model.insert_component(index, component)
        self._notify("component_added", component)
        for wire_index, wire in sorted(wires or [], key=lambda item: item[0]):
            self.model.insert_wire(wire_index, wire)
            self._notify("wire_added", wire)
        self._changed()

    def remove_component(self, component_id: str) -> list[tuple[int, WireData]]:
        """
        Remove a component and the wires that only served it.

        Returns:
            (former index, wire) pairs of the removed wires.
        """
        positions = {wire.wire_id: i for i, wire in enumerate(self.model.wires)}
        removed = self.model.remove_component(component_id)
        for wire in removed:
            self._notify("wire_removed", wire.wire_id)
        self._notify("component_removed", component_id)
        self._changed()
        return [(positions[wire.wire_id], wire) for wire in removed]

    def set_property(self, component_id: str, key: str, value: Any) -> Any:
        """
        Validate and write one configuration input.

        Returns:
            The previous value.

        Raises:
            PropertyValidationError: If the key is not an input of the
                component's type or the value is out of range.
        """
        component = self.model.get_component(component_id)
        key, value = validate_property(component.component_type, key, value)
        old_value = getattr(component.config, key)
        component.config = component.config.with_value(key, value)
        self._notify("component_changed", component)
        self._changed()
        return old_value

    def set_position(self, component_id: str, position: tuple[float, float]) -> tuple[float, float]:
        """Replace a component's position. Returns the previous one."""
        component = self.model.get_component(component_id)
        try:
            new_position = (float(position[0]), float(position[1]))
        except (TypeError, ValueError, IndexError):
            raise PropertyValidationError(f"Invalid position {position!r}.") from None
        old_position = component.position
        component.position = new_position
        self._notify("component_changed", component)
        self._changed()
        return old_position

    def set_health(self, component_id: str, health: Health) -> Health:
        """Set a component's health directly. Returns the previous health."""
        component = self.model.get_component(component_id)
        old_health = component.health
        component.health = Health(health)
        if component.is_healthy():
            component.reset_output()
        self._notify("component_changed", component)
        self._changed()
        return old_health

    def update_component_property(self, component_id: str, key: str, value: Any) -> None:
        """
        Compatibility entry point for free-form property edits.

        ``position`` replaces the position wholesale. Every other key is
        routed to the matching typed command and goes through the undo
        history. Simulator outputs cannot be written.
        """
        self.model.get_component(component_id)
        if key in OUTPUT_KEYS or canonical_property(key) in OUTPUT_KEYS:
            raise PropertyValidationError(f"'{key}' is computed by the simulator and cannot be set.")
        self.execute(command_for_property(self, component_id, key, value))

    # --- Wire operations ---

    def connect(self, node_a: int, node_b: int) -> WireData:
        """
        Join two nodes with a wire.

        Parallel wires are allowed; they do not change the propagated
        voltages.
        """
        wire = self.model.add_wire(node_a, node_b)
        self._notify("wire_added", wire)
        self._changed()
        return wire

    def connect_terminals(self, comp_a: str, term_a: TerminalRef,
                          comp_b: str, term_b: TerminalRef) -> WireData:
        """Join two component terminals with a wire."""
        index_a = terminal_index(term_a)
        index_b = terminal_index(term_b)
        node_a = self.model.terminal_node(comp_a, index_a)
        node_b = self.model.terminal_node(comp_b, index_b)
        wire = self.model.add_wire(node_a, node_b, (comp_a, index_a), (comp_b, index_b))
        self._notify("wire_added", wire)
        self._changed()
        return wire

    def restore_wire(self, index: int, wire: WireData) -> None:
        """Put back a removed wire at its old position."""
        self.model.insert_wire(index, wire)
        self._notify("wire_added", wire)
        self._changed()

    def disconnect(self, comp_a: str, term_a: TerminalRef,
                   comp_b: str, term_b: TerminalRef) -> list[tuple[int, WireData]]:
        """
        Remove every wire drawn between two terminals, in either orientation.

        Component inputs are never touched. If no wire matches, nothing
        changes and an empty list is returned.

        Returns:
            (former index, wire) pairs of the removed wires.
        """
        self.model.get_component(comp_a)
        self.model.get_component(comp_b)
        indices = self.model.find_wire_indices(
            (comp_a, terminal_index(term_a)), (comp_b, terminal_index(term_b))
        )
        if not indices:
            logger.debug("No wire joins %s[%s] and %s[%s]", comp_a, term_a, comp_b, term_b)
            return []

        removed = []
        for index in sorted(indices, reverse=True):
            wire = self.model.remove_wire(index)
            removed.append((index, wire))
            self._notify("wire_removed", wire.wire_id)
        self._changed()
        return sorted(removed, key=lambda item: item[0])

    def disconnect_wire(self, wire_id: str) -> tuple[int, WireData]:
        """Remove one wire by id. Returns (former index, wire)."""
        index = self.model.get_wire_index(wire_id)
        wire = self.model.remove_wire(index)
        self._notify("wire_removed", wire.wire_id)
        self._changed()
        return index, wire
