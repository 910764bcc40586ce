"""
Command Pattern Implementation for Undo/Redo.

Each command stores minimal state needed to undo/redo an operation.
Commands are executed through the CircuitSimulator to maintain consistency:
every execute() and undo() goes through a simulator primitive, so observers
are notified and the circuit is recomputed.

Property commands validate their own target type before touching anything;
value ranges are checked by the shared property rules.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Union

from models.component import (
    COMPONENT_TYPES,
    ComponentData,
    Health,
    canonical_property,
    terminal_index,
    validate_property,
)
from models.errors import PropertyValidationError
from models.wire import Terminal, WireData


class Command(ABC):
    """Base class for undoable commands."""

    @abstractmethod
    def execute(self) -> None:
        """Execute the command (perform the action)."""
        pass

    @abstractmethod
    def undo(self) -> None:
        """Undo the command (reverse the action)."""
        pass

    def get_description(self) -> str:
        """Return a human-readable description of this command."""
        return self.__class__.__name__


# --- Structural commands ---


class AddComponentCommand(Command):
    """Command to add a component to the circuit."""

    def __init__(self, controller, component_type: str, config: Optional[dict] = None,
                 position: tuple[float, float] = (0.0, 0.0)):
        self.controller = controller
        self.component_type = component_type
        self.config = config
        self.position = position
        self.component: Optional[ComponentData] = None
        self.index: Optional[int] = None

    @property
    def component_id(self) -> Optional[str]:
        return self.component.component_id if self.component else None

    def execute(self) -> None:
        """Add the component; a redo puts back the same component and nodes."""
        if self.component is None:
            self.component = self.controller.add_component(self.component_type, self.config, self.position)
            self.index = len(self.controller.model.components) - 1
        else:
            self.controller.restore_component(self.component, self.index)

    def undo(self) -> None:
        """Remove the added component."""
        if self.component_id:
            self.controller.remove_component(self.component_id)

    def get_description(self) -> str:
        return f"Add {self.component_type}"


class DeleteComponentCommand(Command):
    """Command to delete a component and the wires that only served it."""

    def __init__(self, controller, component_id: str):
        self.controller = controller
        self.component_id = component_id
        self.component: Optional[ComponentData] = None
        self.index: Optional[int] = None
        self.deleted_wires: list[tuple[int, WireData]] = []

    def execute(self) -> None:
        """Delete the component and store it with its wires for undo."""
        model = self.controller.model
        self.component = model.get_component(self.component_id)
        self.index = list(model.components).index(self.component_id)
        self.deleted_wires = self.controller.remove_component(self.component_id)

    def undo(self) -> None:
        """Restore the deleted component and its wires."""
        if self.component:
            self.controller.restore_component(self.component, self.index, self.deleted_wires)

    def get_description(self) -> str:
        return f"Delete {self.component_id}"


class ConnectCommand(Command):
    """
    Command to add a wire.

    Endpoints are either node handles or (component id, terminal) pairs;
    both endpoints must use the same form.
    """

    def __init__(self, controller, start: Union[int, Terminal], end: Union[int, Terminal]):
        self.controller = controller
        self.start = start
        self.end = end
        self.wire: Optional[WireData] = None
        self.index: Optional[int] = None

    def execute(self) -> None:
        """Add the wire; a redo puts back the same wire id."""
        if self.wire is not None:
            self.controller.restore_wire(self.index, self.wire)
            return
        if isinstance(self.start, tuple) and isinstance(self.end, tuple):
            self.wire = self.controller.connect_terminals(*self.start, *self.end)
        else:
            self.wire = self.controller.connect(self.start, self.end)
        self.index = len(self.controller.model.wires) - 1

    def undo(self) -> None:
        """Remove the added wire."""
        if self.wire is not None:
            self.controller.disconnect_wire(self.wire.wire_id)

    def get_description(self) -> str:
        return f"Connect {_describe_endpoint(self.start)}-{_describe_endpoint(self.end)}"


class DisconnectCommand(Command):
    """Command to remove every wire between two component terminals."""

    def __init__(self, controller, first: Terminal, second: Terminal):
        self.controller = controller
        self.first = (first[0], terminal_index(first[1]))
        self.second = (second[0], terminal_index(second[1]))
        self.removed: list[tuple[int, WireData]] = []

    def execute(self) -> None:
        self.removed = self.controller.disconnect(*self.first, *self.second)

    def undo(self) -> None:
        """Restore the removed wires at their former indices."""
        for index, wire in self.removed:
            self.controller.restore_wire(index, wire)

    def get_description(self) -> str:
        return f"Disconnect {_describe_endpoint(self.first)}-{_describe_endpoint(self.second)}"


class DisconnectWireCommand(Command):
    """Command to remove a single wire by id."""

    def __init__(self, controller, wire_id: str):
        self.controller = controller
        self.wire_id = wire_id
        self.index: Optional[int] = None
        self.wire: Optional[WireData] = None

    def execute(self) -> None:
        self.index, self.wire = self.controller.disconnect_wire(self.wire_id)

    def undo(self) -> None:
        if self.wire is not None:
            self.controller.restore_wire(self.index, self.wire)

    def get_description(self) -> str:
        return f"Delete wire {self.wire_id}"


def _describe_endpoint(endpoint) -> str:
    if isinstance(endpoint, tuple):
        return f"{endpoint[0]}[{endpoint[1]}]"
    return f"n{endpoint}"


# --- Property commands ---


class SetPropertyCommand(Command):
    """
    Command to change one configuration input.

    Subclasses fix the property key and the component types it applies to.
    The generic form accepts any key valid for the component's type.
    """

    key: Optional[str] = None
    component_types: tuple[str, ...] = tuple(COMPONENT_TYPES)
    label = "property"

    def __init__(self, controller, component_id: str, value: Any, key: Optional[str] = None):
        self.controller = controller
        self.component_id = component_id
        self.value = value
        if key is not None:
            self.key = canonical_property(key)
            self.label = self.key
        if self.key is None:
            raise TypeError(f"{type(self).__name__} needs a property key")
        self.old_value: Any = None

    def validate(self, component: ComponentData) -> None:
        """Check the command applies to the component before anything changes."""
        if component.component_type not in self.component_types:
            raise PropertyValidationError(
                f"Cannot set {self.label} on {component.component_id} ({component.component_type})."
            )
        validate_property(component.component_type, self.key, self.value)

    def execute(self) -> None:
        component = self.controller.model.get_component(self.component_id)
        self.validate(component)
        self.old_value = self.controller.set_property(self.component_id, self.key, self.value)

    def undo(self) -> None:
        self.controller.set_property(self.component_id, self.key, self.old_value)

    def get_description(self) -> str:
        return f"Set {self.component_id} {self.label}"


class SetVoltage(SetPropertyCommand):
    key = "voltage"
    component_types = ("battery",)
    label = "voltage"


class SetResistance(SetPropertyCommand):
    key = "resistance"
    component_types = ("resistor", "bulb", "motor", "potentiometer")
    label = "resistance"


class SetForwardVoltage(SetPropertyCommand):
    key = "forward_voltage"
    component_types = ("led", "diode")
    label = "forward voltage"


class SetCapacitance(SetPropertyCommand):
    key = "capacitance"
    component_types = ("capacitor",)
    label = "capacitance"


class SetInductance(SetPropertyCommand):
    key = "inductance"
    component_types = ("inductor",)
    label = "inductance"


class SetMaxCurrent(SetPropertyCommand):
    """Set or clear (None) the failure threshold of any component."""

    key = "max_current"
    label = "max current"


class SetSwitchState(SetPropertyCommand):
    key = "closed"
    component_types = ("switch",)
    label = "switch state"


class SetWiperPosition(SetPropertyCommand):
    key = "wiper"
    component_types = ("potentiometer",)
    label = "wiper position"


class SetPrimaryVoltage(SetPropertyCommand):
    key = "primary_voltage"
    component_types = ("inductor",)
    label = "primary voltage"


class SetMeasuredCurrent(SetPropertyCommand):
    key = "measured_current"
    component_types = ("fuse",)
    label = "measured current"


class ToggleSwitch(Command):
    """Command to flip a switch between open and closed."""

    def __init__(self, controller, component_id: str):
        self.controller = controller
        self.component_id = component_id

    def execute(self) -> None:
        component = self.controller.model.get_component(self.component_id)
        if component.component_type != "switch":
            raise PropertyValidationError(f"{self.component_id} is not a switch.")
        self.controller.set_property(self.component_id, "closed", not component.config.closed)

    def undo(self) -> None:
        component = self.controller.model.get_component(self.component_id)
        self.controller.set_property(self.component_id, "closed", not component.config.closed)

    def get_description(self) -> str:
        return f"Toggle {self.component_id}"


class SetTurnsRatio(Command):
    """Command to set both winding turn counts of an inductor at once."""

    def __init__(self, controller, component_id: str, primary_turns: float, secondary_turns: float):
        self.controller = controller
        self.component_id = component_id
        self.primary_turns = primary_turns
        self.secondary_turns = secondary_turns
        self.old_turns: Optional[tuple[float, float]] = None

    def execute(self) -> None:
        component = self.controller.model.get_component(self.component_id)
        if component.component_type != "inductor":
            raise PropertyValidationError(f"Cannot set turns ratio on {self.component_id} ({component.component_type}).")
        # Both values are checked before either is written
        validate_property("inductor", "primary_turns", self.primary_turns)
        validate_property("inductor", "secondary_turns", self.secondary_turns)

        self.old_turns = (component.config.primary_turns, component.config.secondary_turns)
        self.controller.set_property(self.component_id, "primary_turns", self.primary_turns)
        self.controller.set_property(self.component_id, "secondary_turns", self.secondary_turns)

    def undo(self) -> None:
        if self.old_turns is not None:
            self.controller.set_property(self.component_id, "primary_turns", self.old_turns[0])
            self.controller.set_property(self.component_id, "secondary_turns", self.old_turns[1])

    def get_description(self) -> str:
        return f"Set {self.component_id} turns ratio"


class SetPosition(Command):
    """Command to move a component. The position is replaced wholesale."""

    def __init__(self, controller, component_id: str, position: tuple[float, float]):
        self.controller = controller
        self.component_id = component_id
        self.position = position
        self.old_position: Optional[tuple[float, float]] = None

    def execute(self) -> None:
        self.old_position = self.controller.set_position(self.component_id, self.position)

    def undo(self) -> None:
        if self.old_position is not None:
            self.controller.set_position(self.component_id, self.old_position)

    def get_description(self) -> str:
        return f"Move {self.component_id}"


class ResetComponent(Command):
    """Command to restore a blown component to normal health."""

    def __init__(self, controller, component_id: str):
        self.controller = controller
        self.component_id = component_id
        self.old_health: Optional[Health] = None

    def execute(self) -> None:
        self.old_health = self.controller.set_health(self.component_id, Health.NORMAL)

    def undo(self) -> None:
        if self.old_health is not None:
            self.controller.set_health(self.component_id, self.old_health)

    def get_description(self) -> str:
        return f"Reset {self.component_id}"


class CompoundCommand(Command):
    """Command that groups multiple commands into a single undoable action."""

    def __init__(self, commands: list[Command], description: str = "Multiple actions"):
        self.commands = commands
        self.description = description

    def execute(self) -> None:
        """Execute all sub-commands in order."""
        for cmd in self.commands:
            cmd.execute()

    def undo(self) -> None:
        """Undo all sub-commands in reverse order."""
        for cmd in reversed(self.commands):
            cmd.undo()

    def get_description(self) -> str:
        return self.description


# Property keys with a dedicated command type
PROPERTY_COMMANDS: dict[str, type[SetPropertyCommand]] = {
    cls.key: cls
    for cls in (
        SetVoltage,
        SetResistance,
        SetForwardVoltage,
        SetCapacitance,
        SetInductance,
        SetMaxCurrent,
        SetSwitchState,
        SetWiperPosition,
        SetPrimaryVoltage,
        SetMeasuredCurrent,
    )
}


def command_for_property(controller, component_id: str, key: str, value: Any) -> Command:
    """Build the command that applies a free-form property edit."""
    if key == "position":
        return SetPosition(controller, component_id, value)
    name = canonical_property(key)
    command_cls = PROPERTY_COMMANDS.get(name)
    if command_cls is None:
        return SetPropertyCommand(controller, component_id, value, key=name)
    return command_cls(controller, component_id, value)
