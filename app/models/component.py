"""
ComponentData - Pure Python data model for circuit components.

Component types use lowercase canonical identifiers:
'battery', 'resistor', 'bulb', 'led', 'switch', 'capacitor', 'ground',
'inductor', 'diode', 'potentiometer', 'fuse', 'motor'

Every component carries two separate records:

- ``config``: a per-type configuration dataclass holding the inputs the user
  or UI sets (voltage, resistance, forward voltage, ...). Inputs are only
  changed through validated property updates.
- ``output``: a ComponentOutput written exclusively by the simulation passes
  (current, glowing, spinning, charging, ...). It is rebuilt on every pass.
"""

import math
from dataclasses import asdict, dataclass, field, fields, replace
from enum import Enum
from typing import Any, Optional, Union

from .errors import ComponentValidationError, PropertyValidationError

# Canonical component types
COMPONENT_TYPES = [
    "battery",
    "resistor",
    "bulb",
    "led",
    "switch",
    "capacitor",
    "ground",
    "inductor",
    "diode",
    "potentiometer",
    "fuse",
    "motor",
]

# Decorative or legacy names mapped to the type that defines their behavior
TYPE_ALIASES = {
    "lightbulb": "bulb",
    "light bulb": "bulb",
    "lamp": "bulb",
    "cell": "battery",
    "transformer": "inductor",
    "coil": "inductor",
    "rheostat": "potentiometer",
    "pot": "potentiometer",
    "earth": "ground",
    "buzzer": "motor",
}

# Prefixes for generated component ids (B1, R1, LP1, ...)
ID_PREFIXES = {
    "battery": "B",
    "resistor": "R",
    "bulb": "LP",
    "led": "LED",
    "switch": "SW",
    "capacitor": "C",
    "ground": "GND",
    "inductor": "L",
    "diode": "D",
    "potentiometer": "P",
    "fuse": "F",
    "motor": "M",
}

# Terminal 0 is the left/positive reference, terminal 1 the right/negative one
TERMINAL_NAMES = ("left", "right")

SOURCE_TYPES = frozenset({"battery"})


class Health(str, Enum):
    NORMAL = "normal"
    BLOWN = "blown"


def normalize_type(name: str) -> str:
    """
    Resolve a component type name or alias to its canonical type.

    Raises:
        ComponentValidationError: If the name is not a known type or alias.
    """
    if not isinstance(name, str):
        raise ComponentValidationError(f"Component type must be a string, got {name!r}.")
    key = name.strip().lower()
    key = TYPE_ALIASES.get(key, key)
    if key not in COMPONENT_TYPES:
        raise ComponentValidationError(f"Unknown component type '{name}'.")
    return key


def terminal_index(terminal: Union[int, str]) -> int:
    """Convert a terminal reference (0/1 or 'left'/'right') to its index."""
    if isinstance(terminal, str):
        name = terminal.strip().lower()
        if name in TERMINAL_NAMES:
            return TERMINAL_NAMES.index(name)
        if name.isdigit():
            terminal = int(name)
    if isinstance(terminal, int) and not isinstance(terminal, bool) and terminal in (0, 1):
        return terminal
    raise ComponentValidationError(f"Invalid terminal {terminal!r}; expected 0, 1, 'left' or 'right'.")


# --- Property validation ---


def _finite(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PropertyValidationError(f"'{key}' must be a number, got {value!r}.")
    value = float(value)
    if not math.isfinite(value):
        raise PropertyValidationError(f"'{key}' must be finite, got {value!r}.")
    return value


def _positive(key: str, value: Any) -> float:
    value = _finite(key, value)
    if value <= 0:
        raise PropertyValidationError(f"'{key}' must be greater than zero, got {value:g}.")
    return value


def _non_negative(key: str, value: Any) -> float:
    value = _finite(key, value)
    if value < 0:
        raise PropertyValidationError(f"'{key}' must not be negative, got {value:g}.")
    return value


def _optional_non_negative(key: str, value: Any) -> Optional[float]:
    return None if value is None else _non_negative(key, value)


def _optional_finite(key: str, value: Any) -> Optional[float]:
    return None if value is None else _finite(key, value)


def _fraction(key: str, value: Any) -> float:
    value = _finite(key, value)
    if not 0 < value <= 1:
        raise PropertyValidationError(f"'{key}' must be in (0, 1], got {value:g}.")
    return value


def _flag(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise PropertyValidationError(f"'{key}' must be true or false, got {value!r}.")
    return value


PROPERTY_RULES = {
    "voltage": _finite,
    "resistance": _positive,
    "forward_voltage": _non_negative,
    "capacitance": _non_negative,
    "inductance": _non_negative,
    "max_current": _optional_non_negative,
    "closed": _flag,
    "wiper": _fraction,
    "primary_turns": _positive,
    "secondary_turns": _positive,
    "primary_voltage": _optional_finite,
    "measured_current": _non_negative,
}

# camelCase names used by the UI layer
PROPERTY_ALIASES = {
    "forwardVoltage": "forward_voltage",
    "maxCurrent": "max_current",
    "primaryTurns": "primary_turns",
    "secondaryTurns": "secondary_turns",
    "primaryVoltage": "primary_voltage",
    "measuredCurrent": "measured_current",
    "wiperPosition": "wiper",
}

# Fields only the simulator may write
OUTPUT_KEYS = frozenset({
    "current",
    "glowing",
    "spinning",
    "charging",
    "blown",
    "secondary_voltage",
    "secondaryVoltage",
    "health",
})


def canonical_property(key: str) -> str:
    return PROPERTY_ALIASES.get(key, key)


# --- Per-type configuration ---


@dataclass
class ComponentConfig:
    """Inputs shared by every component type."""

    # Failure threshold; None means the simulator's default applies
    max_current: Optional[float] = None

    @classmethod
    def keys(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def with_value(self, key: str, value: Any) -> "ComponentConfig":
        """Return a copy with one field replaced."""
        return replace(self, **{key: value})

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class BatteryConfig(ComponentConfig):
    voltage: float = 9.0


@dataclass
class ResistorConfig(ComponentConfig):
    resistance: float = 1000.0


@dataclass
class BulbConfig(ComponentConfig):
    resistance: float = 240.0


@dataclass
class LedConfig(ComponentConfig):
    forward_voltage: float = 2.1


@dataclass
class SwitchConfig(ComponentConfig):
    closed: bool = True


@dataclass
class CapacitorConfig(ComponentConfig):
    capacitance: float = 0.001


@dataclass
class GroundConfig(ComponentConfig):
    pass


@dataclass
class InductorConfig(ComponentConfig):
    inductance: float = 0.01
    primary_turns: float = 100.0
    secondary_turns: float = 50.0
    # When unset, the voltage across the inductor's terminals is used
    primary_voltage: Optional[float] = None


@dataclass
class DiodeConfig(ComponentConfig):
    forward_voltage: float = 0.7


@dataclass
class PotentiometerConfig(ComponentConfig):
    resistance: float = 1000.0
    wiper: float = 0.5


@dataclass
class FuseConfig(ComponentConfig):
    # Current reported by an external meter; fuses have no resistive model
    measured_current: float = 0.0


@dataclass
class MotorConfig(ComponentConfig):
    resistance: float = 50.0


CONFIG_CLASSES: dict[str, type[ComponentConfig]] = {
    "battery": BatteryConfig,
    "resistor": ResistorConfig,
    "bulb": BulbConfig,
    "led": LedConfig,
    "switch": SwitchConfig,
    "capacitor": CapacitorConfig,
    "ground": GroundConfig,
    "inductor": InductorConfig,
    "diode": DiodeConfig,
    "potentiometer": PotentiometerConfig,
    "fuse": FuseConfig,
    "motor": MotorConfig,
}


def validate_property(component_type: str, key: str, value: Any) -> tuple[str, Any]:
    """
    Validate an input property for a component type.

    Args:
        component_type: Canonical component type.
        key: Property name (snake_case or the UI's camelCase).
        value: Proposed value.

    Returns:
        (canonical_key, coerced_value)

    Raises:
        PropertyValidationError: If the key is an output field, does not
            belong to the type, or the value is out of range.
    """
    key = canonical_property(key)
    if key in OUTPUT_KEYS:
        raise PropertyValidationError(f"'{key}' is computed by the simulator and cannot be set.")
    if key not in CONFIG_CLASSES[component_type].keys():
        raise PropertyValidationError(f"'{key}' is not a property of a {component_type}.")
    return key, PROPERTY_RULES[key](key, value)


def make_config(component_type: str, values: Optional[dict] = None) -> ComponentConfig:
    """Build a validated configuration for a component type from a plain dict."""
    config_cls = CONFIG_CLASSES[component_type]
    cleaned = {}
    for key, value in (values or {}).items():
        name = canonical_property(key)
        if name not in config_cls.keys():
            raise ComponentValidationError(f"'{key}' is not a property of a {component_type}.")
        name, value = validate_property(component_type, name, value)
        cleaned[name] = value
    return config_cls(**cleaned)


@dataclass
class ComponentOutput:
    """Values computed by the simulator on every pass."""

    current: float = 0.0
    voltage: Optional[float] = None
    glowing: bool = False
    spinning: bool = False
    charging: bool = False
    blown: bool = False
    closed: Optional[bool] = None
    secondary_voltage: Optional[float] = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class ComponentData:
    """
    Pure Python data class representing a placed two-terminal component.

    ``terminals`` holds the node handles of terminal 0 (left/positive) and
    terminal 1 (right/negative). A plain dict passed as ``config`` is
    validated and converted to the type's configuration dataclass.
    """

    component_id: str
    component_type: str
    terminals: tuple[int, int]
    config: Optional[ComponentConfig] = None
    position: tuple[float, float] = (0.0, 0.0)
    rotation: int = 0
    health: Health = Health.NORMAL
    output: ComponentOutput = field(default_factory=ComponentOutput)

    def __post_init__(self):
        if not isinstance(self.component_id, str) or not self.component_id:
            raise ComponentValidationError("Component id must be a non-empty string.")
        self.component_type = normalize_type(self.component_type)

        if not isinstance(self.terminals, (list, tuple)):
            raise ComponentValidationError(f"{self.component_id}: terminals must be a pair of node handles.")
        if len(self.terminals) != 2:
            raise ComponentValidationError(
                f"{self.component_id} must have exactly two terminals, got {len(self.terminals)}."
            )
        for handle in self.terminals:
            if isinstance(handle, bool) or not isinstance(handle, int):
                raise ComponentValidationError(f"{self.component_id}: invalid node handle {handle!r}.")
        if self.terminals[0] == self.terminals[1]:
            raise ComponentValidationError(f"{self.component_id}: both terminals reference the same node.")
        self.terminals = (self.terminals[0], self.terminals[1])

        config_cls = CONFIG_CLASSES[self.component_type]
        if self.config is None:
            self.config = config_cls()
        elif isinstance(self.config, dict):
            self.config = make_config(self.component_type, self.config)
        elif type(self.config) is not config_cls:
            raise ComponentValidationError(
                f"{self.component_id}: {type(self.config).__name__} does not configure a {self.component_type}."
            )

        try:
            self.health = Health(self.health)
        except ValueError:
            raise ComponentValidationError(f"{self.component_id}: unknown health {self.health!r}.") from None
        self.position = (float(self.position[0]), float(self.position[1]))

    def is_healthy(self) -> bool:
        return self.health is Health.NORMAL

    def is_source(self) -> bool:
        return self.component_type in SOURCE_TYPES

    def get_terminal_node(self, terminal: Union[int, str]) -> int:
        """Return the node handle for terminal 0/1 or 'left'/'right'."""
        return self.terminals[terminal_index(terminal)]

    def reset_output(self) -> None:
        self.output = ComponentOutput()

    def to_dict(self, include_outputs: bool = True) -> dict:
        """
        Serialize component to dictionary.

        Outputs are included for state snapshots and omitted in saved files
        because they are recomputed on load.
        """
        data = {
            "id": self.component_id,
            "type": self.component_type,
            "terminals": list(self.terminals),
            "config": self.config.to_dict(),
            "pos": {"x": self.position[0], "y": self.position[1]},
            "rotation": self.rotation,
            "health": self.health.value,
        }
        if include_outputs:
            data["output"] = self.output.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ComponentData":
        """Deserialize component from dictionary (outputs are ignored)."""
        pos = data.get("pos", {"x": 0.0, "y": 0.0})
        terminals = data.get("terminals")
        return cls(
            component_id=data["id"],
            component_type=data["type"],
            terminals=tuple(terminals) if isinstance(terminals, list) else terminals,
            config=dict(data.get("config", {})),
            position=(pos["x"], pos["y"]),
            rotation=data.get("rotation", 0),
            health=data.get("health", Health.NORMAL.value),
        )

    def __repr__(self) -> str:
        return (
            f"ComponentData({self.component_id}, {self.component_type}, "
            f"n{self.terminals[0]}-n{self.terminals[1]}, {self.health.value})"
        )
