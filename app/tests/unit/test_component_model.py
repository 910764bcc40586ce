"""Tests for ComponentData, per-type configuration and property validation."""

import math

import pytest
from models.component import (
    BatteryConfig,
    ComponentData,
    ComponentOutput,
    Health,
    InductorConfig,
    LedConfig,
    ResistorConfig,
    make_config,
    normalize_type,
    terminal_index,
    validate_property,
)
from models.errors import CircuitError, ComponentValidationError, PropertyValidationError
from tests.conftest import make_component


class TestNormalizeType:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("battery", "battery"),
            ("Resistor", "resistor"),
            ("lightbulb", "bulb"),
            ("Lamp", "bulb"),
            ("cell", "battery"),
            ("transformer", "inductor"),
            ("earth", "ground"),
            ("buzzer", "motor"),
        ],
    )
    def test_canonical_and_aliases(self, name, expected):
        assert normalize_type(name) == expected

    def test_unknown_type_rejected(self):
        with pytest.raises(ComponentValidationError, match="Unknown component type"):
            normalize_type("flux capacitor")

    def test_non_string_rejected(self):
        with pytest.raises(ComponentValidationError):
            normalize_type(3)


class TestTerminalIndex:
    def test_names_and_indices(self):
        assert terminal_index("left") == 0
        assert terminal_index("RIGHT") == 1
        assert terminal_index(0) == 0
        assert terminal_index("1") == 1

    @pytest.mark.parametrize("bad", [2, -1, "middle", True, None])
    def test_invalid(self, bad):
        with pytest.raises(ComponentValidationError):
            terminal_index(bad)


class TestComponentStructure:
    def test_defaults_from_type(self):
        comp = make_component("battery", "B1", (0, 1))
        assert isinstance(comp.config, BatteryConfig)
        assert comp.config.voltage == 9.0
        assert comp.config.max_current is None
        assert comp.health is Health.NORMAL
        assert comp.output == ComponentOutput()

    def test_alias_type_normalized(self):
        comp = make_component("lightbulb", "LP1", (0, 1))
        assert comp.component_type == "bulb"
        assert comp.config.resistance == 240.0

    def test_terminals_stored_as_tuple(self):
        comp = make_component("resistor", "R1", [4, 7])
        assert comp.terminals == (4, 7)

    @pytest.mark.parametrize("terminals", [(0,), (0, 1, 2), ()])
    def test_wrong_terminal_count(self, terminals):
        with pytest.raises(ComponentValidationError, match="exactly two terminals"):
            make_component("resistor", "R1", terminals)

    def test_same_node_twice(self):
        with pytest.raises(ComponentValidationError, match="same node"):
            make_component("resistor", "R1", (3, 3))

    def test_non_integer_handle(self):
        with pytest.raises(ComponentValidationError, match="invalid node handle"):
            make_component("resistor", "R1", (0, "n1"))

    def test_empty_id(self):
        with pytest.raises(ComponentValidationError):
            make_component("resistor", "", (0, 1))

    def test_dict_config_validated(self):
        comp = make_component("resistor", "R1", (0, 1), config={"resistance": 470})
        assert comp.config == ResistorConfig(resistance=470.0)

    def test_camel_case_config_keys(self):
        comp = make_component("led", "LED1", (0, 1), config={"forwardVoltage": 1.8, "maxCurrent": 0.02})
        assert comp.config == LedConfig(forward_voltage=1.8, max_current=0.02)

    def test_unknown_config_key(self):
        with pytest.raises(ComponentValidationError, match="not a property"):
            make_component("resistor", "R1", (0, 1), config={"voltage": 5})

    def test_mismatched_config_class(self):
        with pytest.raises(ComponentValidationError, match="does not configure"):
            make_component("resistor", "R1", (0, 1), config=BatteryConfig())

    def test_unknown_health(self):
        with pytest.raises(ComponentValidationError, match="unknown health"):
            ComponentData("R1", "resistor", (0, 1), health="melted")

    def test_errors_are_value_errors(self):
        assert issubclass(ComponentValidationError, CircuitError)
        assert issubclass(CircuitError, ValueError)


class TestPropertyValidation:
    def test_resistance_must_be_positive(self):
        with pytest.raises(PropertyValidationError):
            validate_property("resistor", "resistance", 0)
        with pytest.raises(PropertyValidationError):
            validate_property("resistor", "resistance", -5)

    def test_negative_capacitance(self):
        with pytest.raises(PropertyValidationError):
            validate_property("capacitor", "capacitance", -1e-6)

    def test_non_positive_turns(self):
        with pytest.raises(PropertyValidationError):
            validate_property("inductor", "primary_turns", 0)

    @pytest.mark.parametrize("wiper", [0, 1.5, -0.1])
    def test_wiper_range(self, wiper):
        with pytest.raises(PropertyValidationError):
            validate_property("potentiometer", "wiper", wiper)

    def test_wiper_upper_bound_inclusive(self):
        assert validate_property("potentiometer", "wiper", 1) == ("wiper", 1.0)

    def test_negative_max_current(self):
        with pytest.raises(PropertyValidationError):
            validate_property("fuse", "max_current", -1)

    def test_max_current_may_be_cleared(self):
        assert validate_property("fuse", "maxCurrent", None) == ("max_current", None)

    def test_battery_voltage_any_finite(self):
        assert validate_property("battery", "voltage", -12) == ("voltage", -12.0)
        with pytest.raises(PropertyValidationError):
            validate_property("battery", "voltage", math.inf)

    def test_closed_must_be_bool(self):
        with pytest.raises(PropertyValidationError):
            validate_property("switch", "closed", "yes")

    def test_non_numeric(self):
        with pytest.raises(PropertyValidationError, match="must be a number"):
            validate_property("resistor", "resistance", "1k")

    @pytest.mark.parametrize("key", ["current", "glowing", "blown", "secondaryVoltage", "health"])
    def test_output_keys_rejected(self, key):
        with pytest.raises(PropertyValidationError, match="computed by the simulator"):
            validate_property("bulb", key, 1)

    def test_key_of_another_type(self):
        with pytest.raises(PropertyValidationError, match="not a property of a resistor"):
            validate_property("resistor", "forward_voltage", 0.7)


class TestConfigHelpers:
    def test_make_config_defaults(self):
        config = make_config("inductor")
        assert config == InductorConfig()
        assert config.secondary_turns / config.primary_turns == 0.5

    def test_with_value_returns_copy(self):
        config = ResistorConfig()
        changed = config.with_value("resistance", 10.0)
        assert config.resistance == 1000.0
        assert changed.resistance == 10.0

    def test_to_dict_drops_unset(self):
        assert BatteryConfig().to_dict() == {"voltage": 9.0}
        assert BatteryConfig(max_current=2.0).to_dict() == {"max_current": 2.0, "voltage": 9.0}


class TestComponentSerialization:
    def test_round_trip_keeps_inputs_and_health(self):
        comp = make_component("fuse", "F1", (2, 3), config={"max_current": 0.5}, position=(10, 20))
        comp.health = Health.BLOWN
        comp.output.current = 2.0

        restored = ComponentData.from_dict(comp.to_dict())
        assert restored.terminals == (2, 3)
        assert restored.config == comp.config
        assert restored.position == (10.0, 20.0)
        assert restored.health is Health.BLOWN
        assert restored.output == ComponentOutput()

    def test_outputs_optional_in_dict(self):
        comp = make_component("bulb", "LP1", (0, 1))
        assert "output" in comp.to_dict()
        assert "output" not in comp.to_dict(include_outputs=False)

    def test_get_terminal_node(self):
        comp = make_component("bulb", "LP1", (5, 9))
        assert comp.get_terminal_node("left") == 5
        assert comp.get_terminal_node(1) == 9
