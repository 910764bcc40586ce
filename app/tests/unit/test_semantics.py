"""Tests for the semantic state summary."""

import pytest
from models.semantics import SemanticState
from tests.conftest import wire_loop


class TestIdle:
    def test_empty_simulator_is_idle(self, simulator):
        assert simulator.get_semantics() == SemanticState.idle()

    def test_idle_state_flags(self):
        state = SemanticState.idle()
        assert state.open_circuit is True
        assert state.power_flow_active is False
        assert state.safety_risk_level == "none"
        assert state.active_states() == ["open_circuit"]


class TestOpenCircuit:
    def test_no_wires_is_open(self, simulator):
        simulator.add_component("battery")
        simulator.add_component("bulb")
        assert simulator.get_semantics().open_circuit is True

    def test_one_wire_two_components_is_closed(self, simulator):
        simulator.add_component("battery")
        simulator.add_component("bulb")
        simulator.connect_terminals("B1", 0, "LP1", 0)
        semantics = simulator.get_semantics()
        assert semantics.open_circuit is False
        assert semantics.power_flow_active is True

    def test_single_component_is_open(self, simulator):
        simulator.add_component("battery")
        simulator.connect_terminals("B1", 0, "B1", 1)
        assert simulator.get_semantics().open_circuit is True


class TestShortCircuit:
    def test_shorted_battery_is_high_risk(self, simulator):
        simulator.add_component("battery")
        simulator.add_component("resistor")
        simulator.connect_terminals("B1", 0, "B1", 1)

        semantics = simulator.get_semantics()
        assert semantics.short_circuit is True
        assert semantics.safety_risk_level == "high"
        assert semantics.power_flow_active is False

    def test_short_outranks_failures(self, simulator):
        simulator.add_component("battery")
        simulator.add_component("resistor", config={"resistance": 10})
        wire_loop(simulator, "B1", "R1")
        assert simulator.get_semantics().safety_risk_level == "medium"

        simulator.connect_terminals("B1", 0, "B1", 1)
        semantics = simulator.get_semantics()
        assert semantics.component_failure == ("R1",)
        assert semantics.safety_risk_level == "high"

    def test_normal_loop_has_no_risk(self, bulb_circuit):
        semantics = bulb_circuit.get_semantics()
        assert semantics.short_circuit is False
        assert semantics.safety_risk_level == "none"
        assert semantics.active_states() == ["power_flow_active"]


class TestOtherFlags:
    def test_failure_is_medium_risk(self, simulator):
        simulator.add_component("battery")
        simulator.add_component("motor")
        wire_loop(simulator, "B1", "M1")
        semantics = simulator.get_semantics()
        assert semantics.component_failure == ("M1",)
        assert semantics.safety_risk_level == "medium"

    def test_reverse_polarity(self, simulator):
        simulator.add_component("battery")
        simulator.add_component("led")
        simulator.connect_terminals("B1", 0, "LED1", 1)
        simulator.connect_terminals("LED1", 0, "B1", 1)
        assert simulator.get_semantics().reverse_polarity_detected is True

    def test_forward_led_not_reversed(self, led_circuit):
        assert led_circuit.get_semantics().reverse_polarity_detected is False

    def test_capacitor_charging(self, simulator):
        simulator.add_component("battery")
        simulator.add_component("capacitor")
        wire_loop(simulator, "B1", "C1")
        assert simulator.get_semantics().capacitor_charging is True

    def test_overcurrent_on_configured_rating(self, simulator):
        simulator.add_component("battery")
        simulator.add_component("bulb", config={"max_current": 0.02})
        wire_loop(simulator, "B1", "LP1")
        semantics = simulator.get_semantics()
        assert semantics.component_failure == ("LP1",)
        assert semantics.overcurrent_detected is True

    def test_measurements(self, bulb_circuit):
        semantics = bulb_circuit.get_semantics()
        # Bulb current plus the same current drawn from the battery
        assert semantics.total_current == pytest.approx(0.075)
        assert semantics.voltage_range == (0.0, 9.0)
        assert semantics.voltage_conflicts == ()

    def test_conflicts_reported(self, simulator):
        simulator.add_component("battery")
        simulator.add_component("battery", config={"voltage": 12})
        simulator.connect_terminals("B1", 0, "B2", 0)
        assert simulator.get_semantics().voltage_conflicts == (
            simulator.model.terminal_node("B2", 0),
        )

    def test_to_dict_is_plain_data(self, bulb_circuit):
        data = bulb_circuit.get_semantics().to_dict()
        assert data["component_failure"] == []
        assert data["voltage_range"] == [0.0, 9.0]
        assert data["safety_risk_level"] == "none"
