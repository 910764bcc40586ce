"""Tests for overcurrent failure detection and recovery."""

import pytest
from controllers.commands import ResetComponent, SetMeasuredCurrent
from models.component import Health
from simulation.failures import detect_failures, failure_threshold
from simulation.settings import SimulationSettings
from tests.conftest import make_component, wire_loop


class TestThresholds:
    def test_default_threshold(self):
        comp = make_component("resistor", "R1", (0, 1))
        assert failure_threshold(comp, SimulationSettings()) == 0.1

    def test_configured_threshold(self):
        comp = make_component("bulb", "LP1", (0, 1), config={"max_current": 0.5})
        assert failure_threshold(comp, SimulationSettings()) == 0.5

    def test_battery_and_ground_exempt(self):
        settings = SimulationSettings()
        assert failure_threshold(make_component("battery", "B1", (0, 1)), settings) is None
        assert failure_threshold(make_component("ground", "GND1", (0, 1)), settings) is None

    def test_battery_with_rating_can_fail(self):
        comp = make_component("battery", "B1", (0, 1), config={"max_current": 2})
        assert failure_threshold(comp, SimulationSettings()) == 2.0

    def test_unrated_fuse_uses_default_max_current(self):
        comp = make_component("fuse", "F1", (0, 1))
        # The fuse rating only applies to the fuse's own trip check
        assert failure_threshold(comp, SimulationSettings(default_fuse_rating=3.0)) == 0.1


class TestDetectFailures:
    def test_overcurrent_blows_once(self, simulator):
        simulator.add_component("battery")
        simulator.add_component("resistor", config={"resistance": 10})
        simulator.auto_recompute = False
        wire_loop(simulator, "B1", "R1")

        snapshot = simulator.recompute()
        assert snapshot.newly_failed == ["R1"]
        assert simulator.model.components["R1"].health is Health.BLOWN
        # Already blown: not reported again
        assert detect_failures(simulator.model, simulator.settings) == []

    def test_exactly_at_threshold_survives(self, simulator):
        simulator.add_component("battery", config={"voltage": 1.0})
        simulator.add_component("resistor", config={"resistance": 10})
        wire_loop(simulator, "B1", "R1")
        assert simulator.model.components["R1"].is_healthy()

    def test_shorted_battery_stays_healthy(self, simulator):
        simulator.add_component("battery")
        simulator.connect_terminals("B1", 0, "B1", 1)
        assert simulator.model.components["B1"].is_healthy()
        assert simulator.get_semantics().component_failure == ()


class TestFuse:
    def test_trips_and_stays_blown(self, simulator):
        simulator.add_component("fuse", config={"max_current": 1.0, "measured_current": 1.5})
        fuse = simulator.model.components["F1"]
        assert fuse.health is Health.BLOWN
        assert fuse.output.blown is True

        simulator.execute(SetMeasuredCurrent(simulator, "F1", 0.2))
        assert fuse.health is Health.BLOWN

    def test_reset_restores_fuse(self, simulator):
        simulator.add_component("fuse", config={"max_current": 1.0, "measured_current": 1.5})
        simulator.execute(SetMeasuredCurrent(simulator, "F1", 0.2))
        simulator.execute(ResetComponent(simulator, "F1"))

        fuse = simulator.model.components["F1"]
        assert fuse.health is Health.NORMAL
        assert fuse.output.blown is False
        assert fuse.output.current == pytest.approx(0.2)

    def test_unrated_fuse_fails_above_default_max_current(self, simulator):
        simulator.add_component("fuse", config={"measured_current": 0.05})
        assert simulator.model.components["F1"].is_healthy()

        simulator.set_property("F1", "measured_current", 0.5)
        fuse = simulator.model.components["F1"]
        semantics = simulator.get_semantics()
        assert fuse.health is Health.BLOWN
        assert fuse.output.current == 0.5
        assert semantics.overcurrent_detected is True
        assert semantics.component_failure == ("F1",)

    def test_reset_while_overloaded_trips_again(self, simulator):
        simulator.add_component("fuse", config={"max_current": 1.0, "measured_current": 1.5})
        simulator.execute(ResetComponent(simulator, "F1"))
        # Measured current is still too high, so the fuse trips again
        assert simulator.model.components["F1"].health is Health.BLOWN
