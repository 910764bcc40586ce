"""Integration tests: build, save, reload and re-simulate circuits end to end."""

import json

import pytest
from controllers.circuit_simulator import CircuitSimulator
from controllers.commands import SetMaxCurrent
from controllers.file_controller import FileController, read_circuit_file
from models.component import Health
from tests.conftest import wire_loop


@pytest.fixture
def file_ctrl(tmp_path):
    return FileController(
        CircuitSimulator(),
        recent_files_file=tmp_path / "recent.json",
        autosave_file=tmp_path / "autosave.json",
    )


def _every_type(sim):
    for component_type in ("battery", "resistor", "led", "switch", "capacitor", "inductor",
                           "diode", "potentiometer", "fuse", "motor", "ground", "bulb"):
        sim.add_component(component_type)
    sim.set_property("B1", "voltage", 6.0)
    sim.set_property("SW1", "closed", False)
    sim.set_property("L1", "primary_voltage", 12.0)
    sim.set_property("F1", "measured_current", 0.4)
    wire_loop(sim, "B1", "R1")
    wire_loop(sim, "B1", "LED1")
    sim.connect_terminals("R1", 1, "C1", 0)


class TestRoundTrip:
    def test_readings_identical_after_reload(self, file_ctrl, tmp_path):
        sim = file_ctrl.simulator
        _every_type(sim)
        before = sim.get_state()
        semantics_before = sim.get_semantics()

        path = tmp_path / "all.json"
        file_ctrl.save_circuit(path)
        file_ctrl.new_circuit()
        file_ctrl.load_circuit(path)

        assert sim.get_state() == before
        assert sim.get_semantics() == semantics_before

    def test_blown_state_survives(self, file_ctrl, tmp_path):
        sim = file_ctrl.simulator
        sim.add_component("battery")
        sim.add_component("bulb")
        wire_loop(sim, "B1", "LP1")
        sim.execute(SetMaxCurrent(sim, "LP1", 0.01))
        assert sim.model.components["LP1"].health is Health.BLOWN

        path = tmp_path / "blown.json"
        file_ctrl.save_circuit(path)
        reloaded = read_circuit_file(path)
        assert reloaded.components["LP1"].health is Health.BLOWN

    def test_ids_continue_after_reload(self, file_ctrl, tmp_path):
        sim = file_ctrl.simulator
        sim.add_component("resistor")
        sim.add_component("resistor")
        sim.remove_component("R1")
        path = tmp_path / "r.json"
        file_ctrl.save_circuit(path)
        file_ctrl.load_circuit(path)

        assert sim.add_component("resistor").component_id == "R3"
        # New nodes never reuse saved handles
        assert sim.model.components["R3"].terminals == (4, 5)

    def test_hand_written_file(self, file_ctrl, tmp_path):
        data = {
            "components": [
                {"id": "B1", "type": "cell", "terminals": [10, 11], "pos": {"x": 0, "y": 0},
                 "config": {"voltage": 3}},
                {"id": "LED1", "type": "led", "terminals": [12, 13], "pos": {"x": 80, "y": 0},
                 "config": {"forwardVoltage": 1.0}},
            ],
            "nodes": [{"handle": h} for h in (10, 11, 12, 13)],
            "wires": [
                {"id": "W1", "start": 10, "end": 12, "start_comp": "B1", "start_term": 0,
                 "end_comp": "LED1", "end_term": 0},
                {"id": "W2", "start": 13, "end": 11},
            ],
        }
        path = tmp_path / "hand.json"
        path.write_text(json.dumps(data))
        file_ctrl.load_circuit(path)

        sim = file_ctrl.simulator
        assert sim.model.components["B1"].component_type == "battery"
        assert sim.model.components["LED1"].output.current == pytest.approx(0.02)
        assert sim.add_component("bulb").terminals == (14, 15)
        assert sim.connect(14, 10).wire_id == "W3"


class TestAutoSaveRecovery:
    def test_recover_after_crash(self, tmp_path):
        first = FileController(CircuitSimulator(), tmp_path / "recent.json", tmp_path / "auto.json")
        first.simulator.add_component("battery")
        first.simulator.add_component("bulb")
        wire_loop(first.simulator, "B1", "LP1")
        assert first.auto_save()

        second = FileController(CircuitSimulator(), tmp_path / "recent.json", tmp_path / "auto.json")
        assert second.has_auto_save()
        assert second.load_auto_save() == ""
        assert second.simulator.model.components["LP1"].output.glowing is True
        second.clear_auto_save()
        assert not second.has_auto_save()
