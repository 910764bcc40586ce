"""
Shared test fixtures for the circuit playground test suite.

All fixtures build pure-Python model objects and simulators (no UI).
"""

import sys
from pathlib import Path

# Ensure app/ is on sys.path so bare imports (models, simulation, controllers)
# work when running individual test files (e.g., python -m pytest app/tests/unit/test_foo.py).
_app_dir = str(Path(__file__).resolve().parent.parent)
if _app_dir not in sys.path:
    sys.path.insert(0, _app_dir)

import pytest
from controllers.circuit_simulator import CircuitSimulator
from models.circuit import CircuitModel
from models.component import ComponentData


def make_component(component_type, component_id, terminals, config=None, position=(0.0, 0.0)):
    """Helper to create a ComponentData with minimal boilerplate."""
    return ComponentData(
        component_id=component_id,
        component_type=component_type,
        terminals=terminals,
        config=config,
        position=position,
    )


def make_model(node_count):
    """Helper to create a CircuitModel with nodes 0..node_count-1 allocated."""
    model = CircuitModel()
    for _ in range(node_count):
        model.create_node()
    return model


def wire_loop(sim, source_id, load_id):
    """Wire source[0]-load[0] and load[1]-source[1], closing a simple loop."""
    sim.connect_terminals(source_id, 0, load_id, 0)
    sim.connect_terminals(load_id, 1, source_id, 1)


@pytest.fixture
def simulator():
    """An empty simulator that recomputes after every mutation."""
    return CircuitSimulator()


@pytest.fixture
def bulb_circuit(simulator):
    """
    B1 (9 V) -- LP1 (240 ohm) loop.

    B1 terminal 0 (positive) connects to LP1 terminal 0,
    LP1 terminal 1 connects back to B1 terminal 1.
    """
    simulator.add_component("battery")
    simulator.add_component("bulb", position=(200, 0))
    wire_loop(simulator, "B1", "LP1")
    return simulator


@pytest.fixture
def led_circuit(simulator):
    """B1 (9 V) -- LED1 (Vf 2.1 V) loop, LED forward-biased."""
    simulator.add_component("battery")
    simulator.add_component("led", position=(200, 0))
    wire_loop(simulator, "B1", "LED1")
    return simulator


@pytest.fixture
def circuit_file(tmp_path, bulb_circuit):
    """The bulb circuit saved to a JSON file."""
    from controllers.file_controller import write_circuit_file

    path = tmp_path / "bulb.json"
    write_circuit_file(bulb_circuit.model, path)
    return path
