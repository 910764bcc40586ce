"""Tests for BackgroundSimulator off-thread recompute."""

import gc

import pytest
from controllers.background_simulator import BackgroundSimulator
from models.errors import SimulationBusyError


@pytest.fixture
def background(simulator):
    with BackgroundSimulator(simulator) as bg:
        yield bg


class TestBackgroundSimulator:
    def test_mutate_then_apply(self, simulator, background):
        simulator.add_component("battery")
        simulator.add_component("bulb")

        wire = background.mutate(simulator.connect_terminals, "B1", 0, "LP1", 0)
        assert wire.wire_id == "W1"
        # Not applied yet: readings are from before the wire
        assert simulator.model.components["LP1"].output.current == 0.0
        assert background.busy

        snapshot = background.apply(timeout=5)
        assert not background.busy
        assert simulator.model is snapshot.model
        assert simulator.model.components["LP1"].output.current == pytest.approx(0.0375)
        assert simulator.get_semantics().open_circuit is False

    def test_auto_recompute_restored(self, simulator, background):
        background.mutate(simulator.add_component, "battery")
        background.apply(timeout=5)
        assert simulator.auto_recompute is True

    def test_busy_rejects_second_pass(self, simulator, background):
        simulator.add_component("battery")
        background.submit()
        with pytest.raises(SimulationBusyError):
            background.submit()
        with pytest.raises(SimulationBusyError):
            background.mutate(simulator.add_component, "bulb")
        assert len(simulator.model.components) == 1
        background.apply(timeout=5)

    def test_apply_without_submit(self, background):
        with pytest.raises(RuntimeError):
            background.apply()

    def test_pass_runs_on_copy(self, simulator, background):
        simulator.add_component("battery")
        future = background.submit()
        assert future.result(timeout=5).model is not simulator.model

    def test_apply_notifies_observers(self, simulator, background):
        events = []
        simulator.add_observer(lambda event, data: events.append(event))
        background.mutate(simulator.add_component, "battery")
        assert events == ["component_added"]
        background.apply(timeout=5)
        assert events == ["component_added", "circuit_recomputed"]


class TestShutdown:
    def test_dropped_instance_stops_worker(self, simulator):
        bg = BackgroundSimulator(simulator)
        bg.submit()
        bg.apply(timeout=5)
        executor = bg._executor
        del bg
        gc.collect()
        with pytest.raises(RuntimeError):
            executor.submit(int)

    def test_explicit_shutdown_detaches_finalizer(self, simulator):
        bg = BackgroundSimulator(simulator)
        bg.shutdown()
        assert not bg._finalizer.alive
