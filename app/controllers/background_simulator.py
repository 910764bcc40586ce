"""
BackgroundSimulator - Runs recompute passes off the caller's thread.

The pass is computed on a deep copy of the simulator's model by a single
worker thread, so the caller's model is never touched concurrently. Only
one pass may be outstanding at a time; apply() installs the finished result
into the simulator.

Use it as a context manager or call shutdown() when done. An instance that
is dropped without either shuts its worker down when it is collected.
"""

import logging
import weakref
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Optional

from models.errors import SimulationBusyError
from simulation.engine import SimulationSnapshot, recompute

logger = logging.getLogger(__name__)


class BackgroundSimulator:
    """Offloads recompute passes of a CircuitSimulator to a worker thread."""

    def __init__(self, simulator):
        self.simulator = simulator
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="circuit-recompute")
        self._future: Optional[Future] = None
        # Holds the executor, not self, so collection can trigger it
        self._finalizer = weakref.finalize(self, self._executor.shutdown, wait=False)

    @property
    def busy(self) -> bool:
        """True while a submitted pass has not been applied or discarded."""
        return self._future is not None

    def submit(self) -> Future:
        """
        Schedule a recompute of a snapshot of the current model.

        Raises:
            SimulationBusyError: If a previous pass is still outstanding.
        """
        if self.busy:
            raise SimulationBusyError("A recompute is already in progress; apply() it first.")
        snapshot = self.simulator.model.copy()
        self._future = self._executor.submit(recompute, snapshot, self.simulator.settings)
        logger.debug("Submitted background recompute (%d components)", len(snapshot.components))
        return self._future

    def mutate(self, operation: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Apply a mutation without an inline recompute, then submit a pass.

        ``operation`` is any simulator primitive, e.g.
        ``background.mutate(sim.connect, 0, 2)``.

        Raises:
            SimulationBusyError: If a previous pass is still outstanding.
        """
        if self.busy:
            raise SimulationBusyError("Cannot mutate the circuit while a recompute is outstanding.")
        previous = self.simulator.auto_recompute
        self.simulator.auto_recompute = False
        try:
            result = operation(*args, **kwargs)
        finally:
            self.simulator.auto_recompute = previous
        self.submit()
        return result

    def apply(self, timeout: Optional[float] = None) -> SimulationSnapshot:
        """
        Wait for the outstanding pass and install its result.

        Raises:
            RuntimeError: If nothing was submitted.
            concurrent.futures.TimeoutError: If the pass did not finish in
                time; it stays outstanding.
        """
        if self._future is None:
            raise RuntimeError("No recompute has been submitted.")
        try:
            snapshot = self._future.result(timeout=timeout)
        except FutureTimeoutError:
            raise
        except Exception:
            self._future = None
            raise
        self._future = None
        self.simulator.install_snapshot(snapshot)
        return snapshot

    def shutdown(self, wait: bool = True) -> None:
        self._finalizer.detach()
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "BackgroundSimulator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
