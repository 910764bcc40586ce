"""
simulation/engine.py

Single-entry recompute pipeline.

A pass runs, in order: voltage propagation, node voltage write-back,
per-component behaviors, failure detection, node/wire current readings,
and finally the semantic summary. Each step reads only the results of the
steps before it, so the outcome of a pass depends on the circuit alone and
never on the state left behind by a previous pass (apart from sticky
component failures). When a component blows, the steps up to failure
detection run again so a pass never leaves readings that the next
idle pass would change.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from models.circuit import CircuitModel
from models.semantics import SemanticState

from .behaviors import compute_outputs
from .failures import detect_failures
from .propagation import propagate_voltages
from .semantics import derive_semantics
from .settings import SimulationSettings

logger = logging.getLogger(__name__)


@dataclass
class SimulationSnapshot:
    """Result of one recompute pass."""

    model: CircuitModel
    semantics: SemanticState
    voltages: dict[int, float] = field(default_factory=dict)
    conflicts: list[int] = field(default_factory=list)
    # Components that went from healthy to blown during this pass
    newly_failed: list[str] = field(default_factory=list)


def recompute(model: CircuitModel, settings: Optional[SimulationSettings] = None) -> SimulationSnapshot:
    """
    Recompute every derived value of ``model`` in place.

    Args:
        model: Circuit to simulate. Node readings and component outputs are
            overwritten; health only ever changes from normal to blown.
        settings: Thresholds to use; defaults to SimulationSettings().

    Returns:
        SimulationSnapshot wrapping the same model instance.
    """
    settings = settings or SimulationSettings()
    healthy_before = _healthy_ids(model)

    # A failure can change what the next pass sees (a blown battery stops
    # seeding), so repeat until health is stable. Health only goes from
    # normal to blown, which bounds the number of rounds.
    while True:
        healthy = _healthy_ids(model)
        propagation = propagate_voltages(model)
        for handle, node in model.nodes.items():
            node.reset_readings()
            node.voltage = propagation.voltage(handle)

        compute_outputs(model, propagation, settings)
        detect_failures(model, settings)
        if _healthy_ids(model) == healthy:
            break
        logger.debug("Health changed during the pass, settling again")

    _sync_currents(model)

    semantics = derive_semantics(model, propagation, settings)
    newly_failed = [cid for cid in healthy_before if not model.components[cid].is_healthy()]

    logger.debug(
        "Recomputed %d components, %d nodes, %d wires: %d conflicts, %d new failures",
        len(model.components), len(model.nodes), len(model.wires),
        len(propagation.conflicts), len(newly_failed),
    )
    return SimulationSnapshot(
        model=model,
        semantics=semantics,
        voltages=dict(propagation.voltages),
        conflicts=list(propagation.conflicts),
        newly_failed=newly_failed,
    )


def _healthy_ids(model: CircuitModel) -> list[str]:
    return [cid for cid, comp in model.components.items() if comp.is_healthy()]


def _sync_currents(model: CircuitModel) -> None:
    """Set each node to its largest attached component current, and each wire
    to the larger reading of its two ends."""
    for comp in model.components.values():
        for handle in comp.terminals:
            node = model.nodes[handle]
            node.current = max(node.current, comp.output.current)
    for wire in model.wires:
        wire.current = max(model.nodes[wire.start_node].current, model.nodes[wire.end_node].current)
