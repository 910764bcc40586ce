"""
simulation/failures.py

Overcurrent checks run after every component's current is known.

Failure is sticky: a blown component stays blown until an explicit reset.
Batteries and ground are exempt unless a max current is configured on
them, because their "current" is the load they supply rather than a
rating of their own. Every other component without a max current, fuses
included, fails above the default max current. The fuse rating only
drives a fuse's own trip check in the behavior pass.
"""

import logging
from typing import Optional

from models.circuit import CircuitModel
from models.component import ComponentData, Health

from .settings import SimulationSettings

logger = logging.getLogger(__name__)

_EXEMPT_BY_DEFAULT = frozenset({"battery", "ground"})


def failure_threshold(component: ComponentData, settings: SimulationSettings) -> Optional[float]:
    """Return the current above which a component fails, or None if exempt."""
    if component.config.max_current is not None:
        return component.config.max_current
    if component.component_type in _EXEMPT_BY_DEFAULT:
        return None
    return settings.default_max_current


def is_overcurrent(component: ComponentData, settings: SimulationSettings) -> bool:
    threshold = failure_threshold(component, settings)
    return threshold is not None and component.output.current > threshold


def detect_failures(model: CircuitModel, settings: SimulationSettings) -> list[str]:
    """
    Mark components whose freshly computed current exceeds their threshold.

    Returns:
        Ids of components that became blown in this pass.
    """
    newly_failed = []
    for component in model.components.values():
        if component.is_healthy() and is_overcurrent(component, settings):
            component.health = Health.BLOWN
            newly_failed.append(component.component_id)
            logger.info(
                "%s (%s) blown: %gA exceeds %gA",
                component.component_id, component.component_type,
                component.output.current, failure_threshold(component, settings),
            )
        if not component.is_healthy():
            component.output.blown = True
    return newly_failed
