"""
simulation/behaviors.py

Per-type current and visual/operational state.

Reads a fully settled voltage snapshot. Each component's output record is
rebuilt from scratch, and the flags derived from its current (glowing,
spinning, charging, blown) are set right after the current is known. A
blown component keeps reporting what its formula gives; only a blown
battery stops sourcing, because propagation no longer seeds it.
Batteries are handled last because their current is the sum drawn by the
components on their positive net.
"""

import logging
from typing import Callable

from models.circuit import CircuitModel
from models.component import ComponentData, ComponentOutput, Health

from .propagation import PropagationResult
from .settings import SimulationSettings
from .topology import wire_nets

logger = logging.getLogger(__name__)

Behavior = Callable[[ComponentData, float, float, SimulationSettings], ComponentOutput]


def _resistive(component, delta, signed, settings):
    return ComponentOutput(current=delta / component.config.resistance)


def _bulb(component, delta, signed, settings):
    current = delta / component.config.resistance
    return ComponentOutput(current=current, glowing=current > settings.glow_current)


def _motor(component, delta, signed, settings):
    current = delta / component.config.resistance
    return ComponentOutput(current=current, spinning=current > settings.spin_current)


def _potentiometer(component, delta, signed, settings):
    config = component.config
    return ComponentOutput(current=delta / (config.resistance * config.wiper))


def _junction(component, delta, signed, settings):
    forward_voltage = component.config.forward_voltage
    if delta >= forward_voltage:
        current = (delta - forward_voltage) / settings.junction_resistance
    else:
        current = 0.0
    return ComponentOutput(current=current, voltage=signed)


def _led(component, delta, signed, settings):
    output = _junction(component, delta, signed, settings)
    output.glowing = output.current > 0
    return output


def _capacitor(component, delta, signed, settings):
    return ComponentOutput(voltage=delta, charging=delta > settings.charging_voltage)


def _switch(component, delta, signed, settings):
    return ComponentOutput(closed=component.config.closed is not False)


def _inductor(component, delta, signed, settings):
    config = component.config
    primary = config.primary_voltage if config.primary_voltage is not None else 0.0
    ratio = config.secondary_turns / config.primary_turns
    return ComponentOutput(voltage=primary, secondary_voltage=primary * ratio)


def _fuse(component, delta, signed, settings):
    rating = component.config.max_current
    if rating is None:
        rating = settings.default_fuse_rating
    current = component.config.measured_current
    output = ComponentOutput(current=current)
    if current > rating and component.is_healthy():
        component.health = Health.BLOWN
        logger.info("Fuse %s blown at %gA (rating %gA)", component.component_id, current, rating)
    return output


def _inert(component, delta, signed, settings):
    return ComponentOutput()


BEHAVIORS: dict[str, Behavior] = {
    "resistor": _resistive,
    "bulb": _bulb,
    "led": _led,
    "capacitor": _capacitor,
    "switch": _switch,
    "fuse": _fuse,
    "inductor": _inductor,
    "motor": _motor,
    "potentiometer": _potentiometer,
    "diode": _junction,
    "ground": _inert,
}


def compute_outputs(model: CircuitModel, propagation: PropagationResult,
                    settings: SimulationSettings) -> None:
    """
    Rebuild every component's output record from the settled voltages.

    Blown components get the same formulas as healthy ones plus the blown
    flag. A blown battery sources nothing.
    """
    batteries = []
    for component in model.components.values():
        if component.is_source():
            batteries.append(component)
            continue

        v_first = propagation.voltage(component.terminals[0])
        v_second = propagation.voltage(component.terminals[1])
        signed = v_first - v_second
        component.output = BEHAVIORS[component.component_type](component, abs(signed), signed, settings)
        if not component.is_healthy():
            component.output.blown = True

    if batteries:
        net_of = wire_nets(model)
        for battery in batteries:
            if not battery.is_healthy():
                battery.output = ComponentOutput(blown=True)
                continue
            battery.output = ComponentOutput(current=_battery_current(model, battery, net_of, settings))


def _battery_current(model: CircuitModel, battery: ComponentData,
                     net_of: dict[int, int], settings: SimulationSettings) -> float:
    """Sum the current drawn from a battery's positive net."""
    positive, negative = battery.terminals
    positive_net = net_of[positive]

    current = 0.0
    for component in model.components.values():
        if component.is_source():
            continue
        if any(net_of[handle] == positive_net for handle in component.terminals):
            current += component.output.current

    if net_of[negative] == positive_net:
        current += abs(battery.config.voltage) / settings.wire_resistance
    return current
