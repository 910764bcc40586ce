"""
SemanticState - read-only summary of overall circuit condition.

Recomputed from scratch on every simulation pass and handed to the UI and
assistant layers. Instances are frozen so callers cannot alter the
simulator's view of the circuit through a returned object.
"""

from dataclasses import dataclass

SAFETY_RISK_LEVELS = ("none", "low", "medium", "high")


@dataclass(frozen=True)
class SemanticState:
    power_flow_active: bool = False
    open_circuit: bool = True
    short_circuit: bool = False
    reverse_polarity_detected: bool = False
    overcurrent_detected: bool = False
    capacitor_charging: bool = False
    component_failure: tuple[str, ...] = ()
    safety_risk_level: str = "none"

    # Supplementary measurements
    total_current: float = 0.0
    voltage_range: tuple[float, float] = (0.0, 0.0)
    voltage_conflicts: tuple[int, ...] = ()

    @classmethod
    def idle(cls) -> "SemanticState":
        """State of an empty circuit: open, nothing flowing, no risk."""
        return cls()

    def active_states(self) -> list[str]:
        """Return the labels of every flag that is currently set."""
        labels = [
            ("power_flow_active", self.power_flow_active),
            ("open_circuit", self.open_circuit),
            ("short_circuit", self.short_circuit),
            ("reverse_polarity", self.reverse_polarity_detected),
            ("overcurrent_detected", self.overcurrent_detected),
            ("capacitor_charging", self.capacitor_charging),
        ]
        return [name for name, active in labels if active]

    def to_dict(self) -> dict:
        return {
            "power_flow_active": self.power_flow_active,
            "open_circuit": self.open_circuit,
            "short_circuit": self.short_circuit,
            "reverse_polarity_detected": self.reverse_polarity_detected,
            "overcurrent_detected": self.overcurrent_detected,
            "capacitor_charging": self.capacitor_charging,
            "component_failure": list(self.component_failure),
            "safety_risk_level": self.safety_risk_level,
            "total_current": self.total_current,
            "voltage_range": list(self.voltage_range),
            "voltage_conflicts": list(self.voltage_conflicts),
        }
