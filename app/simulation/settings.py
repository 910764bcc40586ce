"""Simulation settings - tunable thresholds of the simulation passes, with user overrides on disk."""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = Path.home() / ".circuit_playground" / "settings.json"


@dataclass(frozen=True)
class SimulationSettings:
    """Thresholds and constants used by the simulation passes."""

    # A healthy battery sourcing more than this is treated as shorted (A)
    short_circuit_current: float = 1.0
    # Failure threshold for components without a configured max current (A)
    default_max_current: float = 0.1
    # Rating used by a fuse's own trip check when none is configured (A)
    default_fuse_rating: float = 1.0
    glow_current: float = 0.01
    spin_current: float = 0.1
    charging_voltage: float = 0.1
    # Series resistance for LED/diode conduction above the forward voltage (ohm)
    junction_resistance: float = 100.0
    # Resistance assumed for a wire joining a battery's own terminals (ohm)
    wire_resistance: float = 0.01

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationSettings":
        """Build settings from a dict, ignoring unknown or non-numeric entries."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown simulation setting '%s'", key)
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                logger.warning("Ignoring invalid value for setting '%s': %r", key, value)
                continue
            values[key] = float(value)
        return cls(**values)


class SettingsManager:
    """Loads and saves user overrides of the simulation settings as JSON."""

    def __init__(self, settings_file: Optional[Path] = None):
        self._settings_file = Path(settings_file) if settings_file else DEFAULT_SETTINGS_FILE
        self._settings = SimulationSettings()
        self._load()

    @property
    def settings(self) -> SimulationSettings:
        return self._settings

    def update(self, **overrides) -> SimulationSettings:
        """Apply overrides, persist them, and return the new settings."""
        merged = self._settings.to_dict()
        merged.update(overrides)
        self._settings = SimulationSettings.from_dict(merged)
        self._save()
        return self._settings

    def reset(self) -> SimulationSettings:
        """Restore the built-in defaults and persist them."""
        self._settings = SimulationSettings()
        self._save()
        return self._settings

    # --- Persistence ---

    def _load(self):
        """Load user settings from disk."""
        if not self._settings_file.exists():
            return
        try:
            data = json.loads(self._settings_file.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Failed to load settings from %s: %s", self._settings_file, e)
            return
        if not isinstance(data, dict):
            logger.warning("Settings file %s does not contain an object", self._settings_file)
            return
        self._settings = SimulationSettings.from_dict(data)

    def _save(self):
        """Write user settings to disk."""
        try:
            self._settings_file.parent.mkdir(parents=True, exist_ok=True)
            self._settings_file.write_text(json.dumps(self._settings.to_dict(), indent=2))
        except OSError as e:
            logger.error("Failed to save settings to %s: %s", self._settings_file, e)
