"""
FileController - Handles circuit file I/O and session persistence.

Circuits are stored as JSON holding components, nodes and wires. Readings
(voltages, currents, outputs) are never saved; they are recomputed after
every load. Recent files and the auto-save recovery file live next to the
simulation settings under ~/.circuit_playground.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from models.circuit import CircuitModel

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".circuit_playground"
RECENT_FILES_FILE = CONFIG_DIR / "recent_files.json"
AUTOSAVE_FILE = CONFIG_DIR / "autosave_recovery.json"
MAX_RECENT_FILES = 10


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_handle(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_circuit_data(data) -> None:
    """
    Validate JSON structure before loading.

    Raises ValueError with a descriptive message if anything is wrong.
    Property values are checked later, when the components are built.
    """
    if not isinstance(data, dict):
        raise ValueError("File does not contain a valid circuit object.")

    for section in ("components", "nodes", "wires"):
        if section not in data or not isinstance(data[section], list):
            raise ValueError(f"Missing or invalid '{section}' list.")

    counters = data.get("counters", {})
    if not isinstance(counters, dict) or not all(_is_handle(v) for v in counters.values()):
        raise ValueError("Invalid 'counters' object; expected integer id counters.")

    handles = set()
    for i, node in enumerate(data["nodes"]):
        if not isinstance(node, dict) or not _is_handle(node.get("handle")):
            raise ValueError(f"Node #{i + 1} is missing an integer 'handle'.")
        if node["handle"] in handles:
            raise ValueError(f"Node handle {node['handle']} appears more than once.")
        pos = node.get("pos")
        if pos is not None and (
            not isinstance(pos, dict) or not _is_number(pos.get("x")) or not _is_number(pos.get("y"))
        ):
            raise ValueError(f"Node {node['handle']} has invalid position data.")
        handles.add(node["handle"])

    comp_ids = set()
    for i, comp in enumerate(data["components"]):
        if not isinstance(comp, dict):
            raise ValueError(f"Component #{i + 1} is not an object.")
        for key in ("id", "type", "terminals", "pos"):
            if key not in comp:
                raise ValueError(f"Component #{i + 1} is missing required field '{key}'.")
        if not isinstance(comp["id"], str) or not comp["id"]:
            raise ValueError(f"Component #{i + 1} has an invalid id {comp['id']!r}.")
        pos = comp["pos"]
        if not isinstance(pos, dict) or "x" not in pos or "y" not in pos:
            raise ValueError(f"Component '{comp['id']}' has invalid position data.")
        if not _is_number(pos["x"]) or not _is_number(pos["y"]):
            raise ValueError(f"Component '{comp['id']}' position values must be numeric.")
        terminals = comp["terminals"]
        if not isinstance(terminals, list) or len(terminals) != 2:
            raise ValueError(f"Component '{comp['id']}' must list exactly two terminal nodes.")
        for handle in terminals:
            if not _is_handle(handle) or handle not in handles:
                raise ValueError(f"Component '{comp['id']}' references unknown node {handle!r}.")
        if "config" in comp and not isinstance(comp["config"], dict):
            raise ValueError(f"Component '{comp['id']}' has an invalid 'config' object.")
        comp_ids.add(comp["id"])

    for i, wire in enumerate(data["wires"]):
        if not isinstance(wire, dict):
            raise ValueError(f"Wire #{i + 1} is not an object.")
        for key in ("id", "start", "end"):
            if key not in wire:
                raise ValueError(f"Wire #{i + 1} is missing required field '{key}'.")
        for key in ("start", "end"):
            if not _is_handle(wire[key]) or wire[key] not in handles:
                raise ValueError(f"Wire #{i + 1} references unknown node {wire[key]!r}.")
        for comp_key, term_key in (("start_comp", "start_term"), ("end_comp", "end_term")):
            if comp_key not in wire:
                continue
            if wire[comp_key] not in comp_ids:
                raise ValueError(f"Wire #{i + 1} references unknown component '{wire[comp_key]}'.")
            if not _is_handle(wire.get(term_key)) or wire[term_key] not in (0, 1):
                raise ValueError(f"Wire #{i + 1} needs '{term_key}' set to 0 or 1 alongside '{comp_key}'.")


def read_circuit_file(filepath) -> CircuitModel:
    """
    Read and validate a circuit file without touching any simulator.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or not a valid circuit.
    """
    with open(filepath, "r") as f:
        data = json.load(f)
    validate_circuit_data(data)
    return CircuitModel.from_dict(data)


def write_circuit_file(model: CircuitModel, filepath) -> None:
    """Write a circuit's inputs (no readings) to a JSON file."""
    with open(filepath, "w") as f:
        json.dump(model.to_dict(include_readings=False), f, indent=2)


class FileController:
    """
    Manages circuit file I/O and session persistence for a CircuitSimulator.

    Tracks the current file path for quick-save and keeps a short list of
    recently used files.
    """

    def __init__(
        self,
        simulator,
        recent_files_file: Optional[Path] = None,
        autosave_file: Optional[Path] = None,
    ):
        self.simulator = simulator
        self.current_file: Optional[Path] = None
        self._recent_files_file = Path(recent_files_file) if recent_files_file else RECENT_FILES_FILE
        self._autosave_file = Path(autosave_file) if autosave_file else AUTOSAVE_FILE

    def new_circuit(self) -> None:
        """Clear the circuit and reset file state."""
        self.simulator.reset()
        self.current_file = None

    def save_circuit(self, filepath) -> None:
        """
        Save circuit to JSON file.

        Raises:
            OSError: If the file cannot be written.
        """
        filepath = Path(filepath)
        write_circuit_file(self.simulator.model, filepath)
        self.current_file = filepath
        self.add_recent_file(filepath)
        logger.info("Saved circuit to %s", filepath)

    def load_circuit(self, filepath) -> None:
        """
        Load circuit from JSON file and recompute it.

        The simulator is only touched once the whole file has been validated,
        so a bad file leaves the current circuit as it was.

        Raises:
            ValueError: If the file is not valid JSON or not a valid circuit.
            OSError: If the file cannot be read.
        """
        filepath = Path(filepath)
        model = read_circuit_file(filepath)
        self.simulator.load_model(model)
        self.current_file = filepath
        self.add_recent_file(filepath)
        logger.info("Loaded circuit from %s", filepath)

    def has_file(self) -> bool:
        """Return whether a current file path is set (for quick-save)."""
        return self.current_file is not None

    # ------------------------------------------------------------------
    # Recent files
    # ------------------------------------------------------------------

    def get_recent_files(self) -> List[str]:
        """
        Get list of recently opened files.

        Returns:
            List of file paths (most recent first), with non-existent files removed.
        """
        try:
            recent = json.loads(self._recent_files_file.read_text())
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to read recent files from %s: %s", self._recent_files_file, e)
            return []

        if not isinstance(recent, list):
            recent = []
        existing = [f for f in recent if isinstance(f, str) and Path(f).exists()]
        if len(existing) != len(recent):
            self._write_recent_files(existing)
        return existing

    def add_recent_file(self, filepath: Path) -> None:
        """Move a file to the front of the recent files list."""
        filepath_str = str(Path(filepath).absolute())
        recent = self.get_recent_files()
        if filepath_str in recent:
            recent.remove(filepath_str)
        recent.insert(0, filepath_str)
        self._write_recent_files(recent[:MAX_RECENT_FILES])

    def clear_recent_files(self) -> None:
        self._write_recent_files([])

    def _write_recent_files(self, recent: List[str]) -> None:
        try:
            self._recent_files_file.parent.mkdir(parents=True, exist_ok=True)
            self._recent_files_file.write_text(json.dumps(recent, indent=2))
        except OSError as e:
            logger.warning("Failed to save recent files to %s: %s", self._recent_files_file, e)

    # ------------------------------------------------------------------
    # Auto-save and crash recovery
    # ------------------------------------------------------------------

    def auto_save(self) -> bool:
        """Save circuit to the auto-save recovery file.

        Unlike save_circuit(), this does NOT update current_file or the
        recent files list. Returns True on success.
        """
        data = self.simulator.model.to_dict()
        data["_autosave_source"] = str(self.current_file) if self.current_file else ""
        try:
            self._autosave_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._autosave_file, "w") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning("Auto-save to %s failed: %s", self._autosave_file, e)
            return False
        return True

    def has_auto_save(self) -> bool:
        """Return True if an auto-save recovery file exists."""
        return self._autosave_file.exists()

    def load_auto_save(self) -> Optional[str]:
        """Load circuit from the auto-save recovery file.

        Returns:
            The original file path (str) the auto-save was based on,
            or empty string if it was an unsaved circuit. Returns None
            on failure.
        """
        try:
            with open(self._autosave_file, "r") as f:
                data = json.load(f)
            source_path = data.pop("_autosave_source", "") if isinstance(data, dict) else ""
            validate_circuit_data(data)
            model = CircuitModel.from_dict(data)
        except (OSError, ValueError) as e:
            logger.warning("Could not recover auto-save from %s: %s", self._autosave_file, e)
            return None

        self.simulator.load_model(model)
        self.current_file = Path(source_path) if source_path else None
        return source_path

    def clear_auto_save(self) -> None:
        """Delete the auto-save recovery file if it exists."""
        try:
            self._autosave_file.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not delete auto-save file %s: %s", self._autosave_file, e)
