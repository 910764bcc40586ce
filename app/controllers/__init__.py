"""
Controllers for the circuit playground.

This package contains UI-free controller classes that mutate the circuit
graph, keep it simulated, and notify views through an observer pattern.
"""

from .background_simulator import BackgroundSimulator
from .circuit_simulator import CircuitSimulator
from .file_controller import FileController, read_circuit_file, validate_circuit_data, write_circuit_file
from .undo_manager import UndoManager

__all__ = [
    "CircuitSimulator",
    "BackgroundSimulator",
    "FileController",
    "UndoManager",
    "read_circuit_file",
    "write_circuit_file",
    "validate_circuit_data",
]
