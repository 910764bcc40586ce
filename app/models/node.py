"""
NodeData - Pure Python data model for electrical nodes.

A node is a junction holding a single voltage shared by every terminal and
wire attached to it. Nodes live in the circuit's node arena and are
addressed by an integer handle.
"""

from dataclasses import dataclass
from typing import Optional


def _generate_label(index: int) -> str:
    """
    Generate label like nodeA, nodeB, ..., nodeZ, nodeAA, nodeAB...

    Args:
        index: Zero-based index for the node.

    Returns:
        A string label like "nodeA", "nodeB", etc.
    """
    if index < 26:
        return "node" + chr(ord('A') + index)
    else:
        # For more than 26 nodes, use AA, AB, AC...
        first = (index // 26) - 1
        second = index % 26
        return "node" + chr(ord('A') + first) + chr(ord('A') + second)


@dataclass
class NodeData:
    """
    Pure Python data class representing an electrical node.

    ``voltage`` and ``current`` are written by the simulation passes only.
    ``position`` is kept for rendering and is ignored by the engine.
    """

    handle: int
    voltage: float = 0.0
    current: float = 0.0
    position: Optional[tuple[float, float]] = None

    def get_label(self) -> str:
        """Return the display label derived from the node handle."""
        return _generate_label(self.handle)

    def reset_readings(self) -> None:
        """Clear the computed voltage and current before a new pass."""
        self.voltage = 0.0
        self.current = 0.0

    def to_dict(self, include_readings: bool = True) -> dict:
        data = {"handle": self.handle}
        if self.position is not None:
            data["pos"] = {"x": self.position[0], "y": self.position[1]}
        if include_readings:
            data["voltage"] = self.voltage
            data["current"] = self.current
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "NodeData":
        pos = data.get("pos")
        position = (float(pos["x"]), float(pos["y"])) if pos else None
        return cls(handle=int(data["handle"]), position=position)

    def __repr__(self) -> str:
        return f"NodeData({self.get_label()}, V={self.voltage:g}, I={self.current:g})"
