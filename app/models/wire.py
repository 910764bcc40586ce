"""
WireData - Pure Python data model for circuit wires.

A wire joins two nodes of the arena. When it was drawn between two
component terminals it also remembers those terminals, which is how the
UI addresses a wire when disconnecting it.
"""

from dataclasses import dataclass
from typing import Optional

Terminal = tuple[str, int]


@dataclass
class WireData:
    """
    Pure Python data class representing an explicit connection between two nodes.

    Stored with a start/end order but undirected for propagation purposes.
    """

    wire_id: str
    start_node: int
    end_node: int
    start_terminal: Optional[Terminal] = None
    end_terminal: Optional[Terminal] = None

    # Last computed current magnitude (written by the simulator)
    current: float = 0.0

    def get_nodes(self) -> tuple[int, int]:
        """Return both node handles joined by this wire."""
        return (self.start_node, self.end_node)

    def touches_node(self, handle: int) -> bool:
        """Check if either end of this wire sits on the given node."""
        return self.start_node == handle or self.end_node == handle

    def connects_component(self, component_id: str) -> bool:
        """Check if this wire was drawn to a terminal of the given component."""
        return any(t is not None and t[0] == component_id for t in (self.start_terminal, self.end_terminal))

    def connects_terminals(self, first: Terminal, second: Terminal) -> bool:
        """Check if this wire joins the two terminals, in either orientation."""
        ends = (self.start_terminal, self.end_terminal)
        return ends == (first, second) or ends == (second, first)

    def to_dict(self, include_readings: bool = True) -> dict:
        data = {
            "id": self.wire_id,
            "start": self.start_node,
            "end": self.end_node,
        }
        if self.start_terminal is not None:
            data["start_comp"], data["start_term"] = self.start_terminal
        if self.end_terminal is not None:
            data["end_comp"], data["end_term"] = self.end_terminal
        if include_readings:
            data["current"] = self.current
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "WireData":
        start_terminal = None
        end_terminal = None
        if "start_comp" in data:
            start_terminal = (data["start_comp"], int(data["start_term"]))
        if "end_comp" in data:
            end_terminal = (data["end_comp"], int(data["end_term"]))
        return cls(
            wire_id=data["id"],
            start_node=int(data["start"]),
            end_node=int(data["end"]),
            start_terminal=start_terminal,
            end_terminal=end_terminal,
        )

    def __repr__(self) -> str:
        if self.start_terminal and self.end_terminal:
            return (
                f"WireData({self.wire_id}: {self.start_terminal[0]}[{self.start_terminal[1]}] -> "
                f"{self.end_terminal[0]}[{self.end_terminal[1]}])"
            )
        return f"WireData({self.wire_id}: n{self.start_node} -> n{self.end_node})"
