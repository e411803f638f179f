"""
NetData - Pure Python data model for electrical nets.

A net is a set of component ports that are electrically identical and
therefore carry the same signal value.
"""

from dataclasses import dataclass, field

from .component import SignalValue


@dataclass
class NetData:
    """
    A maximal set of connected (component_id, port_id) terminals.

    ``signal`` and ``has_drive`` are scratch state owned by the relay
    simulator and are reset at the start of every step.
    """

    net_id: str
    # Set of (component_id, port_id) tuples in this net
    terminals: set[tuple[str, str]] = field(default_factory=set)

    # Ids of the wires that joined terminals in this net
    wire_ids: set[str] = field(default_factory=set)

    signal: SignalValue = SignalValue.UNKNOWN
    has_drive: bool = False

    def add_terminal(self, component_id: str, port_id: str) -> None:
        self.terminals.add((component_id, port_id))

    def add_wire(self, wire_id: str) -> None:
        self.wire_ids.add(wire_id)

    def contains(self, component_id: str, port_id: str) -> bool:
        return (component_id, port_id) in self.terminals

    def merge_with(self, other: "NetData") -> None:
        """
        Merge another net into this one.

        All terminals and wires from the other net are added to this net.
        """
        self.terminals.update(other.terminals)
        self.wire_ids.update(other.wire_ids)

    def reset_signal(self) -> None:
        self.signal = SignalValue.UNKNOWN
        self.has_drive = False

    def drive(self, value: SignalValue) -> bool:
        """Assert a value on this net. Returns True if anything changed."""
        if self.signal != value or not self.has_drive:
            self.signal = value
            self.has_drive = True
            return True
        return False

    def is_empty(self) -> bool:
        return len(self.terminals) == 0

    def __repr__(self) -> str:
        return f"NetData({self.net_id}, terminals={len(self.terminals)}, wires={len(self.wire_ids)})"
