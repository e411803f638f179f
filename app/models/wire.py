"""
WireData - Pure Python data model for circuit wires.

Waypoints are stored as tuples (x, y) and are cosmetic only.
"""

from dataclasses import dataclass, field


@dataclass
class WireData:
    """
    Pure Python data class representing a wire between two component ports.

    Endpoints are immutable once created; only the waypoints may change.
    """

    wire_id: str
    source_component_id: str
    source_port: str
    target_component_id: str
    target_port: str

    waypoints: list[tuple[float, float]] = field(default_factory=list)

    def get_terminals(self) -> list[tuple[str, str]]:
        """
        Get both endpoint identifiers for this wire.

        Returns:
            List of two (component_id, port_id) tuples.
        """
        return [(self.source_component_id, self.source_port), (self.target_component_id, self.target_port)]

    def connects_component(self, component_id: str) -> bool:
        """Check if this wire connects to the given component."""
        return self.source_component_id == component_id or self.target_component_id == component_id

    def connects_terminal(self, component_id: str, port_id: str) -> bool:
        """Check if this wire connects to the given port."""
        return (self.source_component_id == component_id and self.source_port == port_id) or (
            self.target_component_id == component_id and self.target_port == port_id
        )

    def to_dict(self) -> dict:
        """Serialize wire to dictionary. Waypoints are not serialized."""
        return {
            "id": self.wire_id,
            "source_comp": self.source_component_id,
            "source_port": self.source_port,
            "target_comp": self.target_component_id,
            "target_port": self.target_port,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WireData":
        return cls(
            wire_id=data["id"],
            source_component_id=data["source_comp"],
            source_port=data["source_port"],
            target_component_id=data["target_comp"],
            target_port=data["target_port"],
        )

    def __repr__(self) -> str:
        return (
            f"WireData({self.wire_id}: {self.source_component_id}.{self.source_port} -> "
            f"{self.target_component_id}.{self.target_port})"
        )
