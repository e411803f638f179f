"""
ComponentData - Pure Python data model for relay circuit components.

Component types use definition ids as canonical identifiers:
'relay_no', 'relay_nc', 'power', 'ground', 'input', 'output', plus the
unlockable gate ids ('not', 'and', 'or', 'nand', 'nor', 'xor').
"""

from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import Optional


class SignalValue(IntEnum):
    """Three-valued logic level carried by a net."""

    LOW = 0
    HIGH = 1
    UNKNOWN = 2


RELAY_PORTS = ("coil_in", "coil_out", "contact_in", "contact_out")

BASE_COMPONENT_TYPES = (
    "relay_no",
    "relay_nc",
    "power",
    "ground",
    "input",
    "output",
)

GATE_COMPONENT_TYPES = (
    "not",
    "and",
    "or",
    "nand",
    "nor",
    "xor",
)

COMPONENT_TYPES = BASE_COMPONENT_TYPES + GATE_COMPONENT_TYPES

# Behavioural category per component type; unlockable gates share one
COMPONENT_CATEGORIES = MappingProxyType(
    {
        **{t: t for t in BASE_COMPONENT_TYPES},
        **{t: "user_gate" for t in GATE_COMPONENT_TYPES},
    }
)

# Port ids per component type
COMPONENT_PORTS = MappingProxyType(
    {
        "relay_no": RELAY_PORTS,
        "relay_nc": RELAY_PORTS,
        "power": ("out",),
        "ground": ("in",),
        "input": ("out",),
        "output": ("in",),
        "not": ("in", "out"),
        "and": ("a", "b", "out"),
        "or": ("a", "b", "out"),
        "nand": ("a", "b", "out"),
        "nor": ("a", "b", "out"),
        "xor": ("a", "b", "out"),
    }
)

DISPLAY_NAMES = MappingProxyType(
    {
        "relay_no": "Relay (NO)",
        "relay_nc": "Relay (NC)",
        "power": "Power (VCC)",
        "ground": "Ground (GND)",
        "input": "Input",
        "output": "Output",
        "not": "NOT Gate",
        "and": "AND Gate",
        "or": "OR Gate",
        "nand": "NAND Gate",
        "nor": "NOR Gate",
        "xor": "XOR Gate",
    }
)


def is_relay(component_type: str) -> bool:
    return component_type in ("relay_no", "relay_nc")


@dataclass
class ComponentState:
    """Runtime state of a component, owned by the relay simulator."""

    coil_energized: bool = False
    switch_closed: bool = False
    port_values: dict[str, SignalValue] = field(default_factory=dict)

    def copy(self) -> "ComponentState":
        return ComponentState(
            coil_energized=self.coil_energized,
            switch_closed=self.switch_closed,
            port_values=dict(self.port_values),
        )

    def to_dict(self) -> dict:
        return {
            "coil_energized": self.coil_energized,
            "switch_closed": self.switch_closed,
            "port_values": {port: int(value) for port, value in self.port_values.items()},
        }


@dataclass
class ComponentData:
    """
    Pure Python data class representing a placed component.

    Position, rotation and label belong to the editor; the simulator only
    looks at the component id and type.
    """

    component_id: str
    component_type: str
    position: tuple[float, float] = (0.0, 0.0)
    rotation: int = 0
    label: Optional[str] = None

    def get_category(self) -> Optional[str]:
        """Behavioural category, or None for an unknown type."""
        return COMPONENT_CATEGORIES.get(self.component_type)

    def get_ports(self) -> tuple[str, ...]:
        """Port ids for this component (empty for unknown types)."""
        return COMPONENT_PORTS.get(self.component_type, ())

    def has_port(self, port_id: str) -> bool:
        return port_id in self.get_ports()

    def is_relay(self) -> bool:
        return is_relay(self.component_type)

    def get_display_name(self) -> str:
        return DISPLAY_NAMES.get(self.component_type, self.component_type)

    def to_dict(self) -> dict:
        """Serialize component to dictionary."""
        data = {
            "id": self.component_id,
            "type": self.component_type,
            "pos": {"x": self.position[0], "y": self.position[1]},
            "rotation": self.rotation,
        }
        if self.label:
            data["label"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ComponentData":
        """Deserialize component from dictionary."""
        pos = data.get("pos", {"x": 0, "y": 0})
        return cls(
            component_id=data["id"],
            component_type=data["type"],
            position=(float(pos["x"]), float(pos["y"])),
            rotation=data.get("rotation", 0),
            label=data.get("label"),
        )

    def __repr__(self) -> str:
        return f"ComponentData({self.component_id}, {self.component_type})"
