"""
CircuitModel - Central data store for a relay circuit.

Holds components, wires and the external input/output ports used for
simulation and truth-table verification.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .component import ComponentData
from .wire import WireData

logger = logging.getLogger(__name__)


@dataclass
class ExternalPort:
    """External circuit input or output bound to an input/output component."""

    port_id: str
    name: str
    direction: str
    component_id: str

    def to_dict(self) -> dict:
        return {
            "id": self.port_id,
            "name": self.name,
            "direction": self.direction,
            "component_id": self.component_id,
        }

    @classmethod
    def from_dict(cls, data: dict, direction: str) -> "ExternalPort":
        return cls(
            port_id=data["id"],
            name=data.get("name", data["id"]),
            direction=data.get("direction", direction),
            component_id=data["component_id"],
        )


def validate_circuit_data(data) -> None:
    """
    Validate circuit JSON structure before loading.

    Raises ValueError with a descriptive message if anything is wrong.
    """
    if not isinstance(data, dict):
        raise ValueError("File does not contain a valid circuit object.")

    if "components" not in data or not isinstance(data["components"], list):
        raise ValueError("Missing or invalid 'components' list.")
    if "wires" not in data or not isinstance(data["wires"], list):
        raise ValueError("Missing or invalid 'wires' list.")

    comp_ids = set()
    for i, comp in enumerate(data["components"]):
        for key in ("id", "type"):
            if key not in comp:
                raise ValueError(f"Component #{i + 1} is missing required field '{key}'.")
        if comp["id"] in comp_ids:
            raise ValueError(f"Duplicate component id '{comp['id']}'.")
        pos = comp.get("pos", {"x": 0, "y": 0})
        if not isinstance(pos, dict) or "x" not in pos or "y" not in pos:
            raise ValueError(f"Component '{comp['id']}' has invalid position data.")
        if not isinstance(pos["x"], (int, float)) or not isinstance(pos["y"], (int, float)):
            raise ValueError(f"Component '{comp['id']}' position values must be numeric.")
        comp_ids.add(comp["id"])

    wire_ids = set()
    for i, wire in enumerate(data["wires"]):
        for key in ("id", "source_comp", "source_port", "target_comp", "target_port"):
            if key not in wire:
                raise ValueError(f"Wire #{i + 1} is missing required field '{key}'.")
        if wire["id"] in wire_ids:
            raise ValueError(f"Duplicate wire id '{wire['id']}'.")
        wire_ids.add(wire["id"])
        if wire["source_comp"] not in comp_ids:
            raise ValueError(f"Wire #{i + 1} references unknown component '{wire['source_comp']}'.")
        if wire["target_comp"] not in comp_ids:
            raise ValueError(f"Wire #{i + 1} references unknown component '{wire['target_comp']}'.")

    for key in ("inputs", "outputs"):
        ports = data.get(key, [])
        if not isinstance(ports, list):
            raise ValueError(f"Invalid '{key}' list.")
        for i, port in enumerate(ports):
            if "id" not in port or "component_id" not in port:
                raise ValueError(f"Entry #{i + 1} in '{key}' needs 'id' and 'component_id'.")
            if port["component_id"] not in comp_ids:
                raise ValueError(f"Entry #{i + 1} in '{key}' references unknown component '{port['component_id']}'.")


@dataclass
class CircuitModel:
    """
    Central data store holding one relay circuit.

    Simulation state is not stored here: the relay simulator rebuilds nets
    and component states from this model on every load.
    """

    circuit_id: str = "untitled"
    name: str = "Untitled"
    era: str = "relay"
    components: dict[str, ComponentData] = field(default_factory=dict)
    wires: list[WireData] = field(default_factory=list)
    inputs: list[ExternalPort] = field(default_factory=list)
    outputs: list[ExternalPort] = field(default_factory=list)
    description: str = ""

    # --- Component operations ---

    def add_component(self, component: ComponentData) -> Optional[ComponentData]:
        """
        Add a component to the circuit. Returns None if the id is taken.

        Input and output components are also registered as external ports,
        named after their label or numbered in order of addition.
        """
        if component.component_id in self.components:
            logger.warning("Component id '%s' is already in use", component.component_id)
            return None

        self.components[component.component_id] = component

        if component.component_type == "input":
            name = component.label or f"Input {len(self.inputs) + 1}"
            self.inputs.append(ExternalPort(component.component_id, name, "input", component.component_id))
        elif component.component_type == "output":
            name = component.label or f"Output {len(self.outputs) + 1}"
            self.outputs.append(ExternalPort(component.component_id, name, "output", component.component_id))
        return component

    def remove_component(self, component_id: str) -> list[str]:
        """
        Remove a component together with its wires and external ports.

        Returns the ids of the removed wires.
        """
        if component_id not in self.components:
            return []

        removed = [w.wire_id for w in self.wires if w.connects_component(component_id)]
        self.wires = [w for w in self.wires if not w.connects_component(component_id)]
        self.inputs = [p for p in self.inputs if p.component_id != component_id]
        self.outputs = [p for p in self.outputs if p.component_id != component_id]
        del self.components[component_id]
        return removed

    # --- Wire operations ---

    def add_wire(self, wire: WireData) -> Optional[WireData]:
        """
        Add a wire between two existing component ports.

        Returns None, leaving the circuit unchanged, if an endpoint names a
        missing component or port, if the wire connects a port to itself, or
        if an identical wire (in either direction) already exists.
        """
        for component_id, port_id in wire.get_terminals():
            component = self.components.get(component_id)
            if component is None:
                logger.warning("Wire %s: unknown component '%s'", wire.wire_id, component_id)
                return None
            if port_id not in component.get_ports():
                logger.warning("Wire %s: %s has no port '%s'", wire.wire_id, component_id, port_id)
                return None

        source, target = wire.get_terminals()
        if source == target:
            logger.warning("Wire %s: cannot connect a port to itself", wire.wire_id)
            return None

        for existing in self.wires:
            if existing.wire_id == wire.wire_id or set(existing.get_terminals()) == {source, target}:
                logger.warning("Wire %s: already exists as %s", wire.wire_id, existing.wire_id)
                return None

        self.wires.append(wire)
        return wire

    def remove_wire(self, wire_id: str) -> bool:
        before = len(self.wires)
        self.wires = [w for w in self.wires if w.wire_id != wire_id]
        return len(self.wires) < before

    def get_wire(self, wire_id: str) -> Optional[WireData]:
        for wire in self.wires:
            if wire.wire_id == wire_id:
                return wire
        return None

    # --- External ports ---

    def add_input(self, component_id: str, name: Optional[str] = None, port_id: Optional[str] = None) -> ExternalPort:
        port = ExternalPort(port_id or component_id, name or component_id, "input", component_id)
        self.inputs.append(port)
        return port

    def add_output(self, component_id: str, name: Optional[str] = None, port_id: Optional[str] = None) -> ExternalPort:
        port = ExternalPort(port_id or component_id, name or component_id, "output", component_id)
        self.outputs.append(port)
        return port

    def clear(self) -> None:
        """Clear all circuit data."""
        self.components.clear()
        self.wires.clear()
        self.inputs.clear()
        self.outputs.clear()

    # --- Serialization ---

    def to_dict(self) -> dict:
        data = {
            "id": self.circuit_id,
            "name": self.name,
            "era": self.era,
            "components": [c.to_dict() for c in self.components.values()],
            "wires": [w.to_dict() for w in self.wires],
            "inputs": [p.to_dict() for p in self.inputs],
            "outputs": [p.to_dict() for p in self.outputs],
        }
        if self.description:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CircuitModel":
        """
        Deserialize a circuit; call validate_circuit_data() first for untrusted input.

        Components, wires and ports are loaded as stored, without the checks
        add_component()/add_wire() apply, so that validate_circuit() can
        report problems in a saved file.
        """
        components = {}
        for comp_data in data.get("components", []):
            component = ComponentData.from_dict(comp_data)
            components[component.component_id] = component

        return cls(
            circuit_id=data.get("id", "untitled"),
            name=data.get("name", "Untitled"),
            era=data.get("era", "relay"),
            components=components,
            wires=[WireData.from_dict(w) for w in data.get("wires", [])],
            inputs=[ExternalPort.from_dict(p, "input") for p in data.get("inputs", [])],
            outputs=[ExternalPort.from_dict(p, "output") for p in data.get("outputs", [])],
            description=data.get("description", ""),
        )
