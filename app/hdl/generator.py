"""
hdl/generator.py

Compiles an HdlAst into CircuitData, the structure consumed by the gate
simulator and by circuit visualisers.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from hdl.ast_nodes import HdlAst, HdlGateNode, HdlWireNode, HdlWireRef

logger = logging.getLogger(__name__)


class HdlGenerationError(ValueError):
    """Raised when an AST cannot be turned into a circuit."""


@dataclass(frozen=True)
class GatePort:
    """One bit of a wire, addressed by dense wire id."""

    wire: int
    bit: int = 0

    def to_dict(self) -> dict:
        return {"wire": self.wire, "bit": self.bit}


@dataclass
class CircuitWire:
    id: int
    name: str
    width: int
    is_input: bool = False
    is_output: bool = False
    state: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "width": self.width,
            "is_input": self.is_input,
            "is_output": self.is_output,
            "state": list(self.state),
        }


@dataclass
class CircuitGate:
    id: int
    name: str
    type: str
    inputs: list[GatePort] = field(default_factory=list)
    outputs: list[GatePort] = field(default_factory=list)
    # Only DFF gates carry stored state
    stored: Optional[int] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "inputs": [p.to_dict() for p in self.inputs],
            "outputs": [p.to_dict() for p in self.outputs],
        }
        if self.stored is not None:
            data["stored"] = self.stored
        return data


@dataclass
class CircuitData:
    """Generated circuit plus its simulation snapshot (cycle, stable)."""

    cycle: int = 0
    stable: bool = True
    wires: list[CircuitWire] = field(default_factory=list)
    gates: list[CircuitGate] = field(default_factory=list)

    def wire_by_name(self, name: str) -> Optional[CircuitWire]:
        for wire in self.wires:
            if wire.name == name:
                return wire
        return None

    def to_dict(self) -> dict:
        return {
            "cycle": self.cycle,
            "stable": self.stable,
            "wires": [w.to_dict() for w in self.wires],
            "gates": [g.to_dict() for g in self.gates],
        }


class HdlToCircuitGenerator:
    """
    Generates CircuitData from a parsed (and validated) AST.

    Wire ids equal declaration order. Any reference that does not resolve
    raises HdlGenerationError: validation is expected to have rejected it
    already, so reaching one here means the two stages disagree.
    """

    def generate(self, ast: HdlAst) -> CircuitData:
        wire_ids: dict[str, int] = {}
        wires = []
        for index, node in enumerate(ast.wires):
            wire_ids[node.name] = index
            wires.append(self._generate_wire(node, index))

        gates = [self._generate_gate(node, index, wire_ids) for index, node in enumerate(ast.gates)]

        logger.debug("Generated circuit with %d wires and %d gates", len(wires), len(gates))
        return CircuitData(cycle=0, stable=True, wires=wires, gates=gates)

    def _generate_wire(self, node: HdlWireNode, wire_id: int) -> CircuitWire:
        if node.width < 1:
            raise HdlGenerationError(
                f"Invalid width {node.width} for wire '{node.name}' - a wire needs at least one bit"
            )
        return CircuitWire(
            id=wire_id,
            name=node.name,
            width=node.width,
            is_input=node.is_input,
            is_output=node.is_output,
            state=[0] * node.width,
        )

    def _generate_gate(self, node: HdlGateNode, gate_id: int, wire_ids: dict[str, int]) -> CircuitGate:
        gate_type = node.type.upper()
        gate = CircuitGate(
            id=gate_id,
            name=node.name,
            type=gate_type,
            inputs=[self._resolve(ref, wire_ids) for ref in node.inputs],
            outputs=[self._resolve(ref, wire_ids) for ref in node.outputs],
        )
        if gate_type == "DFF":
            gate.stored = 0
        return gate

    @staticmethod
    def _resolve(ref: HdlWireRef, wire_ids: dict[str, int]) -> GatePort:
        wire_id = wire_ids.get(ref.wire)
        if wire_id is None:
            logger.warning("Generation failed on undefined wire '%s'", ref.wire)
            raise HdlGenerationError(
                f"Undefined wire reference: '{ref.wire}' - wire must be declared before use in gates"
            )
        return GatePort(wire=wire_id, bit=ref.bit)


def generate(ast: HdlAst) -> CircuitData:
    """Compile an AST into CircuitData."""
    return HdlToCircuitGenerator().generate(ast)
