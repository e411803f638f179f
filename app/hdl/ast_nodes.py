"""
hdl/ast_nodes.py

Abstract syntax tree for M4HDL programs.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class HdlWireRef:
    """Reference to one bit of a declared wire (bit 0 if unspecified)."""

    wire: str
    bit: int = 0

    def to_dict(self) -> dict:
        return {"wire": self.wire, "bit": self.bit}


@dataclass
class HdlWireNode:
    """A wire declaration. Width is passed through from the source unchecked."""

    name: str
    width: int = 1
    is_input: bool = False
    is_output: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "width": self.width,
            "is_input": self.is_input,
            "is_output": self.is_output,
        }


@dataclass
class HdlGateNode:
    """A gate instantiation with ordered input and output references."""

    type: str
    name: str
    inputs: list[HdlWireRef] = field(default_factory=list)
    outputs: list[HdlWireRef] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "name": self.name,
            "inputs": [ref.to_dict() for ref in self.inputs],
            "outputs": [ref.to_dict() for ref in self.outputs],
        }


@dataclass
class HdlParseError:
    """Non-fatal parse error with 1-indexed location."""

    line: int
    message: str
    column: int = 1

    def to_dict(self) -> dict:
        return {"line": self.line, "column": self.column, "message": self.message}


@dataclass
class HdlAst:
    """Parsed program: declarations in source order plus collected errors."""

    wires: list[HdlWireNode] = field(default_factory=list)
    gates: list[HdlGateNode] = field(default_factory=list)
    errors: list[HdlParseError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "wires": [w.to_dict() for w in self.wires],
            "gates": [g.to_dict() for g in self.gates],
            "errors": [e.to_dict() for e in self.errors],
        }
