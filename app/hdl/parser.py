"""
hdl/parser.py

Parses M4HDL source text into an HdlAst.

The language is line oriented::

    # comment
    wire a
    wire bus[8]
    wire addr[7:0]
    and g1 (input: a, bus[3]; output: addr[0])

Lines that match neither a wire declaration nor a gate instantiation are
recorded as HdlParseError entries and parsing carries on with the next line.
"""

import logging
import re

from hdl.ast_nodes import HdlAst, HdlGateNode, HdlParseError, HdlWireNode, HdlWireRef

logger = logging.getLogger(__name__)

IDENTIFIER = r"[a-zA-Z_][a-zA-Z0-9_]*"

WIRE_DECL_RE = re.compile(rf"wire\s+({IDENTIFIER})(\[([0-9]+)(?::([0-9]+))?\])?", re.IGNORECASE)

GATE_INST_RE = re.compile(
    rf"({IDENTIFIER})\s+({IDENTIFIER})\s*\(\s*input:\s*([^;]+);\s*output:\s*([^)]+)\s*\)",
    re.IGNORECASE,
)

WIRE_REF_RE = re.compile(rf"({IDENTIFIER})(?:\[([0-9]+)\])?")


def iter_source_lines(text: str):
    """Yield (line_number, stripped_line) for every non-blank, non-comment line."""
    for index, line in enumerate(text.split("\n")):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        yield index + 1, stripped


def split_operands(operands: str) -> list[str]:
    """Split a comma separated operand list, dropping empty entries."""
    return [part.strip() for part in operands.split(",") if part.strip()]


class HdlParser:
    """Line-by-line M4HDL parser producing an HdlAst."""

    def parse(self, text: str) -> HdlAst:
        ast = HdlAst()

        for line_number, line in iter_source_lines(text):
            wire = self._parse_wire_declaration(line)
            if wire is not None:
                ast.wires.append(wire)
                continue

            gate = self._parse_gate_instantiation(line, line_number)
            if gate is not None:
                ast.gates.append(gate)
                continue

            ast.errors.append(HdlParseError(line=line_number, message=f"Unrecognized statement: '{line}'"))

        logger.debug(
            "Parsed %d wires, %d gates, %d errors", len(ast.wires), len(ast.gates), len(ast.errors)
        )
        return ast

    def _parse_wire_declaration(self, line: str):
        """
        Parse ``wire name``, ``wire name[width]`` or ``wire name[high:low]``.

        A ``[high:low]`` range gives width high - low + 1 and is not range
        checked, so ``[0:7]`` yields -6.
        """
        match = WIRE_DECL_RE.fullmatch(line)
        if match is None:
            return None

        name, bit_spec, first, second = match.groups()
        width = 1
        if bit_spec:
            if second is not None:
                width = int(first) - int(second) + 1
            else:
                width = int(first)

        return HdlWireNode(name=name, width=width)

    def _parse_gate_instantiation(self, line: str, line_number: int):
        match = GATE_INST_RE.fullmatch(line)
        if match is None:
            return None

        gate_type, name, inputs, outputs = match.groups()
        return HdlGateNode(
            type=gate_type.lower(),
            name=name,
            inputs=self._parse_wire_refs(inputs, line_number),
            outputs=self._parse_wire_refs(outputs, line_number),
        )

    def _parse_wire_refs(self, operands: str, line_number: int) -> list[HdlWireRef]:
        refs = []
        for operand in split_operands(operands):
            match = WIRE_REF_RE.fullmatch(operand)
            if match is None:
                logger.debug("Line %d: skipping malformed wire reference '%s'", line_number, operand)
                continue
            wire, bit = match.groups()
            refs.append(HdlWireRef(wire=wire, bit=int(bit) if bit else 0))
        return refs


def parse(text: str) -> HdlAst:
    """Parse M4HDL text into an HdlAst."""
    return HdlParser().parse(text)
