"""
hdl/validator.py

Semantic validation of M4HDL source text.

Re-scans the parser's line grammar and reports everything that would make
the program unusable (errors) or suspicious (warnings). Warnings never
affect validity.
"""

import logging
import re
from dataclasses import dataclass, field

from hdl.gate_types import get_gate_definition
from hdl.parser import GATE_INST_RE, IDENTIFIER, WIRE_DECL_RE, iter_source_lines, split_operands

logger = logging.getLogger(__name__)

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"

_BIT_SUFFIX_RE = re.compile(r"\[[0-9]+(:[0-9]+)?\]$")
_LOOKS_LIKE_GATE_RE = re.compile(rf"{IDENTIFIER}\s+{IDENTIFIER}")


@dataclass
class HdlValidationError:
    """A located validation message."""

    line: int
    message: str
    severity: str = SEVERITY_ERROR
    column: int = 1

    def to_dict(self) -> dict:
        return {
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "severity": self.severity,
        }


@dataclass
class HdlValidationResult:
    valid: bool
    errors: list[HdlValidationError] = field(default_factory=list)
    warnings: list[HdlValidationError] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


def base_wire_name(operand: str) -> str:
    """Strip a trailing ``[bit]`` or ``[high:low]`` suffix."""
    return _BIT_SUFFIX_RE.sub("", operand)


class HdlValidator:
    """Validates M4HDL source and collects errors and warnings."""

    def validate(self, text: str) -> HdlValidationResult:
        errors: list[HdlValidationError] = []
        warnings: list[HdlValidationError] = []

        declared_wires: dict[str, int] = {}  # wire name -> line number
        declared_gates: dict[str, int] = {}  # gate name -> line number
        used_wires: set[str] = set()

        def error(line_number, message):
            errors.append(HdlValidationError(line=line_number, message=message))

        for line_number, line in iter_source_lines(text):
            open_brackets, close_brackets = line.count("["), line.count("]")
            if open_brackets != close_brackets:
                error(
                    line_number,
                    f"Unmatched bracket in line: expected {open_brackets} closing brackets, found {close_brackets}",
                )
                continue

            open_parens, close_parens = line.count("("), line.count(")")
            if open_parens != close_parens:
                error(
                    line_number,
                    f"Unmatched parenthesis in line: expected {open_parens} closing parentheses, found {close_parens}",
                )
                continue

            wire_match = WIRE_DECL_RE.fullmatch(line)
            if wire_match:
                wire_name = wire_match.group(1)
                if wire_name in declared_wires:
                    error(
                        line_number,
                        f"Duplicate wire declaration: '{wire_name}' was already declared "
                        f"on line {declared_wires[wire_name]}",
                    )
                else:
                    declared_wires[wire_name] = line_number
                continue

            gate_match = GATE_INST_RE.fullmatch(line)
            if gate_match:
                gate_type = gate_match.group(1).lower()
                gate_name = gate_match.group(2)

                gate_def = get_gate_definition(gate_type)
                if gate_def is None:
                    error(line_number, f"Unknown gate type: '{gate_type}'")
                    continue

                if gate_name in declared_gates:
                    error(
                        line_number,
                        f"Duplicate gate name: '{gate_name}' was already declared "
                        f"on line {declared_gates[gate_name]}",
                    )
                else:
                    declared_gates[gate_name] = line_number

                input_wires = split_operands(gate_match.group(3))
                output_wires = split_operands(gate_match.group(4))

                if len(input_wires) < gate_def.min_inputs:
                    error(
                        line_number,
                        f"Gate '{gate_name}' ({gate_type}) requires at least {gate_def.min_inputs} "
                        f"inputs, but got {len(input_wires)}",
                    )
                if len(input_wires) > gate_def.max_inputs:
                    error(
                        line_number,
                        f"Gate '{gate_name}' ({gate_type}) accepts at most {int(gate_def.max_inputs)} "
                        f"inputs, but got {len(input_wires)}",
                    )

                for role, operands in (("input to", input_wires), ("output of", output_wires)):
                    for operand in operands:
                        base_name = base_wire_name(operand)
                        if base_name not in declared_wires:
                            error(line_number, f"Undefined wire '{operand}' used as {role} gate '{gate_name}'")
                        else:
                            used_wires.add(base_name)
                continue

            if line.lower().startswith("wire "):
                error(line_number, f"Invalid wire declaration syntax: '{line}'")
            elif _LOOKS_LIKE_GATE_RE.match(line):
                error(line_number, f"Invalid gate instantiation syntax: '{line}'")
            else:
                error(line_number, f"Unrecognized statement: '{line}'")

        for wire_name, line_number in declared_wires.items():
            if wire_name not in used_wires:
                warnings.append(
                    HdlValidationError(
                        line=line_number,
                        message=f"Wire '{wire_name}' is declared but never used",
                        severity=SEVERITY_WARNING,
                    )
                )

        logger.debug("Validation finished: %d errors, %d warnings", len(errors), len(warnings))
        return HdlValidationResult(valid=not errors, errors=errors, warnings=warnings)


def validate(text: str) -> HdlValidationResult:
    """Validate M4HDL text."""
    return HdlValidator().validate(text)
