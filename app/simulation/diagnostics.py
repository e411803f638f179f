"""
simulation/diagnostics.py

Classifies compiler and simulator failures and turns them into
learner-friendly explanations.
"""

import re
from dataclasses import dataclass
from enum import Enum


class ErrorCategory(Enum):
    """Categories of pipeline failures."""

    PARSE = "parse"
    VALIDATION = "validation"
    GENERATION = "generation"
    NON_CONVERGENCE = "non_convergence"
    NO_CIRCUIT = "no_circuit"
    UNKNOWN = "unknown"


# Patterns matched against the error text (case-insensitive)
_ERROR_PATTERNS: list[tuple[re.Pattern, ErrorCategory]] = [
    (re.compile(r"no circuit loaded", re.IGNORECASE), ErrorCategory.NO_CIRCUIT),
    (
        re.compile(r"did not (converge|stabilize)", re.IGNORECASE),
        ErrorCategory.NON_CONVERGENCE,
    ),
    (
        re.compile(r"undefined wire reference|invalid width", re.IGNORECASE),
        ErrorCategory.GENERATION,
    ),
    (re.compile(r"unrecognized statement", re.IGNORECASE), ErrorCategory.PARSE),
    (
        re.compile(
            r"unmatched (bracket|parenthesis)|duplicate (wire|gate)|unknown gate type"
            r"|undefined wire|requires at least|accepts at most|invalid (wire|gate)",
            re.IGNORECASE,
        ),
        ErrorCategory.VALIDATION,
    ),
]


@dataclass
class ErrorDiagnosis:
    """Structured diagnosis of a failure."""

    category: ErrorCategory
    message: str
    causes: list[str]
    suggestions: list[str]

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "message": self.message,
            "causes": list(self.causes),
            "suggestions": list(self.suggestions),
        }


_DIAGNOSES: dict[ErrorCategory, ErrorDiagnosis] = {
    ErrorCategory.PARSE: ErrorDiagnosis(
        category=ErrorCategory.PARSE,
        message="Some lines of the HDL program could not be understood.",
        causes=[
            "A statement is neither a wire declaration nor a gate instantiation",
            "A gate is missing its 'input:' or 'output:' section",
        ],
        suggestions=[
            "Declare wires as 'wire name' or 'wire name[8]'",
            "Write gates as 'and g1 (input: a, b; output: y)'",
            "Start comment lines with '#'",
        ],
    ),
    ErrorCategory.VALIDATION: ErrorDiagnosis(
        category=ErrorCategory.VALIDATION,
        message="The HDL program has errors that must be fixed before it can be built.",
        causes=[
            "A wire is used before it is declared",
            "A gate has the wrong number of inputs for its type",
            "A wire or gate name is declared twice",
        ],
        suggestions=[
            "Declare every wire at the top of the program",
            "Check the input count allowed for each gate type",
            "Give each wire and gate a unique name",
        ],
    ),
    ErrorCategory.GENERATION: ErrorDiagnosis(
        category=ErrorCategory.GENERATION,
        message="The circuit could not be built from the HDL program.",
        causes=[
            "A gate refers to a wire that does not exist",
            "A wire range such as [0:7] produced a width below one bit",
        ],
        suggestions=[
            "Run validation first and fix every reported error",
            "Write bit ranges high-to-low, e.g. [7:0]",
        ],
    ),
    ErrorCategory.NON_CONVERGENCE: ErrorDiagnosis(
        category=ErrorCategory.NON_CONVERGENCE,
        message="The circuit never settled into a stable state.",
        causes=[
            "An output feeds back into its own input through an inverter (an oscillator)",
            "Two sources drive the same net with different values",
        ],
        suggestions=[
            "Look for feedback loops and break them with a flip-flop",
            "Make sure each net is driven by a single source",
        ],
    ),
    ErrorCategory.NO_CIRCUIT: ErrorDiagnosis(
        category=ErrorCategory.NO_CIRCUIT,
        message="There is no circuit to simulate.",
        causes=["The simulator was stepped before a circuit was loaded"],
        suggestions=["Load or build a circuit before running the simulation"],
    ),
    ErrorCategory.UNKNOWN: ErrorDiagnosis(
        category=ErrorCategory.UNKNOWN,
        message="The operation failed for an unexpected reason.",
        causes=[],
        suggestions=[
            "Check the circuit file for structural mistakes",
            "Try a simpler circuit to isolate the problem",
        ],
    ),
}


def classify_error(error_text: str) -> ErrorCategory:
    """Classify an error message, returning the first matching category."""
    if not error_text:
        return ErrorCategory.UNKNOWN
    for pattern, category in _ERROR_PATTERNS:
        if pattern.search(error_text):
            return category
    return ErrorCategory.UNKNOWN


def get_diagnosis(category: ErrorCategory) -> ErrorDiagnosis:
    return _DIAGNOSES[category]


def diagnose_error(error_text: str) -> ErrorDiagnosis:
    """Classify and return a full diagnosis for a failure message."""
    return _DIAGNOSES[classify_error(error_text)]


def format_user_message(diagnosis: ErrorDiagnosis, details: list[str] | None = None) -> str:
    """Build a learner-friendly error message string.

    *details* are the raw error lines, listed after the explanation.
    """
    parts = [diagnosis.message]

    if details:
        parts.append("\nDetails:")
        for detail in details:
            parts.append(f"  - {detail}")

    if diagnosis.causes:
        parts.append("\nCommon causes:")
        for cause in diagnosis.causes:
            parts.append(f"  - {cause}")

    if diagnosis.suggestions:
        parts.append("\nSuggestions:")
        for suggestion in diagnosis.suggestions:
            parts.append(f"  - {suggestion}")

    return "\n".join(parts)
