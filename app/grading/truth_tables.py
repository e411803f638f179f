"""
grading/truth_tables.py

Reference truth tables for the unlockable gates and the requirements a
learner's relay circuit has to meet to unlock each gate.

Tables are generated from vectorised numpy reductions over every input
combination and frozen into tuples, so the registry can be shared freely.
"""

import itertools
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class TruthTable:
    """
    Ordered input and output names plus rows of 0/1 values.

    Each row holds the input values followed by the expected output values.
    """

    inputs: tuple[str, ...]
    outputs: tuple[str, ...]
    rows: tuple[tuple[int, ...], ...]

    @property
    def width(self) -> int:
        return len(self.inputs) + len(self.outputs)

    def input_values(self, row_index: int) -> tuple[int, ...]:
        return self.rows[row_index][: len(self.inputs)]

    def expected_outputs(self, row_index: int) -> tuple[int, ...]:
        return self.rows[row_index][len(self.inputs):]

    def to_dict(self) -> dict:
        return {
            "inputs": list(self.inputs),
            "outputs": list(self.outputs),
            "rows": [list(row) for row in self.rows],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TruthTable":
        return cls(
            inputs=tuple(data["inputs"]),
            outputs=tuple(data["outputs"]),
            rows=tuple(tuple(int(v) for v in row) for row in data["rows"]),
        )


@dataclass(frozen=True)
class UnlockRequirement:
    component_id: str
    name: str
    description: str
    truth_table: TruthTable
    hint: str


# Gate id -> function reducing a (rows, inputs) boolean matrix to one column
_GATE_FUNCTIONS = MappingProxyType(
    {
        "not": lambda m: np.logical_not(m[:, 0]),
        "and": lambda m: np.logical_and.reduce(m, axis=1),
        "or": lambda m: np.logical_or.reduce(m, axis=1),
        "nand": lambda m: np.logical_not(np.logical_and.reduce(m, axis=1)),
        "nor": lambda m: np.logical_not(np.logical_or.reduce(m, axis=1)),
        "xor": lambda m: np.logical_xor.reduce(m, axis=1),
    }
)

_INPUT_NAMES = ("a", "b", "c", "d", "e", "f", "g", "h")


def build_truth_table(gate_id: str, num_inputs: Optional[int] = None) -> TruthTable:
    """
    Build the truth table for a gate by enumerating every input combination.

    Rows are in binary counting order with the first input as the most
    significant bit. NOT always has a single input named 'in'; other gates
    default to two inputs named 'a', 'b', ...
    """
    func = _GATE_FUNCTIONS.get(gate_id)
    if func is None:
        raise ValueError(f"Unknown gate: {gate_id}")

    if gate_id == "not":
        if num_inputs not in (None, 1):
            raise ValueError("NOT takes exactly one input")
        inputs = ("in",)
    else:
        count = 2 if num_inputs is None else num_inputs
        if not 2 <= count <= len(_INPUT_NAMES):
            raise ValueError(f"{gate_id} needs between 2 and {len(_INPUT_NAMES)} inputs, got {count}")
        inputs = _INPUT_NAMES[:count]

    combos = np.array(list(itertools.product((0, 1), repeat=len(inputs))), dtype=np.int8)
    outputs = func(combos.astype(bool)).astype(np.int8)
    table = np.column_stack([combos, outputs])

    return TruthTable(
        inputs=inputs,
        outputs=("out",),
        rows=tuple(tuple(int(v) for v in row) for row in table.tolist()),
    )


TRUTH_TABLES = MappingProxyType({gate_id: build_truth_table(gate_id) for gate_id in _GATE_FUNCTIONS})


def get_truth_table(gate_id: str) -> Optional[TruthTable]:
    return TRUTH_TABLES.get(gate_id)


UNLOCK_REQUIREMENTS = (
    UnlockRequirement(
        component_id="not",
        name="NOT Gate",
        description="Build an inverter using a Normally Closed (NC) relay",
        truth_table=TRUTH_TABLES["not"],
        hint="When the coil is energized, an NC relay opens its switch...",
    ),
    UnlockRequirement(
        component_id="and",
        name="AND Gate",
        description="Build an AND gate using two Normally Open (NO) relays in series",
        truth_table=TRUTH_TABLES["and"],
        hint="When two switches are in series, both must be closed for current to flow.",
    ),
    UnlockRequirement(
        component_id="or",
        name="OR Gate",
        description="Build an OR gate using two Normally Open (NO) relays in parallel",
        truth_table=TRUTH_TABLES["or"],
        hint="When two switches are in parallel, either one being closed allows current.",
    ),
    UnlockRequirement(
        component_id="nand",
        name="NAND Gate",
        description="Build a NAND gate (NOT of AND) from relays",
        truth_table=TRUTH_TABLES["nand"],
        hint=(
            "NAND = NOT(AND): the output stays HIGH unless both coils are energized. "
            "Wire two NC relays in parallel between power and the output, one coil per input."
        ),
    ),
    UnlockRequirement(
        component_id="nor",
        name="NOR Gate",
        description="Build a NOR gate (NOT of OR) from relays",
        truth_table=TRUTH_TABLES["nor"],
        hint=(
            "NOR = NOT(OR): the output is HIGH only while neither coil is energized. "
            "Wire two NC relays in series between power and the output, one coil per input."
        ),
    ),
    UnlockRequirement(
        component_id="xor",
        name="XOR Gate",
        description="Build an XOR gate from NO and NC relays",
        truth_table=TRUTH_TABLES["xor"],
        hint=(
            "A XOR B = (A AND NOT B) OR (NOT A AND B). Build each term as an NO and an NC "
            "relay in series, put the two paths in parallel and drive every coil straight "
            "from an input."
        ),
    ),
)


def get_unlock_requirement(gate_id: str) -> Optional[UnlockRequirement]:
    for requirement in UNLOCK_REQUIREMENTS:
        if requirement.component_id == gate_id:
            return requirement
    return None
