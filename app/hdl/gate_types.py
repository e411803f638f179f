"""
hdl/gate_types.py

Port-count table for the M4HDL gate primitives.
"""

import math
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class GateDefinition:
    min_inputs: int
    max_inputs: float
    outputs: int = 1


GATE_DEFINITIONS = MappingProxyType(
    {
        "and": GateDefinition(2, math.inf),
        "or": GateDefinition(2, math.inf),
        "xor": GateDefinition(2, math.inf),
        "not": GateDefinition(1, 1),
        "buf": GateDefinition(1, 1),
        "nand": GateDefinition(2, math.inf),
        "nor": GateDefinition(2, math.inf),
        "mux": GateDefinition(3, 3),
        "dff": GateDefinition(2, 2),
        "latch": GateDefinition(2, 2),
    }
)

GATE_TYPES = tuple(GATE_DEFINITIONS)


def get_gate_definition(gate_type: str):
    """Look up a gate type case-insensitively; None if unknown."""
    return GATE_DEFINITIONS.get(gate_type.lower())
