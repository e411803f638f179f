"""
simulation/gate_simulator.py

Gate-level simulation of generated CircuitData.

Combinational gates are evaluated into a next-state buffer which is then
committed, repeating until no wire changes. D flip-flops only change on
clock(); a full step() is propagate -> clock -> propagate.
"""

import copy
import logging
from dataclasses import dataclass
from functools import reduce
from typing import Optional

from hdl.generator import CircuitData, CircuitGate, GatePort
from models.component import SignalValue

logger = logging.getLogger(__name__)

MAX_PROPAGATE_ITERATIONS = 100

LOW = SignalValue.LOW
HIGH = SignalValue.HIGH
UNKNOWN = SignalValue.UNKNOWN


def logic_not(a):
    if a == LOW:
        return HIGH
    if a == HIGH:
        return LOW
    return UNKNOWN


def logic_and(a, b):
    if a == LOW or b == LOW:
        return LOW
    if a == HIGH and b == HIGH:
        return HIGH
    return UNKNOWN


def logic_or(a, b):
    if a == HIGH or b == HIGH:
        return HIGH
    if a == LOW and b == LOW:
        return LOW
    return UNKNOWN


def logic_xor(a, b):
    if a not in (LOW, HIGH) or b not in (LOW, HIGH):
        return UNKNOWN
    return HIGH if a != b else LOW


@dataclass
class GateStepResult:
    stable: bool
    iterations: int
    cycle: int
    error: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"stable": self.stable, "iterations": self.iterations, "cycle": self.cycle}
        if self.error:
            data["error"] = self.error
        return data


class GateSimulator:
    """Simulates a private copy of a generated circuit."""

    def __init__(self, circuit: CircuitData, max_iterations: int = MAX_PROPAGATE_ITERATIONS):
        self.circuit = copy.deepcopy(circuit)
        self.max_iterations = max_iterations
        self.error: Optional[str] = None
        self._wire_ids = {wire.name: wire.id for wire in self.circuit.wires}

    @property
    def cycle(self) -> int:
        return self.circuit.cycle

    @property
    def stable(self) -> bool:
        return self.circuit.stable

    # --- Wire access ---

    def _wire_for(self, name: str):
        wire_id = self._wire_ids.get(name)
        if wire_id is None:
            raise ValueError(f"Unknown wire '{name}'")
        return self.circuit.wires[wire_id]

    def set_input(self, name: str, value, bit: int = 0) -> None:
        wire = self._wire_for(name)
        if not 0 <= bit < wire.width:
            raise ValueError(f"Bit {bit} is out of range for wire '{name}' (width {wire.width})")
        wire.state[bit] = int(SignalValue(value))

    def get_wire(self, name: str, bit: int = 0) -> SignalValue:
        wire = self._wire_for(name)
        if not 0 <= bit < wire.width:
            return UNKNOWN
        return SignalValue(wire.state[bit])

    def _read(self, port: GatePort) -> SignalValue:
        if not 0 <= port.wire < len(self.circuit.wires):
            return UNKNOWN
        state = self.circuit.wires[port.wire].state
        if not 0 <= port.bit < len(state):
            return UNKNOWN
        return SignalValue(state[port.bit])

    # --- Evaluation ---

    def evaluate_gate(self, gate: CircuitGate) -> SignalValue:
        values = [self._read(port) for port in gate.inputs]
        if not values:
            return UNKNOWN

        gate_type = gate.type.upper()
        if gate_type == "NOT":
            return logic_not(values[0])
        if gate_type == "BUF":
            return values[0]
        if gate_type == "AND":
            return reduce(logic_and, values)
        if gate_type == "OR":
            return reduce(logic_or, values)
        if gate_type == "NAND":
            return logic_not(reduce(logic_and, values))
        if gate_type == "NOR":
            return logic_not(reduce(logic_or, values))
        if gate_type == "XOR":
            return reduce(logic_xor, values)
        if gate_type == "MUX":
            # Inputs: A, B, SEL
            if len(values) < 3:
                return UNKNOWN
            if values[2] == LOW:
                return values[0]
            if values[2] == HIGH:
                return values[1]
            return UNKNOWN
        if gate_type == "DFF":
            return SignalValue(gate.stored) if gate.stored is not None else UNKNOWN
        if gate_type == "LATCH":
            # Inputs: D, EN. Transparent while EN is high, otherwise holds
            if len(values) < 2:
                return UNKNOWN
            if values[1] == HIGH:
                return values[0]
            if values[1] == LOW:
                return self._read(gate.outputs[0]) if gate.outputs else UNKNOWN
            return UNKNOWN
        return UNKNOWN

    def propagate(self) -> int:
        """Settle combinational logic. Returns the number of iterations used."""
        wires = self.circuit.wires
        for iteration in range(1, self.max_iterations + 1):
            next_state = [list(wire.state) for wire in wires]
            for gate in self.circuit.gates:
                result = int(self.evaluate_gate(gate))
                for port in gate.outputs:
                    if 0 <= port.wire < len(wires) and 0 <= port.bit < len(next_state[port.wire]):
                        next_state[port.wire][port.bit] = result

            changed = False
            for wire, state in zip(wires, next_state):
                if wire.state != state:
                    wire.state = state
                    changed = True

            if not changed:
                self.circuit.stable = True
                return iteration

        self.circuit.stable = False
        self.error = f"Circuit did not stabilize after {self.max_iterations} iterations"
        logger.warning(self.error)
        return self.max_iterations

    def clock(self) -> None:
        """Every DFF captures its D input."""
        for gate in self.circuit.gates:
            if gate.type.upper() == "DFF" and gate.inputs:
                gate.stored = int(self._read(gate.inputs[0]))
        self.circuit.cycle += 1

    def step(self) -> GateStepResult:
        iterations = self.propagate()
        self.clock()
        iterations += self.propagate()
        return GateStepResult(
            stable=self.circuit.stable,
            iterations=iterations,
            cycle=self.circuit.cycle,
            error=self.error,
        )

    def settle(self) -> GateStepResult:
        """Propagate without clocking."""
        iterations = self.propagate()
        return GateStepResult(
            stable=self.circuit.stable,
            iterations=iterations,
            cycle=self.circuit.cycle,
            error=self.error,
        )

    def run(self, cycles: int) -> GateStepResult:
        result = self.settle()
        for _ in range(cycles):
            if self.error:
                break
            result = self.step()
        return result

    def snapshot(self) -> CircuitData:
        return copy.deepcopy(self.circuit)
