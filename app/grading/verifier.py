"""Truth-table verification of relay circuits.

Drives a RelaySimulator through every row of a truth table and records
which rows match. UnlockChecker applies this to the gate unlock
requirements.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from grading.truth_tables import UNLOCK_REQUIREMENTS, TruthTable, get_truth_table
from models.circuit import CircuitModel
from models.component import SignalValue
from simulation.relay_simulator import MAX_ITERATIONS, RelaySimulator

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    """Outcome of checking a circuit against a truth table."""

    passed: bool
    passed_rows: list[int] = field(default_factory=list)
    failed_rows: list[int] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def total_rows(self) -> int:
        return len(self.passed_rows) + len(self.failed_rows)

    def to_dict(self) -> dict:
        data = {
            "passed": self.passed,
            "passed_rows": list(self.passed_rows),
            "failed_rows": list(self.failed_rows),
        }
        if self.error_message:
            data["error_message"] = self.error_message
        return data


def _as_row_matrix(rows, width: int) -> np.ndarray:
    """Return rows as a 2-D int array, raising ValueError on a ragged or mis-sized table."""
    try:
        matrix = np.asarray(rows, dtype=np.int64)
    except ValueError as e:
        raise ValueError(f"Truth table rows are not rectangular: {e}") from e

    if matrix.size == 0:
        return matrix.reshape(0, width)
    if matrix.ndim != 2 or matrix.shape[1] != width:
        raise ValueError(
            f"Truth table rows must have {width} values (inputs then outputs), got shape {matrix.shape}"
        )
    return matrix


def verify_truth_table(
    simulator: RelaySimulator,
    input_ids: Sequence[str],
    output_ids: Sequence[str],
    rows,
) -> VerificationResult:
    """
    Check the simulator's loaded circuit against truth-table rows.

    Each row is reset from scratch, so earlier rows never leak state into
    later ones. A row fails when any output differs or the step does not
    converge.
    """
    matrix = _as_row_matrix(rows, len(input_ids) + len(output_ids))
    n_inputs = len(input_ids)

    passed_rows = []
    failed_rows = []
    for row_index, row in enumerate(matrix.tolist()):
        simulator.reset()
        for input_id, value in zip(input_ids, row[:n_inputs]):
            simulator.set_input(input_id, value)

        result = simulator.step()
        actual = [simulator.get_output(output_id) for output_id in output_ids]
        expected = [SignalValue(v) for v in row[n_inputs:]]

        if result.converged and actual == expected:
            passed_rows.append(row_index)
        else:
            logger.debug(
                "Row %d failed: expected %s, got %s (converged=%s)",
                row_index,
                [int(v) for v in expected],
                [int(v) for v in actual],
                result.converged,
            )
            failed_rows.append(row_index)

    return VerificationResult(passed=not failed_rows, passed_rows=passed_rows, failed_rows=failed_rows)


class UnlockChecker:
    """Checks learner circuits against the gate unlock requirements."""

    def __init__(self, max_iterations: int = MAX_ITERATIONS):
        self.simulator = RelaySimulator(max_iterations=max_iterations)

    def check_gate_unlock(self, circuit: CircuitModel, gate_id: str) -> VerificationResult:
        """Verify a circuit against the truth table of *gate_id*."""
        truth_table = get_truth_table(gate_id)
        if truth_table is None:
            return VerificationResult(passed=False, error_message=f"No truth table found for gate: {gate_id}")

        if len(circuit.inputs) != len(truth_table.inputs):
            return VerificationResult(
                passed=False,
                error_message=f"Circuit has {len(circuit.inputs)} inputs, expected {len(truth_table.inputs)}",
            )
        if len(circuit.outputs) != len(truth_table.outputs):
            return VerificationResult(
                passed=False,
                error_message=f"Circuit has {len(circuit.outputs)} outputs, expected {len(truth_table.outputs)}",
            )

        result = self.test_truth_table(circuit, truth_table)
        logger.info(
            "Unlock check '%s' on circuit '%s': %d/%d rows passed",
            gate_id,
            circuit.name,
            len(result.passed_rows),
            len(truth_table.rows),
        )
        return result

    def check_all_unlocks(self, circuit: CircuitModel) -> list[str]:
        """Return every gate id whose truth table the circuit satisfies."""
        return [
            requirement.component_id
            for requirement in UNLOCK_REQUIREMENTS
            if self.check_gate_unlock(circuit, requirement.component_id).passed
        ]

    def test_truth_table(self, circuit: CircuitModel, truth_table: TruthTable) -> VerificationResult:
        """Run an arbitrary truth table against the circuit's inputs and outputs in order."""
        self.simulator.load_circuit(circuit)

        input_ids = [port.component_id for port in circuit.inputs]
        output_ids = [port.component_id for port in circuit.outputs]

        result = verify_truth_table(self.simulator, input_ids, output_ids, truth_table.rows)
        if not result.passed:
            result.error_message = f"Failed {len(result.failed_rows)} of {len(truth_table.rows)} test cases"
        return result
