"""
SimulationController - Orchestrates the compile and simulation pipelines.

HDL text goes parse -> validate -> generate -> gate simulation; relay
circuits go pre-simulation checks -> relay simulation. Every failure is
reported in a PipelineResult naming the stage that stopped the pipeline,
never raised.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from grading.verifier import UnlockChecker
from hdl.generator import HdlGenerationError, generate
from hdl.parser import parse
from hdl.validator import validate
from models.circuit import CircuitModel
from simulation.circuit_validator import validate_circuit
from simulation.diagnostics import ErrorCategory, ErrorDiagnosis, diagnose_error, format_user_message, get_diagnosis
from simulation.gate_simulator import MAX_PROPAGATE_ITERATIONS, GateSimulator
from simulation.relay_simulator import MAX_ITERATIONS, RelaySimulator

logger = logging.getLogger(__name__)

STAGE_PARSE = "parse"
STAGE_VALIDATION = "validation"
STAGE_GENERATION = "generation"
STAGE_SIMULATION = "simulation"
STAGE_VERIFICATION = "verification"
STAGE_COMPLETE = "complete"


@dataclass
class PipelineResult:
    """Result of a pipeline run."""

    success: bool
    stage: str = STAGE_COMPLETE
    data: Any = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: str = ""
    outputs: dict[str, int] = field(default_factory=dict)
    diagnosis: Optional[ErrorDiagnosis] = None


def _located(messages) -> list[str]:
    return [f"Line {m.line}: {m.message}" for m in messages]


class SimulationController:
    """
    Controller for the compile and simulation pipelines.

    Coordinates: parse -> validate -> generate -> simulate
    """

    def __init__(
        self,
        max_iterations: int = MAX_ITERATIONS,
        max_propagate_iterations: int = MAX_PROPAGATE_ITERATIONS,
    ):
        self.max_iterations = max_iterations
        self.max_propagate_iterations = max_propagate_iterations

    def _failure(self, stage: str, category: ErrorCategory, errors: list[str], warnings=None, data=None) -> PipelineResult:
        diagnosis = get_diagnosis(category)
        logger.info("Pipeline stopped at %s stage: %s", stage, "; ".join(errors))
        return PipelineResult(
            success=False,
            stage=stage,
            data=data,
            errors=errors,
            warnings=list(warnings or []),
            error=format_user_message(diagnosis, errors),
            diagnosis=diagnosis,
        )

    # --- HDL ---

    def compile_hdl(self, text: str) -> PipelineResult:
        """Parse, validate and generate. On success data is the CircuitData."""
        ast = parse(text)
        if not ast.ok:
            return self._failure(STAGE_PARSE, ErrorCategory.PARSE, _located(ast.errors))

        validation = validate(text)
        warnings = _located(validation.warnings)
        if not validation.valid:
            return self._failure(
                STAGE_VALIDATION, ErrorCategory.VALIDATION, _located(validation.errors), warnings
            )

        try:
            circuit = generate(ast)
        except HdlGenerationError as e:
            return self._failure(STAGE_GENERATION, ErrorCategory.GENERATION, [str(e)], warnings)

        return PipelineResult(success=True, stage=STAGE_COMPLETE, data=circuit, warnings=warnings)

    def run_hdl(self, text: str, inputs: Optional[Mapping[str, int]] = None, cycles: int = 0) -> PipelineResult:
        """
        Compile HDL text and simulate it.

        Inputs are applied before settling; with cycles > 0 the circuit is
        then clocked that many times. On success data is the final CircuitData
        snapshot and outputs holds bit 0 of every wire.
        """
        compiled = self.compile_hdl(text)
        if not compiled.success:
            return compiled

        simulator = GateSimulator(compiled.data, max_iterations=self.max_propagate_iterations)
        try:
            for name, value in (inputs or {}).items():
                simulator.set_input(name, value)
        except ValueError as e:
            return self._failure(STAGE_SIMULATION, ErrorCategory.UNKNOWN, [str(e)], compiled.warnings)

        step = simulator.run(cycles)
        snapshot = simulator.snapshot()
        if step.error:
            return self._failure(
                STAGE_SIMULATION, ErrorCategory.NON_CONVERGENCE, [step.error], compiled.warnings, snapshot
            )

        return PipelineResult(
            success=True,
            stage=STAGE_COMPLETE,
            data=snapshot,
            warnings=compiled.warnings,
            outputs={wire.name: int(wire.state[0]) for wire in snapshot.wires},
        )

    # --- Relay circuits ---

    def run_relay(self, model: CircuitModel, inputs: Optional[Mapping[str, int]] = None) -> PipelineResult:
        """Check and simulate a relay circuit. On success data is the SimulationResult."""
        is_valid, errors, warnings = validate_circuit(model)
        if not is_valid:
            return self._failure(STAGE_VALIDATION, ErrorCategory.VALIDATION, errors, warnings)

        simulator = RelaySimulator(max_iterations=self.max_iterations)
        simulator.load_circuit(model)

        try:
            for key, value in (inputs or {}).items():
                simulator.set_input(key, value)
        except ValueError as e:
            return self._failure(STAGE_SIMULATION, ErrorCategory.UNKNOWN, [str(e)], warnings)

        result = simulator.step()
        outputs = {port.port_id: int(simulator.get_output(port.port_id)) for port in model.outputs}

        if not result.converged:
            failure = self._failure(
                STAGE_SIMULATION, diagnose_error(result.error).category, [result.error], warnings, result
            )
            failure.outputs = outputs
            return failure

        return PipelineResult(success=True, stage=STAGE_COMPLETE, data=result, warnings=warnings, outputs=outputs)

    def verify(self, model: CircuitModel, gate_id: str) -> PipelineResult:
        """Check a relay circuit against a gate's unlock truth table."""
        is_valid, errors, warnings = validate_circuit(model)
        if not is_valid:
            return self._failure(STAGE_VALIDATION, ErrorCategory.VALIDATION, errors, warnings)

        checker = UnlockChecker(max_iterations=self.max_iterations)
        result = checker.check_gate_unlock(model, gate_id)
        if not result.passed:
            return PipelineResult(
                success=False,
                stage=STAGE_VERIFICATION,
                data=result,
                errors=[result.error_message] if result.error_message else [],
                warnings=warnings,
                error=result.error_message or "",
            )
        return PipelineResult(success=True, stage=STAGE_COMPLETE, data=result, warnings=warnings)
