"""
Command-line interface for relaylab.

Compile and run M4HDL programs, simulate relay circuits, and check them
against the gate truth tables.

Usage::

    python -m cli parse adder.m4hdl
    python -m cli validate adder.m4hdl
    python -m cli generate adder.m4hdl --output adder.json
    python -m cli run adder.m4hdl --set a=1 --set b=1 --cycles 4
    python -m cli simulate not_gate.json --set in=1 --format csv
    python -m cli verify and_gate.json --gate and
    python -m cli unlocks my_circuit.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from controllers.simulation_controller import SimulationController
from grading.truth_tables import TRUTH_TABLES, get_truth_table
from grading.verifier import UnlockChecker
from hdl.parser import parse
from hdl.validator import validate
from models.circuit import CircuitModel, validate_circuit_data
from simulation.circuit_validator import validate_circuit
from simulation.csv_exporter import export_gate_results, export_relay_results, export_verification_results
from simulation.gate_simulator import MAX_PROPAGATE_ITERATIONS
from simulation.relay_simulator import MAX_ITERATIONS

logger = logging.getLogger(__name__)


def try_load_circuit(filepath: str) -> tuple[CircuitModel | None, str]:
    """Load and validate a relay circuit JSON file without exiting.

    Args:
        filepath: Path to the circuit JSON file.

    Returns:
        (model, "") on success, or (None, error_message) on failure.
    """
    path = Path(filepath)
    if not path.exists():
        return None, f"file not found: {filepath}"

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        return None, f"invalid JSON in {filepath}: {e}"
    except (OSError, UnicodeDecodeError) as e:
        return None, f"cannot read {filepath}: {e}"

    try:
        validate_circuit_data(data)
    except ValueError as e:
        return None, f"invalid circuit file: {e}"

    return CircuitModel.from_dict(data), ""


def load_circuit(filepath: str) -> CircuitModel:
    """Load and validate a relay circuit JSON file.

    Raises:
        SystemExit: On file read or validation errors.
    """
    model, error = try_load_circuit(filepath)
    if model is None:
        print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)
    return model


def load_source(filepath: str) -> str:
    """Read an M4HDL source file, exiting with status 1 if it cannot be read."""
    try:
        return Path(filepath).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading {filepath}: {e}", file=sys.stderr)
        sys.exit(1)


def signal_assignment(text: str) -> tuple[str, int]:
    """argparse type for ``name=value`` with value 0 or 1."""
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected name=value, got '{text}'")
    if value not in ("0", "1"):
        raise argparse.ArgumentTypeError(f"value for '{name}' must be 0 or 1, got '{value}'")
    return name, int(value)


def positive_int(text: str) -> int:
    """argparse type for an integer of at least 1."""
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{text}'") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def _emit(text: str, output: str | None, what: str) -> None:
    if output:
        Path(output).write_text(text)
        print(f"{what} written to {output}", file=sys.stderr)
    else:
        print(text)


def _iteration_cap(args: argparse.Namespace, default: int) -> int:
    return args.max_iterations if args.max_iterations is not None else default


def _controller(args: argparse.Namespace) -> SimulationController:
    return SimulationController(
        max_iterations=_iteration_cap(args, MAX_ITERATIONS),
        max_propagate_iterations=_iteration_cap(args, MAX_PROPAGATE_ITERATIONS),
    )


def _report_failure(result) -> None:
    print(f"Failed at {result.stage} stage:", file=sys.stderr)
    print(result.error, file=sys.stderr)


# --- HDL commands ---


def cmd_parse(args: argparse.Namespace) -> int:
    """Parse an HDL file and print its AST."""
    ast = parse(load_source(args.source))
    print(json.dumps(ast.to_dict(), indent=2))
    return 0 if ast.ok else 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate an HDL file, or a relay circuit JSON file."""
    if Path(args.source).suffix.lower() == ".json":
        model = load_circuit(args.source)
        is_valid, errors, warnings = validate_circuit(model)
        if is_valid:
            print(f"Circuit is valid: {args.source}")
            for warning in warnings:
                print(f"  Warning: {warning}")
            return 0
        print(f"Circuit has errors: {args.source}", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        return 1

    result = validate(load_source(args.source))
    for warning in result.warnings:
        print(f"  Warning (line {warning.line}): {warning.message}")
    if result.valid:
        print(f"Program is valid: {args.source}")
        return 0
    print(f"Program has errors: {args.source}", file=sys.stderr)
    for err in result.errors:
        print(f"  - line {err.line}: {err.message}", file=sys.stderr)
    return 1


def cmd_generate(args: argparse.Namespace) -> int:
    """Compile an HDL file to circuit JSON."""
    result = _controller(args).compile_hdl(load_source(args.source))
    if not result.success:
        _report_failure(result)
        return 1

    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    _emit(json.dumps(result.data.to_dict(), indent=2), args.output, "Circuit")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Compile an HDL file and simulate it."""
    inputs = dict(args.set or [])
    result = _controller(args).run_hdl(load_source(args.source), inputs=inputs, cycles=args.cycles)
    if not result.success:
        _report_failure(result)
        return 1

    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    if args.format == "csv":
        text = export_gate_results(result.data, Path(args.source).name)
    else:
        text = json.dumps(result.data.to_dict(), indent=2)
    _emit(text, args.output, "Results")
    return 0


# --- Relay circuit commands ---


def cmd_simulate(args: argparse.Namespace) -> int:
    """Run one relay simulation step and output the results."""
    model = load_circuit(args.circuit)
    result = _controller(args).run_relay(model, inputs=dict(args.set or []))
    if not result.success:
        _report_failure(result)
        return 1

    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    if args.format == "csv":
        text = export_relay_results(result.data, Path(args.circuit).name)
    else:
        output = result.data.to_dict()
        output["outputs"] = result.outputs
        text = json.dumps(output, indent=2)
    _emit(text, args.output, "Results")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    """Check a relay circuit against a gate truth table."""
    model = load_circuit(args.circuit)
    result = _controller(args).verify(model, args.gate)

    verification = result.data
    if verification is None:
        _report_failure(result)
        return 1

    if args.format == "csv":
        text = export_verification_results(
            verification, get_truth_table(args.gate), Path(args.circuit).name, args.gate
        )
    else:
        output = verification.to_dict()
        output["gate"] = args.gate
        text = json.dumps(output, indent=2)
    _emit(text, args.output, "Results")

    if not result.success:
        print(f"Verification failed: {result.error}", file=sys.stderr)
        return 1
    return 0


def cmd_unlocks(args: argparse.Namespace) -> int:
    """List every gate the circuit unlocks."""
    model = load_circuit(args.circuit)
    checker = UnlockChecker(max_iterations=_iteration_cap(args, MAX_ITERATIONS))
    unlocked = checker.check_all_unlocks(model)
    if not unlocked:
        print("No gates unlocked.")
        return 1
    for gate_id in unlocked:
        print(gate_id)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="relaylab",
        description="relaylab: compile M4HDL, simulate relay circuits, and verify them against truth tables.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log output (-vv for debug)")
    parser.add_argument(
        "--max-iterations",
        type=positive_int,
        help=f"Iteration cap per step (default: {MAX_ITERATIONS} relay, {MAX_PROPAGATE_ITERATIONS} gate)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # parse
    parse_parser = subparsers.add_parser("parse", help="Parse an M4HDL file and print the AST as JSON")
    parse_parser.add_argument("source", help="Path to M4HDL source file")

    # validate
    val_parser = subparsers.add_parser("validate", help="Check an M4HDL file or circuit JSON for errors")
    val_parser.add_argument("source", help="Path to M4HDL source or circuit JSON file")

    # generate
    gen_parser = subparsers.add_parser("generate", help="Compile an M4HDL file to circuit JSON")
    gen_parser.add_argument("source", help="Path to M4HDL source file")
    gen_parser.add_argument("--output", "-o", help="Write output to file instead of stdout")

    # run
    run_parser = subparsers.add_parser("run", help="Compile and simulate an M4HDL file")
    run_parser.add_argument("source", help="Path to M4HDL source file")
    run_parser.add_argument(
        "--set", action="append", type=signal_assignment, metavar="NAME=VALUE", help="Set an input wire (repeatable)"
    )
    run_parser.add_argument("--cycles", type=int, default=0, help="Clock cycles to run after settling (default: 0)")
    run_parser.add_argument("--format", choices=["json", "csv"], default="json", help="Output format (default: json)")
    run_parser.add_argument("--output", "-o", help="Write results to file instead of stdout")

    # simulate
    sim_parser = subparsers.add_parser("simulate", help="Simulate a relay circuit JSON file")
    sim_parser.add_argument("circuit", help="Path to circuit JSON file")
    sim_parser.add_argument(
        "--set", action="append", type=signal_assignment, metavar="NAME=VALUE", help="Set a circuit input (repeatable)"
    )
    sim_parser.add_argument("--format", choices=["json", "csv"], default="json", help="Output format (default: json)")
    sim_parser.add_argument("--output", "-o", help="Write results to file instead of stdout")

    # verify
    verify_parser = subparsers.add_parser("verify", help="Check a relay circuit against a gate truth table")
    verify_parser.add_argument("circuit", help="Path to circuit JSON file")
    verify_parser.add_argument("--gate", required=True, choices=sorted(TRUTH_TABLES), help="Gate to verify against")
    verify_parser.add_argument(
        "--format", choices=["json", "csv"], default="json", help="Output format (default: json)"
    )
    verify_parser.add_argument("--output", "-o", help="Write results to file instead of stdout")

    # unlocks
    unlock_parser = subparsers.add_parser("unlocks", help="List the gates a relay circuit unlocks")
    unlock_parser.add_argument("circuit", help="Path to circuit JSON file")

    return parser


def main(argv=None) -> int:
    """CLI entry point. Returns exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s - %(name)s - %(message)s")

    handlers = {
        "parse": cmd_parse,
        "validate": cmd_validate,
        "generate": cmd_generate,
        "run": cmd_run,
        "simulate": cmd_simulate,
        "verify": cmd_verify,
        "unlocks": cmd_unlocks,
    }

    logger.debug("Running command %s", args.command)
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
