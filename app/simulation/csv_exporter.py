"""
simulation/csv_exporter.py

Export verification and simulation results to CSV format.
"""

import csv
import io
from datetime import datetime


def _write_header(writer, analysis_type, circuit_name):
    writer.writerow(["# Analysis Type", analysis_type])
    writer.writerow(["# Date", datetime.now().strftime("%Y-%m-%d %H:%M:%S")])
    if circuit_name:
        writer.writerow(["# Circuit", circuit_name])
    writer.writerow([])


def export_verification_results(result, truth_table, circuit_name="", gate_id=""):
    """
    Export a truth-table verification to CSV string.

    Args:
        result: VerificationResult
        truth_table: TruthTable the circuit was checked against
        circuit_name: optional circuit filename
        gate_id: optional gate the check was for

    Returns:
        str: CSV content, one line per truth-table row
    """
    output = io.StringIO()
    writer = csv.writer(output)

    _write_header(writer, "Truth Table Verification", circuit_name)
    if gate_id:
        writer.writerow(["# Gate", gate_id])
    writer.writerow(["# Passed", "yes" if result.passed else "no"])
    if result.error_message:
        writer.writerow(["# Error", result.error_message])
    writer.writerow([])

    headers = ["Row"] + list(truth_table.inputs) + [f"expected({name})" for name in truth_table.outputs]
    headers.append("Result")
    writer.writerow(headers)

    failed = set(result.failed_rows)
    checked = failed | set(result.passed_rows)
    for index, row in enumerate(truth_table.rows):
        if index not in checked:
            status = "NOT RUN"
        elif index in failed:
            status = "FAIL"
        else:
            status = "PASS"
        writer.writerow([index] + list(row) + [status])

    return output.getvalue()


def export_relay_results(sim_result, circuit_name=""):
    """
    Export one relay simulation step to CSV string.

    Args:
        sim_result: SimulationResult
        circuit_name: optional circuit filename

    Returns:
        str: CSV content with a component table followed by a wire table
    """
    output = io.StringIO()
    writer = csv.writer(output)

    _write_header(writer, "Relay Simulation", circuit_name)
    writer.writerow(["# Converged", "yes" if sim_result.converged else "no"])
    writer.writerow(["# Iterations", sim_result.iterations])
    if sim_result.error:
        writer.writerow(["# Error", sim_result.error])
    writer.writerow([])

    writer.writerow(["Component", "Coil Energized", "Switch Closed", "Port", "Signal"])
    for component_id, state in sorted(sim_result.component_states.items()):
        for port, value in sorted(state.port_values.items()):
            writer.writerow([component_id, int(state.coil_energized), int(state.switch_closed), port, int(value)])
    writer.writerow([])

    writer.writerow(["Wire", "Signal"])
    for wire_id, value in sorted(sim_result.wire_signals.items()):
        writer.writerow([wire_id, int(value)])

    return output.getvalue()


def export_gate_results(circuit_data, circuit_name=""):
    """
    Export the wire states of a gate-level circuit to CSV string.

    Args:
        circuit_data: CircuitData snapshot
        circuit_name: optional source filename

    Returns:
        str: CSV content, one line per wire bit
    """
    output = io.StringIO()
    writer = csv.writer(output)

    _write_header(writer, "Gate Simulation", circuit_name)
    writer.writerow(["# Cycle", circuit_data.cycle])
    writer.writerow(["# Stable", "yes" if circuit_data.stable else "no"])
    writer.writerow([])

    writer.writerow(["Wire", "Bit", "Value"])
    for wire in circuit_data.wires:
        for bit, value in enumerate(wire.state):
            writer.writerow([wire.name, bit, value])

    return output.getvalue()


def write_csv(csv_content, filepath):
    """
    Write CSV content string to a file.

    Args:
        csv_content: str from one of the export_* functions
        filepath: path to write to
    """
    with open(filepath, "w", newline="") as f:
        f.write(csv_content)
