"""
Tests for simulation/relay_simulator.py — relay fixpoint simulation.
"""

import pytest
from models.component import SignalValue
from simulation.relay_simulator import NO_CIRCUIT_ERROR, RelaySimulator
from tests.conftest import make_circuit, make_component, make_wire

LOW = SignalValue.LOW
HIGH = SignalValue.HIGH
UNKNOWN = SignalValue.UNKNOWN


def _single_relay(relay_type):
    """VCC -> relay contacts -> OUT, input on the coil."""
    components = [
        make_component("input", "in1"),
        make_component(relay_type, "r1"),
        make_component("power", "vcc"),
        make_component("output", "out1"),
    ]
    wires = [
        make_wire("w1", "in1", "out", "r1", "coil_in"),
        make_wire("w2", "vcc", "out", "r1", "contact_in"),
        make_wire("w3", "r1", "contact_out", "out1", "in"),
    ]
    return make_circuit(components, wires, inputs=[("in", "in1")], outputs=[("out", "out1")])


@pytest.fixture
def sim():
    return RelaySimulator()


class TestNoCircuit:
    def test_step_without_circuit(self, sim):
        result = sim.step()
        assert result.converged is False
        assert result.iterations == 0
        assert result.error == NO_CIRCUIT_ERROR

    def test_output_without_circuit(self, sim):
        assert sim.get_output("out") == UNKNOWN


class TestLoading:
    def test_nc_relay_starts_closed(self, sim, not_circuit):
        sim.load_circuit(not_circuit)
        state = sim.get_component_state("r1")
        assert state.switch_closed is True
        assert state.coil_energized is False

    def test_no_relay_starts_open(self, sim, and_circuit):
        sim.load_circuit(and_circuit)
        assert sim.get_component_state("r1").switch_closed is False

    def test_inputs_default_low(self, sim, and_circuit):
        sim.load_circuit(and_circuit)
        assert sim.get_input("in_a") == LOW

    def test_reload_clears_state(self, sim, and_circuit):
        sim.load_circuit(and_circuit)
        sim.set_input("in_a", 1)
        sim.step()
        sim.reset()
        assert sim.get_input("in_a") == LOW
        assert sim.cycle == 0
        assert sim.get_component_state("r1").coil_energized is False


class TestRelaySwitching:
    @pytest.mark.parametrize("coil, closed", [(0, False), (1, True)])
    def test_normally_open(self, sim, coil, closed):
        sim.load_circuit(_single_relay("relay_no"))
        sim.set_input("in1", coil)
        result = sim.step()
        state = result.component_states["r1"]
        assert state.coil_energized is bool(coil)
        assert state.switch_closed is closed

    @pytest.mark.parametrize("coil, closed", [(0, True), (1, False)])
    def test_normally_closed(self, sim, coil, closed):
        sim.load_circuit(_single_relay("relay_nc"))
        sim.set_input("in1", coil)
        result = sim.step()
        state = result.component_states["r1"]
        assert state.coil_energized is bool(coil)
        assert state.switch_closed is closed

    def test_closed_contact_carries_power(self, sim):
        sim.load_circuit(_single_relay("relay_no"))
        sim.set_input("in1", 1)
        sim.step()
        assert sim.get_output("out") == HIGH

    def test_open_contact_settles_low(self, sim):
        sim.load_circuit(_single_relay("relay_no"))
        sim.set_input("in1", 0)
        result = sim.step()
        assert sim.get_output("out") == LOW
        assert result.wire_signals["w3"] == LOW


class TestGates:
    @pytest.mark.parametrize("a, expected", [(0, HIGH), (1, LOW)])
    def test_not(self, sim, not_circuit, a, expected):
        sim.load_circuit(not_circuit)
        outputs = sim.run_with_inputs({"in1": a})
        assert outputs == {"out": expected}

    @pytest.mark.parametrize("a, b", [(0, 0), (0, 1), (1, 0), (1, 1)])
    def test_and(self, sim, and_circuit, a, b):
        sim.load_circuit(and_circuit)
        outputs = sim.run_with_inputs({"in_a": a, "in_b": b})
        assert outputs["out"] == (HIGH if a and b else LOW)

    @pytest.mark.parametrize("a, b", [(0, 0), (0, 1), (1, 0), (1, 1)])
    def test_or(self, sim, or_circuit, a, b):
        sim.load_circuit(or_circuit)
        outputs = sim.run_with_inputs({"in_a": a, "in_b": b})
        assert outputs["out"] == (HIGH if a or b else LOW)


class TestStep:
    def test_converges_and_counts_cycles(self, sim, and_circuit):
        sim.load_circuit(and_circuit)
        result = sim.step()
        assert result.converged is True
        assert result.error is None
        assert 1 <= result.iterations < sim.max_iterations
        assert sim.cycle == 1

    def test_idempotent_for_unchanged_inputs(self, sim, or_circuit):
        sim.load_circuit(or_circuit)
        sim.set_input("in_a", 1)
        first = sim.step()
        second = sim.step()
        assert first.wire_signals == second.wire_signals
        assert {k: v.to_dict() for k, v in first.component_states.items()} == {
            k: v.to_dict() for k, v in second.component_states.items()
        }

    def test_every_net_settles_to_known_value(self, sim, and_circuit):
        sim.load_circuit(and_circuit)
        result = sim.step()
        assert set(result.wire_signals.values()) <= {LOW, HIGH}

    def test_ground_net_reads_low(self, sim, and_circuit):
        sim.load_circuit(and_circuit)
        sim.step()
        assert sim.get_component_state("gnd").port_values["in"] == LOW

    def test_unconnected_port_reads_unknown(self, sim):
        circuit = make_circuit(
            [make_component("relay_no", "r1"), make_component("power", "vcc")],
            [make_wire("w1", "vcc", "out", "r1", "contact_in")],
        )
        sim.load_circuit(circuit)
        result = sim.step()
        ports = result.component_states["r1"].port_values
        assert ports["contact_in"] == HIGH
        assert ports["contact_out"] == UNKNOWN

    def test_returned_states_are_copies(self, sim, not_circuit):
        sim.load_circuit(not_circuit)
        result = sim.step()
        result.component_states["r1"].switch_closed = False
        assert sim.get_component_state("r1").switch_closed is True

    def test_gate_components_are_passive(self, sim):
        circuit = make_circuit(
            [make_component("power", "vcc"), make_component("and", "g1"), make_component("output", "out1")],
            [
                make_wire("w1", "vcc", "out", "g1", "a"),
                make_wire("w2", "g1", "out", "out1", "in"),
            ],
            outputs=[("out", "out1")],
        )
        sim.load_circuit(circuit)
        result = sim.step()
        assert result.component_states["g1"].port_values["a"] == HIGH
        assert sim.get_output("out") == LOW


class TestNonConvergence:
    def test_fighting_sources_report_error(self, sim, fighting_circuit):
        sim.load_circuit(fighting_circuit)
        result = sim.step()
        assert result.converged is False
        assert result.iterations == sim.max_iterations
        assert result.error == f"Simulation did not converge after {sim.max_iterations} iterations"

    def test_self_interrupting_relay_settles_within_step(self, sim):
        # NC relay whose contact feeds its own coil: the contact net keeps its
        # HIGH drive for the rest of the step after the switch opens.
        circuit = make_circuit(
            [make_component("relay_nc", "r1"), make_component("power", "vcc")],
            [
                make_wire("w1", "vcc", "out", "r1", "contact_in"),
                make_wire("w2", "r1", "contact_out", "r1", "coil_in"),
            ],
        )
        sim.load_circuit(circuit)
        result = sim.step()
        assert result.converged is True
        assert result.iterations == 3
        state = result.component_states["r1"]
        assert state.coil_energized is True
        assert state.switch_closed is False
        assert state.port_values["contact_out"] == HIGH

    def test_custom_cap(self, fighting_circuit):
        sim = RelaySimulator(max_iterations=5)
        sim.load_circuit(fighting_circuit)
        result = sim.step()
        assert result.iterations == 5
        assert "5 iterations" in result.error


class TestInputs:
    def test_toggle_input(self, sim, not_circuit):
        sim.load_circuit(not_circuit)
        sim.toggle_input("in1")
        assert sim.get_input("in1") == HIGH
        sim.toggle_input("in1")
        assert sim.get_input("in1") == LOW

    def test_output_lookup_by_component_id(self, sim, not_circuit):
        sim.load_circuit(not_circuit)
        sim.step()
        assert sim.get_output("out1") == sim.get_output("out") == HIGH

    def test_unknown_output(self, sim, not_circuit):
        sim.load_circuit(not_circuit)
        sim.step()
        assert sim.get_output("nope") == UNKNOWN

    def test_run_with_inputs_by_port_id(self, sim, and_circuit):
        sim.load_circuit(and_circuit)
        assert sim.run_with_inputs({"a": 1, "b": 1}) == {"out": HIGH}
        assert sim.get_input("in_a") == HIGH
        assert sim.get_input("a") == HIGH

    @pytest.mark.parametrize("key", ["in", "in1"])
    def test_set_input_by_port_or_component_id(self, sim, not_circuit, key):
        sim.load_circuit(not_circuit)
        sim.set_input(key, 1)
        sim.step()
        assert sim.get_output("out") == LOW

    def test_unknown_input_rejected(self, sim, and_circuit):
        sim.load_circuit(and_circuit)
        with pytest.raises(ValueError, match="Unknown input 'c'"):
            sim.set_input("c", 1)

    def test_set_input_without_circuit(self, sim):
        with pytest.raises(ValueError):
            sim.set_input("in1", 1)

    def test_invalid_signal_value_rejected(self, sim, not_circuit):
        sim.load_circuit(not_circuit)
        with pytest.raises(ValueError):
            sim.set_input("in1", 7)

    def test_result_to_dict(self, sim, not_circuit):
        sim.load_circuit(not_circuit)
        data = sim.step().to_dict()
        assert data["converged"] is True
        assert data["wire_signals"]["w4"] == 1
        assert "error" not in data
