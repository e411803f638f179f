"""
Tests for simulation/gate_simulator.py — gate-level simulation of generated circuits.
"""

import pytest
from hdl.generator import CircuitData, CircuitGate, CircuitWire, GatePort, generate
from hdl.parser import parse
from models.component import SignalValue
from simulation.gate_simulator import GateSimulator, logic_and, logic_not, logic_or, logic_xor

LOW = SignalValue.LOW
HIGH = SignalValue.HIGH
X = SignalValue.UNKNOWN


def compile_source(text):
    return generate(parse(text))


def simulator_for(text, **kwargs):
    return GateSimulator(compile_source(text), **kwargs)


class TestThreeValuedLogic:
    def test_not(self):
        assert logic_not(LOW) == HIGH
        assert logic_not(HIGH) == LOW
        assert logic_not(X) == X

    def test_and_low_dominates(self):
        assert logic_and(LOW, X) == LOW
        assert logic_and(X, LOW) == LOW
        assert logic_and(HIGH, X) == X
        assert logic_and(HIGH, HIGH) == HIGH

    def test_or_high_dominates(self):
        assert logic_or(HIGH, X) == HIGH
        assert logic_or(LOW, X) == X
        assert logic_or(LOW, LOW) == LOW

    def test_xor_unknown_propagates(self):
        assert logic_xor(HIGH, X) == X
        assert logic_xor(HIGH, LOW) == HIGH
        assert logic_xor(HIGH, HIGH) == LOW


class TestCombinational:
    AND_SOURCE = "wire a\nwire b\nwire c\nand g1 (input: a, b; output: c)"

    @pytest.mark.parametrize("a, b, expected", [(1, 1, HIGH), (0, 1, LOW), (1, 0, LOW), (0, 0, LOW)])
    def test_and_gate(self, a, b, expected):
        sim = simulator_for(self.AND_SOURCE)
        sim.set_input("a", a)
        sim.set_input("b", b)
        result = sim.settle()
        assert result.stable is True
        assert sim.get_wire("c") == expected

    @pytest.mark.parametrize(
        "gate, a, b, expected",
        [
            ("or", 0, 0, LOW),
            ("or", 0, 1, HIGH),
            ("nand", 1, 1, LOW),
            ("nand", 0, 1, HIGH),
            ("nor", 0, 0, HIGH),
            ("nor", 1, 0, LOW),
            ("xor", 1, 0, HIGH),
            ("xor", 1, 1, LOW),
        ],
    )
    def test_two_input_gates(self, gate, a, b, expected):
        sim = simulator_for(f"wire a\nwire b\nwire y\n{gate} g1 (input: a, b; output: y)")
        sim.set_input("a", a)
        sim.set_input("b", b)
        sim.settle()
        assert sim.get_wire("y") == expected

    def test_xor_is_parity(self):
        sim = simulator_for("wire a\nwire b\nwire c\nwire y\nxor g1 (input: a, b, c; output: y)")
        for name in ("a", "b", "c"):
            sim.set_input(name, 1)
        sim.settle()
        assert sim.get_wire("y") == HIGH

    def test_chain_of_inverters(self):
        sim = simulator_for(
            "wire a\nwire b\nwire c\nwire d\n"
            "not n1 (input: a; output: b)\n"
            "not n2 (input: b; output: c)\n"
            "buf b1 (input: c; output: d)"
        )
        sim.set_input("a", 1)
        sim.settle()
        assert (sim.get_wire("b"), sim.get_wire("c"), sim.get_wire("d")) == (LOW, HIGH, HIGH)

    @pytest.mark.parametrize("sel, expected", [(0, HIGH), (1, LOW)])
    def test_mux_selects(self, sel, expected):
        sim = simulator_for("wire a\nwire b\nwire s\nwire y\nmux m1 (input: a, b, s; output: y)")
        sim.set_input("a", 1)
        sim.set_input("b", 0)
        sim.set_input("s", sel)
        sim.settle()
        assert sim.get_wire("y") == expected

    def test_bit_indexed_references(self):
        sim = simulator_for("wire bus[4]\nwire y\nand g1 (input: bus[1], bus[3]; output: y)")
        sim.set_input("bus", 1, bit=1)
        sim.set_input("bus", 1, bit=3)
        sim.settle()
        assert sim.get_wire("y") == HIGH
        assert sim.get_wire("bus", bit=0) == LOW


class TestSequential:
    DFF_SOURCE = "wire d\nwire clk\nwire q\ndff f1 (input: d, clk; output: q)"

    def test_dff_holds_until_clocked(self):
        sim = simulator_for(self.DFF_SOURCE)
        sim.set_input("d", 1)
        sim.settle()
        assert sim.get_wire("q") == LOW
        result = sim.step()
        assert result.cycle == 1
        assert sim.get_wire("q") == HIGH

    def test_run_counts_cycles(self):
        sim = simulator_for(self.DFF_SOURCE)
        result = sim.run(3)
        assert result.cycle == 3
        assert sim.cycle == 3

    def test_toggle_flip_flop(self):
        sim = simulator_for(
            "wire q\nwire nq\nwire clk\n"
            "not n1 (input: q; output: nq)\n"
            "dff f1 (input: nq, clk; output: q)"
        )
        values = []
        for _ in range(4):
            sim.step()
            values.append(sim.get_wire("q"))
        assert values == [HIGH, LOW, HIGH, LOW]

    def test_latch_transparent_then_holds(self):
        sim = simulator_for("wire d\nwire en\nwire q\nlatch l1 (input: d, en; output: q)")
        sim.set_input("d", 1)
        sim.set_input("en", 1)
        sim.settle()
        assert sim.get_wire("q") == HIGH
        sim.set_input("en", 0)
        sim.set_input("d", 0)
        sim.settle()
        assert sim.get_wire("q") == HIGH


class TestStability:
    def test_ring_oscillator_does_not_stabilize(self):
        sim = simulator_for("wire a\nnot n1 (input: a; output: a)", max_iterations=10)
        result = sim.settle()
        assert result.stable is False
        assert sim.stable is False
        assert result.error == "Circuit did not stabilize after 10 iterations"

    def test_run_stops_after_error(self):
        sim = simulator_for("wire a\nnot n1 (input: a; output: a)", max_iterations=4)
        result = sim.run(5)
        assert result.cycle == 0
        assert result.error is not None


class TestAccess:
    def test_unknown_wire_raises(self):
        sim = simulator_for("wire a")
        with pytest.raises(ValueError, match="Unknown wire 'b'"):
            sim.set_input("b", 1)
        with pytest.raises(ValueError):
            sim.get_wire("b")

    def test_bit_out_of_range(self):
        sim = simulator_for("wire a")
        with pytest.raises(ValueError, match="out of range"):
            sim.set_input("a", 1, bit=3)
        assert sim.get_wire("a", bit=3) == X

    def test_simulator_does_not_mutate_source(self):
        circuit = compile_source("wire a\nwire b\nnot n1 (input: a; output: b)")
        sim = GateSimulator(circuit)
        sim.settle()
        assert sim.get_wire("b") == HIGH
        assert circuit.wires[1].state == [0]

    def test_snapshot_reflects_state(self):
        sim = simulator_for("wire a\nwire b\nnot n1 (input: a; output: b)")
        sim.step()
        snapshot = sim.snapshot()
        assert snapshot.cycle == 1
        assert snapshot.stable is True
        assert snapshot.wires[1].state == [1]

    def test_gate_with_bad_port_reads_unknown(self):
        circuit = CircuitData(
            wires=[CircuitWire(id=0, name="y", width=1, state=[0])],
            gates=[CircuitGate(id=0, name="g", type="NOT", inputs=[GatePort(wire=5)], outputs=[GatePort(wire=0)])],
        )
        sim = GateSimulator(circuit)
        sim.settle()
        assert sim.get_wire("y") == X
