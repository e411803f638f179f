"""
Shared test fixtures for the relaylab test suite.

All fixtures build pure-Python model objects.
"""

import sys
from pathlib import Path

# Ensure app/ is on sys.path so bare imports (models, simulation, hdl, grading, controllers)
# work when running individual test files (e.g., python -m pytest app/tests/unit/test_foo.py).
_app_dir = str(Path(__file__).resolve().parent.parent)
if _app_dir not in sys.path:
    sys.path.insert(0, _app_dir)

import pytest
from models.circuit import CircuitModel
from models.component import ComponentData
from models.wire import WireData


def make_component(component_type, component_id, position=(0.0, 0.0)):
    """Helper to create a ComponentData with minimal boilerplate."""
    return ComponentData(
        component_id=component_id,
        component_type=component_type,
        position=position,
    )


def make_wire(wire_id, source_id, source_port, target_id, target_port):
    """Helper to create a WireData."""
    return WireData(
        wire_id=wire_id,
        source_component_id=source_id,
        source_port=source_port,
        target_component_id=target_id,
        target_port=target_port,
    )


def make_circuit(components, wires, inputs=(), outputs=(), name="test"):
    """
    Helper to assemble a CircuitModel as a loaded file would, without the
    add_component()/add_wire() checks.

    inputs/outputs are (port_id, component_id) pairs.
    """
    model = CircuitModel(
        circuit_id=name,
        name=name,
        components={comp.component_id: comp for comp in components},
        wires=list(wires),
    )
    for port_id, component_id in inputs:
        model.add_input(component_id, name=port_id, port_id=port_id)
    for port_id, component_id in outputs:
        model.add_output(component_id, name=port_id, port_id=port_id)
    return model


@pytest.fixture
def not_circuit():
    """
    IN -> R1.coil_in (NC relay), R1.coil_out -> GND
    VCC -> R1.contact_in, R1.contact_out -> OUT
    """
    components = [
        make_component("input", "in1"),
        make_component("relay_nc", "r1", (100, 0)),
        make_component("power", "vcc", (100, -100)),
        make_component("ground", "gnd", (100, 100)),
        make_component("output", "out1", (200, 0)),
    ]
    wires = [
        make_wire("w1", "in1", "out", "r1", "coil_in"),
        make_wire("w2", "r1", "coil_out", "gnd", "in"),
        make_wire("w3", "vcc", "out", "r1", "contact_in"),
        make_wire("w4", "r1", "contact_out", "out1", "in"),
    ]
    return make_circuit(components, wires, inputs=[("in", "in1")], outputs=[("out", "out1")], name="not")


@pytest.fixture
def and_circuit():
    """
    Two NO relays in series:
    VCC -> R1 contacts -> R2 contacts -> OUT, A drives R1's coil, B drives R2's coil.
    """
    components = [
        make_component("input", "in_a"),
        make_component("input", "in_b", (0, 100)),
        make_component("relay_no", "r1", (100, 0)),
        make_component("relay_no", "r2", (200, 0)),
        make_component("power", "vcc", (100, -100)),
        make_component("ground", "gnd", (150, 200)),
        make_component("output", "out1", (300, 0)),
    ]
    wires = [
        make_wire("w1", "in_a", "out", "r1", "coil_in"),
        make_wire("w2", "in_b", "out", "r2", "coil_in"),
        make_wire("w3", "r1", "coil_out", "gnd", "in"),
        make_wire("w4", "r2", "coil_out", "gnd", "in"),
        make_wire("w5", "vcc", "out", "r1", "contact_in"),
        make_wire("w6", "r1", "contact_out", "r2", "contact_in"),
        make_wire("w7", "r2", "contact_out", "out1", "in"),
    ]
    return make_circuit(
        components, wires, inputs=[("a", "in_a"), ("b", "in_b")], outputs=[("out", "out1")], name="and"
    )


@pytest.fixture
def or_circuit():
    """
    Two NO relays in parallel between VCC and OUT.
    """
    components = [
        make_component("input", "in_a"),
        make_component("input", "in_b", (0, 100)),
        make_component("relay_no", "r1", (100, 0)),
        make_component("relay_no", "r2", (100, 100)),
        make_component("power", "vcc", (50, -100)),
        make_component("ground", "gnd", (100, 200)),
        make_component("output", "out1", (200, 50)),
    ]
    wires = [
        make_wire("w1", "in_a", "out", "r1", "coil_in"),
        make_wire("w2", "in_b", "out", "r2", "coil_in"),
        make_wire("w3", "r1", "coil_out", "gnd", "in"),
        make_wire("w4", "r2", "coil_out", "gnd", "in"),
        make_wire("w5", "vcc", "out", "r1", "contact_in"),
        make_wire("w6", "vcc", "out", "r2", "contact_in"),
        make_wire("w7", "r1", "contact_out", "out1", "in"),
        make_wire("w8", "r2", "contact_out", "out1", "in"),
    ]
    return make_circuit(
        components, wires, inputs=[("a", "in_a"), ("b", "in_b")], outputs=[("out", "out1")], name="or"
    )


@pytest.fixture
def nand_circuit():
    """
    Two NC relays in parallel between VCC and OUT.
    """
    components = [
        make_component("input", "in_a"),
        make_component("input", "in_b", (0, 100)),
        make_component("relay_nc", "r1", (100, 0)),
        make_component("relay_nc", "r2", (100, 100)),
        make_component("power", "vcc", (50, -100)),
        make_component("output", "out1", (200, 50)),
    ]
    wires = [
        make_wire("w1", "in_a", "out", "r1", "coil_in"),
        make_wire("w2", "in_b", "out", "r2", "coil_in"),
        make_wire("w3", "vcc", "out", "r1", "contact_in"),
        make_wire("w4", "vcc", "out", "r2", "contact_in"),
        make_wire("w5", "r1", "contact_out", "out1", "in"),
        make_wire("w6", "r2", "contact_out", "out1", "in"),
    ]
    return make_circuit(
        components, wires, inputs=[("a", "in_a"), ("b", "in_b")], outputs=[("out", "out1")], name="nand"
    )


@pytest.fixture
def nor_circuit():
    """
    Two NC relays in series:
    VCC -> R1 contacts -> R2 contacts -> OUT.
    """
    components = [
        make_component("input", "in_a"),
        make_component("input", "in_b", (0, 100)),
        make_component("relay_nc", "r1", (100, 0)),
        make_component("relay_nc", "r2", (200, 0)),
        make_component("power", "vcc", (100, -100)),
        make_component("output", "out1", (300, 0)),
    ]
    wires = [
        make_wire("w1", "in_a", "out", "r1", "coil_in"),
        make_wire("w2", "in_b", "out", "r2", "coil_in"),
        make_wire("w3", "vcc", "out", "r1", "contact_in"),
        make_wire("w4", "r1", "contact_out", "r2", "contact_in"),
        make_wire("w5", "r2", "contact_out", "out1", "in"),
    ]
    return make_circuit(
        components, wires, inputs=[("a", "in_a"), ("b", "in_b")], outputs=[("out", "out1")], name="nor"
    )


@pytest.fixture
def xor_circuit():
    """
    (A AND NOT B) OR (NOT A AND B):
    VCC -> R1 (NO, A) -> R2 (NC, B) -> OUT in parallel with
    VCC -> R3 (NC, A) -> R4 (NO, B) -> OUT.
    """
    components = [
        make_component("input", "in_a"),
        make_component("input", "in_b", (0, 100)),
        make_component("relay_no", "r1", (100, 0)),
        make_component("relay_nc", "r2", (200, 0)),
        make_component("relay_nc", "r3", (100, 100)),
        make_component("relay_no", "r4", (200, 100)),
        make_component("power", "vcc", (50, -100)),
        make_component("output", "out1", (300, 50)),
    ]
    wires = [
        make_wire("w1", "in_a", "out", "r1", "coil_in"),
        make_wire("w2", "in_a", "out", "r3", "coil_in"),
        make_wire("w3", "in_b", "out", "r2", "coil_in"),
        make_wire("w4", "in_b", "out", "r4", "coil_in"),
        make_wire("w5", "vcc", "out", "r1", "contact_in"),
        make_wire("w6", "r1", "contact_out", "r2", "contact_in"),
        make_wire("w7", "r2", "contact_out", "out1", "in"),
        make_wire("w8", "vcc", "out", "r3", "contact_in"),
        make_wire("w9", "r3", "contact_out", "r4", "contact_in"),
        make_wire("w10", "r4", "contact_out", "out1", "in"),
    ]
    return make_circuit(
        components, wires, inputs=[("a", "in_a"), ("b", "in_b")], outputs=[("out", "out1")], name="xor"
    )


@pytest.fixture
def fighting_circuit():
    """
    VCC and an input held LOW on the same net.

    Each iteration the two sources overwrite each other, so the step never
    settles.
    """
    components = [
        make_component("power", "vcc"),
        make_component("input", "in1", (0, 100)),
        make_component("output", "out1", (100, 50)),
    ]
    wires = [
        make_wire("w1", "vcc", "out", "out1", "in"),
        make_wire("w2", "in1", "out", "out1", "in"),
    ]
    return make_circuit(components, wires, inputs=[("in", "in1")], outputs=[("out", "out1")], name="fight")
