"""
simulation/relay_simulator.py

Fixpoint simulation of relay circuits.

Each step drives sources onto nets, energises relay coils, moves relay
switches and pushes signals across closed contacts until nothing changes
or the iteration cap is hit.
"""

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from models.circuit import CircuitModel
from models.component import ComponentData, ComponentState, SignalValue
from simulation.netlist import Netlist, build_netlist

logger = logging.getLogger(__name__)

# Maximum fixpoint iterations per step
MAX_ITERATIONS = 1000

NO_CIRCUIT_ERROR = "No circuit loaded"


@dataclass
class SimulationResult:
    """Result of one relay simulation step."""

    converged: bool
    iterations: int
    component_states: dict[str, ComponentState] = field(default_factory=dict)
    wire_signals: dict[str, SignalValue] = field(default_factory=dict)
    error: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "converged": self.converged,
            "iterations": self.iterations,
            "component_states": {cid: s.to_dict() for cid, s in self.component_states.items()},
            "wire_signals": {wid: int(v) for wid, v in self.wire_signals.items()},
        }
        if self.error:
            data["error"] = self.error
        return data


class RelaySimulator:
    """
    Simulates one relay circuit.

    An instance owns the mutable state (nets, component states, input values)
    of exactly one loaded circuit. Use a second instance to simulate a second
    circuit.
    """

    def __init__(self, max_iterations: int = MAX_ITERATIONS):
        self.max_iterations = max_iterations
        self.circuit: Optional[CircuitModel] = None
        self.cycle = 0
        self._component_states: dict[str, ComponentState] = {}
        self._input_values: dict[str, SignalValue] = {}
        self._netlist = Netlist()

    # --- Loading ---

    def load_circuit(self, circuit: CircuitModel) -> None:
        """Load a circuit, rebuilding nets and component state from scratch."""
        self.circuit = circuit
        self.cycle = 0
        self._component_states = {}
        self._input_values = {}

        for component in circuit.components.values():
            self._component_states[component.component_id] = ComponentState(
                coil_energized=False,
                switch_closed=component.component_type == "relay_nc",
            )

        self._netlist = build_netlist(circuit.wires)

        for port in circuit.inputs:
            self._input_values[port.component_id] = SignalValue.LOW

        logger.debug(
            "Loaded circuit '%s': %d components, %d nets",
            circuit.name,
            len(circuit.components),
            len(self._netlist),
        )

    def reset(self) -> None:
        """Reset the simulation to the freshly loaded state."""
        if self.circuit is not None:
            self.load_circuit(self.circuit)

    @property
    def netlist(self) -> Netlist:
        return self._netlist

    # --- Inputs / outputs ---

    def resolve_input(self, input_id: str) -> Optional[str]:
        """
        Map an external port id, port name or component id to the id of the
        input component it drives. Returns None if nothing matches.
        """
        if self.circuit is None:
            return None

        for port in self.circuit.inputs:
            if input_id in (port.port_id, port.name, port.component_id):
                return port.component_id
        component = self.circuit.components.get(input_id)
        if component is not None and component.component_type == "input":
            return input_id
        return None

    def set_input(self, input_id: str, value) -> None:
        """Set an input by port id, port name or component id. Raises ValueError if unknown."""
        component_id = self.resolve_input(input_id)
        if component_id is None:
            raise ValueError(f"Unknown input '{input_id}'")
        self._input_values[component_id] = SignalValue(value)

    def get_input(self, input_id: str) -> SignalValue:
        component_id = self.resolve_input(input_id) or input_id
        return self._input_values.get(component_id, SignalValue.LOW)

    def toggle_input(self, input_id: str) -> None:
        current = self.get_input(input_id)
        self.set_input(input_id, SignalValue.LOW if current == SignalValue.HIGH else SignalValue.HIGH)

    def get_output(self, output_id: str) -> SignalValue:
        """Signal seen by an output, looked up by external port id or component id."""
        if self.circuit is None:
            return SignalValue.UNKNOWN

        for port in self.circuit.outputs:
            if output_id in (port.port_id, port.component_id):
                state = self._component_states.get(port.component_id)
                if state is None:
                    return SignalValue.UNKNOWN
                return state.port_values.get("in", SignalValue.UNKNOWN)
        return SignalValue.UNKNOWN

    def get_component_state(self, component_id: str) -> Optional[ComponentState]:
        return self._component_states.get(component_id)

    def get_all_component_states(self) -> dict[str, ComponentState]:
        return {cid: state.copy() for cid, state in self._component_states.items()}

    # --- Simulation ---

    def step(self) -> SimulationResult:
        """Propagate signals until stable or the iteration cap is reached."""
        if self.circuit is None:
            return SimulationResult(converged=False, iterations=0, error=NO_CIRCUIT_ERROR)

        for net in self._netlist.nets.values():
            net.reset_signal()

        iterations = 0
        changed = True
        while changed and iterations < self.max_iterations:
            iterations += 1
            changed = False
            changed = self._drive_sources() or changed
            changed = self._update_coils() or changed
            changed = self._update_switches() or changed
            changed = self._propagate_contacts() or changed
            self._update_port_values()

        converged = not changed

        # Undriven nets are pulled to ground
        for net in self._netlist.nets.values():
            if not net.has_drive:
                net.signal = SignalValue.LOW
        self._update_port_values()

        self.cycle += 1

        wire_signals = {}
        for wire in self.circuit.wires:
            net = self._netlist.net_for_wire(wire.wire_id)
            wire_signals[wire.wire_id] = net.signal if net else SignalValue.UNKNOWN

        error = None
        if not converged:
            error = f"Simulation did not converge after {iterations} iterations"
            logger.warning("%s (circuit '%s')", error, self.circuit.name)
        else:
            logger.debug("Converged after %d iterations", iterations)

        return SimulationResult(
            converged=converged,
            iterations=iterations,
            component_states=self.get_all_component_states(),
            wire_signals=wire_signals,
            error=error,
        )

    def run_with_inputs(self, inputs: Mapping[str, int]) -> dict[str, SignalValue]:
        """Set inputs, run one step and return every output's value."""
        for input_id, value in inputs.items():
            self.set_input(input_id, value)

        self.step()

        outputs = {}
        if self.circuit is not None:
            for port in self.circuit.outputs:
                outputs[port.port_id] = self.get_output(port.port_id)
        return outputs

    # --- Phases ---

    def _components(self) -> list[ComponentData]:
        return list(self.circuit.components.values())

    def _port_signal(self, component_id: str, port_id: str) -> SignalValue:
        net = self._netlist.net_for_terminal(component_id, port_id)
        return net.signal if net else SignalValue.UNKNOWN

    def _drive(self, component_id: str, port_id: str, value: SignalValue) -> bool:
        net = self._netlist.net_for_terminal(component_id, port_id)
        if net is None:
            return False
        return net.drive(value)

    def _drive_sources(self) -> bool:
        changed = False
        for component in self._components():
            if component.component_type == "power":
                changed = self._drive(component.component_id, "out", SignalValue.HIGH) or changed
            elif component.component_type == "input":
                value = self._input_values.get(component.component_id, SignalValue.LOW)
                changed = self._drive(component.component_id, "out", value) or changed
        return changed

    def _update_coils(self) -> bool:
        # Only coil_in is inspected; coil_out is a cosmetic return terminal
        changed = False
        for component in self._components():
            if not component.is_relay():
                continue
            state = self._component_states[component.component_id]
            energized = self._port_signal(component.component_id, "coil_in") == SignalValue.HIGH
            if state.coil_energized != energized:
                state.coil_energized = energized
                changed = True
        return changed

    def _update_switches(self) -> bool:
        changed = False
        for component in self._components():
            state = self._component_states[component.component_id]
            if component.component_type == "relay_no":
                closed = state.coil_energized
            elif component.component_type == "relay_nc":
                closed = not state.coil_energized
            else:
                continue
            if state.switch_closed != closed:
                state.switch_closed = closed
                changed = True
        return changed

    def _propagate_contacts(self) -> bool:
        changed = False
        for component in self._components():
            if not component.is_relay():
                continue
            if not self._component_states[component.component_id].switch_closed:
                continue

            cid = component.component_id
            contact_in = self._port_signal(cid, "contact_in")
            contact_out = self._port_signal(cid, "contact_out")

            if contact_in != SignalValue.UNKNOWN:
                changed = self._drive(cid, "contact_out", contact_in) or changed
            if contact_out != SignalValue.UNKNOWN:
                changed = self._drive(cid, "contact_in", contact_out) or changed
        return changed

    def _update_port_values(self) -> None:
        for component in self._components():
            state = self._component_states[component.component_id]
            for port_id in component.get_ports():
                state.port_values[port_id] = self._port_signal(component.component_id, port_id)
