"""
simulation/circuit_validator.py

Pre-simulation relay circuit validation.
"""

from models.component import COMPONENT_TYPES, RELAY_PORTS


def validate_circuit(model):
    """
    Validate a relay circuit before simulation.

    Args:
        model: CircuitModel

    Returns:
        (is_valid, errors, warnings) where:
            is_valid (bool): False if any errors found
            errors (list[str]): problems that block simulation
            warnings (list[str]): non-blocking issues
    """
    errors = []
    warnings = []
    components = model.components

    # 1. Circuit must have components
    if not components:
        errors.append("Circuit has no components. Add at least one component to simulate.")
        return False, errors, warnings

    # 2. Every component type must be known
    for comp in components.values():
        if comp.component_type not in COMPONENT_TYPES:
            errors.append(f"{comp.component_id} has unknown component type '{comp.component_type}'.")

    # 3. Wires may only attach to ports the component actually has
    connected_terminals = set()
    for wire in model.wires:
        for component_id, port_id in wire.get_terminals():
            comp = components.get(component_id)
            if comp is None:
                errors.append(f"Wire {wire.wire_id} references missing component '{component_id}'.")
                continue
            if comp.component_type in COMPONENT_TYPES and not comp.has_port(port_id):
                errors.append(
                    f"Wire {wire.wire_id} connects to port '{port_id}' which "
                    f"{comp.component_id} ({comp.component_type}) does not have."
                )
                continue
            connected_terminals.add((component_id, port_id))

    # 4. External ports must point at input/output components
    for port in model.inputs:
        comp = components.get(port.component_id)
        if comp is None or comp.component_type != "input":
            errors.append(f"Circuit input '{port.port_id}' is not bound to an input component.")
    for port in model.outputs:
        comp = components.get(port.component_id)
        if comp is None or comp.component_type != "output":
            errors.append(f"Circuit output '{port.port_id}' is not bound to an output component.")

    # 5. Relays with nothing on the coil or contacts do nothing
    for comp in components.values():
        if not comp.is_relay():
            continue
        if (comp.component_id, "coil_in") not in connected_terminals:
            warnings.append(f"{comp.component_id} ({comp.component_type}) has an unconnected coil.")
        unconnected = [
            port for port in RELAY_PORTS[2:] if (comp.component_id, port) not in connected_terminals
        ]
        if unconnected:
            warnings.append(
                f"{comp.component_id} ({comp.component_type}) has unconnected contact(s): {unconnected}."
            )

    # 6. Without power only the inputs can drive anything
    if not any(c.component_type == "power" for c in components.values()):
        warnings.append(
            "Circuit has no power source. Relay contacts will only carry input signals."
        )

    is_valid = len(errors) == 0
    return is_valid, errors, warnings
