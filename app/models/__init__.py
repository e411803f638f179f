"""
Pure Python data models for relay circuits.

This package contains plain data classes that represent circuit elements.
"""

from .circuit import CircuitModel, ExternalPort, validate_circuit_data
from .component import (
    COMPONENT_CATEGORIES,
    COMPONENT_PORTS,
    COMPONENT_TYPES,
    GATE_COMPONENT_TYPES,
    ComponentData,
    ComponentState,
    SignalValue,
)
from .node import NetData
from .wire import WireData

__all__ = [
    "CircuitModel",
    "ExternalPort",
    "validate_circuit_data",
    "ComponentData",
    "ComponentState",
    "SignalValue",
    "COMPONENT_TYPES",
    "COMPONENT_PORTS",
    "COMPONENT_CATEGORIES",
    "GATE_COMPONENT_TYPES",
    "NetData",
    "WireData",
]
