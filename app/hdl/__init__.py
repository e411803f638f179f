from .ast_nodes import HdlAst, HdlGateNode, HdlParseError, HdlWireNode, HdlWireRef
from .gate_types import GATE_DEFINITIONS, GATE_TYPES, GateDefinition
from .generator import (CircuitData, CircuitGate, CircuitWire, GatePort,
                        HdlGenerationError, HdlToCircuitGenerator, generate)
from .parser import HdlParser, parse
from .validator import HdlValidationError, HdlValidationResult, HdlValidator, validate

__all__ = [
    'HdlAst', 'HdlGateNode', 'HdlParseError', 'HdlWireNode', 'HdlWireRef',
    'GATE_DEFINITIONS', 'GATE_TYPES', 'GateDefinition',
    'CircuitData', 'CircuitGate', 'CircuitWire', 'GatePort',
    'HdlGenerationError', 'HdlToCircuitGenerator', 'generate',
    'HdlParser', 'parse',
    'HdlValidationError', 'HdlValidationResult', 'HdlValidator', 'validate',
]
