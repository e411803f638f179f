from .gate_simulator import GateSimulator, GateStepResult
from .netlist import Netlist, NetlistBuilder, build_netlist
from .relay_simulator import RelaySimulator, SimulationResult

__all__ = [
    'GateSimulator',
    'GateStepResult',
    'Netlist',
    'NetlistBuilder',
    'build_netlist',
    'RelaySimulator',
    'SimulationResult',
]
