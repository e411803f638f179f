"""
Controllers for relaylab.

This package contains controller classes that orchestrate the compile,
simulation and verification pipelines.
"""

from .simulation_controller import PipelineResult, SimulationController

__all__ = [
    "PipelineResult",
    "SimulationController",
]
