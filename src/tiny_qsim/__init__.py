"""
tiny-qsim: an explicit state-vector quantum simulator.

Features:
- O(2^n) gate kernels that never build a 2^n x 2^n matrix
- Fluent API: Circuit(2).h(0).cx(0, 1)
- Projective measurement with collapse, seeded and reproducible
- Monte Carlo wavefunction noise: bit/phase flip, depolarizing, damping
- OpenQASM 2.0 import and export
- ASCII visualization of circuits and states

Quick Start:
    >>> from tiny_qsim import Circuit
    >>> qc = Circuit(2, seed=1).h(0).cx(0, 1)
    >>> print(qc.probabilities())  # [0.5 0.  0.  0.5]
    >>> qc.measure(0)  # 0 or 1, and qubit 1 follows

Noise:
    >>> from tiny_qsim import NoiseModel, TrajectorySimulator, BitFlip
    >>> noise = NoiseModel().add_all_qubit_error(BitFlip(0.05))
    >>> result = TrajectorySimulator(noise, seed=3).run(qc, trajectories=1000)
"""

import logging

__version__ = "1.0.0"

# Core components
from tiny_qsim import gates
from tiny_qsim.circuit import Circuit, Operation
from tiny_qsim.complex import ComplexScalar
from tiny_qsim.config import setup_logging
from tiny_qsim.exceptions import (
    DegenerateStateError,
    DimensionError,
    DuplicateQubitError,
    PreconditionError,
    QasmParseError,
    QubitIndexError,
    SimulatorError,
)
from tiny_qsim.gates import GateMatrix
from tiny_qsim.noise import (
    AmplitudeDamping,
    BitFlip,
    Depolarizing,
    NoiseChannel,
    NoiseModel,
    PhaseDamping,
    PhaseFlip,
    TrajectoryResult,
    TrajectorySimulator,
)
from tiny_qsim.qasm import QasmParser, parse_qasm, to_qasm
from tiny_qsim.statevector import StateVector

# Visualization
from tiny_qsim.visualization import draw_circuit, show_counts, show_probabilities, show_state

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core
    "Circuit",
    "Operation",
    "StateVector",
    "GateMatrix",
    "ComplexScalar",
    "gates",
    # Noise
    "NoiseChannel",
    "BitFlip",
    "PhaseFlip",
    "Depolarizing",
    "AmplitudeDamping",
    "PhaseDamping",
    "NoiseModel",
    "TrajectorySimulator",
    "TrajectoryResult",
    # QASM
    "parse_qasm",
    "QasmParser",
    "to_qasm",
    # Visualization
    "draw_circuit",
    "show_state",
    "show_probabilities",
    "show_counts",
    # Errors
    "SimulatorError",
    "PreconditionError",
    "QubitIndexError",
    "DuplicateQubitError",
    "DimensionError",
    "DegenerateStateError",
    "QasmParseError",
    # Config
    "setup_logging",
]
