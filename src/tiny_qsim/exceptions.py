"""
Exception hierarchy for tiny-qsim.

Precondition failures subclass ``ValueError`` so callers that already catch
bad-argument errors keep working. They are always raised before a state is
touched, which keeps every public operation atomic with respect to failure.
"""

from __future__ import annotations


class SimulatorError(Exception):
    """Base class for all tiny-qsim errors."""


class PreconditionError(SimulatorError, ValueError):
    """A caller violated an operation's precondition."""


class QubitIndexError(PreconditionError):
    """Qubit or basis-state index outside the register."""

    def __init__(self, name: str, index: int, limit: int) -> None:
        super().__init__(f"{name} {index} out of range [0, {limit})")
        self.index = index
        self.limit = limit


class DuplicateQubitError(PreconditionError):
    """The same qubit was passed in two roles of one gate."""

    def __init__(self, qubits) -> None:
        super().__init__(f"Qubits must be distinct, got {tuple(qubits)}")
        self.qubits = tuple(qubits)


class DimensionError(PreconditionError):
    """Array or register dimensions do not match."""


class DegenerateStateError(SimulatorError, ArithmeticError):
    """Renormalization was requested for a vector with zero norm."""


class QasmParseError(SimulatorError):
    """Error during QASM parsing."""

    def __init__(self, message: str, line: int = 0) -> None:
        super().__init__(f"Line {line}: {message}" if line else message)
        self.line = line
