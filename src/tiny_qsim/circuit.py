"""
Quantum circuit builder.

A ``Circuit`` owns one StateVector and one random generator. Every gate
method applies to the state immediately, appends an ``Operation`` to the
log and returns ``self`` for chaining; ``measure`` returns the outcome.
The log drives drawing, QASM export and trajectory replays.

Example
-------
>>> from tiny_qsim import Circuit
>>> qc = Circuit(2, seed=42)
>>> qc.h(0).cx(0, 1)
Circuit(n_qubits=2, depth=2, gates=2)
>>> round(qc.probability(3), 6)
0.5
>>> outcome = qc.measure(0)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from numpy import ndarray

from tiny_qsim.config import DEFAULT_PRECISION
from tiny_qsim.statevector import StateVector

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Operation tags
# ---------------------------------------------------------------------------

# tag -> StateVector method
_GATE_METHODS = {
    "i": "i", "x": "x", "y": "y", "z": "z", "h": "h",
    "s": "s", "sdg": "sdg", "t": "t", "tdg": "tdg",
    "rx": "rx", "ry": "ry", "rz": "rz", "p": "phase",
    "cx": "cnot", "cy": "cy", "cz": "cz", "ch": "ch", "cs": "cs", "ct": "ct",
    "cp": "cp", "swap": "swap", "ccx": "toffoli", "cswap": "cswap",
}

GATE_TAGS = frozenset(_GATE_METHODS)
PARAM_TAGS = frozenset({"rx", "ry", "rz", "p", "cp"})
NOISE_TAGS = frozenset(
    {"bit_flip", "phase_flip", "depolarizing", "amplitude_damping", "phase_damping"}
)


# ---------------------------------------------------------------------------
# Operation: one entry of the circuit log
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Operation:
    """A recorded gate, measurement, barrier or noise call."""
    tag: str
    qubits: tuple[int, ...]
    param: Optional[float] = None

    def __post_init__(self) -> None:
        if len(self.qubits) > 3 and self.tag != "barrier":
            raise ValueError(f"Operation '{self.tag}' has {len(self.qubits)} qubits, max 3")

    @property
    def is_gate(self) -> bool:
        return self.tag in GATE_TAGS

    @property
    def is_measurement(self) -> bool:
        return self.tag == "measure"

    @property
    def is_noise(self) -> bool:
        return self.tag in NOISE_TAGS


def apply_operation(state: StateVector, op: Operation, rng) -> Optional[int]:
    """
    Replay one operation on ``state``.

    Returns the outcome for a measurement, else None. Barriers are no-ops.
    """
    if op.tag == "barrier":
        return None
    if op.tag == "measure":
        return state.measure(op.qubits[0], rng)
    if op.tag in NOISE_TAGS:
        getattr(state, op.tag)(op.qubits[0], op.param, rng)
        return None
    if op.tag not in _GATE_METHODS:
        raise ValueError(f"Unknown operation '{op.tag}'")
    method = getattr(state, _GATE_METHODS[op.tag])
    if op.param is None:
        method(*op.qubits)
    else:
        method(*op.qubits, op.param)
    return None


# ---------------------------------------------------------------------------
# Circuit
# ---------------------------------------------------------------------------

class Circuit:
    """
    Fluent circuit builder over an eagerly evolved state vector.

    Parameters
    ----------
    n_qubits : int
        Number of qubits (>= 1).
    seed : int, optional
        Seed for the circuit's own generator (measurement and noise).
    precision : type, optional
        ``numpy.float64`` (default) or ``numpy.float32``.
    """

    def __init__(
        self, n_qubits: int, seed: Optional[int] = None, precision=DEFAULT_PRECISION
    ) -> None:
        self._state = StateVector(n_qubits, precision)
        self.n_qubits = self._state.n_qubits
        self.seed = seed
        self._rng = np.random.default_rng(seed)
        self._operations: list[Operation] = []
        self._outcomes: list[tuple[int, int]] = []

    # -- Properties ---------------------------------------------------------

    @property
    def operations(self) -> list[Operation]:
        """Copy of the operation log."""
        return list(self._operations)

    @property
    def state(self) -> StateVector:
        """Copy of the current state."""
        return self._state.copy()

    @property
    def precision(self) -> type:
        return self._state.precision

    @property
    def outcomes(self) -> list[tuple[int, int]]:
        """(qubit, outcome) for every measurement so far, in order."""
        return list(self._outcomes)

    @property
    def depth(self) -> int:
        """Circuit depth (longest path through any qubit)."""
        qubit_depth = [0] * self.n_qubits
        for op in self._operations:
            if not op.is_gate:
                continue
            max_d = max(qubit_depth[q] for q in op.qubits)
            for q in op.qubits:
                qubit_depth[q] = max_d + 1
        return max(qubit_depth)

    @property
    def num_gates(self) -> int:
        """Total number of gates (excluding measurements, barriers and noise)."""
        return sum(1 for op in self._operations if op.is_gate)

    # -- Queries ------------------------------------------------------------

    def probability(self, k: int) -> float:
        """Probability of basis state |k⟩ in the current state."""
        return self._state.probability(k)

    def probabilities(self) -> ndarray:
        return self._state.probabilities()

    # -- Internal helpers ---------------------------------------------------

    def _add(
        self, tag: str, qubits: tuple[int, ...], param: Optional[float] = None, rng=None
    ) -> Optional[int]:
        """Apply an operation to the state, then record it."""
        op = Operation(tag, qubits, None if param is None else float(param))
        result = apply_operation(self._state, op, self._rng if rng is None else rng)
        self._operations.append(op)
        logger.debug("applied %s on %s", tag, qubits)
        return result

    # -- Single-qubit gates -------------------------------------------------

    def i(self, qubit: int) -> Circuit:
        """Identity gate."""
        self._add("i", (qubit,))
        return self

    def x(self, qubit: int) -> Circuit:
        """Pauli-X gate."""
        self._add("x", (qubit,))
        return self

    def y(self, qubit: int) -> Circuit:
        """Pauli-Y gate."""
        self._add("y", (qubit,))
        return self

    def z(self, qubit: int) -> Circuit:
        """Pauli-Z gate."""
        self._add("z", (qubit,))
        return self

    def h(self, qubit: int) -> Circuit:
        """Hadamard gate."""
        self._add("h", (qubit,))
        return self

    def s(self, qubit: int) -> Circuit:
        self._add("s", (qubit,))
        return self

    def sdg(self, qubit: int) -> Circuit:
        self._add("sdg", (qubit,))
        return self

    def t(self, qubit: int) -> Circuit:
        self._add("t", (qubit,))
        return self

    def tdg(self, qubit: int) -> Circuit:
        self._add("tdg", (qubit,))
        return self

    # -- Parameterized single-qubit gates -----------------------------------

    def rx(self, qubit: int, theta: float) -> Circuit:
        """Rotation around X-axis."""
        self._add("rx", (qubit,), theta)
        return self

    def ry(self, qubit: int, theta: float) -> Circuit:
        """Rotation around Y-axis."""
        self._add("ry", (qubit,), theta)
        return self

    def rz(self, qubit: int, theta: float) -> Circuit:
        """Rotation around Z-axis."""
        self._add("rz", (qubit,), theta)
        return self

    def p(self, qubit: int, phi: float) -> Circuit:
        """Phase gate."""
        self._add("p", (qubit,), phi)
        return self

    phase = p

    # -- Two-qubit gates ----------------------------------------------------

    def cx(self, control: int, target: int) -> Circuit:
        """Controlled-NOT (CNOT) gate."""
        self._add("cx", (control, target))
        return self

    cnot = cx

    def cy(self, control: int, target: int) -> Circuit:
        self._add("cy", (control, target))
        return self

    def cz(self, control: int, target: int) -> Circuit:
        """Controlled-Z gate."""
        self._add("cz", (control, target))
        return self

    def ch(self, control: int, target: int) -> Circuit:
        self._add("ch", (control, target))
        return self

    def cs(self, control: int, target: int) -> Circuit:
        self._add("cs", (control, target))
        return self

    def ct(self, control: int, target: int) -> Circuit:
        self._add("ct", (control, target))
        return self

    def cp(self, control: int, target: int, phi: float) -> Circuit:
        """Controlled-Phase gate."""
        self._add("cp", (control, target), phi)
        return self

    def swap(self, q1: int, q2: int) -> Circuit:
        """SWAP gate."""
        self._add("swap", (q1, q2))
        return self

    # -- Three-qubit gates --------------------------------------------------

    def ccx(self, c1: int, c2: int, target: int) -> Circuit:
        """Toffoli (CCX) gate."""
        self._add("ccx", (c1, c2, target))
        return self

    toffoli = ccx

    def cswap(self, control: int, q1: int, q2: int) -> Circuit:
        """Fredkin (CSWAP) gate."""
        self._add("cswap", (control, q1, q2))
        return self

    fredkin = cswap

    # -- Measurement --------------------------------------------------------

    def measure(self, qubit: int, rng=None) -> int:
        """
        Measure a qubit and collapse the state.

        Parameters
        ----------
        qubit : int
            Qubit to measure.
        rng : numpy.random.Generator, optional
            Random source for this draw; defaults to the circuit's own.

        Returns
        -------
        int
            0 or 1.
        """
        outcome = self._add("measure", (qubit,), rng=rng)
        self._outcomes.append((qubit, outcome))
        return outcome

    def measure_all(self, rng=None) -> list[int]:
        """Measure every qubit in order; returns the outcomes."""
        return [self.measure(q, rng) for q in range(self.n_qubits)]

    # -- Barriers -----------------------------------------------------------

    def barrier(self, *qubits: int) -> Circuit:
        """Add a barrier (visual boundary, no effect on the state)."""
        if not qubits:
            qubits = tuple(range(self.n_qubits))
        self._state._check_qubits(*qubits)
        self._operations.append(Operation("barrier", tuple(qubits)))
        return self

    # -- Noise --------------------------------------------------------------

    def bit_flip(self, qubit: int, p: float, rng=None) -> Circuit:
        self._add("bit_flip", (qubit,), p, rng)
        return self

    def phase_flip(self, qubit: int, p: float, rng=None) -> Circuit:
        self._add("phase_flip", (qubit,), p, rng)
        return self

    def depolarizing(self, qubit: int, p: float, rng=None) -> Circuit:
        self._add("depolarizing", (qubit,), p, rng)
        return self

    def amplitude_damping(self, qubit: int, gamma: float, rng=None) -> Circuit:
        self._add("amplitude_damping", (qubit,), gamma, rng)
        return self

    def phase_damping(self, qubit: int, gamma: float, rng=None) -> Circuit:
        self._add("phase_damping", (qubit,), gamma, rng)
        return self

    # -- Replay -------------------------------------------------------------

    def reset(self) -> Circuit:
        """Return to |0...0⟩ with an empty log; the generator keeps its position."""
        self._state.reset()
        self._operations.clear()
        self._outcomes.clear()
        return self

    def extend(self, operations: Sequence[Operation]) -> Circuit:
        """Apply and record a sequence of operations, e.g. another circuit's log."""
        for op in operations:
            if op.tag == "barrier":
                self.barrier(*op.qubits)
            elif op.tag == "measure":
                self.measure(op.qubits[0])
            else:
                self._add(op.tag, op.qubits, op.param)
        return self

    # -- Display ------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"Circuit(n_qubits={self.n_qubits}, "
            f"depth={self.depth}, gates={self.num_gates})"
        )

    def draw(self) -> str:
        """ASCII diagram of the operation log."""
        from tiny_qsim.visualization import draw_circuit

        return draw_circuit(self)

    def to_qasm(self) -> str:
        """Export the operation log as OpenQASM 2.0."""
        from tiny_qsim.qasm import to_qasm

        return to_qasm(self)
