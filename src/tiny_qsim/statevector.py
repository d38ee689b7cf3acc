"""
State vector simulation engine.

Key insight: never build full 2^n x 2^n gate matrices.
A single-qubit gate only mixes the amplitude pairs (i, i | 2^q) whose indices
differ in bit q. Viewing the vector as a (2, 2, ..., 2) tensor, the two halves
of the qubit axis are those pairs, so each gate is a vectorised 2x2 update
over N/2 pairs done on views of the amplitude buffer. Controls only narrow
the view. This keeps every kernel O(2^n).

Bit ordering is little-endian: qubit k is bit k of the basis index, so for
two qubits index 1 is qubit 0 set and index 2 is qubit 1 set.

Memory usage: 2^n * 16 bytes (complex128) or 2^n * 8 bytes (complex64),
plus at most one state-sized temporary while a gate runs
    - 10 qubits: 16 KB
    - 20 qubits: 16 MB
    - 25 qubits: 512 MB
"""

from __future__ import annotations

import logging
import operator

import numpy as np
from numpy import ndarray

from tiny_qsim import controlled, noise
from tiny_qsim import gates as g
from tiny_qsim.complex import ComplexScalar, complex_dtype, real_type
from tiny_qsim.config import DEFAULT_EPSILON, DEFAULT_PRECISION
from tiny_qsim.exceptions import (
    DegenerateStateError,
    DimensionError,
    DuplicateQubitError,
    PreconditionError,
    QubitIndexError,
)
from tiny_qsim.gates import GateMatrix

logger = logging.getLogger(__name__)


class StateVector:
    """
    Quantum state vector of ``n_qubits`` qubits.

    The vector is mutated in place by every gate, measurement and noise
    call. Construction copies any input buffer and ``amplitudes`` returns a
    copy, so a StateVector never aliases caller memory.

    Parameters
    ----------
    n_qubits : int
        Number of qubits (>= 1).
    precision : type, optional
        ``numpy.float64`` (default, complex128 storage) or ``numpy.float32``
        (complex64 storage).

    Example
    -------
    >>> sv = StateVector(2)
    >>> sv.h(0).cnot(0, 1)
    StateVector(qubits=2, dim=4)
    >>> round(sv.probability(3), 6)
    0.5
    """

    def __init__(self, n_qubits: int, precision=DEFAULT_PRECISION) -> None:
        n_qubits = operator.index(n_qubits)
        if n_qubits < 1:
            raise PreconditionError(f"n_qubits must be ≥ 1, got {n_qubits}")
        self.n_qubits = n_qubits
        self.dim = 1 << n_qubits
        self._data = np.zeros(self.dim, dtype=complex_dtype(precision))
        self._data[0] = 1.0  # |00...0⟩

    # -- Construction -------------------------------------------------------

    @classmethod
    def create(cls, n_qubits: int, precision=DEFAULT_PRECISION) -> StateVector:
        """Ground state |0...0⟩."""
        return cls(n_qubits, precision)

    @classmethod
    def from_basis_index(
        cls, n_qubits: int, k: int, precision=DEFAULT_PRECISION
    ) -> StateVector:
        """Computational basis state |k⟩ (little-endian bit labels)."""
        state = cls(n_qubits, precision)
        k = state._check_basis_index(k)
        state._data[0] = 0.0
        state._data[k] = 1.0
        return state

    @classmethod
    def from_amplitudes(cls, raw, precision=None) -> StateVector:
        """
        Build a state from raw amplitudes.

        The input is copied. Its length must be a power of two, but the
        caller is responsible for normalization: it is not checked.

        Parameters
        ----------
        raw : array_like or sequence of ComplexScalar
            Amplitudes indexed by basis state.
        precision : type, optional
            Storage precision; inferred from a complex64 array, else float64.
        """
        if isinstance(raw, ndarray):
            values = raw
        else:
            values = np.array([complex(a) for a in raw])
        if precision is None:
            precision = (
                np.float32 if values.dtype in (np.complex64, np.float32) else DEFAULT_PRECISION
            )
        if values.ndim != 1:
            raise DimensionError(f"Amplitudes must be 1-D, got shape {values.shape}")
        size = values.shape[0]
        if size < 2 or size & (size - 1):
            raise DimensionError(f"Amplitude count {size} is not a power of two ≥ 2")

        state = cls(size.bit_length() - 1, precision)
        state._data[:] = values.astype(state._data.dtype, copy=True)
        return state

    def copy(self) -> StateVector:
        """Independent copy of this state."""
        return StateVector.from_amplitudes(self._data, self.precision)

    def reset(self) -> None:
        """Reset to |00...0⟩ state."""
        self._data.fill(0)
        self._data[0] = 1.0

    # -- Properties ---------------------------------------------------------

    @property
    def precision(self) -> type:
        return real_type(self._data.dtype)

    @property
    def amplitudes(self) -> ndarray:
        """Copy of the flat amplitude array."""
        return self._data.copy()

    def amplitude(self, k: int) -> ComplexScalar:
        """Amplitude of basis state |k⟩."""
        z = self._data[self._check_basis_index(k)]
        return ComplexScalar(z.real, z.imag, self.precision)

    def __len__(self) -> int:
        return self.dim

    # -- Validation ---------------------------------------------------------

    def _check_qubit(self, qubit: int, name: str = "qubit") -> int:
        qubit = operator.index(qubit)
        if not 0 <= qubit < self.n_qubits:
            raise QubitIndexError(name, qubit, self.n_qubits)
        return qubit

    def _check_qubits(self, *qubits: int) -> tuple[int, ...]:
        checked = tuple(self._check_qubit(q) for q in qubits)
        if len(set(checked)) != len(checked):
            raise DuplicateQubitError(checked)
        return checked

    def _check_basis_index(self, k: int) -> int:
        k = operator.index(k)
        if not 0 <= k < self.dim:
            raise QubitIndexError("basis index", k, self.dim)
        return k

    def _as_matrix(self, gate) -> ndarray:
        m = np.asarray(gate, dtype=self._data.dtype)
        if m.shape != (2, 2):
            raise DimensionError(f"Gate matrix must be 2x2, got shape {m.shape}")
        return m

    def _pair_views(self, target: int, controls=()) -> tuple[ndarray, ndarray]:
        """
        Views of the amplitudes with ``target`` clear and set.

        Only entries where every control qubit is 1 are included. Element j
        of the first view pairs with element j of the second, so each pair
        is visited exactly once. Both views alias the state's buffer.
        """
        n = self.n_qubits
        # C order: qubit k is tensor axis n-1-k
        tensor = self._data.reshape((2,) * n)
        index = [slice(None)] * n
        for c in controls:
            index[n - 1 - c] = slice(1, 2)
        index[n - 1 - target] = slice(0, 1)
        v0 = tensor[tuple(index)]
        index[n - 1 - target] = slice(1, 2)
        return v0, tensor[tuple(index)]

    @staticmethod
    def _apply_pairs(m: ndarray, v0: ndarray, v1: ndarray) -> None:
        """(v0, v1) <- m · (v0, v1) in place."""
        a0 = v0.copy()
        v0 *= m[0, 0]
        v0 += m[0, 1] * v1
        v1 *= m[1, 1]
        v1 += m[1, 0] * a0

    # -- Kernels ------------------------------------------------------------

    def apply_single_qubit_gate(self, qubit: int, gate: GateMatrix) -> None:
        """
        Apply a 2x2 gate to one qubit.

        For every index i with bit ``qubit`` clear and j = i | 2^qubit,
        (amp[i], amp[j]) is replaced by gate · (amp[i], amp[j])ᵀ.
        Cost O(2^n).
        """
        qubit = self._check_qubit(qubit)
        m = self._as_matrix(gate)
        self._apply_pairs(m, *self._pair_views(qubit))

    def apply_controlled_gate(self, control: int, target: int, gate: GateMatrix) -> None:
        """Apply a 2x2 gate to ``target`` on the subspace where ``control`` is 1."""
        control, target = self._check_qubits(control, target)
        m = self._as_matrix(gate)
        self._apply_pairs(m, *self._pair_views(target, (control,)))

    # -- Measurement --------------------------------------------------------

    def measure(self, qubit: int, rng) -> int:
        """
        Measure one qubit, collapse the state, return 0 or 1.

        Draws a single ``rng.random()`` variate; the outcome is 0 when it is
        below the probability of the 0 branch. Inconsistent amplitudes are
        set to exactly zero and the survivors are renormalized.

        Parameters
        ----------
        qubit : int
            Qubit to measure.
        rng : numpy.random.Generator or any object with ``random()``
            Caller-owned random source.

        Raises
        ------
        DegenerateStateError
            If the selected branch has zero weight (only possible for an
            unnormalized or zero state). The state is left untouched.
        """
        qubit = self._check_qubit(qubit)
        branches = self._pair_views(qubit)

        # Probability of measuring |0⟩ on this qubit
        p0 = _norm_sq(branches[0])
        variate = rng.random()
        outcome = 0 if variate < p0 else 1

        keep, drop = branches[outcome], branches[1 - outcome]
        norm_sq = _norm_sq(keep)
        if norm_sq == 0.0:
            raise DegenerateStateError(
                f"Measurement of qubit {qubit} selected a branch with zero probability"
            )

        # Collapse: zero out amplitudes inconsistent with measurement
        drop[...] = 0
        keep *= 1.0 / float(np.sqrt(norm_sq))

        logger.debug("measured qubit %d -> %d (p0=%.6f)", qubit, outcome, p0)
        return outcome

    # -- Normalization & queries --------------------------------------------

    def total_probability(self) -> float:
        """Σ|amplitude|², 1.0 for a valid state."""
        return float(np.sum(np.abs(self._data) ** 2))

    def is_normalized(self, epsilon: float = DEFAULT_EPSILON) -> bool:
        return abs(self.total_probability() - 1.0) < epsilon

    def normalize(self) -> None:
        """
        Scale every amplitude by 1/‖ψ‖.

        Raises
        ------
        DegenerateStateError
            If the vector has zero norm.
        """
        norm = float(np.sqrt(self.total_probability()))
        if norm == 0.0:
            raise DegenerateStateError("Cannot normalize a zero-norm state vector")
        self._data *= 1.0 / norm

    def probability(self, k: int) -> float:
        """Probability of measuring basis state |k⟩."""
        z = self._data[self._check_basis_index(k)]
        return float(z.real * z.real + z.imag * z.imag)

    probability_of_basis_state = probability

    def probability_of_bit(self, qubit: int, value: int) -> float:
        """Probability that ``qubit`` reads ``value`` (0 or 1)."""
        qubit = self._check_qubit(qubit)
        if value not in (0, 1):
            raise PreconditionError(f"Bit value must be 0 or 1, got {value}")
        return _norm_sq(self._pair_views(qubit)[value])

    def probabilities(self) -> ndarray:
        """Measurement probabilities for all basis states."""
        return np.abs(self._data) ** 2

    def inner_product(self, other: StateVector) -> ComplexScalar:
        """⟨self|other⟩ = Σ conj(selfᵢ)·otherᵢ."""
        if other.dim != self.dim:
            raise DimensionError(
                f"Cannot take inner product of dimensions {self.dim} and {other.dim}"
            )
        z = np.vdot(self._data, other._data)
        return ComplexScalar(z.real, z.imag, self.precision)

    def approx_eq(self, other: StateVector, epsilon: float = DEFAULT_EPSILON) -> bool:
        """Amplitude-wise comparison, real and imaginary parts within epsilon."""
        if other.dim != self.dim:
            return False
        diff = self._data - other._data
        return bool(np.all(np.abs(diff.real) < epsilon) and np.all(np.abs(diff.imag) < epsilon))

    # -- Named single-qubit gates -------------------------------------------

    def i(self, qubit: int) -> StateVector:
        self.apply_single_qubit_gate(qubit, g.I)
        return self

    def x(self, qubit: int) -> StateVector:
        self.apply_single_qubit_gate(qubit, g.X)
        return self

    def y(self, qubit: int) -> StateVector:
        self.apply_single_qubit_gate(qubit, g.Y)
        return self

    def z(self, qubit: int) -> StateVector:
        self.apply_single_qubit_gate(qubit, g.Z)
        return self

    def h(self, qubit: int) -> StateVector:
        self.apply_single_qubit_gate(qubit, g.H)
        return self

    def s(self, qubit: int) -> StateVector:
        self.apply_single_qubit_gate(qubit, g.S)
        return self

    def sdg(self, qubit: int) -> StateVector:
        self.apply_single_qubit_gate(qubit, g.Sdg)
        return self

    def t(self, qubit: int) -> StateVector:
        self.apply_single_qubit_gate(qubit, g.T)
        return self

    def tdg(self, qubit: int) -> StateVector:
        self.apply_single_qubit_gate(qubit, g.Tdg)
        return self

    def rx(self, qubit: int, theta: float) -> StateVector:
        self.apply_single_qubit_gate(qubit, g.Rx(theta))
        return self

    def ry(self, qubit: int, theta: float) -> StateVector:
        self.apply_single_qubit_gate(qubit, g.Ry(theta))
        return self

    def rz(self, qubit: int, theta: float) -> StateVector:
        self.apply_single_qubit_gate(qubit, g.Rz(theta))
        return self

    def phase(self, qubit: int, phi: float) -> StateVector:
        self.apply_single_qubit_gate(qubit, g.Phase(phi))
        return self

    # -- Controlled & multi-qubit gates -------------------------------------

    def cnot(self, control: int, target: int) -> StateVector:
        controlled.cnot(self, control, target)
        return self

    def cy(self, control: int, target: int) -> StateVector:
        controlled.cy(self, control, target)
        return self

    def cz(self, control: int, target: int) -> StateVector:
        controlled.cz(self, control, target)
        return self

    def ch(self, control: int, target: int) -> StateVector:
        controlled.ch(self, control, target)
        return self

    def cp(self, control: int, target: int, phi: float) -> StateVector:
        controlled.cp(self, control, target, phi)
        return self

    def cs(self, control: int, target: int) -> StateVector:
        controlled.cs(self, control, target)
        return self

    def ct(self, control: int, target: int) -> StateVector:
        controlled.ct(self, control, target)
        return self

    def swap(self, q1: int, q2: int) -> StateVector:
        controlled.swap(self, q1, q2)
        return self

    def toffoli(self, c1: int, c2: int, target: int) -> StateVector:
        controlled.toffoli(self, c1, c2, target)
        return self

    def cswap(self, control: int, q1: int, q2: int) -> StateVector:
        controlled.cswap(self, control, q1, q2)
        return self

    # -- Noise --------------------------------------------------------------

    def bit_flip(self, qubit: int, p: float, rng) -> StateVector:
        noise.bit_flip(self, qubit, p, rng)
        return self

    def phase_flip(self, qubit: int, p: float, rng) -> StateVector:
        noise.phase_flip(self, qubit, p, rng)
        return self

    def depolarizing(self, qubit: int, p: float, rng) -> StateVector:
        noise.depolarizing(self, qubit, p, rng)
        return self

    def amplitude_damping(self, qubit: int, gamma: float, rng) -> StateVector:
        noise.amplitude_damping(self, qubit, gamma, rng)
        return self

    def phase_damping(self, qubit: int, gamma: float, rng) -> StateVector:
        noise.phase_damping(self, qubit, gamma, rng)
        return self

    # -- Display ------------------------------------------------------------

    def __repr__(self) -> str:
        return f"StateVector(qubits={self.n_qubits}, dim={self.dim})"

    def __str__(self) -> str:
        lines = ["StateVector("]
        for k in range(self.dim):
            amp = self.amplitude(k)
            if amp.norm_sq() > 1e-10:
                lines.append(f"  |{format(k, f'0{self.n_qubits}b')}⟩: {amp}")
        lines.append(")")
        return "\n".join(lines)



def _norm_sq(view: ndarray) -> float:
    """Σ|a|² over a (possibly strided) view."""
    return float(np.vdot(view, view).real)
