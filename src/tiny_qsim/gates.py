"""
Single-qubit gate definitions.

Every gate is a ``GateMatrix``: an immutable 2x2 complex matrix that the
state-vector kernels apply to amplitude pairs. Fixed gates are module
constants, parameterized gates are factories returning a fresh matrix.

Gate categories:
    - Fixed: I, X, Y, Z, H, S, Sdg, T, Tdg
    - Rotations: Rx, Ry, Rz, Phase (alias P)

Composition follows matrix order: ``a @ b`` means "apply b, then a".
"""

from __future__ import annotations

import numpy as np
from numpy import ndarray

from tiny_qsim.complex import ComplexScalar, complex_dtype
from tiny_qsim.config import DEFAULT_PRECISION
from tiny_qsim.exceptions import DimensionError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_SQRT2_INV = 1.0 / np.sqrt(2.0)


class GateMatrix:
    """
    Immutable 2x2 complex matrix.

    Parameters
    ----------
    matrix : array_like
        2x2 complex entries, row-major.
    name : str, optional
        Display name used in reprs.
    precision : type, optional
        Real precision of the entries (float32 or float64).
    """

    __slots__ = ("_m", "name")

    def __init__(self, matrix, name: str = "U", precision=DEFAULT_PRECISION) -> None:
        m = np.array(matrix, dtype=complex_dtype(precision))
        if m.shape != (2, 2):
            raise DimensionError(f"Gate matrix must be 2x2, got shape {m.shape}")
        m.flags.writeable = False
        self._m = m
        self.name = name

    # -- Accessors ----------------------------------------------------------

    @property
    def matrix(self) -> ndarray:
        """Writable copy of the entries."""
        return self._m.copy()

    @property
    def dtype(self) -> np.dtype:
        return self._m.dtype

    def entry(self, row: int, col: int) -> ComplexScalar:
        z = self._m[row, col]
        return ComplexScalar(z.real, z.imag, z.real.dtype)

    def __getitem__(self, index):
        return self._m[index]

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self._m.copy()
        return self._m.astype(dtype)

    def astype(self, precision) -> GateMatrix:
        return GateMatrix(self._m, self.name, precision)

    # -- Algebra ------------------------------------------------------------

    def compose(self, other: GateMatrix) -> GateMatrix:
        """
        Matrix product ``self · other``.

        Applied to a state this means ``other`` acts first, then ``self``.
        """
        return GateMatrix(
            self._m @ other._m,
            f"{self.name}·{other.name}",
            self._m.real.dtype,
        )

    def __matmul__(self, other: GateMatrix) -> GateMatrix:
        if not isinstance(other, GateMatrix):
            return NotImplemented
        return self.compose(other)

    def dagger(self) -> GateMatrix:
        """Conjugate transpose U†."""
        return GateMatrix(self._m.conj().T, f"{self.name}†", self._m.real.dtype)

    def scale(self, c: complex) -> GateMatrix:
        """Multiply every entry by a scalar (e.g. a global phase)."""
        return GateMatrix(self._m * complex(c), self.name, self._m.real.dtype)

    # -- Checks -------------------------------------------------------------

    def approx_eq(self, other: GateMatrix, epsilon: float) -> bool:
        """Entry-wise comparison, each real and imaginary part within epsilon."""
        return all(
            self.entry(r, c).approx_eq(other.entry(r, c), epsilon)
            for r in range(2)
            for c in range(2)
        )

    def is_unitary(self, epsilon: float = 1e-10) -> bool:
        """
        Check U†U ≈ I.

        Each of the four product entries is compared to the identity entry
        on its own, with the per-component tolerance of
        ``ComplexScalar.approx_eq``.
        """
        product = self.dagger().compose(self)
        one = ComplexScalar.one()
        zero = ComplexScalar.zero()
        return (
            product.entry(0, 0).approx_eq(one, epsilon)
            and product.entry(0, 1).approx_eq(zero, epsilon)
            and product.entry(1, 0).approx_eq(zero, epsilon)
            and product.entry(1, 1).approx_eq(one, epsilon)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GateMatrix):
            return NotImplemented
        return bool(np.array_equal(self._m, other._m))

    def __hash__(self) -> int:
        return hash(self._m.tobytes())

    def __repr__(self) -> str:
        rows = "; ".join(
            ", ".join(str(self.entry(r, c)) for c in range(2)) for r in range(2)
        )
        return f"GateMatrix({self.name}: [{rows}])"


# ---------------------------------------------------------------------------
# Single-qubit fixed gates
# ---------------------------------------------------------------------------

I = GateMatrix([[1, 0], [0, 1]], "I")
"""Identity gate."""

X = GateMatrix([[0, 1], [1, 0]], "X")
"""Pauli-X (NOT) gate."""

Y = GateMatrix([[0, -1j], [1j, 0]], "Y")
"""Pauli-Y gate."""

Z = GateMatrix([[1, 0], [0, -1]], "Z")
"""Pauli-Z gate."""

H = GateMatrix(np.array([[1, 1], [1, -1]]) * _SQRT2_INV, "H")
"""Hadamard gate."""

S = GateMatrix([[1, 0], [0, 1j]], "S")
"""S (phase) gate: sqrt(Z)."""

Sdg = GateMatrix([[1, 0], [0, -1j]], "Sdg")
"""S-dagger gate."""

T = GateMatrix([[1, 0], [0, np.exp(1j * np.pi / 4)]], "T")
"""T gate: sqrt(S)."""

Tdg = GateMatrix([[1, 0], [0, np.exp(-1j * np.pi / 4)]], "Tdg")
"""T-dagger gate."""


# ---------------------------------------------------------------------------
# Single-qubit parameterized gates
# ---------------------------------------------------------------------------

def Rx(theta: float) -> GateMatrix:
    """Rotation around X-axis: Rx(θ) = cos(θ/2)I - i·sin(θ/2)X."""
    c = np.cos(theta / 2)
    s = np.sin(theta / 2)
    return GateMatrix([[c, -1j * s], [-1j * s, c]], "Rx")


def Ry(theta: float) -> GateMatrix:
    """Rotation around Y-axis by angle theta."""
    c = np.cos(theta / 2)
    s = np.sin(theta / 2)
    return GateMatrix([[c, -s], [s, c]], "Ry")


def Rz(theta: float) -> GateMatrix:
    """Rotation around Z-axis: diag(e^(-iθ/2), e^(iθ/2))."""
    return GateMatrix(
        [[np.exp(-1j * theta / 2), 0], [0, np.exp(1j * theta / 2)]],
        "Rz",
    )


def Phase(phi: float) -> GateMatrix:
    """Phase gate: diagonal with entries [1, exp(i*phi)]."""
    return GateMatrix([[1, 0], [0, np.exp(1j * phi)]], "P")


P = Phase


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

_FIXED_GATES = {
    "I": I, "ID": I, "X": X, "Y": Y, "Z": Z, "H": H,
    "S": S, "SDG": Sdg, "T": T, "TDG": Tdg,
}

_PARAM_GATES = {
    "RX": Rx, "RY": Ry, "RZ": Rz, "P": Phase, "PHASE": Phase, "U1": Phase,
}


def get_gate(name: str, *params: float) -> GateMatrix:
    """
    Get a gate by name with optional parameters.

    Parameters
    ----------
    name : str
        Gate name, case-insensitive (e.g. ``"h"``, ``"Rx"``).
    *params : float
        Rotation angle for parameterized gates.
    """
    key = name.upper()
    if key in _FIXED_GATES:
        if params:
            raise ValueError(f"Gate '{name}' takes no parameters, got {params}")
        return _FIXED_GATES[key]
    if key in _PARAM_GATES:
        if len(params) != 1:
            raise ValueError(f"Gate '{name}' takes exactly one parameter, got {len(params)}")
        return _PARAM_GATES[key](params[0])
    raise ValueError(f"Unknown gate: {name}")
