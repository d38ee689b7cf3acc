"""Tests for the state vector engine."""

import numpy as np
import pytest

from tiny_qsim import gates as g
from tiny_qsim.complex import ComplexScalar
from tiny_qsim.exceptions import (
    DegenerateStateError,
    DimensionError,
    DuplicateQubitError,
    PreconditionError,
    QubitIndexError,
)
from tiny_qsim.statevector import StateVector

EPS = 1e-10


class FixedRandom:
    """Random source that always returns the same variate."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


@pytest.fixture
def rng():
    return np.random.default_rng(42)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def test_ground_state():
    sv = StateVector.create(3)
    expected = np.zeros(8)
    expected[0] = 1.0
    np.testing.assert_allclose(sv.amplitudes, expected, atol=1e-12)
    assert sv.dim == 8 and len(sv) == 8


def test_zero_qubits_rejected():
    with pytest.raises(PreconditionError):
        StateVector(0)


def test_from_basis_index():
    sv = StateVector.from_basis_index(3, 5)
    assert sv.probability(5) == 1.0
    assert sv.total_probability() == pytest.approx(1.0)


def test_from_basis_index_out_of_range():
    with pytest.raises(QubitIndexError):
        StateVector.from_basis_index(2, 4)


def test_from_amplitudes_copies_input():
    raw = np.array([1, 1j], dtype=np.complex128) / np.sqrt(2)
    sv = StateVector.from_amplitudes(raw)
    raw[0] = 0
    assert sv.probability(0) == pytest.approx(0.5)


def test_from_amplitudes_accepts_scalars():
    h = 1 / np.sqrt(2)
    sv = StateVector.from_amplitudes([ComplexScalar(h, 0.0), ComplexScalar(0.0, h)])
    assert sv.amplitude(1).approx_eq(ComplexScalar(0.0, h), EPS)


def test_from_amplitudes_not_normalized_is_allowed():
    sv = StateVector.from_amplitudes([3, 4])
    assert sv.total_probability() == pytest.approx(25.0)
    assert not sv.is_normalized()


@pytest.mark.parametrize("size", [0, 1, 3, 6])
def test_from_amplitudes_bad_length(size):
    with pytest.raises(DimensionError):
        StateVector.from_amplitudes(np.ones(size, dtype=np.complex128))


def test_amplitudes_returns_copy():
    sv = StateVector(1)
    amps = sv.amplitudes
    amps[0] = 0
    assert sv.probability(0) == 1.0


def test_float32_precision():
    sv = StateVector(2, np.float32)
    assert sv.amplitudes.dtype == np.complex64
    assert sv.precision is np.float32
    sv.h(0).cnot(0, 1)
    assert sv.probability(3) == pytest.approx(0.5, abs=1e-6)


def test_copy_and_reset():
    sv = StateVector(2).h(0)
    clone = sv.copy()
    sv.reset()
    assert sv.probability(0) == 1.0
    assert clone.probability(1) == pytest.approx(0.5)


# ---------------------------------------------------------------------------
# Single-qubit kernel
# ---------------------------------------------------------------------------

def test_x_little_endian():
    sv = StateVector(2).x(1)
    assert sv.probability(2) == 1.0
    sv = StateVector(2).x(0)
    assert sv.probability(1) == 1.0


def test_hadamard_superposition():
    sv = StateVector(1).h(0)
    np.testing.assert_allclose(sv.amplitudes, np.array([1, 1]) / np.sqrt(2), atol=1e-12)


def test_z_gate_phase():
    sv = StateVector(1).h(0).z(0)
    np.testing.assert_allclose(sv.amplitudes, np.array([1, -1]) / np.sqrt(2), atol=1e-12)


def test_s_gate():
    sv = StateVector(1).x(0).s(0)
    np.testing.assert_allclose(sv.amplitudes, [0, 1j], atol=1e-12)


def test_kernel_matches_kron():
    """Kernel result equals the explicit (I ⊗ U ⊗ I) product."""
    rng = np.random.default_rng(7)
    raw = rng.normal(size=8) + 1j * rng.normal(size=8)
    raw /= np.linalg.norm(raw)
    sv = StateVector.from_amplitudes(raw)
    sv.apply_single_qubit_gate(1, g.Ry(0.7))
    # little-endian: qubit 2 is the most significant kron factor
    full = np.kron(np.eye(2), np.kron(np.asarray(g.Ry(0.7)), np.eye(2)))
    np.testing.assert_allclose(sv.amplitudes, full @ raw, atol=1e-12)


def test_controlled_kernel_matches_dense_operator():
    rng = np.random.default_rng(11)
    raw = rng.normal(size=8) + 1j * rng.normal(size=8)
    raw /= np.linalg.norm(raw)
    sv = StateVector.from_amplitudes(raw)
    u = np.asarray(g.Rx(1.1))
    sv.apply_controlled_gate(2, 0, u)
    # control qubit 2 is the high bit: U acts on qubit 0 in the lower-right block
    proj0 = np.diag([1, 0])
    proj1 = np.diag([0, 1])
    full = np.kron(proj0, np.eye(4)) + np.kron(proj1, np.kron(np.eye(2), u))
    np.testing.assert_allclose(sv.amplitudes, full @ raw, atol=1e-12)


def test_state_holds_only_amplitude_buffer():
    sv = StateVector(4)
    arrays = [v for v in vars(sv).values() if isinstance(v, np.ndarray)]
    assert len(arrays) == 1
    assert arrays[0] is sv._data


def test_kernels_update_buffer_in_place():
    sv = StateVector(3)
    buffer = sv._data
    sv.h(0).cnot(0, 2).rz(1, 0.3).toffoli(0, 2, 1)
    sv.measure(1, FixedRandom(0.0))
    assert sv._data is buffer
    v0, v1 = sv._pair_views(0, (2,))
    assert np.shares_memory(v0, buffer)
    assert np.shares_memory(v1, buffer)


def test_single_qubit_views_alias_buffer():
    sv = StateVector(1)
    v0, v1 = sv._pair_views(0)
    assert v0.shape == v1.shape == (1,)
    v1[...] = 1.0
    assert sv.amplitude(1) == ComplexScalar(1.0, 0.0)


@pytest.mark.parametrize("angle", [0, np.pi / 4, np.pi / 2, np.pi])
def test_rx_rotation(angle):
    sv = StateVector(1).rx(0, angle)
    assert sv.probability(1) == pytest.approx(np.sin(angle / 2) ** 2, abs=1e-12)


def test_rz_phase_only():
    sv = StateVector(1).h(0).rz(0, 1.234)
    np.testing.assert_allclose(sv.probabilities(), [0.5, 0.5], atol=1e-12)


def test_named_gates_chain():
    sv = StateVector(1)
    assert sv.h(0).s(0).sdg(0).t(0).tdg(0).h(0) is sv
    assert sv.probability(0) == pytest.approx(1.0)


def test_qubit_out_of_range():
    sv = StateVector(2)
    with pytest.raises(QubitIndexError):
        sv.h(2)
    with pytest.raises(QubitIndexError):
        sv.x(-1)


def test_gate_shape_checked_before_mutation():
    sv = StateVector(1).h(0)
    before = sv.amplitudes
    with pytest.raises(DimensionError):
        sv.apply_single_qubit_gate(0, np.eye(4))
    np.testing.assert_array_equal(sv.amplitudes, before)


# ---------------------------------------------------------------------------
# Controlled kernel
# ---------------------------------------------------------------------------

def test_bell_state():
    sv = StateVector(2).h(0).cnot(0, 1)
    assert sv.probability(0) == pytest.approx(0.5, abs=EPS)
    assert sv.probability(3) == pytest.approx(0.5, abs=EPS)
    assert sv.probability(1) == pytest.approx(0.0, abs=EPS)
    assert sv.probability(2) == pytest.approx(0.0, abs=EPS)


def test_cnot_no_flip_on_zero_control():
    sv = StateVector(2).cnot(0, 1)
    assert sv.probability(0) == 1.0


def test_cnot_flips_on_one_control():
    sv = StateVector(2).x(0).cnot(0, 1)
    assert sv.probability(3) == 1.0


def test_controlled_gate_same_qubit_rejected():
    sv = StateVector(2).h(0)
    before = sv.amplitudes
    with pytest.raises(DuplicateQubitError):
        sv.apply_controlled_gate(1, 1, g.X)
    np.testing.assert_array_equal(sv.amplitudes, before)


def test_ghz_3_qubit():
    sv = StateVector(3).h(0).cnot(0, 1).cnot(0, 2)
    expected = np.zeros(8)
    expected[0] = expected[7] = 1 / np.sqrt(2)
    np.testing.assert_allclose(sv.amplitudes, expected, atol=1e-12)


# ---------------------------------------------------------------------------
# Norm preservation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("n_qubits", [1, 2, 3, 5])
def test_normalization_random_circuit(rng, n_qubits):
    sv = StateVector(n_qubits)
    singles = [sv.h, sv.x, sv.y, sv.z, sv.s, sv.t, sv.sdg, sv.tdg]
    for _ in range(60):
        q = int(rng.integers(n_qubits))
        choice = rng.integers(4)
        if choice == 0:
            singles[int(rng.integers(len(singles)))](q)
        elif choice == 1:
            sv.rx(q, rng.uniform(-np.pi, np.pi)).ry(q, rng.uniform(-np.pi, np.pi))
        elif n_qubits > 1:
            other = (q + 1 + int(rng.integers(n_qubits - 1))) % n_qubits
            sv.cnot(q, other) if choice == 2 else sv.cp(q, other, rng.uniform(0, np.pi))
        assert abs(sv.total_probability() - 1.0) < EPS
    assert sv.is_normalized(EPS)


# ---------------------------------------------------------------------------
# Measurement
# ---------------------------------------------------------------------------

def test_measure_variate_zero_gives_zero_branch():
    sv = StateVector(2).h(0).cnot(0, 1)
    src = FixedRandom(0.0)
    assert sv.measure(0, src) == 0
    assert src.calls == 1
    amps = sv.amplitudes
    assert abs(amps[0]) == pytest.approx(1.0)
    assert amps[1] == 0 and amps[2] == 0 and amps[3] == 0


def test_measure_variate_near_one_gives_one_branch():
    sv = StateVector(2).h(0).cnot(0, 1)
    assert sv.measure(1, FixedRandom(1.0 - 1e-12)) == 1
    amps = sv.amplitudes
    assert abs(amps[3]) == pytest.approx(1.0)
    assert amps[0] == 0 and amps[1] == 0 and amps[2] == 0


def test_measure_renormalizes_partial_state():
    sv = StateVector(2).h(0).h(1)
    assert sv.measure(0, FixedRandom(0.1)) == 0
    np.testing.assert_allclose(sv.probabilities(), [0.5, 0, 0.5, 0], atol=1e-12)
    assert sv.is_normalized()


def test_measure_deterministic_state():
    sv = StateVector(1).x(0)
    assert sv.measure(0, FixedRandom(0.0)) == 1


def test_measure_statistics(rng):
    ones = 0
    for _ in range(2000):
        sv = StateVector(1).ry(0, 2 * np.arccos(np.sqrt(0.3)))  # P(0) = 0.3
        ones += sv.measure(0, rng)
    assert ones / 2000 == pytest.approx(0.7, abs=0.04)


def test_measure_zero_branch_raises_without_mutation():
    sv = StateVector.from_amplitudes([0, 0, 0, 0])
    with pytest.raises(DegenerateStateError):
        sv.measure(0, FixedRandom(0.5))
    np.testing.assert_array_equal(sv.amplitudes, np.zeros(4))


def test_measure_bad_qubit_does_not_draw():
    src = FixedRandom(0.0)
    with pytest.raises(QubitIndexError):
        StateVector(1).measure(3, src)
    assert src.calls == 0


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def test_normalize():
    sv = StateVector.from_amplitudes([3, 4])
    sv.normalize()
    np.testing.assert_allclose(sv.amplitudes, [0.6, 0.8], atol=1e-12)


def test_normalize_zero_vector_raises():
    with pytest.raises(DegenerateStateError):
        StateVector.from_amplitudes([0, 0]).normalize()


def test_probability_of_bit():
    sv = StateVector(2).ry(0, 2 * np.arccos(np.sqrt(0.25))).h(1)
    assert sv.probability_of_bit(0, 0) == pytest.approx(0.25)
    assert sv.probability_of_bit(0, 1) == pytest.approx(0.75)
    assert sv.probability_of_bit(1, 1) == pytest.approx(0.5)
    with pytest.raises(PreconditionError):
        sv.probability_of_bit(0, 2)


def test_probability_alias():
    sv = StateVector(1).x(0)
    assert sv.probability_of_basis_state(1) == sv.probability(1) == 1.0
    with pytest.raises(QubitIndexError):
        sv.probability(2)


def test_inner_product():
    plus = StateVector(1).h(0)
    minus = StateVector(1).x(0).h(0)
    assert plus.inner_product(plus).approx_eq(ComplexScalar.one(), EPS)
    assert plus.inner_product(minus).approx_eq(ComplexScalar.zero(), EPS)


def test_inner_product_conjugate_linear_in_self():
    a = StateVector.from_amplitudes([1j, 0])
    b = StateVector.from_amplitudes([1, 0])
    # ⟨a|b⟩ = conj(i)·1 = -i
    assert a.inner_product(b).approx_eq(ComplexScalar(0.0, -1.0), EPS)


def test_inner_product_dimension_mismatch():
    with pytest.raises(DimensionError):
        StateVector(1).inner_product(StateVector(2))


def test_approx_eq():
    a = StateVector(2).h(0)
    b = StateVector(2).h(0)
    assert a.approx_eq(b)
    assert not a.approx_eq(StateVector(2))
    assert not a.approx_eq(StateVector(3))


def test_str_lists_nonzero_amplitudes():
    text = str(StateVector(2).x(1))
    assert "|10⟩" in text
    assert "|00⟩" not in text
    assert repr(StateVector(2)) == "StateVector(qubits=2, dim=4)"
