"""Tests for Monte Carlo wavefunction noise channels, noise models and trajectories."""

import numpy as np
import pytest

from tiny_qsim import noise
from tiny_qsim.circuit import Circuit
from tiny_qsim.exceptions import QubitIndexError
from tiny_qsim.noise import (
    AmplitudeDamping,
    BitFlip,
    Depolarizing,
    NoiseModel,
    PhaseDamping,
    PhaseFlip,
    TrajectorySimulator,
)
from tiny_qsim.statevector import StateVector

EPS = 1e-10
CHANNEL_FUNCTIONS = [
    noise.bit_flip, noise.phase_flip, noise.depolarizing,
    noise.amplitude_damping, noise.phase_damping,
]


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
    return np.random.default_rng(1234)


def bloch_x(sv: StateVector) -> float:
    a = sv.amplitudes
    return float(2 * np.real(np.conj(a[0]) * a[1]))


# ---------------------------------------------------------------------------
# Single-call behavior
# ---------------------------------------------------------------------------

def test_bit_flip_p1_deterministic(rng):
    sv = StateVector(1)
    noise.bit_flip(sv, 0, 1.0, rng)
    assert sv.probability(1) == 1.0


def test_bit_flip_p0_never_flips(rng):
    sv = StateVector(1)
    for _ in range(100):
        noise.bit_flip(sv, 0, 0.0, rng)
    assert sv.probability(0) == 1.0


@pytest.mark.parametrize("fn", CHANNEL_FUNCTIONS)
@pytest.mark.parametrize("p", [0.0, 0.3, 1.0])
def test_one_variate_per_call(fn, p):
    src = FixedRandom(0.5)
    fn(StateVector(2).h(0), 0, p, src)
    assert src.calls == 1


@pytest.mark.parametrize("fn", CHANNEL_FUNCTIONS)
@pytest.mark.parametrize("p", [-0.1, 1.5, float("nan")])
def test_parameter_out_of_range(fn, p):
    src = FixedRandom(0.5)
    sv = StateVector(1).h(0)
    before = sv.amplitudes
    with pytest.raises(ValueError):
        fn(sv, 0, p, src)
    assert src.calls == 0
    np.testing.assert_array_equal(sv.amplitudes, before)


@pytest.mark.parametrize("fn", CHANNEL_FUNCTIONS)
def test_state_normalized_after_call(fn, rng):
    sv = StateVector(2).h(0).ry(1, 0.8).cnot(0, 1)
    for _ in range(20):
        fn(sv, 1, 0.4, rng)
        assert sv.is_normalized(EPS)


def test_phase_flip_applies_z():
    sv = StateVector(1).h(0)
    noise.phase_flip(sv, 0, 0.5, FixedRandom(0.1))
    np.testing.assert_allclose(sv.amplitudes, np.array([1, -1]) / np.sqrt(2), atol=1e-12)


@pytest.mark.parametrize("variate,expected", [
    (0.05, [0, 1]),            # X
    (0.15, [0, 1j]),           # Y
    (0.25, [1, 0]),            # Z on |0⟩
    (0.5, [1, 0]),             # identity
])
def test_depolarizing_ranges(variate, expected):
    sv = StateVector(1)
    noise.depolarizing(sv, 0, 0.3, FixedRandom(variate))
    np.testing.assert_allclose(sv.amplitudes, expected, atol=1e-12)


def test_amplitude_damping_decay_branch():
    sv = StateVector(1).h(0)
    # p_decay = 0.5 * 0.6 = 0.3
    noise.amplitude_damping(sv, 0, 0.6, FixedRandom(0.1))
    np.testing.assert_allclose(sv.amplitudes, [1, 0], atol=1e-12)


def test_amplitude_damping_no_decay_branch():
    sv = StateVector(1).h(0)
    noise.amplitude_damping(sv, 0, 0.6, FixedRandom(0.9))
    # |1⟩ scaled by √0.4 then renormalized: P(1) = 0.4 / 1.4
    assert sv.probability(1) == pytest.approx(0.4 / 1.4, abs=1e-12)
    assert sv.is_normalized(EPS)


def test_amplitude_damping_ground_state_untouched(rng):
    sv = StateVector(1)
    noise.amplitude_damping(sv, 0, 1.0, rng)
    assert sv.probability(0) == 1.0


def test_amplitude_damping_multi_qubit_moves_pairs():
    sv = StateVector(2).x(0).h(1)
    noise.amplitude_damping(sv, 0, 1.0, FixedRandom(0.0))
    np.testing.assert_allclose(sv.probabilities(), [0.5, 0, 0.5, 0], atol=1e-12)


def test_bad_qubit_rejected_before_draw():
    src = FixedRandom(0.0)
    with pytest.raises(QubitIndexError):
        noise.bit_flip(StateVector(1), 4, 0.5, src)
    assert src.calls == 0


# ---------------------------------------------------------------------------
# Ensemble convergence
# ---------------------------------------------------------------------------

def test_bit_flip_converges(rng):
    p, shots = 0.3, 4000
    ones = 0
    for _ in range(shots):
        sv = StateVector(1)
        noise.bit_flip(sv, 0, p, rng)
        ones += sv.probability(1)
    assert ones / shots == pytest.approx(p, abs=0.03)


def test_depolarizing_converges(rng):
    # Population of |1⟩ from |0⟩: X and Y flip it, so 2p/3
    p, shots = 0.45, 4000
    total = 0.0
    for _ in range(shots):
        sv = StateVector(1)
        noise.depolarizing(sv, 0, p, rng)
        total += sv.probability(1)
    assert total / shots == pytest.approx(2 * p / 3, abs=0.03)


def test_amplitude_damping_converges(rng):
    # From |1⟩ the excited population after one step is 1 - γ
    gamma, shots = 0.35, 4000
    total = 0.0
    for _ in range(shots):
        sv = StateVector(1).x(0)
        noise.amplitude_damping(sv, 0, gamma, rng)
        total += sv.probability(1)
    assert total / shots == pytest.approx(1 - gamma, abs=0.03)


def test_amplitude_damping_superposition_converges(rng):
    # Mixed-state P(1) = (1 - γ)·P0(1)
    gamma, shots = 0.5, 4000
    total = 0.0
    for _ in range(shots):
        sv = StateVector(1).ry(0, 2 * np.arcsin(np.sqrt(0.8)))
        noise.amplitude_damping(sv, 0, gamma, rng)
        total += sv.probability(1)
    assert total / shots == pytest.approx(0.8 * (1 - gamma), abs=0.03)


def test_phase_damping_dephases(rng):
    # Coherence ⟨X⟩ of |+⟩ decays to 1 - 2γ on average
    gamma, shots = 0.2, 4000
    total = 0.0
    for _ in range(shots):
        sv = StateVector(1).h(0)
        noise.phase_damping(sv, 0, gamma, rng)
        total += bloch_x(sv)
    assert total / shots == pytest.approx(1 - 2 * gamma, abs=0.04)


# ---------------------------------------------------------------------------
# Channel objects
# ---------------------------------------------------------------------------

CHANNEL_CLASSES = [BitFlip, PhaseFlip, Depolarizing, AmplitudeDamping, PhaseDamping]


@pytest.mark.parametrize("cls", CHANNEL_CLASSES)
@pytest.mark.parametrize("p", [0.0, 0.1, 0.5, 1.0])
def test_kraus_trace_preserving(cls, p):
    channel = cls(p)
    total = sum(k.conj().T @ k for k in channel.kraus_operators())
    np.testing.assert_allclose(total, np.eye(2), atol=1e-12)


@pytest.mark.parametrize("cls", CHANNEL_CLASSES)
def test_channel_parameter_validated(cls):
    with pytest.raises(ValueError):
        cls(1.2)


@pytest.mark.parametrize("cls,fn", zip(CHANNEL_CLASSES, CHANNEL_FUNCTIONS))
def test_channel_apply_matches_function(cls, fn):
    a = StateVector(2).h(0).cnot(0, 1)
    b = a.copy()
    cls(0.4).apply(a, 1, FixedRandom(0.2))
    fn(b, 1, 0.4, FixedRandom(0.2))
    assert a.approx_eq(b, EPS)


def test_kraus_average_matches_trajectories(rng):
    """Density matrix from Kraus operators equals the trajectory average."""
    channel = AmplitudeDamping(0.3)
    psi = np.array([np.sqrt(0.4), np.sqrt(0.6)], dtype=np.complex128)
    rho = np.outer(psi, psi.conj())
    exact = sum(k @ rho @ k.conj().T for k in channel.kraus_operators())

    shots = 4000
    avg = np.zeros((2, 2), dtype=np.complex128)
    for _ in range(shots):
        sv = StateVector.from_amplitudes(psi)
        channel.apply(sv, 0, rng)
        a = sv.amplitudes
        avg += np.outer(a, a.conj())
    np.testing.assert_allclose(avg / shots, exact, atol=0.03)


def test_channel_equality_and_repr():
    assert BitFlip(0.1) == BitFlip(0.1)
    assert BitFlip(0.1) != PhaseFlip(0.1)
    assert repr(Depolarizing(0.2)) == "Depolarizing(0.2)"


# ---------------------------------------------------------------------------
# Noise model & trajectory simulator
# ---------------------------------------------------------------------------

def test_noise_model_repr():
    assert repr(NoiseModel()) == "NoiseModel(clean)"
    model = NoiseModel().add_all_qubit_error(BitFlip(0.1)).add_readout_error(0.02)
    assert "1 all-qubit errors" in repr(model)
    assert "readout=2.0%" in repr(model)


def test_noise_model_channel_selection():
    bf, pf, ad = BitFlip(0.1), PhaseFlip(0.2), AmplitudeDamping(0.3)
    model = (
        NoiseModel()
        .add_gate_error("CNOT", bf)
        .add_all_qubit_error(pf)
        .add_qubit_error(1, ad)
    )
    assert model.channels_for("cx", 0) == [bf, pf]
    assert model.channels_for("cx", 1) == [bf, pf, ad]
    assert model.channels_for("h", 0) == [pf]
    assert not model.is_clean


def test_clean_trajectories_match_ideal():
    qc = Circuit(2).h(0).cx(0, 1)
    result = TrajectorySimulator(seed=5).run(qc, trajectories=200)
    np.testing.assert_allclose(result.probabilities, [0.5, 0, 0, 0.5], atol=1e-12)
    assert set(result.counts) <= {"00", "11"}
    assert sum(result.counts.values()) == 200
    assert result.trajectories == 200


def test_trajectories_bit_flip_after_x():
    qc = Circuit(1).x(0)
    model = NoiseModel().add_all_qubit_error(BitFlip(0.2))
    result = TrajectorySimulator(model, seed=11).run(qc, trajectories=3000)
    # X puts the qubit in |1⟩, the flip returns it to |0⟩ with p = 0.2
    assert result.probability(0) == pytest.approx(0.2, abs=0.03)
    assert result.counts["1"] / 3000 == pytest.approx(0.8, abs=0.03)


def test_trajectories_gate_error_only_on_named_gate():
    qc = Circuit(2).x(0).x(1)
    model = NoiseModel().add_gate_error("cx", BitFlip(1.0))
    result = TrajectorySimulator(model, seed=2).run(qc, trajectories=50)
    assert result.probability(3) == pytest.approx(1.0)


def test_trajectories_replay_noise_operations():
    qc = Circuit(1, seed=0).bit_flip(0, 0.5)
    result = TrajectorySimulator(seed=9).run(qc, trajectories=3000)
    assert result.probability(1) == pytest.approx(0.5, abs=0.04)


def test_trajectories_readout_error():
    qc = Circuit(1)
    model = NoiseModel().add_readout_error(0.25)
    result = TrajectorySimulator(model, seed=4).run(qc, trajectories=4000)
    assert result.probability(0) == 1.0
    assert result.counts["1"] / 4000 == pytest.approx(0.25, abs=0.03)


def test_trajectories_reproducible():
    qc = Circuit(2).h(0).cx(0, 1)
    model = NoiseModel().add_all_qubit_error(Depolarizing(0.3))
    r1 = TrajectorySimulator(model, seed=21).run(qc, trajectories=100)
    r2 = TrajectorySimulator(model, seed=21).run(qc, trajectories=100)
    np.testing.assert_array_equal(r1.probabilities, r2.probabilities)
    assert r1.counts == r2.counts


def test_trajectories_with_measurement():
    qc = Circuit(2, seed=0).h(0).cx(0, 1)
    qc.measure(0)
    result = TrajectorySimulator(seed=8).run(qc, trajectories=2000)
    # Each trajectory collapses to |00⟩ or |11⟩
    assert result.probability(0) + result.probability(3) == pytest.approx(1.0)
    assert result.probability(3) == pytest.approx(0.5, abs=0.04)


def test_trajectories_must_be_positive():
    with pytest.raises(ValueError):
        TrajectorySimulator().run(Circuit(1), trajectories=0)


def test_result_most_frequent():
    qc = Circuit(2).x(1)
    result = TrajectorySimulator(seed=1).run(qc, trajectories=10)
    assert result.most_frequent() == "10"
    assert result.num_qubits == 2
