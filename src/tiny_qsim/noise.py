"""
Quantum Noise via Monte Carlo Wavefunction
==========================================
Simulates single-qubit noise on a pure state by sampling one Kraus branch
per call (a quantum trajectory) instead of evolving a density matrix.
Averaging many independent trajectories converges to the mixed-state result.

Noise Channels:
- Bit Flip: X with probability p
- Phase Flip: Z with probability p
- Depolarizing: X, Y or Z, each with probability p/3
- Amplitude Damping: Energy loss (T1 decay)
- Phase Damping: Phase loss, sampled as a phase flip with p = gamma

Every channel call draws exactly one ``rng.random()`` variate, even when the
parameter is 0, and validates its parameter before drawing.

Usage:
    from tiny_qsim.noise import NoiseModel, TrajectorySimulator, Depolarizing

    noise = NoiseModel()
    noise.add_all_qubit_error(Depolarizing(0.01))
    noise.add_readout_error(0.02)

    qc = Circuit(2).h(0).cx(0, 1)
    result = TrajectorySimulator(noise, seed=7).run(qc, trajectories=500)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

import numpy as np
from numpy import ndarray

from tiny_qsim import gates as g

if TYPE_CHECKING:
    from tiny_qsim.circuit import Circuit, Operation
    from tiny_qsim.statevector import StateVector

logger = logging.getLogger(__name__)


def _check_parameter(value: float, name: str) -> float:
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be in [0,1], got {value}")
    return value


# =============================================================================
# Trajectory channels
# =============================================================================

def bit_flip(state: StateVector, qubit: int, p: float, rng) -> None:
    """Apply X to ``qubit`` with probability ``p``."""
    p = _check_parameter(p, "Probability")
    qubit = state._check_qubit(qubit)
    r = rng.random()
    if r < p:
        state.apply_single_qubit_gate(qubit, g.X)
        logger.debug("bit_flip q%d: X applied", qubit)


def phase_flip(state: StateVector, qubit: int, p: float, rng) -> None:
    """Apply Z to ``qubit`` with probability ``p``."""
    p = _check_parameter(p, "Probability")
    qubit = state._check_qubit(qubit)
    r = rng.random()
    if r < p:
        state.apply_single_qubit_gate(qubit, g.Z)
        logger.debug("phase_flip q%d: Z applied", qubit)


def depolarizing(state: StateVector, qubit: int, p: float, rng) -> None:
    """
    Depolarizing channel.

    One variate r is split into four ranges:
    [0, p/3) -> X, [p/3, 2p/3) -> Y, [2p/3, p) -> Z, [p, 1) -> identity.
    """
    p = _check_parameter(p, "Probability")
    qubit = state._check_qubit(qubit)
    r = rng.random()
    if r >= p:
        return
    if r < p / 3:
        pauli = g.X
    elif r < 2 * p / 3:
        pauli = g.Y
    else:
        pauli = g.Z
    state.apply_single_qubit_gate(qubit, pauli)
    logger.debug("depolarizing q%d: %s applied", qubit, pauli.name)


def amplitude_damping(state: StateVector, qubit: int, gamma: float, rng) -> None:
    """
    Amplitude damping (T1 decay) of ``qubit``.

    The decay branch is taken with probability P(qubit=1)·γ and moves every
    |1⟩ amplitude into its |0⟩ slot. Otherwise the |1⟩ amplitudes are scaled
    by √(1-γ). Either way the state is renormalized.
    """
    gamma = _check_parameter(gamma, "Gamma")
    qubit = state._check_qubit(qubit)
    v0, v1 = state._pair_views(qubit)

    p_decay = state.probability_of_bit(qubit, 1) * gamma
    r = rng.random()
    if r < p_decay:
        v0[...] = v1
        v1[...] = 0.0
        logger.debug("amplitude_damping q%d: decay (p=%.4g)", qubit, p_decay)
    else:
        v1 *= float(np.sqrt(1.0 - gamma))
    state.normalize()


def phase_damping(state: StateVector, qubit: int, gamma: float, rng) -> None:
    """
    Phase damping, sampled as ``phase_flip(p=gamma)``.

    Ensemble averages dephase the off-diagonal terms by (1 - 2γ); this is not
    the two-operator phase damping dilation on a per-state basis.
    """
    phase_flip(state, qubit, gamma, rng)


# =============================================================================
# Channel objects
# =============================================================================

_I = np.eye(2, dtype=np.complex128)


class NoiseChannel:
    """
    Single-qubit noise channel with a fixed parameter.

    Subclasses supply ``kraus_operators()`` describing the averaged channel
    and a trajectory function used by ``apply``. Construction checks that
    Σ K†K = I.
    """

    name = "channel"
    _trajectory: Callable

    def __init__(self, parameter: float):
        self.parameter = _check_parameter(parameter, type(self).__name__)
        self._validate()

    def kraus_operators(self) -> List[ndarray]:
        raise NotImplementedError

    def _validate(self):
        total = sum(k.conj().T @ k for k in self.kraus_operators())
        if not np.allclose(total, _I, atol=1e-6):
            raise ValueError(f"Kraus operators of {self!r} don't sum to I")

    def apply(self, state: StateVector, qubit: int, rng) -> None:
        """Sample one branch of the channel on ``qubit``."""
        self._trajectory(state, qubit, self.parameter, rng)

    def __eq__(self, other):
        return type(self) is type(other) and self.parameter == other.parameter

    def __hash__(self):
        return hash((type(self).__name__, self.parameter))

    def __repr__(self):
        return f"{type(self).__name__}({self.parameter})"


class BitFlip(NoiseChannel):
    name = "bit_flip"
    _trajectory = staticmethod(bit_flip)

    def kraus_operators(self):
        p = self.parameter
        return [np.sqrt(1 - p) * _I, np.sqrt(p) * g.X.matrix]


class PhaseFlip(NoiseChannel):
    name = "phase_flip"
    _trajectory = staticmethod(phase_flip)

    def kraus_operators(self):
        p = self.parameter
        return [np.sqrt(1 - p) * _I, np.sqrt(p) * g.Z.matrix]


class Depolarizing(NoiseChannel):
    """E(ρ) = (1-p)ρ + (p/3)(XρX + YρY + ZρZ)"""

    name = "depolarizing"
    _trajectory = staticmethod(depolarizing)

    def kraus_operators(self):
        p = self.parameter
        return [
            np.sqrt(1 - p) * _I,
            np.sqrt(p / 3) * g.X.matrix,
            np.sqrt(p / 3) * g.Y.matrix,
            np.sqrt(p / 3) * g.Z.matrix,
        ]


class AmplitudeDamping(NoiseChannel):
    """|1⟩ decays to |0⟩ with probability gamma."""

    name = "amplitude_damping"
    _trajectory = staticmethod(amplitude_damping)

    def kraus_operators(self):
        gamma = self.parameter
        k0 = np.array([[1, 0], [0, np.sqrt(1 - gamma)]], dtype=np.complex128)
        k1 = np.array([[0, np.sqrt(gamma)], [0, 0]], dtype=np.complex128)
        return [k0, k1]


class PhaseDamping(NoiseChannel):
    """Dephasing sampled as a phase flip; Kraus set matches what ``apply`` does."""

    name = "phase_damping"
    _trajectory = staticmethod(phase_damping)

    def kraus_operators(self):
        gamma = self.parameter
        return [np.sqrt(1 - gamma) * _I, np.sqrt(gamma) * g.Z.matrix]


# =============================================================================
# Noise Model
# =============================================================================

_GATE_ALIASES = {"cnot": "cx", "toffoli": "ccx", "phase": "p", "fredkin": "cswap"}


class NoiseModel:
    """
    Configurable noise model for circuits run as trajectories.

    Channels fire after every gate, on each qubit the gate touched.
    Measurements and explicit noise operations do not trigger the model.

    Example:
        noise = NoiseModel()
        noise.add_all_qubit_error(Depolarizing(0.01))
        noise.add_gate_error('cx', BitFlip(0.02))
        noise.add_qubit_error(0, AmplitudeDamping(0.05))
        noise.add_readout_error(0.03)
    """

    def __init__(self):
        self._all_qubit_errors: List[NoiseChannel] = []
        self._gate_errors: Dict[str, List[NoiseChannel]] = {}
        self._qubit_errors: Dict[int, List[NoiseChannel]] = {}
        self._readout_error: float = 0.0

    def add_all_qubit_error(self, channel: NoiseChannel) -> NoiseModel:
        """Add noise applied after every gate."""
        self._all_qubit_errors.append(channel)
        return self

    def add_gate_error(self, gate_name: str, channel: NoiseChannel) -> NoiseModel:
        """Add noise for a specific gate type."""
        key = gate_name.lower()
        key = _GATE_ALIASES.get(key, key)
        self._gate_errors.setdefault(key, []).append(channel)
        return self

    def add_qubit_error(self, qubit: int, channel: NoiseChannel) -> NoiseModel:
        """Add noise for a specific qubit."""
        self._qubit_errors.setdefault(qubit, []).append(channel)
        return self

    def add_readout_error(self, p: float) -> NoiseModel:
        """Add measurement readout error probability."""
        self._readout_error = _check_parameter(p, "Readout error")
        return self

    @property
    def readout_error(self) -> float:
        return self._readout_error

    @property
    def is_clean(self) -> bool:
        return not (
            self._all_qubit_errors
            or self._gate_errors
            or self._qubit_errors
            or self._readout_error
        )

    def channels_for(self, gate_name: str, qubit: int) -> List[NoiseChannel]:
        """Channels fired on ``qubit`` after gate ``gate_name``, in order."""
        return (
            self._gate_errors.get(gate_name, [])
            + self._all_qubit_errors
            + self._qubit_errors.get(qubit, [])
        )

    def apply(self, state: StateVector, op: Operation, rng) -> None:
        """Fire every matching channel after gate operation ``op``."""
        for qubit in op.qubits:
            for channel in self.channels_for(op.tag, qubit):
                channel.apply(state, qubit, rng)

    def __repr__(self):
        parts = []
        if self._all_qubit_errors:
            parts.append(f"{len(self._all_qubit_errors)} all-qubit errors")
        if self._gate_errors:
            parts.append(f"{len(self._gate_errors)} gate errors")
        if self._qubit_errors:
            parts.append(f"{len(self._qubit_errors)} qubit errors")
        if self._readout_error > 0:
            parts.append(f"readout={self._readout_error:.1%}")
        return f"NoiseModel({', '.join(parts) or 'clean'})"


# =============================================================================
# Trajectory Simulator
# =============================================================================

@dataclass
class TrajectoryResult:
    """Averaged outcome of a trajectory run."""

    probabilities: ndarray
    counts: Dict[str, int] = field(default_factory=dict)
    trajectories: int = 0

    @property
    def num_qubits(self) -> int:
        return int(self.probabilities.shape[0]).bit_length() - 1

    def probability(self, k: int) -> float:
        """Trajectory-averaged probability of basis state |k⟩."""
        return float(self.probabilities[k])

    def most_frequent(self) -> str:
        return max(self.counts, key=self.counts.get)

    def __repr__(self):
        top = sorted(self.counts.items(), key=lambda kv: -kv[1])[:4]
        shown = ", ".join(f"{k}: {v}" for k, v in top)
        return f"TrajectoryResult(trajectories={self.trajectories}, counts={{{shown}}})"


class TrajectorySimulator:
    """
    Monte Carlo wavefunction runner.

    Replays a circuit's operation log on a fresh StateVector per trajectory,
    firing the noise model after every gate. Trajectory i draws from its own
    generator spawned from ``seed``, so a seeded run is reproducible.

    Parameters
    ----------
    noise_model : NoiseModel, optional
        Channels to apply after gates. Defaults to a clean model.
    seed : int, optional
        Root seed for the per-trajectory generators.
    """

    def __init__(self, noise_model: Optional[NoiseModel] = None, seed: Optional[int] = None):
        self.noise_model = noise_model if noise_model is not None else NoiseModel()
        self.seed = seed

    def run(self, circuit: Circuit, trajectories: int = 1000) -> TrajectoryResult:
        """
        Run ``trajectories`` independent noisy replays of ``circuit``.

        Each trajectory contributes its final basis-state probabilities to
        the average and one sampled bitstring (after readout error) to the
        counts.
        """
        from tiny_qsim.circuit import apply_operation
        from tiny_qsim.statevector import StateVector

        if trajectories < 1:
            raise ValueError(f"trajectories must be ≥ 1, got {trajectories}")

        n = circuit.n_qubits
        dim = 1 << n
        readout = self.noise_model.readout_error
        total = np.zeros(dim, dtype=np.float64)
        counts: Dict[str, int] = {}

        logger.debug(
            "Running %d trajectories of %d operations on %d qubits",
            trajectories, len(circuit.operations), n,
        )
        for child in np.random.SeedSequence(self.seed).spawn(trajectories):
            rng = np.random.default_rng(child)
            state = StateVector(n, circuit.precision)
            for op in circuit.operations:
                apply_operation(state, op, rng)
                if op.is_gate:
                    self.noise_model.apply(state, op, rng)

            probs = state.probabilities().astype(np.float64)
            total += probs
            k = int(rng.choice(dim, p=probs / probs.sum()))
            if readout > 0:
                for q in range(n):
                    if rng.random() < readout:
                        k ^= 1 << q
            bitstring = format(k, f"0{n}b")
            counts[bitstring] = counts.get(bitstring, 0) + 1

        return TrajectoryResult(
            probabilities=total / trajectories,
            counts=counts,
            trajectories=trajectories,
        )
