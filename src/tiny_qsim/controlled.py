"""
Controlled and multi-qubit gates built on the StateVector kernels.

Two-qubit gates are thin wrappers over ``StateVector.apply_controlled_gate``.
SWAP is three CNOTs. The Toffoli kernel is specialised for its X payload and
swaps paired amplitudes directly; ``apply_multi_controlled_gate`` is the same
index-masked kernel for any 2x2 payload and any number of controls.

All qubit indices are validated (range and distinctness) before the state is
touched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from tiny_qsim import gates as g
from tiny_qsim.gates import GateMatrix

if TYPE_CHECKING:
    from tiny_qsim.statevector import StateVector


# ---------------------------------------------------------------------------
# Controlled single-qubit payloads
# ---------------------------------------------------------------------------

def cnot(state: StateVector, control: int, target: int) -> None:
    """CNOT gate (Controlled-X)."""
    state.apply_controlled_gate(control, target, g.X)


cx = cnot


def cy(state: StateVector, control: int, target: int) -> None:
    """Controlled-Y."""
    state.apply_controlled_gate(control, target, g.Y)


def cz(state: StateVector, control: int, target: int) -> None:
    """Controlled-Z (symmetric in its two qubits)."""
    state.apply_controlled_gate(control, target, g.Z)


def ch(state: StateVector, control: int, target: int) -> None:
    """Controlled-Hadamard."""
    state.apply_controlled_gate(control, target, g.H)


def cp(state: StateVector, control: int, target: int, phi: float) -> None:
    """Controlled-Phase: |11⟩ picks up e^(iφ)."""
    state.apply_controlled_gate(control, target, g.Phase(phi))


def cs(state: StateVector, control: int, target: int) -> None:
    state.apply_controlled_gate(control, target, g.S)


def ct(state: StateVector, control: int, target: int) -> None:
    state.apply_controlled_gate(control, target, g.T)


# ---------------------------------------------------------------------------
# Two- and three-qubit permutations
# ---------------------------------------------------------------------------

def swap(state: StateVector, q1: int, q2: int) -> None:
    """SWAP as CNOT(q1→q2), CNOT(q2→q1), CNOT(q1→q2)."""
    state._check_qubits(q1, q2)
    cnot(state, q1, q2)
    cnot(state, q2, q1)
    cnot(state, q1, q2)


def toffoli(state: StateVector, c1: int, c2: int, target: int) -> None:
    """
    Toffoli (CCX): flip ``target`` where both controls are 1.

    Takes the amplitudes with both controls set and exchanges each one that
    has the target clear with its partner.
    """
    c1, c2, target = state._check_qubits(c1, c2, target)
    v0, v1 = state._pair_views(target, (c1, c2))
    saved = v0.copy()
    v0[...] = v1
    v1[...] = saved


ccx = toffoli


def apply_multi_controlled_gate(
    state: StateVector, controls: Sequence[int], target: int, gate: GateMatrix
) -> None:
    """
    Apply ``gate`` to ``target`` on the subspace where every control is 1.

    With no controls this is a plain single-qubit gate; with two controls
    and ``gates.X`` it matches ``toffoli``.
    """
    *controls, target = state._check_qubits(*controls, target)
    m = state._as_matrix(gate)
    state._apply_pairs(m, *state._pair_views(target, controls))


def cswap(state: StateVector, control: int, q1: int, q2: int) -> None:
    """Fredkin (CSWAP): swap ``q1`` and ``q2`` where ``control`` is 1."""
    state._check_qubits(control, q1, q2)
    cnot(state, q2, q1)
    toffoli(state, control, q1, q2)
    cnot(state, q2, q1)


fredkin = cswap
