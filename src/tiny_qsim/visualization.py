"""
Text rendering of circuits and states.

Features:
- ASCII circuit diagrams built column by column from the operation log
- Amplitude listing with magnitude and phase
- Probability bar charts
- Trajectory count histograms
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional

import numpy as np

if TYPE_CHECKING:
    from tiny_qsim.circuit import Circuit, Operation
    from tiny_qsim.statevector import StateVector


class CircuitDrawer:
    """
    Draw a circuit's operation log as ASCII art.

    Each operation occupies one column; every qubit line gets a cell in
    every column so the wires stay aligned.

    Example output::

        q0: ──[H]──●─────[M]───
        q1: ───────⊕───────────
    """

    # Gate symbols
    GATE_SYMBOLS = {
        "i": "I", "x": "X", "y": "Y", "z": "Z", "h": "H",
        "s": "S", "sdg": "S†", "t": "T", "tdg": "T†",
        "rx": "Rx", "ry": "Ry", "rz": "Rz", "p": "P",
        "measure": "M",
        "bit_flip": "BF", "phase_flip": "PF", "depolarizing": "DP",
        "amplitude_damping": "AD", "phase_damping": "PD",
    }

    # Payload shown on the target of a controlled gate
    CONTROLLED_TARGETS = {
        "cx": "⊕", "cy": "[Y]", "cz": "●", "ch": "[H]", "cs": "[S]", "ct": "[T]",
    }

    def __init__(self, num_qubits: int):
        self.num_qubits = num_qubits
        self.columns: List[List[str]] = []

    def _wire_column(self, lo: int, hi: int) -> List[str]:
        return ["│" if lo < i < hi else "─" for i in range(self.num_qubits)]

    def add_single(self, tag: str, qubit: int, param: Optional[float] = None) -> None:
        col = ["─"] * self.num_qubits
        symbol = self.GATE_SYMBOLS.get(tag, tag.upper())
        if param is not None:
            label = _format_angle(param) if tag in ("rx", "ry", "rz", "p") else f"{param:g}"
            symbol = f"{symbol}({label})"
        col[qubit] = f"[{symbol}]"
        self.columns.append(col)

    def add_controlled(self, tag: str, control: int, target: int,
                       param: Optional[float] = None) -> None:
        col = self._wire_column(min(control, target), max(control, target))
        col[control] = "●"
        if tag == "cp":
            col[target] = f"[P({_format_angle(param)})]"
        else:
            col[target] = self.CONTROLLED_TARGETS[tag]
        self.columns.append(col)

    def add_swap(self, q1: int, q2: int) -> None:
        col = self._wire_column(min(q1, q2), max(q1, q2))
        col[q1] = "✕"
        col[q2] = "✕"
        self.columns.append(col)

    def add_ccx(self, c1: int, c2: int, target: int) -> None:
        qubits = (c1, c2, target)
        col = self._wire_column(min(qubits), max(qubits))
        col[c1] = "●"
        col[c2] = "●"
        col[target] = "⊕"
        self.columns.append(col)

    def add_cswap(self, control: int, q1: int, q2: int) -> None:
        qubits = (control, q1, q2)
        col = self._wire_column(min(qubits), max(qubits))
        col[control] = "●"
        col[q1] = "✕"
        col[q2] = "✕"
        self.columns.append(col)

    def add_barrier(self, qubits) -> None:
        col = ["─"] * self.num_qubits
        for q in qubits:
            col[q] = "░"
        self.columns.append(col)

    def add_operation(self, op: Operation) -> None:
        """Add one column for a recorded operation."""
        tag, qubits = op.tag, op.qubits
        if tag == "barrier":
            self.add_barrier(qubits)
        elif tag == "swap":
            self.add_swap(*qubits)
        elif tag == "ccx":
            self.add_ccx(*qubits)
        elif tag == "cswap":
            self.add_cswap(*qubits)
        elif tag in self.CONTROLLED_TARGETS or tag == "cp":
            self.add_controlled(tag, qubits[0], qubits[1], op.param)
        else:
            self.add_single(tag, qubits[0], op.param)

    def draw(self) -> str:
        """Generate the ASCII diagram, one line per qubit."""
        # Every cell in a column is padded to the widest cell
        widths = [max(len(cell) for cell in col) + 2 for col in self.columns]
        lines = []
        for q in range(self.num_qubits):
            line = f"q{q}: ──"
            for col, width in zip(self.columns, widths):
                cell = col[q]
                if cell == "─":
                    line += "─" * width
                elif cell in ("│", "░"):
                    line += cell.center(width)
                else:
                    line += cell.center(width, "─")
            line += "──"
            lines.append(line)
        return "\n".join(lines)


def _format_angle(angle: float) -> str:
    """Short angle label, using π for common multiples."""
    for num, den, label in (
        (1, 1, "π"), (1, 2, "π/2"), (1, 4, "π/4"), (1, 8, "π/8"), (3, 4, "3π/4"), (2, 1, "2π"),
    ):
        value = num * np.pi / den
        if abs(angle - value) < 1e-9:
            return label
        if abs(angle + value) < 1e-9:
            return f"-{label}"
    return f"{angle:.2f}"


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------

def draw_circuit(circuit: Circuit) -> str:
    """
    Render a circuit's operation log as text.

    Parameters
    ----------
    circuit : Circuit
        Any object with ``n_qubits`` and ``operations``.

    Returns
    -------
    str
        One line per qubit, ``q0: ──...──``.
    """
    drawer = CircuitDrawer(circuit.n_qubits)
    for op in circuit.operations:
        drawer.add_operation(op)
    return drawer.draw()


def show_state(state: StateVector, threshold: float = 1e-10) -> str:
    """
    List amplitudes whose probability exceeds ``threshold``.

    Each line shows the basis ket, a bar, the magnitude, the phase (when
    non-zero) and the probability.
    """
    n = state.n_qubits
    amplitudes = state.amplitudes
    lines = ["State Vector:", "─" * 50]

    for i, amp in enumerate(amplitudes):
        prob = float(np.abs(amp) ** 2)
        if prob <= threshold:
            continue

        bitstring = format(i, f"0{n}b")
        magnitude = float(np.abs(amp))
        phase = float(np.angle(amp))
        bar = "█" * int(prob * 40)

        if abs(phase) < 0.01:
            phase_str = ""
        elif abs(abs(phase) - np.pi) < 0.01:
            phase_str = " (π)"
        else:
            phase_str = f" ({phase:.2f})"

        lines.append(f"|{bitstring}⟩: {bar:40s} {magnitude:.3f}{phase_str} ({prob * 100:.1f}%)")

    return "\n".join(lines)


def show_probabilities(state: StateVector, threshold: float = 0.01) -> str:
    """Bar chart of basis-state probabilities at or above ``threshold``."""
    n = state.n_qubits
    lines = ["Probabilities:", "─" * 50]

    for i, prob in enumerate(state.probabilities()):
        if prob < threshold:
            continue
        bitstring = format(i, f"0{n}b")
        bar = "█" * int(prob * 40)
        lines.append(f"|{bitstring}⟩: {bar:40s} {prob * 100:5.1f}%")

    return "\n".join(lines)


def show_counts(counts: Dict[str, int], total: Optional[int] = None) -> str:
    """Histogram of sampled bitstrings, e.g. ``TrajectoryResult.counts``."""
    if total is None:
        total = sum(counts.values())

    lines = ["Measurement Results:", "─" * 50]
    for bitstring in sorted(counts):
        count = counts[bitstring]
        prob = count / total
        bar = "█" * int(prob * 40)
        lines.append(f"|{bitstring}⟩: {bar:40s} {count:4d} ({prob * 100:5.1f}%)")

    return "\n".join(lines)
