"""
OpenQASM 2.0 export of a circuit's operation log.

Gates outside qelib1 are written in their standard equivalents
(``cs`` as ``cp(pi/2)``, ``ct`` as ``cp(pi/4)``). Noise operations have no
QASM form and are written as comments, which the parser skips.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tiny_qsim.circuit import Circuit, Operation

# tag -> (QASM name, fixed parameter text)
_RENAMED = {
    "i": ("id", None),
    "cs": ("cp", "pi/2"),
    "ct": ("cp", "pi/4"),
}


def _qubits(op: Operation) -> str:
    return ", ".join(f"q[{q}]" for q in op.qubits)


def _format_param(value: float) -> str:
    return repr(float(value))


def _statement(op: Operation) -> str:
    if op.tag == "measure":
        q = op.qubits[0]
        return f"measure q[{q}] -> c[{q}];"
    if op.tag == "barrier":
        return f"barrier {_qubits(op)};"
    if op.is_noise:
        return f"// {op.tag}({_format_param(op.param)}) {_qubits(op)};"

    name, fixed = _RENAMED.get(op.tag, (op.tag, None))
    if fixed is not None:
        return f"{name}({fixed}) {_qubits(op)};"
    if op.param is not None:
        return f"{name}({_format_param(op.param)}) {_qubits(op)};"
    return f"{name} {_qubits(op)};"


def to_qasm(circuit: Circuit) -> str:
    """
    Export a circuit as an OpenQASM 2.0 string.

    Parameters
    ----------
    circuit : Circuit
        Circuit whose operation log is written out.

    Returns
    -------
    str
        QASM source; re-parsing it reproduces the gate sequence.
    """
    n = circuit.n_qubits
    lines = [
        "OPENQASM 2.0;",
        'include "qelib1.inc";',
        "",
        f"qreg q[{n}];",
        f"creg c[{n}];",
        "",
    ]
    lines.extend(_statement(op) for op in circuit.operations)
    return "\n".join(lines) + "\n"
