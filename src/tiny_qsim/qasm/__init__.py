"""OpenQASM 2.0 import and export for tiny-qsim."""

from tiny_qsim.qasm.exporter import to_qasm
from tiny_qsim.qasm.parser import QasmParser, parse_qasm

__all__ = ["parse_qasm", "QasmParser", "to_qasm"]
