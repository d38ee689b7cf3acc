"""
OpenQASM 2.0 parser.

Parses a subset of OpenQASM 2.0 and replays it on a tiny-qsim Circuit,
so the returned circuit already holds the evolved state.

Supported features:
    - OPENQASM 2.0 header
    - include "qelib1.inc" (ignored; gates are built-in)
    - qreg, creg declarations (several registers are laid out in order)
    - qelib1 gates: id, x, y, z, h, s, sdg, t, tdg, rx, ry, rz, p, u1,
                    u2, u3, U, cx, CX, cy, cz, ch, cp, cu1, swap, ccx, cswap
    - Custom gate definitions (gate ... { ... }), nested and parameterized
    - Register broadcasting: ``h q;`` and ``cx a, b;`` on equal-size registers
    - measure q[i] -> c[j] and measure q -> c
    - barrier
    - Single-line (//) and multi-line comments
    - Parameter expressions: pi, +, -, *, /, ^, sin, cos, tan, exp, ln, sqrt

Not supported (raise QasmParseError): classical ``if``, ``reset``.
u2/u3/U are applied as Rz·Ry·Rz, which matches up to a global phase.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional

from tiny_qsim.circuit import Circuit
from tiny_qsim.exceptions import QasmParseError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Token:
    kind: str  # KEYWORD, IDENT, NUMBER, LPAREN, ...
    value: str
    line: int

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, line={self.line})"


# Order matters: longer and more specific patterns first
_TOKEN_PATTERNS = [
    ("COMMENT_ML", r"/\*.*?\*/"),
    ("COMMENT", r"//[^\n]*"),
    ("NUMBER", r"(?:\d+\.\d*|\.\d+)(?:[eE][+-]?\d+)?|\d+(?:[eE][+-]?\d+)?"),
    ("ARROW", r"->"),
    ("EQ", r"=="),
    ("SEMICOLON", r";"),
    ("COMMA", r","),
    ("LPAREN", r"\("),
    ("RPAREN", r"\)"),
    ("LBRACKET", r"\["),
    ("RBRACKET", r"\]"),
    ("LBRACE", r"\{"),
    ("RBRACE", r"\}"),
    ("PLUS", r"\+"),
    ("MINUS", r"-"),
    ("STAR", r"\*"),
    ("SLASH", r"/"),
    ("CARET", r"\^"),
    ("STRING", r'"[^"\n]*"'),
    ("IDENT", r"[a-zA-Z_][a-zA-Z0-9_]*"),
    ("NEWLINE", r"\n"),
    ("SKIP", r"[ \t\r]+"),
    ("MISMATCH", r"."),
]

_TOKEN_RE = re.compile(
    "|".join(f"(?P<{name}>{pattern})" for name, pattern in _TOKEN_PATTERNS), re.DOTALL
)

_KEYWORDS = {
    "OPENQASM", "include", "qreg", "creg", "gate", "opaque",
    "measure", "barrier", "reset", "if",
}

_FUNCTIONS = {
    "sin": math.sin, "cos": math.cos, "tan": math.tan,
    "exp": math.exp, "ln": math.log, "sqrt": math.sqrt,
}


def _tokenize(source: str) -> list[Token]:
    """Tokenize OpenQASM source into a list of tokens."""
    tokens = []
    line = 1

    for match in _TOKEN_RE.finditer(source):
        kind = match.lastgroup
        value = match.group()

        if kind == "NEWLINE":
            line += 1
            continue
        if kind in ("SKIP", "COMMENT", "COMMENT_ML"):
            line += value.count("\n")
            continue
        if kind == "MISMATCH":
            raise QasmParseError(f"Unexpected character {value!r}", line)

        if kind == "IDENT" and value in _KEYWORDS:
            kind = "KEYWORD"
        tokens.append(Token(kind, value, line))

    return tokens


# ---------------------------------------------------------------------------
# Expression evaluator (for gate parameters)
# ---------------------------------------------------------------------------

class _ExprParser:
    """
    Recursive-descent evaluator over a token slice.

    Grammar::

        expr    := term (('+' | '-') term)*
        term    := unary (('*' | '/') unary)*
        unary   := '-' unary | power
        power   := primary ('^' unary)?
        primary := NUMBER | 'pi' | IDENT | func '(' expr ')' | '(' expr ')'

    Identifiers resolve through ``env`` (gate parameters inside a body).
    """

    def __init__(self, tokens: list[Token], pos: int, env: dict[str, float]) -> None:
        self.tokens = tokens
        self.pos = pos
        self.env = env

    def _tok(self) -> Token:
        if self.pos >= len(self.tokens):
            last = self.tokens[-1].line if self.tokens else 0
            raise QasmParseError("Unexpected end of expression", last)
        return self.tokens[self.pos]

    def _at(self, *kinds: str) -> bool:
        return self.pos < len(self.tokens) and self.tokens[self.pos].kind in kinds

    def expr(self) -> float:
        left = self.term()
        while self._at("PLUS", "MINUS"):
            op = self._tok().kind
            self.pos += 1
            right = self.term()
            left = left + right if op == "PLUS" else left - right
        return left

    def term(self) -> float:
        left = self.unary()
        while self._at("STAR", "SLASH"):
            tok = self._tok()
            self.pos += 1
            right = self.unary()
            if tok.kind == "STAR":
                left = left * right
            elif right == 0:
                raise QasmParseError("Division by zero in expression", tok.line)
            else:
                left = left / right
        return left

    def unary(self) -> float:
        if self._at("MINUS"):
            self.pos += 1
            return -self.unary()
        if self._at("PLUS"):
            self.pos += 1
            return self.unary()
        return self.power()

    def power(self) -> float:
        base = self.primary()
        if self._at("CARET"):
            tok = self._tok()
            self.pos += 1
            try:
                value = base ** self.unary()
            except OverflowError:
                raise QasmParseError("Power expression out of range", tok.line) from None
            if isinstance(value, complex):
                raise QasmParseError("Power expression has no real value", tok.line)
            return value
        return base

    def primary(self) -> float:
        tok = self._tok()

        if tok.kind == "NUMBER":
            self.pos += 1
            return float(tok.value)

        if tok.kind == "IDENT" and tok.value == "pi":
            self.pos += 1
            return math.pi

        if tok.kind == "IDENT" and tok.value in _FUNCTIONS:
            self.pos += 1
            self._expect_kind("LPAREN", f"Expected '(' after {tok.value}")
            arg = self.expr()
            self._expect_kind("RPAREN", f"Expected ')' after {tok.value} argument")
            try:
                return _FUNCTIONS[tok.value](arg)
            except ValueError:
                raise QasmParseError(f"{tok.value}({arg}) is undefined", tok.line) from None

        if tok.kind == "IDENT":
            if tok.value not in self.env:
                raise QasmParseError(f"Unknown identifier '{tok.value}' in expression", tok.line)
            self.pos += 1
            return self.env[tok.value]

        if tok.kind == "LPAREN":
            self.pos += 1
            val = self.expr()
            self._expect_kind("RPAREN", "Unmatched '('")
            return val

        raise QasmParseError(f"Unexpected token in expression: {tok.value!r}", tok.line)

    def _expect_kind(self, kind: str, message: str) -> None:
        tok = self._tok()
        if tok.kind != kind:
            raise QasmParseError(message, tok.line)
        self.pos += 1


def _eval_expr(
    tokens: list[Token], pos: int, env: Optional[dict[str, float]] = None
) -> tuple[float, int]:
    """Evaluate one expression starting at ``pos``; returns (value, new_position)."""
    parser = _ExprParser(tokens, pos, env or {})
    value = parser.expr()
    return value, parser.pos


# ---------------------------------------------------------------------------
# Parsed statements
# ---------------------------------------------------------------------------

@dataclass
class _GateCall:
    """A gate application, at top level or inside a gate body."""
    name: str
    params: list[list[Token]]  # one token slice per argument expression
    args: list[tuple[str, Optional[int]]]  # (register or formal name, index)
    line: int


@dataclass
class _GateDef:
    """User-defined gate from a 'gate' declaration."""
    name: str
    params: list[str]
    qubits: list[str]
    body: list[_GateCall]


# name -> (number of parameters, number of qubits)
_BUILTIN_ARITY = {
    "id": (0, 1), "i": (0, 1), "x": (0, 1), "y": (0, 1), "z": (0, 1), "h": (0, 1),
    "s": (0, 1), "sdg": (0, 1), "t": (0, 1), "tdg": (0, 1),
    "rx": (1, 1), "ry": (1, 1), "rz": (1, 1), "p": (1, 1), "u1": (1, 1),
    "u2": (2, 1), "u3": (3, 1), "u": (3, 1),
    "cx": (0, 2), "cy": (0, 2), "cz": (0, 2), "ch": (0, 2), "cs": (0, 2), "ct": (0, 2),
    "cp": (1, 2), "cu1": (1, 2), "swap": (0, 2),
    "ccx": (0, 3), "cswap": (0, 3),
}

# Built-in primitives of the language itself
_PRIMITIVES = {"U": "u", "CX": "cx"}


class QasmParser:
    """
    OpenQASM 2.0 parser.

    Converts OpenQASM source into a tiny-qsim Circuit.

    Parameters
    ----------
    seed : int, optional
        Seed of the resulting circuit's generator (used by ``measure``).

    Example
    -------
    >>> from tiny_qsim.qasm import QasmParser
    >>> qasm = '''
    ... OPENQASM 2.0;
    ... include "qelib1.inc";
    ... qreg q[2];
    ... creg c[2];
    ... h q[0];
    ... cx q[0],q[1];
    ... '''
    >>> circuit = QasmParser().parse(qasm)
    >>> round(circuit.probability(3), 6)
    0.5
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._qregs: dict[str, int] = {}  # name -> size
        self._cregs: dict[str, int] = {}
        self._gate_defs: dict[str, _GateDef] = {}
        self._tokens: list[Token] = []
        self._pos: int = 0

    def parse(self, source: str) -> Circuit:
        """
        Parse OpenQASM 2.0 source and return a Circuit.

        Parameters
        ----------
        source : str
            OpenQASM 2.0 source code.

        Returns
        -------
        Circuit
            Circuit whose state and log reflect the program.
        """
        self._tokens = _tokenize(source)
        self._pos = 0
        self._qregs = {}
        self._cregs = {}
        self._gate_defs = {}

        self._parse_header()

        # The circuit is sized by all qregs, so read the whole program first
        statements: list[tuple] = []
        while self._pos < len(self._tokens):
            self._parse_statement(statements)

        total_qubits = sum(self._qregs.values())
        if total_qubits == 0:
            raise QasmParseError("No qreg declared")

        circuit = Circuit(total_qubits, seed=self.seed)
        for kind, *payload in statements:
            if kind == "measure":
                for qubit in payload[0]:
                    circuit.measure(qubit)
            elif kind == "barrier":
                circuit.barrier(*payload[0])
            else:
                call, applications = payload
                params = _eval_params(call, {})
                for qubits in applications:
                    self._apply_call(circuit, call, params, qubits)

        logger.debug(
            "Parsed QASM: %d qubits, %d operations", circuit.n_qubits, len(circuit.operations)
        )
        return circuit

    # -- Header parsing -----------------------------------------------------

    def _parse_header(self) -> None:
        """Parse OPENQASM version and include statements."""
        if self._peek_keyword("OPENQASM"):
            tok = self._advance()
            version = self._expect("NUMBER")
            if not version.startswith("2"):
                raise QasmParseError(f"Unsupported OpenQASM version {version}", tok.line)
            self._expect("SEMICOLON")

        while self._peek_keyword("include"):
            self._advance()
            self._expect("STRING")
            self._expect("SEMICOLON")

    # -- Statement parsing --------------------------------------------------

    def _parse_statement(self, statements: list) -> None:
        """Parse a single top-level statement."""
        tok = self._current()

        if tok.kind == "KEYWORD":
            if tok.value == "qreg":
                self._parse_register(self._qregs)
            elif tok.value == "creg":
                self._parse_register(self._cregs)
            elif tok.value == "gate":
                self._parse_gate_def()
            elif tok.value == "opaque":
                self._skip_to_semicolon()
            elif tok.value == "measure":
                self._parse_measure(statements)
            elif tok.value == "barrier":
                self._parse_barrier(statements)
            elif tok.value in ("reset", "if"):
                raise QasmParseError(f"'{tok.value}' is not supported", tok.line)
            else:
                raise QasmParseError(f"Unexpected keyword '{tok.value}'", tok.line)
        elif tok.kind == "IDENT":
            call = self._parse_gate_call()
            statements.append(("gate", call, self._broadcast(call)))
        elif tok.kind == "SEMICOLON":
            self._advance()
        else:
            raise QasmParseError(f"Unexpected token {tok.value!r}", tok.line)

    def _parse_register(self, registers: dict[str, int]) -> None:
        tok = self._advance()  # qreg / creg
        name = self._expect("IDENT")
        self._expect("LBRACKET")
        size = int(self._expect_int())
        self._expect("RBRACKET")
        self._expect("SEMICOLON")
        if name in self._qregs or name in self._cregs:
            raise QasmParseError(f"Register '{name}' already declared", tok.line)
        if size < 1:
            raise QasmParseError(f"Register '{name}' must have size ≥ 1", tok.line)
        registers[name] = size

    def _parse_gate_def(self) -> None:
        """Parse: gate name(params) qubits { body }"""
        tok = self._advance()  # gate
        name = self._expect("IDENT")
        if name in _BUILTIN_ARITY or name in self._gate_defs:
            raise QasmParseError(f"Gate '{name}' already defined", tok.line)

        params = []
        if self._peek("LPAREN"):
            self._advance()
            while not self._peek("RPAREN"):
                params.append(self._expect("IDENT"))
                if not self._peek("RPAREN"):
                    self._expect("COMMA")
            self._advance()

        qubits = [self._expect("IDENT")]
        while self._peek("COMMA"):
            self._advance()
            qubits.append(self._expect("IDENT"))

        self._expect("LBRACE")
        body = []
        while not self._peek("RBRACE"):
            if self._current().kind == "KEYWORD" and self._current().value == "barrier":
                self._skip_to_semicolon()
                continue
            call = self._parse_gate_call()
            if not (
                call.name in _BUILTIN_ARITY
                or call.name in _PRIMITIVES
                or call.name in self._gate_defs
            ):
                raise QasmParseError(
                    f"Gate '{name}' uses undefined gate '{call.name}'", call.line
                )
            for arg_name, index in call.args:
                if index is not None or arg_name not in qubits:
                    raise QasmParseError(
                        f"Gate '{name}' body may only use its own qubit arguments", call.line
                    )
            body.append(call)
        self._advance()  # }

        self._gate_defs[name] = _GateDef(name=name, params=params, qubits=qubits, body=body)

    def _parse_measure(self, statements: list) -> None:
        self._advance()  # measure
        q_ref = self._parse_ref()
        self._expect("ARROW")
        c_ref = self._parse_ref()
        tok = self._current()
        self._expect("SEMICOLON")

        q_size = self._ref_size(q_ref, self._qregs, tok.line)
        c_size = self._ref_size(c_ref, self._cregs, tok.line)
        if q_size != c_size:
            raise QasmParseError("measure arguments have different sizes", tok.line)
        statements.append(("measure", self._resolve(q_ref, tok.line)))

    def _parse_barrier(self, statements: list) -> None:
        tok = self._advance()  # barrier
        refs = [self._parse_ref()]
        while self._peek("COMMA"):
            self._advance()
            refs.append(self._parse_ref())
        self._expect("SEMICOLON")
        qubits: list[int] = []
        for ref in refs:
            qubits.extend(self._resolve(ref, tok.line))
        statements.append(("barrier", qubits))

    def _parse_gate_call(self) -> _GateCall:
        """Parse: gate_name(params) arg_list;"""
        name_tok = self._advance()
        if name_tok.kind != "IDENT":
            raise QasmParseError(f"Expected a gate name, got '{name_tok.value}'", name_tok.line)

        params: list[list[Token]] = []
        if self._peek("LPAREN"):
            self._advance()
            params = self._split_params(name_tok.line)

        args = [self._parse_ref()]
        while self._peek("COMMA"):
            self._advance()
            args.append(self._parse_ref())
        self._expect("SEMICOLON")
        return _GateCall(name_tok.value, params, args, name_tok.line)

    def _split_params(self, line: int) -> list[list[Token]]:
        """Collect comma-separated expression slices up to the closing ')'."""
        params: list[list[Token]] = []
        current: list[Token] = []
        depth = 0
        while True:
            tok = self._advance()
            if tok.kind == "LPAREN":
                depth += 1
            elif tok.kind == "RPAREN":
                if depth == 0:
                    break
                depth -= 1
            elif tok.kind == "COMMA" and depth == 0:
                if not current:
                    raise QasmParseError("Empty parameter expression", line)
                params.append(current)
                current = []
                continue
            elif tok.kind in ("SEMICOLON", "LBRACE", "RBRACE"):
                raise QasmParseError("Unterminated parameter list", tok.line)
            current.append(tok)
        if current:
            params.append(current)
        elif params:
            raise QasmParseError("Empty parameter expression", line)
        return params

    def _parse_ref(self) -> tuple[str, Optional[int]]:
        """Parse 'reg[index]' or 'reg'."""
        name = self._expect("IDENT")
        if self._peek("LBRACKET"):
            self._advance()
            idx = int(self._expect_int())
            self._expect("RBRACKET")
            return name, idx
        return name, None

    # -- Register resolution ------------------------------------------------

    def _ref_size(self, ref: tuple[str, Optional[int]], registers: dict, line: int) -> int:
        name, idx = ref
        if name not in registers:
            raise QasmParseError(f"Unknown register '{name}'", line)
        if idx is None:
            return registers[name]
        if idx >= registers[name]:
            raise QasmParseError(
                f"Index {idx} out of range for register '{name}' of size {registers[name]}",
                line,
            )
        return 1

    def _resolve(self, ref: tuple[str, Optional[int]], line: int) -> list[int]:
        """Flat qubit indices named by a reference (one, or a whole register)."""
        self._ref_size(ref, self._qregs, line)
        name, idx = ref
        start = self._qreg_offset(name)
        if idx is None:
            return list(range(start, start + self._qregs[name]))
        return [start + idx]

    def _qreg_offset(self, name: str) -> int:
        offset = 0
        for reg, size in self._qregs.items():
            if reg == name:
                return offset
            offset += size
        raise KeyError(name)

    def _broadcast(self, call: _GateCall) -> list[list[int]]:
        """Expand register arguments into one qubit list per application."""
        resolved = [self._resolve(ref, call.line) for ref in call.args]
        size = max(len(r) for r in resolved)
        for r in resolved:
            if len(r) not in (1, size):
                raise QasmParseError(
                    f"Register arguments of '{call.name}' have different sizes", call.line
                )
        return [[r[0] if len(r) == 1 else r[k] for r in resolved] for k in range(size)]

    # -- Gate application to circuit ----------------------------------------

    def _apply_call(
        self, circuit: Circuit, call: _GateCall, params: list[float], qubits: list[int]
    ) -> None:
        """Check arity, then apply a built-in gate or expand a definition."""
        name = call.name
        key = _PRIMITIVES.get(name, name)
        if key in _BUILTIN_ARITY:
            n_params, n_qubits = _BUILTIN_ARITY[key]
            self._check_arity(call, params, qubits, n_params, n_qubits)
            self._apply_builtin(circuit, key, params, qubits, call.line)
        elif name in self._gate_defs:
            gate_def = self._gate_defs[name]
            self._check_arity(call, params, qubits, len(gate_def.params), len(gate_def.qubits))
            self._expand_gate_def(circuit, gate_def, params, qubits)
        else:
            raise QasmParseError(f"Unknown gate: '{name}'", call.line)

    @staticmethod
    def _check_arity(call, params, qubits, n_params, n_qubits) -> None:
        if len(params) != n_params:
            raise QasmParseError(
                f"Gate '{call.name}' takes {n_params} parameter(s), got {len(params)}",
                call.line,
            )
        if len(qubits) != n_qubits:
            raise QasmParseError(
                f"Gate '{call.name}' takes {n_qubits} qubit(s), got {len(qubits)}",
                call.line,
            )

    @staticmethod
    def _apply_builtin(
        circuit: Circuit, name: str, params: list[float], qubits: list[int], line: int
    ) -> None:
        if len(set(qubits)) != len(qubits):
            raise QasmParseError(f"Gate '{name}' repeats a qubit: {qubits}", line)

        gate_map = {
            "id": lambda: circuit.i(qubits[0]),
            "i": lambda: circuit.i(qubits[0]),
            "x": lambda: circuit.x(qubits[0]),
            "y": lambda: circuit.y(qubits[0]),
            "z": lambda: circuit.z(qubits[0]),
            "h": lambda: circuit.h(qubits[0]),
            "s": lambda: circuit.s(qubits[0]),
            "sdg": lambda: circuit.sdg(qubits[0]),
            "t": lambda: circuit.t(qubits[0]),
            "tdg": lambda: circuit.tdg(qubits[0]),
            "rx": lambda: circuit.rx(qubits[0], params[0]),
            "ry": lambda: circuit.ry(qubits[0], params[0]),
            "rz": lambda: circuit.rz(qubits[0], params[0]),
            "p": lambda: circuit.p(qubits[0], params[0]),
            "u1": lambda: circuit.p(qubits[0], params[0]),
            "u2": lambda: _apply_u3(circuit, qubits[0], math.pi / 2, params[0], params[1]),
            "u3": lambda: _apply_u3(circuit, qubits[0], *params),
            "u": lambda: _apply_u3(circuit, qubits[0], *params),
            "cx": lambda: circuit.cx(qubits[0], qubits[1]),
            "cy": lambda: circuit.cy(qubits[0], qubits[1]),
            "cz": lambda: circuit.cz(qubits[0], qubits[1]),
            "ch": lambda: circuit.ch(qubits[0], qubits[1]),
            "cs": lambda: circuit.cs(qubits[0], qubits[1]),
            "ct": lambda: circuit.ct(qubits[0], qubits[1]),
            "cp": lambda: circuit.cp(qubits[0], qubits[1], params[0]),
            "cu1": lambda: circuit.cp(qubits[0], qubits[1], params[0]),
            "swap": lambda: circuit.swap(qubits[0], qubits[1]),
            "ccx": lambda: circuit.ccx(qubits[0], qubits[1], qubits[2]),
            "cswap": lambda: circuit.cswap(qubits[0], qubits[1], qubits[2]),
        }
        gate_map[name]()

    def _expand_gate_def(
        self, circuit: Circuit, gate_def: _GateDef, params: list[float], qubits: list[int]
    ) -> None:
        """Expand a user-defined gate inline, binding formal names to values."""
        env = dict(zip(gate_def.params, params))
        qubit_map = dict(zip(gate_def.qubits, qubits))
        for call in gate_def.body:
            sub_qubits = [qubit_map[name] for name, _ in call.args]
            self._apply_call(circuit, call, _eval_params(call, env), sub_qubits)

    # -- Token helpers ------------------------------------------------------

    def _current(self) -> Token:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        last = self._tokens[-1].line if self._tokens else 0
        raise QasmParseError("Unexpected end of file", last)

    def _advance(self) -> Token:
        tok = self._current()
        self._pos += 1
        return tok

    def _peek(self, kind: str) -> bool:
        return self._pos < len(self._tokens) and self._tokens[self._pos].kind == kind

    def _peek_keyword(self, value: str) -> bool:
        return self._peek("KEYWORD") and self._tokens[self._pos].value == value

    def _expect(self, kind: str) -> str:
        tok = self._current()
        if tok.kind != kind:
            raise QasmParseError(f"Expected {kind}, got {tok.kind} ('{tok.value}')", tok.line)
        self._pos += 1
        return tok.value

    def _expect_int(self) -> str:
        tok = self._current()
        value = self._expect("NUMBER")
        if not value.isdigit():
            raise QasmParseError(f"Expected an integer, got '{value}'", tok.line)
        return value

    def _skip_to_semicolon(self) -> None:
        while self._advance().kind != "SEMICOLON":
            pass


def _eval_params(call: _GateCall, env: dict[str, float]) -> list[float]:
    """Evaluate a call's parameter expressions under ``env``."""
    values = []
    for expr_tokens in call.params:
        value, end = _eval_expr(expr_tokens, 0, env)
        if end != len(expr_tokens):
            raise QasmParseError("Malformed parameter expression", call.line)
        values.append(value)
    return values


def _apply_u3(circuit: Circuit, qubit: int, theta: float, phi: float, lam: float) -> None:
    """U(θ,φ,λ) = Rz(φ)·Ry(θ)·Rz(λ) up to global phase."""
    circuit.rz(qubit, lam).ry(qubit, theta).rz(qubit, phi)


# ---------------------------------------------------------------------------
# Convenience function
# ---------------------------------------------------------------------------

def parse_qasm(source: str, seed: Optional[int] = None) -> Circuit:
    """
    Parse OpenQASM 2.0 source into a Circuit.

    Parameters
    ----------
    source : str
        OpenQASM 2.0 source code.
    seed : int, optional
        Seed for measurement outcomes.

    Example
    -------
    >>> from tiny_qsim.qasm import parse_qasm
    >>> qc = parse_qasm('''
    ...     OPENQASM 2.0;
    ...     include "qelib1.inc";
    ...     qreg q[2];
    ...     h q[0];
    ...     cx q[0],q[1];
    ... ''')
    >>> print(qc)
    Circuit(n_qubits=2, depth=2, gates=2)
    """
    return QasmParser(seed=seed).parse(source)
