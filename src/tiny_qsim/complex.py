"""
Complex scalar arithmetic over a fixed floating-point precision.

``ComplexScalar`` is a small immutable (re, im) value whose components are
numpy floating scalars, either ``float32`` or ``float64``. Amplitude storage
itself uses numpy complex arrays; this type is what the public API hands out
when a single amplitude or gate entry is read, and what the algebraic tests
reason about.

Division is deliberately unguarded: dividing by a zero-magnitude value
produces ``inf``/``nan`` components without raising or warning.
"""

from __future__ import annotations

from dataclasses import InitVar, dataclass
from numbers import Number

import numpy as np

from tiny_qsim.config import DEFAULT_PRECISION

_COMPLEX_FOR_REAL = {
    np.dtype(np.float32): np.dtype(np.complex64),
    np.dtype(np.float64): np.dtype(np.complex128),
}
_REAL_FOR_COMPLEX = {c: r for r, c in _COMPLEX_FOR_REAL.items()}


def real_type(precision) -> type:
    """Normalize a precision (type, dtype or name) to float32/float64."""
    dtype = np.dtype(precision)
    if dtype in _REAL_FOR_COMPLEX:
        dtype = _REAL_FOR_COMPLEX[dtype]
    if dtype not in _COMPLEX_FOR_REAL:
        raise ValueError(f"Unsupported precision {precision!r}; use float32 or float64")
    return dtype.type


def complex_dtype(precision) -> np.dtype:
    """Complex dtype matching a real precision (float32 -> complex64)."""
    return _COMPLEX_FOR_REAL[np.dtype(real_type(precision))]


@dataclass(frozen=True, eq=False, repr=False)
class ComplexScalar:
    """
    Immutable complex number with explicit precision.

    Parameters
    ----------
    re, im : float
        Real and imaginary parts.
    precision : type, optional
        ``numpy.float32`` or ``numpy.float64``. Inferred from ``re`` when it
        is already a numpy scalar, otherwise the package default.

    Example
    -------
    >>> z = ComplexScalar(3.0, 4.0)
    >>> float(z.norm())
    5.0
    >>> ComplexScalar.i() * ComplexScalar.i() == ComplexScalar(-1.0, 0.0)
    True
    """

    re: float = 0.0
    im: float = 0.0
    precision: InitVar[type | None] = None

    def __post_init__(self, precision) -> None:
        if precision is None:
            precision = self.re.dtype if isinstance(self.re, np.floating) else DEFAULT_PRECISION
        ftype = real_type(precision)
        object.__setattr__(self, "re", ftype(self.re))
        object.__setattr__(self, "im", ftype(self.im))

    # -- Constructors -------------------------------------------------------

    @classmethod
    def from_real(cls, re: float, precision=None) -> ComplexScalar:
        return cls(re, 0.0, precision)

    @classmethod
    def from_polar(cls, r: float, theta: float, precision=None) -> ComplexScalar:
        """Build r·e^(iθ)."""
        return cls(r * np.cos(theta), r * np.sin(theta), precision)

    @classmethod
    def from_complex(cls, z: complex, precision=None) -> ComplexScalar:
        if isinstance(z, ComplexScalar):
            return z if precision is None else cls(z.re, z.im, precision)
        z = complex(z)
        return cls(z.real, z.imag, precision)

    @classmethod
    def zero(cls, precision=None) -> ComplexScalar:
        return cls(0.0, 0.0, precision)

    @classmethod
    def one(cls, precision=None) -> ComplexScalar:
        return cls(1.0, 0.0, precision)

    @classmethod
    def i(cls, precision=None) -> ComplexScalar:
        """Imaginary unit."""
        return cls(0.0, 1.0, precision)

    @property
    def dtype(self) -> np.dtype:
        return self.re.dtype

    def _new(self, re, im) -> ComplexScalar:
        return ComplexScalar(re, im, self.re.dtype)

    def _coerce(self, other) -> ComplexScalar:
        if isinstance(other, ComplexScalar):
            return other
        if isinstance(other, Number):
            return ComplexScalar.from_complex(other, self.re.dtype)
        return NotImplemented

    # -- Arithmetic ---------------------------------------------------------

    def add(self, other: ComplexScalar) -> ComplexScalar:
        return self._new(self.re + other.re, self.im + other.im)

    def sub(self, other: ComplexScalar) -> ComplexScalar:
        return self._new(self.re - other.re, self.im - other.im)

    def mul(self, other: ComplexScalar) -> ComplexScalar:
        """(a + bi)(c + di) = (ac - bd) + (ad + bc)i"""
        return self._new(
            self.re * other.re - self.im * other.im,
            self.re * other.im + self.im * other.re,
        )

    def div(self, other: ComplexScalar) -> ComplexScalar:
        """
        Complex division.

        Not guarded: a zero-magnitude divisor yields non-finite components.
        """
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            denom = other.re * other.re + other.im * other.im
            return self._new(
                (self.re * other.re + self.im * other.im) / denom,
                (self.im * other.re - self.re * other.im) / denom,
            )

    def scale(self, s: float) -> ComplexScalar:
        return self._new(self.re * s, self.im * s)

    def neg(self) -> ComplexScalar:
        return self._new(-self.re, -self.im)

    def conj(self) -> ComplexScalar:
        return self._new(self.re, -self.im)

    def norm_sq(self) -> float:
        """|z|², the Born-rule weight of an amplitude."""
        return self.re * self.re + self.im * self.im

    def norm(self) -> float:
        return np.sqrt(self.norm_sq())

    def arg(self) -> float:
        """Phase angle atan2(im, re)."""
        return np.arctan2(self.im, self.re)

    def exp(self) -> ComplexScalar:
        """e^(a + bi) = e^a (cos b + i sin b)"""
        ea = np.exp(self.re)
        return self._new(ea * np.cos(self.im), ea * np.sin(self.im))

    # -- Comparison ---------------------------------------------------------

    def approx_eq(self, other: ComplexScalar, epsilon: float) -> bool:
        """Both components strictly within ``epsilon``."""
        other = self._coerce(other)
        return bool(abs(self.re - other.re) < epsilon and abs(self.im - other.im) < epsilon)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ComplexScalar):
            return bool(self.re == other.re and self.im == other.im)
        if isinstance(other, Number):
            # exact, without rounding other to this precision
            return bool(complex(self) == other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(complex(self))

    # -- Operator sugar -----------------------------------------------------

    def __add__(self, other):
        other = self._coerce(other)
        return NotImplemented if other is NotImplemented else self.add(other)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        other = self._coerce(other)
        return NotImplemented if other is NotImplemented else self.sub(other)

    def __rsub__(self, other):
        other = self._coerce(other)
        return NotImplemented if other is NotImplemented else other.sub(self)

    def __mul__(self, other):
        other = self._coerce(other)
        return NotImplemented if other is NotImplemented else self.mul(other)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        other = self._coerce(other)
        return NotImplemented if other is NotImplemented else self.div(other)

    def __rtruediv__(self, other):
        other = self._coerce(other)
        return NotImplemented if other is NotImplemented else other.div(self)

    def __neg__(self) -> ComplexScalar:
        return self.neg()

    def __abs__(self) -> float:
        return float(self.norm())

    def __complex__(self) -> complex:
        return complex(float(self.re), float(self.im))

    # -- Display ------------------------------------------------------------

    def __repr__(self) -> str:
        return f"ComplexScalar({float(self.re)!r}, {float(self.im)!r}, {self.re.dtype.name})"

    def __str__(self) -> str:
        sign = "+" if self.im >= 0 else "-"
        return f"{float(self.re):g}{sign}{abs(float(self.im)):g}i"
