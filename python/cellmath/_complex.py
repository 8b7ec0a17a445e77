"""Complex numbers in spreadsheet text form (``"3+4i"``, ``"-2.5j"``).

:class:`ComplexNumber` is an immutable finite value that remembers the suffix
it was written with. ``parse_complex``/``format_complex`` convert to and from
text; the ``complex_*`` functions are the arithmetic and transcendental
operations and return :class:`NumericResult`.
"""

from __future__ import annotations

import cmath
import math
import re
from dataclasses import dataclass, field
from typing import Callable

from cellmath._result import NonFiniteValue, NumericResult, classified, require

SUFFIXES = ("i", "j")

_NUMBER = r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
_REAL_RE = re.compile(rf"[+-]?{_NUMBER}")
_BOTH_RE = re.compile(rf"(?P<real>[+-]?{_NUMBER})(?P<imag>[+-](?:{_NUMBER})?)")
_IMAG_RE = re.compile(rf"[+-]?(?:{_NUMBER})?")

_LN2 = math.log(2.0)


@dataclass(frozen=True)
class ComplexNumber:
    """A finite complex value; ``suffix`` is presentation only."""

    real: float
    imag: float = 0.0
    suffix: str = field(default="i", compare=False)

    def __post_init__(self) -> None:
        require(self.suffix in SUFFIXES, f"complex suffix must be 'i' or 'j', got {self.suffix!r}")
        if not (math.isfinite(self.real) and math.isfinite(self.imag)):
            raise NonFiniteValue(f"complex components must be finite, got ({self.real}, {self.imag})")

    @classmethod
    def from_complex(cls, value: complex, suffix: str = "i") -> ComplexNumber:
        return cls(value.real, value.imag, suffix)

    def __complex__(self) -> complex:
        return complex(self.real, self.imag)

    def is_finite(self) -> bool:
        return True

    def __str__(self) -> str:
        return format_complex(self)

    # Arithmetic keeps the left operand's suffix
    def __add__(self, other: ComplexNumber) -> ComplexNumber:
        return ComplexNumber(self.real + other.real, self.imag + other.imag, self.suffix)

    def __sub__(self, other: ComplexNumber) -> ComplexNumber:
        return ComplexNumber(self.real - other.real, self.imag - other.imag, self.suffix)

    def __mul__(self, other: ComplexNumber) -> ComplexNumber:
        return ComplexNumber(
            self.real * other.real - self.imag * other.imag,
            self.real * other.imag + self.imag * other.real,
            self.suffix,
        )

    def __truediv__(self, other: ComplexNumber) -> ComplexNumber:
        denominator = other.real * other.real + other.imag * other.imag
        if denominator == 0.0:
            raise NonFiniteValue("complex division by zero")
        return ComplexNumber(
            (self.real * other.real + self.imag * other.imag) / denominator,
            (self.imag * other.real - self.real * other.imag) / denominator,
            self.suffix,
        )

    def __neg__(self) -> ComplexNumber:
        return ComplexNumber(-self.real, -self.imag, self.suffix)

    def __abs__(self) -> float:
        return math.hypot(self.real, self.imag)

    def conjugate(self) -> ComplexNumber:
        return ComplexNumber(self.real, -self.imag, self.suffix)


# ---------------------------------------------------------------------------
# Text form
# ---------------------------------------------------------------------------


def _imag_coefficient(text: str) -> float:
    if text in ("", "+"):
        return 1.0
    if text == "-":
        return -1.0
    return float(text)


def parse_complex(text: str) -> ComplexNumber | None:
    """Parse ``a+bi``/``a-bj``/``a``/``bi`` text, or return None."""
    if not isinstance(text, str):
        return None
    text = text.strip()
    if not text:
        return None
    try:
        if text[-1] not in SUFFIXES:
            if _REAL_RE.fullmatch(text):
                return ComplexNumber(float(text))
            return None
        suffix, body = text[-1], text[:-1]
        m = _BOTH_RE.fullmatch(body)
        if m:
            return ComplexNumber(float(m.group("real")), _imag_coefficient(m.group("imag")), suffix)
        if _IMAG_RE.fullmatch(body):
            return ComplexNumber(0.0, _imag_coefficient(body), suffix)
    except NonFiniteValue:
        # e.g. "1e999i"
        return None
    return None


def _format_float(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def format_complex(z: ComplexNumber) -> str:
    """Canonical text: shortest round-trip digits, ``i``/``-i`` for unit parts."""
    if z.imag == 0.0:
        return _format_float(z.real)
    if z.imag == 1.0:
        imag = ""
    elif z.imag == -1.0:
        imag = "-"
    else:
        imag = _format_float(z.imag)
    if z.real == 0.0:
        return f"{imag}{z.suffix}"
    sign = "+" if z.imag > 0.0 else ""
    return f"{_format_float(z.real)}{sign}{imag}{z.suffix}"


@classified
def complex_number(real: float, imag: float = 0.0, suffix: str = "i") -> ComplexNumber:
    """COMPLEX: build a value from its components."""
    return ComplexNumber(float(real), float(imag), suffix)


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------


@classified
def complex_add(a: ComplexNumber, b: ComplexNumber) -> ComplexNumber:
    return a + b


@classified
def complex_sub(a: ComplexNumber, b: ComplexNumber) -> ComplexNumber:
    return a - b


@classified
def complex_mul(a: ComplexNumber, b: ComplexNumber) -> ComplexNumber:
    return a * b


@classified
def complex_div(a: ComplexNumber, b: ComplexNumber) -> ComplexNumber:
    return a / b


@classified
def complex_conjugate(z: ComplexNumber) -> ComplexNumber:
    return z.conjugate()


@classified
def complex_abs(z: ComplexNumber) -> float:
    return abs(z)


@classified
def complex_argument(z: ComplexNumber) -> float:
    """Angle in radians; the argument of zero is undefined."""
    require(z.real != 0.0 or z.imag != 0.0, "argument of zero is undefined")
    return math.atan2(z.imag, z.real)


def _integer_power(z: ComplexNumber, n: int) -> ComplexNumber:
    if n < 0:
        return ComplexNumber(1.0, 0.0, z.suffix) / _integer_power(z, -n)
    result = ComplexNumber(1.0, 0.0, z.suffix)
    base = z
    while n:
        if n & 1:
            result = result * base
        n >>= 1
        if n:
            base = base * base
    return result


@classified
def complex_power(z: ComplexNumber, exponent: float) -> ComplexNumber:
    """IMPOWER: exact repeated squaring for integers, polar form otherwise."""
    if float(exponent).is_integer():
        return _integer_power(z, int(exponent))
    modulus = abs(z)
    if modulus == 0.0:
        if exponent > 0.0:
            return ComplexNumber(0.0, 0.0, z.suffix)
        raise NonFiniteValue("zero raised to a non-positive power")
    theta = math.atan2(z.imag, z.real) * exponent
    scale = modulus ** exponent
    return ComplexNumber(scale * math.cos(theta), scale * math.sin(theta), z.suffix)


@classified
def complex_sqrt(z: ComplexNumber) -> ComplexNumber:
    return ComplexNumber.from_complex(cmath.sqrt(complex(z)), z.suffix)


# ---------------------------------------------------------------------------
# Transcendentals
# ---------------------------------------------------------------------------


def _lift(func: Callable[[complex], complex], name: str, doc: str) -> Callable[[ComplexNumber], NumericResult]:
    def apply(z: ComplexNumber) -> ComplexNumber:
        return ComplexNumber.from_complex(func(complex(z)), z.suffix)

    apply.__name__ = apply.__qualname__ = name
    apply.__doc__ = doc
    return classified(apply)


def _reciprocal_of(func: Callable[[complex], complex]) -> Callable[[complex], complex]:
    def reciprocal(w: complex) -> complex:
        denominator = func(w)
        if denominator == 0:
            raise NonFiniteValue(f"{func.__name__} vanishes at {w}")
        return 1.0 / denominator

    return reciprocal


def _nonzero_log(func: Callable[[complex], complex]) -> Callable[[complex], complex]:
    def log(w: complex) -> complex:
        if w == 0:
            raise NonFiniteValue("logarithm of zero")
        return func(w)

    return log


def _log2(w: complex) -> complex:
    return cmath.log(w) / _LN2


def _cot(w: complex) -> complex:
    s = cmath.sin(w)
    if s == 0:
        raise NonFiniteValue(f"cotangent undefined at {w}")
    return cmath.cos(w) / s


complex_exp = _lift(cmath.exp, "complex_exp", "IMEXP: e raised to z.")
complex_ln = _lift(_nonzero_log(cmath.log), "complex_ln", "IMLN: principal natural logarithm.")
complex_log10 = _lift(_nonzero_log(cmath.log10), "complex_log10", "IMLOG10: principal base-10 logarithm.")
complex_log2 = _lift(_nonzero_log(_log2), "complex_log2", "IMLOG2: principal base-2 logarithm.")
complex_sin = _lift(cmath.sin, "complex_sin", "IMSIN")
complex_cos = _lift(cmath.cos, "complex_cos", "IMCOS")
complex_tan = _lift(cmath.tan, "complex_tan", "IMTAN")
complex_sec = _lift(_reciprocal_of(cmath.cos), "complex_sec", "IMSEC: 1 / cos(z).")
complex_csc = _lift(_reciprocal_of(cmath.sin), "complex_csc", "IMCSC: 1 / sin(z).")
complex_cot = _lift(_cot, "complex_cot", "IMCOT: cos(z) / sin(z).")
complex_sinh = _lift(cmath.sinh, "complex_sinh", "IMSINH")
complex_cosh = _lift(cmath.cosh, "complex_cosh", "IMCOSH")
complex_sech = _lift(_reciprocal_of(cmath.cosh), "complex_sech", "IMSECH: 1 / cosh(z).")
complex_csch = _lift(_reciprocal_of(cmath.sinh), "complex_csch", "IMCSCH: 1 / sinh(z).")
