"""Tests for cellmath._complex: text form, arithmetic and transcendentals."""

from __future__ import annotations

import cmath
import math
import random
from typing import Callable

import pytest
from cellmath._complex import (
    ComplexNumber,
    complex_abs,
    complex_add,
    complex_argument,
    complex_conjugate,
    complex_cos,
    complex_cosh,
    complex_cot,
    complex_csc,
    complex_csch,
    complex_div,
    complex_exp,
    complex_ln,
    complex_log2,
    complex_log10,
    complex_mul,
    complex_number,
    complex_power,
    complex_sec,
    complex_sech,
    complex_sin,
    complex_sinh,
    complex_sqrt,
    complex_sub,
    complex_tan,
    format_complex,
    parse_complex,
)
from cellmath._result import DomainViolation, NonFiniteValue, NumericError, NumericResult


def _close(z: ComplexNumber, expected: complex, tol: float = 1e-12) -> bool:
    return cmath.isclose(complex(z), expected, rel_tol=tol, abs_tol=tol)


# ---------------------------------------------------------------------------
# Value type
# ---------------------------------------------------------------------------


class TestComplexNumber:
    def test_suffix_is_not_part_of_equality(self) -> None:
        assert ComplexNumber(1.0, 2.0, "i") == ComplexNumber(1.0, 2.0, "j")

    def test_invalid_suffix(self) -> None:
        with pytest.raises(DomainViolation):
            ComplexNumber(1.0, 2.0, "k")

    def test_non_finite_components(self) -> None:
        with pytest.raises(NonFiniteValue):
            ComplexNumber(math.nan, 0.0)
        with pytest.raises(NonFiniteValue):
            ComplexNumber(0.0, math.inf)

    def test_conversions(self) -> None:
        z = ComplexNumber.from_complex(3 - 4j, "j")
        assert complex(z) == 3 - 4j
        assert z.suffix == "j"
        assert abs(z) == 5.0
        assert str(z) == "3-4j"


# ---------------------------------------------------------------------------
# Text form
# ---------------------------------------------------------------------------


class TestParse:
    @pytest.mark.parametrize(
        "text,real,imag,suffix",
        [
            ("3+4i", 3.0, 4.0, "i"),
            ("-2.5-j", -2.5, -1.0, "j"),
            ("5", 5.0, 0.0, "i"),
            ("-0.25", -0.25, 0.0, "i"),
            ("i", 0.0, 1.0, "i"),
            ("-i", 0.0, -1.0, "i"),
            ("+j", 0.0, 1.0, "j"),
            ("7.5i", 0.0, 7.5, "i"),
            ("1e+5i", 0.0, 1e5, "i"),
            ("1e3+2e-2j", 1000.0, 0.02, "j"),
            (".5-.5i", 0.5, -0.5, "i"),
            ("  7i  ", 0.0, 7.0, "i"),
        ],
    )
    def test_valid(self, text: str, real: float, imag: float, suffix: str) -> None:
        z = parse_complex(text)
        assert z is not None
        assert (z.real, z.imag, z.suffix) == (real, imag, suffix)

    @pytest.mark.parametrize("text", ["", "   ", "abc", "3+4k", "3+4ii", "i3", "3 + 4i", "3+4i5", "1e999i", "--1"])
    def test_invalid(self, text: str) -> None:
        assert parse_complex(text) is None

    def test_non_text(self) -> None:
        assert parse_complex(None) is None  # type: ignore[arg-type]
        assert parse_complex(3.0) is None  # type: ignore[arg-type]


class TestFormat:
    @pytest.mark.parametrize(
        "z,text",
        [
            (ComplexNumber(3.0, 4.0), "3+4i"),
            (ComplexNumber(3.0, -1.0, "j"), "3-j"),
            (ComplexNumber(3.0, 1.0), "3+i"),
            (ComplexNumber(0.0, 1.0), "i"),
            (ComplexNumber(0.0, -1.0, "j"), "-j"),
            (ComplexNumber(0.0, 2.5), "2.5i"),
            (ComplexNumber(2.5, 0.0), "2.5"),
            (ComplexNumber(0.0, 0.0), "0"),
            (ComplexNumber(0.1, 0.2), "0.1+0.2i"),
            (ComplexNumber(1e22, 3.0), "1e+22+3i"),
        ],
    )
    def test_canonical_text(self, z: ComplexNumber, text: str) -> None:
        assert format_complex(z) == text

    def test_round_trip(self) -> None:
        rng = random.Random(1234)

        def component() -> float:
            kind = rng.randrange(5)
            if kind == 0:
                return 0.0
            if kind == 1:
                return rng.choice([1.0, -1.0])
            if kind == 2:
                return float(rng.randint(-1000, 1000))
            if kind == 3:
                return rng.uniform(-1.0, 1.0) * 10.0 ** rng.randint(-300, 300)
            return rng.uniform(-1e6, 1e6)

        for _ in range(1000):
            z = ComplexNumber(component(), component(), rng.choice("ij"))
            parsed = parse_complex(format_complex(z))
            assert parsed == z, format_complex(z)
            if z.imag != 0.0:
                assert parsed.suffix == z.suffix


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------


class TestArithmetic:
    def test_complex_number(self) -> None:
        r = complex_number(1, 2, "j")
        assert r.value == ComplexNumber(1.0, 2.0)
        assert r.value.suffix == "j"
        assert complex_number(1, 2, "k").error == NumericError.DOMAIN
        assert complex_number(1, math.inf).error == NumericError.NON_FINITE

    def test_basic_operations(self) -> None:
        a = ComplexNumber(1.0, 2.0)
        b = ComplexNumber(3.0, 4.0)
        assert complex_add(a, b).value == ComplexNumber(4.0, 6.0)
        assert complex_sub(a, b).value == ComplexNumber(-2.0, -2.0)
        assert complex_mul(a, b).value == ComplexNumber(-5.0, 10.0)
        assert _close(complex_div(a, b).value, 0.44 + 0.08j)
        assert complex_conjugate(a).value == ComplexNumber(1.0, -2.0)
        assert complex_abs(b).value == 5.0

    def test_left_suffix_wins(self) -> None:
        a = ComplexNumber(1.0, 1.0, "j")
        b = ComplexNumber(2.0, 2.0, "i")
        assert complex_add(a, b).value.suffix == "j"
        assert complex_mul(b, a).value.suffix == "i"

    def test_division_by_zero(self) -> None:
        assert complex_div(ComplexNumber(1.0, 1.0), ComplexNumber(0.0, 0.0)).error == NumericError.NON_FINITE

    def test_argument(self) -> None:
        assert complex_argument(ComplexNumber(0.0, 1.0)).value == pytest.approx(math.pi / 2.0)
        assert complex_argument(ComplexNumber(-1.0, 0.0)).value == pytest.approx(math.pi)
        assert complex_argument(ComplexNumber(0.0, 0.0)).error == NumericError.DOMAIN

    def test_integer_power(self) -> None:
        assert complex_power(ComplexNumber(0.0, 1.0), 2).value == ComplexNumber(-1.0, 0.0)
        assert complex_power(ComplexNumber(1.0, 1.0), 8).value == ComplexNumber(16.0, 0.0)
        assert complex_power(ComplexNumber(2.0, 0.0), 0).value == ComplexNumber(1.0, 0.0)
        assert _close(complex_power(ComplexNumber(1.0, 1.0), -2).value, -0.5j)

    def test_fractional_power(self) -> None:
        assert _close(complex_power(ComplexNumber(3.0, 4.0), 0.5).value, 2 + 1j)
        assert _close(complex_power(ComplexNumber(0.0, 0.0), 2.5).value, 0j)

    def test_power_of_zero(self) -> None:
        assert complex_power(ComplexNumber(0.0, 0.0), -1).error == NumericError.NON_FINITE
        assert complex_power(ComplexNumber(0.0, 0.0), -0.5).error == NumericError.NON_FINITE

    def test_sqrt(self) -> None:
        assert complex_sqrt(ComplexNumber(-4.0, 0.0)).value == ComplexNumber(0.0, 2.0)
        assert _close(complex_sqrt(ComplexNumber(3.0, 4.0)).value, 2 + 1j)


# ---------------------------------------------------------------------------
# Transcendentals
# ---------------------------------------------------------------------------

_Z = ComplexNumber(0.5, 0.3)
_W = complex(_Z)


class TestTranscendentals:
    @pytest.mark.parametrize(
        "func,expected",
        [
            (complex_exp, cmath.exp(_W)),
            (complex_ln, cmath.log(_W)),
            (complex_log10, cmath.log10(_W)),
            (complex_log2, cmath.log(_W) / math.log(2.0)),
            (complex_sin, cmath.sin(_W)),
            (complex_cos, cmath.cos(_W)),
            (complex_tan, cmath.tan(_W)),
            (complex_sec, 1.0 / cmath.cos(_W)),
            (complex_csc, 1.0 / cmath.sin(_W)),
            (complex_cot, cmath.cos(_W) / cmath.sin(_W)),
            (complex_sinh, cmath.sinh(_W)),
            (complex_cosh, cmath.cosh(_W)),
            (complex_sech, 1.0 / cmath.cosh(_W)),
            (complex_csch, 1.0 / cmath.sinh(_W)),
        ],
        ids=lambda v: getattr(v, "__name__", None),
    )
    def test_matches_cmath(self, func: Callable[[ComplexNumber], NumericResult], expected: complex) -> None:
        r = func(_Z)
        assert r.ok
        assert _close(r.value, expected)

    def test_names_and_docs(self) -> None:
        assert complex_ln.__name__ == "complex_ln"
        assert "logarithm" in complex_ln.__doc__

    def test_log_of_negative_real(self) -> None:
        assert _close(complex_ln(ComplexNumber(-1.0, 0.0)).value, complex(0.0, math.pi))
        assert _close(complex_log2(ComplexNumber(8.0, 0.0)).value, 3 + 0j)

    @pytest.mark.parametrize("func", [complex_ln, complex_log10, complex_log2, complex_csc, complex_cot, complex_csch])
    def test_singular_at_zero(self, func: Callable[[ComplexNumber], NumericResult]) -> None:
        assert func(ComplexNumber(0.0, 0.0)).error == NumericError.NON_FINITE

    def test_overflow(self) -> None:
        assert complex_exp(ComplexNumber(1000.0, 0.0)).error == NumericError.NON_FINITE
        assert complex_cosh(ComplexNumber(1000.0, 0.0)).error == NumericError.NON_FINITE

    def test_suffix_is_kept(self) -> None:
        assert complex_exp(ComplexNumber(0.0, 1.0, "j")).value.suffix == "j"
