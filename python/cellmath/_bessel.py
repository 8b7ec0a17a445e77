"""Bessel functions BESSELI, BESSELK, BESSELJ and BESSELY.

The order ``n`` is truncated to an integer and must be non-negative. I and K
are the modified functions; J and Y are the ordinary ones.
"""

from __future__ import annotations

import math

from cellmath._result import classified, require

BESSEL_TOLERANCE = 1e-10
SERIES_MAX_TERMS = 100
ASYMPTOTIC_MAX_TERMS = 20
# |x| at which the large-argument expansion of I_n is tried
ASYMPTOTIC_SWITCH = 8.0

# Miller's algorithm (downward recurrence for J_n)
_MILLER_ACC = 160.0
_BIGNO = 1e10
_BIGNI = 1e-10

_TWO_OVER_PI = 2.0 / math.pi
_QUARTER_PI = math.pi / 4.0
_THREE_QUARTER_PI = 3.0 * math.pi / 4.0


def _order(n: float) -> int:
    require(n >= 0, f"Bessel order must be non-negative, got {n}")
    return int(n)


# ---------------------------------------------------------------------------
# Modified Bessel function of the first kind, I_n
# ---------------------------------------------------------------------------


def _i_series(x: float, n: int, max_terms: int) -> float:
    """sum_k (x/2)^(2k+n) / (k! (k+n)!), each term from the previous one."""
    if x == 0.0:
        return 1.0 if n == 0 else 0.0
    half = x / 2.0
    # (x/2)^n / n! in log space; n! overflows a float past n = 170
    term = math.copysign(math.exp(n * math.log(abs(half)) - math.lgamma(n + 1.0)), half if n % 2 else 1.0)
    total = term
    quarter_sq = half * half
    for k in range(1, max_terms):
        term *= quarter_sq / (k * (k + n))
        total += term
        if abs(term) <= BESSEL_TOLERANCE * abs(total):
            break
    return total


def _i_asymptotic(ax: float, n: int) -> float | None:
    """Large-|x| expansion, or None when it cannot reach BESSEL_TOLERANCE.

    I_n(x) ~ e^x / sqrt(2 pi x) * sum_k (-1)^k a_k(n) / x^k, truncated at its
    smallest term.
    """
    mu = 4.0 * n * n
    term = 1.0
    total = 1.0
    for k in range(1, ASYMPTOTIC_MAX_TERMS + 1):
        following = -term * (mu - (2 * k - 1) ** 2) / (k * 8.0 * ax)
        if abs(following) >= abs(term):
            return None
        term = following
        total += term
        if abs(term) <= BESSEL_TOLERANCE * abs(total):
            return math.exp(ax) / math.sqrt(2.0 * math.pi * ax) * total
    return None


def bessel_i_value(x: float, n: int) -> float:
    if abs(x) < ASYMPTOTIC_SWITCH:
        return _i_series(x, n, SERIES_MAX_TERMS)
    ax = abs(x)
    value = _i_asymptotic(ax, n)
    if value is None:
        # Order too large for the expansion; the series has only positive terms
        value = _i_series(ax, n, SERIES_MAX_TERMS + int(ax))
    return -value if x < 0.0 and n % 2 else value


# ---------------------------------------------------------------------------
# Modified Bessel function of the second kind, K_n (Abramowitz & Stegun 9.8)
# ---------------------------------------------------------------------------


def _k0(x: float) -> float:
    if x <= 2.0:
        y = x * x / 4.0
        return -math.log(x / 2.0) * _i_series(x, 0, SERIES_MAX_TERMS) + (
            -0.57721566 + y * (0.42278420 + y * (0.23069756 + y * (0.3488590e-1
            + y * (0.262698e-2 + y * (0.10750e-3 + y * 0.74e-5)))))
        )
    y = 2.0 / x
    return math.exp(-x) / math.sqrt(x) * (
        1.25331414 + y * (-0.7832358e-1 + y * (0.2189568e-1 + y * (-0.1062446e-1
        + y * (0.587872e-2 + y * (-0.251540e-2 + y * 0.53208e-3)))))
    )


def _k1(x: float) -> float:
    if x <= 2.0:
        y = x * x / 4.0
        return math.log(x / 2.0) * _i_series(x, 1, SERIES_MAX_TERMS) + (1.0 / x) * (
            1.0 + y * (0.15443144 + y * (-0.67278579 + y * (-0.18156897
            + y * (-0.1919402e-1 + y * (-0.110404e-2 + y * -0.4686e-4)))))
        )
    y = 2.0 / x
    return math.exp(-x) / math.sqrt(x) * (
        1.25331414 + y * (0.23498619 + y * (-0.3655620e-1 + y * (0.1504268e-1
        + y * (-0.780353e-2 + y * (0.325614e-2 + y * -0.68245e-3)))))
    )


def bessel_k_value(x: float, n: int) -> float:
    require(x > 0.0, f"BESSELK requires x > 0, got {x}")
    if n == 0:
        return _k0(x)
    previous, current = _k0(x), _k1(x)
    for j in range(1, n):
        previous, current = current, previous + (2.0 * j / x) * current
    return current


# ---------------------------------------------------------------------------
# Bessel functions of the first and second kind, J_n and Y_n
# (rational approximations from Numerical Recipes)
# ---------------------------------------------------------------------------


def _j0(x: float) -> float:
    ax = abs(x)
    if ax < 8.0:
        y = x * x
        num = 57568490574.0 + y * (-13362590354.0 + y * (651619640.7
              + y * (-11214424.18 + y * (77392.33017 + y * -184.9052456))))
        den = 57568490411.0 + y * (1029532985.0 + y * (9494680.718
              + y * (59272.64853 + y * (267.8532712 + y))))
        return num / den
    z = 8.0 / ax
    y = z * z
    xx = ax - _QUARTER_PI
    p = 1.0 + y * (-0.1098628627e-2 + y * (0.2734510407e-4
        + y * (-0.2073370639e-5 + y * 0.2093887211e-6)))
    q = -0.1562499995e-1 + y * (0.1430488765e-3
        + y * (-0.6911147651e-5 + y * (0.7621095161e-6 - y * 0.934935152e-7)))
    return math.sqrt(_TWO_OVER_PI / ax) * (math.cos(xx) * p - z * math.sin(xx) * q)


def _j1(x: float) -> float:
    ax = abs(x)
    if ax < 8.0:
        y = x * x
        num = x * (72362614232.0 + y * (-7895059235.0 + y * (242396853.1
              + y * (-2972611.439 + y * (15704.48260 + y * -30.16036606)))))
        den = 144725228442.0 + y * (2300535178.0 + y * (18583304.74
              + y * (99447.43394 + y * (376.9991397 + y))))
        return num / den
    z = 8.0 / ax
    y = z * z
    xx = ax - _THREE_QUARTER_PI
    p = 1.0 + y * (0.183105e-2 + y * (-0.3516396496e-4
        + y * (0.2457520174e-5 + y * -0.240337019e-6)))
    q = 0.04687499995 + y * (-0.2002690873e-3
        + y * (0.8449199096e-5 + y * (-0.88228987e-6 + y * 0.105787412e-6)))
    value = math.sqrt(_TWO_OVER_PI / ax) * (math.cos(xx) * p - z * math.sin(xx) * q)
    return -value if x < 0.0 else value


def _j_miller(ax: float, n: int) -> float:
    """J_n(ax) by downward recurrence normalised with J0 + 2 sum J_2k = 1."""
    tox = 2.0 / ax
    start = 2 * ((n + int(math.sqrt(_MILLER_ACC * n))) // 2)
    even = False
    bjp = result = total = 0.0
    bj = 1.0
    for j in range(start, 0, -1):
        bjm = j * tox * bj - bjp
        bjp = bj
        bj = bjm
        if abs(bj) > _BIGNO:
            bj *= _BIGNI
            bjp *= _BIGNI
            result *= _BIGNI
            total *= _BIGNI
        if even:
            total += bj
        even = not even
        if j == n:
            result = bjp
    total = 2.0 * total - bj
    return result / total


def bessel_j_value(x: float, n: int) -> float:
    if n == 0:
        return _j0(x)
    if n == 1:
        return _j1(x)
    ax = abs(x)
    if ax == 0.0:
        return 0.0
    if ax > n:
        tox = 2.0 / ax
        previous, current = _j0(ax), _j1(ax)
        for j in range(1, n):
            previous, current = current, j * tox * current - previous
        value = current
    else:
        value = _j_miller(ax, n)
    return -value if x < 0.0 and n % 2 else value


def _y0(x: float) -> float:
    if x < 8.0:
        y = x * x
        num = -2957821389.0 + y * (7062834065.0 + y * (-512359803.6
              + y * (10879881.29 + y * (-86327.92757 + y * 228.4622733))))
        den = 40076544269.0 + y * (745249964.8 + y * (7189466.438
              + y * (47447.26470 + y * (226.1030244 + y))))
        return num / den + _TWO_OVER_PI * _j0(x) * math.log(x)
    z = 8.0 / x
    y = z * z
    xx = x - _QUARTER_PI
    p = 1.0 + y * (-0.1098628627e-2 + y * (0.2734510407e-4
        + y * (-0.2073370639e-5 + y * 0.2093887211e-6)))
    q = -0.1562499995e-1 + y * (0.1430488765e-3
        + y * (-0.6911147651e-5 + y * (0.7621095161e-6 + y * -0.934945152e-7)))
    return math.sqrt(_TWO_OVER_PI / x) * (math.sin(xx) * p + z * math.cos(xx) * q)


def _y1(x: float) -> float:
    if x < 8.0:
        y = x * x
        num = x * (-0.4900604943e13 + y * (0.1275274390e13
              + y * (-0.5153438139e11 + y * (0.7349264551e9
              + y * (-0.4237922726e7 + y * 0.8511937935e4)))))
        den = 0.2499580570e14 + y * (0.4244419664e12
              + y * (0.3733650367e10 + y * (0.2245904002e8
              + y * (0.1020426050e6 + y * (0.3549632885e3 + y)))))
        return num / den + _TWO_OVER_PI * (_j1(x) * math.log(x) - 1.0 / x)
    z = 8.0 / x
    y = z * z
    xx = x - _THREE_QUARTER_PI
    p = 1.0 + y * (0.183105e-2 + y * (-0.3516396496e-4
        + y * (0.2457520174e-5 + y * -0.240337019e-6)))
    q = 0.04687499995 + y * (-0.2002690873e-3
        + y * (0.8449199096e-5 + y * (-0.88228987e-6 + y * 0.105787412e-6)))
    return math.sqrt(_TWO_OVER_PI / x) * (math.sin(xx) * p + z * math.cos(xx) * q)


def bessel_y_value(x: float, n: int) -> float:
    require(x > 0.0, f"BESSELY requires x > 0, got {x}")
    if n == 0:
        return _y0(x)
    tox = 2.0 / x
    previous, current = _y0(x), _y1(x)
    for j in range(1, n):
        previous, current = current, j * tox * current - previous
    return current


# ---------------------------------------------------------------------------
# Public functions
# ---------------------------------------------------------------------------


@classified
def bessel_i(x: float, n: float) -> float:
    """BESSELI: modified Bessel function I_n(x)."""
    return bessel_i_value(x, _order(n))


@classified
def bessel_k(x: float, n: float) -> float:
    """BESSELK: modified Bessel function K_n(x), x > 0."""
    return bessel_k_value(x, _order(n))


@classified
def bessel_j(x: float, n: float) -> float:
    """BESSELJ: Bessel function of the first kind J_n(x)."""
    return bessel_j_value(x, _order(n))


@classified
def bessel_y(x: float, n: float) -> float:
    """BESSELY: Bessel function of the second kind Y_n(x), x > 0."""
    return bessel_y_value(x, _order(n))
