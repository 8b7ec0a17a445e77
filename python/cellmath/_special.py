"""Special-function kernel: log-gamma, incomplete gamma/beta, error function.

Everything here works on plain floats and raises :class:`DomainViolation` or
:class:`ConvergenceError` on failure; the distribution layer and the function
registry turn those into :class:`NumericResult` values.

The series/continued-fraction split follows Numerical Recipes: the incomplete
gamma series is used below x = a + 1, the incomplete beta continued fraction is
evaluated on the side of (a + 1) / (a + b + 2) where it converges quickly, and
very large shape parameters switch to Gauss-Legendre quadrature of the
integrand.
"""

from __future__ import annotations

import math

from cellmath._result import ConvergenceError, DomainViolation, require

# Lanczos approximation, g = 7, n = 9
_LANCZOS_G = 7.0
_LANCZOS_COEFFICIENTS = (
    0.99999999999980993,
    676.5203681218851,
    -1259.1392167224028,
    771.32342877765313,
    -176.61502916214059,
    12.507343278686905,
    -0.13857109526572012,
    9.9843695780195716e-6,
    1.5056327351493116e-7,
)
_LOG_SQRT_2PI = 0.5 * math.log(2.0 * math.pi)
# Above this argument log-gamma differences use Stirling's series
_STIRLING_SWITCH = 20.0

KERNEL_MAX_ITERATIONS = 200
KERNEL_TOLERANCE = 1e-14
# Lentz's method: stand-in for an exact zero denominator
_FPMIN = 1e-300

# Shape parameters at which quadrature replaces series/continued fractions
GAMMA_QUADRATURE_SWITCH = 100.0
BETA_QUADRATURE_SWITCH = 3000.0


# ---------------------------------------------------------------------------
# Gamma function
# ---------------------------------------------------------------------------


def log_gamma(x: float) -> float:
    """ln(Gamma(x)) for x > 0 (Lanczos, relative error near 1e-15)."""
    require(x > 0.0, f"log_gamma requires x > 0, got {x}")
    series = _LANCZOS_COEFFICIENTS[0]
    for i in range(1, len(_LANCZOS_COEFFICIENTS)):
        series += _LANCZOS_COEFFICIENTS[i] / (x + i)
    t = x + _LANCZOS_G + 0.5
    # Lanczos gives Gamma(x + 1); divide by x in log space
    return (x + 0.5) * math.log(t) - t + _LOG_SQRT_2PI + math.log(series / x)


def gamma(x: float) -> float:
    """Gamma(x), extended to negative non-integers by reflection."""
    if x > 0.0:
        return math.exp(log_gamma(x))
    require(x != math.floor(x), f"gamma is undefined at non-positive integer {x}")
    # Gamma(x) * Gamma(1 - x) = pi / sin(pi x)
    return math.pi / (math.sin(math.pi * x) * math.exp(log_gamma(1.0 - x)))


def _stirling_correction(x: float) -> float:
    """ln Gamma(x) minus Stirling's (x - 1/2) ln x - x + ln sqrt(2 pi), for x >= 20."""
    x2 = x * x
    return (1.0 / 12.0 - (1.0 / 360.0 - (1.0 / 1260.0 - 1.0 / (1680.0 * x2)) / x2) / x2) / x


def log_gamma_difference(a: float, b: float) -> float:
    """ln Gamma(a + b) - ln Gamma(a) for a, b > 0.

    For large a the two log-gammas agree in most of their digits, so the
    difference is taken inside Stirling's series instead.
    """
    require(a > 0.0 and b > 0.0, f"log_gamma_difference requires a, b > 0, got a={a}, b={b}")
    if a < _STIRLING_SWITCH:
        return log_gamma(a + b) - log_gamma(a)
    return (
        (a - 0.5) * math.log1p(b / a)
        + b * (math.log(a + b) - 1.0)
        + _stirling_correction(a + b)
        - _stirling_correction(a)
    )


# ---------------------------------------------------------------------------
# Gauss-Legendre nodes for the large-parameter quadratures
# ---------------------------------------------------------------------------


def _gauss_legendre(n: int) -> tuple[list[float], list[float]]:
    """Nodes and weights of the n-point Gauss-Legendre rule on [-1, 1]."""
    nodes = [0.0] * n
    weights = [0.0] * n
    for i in range((n + 1) // 2):
        z = math.cos(math.pi * (i + 0.75) / (n + 0.5))
        while True:
            p1, p2 = 1.0, 0.0
            for j in range(n):
                p1, p2 = ((2.0 * j + 1.0) * z * p1 - j * p2) / (j + 1), p1
            pp = n * (z * p1 - p2) / (z * z - 1.0)
            z1 = z
            z = z1 - p1 / pp
            if abs(z - z1) <= 1e-15:
                break
        nodes[i], nodes[n - 1 - i] = z, -z
        weights[i] = weights[n - 1 - i] = 2.0 / ((1.0 - z * z) * pp * pp)
    return nodes, weights


def _half_rule() -> tuple[tuple[float, ...], tuple[float, ...]]:
    # Positive half of the 36-point rule, reflected so nodes crowd toward 0.
    # Integrating f(1 - |u|) over [-1, 1] puts the kink at the negligible end.
    nodes, weights = _gauss_legendre(36)
    half = sorted((1.0 - z, w) for z, w in zip(nodes, weights) if z > 0.0)
    return tuple(y for y, _ in half), tuple(w for _, w in half)


_QUAD_NODES, _QUAD_WEIGHTS = _half_rule()


# ---------------------------------------------------------------------------
# Regularized incomplete gamma
# ---------------------------------------------------------------------------


def _gamma_series(a: float, x: float) -> float:
    """P(a, x) by its power series; converges fast for x < a + 1."""
    ap = a
    term = total = 1.0 / a
    for _ in range(KERNEL_MAX_ITERATIONS):
        ap += 1.0
        term *= x / ap
        total += term
        if abs(term) < abs(total) * KERNEL_TOLERANCE:
            return total * math.exp(-x + a * math.log(x) - log_gamma(a))
    raise ConvergenceError(f"incomplete gamma series did not converge (a={a}, x={x})")


def _gamma_continued_fraction(a: float, x: float) -> float:
    """Q(a, x) by modified Lentz; converges fast for x >= a + 1."""
    b = x + 1.0 - a
    c = 1.0 / _FPMIN
    d = 1.0 / b
    h = d
    for i in range(1, KERNEL_MAX_ITERATIONS + 1):
        an = -i * (i - a)
        b += 2.0
        d = an * d + b
        if abs(d) < _FPMIN:
            d = _FPMIN
        c = b + an / c
        if abs(c) < _FPMIN:
            c = _FPMIN
        d = 1.0 / d
        delta = d * c
        h *= delta
        if abs(delta - 1.0) < KERNEL_TOLERANCE:
            return math.exp(-x + a * math.log(x) - log_gamma(a)) * h
    raise ConvergenceError(f"incomplete gamma fraction did not converge (a={a}, x={x})")


def _gamma_quadrature(a: float, x: float, upper: bool) -> float:
    """P or Q for large a by quadrature around the peak of t^(a-1) e^-t."""
    a1 = a - 1.0
    ln_a1 = math.log(a1)
    sqrt_a1 = math.sqrt(a1)
    if x > a1:
        xu = max(a1 + 11.5 * sqrt_a1, x + 6.0 * sqrt_a1)
    else:
        xu = max(0.0, min(a1 - 7.5 * sqrt_a1, x - 5.0 * sqrt_a1))
    total = 0.0
    for y, w in zip(_QUAD_NODES, _QUAD_WEIGHTS):
        t = x + (xu - x) * y
        total += w * math.exp(-(t - a1) + a1 * (math.log(t) - ln_a1))
    ans = total * abs(xu - x) * math.exp(a1 * (ln_a1 - 1.0) - log_gamma(a))
    # ans is the tail on the far side of x from the peak; it may underflow to 0
    if x > a1:
        return ans if upper else 1.0 - ans
    return 1.0 - ans if upper else ans


def regularized_gamma_p(a: float, x: float) -> float:
    """Lower regularized incomplete gamma P(a, x) = gamma(a, x) / Gamma(a)."""
    require(a > 0.0, f"incomplete gamma requires a > 0, got {a}")
    require(x >= 0.0, f"incomplete gamma requires x >= 0, got {x}")
    if x == 0.0:
        return 0.0
    if a >= GAMMA_QUADRATURE_SWITCH:
        return _gamma_quadrature(a, x, upper=False)
    if x < a + 1.0:
        return _gamma_series(a, x)
    return 1.0 - _gamma_continued_fraction(a, x)


def regularized_gamma_q(a: float, x: float) -> float:
    """Upper regularized incomplete gamma Q(a, x) = 1 - P(a, x)."""
    require(a > 0.0, f"incomplete gamma requires a > 0, got {a}")
    require(x >= 0.0, f"incomplete gamma requires x >= 0, got {x}")
    if x == 0.0:
        return 1.0
    if a >= GAMMA_QUADRATURE_SWITCH:
        return _gamma_quadrature(a, x, upper=True)
    if x < a + 1.0:
        return 1.0 - _gamma_series(a, x)
    return _gamma_continued_fraction(a, x)


# ---------------------------------------------------------------------------
# Regularized incomplete beta
# ---------------------------------------------------------------------------


def _beta_continued_fraction(a: float, b: float, x: float) -> float:
    qab = a + b
    qap = a + 1.0
    qam = a - 1.0
    c = 1.0
    d = 1.0 - qab * x / qap
    if abs(d) < _FPMIN:
        d = _FPMIN
    d = 1.0 / d
    h = d
    for m in range(1, KERNEL_MAX_ITERATIONS + 1):
        m2 = 2 * m
        # even step
        aa = m * (b - m) * x / ((qam + m2) * (a + m2))
        d = 1.0 + aa * d
        if abs(d) < _FPMIN:
            d = _FPMIN
        c = 1.0 + aa / c
        if abs(c) < _FPMIN:
            c = _FPMIN
        d = 1.0 / d
        h *= d * c
        # odd step
        aa = -(a + m) * (qab + m) * x / ((a + m2) * (qap + m2))
        d = 1.0 + aa * d
        if abs(d) < _FPMIN:
            d = _FPMIN
        c = 1.0 + aa / c
        if abs(c) < _FPMIN:
            c = _FPMIN
        d = 1.0 / d
        delta = d * c
        h *= delta
        if abs(delta - 1.0) < KERNEL_TOLERANCE:
            return h
    raise ConvergenceError(f"incomplete beta fraction did not converge (a={a}, b={b}, x={x})")


def _beta_quadrature(a: float, b: float, x: float) -> float:
    a1 = a - 1.0
    b1 = b - 1.0
    mu = a / (a + b)
    ln_mu = math.log(mu)
    ln_muc = math.log(1.0 - mu)
    spread = math.sqrt(a * b / ((a + b) ** 2 * (a + b + 1.0)))
    if x > mu:
        xu = min(1.0, max(mu + 10.0 * spread, x + 5.0 * spread))
    else:
        xu = max(0.0, min(mu - 10.0 * spread, x - 5.0 * spread))
    total = 0.0
    for y, w in zip(_QUAD_NODES, _QUAD_WEIGHTS):
        t = x + (xu - x) * y
        total += w * math.exp(a1 * (math.log(t) - ln_mu) + b1 * (math.log(1.0 - t) - ln_muc))
    ans = total * abs(xu - x) * math.exp(
        a1 * ln_mu - log_gamma(a) + b1 * ln_muc - log_gamma(b) + log_gamma(a + b)
    )
    return 1.0 - ans if x > mu else ans


def log_beta(a: float, b: float) -> float:
    """ln(B(a, b)) as a difference of log-gammas."""
    small, large = sorted((a, b))
    return log_gamma(small) - log_gamma_difference(large, small)


def regularized_beta(x: float, a: float, b: float, complement: float | None = None) -> float:
    """Regularized incomplete beta I_x(a, b) for 0 <= x <= 1.

    *complement* is 1 - x when the caller can form it without rounding, as
    for x = v / (v + t^2) with large v; both logarithms then keep full
    precision even when x is within a few ulps of 1.
    """
    require(0.0 <= x <= 1.0, f"incomplete beta requires 0 <= x <= 1, got {x}")
    require(a > 0.0 and b > 0.0, f"incomplete beta requires a, b > 0, got a={a}, b={b}")
    xc = 1.0 - x if complement is None else complement
    if x == 0.0:
        return 0.0
    if xc == 0.0:
        return 1.0
    if a > BETA_QUADRATURE_SWITCH and b > BETA_QUADRATURE_SWITCH:
        return _beta_quadrature(a, b, x)
    log_x = math.log(x) if x < 0.5 else math.log1p(-xc)
    log_xc = math.log(xc) if xc < 0.5 else math.log1p(-x)
    front = math.exp(a * log_x + b * log_xc - log_beta(a, b))
    if x < (a + 1.0) / (a + b + 2.0):
        return front * _beta_continued_fraction(a, b, x) / a
    return 1.0 - front * _beta_continued_fraction(b, a, xc) / b


# ---------------------------------------------------------------------------
# Error function
# ---------------------------------------------------------------------------


def erf(x: float) -> float:
    if x * x == 0.0:
        # P(1/2, x^2) underflows here; erf(x) ~ 2x / sqrt(pi)
        return 2.0 * x / math.sqrt(math.pi)
    value = regularized_gamma_p(0.5, x * x)
    return value if x > 0.0 else -value


def erfc(x: float) -> float:
    """Complementary error function, accurate deep into the upper tail."""
    if x < 0.0:
        return 2.0 - erfc(-x)
    if x == 0.0:
        return 1.0
    return regularized_gamma_q(0.5, x * x)


# ---------------------------------------------------------------------------
# Combinatorics in log space
# ---------------------------------------------------------------------------


def log_combination(n: float, k: float) -> float:
    """ln C(n, k); -inf when k lies outside [0, n]."""
    if k < 0 or k > n:
        return -math.inf
    if k == 0 or k == n:
        return 0.0
    return log_gamma(n + 1.0) - log_gamma(k + 1.0) - log_gamma(n - k + 1.0)


def combination(n: int, k: int) -> float:
    """C(n, k), exponentiated from its logarithm and rounded to an integer."""
    require(n >= 0 and 0 <= k <= n, f"combination requires 0 <= k <= n, got n={n}, k={k}")
    return float(round(math.exp(log_combination(n, k))))


def combination_with_repetition(n: int, k: int) -> float:
    """C(n + k - 1, k): multisets of size k drawn from n kinds."""
    require(n >= 0 and k >= 0, f"combination_with_repetition requires n, k >= 0, got n={n}, k={k}")
    if n == 0:
        return 1.0 if k == 0 else 0.0
    return combination(n + k - 1, k)
