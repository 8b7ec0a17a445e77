"""Probability distributions behind the spreadsheet statistical functions.

Each distribution is a frozen parameter bundle whose ``__post_init__``
validates the parameters, so an invalid bundle never exists. The bundles
expose ``pdf`` (PMF for discrete distributions), ``cdf`` and ``evaluate``;
continuous ones add ``inverse``. Those methods work on floats and raise
:class:`DomainViolation` and friends. The module-level ``*_dist`` and
``*_inv`` functions are the public, :class:`NumericResult`-returning layer.
"""

from __future__ import annotations

import dataclasses
import math
import sys
from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from cellmath._result import NonFiniteValue, classified, require
from cellmath._solver import DISTRIBUTION_SETTINGS, SolverSettings, newton_raphson
from cellmath._special import (
    erfc,
    log_beta,
    log_combination,
    log_gamma,
    log_gamma_difference,
    regularized_beta,
    regularized_gamma_p,
    regularized_gamma_q,
)

MAX_DEGREES_OF_FREEDOM = 1e10

_SQRT_2 = math.sqrt(2.0)
_SQRT_2PI = math.sqrt(2.0 * math.pi)

# Relative size below which further PMF terms past the mode are dropped
_PMF_TAIL_CUTOFF = 1e-17

# Floor for quantile guesses that would underflow to zero
_SMALLEST_NORMAL = sys.float_info.min
# Keeps exp() in the beta quantile guess finite
_MAX_EXP_ARGUMENT = 700.0

_POSITIVE_SUPPORT = dataclasses.replace(DISTRIBUTION_SETTINGS, lower=0.0)
_UNIT_SUPPORT = dataclasses.replace(DISTRIBUTION_SETTINGS, lower=0.0, upper=1.0)


@runtime_checkable
class Distribution(Protocol):
    """Shared surface of every distribution bundle."""

    def pdf(self, x: float) -> float: ...

    def cdf(self, x: float) -> float: ...

    def evaluate(self, x: float, cumulative: bool) -> float: ...


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_probability(p: float) -> None:
    require(0.0 < p < 1.0, f"probability must lie strictly between 0 and 1, got {p}")


def _check_degrees_of_freedom(df: float, name: str = "df") -> None:
    require(
        1.0 <= df <= MAX_DEGREES_OF_FREEDOM,
        f"{name} must lie in [1, {MAX_DEGREES_OF_FREEDOM:g}], got {df}",
    )


def _truncate(value: float) -> int:
    """Spreadsheet convention: integer arguments are truncated toward zero."""
    return int(value)


# ---------------------------------------------------------------------------
# Standard normal quantile
# ---------------------------------------------------------------------------

# Acklam's rational approximation, relative error about 1.15e-9
_ACKLAM_A = (-3.969683028665376e01, 2.209460984245205e02, -2.759285104469687e02,
             1.383577518672690e02, -3.066479806614716e01, 2.506628277459239e00)
_ACKLAM_B = (-5.447609879822406e01, 1.615858368580409e02, -1.556989798598866e02,
             6.680131188771972e01, -1.328068155288572e01)
_ACKLAM_C = (-7.784894002430293e-03, -3.223964580411365e-01, -2.400758277161838e00,
             -2.549732539343734e00, 4.374664141464968e00, 2.938163982698783e00)
_ACKLAM_D = (7.784695709041462e-03, 3.224671290700398e-01, 2.445134137142996e00,
             3.754408661907416e00)
_ACKLAM_LOW = 0.02425


def _acklam(p: float) -> float:
    a, b, c, d = _ACKLAM_A, _ACKLAM_B, _ACKLAM_C, _ACKLAM_D
    if p < _ACKLAM_LOW:
        q = math.sqrt(-2.0 * math.log(p))
        return (((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5]) / (
            (((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1.0
        )
    if p > 1.0 - _ACKLAM_LOW:
        q = math.sqrt(-2.0 * math.log1p(-p))
        return -(((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5]) / (
            (((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1.0
        )
    q = p - 0.5
    r = q * q
    return (((((a[0] * r + a[1]) * r + a[2]) * r + a[3]) * r + a[4]) * r + a[5]) * q / (
        ((((b[0] * r + b[1]) * r + b[2]) * r + b[3]) * r + b[4]) * r + 1.0
    )


def _standard_normal_cdf(z: float) -> float:
    return 0.5 * erfc(-z / _SQRT_2)


def standard_normal_quantile(p: float) -> float:
    """Inverse of the standard normal CDF for 0 < p < 1."""
    _check_probability(p)
    x = _acklam(p)
    # One Halley step brings the approximation to full double precision
    e = _standard_normal_cdf(x) - p
    u = e * _SQRT_2PI * math.exp(x * x / 2.0)
    return x - u / (1.0 + x * u / 2.0)


# ---------------------------------------------------------------------------
# Continuous distributions
# ---------------------------------------------------------------------------


def _solve_tail(
    prob: Callable[[float], float],
    density: Callable[[float], float],
    p: float,
    guess: float,
    settings: SolverSettings,
    increasing: bool,
) -> float:
    """x with prob(x) = p, where prob is a CDF (increasing) or a survival function.

    The solver works on ln prob(x), so convergence is judged relative to p
    and tail probabilities far below the absolute tolerance keep their
    precision. *density* is the derivative of *prob*.
    """

    def log_prob(x: float) -> float:
        value = prob(x)
        return math.log(value) if value > 0.0 else -math.inf

    def log_slope(x: float) -> float:
        value = prob(x)
        return density(x) / value if value > 0.0 else math.nan

    return newton_raphson(
        log_prob, log_slope, target=math.log(p), guess=guess, settings=settings, increasing=increasing
    )


class _Continuous:
    """Default ``evaluate``/``inverse`` for continuous bundles.

    Subclasses provide ``pdf``, ``cdf``, ``sf`` and ``_guess``. Inverses are
    solved on whichever tail holds the smaller probability.
    """

    _settings: SolverSettings = DISTRIBUTION_SETTINGS

    def pdf(self, x: float) -> float:
        raise NotImplementedError

    def cdf(self, x: float) -> float:
        raise NotImplementedError

    def sf(self, x: float) -> float:
        return 1.0 - self.cdf(x)

    def _guess(self, p: float, upper: bool) -> float:
        """Starting point for the quantile whose lower (or upper) tail is p <= 1/2."""
        raise NotImplementedError

    def evaluate(self, x: float, cumulative: bool) -> float:
        return self.cdf(x) if cumulative else self.pdf(x)

    def _tail_quantile(self, p: float, upper: bool) -> float:
        if p > 0.5:
            p, upper = 1.0 - p, not upper
        if upper:
            return _solve_tail(
                self.sf, lambda x: -self.pdf(x), p, self._guess(p, True), self._settings, increasing=False
            )
        return _solve_tail(self.cdf, self.pdf, p, self._guess(p, False), self._settings, increasing=True)

    def inverse(self, p: float) -> float:
        _check_probability(p)
        return self._tail_quantile(p, upper=False)

    def inverse_upper(self, p: float) -> float:
        """x with P(X > x) = p."""
        _check_probability(p)
        return self._tail_quantile(p, upper=True)


def _zero_density(shape: float, at_one: float) -> float:
    """Density at x = 0 of a law behaving like x^(shape - 1) near zero."""
    if shape < 1.0:
        raise NonFiniteValue("density is unbounded at zero for shape < 1")
    return at_one if shape == 1.0 else 0.0


def _standard_gamma_guess(shape: float, p: float, upper: bool = False) -> float:
    """Starting point for the standard gamma quantile with tail probability p.

    Wilson-Hilferty. A lower-tail guess is floored by the small-x bound
    (p * Gamma(shape + 1))^(1/shape), which never exceeds the true quantile.
    """
    z = standard_normal_quantile(p)
    c = 1.0 / (9.0 * shape)
    base = 1.0 - c + (-z if upper else z) * math.sqrt(c)
    wilson_hilferty = shape * base ** 3 if base > 0.0 else 0.0
    if upper:
        return wilson_hilferty if wilson_hilferty > 0.0 else shape
    lower_tail = math.exp((math.log(p) + log_gamma(shape + 1.0)) / shape)
    return max(wilson_hilferty, lower_tail, _SMALLEST_NORMAL)


def _standard_beta_guess(a: float, b: float, p: float) -> float:
    """Starting point for the Beta(a, b) quantile at lower-tail p <= 1/2.

    A normal-based approximation when both shapes are at least 1, otherwise
    the power laws of the two ends (Numerical Recipes ``invbetai``).
    """
    if a >= 1.0 and b >= 1.0:
        z = -standard_normal_quantile(p)
        al = (z * z - 3.0) / 6.0
        h = 2.0 / (1.0 / (2.0 * a - 1.0) + 1.0 / (2.0 * b - 1.0))
        w = z * math.sqrt(al + h) / h - (1.0 / (2.0 * b - 1.0) - 1.0 / (2.0 * a - 1.0)) * (
            al + 5.0 / 6.0 - 2.0 / (3.0 * h)
        )
        y = a / (a + b * math.exp(min(2.0 * w, _MAX_EXP_ARGUMENT)))
    else:
        t = math.exp(a * math.log(a / (a + b))) / a
        u = math.exp(b * math.log(b / (a + b))) / b
        w = t + u
        if p < t / w:
            y = (a * w * p) ** (1.0 / a)
        else:
            y = 1.0 - (b * w * (1.0 - p)) ** (1.0 / b)
    return y if 0.0 < y < 1.0 else a / (a + b)


def _beta_density(a: float, b: float, y: float) -> float:
    if y == 0.0:
        return _zero_density(a, math.exp(-log_beta(a, b)))
    if y == 1.0:
        return _zero_density(b, math.exp(-log_beta(a, b)))
    return math.exp((a - 1.0) * math.log(y) + (b - 1.0) * math.log1p(-y) - log_beta(a, b))


def _standard_beta_quantile(a: float, b: float, p: float) -> float:
    return _solve_tail(
        lambda y: regularized_beta(y, a, b),
        lambda y: _beta_density(a, b, y),
        p,
        _standard_beta_guess(a, b, p),
        _UNIT_SUPPORT,
        increasing=True,
    )


@dataclass(frozen=True)
class Normal(_Continuous):
    mean: float = 0.0
    sd: float = 1.0

    def __post_init__(self) -> None:
        require(self.sd > 0.0, f"standard deviation must be positive, got {self.sd}")

    def pdf(self, x: float) -> float:
        z = (x - self.mean) / self.sd
        return math.exp(-0.5 * z * z) / (self.sd * _SQRT_2PI)

    def cdf(self, x: float) -> float:
        return _standard_normal_cdf((x - self.mean) / self.sd)

    def sf(self, x: float) -> float:
        return _standard_normal_cdf((self.mean - x) / self.sd)

    def inverse(self, p: float) -> float:
        return self.mean + self.sd * standard_normal_quantile(p)

    def inverse_upper(self, p: float) -> float:
        return self.mean - self.sd * standard_normal_quantile(p)


@dataclass(frozen=True)
class LogNormal(_Continuous):
    """ln(X) is Normal(mean, sd); support x > 0."""

    mean: float = 0.0
    sd: float = 1.0

    def __post_init__(self) -> None:
        require(self.sd > 0.0, f"standard deviation must be positive, got {self.sd}")

    def pdf(self, x: float) -> float:
        require(x > 0.0, f"lognormal requires x > 0, got {x}")
        z = (math.log(x) - self.mean) / self.sd
        return math.exp(-0.5 * z * z) / (x * self.sd * _SQRT_2PI)

    def cdf(self, x: float) -> float:
        require(x > 0.0, f"lognormal requires x > 0, got {x}")
        return _standard_normal_cdf((math.log(x) - self.mean) / self.sd)

    def inverse(self, p: float) -> float:
        return math.exp(self.mean + self.sd * standard_normal_quantile(p))


@dataclass(frozen=True)
class ChiSquare(_Continuous):
    df: float

    _settings = _POSITIVE_SUPPORT

    def __post_init__(self) -> None:
        _check_degrees_of_freedom(self.df)

    def pdf(self, x: float) -> float:
        require(x >= 0.0, f"chi-square requires x >= 0, got {x}")
        half = self.df / 2.0
        if x == 0.0:
            return _zero_density(half, 0.5)
        return math.exp((half - 1.0) * math.log(x) - x / 2.0 - half * math.log(2.0) - log_gamma(half))

    def cdf(self, x: float) -> float:
        require(x >= 0.0, f"chi-square requires x >= 0, got {x}")
        return regularized_gamma_p(self.df / 2.0, x / 2.0)

    def sf(self, x: float) -> float:
        require(x >= 0.0, f"chi-square requires x >= 0, got {x}")
        return regularized_gamma_q(self.df / 2.0, x / 2.0)

    def _guess(self, p: float, upper: bool) -> float:
        return 2.0 * _standard_gamma_guess(self.df / 2.0, p, upper)


@dataclass(frozen=True)
class FDist(_Continuous):
    df1: float
    df2: float

    _settings = _POSITIVE_SUPPORT

    def __post_init__(self) -> None:
        _check_degrees_of_freedom(self.df1, "df1")
        _check_degrees_of_freedom(self.df2, "df2")

    def pdf(self, x: float) -> float:
        require(x >= 0.0, f"F distribution requires x >= 0, got {x}")
        d1, d2 = self.df1, self.df2
        if x == 0.0:
            return _zero_density(d1 / 2.0, 1.0)
        log_density = (
            0.5 * (d1 * math.log(d1) + d2 * math.log(d2))
            + (d1 / 2.0 - 1.0) * math.log(x)
            - 0.5 * (d1 + d2) * math.log(d1 * x + d2)
            - log_beta(d1 / 2.0, d2 / 2.0)
        )
        return math.exp(log_density)

    def cdf(self, x: float) -> float:
        require(x >= 0.0, f"F distribution requires x >= 0, got {x}")
        d1, d2 = self.df1, self.df2
        return regularized_beta(d1 * x / (d1 * x + d2), d1 / 2.0, d2 / 2.0, complement=d2 / (d1 * x + d2))

    def sf(self, x: float) -> float:
        require(x >= 0.0, f"F distribution requires x >= 0, got {x}")
        d1, d2 = self.df1, self.df2
        return regularized_beta(d2 / (d2 + d1 * x), d2 / 2.0, d1 / 2.0, complement=d1 * x / (d2 + d1 * x))

    def _guess(self, p: float, upper: bool) -> float:
        # X = (d2 / d1) * Y / (1 - Y) with Y ~ Beta(d1/2, d2/2)
        a, b = self.df1 / 2.0, self.df2 / 2.0
        if upper:
            # the upper tail of Beta(a, b) is the lower tail of Beta(b, a)
            y_complement = _standard_beta_guess(b, a, p)
            return self.df2 * (1.0 - y_complement) / (self.df1 * y_complement)
        y = _standard_beta_guess(a, b, p)
        return self.df2 * y / (self.df1 * (1.0 - y))


@dataclass(frozen=True)
class StudentT(_Continuous):
    df: float

    def __post_init__(self) -> None:
        _check_degrees_of_freedom(self.df)

    def pdf(self, x: float) -> float:
        v = self.df
        return math.exp(
            log_gamma_difference(v / 2.0, 0.5)
            - 0.5 * math.log(v * math.pi)
            - (v + 1.0) / 2.0 * math.log1p(x * x / v)
        )

    def _two_tailed(self, x: float) -> float:
        v = self.df
        x2 = x * x
        return regularized_beta(v / (v + x2), v / 2.0, 0.5, complement=x2 / (v + x2))

    def cdf(self, x: float) -> float:
        tail = 0.5 * self._two_tailed(x)
        return 1.0 - tail if x >= 0.0 else tail

    def sf(self, x: float) -> float:
        tail = 0.5 * self._two_tailed(x)
        return tail if x >= 0.0 else 1.0 - tail

    def two_tailed(self, x: float) -> float:
        """P(|T| > x) for x >= 0."""
        require(x >= 0.0, f"two-tailed T requires x >= 0, got {x}")
        return self._two_tailed(x)

    def _guess(self, p: float, upper: bool) -> float:
        z = standard_normal_quantile(p)
        return -z if upper else z


@dataclass(frozen=True)
class Beta(_Continuous):
    """Beta(alpha, beta) rescaled onto [lower, upper]."""

    alpha: float
    beta: float
    lower: float = 0.0
    upper: float = 1.0

    def __post_init__(self) -> None:
        require(self.alpha > 0.0 and self.beta > 0.0, f"beta shapes must be positive, got {self.alpha}, {self.beta}")
        require(self.lower < self.upper, f"beta bounds need lower < upper, got [{self.lower}, {self.upper}]")

    @property
    def width(self) -> float:
        return self.upper - self.lower

    def _standardize(self, x: float) -> float:
        require(self.lower <= x <= self.upper, f"x={x} outside [{self.lower}, {self.upper}]")
        return (x - self.lower) / self.width

    def pdf(self, x: float) -> float:
        return _beta_density(self.alpha, self.beta, self._standardize(x)) / self.width

    def cdf(self, x: float) -> float:
        return regularized_beta(self._standardize(x), self.alpha, self.beta)

    def inverse(self, p: float) -> float:
        _check_probability(p)
        if p > 0.5:
            # the upper tail of Beta(a, b) is the lower tail of Beta(b, a)
            y = 1.0 - _standard_beta_quantile(self.beta, self.alpha, 1.0 - p)
        else:
            y = _standard_beta_quantile(self.alpha, self.beta, p)
        return self.lower + self.width * y


@dataclass(frozen=True)
class Gamma(_Continuous):
    """Gamma with shape ``alpha`` and scale ``beta``."""

    alpha: float
    beta: float

    _settings = _POSITIVE_SUPPORT

    def __post_init__(self) -> None:
        require(self.alpha > 0.0 and self.beta > 0.0, f"gamma parameters must be positive, got {self.alpha}, {self.beta}")

    def pdf(self, x: float) -> float:
        require(x >= 0.0, f"gamma requires x >= 0, got {x}")
        y = x / self.beta
        if y == 0.0:
            return _zero_density(self.alpha, 1.0 / self.beta)
        return math.exp((self.alpha - 1.0) * math.log(y) - y - log_gamma(self.alpha)) / self.beta

    def cdf(self, x: float) -> float:
        require(x >= 0.0, f"gamma requires x >= 0, got {x}")
        return regularized_gamma_p(self.alpha, x / self.beta)

    def sf(self, x: float) -> float:
        require(x >= 0.0, f"gamma requires x >= 0, got {x}")
        return regularized_gamma_q(self.alpha, x / self.beta)

    def _guess(self, p: float, upper: bool) -> float:
        return self.beta * _standard_gamma_guess(self.alpha, p, upper)


@dataclass(frozen=True)
class Exponential(_Continuous):
    rate: float

    def __post_init__(self) -> None:
        require(self.rate > 0.0, f"exponential rate must be positive, got {self.rate}")

    def pdf(self, x: float) -> float:
        require(x >= 0.0, f"exponential requires x >= 0, got {x}")
        return self.rate * math.exp(-self.rate * x)

    def cdf(self, x: float) -> float:
        require(x >= 0.0, f"exponential requires x >= 0, got {x}")
        return -math.expm1(-self.rate * x)

    def inverse(self, p: float) -> float:
        _check_probability(p)
        return -math.log1p(-p) / self.rate


@dataclass(frozen=True)
class Weibull(_Continuous):
    """Weibull with shape ``alpha`` and scale ``beta``."""

    alpha: float
    beta: float

    def __post_init__(self) -> None:
        require(self.alpha > 0.0 and self.beta > 0.0, f"Weibull parameters must be positive, got {self.alpha}, {self.beta}")

    def pdf(self, x: float) -> float:
        require(x >= 0.0, f"Weibull requires x >= 0, got {x}")
        if x == 0.0:
            return _zero_density(self.alpha, 1.0 / self.beta)
        y = x / self.beta
        return self.alpha / self.beta * y ** (self.alpha - 1.0) * math.exp(-(y ** self.alpha))

    def cdf(self, x: float) -> float:
        require(x >= 0.0, f"Weibull requires x >= 0, got {x}")
        return -math.expm1(-((x / self.beta) ** self.alpha))

    def inverse(self, p: float) -> float:
        _check_probability(p)
        return self.beta * (-math.log1p(-p)) ** (1.0 / self.alpha)


# ---------------------------------------------------------------------------
# Discrete distributions
# ---------------------------------------------------------------------------


def _sum_pmf(pmf: Callable[[int], float], first: int, last: int, mode: float) -> float:
    """Sum pmf(first..last), stopping once terms past the mode are negligible."""
    total = 0.0
    for k in range(first, last + 1):
        term = pmf(k)
        total += term
        if k > mode and term <= _PMF_TAIL_CUTOFF * total:
            break
    return min(total, 1.0)


class _Discrete:
    def pmf(self, k: int) -> float:
        raise NotImplementedError

    def _support(self) -> tuple[int, float]:
        raise NotImplementedError

    @property
    def _mode(self) -> float:
        raise NotImplementedError

    def _count(self, x: float) -> int:
        first, last = self._support()
        k = _truncate(x)
        require(x >= first and k <= last, f"x={x} outside the support [{first}, {last}]")
        return k

    def pdf(self, x: float) -> float:
        return self.pmf(self._count(x))

    def cdf(self, x: float) -> float:
        k = self._count(x)
        first, last = self._support()
        if k >= last:
            return 1.0
        return _sum_pmf(self.pmf, first, k, self._mode)

    def evaluate(self, x: float, cumulative: bool) -> float:
        return self.cdf(x) if cumulative else self.pdf(x)


@dataclass(frozen=True)
class Poisson(_Discrete):
    mean: float

    def __post_init__(self) -> None:
        require(self.mean >= 0.0, f"Poisson mean must be non-negative, got {self.mean}")

    def _support(self) -> tuple[int, float]:
        return 0, math.inf

    @property
    def _mode(self) -> float:
        return self.mean

    def pmf(self, k: int) -> float:
        if self.mean == 0.0:
            return 1.0 if k == 0 else 0.0
        return math.exp(k * math.log(self.mean) - self.mean - log_gamma(k + 1.0))


@dataclass(frozen=True)
class Binomial(_Discrete):
    trials: int
    probability: float

    def __post_init__(self) -> None:
        require(self.trials >= 0, f"trials must be non-negative, got {self.trials}")
        require(0.0 <= self.probability <= 1.0, f"probability must lie in [0, 1], got {self.probability}")

    def _support(self) -> tuple[int, float]:
        return 0, self.trials

    @property
    def _mode(self) -> float:
        return self.trials * self.probability

    def pmf(self, k: int) -> float:
        n, p = self.trials, self.probability
        if p == 0.0:
            return 1.0 if k == 0 else 0.0
        if p == 1.0:
            return 1.0 if k == n else 0.0
        return math.exp(log_combination(n, k) + k * math.log(p) + (n - k) * math.log1p(-p))

    def inverse(self, alpha: float) -> int:
        """Smallest k with cdf(k) >= alpha.

        Falls back to ``trials`` when rounding keeps the running sum below alpha.
        """
        require(0.0 <= alpha <= 1.0, f"alpha must lie in [0, 1], got {alpha}")
        total = 0.0
        for k in range(self.trials + 1):
            total += self.pmf(k)
            if total >= alpha:
                return k
        return self.trials


@dataclass(frozen=True)
class Hypergeometric(_Discrete):
    """Successes in a sample of ``sample`` draws without replacement."""

    sample: int
    successes: int
    population: int

    def __post_init__(self) -> None:
        require(
            0 <= self.sample <= self.population and 0 <= self.successes <= self.population,
            f"inconsistent hypergeometric counts: sample={self.sample}, "
            f"successes={self.successes}, population={self.population}",
        )

    def _support(self) -> tuple[int, float]:
        first = max(0, self.sample + self.successes - self.population)
        return first, min(self.sample, self.successes)

    @property
    def _mode(self) -> float:
        return (self.sample + 1) * (self.successes + 1) / (self.population + 2)

    def pmf(self, k: int) -> float:
        n, big_k, big_n = self.sample, self.successes, self.population
        return math.exp(
            log_combination(big_k, k) + log_combination(big_n - big_k, n - k) - log_combination(big_n, n)
        )


@dataclass(frozen=True)
class NegativeBinomial(_Discrete):
    """Failures before the ``successes``-th success."""

    successes: int
    probability: float

    def __post_init__(self) -> None:
        require(self.successes >= 1, f"successes must be at least 1, got {self.successes}")
        require(0.0 <= self.probability <= 1.0, f"probability must lie in [0, 1], got {self.probability}")

    def _support(self) -> tuple[int, float]:
        return 0, math.inf

    @property
    def _mode(self) -> float:
        p = self.probability
        return (self.successes - 1) * (1.0 - p) / p if p > 0.0 else 0.0

    def pmf(self, k: int) -> float:
        r, p = self.successes, self.probability
        if p == 0.0:
            return 0.0
        if p == 1.0:
            return 1.0 if k == 0 else 0.0
        return math.exp(log_combination(k + r - 1, k) + r * math.log(p) + k * math.log1p(-p))


# ---------------------------------------------------------------------------
# Public functions
# ---------------------------------------------------------------------------


@classified
def norm_dist(x: float, mean: float, sd: float, cumulative: bool) -> float:
    return Normal(mean, sd).evaluate(x, cumulative)


@classified
def norm_inv(p: float, mean: float, sd: float) -> float:
    return Normal(mean, sd).inverse(p)


@classified
def norm_s_dist(z: float, cumulative: bool) -> float:
    return Normal().evaluate(z, cumulative)


@classified
def norm_s_inv(p: float) -> float:
    return standard_normal_quantile(p)


@classified
def lognorm_dist(x: float, mean: float, sd: float, cumulative: bool) -> float:
    return LogNormal(mean, sd).evaluate(x, cumulative)


@classified
def lognorm_inv(p: float, mean: float, sd: float) -> float:
    return LogNormal(mean, sd).inverse(p)


@classified
def chisq_dist(x: float, df: float, cumulative: bool) -> float:
    return ChiSquare(_truncate(df)).evaluate(x, cumulative)


@classified
def chisq_dist_rt(x: float, df: float) -> float:
    return ChiSquare(_truncate(df)).sf(x)


@classified
def chisq_inv(p: float, df: float) -> float:
    return ChiSquare(_truncate(df)).inverse(p)


@classified
def chisq_inv_rt(p: float, df: float) -> float:
    return ChiSquare(_truncate(df)).inverse_upper(p)


@classified
def f_dist(x: float, df1: float, df2: float, cumulative: bool) -> float:
    return FDist(_truncate(df1), _truncate(df2)).evaluate(x, cumulative)


@classified
def f_dist_rt(x: float, df1: float, df2: float) -> float:
    return FDist(_truncate(df1), _truncate(df2)).sf(x)


@classified
def f_inv(p: float, df1: float, df2: float) -> float:
    return FDist(_truncate(df1), _truncate(df2)).inverse(p)


@classified
def f_inv_rt(p: float, df1: float, df2: float) -> float:
    return FDist(_truncate(df1), _truncate(df2)).inverse_upper(p)


@classified
def t_dist(x: float, df: float, cumulative: bool) -> float:
    return StudentT(_truncate(df)).evaluate(x, cumulative)


@classified
def t_dist_rt(x: float, df: float) -> float:
    return StudentT(_truncate(df)).sf(x)


@classified
def t_dist_2t(x: float, df: float) -> float:
    return StudentT(_truncate(df)).two_tailed(x)


@classified
def t_inv(p: float, df: float) -> float:
    return StudentT(_truncate(df)).inverse(p)


@classified
def t_inv_2t(p: float, df: float) -> float:
    """Positive t with P(|T| > t) = p."""
    _check_probability(p)
    return StudentT(_truncate(df)).inverse_upper(p / 2.0)


@classified
def beta_dist(x: float, alpha: float, beta: float, cumulative: bool, lower: float = 0.0, upper: float = 1.0) -> float:
    return Beta(alpha, beta, lower, upper).evaluate(x, cumulative)


@classified
def beta_inv(p: float, alpha: float, beta: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return Beta(alpha, beta, lower, upper).inverse(p)


@classified
def gamma_dist(x: float, alpha: float, beta: float, cumulative: bool) -> float:
    return Gamma(alpha, beta).evaluate(x, cumulative)


@classified
def gamma_inv(p: float, alpha: float, beta: float) -> float:
    return Gamma(alpha, beta).inverse(p)


@classified
def expon_dist(x: float, rate: float, cumulative: bool) -> float:
    return Exponential(rate).evaluate(x, cumulative)


@classified
def weibull_dist(x: float, alpha: float, beta: float, cumulative: bool) -> float:
    return Weibull(alpha, beta).evaluate(x, cumulative)


@classified
def poisson_dist(x: float, mean: float, cumulative: bool) -> float:
    return Poisson(mean).evaluate(x, cumulative)


@classified
def binom_dist(successes: float, trials: float, probability: float, cumulative: bool) -> float:
    return Binomial(_truncate(trials), probability).evaluate(successes, cumulative)


@classified
def binom_inv(trials: float, probability: float, alpha: float) -> int:
    return Binomial(_truncate(trials), probability).inverse(alpha)


@classified
def binom_dist_range(trials: float, probability: float, first: float, last: float | None = None) -> float:
    """Probability that the number of successes lies in [first, last]."""
    law = Binomial(_truncate(trials), probability)
    low = _truncate(first)
    high = low if last is None else _truncate(last)
    require(0 <= low <= high <= law.trials, f"invalid success range [{first}, {last}] for {law.trials} trials")
    return min(sum(law.pmf(k) for k in range(low, high + 1)), 1.0)


@classified
def hypgeom_dist(
    sample_successes: float,
    sample: float,
    population_successes: float,
    population: float,
    cumulative: bool,
) -> float:
    law = Hypergeometric(_truncate(sample), _truncate(population_successes), _truncate(population))
    return law.evaluate(sample_successes, cumulative)


@classified
def negbinom_dist(failures: float, successes: float, probability: float, cumulative: bool) -> float:
    return NegativeBinomial(_truncate(successes), probability).evaluate(failures, cumulative)
