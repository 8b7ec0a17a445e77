"""Newton-Raphson inverse solver and the rate-of-return functions built on it.

One algorithm serves both statistical inverses (F is a CDF, F' its density)
and financial rate problems (F is a valuation, F' its analytic derivative).
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass
from typing import Callable, Sequence

from cellmath._result import ConvergenceError, NumericResult, classified, require

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Settings and per-call state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SolverSettings:
    """Convergence policy for one family of root-finding problems."""

    tolerance: float = 1e-10  # |F(x) - target| that counts as converged
    step_tolerance: float = 1e-12  # relative step size that ends iteration
    max_iterations: int = 100
    min_derivative: float = 1e-20  # |F'(x)| below this is unusable
    acceptance: float = 1e-6  # coarse residual bound checked on exit
    lower: float | None = None
    upper: float | None = None


DEFAULT_SETTINGS = SolverSettings()

# Inverse CDFs, solved on log-probability so the residual is relative to the
# tail probability being matched
DISTRIBUTION_SETTINGS = SolverSettings(tolerance=1e-12, step_tolerance=1e-12, max_iterations=200, acceptance=1e-8)

# Periodic and irregular cash-flow rates
FINANCIAL_SETTINGS = SolverSettings(
    tolerance=1e-7,
    step_tolerance=1e-7,
    max_iterations=100,
    min_derivative=1e-10,
    acceptance=0.01,
    lower=-0.99999,
    upper=10.0,
)


@dataclass
class SolverState:
    """Mutable bookkeeping for a single solver call."""

    estimate: float
    settings: SolverSettings
    residual: float = math.inf
    iterations: int = 0

    def within_bounds(self, candidate: float) -> float:
        """Pull *candidate* back halfway toward any bound it crossed."""
        lower, upper = self.settings.lower, self.settings.upper
        if lower is not None and candidate <= lower:
            return (self.estimate + lower) / 2.0
        if upper is not None and candidate >= upper:
            return (self.estimate + upper) / 2.0
        return candidate


# ---------------------------------------------------------------------------
# Newton-Raphson
# ---------------------------------------------------------------------------


def _split_bracket(lower: float, upper: float, estimate: float) -> float:
    """Next trial point inside (lower, upper) when a Newton step is unusable.

    An open side is widened by doubling away from *estimate*; a bracket
    spanning several orders of magnitude is split geometrically.
    """
    if math.isinf(upper):
        return estimate + max(1.0, abs(estimate))
    if math.isinf(lower):
        return estimate - max(1.0, abs(estimate))
    if lower >= 0.0 and upper > 4.0 * max(lower, 1.0):
        return math.sqrt(max(lower, 1.0) * upper)
    if upper <= 0.0 and -lower > 4.0 * max(-upper, 1.0):
        return -math.sqrt(max(-upper, 1.0) * -lower)
    return 0.5 * (lower + upper)


def newton_raphson(
    func: Callable[[float], float],
    derivative: Callable[[float], float],
    target: float = 0.0,
    guess: float = 0.0,
    settings: SolverSettings = DEFAULT_SETTINGS,
    increasing: bool | None = None,
) -> float:
    """Find x with F(x) close to *target*, starting from *guess*.

    When F is known to be monotone, *increasing* gives its direction and the
    search keeps a bracket around the root: every residual narrows it, and a
    Newton step that leaves it (or a derivative that vanishes) is replaced by
    a bisection. F may then return -inf or +inf on the far side of the root.

    Raises ConvergenceError when the derivative vanishes (unbracketed mode),
    the iteration produces non-finite values, or the final residual exceeds
    ``settings.acceptance``.
    """
    lower, upper = settings.lower, settings.upper
    require(
        (lower is None or guess > lower) and (upper is None or guess < upper),
        f"initial guess {guess} outside solver bounds ({lower}, {upper})",
    )
    state = SolverState(estimate=guess, settings=settings)
    bracketed = increasing is not None
    lo = -math.inf if lower is None else lower
    hi = math.inf if upper is None else upper

    while state.iterations < settings.max_iterations:
        state.iterations += 1
        state.residual = func(state.estimate) - target
        if math.isnan(state.residual) or (not bracketed and math.isinf(state.residual)):
            raise ConvergenceError(f"non-finite residual at x={state.estimate}")
        if abs(state.residual) < settings.tolerance:
            return state.estimate

        slope = derivative(state.estimate)
        usable = math.isfinite(slope) and abs(slope) >= settings.min_derivative and slope != 0.0
        if not bracketed:
            if not usable:
                logger.debug(
                    "Vanishing derivative %r at x=%r after %d iterations",
                    slope, state.estimate, state.iterations,
                )
                raise ConvergenceError(f"derivative unusable at x={state.estimate}")
            candidate = state.within_bounds(state.estimate - state.residual / slope)
            scale = max(1.0, abs(candidate))
        else:
            if (state.residual > 0.0) == increasing:
                hi = state.estimate
            else:
                lo = state.estimate
            candidate = state.estimate - state.residual / slope if usable else math.nan
            if not lo < candidate < hi:
                candidate = _split_bracket(lo, hi, state.estimate)
            # Quantiles can be tiny, so steps are judged relative to x itself
            scale = abs(candidate)

        moved = abs(candidate - state.estimate)
        state.estimate = candidate
        if moved <= settings.step_tolerance * scale:
            break
        if bracketed and hi - lo <= settings.step_tolerance * scale:
            break

    state.residual = func(state.estimate) - target
    if not abs(state.residual) <= settings.acceptance:
        logger.debug(
            "Newton iteration stopped at x=%r after %d iterations (residual=%g)",
            state.estimate, state.iterations, state.residual,
        )
        raise ConvergenceError(
            f"no root within {settings.acceptance} after {state.iterations} iterations"
        )
    return state.estimate


def solve(
    func: Callable[[float], float],
    derivative: Callable[[float], float],
    target: float = 0.0,
    guess: float = 0.0,
    settings: SolverSettings = DEFAULT_SETTINGS,
    increasing: bool | None = None,
    **overrides: float | int | None,
) -> NumericResult:
    """:func:`newton_raphson` returning a :class:`NumericResult`.

    Keyword *overrides* replace individual fields of *settings*, e.g.
    ``solve(f, df, guess=1.0, max_iterations=20)``.
    """
    if overrides:
        settings = dataclasses.replace(settings, **overrides)
    return classified(newton_raphson)(func, derivative, target, guess, settings, increasing)


# ---------------------------------------------------------------------------
# Financial valuations and rates (RATE, IRR, XIRR, NPV, XNPV)
# ---------------------------------------------------------------------------

# Below this |rate| the annuity formulas use their r -> 0 limits
_ZERO_RATE = 1e-10
_DAYS_PER_YEAR = 365.0


def _has_both_signs(values: Sequence[float]) -> bool:
    return any(v > 0 for v in values) and any(v < 0 for v in values)


def _annuity_balance(rate_: float, nper: float, pmt: float, pv: float, fv: float, pmt_type: int) -> float:
    if abs(rate_) < _ZERO_RATE:
        return pv + pmt * nper + fv
    growth = (1.0 + rate_) ** nper
    return pv * growth + pmt * (1.0 + rate_ * pmt_type) * (growth - 1.0) / rate_ + fv


def _annuity_balance_slope(rate_: float, nper: float, pmt: float, pv: float, pmt_type: int) -> float:
    if abs(rate_) < _ZERO_RATE:
        return pv * nper + pmt * pmt_type * nper + pmt * nper * (nper - 1.0) / 2.0
    growth = (1.0 + rate_) ** nper
    growth_prev = (1.0 + rate_) ** (nper - 1.0)
    annuity = (growth - 1.0) / rate_
    annuity_slope = nper * growth_prev / rate_ - (growth - 1.0) / (rate_ * rate_)
    return pv * nper * growth_prev + pmt * pmt_type * annuity + pmt * (1.0 + rate_ * pmt_type) * annuity_slope


@classified
def rate(
    nper: float,
    pmt: float,
    pv: float,
    fv: float = 0.0,
    pmt_type: int = 0,
    guess: float = 0.1,
    settings: SolverSettings = FINANCIAL_SETTINGS,
) -> float:
    """RATE: periodic interest rate of an annuity."""
    require(nper > 0, f"RATE requires nper > 0, got {nper}")
    require(pmt_type in (0, 1), f"RATE type must be 0 or 1, got {pmt_type}")
    return newton_raphson(
        lambda r: _annuity_balance(r, nper, pmt, pv, fv, pmt_type),
        lambda r: _annuity_balance_slope(r, nper, pmt, pv, pmt_type),
        guess=guess,
        settings=settings,
    )


def _npv_at(rate_: float, values: Sequence[float], first_period: int) -> float:
    base = 1.0 + rate_
    return sum(v / base ** (i + first_period) for i, v in enumerate(values))


@classified
def npv(rate_: float, values: Sequence[float]) -> float:
    """NPV: the first cash flow is discounted one full period."""
    require(rate_ != -1.0, "NPV is undefined at rate -1")
    require(len(values) > 0, "NPV requires at least one value")
    return _npv_at(rate_, values, first_period=1)


@classified
def irr(values: Sequence[float], guess: float = 0.1, settings: SolverSettings = FINANCIAL_SETTINGS) -> float:
    """IRR: rate at which the periodic cash flows (first at t=0) have zero NPV."""
    flows = [float(v) for v in values]
    require(len(flows) >= 2, "IRR requires at least two cash flows")
    require(_has_both_signs(flows), "IRR requires positive and negative cash flows")

    def slope(r: float) -> float:
        base = 1.0 + r
        return sum(-i * v / base ** (i + 1) for i, v in enumerate(flows))

    return newton_raphson(lambda r: _npv_at(r, flows, first_period=0), slope, guess=guess, settings=settings)


def _year_fractions(dates: Sequence[float]) -> list[float]:
    first = dates[0]
    return [(d - first) / _DAYS_PER_YEAR for d in dates]


def _check_schedule(values: Sequence[float], dates: Sequence[float]) -> None:
    require(len(values) == len(dates), "values and dates must have the same length")
    require(len(values) >= 2, "at least two cash flows are required")
    require(all(d >= dates[0] for d in dates), "no date may precede the first date")


@classified
def xnpv(rate_: float, values: Sequence[float], dates: Sequence[float]) -> float:
    """XNPV: NPV of cash flows on serial dates, discounted on a 365-day year."""
    _check_schedule(values, dates)
    require(rate_ > -1.0, f"XNPV requires rate > -1, got {rate_}")
    base = 1.0 + rate_
    return sum(v / base ** t for v, t in zip(values, _year_fractions(dates)))


@classified
def xirr(
    values: Sequence[float],
    dates: Sequence[float],
    guess: float = 0.1,
    settings: SolverSettings = FINANCIAL_SETTINGS,
) -> float:
    """XIRR: rate at which cash flows on serial dates have zero XNPV."""
    flows = [float(v) for v in values]
    _check_schedule(flows, dates)
    require(_has_both_signs(flows), "XIRR requires positive and negative cash flows")
    years = _year_fractions(dates)

    def value(r: float) -> float:
        base = 1.0 + r
        return sum(v / base ** t for v, t in zip(flows, years))

    def slope(r: float) -> float:
        base = 1.0 + r
        return sum(-t * v / base ** (t + 1.0) for v, t in zip(flows, years))

    return newton_raphson(value, slope, guess=guess, settings=settings)
