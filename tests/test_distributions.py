"""Tests for cellmath._distributions: bundles, public dist/inv functions."""

from __future__ import annotations

import math

import pytest
from cellmath import _distributions
from cellmath._distributions import (
    Beta,
    Binomial,
    ChiSquare,
    Distribution,
    Exponential,
    FDist,
    Gamma,
    Hypergeometric,
    LogNormal,
    NegativeBinomial,
    Normal,
    Poisson,
    StudentT,
    Weibull,
    beta_dist,
    beta_inv,
    binom_dist,
    binom_dist_range,
    binom_inv,
    chisq_dist,
    chisq_dist_rt,
    chisq_inv,
    chisq_inv_rt,
    expon_dist,
    f_dist,
    f_dist_rt,
    f_inv,
    f_inv_rt,
    gamma_dist,
    gamma_inv,
    hypgeom_dist,
    lognorm_dist,
    lognorm_inv,
    negbinom_dist,
    norm_dist,
    norm_inv,
    norm_s_dist,
    norm_s_inv,
    poisson_dist,
    t_dist,
    t_dist_2t,
    t_dist_rt,
    t_inv,
    t_inv_2t,
    weibull_dist,
)
from cellmath._result import DomainViolation, NumericError

PROBABILITIES = [0.01, 0.1, 0.25, 0.5, 0.75, 0.9, 0.99]

CONTINUOUS = [
    Normal(1.0, 2.0),
    LogNormal(0.5, 0.8),
    ChiSquare(1),
    ChiSquare(5),
    ChiSquare(30),
    FDist(3, 10),
    FDist(1, 1),
    StudentT(1),
    StudentT(5),
    StudentT(30),
    Beta(2.0, 5.0),
    Beta(0.5, 0.5),
    Beta(2.0, 3.0, 1.0, 4.0),
    Gamma(0.5, 2.0),
    Gamma(3.0, 1.5),
    Gamma(150.0, 1.0),
    Exponential(2.0),
    Weibull(1.5, 3.0),
]

TAIL_PROBABILITIES = [1e-8, 1e-11, 1e-14]

# Shapes where the starting guess lands far from the quantile
HARD_SHAPES = [
    FDist(1000, 5),
    FDist(1000, 2),
    FDist(2, 1000),
    Beta(0.1, 3.0),
    Beta(0.3, 0.3),
    Gamma(0.05, 1.0),
]


# ---------------------------------------------------------------------------
# Inverse round trips
# ---------------------------------------------------------------------------


class TestInverseRoundTrip:
    @pytest.mark.slow
    @pytest.mark.parametrize("law", CONTINUOUS, ids=repr)
    @pytest.mark.parametrize("p", PROBABILITIES)
    def test_cdf_of_inverse(self, law: Distribution, p: float) -> None:
        assert law.cdf(law.inverse(p)) == pytest.approx(p, abs=1e-6)

    @pytest.mark.slow
    @pytest.mark.parametrize("law", [ChiSquare(4), FDist(5, 7), FDist(1, 1), StudentT(3)], ids=repr)
    @pytest.mark.parametrize("p", PROBABILITIES)
    def test_sf_of_upper_inverse(self, law: Distribution, p: float) -> None:
        assert law.sf(law.inverse_upper(p)) == pytest.approx(p, abs=1e-6)

    @pytest.mark.parametrize("law", [ChiSquare(3), FDist(4, 9), StudentT(10), Gamma(2.5, 3.0)], ids=repr)
    @pytest.mark.parametrize("p", TAIL_PROBABILITIES)
    def test_small_tail_probabilities(self, law: Distribution, p: float) -> None:
        assert law.cdf(law.inverse(p)) == pytest.approx(p, rel=1e-6)
        assert law.sf(law.inverse_upper(p)) == pytest.approx(p, rel=1e-6)

    @pytest.mark.parametrize("p", TAIL_PROBABILITIES)
    def test_small_beta_tail(self, p: float) -> None:
        law = Beta(2.0, 5.0)
        assert law.cdf(law.inverse(p)) == pytest.approx(p, rel=1e-6)

    @pytest.mark.slow
    @pytest.mark.parametrize("law", HARD_SHAPES, ids=repr)
    @pytest.mark.parametrize("p", PROBABILITIES)
    def test_hard_shapes(self, law: Distribution, p: float) -> None:
        assert law.cdf(law.inverse(p)) == pytest.approx(p, rel=1e-7)

    def test_far_tail_worked_values(self) -> None:
        assert t_inv_2t(1e-11, 10).value == pytest.approx(34.47, rel=1e-3)
        assert chisq_inv_rt(1e-11, 3).value == pytest.approx(54.23, rel=1e-3)
        assert f_inv_rt(1e-14, 4, 9).value == pytest.approx(4242.5, rel=1e-3)
        assert t_inv(1e-14, 10).value == pytest.approx(-64.3, rel=2e-3)

    def test_right_tail_near_underflow(self) -> None:
        x = chisq_inv_rt(1e-300, 1).value
        assert x == pytest.approx(1370.0, rel=1e-2)
        assert chisq_dist_rt(x, 1).value == pytest.approx(1e-300, rel=1e-6)

    def test_public_functions_round_trip(self) -> None:
        assert chisq_dist(chisq_inv(0.3, 7).value, 7, True).value == pytest.approx(0.3, abs=1e-9)
        assert chisq_dist_rt(chisq_inv_rt(0.3, 7).value, 7).value == pytest.approx(0.3, abs=1e-9)
        assert f_dist(f_inv(0.8, 4, 9).value, 4, 9, True).value == pytest.approx(0.8, abs=1e-9)
        assert f_dist_rt(f_inv_rt(0.2, 4, 9).value, 4, 9).value == pytest.approx(0.2, abs=1e-9)
        assert t_dist(t_inv(0.05, 12).value, 12, True).value == pytest.approx(0.05, abs=1e-9)
        assert t_dist_2t(t_inv_2t(0.05, 12).value, 12).value == pytest.approx(0.05, abs=1e-9)
        assert gamma_dist(gamma_inv(0.6, 2.5, 3.0).value, 2.5, 3.0, True).value == pytest.approx(0.6, abs=1e-9)
        assert beta_dist(beta_inv(0.4, 2.0, 6.0).value, 2.0, 6.0, True).value == pytest.approx(0.4, abs=1e-9)

    @pytest.mark.parametrize("p", [0.0, 1.0, -0.5, 1.5])
    def test_probability_outside_open_interval_is_domain(self, p: float) -> None:
        assert norm_s_inv(p).error == NumericError.DOMAIN
        assert norm_inv(p, 0.0, 1.0).error == NumericError.DOMAIN
        assert lognorm_inv(p, 0.0, 1.0).error == NumericError.DOMAIN
        assert chisq_inv(p, 3).error == NumericError.DOMAIN
        assert chisq_inv_rt(p, 3).error == NumericError.DOMAIN
        assert f_inv(p, 3, 4).error == NumericError.DOMAIN
        assert t_inv(p, 3).error == NumericError.DOMAIN
        assert t_inv_2t(p, 3).error == NumericError.DOMAIN
        assert beta_inv(p, 2.0, 3.0).error == NumericError.DOMAIN
        assert gamma_inv(p, 2.0, 1.0).error == NumericError.DOMAIN

    def test_out_of_range_probability_never_iterates(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fail(*args: object, **kwargs: object) -> float:
            raise AssertionError("solver must not run")

        monkeypatch.setattr(_distributions, "newton_raphson", fail)
        assert gamma_inv(0.0, 2.0, 1.0).error == NumericError.DOMAIN
        assert gamma_inv(1.0, 2.0, 1.0).error == NumericError.DOMAIN
        assert chisq_inv(1.0, 3).error == NumericError.DOMAIN


# ---------------------------------------------------------------------------
# Continuous distributions
# ---------------------------------------------------------------------------


class TestNormal:
    def test_standard_quantile(self) -> None:
        assert norm_s_inv(0.975).value == pytest.approx(1.959963984540054, abs=1e-9)
        assert norm_s_inv(0.5).value == pytest.approx(0.0, abs=1e-12)
        assert norm_s_inv(1e-10).value == pytest.approx(-6.361340902404056, abs=1e-8)

    def test_standard_distribution(self) -> None:
        assert norm_s_dist(0.0, True).value == 0.5
        assert norm_s_dist(0.0, False).value == pytest.approx(1.0 / math.sqrt(2.0 * math.pi))
        assert norm_s_dist(1.0, True).value == pytest.approx(0.8413447460685429, abs=1e-12)

    def test_scaled(self) -> None:
        assert norm_dist(42.0, 40.0, 1.5, True).value == pytest.approx(0.9087887802741321, abs=1e-8)
        assert norm_inv(0.9087887802741321, 40.0, 1.5).value == pytest.approx(42.0, abs=1e-6)

    def test_invalid_sd(self) -> None:
        assert norm_dist(0.0, 0.0, 0.0, True).error == NumericError.DOMAIN
        with pytest.raises(DomainViolation):
            Normal(0.0, -1.0)


class TestLogNormal:
    def test_worked_example(self) -> None:
        assert lognorm_dist(4.0, 3.5, 1.2, True).value == pytest.approx(0.0390836, abs=1e-7)
        assert lognorm_inv(0.0390836, 3.5, 1.2).value == pytest.approx(4.0, abs=1e-4)

    def test_non_positive_x(self) -> None:
        assert lognorm_dist(0.0, 0.0, 1.0, True).error == NumericError.DOMAIN


class TestChiSquare:
    def test_known_values(self) -> None:
        assert chisq_dist(0.5, 1, True).value == pytest.approx(0.52049988, abs=1e-8)
        assert chisq_dist_rt(18.307, 10).value == pytest.approx(0.0500006, abs=1e-7)
        assert chisq_inv(0.95, 3).value == pytest.approx(7.814727903251178, abs=1e-6)
        assert chisq_inv_rt(0.05, 3).value == pytest.approx(7.814727903251178, abs=1e-6)

    def test_density_at_zero(self) -> None:
        assert chisq_dist(0.0, 2, False).value == 0.5
        assert chisq_dist(0.0, 3, False).value == 0.0
        assert chisq_dist(0.0, 1, False).error == NumericError.NON_FINITE

    def test_degrees_of_freedom_are_truncated(self) -> None:
        assert chisq_dist(2.0, 3.9, True).value == chisq_dist(2.0, 3, True).value

    def test_degrees_of_freedom_range(self) -> None:
        assert chisq_inv(0.5, 0.5).error == NumericError.DOMAIN
        assert chisq_inv(0.5, 2e10).error == NumericError.DOMAIN
        assert chisq_dist(-1.0, 3, True).error == NumericError.DOMAIN

    def test_upper_tail_precision(self) -> None:
        # 1 - cdf would cancel to zero here
        assert chisq_dist_rt(200.0, 2).value == pytest.approx(math.exp(-100.0), rel=1e-10)


class TestFDist:
    def test_worked_example(self) -> None:
        assert f_dist(15.2068649, 6, 4, True).value == pytest.approx(0.99, abs=1e-7)
        assert f_dist_rt(15.2068649, 6, 4).value == pytest.approx(0.01, abs=1e-7)

    def test_cdf_plus_sf(self) -> None:
        assert f_dist(2.0, 5, 7, True).value + f_dist_rt(2.0, 5, 7).value == pytest.approx(1.0, abs=1e-13)

    def test_large_numerator_small_denominator(self) -> None:
        assert f_inv(0.25, 1000, 5).value == pytest.approx(0.7533, rel=1e-3)
        assert f_inv(0.01, 1000, 2).value == pytest.approx(0.2161, rel=1e-3)
        x = f_inv(0.9, 1000, 2).value
        assert f_dist(x, 1000, 2, True).value == pytest.approx(0.9, rel=1e-8)

    def test_far_upper_tail(self) -> None:
        assert f_dist(3.0, 8000, 8000, True).value == 1.0
        assert f_dist_rt(3.0, 8000, 8000).value == 0.0


class TestStudentT:
    def test_worked_example(self) -> None:
        assert t_dist(60.0, 1, True).value == pytest.approx(0.99469533, abs=1e-8)
        assert t_inv_2t(0.05, 10).value == pytest.approx(2.228138851964939, abs=1e-6)
        assert t_inv(0.975, 10).value == pytest.approx(2.228138851964939, abs=1e-6)

    def test_symmetry(self) -> None:
        assert t_dist(0.0, 5, True).value == 0.5
        assert t_dist(-1.3, 8, True).value == pytest.approx(t_dist_rt(1.3, 8).value, abs=1e-15)
        assert t_dist_2t(1.3, 8).value == pytest.approx(2.0 * t_dist_rt(1.3, 8).value, abs=1e-15)

    def test_two_tailed_needs_non_negative_x(self) -> None:
        assert t_dist_2t(-1.0, 5).error == NumericError.DOMAIN

    def test_huge_degrees_of_freedom_approach_normal(self) -> None:
        assert t_dist(1.0, 1e10, True).value == pytest.approx(0.8413447460685429, abs=1e-9)
        assert t_dist(1.0, 1e10, False).value == pytest.approx(0.24197072451914337, abs=1e-9)
        assert t_dist_rt(1.0, 1e10).value == pytest.approx(0.15865525393145707, abs=1e-9)


class TestBeta:
    def test_worked_example(self) -> None:
        assert beta_dist(2.0, 8.0, 10.0, True, 1.0, 3.0).value == pytest.approx(0.6854706, abs=1e-7)
        assert beta_inv(0.6854706, 8.0, 10.0, 1.0, 3.0).value == pytest.approx(2.0, abs=1e-6)

    def test_rescaling(self) -> None:
        assert beta_dist(2.5, 2.0, 3.0, True, 1.0, 4.0).value == pytest.approx(
            beta_dist(0.5, 2.0, 3.0, True).value, abs=1e-15
        )
        assert beta_dist(2.5, 2.0, 3.0, False, 1.0, 4.0).value == pytest.approx(
            beta_dist(0.5, 2.0, 3.0, False).value / 3.0, rel=1e-12
        )

    def test_invalid(self) -> None:
        assert beta_dist(5.0, 2.0, 3.0, True, 1.0, 4.0).error == NumericError.DOMAIN
        assert beta_dist(0.5, 2.0, 3.0, True, 1.0, 1.0).error == NumericError.DOMAIN
        assert beta_dist(0.5, 0.0, 3.0, True).error == NumericError.DOMAIN

    def test_shapes_below_one(self) -> None:
        x = beta_inv(0.01, 0.1, 3.0).value
        assert 0.0 < x < 1.0
        assert beta_dist(x, 0.1, 3.0, True).value == pytest.approx(0.01, rel=1e-8)
        assert beta_inv(0.5, 0.3, 0.3).value == pytest.approx(0.5, abs=1e-9)

    def test_quantile_closer_to_one_than_rounding(self) -> None:
        # The exact quantile is about 1 - 4e-21
        r = beta_inv(0.99, 2.0, 0.1)
        assert r.ok
        assert r.value == 1.0

    def test_far_upper_tail(self) -> None:
        assert beta_dist(0.99, 3001.0, 3001.0, True).value == 1.0
        assert beta_dist(0.01, 3001.0, 3001.0, True).value == 0.0


class TestGamma:
    def test_worked_example(self) -> None:
        assert gamma_dist(10.00001131, 9.0, 2.0, True).value == pytest.approx(0.068094, abs=1e-6)
        assert gamma_inv(0.068094, 9.0, 2.0).value == pytest.approx(10.0, abs=1e-3)

    def test_exponential_special_case(self) -> None:
        assert gamma_dist(2.0, 1.0, 0.5, True).value == pytest.approx(expon_dist(2.0, 2.0, True).value, rel=1e-12)

    def test_far_upper_tail(self) -> None:
        assert gamma_dist(5000.0, 1000.0, 1.0, True).value == 1.0
        assert chisq_dist(10000.0, 2000, True).value == 1.0
        assert chisq_dist_rt(10000.0, 2000).value == 0.0


class TestExponentialWeibull:
    def test_exponential(self) -> None:
        assert expon_dist(1.0, 2.0, True).value == pytest.approx(1.0 - math.exp(-2.0), rel=1e-14)
        assert expon_dist(1.0, 2.0, False).value == pytest.approx(2.0 * math.exp(-2.0), rel=1e-14)
        assert expon_dist(-1.0, 2.0, True).error == NumericError.DOMAIN

    def test_weibull_worked_example(self) -> None:
        assert weibull_dist(105.0, 20.0, 100.0, True).value == pytest.approx(0.929581, abs=1e-6)
        assert weibull_dist(105.0, 20.0, 100.0, False).value == pytest.approx(0.035589, abs=1e-6)


# ---------------------------------------------------------------------------
# Discrete distributions
# ---------------------------------------------------------------------------


class TestPoisson:
    def test_values(self) -> None:
        assert poisson_dist(2, 3.0, False).value == pytest.approx(0.22404180765538775, rel=1e-10)
        assert poisson_dist(2, 3.0, True).value == pytest.approx(0.42319008112684353, rel=1e-10)

    def test_x_is_truncated(self) -> None:
        assert poisson_dist(2.9, 3.0, False).value == poisson_dist(2, 3.0, False).value

    def test_zero_mean(self) -> None:
        assert poisson_dist(0, 0.0, False).value == 1.0
        assert poisson_dist(3, 0.0, True).value == 1.0

    def test_invalid(self) -> None:
        assert poisson_dist(-1, 3.0, True).error == NumericError.DOMAIN
        assert poisson_dist(1, -3.0, True).error == NumericError.DOMAIN


class TestBinomial:
    def test_values(self) -> None:
        assert binom_dist(3, 10, 0.5, False).value == pytest.approx(0.1171875, rel=1e-10)
        assert binom_dist(6, 10, 0.5, True).value == pytest.approx(0.828125, rel=1e-10)

    def test_top_of_support_is_exactly_one(self) -> None:
        assert binom_dist(10, 10, 0.5, True).value == 1.0

    def test_inverse(self) -> None:
        assert binom_inv(10, 0.5, 0.5).value == 5
        assert binom_inv(6, 0.5, 0.75).value == 4
        assert binom_inv(10, 0.5, 1.0).value == 10
        assert binom_inv(10, 0.5, 0.0).value == 0
        assert binom_inv(10, 0.5, 1.5).error == NumericError.DOMAIN
        assert binom_inv(10, 0.5, -0.1).error == NumericError.DOMAIN

    def test_range(self) -> None:
        assert binom_dist_range(60, 0.75, 48).value == pytest.approx(0.084, abs=1e-3)
        assert binom_dist_range(60, 0.75, 45, 50).value == pytest.approx(0.524, abs=1e-3)
        assert binom_dist_range(10, 0.3, 0, 10).value == pytest.approx(1.0, abs=1e-14)

    def test_range_invalid(self) -> None:
        assert binom_dist_range(10, 0.3, 5, 4).error == NumericError.DOMAIN
        assert binom_dist_range(10, 0.3, 0, 11).error == NumericError.DOMAIN

    def test_invalid(self) -> None:
        assert binom_dist(11, 10, 0.5, True).error == NumericError.DOMAIN
        assert binom_dist(1, 10, 1.5, True).error == NumericError.DOMAIN


class TestHypergeometric:
    def test_worked_example(self) -> None:
        assert hypgeom_dist(1, 4, 8, 20, False).value == pytest.approx(0.363261094, abs=1e-9)
        assert hypgeom_dist(1, 4, 8, 20, True).value == pytest.approx(0.465428277, abs=1e-9)

    def test_top_of_support_is_exactly_one(self) -> None:
        assert hypgeom_dist(4, 4, 8, 20, True).value == 1.0
        assert hypgeom_dist(3, 10, 3, 20, True).value == 1.0

    def test_support_bounds(self) -> None:
        # 15 draws from 20 with 8 successes leave at least 3 successes
        assert hypgeom_dist(0, 15, 8, 20, True).error == NumericError.DOMAIN
        assert hypgeom_dist(3, 15, 8, 20, False).ok
        assert hypgeom_dist(5, 4, 8, 20, False).error == NumericError.DOMAIN

    def test_inconsistent_counts(self) -> None:
        assert hypgeom_dist(1, 30, 8, 20, False).error == NumericError.DOMAIN


class TestNegativeBinomial:
    def test_worked_example(self) -> None:
        assert negbinom_dist(10, 5, 0.25, False).value == pytest.approx(0.05504866, abs=1e-8)
        assert negbinom_dist(10, 5, 0.25, True).value == pytest.approx(0.3135141, abs=1e-7)

    def test_cdf_reaches_one(self) -> None:
        assert negbinom_dist(2000, 5, 0.25, True).value == pytest.approx(1.0, abs=1e-12)
        assert negbinom_dist(2000, 5, 0.25, True).value <= 1.0

    def test_degenerate_probabilities(self) -> None:
        assert negbinom_dist(0, 3, 1.0, False).value == 1.0
        assert negbinom_dist(4, 3, 1.0, False).value == 0.0
        assert negbinom_dist(4, 3, 0.0, True).value == 0.0

    def test_invalid(self) -> None:
        assert negbinom_dist(1, 0, 0.5, False).error == NumericError.DOMAIN
        assert negbinom_dist(-1, 3, 0.5, False).error == NumericError.DOMAIN


# ---------------------------------------------------------------------------
# Shared surface and reference comparisons
# ---------------------------------------------------------------------------


class TestDistributionProtocol:
    def test_bundles_satisfy_protocol(self) -> None:
        discrete = [Poisson(2.0), Binomial(5, 0.3), Hypergeometric(4, 8, 20), NegativeBinomial(3, 0.4)]
        for law in CONTINUOUS + discrete:
            assert isinstance(law, Distribution)

    def test_bundles_are_frozen(self) -> None:
        with pytest.raises(AttributeError):
            ChiSquare(3).df = 4  # type: ignore[misc]

    def test_evaluate_dispatches_on_cumulative(self) -> None:
        law = Gamma(2.0, 1.0)
        assert law.evaluate(1.5, True) == law.cdf(1.5)
        assert law.evaluate(1.5, False) == law.pdf(1.5)


class TestAgainstScipy:
    def test_continuous_quantiles(self) -> None:
        stats = pytest.importorskip("scipy.stats")
        for p in PROBABILITIES:
            assert chisq_inv(p, 4).value == pytest.approx(stats.chi2.ppf(p, 4), rel=1e-7)
            assert f_inv(p, 5, 12).value == pytest.approx(stats.f.ppf(p, 5, 12), rel=1e-7)
            assert t_inv(p, 7).value == pytest.approx(stats.t.ppf(p, 7), rel=1e-7, abs=1e-10)
            assert gamma_inv(p, 2.5, 3.0).value == pytest.approx(stats.gamma.ppf(p, 2.5, scale=3.0), rel=1e-7)
            assert beta_inv(p, 2.0, 5.0).value == pytest.approx(stats.beta.ppf(p, 2.0, 5.0), rel=1e-7)

    def test_densities(self) -> None:
        stats = pytest.importorskip("scipy.stats")
        assert t_dist(0.7, 9, False).value == pytest.approx(stats.t.pdf(0.7, 9), rel=1e-10)
        assert f_dist(1.3, 4, 11, False).value == pytest.approx(stats.f.pdf(1.3, 4, 11), rel=1e-10)
        assert chisq_dist(3.3, 5, False).value == pytest.approx(stats.chi2.pdf(3.3, 5), rel=1e-10)
        assert beta_dist(0.3, 2.5, 1.5, False).value == pytest.approx(stats.beta.pdf(0.3, 2.5, 1.5), rel=1e-10)

    def test_discrete_cdfs(self) -> None:
        stats = pytest.importorskip("scipy.stats")
        assert poisson_dist(7, 4.2, True).value == pytest.approx(stats.poisson.cdf(7, 4.2), rel=1e-10)
        assert binom_dist(12, 30, 0.35, True).value == pytest.approx(stats.binom.cdf(12, 30, 0.35), rel=1e-10)
        assert hypgeom_dist(3, 10, 12, 50, True).value == pytest.approx(stats.hypergeom.cdf(3, 50, 12, 10), rel=1e-10)
        assert negbinom_dist(6, 4, 0.3, True).value == pytest.approx(stats.nbinom.cdf(6, 4, 0.3), rel=1e-10)
