"""cellmath - numerical core behind spreadsheet formula functions.

Usage::

    from cellmath import norm_inv, bessel_k, parse_complex, complex_sqrt, FunctionRegistry

    r = norm_inv(0.975, 0.0, 1.0)
    if r.ok:
        print(r.value)                    # about 1.95996

    bessel_k(1.5, 2).value                # K_2(1.5)
    complex_sqrt(parse_complex("-4")).value   # ComplexNumber(0.0, 2.0)

    FunctionRegistry().call("CHISQ.INV", [0.95, 3])   # about 7.8147
"""

__version__ = "0.1.0"

from cellmath import _special
from cellmath._bessel import bessel_i, bessel_j, bessel_k, bessel_y
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
from cellmath._functions import (
    ERROR_CODES,
    FUNCTION_WHITELIST,
    ExcelError,
    FunctionRegistry,
    is_supported,
    to_excel_value,
)
from cellmath._result import (
    ConvergenceError,
    DomainViolation,
    NonFiniteValue,
    NumericError,
    NumericFailure,
    NumericResult,
    classified,
)
from cellmath._solver import (
    DISTRIBUTION_SETTINGS,
    FINANCIAL_SETTINGS,
    SolverSettings,
    SolverState,
    irr,
    newton_raphson,
    npv,
    rate,
    solve,
    xirr,
    xnpv,
)

# The kernels raise on invalid input; the package exposes their NumericResult forms
combination = classified(_special.combination)
combination_with_repetition = classified(_special.combination_with_repetition)
erf = classified(_special.erf)
erfc = classified(_special.erfc)
gamma = classified(_special.gamma)
log_combination = classified(_special.log_combination)
log_gamma = classified(_special.log_gamma)
log_gamma_difference = classified(_special.log_gamma_difference)
regularized_beta = classified(_special.regularized_beta)
regularized_gamma_p = classified(_special.regularized_gamma_p)
regularized_gamma_q = classified(_special.regularized_gamma_q)

__all__ = [
    "__version__",
    # results
    "ConvergenceError",
    "DomainViolation",
    "NonFiniteValue",
    "NumericError",
    "NumericFailure",
    "NumericResult",
    "classified",
    # special functions
    "combination",
    "combination_with_repetition",
    "erf",
    "erfc",
    "gamma",
    "log_combination",
    "log_gamma",
    "log_gamma_difference",
    "regularized_beta",
    "regularized_gamma_p",
    "regularized_gamma_q",
    # solver and financial rates
    "DISTRIBUTION_SETTINGS",
    "FINANCIAL_SETTINGS",
    "SolverSettings",
    "SolverState",
    "irr",
    "newton_raphson",
    "npv",
    "rate",
    "solve",
    "xirr",
    "xnpv",
    # distributions
    "Beta",
    "Binomial",
    "ChiSquare",
    "Distribution",
    "Exponential",
    "FDist",
    "Gamma",
    "Hypergeometric",
    "LogNormal",
    "NegativeBinomial",
    "Normal",
    "Poisson",
    "StudentT",
    "Weibull",
    "beta_dist",
    "beta_inv",
    "binom_dist",
    "binom_dist_range",
    "binom_inv",
    "chisq_dist",
    "chisq_dist_rt",
    "chisq_inv",
    "chisq_inv_rt",
    "expon_dist",
    "f_dist",
    "f_dist_rt",
    "f_inv",
    "f_inv_rt",
    "gamma_dist",
    "gamma_inv",
    "hypgeom_dist",
    "lognorm_dist",
    "lognorm_inv",
    "negbinom_dist",
    "norm_dist",
    "norm_inv",
    "norm_s_dist",
    "norm_s_inv",
    "poisson_dist",
    "t_dist",
    "t_dist_2t",
    "t_dist_rt",
    "t_inv",
    "t_inv_2t",
    "weibull_dist",
    # complex numbers
    "ComplexNumber",
    "complex_abs",
    "complex_add",
    "complex_argument",
    "complex_conjugate",
    "complex_cos",
    "complex_cosh",
    "complex_cot",
    "complex_csc",
    "complex_csch",
    "complex_div",
    "complex_exp",
    "complex_ln",
    "complex_log10",
    "complex_log2",
    "complex_mul",
    "complex_number",
    "complex_power",
    "complex_sec",
    "complex_sech",
    "complex_sin",
    "complex_sinh",
    "complex_sqrt",
    "complex_sub",
    "complex_tan",
    "format_complex",
    "parse_complex",
    # Bessel
    "bessel_i",
    "bessel_j",
    "bessel_k",
    "bessel_y",
    # registry
    "ERROR_CODES",
    "ExcelError",
    "FUNCTION_WHITELIST",
    "FunctionRegistry",
    "is_supported",
    "to_excel_value",
]
