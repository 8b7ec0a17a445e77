"""Tagged numeric results and the failure classifier."""

from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# NumericError: the failure taxonomy handed to callers
# ---------------------------------------------------------------------------


class NumericError:
    """Kind of numeric failure carried by a :class:`NumericResult`.

    Use ``NumericError.of(kind)`` to get the cached singleton for a kind.
    Kinds compare equal to their string name (``NumericError.DOMAIN == "domain"``).
    """

    __slots__ = ("kind",)
    _cache: dict[str, NumericError] = {}

    DOMAIN: NumericError
    CONVERGENCE: NumericError
    NON_FINITE: NumericError

    def __init__(self, kind: str) -> None:
        self.kind = kind

    @classmethod
    def of(cls, kind: str) -> NumericError:
        canon = kind.lower()
        if canon not in cls._cache:
            cls._cache[canon] = cls(canon)
        return cls._cache[canon]

    def __repr__(self) -> str:
        return f"NumericError.{self.kind.upper()}"

    def __str__(self) -> str:
        return self.kind

    def __eq__(self, other: object) -> bool:
        if isinstance(other, NumericError):
            return self.kind == other.kind
        if isinstance(other, str):
            return self.kind == other.lower()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.kind)


# Singletons
NumericError.DOMAIN = NumericError.of("domain")
NumericError.CONVERGENCE = NumericError.of("convergence")
NumericError.NON_FINITE = NumericError.of("non_finite")


# ---------------------------------------------------------------------------
# Internal failure signals, converted to results at the public boundary
# ---------------------------------------------------------------------------


class NumericFailure(Exception):
    """Base for failures raised inside float-level code."""

    error: NumericError = NumericError.NON_FINITE


class DomainViolation(NumericFailure, ValueError):
    """An input lies outside the function's mathematical domain."""

    error = NumericError.DOMAIN


class ConvergenceError(NumericFailure, ArithmeticError):
    """An iterative method hit its iteration cap or lost its derivative."""

    error = NumericError.CONVERGENCE


class NonFiniteValue(NumericFailure, ArithmeticError):
    """A computation produced NaN or infinity from valid-looking inputs."""

    error = NumericError.NON_FINITE


def require(condition: bool, message: str) -> None:
    """Raise :class:`DomainViolation` with *message* unless *condition* holds."""
    if not condition:
        raise DomainViolation(message)


# ---------------------------------------------------------------------------
# NumericResult
# ---------------------------------------------------------------------------


def _is_finite(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    finite = getattr(value, "is_finite", None)
    if finite is not None:
        return bool(finite())
    return True


@dataclass(frozen=True)
class NumericResult:
    """Either a finite value or one :class:`NumericError` kind, never both."""

    value: Any = None
    error: NumericError | None = None

    @classmethod
    def of(cls, value: Any) -> NumericResult:
        """Wrap *value* as success, or as NON_FINITE if it is NaN/infinite."""
        if not _is_finite(value):
            return cls(error=NumericError.NON_FINITE)
        return cls(value=value)

    @classmethod
    def failure(cls, error: NumericError) -> NumericResult:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value, raising the matching :class:`NumericFailure` on error."""
        if self.error is None:
            return self.value
        if self.error == NumericError.DOMAIN:
            raise DomainViolation("result is a domain error")
        if self.error == NumericError.CONVERGENCE:
            raise ConvergenceError("result is a convergence failure")
        raise NonFiniteValue("result is non-finite")

    def value_or(self, default: Any) -> Any:
        return self.value if self.error is None else default


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


def classify_exception(exc: BaseException) -> NumericError:
    """Map an exception raised by float-level code onto a failure kind.

    Preconditions are checked before any arithmetic, so a bare ``ValueError``
    coming out of the ``math`` module (log of zero, sqrt of a negative) means
    the computation itself left the real line.
    """
    if isinstance(exc, NumericFailure):
        return exc.error
    if isinstance(exc, (OverflowError, ZeroDivisionError, ValueError)):
        return NumericError.NON_FINITE
    raise TypeError(f"unclassifiable exception: {exc!r}") from exc


def classified(func: Callable[..., Any]) -> Callable[..., NumericResult]:
    """Decorate a float-level function so it returns a :class:`NumericResult`."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> NumericResult:
        try:
            value = func(*args, **kwargs)
        except (NumericFailure, OverflowError, ZeroDivisionError, ValueError) as e:
            error = classify_exception(e)
            logger.debug("%s%r -> %s: %s", func.__name__, args, error, e)
            return NumericResult.failure(error)
        result = NumericResult.of(value)
        if not result.ok:
            logger.debug("%s%r -> non-finite value %r", func.__name__, args, value)
        return result

    wrapper.raw = func  # type: ignore[attr-defined]
    return wrapper
