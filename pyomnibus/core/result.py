"""
Generic result containers for all pyomnibus computations.

Result is the envelope every engine returns: a frozen parameter payload plus
design metadata, timing and the non-fatal warnings raised along the way.

Outcome is the per-sub-test result type. A statistical sub-test (a normality
check, a variance test, a post-hoc procedure) either succeeds with a payload
or fails with an error message; callers inspect the outcome instead of
relying on a caught exception having left a field unset.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (design, column names, row counts)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

P = TypeVar('P')  # Parameter payload type
T = TypeVar('T')


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for statistical computations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific parameters (test outcome, assumptions, ...)
        info: Structured metadata (design type, resolved columns, row counts)
        timing: Execution timing breakdown, or None if not measured
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=OmnibusParams(...),
        ...     info={'design_type': 'independent', 'n_rows': 60},
        ...     timing={'total_seconds': 0.01},
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    warnings: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of one statistical sub-test: a value, or the reason it failed.

    Construct via Outcome.success() / Outcome.failure() or Outcome.attempt().

    Attributes:
        value: Payload when the sub-test succeeded, None otherwise
        error: Error message when the sub-test failed, None otherwise
    """
    value: T | None = None
    error: str | None = None

    @classmethod
    def success(cls, value: T) -> 'Outcome[T]':
        return cls(value=value, error=None)

    @classmethod
    def failure(cls, error: str) -> 'Outcome[T]':
        return cls(value=None, error=error)

    @classmethod
    def attempt(
        cls,
        fn: Callable[..., T],
        *args: Any,
        catch: tuple[type[BaseException], ...],
        label: str = '',
        **kwargs: Any,
    ) -> 'Outcome[T]':
        """
        Run fn(*args, **kwargs) and wrap the return value or the caught error.

        Only the exception types in `catch` are converted; anything else
        propagates. The failure message is prefixed with `label` when given.
        """
        try:
            return cls.success(fn(*args, **kwargs))
        except catch as exc:
            message = f"{label}: {exc}" if label else str(exc)
            return cls.failure(message)

    @property
    def ok(self) -> bool:
        """True when the sub-test produced a value."""
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising ValueError if the sub-test failed."""
        if self.error is not None:
            raise ValueError(f"Outcome holds no value: {self.error}")
        return self.value  # type: ignore[return-value]
