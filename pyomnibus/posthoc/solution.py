"""
User-facing post-hoc solution type.
"""

from dataclasses import dataclass, asdict
from typing import Any

from pyomnibus.core.formatting import format_p
from pyomnibus.core.result import Result
from pyomnibus.posthoc._common import PostHocComparison, PostHocParams


@dataclass
class PostHocSolution:
    """
    User-facing result of a post-hoc procedure.

    Produced by post_hoc(), and attached to OmnibusSolution.post_hoc when
    the omnibus test is significant.
    """
    _result: Result[PostHocParams]

    @property
    def params(self) -> PostHocParams:
        return self._result.params

    @property
    def procedure(self) -> str:
        return self._result.params.procedure

    @property
    def adjust_method(self) -> str | None:
        method = self._result.params.adjust_method
        return method.value if method is not None else None

    @property
    def comparisons(self) -> tuple[PostHocComparison, ...]:
        return self._result.params.comparisons

    @property
    def alpha(self) -> float:
        return self._result.params.alpha

    @property
    def significant_pairs(self) -> tuple[tuple[str, str], ...]:
        """(group1, group2) for every comparison with p_adj < alpha."""
        return tuple(
            (c.group1, c.group2) for c in self.comparisons if c.significant
        )

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def to_dict(self) -> dict[str, Any]:
        p = self._result.params
        return {
            'procedure': p.procedure,
            'omnibus_test': p.omnibus_test.value,
            'adjust_method': self.adjust_method,
            'alpha': p.alpha,
            'conf_level': p.conf_level,
            'comparisons': [
                {'contrast': c.contrast, **asdict(c)} for c in p.comparisons
            ],
        }

    def summary(self) -> str:
        return "\n".join(format_post_hoc(self._result.params))

    def __repr__(self) -> str:
        return (
            f"PostHocSolution(procedure={self.procedure!r}, "
            f"comparisons={len(self.comparisons)}, "
            f"significant={len(self.significant_pairs)})"
        )


def format_post_hoc(params: PostHocParams) -> list[str]:
    """Text block listing every contrast; '*' marks p_adj < alpha."""
    if params.adjust_method is None:
        lines = [f"{params.procedure} (alpha = {params.alpha:.3f}):"]
    else:
        lines = [
            f"Pairwise {params.procedure} "
            f"(Correction: {params.adjust_method.value}):"
        ]

    has_ci = any(c.ci_lower is not None for c in params.comparisons)
    if has_ci:
        lines.append(
            f"{'Comparison':<20} {'Diff':>8} {'Lower':>8} {'Upper':>8} {'p-adj':>8}"
        )
    else:
        lines.append(f"{'Comparison':<20} {'p-value':>8} {'p-adj':>8}")
    lines.append("-" * 60)

    for c in params.comparisons:
        flag = "*" if c.significant else " "
        if has_ci:
            lines.append(
                f"{c.contrast:<20} {c.estimate:>8.3f} {c.ci_lower:>8.3f} "
                f"{c.ci_upper:>8.3f} {format_p(c.p_adjusted):>8}{flag}"
            )
        else:
            lines.append(
                f"{c.contrast:<20} {format_p(c.p_value):>8} "
                f"{format_p(c.p_adjusted):>8}{flag}"
            )
    return lines
