"""
User-facing omnibus solution type.

Wraps a Result[OmnibusParams] and provides convenient accessors, the
report printout and a plain-dict export that can be consumed without
re-running the engine.
"""

from dataclasses import dataclass
from typing import Any

from pyomnibus.core.decisions import OmnibusTest
from pyomnibus.core.formatting import format_p
from pyomnibus.core.result import Result
from pyomnibus.assumptions._common import AssumptionParams
from pyomnibus.assumptions.solution import assumptions_to_dict, format_assumptions
from pyomnibus.posthoc.solution import PostHocSolution, format_post_hoc
from pyomnibus.omnibus._common import BalanceDiagnostic, OmnibusParams


@dataclass
class OmnibusSolution:
    """
    User-facing result of omnibus().

    post_hoc is None when the test was not significant or when the post-hoc
    procedure failed (the failure is listed in `warnings`).
    """
    _result: Result[OmnibusParams]

    @property
    def params(self) -> OmnibusParams:
        return self._result.params

    @property
    def test(self) -> OmnibusTest:
        return self._result.params.test

    @property
    def name(self) -> str:
        return self._result.params.test.value

    @property
    def formula(self) -> str:
        return self._result.params.formula

    @property
    def statistic(self) -> float:
        return self._result.params.statistic

    @property
    def df(self) -> tuple[float, ...]:
        """(numerator, denominator) for ANOVA; (df,) for rank tests."""
        return self._result.params.df

    @property
    def p_value(self) -> float:
        return self._result.params.p_value

    @property
    def significant(self) -> bool:
        return self._result.params.significant

    @property
    def alpha(self) -> float:
        return self._result.params.alpha

    @property
    def n_groups(self) -> int:
        return len(self._result.params.group_sizes)

    @property
    def eta_squared(self) -> float | None:
        return self._result.params.fit.eta_squared

    @property
    def assumptions(self) -> AssumptionParams:
        return self._result.params.assumptions

    @property
    def balance(self) -> BalanceDiagnostic:
        return self._result.params.balance

    @property
    def post_hoc(self) -> PostHocSolution | None:
        outcome = self._result.params.post_hoc
        if outcome is None or not outcome.ok:
            return None
        return PostHocSolution(_result=Result(
            params=outcome.unwrap(),
            info={'x': self.info['x'], 'y': self.info['y']},
            timing=None,
        ))

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
        """
        Plain nested-dict record of the analysis.

        Contains no arrays or solution objects, so it can be serialized or
        handed to a formatter as is.
        """
        p = self._result.params
        post_hoc = self.post_hoc
        return {
            'formula': p.formula,
            'y': self.info['y'],
            'x': self.info['x'],
            'paired_by': self.info['paired_by'],
            'design_type': self.info['design_type'],
            'test': p.test.value,
            'statistic': p.statistic,
            'df': list(p.df),
            'p_value': p.p_value,
            'significant': p.significant,
            'alpha': p.alpha,
            'method': p.adjust_method.value,
            'eta_squared': p.fit.eta_squared,
            'gg_p_value': p.fit.gg_p_value,
            'hf_p_value': p.fit.hf_p_value,
            'n_groups': self.n_groups,
            'group_sizes': dict(p.group_sizes),
            'group_means': dict(p.group_means),
            'assumptions': assumptions_to_dict(p.assumptions),
            'post_hoc': post_hoc.to_dict() if post_hoc is not None else None,
            'balance': {
                'coefficient': p.balance.coefficient,
                'band': p.balance.band.value if p.balance.band else None,
            },
            'n_missing': self.info['n_missing'],
            'warnings': list(self.warnings),
        }

    def summary(self) -> str:
        """Omnibus report: assumptions, test line, post-hoc block."""
        p = self._result.params
        lines = [f"Omnibus Test: {p.test.value}", ""]
        lines.extend(format_assumptions(p.assumptions))

        lines.append(f"Formula: {p.formula}")
        lines.append(f"alpha: {p.alpha:.2f}")
        if p.test.is_parametric:
            lines.append(
                f"F ({p.df[0]:.0f},{p.df[1]:.0f}) = {p.statistic:.3f}, "
                f"p = {format_p(p.p_value)}"
            )
            if p.fit.gg_p_value is not None:
                lines.append(
                    f"Sphericity-corrected p: GG = {format_p(p.fit.gg_p_value)}, "
                    f"HF = {format_p(p.fit.hf_p_value)}"
                )
        else:
            lines.append(
                f"X({p.df[0]:.0f}) = {p.statistic:.3f}, p = {format_p(p.p_value)}"
            )
        lines.append(f"Result: {'Significant' if p.significant else 'Not significant'}")

        band = p.balance.band.value if p.balance.band else 'undefined'
        lines.append(f"Balance coefficient: {p.balance.coefficient:.3f} ({band})")
        lines.append("")

        if p.post_hoc is None:
            lines.append("Post-hoc tests not performed (results not significant).")
        elif p.post_hoc.ok:
            lines.append("Post-hoc Multiple Comparisons")
            lines.append("")
            lines.extend(format_post_hoc(p.post_hoc.unwrap()))
        else:
            lines.append(f"Post-hoc tests failed: {p.post_hoc.error}")

        if self.warnings:
            lines.append("")
            lines.append("Warnings:")
            lines.extend(f"  {w}" for w in self.warnings)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"OmnibusSolution(test={self.name!r}, statistic={self.statistic:.4f}, "
            f"p_value={self.p_value:.4g}, significant={self.significant})"
        )
