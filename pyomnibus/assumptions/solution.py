"""
User-facing assumption-check solution type.

Wraps a Result[AssumptionParams] and provides convenient accessors, the
assumption report block and a plain-dict export.
"""

from dataclasses import dataclass, asdict
from typing import Any

from pyomnibus.core.formatting import format_p
from pyomnibus.core.result import Outcome, Result
from pyomnibus.assumptions._common import (
    AssumptionKey,
    AssumptionParams,
    GroupNormality,
    NormalityAssessment,
    NormalityResult,
    SphericityResult,
    VarianceResult,
)


@dataclass
class AssumptionSolution:
    """
    User-facing result of check_assumptions().

    Keys are None when the corresponding sub-test failed (see `warnings`)
    or, for sphericity, when the design is independent.
    """
    _result: Result[AssumptionParams]

    @property
    def params(self) -> AssumptionParams:
        return self._result.params

    @property
    def normality(self) -> Outcome[NormalityResult]:
        return self._result.params.normality

    @property
    def variance(self) -> Outcome[VarianceResult]:
        return self._result.params.variance

    @property
    def sphericity(self) -> Outcome[SphericityResult] | None:
        return self._result.params.sphericity

    @property
    def normality_key(self) -> AssumptionKey | None:
        return _key(self.normality)

    @property
    def variance_key(self) -> AssumptionKey | None:
        return _key(self.variance)

    @property
    def sphericity_key(self) -> AssumptionKey | None:
        return _key(self.sphericity)

    @property
    def alpha(self) -> float:
        return self._result.params.alpha

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
        """Plain nested-dict view of the assumption results."""
        return assumptions_to_dict(self._result.params)

    def summary(self) -> str:
        """Assumption report in the style of the omnibus printout."""
        lines = format_assumptions(self._result.params)
        if self.warnings:
            lines.append("Warnings:")
            lines.extend(f"  {w}" for w in self.warnings)
        return "\n".join(lines)

    def __repr__(self) -> str:
        def show(key: AssumptionKey | None) -> str:
            return key.value if key is not None else 'NA'
        parts = [
            f"normality={show(self.normality_key)}",
            f"variance={show(self.variance_key)}",
        ]
        if self.sphericity is not None:
            parts.append(f"sphericity={show(self.sphericity_key)}")
        return f"AssumptionSolution({', '.join(parts)})"


# =====================================================================
# Shared helpers (also used by the omnibus summary)
# =====================================================================


def _key(outcome: Outcome | None) -> AssumptionKey | None:
    if outcome is None or not outcome.ok:
        return None
    return outcome.unwrap().key


def _dump(outcome: Outcome | None) -> dict[str, Any] | None:
    if outcome is None:
        return None
    if not outcome.ok:
        return {'error': outcome.error}
    return asdict(outcome.unwrap())


def assumptions_to_dict(params: AssumptionParams) -> dict[str, Any]:
    return {
        'alpha': params.alpha,
        'design_type': params.design_type.value,
        'normality': _dump(params.normality),
        'variance': _dump(params.variance),
        'sphericity': _dump(params.sphericity),
    }


def format_assumptions(params: AssumptionParams) -> list[str]:
    """Text block describing every assumption sub-result."""
    lines = ["Assumption Testing Results:", ""]

    sph = params.sphericity
    if sph is not None:
        if sph.ok:
            s = sph.unwrap()
            lines.append(f"  Sphericity ({s.test} Test):")
            lines.append(f"  W = {s.w:.4f}, df = {s.df}, p = {format_p(s.p_value)}")
            lines.append(f"  Effect size (W) = {s.effect_size.value:.4f}")
            lines.append(
                f"  Epsilon: Greenhouse-Geisser = {s.gg_epsilon:.4f}, "
                f"Huynh-Feldt = {s.hf_epsilon:.4f}"
            )
            verdict = (
                "Sphericity violated"
                if s.key is AssumptionKey.SIGNIFICANT else "Sphericity assumed"
            )
            lines.append(f"  Result: {verdict}")
        else:
            lines.append("  Sphericity: not available")
            lines.append(f"  ({sph.error})")
        lines.append("")

    norm = params.normality
    if norm.ok:
        n = norm.unwrap()
        tests = sorted({g.test for g in n.groups})
        lines.append(f"  Normality ({' / '.join(tests)} Test):")
        for g in n.groups:
            symbol = 'W' if g.test == 'Shapiro-Wilk' else 'D'
            lines.append(
                f"  {g.group}: {symbol} = {g.statistic:.4f}, p = {format_p(g.p_value)}"
            )
        verdict = (
            "Non-normal distribution detected"
            if n.key is AssumptionKey.SIGNIFICANT else "Normal distribution assumed"
        )
        lines.append(f"  Overall result: {verdict}")
    else:
        lines.append("  Normality: not available")
        lines.append(f"  ({norm.error})")
    lines.append("")

    var = params.variance
    if var.ok:
        v = var.unwrap()
        lines.append(f"  Homogeneity of Variance ({v.test} Test):")
        if v.test == 'Levene':
            lines.append(
                f"  F({v.df[0]},{v.df[1]}) = {v.statistic:.4f}, p = {format_p(v.p_value)}"
            )
        else:
            lines.append(
                f"  Chi-squared({v.df[0]}) = {v.statistic:.4f}, p = {format_p(v.p_value)}"
            )
        lines.append(f"  Effect size ({v.effect_size.label.value}) = {v.effect_size.value:.4f}")
        verdict = (
            "Heterogeneous variances"
            if v.key is AssumptionKey.SIGNIFICANT else "Homogeneous variances"
        )
        lines.append(f"  Result: {verdict}")
    else:
        lines.append("  Homogeneity of Variance: not available")
        lines.append(f"  ({var.error})")
    lines.append("")

    return lines


@dataclass
class NormalityAssessmentSolution:
    """User-facing result of assess_normality()."""
    _result: Result[NormalityAssessment]

    @property
    def params(self) -> NormalityAssessment:
        return self._result.params

    @property
    def normal(self) -> bool:
        return self._result.params.normal

    @property
    def n(self) -> int:
        return self._result.params.n

    @property
    def skewness(self) -> float:
        return self._result.params.skewness

    @property
    def kurtosis(self) -> float:
        return self._result.params.kurtosis

    @property
    def outliers(self) -> tuple[int, ...]:
        return self._result.params.outliers

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
        record = {
            name: getattr(p, name)
            for name in (
                'variable', 'n', 'mean', 'sd', 'median', 'iqr',
                'skewness', 'kurtosis', 'skewness_z', 'kurtosis_z',
                'shape_rule', 'shape_normal', 'normal', 'alpha',
            )
        }
        record['shapiro'] = _dump(p.shapiro)
        record['ks'] = _dump(p.ks)
        record['outliers'] = list(p.outliers)
        record['extreme_outliers'] = list(p.extreme_outliers)
        return record

    def summary(self) -> str:
        p = self._result.params
        lines = [
            f"Normality Test for '{p.variable}'",
            "",
            f"n = {p.n}",
            f"mean (SD) = {p.mean:.2f} ({p.sd:.1f})",
            f"median (IQR) = {p.median:.2f} ({p.iqr:.1f})",
            "",
        ]
        if p.ks is not None:
            lines.append(_test_line("Kolmogorov-Smirnov", 'D', p.ks))
        lines.append(_test_line("Shapiro-Wilk", 'W', p.shapiro))
        lines.append(f"Skewness: {p.skewness:.2f} (z = {p.skewness_z:.2f})")
        lines.append(f"Kurtosis: {p.kurtosis:.2f} (z = {p.kurtosis_z:.2f})")
        lines.append("")
        verdict = "normally distributed." if p.normal else "not normally distributed."
        lines.append(f"Data appears {verdict}")
        if p.outliers:
            lines.append("")
            lines.append(
                "Q-Q outliers (row positions): "
                + ", ".join(str(i) for i in p.outliers)
            )
        if self.warnings:
            lines.append("")
            lines.append("Warnings:")
            lines.extend(f"  {w}" for w in self.warnings)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"NormalityAssessmentSolution(variable={self._result.params.variable!r}, "
            f"n={self.n}, normal={self.normal})"
        )


def _test_line(name: str, symbol: str, outcome: Outcome[GroupNormality]) -> str:
    if not outcome.ok:
        return f"{name}: not available ({outcome.error})"
    t = outcome.unwrap()
    return f"{name}: {symbol} = {t.statistic:.3f}, p = {format_p(t.p_value)}"
