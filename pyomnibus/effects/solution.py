"""
User-facing effect-measure solution type.
"""

from dataclasses import dataclass, asdict
from typing import Any

from pyomnibus.core.result import Result
from pyomnibus.effects._common import RiskMeasures


@dataclass
class EffectMeasuresSolution:
    """User-facing result of effect_measures()."""
    _result: Result[RiskMeasures]

    @property
    def params(self) -> RiskMeasures:
        return self._result.params

    @property
    def odds_ratio(self) -> float | None:
        return self._result.params.odds_ratio

    @property
    def or_ci(self) -> tuple[float, float] | None:
        return self._result.params.or_ci

    @property
    def risk_ratio(self) -> float | None:
        return self._result.params.risk_ratio

    @property
    def rr_ci(self) -> tuple[float, float] | None:
        return self._result.params.rr_ci

    @property
    def exposed_risk(self) -> float:
        return self._result.params.exposed_risk

    @property
    def unexposed_risk(self) -> float:
        return self._result.params.unexposed_risk

    @property
    def risk_difference(self) -> float:
        return self._result.params.risk_difference

    @property
    def number_needed(self) -> float:
        return self._result.params.number_needed

    @property
    def number_needed_label(self) -> str:
        return 'NNH' if self._result.params.harm else 'NNT'

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
        record = asdict(self._result.params)
        record['table'] = [list(row) for row in record['table']]
        record['number_needed_label'] = self.number_needed_label
        return record

    def summary(self) -> str:
        p = self._result.params
        (a, b), (c, d) = p.table
        level = f"{p.conf_level * 100:.0f}% CI"
        lines = [
            "Odds/Risk Ratio Analysis",
            "",
            "Contingency Table:",
            f"{'':12} {'Event':>8} {'No Event':>8} {'Sum':>8}",
            f"{'Exposed':<12} {a:>8g} {b:>8g} {a + b:>8.0f}",
            f"{'Unexposed':<12} {c:>8g} {d:>8g} {c + d:>8.0f}",
            f"{'Sum':<12} {a + c:>8.0f} {b + d:>8.0f} {a + b + c + d:>8.0f}",
            "",
            _ratio_line("Odds Ratio", p.odds_ratio, p.or_ci, level),
            _ratio_line("Risk Ratio", p.risk_ratio, p.rr_ci, level),
            "",
            f"Risk in exposed: {p.exposed_risk * 100:.1f}%",
            f"Risk in unexposed: {p.unexposed_risk * 100:.1f}%",
            f"Absolute risk difference: {p.risk_difference * 100:.1f}%",
        ]
        name = (
            "Number needed to harm (NNH)" if p.harm
            else "Number needed to treat (NNT)"
        )
        lines.append(f"{name}: {p.number_needed:.1f}")
        if p.corrected:
            lines.append("")
            lines.append("Note: Correction (0.5) applied to all cells.")
        if self.warnings:
            lines.append("")
            lines.append("Warnings:")
            lines.extend(f"  {w}" for w in self.warnings)
        return "\n".join(lines)

    def __repr__(self) -> str:
        def show(v: float | None) -> str:
            return 'None' if v is None else f"{v:.4g}"
        return (
            f"EffectMeasuresSolution(odds_ratio={show(self.odds_ratio)}, "
            f"risk_ratio={show(self.risk_ratio)}, "
            f"{self.number_needed_label}={self.number_needed:.4g})"
        )


def _ratio_line(
    name: str,
    value: float | None,
    ci: tuple[float, float] | None,
    level: str,
) -> str:
    if value is None:
        return f"{name} cannot be calculated due to zero values."
    if ci is None:
        return f"{name}: {value:.3f} ({level} not available)"
    return f"{name}: {value:.3f} ({level}: {ci[0]:.3f} - {ci[1]:.3f})"
