"""
User-facing two-group solution types.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any

from pyomnibus.core.decisions import PairwiseTest
from pyomnibus.core.formatting import format_p
from pyomnibus.core.result import Result
from pyomnibus.effects._common import EffectSize
from pyomnibus.pairwise._common import PairwiseParams


@dataclass
class PairwiseSolution:
    """
    User-facing result of compare_groups().

    test is None when the variable was constant and no test was run.
    """
    _result: Result[PairwiseParams]

    @property
    def params(self) -> PairwiseParams:
        return self._result.params

    @property
    def test(self) -> PairwiseTest | None:
        return self._result.params.test

    @property
    def statistic(self) -> float | None:
        return self._result.params.statistic

    @property
    def df(self) -> tuple[float, ...] | None:
        return self._result.params.df

    @property
    def p_value(self) -> float | None:
        return self._result.params.p_value

    @property
    def significant(self) -> bool:
        return self._result.params.significant

    @property
    def effect_size(self) -> EffectSize | None:
        return self._result.params.effect_size

    @property
    def approximate(self) -> bool:
        """True when the p-value was simulated (Fisher beyond 2x2)."""
        return self._result.params.approximate

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
        out = asdict(p)
        out['kind'] = p.kind.value
        out['test'] = p.test.value if p.test is not None else None
        out['df'] = list(p.df) if p.df is not None else None
        out['effect_size'] = (
            {'value': p.effect_size.value, 'label': p.effect_size.label.value}
            if p.effect_size is not None else None
        )
        out['warnings'] = list(self.warnings)
        return out

    def summary(self) -> str:
        p = self._result.params
        lines = [f"Two-group comparison: {p.variable} by {p.group_var}", ""]
        for label in p.levels:
            lines.append(
                f"  {label}: n = {p.group_sizes[label]}, "
                f"missing = {p.group_missing[label]}"
            )
        if p.numeric is not None:
            norm = ", ".join(
                f"{label}: {format_p(v)}" for label, v in p.numeric.normality_p.items()
            )
            lines.append(f"  Normality (Shapiro-Wilk p): {norm}")
        lines.append("")

        if p.test is None:
            lines.append("No test performed (constant variable).")
            return "\n".join(lines)

        lines.append(f"Test: {p.test.value}")
        if p.statistic is not None:
            df = f" (df = {p.df[0]:.2f})" if p.df else ""
            lines.append(f"Statistic = {p.statistic:.3f}{df}")
        approx = " (simulated)" if p.approximate else ""
        lines.append(f"p = {format_p(p.p_value)}{approx}")
        if p.effect_size is not None:
            lines.append(f"Effect size: {p.effect_size}")
        lines.append(f"Result: {'Significant' if p.significant else 'Not significant'}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        test = self.test.value if self.test is not None else None
        return f"PairwiseSolution(test={test!r}, p_value={self.p_value})"


@dataclass(frozen=True)
class SummaryRow:
    """
    One variable of a summary table.

    n, missing and summaries are keyed by group label ('overall' when the
    table has no grouping variable). comparison holds the full two-group
    result, None for overall tables and insufficient data.
    """
    variable: str
    n: dict[str, int]
    missing: dict[str, int]
    summaries: dict[str, str]
    normality: str
    test: str | None
    p_value: float | None
    effect_size: EffectSize | None
    comparison: PairwiseParams | None


@dataclass(frozen=True)
class SummaryTable:
    """Result of summary_table()."""
    rows: tuple[SummaryRow, ...]
    group_var: str | None
    levels: tuple[str, ...]
    effect_size: bool

    def __len__(self) -> int:
        return len(self.rows)

    def row(self, variable: str) -> SummaryRow:
        for r in self.rows:
            if r.variable == variable:
                return r
        raise KeyError(variable)

    def records(self) -> list[dict[str, Any]]:
        """Rows as plain dicts with the table's column names."""
        out = []
        for r in self.rows:
            if self.group_var is None:
                out.append({
                    'variable': r.variable,
                    'n': r.n['overall'],
                    'NAs': r.missing['overall'],
                    'summary': r.summaries['overall'],
                    'normality': r.normality,
                })
                continue

            a, b = self.levels
            record = {
                'variable': r.variable,
                'n': f"A: {r.n[a]}, B: {r.n[b]}",
                'NAs': f"A: {r.missing[a]}, B: {r.missing[b]}",
                f"{a} (Group A)": r.summaries[a],
                f"{b} (Group B)": r.summaries[b],
                'normality': r.normality,
                'test': r.test,
                'p_value': format_p(r.p_value),
            }
            if self.effect_size:
                eff = r.effect_size
                record['effect_size'] = f"{eff.value:.2f}" if eff is not None else None
                record['effect_param'] = eff.label.value if eff is not None else None
            out.append(record)
        return out

    def to_frame(self):
        """The table as a pandas DataFrame."""
        import pandas as pd
        return pd.DataFrame.from_records(self.records())

    def summary(self) -> str:
        return self.to_frame().to_string(index=False)
