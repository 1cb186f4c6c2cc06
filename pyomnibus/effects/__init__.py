"""
Effect sizes.

Public API:
    cohens_d(group1, group2) -> EffectSize | None
    rank_biserial_r(u, n1, n2) -> EffectSize | None
    cramers_v(chi_squared, table) -> EffectSize | None
    odds_ratio(estimate) -> EffectSize | None
    levene_eta_squared(f, df1, df2) -> EffectSize
    bartlett_cramers_v(statistic, n_total, k) -> EffectSize
    effect_measures(table, ...) -> EffectMeasuresSolution
"""

from pyomnibus.effects._common import EffectSize, EffectSizeLabel, RiskMeasures
from pyomnibus.effects.solvers import (
    bartlett_cramers_v,
    cohens_d,
    cramers_v,
    effect_measures,
    levene_eta_squared,
    odds_ratio,
    rank_biserial_r,
)
from pyomnibus.effects.solution import EffectMeasuresSolution

__all__ = [
    "EffectMeasuresSolution",
    "EffectSize",
    "EffectSizeLabel",
    "RiskMeasures",
    "bartlett_cramers_v",
    "cohens_d",
    "cramers_v",
    "effect_measures",
    "levene_eta_squared",
    "odds_ratio",
    "rank_biserial_r",
]
