"""
Common data types for effect sizes.

Contains the frozen payload shared by every engine that reports a
magnitude alongside a p-value.
"""

from dataclasses import dataclass
from enum import Enum


class EffectSizeLabel(str, Enum):
    """Which effect-size measure a value represents."""
    COHENS_D = "Cohen's d"
    RANK_BISERIAL_R = "r"
    CRAMERS_V = "Cramer's V"
    ODDS_RATIO = "Odds Ratio"
    ETA_SQUARED = "eta-squared"
    MAUCHLY_W = "W"


@dataclass(frozen=True)
class EffectSize:
    """A magnitude together with the measure it was computed as."""
    value: float
    label: EffectSizeLabel

    def __str__(self) -> str:
        return f"{self.label.value} = {self.value:.2f}"


@dataclass(frozen=True)
class RiskMeasures:
    """
    Parameter payload for effect_measures().

    table holds the counts used, after any continuity correction:
    ((a, b), (c, d)) with rows exposed/unexposed and columns event/no event.
    A ratio and its interval are None when they cannot be formed.
    number_needed is 1 / |risk difference|: the number needed to harm when
    `harm` is True (exposure raises the risk), else to treat.
    """
    table: tuple[tuple[float, float], tuple[float, float]]
    odds_ratio: float | None
    or_ci: tuple[float, float] | None
    risk_ratio: float | None
    rr_ci: tuple[float, float] | None
    exposed_risk: float
    unexposed_risk: float
    risk_difference: float
    number_needed: float
    harm: bool
    conf_level: float
    corrected: bool
