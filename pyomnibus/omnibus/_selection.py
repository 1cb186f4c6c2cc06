"""
Test selection for k-group comparisons.

A pure decision table over the design type and the assumption keys:

    independent, normality ok, variance ok                -> One-way ANOVA
    independent, anything else                            -> Kruskal-Wallis
    repeated, normality ok, variance ok, sphericity ok    -> RM ANOVA
    repeated, anything else                               -> Friedman

"ok" means NON_SIGNIFICANT. A key of None (the sub-test failed) is treated
as violated, which routes to the non-parametric test.
"""

from __future__ import annotations

from pyomnibus.core.decisions import OmnibusTest
from pyomnibus.core.result import Outcome
from pyomnibus.assumptions._common import (
    AssumptionKey,
    AssumptionParams,
    DesignType,
)

_PARAMETRIC = {
    DesignType.INDEPENDENT: OmnibusTest.ONEWAY_ANOVA,
    DesignType.REPEATED: OmnibusTest.RM_ANOVA,
}
_NONPARAMETRIC = {
    DesignType.INDEPENDENT: OmnibusTest.KRUSKAL_WALLIS,
    DesignType.REPEATED: OmnibusTest.FRIEDMAN,
}


def _holds(key: AssumptionKey | None) -> bool:
    return key is AssumptionKey.NON_SIGNIFICANT


def select_test(
    design_type: DesignType | str,
    normality: AssumptionKey | None,
    variance: AssumptionKey | None,
    sphericity: AssumptionKey | None = None,
) -> OmnibusTest:
    """
    Map a design type and assumption keys to an omnibus test.

    Args:
        design_type: 'independent' or 'repeated'
        normality, variance, sphericity: Assumption keys, None if unknown.
            sphericity is ignored for independent designs.

    Examples:
        >>> select_test('independent', AssumptionKey.NON_SIGNIFICANT,
        ...             AssumptionKey.NON_SIGNIFICANT)
        <OmnibusTest.ONEWAY_ANOVA: 'One-way ANOVA'>
    """
    design_type = DesignType(design_type)
    satisfied = _holds(normality) and _holds(variance)
    if design_type is DesignType.REPEATED:
        satisfied = satisfied and _holds(sphericity)
    return (_PARAMETRIC if satisfied else _NONPARAMETRIC)[design_type]


def _key(outcome: Outcome | None) -> AssumptionKey | None:
    if outcome is None or not outcome.ok:
        return None
    return outcome.unwrap().key


def select_from_assumptions(params: AssumptionParams) -> OmnibusTest:
    """select_test() applied to an assumption evaluation."""
    return select_test(
        params.design_type,
        _key(params.normality),
        _key(params.variance),
        _key(params.sphericity),
    )
