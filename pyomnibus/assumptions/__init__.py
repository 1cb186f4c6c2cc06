"""
Assumption checks for grouped numeric data.

Public API:
    check_assumptions(data, y, x, ...) -> AssumptionSolution
    assess_normality(data, x, ...) -> NormalityAssessmentSolution
"""

from pyomnibus.assumptions._common import (
    AssumptionKey,
    AssumptionParams,
    DesignType,
    NormalityAssessment,
    NormalityMethod,
)
from pyomnibus.assumptions.design import GroupedDesign
from pyomnibus.assumptions.solvers import (
    assess_normality,
    check_assumptions,
    evaluate_assumptions,
)
from pyomnibus.assumptions.solution import (
    AssumptionSolution,
    NormalityAssessmentSolution,
)

__all__ = [
    "assess_normality",
    "check_assumptions",
    "evaluate_assumptions",
    "AssumptionKey",
    "AssumptionParams",
    "AssumptionSolution",
    "DesignType",
    "GroupedDesign",
    "NormalityAssessment",
    "NormalityAssessmentSolution",
    "NormalityMethod",
]
