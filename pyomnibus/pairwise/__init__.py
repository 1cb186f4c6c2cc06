"""
Two-group comparisons.

Public API:
    compare_groups(data, y, x, ...) -> PairwiseSolution
    summary_table(data, group_var, ...) -> SummaryTable
    describe(values, numeric=...) -> str
"""

from pyomnibus.core.decisions import PairwiseTest
from pyomnibus.pairwise._common import PairwiseParams, VariableKind
from pyomnibus.pairwise._describe import describe
from pyomnibus.pairwise.design import PairwiseDesign
from pyomnibus.pairwise.solvers import analyze_variable, compare_groups, summary_table
from pyomnibus.pairwise.solution import PairwiseSolution, SummaryRow, SummaryTable

__all__ = [
    "compare_groups",
    "summary_table",
    "analyze_variable",
    "describe",
    "PairwiseDesign",
    "PairwiseParams",
    "PairwiseSolution",
    "PairwiseTest",
    "SummaryRow",
    "SummaryTable",
    "VariableKind",
]
