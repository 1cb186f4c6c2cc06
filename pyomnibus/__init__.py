"""
pyomnibus: assumption-driven test selection for group comparisons.

Evaluates normality, homogeneity of variance and sphericity, picks the
parametric or rank-based test accordingly, and follows significant omnibus
results with the matching post-hoc procedure.

Submodules:
    assumptions: Normality / variance / sphericity checks, single-variable
        normality assessment
    omnibus: k-group comparisons (ANOVA, RM ANOVA, Kruskal-Wallis, Friedman)
    pairwise: Two-group comparisons and the summary table
    posthoc: Tukey HSD, pairwise tests, p-value adjustment
    effects: Effect sizes, risk and odds measures for 2x2 tables
"""

__version__ = "0.1.0"

from pyomnibus.assumptions import assess_normality, check_assumptions
from pyomnibus.effects import effect_measures
from pyomnibus.omnibus import omnibus, select_test
from pyomnibus.pairwise import compare_groups, summary_table
from pyomnibus.posthoc import p_adjust, post_hoc

__all__ = [
    "__version__",
    "assess_normality",
    "check_assumptions",
    "compare_groups",
    "effect_measures",
    "omnibus",
    "p_adjust",
    "post_hoc",
    "select_test",
    "summary_table",
]
