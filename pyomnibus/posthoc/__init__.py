"""
Post-hoc multiple comparisons.

Public API:
    post_hoc(result, method=...) -> PostHocSolution
    p_adjust(p, method) -> ndarray
"""

from pyomnibus.posthoc._common import (
    AdjustMethod,
    PostHocComparison,
    PostHocParams,
)
from pyomnibus.posthoc._p_adjust import p_adjust
from pyomnibus.posthoc.solvers import dispatch_post_hoc, post_hoc
from pyomnibus.posthoc.solution import PostHocSolution

__all__ = [
    "AdjustMethod",
    "PostHocComparison",
    "PostHocParams",
    "PostHocSolution",
    "dispatch_post_hoc",
    "p_adjust",
    "post_hoc",
]
