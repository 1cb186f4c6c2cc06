"""
Number formatting shared by the summary() methods.
"""

from __future__ import annotations

import math


def format_p(p: float | None) -> str:
    """
    Format a p-value for reports.

    Values below 0.001 print as '< 0.001'; everything else with three
    decimals. Missing or NaN p-values print as 'NA'.
    """
    if p is None or math.isnan(p):
        return "NA"
    if p < 0.001:
        return "< 0.001"
    return f"{p:.3f}"
