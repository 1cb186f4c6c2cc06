"""
Descriptive summary strings for the summary table.
"""

from __future__ import annotations

from collections import Counter

import numpy as np
from numpy.typing import NDArray

from pyomnibus.core.datasource import level_label
from pyomnibus.pairwise._common import NORMALITY_ALPHA
from pyomnibus.pairwise._numeric import group_normality


def describe(
    values: NDArray,
    *,
    numeric: bool,
    all_stats: bool = False,
    force_median: bool = False,
) -> str:
    """
    One-line summary of non-missing values.

    Numeric: 'Mean (SD): m (s)' when Shapiro-Wilk p > 0.05 and force_median
    is False, else 'Median (IQR): m (iqr)'. all_stats gives mean, SD,
    median, quartiles and range. Categorical: 'level: count (pct%)' per
    level, joined by '; '.
    """
    if len(values) == 0:
        return "No data"

    if not numeric:
        counts = Counter(level_label(v) for v in values)
        total = sum(counts.values())
        return "; ".join(
            f"{level}: {counts[level]} ({100.0 * counts[level] / total:.1f}%)"
            for level in sorted(counts)
        )

    x = np.asarray(values, dtype=np.float64)
    mean = float(np.mean(x))
    sd = float(np.std(x, ddof=1)) if len(x) > 1 else float('nan')
    q1, median, q3 = (float(q) for q in np.quantile(x, [0.25, 0.5, 0.75]))

    if all_stats:
        return (
            f"Mean (SD): {mean:.2f} ({sd:.1f}); "
            f"Median (IQR): {median:.2f} ({q1:.1f},{q3:.1f}); "
            f"Range: {float(np.min(x)):.2f},{float(np.max(x)):.2f}"
        )

    p_norm = group_normality(x)
    if not force_median and p_norm is not None and p_norm > NORMALITY_ALPHA:
        return f"Mean (SD): {mean:.2f} ({sd:.2f})"
    return f"Median (IQR): {median:.2f} ({q3 - q1:.2f})"
