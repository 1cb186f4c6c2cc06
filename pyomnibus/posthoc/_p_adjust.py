"""
Multiple testing correction with R p.adjust() semantics.

The adjustments themselves come from statsmodels' multipletests; this
module adds the R conventions around it: NaN p-values are carried through
and not counted as tests, 'fdr' is an alias of BH, and n may declare a
larger family than the p-values passed in.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray, ArrayLike
from statsmodels.stats.multitest import multipletests

from pyomnibus.core.exceptions import ValidationError
from pyomnibus.core.validation import check_choice
from pyomnibus.posthoc._common import AdjustMethod

_MULTIPLETESTS_NAMES = {
    AdjustMethod.HOLM: 'holm',
    AdjustMethod.HOCHBERG: 'simes-hochberg',
    AdjustMethod.HOMMEL: 'hommel',
    AdjustMethod.BONFERRONI: 'bonferroni',
    AdjustMethod.BH: 'fdr_bh',
    AdjustMethod.BY: 'fdr_by',
}


def p_adjust(
    p: ArrayLike,
    method: AdjustMethod | str = AdjustMethod.HOLM,
    n: int | None = None,
) -> NDArray[np.floating]:
    """
    Adjust p-values for multiple comparisons. Matches R p.adjust().

    Parameters
    ----------
    p : array-like
        Vector of p-values.
    method : str or AdjustMethod
        One of "holm" (default), "hochberg", "hommel", "bonferroni", "BH",
        "BY", "fdr" (alias for BH), "none".
    n : int or None
        Number of comparisons. Default: the number of non-NaN p-values.
        Can be larger when some p-values were not computed.

    Returns
    -------
    ndarray
        Adjusted p-values, same length as input, clipped to [0, 1]. Every
        adjusted value is >= its raw value. NaN positions stay NaN.
    """
    method = check_choice(method, AdjustMethod, 'method')
    p_arr = np.asarray(p, dtype=np.float64).ravel()

    if n is not None and n < len(p_arr):
        raise ValidationError(f"n ({n}) must be >= length of p ({len(p_arr)})")

    result = p_arr.copy()
    valid = ~np.isnan(p_arr)
    if not valid.any() or method is AdjustMethod.NONE:
        return result

    pv = p_arr[valid]
    n_tests = len(pv) if n is None else n
    if n_tests > len(pv):
        # untested members of the family enter as p = 1, as p.adjust does
        pv = np.concatenate([pv, np.ones(n_tests - len(pv))])

    _, adjusted, _, _ = multipletests(pv, method=_MULTIPLETESTS_NAMES[method])
    result[valid] = np.clip(adjusted[:valid.sum()], 0.0, 1.0)
    return result
