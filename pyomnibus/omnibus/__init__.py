"""
Omnibus comparison of three or more groups.

Public API:
    omnibus(data, y, x, ...) -> OmnibusSolution
    select_test(design_type, normality, variance, sphericity) -> OmnibusTest
    balance_coefficient(groups) -> BalanceDiagnostic
"""

from pyomnibus.core.decisions import OmnibusTest
from pyomnibus.omnibus._common import (
    BalanceBand,
    BalanceDiagnostic,
    OmnibusFit,
    OmnibusParams,
)
from pyomnibus.omnibus._fit import balance_coefficient
from pyomnibus.omnibus._selection import select_test, select_from_assumptions
from pyomnibus.omnibus.solvers import omnibus
from pyomnibus.omnibus.solution import OmnibusSolution

__all__ = [
    "omnibus",
    "select_test",
    "select_from_assumptions",
    "balance_coefficient",
    "BalanceBand",
    "BalanceDiagnostic",
    "OmnibusFit",
    "OmnibusParams",
    "OmnibusSolution",
    "OmnibusTest",
]
