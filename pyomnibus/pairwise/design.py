"""
Two-group design object.

Resolves a variable and a two-level grouping column against a Sample and
partitions the variable's values by group. Missing values of the variable
are excluded from the groups but counted per group; rows with a missing
group are handled by the missing-data policy.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyomnibus.core.datasource import (
    ColumnRef,
    NaPolicy,
    RowSelection,
    Sample,
    level_label,
)
from pyomnibus.core.exceptions import InsufficientLevelsError
from pyomnibus.pairwise._common import VariableKind


@dataclass(frozen=True)
class PairwiseDesign:
    """
    Validated variable split into exactly two groups.

    Attributes:
        variable, group: Resolved columns
        kind: NUMERIC for float columns, CATEGORICAL otherwise
        levels: The two group labels, in level order
        values: group label -> non-missing values (float64 for numeric,
            object otherwise)
        missing: group label -> number of missing values of the variable
        rows: Rows with a present group value
    """
    variable: ColumnRef
    group: ColumnRef
    kind: VariableKind
    levels: tuple[str, str]
    values: dict[str, NDArray]
    missing: dict[str, int]
    rows: RowSelection

    @property
    def distinct(self) -> int:
        """Number of distinct non-missing values of the variable."""
        pooled = np.concatenate(list(self.values.values()))
        if self.kind is VariableKind.NUMERIC:
            return len(np.unique(pooled))
        return len({level_label(v) for v in pooled})

    @property
    def is_constant(self) -> bool:
        return self.distinct < 2

    @staticmethod
    def build(
        data: Any,
        variable: str,
        group: str,
        *,
        na_action: NaPolicy | str = NaPolicy.OMIT,
    ) -> 'PairwiseDesign':
        """
        Raises:
            ColumnNotFoundError: If either column is absent
            InsufficientLevelsError: If the group column does not have
                exactly 2 levels
            ValidationError: If na_action is invalid
        """
        sample = Sample.build(data)
        var_ref = sample.ref(variable, role='variable')
        grp_ref = sample.ref(group, role='group_var')
        return PairwiseDesign.from_sample(sample, var_ref, grp_ref, na_action)

    @staticmethod
    def from_sample(
        sample: Sample,
        var_ref: ColumnRef,
        grp_ref: ColumnRef,
        na_action: NaPolicy | str = NaPolicy.OMIT,
    ) -> 'PairwiseDesign':
        rows = sample.select((grp_ref,), na_action)
        group_levels = sample.levels(grp_ref, rows)
        if len(group_levels) != 2:
            raise InsufficientLevelsError(
                f"group_var: column {grp_ref.name!r} has {len(group_levels)} "
                f"levels, exactly 2 are required",
                factor=grp_ref.name,
                n_levels=len(group_levels),
                required='== 2',
            )

        var_vals = sample.values(var_ref, rows)
        grp_vals = sample.values(grp_ref, rows)
        var_missing = sample.missing(var_ref)[rows.mask]

        values: dict[str, NDArray] = {}
        missing: dict[str, int] = {}
        for level in group_levels:
            in_group = grp_vals == level
            label = level_label(level)
            values[label] = var_vals[in_group & ~var_missing]
            missing[label] = int(np.sum(in_group & var_missing))

        return PairwiseDesign(
            variable=var_ref,
            group=grp_ref,
            kind=VariableKind.NUMERIC if var_ref.numeric else VariableKind.CATEGORICAL,
            levels=tuple(values),
            values=values,
            missing=missing,
            rows=rows,
        )
