"""
Grouped-variable design object.

Resolves a response column, a grouping factor and an optional pairing
column against a Sample, applies the missing-data policy, and partitions
the response into groups. For repeated-measures layouts it also verifies
that every subject has exactly one row per factor level and builds the
subjects x conditions matrix keyed by (subject, level), never by row order.
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
from pyomnibus.core.exceptions import (
    InsufficientLevelsError,
    RepeatedMeasuresLayoutError,
    ValidationError,
)
from pyomnibus.core.validation import check_min_samples
from pyomnibus.assumptions._common import DesignType


@dataclass(frozen=True)
class GroupedDesign:
    """
    Validated response partitioned by a factor.

    Created via factory methods, not directly.

    Attributes:
        y, x, paired_by: Resolved columns (paired_by None if independent)
        groups: level label -> response values. For repeated designs every
            array is ordered by `subjects`, so position i is subject i.
        wide: (n_subjects, k) matrix for repeated designs, else None
        subjects: Subject labels in row order of `wide`, else None
        rows: Rows of the sample that take part in the analysis
        n_dropped_subjects: Subjects removed for missing responses
    """
    y: ColumnRef
    x: ColumnRef
    paired_by: ColumnRef | None
    groups: dict[str, NDArray[np.floating[Any]]]
    wide: NDArray[np.floating[Any]] | None
    subjects: tuple[str, ...] | None
    rows: RowSelection
    n_dropped_subjects: int
    design_type: DesignType

    @property
    def levels(self) -> tuple[str, ...]:
        return tuple(self.groups)

    @property
    def k(self) -> int:
        return len(self.groups)

    @property
    def n_obs(self) -> int:
        return sum(len(g) for g in self.groups.values())

    @property
    def is_repeated(self) -> bool:
        return self.design_type is DesignType.REPEATED

    @staticmethod
    def build(
        data: Any,
        y: str,
        x: str,
        *,
        paired_by: str | None = None,
        na_action: NaPolicy | str = NaPolicy.OMIT,
        min_levels: int = 2,
        min_group_size: int = 3,
    ) -> 'GroupedDesign':
        """
        Dispatch to for_independent or for_repeated.

        Args:
            data: Sample, pandas DataFrame or mapping of columns
            y: Numeric response column
            x: Grouping factor column
            paired_by: Subject column for repeated measures, or None
            na_action: 'omit' or 'exclude'
            min_levels: Minimum number of factor levels
            min_group_size: Minimum non-missing observations per group
        """
        sample = Sample.build(data)
        if paired_by is None:
            return GroupedDesign.for_independent(
                sample, y, x, na_action=na_action,
                min_levels=min_levels, min_group_size=min_group_size,
            )
        return GroupedDesign.for_repeated(
            sample, y, x, paired_by, na_action=na_action,
            min_levels=min_levels, min_group_size=min_group_size,
        )

    @staticmethod
    def for_independent(
        sample: Sample,
        y: str,
        x: str,
        *,
        na_action: NaPolicy | str = NaPolicy.OMIT,
        min_levels: int = 2,
        min_group_size: int = 3,
    ) -> 'GroupedDesign':
        """Independent groups: one response value per row."""
        y_ref, x_ref = _resolve(sample, y, x)
        rows = sample.select((y_ref, x_ref), na_action)
        groups = sample.split(y_ref, x_ref, rows)
        _check_levels(x_ref, groups, min_levels)
        for label, values in groups.items():
            check_min_samples(values, min_group_size, label)

        return GroupedDesign(
            y=y_ref,
            x=x_ref,
            paired_by=None,
            groups=groups,
            wide=None,
            subjects=None,
            rows=rows,
            n_dropped_subjects=0,
            design_type=DesignType.INDEPENDENT,
        )

    @staticmethod
    def for_repeated(
        sample: Sample,
        y: str,
        x: str,
        paired_by: str,
        *,
        na_action: NaPolicy | str = NaPolicy.OMIT,
        min_levels: int = 2,
        min_group_size: int = 3,
    ) -> 'GroupedDesign':
        """
        Repeated measures: long format, one row per (subject, level).

        Rows with a missing subject or level are dropped. Every remaining
        subject must have exactly one row per level; subjects whose response
        is missing at any level are removed entirely and counted.

        Raises:
            RepeatedMeasuresLayoutError: If some (subject, level) cell has
                zero or several rows
        """
        y_ref, x_ref = _resolve(sample, y, x)
        s_ref = sample.ref(paired_by, role='paired_by')

        keyed = sample.select((x_ref, s_ref), na_action)
        levels = sample.levels(x_ref, keyed)
        subjects = sample.levels(s_ref, keyed)
        if len(levels) < min_levels:
            raise InsufficientLevelsError(
                f"x: column {x_ref.name!r} has {len(levels)} levels, "
                f"need at least {min_levels}",
                factor=x_ref.name,
                n_levels=len(levels),
                required=f">= {min_levels}",
            )

        level_index = {v: j for j, v in enumerate(levels)}
        subject_index = {v: i for i, v in enumerate(subjects)}
        row_ids = np.flatnonzero(keyed.mask)
        x_vals = sample.values(x_ref, keyed)
        s_vals = sample.values(s_ref, keyed)
        y_vals = np.asarray(sample.values(y_ref, keyed), dtype=np.float64)

        li = np.array([level_index[v] for v in x_vals], dtype=np.intp)
        si = np.array([subject_index[v] for v in s_vals], dtype=np.intp)

        counts = np.zeros((len(subjects), len(levels)), dtype=np.intp)
        np.add.at(counts, (si, li), 1)
        bad = np.argwhere(counts != 1)
        if len(bad) > 0:
            i, j = bad[0]
            subject, level = level_label(subjects[i]), level_label(levels[j])
            raise RepeatedMeasuresLayoutError(
                f"paired_by: subject {subject!r} has {counts[i, j]} observations "
                f"at level {level!r} of {x_ref.name!r}; exactly one is required",
                subject=subject,
                level=level,
                count=int(counts[i, j]),
            )

        wide = np.full((len(subjects), len(levels)), np.nan)
        wide[si, li] = y_vals

        complete = ~np.any(np.isnan(wide), axis=1)
        n_dropped = int(np.sum(~complete))
        kept_subject_rows = complete[si]

        mask = np.zeros(sample.n_rows, dtype=bool)
        mask[row_ids[kept_subject_rows]] = True
        rows = RowSelection(mask=mask, policy=keyed.policy)

        wide = wide[complete]
        kept_subjects = tuple(
            level_label(s) for s, keep in zip(subjects, complete) if keep
        )
        groups = {
            level_label(level): wide[:, j].copy()
            for j, level in enumerate(levels)
        }
        for label, values in groups.items():
            check_min_samples(values, min_group_size, label)

        return GroupedDesign(
            y=y_ref,
            x=x_ref,
            paired_by=s_ref,
            groups=groups,
            wide=wide,
            subjects=kept_subjects,
            rows=rows,
            n_dropped_subjects=n_dropped,
            design_type=DesignType.REPEATED,
        )


def _resolve(sample: Sample, y: str, x: str) -> tuple[ColumnRef, ColumnRef]:
    y_ref = sample.ref(y, role='y')
    x_ref = sample.ref(x, role='x')
    if not y_ref.numeric:
        raise ValidationError(
            f"y: column {y!r} must be numeric"
        )
    return y_ref, x_ref


def _check_levels(x_ref: ColumnRef, groups: dict[str, NDArray], min_levels: int) -> None:
    if len(groups) < min_levels:
        raise InsufficientLevelsError(
            f"x: column {x_ref.name!r} has {len(groups)} levels with data, "
            f"need at least {min_levels}",
            factor=x_ref.name,
            n_levels=len(groups),
            required=f">= {min_levels}",
        )
