"""
Tabular sample container for pyomnibus.

Sample is the "I have a table" abstraction: named columns of equal length,
numeric columns stored as float64 with NaN for missing entries and all other
columns stored as object arrays with None for missing entries. Engines never
touch a DataFrame directly; they resolve column names once into ColumnRef
objects and then ask the Sample for row selections and groupings.

Usage:
    from pyomnibus.core.datasource import Sample

    sample = Sample.build(df)                      # pandas DataFrame
    sample = Sample.build({'y': [...], 'g': [...]})  # mapping of columns

    y = sample.ref('y', role='y')
    g = sample.ref('g', role='x')
    rows = sample.select((y, g), na_action='omit')
    groups = sample.split(y, g, rows)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pyomnibus.core.exceptions import (
    ValidationError,
    DimensionError,
    ColumnNotFoundError,
)
from pyomnibus.core.validation import check_choice, check_consistent_length

if TYPE_CHECKING:
    import pandas as pd


class NaPolicy(str, Enum):
    """
    Missing-data policy for the analysed columns.

    OMIT drops incomplete rows entirely. EXCLUDE keeps the original row count
    in the bookkeeping and reports which rows were left out of computation.
    """
    OMIT = 'omit'
    EXCLUDE = 'exclude'


def level_label(value: Any) -> str:
    """Render a factor level as a string (3.0 -> '3')."""
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class ColumnRef:
    """
    A column name resolved against a Sample.

    Attributes:
        name: Column name
        role: What the caller uses the column for ('y', 'x', 'paired_by', ...)
        numeric: True if the column is stored as float64
    """
    name: str
    role: str
    numeric: bool


@dataclass(frozen=True)
class RowSelection:
    """
    Rows of a Sample that take part in an analysis.

    Attributes:
        mask: Boolean mask over all rows; True where every analysed column
            is present
        policy: The NaPolicy that produced the selection
    """
    mask: NDArray[np.bool_]
    policy: NaPolicy

    @property
    def n_total(self) -> int:
        return int(self.mask.shape[0])

    @property
    def n_used(self) -> int:
        return int(self.mask.sum())

    @property
    def n_missing(self) -> int:
        return self.n_total - self.n_used

    @property
    def excluded_rows(self) -> tuple[int, ...]:
        return tuple(int(i) for i in np.flatnonzero(~self.mask))

    def info(self) -> dict[str, Any]:
        """Row bookkeeping for Result.info."""
        out: dict[str, Any] = {
            'na_action': self.policy.value,
            'n_missing': self.n_missing,
        }
        if self.policy is NaPolicy.EXCLUDE:
            out['n_rows'] = self.n_total
            out['excluded_rows'] = self.excluded_rows
        else:
            out['n_rows'] = self.n_used
        return out


@dataclass(frozen=True)
class Sample:
    """
    Immutable column-oriented table.

    Construct via factory classmethods (build, from_dataframe, from_mapping),
    not directly.
    """
    _columns: dict[str, NDArray]
    _categories: dict[str, tuple[Any, ...]] = field(default_factory=dict)
    _metadata: dict[str, Any] = field(default_factory=dict)

    # === Factory Methods ===

    @classmethod
    def build(cls, data: 'Sample | pd.DataFrame | Mapping[str, Any]') -> Sample:
        """
        Dispatch to the appropriate factory.

        Accepts an existing Sample (returned unchanged), a pandas DataFrame,
        or a mapping of column name to sequence.
        """
        if isinstance(data, Sample):
            return data
        import pandas as pd
        if isinstance(data, pd.DataFrame):
            return cls.from_dataframe(data)
        if isinstance(data, Mapping):
            return cls.from_mapping(data)
        raise ValidationError(
            f"data: expected a pandas DataFrame or a mapping of columns, "
            f"got {type(data).__name__}"
        )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> Sample:
        """Construct from a mapping of column name to equal-length sequence."""
        import pandas as pd

        arrays = {str(k): np.asarray(v, dtype=object) for k, v in mapping.items()}
        for name, arr in arrays.items():
            if arr.ndim != 1:
                raise DimensionError(
                    f"column {name!r}: expected 1D sequence, got shape {arr.shape}"
                )
        check_consistent_length(*arrays.values(), names=tuple(arrays))

        df = pd.DataFrame({k: pd.Series(list(v)) for k, v in mapping.items()})
        df = df.infer_objects()
        sample = cls.from_dataframe(df)
        return cls(
            _columns=sample._columns,
            _categories=sample._categories,
            _metadata={**sample._metadata, 'source': 'mapping'},
        )

    @classmethod
    def from_dataframe(cls, df: 'pd.DataFrame') -> Sample:
        """
        Construct from a pandas DataFrame.

        Numeric (non-boolean) columns become float64 with NaN for missing.
        Every other column becomes an object array with None for missing;
        the category order of pandas Categorical columns is preserved.
        """
        import pandas as pd

        storage: dict[str, NDArray] = {}
        categories: dict[str, tuple[Any, ...]] = {}

        for col in df.columns:
            series = df[col]
            name = str(col)
            if (
                pd.api.types.is_numeric_dtype(series)
                and not pd.api.types.is_bool_dtype(series)
            ):
                storage[name] = series.to_numpy(
                    dtype=np.float64, na_value=np.nan, copy=True,
                )
            else:
                if isinstance(series.dtype, pd.CategoricalDtype):
                    categories[name] = tuple(series.cat.categories)
                # copy: pandas copy-on-write hands back a read-only view
                values = series.astype(object).to_numpy(dtype=object, copy=True)
                missing = pd.isna(series).to_numpy()
                values[missing] = None
                storage[name] = values

        return cls(
            _columns=storage,
            _categories=categories,
            _metadata={
                'n_observations': len(df),
                'source': 'dataframe',
                'columns': [str(c) for c in df.columns],
            },
        )

    # === Column Access ===

    @property
    def columns(self) -> tuple[str, ...]:
        """Column names in insertion order."""
        return tuple(self._columns)

    @property
    def n_rows(self) -> int:
        return int(self._metadata.get('n_observations', 0))

    def ref(self, name: str, role: str) -> ColumnRef:
        """
        Resolve a column name once.

        Raises:
            ColumnNotFoundError: If the column is absent, naming the role and
                listing the available columns
        """
        if not isinstance(name, str) or name not in self._columns:
            raise ColumnNotFoundError(
                f"{role}: column {name!r} not found. "
                f"Available columns: {', '.join(self.columns)}",
                column=str(name),
                role=role,
                available=self.columns,
            )
        return ColumnRef(
            name=name,
            role=role,
            numeric=self._columns[name].dtype.kind == 'f',
        )

    def values(self, ref: ColumnRef, rows: RowSelection | None = None) -> NDArray:
        """Column values, restricted to selected rows when given."""
        arr = self._columns[ref.name]
        return arr if rows is None else arr[rows.mask]

    def missing(self, ref: ColumnRef) -> NDArray[np.bool_]:
        """Boolean mask of missing entries in a column."""
        arr = self._columns[ref.name]
        if arr.dtype.kind == 'f':
            return np.isnan(arr)
        return np.array([v is None for v in arr], dtype=bool)

    # === Row Selection ===

    def select(
        self,
        refs: tuple[ColumnRef, ...],
        na_action: NaPolicy | str = NaPolicy.OMIT,
    ) -> RowSelection:
        """
        Select rows where every referenced column is present.

        Raises:
            ValidationError: If na_action is not a valid NaPolicy
        """
        policy = check_choice(na_action, NaPolicy, 'na_action')
        mask = np.ones(self.n_rows, dtype=bool)
        for ref in refs:
            mask &= ~self.missing(ref)
        return RowSelection(mask=mask, policy=policy)

    # === Grouping ===

    def levels(self, ref: ColumnRef, rows: RowSelection | None = None) -> tuple[Any, ...]:
        """
        Distinct non-missing values of a column, in a stable order.

        Categorical columns keep their declared category order; everything
        else is sorted (by string form when values are not mutually
        comparable).
        """
        values = self.values(ref, rows)
        if ref.numeric:
            present = values[~np.isnan(values)]
            return tuple(float(v) for v in np.unique(present))

        present = {v for v in values if v is not None}
        if ref.name in self._categories:
            return tuple(c for c in self._categories[ref.name] if c in present)
        try:
            return tuple(sorted(present))
        except TypeError:
            return tuple(sorted(present, key=str))

    def split(
        self,
        y: ColumnRef,
        x: ColumnRef,
        rows: RowSelection,
    ) -> dict[str, NDArray[np.floating[Any]]]:
        """
        Partition response y by the levels of factor x over selected rows.

        Returns:
            Ordered mapping of level label to float64 array of y values
        """
        y_vals = np.asarray(self.values(y, rows), dtype=np.float64)
        x_vals = self.values(x, rows)
        return {
            level_label(level): y_vals[x_vals == level]
            for level in self.levels(x, rows)
        }
