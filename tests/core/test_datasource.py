"""
Tests for Sample construction, column resolution and row selection.
"""

import numpy as np
import pandas as pd
import pytest

from pyomnibus.core.datasource import NaPolicy, Sample, level_label
from pyomnibus.core.exceptions import ColumnNotFoundError, DimensionError, ValidationError


class TestConstruction:

    def test_from_mapping(self):
        s = Sample.build({'y': [1, 2, 3], 'g': ['a', 'b', 'a']})
        assert s.columns == ('y', 'g')
        assert s.n_rows == 3
        assert s.values(s.ref('y', 'y')).dtype == np.float64
        assert s.values(s.ref('g', 'x')).dtype == object

    def test_from_dataframe(self):
        df = pd.DataFrame({'y': [1.0, np.nan], 'g': ['a', None]})
        s = Sample.build(df)
        assert np.isnan(s.values(s.ref('y', 'y'))[1])
        assert s.values(s.ref('g', 'x'))[1] is None

    @pytest.mark.parametrize("dtype", [object, 'string', 'category'])
    def test_string_columns_with_missing(self, dtype):
        df = pd.DataFrame({
            'y': [1.0, 2.0, 3.0],
            'g': pd.Series(['a', None, 'b'], dtype=dtype),
        })
        s = Sample.build(df)
        g = s.values(s.ref('g', 'x'))
        assert list(g) == ['a', None, 'b']

    def test_columns_do_not_share_frame_memory(self):
        df = pd.DataFrame({'y': [1.0, 2.0], 'g': ['a', 'b']})
        s = Sample.build(df)
        y = s.values(s.ref('y', 'y'))
        g = s.values(s.ref('g', 'x'))
        assert y.flags.writeable and g.flags.writeable
        assert not np.shares_memory(y, df['y'].to_numpy())

    def test_sample_passthrough(self):
        s = Sample.build({'y': [1, 2]})
        assert Sample.build(s) is s

    def test_unequal_lengths(self):
        with pytest.raises(DimensionError):
            Sample.build({'y': [1, 2, 3], 'g': ['a', 'b']})

    def test_unsupported_type(self):
        with pytest.raises(ValidationError, match="DataFrame"):
            Sample.build([[1, 2], [3, 4]])

    def test_mapping_none_is_missing(self):
        s = Sample.build({'y': [1, None, 3]})
        ref = s.ref('y', role='y')
        np.testing.assert_array_equal(s.missing(ref), [False, True, False])


class TestColumnRef:

    def test_numeric_flag(self):
        s = Sample.build({'y': [1.0, 2.0], 'g': ['a', 'b']})
        assert s.ref('y', role='y').numeric
        assert not s.ref('g', role='x').numeric

    def test_unknown_column_names_role(self):
        s = Sample.build({'y': [1.0, 2.0]})
        with pytest.raises(ColumnNotFoundError, match="paired_by") as info:
            s.ref('subject', role='paired_by')
        assert info.value.column == 'subject'
        assert info.value.available == ('y',)


class TestLevels:

    def test_sorted_strings(self):
        s = Sample.build({'g': ['b', 'a', None, 'c', 'a']})
        assert s.levels(s.ref('g', role='x')) == ('a', 'b', 'c')

    def test_categorical_order_kept(self):
        df = pd.DataFrame({
            'g': pd.Categorical(['low', 'high', 'mid'], categories=['low', 'mid', 'high']),
        })
        s = Sample.build(df)
        assert s.levels(s.ref('g', role='x')) == ('low', 'mid', 'high')

    def test_numeric_levels(self):
        s = Sample.build({'g': [3, 1, 2, 1]})
        assert s.levels(s.ref('g', role='x')) == (1.0, 2.0, 3.0)

    def test_level_label(self):
        assert level_label(3.0) == '3'
        assert level_label(2.5) == '2.5'
        assert level_label('A') == 'A'


class TestSelection:

    @pytest.fixture
    def sample(self):
        return Sample.build({
            'y': [1.0, np.nan, 3.0, 4.0],
            'g': ['a', 'a', None, 'b'],
        })

    def test_omit(self, sample):
        rows = sample.select((sample.ref('y', 'y'), sample.ref('g', 'x')), 'omit')
        np.testing.assert_array_equal(rows.mask, [True, False, False, True])
        info = rows.info()
        assert info['na_action'] == 'omit'
        assert info['n_rows'] == 2
        assert info['n_missing'] == 2
        assert 'excluded_rows' not in info

    def test_exclude_keeps_row_count(self, sample):
        rows = sample.select((sample.ref('y', 'y'), sample.ref('g', 'x')), NaPolicy.EXCLUDE)
        info = rows.info()
        assert info['n_rows'] == 4
        assert info['excluded_rows'] == (1, 2)

    def test_invalid_policy(self, sample):
        with pytest.raises(ValidationError, match="na_action"):
            sample.select((sample.ref('y', 'y'),), 'drop')

    def test_split(self, sample):
        y, g = sample.ref('y', 'y'), sample.ref('g', 'x')
        groups = sample.split(y, g, sample.select((y, g)))
        assert list(groups) == ['a', 'b']
        np.testing.assert_array_equal(groups['a'], [1.0])
        np.testing.assert_array_equal(groups['b'], [4.0])
