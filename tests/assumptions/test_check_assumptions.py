"""
Tests for check_assumptions() and the GroupedDesign it builds.

Validates:
    - Bartlett after accepted normality, Levene after rejected normality
    - Sphericity only for repeated designs
    - Failed sub-tests become failed Outcomes plus warnings
    - Repeated-measures layout validation and dropped subjects
    - Column / level / group-size validation
"""

import numpy as np
import pandas as pd
import pytest

from pyomnibus import check_assumptions
from pyomnibus.assumptions import AssumptionKey, DesignType, GroupedDesign
from pyomnibus.core.exceptions import (
    ColumnNotFoundError,
    EngineWarning,
    InsufficientDataError,
    InsufficientLevelsError,
    RepeatedMeasuresLayoutError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Independent groups
# ═══════════════════════════════════════════════════════════════════════


class TestIndependent:

    def test_normal_equal_variance(self, abc_scores):
        res = check_assumptions(abc_scores, 'score', 'group')
        assert res.normality_key is AssumptionKey.NON_SIGNIFICANT
        assert res.variance.unwrap().test == 'Bartlett'
        assert res.variance_key is AssumptionKey.NON_SIGNIFICANT
        assert res.sphericity is None
        assert res.info['design_type'] == 'independent'

    def test_skewed_switches_to_levene(self, skewed_scores):
        res = check_assumptions(skewed_scores, 'score', 'group')
        assert res.normality_key is AssumptionKey.SIGNIFICANT
        assert res.variance.unwrap().test == 'Levene'

    def test_constant_group_fails_normality(self):
        data = {
            'y': [1.0, 1.0, 1.0, 2.0, 3.0, 4.0],
            'g': ['a'] * 3 + ['b'] * 3,
        }
        with pytest.warns(EngineWarning, match="normality test failed"):
            res = check_assumptions(data, 'y', 'g')
        assert not res.normality.ok
        assert res.normality_key is None
        # unknown normality falls back to Levene
        assert res.variance.unwrap().test == 'Levene'
        assert any("normality" in w for w in res.warnings)

    def test_summary_text(self, abc_scores):
        text = check_assumptions(abc_scores, 'score', 'group').summary()
        assert "Assumption Testing Results:" in text
        assert "Shapiro-Wilk" in text
        assert "Normal distribution assumed" in text
        assert "Homogeneous variances" in text

    def test_to_dict(self, abc_scores):
        d = check_assumptions(abc_scores, 'score', 'group').to_dict()
        assert d['design_type'] == 'independent'
        assert d['sphericity'] is None
        assert d['variance']['test'] == 'Bartlett'
        assert len(d['normality']['groups']) == 3


# ═══════════════════════════════════════════════════════════════════════
# Repeated measures
# ═══════════════════════════════════════════════════════════════════════


class TestRepeated:

    def test_sphericity_evaluated(self, repeated_spherical):
        res = check_assumptions(repeated_spherical, 'score', 'time', paired_by='subject')
        assert res.sphericity is not None
        assert res.sphericity_key is AssumptionKey.NON_SIGNIFICANT
        assert res.info['design_type'] == 'repeated'

    def test_groups_aligned_by_subject(self, repeated_spherical):
        design = GroupedDesign.build(
            repeated_spherical, 'score', 'time', paired_by='subject', min_levels=3,
        )
        assert design.design_type is DesignType.REPEATED
        assert design.wide.shape == (8, 3)
        assert design.subjects[0] == 's1'
        np.testing.assert_array_equal(design.groups['t2'], design.wide[:, 1])

    def test_shuffled_rows_same_design(self, repeated_spherical):
        shuffled = repeated_spherical.sample(frac=1.0, random_state=0)
        a = GroupedDesign.build(repeated_spherical, 'score', 'time', paired_by='subject')
        b = GroupedDesign.build(shuffled, 'score', 'time', paired_by='subject')
        np.testing.assert_array_equal(a.wide, b.wide)

    def test_duplicate_cell(self, repeated_spherical):
        dup = pd.concat([repeated_spherical, repeated_spherical.iloc[[0]]])
        with pytest.raises(RepeatedMeasuresLayoutError) as info:
            check_assumptions(dup, 'score', 'time', paired_by='subject')
        assert info.value.subject == 's1'
        assert info.value.level == 't1'
        assert info.value.count == 2

    def test_missing_cell(self, repeated_spherical):
        gap = repeated_spherical.drop(index=2)  # s1 at t3
        with pytest.raises(RepeatedMeasuresLayoutError) as info:
            check_assumptions(gap, 'score', 'time', paired_by='subject')
        assert info.value.count == 0

    def test_missing_response_drops_subject(self, repeated_spherical):
        data = repeated_spherical.copy()
        data.loc[4, 'score'] = np.nan  # s2 at t2
        with pytest.warns(EngineWarning, match="1 subject"):
            res = check_assumptions(data, 'score', 'time', paired_by='subject')
        design = GroupedDesign.build(data, 'score', 'time', paired_by='subject')
        assert design.n_dropped_subjects == 1
        assert 's2' not in design.subjects
        assert any('dropped' in w for w in res.warnings)


# ═══════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════


class TestValidation:

    def test_unknown_column(self, abc_scores):
        with pytest.raises(ColumnNotFoundError, match="x"):
            check_assumptions(abc_scores, 'score', 'arm')

    def test_categorical_response(self, abc_scores):
        with pytest.raises(ValidationError, match="numeric"):
            check_assumptions(abc_scores, 'group', 'score')

    def test_single_level(self):
        data = {'y': [1.0, 2.0, 3.0], 'g': ['a'] * 3}
        with pytest.raises(InsufficientLevelsError):
            check_assumptions(data, 'y', 'g')

    def test_small_group(self):
        data = {'y': [1.0, 2.0, 3.0, 4.0, 5.0], 'g': ['a'] * 3 + ['b'] * 2}
        with pytest.raises(InsufficientDataError) as info:
            check_assumptions(data, 'y', 'g')
        assert info.value.group == 'b'

    @pytest.mark.parametrize("kwargs", [
        {'alpha': 0.0},
        {'alpha': 1.2},
        {'normality': 'anderson'},
        {'na_action': 'drop'},
    ])
    def test_bad_options(self, abc_scores, kwargs):
        with pytest.raises(ValidationError):
            check_assumptions(abc_scores, 'score', 'group', **kwargs)
