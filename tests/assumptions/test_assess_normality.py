"""
Tests for assess_normality(): formal test plus skewness/kurtosis shape rule.
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy import stats as sp_stats

from pyomnibus import assess_normality
from pyomnibus.assumptions import NormalityAssessmentSolution
from pyomnibus.core.exceptions import (
    ColumnNotFoundError,
    EngineWarning,
    InsufficientDataError,
    ValidationError,
)


def normal_quantiles(n):
    return sp_stats.norm.ppf((np.arange(1, n + 1) - 0.5) / n)


def exponential_quantiles(n):
    return -np.log(1.0 - (np.arange(1, n + 1) - 0.5) / n)


@pytest.fixture
def bell():
    """30 evenly spaced normal quantiles: symmetric, light-tailed enough."""
    return {'score': normal_quantiles(30)}


@pytest.fixture
def right_skewed():
    """40 exponential quantiles: skewness near 2."""
    return {'score': exponential_quantiles(40)}


class TestSmallSamples:

    def test_normal_data(self, bell):
        res = assess_normality(bell, 'score')
        assert isinstance(res, NormalityAssessmentSolution)
        assert res.normal
        assert res.n == 30
        assert res.params.ks is None
        assert res.params.deciding_test is res.params.shapiro
        assert res.params.shape_rule == "|z| <= 1.96"
        assert res.skewness == pytest.approx(0.0, abs=1e-10)
        assert res.outliers == ()

    def test_skewed_data(self, right_skewed):
        res = assess_normality(right_skewed, 'score')
        assert not res.normal
        assert not res.params.shape_normal
        assert res.params.shapiro.unwrap().p_value < 0.05
        assert res.skewness > 1.0

    def test_standard_errors(self, right_skewed):
        res = assess_normality(right_skewed, 'score')
        x = right_skewed['score']
        n = len(x)
        skew_se = math.sqrt(6 * n * (n - 1) / ((n - 2) * (n + 1) * (n + 3)))
        kurt_se = math.sqrt(
            24 * n * (n - 1) ** 2 / ((n - 3) * (n - 2) * (n + 3) * (n + 5))
        )
        assert_allclose(res.params.skewness_z, sp_stats.skew(x) / skew_se, rtol=1e-10)
        assert_allclose(
            res.params.kurtosis_z, sp_stats.kurtosis(x) / kurt_se, rtol=1e-10,
        )

    def test_summary_stats(self, bell):
        res = assess_normality(bell, 'score')
        x = bell['score']
        assert res.params.mean == pytest.approx(np.mean(x))
        assert res.params.sd == pytest.approx(np.std(x, ddof=1))
        assert res.params.median == pytest.approx(np.median(x))


class TestLargeSamples:

    def test_ks_decides_above_fifty(self):
        res = assess_normality({'score': normal_quantiles(60)}, 'score')
        assert res.params.ks is not None
        assert res.params.deciding_test is res.params.ks
        assert res.params.ks.unwrap().test == 'Lilliefors'
        assert res.params.shape_rule == "|z| <= 3.29"
        assert res.normal

    def test_fifty_uses_wider_threshold(self):
        res = assess_normality({'score': normal_quantiles(50)}, 'score')
        assert res.params.ks is None
        assert res.params.shape_rule == "|z| <= 3.29"

    def test_absolute_rule_from_three_hundred(self):
        res = assess_normality({'score': normal_quantiles(400)}, 'score')
        assert res.params.shape_rule == '|skewness| <= 2 and |kurtosis| <= 4'
        assert res.params.shape_normal
        assert res.normal

    def test_large_skewed(self):
        res = assess_normality({'score': exponential_quantiles(400)}, 'score')
        assert not res.normal
        assert res.params.ks.unwrap().p_value < 0.05


class TestOutliers:

    def test_extreme_value_reported(self):
        x = normal_quantiles(19).tolist()
        x.insert(5, 10.0)
        res = assess_normality({'score': x}, 'score')
        assert 5 in res.outliers
        assert res.params.extreme_outliers[0] == 5
        assert len(res.params.extreme_outliers) <= 4

    def test_positions_skip_missing_rows(self):
        x = normal_quantiles(19).tolist()
        x.insert(5, 10.0)
        x = [np.nan, np.nan] + x
        res = assess_normality({'score': x}, 'score')
        assert res.n == 20
        assert res.info['n_missing'] == 2
        assert res.info['n_rows'] == 22
        assert res.params.extreme_outliers[0] == 7
        assert "Q-Q outliers (row positions):" in res.summary()


class TestEdgeCases:

    def test_too_few_values(self):
        with pytest.raises(InsufficientDataError) as exc:
            assess_normality({'score': [1.0, 2.0, np.nan, 3.0, 4.0]}, 'score')
        assert exc.value.n_observed == 4
        assert exc.value.n_required == 5
        assert exc.value.group == 'score'

    def test_constant_values(self):
        with pytest.warns(EngineWarning, match="constant values"):
            res = assess_normality({'score': [3.0] * 10}, 'score')
        assert not res.normal
        assert not res.params.shapiro.ok
        assert any("Shapiro-Wilk test failed" in w for w in res.warnings)
        assert "not available" in res.summary()

    def test_non_numeric_column(self):
        with pytest.raises(ValidationError, match="numeric"):
            assess_normality({'score': list('abcdef')}, 'score')

    def test_unknown_column(self, bell):
        with pytest.raises(ColumnNotFoundError):
            assess_normality(bell, 'weight')

    def test_bad_alpha(self, bell):
        with pytest.raises(ValidationError):
            assess_normality(bell, 'score', alpha=0)


class TestSolution:

    def test_to_dict(self, bell):
        record = assess_normality(bell, 'score').to_dict()
        assert record['variable'] == 'score'
        assert record['normal'] is True
        assert record['ks'] is None
        assert record['shapiro']['test'] == 'Shapiro-Wilk'
        assert record['outliers'] == []
        assert assess_normality(bell, 'score').to_dict() == record

    def test_summary(self, right_skewed):
        text = assess_normality(right_skewed, 'score').summary()
        assert "Normality Test for 'score'" in text
        assert "n = 40" in text
        assert "Shapiro-Wilk: W = " in text
        assert "Kolmogorov-Smirnov" not in text
        assert "Data appears not normally distributed." in text

    def test_timing_and_repr(self, bell):
        res = assess_normality(bell, 'score')
        assert 'assessment' in res.timing
        assert repr(res) == (
            "NormalityAssessmentSolution(variable='score', n=30, normal=True)"
        )
