"""
Tests for the individual assumption sub-tests.

Validates:
    - Shapiro-Wilk / Lilliefors dispatch by group size
    - Degenerate groups raise NumericalError
    - Median-centred Levene matches scipy.stats.levene(center='median')
    - Bartlett matches scipy.stats.bartlett and rejects zero-variance groups
    - AssumptionKey is strict at p == alpha
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy import stats as sp_stats

from pyomnibus.assumptions import AssumptionKey, NormalityMethod
from pyomnibus.assumptions._normality import normality_impl, normality_test, shapiro_p
from pyomnibus.assumptions._variance import bartlett_impl, levene_impl, variance_impl
from pyomnibus.core.exceptions import NumericalError
from pyomnibus.effects import EffectSizeLabel


def normal_quantiles(n, loc=0.0, scale=1.0):
    """Perfectly normal-looking sample: the n plotting-position quantiles."""
    return loc + scale * sp_stats.norm.ppf((np.arange(1, n + 1) - 0.5) / n)


# ═══════════════════════════════════════════════════════════════════════
# AssumptionKey
# ═══════════════════════════════════════════════════════════════════════


class TestAssumptionKey:

    def test_below_alpha(self):
        assert AssumptionKey.from_p(0.01, 0.05) is AssumptionKey.SIGNIFICANT

    def test_equal_to_alpha_is_not_significant(self):
        assert AssumptionKey.from_p(0.05, 0.05) is AssumptionKey.NON_SIGNIFICANT

    def test_above_alpha(self):
        assert AssumptionKey.from_p(0.2, 0.05) is AssumptionKey.NON_SIGNIFICANT


# ═══════════════════════════════════════════════════════════════════════
# Normality
# ═══════════════════════════════════════════════════════════════════════


class TestNormality:

    def test_shapiro_matches_scipy(self, rng):
        x = rng.normal(size=40)
        res = normality_test(x, 'A')
        w, p = sp_stats.shapiro(x)
        assert res.test == 'Shapiro-Wilk'
        assert res.n == 40
        assert_allclose([res.statistic, res.p_value], [w, p])

    def test_normal_sample_not_rejected(self):
        res = normality_impl({'A': normal_quantiles(30), 'B': normal_quantiles(30, 5)},
                             0.05, NormalityMethod.AUTO)
        assert res.key is AssumptionKey.NON_SIGNIFICANT
        assert [g.group for g in res.groups] == ['A', 'B']

    def test_one_skewed_group_rejects(self, rng):
        groups = {'A': normal_quantiles(30), 'B': rng.exponential(size=200) ** 3}
        res = normality_impl(groups, 0.05, NormalityMethod.AUTO)
        assert res.key is AssumptionKey.SIGNIFICANT

    def test_large_group_uses_lilliefors(self):
        res = normality_test(normal_quantiles(6000), 'A', NormalityMethod.AUTO)
        assert res.test == 'Lilliefors'
        assert 0.0 <= res.p_value <= 1.0

    def test_forced_lilliefors(self, rng):
        res = normality_test(rng.normal(size=50), 'A', NormalityMethod.LILLIEFORS)
        assert res.test == 'Lilliefors'

    def test_too_few_values(self):
        with pytest.raises(NumericalError, match="at least 3"):
            normality_test(np.array([1.0, 2.0]), 'A')

    def test_constant_group(self):
        with pytest.raises(NumericalError, match="identical"):
            normality_test(np.full(5, 3.0), 'A')

    def test_shapiro_p_none_for_constant(self):
        assert shapiro_p(np.full(5, 3.0)) is None


# ═══════════════════════════════════════════════════════════════════════
# Variance homogeneity
# ═══════════════════════════════════════════════════════════════════════


class TestLevene:

    def test_matches_scipy_median(self, rng):
        groups = {
            'A': rng.normal(0, 1, 15),
            'B': rng.normal(0, 3, 12),
            'C': rng.normal(0, 1, 20),
        }
        f_val, p_val, df1, df2 = levene_impl(groups)
        ref = sp_stats.levene(*groups.values(), center='median')
        assert_allclose([f_val, p_val], [ref.statistic, ref.pvalue], rtol=1e-10)
        assert (df1, df2) == (2, 44)

    def test_no_spread_gives_p_one(self):
        f_val, p_val, _, _ = levene_impl({'A': np.full(4, 1.0), 'B': np.full(4, 2.0)})
        assert f_val == 0.0
        assert p_val == 1.0

    def test_effect_size_eta_squared(self, rng):
        groups = {'A': rng.normal(0, 1, 10), 'B': rng.normal(0, 5, 10)}
        res = variance_impl(groups, 0.05, use_levene=True)
        assert res.test == 'Levene'
        assert res.effect_size.label is EffectSizeLabel.ETA_SQUARED
        f, (df1, df2) = res.statistic, res.df
        assert res.effect_size.value == pytest.approx(f * df1 / (f * df1 + df2))


class TestBartlett:

    def test_matches_scipy(self, rng):
        groups = {'A': rng.normal(0, 1, 15), 'B': rng.normal(0, 2, 15)}
        stat, p, df = bartlett_impl(groups)
        ref = sp_stats.bartlett(*groups.values())
        assert_allclose([stat, p], [ref.statistic, ref.pvalue])
        assert df == 1

    def test_zero_variance_group(self):
        with pytest.raises(NumericalError, match="zero variance"):
            bartlett_impl({'A': np.array([1.0, 2.0, 3.0]), 'B': np.full(3, 2.0)})

    def test_unequal_variances_flagged(self):
        groups = {'A': normal_quantiles(40), 'B': normal_quantiles(40, scale=6.0)}
        res = variance_impl(groups, 0.05, use_levene=False)
        assert res.test == 'Bartlett'
        assert res.key is AssumptionKey.SIGNIFICANT
        assert res.effect_size.label is EffectSizeLabel.CRAMERS_V
