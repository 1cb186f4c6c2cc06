"""
Tests for the effect-size calculators.
"""

import math

import numpy as np
import pytest

from pyomnibus.core.exceptions import ValidationError
from pyomnibus.effects import (
    EffectSize,
    EffectSizeLabel,
    bartlett_cramers_v,
    cohens_d,
    cramers_v,
    levene_eta_squared,
    odds_ratio,
    rank_biserial_r,
)


class TestCohensD:

    def test_known_value(self):
        # pooled SD sqrt(2.5), mean difference 10
        d = cohens_d([10, 12, 11, 13, 9], [20, 22, 21, 23, 19])
        assert d.label is EffectSizeLabel.COHENS_D
        assert d.value == pytest.approx(10.0 / math.sqrt(2.5))

    def test_symmetric_and_absolute(self):
        a, b = [1.0, 2.0, 4.0], [3.0, 5.0, 9.0, 4.0]
        assert cohens_d(a, b).value == pytest.approx(cohens_d(b, a).value)
        assert cohens_d(a, b).value > 0

    def test_identical_groups(self):
        assert cohens_d([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]).value == 0.0

    def test_constant_groups(self):
        assert cohens_d([2.0, 2.0], [2.0, 2.0]).value == 0.0
        assert math.isinf(cohens_d([1.0, 1.0], [2.0, 2.0]).value)

    def test_nan_dropped(self):
        d = cohens_d([10, 12, 11, 13, 9, np.nan], [20, 22, 21, 23, 19])
        assert d.value == pytest.approx(10.0 / math.sqrt(2.5))

    def test_single_observation(self):
        assert cohens_d([1.0], [1.0, 2.0]) is None

    def test_non_numeric(self):
        with pytest.raises(ValidationError):
            cohens_d(['a', 'b'], [1.0, 2.0])


class TestRankBiserial:

    def test_centre_gives_zero(self):
        assert rank_biserial_r(12.5, 5, 5).value == 0.0

    def test_complete_separation(self):
        r = rank_biserial_r(0.0, 5, 5)
        z = 12.5 / math.sqrt(25 * 11 / 12.0)
        assert r.label is EffectSizeLabel.RANK_BISERIAL_R
        assert r.value == pytest.approx(z / math.sqrt(10))

    def test_either_u(self):
        assert rank_biserial_r(3.0, 5, 6).value == pytest.approx(
            rank_biserial_r(27.0, 5, 6).value
        )


class TestCramersV:

    def test_no_association(self):
        assert cramers_v(0.0, [[10, 10], [10, 10]]).value == 0.0

    def test_known_value(self):
        v = cramers_v(4.0, [[20, 30], [30, 20]])
        assert v.value == pytest.approx(0.2)
        assert v.label is EffectSizeLabel.CRAMERS_V

    def test_uses_smaller_dimension(self):
        v = cramers_v(9.0, np.ones((3, 5)) * 10)
        assert v.value == pytest.approx(math.sqrt(9.0 / 150 / 2))

    def test_degenerate(self):
        assert cramers_v(1.0, [[5, 5]]) is None
        assert cramers_v(float('nan'), [[1, 2], [3, 4]]) is None


class TestOtherMeasures:

    def test_odds_ratio(self):
        assert odds_ratio(2.5) == EffectSize(2.5, EffectSizeLabel.ODDS_RATIO)
        assert odds_ratio(float('nan')) is None

    def test_levene_eta_squared(self):
        eta = levene_eta_squared(3.0, 2, 27)
        assert eta.value == pytest.approx(6.0 / 33.0)
        assert levene_eta_squared(0.0, 2, 27).value == 0.0

    def test_bartlett_cramers_v(self):
        v = bartlett_cramers_v(6.0, 30, 3)
        assert v.value == pytest.approx(math.sqrt(6.0 / 60.0))

    def test_str(self):
        assert str(EffectSize(0.456, EffectSizeLabel.COHENS_D)) == "Cohen's d = 0.46"
