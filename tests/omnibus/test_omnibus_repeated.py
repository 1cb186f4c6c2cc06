"""
Tests for omnibus() on repeated-measures designs.

Validates:
    - Spherical, normal data: repeated measures ANOVA with paired t post-hoc
    - F statistic against a hand computation, GG/HF corrected p-values
    - Rejected normality: Friedman with signed-rank post-hoc, matches scipy
    - Layout errors and dropped subjects
    - Identical calls give identical records
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy import stats as sp_stats

from pyomnibus import omnibus, post_hoc
from pyomnibus.core.decisions import OmnibusTest
from pyomnibus.core.exceptions import EngineWarning, RepeatedMeasuresLayoutError


class TestRMANOVA:

    def test_selected(self, repeated_spherical):
        res = omnibus(repeated_spherical, 'score', 'time', paired_by='subject')
        assert res.test is OmnibusTest.RM_ANOVA
        assert res.formula == 'score ~ time + Error(subject)'
        assert res.info['design_type'] == 'repeated'
        assert res.info['n_subjects'] == 8

    def test_statistic(self, repeated_spherical):
        # SS_time = 8 * (25 + 0 + 25) = 400 on 2 df; SS_error = 16 on 14 df
        res = omnibus(repeated_spherical, 'score', 'time', paired_by='subject')
        assert res.df == (2, 14)
        assert res.statistic == pytest.approx(200.0 / (16.0 / 14.0))
        assert res.p_value == pytest.approx(sp_stats.f.sf(175.0, 2, 14))

    def test_corrected_p_values(self, repeated_spherical):
        res = omnibus(repeated_spherical, 'score', 'time', paired_by='subject')
        # epsilon is 1 for perfectly spherical data
        assert res.params.fit.gg_p_value == pytest.approx(res.p_value)
        assert res.params.fit.hf_p_value == pytest.approx(res.p_value)
        assert "Sphericity-corrected p" in res.summary()

    def test_paired_t_post_hoc(self, repeated_spherical):
        res = omnibus(repeated_spherical, 'score', 'time', paired_by='subject')
        ph = res.post_hoc
        assert ph.procedure == 'Paired t-test'
        assert ph.adjust_method == 'holm'
        assert [(c.group1, c.group2) for c in ph.comparisons] == [
            ('t1', 't2'), ('t1', 't3'), ('t2', 't3'),
        ]
        wide = repeated_spherical.pivot(index='subject', columns='time', values='score')
        ref = sp_stats.ttest_rel(wide['t2'], wide['t1'])
        first = ph.comparisons[0]
        assert first.estimate == pytest.approx(5.0)
        assert_allclose([first.statistic, first.p_value], [ref.statistic, ref.pvalue])

    def test_sphericity_in_summary(self, repeated_spherical):
        text = omnibus(repeated_spherical, 'score', 'time', paired_by='subject').summary()
        assert "Sphericity (Mauchly Test):" in text
        assert "Sphericity assumed" in text


class TestFriedman:

    def test_selected(self, repeated_outlier):
        res = omnibus(repeated_outlier, 'score', 'time', paired_by='subject')
        assert res.test is OmnibusTest.FRIEDMAN
        assert res.formula == 'score ~ time | subject'

    def test_matches_scipy(self, repeated_outlier):
        res = omnibus(repeated_outlier, 'score', 'time', paired_by='subject')
        wide = repeated_outlier.pivot(index='subject', columns='time', values='score')
        ref = sp_stats.friedmanchisquare(wide['t1'], wide['t2'], wide['t3'])
        # every subject is ordered t1 < t2 < t3
        assert res.statistic == pytest.approx(16.0)
        assert_allclose([res.statistic, res.p_value], [ref.statistic, ref.pvalue])
        assert res.df == (2,)

    def test_signed_rank_post_hoc(self, repeated_outlier):
        res = omnibus(repeated_outlier, 'score', 'time', paired_by='subject')
        ph = res.post_hoc
        assert ph.procedure == 'Wilcoxon signed-rank test'
        assert len(ph.comparisons) == 3
        for c in ph.comparisons:
            assert c.p_adjusted >= c.p_value

    def test_re_adjust(self, repeated_outlier):
        res = omnibus(repeated_outlier, 'score', 'time', paired_by='subject')
        ph = post_hoc(res, method='none')
        for c in ph.comparisons:
            assert c.p_adjusted == c.p_value


class TestLayout:

    def test_duplicate_observation(self, repeated_spherical):
        data = repeated_spherical.copy()
        data.loc[1, 'time'] = 't1'  # s1 now has two t1 rows and no t2
        with pytest.raises(RepeatedMeasuresLayoutError):
            omnibus(data, 'score', 'time', paired_by='subject')

    def test_dropped_subject_warns(self, repeated_spherical):
        data = repeated_spherical.copy()
        data.loc[0, 'score'] = np.nan
        with pytest.warns(EngineWarning, match="dropped"):
            res = omnibus(data, 'score', 'time', paired_by='subject')
        assert res.info['n_subjects'] == 7
        assert any('dropped' in w for w in res.warnings)


class TestDeterminism:

    @pytest.mark.parametrize("fixture", ['repeated_spherical', 'repeated_outlier'])
    def test_identical_records(self, fixture, request):
        data = request.getfixturevalue(fixture)
        first = omnibus(data, 'score', 'time', paired_by='subject').to_dict()
        second = omnibus(data, 'score', 'time', paired_by='subject').to_dict()
        assert first == second
        assert first['design_type'] == 'repeated'
        assert first['assumptions']['sphericity'] is not None

    def test_post_hoc_reruns_from_aligned_groups(self, repeated_spherical):
        res = omnibus(repeated_spherical, 'score', 'time', paired_by='subject')
        again = post_hoc(res)
        assert again.to_dict() == res.post_hoc.to_dict()
