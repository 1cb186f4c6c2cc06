"""
pytest configuration and shared fixtures.
"""

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def abc_scores():
    """
    Three groups of 5, each a permutation of 5 consecutive integers.

    Equal variances and Shapiro-Wilk p ~ 0.97 in every group, so the
    one-way ANOVA is selected; B sits 10 above A, C 1 below A.
    """
    return {
        'score': [10, 12, 11, 13, 9, 20, 22, 21, 23, 19, 10, 11, 9, 12, 8],
        'group': ['A'] * 5 + ['B'] * 5 + ['C'] * 5,
    }


@pytest.fixture
def skewed_scores():
    """Three groups of 10 with one large outlier each (normality rejected)."""
    a = [1, 2, 1, 2, 1, 2, 1, 2, 1, 60]
    b = [10, 11, 10, 11, 10, 11, 10, 11, 10, 90]
    c = [20, 21, 20, 21, 20, 21, 20, 21, 20, 99]
    return pd.DataFrame({
        'score': a + b + c,
        'group': ['A'] * 10 + ['B'] * 10 + ['C'] * 10,
    })


# Orthogonal, mean-zero noise columns: the contrast covariance is a multiple
# of the identity, so Mauchly's W is 1.
_NOISE = np.array([
    [1, -1, 1, -1, 1, -1, 1, -1],
    [1, 1, -1, -1, 1, 1, -1, -1],
    [1, 1, 1, 1, -1, -1, -1, -1],
], dtype=float)


def long_format(wide, levels=('t1', 't2', 't3')):
    """Subjects x levels matrix -> long DataFrame (subject, time, score)."""
    wide = np.asarray(wide, dtype=float)
    n = wide.shape[0]
    return pd.DataFrame({
        'subject': np.repeat([f"s{i + 1}" for i in range(n)], len(levels)),
        'time': np.tile(levels, n),
        'score': wide.ravel(),
    })


@pytest.fixture
def repeated_spherical():
    """
    8 subjects x 3 time points: subject effect 10*i, level shifts 0/5/10
    and orthogonal +-1 noise. Every assumption holds.
    """
    subject = 10.0 * np.arange(8)[:, None]
    shift = np.array([0.0, 5.0, 10.0])[None, :]
    return long_format(subject + shift + _NOISE.T)


@pytest.fixture
def repeated_outlier():
    """Same layout, with one extreme value at t3 (normality rejected)."""
    subject = 10.0 * np.arange(8)[:, None]
    shift = np.array([0.0, 5.0, 10.0])[None, :]
    wide = subject + shift + _NOISE.T
    wide[7, 2] = 500.0
    return long_format(wide)


@pytest.fixture
def trial():
    """Two-arm trial table with numeric, categorical and degenerate columns."""
    return pd.DataFrame({
        'arm': ['control'] * 6 + ['treated'] * 6,
        'age': [50.0, 52.0, 51.0, 53.0, 49.0, np.nan,
                60.0, 62.0, 61.0, 63.0, 59.0, 61.0],
        'sex': ['F', 'M', 'F', 'M', 'F', 'M', 'F', 'F', 'M', 'M', 'F', None],
        'site': ['north'] * 12,
        'dose': [np.nan] * 5 + [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0],
    })
