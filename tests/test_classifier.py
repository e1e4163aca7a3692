import numpy as np
import pandas as pd
import pytest

from community_crime.classifier import classify, flag_outliers
from community_crime.utils.exceptions import ClassifyError


@pytest.fixture
def totals():
    return pd.DataFrame({
        'Community': ['A', 'B', 'C', 'D', 'E', 'F', 'G', 'H'],
        'TotalByCommunity': [20, 150, 600, 3, 0, 100, 50, 50],
        'AvgPop': [100.0, 1000.0, 100.0, np.nan, 0.0, 600.0, 1000.0, 1000.0],
        'Per100': [20.0, 15.0, 600.0, np.nan, np.nan, 100 / 6, 5.0, 5.0],
    })


class TestFlagOutliers:
    def test_rule(self):
        totals = pd.DataFrame({'Per100': [np.nan, np.inf, -np.inf, 500.0, 500.01, 0.0, 12.5]})
        result = flag_outliers(totals, 500)
        assert list(result) == [True, True, True, False, True, False, False]

    def test_threshold_is_configurable(self):
        totals = pd.DataFrame({'Per100': [50.0, 150.0]})
        assert list(flag_outliers(totals, 100)) == [False, True]


class TestClassify:
    def test_outliers_keep_input_order(self, totals):
        result = classify(totals)
        assert list(result.outliers['Community']) == ['C', 'D', 'E']

    def test_outlier_iff_rule(self, totals):
        result = classify(totals)
        per100 = result.totals['Per100']
        expected = ~np.isfinite(per100) | (per100 > 500)
        assert list(result.totals['IsOutlier']) == list(expected)

    def test_clean_set_membership_and_order(self, totals):
        result = classify(totals)
        # A has AvgPop 100: not an outlier, but below the population floor
        assert list(result.clean['Community']) == ['F', 'B', 'G', 'H']
        assert (result.clean['AvgPop'] > 500).all()
        assert not result.clean['IsOutlier'].any()
        assert result.clean['Per100'].is_monotonic_decreasing

    def test_below_floor_is_neither_clean_nor_outlier(self, totals):
        result = classify(totals)
        assert 'A' not in set(result.clean['Community'])
        assert 'A' not in set(result.outliers['Community'])

    def test_floor_is_strict(self):
        totals = pd.DataFrame({'Community': ['A'], 'TotalByCommunity': [5],
                               'AvgPop': [500.0], 'Per100': [1.0]})
        assert classify(totals).clean.empty

    def test_configurable_parameters(self, totals):
        result = classify(totals, outlier_threshold=18.0, min_population=50.0)
        assert list(result.outliers['Community']) == ['A', 'C', 'D', 'E']
        assert list(result.clean['Community']) == ['F', 'B', 'G', 'H']

    def test_input_not_mutated(self, totals):
        classify(totals)
        assert 'IsOutlier' not in totals.columns

    def test_missing_columns(self):
        with pytest.raises(ClassifyError, match='Per100'):
            classify(pd.DataFrame({'Community': ['A'], 'TotalByCommunity': [1], 'AvgPop': [1.0]}))
