"""
Tests for distribution statistics.
"""

import math

import numpy as np
import pytest

from dungeon_forge.evaluation.statistics import (
    DistributionStats,
    build_histogram,
    compute_distribution_stats,
    nearest_rank_percentile,
)


class TestDistributionStats:
    """Summary fields."""

    def test_one_to_five(self):
        stats = compute_distribution_stats([1, 2, 3, 4, 5])

        assert stats.min == 1.0
        assert stats.max == 5.0
        assert stats.mean == pytest.approx(3.0)
        assert stats.median == 3.0
        assert stats.std_dev == pytest.approx(math.sqrt(2))

    def test_one_to_five_histogram(self):
        stats = compute_distribution_stats([5, 3, 1, 4, 2])

        assert len(stats.histogram) == 10
        assert sum(b.count for b in stats.histogram) == 5
        occupied = [i for i, b in enumerate(stats.histogram) if b.count]
        assert occupied == [0, 2, 5, 7, 9]
        assert [b.bucket for b in stats.histogram[:3]] == pytest.approx([1.0, 1.4, 1.8])

    def test_percentiles(self):
        stats = compute_distribution_stats([1, 2, 3, 4, 5])
        p = stats.percentiles
        assert (p.p5, p.p25, p.p75, p.p95) == (1.0, 2.0, 4.0, 4.0)

    def test_median_is_upper_middle(self):
        assert compute_distribution_stats([4, 1, 3, 2]).median == 3.0

    def test_population_std(self):
        values = [2, 4, 4, 4, 5, 5, 7, 9]
        assert compute_distribution_stats(values).std_dev == pytest.approx(2.0)

    def test_empty_sample(self):
        stats = compute_distribution_stats([])
        assert stats == DistributionStats()
        assert stats.histogram == []
        assert stats.mean == 0.0
        assert stats.percentiles.p95 == 0.0

    def test_constant_sample(self):
        stats = compute_distribution_stats([4, 4, 4])
        assert stats.std_dev == 0.0
        assert stats.histogram[0].count == 3
        assert all(b.count == 0 for b in stats.histogram[1:])
        assert all(b.bucket == 4.0 for b in stats.histogram)

    def test_single_value(self):
        stats = compute_distribution_stats([7.5])
        assert (stats.min, stats.max, stats.mean, stats.median) == (7.5, 7.5, 7.5, 7.5)
        assert stats.percentiles.p5 == 7.5

    def test_order_independent(self):
        values = list(np.random.default_rng(0).uniform(0, 100, 200))
        shuffled = compute_distribution_stats(values)
        ordered = compute_distribution_stats(sorted(values))

        assert shuffled.median == ordered.median
        assert shuffled.percentiles == ordered.percentiles
        assert shuffled.histogram == ordered.histogram
        assert shuffled.mean == pytest.approx(ordered.mean)
        assert shuffled.std_dev == pytest.approx(ordered.std_dev)

    def test_to_dict_keys(self):
        data = compute_distribution_stats([1, 2]).to_dict()
        assert set(data) == {'min', 'max', 'mean', 'median', 'stdDev', 'percentiles', 'histogram'}
        assert set(data['percentiles']) == {'p5', 'p25', 'p75', 'p95'}
        assert set(data['histogram'][0]) == {'bucket', 'count'}


class TestHelpers:
    """Percentile and histogram building blocks."""

    def test_nearest_rank_percentile(self):
        ordered = np.arange(1, 101, dtype=np.float64)
        assert nearest_rank_percentile(ordered, 5) == 5.0
        assert nearest_rank_percentile(ordered, 95) == 95.0
        assert nearest_rank_percentile(ordered, 100) == 100.0

    def test_max_lands_in_last_bucket(self):
        histogram = build_histogram(np.array([0.0, 10.0]), 0.0, 10.0)
        assert histogram[0].count == 1
        assert histogram[-1].count == 1

    def test_custom_bucket_count(self):
        histogram = build_histogram(np.array([0.0, 1.0, 2.0, 3.0]), 0.0, 3.0, buckets=3)
        assert [b.count for b in histogram] == [1, 1, 2]
