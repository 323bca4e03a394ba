"""
Distribution Statistics
=======================

Summaries of one scalar metric over a batch of generation runs.

Conventions (fixed, so reports stay comparable between releases):
- median is the upper-middle element sorted[n // 2], never an average
- std_dev is the population deviation (divide by N)
- percentile p is sorted[min(floor(p / 100 * (n - 1)), n - 1)]
- histogram has 10 buckets starting at min + i * (max - min) / 10;
  buckets are right-open except the last, which also holds the max.
  When max == min every sample lands in bucket 0.
- an empty sample gives all-zero fields and an empty histogram
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from dungeon_forge.core.definitions import HISTOGRAM_BUCKETS


@dataclass
class Percentiles:
    p5: float = 0.0
    p25: float = 0.0
    p75: float = 0.0
    p95: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {'p5': self.p5, 'p25': self.p25, 'p75': self.p75, 'p95': self.p95}


@dataclass
class HistogramBucket:
    bucket: float  # Lower bound
    count: int

    def to_dict(self) -> Dict[str, float]:
        return {'bucket': self.bucket, 'count': self.count}


@dataclass
class DistributionStats:
    min: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    median: float = 0.0
    std_dev: float = 0.0
    percentiles: Percentiles = field(default_factory=Percentiles)
    histogram: List[HistogramBucket] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'min': self.min,
            'max': self.max,
            'mean': self.mean,
            'median': self.median,
            'stdDev': self.std_dev,
            'percentiles': self.percentiles.to_dict(),
            'histogram': [b.to_dict() for b in self.histogram],
        }


def nearest_rank_percentile(sorted_values: np.ndarray, p: float) -> float:
    """Percentile by floor indexing into an already sorted array."""
    n = len(sorted_values)
    idx = int(np.floor(p / 100.0 * (n - 1)))
    return float(sorted_values[min(max(idx, 0), n - 1)])


def build_histogram(values: np.ndarray, lo: float, hi: float, buckets: int = HISTOGRAM_BUCKETS) -> List[HistogramBucket]:
    bucket_size = (hi - lo) / buckets
    if bucket_size > 0:
        indices = np.floor((values - lo) / bucket_size).astype(np.int64)
        indices = np.clip(indices, 0, buckets - 1)
    else:
        indices = np.zeros(len(values), dtype=np.int64)
    counts = np.bincount(indices, minlength=buckets)

    return [
        HistogramBucket(bucket=float(lo + i * bucket_size), count=int(counts[i]))
        for i in range(buckets)
    ]


def compute_distribution_stats(samples: Sequence[float]) -> DistributionStats:
    """
    Summarize a metric sample.

    Args:
        samples: Per-run values in any order

    Returns:
        DistributionStats (all zeros for an empty sample)

    Example:
        >>> stats = compute_distribution_stats([1, 2, 3, 4, 5])
        >>> stats.mean, stats.median
        (3.0, 3.0)
    """
    if len(samples) == 0:
        return DistributionStats()

    values = np.asarray(samples, dtype=np.float64)
    ordered = np.sort(values)
    n = len(ordered)
    lo = float(ordered[0])
    hi = float(ordered[-1])

    return DistributionStats(
        min=lo,
        max=hi,
        mean=float(np.mean(values)),
        median=float(ordered[n // 2]),
        std_dev=float(np.std(values)),
        percentiles=Percentiles(
            p5=nearest_rank_percentile(ordered, 5),
            p25=nearest_rank_percentile(ordered, 25),
            p75=nearest_rank_percentile(ordered, 75),
            p95=nearest_rank_percentile(ordered, 95),
        ),
        histogram=build_histogram(values, lo, hi),
    )
