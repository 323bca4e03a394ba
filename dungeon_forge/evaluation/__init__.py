"""
Dungeon Forge Evaluation Module
===============================

- statistics: Distribution summaries for batch simulation metrics
- constraints: Layout checks against generator-declared constraints
"""

from .statistics import (
    DistributionStats,
    Percentiles,
    HistogramBucket,
    compute_distribution_stats,
    nearest_rank_percentile,
    build_histogram,
)
from .constraints import (
    ConstraintResult,
    CONNECTED_CONSTRAINT_ID,
    check_connected,
    evaluate_constraint,
    evaluate_constraints,
)

__all__ = [
    # Statistics
    'DistributionStats',
    'Percentiles',
    'HistogramBucket',
    'compute_distribution_stats',
    'nearest_rank_percentile',
    'build_histogram',
    # Constraints
    'ConstraintResult',
    'CONNECTED_CONSTRAINT_ID',
    'check_connected',
    'evaluate_constraint',
    'evaluate_constraints',
]
