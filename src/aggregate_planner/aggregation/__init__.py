"""
aggregate-planner - aggregation plane.

File: src/aggregate_planner/aggregation/__init__.py

Purpose
- Drive the three aggregation phases in order and hand each batch to an aggregator.
"""

from aggregate_planner.aggregation.aggregator import (
    Aggregator,
    AggregatorError,
    RecordingAggregator,
    SpecFileAggregator,
)
from aggregate_planner.aggregation.runner import (
    AGGREGATES_CONTEXT_KEY,
    AggregationResult,
    run_aggregation,
    should_skip,
)

__all__ = [
    "AGGREGATES_CONTEXT_KEY",
    "Aggregator",
    "AggregatorError",
    "AggregationResult",
    "RecordingAggregator",
    "SpecFileAggregator",
    "run_aggregation",
    "should_skip",
]
