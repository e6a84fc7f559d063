"""Pipeline orchestration (load raw → clean → store, load clean → query → export)."""

from finmarket_analysis.pipeline.clean import CleanResult, RowFailure, clean_dataset
from finmarket_analysis.pipeline.run_clean import CleanRunResult, run_clean
from finmarket_analysis.pipeline.run_queries import QueryRunResult, run_queries

__all__ = [
    "CleanResult",
    "CleanRunResult",
    "QueryRunResult",
    "RowFailure",
    "clean_dataset",
    "run_clean",
    "run_queries",
]
