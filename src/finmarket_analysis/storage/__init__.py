"""Storage backends (raw CSV input, cleaned Parquet artifact)."""

from finmarket_analysis.storage.parquet_store import (
    StoreResult,
    load_clean_dataset,
    load_raw_dataset,
    store_clean_dataset,
)

__all__ = [
    "StoreResult",
    "load_clean_dataset",
    "load_raw_dataset",
    "store_clean_dataset",
]
