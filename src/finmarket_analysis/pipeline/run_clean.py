from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from finmarket_analysis.config import Settings
from finmarket_analysis.errors import SchemaMismatchError, TypeCoercionError
from finmarket_analysis.pipeline.clean import RowFailure, clean_dataset
from finmarket_analysis.storage.parquet_store import StoreResult, load_raw_dataset, store_clean_dataset


@dataclass(frozen=True)
class CleanRunResult:
    status: str  # ok/warn/error/missing
    message: str
    raw_path: Path
    stored_path: Optional[Path]
    rows_in: int
    rows_out: int
    failures: list[RowFailure] = field(default_factory=list)
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    run_at: Optional[datetime] = None

    @property
    def rows_dropped(self) -> int:
        return self.rows_in - self.rows_out


def run_clean(*, settings: Settings, run_at: Optional[datetime] = None) -> CleanRunResult:
    """Load raw CSV + clean + store the cleaned Parquet artifact.

    Storage layout:
      paths.raw_dataset   (input, never modified)
      paths.clean_dataset (output, replaced on every run)

    Nothing is written when cleaning fails.
    """

    run_ts = run_at if run_at else datetime.now(timezone.utc)
    raw_path = settings.paths.raw_dataset

    if not raw_path.exists():
        return CleanRunResult(
            status="missing",
            message="raw dataset not found",
            raw_path=raw_path,
            stored_path=None,
            rows_in=0,
            rows_out=0,
            run_at=run_ts,
        )

    raw = load_raw_dataset(raw_path)

    try:
        cleaned = clean_dataset(raw, on_error=settings.row_failure_policy)
    except (SchemaMismatchError, TypeCoercionError) as exc:
        return CleanRunResult(
            status="error",
            message=f"clean failed: {exc}",
            raw_path=raw_path,
            stored_path=None,
            rows_in=len(raw),
            rows_out=0,
            error_type=type(exc).__name__,
            error_message=str(exc),
            run_at=run_ts,
        )

    out_path = settings.paths.clean_dataset
    try:
        store_result: StoreResult = store_clean_dataset(out_path, cleaned.data)
    except OSError as exc:
        return CleanRunResult(
            status="error",
            message=f"store failed: {exc}",
            raw_path=raw_path,
            stored_path=None,
            rows_in=cleaned.rows_in,
            rows_out=cleaned.rows_out,
            failures=cleaned.failures,
            error_type=type(exc).__name__,
            error_message=str(exc),
            run_at=run_ts,
        )

    status = "ok"
    message = "ok"
    if cleaned.rows_dropped:
        status = "warn"
        message = f"dropped {cleaned.rows_dropped} of {cleaned.rows_in} rows"
    elif cleaned.rows_out == 0:
        status = "warn"
        message = "empty after clean"

    return CleanRunResult(
        status=status,
        message=message,
        raw_path=raw_path,
        stored_path=store_result.path,
        rows_in=cleaned.rows_in,
        rows_out=store_result.rows,
        failures=cleaned.failures,
        run_at=run_ts,
    )
