from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Optional

import pandas as pd

from finmarket_analysis.config import Settings
from finmarket_analysis.queries.catalog import get_query, run_query_set
from finmarket_analysis.report.export import QueryExportResult, write_query_results
from finmarket_analysis.storage.parquet_store import load_clean_dataset


@dataclass(frozen=True)
class QueryRunResult:
    status: str  # ok/warn/missing
    message: str
    clean_path: Path
    results: Dict[str, pd.DataFrame]
    export: Optional[QueryExportResult] = None
    run_at: Optional[datetime] = None


def run_queries(
    *,
    settings: Settings,
    names: Optional[Iterable[str]] = None,
    run_at: Optional[datetime] = None,
) -> QueryRunResult:
    """Run the query set against the stored cleaned dataset and export results.

    Raises UnknownQueryError before anything is loaded when a name is not in
    the catalog.
    """

    run_ts = run_at if run_at else datetime.now(timezone.utc)
    clean_path = settings.paths.clean_dataset

    selected = list(names) if names is not None else None
    if selected is not None:
        for name in selected:
            get_query(name)

    clean = load_clean_dataset(clean_path)
    if clean is None:
        return QueryRunResult(
            status="missing",
            message="cleaned dataset not found, run `clean` first",
            clean_path=clean_path,
            results={},
            run_at=run_ts,
        )

    results = run_query_set(clean, settings.analysis, names=selected)
    export = write_query_results(
        results=results,
        reports_dir=settings.paths.reports_dir,
        generated_at=run_ts,
        source_path=clean_path,
    )

    status = "ok" if not clean.empty else "warn"
    message = "ok" if status == "ok" else "cleaned dataset is empty"

    return QueryRunResult(
        status=status,
        message=message,
        clean_path=clean_path,
        results=results,
        export=export,
        run_at=run_ts,
    )
