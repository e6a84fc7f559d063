from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd


@dataclass(frozen=True)
class QueryExportResult:
    json_path: Path
    csv_paths: Dict[str, Path]


def _jsonable(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, pd.Timestamp):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, float) and pd.isna(value):
        return None
    if hasattr(value, "item"):
        # numpy scalars
        return value.item()
    return value


def result_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Rows of a query result as JSON-ready dicts (decimals as strings, ISO dates)."""

    return [
        {column: _jsonable(value) for column, value in zip(df.columns, row)}
        for row in df.itertuples(index=False, name=None)
    ]


def _export_paths(*, reports_dir: Path, generated_at: datetime) -> tuple[Path, Path]:
    yyyymmdd = generated_at.strftime("%Y%m%d")
    return reports_dir / f"queries-{yyyymmdd}.json", reports_dir / f"queries-{yyyymmdd}"


def write_query_results(
    *,
    results: Dict[str, pd.DataFrame],
    reports_dir: Path,
    generated_at: Optional[datetime] = None,
    source_path: Optional[Path] = None,
) -> QueryExportResult:
    """Write every result as CSV plus one combined JSON document.

    Layout:
      reports/queries-YYYYMMDD.json
      reports/queries-YYYYMMDD/{query_name}.csv
    """

    generated_at = generated_at or datetime.now(timezone.utc)
    json_path, csv_dir = _export_paths(reports_dir=reports_dir, generated_at=generated_at)
    csv_dir.mkdir(parents=True, exist_ok=True)

    csv_paths: Dict[str, Path] = {}
    for name, df in results.items():
        path = csv_dir / f"{name}.csv"
        df.to_csv(path, index=False)
        csv_paths[name] = path

    payload = {
        "meta": {
            "generated_at_utc": generated_at.astimezone(timezone.utc).isoformat(),
            "source": str(source_path) if source_path is not None else None,
            "query_count": len(results),
        },
        "queries": {
            name: {"columns": list(df.columns), "rows": result_records(df)} for name, df in results.items()
        },
    }
    json_path.write_text(json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2) + "\n", encoding="utf-8")

    return QueryExportResult(json_path=json_path, csv_paths=csv_paths)
