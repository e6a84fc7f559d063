from __future__ import annotations

import json
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pandas as pd

from finmarket_analysis.report.export import result_records, write_query_results


def test_result_records_are_json_ready() -> None:
    df = pd.DataFrame(
        {
            "month": pd.to_datetime(["2024-01-01", "2024-02-01"]),
            "avg": pd.Series([Decimal("1.50"), None], dtype=object),
            "count": [3, 4],
            "corr": [0.5, float("nan")],
        }
    )

    records = result_records(df)

    assert records == [
        {"month": "2024-01-01", "avg": "1.50", "count": 3, "corr": 0.5},
        {"month": "2024-02-01", "avg": None, "count": 4, "corr": None},
    ]
    json.dumps(records)


def test_write_query_results_layout(tmp_path: Path) -> None:
    results = {
        "b_query": pd.DataFrame({"stock_index": ["X"], "avg_close_price": [Decimal("10.00")]}),
        "a_query": pd.DataFrame({"gdp_close_corr": [None]}, dtype=object),
    }
    generated_at = datetime(2024, 3, 9, tzinfo=timezone.utc)

    export = write_query_results(results=results, reports_dir=tmp_path, generated_at=generated_at)

    assert export.json_path == tmp_path / "queries-20240309.json"
    assert export.csv_paths["b_query"] == tmp_path / "queries-20240309" / "b_query.csv"
    assert export.csv_paths["b_query"].read_text(encoding="utf-8").splitlines() == [
        "stock_index,avg_close_price",
        "X,10.00",
    ]

    payload = json.loads(export.json_path.read_text(encoding="utf-8"))
    assert payload["meta"]["query_count"] == 2
    assert payload["meta"]["generated_at_utc"] == "2024-03-09T00:00:00+00:00"
    assert payload["queries"]["a_query"]["rows"] == [{"gdp_close_corr": None}]
    assert list(payload["queries"].keys()) == ["a_query", "b_query"]
