from __future__ import annotations

from typing import Callable, Dict

import pandas as pd
import pytest

from finmarket_analysis.pipeline.clean import clean_dataset

BASE_ROW: Dict[str, str] = {
    "Date": "2024-01-02",
    "Company": "Acme Corp",
    "Stock Index": "X",
    "Open Price": "100.00",
    "Close Price": "100.00",
    "Daily High": "105.00",
    "Daily Low": "95.00",
    "Trading Volume": "1000",
    "GDP Growth (%)": "2.0",
    "Unemployment Rate (%)": "4.0",
    "Inflation Rate (%)": "3.0",
    "Interest Rate (%)": "5.0",
    "Crude Oil Price (USD per Barrel)": "80.0",
}


@pytest.fixture
def make_raw() -> Callable[..., pd.DataFrame]:
    """Build a raw (all-text) frame; each dict overrides fields of a default row."""

    def _make(*rows: Dict[str, str]) -> pd.DataFrame:
        return pd.DataFrame([{**BASE_ROW, **row} for row in rows])

    return _make


@pytest.fixture
def make_clean(make_raw) -> Callable[..., pd.DataFrame]:
    def _make(*rows: Dict[str, str]) -> pd.DataFrame:
        return clean_dataset(make_raw(*rows)).data

    return _make
