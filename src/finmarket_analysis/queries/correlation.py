from __future__ import annotations

from typing import Optional

import pandas as pd

from finmarket_analysis.queries.aggregates import is_null

# output column -> macro indicator correlated against close price
MACRO_CORRELATIONS = {
    "gdp_close_corr": "gdp_growth_pct",
    "unemp_close_corr": "unemployment_rate_pct",
    "infl_close_corr": "inflation_rate_pct",
}


def _as_float(series: pd.Series) -> pd.Series:
    return series.map(lambda v: float("nan") if is_null(v) else float(v)).astype("float64")


def pearson(x: pd.Series, y: pd.Series) -> Optional[float]:
    """Pearson coefficient over pairwise-complete rows.

    None when undefined (fewer than two pairs or a constant series). The
    value is clamped to [-1, 1] against floating point overshoot.
    """

    value = _as_float(x).corr(_as_float(y), method="pearson")
    if pd.isna(value):
        return None
    return max(-1.0, min(1.0, float(value)))


def macro_close_correlation(clean: pd.DataFrame) -> pd.DataFrame:
    close = clean["close_price"]
    row = {name: pearson(clean[column], close) for name, column in MACRO_CORRELATIONS.items()}
    return pd.DataFrame([row], columns=list(MACRO_CORRELATIONS.keys()))
