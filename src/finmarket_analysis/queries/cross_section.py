from __future__ import annotations

import pandas as pd

from finmarket_analysis.queries.aggregates import aggregate, rank


def top_companies_by_close(clean: pd.DataFrame, *, n: int = 10) -> pd.DataFrame:
    by_company = aggregate(clean, "company", {"avg_close_price": ("close_price", "avg")})
    return rank(by_company, "avg_close_price", limit=n)


def index_avg_volume(clean: pd.DataFrame) -> pd.DataFrame:
    by_index = aggregate(clean, "stock_index", {"avg_trading_volume": ("trading_volume", "avg")})
    return rank(by_index, "avg_trading_volume")


def index_avg_spread(clean: pd.DataFrame) -> pd.DataFrame:
    """Stock indexes ranked by their average daily range (high - low)."""

    by_index = aggregate(clean, "stock_index", {"avg_volatility": ("price_spread", "avg")})
    return rank(by_index, "avg_volatility")


def index_avg_close(clean: pd.DataFrame) -> pd.DataFrame:
    by_index = aggregate(clean, "stock_index", {"avg_close_price": ("close_price", "avg")})
    return rank(by_index, "avg_close_price")
