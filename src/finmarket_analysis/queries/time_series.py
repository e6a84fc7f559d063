"""Monthly and day-of-week aggregates over the cleaned dataset.

Every function takes the cleaned frame and returns a new result frame. Plain
time series are ordered by month ascending; the "top"/"most" queries are
ordered by the aggregate, descending, and limited to `n` rows.
"""

from __future__ import annotations

import pandas as pd

from finmarket_analysis.queries.aggregates import aggregate, month_key, rank, weekday_key


def monthly_avg_close(clean: pd.DataFrame) -> pd.DataFrame:
    return aggregate(clean, month_key(clean), {"avg_close_price": ("close_price", "avg")})


def monthly_avg_spread(clean: pd.DataFrame) -> pd.DataFrame:
    return aggregate(clean, month_key(clean), {"avg_spread": ("price_spread", "avg")})


def monthly_max_spread(clean: pd.DataFrame) -> pd.DataFrame:
    return aggregate(clean, month_key(clean), {"max_spread": ("price_spread", "max")})


def monthly_avg_volatility(clean: pd.DataFrame) -> pd.DataFrame:
    """Average of the per-row volatility percentage (spread / open * 100)."""

    return aggregate(clean, month_key(clean), {"avg_volatility_pct": ("volatility_pct", "avg")})


def monthly_gdp_unemployment(clean: pd.DataFrame) -> pd.DataFrame:
    return aggregate(
        clean,
        month_key(clean),
        {
            "avg_gdp_growth": ("gdp_growth_pct", "avg"),
            "avg_unemployment": ("unemployment_rate_pct", "avg"),
        },
    )


def monthly_inflation_interest(clean: pd.DataFrame) -> pd.DataFrame:
    return aggregate(
        clean,
        month_key(clean),
        {
            "avg_inflation": ("inflation_rate_pct", "avg"),
            "avg_interest_rate": ("interest_rate_pct", "avg"),
        },
    )


def monthly_interest_vs_inflation(clean: pd.DataFrame) -> pd.DataFrame:
    # same figures as monthly_inflation_interest, interest rate first
    return aggregate(
        clean,
        month_key(clean),
        {
            "avg_interest": ("interest_rate_pct", "avg"),
            "avg_inflation": ("inflation_rate_pct", "avg"),
        },
    )


def monthly_close_by_index(clean: pd.DataFrame) -> pd.DataFrame:
    """Average close per (month, stock index), ordered by month then index."""

    return aggregate(
        clean,
        [month_key(clean), clean["stock_index"]],
        {"avg_close_price": ("close_price", "avg")},
    )


def top_volume_months(clean: pd.DataFrame, *, n: int = 5) -> pd.DataFrame:
    monthly = aggregate(clean, month_key(clean), {"total_volume": ("trading_volume", "sum")})
    return rank(monthly, "total_volume", limit=n)


def most_volatile_months(clean: pd.DataFrame, *, n: int = 5) -> pd.DataFrame:
    """Months with the widest average daily range (high - low)."""

    monthly = aggregate(clean, month_key(clean), {"avg_volatility": ("price_spread", "avg")})
    return rank(monthly, "avg_volatility", limit=n)


def weekday_avg_close(clean: pd.DataFrame) -> pd.DataFrame:
    by_day = aggregate(clean, weekday_key(clean), {"avg_close_price": ("close_price", "avg")})
    return rank(by_day, "avg_close_price")
