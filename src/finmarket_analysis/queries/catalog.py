from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

import pandas as pd

from finmarket_analysis.config import AnalysisConfig
from finmarket_analysis.errors import UnknownQueryError
from finmarket_analysis.queries import correlation, cross_section, rankings, time_series

QueryFn = Callable[[pd.DataFrame, AnalysisConfig], pd.DataFrame]


@dataclass(frozen=True)
class QuerySpec:
    name: str
    description: str
    run: QueryFn


def _plain(fn: Callable[[pd.DataFrame], pd.DataFrame]) -> QueryFn:
    return lambda clean, _analysis: fn(clean)


QUERY_SET: tuple[QuerySpec, ...] = (
    QuerySpec(
        "monthly_avg_close",
        "Average close price by month",
        _plain(time_series.monthly_avg_close),
    ),
    QuerySpec(
        "monthly_avg_spread",
        "Average daily price spread by month",
        _plain(time_series.monthly_avg_spread),
    ),
    QuerySpec(
        "top_crude_oil_days",
        "Days with the highest crude oil price",
        lambda clean, a: rankings.top_crude_oil_days(clean, n=a.top_crude_oil_n),
    ),
    QuerySpec(
        "top_volume_months",
        "Months with the highest total trading volume",
        lambda clean, a: time_series.top_volume_months(clean, n=a.top_volume_months_n),
    ),
    QuerySpec(
        "monthly_gdp_unemployment",
        "Average GDP growth and unemployment rate by month",
        _plain(time_series.monthly_gdp_unemployment),
    ),
    QuerySpec(
        "monthly_inflation_interest",
        "Average inflation and interest rate by month",
        _plain(time_series.monthly_inflation_interest),
    ),
    QuerySpec(
        "weekday_avg_close",
        "Average close price by day of week",
        _plain(time_series.weekday_avg_close),
    ),
    QuerySpec(
        "monthly_max_spread",
        "Largest daily price spread by month",
        _plain(time_series.monthly_max_spread),
    ),
    QuerySpec(
        "monthly_interest_vs_inflation",
        "Average interest rate against inflation by month",
        _plain(time_series.monthly_interest_vs_inflation),
    ),
    QuerySpec(
        "top_companies_by_close",
        "Companies with the highest average close price",
        lambda clean, a: cross_section.top_companies_by_close(clean, n=a.top_companies_n),
    ),
    QuerySpec(
        "index_avg_volume",
        "Average trading volume by stock index",
        _plain(cross_section.index_avg_volume),
    ),
    QuerySpec(
        "monthly_close_by_index",
        "Average close price by month and stock index",
        _plain(time_series.monthly_close_by_index),
    ),
    QuerySpec(
        "index_avg_spread",
        "Stock indexes ranked by average daily range",
        _plain(cross_section.index_avg_spread),
    ),
    QuerySpec(
        "macro_close_correlation",
        "Correlation of GDP growth, unemployment and inflation with close price",
        _plain(correlation.macro_close_correlation),
    ),
    QuerySpec(
        "most_volatile_months",
        "Months with the widest average daily range",
        lambda clean, a: time_series.most_volatile_months(clean, n=a.top_volatile_months_n),
    ),
    QuerySpec(
        "index_avg_close",
        "Average close price by stock index",
        _plain(cross_section.index_avg_close),
    ),
    QuerySpec(
        "monthly_avg_volatility",
        "Average volatility percentage by month",
        _plain(time_series.monthly_avg_volatility),
    ),
    QuerySpec(
        "large_price_drops",
        "Days where the close fell far below the open",
        lambda clean, a: rankings.large_price_drops(clean, threshold=a.large_drop_threshold),
    ),
)

QUERIES_BY_NAME: Dict[str, QuerySpec] = {q.name: q for q in QUERY_SET}


def get_query(name: str) -> QuerySpec:
    try:
        return QUERIES_BY_NAME[name]
    except KeyError:
        raise UnknownQueryError(name) from None


def run_query(name: str, clean: pd.DataFrame, analysis: Optional[AnalysisConfig] = None) -> pd.DataFrame:
    return get_query(name).run(clean, analysis or AnalysisConfig())


def run_query_set(
    clean: pd.DataFrame,
    analysis: Optional[AnalysisConfig] = None,
    *,
    names: Optional[Iterable[str]] = None,
) -> Dict[str, pd.DataFrame]:
    """Run the named queries (default: all) in catalog order.

    Names are validated before any query runs.
    """

    analysis = analysis or AnalysisConfig()
    if names is None:
        specs = list(QUERY_SET)
    else:
        wanted = [get_query(n).name for n in names]
        specs = [q for q in QUERY_SET if q.name in wanted]

    return {q.name: q.run(clean, analysis) for q in specs}
