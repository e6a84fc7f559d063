from __future__ import annotations

from decimal import Decimal
from typing import Optional

import pandas as pd

from finmarket_analysis.queries.aggregates import is_null, rank, round_cents


def top_crude_oil_days(clean: pd.DataFrame, *, n: int = 10) -> pd.DataFrame:
    """Rows with the highest crude oil price, no grouping."""

    return rank(clean.loc[:, ["date", "crude_oil_price"]], "crude_oil_price", limit=n)


def _drop(open_price: object, close_price: object) -> Optional[Decimal]:
    if is_null(open_price) or is_null(close_price):
        return None
    return round_cents(open_price - close_price)


def large_price_drops(clean: pd.DataFrame, *, threshold: Decimal = Decimal("20")) -> pd.DataFrame:
    """Rows where open - close exceeds `threshold`, largest drop first.

    The comparison is strict: a drop equal to the threshold is not included.
    """

    frame = clean.loc[:, ["date", "stock_index", "open_price", "close_price"]].copy()
    frame["drop_amount"] = pd.Series(
        [_drop(o, c) for o, c in zip(frame["open_price"], frame["close_price"])],
        index=frame.index,
        dtype=object,
    )

    mask = pd.Series(
        [d is not None and d > threshold for d in frame["drop_amount"]],
        index=frame.index,
        dtype=bool,
    )
    return rank(frame[mask], "drop_amount")
