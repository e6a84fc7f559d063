from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import pandas as pd

CENT = Decimal("0.01")


def is_null(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def round_cents(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    value = Decimal(value)
    with localcontext() as ctx:
        # room for every integer digit plus the two cents
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _present(values: Iterable[object]) -> List[Any]:
    return [v for v in values if not is_null(v)]


def _exact_precision(numbers: List[Decimal]) -> int:
    """Digits needed to add `numbers` without rounding, down to at least cents."""

    top = max(n.adjusted() for n in numbers) + len(str(len(numbers)))
    bottom = min(min(n.as_tuple().exponent for n in numbers), -2)
    return top - bottom + 1


def avg(values: pd.Series) -> Optional[Decimal]:
    present = _present(values)
    if not present:
        return None
    numbers = [Decimal(v) for v in present]
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, _exact_precision(numbers) + 2)
        return round_cents(sum(numbers, Decimal(0)) / len(numbers))


def total(values: pd.Series) -> Optional[Decimal]:
    present = _present(values)
    if not present:
        return None
    numbers = [Decimal(v) for v in present]
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, _exact_precision(numbers))
        return round_cents(sum(numbers, Decimal(0)))


def maximum(values: pd.Series) -> Optional[Decimal]:
    present = _present(values)
    if not present:
        return None
    return max(present)


AGGREGATORS: Dict[str, Callable[[pd.Series], Optional[Decimal]]] = {
    "avg": avg,
    "sum": total,
    "max": maximum,
}


def month_key(df: pd.DataFrame) -> pd.Series:
    """First day of the calendar month of each row (DATE_TRUNC('month', date))."""

    return df["date"].dt.to_period("M").dt.to_timestamp().rename("month")


def weekday_key(df: pd.DataFrame) -> pd.Series:
    return df["date"].dt.day_name().rename("weekday")


def aggregate(df: pd.DataFrame, by: Any, measures: Dict[str, Tuple[str, str]]) -> pd.DataFrame:
    """Group `df` and compute named measures.

    measures maps output column -> (input column, aggregator name). Nulls are
    ignored; a group without any value yields null. Groups come out sorted
    ascending by key.
    """

    grouped = df.groupby(by, sort=True)
    columns = {
        name: grouped[column].agg(AGGREGATORS[how]) for name, (column, how) in measures.items()
    }
    return pd.DataFrame(columns).reset_index()


def rank(df: pd.DataFrame, column: str, *, limit: Optional[int] = None) -> pd.DataFrame:
    """Sort descending by `column` (stable, nulls last) and keep the first `limit` rows."""

    out = df.sort_values(column, ascending=False, kind="mergesort", na_position="last")
    if limit is not None:
        out = out.head(limit)
    return out.reset_index(drop=True)
