from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable, Dict, List, Optional

import pandas as pd

from finmarket_analysis.config import RowFailurePolicy
from finmarket_analysis.errors import SchemaMismatchError, TypeCoercionError
from finmarket_analysis.schema import (
    CLEAN_COLUMNS,
    LABEL_COLUMNS,
    MACRO_COLUMNS,
    PRICE_COLUMNS,
    RAW_TO_CLEAN,
    REQUIRED_RAW_COLUMNS,
    VOLUME_COLUMN,
)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")

# NUMERIC(10,2): at most 8 digits before the decimal point
PRICE_LIMIT = Decimal(10) ** 8


@dataclass(frozen=True)
class RowFailure:
    row: object
    column: str
    value: object
    reason: str

    def as_dict(self) -> Dict[str, object]:
        return {"row": self.row, "column": self.column, "value": self.value, "reason": self.reason}


@dataclass(frozen=True)
class CleanResult:
    data: pd.DataFrame
    rows_in: int
    failures: List[RowFailure] = field(default_factory=list)

    @property
    def rows_out(self) -> int:
        return len(self.data)

    @property
    def rows_dropped(self) -> int:
        return self.rows_in - self.rows_out


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_decimal(value: object) -> Optional[Decimal]:
    """Parse numeric text into a Decimal; blank cells are null."""

    if _is_missing(value):
        return None
    if isinstance(value, Decimal):
        parsed = value
    else:
        text = str(value).strip()
        try:
            parsed = Decimal(text)
        except InvalidOperation as exc:
            raise ValueError("not a number") from exc
    if not parsed.is_finite():
        raise ValueError("not a finite number")
    return parsed


def parse_price(value: object) -> Optional[Decimal]:
    parsed = parse_decimal(value)
    if parsed is None:
        return None
    # quantize itself fails once the digits exceed the context precision
    if abs(parsed) >= PRICE_LIMIT:
        raise ValueError("numeric field overflow")
    price = parsed.quantize(CENT, rounding=ROUND_HALF_UP)
    if abs(price) >= PRICE_LIMIT:
        raise ValueError("numeric field overflow")
    return price


def parse_volume(value: object) -> Optional[Decimal]:
    parsed = parse_decimal(value)
    if parsed is not None and parsed < 0:
        raise ValueError("negative trading volume")
    return parsed


def parse_date(value: object) -> pd.Timestamp:
    if _is_missing(value):
        raise ValueError("missing date")
    ts = pd.Timestamp(value) if not isinstance(value, str) else pd.to_datetime(value.strip())
    if ts is pd.NaT:
        raise ValueError("missing date")
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()


def parse_label(value: object) -> str:
    if _is_missing(value):
        raise ValueError("missing value")
    return str(value)


def _parsers() -> Dict[str, Callable[[object], object]]:
    parsers: Dict[str, Callable[[object], object]] = {"date": parse_date}
    for column in LABEL_COLUMNS:
        parsers[column] = parse_label
    for column in PRICE_COLUMNS:
        parsers[column] = parse_price
    parsers[VOLUME_COLUMN] = parse_volume
    for column in MACRO_COLUMNS:
        parsers[column] = parse_decimal
    return parsers


def validate_schema(raw: pd.DataFrame) -> None:
    missing = [c for c in REQUIRED_RAW_COLUMNS if c not in raw.columns]
    if missing:
        raise SchemaMismatchError(missing)


def coerce_types(raw: pd.DataFrame, *, on_error: RowFailurePolicy = "abort") -> CleanResult:
    """Convert the text-typed raw columns into dates, labels and decimals.

    Columns are renamed to their snake_case names. Columns outside the known
    schema are passed through unchanged.

    on_error="abort" raises TypeCoercionError on the first bad cell.
    on_error="drop" removes every row with at least one bad cell and lists
    each failing cell in the result.
    """

    if on_error not in ("abort", "drop"):
        raise ValueError(f"unsupported row failure policy: {on_error}")

    validate_schema(raw)

    out = raw.rename(columns=RAW_TO_CLEAN)
    failures: List[RowFailure] = []

    for column, parser in _parsers().items():
        parsed: List[object] = []
        for idx, value in out[column].items():
            try:
                parsed.append(parser(value))
            except ValueError as exc:
                if on_error == "abort":
                    raise TypeCoercionError(column=column, row=idx, value=value, reason=str(exc)) from exc
                failures.append(RowFailure(row=idx, column=column, value=value, reason=str(exc)))
                parsed.append(None)
        out[column] = pd.Series(parsed, index=out.index, dtype=object)

    bad_rows = {f.row for f in failures}
    if bad_rows:
        out = out[~out.index.isin(list(bad_rows))].copy()

    out["date"] = pd.to_datetime(out["date"])

    extra = [c for c in out.columns if c not in CLEAN_COLUMNS]
    out = out[CLEAN_COLUMNS + extra]

    return CleanResult(data=out, rows_in=len(raw), failures=failures)


def add_calendar_parts(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    out["year"] = out["date"].dt.year.astype("int64")
    out["month"] = out["date"].dt.month.astype("int64")
    return out


def price_spread(high: Optional[Decimal], low: Optional[Decimal]) -> Optional[Decimal]:
    if high is None or low is None:
        return None
    return high - low


def volatility_pct(
    high: Optional[Decimal], low: Optional[Decimal], open_price: Optional[Decimal]
) -> Optional[Decimal]:
    """Spread as a percentage of the open price, rounded to 2 places.

    Null when the open price is zero or any input is null.
    """

    if high is None or low is None or open_price is None or open_price == 0:
        return None
    return ((high - low) / open_price * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)


def add_derived_metrics(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    highs = out["daily_high"].tolist()
    lows = out["daily_low"].tolist()
    opens = out["open_price"].tolist()

    out["price_spread"] = pd.Series(
        [price_spread(hi, lo) for hi, lo in zip(highs, lows)], index=out.index, dtype=object
    )
    out["volatility_pct"] = pd.Series(
        [volatility_pct(hi, lo, op) for hi, lo, op in zip(highs, lows, opens)], index=out.index, dtype=object
    )
    return out


def clean_dataset(raw: pd.DataFrame, *, on_error: RowFailurePolicy = "abort") -> CleanResult:
    """Produce the typed, enriched copy of a raw dataset.

    The raw frame is not modified. The output index is a fresh RangeIndex so
    that repeated runs over the same input give identical frames.
    """

    coerced = coerce_types(raw, on_error=on_error)

    data = add_calendar_parts(coerced.data)
    data = add_derived_metrics(data)
    data = data.reset_index(drop=True)

    return CleanResult(data=data, rows_in=coerced.rows_in, failures=coerced.failures)
