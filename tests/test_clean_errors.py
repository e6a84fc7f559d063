from __future__ import annotations

import pytest

from finmarket_analysis.errors import SchemaMismatchError, TypeCoercionError
from finmarket_analysis.pipeline.clean import clean_dataset, validate_schema


def test_schema_mismatch_lists_missing_columns(make_raw) -> None:
    raw = make_raw({}).drop(columns=["Daily Low", "Company"])

    with pytest.raises(SchemaMismatchError) as exc_info:
        validate_schema(raw)

    assert exc_info.value.missing == ["Company", "Daily Low"]


def test_schema_checked_before_any_row(make_raw) -> None:
    # the bad price would raise TypeCoercionError if rows were processed first
    raw = make_raw({"Open Price": "abc"}).drop(columns=["Interest Rate (%)"])

    with pytest.raises(SchemaMismatchError):
        clean_dataset(raw)


def test_unparsable_price_aborts_run(make_raw) -> None:
    raw = make_raw({}, {"Open Price": "12,5x"})

    with pytest.raises(TypeCoercionError) as exc_info:
        clean_dataset(raw)

    err = exc_info.value
    assert err.column == "open_price"
    assert err.row == 1
    assert err.value == "12,5x"


def test_unparsable_date_aborts_run(make_raw) -> None:
    raw = make_raw({"Date": "not-a-date"})

    with pytest.raises(TypeCoercionError) as exc_info:
        clean_dataset(raw)

    assert exc_info.value.column == "date"


@pytest.mark.parametrize(
    "override, column",
    [
        ({"Date": ""}, "date"),
        ({"Company": ""}, "company"),
        ({"Stock Index": "   "}, "stock_index"),
        ({"Trading Volume": "-5"}, "trading_volume"),
        ({"Close Price": "123456789.00"}, "close_price"),
        ({"Open Price": "1e30"}, "open_price"),
        ({"Daily High": "-99999999.995"}, "daily_high"),
        ({"Crude Oil Price (USD per Barrel)": "NaN"}, "crude_oil_price"),
    ],
)
def test_invalid_values_raise(make_raw, override, column) -> None:
    with pytest.raises(TypeCoercionError) as exc_info:
        clean_dataset(make_raw(override))

    assert exc_info.value.column == column


def test_drop_policy_excludes_failing_rows_and_reports_them(make_raw) -> None:
    raw = make_raw(
        {"Date": "2024-01-02"},
        {"Date": "2024-01-03", "Open Price": "n/a", "Daily High": "?"},
        {"Date": "2024-01-04"},
        {"Date": "bogus"},
    )

    result = clean_dataset(raw, on_error="drop")

    assert result.rows_in == 4
    assert result.rows_out == 2
    assert result.rows_dropped == 2
    assert result.data["date"].dt.strftime("%Y-%m-%d").tolist() == ["2024-01-02", "2024-01-04"]
    assert list(result.data.index) == [0, 1]

    failed = sorted((f.row, f.column) for f in result.failures)
    assert failed == [(1, "daily_high"), (1, "open_price"), (3, "date")]


def test_abort_policy_records_no_failures_on_clean_input(make_raw) -> None:
    result = clean_dataset(make_raw({}, {}))

    assert result.failures == []
    assert result.rows_dropped == 0


def test_unknown_policy_rejected(make_raw) -> None:
    with pytest.raises(ValueError):
        clean_dataset(make_raw({}), on_error="skip")  # type: ignore[arg-type]


def test_drop_policy_drops_price_beyond_any_precision(make_raw) -> None:
    raw = make_raw({"Date": "2024-01-02"}, {"Date": "2024-01-03", "Open Price": "1e30"})

    result = clean_dataset(raw, on_error="drop")

    assert result.rows_out == 1
    assert [(f.row, f.column, f.reason) for f in result.failures] == [(1, "open_price", "numeric field overflow")]
