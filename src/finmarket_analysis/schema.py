from __future__ import annotations

from typing import Dict, List

# raw column name -> cleaned column name
RAW_TO_CLEAN: Dict[str, str] = {
    "Date": "date",
    "Company": "company",
    "Stock Index": "stock_index",
    "Open Price": "open_price",
    "Close Price": "close_price",
    "Daily High": "daily_high",
    "Daily Low": "daily_low",
    "Trading Volume": "trading_volume",
    "GDP Growth (%)": "gdp_growth_pct",
    "Unemployment Rate (%)": "unemployment_rate_pct",
    "Inflation Rate (%)": "inflation_rate_pct",
    "Interest Rate (%)": "interest_rate_pct",
    "Crude Oil Price (USD per Barrel)": "crude_oil_price",
}

REQUIRED_RAW_COLUMNS: List[str] = list(RAW_TO_CLEAN.keys())

LABEL_COLUMNS: List[str] = ["company", "stock_index"]

# NUMERIC(10,2) in the source database
PRICE_COLUMNS: List[str] = ["open_price", "close_price", "daily_high", "daily_low"]

MACRO_COLUMNS: List[str] = [
    "gdp_growth_pct",
    "unemployment_rate_pct",
    "inflation_rate_pct",
    "interest_rate_pct",
    "crude_oil_price",
]

VOLUME_COLUMN = "trading_volume"

DERIVED_COLUMNS: List[str] = ["year", "month", "price_spread", "volatility_pct"]

CLEAN_COLUMNS: List[str] = list(RAW_TO_CLEAN.values())
