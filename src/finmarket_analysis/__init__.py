"""finmarket_analysis - batch cleaning and analysis of a daily market/macro dataset.

The package cleans a raw CSV export (typing, calendar parts, spread and
volatility metrics), stores the cleaned copy as Parquet and runs a fixed set
of aggregate and correlation queries over it.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
