from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pandas as pd

from finmarket_analysis.schema import CLEAN_COLUMNS, DERIVED_COLUMNS


@dataclass(frozen=True)
class StoreResult:
    path: Path
    rows: int
    columns: int


def load_raw_dataset(path: Path) -> pd.DataFrame:
    """Load the raw CSV export with every column kept as text.

    No NA inference is done here: blank cells stay empty strings and are
    interpreted by the cleaning step.
    """

    if not path.exists():
        raise FileNotFoundError(str(path))

    return pd.read_csv(path, dtype=str, keep_default_na=False)


def load_clean_dataset(path: Path) -> Optional[pd.DataFrame]:
    """Load a stored cleaned dataset.

    Storage format:
    - Parquet, decimal columns as decimal128 (read back as Decimal objects),
      date as datetime64, year/month as int64

    Returns None if file does not exist.
    """

    if not path.exists():
        return None

    df = pd.read_parquet(path)

    expected = CLEAN_COLUMNS + DERIVED_COLUMNS
    missing = [c for c in expected if c not in df.columns]
    if missing:
        raise ValueError(f"Invalid cleaned dataset schema in {path}: missing columns {missing}")

    df["date"] = pd.to_datetime(df["date"])
    return df


def store_clean_dataset(path: Path, df: pd.DataFrame) -> StoreResult:
    """Write the cleaned dataset to Parquet, replacing any previous artifact.

    The file is written to a temporary sibling first and then moved into
    place, so a failed write never leaves a half-written artifact behind.
    """

    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = path.with_name(path.name + ".tmp")
    df.to_parquet(tmp_path, index=False)
    tmp_path.replace(path)

    return StoreResult(path=path, rows=len(df), columns=len(df.columns))
