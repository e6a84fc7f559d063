from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

RowFailurePolicy = Literal["abort", "drop"]


class PathsConfig(BaseModel):
    data_dir: Path = Field(default=Path("data"))
    logs_dir: Path = Field(default=Path("logs"))
    reports_dir: Path = Field(default=Path("reports"))
    raw_dataset: Path = Field(default=Path("data/raw/finance_dataset.csv"))
    clean_dataset: Path = Field(default=Path("data/clean/finance_dataset_clean.parquet"))


class AnalysisConfig(BaseModel):
    # result-count limits for the ranking queries
    top_crude_oil_n: int = Field(default=10, ge=1)
    top_volume_months_n: int = Field(default=5, ge=1)
    top_companies_n: int = Field(default=10, ge=1)
    top_volatile_months_n: int = Field(default=5, ge=1)

    # absolute open-close drop, in price units
    large_drop_threshold: Decimal = Field(default=Decimal("20"))


class Settings(BaseModel):
    """Application settings.

    Row failures:
    - row_failure_policy="abort" stops the cleaning run at the first cell that
      cannot be coerced (default).
    - row_failure_policy="drop" excludes failing rows and reports every failure
      in the run result and the JSONL log.
    """

    row_failure_policy: RowFailurePolicy = Field(default="abort")

    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)

    paths: PathsConfig = Field(default_factory=PathsConfig)


def load_settings(config_path: Optional[Path]) -> Settings:
    """Load settings from .env + optional YAML.

    Precedence:
      1) defaults
      2) .env (RAW_DATASET_PATH / ROW_FAILURE_POLICY)
      3) YAML file (if provided)

    Only the project's local `.env` is read so that runs do not pick up
    unrelated `.env` files from parent directories.
    """

    load_dotenv(dotenv_path=Path(".env"), override=False)

    base = Settings()
    merged: Dict[str, Any] = base.model_dump(mode="python")

    env_raw_dataset = _getenv("RAW_DATASET_PATH")
    env_policy = _getenv("ROW_FAILURE_POLICY")

    if env_raw_dataset is not None:
        merged["paths"]["raw_dataset"] = env_raw_dataset
    if env_policy is not None:
        merged["row_failure_policy"] = env_policy.lower()

    if config_path is not None:
        cfg = _load_yaml(config_path)
        merged = _deep_merge(merged, cfg)

    try:
        return Settings.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


def _getenv(key: str) -> Optional[str]:
    import os

    value = os.getenv(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(str(path))
    raw = path.read_text(encoding="utf-8")
    parsed = yaml.safe_load(raw) or {}
    if not isinstance(parsed, dict):
        raise ValueError("YAML config must be a mapping/object at the top level")
    return parsed


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if (
            k in out
            and isinstance(out[k], dict)
            and isinstance(v, dict)
        ):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out
