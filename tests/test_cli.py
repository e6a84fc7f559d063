from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from finmarket_analysis.cli import app

runner = CliRunner()


def _config(tmp_path: Path, policy: str = "abort") -> Path:
    cfg = tmp_path / "settings.yaml"
    cfg.write_text(
        "\n".join(
            [
                f"row_failure_policy: {policy}",
                "paths:",
                f"  data_dir: '{tmp_path / 'data'}'",
                f"  logs_dir: '{tmp_path / 'logs'}'",
                f"  reports_dir: '{tmp_path / 'reports'}'",
                f"  raw_dataset: '{tmp_path / 'raw.csv'}'",
                f"  clean_dataset: '{tmp_path / 'data' / 'clean.parquet'}'",
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    return cfg


def _events(tmp_path: Path) -> list[dict]:
    lines: list[dict] = []
    for path in sorted((tmp_path / "logs").glob("run-*.jsonl")):
        lines.extend(json.loads(line) for line in path.read_text(encoding="utf-8").splitlines())
    return lines


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RAW_DATASET_PATH", raising=False)
    monkeypatch.delenv("ROW_FAILURE_POLICY", raising=False)


def test_run_all_writes_artifacts_and_log(tmp_path: Path, make_raw) -> None:
    make_raw({"Date": "2024-01-02"}, {"Date": "2024-02-02"}).to_csv(tmp_path / "raw.csv", index=False)

    result = runner.invoke(app, ["--config", str(_config(tmp_path)), "run-all"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "data" / "clean.parquet").exists()
    assert list((tmp_path / "reports").glob("queries-*.json"))

    events = _events(tmp_path)
    names = [e["event"] for e in events]
    assert names[0] == "command_start"
    assert "clean_stored" in names
    assert names.count("query_run") == 18
    assert names[-1] == "run_summary"
    assert events[-1]["status_counts"]["ok"] == 2
    assert len({e["run_id"] for e in events}) == 1


def test_clean_failure_exit_code_and_log(tmp_path: Path, make_raw) -> None:
    make_raw({"Open Price": "abc"}).to_csv(tmp_path / "raw.csv", index=False)

    result = runner.invoke(app, ["--config", str(_config(tmp_path)), "clean"])

    assert result.exit_code == 1
    failed = [e for e in _events(tmp_path) if e["event"] == "clean_failed"]
    assert failed and failed[0]["error_type"] == "TypeCoercionError"


def test_clean_drop_policy_logs_dropped_rows(tmp_path: Path, make_raw) -> None:
    make_raw({}, {"Open Price": "abc"}).to_csv(tmp_path / "raw.csv", index=False)

    result = runner.invoke(app, ["--config", str(_config(tmp_path, policy="drop")), "clean"])

    assert result.exit_code == 0, result.output
    dropped = [e for e in _events(tmp_path) if e["event"] == "rows_dropped"]
    assert dropped[0]["rows_dropped"] == 1
    assert dropped[0]["failures_sample"][0]["column"] == "open_price"


def test_query_unknown_name(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(_config(tmp_path)), "query", "--name", "nope"])

    assert result.exit_code == 2


def test_query_without_clean_dataset(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(_config(tmp_path)), "query"])

    assert result.exit_code == 3
