from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from finmarket_analysis.config import Settings, load_settings
from finmarket_analysis.errors import UnknownQueryError
from finmarket_analysis.logging_utils import (
    JsonlLogger,
    RunContext,
    command_start_event,
    count_statuses,
    default_log_path,
    error_fields,
    new_run_context,
    run_summary_event,
)
from finmarket_analysis.pipeline import CleanRunResult, QueryRunResult, run_clean, run_queries

app = typer.Typer(add_completion=False, help="finmarket_analysis CLI")

# failures listed individually in the log; the rest are only counted
FAILURE_SAMPLE_MAX = 20


def _ensure_dirs(settings: Settings) -> None:
    settings.paths.data_dir.mkdir(parents=True, exist_ok=True)
    settings.paths.logs_dir.mkdir(parents=True, exist_ok=True)
    settings.paths.reports_dir.mkdir(parents=True, exist_ok=True)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        exists=True,
        dir_okay=False,
        file_okay=True,
        readable=True,
        help="Path to YAML config (optional)",
    ),
) -> None:
    """Load settings and store them in Typer context."""

    settings = load_settings(config)
    _ensure_dirs(settings)
    ctx.obj = {"settings": settings}


def _logger_for(settings: Settings, run_ctx: RunContext) -> JsonlLogger:
    return JsonlLogger(default_log_path(settings.paths.logs_dir, now_utc=run_ctx.started_at_utc))


def _log_clean_run(logger: JsonlLogger, *, run_id: str, result: CleanRunResult) -> None:
    if result.failures:
        logger.log(
            {
                "event": "rows_dropped",
                "run_id": run_id,
                "rows_dropped": result.rows_dropped,
                "failures_count": len(result.failures),
                "failures_sample": [f.as_dict() for f in result.failures[:FAILURE_SAMPLE_MAX]],
            }
        )

    event = {
        "event": "clean_stored" if result.status in ("ok", "warn") else "clean_failed",
        "run_id": run_id,
        "status": result.status,
        "message": result.message,
        "raw_path": str(result.raw_path),
        "stored_path": str(result.stored_path) if result.stored_path is not None else None,
        "rows_in": result.rows_in,
        "rows_out": result.rows_out,
        "run_at": result.run_at.isoformat() if result.run_at else None,
    }
    if result.error_type:
        event["error_type"] = result.error_type
    if result.error_message:
        event["error_message"] = result.error_message

    logger.log(event)


def _log_query_run(logger: JsonlLogger, *, run_id: str, result: QueryRunResult) -> None:
    for name, df in result.results.items():
        logger.log({"event": "query_run", "run_id": run_id, "query": name, "rows": len(df)})

    if result.export is not None:
        logger.log(
            {
                "event": "queries_exported",
                "run_id": run_id,
                "json_path": str(result.export.json_path),
                "csv_count": len(result.export.csv_paths),
            }
        )


def _do_clean(settings: Settings, logger: JsonlLogger, run_ctx: RunContext) -> CleanRunResult:
    logger.log(
        {
            "event": "dataset_loaded",
            "run_id": run_ctx.run_id,
            "path": str(settings.paths.raw_dataset),
            "exists": settings.paths.raw_dataset.exists(),
        }
    )
    result = run_clean(settings=settings, run_at=run_ctx.started_at_utc)
    _log_clean_run(logger, run_id=run_ctx.run_id, result=result)
    return result


def _do_queries(
    settings: Settings, logger: JsonlLogger, run_ctx: RunContext, names: Optional[List[str]]
) -> QueryRunResult:
    try:
        result = run_queries(settings=settings, names=names, run_at=run_ctx.started_at_utc)
    except UnknownQueryError as exc:
        logger.log({"event": "query_not_found", "run_id": run_ctx.run_id, "query": exc.name})
        logger.log(run_summary_event(ctx=run_ctx, status_counts=count_statuses(["error"])))
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)

    _log_query_run(logger, run_id=run_ctx.run_id, result=result)
    return result


def _exit_code(status: str) -> int:
    return {"ok": 0, "warn": 0, "missing": 3}.get(status, 1)


@app.command()
def clean(ctx: typer.Context) -> None:
    """Clean the raw dataset and store the typed, enriched copy."""

    settings: Settings = ctx.obj["settings"]
    run_ctx = new_run_context()
    logger = _logger_for(settings, run_ctx)

    logger.log(
        command_start_event(
            ctx=run_ctx,
            command="clean",
            raw_dataset=str(settings.paths.raw_dataset),
            clean_dataset=str(settings.paths.clean_dataset),
            row_failure_policy=settings.row_failure_policy,
        )
    )

    result = _do_clean(settings, logger, run_ctx)
    logger.log(run_summary_event(ctx=run_ctx, status_counts=count_statuses([result.status])))

    typer.echo(f"clean: {result.status} ({result.message}) rows {result.rows_out}/{result.rows_in}")
    code = _exit_code(result.status)
    if code:
        raise typer.Exit(code=code)


@app.command()
def query(
    ctx: typer.Context,
    name: Optional[List[str]] = typer.Option(
        None, "--name", help="Query to run (repeatable). Defaults to the full query set."
    ),
) -> None:
    """Run queries against the cleaned dataset and export the results."""

    settings: Settings = ctx.obj["settings"]
    run_ctx = new_run_context()
    logger = _logger_for(settings, run_ctx)

    logger.log(
        command_start_event(
            ctx=run_ctx,
            command="query",
            clean_dataset=str(settings.paths.clean_dataset),
            queries=name or "all",
        )
    )

    result = _do_queries(settings, logger, run_ctx, name or None)
    logger.log(run_summary_event(ctx=run_ctx, status_counts=count_statuses([result.status])))

    typer.echo(f"query: {result.status} ({result.message}) {len(result.results)} queries")
    code = _exit_code(result.status)
    if code:
        raise typer.Exit(code=code)


@app.command("run-all")
def run_all(ctx: typer.Context) -> None:
    """Clean the raw dataset, then run the full query set."""

    settings: Settings = ctx.obj["settings"]
    run_ctx = new_run_context()
    logger = _logger_for(settings, run_ctx)

    logger.log(
        command_start_event(
            ctx=run_ctx,
            command="run-all",
            raw_dataset=str(settings.paths.raw_dataset),
            clean_dataset=str(settings.paths.clean_dataset),
            row_failure_policy=settings.row_failure_policy,
        )
    )

    clean_result = _do_clean(settings, logger, run_ctx)
    if clean_result.status not in ("ok", "warn"):
        logger.log(run_summary_event(ctx=run_ctx, status_counts=count_statuses([clean_result.status])))
        typer.echo(f"clean: {clean_result.status} ({clean_result.message})", err=True)
        raise typer.Exit(code=_exit_code(clean_result.status))

    try:
        query_result = _do_queries(settings, logger, run_ctx, None)
    except OSError as exc:
        logger.log({"event": "queries_export_failed", "run_id": run_ctx.run_id, **error_fields(exc)})
        logger.log(run_summary_event(ctx=run_ctx, status_counts=count_statuses([clean_result.status, "error"])))
        raise typer.Exit(code=1)

    logger.log(
        run_summary_event(ctx=run_ctx, status_counts=count_statuses([clean_result.status, query_result.status]))
    )
    typer.echo(
        f"run-all: clean {clean_result.status}, query {query_result.status} "
        f"({len(query_result.results)} queries)"
    )


if __name__ == "__main__":
    app()
