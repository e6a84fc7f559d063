"""Query result exports (CSV per query, combined JSON)."""

from finmarket_analysis.report.export import QueryExportResult, result_records, write_query_results

__all__ = [
    "QueryExportResult",
    "result_records",
    "write_query_results",
]
