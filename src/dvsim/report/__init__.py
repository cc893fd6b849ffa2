"""Rendering of routing-table snapshots."""

from dvsim.report.tables import (
    format_result,
    format_round,
    format_summary,
    format_table,
    table_rows,
    tables_payload,
)

__all__ = [
    "format_result",
    "format_round",
    "format_summary",
    "format_table",
    "table_rows",
    "tables_payload",
]
