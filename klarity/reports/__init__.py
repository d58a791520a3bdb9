"""Report export package."""

from klarity.reports.statement import (
    STATEMENT_COLUMNS,
    STATEMENT_TITLE,
    Statement,
    StatementRow,
    build_statement,
    format_idr,
    report_filename,
)

__all__ = [
    "STATEMENT_COLUMNS",
    "STATEMENT_TITLE",
    "Statement",
    "StatementRow",
    "build_statement",
    "format_idr",
    "report_filename",
]
