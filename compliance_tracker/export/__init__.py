"""Export of derived record values to spreadsheets and PDF reports."""

from compliance_tracker.export.report_generator import (
    build_procedure_rows,
    build_record_rows,
    format_cost,
    write_pdf,
    write_xlsx,
)

__all__ = ["build_procedure_rows", "build_record_rows", "format_cost", "write_pdf", "write_xlsx"]
