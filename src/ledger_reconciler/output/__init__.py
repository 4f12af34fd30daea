"""Report output for reconciliation sessions."""

from ledger_reconciler.output.console_report import render_summary
from ledger_reconciler.output.csv_exporter import CSVExporter
from ledger_reconciler.output.excel_writer import ExcelWriter

__all__ = ["CSVExporter", "ExcelWriter", "render_summary"]
