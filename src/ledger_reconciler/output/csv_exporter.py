"""CSV export of a reconciliation session."""

import csv
from decimal import Decimal
from pathlib import Path

from ledger_reconciler.config import Config
from ledger_reconciler.models.entry import TransactionEntry
from ledger_reconciler.session import ReconciliationSession
from ledger_reconciler.utils.decimal_utils import normalize_zero, quantize_amount
from ledger_reconciler.utils.logging_config import get_logger
from ledger_reconciler.utils.sanitize import sanitize_cell

logger = get_logger(__name__)

MATCH_HEADERS = [
    "Match ID",
    "Type",
    "Source",
    "Entry ID",
    "Date",
    "Description",
    "Amount",
    "Bank Sum",
    "Bookkeeping Sum",
    "Discrepancy",
]

UNMATCHED_HEADERS = ["Source", "Entry ID", "Date", "Description", "Amount", "Source Line"]


class CSVExporter:
    """Exports a session's matches, unmatched entries and totals to CSV.

    Creates three files next to the given base path:
    - {stem}_matches.csv: one row per member of each match group
    - {stem}_unmatched.csv: the unmatched-combined view
    - {stem}_summary.csv: totals, difference and match counts
    """

    def __init__(self, config: Config):
        """Initialize CSV exporter.

        Args:
            config: Application configuration.
        """
        self.config = config
        self.output_config = config.output

    def export(self, session: ReconciliationSession, base_path: Path) -> list[Path]:
        """Export the session to CSV files.

        Args:
            session: Session to export.
            base_path: Base path; its stem prefixes every file name.

        Returns:
            Paths of the created files.
        """
        base_path.parent.mkdir(parents=True, exist_ok=True)
        stem = base_path.stem

        created = [
            self._export_matches(session, base_path.with_name(f"{stem}_matches.csv")),
            self._export_unmatched(session, base_path.with_name(f"{stem}_unmatched.csv")),
            self._export_summary(session, base_path.with_name(f"{stem}_summary.csv")),
        ]
        logger.info(f"Exported {len(created)} CSV files to {base_path.parent}")
        return created

    def _format_amount(self, amount: Decimal) -> Decimal:
        # Kept numeric so that sanitization leaves negative amounts alone
        return quantize_amount(normalize_zero(amount), self.output_config.decimal_places)

    def _format_date(self, entry: TransactionEntry) -> str:
        return entry.date.strftime(self.output_config.date_format)

    def _write(self, path: Path, headers: list[str], rows: list[list[object]]) -> Path:
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(headers)
            for row in rows:
                writer.writerow([sanitize_cell(value) for value in row])
        logger.debug(f"Wrote {len(rows)} rows to {path}")
        return path

    def _export_matches(self, session: ReconciliationSession, path: Path) -> Path:
        entries = {e.id: e for e in session.bank_entries + session.bookkeeping_entries}
        rows: list[list[object]] = []

        for group in session.match_groups:
            for entry_id in group.entry_ids:
                entry = entries.get(entry_id)
                if entry is None:
                    continue
                rows.append([
                    group.id,
                    group.match_type.value,
                    entry.source.value,
                    entry.id,
                    self._format_date(entry),
                    entry.description,
                    self._format_amount(entry.amount),
                    self._format_amount(group.bank_sum_in_match),
                    self._format_amount(group.other_sum_in_match),
                    "yes" if group.is_discrepancy else "no",
                ])

        return self._write(path, MATCH_HEADERS, rows)

    def _export_unmatched(self, session: ReconciliationSession, path: Path) -> Path:
        rows: list[list[object]] = [
            [
                entry.source.value,
                entry.id,
                self._format_date(entry),
                entry.description,
                self._format_amount(entry.amount),
                entry.source_line if entry.source_line is not None else "",
            ]
            for entry in session.unmatched_combined
        ]
        return self._write(path, UNMATCHED_HEADERS, rows)

    def _export_summary(self, session: ReconciliationSession, path: Path) -> Path:
        summary = session.balance_summary
        counts = session.registry.count_by_type()
        rows: list[list[object]] = [
            ["Filter", session.filter_mode.value],
            ["Bank total", self._format_amount(summary.bank_total)],
            ["Bookkeeping total", self._format_amount(summary.other_total)],
            ["Difference", self._format_amount(summary.difference)],
            ["Balanced", "yes" if summary.is_balanced else "no"],
            ["Match groups", len(session.match_groups)],
        ]
        rows += [[f"{match_type.value.capitalize()} matches", count] for match_type, count in counts.items()]
        rows.append(["Discrepancies", len(session.registry.discrepancies)])
        rows.append(["Unmatched entries", len(session.unmatched_combined)])
        return self._write(path, ["Metric", "Value"], rows)
