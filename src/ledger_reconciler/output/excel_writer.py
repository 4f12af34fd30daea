"""Excel workbook writer for reconciliation results."""

from decimal import Decimal
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from ledger_reconciler.config import Config
from ledger_reconciler.models.entry import TransactionEntry
from ledger_reconciler.session import ReconciliationSession
from ledger_reconciler.utils.decimal_utils import normalize_zero, quantize_amount
from ledger_reconciler.utils.logging_config import get_logger
from ledger_reconciler.utils.sanitize import sanitize_for_csv

logger = get_logger(__name__)

ENTRY_HEADERS = ["Date", "Description", "Amount", "Status", "Match ID"]


class ExcelWriter:
    """Writes a reconciliation session to a multi-sheet workbook.

    Generates sheets:
    - Summary
    - Matches
    - Unmatched
    - Bank
    - Bookkeeping
    """

    def __init__(self, config: Config):
        """Initialize Excel writer.

        Args:
            config: Application configuration.
        """
        self.config = config
        self.output_config = config.output

        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        self.money_positive = Font(color="006600")  # Dark green
        self.money_negative = Font(color="CC0000")  # Dark red
        self.balanced_fill = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
        self.discrepancy_fill = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
        self.right_aligned = Alignment(horizontal="right")

    @property
    def number_format(self) -> str:
        places = self.output_config.decimal_places
        return "#,##0" + ("." + "0" * places if places > 0 else "")

    def write(self, session: ReconciliationSession, output_path: Path) -> None:
        """Write the session to an Excel workbook.

        Args:
            session: Session to write.
            output_path: Path for the .xlsx file.
        """
        logger.info(f"Writing Excel workbook to {output_path}")

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        self._create_summary(wb, session)
        self._create_matches(wb, session)
        self._create_entry_sheet(wb, "Unmatched", session.unmatched_combined, with_source=True)
        self._create_entry_sheet(wb, "Bank", session.bank_entries)
        self._create_entry_sheet(wb, "Bookkeeping", session.bookkeeping_entries)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        logger.info(f"Excel workbook saved: {output_path}")

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
        ws.freeze_panes = "A2"

    def _write_money(self, ws: Worksheet, row: int, col: int, amount: Decimal) -> None:
        value = quantize_amount(normalize_zero(amount), self.output_config.decimal_places)
        cell = ws.cell(row=row, column=col, value=float(value))
        cell.number_format = self.number_format
        cell.alignment = self.right_aligned
        if value > 0:
            cell.font = self.money_positive
        elif value < 0:
            cell.font = self.money_negative

    def _autosize(self, ws: Worksheet, widths: dict[int, int]) -> None:
        for col, width in widths.items():
            ws.column_dimensions[get_column_letter(col)].width = width

    def _create_summary(self, wb: Workbook, session: ReconciliationSession) -> None:
        ws = wb.create_sheet("Summary")
        self._write_headers(ws, ["Metric", "Value"])

        summary = session.balance_summary
        ws.cell(row=2, column=1, value="Filter")
        ws.cell(row=2, column=2, value=session.filter_mode.value)

        money_rows = [
            ("Bank total", summary.bank_total),
            ("Bookkeeping total", summary.other_total),
            ("Difference", summary.difference),
        ]
        row = 3
        for label, amount in money_rows:
            ws.cell(row=row, column=1, value=label)
            self._write_money(ws, row, 2, amount)
            row += 1

        difference_cell = ws.cell(row=row - 1, column=2)
        difference_cell.fill = self.balanced_fill if summary.is_balanced else self.discrepancy_fill

        counts = [
            ("Match groups", len(session.match_groups)),
            ("Discrepancies", len(session.registry.discrepancies)),
            ("Unmatched entries", len(session.unmatched_combined)),
        ]
        for label, count in counts:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=count)
            row += 1

        self._autosize(ws, {1: 22, 2: 18})

    def _create_matches(self, wb: Workbook, session: ReconciliationSession) -> None:
        ws = wb.create_sheet("Matches")
        headers = ["Match ID", "Type", "Bank Entries", "Bookkeeping Entries", "Bank Sum", "Bookkeeping Sum", "Difference"]
        self._write_headers(ws, headers)

        descriptions = {e.id: e.description for e in session.bank_entries + session.bookkeeping_entries}

        for row, group in enumerate(session.match_groups, 2):
            ws.cell(row=row, column=1, value=group.id)
            ws.cell(row=row, column=2, value=group.match_type.value)
            ws.cell(row=row, column=3, value=sanitize_for_csv(
                "; ".join(descriptions.get(i, i) for i in group.bank_entry_ids)
            ))
            ws.cell(row=row, column=4, value=sanitize_for_csv(
                "; ".join(descriptions.get(i, i) for i in group.other_entry_ids)
            ))
            self._write_money(ws, row, 5, group.bank_sum_in_match)
            self._write_money(ws, row, 6, group.other_sum_in_match)
            self._write_money(ws, row, 7, group.difference)
            if group.is_discrepancy:
                ws.cell(row=row, column=7).fill = self.discrepancy_fill

        self._autosize(ws, {1: 44, 2: 10, 3: 50, 4: 50, 5: 14, 6: 16, 7: 14})

    def _create_entry_sheet(
        self,
        wb: Workbook,
        title: str,
        entries: list[TransactionEntry],
        with_source: bool = False,
    ) -> None:
        ws = wb.create_sheet(title)
        headers = (["Source"] if with_source else []) + ENTRY_HEADERS
        self._write_headers(ws, headers)

        offset = 1 if with_source else 0
        for row, entry in enumerate(entries, 2):
            if with_source:
                ws.cell(row=row, column=1, value=entry.source.value)
            ws.cell(row=row, column=1 + offset, value=entry.date.strftime(self.output_config.date_format))
            ws.cell(row=row, column=2 + offset, value=sanitize_for_csv(entry.description))
            self._write_money(ws, row, 3 + offset, entry.amount)
            ws.cell(row=row, column=4 + offset, value=entry.status.value)
            ws.cell(row=row, column=5 + offset, value=entry.match_id or "")

        widths = {1 + offset: 12, 2 + offset: 60, 3 + offset: 14, 4 + offset: 12, 5 + offset: 44}
        if with_source:
            widths[1] = 14
        self._autosize(ws, widths)
