"""Parser for bookkeeping (Ziher) tab-separated exports."""

from decimal import Decimal

from ledger_reconciler.models.entry import LedgerSource
from ledger_reconciler.parsers.base import BaseParser
from ledger_reconciler.utils.date_utils import DOTTED_DATE, ISO_DATE
from ledger_reconciler.utils.decimal_utils import parse_optional_amount


class BookkeepingParser(BaseParser):
    """Parser for tab-delimited bookkeeping exports.

    The export reports income and expense as two non-negative columns, so
    the signed amount is income minus expense; a blank column counts as
    zero. The description joins the narrative with the document number.
    Dates are ISO (month and day may have one digit) with a day-first
    fallback.
    """

    source = LedgerSource.BOOKKEEPING
    delimiter = "\t"
    required_headers = {
        "date": "Data",
        "description": "Opis",
        "document_number": "Numer dokumentu",
        "income": "Wpływy razem",
        "expense": "Wydatki razem",
    }
    date_notations = (ISO_DATE, DOTTED_DATE)

    def _extract_description(self, values: list[str], columns: dict[str, int]) -> str:
        narrative = values[columns["description"]].strip()
        document_number = values[columns["document_number"]].strip()
        return f"{narrative} {document_number}".strip()

    def _extract_amount(self, values: list[str], columns: dict[str, int]) -> Decimal:
        income = parse_optional_amount(values[columns["income"]])
        expense = parse_optional_amount(values[columns["expense"]])
        return income - expense
