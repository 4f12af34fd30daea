"""Parser for bank statement CSV exports."""

from decimal import Decimal

from ledger_reconciler.models.entry import LedgerSource
from ledger_reconciler.parsers.base import BaseParser
from ledger_reconciler.utils.date_utils import DOTTED_DATE
from ledger_reconciler.utils.decimal_utils import parse_amount


class BankStatementParser(BaseParser):
    """Parser for comma-delimited bank statement exports.

    Required columns:
    - "Zaksięgowano": posting date, DD.MM.YYYY
    - "Tytuł": transfer title, used as the description
    - "Kwota": signed amount with a decimal comma
    """

    source = LedgerSource.BANK
    delimiter = ","
    required_headers = {
        "date": "Zaksięgowano",
        "description": "Tytuł",
        "amount": "Kwota",
    }
    date_notations = (DOTTED_DATE,)

    def _extract_description(self, values: list[str], columns: dict[str, int]) -> str:
        return values[columns["description"]].strip()

    def _extract_amount(self, values: list[str], columns: dict[str, int]) -> Decimal:
        return parse_amount(values[columns["amount"]])
