"""Parsers for the bank and bookkeeping ledger exports."""

from pathlib import Path

from ledger_reconciler.models.entry import LedgerSource, TransactionEntry
from ledger_reconciler.parsers.bank_parser import BankStatementParser
from ledger_reconciler.parsers.base import (
    MAX_FILE_SIZE,
    BaseParser,
    FormatError,
    ParseError,
    split_line,
)
from ledger_reconciler.parsers.bookkeeping_parser import BookkeepingParser

PARSERS: dict[LedgerSource, type[BaseParser]] = {
    LedgerSource.BANK: BankStatementParser,
    LedgerSource.BOOKKEEPING: BookkeepingParser,
}


def get_parser(source: LedgerSource, max_file_size: int = MAX_FILE_SIZE) -> BaseParser:
    """Return the parser for a ledger source.

    Args:
        source: Ledger to parse.
        max_file_size: Largest file the parser reads, in bytes.

    Returns:
        Parser instance.
    """
    return PARSERS[source](max_file_size=max_file_size)


def parse(raw_text: str, source: LedgerSource) -> list[TransactionEntry]:
    """Parse ledger text into entries.

    Raises:
        FormatError: If the required header columns are missing.
    """
    return get_parser(source).parse(raw_text)


def parse_file(
    file_path: Path, source: LedgerSource, max_file_size: int = MAX_FILE_SIZE
) -> list[TransactionEntry]:
    """Read and parse a ledger export file."""
    return get_parser(source, max_file_size).parse_file(file_path)


__all__ = [
    "BaseParser",
    "BankStatementParser",
    "BookkeepingParser",
    "ParseError",
    "FormatError",
    "get_parser",
    "parse",
    "parse_file",
    "split_line",
]
