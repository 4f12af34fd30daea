"""Tests for the bank and bookkeeping export parsers."""

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from ledger_reconciler.models.entry import EntryStatus, LedgerSource
from ledger_reconciler.parsers import (
    BankStatementParser,
    BookkeepingParser,
    FormatError,
    ParseError,
    get_parser,
    parse,
    parse_file,
    split_line,
)

BANK_CSV = (
    '"Zaksięgowano","Tytuł","Kwota"\n'
    '"10.01.2024","Składka członkowska","100,00"\n'
    '"11.01.2024","Opłata ""abonament""","-1 234,56"\n'
)

BOOKKEEPING_TSV = (
    "Lp.\tData\tOpis\tNumer dokumentu\tWpływy razem\tWydatki razem\n"
    "1\t2024-1-5\tSkładki\tKP/1\t100.00\t\n"
    "2\t2024-01-06\tZakup\tFV 12\t\t49,99\n"
    "3\t07.01.2024\tMix\t\t10\t2.5"
)


class TestSplitLine:
    """Tests for quote-aware line splitting."""

    def test_plain_fields_are_trimmed(self) -> None:
        """Test that unquoted fields are split and trimmed."""
        assert split_line(" a , b ,c", ",") == ["a", "b", "c"]

    def test_delimiter_inside_quotes_is_kept(self) -> None:
        """Test that a quoted delimiter does not split the field."""
        assert split_line('"1,50","x"', ",") == ["1,50", "x"]

    def test_doubled_quote_is_literal(self) -> None:
        """Test that "" inside a quoted field yields one quote."""
        assert split_line('"say ""hi""",2', ",") == ['say "hi"', "2"]

    def test_trailing_empty_field(self) -> None:
        """Test that a trailing delimiter produces an empty last field."""
        assert split_line("a\tb\t", "\t") == ["a", "b", ""]


class TestBankStatementParser:
    """Tests for bank statement parsing."""

    def test_parses_rows(self) -> None:
        """Test basic parsing of dates, descriptions and amounts."""
        entries = BankStatementParser().parse(BANK_CSV)

        assert len(entries) == 2
        first, second = entries
        assert first.date == date(2024, 1, 10)
        assert first.iso_date == "2024-01-10"
        assert first.description == "Składka członkowska"
        assert first.amount == Decimal("100.00")
        assert second.description == 'Opłata "abonament"'
        assert second.amount == Decimal("-1234.56")

    def test_entries_start_unmatched(self) -> None:
        """Test that parsed entries carry no match state."""
        for entry in BankStatementParser().parse(BANK_CSV):
            assert entry.source == LedgerSource.BANK
            assert entry.status == EntryStatus.UNMATCHED
            assert entry.match_id is None
            assert entry.matched_entry_details == ()
            assert entry.id.startswith("bank-")

    def test_original_row_data_and_line(self) -> None:
        """Test that the parsed fields and line number are retained."""
        entry = BankStatementParser().parse(BANK_CSV)[0]
        assert entry.original_row_data == ("10.01.2024", "Składka członkowska", "100,00")
        assert entry.source_line == 2

    def test_ids_are_unique(self) -> None:
        """Test that every entry gets its own id."""
        entries = BankStatementParser().parse(BANK_CSV)
        assert len({e.id for e in entries}) == len(entries)

    def test_headers_are_case_insensitive(self) -> None:
        """Test header matching ignores case and column order."""
        text = 'KWOTA,ZAKSIĘGOWANO,tytuł\n"-5,00",01.02.2024,Fee\n'
        entries = BankStatementParser().parse(text)

        assert len(entries) == 1
        assert entries[0].amount == Decimal("-5.00")
        assert entries[0].date == date(2024, 2, 1)

    def test_missing_amount_header_raises(self) -> None:
        """Test FormatError names the three expected headers."""
        text = "Zaksięgowano,Tytuł,Saldo\n10.01.2024,x,1\n"

        with pytest.raises(FormatError) as exc_info:
            BankStatementParser().parse(text)

        error = exc_info.value
        assert error.expected_headers == ["Zaksięgowano", "Tytuł", "Kwota"]
        assert error.found_headers == ["zaksięgowano", "tytuł", "saldo"]
        assert error.source == LedgerSource.BANK
        assert "Kwota" in str(error)

    def test_format_error_is_parse_error(self) -> None:
        """Test that FormatError can be caught as ParseError."""
        with pytest.raises(ParseError):
            BankStatementParser().parse("a,b,c\n1,2,3\n")

    def test_bad_rows_are_skipped(self) -> None:
        """Test that malformed rows are dropped without raising."""
        text = (
            "Zaksięgowano,Tytuł,Kwota\n"
            "\n"
            "2024-01-10,ISO date not accepted for bank,1\n"
            "31.02.2024,Impossible date,1\n"
            "12.01.2024,,5\n"
            "13.01.2024,Not a number,abc\n"
            "14.01.2024,Too short\n"
            "15.01.2024,Infinite,Infinity\n"
            "16.01.2024,Good,7\n"
        )
        entries = BankStatementParser().parse(text)

        assert [e.description for e in entries] == ["Good"]
        assert entries[0].amount == Decimal("7")

    def test_empty_text(self) -> None:
        """Test that empty input yields no entries."""
        assert BankStatementParser().parse("   \n") == []

    def test_byte_order_mark_is_ignored(self) -> None:
        """Test that a UTF-8 BOM before the header is tolerated."""
        entries = BankStatementParser().parse("\ufeff" + BANK_CSV)
        assert len(entries) == 2

    @pytest.mark.parametrize("separator", ["\x1c", "\x1d", "\x1e", "\x85", "\u2028", "\u2029"])
    def test_unicode_line_separators_stay_in_field(self, separator: str) -> None:
        """Test that only a newline ends a row."""
        text = f'Zaksięgowano,Tytuł,Kwota\n10.01.2024,"Opis{separator}abc","100,00"\n'
        entries = BankStatementParser().parse(text)

        assert len(entries) == 1
        assert entries[0].description == f"Opis{separator}abc"
        assert entries[0].amount == Decimal("100.00")

    def test_windows_line_endings(self) -> None:
        """Test CRLF line endings."""
        entries = BankStatementParser().parse(BANK_CSV.replace("\n", "\r\n"))
        assert len(entries) == 2
        assert entries[0].amount == Decimal("100.00")


class TestBookkeepingParser:
    """Tests for bookkeeping export parsing."""

    def test_parses_rows(self) -> None:
        """Test dates, composed descriptions and income minus expense."""
        entries = BookkeepingParser().parse(BOOKKEEPING_TSV)

        assert len(entries) == 3
        assert [e.date for e in entries] == [
            date(2024, 1, 5),
            date(2024, 1, 6),
            date(2024, 1, 7),
        ]
        assert [e.description for e in entries] == ["Składki KP/1", "Zakup FV 12", "Mix"]
        assert [e.amount for e in entries] == [
            Decimal("100.00"),
            Decimal("-49.99"),
            Decimal("7.5"),
        ]
        assert all(e.source == LedgerSource.BOOKKEEPING for e in entries)
        assert all(e.id.startswith("bookkeeping-") for e in entries)

    def test_missing_header_raises(self) -> None:
        """Test FormatError lists all five expected headers."""
        text = "Data\tOpis\tWpływy razem\tWydatki razem\n2024-01-01\tx\t1\t0\n"

        with pytest.raises(FormatError) as exc_info:
            BookkeepingParser().parse(text)

        assert exc_info.value.expected_headers == [
            "Data",
            "Opis",
            "Numer dokumentu",
            "Wpływy razem",
            "Wydatki razem",
        ]

    def test_comma_delimited_file_is_rejected(self) -> None:
        """Test that a bank-style file cannot be read as bookkeeping."""
        with pytest.raises(FormatError):
            BookkeepingParser().parse(BANK_CSV)

    def test_thousands_whitespace_is_stripped(self) -> None:
        """Test that interior whitespace in numbers is removed."""
        text = (
            "Data\tOpis\tNumer dokumentu\tWpływy razem\tWydatki razem\n"
            "2024-03-01\tDotacja\tD/1\t1 500,00\t0"
        )
        entries = BookkeepingParser().parse(text)
        assert entries[0].amount == Decimal("1500.00")

    def test_non_numeric_column_drops_row(self) -> None:
        """Test that a bad income or expense value drops the row."""
        text = (
            "Data\tOpis\tNumer dokumentu\tWpływy razem\tWydatki razem\n"
            "2024-03-01\tBad\tD/1\tn/a\t0\n"
            "2024-03-02\tGood\tD/2\t0\t3"
        )
        entries = BookkeepingParser().parse(text)
        assert [e.description for e in entries] == ["Good D/2"]
        assert entries[0].amount == Decimal("-3")


class TestParseEntryPoints:
    """Tests for module-level parse helpers."""

    def test_parse_dispatches_on_source(self) -> None:
        """Test parse() picks the parser for the source."""
        assert len(parse(BANK_CSV, LedgerSource.BANK)) == 2
        assert len(parse(BOOKKEEPING_TSV, LedgerSource.BOOKKEEPING)) == 3

    def test_get_parser_types(self) -> None:
        """Test get_parser returns the right parser class."""
        assert isinstance(get_parser(LedgerSource.BANK), BankStatementParser)
        assert isinstance(get_parser(LedgerSource.BOOKKEEPING), BookkeepingParser)

    def test_parse_file(self, tmp_path: Path) -> None:
        """Test parsing from a file on disk."""
        path = tmp_path / "bank.csv"
        path.write_text(BANK_CSV, encoding="utf-8")

        entries = parse_file(path, LedgerSource.BANK)
        assert len(entries) == 2

    def test_parse_file_missing(self, tmp_path: Path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            parse_file(tmp_path / "nope.csv", LedgerSource.BANK)

    def test_parse_file_too_large(self, tmp_path: Path) -> None:
        """Test that files over the size limit are rejected."""
        path = tmp_path / "bank.csv"
        path.write_text(BANK_CSV, encoding="utf-8")

        with pytest.raises(ParseError, match="File too large"):
            parse_file(path, LedgerSource.BANK, max_file_size=10)

    def test_format_error_carries_file_path(self, tmp_path: Path) -> None:
        """Test that FormatError from a file records its path."""
        path = tmp_path / "wrong.csv"
        path.write_text("a,b,c\n1,2,3\n", encoding="utf-8")

        with pytest.raises(FormatError) as exc_info:
            parse_file(path, LedgerSource.BANK)
        assert exc_info.value.file_path == path
