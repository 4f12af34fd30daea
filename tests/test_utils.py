"""Tests for amount, date, sanitization and logging helpers."""

import logging
import math
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from ledger_reconciler.utils.date_utils import (
    DOTTED_DATE,
    ISO_DATE,
    days_between,
    parse_date,
    safe_parse_date,
)
from ledger_reconciler.utils.decimal_utils import (
    amounts_equal,
    format_currency,
    parse_amount,
    parse_optional_amount,
    sum_amounts,
)
from ledger_reconciler.utils.logging_config import LogContext, get_logger, setup_logging
from ledger_reconciler.utils.sanitize import sanitize_cell, sanitize_for_csv


class TestParseAmount:
    """Tests for ledger amount parsing."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("100,00", "100.00"),
            ("-1234,56", "-1234.56"),
            ("1 234,56", "1234.56"),
            ("1\u00a0234,56", "1234.56"),
            ("12.5", "12.5"),
            ("  7 ", "7"),
        ],
    )
    def test_valid(self, raw: str, expected: str) -> None:
        """Test decimal comma, point and whitespace thousands separators."""
        assert parse_amount(raw) == Decimal(expected)

    @pytest.mark.parametrize("raw", ["", "   ", "abc", "1,2,3", "NaN", "-Infinity"])
    def test_invalid(self, raw: str) -> None:
        """Test that blank, non-numeric and non-finite values raise."""
        with pytest.raises(ValueError):
            parse_amount(raw)

    def test_optional_blank_is_zero(self) -> None:
        """Test that blank optional columns count as zero."""
        assert parse_optional_amount("") == Decimal("0")
        assert parse_optional_amount(None) == Decimal("0")
        assert parse_optional_amount("2,50") == Decimal("2.50")


class TestAmountHelpers:
    """Tests for comparison and formatting helpers."""

    def test_amounts_equal(self) -> None:
        """Test comparison at cent precision with half-up rounding."""
        assert amounts_equal(Decimal("10.004"), Decimal("10.00"))
        assert not amounts_equal(Decimal("10.005"), Decimal("10.00"))

    def test_format_currency(self) -> None:
        """Test display formatting without negative zero."""
        assert format_currency(Decimal("-1234.5")) == "-1234.50"
        assert format_currency(Decimal("-0.001"), currency_symbol="zł") == "0.00 zł"

    def test_sum_amounts(self) -> None:
        """Test summing, including an empty input."""
        assert sum_amounts([Decimal("0.10"), Decimal("0.20")]) == Decimal("0.30")
        assert sum_amounts([]) == Decimal("0")


class TestDates:
    """Tests for date parsing."""

    def test_iso_with_single_digits(self) -> None:
        """Test ISO dates with one-digit month and day."""
        assert parse_date("2024-1-5") == date(2024, 1, 5)

    def test_dotted(self) -> None:
        """Test day-first dotted dates."""
        assert parse_date("05.01.2024", (DOTTED_DATE,)) == date(2024, 1, 5)

    def test_notation_restriction(self) -> None:
        """Test that notations outside the given tuple are not tried."""
        with pytest.raises(ValueError):
            parse_date("2024-01-05", (DOTTED_DATE,))
        with pytest.raises(ValueError):
            parse_date("05.01.2024", (ISO_DATE,))

    def test_impossible_date(self) -> None:
        """Test that calendar-invalid dates raise."""
        with pytest.raises(ValueError):
            parse_date("2024-02-30")

    def test_safe_parse_date(self) -> None:
        """Test the default returned on failure."""
        assert safe_parse_date("junk") is None
        assert safe_parse_date(None, default=date(2000, 1, 1)) == date(2000, 1, 1)

    def test_days_between(self) -> None:
        """Test absolute distances and missing dates."""
        assert days_between(date(2024, 1, 10), date(2024, 1, 7)) == 3.0
        assert days_between(None, date(2024, 1, 7)) == math.inf


class TestSanitize:
    """Tests for spreadsheet cell sanitization."""

    @pytest.mark.parametrize("value", ["=1+1", "+48 123", "-x", "@cmd", "|pipe"])
    def test_formula_text_is_prefixed(self, value: str) -> None:
        """Test that formula-triggering text gets a leading quote."""
        assert sanitize_for_csv(value) == "'" + value

    def test_plain_text_and_none(self) -> None:
        """Test that safe values pass through."""
        assert sanitize_for_csv("Składki") == "Składki"
        assert sanitize_for_csv(None) is None

    def test_numbers_untouched(self) -> None:
        """Test that negative numbers are not treated as formulas."""
        assert sanitize_cell(Decimal("-5.00")) == Decimal("-5.00")
        assert sanitize_cell(-3) == -3
        assert sanitize_cell("-5") == "'-5"


class TestLogging:
    """Tests for logging helpers."""

    def test_get_logger_namespace(self) -> None:
        """Test that loggers live under the package namespace."""
        assert get_logger("tests").name == "ledger_reconciler.tests"
        assert get_logger("ledger_reconciler.session").name == "ledger_reconciler.session"

    def test_setup_logging_file(self, tmp_path: Path) -> None:
        """Test that a file handler is installed when a path is given."""
        log_file = tmp_path / "run.log"
        logger = setup_logging("debug", str(log_file), console_output=False)
        try:
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 1
            logger.debug("hello")
            logger.handlers[0].flush()
            assert "hello" in log_file.read_text(encoding="utf-8")
        finally:
            for handler in logger.handlers:
                handler.close()
            logger.handlers.clear()

    def test_log_context_masks_sensitive_fields(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that sensitive context values are masked and errors logged."""
        logger = get_logger("tests.context")

        with caplog.at_level(logging.DEBUG, logger="ledger_reconciler"):
            with pytest.raises(RuntimeError):
                with LogContext(logger, "export", iban="PL123", account_number="9876", file="a.csv"):
                    raise RuntimeError("boom")

        assert "iban=***" in caplog.text
        assert "PL123" not in caplog.text
        assert "account_number=***" in caplog.text
        assert "file=a.csv" in caplog.text
        assert "Error in export: RuntimeError: boom" in caplog.text
